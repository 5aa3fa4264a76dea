"""
Plain descriptions of runtime calls.

Batch builders work with ``Call`` objects instead of composed extrinsics so that
ordering and origin wrappers can be inspected without a node. ``ChainClient``
turns them into SCALE-encoded calls against live metadata.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional


@dataclass(frozen=True)
class Call:
    module: str
    function: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return f"{self.module}.{self.function}"

    def inner(self) -> Optional['Call']:
        """The wrapped call for sudo / as_derivative / council proposals."""
        for key in ('call', 'proposal'):
            value = self.params.get(key)
            if isinstance(value, Call):
                return value
        return None

    def unwrap(self) -> 'Call':
        """Strip origin wrappers down to the call that actually does the work."""
        call = self
        while call.name in WRAPPER_CALLS and call.inner() is not None:
            call = call.inner()
        return call

    def __str__(self) -> str:
        inner = self.inner()
        if inner is not None:
            return f"{self.name}({inner})"
        return self.name


def sudo(call: Call) -> Call:
    return Call('Sudo', 'sudo', {'call': call})


def batch_all(calls: Iterable[Call]) -> Call:
    return Call('Utility', 'batch_all', {'calls': list(calls)})


def as_derivative(index: int, call: Call) -> Call:
    return Call('Utility', 'as_derivative', {'index': index, 'call': call})


def council_propose(threshold: int, call: Call, length_bound: Optional[int] = None) -> Call:
    # length_bound is filled from the encoded proposal when the call is composed
    return Call('GeneralCouncil', 'propose', {
        'threshold': threshold,
        'proposal': call,
        'length_bound': length_bound,
    })


def transfer(dest: str, value: int) -> Call:
    return Call('Balances', 'transfer', {'dest': dest, 'value': value})


WRAPPER_CALLS = {'Sudo.sudo', 'Utility.as_derivative', 'GeneralCouncil.propose'}
