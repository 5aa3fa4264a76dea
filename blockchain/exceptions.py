"""
Error taxonomy for chain-facing operations.

Every failure is terminal for the current run: callers let these propagate
up to the CLI, which logs them and exits with status 1.
"""
from typing import Optional


class ChainError(Exception):
    pass


class ChainConnectionError(ChainError):
    """The chain endpoint could not be reached."""


class ExtrinsicFailed(ChainError):
    """A submitted extrinsic was rejected by the pool or failed on dispatch."""

    def __init__(self, message: str, extrinsic_hash: Optional[str] = None):
        super().__init__(message)
        self.extrinsic_hash = extrinsic_hash


class ChainTimeout(ChainError):
    pass


class OperationCancelled(ChainError):
    pass
