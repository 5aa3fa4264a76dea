"""
Storage key helpers for building read proofs against relay-chain state.

Keys are built offline with substrate-interface's hashers so that proofs can
be requested for any block without loading that block's metadata.
"""
from typing import Union

from substrateinterface.utils import hasher

from blockchain.accounts import decode_account


def twox_128(data: bytes) -> bytes:
    return bytes.fromhex(hasher.xxh128(data))


def blake2_128_concat(data: bytes) -> bytes:
    return bytes.fromhex(hasher.blake2_128_concat(data))


def storage_prefix(pallet: str, item: str) -> bytes:
    return twox_128(pallet.encode('utf-8')) + twox_128(item.encode('utf-8'))


def storage_key(pallet: str, item: str, *keys: bytes) -> str:
    """Hex storage key for a plain value or a map hashed with Blake2_128Concat."""
    raw = storage_prefix(pallet, item) + b''.join(blake2_128_concat(k) for k in keys)
    return '0x' + raw.hex()


def staking_ledger_key(controller: Union[str, bytes]) -> str:
    return storage_key('Staking', 'Ledger', decode_account(controller))


def current_era_key() -> str:
    return storage_key('Staking', 'CurrentEra')
