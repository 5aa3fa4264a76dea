"""
Deterministic account derivations used by the Parallel runtimes.

All helpers return SS58 addresses. The byte layouts mirror the runtime:

- derivative (sub) accounts: blake2b-256("modlpy/utilisuba" ++ who ++ u16 index)
- pallet accounts:           "modl" ++ pallet id, zero-padded to 32 bytes
- sovereign accounts:        "para"/"sibl" ++ u32le(para id), zero-padded to 32 bytes
"""

import hashlib
import logging
from typing import Union

from scalecodec.utils.ss58 import ss58_decode, ss58_encode
from substrateinterface import Keypair

logger = logging.getLogger(__name__)

DEFAULT_SS58_FORMAT = 42

SUB_ACCOUNT_SEED = b'modlpy/utilisuba'
PALLET_PREFIX = b'modl'
RELAY_SOVEREIGN_TAG = b'para'
SIBLING_SOVEREIGN_TAG = b'sibl'

ACCOUNT_ID_LENGTH = 32
MAX_DERIVATIVE_INDEX = 0xFFFF

GIFT_PALLET_ID = 'par/gift'


def _pad_account(raw: bytes) -> bytes:
    return (raw + bytes(ACCOUNT_ID_LENGTH))[:ACCOUNT_ID_LENGTH]


def decode_account(address: Union[str, bytes]) -> bytes:
    """Return the 32-byte account id behind an SS58 address (or pass raw bytes through)."""
    if isinstance(address, bytes):
        if len(address) != ACCOUNT_ID_LENGTH:
            raise ValueError(f"Account id must be {ACCOUNT_ID_LENGTH} bytes, got {len(address)}")
        return address
    if not address:
        raise ValueError("Empty address")
    try:
        public_key = bytes.fromhex(ss58_decode(address))
    except (ValueError, IndexError) as e:
        raise ValueError(f"Invalid SS58 address {address!r}: {e}") from e
    if len(public_key) != ACCOUNT_ID_LENGTH:
        raise ValueError(f"Address {address!r} does not encode a 32-byte account id")
    return public_key


def encode_account(account_id: bytes, ss58_format: int = DEFAULT_SS58_FORMAT) -> str:
    return ss58_encode(account_id, ss58_format=ss58_format)


def is_valid_address(address: str) -> bool:
    try:
        decode_account(address)
    except (ValueError, TypeError):
        return False
    return True


def derivative_index_bytes(index: int, byte_order: str = 'little') -> bytes:
    """
    Encode a derivative index as the runtime's u16.

    The chain uses little-endian. One of the early launch scripts encoded
    big-endian, so ``byte_order='big'`` stays available to reproduce
    addresses derived by it.
    """
    if not 0 <= index <= MAX_DERIVATIVE_INDEX:
        raise ValueError(f"Derivative index {index} out of range 0..{MAX_DERIVATIVE_INDEX}")
    if byte_order not in ('little', 'big'):
        raise ValueError(f"Unsupported byte order: {byte_order}")
    return index.to_bytes(2, byte_order)


def derive_sub_account(
    address: Union[str, bytes],
    index: int,
    ss58_format: int = DEFAULT_SS58_FORMAT,
    byte_order: str = 'little',
) -> str:
    """
    Derive the sub-account controlled by ``address`` through ``utility.asDerivative(index, ...)``.

    Args:
        address: SS58 address (or raw 32-byte account id) of the controlling account
        index: derivative index (0..65535)
        ss58_format: network prefix for the returned address
        byte_order: encoding of the index; 'little' matches the runtime

    Returns:
        SS58-encoded derivative account
    """
    who = decode_account(address)
    payload = SUB_ACCOUNT_SEED + who + derivative_index_bytes(index, byte_order)
    entropy = hashlib.blake2b(payload, digest_size=32).digest()
    return encode_account(entropy, ss58_format)


def pallet_account(pallet_id: str, ss58_format: int = DEFAULT_SS58_FORMAT) -> str:
    """Account of a pallet identified by its ``PalletId`` (e.g. ``par/gift``)."""
    return encode_account(_pad_account(PALLET_PREFIX + pallet_id.encode('utf-8')), ss58_format)


def _sovereign(tag: bytes, para_id: int, ss58_format: int) -> str:
    if not 0 <= para_id <= 0xFFFFFFFF:
        raise ValueError(f"Parachain id {para_id} does not fit in u32")
    return encode_account(_pad_account(tag + para_id.to_bytes(4, 'little')), ss58_format)


def sovereign_relay_of(para_id: int, ss58_format: int = DEFAULT_SS58_FORMAT) -> str:
    """Sovereign account of a parachain on its relay chain."""
    return _sovereign(RELAY_SOVEREIGN_TAG, para_id, ss58_format)


def sovereign_para_of(para_id: int, ss58_format: int = DEFAULT_SS58_FORMAT) -> str:
    """Sovereign account of a parachain on a sibling parachain."""
    return _sovereign(SIBLING_SOVEREIGN_TAG, para_id, ss58_format)


def keypair_from_uri(uri: str, ss58_format: int = DEFAULT_SS58_FORMAT) -> Keypair:
    """Build an sr25519 signer from a secret URI (``//Dave``, a mnemonic, ...)."""
    if not uri:
        raise ValueError("Signer secret URI is empty")
    keypair = Keypair.create_from_uri(uri, ss58_format=ss58_format)
    logger.debug(f"Loaded signer {keypair.ss58_address}")
    return keypair
