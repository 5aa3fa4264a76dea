"""
Relay-chain state proofs anchored at the parachain's current relay parent.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from blockchain.substrate_client import ChainClient
from helper.commands.base import CommandError

logger = logging.getLogger(__name__)


def relay_parent(para: ChainClient, relay: ChainClient, module: str = 'LiquidStaking',
                 para_block_hash: Optional[str] = None) -> Tuple[Dict[str, Any], str]:
    """
    Validation data stored by ``module`` at the given parachain block and the
    hash of the relay block it points at.
    """
    if para_block_hash is None:
        para_block_hash = para.block_hash()
    logger.info(f"parachain block hash: {para_block_hash}")

    validation_data = para.query(module, 'ValidationData', block_hash=para_block_hash)
    if not validation_data:
        raise CommandError(f"{module}.ValidationData is empty at {para_block_hash}")
    logger.info(f"validation data: {validation_data}")

    relay_block_hash = relay.block_hash(validation_data['relay_parent_number'])
    logger.info(f"relaychain block hash: {relay_block_hash}")
    return validation_data, relay_block_hash


def read_proof(relay: ChainClient, keys: List[str], relay_block_hash: str) -> List[str]:
    proof = relay.read_proof(keys, relay_block_hash)
    return proof['proof']
