"""
Substrate chain client used by the launch procedure and helper commands.

Thin layer over py-substrate-interface: turns ``Call`` descriptions into
composed calls, signs and submits extrinsics one at a time (no pipelining),
and maps client failures onto the ``blockchain.exceptions`` taxonomy.
"""
import logging
import math
import threading
from typing import Any, Dict, List, Optional, Tuple

from substrateinterface import Keypair, SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException
from websocket import WebSocketException

from blockchain.calls import Call
from blockchain.exceptions import (
    ChainConnectionError,
    ChainTimeout,
    ExtrinsicFailed,
    OperationCancelled,
)

logger = logging.getLogger(__name__)


class ChainClient:
    """
    Connection to one chain endpoint.

    Usage:
        with ChainClient('ws://127.0.0.1:9944') as client:
            client.wait_for_blocks(timeout=600)
            client.submit(batch_all(calls), keypair)
    """

    def __init__(self, url: str, ss58_format: int = 42, substrate: Optional[SubstrateInterface] = None):
        self.url = url
        self.ss58_format = ss58_format
        self._substrate = substrate

    def connect(self) -> 'ChainClient':
        if self._substrate is None:
            logger.info(f"Connecting to {self.url}")
            try:
                self._substrate = SubstrateInterface(url=self.url, ss58_format=self.ss58_format)
            except (ConnectionError, OSError, WebSocketException) as e:
                raise ChainConnectionError(f"Cannot reach chain endpoint {self.url}: {e}") from e
        return self

    def close(self) -> None:
        if self._substrate is not None:
            self._substrate.close()
            self._substrate = None

    def __enter__(self) -> 'ChainClient':
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def substrate(self) -> SubstrateInterface:
        if self._substrate is None:
            self.connect()
        return self._substrate

    @property
    def chain(self) -> str:
        return str(self.substrate.chain)

    @property
    def token_decimals(self) -> int:
        return int(self.substrate.token_decimals or 0)

    # ===== Call composition =====

    def _compose_value(self, value: Any) -> Any:
        if isinstance(value, Call):
            return self.compose(value)
        if isinstance(value, list):
            return [self._compose_value(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self._compose_value(v) for v in value)
        return value

    def compose(self, call: Call):
        """Compose a (possibly nested) ``Call`` against the chain metadata."""
        params = {key: self._compose_value(value) for key, value in call.params.items()}
        if call.name == 'GeneralCouncil.propose' and params.get('length_bound') is None:
            params['length_bound'] = len(params['proposal'].data.data)
        return self.substrate.compose_call(
            call_module=call.module,
            call_function=call.function,
            call_params=params,
        )

    def encode(self, call: Call) -> str:
        """Hex-encoded call data, printed instead of submitting on ``--dry-run``."""
        return self.compose(call).data.to_hex()

    # ===== Submission =====

    def next_nonce(self, address: str) -> int:
        return self.substrate.get_account_nonce(address)

    def submit(self, call: Call, keypair: Keypair, wait_for_inclusion: bool = True):
        """
        Sign ``call`` with ``keypair`` and submit it.

        Raises:
            ExtrinsicFailed: pool rejection or failed dispatch
        """
        composed = self.compose(call)
        nonce = self.next_nonce(keypair.ss58_address)
        extrinsic = self.substrate.create_signed_extrinsic(call=composed, keypair=keypair, nonce=nonce)
        logger.info(f"Submitting {call} from {keypair.ss58_address} (nonce {nonce})")

        try:
            receipt = self.substrate.submit_extrinsic(extrinsic, wait_for_inclusion=wait_for_inclusion)
        except SubstrateRequestException as e:
            raise ExtrinsicFailed(f"{call.name} rejected: {e}") from e

        if wait_for_inclusion and not receipt.is_success:
            raise ExtrinsicFailed(
                f"{call.name} failed: {describe_dispatch_error(receipt.error_message)}",
                extrinsic_hash=receipt.extrinsic_hash,
            )

        logger.info(f"Extrinsic {receipt.extrinsic_hash} included in block {receipt.block_hash}")
        return receipt

    # ===== Chain state =====

    def chain_height(self) -> int:
        header = self.substrate.get_block_header()
        return int(header['header']['number'])

    def wait_for_blocks(self, timeout: Optional[float] = None, cancel: Optional[threading.Event] = None,
                        check_interval: float = 1.0) -> int:
        """
        Block until the chain has produced its first block.

        Subscribes to new heads on a worker thread; the calling thread waits
        for the first non-zero header, for ``timeout`` or for ``cancel``.

        Returns:
            The observed block height
        """
        height = self.chain_height()
        if height > 0:
            return height

        produced = threading.Event()
        outcome: Dict[str, Any] = {}

        def on_header(obj, update_nr, subscription_id):
            number = int(obj['header']['number'])
            if number > 0:
                outcome['height'] = number
                produced.set()
                return number
            if cancel is not None and cancel.is_set():
                return number
            return None

        def subscribe():
            try:
                self.substrate.subscribe_block_headers(on_header)
            except Exception as e:
                # surfaced on the waiting thread; a closed socket after timeout lands here too
                outcome['error'] = e
                produced.set()

        logger.info(f"Waiting for {self.url} to produce blocks")
        worker = threading.Thread(target=subscribe, name='block-wait', daemon=True)
        worker.start()

        waited = 0.0
        while not produced.wait(check_interval):
            waited += check_interval
            if cancel is not None and cancel.is_set():
                self.close()
                raise OperationCancelled(f"Cancelled while waiting for blocks on {self.url}")
            if timeout is not None and waited >= timeout:
                self.close()
                raise ChainTimeout(f"No blocks produced on {self.url} within {timeout}s")

        if 'height' in outcome:
            logger.info(f"{self.url} is at block #{outcome['height']}")
            return outcome['height']
        raise ChainConnectionError(f"Block subscription on {self.url} failed: {outcome['error']}")

    def block_hash(self, block_number: Optional[int] = None) -> str:
        return self.substrate.get_block_hash(block_number)

    def query(self, module: str, storage_function: str, params: Optional[List[Any]] = None,
              block_hash: Optional[str] = None) -> Any:
        result = self.substrate.query(module, storage_function, params or [], block_hash=block_hash)
        return result.value

    def query_map(self, module: str, storage_function: str, params: Optional[List[Any]] = None,
                  block_hash: Optional[str] = None) -> List[Tuple[Any, Any]]:
        """Every (key, value) pair of a storage map, or of one prefix of a double map."""
        result = self.substrate.query_map(module, storage_function, params or [], block_hash=block_hash)
        return [(key.value, value.value) for key, value in result]

    def constant(self, module: str, name: str) -> Any:
        return self.substrate.get_constant(module, name).value

    def read_proof(self, keys: List[str], block_hash: str) -> Dict[str, Any]:
        response = self.substrate.rpc_request('state_getReadProof', [keys, block_hash])
        return response['result']

    def council_threshold(self) -> int:
        members = self.query('GeneralCouncilMembership', 'Members') or []
        return math.ceil(len(members) / 2)


def describe_dispatch_error(error: Any) -> str:
    """Render ``module.Name`` for decodable module errors, the raw error otherwise."""
    if isinstance(error, dict):
        name = error.get('name')
        module = error.get('module') or error.get('type')
        if name:
            return f"{module}.{name}" if module else str(name)
    return str(error)
