"""
Launch procedure for a freshly started relay chain and parachain.

Relay first: register one parathread per crowdloan, wait for onboarding,
then start the auction and the crowdloans in one batch. Parachain second:
submit the genesis batch built from the network config. Nothing is retried;
the first failure ends the run.
"""
import logging
import threading
from typing import Callable, Dict, Optional

from substrateinterface import Keypair

from blockchain.accounts import keypair_from_uri
from blockchain.calls import Call, batch_all
from blockchain.exceptions import OperationCancelled
from blockchain.substrate_client import ChainClient
from config.settings import Settings
from launch.genesis import GenesisExport, GenesisExporter
from launch.parachain import build_parachain_batch
from launch.relay import build_relay_batch, build_relay_registrations
from launch.schema import NetworkConfig

logger = logging.getLogger(__name__)


class Launcher:
    """
    Usage:
        launcher = Launcher(settings, load_network_config('heiko-dev'))
        launcher.run()

    ``cancel`` interrupts the block waits and the onboarding wait; the run
    then ends with ``OperationCancelled``.
    """

    def __init__(
        self,
        settings: Settings,
        config: NetworkConfig,
        exporter: Optional[GenesisExporter] = None,
        client_factory: Callable[..., ChainClient] = ChainClient,
        cancel: Optional[threading.Event] = None,
        dry_run: bool = False,
        emit: Callable[[str], None] = print,
    ):
        self.settings = settings
        self.config = config
        self.exporter = exporter or GenesisExporter()
        self.client_factory = client_factory
        self.cancel = cancel or threading.Event()
        self.dry_run = dry_run
        self.emit = emit

    def run(self) -> None:
        self.run_relay()
        self.run_parachain()
        logger.info("Launch completed")

    # ===== Relay chain =====

    def run_relay(self) -> None:
        signer = keypair_from_uri(self.settings.relay_sudo_key, self.settings.ss58_format)
        exports = self.export_genesis()

        with self.client_factory(self.settings.relay_ws, ss58_format=self.settings.ss58_format) as client:
            self._wait_for_blocks(client, 'relaychain')

            registrations = build_relay_registrations(
                self.config, signer.ss58_address, exports, self.settings.ss58_format
            )
            for crowdloan, call in zip(self.config.crowdloans, registrations):
                logger.info(f"Registering parathread: {crowdloan.para_id}")
                self._submit(client, call, signer)

            if not self.dry_run:
                self.wait_for_onboarding()

            logger.info("Start new auction")
            calls = build_relay_batch(self.config, signer.ss58_address, self.settings.ss58_format)
            self._submit(client, batch_all(calls), signer)

    def export_genesis(self) -> Dict[int, GenesisExport]:
        return {
            crowdloan.para_id: self.exporter.export(crowdloan.image, crowdloan.chain)
            for crowdloan in self.config.crowdloans
        }

    def wait_for_onboarding(self) -> None:
        seconds = self.config.onboarding_seconds
        logger.info(f"Wait {seconds:g}s for parathreads to be onboarded")
        if self.cancel.wait(seconds):
            raise OperationCancelled("Cancelled while waiting for parathread onboarding")

    # ===== Parachain =====

    def run_parachain(self) -> None:
        signer = keypair_from_uri(self.settings.para_sudo_key, self.settings.ss58_format)

        with self.client_factory(self.settings.para_ws, ss58_format=self.settings.ss58_format) as client:
            self._wait_for_blocks(client, 'parachain')
            calls = build_parachain_batch(self.config, signer.ss58_address, self.settings.ss58_format)
            logger.info("Submit parachain batches")
            self._submit(client, batch_all(calls), signer)

    # ===== Helpers =====

    def _wait_for_blocks(self, client: ChainClient, label: str) -> None:
        logger.info(f"Wait for {label} to produce blocks")
        client.wait_for_blocks(timeout=self.settings.block_wait_timeout, cancel=self.cancel)

    def _submit(self, client: ChainClient, call: Call, signer: Keypair) -> None:
        if self.dry_run:
            self.emit(client.encode(call))
            return
        client.submit(call, signer)

