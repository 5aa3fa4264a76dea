"""
Base class for ``parallel-helper`` subcommands.

Mirrors the management-command shape: ``help``, ``add_arguments(parser)``
and ``handle(*args, **options)``. Commands raise ``CommandError`` for
user-facing failures; chain and config errors propagate unchanged and are
turned into exit status 1 by ``helper.main``.
"""
import sys
from typing import Callable, Optional, TextIO

from substrateinterface import Keypair

from blockchain.accounts import keypair_from_uri
from blockchain.calls import Call
from blockchain.substrate_client import ChainClient
from config.settings import Settings


class CommandError(Exception):
    pass


class BaseCommand:
    help = ''

    def __init__(self, settings: Settings, stdout: Optional[TextIO] = None,
                 client_factory: Callable[..., ChainClient] = ChainClient):
        self.settings = settings
        self.stdout = stdout or sys.stdout
        self.client_factory = client_factory

    @classmethod
    def add_arguments(cls, parser):
        pass

    def handle(self, *args, **options):
        raise NotImplementedError('subclasses of BaseCommand must provide a handle() method')

    def write(self, message: str) -> None:
        self.stdout.write(message + '\n')

    # ===== Chain access =====

    def para_client(self) -> ChainClient:
        return self.client_factory(self.settings.para_ws, ss58_format=self.settings.ss58_format)

    def relay_client(self) -> ChainClient:
        return self.client_factory(self.settings.relay_ws, ss58_format=self.settings.ss58_format)

    def para_signer(self) -> Keypair:
        return keypair_from_uri(self.settings.para_sudo_key, self.settings.ss58_format)

    def relay_signer(self) -> Keypair:
        return keypair_from_uri(self.settings.relay_sudo_key, self.settings.ss58_format)

    def submit_or_print(self, client: ChainClient, call: Call, dry_run: bool) -> None:
        """Print the hex-encoded call on dry runs, otherwise sign with the parachain key and submit."""
        if dry_run:
            self.write(f"hex-encoded call: {client.encode(call)}")
            return
        receipt = client.submit(call, self.para_signer())
        self.write(f"{call.name} included in block {receipt.block_hash}")
