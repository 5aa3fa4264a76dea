"""
Runtime upgrade through democracy.

Downloads the released runtime, checks its blake2-256 hash, notes the
``authorize_upgrade`` preimage and proposes it as an external majority
referendum through the general council.
"""
import hashlib
import logging

import requests

from blockchain.calls import Call, batch_all, council_propose
from helper.commands.base import BaseCommand, CommandError

logger = logging.getLogger(__name__)

RELEASE_URL = 'https://github.com/parallel-finance/parallel/releases/download/{version}/{name}_runtime.compact.compressed.wasm'
DOWNLOAD_TIMEOUT = 60


def blake2_256(data: bytes) -> str:
    return '0x' + hashlib.blake2b(data, digest_size=32).hexdigest()


def download_runtime(name: str, version: str) -> bytes:
    url = RELEASE_URL.format(version=version, name=name)
    logger.info(f"Downloading {url}")
    try:
        response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise CommandError(f"Cannot download runtime {name} {version}: {e}") from e
    return response.content


class Command(BaseCommand):
    help = 'Runtime upgrade via democracy.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('--runtime-name', default='heiko', help='runtime name')
        parser.add_argument('--runtime-version', default='v1.8.5', help='runtime version')
        parser.add_argument('--blake256-hash',
                            default='0xe1caf000a36540de68a34ed2ce3d70eccd56b05fefda895dd308ee73c53fed40',
                            help="runtime code's blake2-256 hash")

    def handle(self, *args, **options):
        code = download_runtime(options['runtime_name'], options['runtime_version'])
        code_hash = blake2_256(code)
        if code_hash != options['blake256_hash'].lower():
            raise CommandError(f"Runtime code hash {code_hash} doesn't match {options['blake256_hash']}")

        with self.para_client() as para:
            encoded = para.encode(Call('ParachainSystem', 'authorize_upgrade', {'code_hash': code_hash}))
            encoded_hash = blake2_256(bytes.fromhex(encoded[2:]))
            logger.info(f"authorize_upgrade preimage {encoded_hash}")

            external = Call('Democracy', 'external_propose_majority', {
                'proposal': {'Legacy': {'hash': encoded_hash}},
            })
            call = batch_all([
                Call('Preimage', 'note_preimage', {'bytes': encoded}),
                council_propose(para.council_threshold(), external),
            ])
            self.submit_or_print(para, call, options['dry_run'])
