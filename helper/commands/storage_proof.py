import json

from blockchain.storage import staking_ledger_key
from helper.commands.base import BaseCommand
from helper.proofs import relay_parent

DEFAULT_BLOCK_AT = '0x69a4182c5a7aef2ae76c58574fc51e71e297089f063af7e0f6efd3a150f67b47'
DEFAULT_ACCOUNT = 'CmNv7yFV13CMM6r9dJYgdi4UTJK7tzFEF17gmK9c3mTc2PG'


class Command(BaseCommand):
    help = "Print the relay-chain read proof of an account's staking ledger."

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('--block-at', '-a', default=DEFAULT_BLOCK_AT, help='the parachain block hash')
        parser.add_argument('--account', default=DEFAULT_ACCOUNT, help='staking controller account')

    def handle(self, *args, **options):
        key = staking_ledger_key(options['account'])
        with self.para_client() as para, self.relay_client() as relay:
            validation_data, relay_block_hash = relay_parent(
                para, relay, module='ParachainSystem', para_block_hash=options['block_at']
            )
            proof = relay.read_proof([key], relay_block_hash)

        self.write(json.dumps(validation_data, indent=4, default=str))
        self.write(key)
        self.write(json.dumps(proof, indent=4))
