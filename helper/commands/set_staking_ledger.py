import logging

from blockchain.accounts import derive_sub_account, sovereign_relay_of
from blockchain.calls import Call
from blockchain.storage import staking_ledger_key
from helper.commands.base import BaseCommand, CommandError
from helper.proofs import read_proof, relay_parent

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Fetch the relay-chain staking ledger and update it on the parachain.'

    def handle(self, *args, **options):
        with self.para_client() as para, self.relay_client() as relay:
            para_id = para.query('ParachainInfo', 'ParachainId')
            derivative_index = para.constant('LiquidStaking', 'DerivativeIndex')
            controller = derive_sub_account(
                sovereign_relay_of(para_id, self.settings.ss58_format),
                derivative_index,
                self.settings.ss58_format,
            )
            logger.info(f"Staking controller of para {para_id} (index {derivative_index}): {controller}")

            _, relay_block_hash = relay_parent(para, relay)
            proof = read_proof(relay, [staking_ledger_key(controller)], relay_block_hash)

            ledger = relay.query('Staking', 'Ledger', [controller], block_hash=relay_block_hash)
            if not ledger:
                raise CommandError(f"No staking ledger for {controller} at {relay_block_hash}")

            call = Call('LiquidStaking', 'set_staking_ledger', {
                'derivative_index': derivative_index,
                'staking_ledger': ledger,
                'proof': proof,
            })
            self.submit_or_print(para, call, options['dry_run'])
