from blockchain.calls import Call
from blockchain.storage import current_era_key
from helper.commands.base import BaseCommand, CommandError
from helper.proofs import read_proof, relay_parent


class Command(BaseCommand):
    help = 'Fetch the relay-chain current era and update it on the parachain.'

    def handle(self, *args, **options):
        with self.para_client() as para, self.relay_client() as relay:
            _, relay_block_hash = relay_parent(para, relay)
            proof = read_proof(relay, [current_era_key()], relay_block_hash)

            era = relay.query('Staking', 'CurrentEra', block_hash=relay_block_hash)
            if era is None:
                raise CommandError(f"Staking.CurrentEra is not set at {relay_block_hash}")

            call = Call('LiquidStaking', 'set_current_era', {'era': era, 'proof': proof})
            self.submit_or_print(para, call, options['dry_run'])
