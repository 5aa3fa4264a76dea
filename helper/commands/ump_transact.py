from blockchain.accounts import sovereign_relay_of
from blockchain.calls import Call, council_propose
from blockchain.xcm import relay_destination, transact_message
from helper.commands.base import BaseCommand


class Command(BaseCommand):
    help = "Propose a relay-chain call dispatched from the parachain's sovereign account."

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('--encoded-call-data', '-e', default='0x0001081234',
                            help='the hex encoded relay-chain call')

    def handle(self, *args, **options):
        with self.para_client() as para:
            para_id = para.query('ParachainInfo', 'ParachainId')
            proposal = Call('OrmlXcm', 'send_as_sovereign', {
                'dest': relay_destination(),
                'message': transact_message(
                    options['encoded_call_data'],
                    sovereign_relay_of(para_id, self.settings.ss58_format),
                    self.settings.xcm_fee,
                    self.settings.xcm_weight,
                    origin_type='SovereignAccount',
                ),
            })
            call = council_propose(para.council_threshold(), proposal)
            self.submit_or_print(para, call, options['dry_run'])
