import logging

from blockchain.accounts import sovereign_relay_of
from blockchain.calls import Call, council_propose
from blockchain.xcm import relay_destination, transact_message
from helper.commands.base import BaseCommand, CommandError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Open an HRMP channel to a target chain through a council proposal.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('source', type=int, help='paraId of source chain')
        parser.add_argument('target', type=int, help='paraId of target chain')

    def handle(self, *args, **options):
        source, target = options['source'], options['target']

        with self.relay_client() as relay:
            configuration = relay.query('Configuration', 'ActiveConfig')
            if not configuration:
                raise CommandError("Relay chain has no active host configuration")
            encoded = relay.encode(Call('Hrmp', 'hrmp_init_open_channel', {
                'recipient': target,
                'proposed_max_capacity': configuration['hrmp_channel_max_capacity'],
                'proposed_max_message_size': configuration['hrmp_channel_max_message_size'],
            }))
        logger.info(f"Encoded hrmp_init_open_channel({target}): {encoded}")

        proposal = Call('OrmlXcm', 'send_as_sovereign', {
            'dest': relay_destination(),
            'message': transact_message(
                encoded,
                sovereign_relay_of(source, self.settings.ss58_format),
                self.settings.xcm_fee,
                self.settings.xcm_weight,
            ),
        })

        with self.para_client() as para:
            call = council_propose(para.council_threshold(), proposal)
            self.submit_or_print(para, call, options['dry_run'])
