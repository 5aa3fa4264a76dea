import logging

from blockchain.accounts import sovereign_relay_of
from blockchain.calls import Call, sudo
from blockchain.xcm import relay_destination, transact_message
from helper.commands.base import BaseCommand

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Accept an HRMP channel request from a source chain.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('source', type=int, help='paraId of source chain')
        parser.add_argument('target', type=int, help='paraId of target chain')

    def handle(self, *args, **options):
        source, target = options['source'], options['target']

        with self.relay_client() as relay:
            encoded = relay.encode(Call('Hrmp', 'hrmp_accept_open_channel', {'sender': source}))
        logger.info(f"Encoded hrmp_accept_open_channel({source}): {encoded}")

        call = sudo(Call('PolkadotXcm', 'send', {
            'dest': relay_destination(),
            'message': transact_message(
                encoded,
                sovereign_relay_of(target, self.settings.ss58_format),
                self.settings.xcm_fee,
                self.settings.xcm_weight,
            ),
        }))

        with self.para_client() as para:
            self.submit_or_print(para, call, options['dry_run'])
