from blockchain.accounts import sovereign_para_of, sovereign_relay_of
from helper.commands.base import BaseCommand


class Command(BaseCommand):
    help = "Display a parachain's sovereign account."

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('parachain_id', type=int, metavar='parachain-id', help='parachain id')
        parser.add_argument('--sibling', '-s', action='store_true',
                            help='account on a sibling parachain instead of the relay chain')

    def handle(self, *args, **options):
        para_id = options['parachain_id']
        if options['sibling']:
            self.write(sovereign_para_of(para_id, self.settings.ss58_format))
        else:
            self.write(sovereign_relay_of(para_id, self.settings.ss58_format))
