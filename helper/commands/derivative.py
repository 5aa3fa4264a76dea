from blockchain.accounts import derive_sub_account
from helper.commands.base import BaseCommand


class Command(BaseCommand):
    help = 'Display a derivative account address.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('address', help='address of source account')
        parser.add_argument('index', type=int, help='derivative index')
        parser.add_argument('--byte-order', choices=['little', 'big'], default='little',
                            help="index encoding; 'big' reproduces addresses from the early launch scripts")

    def handle(self, *args, **options):
        self.write(derive_sub_account(
            options['address'],
            options['index'],
            self.settings.ss58_format,
            byte_order=options['byte_order'],
        ))
