from blockchain.xcm import units_per_second
from helper.commands.base import BaseCommand


class Command(BaseCommand):
    help = 'Calculate units_per_second for xcm reserve transfers.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('precision', type=int, help='precision of asset')
        parser.add_argument('price', type=float, help='price of asset')

    def handle(self, *args, **options):
        self.write(str(units_per_second(options['precision'], options['price'])))
