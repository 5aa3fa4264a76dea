import logging

from blockchain.calls import Call, batch_all, council_propose
from helper.commands.base import BaseCommand
from helper.csv_rows import read_markets

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Propose new lending markets from a CSV file.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('input', help='path to market csv')

    def handle(self, *args, **options):
        markets = read_markets(options['input'])
        calls = []
        for row in markets:
            logger.info(f"asset {row.asset_id}: {row.market}")
            calls.append(Call('Loans', 'add_market', {'asset_id': row.asset_id, 'market': row.market}))

        with self.para_client() as para:
            call = council_propose(para.council_threshold(), batch_all(calls))
            self.submit_or_print(para, call, options['dry_run'])
