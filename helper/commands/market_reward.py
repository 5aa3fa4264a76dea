import logging

from blockchain.calls import Call, batch_all, council_propose
from helper.commands.base import BaseCommand
from helper.csv_rows import read_market_rewards

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Propose lending market reward speeds from a CSV file.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('input', help='path to reward csv')

    def handle(self, *args, **options):
        calls = []
        for row in read_market_rewards(options['input']):
            logger.info(
                f"assetId: {row.asset_id}, assetName: {row.asset_name}, "
                f"borrowSpeed: {row.borrow_speed}, supplySpeed: {row.supply_speed}"
            )
            calls.append(Call('Loans', 'update_market_reward_speed', {
                'asset_id': row.asset_id,
                'supply_reward_per_block': row.supply_speed,
                'borrow_reward_per_block': row.borrow_speed,
            }))

        with self.para_client() as para:
            call = council_propose(para.council_threshold(), batch_all(calls))
            self.submit_or_print(para, call, options['dry_run'])
