import logging

from blockchain.calls import Call, batch_all, council_propose
from helper.commands.base import BaseCommand
from helper.csv_rows import read_farming_rewards

logger = logging.getLogger(__name__)

# reward payers and reward assets per network
PARALLEL_CHAIN = 'Parallel'
PARALLEL_PAYER = 'p8B3QXweBQKzu8DhkggwJqFkUVQ53kB1RejtFQ8q3JMSFqqMd'
PARALLEL_REWARD_ASSET = 1
HEIKO_PAYER = 'hJFHzsKENPsaqPJT2k6D4VYUKz2eFxxW7AVfG9zvL3Q1R7sFp'
HEIKO_REWARD_ASSET = 0
LOCK_DURATION = 0


class Command(BaseCommand):
    help = 'Propose farming reward dispatches from a CSV file.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('input', help='path to reward csv')

    def handle(self, *args, **options):
        rewards = read_farming_rewards(options['input'])

        with self.para_client() as para:
            if para.chain == PARALLEL_CHAIN:
                payer, reward_asset = PARALLEL_PAYER, PARALLEL_REWARD_ASSET
            else:
                payer, reward_asset = HEIKO_PAYER, HEIKO_REWARD_ASSET
            height = para.chain_height()

            calls = []
            for row in rewards:
                amount = row.amount
                pool = para.query('Farming', 'Pools', [row.asset_id, reward_asset, LOCK_DURATION])
                # a running reward period cannot be topped up
                if pool and int(pool.get('period_finish', 0)) > height:
                    amount = 0
                logger.info(
                    f"assetId: {row.asset_id}, assetName: {row.asset_name}, "
                    f"amount: {amount}, rewardDuration: {row.reward_duration}"
                )
                calls.append(Call('Farming', 'dispatch_reward', {
                    'asset': row.asset_id,
                    'reward_asset': reward_asset,
                    'lock_duration': LOCK_DURATION,
                    'payer': {'Id': payer},
                    'amount': amount,
                    'reward_duration': row.reward_duration,
                }))

            call = council_propose(para.council_threshold(), batch_all(calls))
            self.submit_or_print(para, call, options['dry_run'])
