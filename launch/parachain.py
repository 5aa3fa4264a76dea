"""
Genesis batch for the parachain.

``build_parachain_batch`` turns a NetworkConfig into the ordered call list
submitted as a single ``Utility.batch_all`` by the parachain sudo account.
"""
import logging
from typing import List

from blockchain.accounts import GIFT_PALLET_ID, pallet_account
from blockchain.calls import Call, council_propose, sudo, transfer
from launch.schema import NetworkConfig

logger = logging.getLogger(__name__)

# council proposals at genesis execute immediately with a single vote
GENESIS_COUNCIL_THRESHOLD = 1


def asset_calls(config: NetworkConfig, signer_address: str) -> List[Call]:
    calls = []
    for asset in config.assets:
        logger.info(f"Create {asset.name}({asset.symbol}) asset")
        calls.append(sudo(Call('Assets', 'force_create', {
            'id': asset.asset_id,
            'owner': signer_address,
            'is_sufficient': True,
            'min_balance': 1,
        })))
        calls.append(sudo(Call('Assets', 'force_set_metadata', {
            'id': asset.asset_id,
            'name': asset.name,
            'symbol': asset.symbol,
            'decimals': asset.decimal,
            'is_frozen': False,
        })))
        # signed by the owner, no wrapper
        for account, amount in asset.balances:
            calls.append(Call('Assets', 'mint', {
                'id': asset.asset_id,
                'beneficiary': account,
                'amount': amount,
            }))
    return calls


def market_calls(config: NetworkConfig) -> List[Call]:
    calls = []
    for market in config.all_markets():
        logger.info(f"Create market for asset {market.asset_id}, ptokenId is {market.market_config.ptoken_id}")
        calls.append(sudo(Call('Loans', 'add_market', {
            'asset_id': market.asset_id,
            'market': market.market_config.to_call_params(),
        })))
        calls.append(sudo(Call('Loans', 'activate_market', {'asset_id': market.asset_id})))
    return calls


def crowdloan_calls(config: NetworkConfig) -> List[Call]:
    calls = []
    for crowdloan in config.crowdloans:
        calls.append(sudo(Call('Crowdloans', 'create_vault', {
            'crowdloan': crowdloan.para_id,
            'ctoken': crowdloan.ctoken_id,
            'lease_start': crowdloan.lease_start,
            'lease_end': crowdloan.lease_end,
            'contribution_strategy': 'XCM',
            'cap': crowdloan.cap,
            'end_block': crowdloan.end_block,
        })))
        if not crowdloan.pending:
            calls.append(sudo(Call('Crowdloans', 'open', {'crowdloan': crowdloan.para_id})))
    return calls


def pool_calls(config: NetworkConfig) -> List[Call]:
    return [
        sudo(Call('AMM', 'create_pool', {
            'pair': list(pool.pool),
            'liquidity_amounts': list(pool.liquidity_amounts),
            'lptoken_receiver': pool.lptoken_receiver,
            'lp_token_id': pool.liquidity_provider_token,
        }))
        for pool in config.pools
    ]


def bridge_calls(config: NetworkConfig) -> List[Call]:
    bridge = config.bridge
    calls = []
    for member in bridge.members:
        add_member = Call('BridgeMembership', 'add_member', {'who': member})
        if bridge.membership_origin == 'council':
            calls.append(council_propose(GENESIS_COUNCIL_THRESHOLD, add_member))
        else:
            calls.append(sudo(add_member))
    for chain_id in bridge.chain_ids:
        calls.append(sudo(Call('Bridge', 'register_chain', {'chain_id': chain_id})))
    for token in bridge.bridge_tokens:
        calls.append(sudo(Call('Bridge', 'register_bridge_token', {
            'asset_id': token.asset_id,
            'bridge_token': token.to_call_params(),
        })))
    return calls


def global_calls(config: NetworkConfig, ss58_format: int = 42) -> List[Call]:
    calls = [
        sudo(Call('LiquidStaking', 'update_staking_ledger_cap', {'cap': config.staking_ledger_cap})),
        sudo(Call('LiquidStaking', 'force_set_era_start_block', {'block_number': config.era_start_block})),
        sudo(Call('LiquidStaking', 'force_set_current_era', {'era': config.current_era})),
    ]
    if config.xcm_fees is not None:
        calls.append(sudo(Call('XcmHelper', 'update_xcm_fees', {'fees': config.xcm_fees})))
    calls.append(transfer(pallet_account(GIFT_PALLET_ID, ss58_format), config.gift))
    return calls


def farming_calls(config: NetworkConfig, signer_address: str) -> List[Call]:
    calls = []
    for farm in config.farm_pools:
        logger.info(f"Create farming pool for asset {farm.asset_id}")
        calls.append(sudo(Call('Farming', 'create', {
            'asset': farm.asset_id,
            'reward_asset': farm.reward_asset_id,
            'lock_duration': farm.lock_duration,
            'cool_down_duration': farm.cool_down_duration,
        })))
        calls.append(sudo(Call('Farming', 'set_pool_status', {
            'asset': farm.asset_id,
            'reward_asset': farm.reward_asset_id,
            'lock_duration': farm.lock_duration,
            'is_active': True,
        })))
        calls.append(sudo(Call('Farming', 'dispatch_reward', {
            'asset': farm.asset_id,
            'reward_asset': farm.reward_asset_id,
            'lock_duration': farm.lock_duration,
            'payer': signer_address,
            'amount': farm.reward_amount,
            'reward_duration': farm.reward_duration,
        })))
    return calls


def build_parachain_batch(config: NetworkConfig, signer_address: str, ss58_format: int = 42) -> List[Call]:
    """
    Ordered genesis calls for the parachain.

    Assets, then markets, crowdloan vaults, AMM pools, bridge, global
    parameters and finally farming pools. Every call is sudo-wrapped except
    the asset mints and the gift transfer (signed by the sudo account itself)
    and bridge membership when it goes through the council.
    """
    calls = (
        asset_calls(config, signer_address)
        + market_calls(config)
        + crowdloan_calls(config)
        + pool_calls(config)
        + bridge_calls(config)
        + global_calls(config, ss58_format)
        + farming_calls(config, signer_address)
    )
    logger.info(f"Built parachain batch with {len(calls)} calls")
    return calls
