"""
XCM programs sent from the parachain to the relay chain.

The Transact envelope withdraws the relay-native fee asset held by the sender's
sovereign account, buys execution, runs the encoded relay call, refunds unused
weight and deposits whatever is left back to ``refund_account``.
"""
import math
from typing import Any, Dict

from blockchain.accounts import decode_account

HERE: Dict[str, Any] = {'parents': 0, 'interior': 'Here'}

WEIGHT_PER_SECOND = 10 ** 12
# fixed weigher charges 600_000_000 per reserve transfer
RESERVE_TRANSFER_WEIGHT = 600_000_000
# at most $0.02 per reserve-based transfer
MAX_RESERVE_TRANSFER_FEE = 0.02


def relay_destination() -> Dict[str, Any]:
    return {'V1': {'parents': 1, 'interior': 'Here'}}


def _local_asset(amount: int) -> Dict[str, Any]:
    return {'id': {'Concrete': HERE}, 'fun': {'Fungible': amount}}


def transact_message(
    encoded_call: str,
    refund_account: str,
    fee: int,
    weight_limit: int,
    origin_type: str = 'Native',
) -> Dict[str, Any]:
    """
    Build a V2 Transact program.

    Args:
        encoded_call: hex-encoded relay-chain call (no extrinsic prefix)
        refund_account: SS58 address receiving leftover fee asset
        fee: amount of the relay-native asset withdrawn to pay for execution
        weight_limit: ``require_weight_at_most`` for the transacted call
        origin_type: origin the call dispatches with ('Native', 'SovereignAccount', ...)
    """
    if not encoded_call.startswith('0x'):
        encoded_call = '0x' + encoded_call
    beneficiary = '0x' + decode_account(refund_account).hex()
    return {
        'V2': [
            {'WithdrawAsset': [_local_asset(fee)]},
            {'BuyExecution': {'fees': _local_asset(fee), 'weight_limit': 'Unlimited'}},
            {'Transact': {
                'origin_type': origin_type,
                'require_weight_at_most': weight_limit,
                'call': {'encoded': encoded_call},
            }},
            'RefundSurplus',
            {'DepositAsset': {
                'assets': {'Wild': {'AllOf': {'id': {'Concrete': HERE}, 'fun': 'Fungible'}}},
                'max_assets': 1,
                'beneficiary': {
                    'parents': 0,
                    'interior': {'X1': {'AccountId32': {'network': 'Any', 'id': beneficiary}}},
                },
            }},
        ]
    }


def units_per_second(precision: int, price: float) -> int:
    """
    Units of an asset charged per second of weight for reserve-based transfers.

    max_fee = units_per_second * weight / WEIGHT_PER_SECOND / 10**precision * price
    """
    if price <= 0:
        raise ValueError("Price must be positive")
    value = MAX_RESERVE_TRANSFER_FEE * WEIGHT_PER_SECOND / RESERVE_TRANSFER_WEIGHT * 10 ** precision / price
    return math.floor(value)
