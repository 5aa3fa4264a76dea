"""
Relay-chain side of the launch: parachain registration, auction and crowdloans.
"""
import logging
from typing import List, Mapping

from blockchain.accounts import derive_sub_account, sovereign_relay_of
from blockchain.calls import Call, as_derivative, sudo, transfer
from launch.genesis import GenesisExport
from launch.schema import NetworkConfig

logger = logging.getLogger(__name__)


def build_relay_registrations(
    config: NetworkConfig,
    signer_address: str,
    exports: Mapping[int, GenesisExport],
    ss58_format: int = 42,
) -> List[Call]:
    """
    One ``Registrar.force_register`` per crowdloan, each owned by the signer's
    sub-account for the crowdloan's derivative index.

    ``exports`` maps para id to its exported genesis head and validation code.
    Registrations are submitted one by one, never batched.
    """
    calls = []
    for crowdloan in config.crowdloans:
        export = exports[crowdloan.para_id]
        calls.append(sudo(Call('Registrar', 'force_register', {
            'who': derive_sub_account(signer_address, crowdloan.derivative_index, ss58_format),
            'deposit': config.para_deposit,
            'id': crowdloan.para_id,
            'genesis_head': export.state,
            'validation_code': export.wasm,
        })))
    return calls


def build_relay_batch(config: NetworkConfig, signer_address: str, ss58_format: int = 42) -> List[Call]:
    """
    Calls submitted as one ``batch_all`` after the parathreads are onboarded.

    Starts the auction, funds each derivative sub-account with the crowdloan
    deposit, creates every crowdloan through ``as_derivative`` and moves the
    relay asset's seeded balances to the parachain's sovereign account.
    """
    calls = [sudo(Call('Auctions', 'new_auction', {
        'duration': config.auction_duration,
        'lease_period_index': config.lease_index,
    }))]

    for crowdloan in config.crowdloans:
        sub_account = derive_sub_account(signer_address, crowdloan.derivative_index, ss58_format)
        calls.append(transfer(sub_account, config.crowdloan_deposit))

    for crowdloan in config.crowdloans:
        calls.append(as_derivative(crowdloan.derivative_index, Call('Crowdloan', 'create', {
            'index': crowdloan.para_id,
            'cap': crowdloan.cap,
            'first_period': crowdloan.lease_start,
            'last_period': crowdloan.lease_end,
            'end': crowdloan.end_block,
            'verifier': None,
        })))

    relay_asset = config.asset(config.relay_asset)
    if relay_asset is not None and relay_asset.balances:
        sovereign = sovereign_relay_of(config.para_id, ss58_format)
        for _, amount in relay_asset.balances:
            calls.append(transfer(sovereign, amount))

    logger.info(f"Built relay batch with {len(calls)} calls")
    return calls
