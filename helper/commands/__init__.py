"""
Subcommand registry: CLI name to command module.
"""
import importlib

COMMANDS = {
    'launch': 'launch',
    'hrmp-open': 'hrmp_open',
    'hrmp-accept': 'hrmp_accept',
    'sovereign': 'sovereign',
    'derivative': 'derivative',
    'set-staking-ledger': 'set_staking_ledger',
    'set-current-era': 'set_current_era',
    'storage-proof': 'storage_proof',
    'runtime-upgrade': 'runtime_upgrade',
    'add-market': 'add_market',
    'market-reward': 'market_reward',
    'farming-reward': 'farming_reward',
    'ump-transact': 'ump_transact',
    'xcm-units-per-second': 'xcm_units_per_second',
    'best-validators': 'best_validators',
}


def load_command_class(name: str):
    module = importlib.import_module(f'{__name__}.{COMMANDS[name]}')
    return module.Command
