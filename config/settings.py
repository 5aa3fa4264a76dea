"""
Runtime settings for the launch and helper tooling.

Values come from the environment (and a ``.env`` file when present) through
python-decouple. ``load_settings`` builds one frozen ``Settings`` object at
process start; everything downstream receives it explicitly.
"""
from dataclasses import dataclass, replace
from typing import Optional

from decouple import config


@dataclass(frozen=True)
class RelayNetwork:
    relay_ws: str
    para_ws: str
    xcm_fee: int
    xcm_weight: int


# Default endpoints and XCM fee constants per RELAY_CHAIN_TYPE
RELAY_NETWORKS = {
    'local': RelayNetwork(
        relay_ws='ws://127.0.0.1:9944',
        para_ws='ws://127.0.0.1:9948',
        xcm_fee=50_000_000_000,
        xcm_weight=1_000_000_000,
    ),
    'kusama': RelayNetwork(
        relay_ws='wss://kusama-rpc.polkadot.io',
        para_ws='wss://heiko-rpc.parallel.fi',
        xcm_fee=10_000_000_000,
        xcm_weight=3_000_000_000,
    ),
    'polkadot': RelayNetwork(
        relay_ws='wss://rpc.polkadot.io',
        para_ws='wss://polkadot-parallel-rpc.parallel.fi',
        xcm_fee=2_500_000_000,
        xcm_weight=3_000_000_000,
    ),
}


@dataclass(frozen=True)
class Settings:
    relay_chain_type: str
    relay_ws: str
    para_ws: str
    para_sudo_key: str
    relay_sudo_key: str
    xcm_fee: int
    xcm_weight: int
    ss58_format: int = 42
    block_wait_timeout: float = 600.0
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    def with_endpoints(self, relay_ws: Optional[str] = None, para_ws: Optional[str] = None) -> 'Settings':
        return replace(
            self,
            relay_ws=relay_ws or self.relay_ws,
            para_ws=para_ws or self.para_ws,
        )


def load_settings() -> Settings:
    """Read settings from the environment. Raises ValueError on an unknown RELAY_CHAIN_TYPE."""
    relay_chain_type = config('RELAY_CHAIN_TYPE', default='local').lower()
    network = RELAY_NETWORKS.get(relay_chain_type)
    if network is None:
        raise ValueError(
            f"Unsupported RELAY_CHAIN_TYPE {relay_chain_type!r}; expected one of {', '.join(RELAY_NETWORKS)}"
        )

    return Settings(
        relay_chain_type=relay_chain_type,
        relay_ws=config('RELAY_WS', default=network.relay_ws),
        para_ws=config('PARA_WS', default=network.para_ws),
        para_sudo_key=config('PARA_CHAIN_SUDO_KEY', default='//Dave'),
        relay_sudo_key=config('RELAY_CHAIN_SUDO_KEY', default=''),
        xcm_fee=config('XCM_FEE', default=network.xcm_fee, cast=int),
        xcm_weight=config('XCM_WEIGHT', default=network.xcm_weight, cast=int),
        ss58_format=config('SS58_FORMAT', default=42, cast=int),
        block_wait_timeout=config('BLOCK_WAIT_TIMEOUT', default=600.0, cast=float),
        log_level=config('LOG_LEVEL', default='INFO').upper(),
        log_file=config('LOG_FILE', default=None),
    )
