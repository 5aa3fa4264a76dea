"""
Typed network configuration for the launch procedure.

The JSON files keep the camelCase keys the chain tooling has always used;
models expose snake_case attributes. Everything is validated once at load
time (including cross references between assets, markets, crowdloans, pools,
bridge tokens and farming pools) and is immutable afterwards.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from blockchain.accounts import MAX_DERIVATIVE_INDEX, is_valid_address
from config.networks import NETWORK_FILES, network_file

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Network configuration or CSV input that cannot be used."""


class ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra='forbid',
    )


# ===== Lending markets =====

class JumpModel(ConfigModel):
    base_rate: int
    jump_rate: int
    full_rate: int
    jump_utilization: int


class CurveModel(ConfigModel):
    base_rate: int


class RateModel(ConfigModel):
    jump: Optional[JumpModel] = None
    curve: Optional[CurveModel] = None

    def to_call_params(self) -> Dict[str, Any]:
        if self.jump is not None:
            return {'Jump': self.jump.model_dump()}
        if self.curve is not None:
            return {'Curve': self.curve.model_dump()}
        raise ConfigError("Rate model needs either a jump or a curve definition")


class MarketConfig(ConfigModel):
    collateral_factor: int
    liquidation_threshold: Optional[int] = None
    reserve_factor: int
    close_factor: int
    liquidate_incentive: int
    liquidate_incentive_reserved_factor: Optional[int] = None
    rate_model: RateModel
    state: Literal['Pending', 'Active', 'Supervision'] = 'Pending'
    supply_cap: Optional[int] = None
    borrow_cap: Optional[int] = None
    # runtimes before the supply/borrow split took a single cap
    cap: Optional[int] = None
    ptoken_id: int

    def to_call_params(self) -> Dict[str, Any]:
        """The ``Market`` struct as ``Loans.add_market`` expects it."""
        params = {
            'collateral_factor': self.collateral_factor,
            'reserve_factor': self.reserve_factor,
            'close_factor': self.close_factor,
            'liquidate_incentive': self.liquidate_incentive,
            'rate_model': self.rate_model.to_call_params(),
            'state': self.state,
            'ptoken_id': self.ptoken_id,
        }
        if self.liquidation_threshold is not None:
            params['liquidation_threshold'] = self.liquidation_threshold
        if self.liquidate_incentive_reserved_factor is not None:
            params['liquidate_incentive_reserved_factor'] = self.liquidate_incentive_reserved_factor
        if self.supply_cap is None and self.borrow_cap is None:
            params['cap'] = self.cap
        else:
            params['supply_cap'] = self.supply_cap
            params['borrow_cap'] = self.borrow_cap
        return params


class Market(ConfigModel):
    asset_id: int
    market_config: MarketConfig


# ===== Assets, crowdloans, pools =====

class Asset(ConfigModel):
    name: str
    symbol: str
    asset_id: int
    decimal: int = Field(ge=0, le=255)
    market_option: Optional[MarketConfig] = None
    balances: List[Tuple[str, int]] = Field(default_factory=list)


class Crowdloan(ConfigModel):
    para_id: int
    derivative_index: int
    image: str = 'parallelfinance/polkadot-collator:latest'
    chain: str = 'shell'
    ctoken_id: int
    cap: int
    lease_start: int
    lease_end: int
    end_block: int
    pending: bool = False


class Pool(ConfigModel):
    pool: Tuple[int, int]
    liquidity_amounts: Tuple[int, int]
    lptoken_receiver: str
    liquidity_provider_token: int


# ===== Bridge & farming =====

class BridgeToken(ConfigModel):
    asset_id: int
    id: int
    external: bool
    fee: int
    enable: bool
    out_cap: int
    out_amount: int
    in_cap: int
    in_amount: int

    def to_call_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude={'asset_id'})


class Bridge(ConfigModel):
    members: List[str] = Field(default_factory=list)
    chain_ids: List[int] = Field(default_factory=list)
    bridge_tokens: List[BridgeToken] = Field(default_factory=list)
    # origin BridgeMembership accepts for add_member
    membership_origin: Literal['sudo', 'council'] = 'sudo'


class FarmPool(ConfigModel):
    asset_id: int
    reward_asset_id: int
    lock_duration: int
    cool_down_duration: int
    reward_amount: int
    reward_duration: int


# ===== Network =====

class NetworkConfig(ConfigModel):
    para_id: int
    relay_asset: int
    native_asset_id: int = 0
    auction_duration: int
    lease_index: int
    para_deposit: int
    crowdloan_deposit: int
    staking_ledger_cap: int
    gift: int
    era_start_block: int = 61
    current_era: int = 3
    xcm_fees: Optional[int] = None
    onboarding_seconds: float = 360
    assets: List[Asset] = Field(default_factory=list)
    markets: List[Market] = Field(default_factory=list)
    crowdloans: List[Crowdloan] = Field(default_factory=list)
    pools: List[Pool] = Field(default_factory=list)
    bridge: Bridge = Field(default_factory=Bridge)
    farm_pools: List[FarmPool] = Field(default_factory=list)

    def all_markets(self) -> List[Market]:
        """Markets embedded in assets (in asset order) followed by the standalone ones."""
        embedded = [
            Market(asset_id=asset.asset_id, market_config=asset.market_option)
            for asset in self.assets
            if asset.market_option is not None
        ]
        return embedded + list(self.markets)

    def asset(self, asset_id: int) -> Optional[Asset]:
        for asset in self.assets:
            if asset.asset_id == asset_id:
                return asset
        return None


def _duplicates(values: Iterable[Any]) -> List[Any]:
    seen = set()
    dupes = []
    for value in values:
        if value in seen and value not in dupes:
            dupes.append(value)
        seen.add(value)
    return dupes


def check_references(config: NetworkConfig) -> List[str]:
    """Every cross-reference problem in ``config``, as human readable messages."""
    problems = []
    asset_ids = [a.asset_id for a in config.assets]
    known = set(asset_ids) | {config.native_asset_id}
    markets = config.all_markets()

    for asset_id in _duplicates(asset_ids):
        problems.append(f"duplicate assetId {asset_id}")
    for index in _duplicates(c.derivative_index for c in config.crowdloans):
        problems.append(f"duplicate derivativeIndex {index}")
    for para_id in _duplicates(c.para_id for c in config.crowdloans):
        problems.append(f"duplicate crowdloan paraId {para_id}")
    for asset_id in _duplicates(m.asset_id for m in markets):
        problems.append(f"duplicate market for asset {asset_id}")
    for ptoken_id in _duplicates(m.market_config.ptoken_id for m in markets):
        problems.append(f"duplicate ptokenId {ptoken_id}")

    def require(asset_id: int, where: str):
        if asset_id not in known:
            problems.append(f"{where} references undeclared asset {asset_id}")

    require(config.relay_asset, "relayAsset")
    for market in markets:
        require(market.asset_id, "market")
        ptoken_id = market.market_config.ptoken_id
        # the lending pallet creates the ptoken itself
        if ptoken_id in known:
            problems.append(f"market {market.asset_id} ptokenId {ptoken_id} collides with a declared asset")
        if market.market_config.rate_model.jump is None and market.market_config.rate_model.curve is None:
            problems.append(f"market {market.asset_id} has an empty rateModel")
        split_caps = [market.market_config.supply_cap, market.market_config.borrow_cap]
        if any(c is not None for c in split_caps) and market.market_config.cap is not None:
            problems.append(f"market {market.asset_id} mixes cap with supplyCap/borrowCap")
        elif any(c is None for c in split_caps) and market.market_config.cap is None:
            problems.append(f"market {market.asset_id} needs supplyCap and borrowCap (or cap)")

    for crowdloan in config.crowdloans:
        where = f"crowdloan {crowdloan.para_id}"
        if not 0 <= crowdloan.derivative_index <= MAX_DERIVATIVE_INDEX:
            problems.append(
                f"{where} derivativeIndex {crowdloan.derivative_index} out of range 0..{MAX_DERIVATIVE_INDEX}"
            )
        if crowdloan.lease_end < crowdloan.lease_start:
            problems.append(f"{where} leaseEnd is before leaseStart")
        require(crowdloan.ctoken_id, where)

    for pool in config.pools:
        where = f"pool {list(pool.pool)}"
        for asset_id in pool.pool:
            require(asset_id, where)
        require(pool.liquidity_provider_token, where)
        if not is_valid_address(pool.lptoken_receiver):
            problems.append(f"{where} lptokenReceiver {pool.lptoken_receiver!r} is not a valid address")

    for token in config.bridge.bridge_tokens:
        require(token.asset_id, f"bridge token {token.id}")
    for member in config.bridge.members:
        if not is_valid_address(member):
            problems.append(f"bridge member {member!r} is not a valid address")

    for farm in config.farm_pools:
        where = f"farm pool {farm.asset_id}"
        require(farm.asset_id, where)
        require(farm.reward_asset_id, where)

    for asset in config.assets:
        for account, _ in asset.balances:
            if not is_valid_address(account):
                problems.append(f"asset {asset.asset_id} balance account {account!r} is not a valid address")

    return problems


def parse_network_config(data: Dict[str, Any]) -> NetworkConfig:
    """Validate raw config data. Raises ConfigError listing every problem found."""
    try:
        config = NetworkConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid network config:\n{e}") from e

    problems = check_references(config)
    if problems:
        raise ConfigError("Invalid network config:\n  " + "\n  ".join(problems))
    return config


def load_network_config(name_or_path: Union[str, Path]) -> NetworkConfig:
    """
    Load a bundled network by name (``heiko-dev``, ``parallel-dev``, ...) or a JSON file by path.

    Raises:
        ConfigError: unknown network, unreadable file or invalid content
    """
    path = network_file(str(name_or_path))
    if path is None:
        path = Path(name_or_path)
        if path.suffix != '.json':
            raise ConfigError(
                f"Unknown network {name_or_path!r}; expected one of {', '.join(NETWORK_FILES)} or a .json path"
            )

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read network config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Network config {path} is not valid JSON: {e}") from e

    config = parse_network_config(data)
    logger.info(
        f"Loaded network config {path.name}: {len(config.assets)} assets, "
        f"{len(config.all_markets())} markets, {len(config.crowdloans)} crowdloans"
    )
    return config
