"""
CSV inputs for the governance commands.

Spreadsheet exports carry human units (``0.5``, ``1.1``, ``2500``); each
column is scaled to the runtime's fixed-point representation here:

- ratios (Permill/Ratio):   x 10**6
- incentive and rates:      x 10**18
- caps, speeds, amounts:    x 10**12 (12-decimal assets)
"""
import csv
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from launch.schema import ConfigError

logger = logging.getLogger(__name__)

RATIO = 10 ** 6
RATE = 10 ** 18
AMOUNT = 10 ** 12

MARKET_COLUMNS = [
    'assetId', 'collateralFactor', 'liquidationThreshold', 'reserveFactor', 'closeFactor',
    'liquidateIncentive', 'liquidateIncentiveReservedFactor', 'baseRate', 'jumpRate', 'fullRate',
    'jumpUtilization', 'state', 'supplyCap', 'borrowCap', 'ptokenId',
]
MARKET_REWARD_COLUMNS = ['assetId', 'assetName', 'borrowSpeed', 'supplySpeed']
FARMING_REWARD_COLUMNS = ['assetId', 'assetName', 'amount', 'rewardDuration']

MARKET_STATES = ('Pending', 'Active', 'Supervision')


@dataclass(frozen=True)
class MarketRow:
    asset_id: int
    market: Dict[str, Any]


@dataclass(frozen=True)
class MarketRewardRow:
    asset_id: int
    asset_name: str
    borrow_speed: int
    supply_speed: int


@dataclass(frozen=True)
class FarmingRewardRow:
    asset_id: int
    asset_name: str
    amount: int
    reward_duration: int


def scale(value: str, factor: int, column: str, line: int) -> int:
    """``value`` multiplied by ``factor``; the result must be a whole number."""
    try:
        scaled = Decimal(value) * factor
    except InvalidOperation as e:
        raise ConfigError(f"line {line}: {column} {value!r} is not a number") from e
    if not scaled.is_finite() or scaled != scaled.to_integral_value():
        raise ConfigError(f"line {line}: {column} {value!r} has more precision than the chain supports")
    return int(scaled)


def integer(value: str, column: str, line: int) -> int:
    return scale(value, 1, column, line)


def read_rows(path: str, columns: List[str]) -> List[Dict[str, Any]]:
    """
    Data rows of ``path`` keyed by column name, with their line numbers.

    The first row is a header and is skipped. Blank lines are ignored;
    any other row must have exactly ``len(columns)`` cells.
    """
    try:
        with open(path, newline='', encoding='utf-8-sig') as f:
            lines = list(csv.reader(f))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    rows = []
    for line_no, cells in enumerate(lines[1:], start=2):
        cells = [cell.strip() for cell in cells]
        while cells and not cells[-1]:
            cells.pop()
        if not cells:
            continue
        if len(cells) != len(columns):
            raise ConfigError(f"line {line_no}: expected {len(columns)} columns, got {len(cells)}")
        row = dict(zip(columns, cells))
        row['_line'] = line_no
        rows.append(row)
    logger.debug(f"Read {len(rows)} rows from {path}")
    return rows


def read_markets(path: str) -> List[MarketRow]:
    markets = []
    for row in read_rows(path, MARKET_COLUMNS):
        line = row['_line']
        if row['state'] not in MARKET_STATES:
            raise ConfigError(f"line {line}: state {row['state']!r} is not one of {', '.join(MARKET_STATES)}")
        market = {
            'collateral_factor': scale(row['collateralFactor'], RATIO, 'collateralFactor', line),
            'liquidation_threshold': scale(row['liquidationThreshold'], RATIO, 'liquidationThreshold', line),
            'reserve_factor': scale(row['reserveFactor'], RATIO, 'reserveFactor', line),
            'close_factor': scale(row['closeFactor'], RATIO, 'closeFactor', line),
            'liquidate_incentive': scale(row['liquidateIncentive'], RATE, 'liquidateIncentive', line),
            'liquidate_incentive_reserved_factor': scale(
                row['liquidateIncentiveReservedFactor'], RATIO, 'liquidateIncentiveReservedFactor', line
            ),
            'rate_model': {
                'Jump': {
                    'base_rate': scale(row['baseRate'], RATE, 'baseRate', line),
                    'jump_rate': scale(row['jumpRate'], RATE, 'jumpRate', line),
                    'full_rate': scale(row['fullRate'], RATE, 'fullRate', line),
                    'jump_utilization': scale(row['jumpUtilization'], RATIO, 'jumpUtilization', line),
                },
            },
            'state': row['state'],
            'supply_cap': scale(row['supplyCap'], AMOUNT, 'supplyCap', line),
            'borrow_cap': scale(row['borrowCap'], AMOUNT, 'borrowCap', line),
            'ptoken_id': integer(row['ptokenId'], 'ptokenId', line),
        }
        markets.append(MarketRow(asset_id=integer(row['assetId'], 'assetId', line), market=market))
    return markets


def read_market_rewards(path: str) -> List[MarketRewardRow]:
    return [
        MarketRewardRow(
            asset_id=integer(row['assetId'], 'assetId', row['_line']),
            asset_name=row['assetName'],
            borrow_speed=scale(row['borrowSpeed'], AMOUNT, 'borrowSpeed', row['_line']),
            supply_speed=scale(row['supplySpeed'], AMOUNT, 'supplySpeed', row['_line']),
        )
        for row in read_rows(path, MARKET_REWARD_COLUMNS)
    ]


def read_farming_rewards(path: str) -> List[FarmingRewardRow]:
    return [
        FarmingRewardRow(
            asset_id=integer(row['assetId'], 'assetId', row['_line']),
            asset_name=row['assetName'],
            amount=scale(row['amount'], AMOUNT, 'amount', row['_line']),
            reward_duration=integer(row['rewardDuration'], 'rewardDuration', row['_line']),
        )
        for row in read_rows(path, FARMING_REWARD_COLUMNS)
    ]
