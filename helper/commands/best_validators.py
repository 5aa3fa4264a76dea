"""
Relay-chain validators worth nominating.

A candidate has an on-chain identity (its own or through a parent identity),
accepts nominations, charges exactly ``Staking.MinCommission`` and has a
non-zero exposure in the active era. Candidates are ranked by the reward
points they earned over the last ``--eras`` eras, then by total stake.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from helper.commands.base import BaseCommand, CommandError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 24
# Kusama's HistoryDepth
DEFAULT_ERAS = 84


def _raw_text(field: Any) -> Optional[str]:
    if isinstance(field, dict):
        field = field.get('Raw')
    if isinstance(field, str) and field and field != 'None':
        return field
    return None


def identity_display(registration: Any) -> Optional[str]:
    """``info.display`` of an ``Identity.IdentityOf`` registration, if set."""
    # newer runtimes store (registration, username)
    if isinstance(registration, (list, tuple)):
        registration = registration[0] if registration else None
    if not isinstance(registration, dict):
        return None
    return _raw_text(registration.get('info', {}).get('display'))


def era_points(relay, eras: List[int]) -> Dict[str, int]:
    points: Dict[str, int] = {}
    for era in eras:
        reward = relay.query('Staking', 'ErasRewardPoints', [era])
        for account, earned in (reward or {}).get('individual', []):
            points[account] = points.get(account, 0) + int(earned)
    return points


def validator_name(relay, stash: str) -> Optional[str]:
    display = identity_display(relay.query('Identity', 'IdentityOf', [stash]))
    if display:
        return display
    parent = relay.query('Identity', 'SuperOf', [stash])
    if not parent:
        return None
    parent_account, sub_name = parent
    parent_display = identity_display(relay.query('Identity', 'IdentityOf', [parent_account]))
    if not parent_display:
        return None
    sub_display = _raw_text(sub_name)
    return f"{parent_display}/{sub_display}" if sub_display else parent_display


class Command(BaseCommand):
    help = 'List the best relay-chain validators to nominate.'

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument('--limit', type=int, default=DEFAULT_LIMIT, help='number of validators to list')
        parser.add_argument('--eras', type=int, default=DEFAULT_ERAS,
                            help='number of past eras whose reward points are counted')

    def handle(self, *args, **options):
        with self.relay_client() as relay:
            active_era = relay.query('Staking', 'ActiveEra')
            if not active_era:
                raise CommandError("Relay chain has no active era")
            era = int(active_era['index'])
            eras = list(range(max(0, era - options['eras'] + 1), era + 1))

            min_commission = int(relay.query('Staking', 'MinCommission') or 0)
            exposures = dict(relay.query_map('Staking', 'ErasStakers', [era]))
            points = era_points(relay, eras)
            decimals = relay.token_decimals

            candidates = []
            for stash, prefs in relay.query_map('Staking', 'Validators'):
                if prefs.get('blocked') or int(prefs.get('commission', 0)) != min_commission:
                    continue
                total = int((exposures.get(stash) or {}).get('total', 0))
                if total <= 0:
                    continue
                name = validator_name(relay, stash)
                if not name:
                    continue
                candidates.append((points.get(stash, 0), total, stash, name))
            logger.info(f"{len(candidates)} candidates in era {era} (min commission {min_commission})")

        candidates.sort(key=lambda c: (c[0], c[1]), reverse=True)
        best = [
            {'stashId': stash, 'name': name, 'stakes': total // 10 ** decimals}
            for _, total, stash, name in candidates[:options['limit']]
        ]
        self.write(json.dumps(best, indent=4))
