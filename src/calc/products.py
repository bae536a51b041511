"""Product configuration tables (growth annuities and guaranteed-income riders).

Each product is a small configuration record looked up once per run; the
runners never branch on product identifiers directly.
"""

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from model.errors import ConfigurationMissingError

REFERENCE_DIR = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference'))


@dataclass(frozen=True)
class GrowthProduct:
    product_id: str
    label: str
    bonus_percent: float
    anniversary_bonus_percent: float
    anniversary_bonus_years: int
    surrender_schedule: Tuple[float, ...]


@dataclass(frozen=True)
class RollUpTier:
    first_year: int
    last_year: int
    rate: float


@dataclass(frozen=True)
class RollUpOption:
    """One roll-up the client may elect on products that offer a choice."""
    option_id: str
    roll_up_type: str
    rate: float
    max_period: int


@dataclass(frozen=True)
class GIProduct:
    product_id: str
    label: str
    bonus_applies_to: Optional[str]
    rider_fee: float
    rider_fee_applies_to: str
    rider_fee_deducted_from: str
    roll_up_type: str
    roll_up_tiers: Tuple[RollUpTier, ...]
    roll_up_max_period: int
    roll_up_description: str
    payout_tables: Dict[str, Dict[str, Dict[int, float]]]
    roll_up_options: Tuple[RollUpOption, ...] = ()
    default_roll_up_option: Optional[str] = None

    def roll_up_terms(self, deferral_year: int, option: Optional[str] = None) -> Optional[Tuple[float, str]]:
        """(rate, 'simple' or 'compound') for a 1-based deferral year, or None past the roll-up period.

        Products with electable roll-ups use ``option``, then the product's
        default option, then its first option. An unknown option falls back to
        the first one. Fixed products ignore ``option``.
        """
        if deferral_year < 1:
            return None
        if self.roll_up_options:
            selected_id = option or self.default_roll_up_option or self.roll_up_options[0].option_id
            selected = next((o for o in self.roll_up_options if o.option_id == selected_id),
                            self.roll_up_options[0])
            if deferral_year > selected.max_period:
                return None
            return selected.rate, selected.roll_up_type
        if deferral_year > self.roll_up_max_period:
            return None
        for tier in self.roll_up_tiers:
            if tier.first_year <= deferral_year <= tier.last_year:
                return tier.rate, self.roll_up_type
        return None

    def payout_percent(self, age: int, payout_type: str = 'individual', payout_option: str = 'level') -> float:
        """Lifetime payout percentage at ``age``.

        Ages outside the table are clamped to its first age and to 80. Joint
        payouts use the joint column; the increasing option is only available
        on products that publish an increasing table.
        """
        option = payout_option if payout_option in self.payout_tables else 'level'
        column = 'joint' if payout_type == 'joint' else 'single'
        table = self.payout_tables[option][column]
        clamped = min(max(age, min(table)), 80)
        return table[clamped]


def _load(name: str) -> dict:
    with open(os.path.join(REFERENCE_DIR, name), 'r') as f:
        return json.load(f)


@lru_cache(maxsize=None)
def growth_products() -> Dict[str, GrowthProduct]:
    products = {}
    for product_id, p in _load('growth-products.json')['products'].items():
        anniversary = p.get('anniversaryBonus', {})
        products[product_id] = GrowthProduct(
            product_id=product_id,
            label=p['label'],
            bonus_percent=p.get('bonusPercent', 0),
            anniversary_bonus_percent=anniversary.get('percent', 0),
            anniversary_bonus_years=anniversary.get('years', 0),
            surrender_schedule=tuple(p.get('surrenderSchedule', [])),
        )
    return products


def _roll_up_tiers(roll_up: dict) -> List[RollUpTier]:
    if 'rates' in roll_up:
        return [RollUpTier(r['years'][0], r['years'][1], r['rate']) for r in roll_up['rates']]
    if 'rate' in roll_up:
        return [RollUpTier(1, roll_up['maxPeriod'], roll_up['rate'])]
    return []


def _roll_up_options(roll_up: dict) -> List[RollUpOption]:
    return [
        RollUpOption(o['id'], o['type'], o['rate'], o['maxPeriod'])
        for o in roll_up.get('options', [])
    ]


@lru_cache(maxsize=None)
def gi_products() -> Dict[str, GIProduct]:
    products = {}
    for product_id, p in _load('gi-products.json')['products'].items():
        tables = {
            option: {column: {int(age): pct for age, pct in rates.items()} for column, rates in columns.items()}
            for option, columns in p['payoutTables'].items()
        }
        roll_up = p['rollUp']
        options = _roll_up_options(roll_up)
        products[product_id] = GIProduct(
            product_id=product_id,
            label=p['label'],
            bonus_applies_to=p.get('bonusAppliesTo'),
            rider_fee=p['riderFee'],
            rider_fee_applies_to=p.get('riderFeeAppliesTo', 'incomeBase'),
            rider_fee_deducted_from=p.get('riderFeeDeductedFrom', 'accountValue'),
            roll_up_type=roll_up.get('type', 'compound'),
            roll_up_tiers=tuple(_roll_up_tiers(roll_up)),
            roll_up_max_period=roll_up.get('maxPeriod', max((o.max_period for o in options), default=0)),
            roll_up_description=p.get('rollUpDescription', ''),
            payout_tables=tables,
            roll_up_options=tuple(options),
            default_roll_up_option=roll_up.get('defaultOption'),
        )
    return products


def growth_product(product_id: str) -> GrowthProduct:
    try:
        return growth_products()[product_id]
    except KeyError:
        raise ConfigurationMissingError(f"Unknown growth product '{product_id}'") from None


def gi_product(product_id: str) -> GIProduct:
    try:
        return gi_products()[product_id]
    except KeyError:
        raise ConfigurationMissingError(f"Unknown guaranteed-income product '{product_id}'") from None


def product_category(product_id: Optional[str]) -> str:
    """'guaranteed_income', 'growth' or 'standard' for a product identifier."""
    if product_id is None:
        return 'standard'
    if product_id in gi_products():
        return 'guaranteed_income'
    if product_id in growth_products():
        return 'growth'
    raise ConfigurationMissingError(f"Unknown product '{product_id}'")
