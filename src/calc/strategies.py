"""Conversion strategy table: target bracket and IRMAA policy per strategy."""

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

from model.errors import InvalidInputError

REFERENCE_PATH = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..', 'reference', 'strategies.json'))


@dataclass(frozen=True)
class StrategyConfig:
    key: str
    name: str
    target_bracket: int
    irmaa_avoidance: bool
    strict_irmaa: bool
    risk: str
    description: str


@lru_cache(maxsize=None)
def _load() -> Tuple[Dict[str, StrategyConfig], Tuple[str, ...]]:
    with open(REFERENCE_PATH, 'r') as f:
        data = json.load(f)
    strategies = {
        key: StrategyConfig(
            key=key,
            name=s['name'],
            target_bracket=s['targetBracket'],
            irmaa_avoidance=s.get('irmaaAvoidance', False),
            strict_irmaa=s.get('strictIrmaa', False),
            risk=s.get('risk', 'medium'),
            description=s.get('description', ''),
        )
        for key, s in data['strategies'].items()
    }
    return strategies, tuple(data['priority'])


def all_strategies() -> Dict[str, StrategyConfig]:
    return _load()[0]


def strategy_priority() -> Tuple[str, ...]:
    """Strategy keys from most to least preferred when results tie."""
    return _load()[1]


def get_strategy(key: str) -> StrategyConfig:
    strategies = all_strategies()
    if key not in strategies:
        raise InvalidInputError(f"Unknown strategy '{key}'. Expected one of: {', '.join(strategies)}")
    return strategies[key]
