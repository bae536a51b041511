from dataclasses import dataclass, field
from typing import List


@dataclass
class BracketTax:
    rate: float
    taxableAmount: int
    tax: int


@dataclass
class FederalResult:
    totalFederalTax: int
    marginalBracket: float
    effectiveRate: float = 0.0
    bracketBreakdown: List[BracketTax] = field(default_factory=list)
