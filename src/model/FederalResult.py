from dataclasses import dataclass

@dataclass
class FederalResult:
    totalFederalTax: float
    marginalBracket: float
    effectiveRate: float = 0.0
