"""
Trust Score Calculator

Turns a certifying body's disclosed practices plus its decayed
controversy penalty into five 0-100 scores: one universal score and
one per school (hanafi, shafii, maliki, hanbali).

  raw      = Σ weight(indicator)   for indicators that are TRUE
  adjusted = raw + controversy_penalty
  score    = round(100 / (1 + e^(−k × adjusted)))

UNKNOWN and FALSE contribute nothing. Positive indicators carry
non-negative weights and negative indicators non-positive weights,
which keeps every score monotonic in each indicator and in the penalty.
The constructor refuses tables that break that rule.

The school tables are plain configuration injected at construction.
DEFAULT_SCOPE_WEIGHTS differentiates only the indicators the schools
are documented to weigh differently; everything else inherits the
universal weight.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from naqiy.config import settings
from naqiy.errors import ConfigurationError
from naqiy.scopes import MADHABS, Scope

SIGMOID_K = 0.06


# ============================================================
# THREE-VALUED INDICATOR
# ============================================================

class Indicator(str, Enum):
    """A disclosed practice: known true, known false, or undisclosed."""
    UNKNOWN = "unknown"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_value(cls, value: Any) -> "Indicator":
        """Build from True/False/None, 0/1, or the strings true/false/unknown."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, bool):
            return cls.TRUE if value else cls.FALSE
        if isinstance(value, int) and value in (0, 1):
            return cls.TRUE if value else cls.FALSE
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("", "unknown", "null", "none"):
                return cls.UNKNOWN
            if lowered in ("true", "yes", "1"):
                return cls.TRUE
            if lowered in ("false", "no", "0"):
                return cls.FALSE
        raise ValueError(f"Cannot read {value!r} as an indicator")

    def to_bool(self) -> Optional[bool]:
        if self is Indicator.UNKNOWN:
            return None
        return self is Indicator.TRUE


POSITIVE_INDICATORS = (
    "controllers_are_employees",
    "controllers_present_each_production",
    "has_salaried_slaughterers",
    "transparency_public_charter",
    "transparency_audit_reports",
    "transparency_company_list",
)

NEGATIVE_INDICATORS = (
    "accepts_mechanical_slaughter",
    "accepts_electronarcosis",
    "accepts_post_slaughter_electrocution",
    "accepts_stunning",
    "accepts_vsm",
)

INDICATOR_NAMES = POSITIVE_INDICATORS + NEGATIVE_INDICATORS


@dataclass(frozen=True)
class CertifierIndicators:
    """The eleven weighted facts about a certifying body."""
    controllers_are_employees: Indicator = Indicator.UNKNOWN
    controllers_present_each_production: Indicator = Indicator.UNKNOWN
    has_salaried_slaughterers: Indicator = Indicator.UNKNOWN
    accepts_mechanical_slaughter: Indicator = Indicator.UNKNOWN
    accepts_electronarcosis: Indicator = Indicator.UNKNOWN
    accepts_post_slaughter_electrocution: Indicator = Indicator.UNKNOWN
    accepts_stunning: Indicator = Indicator.UNKNOWN
    accepts_vsm: Indicator = Indicator.UNKNOWN
    transparency_public_charter: Indicator = Indicator.UNKNOWN
    transparency_audit_reports: Indicator = Indicator.UNKNOWN
    transparency_company_list: Indicator = Indicator.UNKNOWN

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CertifierIndicators":
        """Build from a row or dict of nullable booleans. Extra keys are ignored."""
        return cls(**{
            name: Indicator.from_value(data.get(name))
            for name in INDICATOR_NAMES
        })

    def replace(self, **changes: Any) -> "CertifierIndicators":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for name, value in changes.items():
            if name not in values:
                raise KeyError(name)
            values[name] = Indicator.from_value(value)
        return CertifierIndicators(**values)

    def to_dict(self) -> dict[str, Optional[bool]]:
        return {name: getattr(self, name).to_bool() for name in INDICATOR_NAMES}


@dataclass(frozen=True)
class CertifyingBodyProfile:
    """A certifying body as stored: identity, practices and the stored verdict."""
    id: str
    name: str
    indicators: CertifierIndicators = field(default_factory=CertifierIndicators)
    website: Optional[str] = None
    creation_year: Optional[int] = None
    # Derived verdict, never an input to the score
    halal_assessment: Optional[bool] = None
    is_active: bool = True
    notes: Optional[str] = None


# ============================================================
# WEIGHT TABLES
# ============================================================

@dataclass(frozen=True)
class WeightTable:
    """Per-indicator weights. Indicators absent from the table weigh 0."""
    name: str
    weights: Mapping[str, float]

    def weight(self, indicator: str) -> float:
        return self.weights.get(indicator, 0.0)

    def derive(self, name: str, **overrides: float) -> "WeightTable":
        """Copy this table under a new name with some weights replaced."""
        merged = dict(self.weights)
        merged.update(overrides)
        return WeightTable(name=name, weights=merged)

    def validate(self) -> None:
        for indicator, weight in self.weights.items():
            if indicator not in INDICATOR_NAMES:
                raise ConfigurationError(
                    f"Weight table '{self.name}' names unknown indicator '{indicator}'"
                )
            if indicator in POSITIVE_INDICATORS and weight < 0:
                raise ConfigurationError(
                    f"Weight table '{self.name}': positive indicator "
                    f"'{indicator}' has negative weight {weight}"
                )
            if indicator in NEGATIVE_INDICATORS and weight > 0:
                raise ConfigurationError(
                    f"Weight table '{self.name}': negative indicator "
                    f"'{indicator}' has positive weight {weight}"
                )


UNIVERSAL_WEIGHTS = WeightTable(
    name="universal",
    weights={
        "controllers_are_employees": 15,
        "controllers_present_each_production": 15,
        "has_salaried_slaughterers": 10,
        "accepts_mechanical_slaughter": -15,
        "accepts_electronarcosis": -15,
        "accepts_post_slaughter_electrocution": -2,
        "accepts_stunning": -20,
        "accepts_vsm": -8,
        "transparency_public_charter": 5,
        "transparency_audit_reports": 5,
        "transparency_company_list": 5,
    },
)

DEFAULT_SCOPE_WEIGHTS: dict[Scope, WeightTable] = {
    Scope.HANAFI: UNIVERSAL_WEIGHTS.derive(
        "hanafi",
        has_salaried_slaughterers=15,
        accepts_mechanical_slaughter=-20,
        accepts_electronarcosis=-20,
        accepts_stunning=-25,
    ),
    Scope.SHAFII: UNIVERSAL_WEIGHTS.derive(
        "shafii",
        has_salaried_slaughterers=10,
        accepts_mechanical_slaughter=-18,
        accepts_electronarcosis=-15,
        accepts_stunning=-15,
    ),
    Scope.MALIKI: UNIVERSAL_WEIGHTS.derive(
        "maliki",
        has_salaried_slaughterers=5,
        accepts_mechanical_slaughter=-8,
        accepts_electronarcosis=-8,
        accepts_stunning=-10,
    ),
    Scope.HANBALI: UNIVERSAL_WEIGHTS.derive(
        "hanbali",
        has_salaried_slaughterers=12,
        accepts_mechanical_slaughter=-18,
        accepts_electronarcosis=-18,
        accepts_stunning=-25,
    ),
}


# ============================================================
# RESULT
# ============================================================

@dataclass(frozen=True)
class TrustScoreResult:
    trust_score: int
    trust_score_hanafi: int
    trust_score_shafii: int
    trust_score_maliki: int
    trust_score_hanbali: int
    controversy_penalty_applied: float
    evaluated_at: Optional[datetime] = None
    raw_scores: Mapping[str, float] = field(default_factory=dict)

    def for_scope(self, scope: Scope | str | None) -> int:
        """Score for a school, or the universal score for 'general'."""
        scope = Scope.parse(scope)
        if scope is Scope.GENERAL:
            return self.trust_score
        return getattr(self, f"trust_score_{scope.value}")

    def to_dict(self) -> dict:
        return {
            "trust_score": self.trust_score,
            "trust_score_hanafi": self.trust_score_hanafi,
            "trust_score_shafii": self.trust_score_shafii,
            "trust_score_maliki": self.trust_score_maliki,
            "trust_score_hanbali": self.trust_score_hanbali,
            "controversy_penalty_applied": round(self.controversy_penalty_applied, 4),
            "evaluated_at": self.evaluated_at.isoformat() if self.evaluated_at else None,
            "raw_scores": dict(self.raw_scores),
        }


# ============================================================
# CALCULATOR
# ============================================================

def normalize_score(adjusted: float, k: float = SIGMOID_K) -> int:
    """Logistic map of an adjusted raw score onto 0-100 (50 at zero)."""
    exponent = -k * adjusted
    # math.exp overflows past ~709
    if exponent > 700:
        return 0
    return int(round(100.0 / (1.0 + math.exp(exponent))))


class TrustScoreCalculator:
    """
    Pure scorer over injectable weight tables.

    Args:
        universal: Table for the headline trust score.
        scopes: One table per school. All four are required.
        k: Logistic steepness.
    """

    def __init__(
        self,
        universal: WeightTable = UNIVERSAL_WEIGHTS,
        scopes: Optional[Mapping[Scope | str, WeightTable]] = None,
        k: float = SIGMOID_K,
    ):
        if k <= 0:
            raise ConfigurationError(f"Sigmoid steepness must be positive, got {k}")

        raw_scopes = DEFAULT_SCOPE_WEIGHTS if scopes is None else scopes
        tables: dict[Scope, WeightTable] = {}
        for key, table in raw_scopes.items():
            try:
                tables[Scope.parse(key)] = table
            except ValueError as e:
                raise ConfigurationError(str(e)) from None

        missing = [s.value for s in MADHABS if s not in tables]
        if missing:
            raise ConfigurationError(
                f"Missing weight tables for scope(s): {', '.join(missing)}"
            )

        universal.validate()
        for scope in MADHABS:
            tables[scope].validate()

        self.universal = universal
        self.scopes = {s: tables[s] for s in MADHABS}
        self.k = k

    @staticmethod
    def raw_score(indicators: CertifierIndicators, table: WeightTable) -> float:
        return sum(
            table.weight(name)
            for name in INDICATOR_NAMES
            if getattr(indicators, name) is Indicator.TRUE
        )

    def calculate(
        self,
        subject: CertifyingBodyProfile | CertifierIndicators,
        controversy_penalty: float = 0.0,
        evaluated_at: Optional[datetime] = None,
    ) -> TrustScoreResult:
        """
        Score a body (or a bare indicator set) against every table.

        The penalty is taken as given. Clamp it beforehand if the
        documented −50..0 range matters to the caller.
        """
        indicators = getattr(subject, "indicators", subject)

        raw_scores = {"universal": self.raw_score(indicators, self.universal)}
        for scope, table in self.scopes.items():
            raw_scores[scope.value] = self.raw_score(indicators, table)

        scores = {
            name: normalize_score(raw + controversy_penalty, self.k)
            for name, raw in raw_scores.items()
        }

        return TrustScoreResult(
            trust_score=scores["universal"],
            trust_score_hanafi=scores["hanafi"],
            trust_score_shafii=scores["shafii"],
            trust_score_maliki=scores["maliki"],
            trust_score_hanbali=scores["hanbali"],
            controversy_penalty_applied=controversy_penalty,
            evaluated_at=evaluated_at,
            raw_scores=raw_scores,
        )


# Default calculator with the documented tables
default_calculator = TrustScoreCalculator(k=settings.SIGMOID_K)
