"""
Certifier Scoring

Glue between the controversy decay model and the trust score
calculator for one certifying body, plus the ranking used by the
listing endpoint.

`now` is captured exactly once per body so the decay and the
result's evaluated_at always agree.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from naqiy.config import settings
from naqiy.controversy import (
    ControversyEvent,
    Timestamp,
    clamp_penalty,
    decayed_penalty,
    parse_timestamp,
)
from naqiy.scopes import Scope
from naqiy.trust_score import (
    CertifyingBodyProfile,
    TrustScoreCalculator,
    TrustScoreResult,
    default_calculator,
)


def score_certifier(
    profile: CertifyingBodyProfile,
    events: Iterable[ControversyEvent],
    now: Optional[Timestamp] = None,
    calculator: TrustScoreCalculator = default_calculator,
    penalty_floor: float = settings.PENALTY_FLOOR,
    half_life_years: float = settings.HALF_LIFE_YEARS,
) -> TrustScoreResult:
    """
    Decay the body's timeline, clamp the penalty, and score it.

    Raises:
        DataIntegrityError: an event carries a malformed timestamp.
    """
    instant = parse_timestamp(now if now is not None else datetime.now(timezone.utc), field="now")
    penalty = clamp_penalty(
        decayed_penalty(events, instant, half_life_years), penalty_floor,
    )
    return calculator.calculate(profile, penalty, evaluated_at=instant)


def rank_certifiers(certifiers: Iterable[dict], scope: Scope | str | None = Scope.GENERAL) -> list[dict]:
    """
    Order stored certifier rows by their score for a scope, best first.

    Rows that were never materialized sort last. Ties break on name.
    """
    scope = Scope.parse(scope)
    column = "trust_score" if scope is Scope.GENERAL else f"trust_score_{scope.value}"

    def key(row: dict):
        score = row.get("scores", {}).get(column)
        return (score is None, -(score or 0), row.get("name") or "")

    ranked = []
    for position, row in enumerate(sorted(certifiers, key=key), start=1):
        ranked.append({
            **row,
            "rank": position,
            "scope": scope.value,
            "score": row.get("scores", {}).get(column),
        })
    return ranked
