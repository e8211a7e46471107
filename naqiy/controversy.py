"""
Controversy Decay Model

Converts a certifying body's controversy timeline into a single
time-decayed penalty.

  penalty = Σ score_impact × e^(−λt)     over ACTIVE events only
  λ       = ln(2) / half_life            (5-year half-life by default)
  t       = years elapsed between occurred_at and the evaluation instant

Resolved events (is_active = False) are removed before the sum. They do
not decay toward zero, they vanish.

The model does NOT clamp. The documented range is −50..0, and callers
that need it clamp explicitly with clamp_penalty().

Pure function of (events, now). Reading the clock is the caller's job:
capture `now` once per logical computation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from naqiy.errors import DataIntegrityError

HALF_LIFE_YEARS = 5.0
PENALTY_FLOOR = -50.0
SECONDS_PER_YEAR = 365.25 * 24 * 3600

Timestamp = Union[datetime, date, str]


@dataclass(frozen=True)
class ControversyEvent:
    """One dated incident in a certifying body's timeline."""
    score_impact: float
    occurred_at: Timestamp
    is_active: bool = True
    certifier_id: Optional[str] = None
    id: Optional[str] = None
    event_type: Optional[str] = None     # "controversy" | "separation" | "improvement"
    severity: Optional[str] = None       # "critical" | "major" | "minor" | "positive"
    title: Optional[str] = None
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    resolved_at: Optional[str] = None
    resolution_status: Optional[str] = None


def parse_timestamp(value: Timestamp, field: str = "occurred_at") -> datetime:
    """
    Coerce a stored timestamp to an aware UTC datetime.

    Accepts datetime, date, or ISO-8601 strings ("2015-03-01",
    "2015-03-01T10:00:00Z"). Naive values are taken as UTC.

    Raises:
        DataIntegrityError: the value cannot be read as a timestamp.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise DataIntegrityError(
                f"Malformed timestamp for {field}: {value!r}",
                field=field, value=value,
            ) from None
    else:
        raise DataIntegrityError(
            f"Unsupported timestamp type for {field}: {type(value).__name__}",
            field=field, value=value,
        )

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def decay_factor(elapsed_years: float, half_life_years: float = HALF_LIFE_YEARS) -> float:
    """e^(−λt) with λ = ln 2 / half_life."""
    lam = math.log(2) / half_life_years
    return math.exp(-lam * elapsed_years)


def elapsed_years(occurred_at: Timestamp, now: Timestamp) -> float:
    """Years between two instants. Events dated after `now` count as t = 0."""
    start = parse_timestamp(occurred_at)
    end = parse_timestamp(now, field="now")
    seconds = (end - start).total_seconds()
    return max(0.0, seconds / SECONDS_PER_YEAR)


def decayed_penalty(
    events: Iterable[ControversyEvent],
    now: Timestamp,
    half_life_years: float = HALF_LIFE_YEARS,
) -> float:
    """
    Sum the time-decayed impact of every active event.

    Args:
        events: The body's controversy timeline.
        now: The single evaluation instant.
        half_life_years: Years for an impact to halve.

    Returns:
        The unclamped penalty (≤ 0 for a timeline of failures).
    """
    if half_life_years <= 0:
        raise ValueError("half_life_years must be positive")

    penalty = 0.0
    for event in events:
        if not event.is_active:
            continue
        t = elapsed_years(event.occurred_at, now)
        penalty += event.score_impact * decay_factor(t, half_life_years)
    return penalty


def clamp_penalty(penalty: float, floor: float = PENALTY_FLOOR) -> float:
    """Explicit caller-side clamp into [floor, 0]."""
    return max(floor, min(0.0, penalty))
