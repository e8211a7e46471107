"""
Trust Score Materializer

Batch driver that recomputes and persists every certifying body's
scores:

  1. read-all     profiles + events, one pass each
  2. compute-all  one captured `now` for the whole run
  3. write-all    per body, retried on transient store errors

Not transactional across bodies. A body that fails is recorded in the
report and the run moves on; partial progress is safe because the
computation is deterministic and the run can simply be repeated.
"""

from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from naqiy.certifiers import score_certifier
from naqiy.config import settings
from naqiy.controversy import Timestamp, parse_timestamp
from naqiy.logging import EngineLogger, get_logger
from naqiy.store import CertifierStore
from naqiy.trust_score import TrustScoreCalculator, TrustScoreResult, default_calculator

logger = get_logger("materializer")

# Store errors worth a retry (locked database, busy file)
TRANSIENT_ERRORS = (sqlite3.OperationalError,)


@dataclass
class MaterializeReport:
    processed: int = 0
    updated: int = 0
    failed: int = 0
    errors: list[dict] = field(default_factory=list)
    evaluated_at: Optional[datetime] = None
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "updated": self.updated,
            "failed": self.failed,
            "errors": list(self.errors),
            "evaluated_at": self.evaluated_at.isoformat() if self.evaluated_at else None,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


def _write_with_retry(
    store: CertifierStore,
    certifier_id: str,
    result: TrustScoreResult,
    max_retries: int,
    base_delay: float,
    log: EngineLogger = logger,
) -> bool:
    last_error: Optional[Exception] = None
    for attempt in range(max_retries):
        try:
            return store.write_scores(certifier_id, result)
        except TRANSIENT_ERRORS as e:
            last_error = e
            log.warning(
                "Transient store error, retrying",
                extra={"attempt": attempt + 1, "error": str(e)},
            )
            if attempt < max_retries - 1:
                time.sleep(base_delay * (2 ** attempt))
    raise last_error  # type: ignore[misc]


def materialize_scores(
    store: CertifierStore,
    calculator: TrustScoreCalculator = default_calculator,
    now: Optional[Timestamp] = None,
    max_retries: int = settings.MATERIALIZE_MAX_RETRIES,
    penalty_floor: float = settings.PENALTY_FLOOR,
    half_life_years: float = settings.HALF_LIFE_YEARS,
    base_delay: float = 0.5,
) -> MaterializeReport:
    """
    Recompute and persist scores for every active certifying body.

    Args:
        store: Certifier store to read from and write to.
        calculator: Trust score calculator (default tables if omitted).
        now: Evaluation instant. Captured once if omitted.
        max_retries: Write attempts per body on transient errors.

    Returns:
        MaterializeReport with per-body failures listed in `errors`.
    """
    started = time.monotonic()
    instant = parse_timestamp(now if now is not None else datetime.now(timezone.utc), field="now")
    report = MaterializeReport(evaluated_at=instant)
    run_log = logger.bind(evaluated_at=instant.isoformat())

    profiles = store.list_profiles(active_only=True)
    events = store.events_by_certifier()

    for profile in profiles:
        report.processed += 1
        body_log = run_log.bind(certifier_id=profile.id)
        try:
            result = score_certifier(
                profile,
                events.get(profile.id, []),
                now=instant,
                calculator=calculator,
                penalty_floor=penalty_floor,
                half_life_years=half_life_years,
            )
            if _write_with_retry(store, profile.id, result, max(1, max_retries), base_delay, body_log):
                report.updated += 1
            body_log.info(
                "Certifier scored",
                extra={"trust_score": result.trust_score,
                       "controversy_penalty": round(result.controversy_penalty_applied, 4)},
            )
        except Exception as e:
            report.failed += 1
            report.errors.append({
                "certifier_id": profile.id,
                "error_type": type(e).__name__,
                "error": str(e),
            })
            body_log.error(
                "Certifier materialization failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )

    report.elapsed_seconds = time.monotonic() - started
    run_log.info(
        "Materialization complete",
        extra={"processed": report.processed, "updated": report.updated,
               "failed": report.failed,
               "duration_ms": round(report.elapsed_seconds * 1000, 1)},
    )
    return report
