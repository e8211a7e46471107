"""
Certifier Store — SQLite Persistence

Holds certifying-body profiles, their controversy timelines, and the
materialized trust scores the read endpoints serve.

The evaluators never touch this module. Only the materializer, the
seed loader and the API do.

Writes are serialized with a threading lock. Each operation opens its
own short-lived connection.
"""

import sqlite3
import threading
from datetime import datetime, timezone
from typing import Iterable, Optional

from naqiy.controversy import ControversyEvent
from naqiy.trust_score import (
    INDICATOR_NAMES,
    CertifierIndicators,
    CertifyingBodyProfile,
    Indicator,
    TrustScoreResult,
)

SCORE_COLUMNS = (
    "trust_score",
    "trust_score_hanafi",
    "trust_score_shafii",
    "trust_score_maliki",
    "trust_score_hanbali",
)

_EVENT_COLUMNS = (
    "id", "certifier_id", "event_type", "severity", "title", "score_impact",
    "occurred_at", "is_active", "source_name", "source_url", "resolved_at",
    "resolution_status",
)


def _to_db_bool(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(bool(value))


def _from_db_bool(value: Optional[int]) -> Optional[bool]:
    return None if value is None else bool(value)


def _to_db_timestamp(value) -> str:
    # Strings are stored as given and validated when decayed
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


class CertifierStore:
    """Certifying bodies, their events and their materialized scores."""

    def __init__(self, db_path: str = "naqiy.db"):
        self.db_path = db_path
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        indicator_cols = ",\n".join(f"{name} INTEGER" for name in INDICATOR_NAMES)
        score_cols = ",\n".join(f"{name} INTEGER" for name in SCORE_COLUMNS)
        with self._get_conn() as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS certifiers (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    website TEXT,
                    creation_year INTEGER,
                    {indicator_cols},
                    halal_assessment INTEGER,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    notes TEXT,
                    {score_cols},
                    controversy_penalty REAL,
                    scores_evaluated_at TEXT,
                    updated_at TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS certifier_events (
                    id TEXT PRIMARY KEY,
                    certifier_id TEXT NOT NULL REFERENCES certifiers(id),
                    event_type TEXT,
                    severity TEXT,
                    title TEXT,
                    score_impact REAL NOT NULL,
                    occurred_at TEXT NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    source_name TEXT,
                    source_url TEXT,
                    resolved_at TEXT,
                    resolution_status TEXT
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_certifier
                ON certifier_events(certifier_id)
            """)
            conn.commit()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # --- Writes ---

    def upsert_certifier(self, profile: CertifyingBodyProfile) -> None:
        indicators = profile.indicators.to_dict()
        columns = (
            ["id", "name", "website", "creation_year"]
            + list(INDICATOR_NAMES)
            + ["halal_assessment", "is_active", "notes", "updated_at"]
        )
        values = (
            [profile.id, profile.name, profile.website, profile.creation_year]
            + [_to_db_bool(indicators[n]) for n in INDICATOR_NAMES]
            + [
                _to_db_bool(profile.halal_assessment),
                int(profile.is_active),
                profile.notes,
                datetime.now(timezone.utc).isoformat(),
            ]
        )
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns[1:])
        with self._lock:
            with self._get_conn() as conn:
                conn.execute(
                    f"""INSERT INTO certifiers ({', '.join(columns)})
                        VALUES ({', '.join('?' for _ in columns)})
                        ON CONFLICT(id) DO UPDATE SET {updates}""",
                    values,
                )
                conn.commit()

    def add_event(self, event: ControversyEvent) -> None:
        if not event.certifier_id:
            raise ValueError("Controversy event needs a certifier_id")
        event_id = event.id or f"{event.certifier_id}:{_to_db_timestamp(event.occurred_at)}:{event.title or ''}"
        row = (
            event_id, event.certifier_id, event.event_type, event.severity,
            event.title, event.score_impact, _to_db_timestamp(event.occurred_at),
            int(event.is_active), event.source_name, event.source_url,
            event.resolved_at, event.resolution_status,
        )
        with self._lock:
            with self._get_conn() as conn:
                conn.execute(
                    f"""INSERT OR REPLACE INTO certifier_events ({', '.join(_EVENT_COLUMNS)})
                        VALUES ({', '.join('?' for _ in _EVENT_COLUMNS)})""",
                    row,
                )
                conn.commit()

    def write_scores(self, certifier_id: str, result: TrustScoreResult) -> bool:
        """Persist one body's scores. Returns False if the body is unknown."""
        evaluated_at = result.evaluated_at.isoformat() if result.evaluated_at else None
        with self._lock:
            with self._get_conn() as conn:
                cursor = conn.execute(
                    f"""UPDATE certifiers SET
                            {', '.join(f'{c} = ?' for c in SCORE_COLUMNS)},
                            controversy_penalty = ?,
                            scores_evaluated_at = ?
                        WHERE id = ?""",
                    (
                        result.trust_score,
                        result.trust_score_hanafi,
                        result.trust_score_shafii,
                        result.trust_score_maliki,
                        result.trust_score_hanbali,
                        result.controversy_penalty_applied,
                        evaluated_at,
                        certifier_id,
                    ),
                )
                conn.commit()
                return cursor.rowcount > 0

    # --- Reads ---

    @staticmethod
    def _row_to_profile(row: sqlite3.Row) -> CertifyingBodyProfile:
        return CertifyingBodyProfile(
            id=row["id"],
            name=row["name"],
            indicators=CertifierIndicators(**{
                n: Indicator.from_value(_from_db_bool(row[n])) for n in INDICATOR_NAMES
            }),
            website=row["website"],
            creation_year=row["creation_year"],
            halal_assessment=_from_db_bool(row["halal_assessment"]),
            is_active=bool(row["is_active"]),
            notes=row["notes"],
        )

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> ControversyEvent:
        return ControversyEvent(
            id=row["id"],
            certifier_id=row["certifier_id"],
            event_type=row["event_type"],
            severity=row["severity"],
            title=row["title"],
            score_impact=row["score_impact"],
            occurred_at=row["occurred_at"],
            is_active=bool(row["is_active"]),
            source_name=row["source_name"],
            source_url=row["source_url"],
            resolved_at=row["resolved_at"],
            resolution_status=row["resolution_status"],
        )

    def list_profiles(self, active_only: bool = True) -> list[CertifyingBodyProfile]:
        query = "SELECT * FROM certifiers"
        if active_only:
            query += " WHERE is_active = 1"
        with self._get_conn() as conn:
            rows = conn.execute(query + " ORDER BY id").fetchall()
        return [self._row_to_profile(r) for r in rows]

    def events_by_certifier(self) -> dict[str, list[ControversyEvent]]:
        """Every event in one pass, grouped by certifier id."""
        with self._get_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM certifier_events ORDER BY certifier_id, occurred_at"
            ).fetchall()
        grouped: dict[str, list[ControversyEvent]] = {}
        for r in rows:
            grouped.setdefault(r["certifier_id"], []).append(self._row_to_event(r))
        return grouped

    def list_events(self, certifier_id: str, active_only: bool = False) -> list[ControversyEvent]:
        query = "SELECT * FROM certifier_events WHERE certifier_id = ?"
        if active_only:
            query += " AND is_active = 1"
        with self._get_conn() as conn:
            rows = conn.execute(query + " ORDER BY occurred_at DESC", (certifier_id,)).fetchall()
        return [self._row_to_event(r) for r in rows]

    def get_profile(self, certifier_id: str) -> Optional[CertifyingBodyProfile]:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM certifiers WHERE id = ?", (certifier_id,),
            ).fetchone()
        return self._row_to_profile(row) if row else None

    def get_scores(self, certifier_id: str) -> Optional[dict]:
        with self._get_conn() as conn:
            row = conn.execute(
                f"""SELECT {', '.join(SCORE_COLUMNS)}, controversy_penalty, scores_evaluated_at
                    FROM certifiers WHERE id = ?""",
                (certifier_id,),
            ).fetchone()
        return dict(row) if row else None

    def get_certifier(self, certifier_id: str) -> Optional[dict]:
        """One body: identity, practices and materialized scores."""
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM certifiers WHERE id = ?", (certifier_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    def list_scored(self, active_only: bool = True) -> list[dict]:
        query = "SELECT * FROM certifiers"
        if active_only:
            query += " WHERE is_active = 1"
        with self._get_conn() as conn:
            rows = conn.execute(query).fetchall()
        return [self._row_to_dict(r) for r in rows]

    def _row_to_dict(self, row: sqlite3.Row) -> dict:
        profile = self._row_to_profile(row)
        return {
            "id": profile.id,
            "name": profile.name,
            "website": profile.website,
            "creation_year": profile.creation_year,
            "practices": profile.indicators.to_dict(),
            "halal_assessment": profile.halal_assessment,
            "is_active": profile.is_active,
            "notes": profile.notes,
            "scores": {c: row[c] for c in SCORE_COLUMNS},
            "controversy_penalty": row["controversy_penalty"],
            "scores_evaluated_at": row["scores_evaluated_at"],
        }

    def count(self) -> int:
        with self._get_conn() as conn:
            row = conn.execute("SELECT COUNT(*) FROM certifiers").fetchone()
            return row[0] if row else 0

    def load(
        self,
        profiles: Iterable[CertifyingBodyProfile],
        events: Iterable[ControversyEvent] = (),
    ) -> int:
        """Bulk upsert, used by seeding. Returns the number of profiles written."""
        n = 0
        for profile in profiles:
            self.upsert_certifier(profile)
            n += 1
        for event in events:
            self.add_event(event)
        return n
