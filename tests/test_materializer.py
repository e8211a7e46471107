"""
Tests for the certifier store, per-body scoring and the batch materializer.

Each test gets its own temporary SQLite file.
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
from datetime import datetime, timezone

import pytest

from naqiy.controversy import ControversyEvent
from naqiy.errors import DataIntegrityError
from naqiy.trust_score import CertifierIndicators, CertifyingBodyProfile

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def db_path():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    os.unlink(path)


@pytest.fixture
def store(db_path):
    from naqiy.store import CertifierStore
    return CertifierStore(db_path=db_path)


@pytest.fixture
def seeded(store):
    from naqiy.seeds import seed_store
    seed_store(store)
    return store


class TestCertifierStore:

    def test_empty(self, store):
        assert store.count() == 0
        assert store.list_profiles() == []
        assert store.get_certifier("nope") is None

    def test_profile_round_trip(self, store):
        profile = CertifyingBodyProfile(
            id="x", name="X",
            indicators=CertifierIndicators.from_mapping({
                "controllers_are_employees": True, "accepts_vsm": False,
            }),
            creation_year=2001,
            halal_assessment=None,
        )
        store.upsert_certifier(profile)
        loaded = store.get_profile("x")
        assert loaded == profile

    def test_upsert_updates(self, store):
        store.upsert_certifier(CertifyingBodyProfile(id="x", name="Old"))
        store.upsert_certifier(CertifyingBodyProfile(id="x", name="New"))
        assert store.count() == 1
        assert store.get_profile("x").name == "New"

    def test_inactive_profiles_hidden(self, store):
        store.upsert_certifier(CertifyingBodyProfile(id="a", name="A"))
        store.upsert_certifier(CertifyingBodyProfile(id="b", name="B", is_active=False))
        assert [p.id for p in store.list_profiles()] == ["a"]
        assert len(store.list_profiles(active_only=False)) == 2

    def test_events(self, store):
        store.upsert_certifier(CertifyingBodyProfile(id="a", name="A"))
        store.add_event(ControversyEvent(
            certifier_id="a", id="e1", score_impact=-5, occurred_at="2020-01-01",
        ))
        store.add_event(ControversyEvent(
            certifier_id="a", id="e2", score_impact=-3, occurred_at="2021-01-01",
            is_active=False,
        ))
        assert [e.id for e in store.list_events("a")] == ["e2", "e1"]
        assert [e.id for e in store.list_events("a", active_only=True)] == ["e1"]
        assert list(store.events_by_certifier()) == ["a"]

    def test_event_requires_certifier(self, store):
        with pytest.raises(ValueError):
            store.add_event(ControversyEvent(score_impact=-1, occurred_at="2020-01-01"))

    def test_write_scores_unknown_body(self, store):
        from naqiy.trust_score import default_calculator
        result = default_calculator.calculate(CertifierIndicators(), 0.0, NOW)
        assert store.write_scores("ghost", result) is False

    def test_seed(self, seeded):
        assert seeded.count() == 5
        assert seeded.get_profile("avs-a-votre-service").indicators.controllers_are_employees.value == "true"


class TestScoreCertifier:

    def test_penalty_clamped(self):
        from naqiy.certifiers import score_certifier
        profile = CertifyingBodyProfile(id="x", name="X")
        events = [
            ControversyEvent(score_impact=-80, occurred_at=NOW),
            ControversyEvent(score_impact=-80, occurred_at=NOW),
        ]
        result = score_certifier(profile, events, now=NOW)
        assert result.controversy_penalty_applied == -50.0
        assert result.evaluated_at == NOW

    def test_string_now(self):
        from naqiy.certifiers import score_certifier
        result = score_certifier(CertifyingBodyProfile(id="x", name="X"), [], now="2025-01-01")
        assert result.evaluated_at == NOW

    def test_malformed_event_propagates(self):
        from naqiy.certifiers import score_certifier
        events = [ControversyEvent(score_impact=-1, occurred_at="not-a-date")]
        with pytest.raises(DataIntegrityError):
            score_certifier(CertifyingBodyProfile(id="x", name="X"), events, now=NOW)

    def test_defaults_follow_settings(self):
        import inspect
        from naqiy.certifiers import score_certifier
        from naqiy.config import settings
        params = inspect.signature(score_certifier).parameters
        assert params["penalty_floor"].default == settings.PENALTY_FLOOR
        assert params["half_life_years"].default == settings.HALF_LIFE_YEARS

    def test_rank_by_scope(self):
        from naqiy.certifiers import rank_certifiers
        rows = [
            {"name": "B", "scores": {"trust_score": 60, "trust_score_hanafi": 90}},
            {"name": "A", "scores": {"trust_score": 80, "trust_score_hanafi": 40}},
            {"name": "C", "scores": {"trust_score": None, "trust_score_hanafi": None}},
        ]
        assert [r["name"] for r in rank_certifiers(rows)] == ["A", "B", "C"]
        hanafi = rank_certifiers(rows, "hanafi")
        assert [r["name"] for r in hanafi] == ["B", "A", "C"]
        assert hanafi[0]["rank"] == 1
        assert hanafi[0]["score"] == 90
        assert hanafi[0]["scope"] == "hanafi"

    def test_rank_ties_on_name(self):
        from naqiy.certifiers import rank_certifiers
        rows = [
            {"name": "Zed", "scores": {"trust_score": 50}},
            {"name": "Abe", "scores": {"trust_score": 50}},
        ]
        assert [r["name"] for r in rank_certifiers(rows)] == ["Abe", "Zed"]


class TestMaterializer:

    def test_scores_every_body(self, seeded):
        from naqiy.materializer import materialize_scores
        report = materialize_scores(seeded, now=NOW, base_delay=0)
        assert report.ok
        assert report.processed == 5
        assert report.updated == 5
        assert report.evaluated_at == NOW
        for row in seeded.list_scored():
            assert row["scores_evaluated_at"] == NOW.isoformat()
            assert all(0 <= v <= 100 for v in row["scores"].values())

    def test_idempotent(self, seeded):
        from naqiy.materializer import materialize_scores
        materialize_scores(seeded, now=NOW, base_delay=0)
        first = {r["id"]: (r["scores"], r["controversy_penalty"]) for r in seeded.list_scored()}
        materialize_scores(seeded, now=NOW, base_delay=0)
        second = {r["id"]: (r["scores"], r["controversy_penalty"]) for r in seeded.list_scored()}
        assert first == second

    def test_practices_drive_order(self, seeded):
        from naqiy.materializer import materialize_scores
        materialize_scores(seeded, now=NOW, base_delay=0)
        avs = seeded.get_scores("avs-a-votre-service")
        sfcvh = seeded.get_scores("sfcvh-mosquee-de-paris")
        assert avs["trust_score"] > sfcvh["trust_score"]
        # SFCVH carries active penalties, AVS only an inactive one
        assert sfcvh["controversy_penalty"] < 0
        assert avs["controversy_penalty"] == 0

    def test_inactive_body_skipped(self, seeded):
        from naqiy.materializer import materialize_scores
        seeded.upsert_certifier(CertifyingBodyProfile(id="gone", name="Gone", is_active=False))
        report = materialize_scores(seeded, now=NOW, base_delay=0)
        assert report.processed == 5
        assert seeded.get_scores("gone")["trust_score"] is None

    def test_failure_isolated(self, db_path):
        from naqiy.materializer import materialize_scores
        from naqiy.seeds import seed_store
        from naqiy.store import CertifierStore

        class FlakyStore(CertifierStore):
            def write_scores(self, certifier_id, result):
                if certifier_id == "achahada":
                    raise RuntimeError("disk on fire")
                return super().write_scores(certifier_id, result)

        store = FlakyStore(db_path=db_path)
        seed_store(store)
        report = materialize_scores(store, now=NOW, base_delay=0)

        assert not report.ok
        assert report.failed == 1
        assert report.updated == 4
        assert report.errors == [{
            "certifier_id": "achahada",
            "error_type": "RuntimeError",
            "error": "disk on fire",
        }]
        assert store.get_scores("achahada")["trust_score"] is None
        assert store.get_scores("afcai")["trust_score"] is not None

    def test_bad_event_isolated(self, seeded):
        from naqiy.materializer import materialize_scores
        seeded.add_event(ControversyEvent(
            certifier_id="afcai", id="broken", score_impact=-3, occurred_at="sometime",
        ))
        report = materialize_scores(seeded, now=NOW, base_delay=0)
        assert report.failed == 1
        assert report.errors[0]["certifier_id"] == "afcai"
        assert report.errors[0]["error_type"] == "DataIntegrityError"
        assert report.updated == 4

    def test_transient_error_retried(self, db_path):
        from naqiy.materializer import materialize_scores
        from naqiy.seeds import seed_store
        from naqiy.store import CertifierStore

        calls = {"n": 0}

        class LockedOnceStore(CertifierStore):
            def write_scores(self, certifier_id, result):
                if certifier_id == "afcai" and calls["n"] == 0:
                    calls["n"] += 1
                    raise sqlite3.OperationalError("database is locked")
                return super().write_scores(certifier_id, result)

        store = LockedOnceStore(db_path=db_path)
        seed_store(store)
        report = materialize_scores(store, now=NOW, max_retries=3, base_delay=0)
        assert report.ok
        assert report.updated == 5
        assert calls["n"] == 1

    def test_retries_exhausted(self, db_path):
        from naqiy.materializer import materialize_scores
        from naqiy.store import CertifierStore

        class AlwaysLocked(CertifierStore):
            attempts = 0

            def write_scores(self, certifier_id, result):
                AlwaysLocked.attempts += 1
                raise sqlite3.OperationalError("database is locked")

        store = AlwaysLocked(db_path=db_path)
        store.upsert_certifier(CertifyingBodyProfile(id="x", name="X"))
        report = materialize_scores(store, now=NOW, max_retries=3, base_delay=0)
        assert report.failed == 1
        assert report.errors[0]["error_type"] == "OperationalError"
        assert AlwaysLocked.attempts == 3

    def test_malformed_now_raises(self, seeded):
        from naqiy.materializer import materialize_scores
        with pytest.raises(DataIntegrityError):
            materialize_scores(seeded, now="yesterday-ish")

    def test_report_to_dict(self, seeded):
        from naqiy.materializer import materialize_scores
        out = materialize_scores(seeded, now=NOW, base_delay=0).to_dict()
        assert out["evaluated_at"] == NOW.isoformat()
        assert out["processed"] == 5
        assert out["errors"] == []


class TestCli:

    def test_json_output(self, db_path, monkeypatch, capsys):
        import json
        import run_materialize

        monkeypatch.setattr("sys.argv", [
            "run_materialize.py", "--db", db_path, "--seed",
            "--now", "2025-01-01", "--json",
        ])
        with pytest.raises(SystemExit) as exc_info:
            run_materialize.main()
        assert exc_info.value.code == 0
        out = json.loads(capsys.readouterr().out)
        assert out["processed"] == 5
        assert out["evaluated_at"] == NOW.isoformat()

    def test_bad_now_exits_2(self, db_path, monkeypatch, capsys):
        import run_materialize

        monkeypatch.setattr("sys.argv", [
            "run_materialize.py", "--db", db_path, "--now", "soon", "--json",
        ])
        with pytest.raises(SystemExit) as exc_info:
            run_materialize.main()
        assert exc_info.value.code == 2

    def test_table_report(self, seeded):
        from naqiy.materializer import materialize_scores
        from run_materialize import format_report

        report = materialize_scores(seeded, now=NOW, base_delay=0)
        text = format_report(report, seeded)
        assert "NAQIY TRUST SCORE MATERIALIZATION" in text
        assert "AVS (A Votre Service)" in text
