"""
API Integration Tests — Endpoint Verification

Tests every public API endpoint using FastAPI's TestClient against a
temporary, seeded and materialized certifier store.

These tests catch:
  - Schema mismatches (response model vs actual data)
  - Route registration issues
  - Middleware/dependency injection bugs
  - Response format regressions
"""

from __future__ import annotations

import os
import tempfile

import pytest
from fastapi.testclient import TestClient


# --- Fixtures ---

@pytest.fixture(scope="module")
def store():
    from naqiy.materializer import materialize_scores
    from naqiy.seeds import seed_store
    from naqiy.store import CertifierStore

    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    s = CertifierStore(db_path=path)
    seed_store(s)
    materialize_scores(s, now="2025-01-01T00:00:00Z", base_delay=0)
    yield s
    os.unlink(path)


@pytest.fixture(scope="module")
def client(store):
    """Create a test client for the Naqiy API."""
    from api.main import app, get_store
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ============================================================
# HEALTH & META
# ============================================================

class TestHealth:
    """Verify /health returns correct structure."""

    def test_health_returns_200(self, client):
        r = client.get("/health")
        assert r.status_code == 200

    def test_health_fields(self, client):
        data = client.get("/health").json()
        assert data["status"] == "operational"
        assert data["rule_set_version"] == "2024.2"
        assert data["rules_loaded"] > 0
        assert data["certifiers"] == 5

    def test_version_headers(self, client):
        r = client.get("/health")
        assert "X-Naqiy-Version" in r.headers
        assert "X-Engine-Version" in r.headers


# ============================================================
# CERTIFIERS
# ============================================================

class TestCertifiers:
    """Ranked listings and single-body detail."""

    def test_list_general(self, client):
        data = client.get("/certifiers").json()
        assert data["scope"] == "general"
        assert data["total"] == 5
        scores = [c["score"] for c in data["certifiers"]]
        assert scores == sorted(scores, reverse=True)
        assert [c["rank"] for c in data["certifiers"]] == [1, 2, 3, 4, 5]

    def test_list_by_scope(self, client):
        data = client.get("/certifiers", params={"scope": "hanafi"}).json()
        assert data["scope"] == "hanafi"
        for c in data["certifiers"]:
            assert c["score"] == c["scores"]["trust_score_hanafi"]

    def test_invalid_scope_rejected(self, client):
        r = client.get("/certifiers", params={"scope": "zahiri"})
        assert r.status_code == 422

    def test_detail(self, client):
        r = client.get("/certifiers/sfcvh-mosquee-de-paris")
        assert r.status_code == 200
        data = r.json()
        assert data["practices"]["accepts_stunning"] is True
        assert data["controversy_penalty"] < 0
        assert data["events"]
        assert all(e["is_active"] for e in data["events"])

    def test_detail_hides_inactive_events(self, client):
        data = client.get("/certifiers/avs-a-votre-service").json()
        assert "avs-isla-delice-2010" not in [e["id"] for e in data["events"]]

    def test_unknown_certifier_404(self, client):
        r = client.get("/certifiers/does-not-exist")
        assert r.status_code == 404


# ============================================================
# RULINGS
# ============================================================

class TestRulings:
    """Rule set listing and single-ingredient resolution."""

    def test_list(self, client):
        data = client.get("/rulings").json()
        assert data["version"] == "2024.2"
        assert data["total"] == len(data["rules"])
        vinegar = next(r for r in data["rules"] if r["id"] == "vinegar-wine-fr")
        assert "wine-fr" in vinegar["overrides"]

    def test_resolve_match(self, client):
        r = client.post("/rulings/resolve", json={"text": "vinaigre de vin", "scope": "hanafi"})
        assert r.status_code == 200
        data = r.json()
        assert data["matched"] is True
        assert data["ruling"] == "halal"
        assert data["rule_id"] == "vinegar-wine-fr"
        assert data["rule_set_version"] == "2024.2"

    def test_resolve_language(self, client):
        data = client.post(
            "/rulings/resolve", json={"text": "lard", "language": "en"},
        ).json()
        assert data["explanation"].startswith("Pork")

    def test_language_defaults_to_setting(self, client):
        from naqiy.config import settings
        from naqiy.schemas.api import AssessRequest, ResolveRequest
        assert ResolveRequest(text="lard").language == settings.DEFAULT_LANGUAGE
        assert AssessRequest(ingredients_text="lard").language == settings.DEFAULT_LANGUAGE

    def test_resolve_synonym_via_normalizer(self, client):
        data = client.post("/rulings/resolve", json={"text": "Schweinefett"}).json()
        assert data["ruling"] == "haram"

    def test_resolve_without_normalizer(self, client):
        data = client.post(
            "/rulings/resolve", json={"text": "Schweinefett", "normalize": False},
        ).json()
        assert data["matched"] is False

    def test_resolve_no_match(self, client):
        data = client.post("/rulings/resolve", json={"text": "eau"}).json()
        assert data["matched"] is False
        assert data["ruling"] is None

    def test_resolve_empty_rejected(self, client):
        r = client.post("/rulings/resolve", json={"text": ""})
        assert r.status_code == 422


# ============================================================
# ADDITIVES
# ============================================================

class TestAdditives:
    """E-number lookup per scope."""

    def test_school_ruling(self, client):
        r = client.get("/additives/E441", params={"scope": "hanafi"})
        assert r.status_code == 200
        data = r.json()
        assert data["ruling"] == "doubtful"
        assert data["ruling_default"] == "haram"
        assert data["school_specific"] is True

    def test_falls_back_to_default(self, client):
        data = client.get("/additives/e904", params={"scope": "maliki"}).json()
        assert data["ruling"] == "doubtful"
        assert data["school_specific"] is False

    def test_sub_variant_resolves_to_parent(self, client):
        assert client.get("/additives/en:e322i").json()["code"] == "E322"

    def test_unknown_code(self, client):
        assert client.get("/additives/E999").status_code == 404

    def test_invalid_scope(self, client):
        assert client.get("/additives/E100", params={"scope": "zahiri"}).status_code == 422


# ============================================================
# ALLERGENS
# ============================================================

class TestAllergens:

    def test_match(self, client):
        data = client.post("/allergens/match", json={
            "user_allergens": ["Lait", "ARACHIDES"],
            "allergen_tags": ["en:milk", "en:peanuts"],
        }).json()
        assert data["total"] == 2
        assert {m["match_class"] for m in data["matches"]} == {"direct"}

    def test_empty(self, client):
        data = client.post("/allergens/match", json={}).json()
        assert data == {"matches": [], "total": 0}


# ============================================================
# ASSESS
# ============================================================

class TestAssess:

    def test_assess(self, client):
        r = client.post("/assess", json={
            "ingredients_text": "sucre, gélatine porcine, lait",
            "user_allergens": ["lait"],
            "allergen_tags": ["en:milk"],
        })
        assert r.status_code == 200
        data = r.json()
        assert data["verdict"]["status"] == "haram"
        assert len(data["ingredients"]) == 3
        assert data["allergens"][0]["canonical_tag"] == "en:milk"

    def test_assess_with_certifier(self, client):
        data = client.post("/assess", json={
            "ingredients_text": "vinaigre",
            "certifier_id": "avs-a-votre-service",
        }).json()
        certifier = data["verdict"]["certifier"]
        assert certifier["trust_score"] > 50
        assert data["verdict"]["status"] == "halal"

    def test_live_certifier_score_matches_materialized(self, client, store):
        client.post("/materialize")
        data = client.post("/assess", json={
            "ingredients_text": "vinaigre",
            "certifier_id": "avs-a-votre-service",
        }).json()
        stored = store.get_scores("avs-a-votre-service")
        certifier = data["verdict"]["certifier"]
        assert certifier["trust_score"] == stored["trust_score"]
        assert certifier["trust_score_hanafi"] == stored["trust_score_hanafi"]

    def test_assess_unaccented_label(self, client):
        data = client.post("/assess", json={
            "ingredients_text": "Sucre, LACTOSERUM en poudre, PRESURE",
            "scope": "shafii",
        }).json()
        assert data["verdict"]["status"] == "haram"
        assert data["verdict"]["matched_count"] == 2

    def test_assess_unknown_certifier(self, client):
        r = client.post("/assess", json={
            "ingredients_text": "vinaigre", "certifier_id": "ghost",
        })
        assert r.status_code == 404

    def test_assess_penalize(self, client):
        data = client.post("/assess", json={
            "ingredients_text": "eau, gélatine",
            "unmatched_policy": "penalize",
        }).json()
        assert data["verdict"]["confidence"] == pytest.approx(0.3)

    def test_assess_bad_policy(self, client):
        r = client.post("/assess", json={
            "ingredients_text": "eau", "unmatched_policy": "ignore",
        })
        assert r.status_code == 422


# ============================================================
# MATERIALIZE
# ============================================================

class TestMaterialize:

    def test_materialize_fixed_instant(self, client):
        r = client.post("/materialize", json={"now": "2025-01-01T00:00:00Z"})
        assert r.status_code == 200
        data = r.json()
        assert data["processed"] == 5
        assert data["failed"] == 0
        assert data["evaluated_at"].startswith("2025-01-01T00:00:00")

    def test_materialize_clears_cache(self, client):
        client.get("/certifiers")
        data = client.post("/materialize", json={"now": "2025-01-01T00:00:00Z"}).json()
        assert data["cache_entries_cleared"] >= 1

    def test_materialize_without_body(self, client):
        r = client.post("/materialize")
        assert r.status_code == 200
        assert r.json()["updated"] == 5

    def test_idempotent_through_api(self, client):
        client.post("/materialize", json={"now": "2025-01-01T00:00:00Z"})
        first = client.get("/certifiers").json()
        client.post("/materialize", json={"now": "2025-01-01T00:00:00Z"})
        second = client.get("/certifiers").json()
        assert first == second


# ============================================================
# BLOCKING WORK
# ============================================================

class TestBlockingWork:
    """SQLite work must not run on the event loop."""

    def test_store_routes_are_sync(self):
        import inspect
        from api.main import assess, get_certifier, get_store, health
        for fn in (assess, get_certifier, get_store, health):
            assert not inspect.iscoroutinefunction(fn), fn.__name__

    def test_first_use_seeds_once(self, monkeypatch):
        import threading
        import api.main as main
        from naqiy.config import Settings

        fd, path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        monkeypatch.setattr(main, "settings", Settings(DB_PATH=path, SEED_ON_STARTUP=True))
        monkeypatch.setattr(main, "_store", None)

        stores = []
        threads = [threading.Thread(target=lambda: stores.append(main.get_store())) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(s) for s in stores}) == 1
        assert stores[0].count() == 5
        os.unlink(path)
