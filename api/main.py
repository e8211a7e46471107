"""
Naqiy API — Main Application

GET  /health            — Health check
GET  /certifiers        — Certifying bodies ranked by scope score
GET  /certifiers/{id}   — One body: scores, practices, active events
GET  /rulings           — Active ingredient rule set
POST /rulings/resolve   — Ruling for one ingredient
GET  /additives/{code}  — E-number ruling for a scope
POST /allergens/match   — User allergens vs product tags
POST /assess            — Scan-result composition
POST /materialize       — Recompute and persist certifier scores
"""

from __future__ import annotations

import asyncio
import threading
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from naqiy import __version__
from naqiy.assessor import Assessor, StrictestRulingStrategy, UnmatchedPolicy
from naqiy.allergens import match_allergens
from naqiy.cache import score_cache
from naqiy.certifiers import rank_certifiers, score_certifier
from naqiy.config import settings
from naqiy.errors import ConfigurationError, DataIntegrityError
from naqiy.logging import setup_logging, get_logger
from naqiy.materializer import materialize_scores
from naqiy.normalizer import normalize_ingredient_text
from naqiy.rulings import IngredientRulingResolver
from naqiy.schemas.api import (
    AllergenMatchRequest,
    AllergenMatchResponse,
    AdditiveResponse,
    AssessRequest,
    AssessResponse,
    CertifierDetailResponse,
    CertifierListResponse,
    HealthResponse,
    MaterializeRequest,
    MaterializeResponse,
    ResolveRequest,
    RuleListResponse,
    RulingMatchResponse,
    SCOPE_PATTERN,
)
from naqiy.seeds import default_additive_table, default_rule_set, seed_store
from naqiy.store import CertifierStore

logger = get_logger("api")


# ============================================================
# DEPENDENCIES
# ============================================================

_store: Optional[CertifierStore] = None
_store_lock = threading.Lock()


def get_store() -> CertifierStore:
    """
    Process-wide store. Seeded and materialized on first use when empty.

    A sync dependency, so FastAPI runs it in the threadpool and the first
    seeding run never blocks the event loop.
    """
    global _store
    with _store_lock:
        if _store is None:
            store = CertifierStore(db_path=settings.DB_PATH)
            if settings.SEED_ON_STARTUP and store.count() == 0:
                seeded = seed_store(store)
                report = materialize_scores(store)
                logger.info(
                    "Seeded certifier store",
                    extra={"processed": seeded, "updated": report.updated,
                           "failed": report.failed},
                )
            _store = store
    return _store


def get_resolver() -> IngredientRulingResolver:
    return IngredientRulingResolver(default_rule_set())


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Compile the rule set up front so a bad rule fails the boot, not a request."""
    setup_logging()
    rule_set = default_rule_set()
    logger.info("Naqiy API starting",
                extra={"rule_set_version": rule_set.version, "processed": len(rule_set)})
    yield
    logger.info("Naqiy API shutting down")


app = FastAPI(
    title="Naqiy API",
    description="Halal determination engine: certifier trust scores, ingredient rulings, allergen matching",
    version=f"{__version__} (engine {settings.ENGINE_VERSION})",
    lifespan=lifespan,
)

# CORS: set NAQIY_CORS_ORIGINS in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    allow_credentials=False,
)


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(DataIntegrityError)
async def data_integrity_handler(request: Request, exc: DataIntegrityError):
    logger.warning(
        "Data integrity error",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(
        "Configuration error",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Engine configuration error."},
    )


@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions — return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error."},
    )


# ============================================================
# ROUTES
# ============================================================

@app.get("/health", response_model=HealthResponse)
def health(store: CertifierStore = Depends(get_store)):
    rule_set = default_rule_set()
    return {
        "status": "operational",
        "version": __version__,
        "engine_version": settings.ENGINE_VERSION,
        "rule_set_version": rule_set.version,
        "rules_loaded": len(rule_set),
        "certifiers": store.count(),
    }


@app.get("/certifiers", response_model=CertifierListResponse)
async def list_certifiers(
    scope: str = Query("general", pattern=SCOPE_PATTERN),
    store: CertifierStore = Depends(get_store),
):
    """Certifying bodies ranked by their materialized score for a scope."""
    cache_key = f"{store.db_path}|{scope}"
    ranked = await score_cache.get("ranking", cache_key)
    if ranked is None:
        rows = await asyncio.to_thread(store.list_scored)
        ranked = rank_certifiers(rows, scope)
        await score_cache.put("ranking", cache_key, ranked)

    return {"scope": scope, "certifiers": ranked, "total": len(ranked)}


@app.get("/certifiers/{certifier_id}", response_model=CertifierDetailResponse)
def get_certifier(certifier_id: str, store: CertifierStore = Depends(get_store)):
    certifier = store.get_certifier(certifier_id)
    if certifier is None:
        raise HTTPException(404, f"Unknown certifier: {certifier_id}")

    events = store.list_events(certifier_id, active_only=True)
    certifier["events"] = [
        {
            "id": e.id,
            "event_type": e.event_type,
            "severity": e.severity,
            "title": e.title,
            "score_impact": e.score_impact,
            "occurred_at": str(e.occurred_at),
            "is_active": e.is_active,
            "source_name": e.source_name,
            "source_url": e.source_url,
            "resolution_status": e.resolution_status,
        }
        for e in events
    ]
    return certifier


@app.get("/rulings", response_model=RuleListResponse)
async def list_rulings(resolver: IngredientRulingResolver = Depends(get_resolver)):
    rules = resolver.describe()
    return {"version": resolver.rule_set.version, "total": len(rules), "rules": rules}


@app.post("/rulings/resolve", response_model=RulingMatchResponse)
async def resolve_ruling(
    request: ResolveRequest,
    resolver: IngredientRulingResolver = Depends(get_resolver),
):
    """Ruling for one ingredient. `matched` is false when no rule applies."""
    text = normalize_ingredient_text(request.text) if request.normalize else request.text
    match = resolver.resolve(text, request.scope)
    return {
        **match.to_dict(request.language),
        "rule_set_version": resolver.rule_set.version,
    }


@app.get("/additives/{code}", response_model=AdditiveResponse)
async def get_additive(code: str, scope: str = Query("general", pattern=SCOPE_PATTERN)):
    """E-number ruling for a scope. Sub-variants fall back to their parent code."""
    additive = default_additive_table().lookup(code)
    if additive is None:
        raise HTTPException(404, f"Unknown additive: {code}")
    return additive.to_dict(scope)


@app.post("/allergens/match", response_model=AllergenMatchResponse)
async def allergens_match(request: AllergenMatchRequest):
    matches = match_allergens(
        request.user_allergens, request.allergen_tags, request.trace_tags,
    )
    return {"matches": [m.to_dict() for m in matches], "total": len(matches)}


@app.post("/assess", response_model=AssessResponse)
def assess(
    request: AssessRequest,
    store: CertifierStore = Depends(get_store),
    resolver: IngredientRulingResolver = Depends(get_resolver),
):
    """Compose ingredient rulings, allergen matches and certifier context."""
    certifier_scores = None
    if request.certifier_id:
        profile = store.get_profile(request.certifier_id)
        if profile is None:
            raise HTTPException(404, f"Unknown certifier: {request.certifier_id}")
        # Scored live with the same settings the materializer uses
        certifier_scores = score_certifier(
            profile, store.list_events(profile.id),
            penalty_floor=settings.PENALTY_FLOOR,
            half_life_years=settings.HALF_LIFE_YEARS,
        )

    assessor = Assessor(
        resolver,
        strategy=StrictestRulingStrategy(UnmatchedPolicy(request.unmatched_policy)),
    )
    result = assessor.assess(
        request.ingredients_text,
        scope=request.scope,
        user_allergens=request.user_allergens,
        allergen_tags=request.allergen_tags,
        trace_tags=request.trace_tags,
        certifier=certifier_scores,
    )
    return result.to_dict(request.language)


@app.post("/materialize", response_model=MaterializeResponse)
async def materialize(
    request: Optional[MaterializeRequest] = Body(None),
    store: CertifierStore = Depends(get_store),
):
    """Recompute every certifier's scores and drop cached listings."""
    now = request.now if request else None
    report = await asyncio.to_thread(materialize_scores, store, now=now)
    cleared = await score_cache.clear()
    return {**report.to_dict(), "cache_entries_cleared": cleared}


# --- Version Headers Middleware ---
@app.middleware("http")
async def add_version_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Naqiy-Version"] = __version__
    response.headers["X-Engine-Version"] = settings.ENGINE_VERSION
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
