"""
API Schemas — Request and Response Models

Pydantic models for the Naqiy API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from naqiy.config import settings

SCOPE_PATTERN = "^(general|hanafi|shafii|maliki|hanbali)$"
LANGUAGE_PATTERN = "^(fr|en|ar)$"


# ============================================================
# CERTIFIERS
# ============================================================

class TrustScores(BaseModel):
    trust_score: Optional[int] = None
    trust_score_hanafi: Optional[int] = None
    trust_score_shafii: Optional[int] = None
    trust_score_maliki: Optional[int] = None
    trust_score_hanbali: Optional[int] = None


class CertifierSummary(BaseModel):
    id: str
    name: str
    rank: int
    scope: str
    score: Optional[int] = None
    scores: TrustScores
    halal_assessment: Optional[bool] = None
    website: Optional[str] = None
    scores_evaluated_at: Optional[str] = None


class CertifierListResponse(BaseModel):
    """GET /certifiers response body."""
    scope: str
    certifiers: list[CertifierSummary]
    total: int


class ControversyEventResponse(BaseModel):
    id: Optional[str] = None
    event_type: Optional[str] = None
    severity: Optional[str] = None
    title: Optional[str] = None
    score_impact: float
    occurred_at: str
    is_active: bool
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    resolution_status: Optional[str] = None


class CertifierDetailResponse(BaseModel):
    """GET /certifiers/{id} response body."""
    id: str
    name: str
    website: Optional[str] = None
    creation_year: Optional[int] = None
    practices: dict[str, Optional[bool]]
    halal_assessment: Optional[bool] = None
    is_active: bool
    notes: Optional[str] = None
    scores: TrustScores
    controversy_penalty: Optional[float] = None
    scores_evaluated_at: Optional[str] = None
    events: list[ControversyEventResponse]


# ============================================================
# RULINGS
# ============================================================

class RuleResponse(BaseModel):
    id: str
    pattern: str
    match_type: str
    priority: int
    ruling_default: str
    rulings: dict[str, str]
    confidence: float
    category: Optional[str] = None
    overrides: list[str] = []
    scholarly_reference: Optional[str] = None
    fatwa_source_name: Optional[str] = None


class RuleListResponse(BaseModel):
    """GET /rulings response body."""
    version: str
    total: int
    rules: list[RuleResponse]


class ResolveRequest(BaseModel):
    """POST /rulings/resolve request body."""
    text: str = Field(..., min_length=1, max_length=5_000,
                      description="One ingredient or additive, e.g. 'vinaigre de vin'.")
    scope: str = Field("general", pattern=SCOPE_PATTERN)
    language: str = Field(settings.DEFAULT_LANGUAGE, pattern=LANGUAGE_PATTERN)
    normalize: bool = Field(True, description="Run the ingredient normalizer first.")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "vinaigre de vin", "scope": "hanafi", "language": "fr"},
    ]}}


class RulingMatchResponse(BaseModel):
    """POST /rulings/resolve response body. `matched` is false for unclassified input."""
    matched: bool
    ruling: Optional[str] = None
    rule_id: Optional[str] = None
    pattern: Optional[str] = None
    confidence: Optional[float] = None
    explanation: Optional[str] = None
    scope: Optional[str] = None
    priority: Optional[int] = None
    category: Optional[str] = None
    scholarly_reference: Optional[str] = None
    fatwa_source_url: Optional[str] = None
    rule_set_version: str


class AdditiveResponse(BaseModel):
    """GET /additives/{code} response body."""
    code: str
    name_fr: str
    name_en: Optional[str] = None
    category: str
    origin: str
    scope: str
    ruling: str
    ruling_default: str
    explanation: Optional[str] = None
    school_specific: bool
    confidence: float


# ============================================================
# ALLERGENS
# ============================================================

class AllergenMatchRequest(BaseModel):
    """POST /allergens/match request body."""
    user_allergens: list[str] = Field(default_factory=list, max_length=100)
    allergen_tags: list[str] = Field(default_factory=list, max_length=200)
    trace_tags: list[str] = Field(default_factory=list, max_length=200)

    model_config = {"json_schema_extra": {"examples": [
        {"user_allergens": ["Lait", "soja"], "allergen_tags": ["en:milk"], "trace_tags": ["en:soybeans"]},
    ]}}


class AllergenMatchItem(BaseModel):
    user_allergen: str
    canonical_tag: str
    match_class: str
    severity: str


class AllergenMatchResponse(BaseModel):
    matches: list[AllergenMatchItem]
    total: int


# ============================================================
# ASSESS
# ============================================================

class AssessRequest(BaseModel):
    """POST /assess request body."""
    ingredients_text: str = Field(..., min_length=1, max_length=20_000)
    scope: str = Field("general", pattern=SCOPE_PATTERN)
    language: str = Field(settings.DEFAULT_LANGUAGE, pattern=LANGUAGE_PATTERN)
    user_allergens: list[str] = Field(default_factory=list, max_length=100)
    allergen_tags: list[str] = Field(default_factory=list, max_length=200)
    trace_tags: list[str] = Field(default_factory=list, max_length=200)
    certifier_id: Optional[str] = None
    unmatched_policy: str = Field("exclude", pattern="^(exclude|penalize)$")


class AssessResponse(BaseModel):
    scope: str
    rule_set_version: Optional[str] = None
    verdict: dict
    ingredients: list[dict]
    allergens: list[AllergenMatchItem]


# ============================================================
# MATERIALIZE
# ============================================================

class MaterializeRequest(BaseModel):
    """POST /materialize request body. `now` defaults to the current instant."""
    now: Optional[datetime] = None


class MaterializeResponse(BaseModel):
    processed: int
    updated: int
    failed: int
    errors: list[dict]
    evaluated_at: Optional[str] = None
    elapsed_seconds: float
    cache_entries_cleared: int = 0


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    engine_version: str
    rule_set_version: str
    rules_loaded: int
    certifiers: int
