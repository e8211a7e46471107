"""
Naqiy — Halal Determination Engine

Turns raw facts into classifications with a numeric confidence:
certifying-body practices and controversy history into trust scores,
ingredient text into halal/doubtful/haram rulings, declared allergens
into product cross-matches.

Public API:
  - decayed_penalty:          Half-life decay over a controversy timeline
  - TrustScoreCalculator:     Universal + four school-specific trust scores
  - RuleSet / IngredientRulingResolver: Versioned ingredient rulings
  - match_allergens:          User allergens vs product allergen/trace tags
  - Assessor:                 Scan-result composition with pluggable aggregation
  - materialize_scores:       Batch recompute + persist of certifier scores

Usage:
    from naqiy import TrustScoreCalculator, decayed_penalty
    from naqiy import IngredientRulingResolver, default_rule_set
    from naqiy import match_allergens
"""

__version__ = "1.0.0"

from naqiy.errors import NaqiyError, ConfigurationError, DataIntegrityError
from naqiy.scopes import Scope, MADHABS
from naqiy.controversy import (
    ControversyEvent,
    decayed_penalty,
    clamp_penalty,
    HALF_LIFE_YEARS,
)
from naqiy.trust_score import (
    Indicator,
    CertifierIndicators,
    CertifyingBodyProfile,
    WeightTable,
    TrustScoreCalculator,
    TrustScoreResult,
    UNIVERSAL_WEIGHTS,
    DEFAULT_SCOPE_WEIGHTS,
    default_calculator,
)
from naqiy.rulings import (
    Ruling,
    MatchType,
    IngredientRule,
    RuleSet,
    IngredientRulingResolver,
    RulingMatch,
    NO_MATCH,
)
from naqiy.allergens import AllergenMatch, AllergenSynonymTable, match_allergens
from naqiy.normalizer import normalize_ingredient_text, needs_normalization, split_ingredients
from naqiy.assessor import (
    Assessor,
    AggregationStrategy,
    StrictestRulingStrategy,
    UnmatchedPolicy,
    ScanAssessment,
)
from naqiy.certifiers import score_certifier, rank_certifiers
from naqiy.store import CertifierStore
from naqiy.materializer import materialize_scores, MaterializeReport
from naqiy.seeds import default_rule_set

__all__ = [
    "NaqiyError",
    "ConfigurationError",
    "DataIntegrityError",
    "Scope",
    "MADHABS",
    "ControversyEvent",
    "decayed_penalty",
    "clamp_penalty",
    "HALF_LIFE_YEARS",
    "Indicator",
    "CertifierIndicators",
    "CertifyingBodyProfile",
    "WeightTable",
    "TrustScoreCalculator",
    "TrustScoreResult",
    "UNIVERSAL_WEIGHTS",
    "DEFAULT_SCOPE_WEIGHTS",
    "default_calculator",
    "Ruling",
    "MatchType",
    "IngredientRule",
    "RuleSet",
    "IngredientRulingResolver",
    "RulingMatch",
    "NO_MATCH",
    "AllergenMatch",
    "AllergenSynonymTable",
    "match_allergens",
    "normalize_ingredient_text",
    "needs_normalization",
    "split_ingredients",
    "Assessor",
    "AggregationStrategy",
    "StrictestRulingStrategy",
    "UnmatchedPolicy",
    "ScanAssessment",
    "score_certifier",
    "rank_certifiers",
    "CertifierStore",
    "materialize_scores",
    "MaterializeReport",
    "default_rule_set",
]
