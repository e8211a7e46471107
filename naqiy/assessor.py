"""
Assessor — Scan Result Composition

Composes the normalizer, the ruling resolver, the allergen matcher and
an aggregation strategy into one ScanAssessment per product scan.

How per-ingredient rulings combine into a product verdict is a product
decision, so it sits behind AggregationStrategy. The shipped default,
StrictestRulingStrategy:

  status      = most severe matched ruling (haram > doubtful > halal),
                "unknown" when no ingredient matched
  confidence  = lowest confidence among the rules carrying that status

Unmatched ingredients are governed by UnmatchedPolicy:
  EXCLUDE   (default) ignored for confidence
  PENALIZE  confidence scaled by the matched share of ingredients

A certifier's trust scores ride along as context. They never change the
status in the default strategy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from naqiy.allergens import AllergenMatch, AllergenSynonymTable, default_table, match_allergens
from naqiy.normalizer import normalize_ingredient_text, split_ingredients
from naqiy.rulings import IngredientRulingResolver, Resolution, Ruling
from naqiy.scopes import Scope
from naqiy.trust_score import TrustScoreResult

UNKNOWN_STATUS = "unknown"


class UnmatchedPolicy(str, Enum):
    EXCLUDE = "exclude"
    PENALIZE = "penalize"


@dataclass(frozen=True)
class IngredientResult:
    ingredient: str
    normalized: str
    match: Resolution

    @property
    def matched(self) -> bool:
        return bool(self.match)

    def to_dict(self, language: str = "fr") -> dict:
        return {
            "ingredient": self.ingredient,
            "normalized": self.normalized,
            **self.match.to_dict(language),
        }


@dataclass(frozen=True)
class ProductVerdict:
    status: str
    confidence: Optional[float]
    matched_count: int
    unmatched_count: int
    strategy: str
    deciding_rule_ids: tuple[str, ...] = ()
    certifier: Optional[TrustScoreResult] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "confidence": self.confidence,
            "matched_count": self.matched_count,
            "unmatched_count": self.unmatched_count,
            "strategy": self.strategy,
            "deciding_rule_ids": list(self.deciding_rule_ids),
            "certifier": self.certifier.to_dict() if self.certifier else None,
        }


class AggregationStrategy(ABC):
    """Combines per-ingredient rulings into one product verdict."""

    name: str = "abstract"

    @abstractmethod
    def aggregate(
        self,
        ingredient_results: Sequence[IngredientResult],
        certifier: Optional[TrustScoreResult] = None,
    ) -> ProductVerdict:
        ...


class StrictestRulingStrategy(AggregationStrategy):
    """The most severe matched ruling wins."""

    name = "strictest_ruling"

    def __init__(self, unmatched_policy: UnmatchedPolicy = UnmatchedPolicy.EXCLUDE):
        self.unmatched_policy = UnmatchedPolicy(unmatched_policy)

    def aggregate(self, ingredient_results, certifier=None) -> ProductVerdict:
        matched = [r for r in ingredient_results if r.matched]
        unmatched_count = len(ingredient_results) - len(matched)

        if not matched:
            return ProductVerdict(
                status=UNKNOWN_STATUS,
                confidence=None,
                matched_count=0,
                unmatched_count=unmatched_count,
                strategy=self.name,
                certifier=certifier,
            )

        worst: Ruling = max((r.match.ruling for r in matched), key=lambda x: x.severity)
        deciding = [r.match for r in matched if r.match.ruling is worst]
        confidence = min(m.confidence for m in deciding)

        if self.unmatched_policy is UnmatchedPolicy.PENALIZE:
            confidence *= len(matched) / len(ingredient_results)

        return ProductVerdict(
            status=worst.value,
            confidence=round(confidence, 4),
            matched_count=len(matched),
            unmatched_count=unmatched_count,
            strategy=self.name,
            deciding_rule_ids=tuple(dict.fromkeys(m.rule_id for m in deciding)),
            certifier=certifier,
        )


@dataclass(frozen=True)
class ScanAssessment:
    scope: Scope
    ingredients: tuple[IngredientResult, ...]
    verdict: ProductVerdict
    allergens: tuple[AllergenMatch, ...] = field(default_factory=tuple)
    rule_set_version: Optional[str] = None

    def to_dict(self, language: str = "fr") -> dict:
        return {
            "scope": self.scope.value,
            "rule_set_version": self.rule_set_version,
            "verdict": self.verdict.to_dict(),
            "ingredients": [i.to_dict(language) for i in self.ingredients],
            "allergens": [a.to_dict() for a in self.allergens],
        }


class Assessor:
    """
    Scan-result composition step.

    Args:
        resolver: Ruling resolver bound to the active rule set.
        strategy: Aggregation strategy (StrictestRulingStrategy by default).
        allergen_table: Synonym table for allergen lookup.
    """

    def __init__(
        self,
        resolver: IngredientRulingResolver,
        strategy: Optional[AggregationStrategy] = None,
        allergen_table: AllergenSynonymTable = default_table,
    ):
        self.resolver = resolver
        self.strategy = strategy or StrictestRulingStrategy()
        self.allergen_table = allergen_table

    def classify_ingredients(
        self, ingredients_text: str, scope: Scope | str | None = Scope.GENERAL,
    ) -> list[IngredientResult]:
        """Split, clean and resolve every ingredient of a label."""
        scope = Scope.parse(scope)
        results = []
        for ingredient in split_ingredients(ingredients_text):
            normalized = normalize_ingredient_text(ingredient)
            results.append(IngredientResult(
                ingredient=ingredient,
                normalized=normalized,
                match=self.resolver.resolve(normalized, scope),
            ))
        return results

    def assess(
        self,
        ingredients_text: str,
        scope: Scope | str | None = Scope.GENERAL,
        user_allergens: Iterable[str] = (),
        allergen_tags: Iterable[str] = (),
        trace_tags: Iterable[str] = (),
        certifier: Optional[TrustScoreResult] = None,
    ) -> ScanAssessment:
        scope = Scope.parse(scope)
        ingredients = self.classify_ingredients(ingredients_text, scope)
        verdict = self.strategy.aggregate(ingredients, certifier)
        allergens = match_allergens(
            user_allergens, allergen_tags, trace_tags, table=self.allergen_table,
        )
        return ScanAssessment(
            scope=scope,
            ingredients=tuple(ingredients),
            verdict=verdict,
            allergens=tuple(allergens),
            rule_set_version=self.resolver.rule_set.version,
        )
