"""
Tests for scan-result composition.

Uses the shipped rule set so verdicts reflect real labels.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from naqiy.assessor import (
    AggregationStrategy,
    Assessor,
    ProductVerdict,
    StrictestRulingStrategy,
    UnmatchedPolicy,
)
from naqiy.rulings import IngredientRulingResolver
from naqiy.seeds import default_rule_set
from naqiy.trust_score import CertifierIndicators, default_calculator


@pytest.fixture(scope="module")
def resolver():
    return IngredientRulingResolver(default_rule_set())


@pytest.fixture
def assessor(resolver):
    return Assessor(resolver)


class TestStrictestRuling:

    def test_haram_dominates(self, assessor):
        result = assessor.assess("sucre, gélatine porcine, vinaigre")
        assert result.verdict.status == "haram"
        assert result.verdict.deciding_rule_ids == ("gelatin-porcine-fr",)
        assert result.verdict.confidence == 0.95

    def test_doubtful_over_halal(self, assessor):
        result = assessor.assess("vinaigre, gélatine")
        assert result.verdict.status == "doubtful"
        assert result.verdict.confidence == 0.6

    def test_all_halal(self, assessor):
        result = assessor.assess("vinaigre, gélatine de poisson")
        assert result.verdict.status == "halal"
        # Lowest confidence among the deciding rules
        assert result.verdict.confidence == 0.95

    def test_scope_changes_status(self, assessor):
        general = assessor.assess("sucre, E120", scope="general")
        maliki = assessor.assess("sucre, E120", scope="maliki")
        assert general.verdict.status == "haram"
        assert maliki.verdict.status == "halal"

    def test_nothing_matched_is_unknown(self, assessor):
        result = assessor.assess("eau, sucre, sel")
        assert result.verdict.status == "unknown"
        assert result.verdict.confidence is None
        assert result.verdict.unmatched_count == 3

    def test_empty_label(self, assessor):
        result = assessor.assess("")
        assert result.verdict.status == "unknown"
        assert result.ingredients == ()

    def test_unaccented_capitals_match(self, assessor):
        result = assessor.assess("Sucre, LACTOSERUM en poudre, PRESURE")
        by_name = {i.ingredient: i.match for i in result.ingredients}
        assert by_name["LACTOSERUM en poudre"].rule_id == "whey-lactosérum"
        assert by_name["PRESURE"].rule_id == "rennet-présure"
        assert result.verdict.status == "doubtful"
        assert result.verdict.matched_count == 2

        hanafi = assessor.assess("Sucre, LACTOSERUM en poudre, PRESURE", scope="hanafi")
        assert hanafi.verdict.status == "halal"

    def test_synonyms_reach_rules(self, assessor):
        result = assessor.assess("Zucker, Schweinegelatine")
        assert result.verdict.status in ("haram", "doubtful")
        assert result.verdict.matched_count == 1


class TestUnmatchedPolicy:

    def test_exclude_ignores_unmatched(self, resolver):
        assessor = Assessor(resolver, StrictestRulingStrategy(UnmatchedPolicy.EXCLUDE))
        result = assessor.assess("eau, sel, sucre, gélatine")
        assert result.verdict.confidence == 0.6
        assert result.verdict.matched_count == 1
        assert result.verdict.unmatched_count == 3

    def test_penalize_scales_confidence(self, resolver):
        assessor = Assessor(resolver, StrictestRulingStrategy(UnmatchedPolicy.PENALIZE))
        result = assessor.assess("eau, sel, sucre, gélatine")
        assert result.verdict.confidence == pytest.approx(0.15)
        assert result.verdict.status == "doubtful"

    def test_policy_from_string(self):
        assert StrictestRulingStrategy("penalize").unmatched_policy is UnmatchedPolicy.PENALIZE


class TestComposition:

    def test_allergens_included(self, assessor):
        result = assessor.assess(
            "lait, sucre",
            user_allergens=["Lait", "gluten"],
            allergen_tags=["en:milk"],
            trace_tags=["en:gluten"],
        )
        classes = sorted(a.match_class for a in result.allergens)
        assert classes == ["direct", "trace"]

    def test_certifier_context_does_not_change_status(self, assessor):
        scores = default_calculator.calculate(
            CertifierIndicators.from_mapping({"controllers_are_employees": True}),
            0.0,
            datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        without = assessor.assess("gélatine porcine")
        with_cert = assessor.assess("gélatine porcine", certifier=scores)
        assert with_cert.verdict.status == without.verdict.status
        assert with_cert.verdict.certifier is scores

    def test_to_dict_shape(self, assessor):
        out = assessor.assess("sucre, vin", scope="hanafi").to_dict("en")
        assert out["scope"] == "hanafi"
        assert out["rule_set_version"] == "2024.2"
        assert out["verdict"]["status"] == "haram"
        assert out["verdict"]["strategy"] == "strictest_ruling"
        assert [i["matched"] for i in out["ingredients"]] == [False, True]
        assert out["ingredients"][1]["explanation"].startswith("Intoxicating")

    def test_custom_strategy(self, resolver):
        class CountingStrategy(AggregationStrategy):
            name = "counting"

            def aggregate(self, ingredient_results, certifier=None):
                matched = sum(1 for r in ingredient_results if r.matched)
                return ProductVerdict(
                    status="reviewed",
                    confidence=None,
                    matched_count=matched,
                    unmatched_count=len(ingredient_results) - matched,
                    strategy=self.name,
                )

        result = Assessor(resolver, CountingStrategy()).assess("lard, eau")
        assert result.verdict.status == "reviewed"
        assert result.verdict.matched_count == 1
