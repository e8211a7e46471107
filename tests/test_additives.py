"""
Tests for the E-number additive table and its rules.
"""

from __future__ import annotations

import pytest

from naqiy.additives import ADDITIVE_PRIORITY, AdditiveTable, normalize_code
from naqiy.errors import ConfigurationError
from naqiy.rulings import IngredientRulingResolver, Ruling
from naqiy.seeds import INGREDIENT_RULES, default_additive_table, default_rule_set


ROWS = [
    ("E100", "Curcumine", "Curcumin", "colorant", "plant", "halal", "Colorant naturel"),
    ("E441", "Gélatine", "Gelatin", "thickener", "animal", "haram", "Collagène animal"),
    ("E904", "Gomme-laque", "Shellac", "glazing_agent", "insect", "doubtful", "Résine d'insecte"),
]

SCHOOLS = [
    ("E441", "hanafi", "doubtful", "Débat sur l'istihalah", "SeekersGuidance"),
    ("E904", "hanafi", "doubtful", "Comparée au miel", "SeekersGuidance"),
]


@pytest.fixture
def table():
    return AdditiveTable.from_rows(ROWS, SCHOOLS)


class TestNormalizeCode:

    @pytest.mark.parametrize("raw,expected", [
        ("E471", "E471"),
        ("e 471", "E471"),
        ("E-471", "E471"),
        ("E.471", "E471"),
        ("en:e322i", "E322I"),
        ("E150a", "E150A"),
    ])
    def test_spellings(self, raw, expected):
        assert normalize_code(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "gélatine", "E12", "471", "E47100"])
    def test_not_a_code(self, raw):
        assert normalize_code(raw) is None


class TestLookup:

    def test_exact(self, table):
        assert table.lookup("e441").name_en == "Gelatin"

    def test_parent_fallback(self):
        table = default_additive_table()
        assert table.lookup("en:e322i").code == "E322"
        assert table.lookup("E150a").code == "E150A"

    def test_unknown(self, table):
        assert table.lookup("E999") is None
        assert table.lookup("sucre") is None
        assert "E999" not in table
        assert "e 100" in table

    def test_iteration_sorted(self, table):
        assert [a.code for a in table] == ["E100", "E441", "E904"]
        assert len(table) == 3

    def test_for_tags_deduplicated(self, table):
        out = table.for_tags(["en:e441", "en:e999", "E441", "en:e100"], scope="hanafi")
        assert [a["code"] for a in out] == ["E441", "E100"]
        assert out[0]["ruling"] == "doubtful"
        assert out[0]["school_specific"] is True
        assert out[1]["school_specific"] is False


class TestScopeFallback:

    def test_school_ruling_wins(self, table):
        gelatin = table.lookup("E441")
        assert gelatin.ruling_for("hanafi") is Ruling.DOUBTFUL
        assert gelatin.explanation_for("hanafi") == "Débat sur l'istihalah"

    def test_school_without_ruling_uses_default(self, table):
        gelatin = table.lookup("E441")
        assert gelatin.ruling_for("shafii") is Ruling.HARAM
        assert gelatin.ruling_for("general") is Ruling.HARAM
        assert gelatin.explanation_for("shafii") == "Collagène animal"

    def test_shipped_partial_schools(self):
        shellac = default_additive_table().lookup("E904")
        assert shellac.ruling_for("hanafi") is Ruling.DOUBTFUL
        # No maliki ruling in the table
        assert shellac.ruling_for("maliki") is shellac.ruling_default

    def test_confidence_follows_origin(self, table):
        assert table.lookup("E100").confidence == 0.9
        assert table.lookup("E441").confidence == 0.8


class TestFromRows:

    def test_unknown_code_in_school_rulings(self):
        with pytest.raises(ConfigurationError, match="E999"):
            AdditiveTable.from_rows(ROWS, [("E999", "hanafi", "halal", "x", None)])

    def test_general_is_not_a_school(self):
        with pytest.raises(ConfigurationError, match="names no school"):
            AdditiveTable.from_rows(ROWS, [("E441", "general", "halal", "x", None)])

    def test_bad_ruling(self):
        with pytest.raises(ConfigurationError, match="E441"):
            AdditiveTable.from_rows(ROWS, [("E441", "hanafi", "mubah", "x", None)])

    def test_malformed_code(self):
        with pytest.raises(ConfigurationError, match="Malformed"):
            AdditiveTable.from_rows([("e 100", "Curcumine", None, "colorant", "plant", "halal", "")])

    def test_duplicate_code(self):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            AdditiveTable.from_rows([ROWS[0], ROWS[0]])


class TestAdditiveRules:

    def test_to_rule_shape(self, table):
        rule = table.lookup("E441").to_rule()
        assert rule.id == "additive-e441"
        assert rule.pattern == "e441"
        assert rule.priority == ADDITIVE_PRIORITY
        assert rule.ruling_hanafi is Ruling.DOUBTFUL
        assert rule.ruling_shafii is None
        assert rule.scholarly_reference == "SeekersGuidance"

    def test_curated_patterns_excluded(self):
        rules = default_additive_table().to_rules(
            exclude_patterns=(r["pattern"] for r in INGREDIENT_RULES)
        )
        ids = {r.id for r in rules}
        assert "additive-e441" in ids
        assert not ids & {"additive-e120", "additive-e471", "additive-e920"}


class TestShippedResolution:

    @pytest.fixture(scope="class")
    def resolver(self):
        return IngredientRulingResolver(default_rule_set())

    def test_school_ruling_per_scope(self, resolver):
        assert resolver.resolve("e441", "hanbali").ruling is Ruling.HARAM
        assert resolver.resolve("e441", "hanafi").ruling is Ruling.DOUBTFUL
        assert resolver.resolve("e441").rule_id == "additive-e441"

    def test_halal_code(self, resolver):
        match = resolver.resolve("colorant e100", "shafii")
        assert match.ruling is Ruling.HALAL
        assert match.confidence == 0.9

    def test_curated_rule_keeps_precedence(self, resolver):
        match = resolver.resolve("e120", "maliki")
        assert match.rule_id != "additive-e120"
        assert match.ruling is Ruling.HALAL

    def test_label_with_spaced_code(self):
        from naqiy.assessor import Assessor
        result = Assessor(IngredientRulingResolver(default_rule_set())).assess(
            "sucre, E 422, arôme", scope="hanafi",
        )
        by_name = {i.ingredient: i.match for i in result.ingredients}
        assert by_name["E 422"].rule_id == "additive-e422"
        assert result.verdict.status == "doubtful"
