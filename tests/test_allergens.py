"""Tests for the allergen matcher."""

from __future__ import annotations

from naqiy.allergens import (
    DIRECT,
    TRACE,
    AllergenSynonymTable,
    default_table,
    match_allergens,
)


class TestSynonymTable:

    def test_case_insensitive(self):
        assert default_table.lookup("LAIT") == "en:milk"
        assert default_table.lookup("  Milk ") == "en:milk"

    def test_cross_language(self):
        assert default_table.lookup("arachides") == default_table.lookup("peanuts")

    def test_canonical_tag_passthrough(self):
        assert default_table.lookup("en:milk") == "en:milk"

    def test_unknown(self):
        assert default_table.lookup("kryptonite") is None
        assert default_table.lookup("") is None

    def test_custom_table(self):
        table = AllergenSynonymTable({"Erdnuss": "EN:Peanuts"})
        assert table.lookup("erdnuss") == "en:peanuts"
        assert len(table) == 1
        assert table.tags == frozenset({"en:peanuts"})


class TestMatchAllergens:

    def test_two_direct_matches(self):
        matches = match_allergens(["Lait", "ARACHIDES"], ["en:milk", "en:peanuts"], [])
        assert len(matches) == 2
        assert all(m.match_class == DIRECT and m.severity == "high" for m in matches)
        assert [m.user_allergen for m in matches] == ["Lait", "ARACHIDES"]
        assert [m.canonical_tag for m in matches] == ["en:milk", "en:peanuts"]

    def test_trace_only(self):
        matches = match_allergens(["gluten"], [], ["en:gluten"])
        assert len(matches) == 1
        assert matches[0].match_class == TRACE
        assert matches[0].severity == "medium"

    def test_direct_and_trace_coexist(self):
        matches = match_allergens(["soja"], ["en:soybeans"], ["en:soybeans"])
        assert [m.match_class for m in matches] == [DIRECT, TRACE]
        assert {m.user_allergen for m in matches} == {"soja"}

    def test_empty(self):
        assert match_allergens([], [], []) == []

    def test_unknown_names_only(self):
        assert match_allergens(["kryptonite", "xyz"], ["en:milk"], ["en:gluten"]) == []

    def test_known_allergen_absent_from_product(self):
        assert match_allergens(["lait"], ["en:peanuts"], []) == []

    def test_product_tags_case_insensitive(self):
        matches = match_allergens(["milk"], ["EN:MILK "], [])
        assert len(matches) == 1

    def test_to_dict(self):
        match = match_allergens(["lait"], ["en:milk"], [])[0]
        assert match.to_dict() == {
            "user_allergen": "lait",
            "canonical_tag": "en:milk",
            "match_class": "direct",
            "severity": "high",
        }

    def test_custom_table_used(self):
        table = AllergenSynonymTable({"erdnuss": "en:peanuts"})
        assert match_allergens(["Erdnuss"], ["en:peanuts"], [], table=table)
        assert not match_allergens(["lait"], ["en:milk"], [], table=table)
