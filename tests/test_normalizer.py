"""Tests for ingredient text cleaning and label splitting."""

from __future__ import annotations

from naqiy.normalizer import (
    expand_abbreviations,
    find_synonyms,
    fix_ocr_artifacts,
    needs_normalization,
    normalize_e_codes,
    normalize_ingredient_text,
    split_ingredients,
    strip_diacritics,
)


class TestECodes:

    def test_separators(self):
        for raw in ("E 471", "E-471", "E.471", "e471", "E471"):
            assert normalize_e_codes(raw) == "e471"

    def test_suffix_letter(self):
        assert normalize_e_codes("E 160a") == "e160a"

    def test_inside_text(self):
        assert normalize_e_codes("émulsifiant: E-322, sel") == "émulsifiant: e322, sel"


class TestOcr:

    def test_known_artifacts(self):
        assert fix_ocr_artifacts("gé1atine") == "gélatine"
        assert fix_ocr_artifacts("a1cool") == "alcool"
        assert fix_ocr_artifacts("1ard") == "lard"
        assert fix_ocr_artifacts("po1c") == "porc"

    def test_clean_text_untouched(self):
        assert fix_ocr_artifacts("sucre, farine") == "sucre, farine"


class TestAbbreviations:

    def test_expansion(self):
        assert expand_abbreviations("veg. oil") == "vegetable oil"
        assert expand_abbreviations("jus conc. de pomme") == "jus concentré de pomme"


class TestSynonyms:

    def test_german_pork_gelatin(self):
        found = find_synonyms("Schweine Gelatine")
        assert "gélatine porcine" in found
        assert "porc" in found

    def test_diacritic_insensitive(self):
        assert "présure" in find_synonyms("cuajo")
        assert "carmine" in find_synonyms("Carmín")

    def test_short_synonym_needs_token(self):
        assert find_synonyms("lab") == ["présure"]
        assert "présure" not in find_synonyms("lab-fermented")
        assert "présure" not in find_synonyms("laboratoire")

    def test_no_duplicates(self):
        found = find_synonyms("pork fat, pig fat")
        assert found.count("graisse de porc") == 1

    def test_none(self):
        assert find_synonyms("sucre") == []

    def test_strip_diacritics(self):
        assert strip_diacritics("présure gélatine") == "presure gelatine"


class TestPipeline:

    def test_synonyms_appended(self):
        out = normalize_ingredient_text("Schweinefett")
        assert out.startswith("Schweinefett | ")
        assert "graisse de porc" in out

    def test_original_words_kept(self):
        out = normalize_ingredient_text("cooking wine")
        assert out.startswith("cooking wine")

    def test_ocr_then_e_code(self):
        out = normalize_ingredient_text("gé1atine, E 471")
        assert "gélatine" in out
        assert "e471" in out

    def test_mono_et(self):
        out = normalize_ingredient_text("mono -et diglycérides")
        assert "mono- et diglycérides" in out

    def test_typographic_apostrophe(self):
        assert normalize_ingredient_text("graisse d’oie").startswith("graisse d'oie")

    def test_clean_text_unchanged(self):
        assert normalize_ingredient_text("sucre") == "sucre"

    def test_empty(self):
        assert normalize_ingredient_text("") == ""

    def test_needs_normalization(self):
        assert needs_normalization("E 471")
        assert needs_normalization("a1cool")
        assert needs_normalization("veg. oil")
        assert needs_normalization("Schweinefett über")
        assert not needs_normalization("sucre, sel, e471")


class TestSplit:

    def test_top_level_separators(self):
        assert split_ingredients("sucre, sel; farine") == ["sucre", "sel", "farine"]

    def test_nested_commas_kept(self):
        assert split_ingredients("chocolat (sucre, cacao), sel") == [
            "chocolat (sucre, cacao)", "sel",
        ]

    def test_square_brackets(self):
        assert split_ingredients("arôme [lait, vanille]; eau") == ["arôme [lait, vanille]", "eau"]

    def test_trailing_full_stop(self):
        assert split_ingredients("sucre, sel.") == ["sucre", "sel"]

    def test_abbreviation_mid_list_kept(self):
        assert split_ingredients("veg. oil, sel") == ["veg. oil", "sel"]

    def test_empty_parts_dropped(self):
        assert split_ingredients("sucre,, ,sel") == ["sucre", "sel"]
        assert split_ingredients("") == []
