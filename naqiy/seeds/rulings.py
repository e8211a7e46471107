"""
Ingredient ruling rule set, version 2024.2.

Priority bands:
  100+   safe compounds that override a haram keyword
  50-99  haram compounds
  1-49   bare keywords (E-number table codes sit at 12)
"""

from __future__ import annotations

from functools import lru_cache

from naqiy.additives import AdditiveTable
from naqiy.rulings import RuleSet
from naqiy.seeds.additives import ADDITIVES, MADHAB_RULINGS

RULE_SET_VERSION = "2024.2"


def _uniform(id, pattern, match_type, priority, ruling, confidence,
             explanation_fr, explanation_en, category, **extra) -> dict:
    """Rule on which all four schools agree."""
    rule = {
        "id": id,
        "pattern": pattern,
        "match_type": match_type,
        "priority": priority,
        "ruling_default": ruling,
        "ruling_hanafi": ruling,
        "ruling_shafii": ruling,
        "ruling_maliki": ruling,
        "ruling_hanbali": ruling,
        "confidence": confidence,
        "explanation_fr": explanation_fr,
        "explanation_en": explanation_en,
        "category": category,
    }
    rule.update(extra)
    return rule


_KHAMR_FR = "Boisson enivrante : le khamr est interdit par consensus (Coran 5:90)."
_KHAMR_EN = "Intoxicating drink: khamr is forbidden by consensus (Quran 5:90)."
_PORK_FR = "Le porc et ses dérivés sont interdits par consensus (Coran 2:173)."
_PORK_EN = "Pork and its derivatives are forbidden by consensus (Quran 2:173)."

INGREDIENT_RULES: list[dict] = [
    # ── Safe compounds (100+) ──
    {
        "id": "vinegar-spirit-fr",
        "pattern": "vinaigre d'alcool",
        "match_type": "contains",
        "priority": 115,
        "ruling_default": "halal",
        "ruling_hanafi": "halal",
        "ruling_shafii": "doubtful",
        "ruling_maliki": "doubtful",
        "ruling_hanbali": "halal",
        "confidence": 0.8,
        "explanation_fr": (
            "Vinaigre obtenu par fermentation d'éthanol. Hanafites et Hanbalites : "
            "halal (istihala). Chafiites et Malikites : douteux pour le takhlil délibéré."
        ),
        "explanation_en": (
            "Vinegar fermented from ethanol. Hanafi and Hanbali: halal (istihala). "
            "Shafi'i and Maliki: doubtful when deliberately produced."
        ),
        "explanation_ar": "خل الكحول: حلال عند الحنفية والحنابلة، مشكوك فيه عند الشافعية والمالكية.",
        "scholarly_reference": "Muslim 2051, Muslim 1983, Nawawi Al-Majmoo' 9/232",
        "fatwa_source_url": "https://islamqa.info/en/answers/2283",
        "fatwa_source_name": "IslamQA #2283",
        "overrides_keyword": "alcool",
        "category": "vinegar",
    },
    {
        "id": "vinegar-spirit-en",
        "pattern": "spirit vinegar",
        "match_type": "contains",
        "priority": 115,
        "ruling_default": "halal",
        "ruling_hanafi": "halal",
        "ruling_shafii": "doubtful",
        "ruling_maliki": "doubtful",
        "ruling_hanbali": "halal",
        "confidence": 0.8,
        "explanation_fr": "Vinaigre d'alcool : halal (Hanafi, Hanbali), douteux (Chafii, Maliki).",
        "explanation_en": "Spirit vinegar: halal (Hanafi, Hanbali), doubtful (Shafi'i, Maliki).",
        "scholarly_reference": "Muslim 2051, Muslim 1983",
        "fatwa_source_url": "https://islamqa.info/en/answers/2283",
        "fatwa_source_name": "IslamQA #2283",
        "overrides_keyword": "alcohol",
        "category": "vinegar",
    },
    {
        "id": "vinegar-wine-fr",
        "pattern": "vinaigre de vin",
        "match_type": "contains",
        "priority": 110,
        "ruling_default": "doubtful",
        "ruling_hanafi": "halal",
        "ruling_shafii": "doubtful",
        "ruling_maliki": "doubtful",
        "ruling_hanbali": "halal",
        "confidence": 0.6,
        "explanation_fr": (
            "Vinaigre de vin : divergence. Les Hanafites acceptent l'istihala, les "
            "Hanbalites suivent Ibn Uthaymin ; Chafiites et Malikites le jugent douteux."
        ),
        "explanation_en": (
            "Wine vinegar: scholarly disagreement. Hanafis accept istihala, Hanbalis "
            "follow Ibn Uthaymeen; Shafi'is and Malikis consider it doubtful."
        ),
        "scholarly_reference": "Muslim 2051, Abu Dawud 3675, Majmoo' al-Fataawa 21/483",
        "fatwa_source_url": "https://islamqa.info/en/answers/276185",
        "fatwa_source_name": "IslamQA #276185",
        "overrides_keyword": "vin",
        "category": "vinegar",
    },
    {
        "id": "vinegar-wine-en",
        "pattern": "wine vinegar",
        "match_type": "contains",
        "priority": 110,
        "ruling_default": "doubtful",
        "ruling_hanafi": "halal",
        "ruling_shafii": "doubtful",
        "ruling_maliki": "doubtful",
        "ruling_hanbali": "halal",
        "confidence": 0.6,
        "explanation_fr": "Vinaigre de vin : halal (Hanafi, Hanbali), douteux (Chafii, Maliki).",
        "explanation_en": "Wine vinegar: halal (Hanafi, Hanbali), doubtful (Shafi'i, Maliki).",
        "scholarly_reference": "Muslim 2051, Abu Dawud 3675",
        "fatwa_source_url": "https://islamqa.info/en/answers/276185",
        "fatwa_source_name": "IslamQA #276185",
        "overrides_keyword": "wine",
        "category": "vinegar",
    },
    _uniform(
        "vinegar-fr", "vinaigre", "word_boundary", 105, "halal", 0.95,
        "Le vinaigre est halal par consensus : « Quel bon condiment que le vinaigre ! » (Muslim 2051).",
        "Vinegar is halal by consensus: 'What a good condiment vinegar is!' (Muslim 2051).",
        "vinegar", overrides_keyword="vin", scholarly_reference="Sahih Muslim 2051, 2052",
    ),
    _uniform(
        "vinegar-en", "vinegar", "word_boundary", 105, "halal", 0.95,
        "Le vinaigre est halal par consensus des quatre écoles (Muslim 2051).",
        "Vinegar is halal by consensus of all four schools (Muslim 2051).",
        "vinegar", overrides_keyword="wine", scholarly_reference="Sahih Muslim 2051",
    ),
    _uniform(
        "gelatin-bovine-halal", "gélatine bovine halal", "contains", 100, "halal", 0.98,
        "Gélatine issue de bovins abattus rituellement : halal.",
        "Gelatin from ritually slaughtered cattle: halal.",
        "gelatin", overrides_keyword="gélatine",
    ),
    _uniform(
        "gelatin-fish-fr", "gélatine de poisson", "contains", 100, "halal", 0.97,
        "Gélatine de poisson : halal, le poisson ne requiert pas d'abattage.",
        "Fish gelatin: halal, fish require no slaughter.",
        "gelatin", overrides_keyword="gélatine",
    ),
    _uniform(
        "gelatin-fish-en", "fish gelatin", "contains", 100, "halal", 0.97,
        "Gélatine de poisson : halal.",
        "Fish gelatin: halal.",
        "gelatin", overrides_keyword="gelatin",
    ),
    _uniform(
        "gelatin-halal-en", "halal gelatin", "contains", 100, "halal", 0.98,
        "Gélatine certifiée halal.",
        "Certified halal gelatin.",
        "gelatin", overrides_keyword="gelatin",
    ),
    _uniform(
        "rennet-microbial-fr", "présure microbienne", "contains", 100, "halal", 0.97,
        "Présure d'origine microbienne : halal.",
        "Microbial rennet: halal.",
        "rennet", overrides_keyword="présure",
    ),
    _uniform(
        "rennet-microbial-en", "microbial rennet", "contains", 100, "halal", 0.97,
        "Présure microbienne : halal (résolution IIFA 210).",
        "Microbial rennet: halal (IIFA Resolution 210).",
        "rennet", overrides_keyword="rennet",
    ),
    _uniform(
        "rennet-vegetable-en", "vegetable rennet", "contains", 100, "halal", 0.98,
        "Présure végétale : halal.",
        "Vegetable rennet: halal.",
        "rennet", overrides_keyword="rennet",
    ),
    _uniform(
        "fat-duck-fr", "graisse de canard", "contains", 100, "doubtful", 0.65,
        "Graisse de canard : licite si l'animal est abattu rituellement, sinon douteuse.",
        "Duck fat: permissible if the bird was ritually slaughtered, otherwise doubtful.",
        "animal_fat", overrides_keyword="lard",
    ),
    _uniform(
        "fat-goose-fr", "graisse d'oie", "contains", 100, "doubtful", 0.65,
        "Graisse d'oie : licite si l'animal est abattu rituellement, sinon douteuse.",
        "Goose fat: permissible if the bird was ritually slaughtered, otherwise doubtful.",
        "animal_fat", overrides_keyword="lard",
    ),

    # ── Haram compounds (50-99) ──
    _uniform(
        "gelatin-porcine-fr", "gélatine porcine", "contains", 90, "haram", 0.95,
        "Gélatine de porc : haram pour la majorité des savants (IIFA 210).",
        "Pork gelatin: haram for the majority of scholars (IIFA 210).",
        "gelatin", overrides_keyword="gélatine",
    ),
    _uniform(
        "gelatin-pork-fr", "gélatine de porc", "contains", 90, "haram", 0.95,
        "Gélatine de porc : haram.",
        "Pork gelatin: haram.",
        "gelatin", overrides_keyword="gélatine",
    ),
    _uniform(
        "gelatin-pork-en", "pork gelatin", "contains", 90, "haram", 0.95,
        "Gélatine de porc : haram.",
        "Pork gelatin: haram.",
        "gelatin", overrides_keyword="gelatin",
    ),
    _uniform(
        "fat-pork-fr", "graisse de porc", "contains", 90, "haram", 0.99,
        _PORK_FR, _PORK_EN, "pork",
    ),
    _uniform(
        "fat-animal-fr", r"graisses? animales?", "regex", 55, "doubtful", 0.6,
        "Graisse animale d'origine non précisée : douteuse.",
        "Animal fat of unspecified origin: doubtful.",
        "animal_fat",
    ),
    _uniform(
        "fat-tallow-fr", "suif", "word_boundary", 50, "doubtful", 0.6,
        "Suif : graisse bovine ou ovine, douteuse sans abattage rituel attesté.",
        "Tallow: beef or mutton fat, doubtful without attested ritual slaughter.",
        "animal_fat",
    ),

    # ── Keywords (1-49) ──
    _uniform("pork-fr", "porc", "word_boundary", 40, "haram", 0.99, _PORK_FR, _PORK_EN, "pork"),
    _uniform("pork-en", "pork", "word_boundary", 40, "haram", 0.99, _PORK_FR, _PORK_EN, "pork"),
    _uniform("lard", "lard", "word_boundary", 38, "haram", 0.99, _PORK_FR, _PORK_EN, "pork"),
    _uniform("saindoux", "saindoux", "word_boundary", 38, "haram", 0.99, _PORK_FR, _PORK_EN, "pork"),
    _uniform("wine-fr", "vin", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("wine-en", "wine", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("beer-fr", "bière", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("beer-en", "beer", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("rum-fr", "rhum", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("rum-en", "rum", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("whisky", "whisky", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("vodka", "vodka", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("brandy", "brandy", "word_boundary", 30, "haram", 0.99, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("alcohol-fr", "alcool", "word_boundary", 28, "haram", 0.95, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform("alcohol-en", "alcohol", "word_boundary", 28, "haram", 0.95, _KHAMR_FR, _KHAMR_EN, "alcohol"),
    _uniform(
        "ethanol-en", "ethanol", "word_boundary", 26, "haram", 0.9,
        "Éthanol ajouté : traité comme alcool (résolution IIFA 225 pour les traces).",
        "Added ethanol: treated as alcohol (IIFA Resolution 225 covers trace amounts).",
        "alcohol",
    ),
    _uniform(
        "ethanol-fr", "éthanol", "word_boundary", 26, "haram", 0.9,
        "Éthanol ajouté : traité comme alcool.",
        "Added ethanol: treated as alcohol.",
        "alcohol",
    ),
    _uniform(
        "gelatin-en", "gelatin", "word_boundary", 25, "doubtful", 0.6,
        "Gélatine d'origine non précisée : souvent porcine en Europe, donc douteuse.",
        "Gelatin of unspecified origin: often porcine in Europe, hence doubtful.",
        "gelatin",
    ),
    _uniform(
        "gelatin-fr", "gélatine", "word_boundary", 25, "doubtful", 0.6,
        "Gélatine d'origine non précisée : douteuse.",
        "Gelatin of unspecified origin: doubtful.",
        "gelatin",
    ),
    *[
        {
            "id": f"carmine-{pattern}",
            "pattern": pattern,
            "match_type": "word_boundary",
            "priority": 25,
            "ruling_default": "haram",
            "ruling_hanafi": "haram",
            "ruling_shafii": "haram",
            "ruling_maliki": "halal",
            "ruling_hanbali": "haram",
            "confidence": 0.8,
            "explanation_fr": (
                "Colorant extrait de la cochenille. Les Malikites autorisent les insectes "
                "sans sang ; les autres écoles l'interdisent."
            ),
            "explanation_en": (
                "Dye extracted from cochineal insects. Malikis permit bloodless insects; "
                "the other schools forbid it."
            ),
            "fatwa_source_name": "IslamQA #382570",
            "category": "insect_derived",
        }
        for pattern in ("carmine", "cochineal", "e120")
    ],
    *[
        {
            "id": f"rennet-{pattern}",
            "pattern": pattern,
            "match_type": "word_boundary",
            "priority": 20,
            "ruling_default": "doubtful",
            "ruling_hanafi": "halal",
            "ruling_shafii": "haram",
            "ruling_maliki": "haram",
            "ruling_hanbali": "halal",
            "confidence": 0.75,
            "explanation_fr": (
                "Présure d'origine non précisée. Hanafites et Hanbalites admettent la "
                "présure d'animal non abattu rituellement ; Chafiites et Malikites non."
            ),
            "explanation_en": (
                "Rennet of unspecified origin. Hanafis and Hanbalis accept rennet from "
                "animals not ritually slaughtered; Shafi'is and Malikis do not."
            ),
            "fatwa_source_name": "IslamQA #115306",
            "category": "rennet",
        }
        for pattern in ("rennet", "présure")
    ],
    *[
        {
            "id": f"whey-{pattern}",
            "pattern": pattern,
            "match_type": "word_boundary",
            "priority": 18,
            "ruling_default": "doubtful",
            "ruling_hanafi": "halal",
            "ruling_shafii": "doubtful",
            "ruling_maliki": "doubtful",
            "ruling_hanbali": "halal",
            "confidence": 0.6,
            "explanation_fr": "Lactosérum : dépend de la présure utilisée pour le fromage.",
            "explanation_en": "Whey: depends on the rennet used to make the cheese.",
            "fatwa_source_name": "IslamWeb #198295",
            "category": "rennet",
        }
        for pattern in ("whey", "lactosérum")
    ],
    {
        "id": "emulsifier-e471",
        "pattern": "e471",
        "match_type": "word_boundary",
        "priority": 18,
        "ruling_default": "doubtful",
        "confidence": 0.9,
        "explanation_fr": "E471 : mono- et diglycérides d'origine animale ou végétale, douteux sans précision.",
        "explanation_en": "E471: mono- and diglycerides of animal or plant origin, doubtful unless specified.",
        "fatwa_source_name": "IslamWeb #387325, IslamQA #97541",
        "overrides_keyword": "mono-",
        "category": "emulsifier",
    },
    {
        "id": "emulsifier-mono",
        "pattern": "mono-",
        "match_type": "contains",
        "priority": 15,
        "ruling_default": "doubtful",
        "confidence": 0.9,
        "explanation_fr": "Mono- et diglycérides d'acides gras : origine à vérifier.",
        "explanation_en": "Mono- and diglycerides of fatty acids: origin must be checked.",
        "category": "emulsifier",
    },
    *[
        {
            "id": f"emulsifier-{pattern}",
            "pattern": pattern,
            "match_type": "word_boundary",
            "priority": 15,
            "ruling_default": "doubtful",
            "confidence": 0.9,
            "explanation_fr": "Glycérides d'acides gras : origine à vérifier.",
            "explanation_en": "Glycerides of fatty acids: origin must be checked.",
            "category": "emulsifier",
        }
        for pattern in ("diglycerides", "monoglycérides")
    ],
    *[
        _uniform(
            f"cysteine-{i}", pattern, match_type, 20, "doubtful", 0.55,
            "L-cystéine : peut provenir de plumes, de cheveux humains ou de synthèse.",
            "L-cysteine: may come from feathers, human hair or fermentation.",
            "amino_acid",
        )
        for i, (pattern, match_type) in enumerate((
            ("l-cystéine", "contains"),
            ("l-cysteine", "contains"),
            ("e920", "word_boundary"),
        ))
    ],
]


@lru_cache(maxsize=1)
def default_additive_table() -> AdditiveTable:
    return AdditiveTable.from_rows(ADDITIVES, MADHAB_RULINGS)


@lru_cache(maxsize=1)
def default_rule_set() -> RuleSet:
    """
    The shipped rule set, compiled once per process.

    Curated rules plus one rule per additive code they do not already cover.
    """
    additive_rules = default_additive_table().to_rules(
        exclude_patterns=(r["pattern"] for r in INGREDIENT_RULES),
    )
    return RuleSet.load([*INGREDIENT_RULES, *additive_rules], version=RULE_SET_VERSION)
