"""
Allergen Matcher

Cross-matches a user's declared allergens (free text, FR/EN) against a
product's allergen and trace tag lists (`en:` canonical tags).

  direct tag hit  → direct / high
  trace tag hit   → trace / medium

Both can fire for the same allergen. Unknown names are not an error,
they simply match nothing.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

DIRECT = "direct"
TRACE = "trace"
SEVERITY = {DIRECT: "high", TRACE: "medium"}

# FR/EN spelling → canonical tag
DEFAULT_SYNONYMS: dict[str, str] = {
    # Milk
    "lactose": "en:milk",
    "lait": "en:milk",
    "milk": "en:milk",
    "produits laitiers": "en:milk",
    "dairy": "en:milk",
    # Peanuts
    "arachides": "en:peanuts",
    "cacahuètes": "en:peanuts",
    "peanuts": "en:peanuts",
    # Gluten
    "gluten": "en:gluten",
    "blé": "en:gluten",
    "wheat": "en:gluten",
    "seigle": "en:gluten",
    "orge": "en:gluten",
    "avoine": "en:gluten",
    # Eggs
    "oeufs": "en:eggs",
    "œufs": "en:eggs",
    "eggs": "en:eggs",
    # Soy
    "soja": "en:soybeans",
    "soy": "en:soybeans",
    "soybeans": "en:soybeans",
    # Tree nuts
    "fruits à coque": "en:nuts",
    "noix": "en:nuts",
    "noisettes": "en:nuts",
    "amandes": "en:nuts",
    "nuts": "en:nuts",
    "almonds": "en:nuts",
    "hazelnuts": "en:nuts",
    "pistaches": "en:nuts",
    "cajou": "en:nuts",
    "noix de cajou": "en:nuts",
    # Fish
    "poisson": "en:fish",
    "fish": "en:fish",
    # Crustaceans
    "crustacés": "en:crustaceans",
    "crustaceans": "en:crustaceans",
    "crevettes": "en:crustaceans",
    "shrimp": "en:crustaceans",
    # Molluscs
    "mollusques": "en:molluscs",
    "molluscs": "en:molluscs",
    # Celery
    "céleri": "en:celery",
    "celery": "en:celery",
    # Mustard
    "moutarde": "en:mustard",
    "mustard": "en:mustard",
    # Sesame
    "sésame": "en:sesame-seeds",
    "sesame": "en:sesame-seeds",
    # Lupin
    "lupin": "en:lupin",
    # Sulphites
    "sulfites": "en:sulphur-dioxide-and-sulphites",
    "dioxyde de soufre": "en:sulphur-dioxide-and-sulphites",
    "sulphur dioxide": "en:sulphur-dioxide-and-sulphites",
}


def _normalize(name: str) -> str:
    return " ".join(unicodedata.normalize("NFC", name or "").lower().split())


class AllergenSynonymTable:
    """Case-insensitive many-to-one lookup from free-text names to tags."""

    def __init__(self, synonyms: Mapping[str, str]):
        self._map = {_normalize(k): v.lower() for k, v in synonyms.items()}
        self._tags = frozenset(self._map.values())

    def lookup(self, name: str) -> Optional[str]:
        """Canonical tag for a name, or None when unknown."""
        key = _normalize(name)
        if key in self._map:
            return self._map[key]
        # Already a known canonical tag ("en:milk")
        if key in self._tags:
            return key
        return None

    @property
    def tags(self) -> frozenset[str]:
        return self._tags

    def __len__(self) -> int:
        return len(self._map)


default_table = AllergenSynonymTable(DEFAULT_SYNONYMS)


@dataclass(frozen=True)
class AllergenMatch:
    user_allergen: str
    canonical_tag: str
    match_class: str
    severity: str

    def to_dict(self) -> dict:
        return {
            "user_allergen": self.user_allergen,
            "canonical_tag": self.canonical_tag,
            "match_class": self.match_class,
            "severity": self.severity,
        }


def match_allergens(
    user_allergens: Iterable[str],
    direct_tags: Iterable[str],
    trace_tags: Iterable[str],
    table: AllergenSynonymTable = default_table,
) -> list[AllergenMatch]:
    """Every cross-match, in input order, direct before trace."""
    direct = {t.strip().lower() for t in direct_tags if t}
    traces = {t.strip().lower() for t in trace_tags if t}

    matches: list[AllergenMatch] = []
    for allergen in user_allergens:
        tag = table.lookup(allergen)
        if tag is None:
            continue
        if tag in direct:
            matches.append(AllergenMatch(allergen, tag, DIRECT, SEVERITY[DIRECT]))
        if tag in traces:
            matches.append(AllergenMatch(allergen, tag, TRACE, SEVERITY[TRACE]))
    return matches
