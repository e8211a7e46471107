"""
Additive Table

E-number lookup: each code carries a default halal status and, for
some codes, a ruling per school. A school without its own ruling falls
back to the default.

The table also compiles into word-boundary ingredient rules, so an
E-code on a label resolves through the same IngredientRulingResolver
as any ingredient word.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping, Optional

from naqiy.errors import ConfigurationError
from naqiy.rulings import Explanation, IngredientRule, MatchType, Ruling, normalize_text
from naqiy.scopes import MADHABS, Scope

# Below every curated keyword, so a named ingredient beside its code decides
ADDITIVE_PRIORITY = 12

# Known-origin additives are settled; mixed origin is what makes a code doubtful
ORIGIN_CONFIDENCE = {
    "plant": 0.9,
    "synthetic": 0.9,
    "mineral": 0.9,
    "animal": 0.8,
    "insect": 0.8,
    "mixed": 0.6,
}

_SEPARATORS = re.compile(r"[\s.\-]")
_CODE_RE = re.compile(r"^E(\d{3,4})([A-Z]{0,4})$")


def normalize_code(raw: Optional[str]) -> Optional[str]:
    """
    Canonical table code, or None when the text is not an E-number.

    "e 471" / "E-471" / "en:e322i" → "E471" / "E471" / "E322I"
    """
    text = _SEPARATORS.sub("", (raw or "").upper())
    if text.startswith("EN:"):
        text = text[3:]
    return text if _CODE_RE.match(text) else None


@dataclass(frozen=True)
class SchoolRuling:
    ruling: Ruling
    explanation_fr: str
    scholarly_reference: Optional[str] = None


@dataclass(frozen=True)
class Additive:
    code: str
    name_fr: str
    name_en: Optional[str]
    category: str
    origin: str
    ruling_default: Ruling
    explanation_fr: Optional[str] = None
    school_rulings: Mapping[Scope, SchoolRuling] = field(default_factory=dict)

    def ruling_for(self, scope: Scope | str | None = Scope.GENERAL) -> Ruling:
        school = self.school_rulings.get(Scope.parse(scope))
        return school.ruling if school else self.ruling_default

    def explanation_for(self, scope: Scope | str | None = Scope.GENERAL) -> Optional[str]:
        school = self.school_rulings.get(Scope.parse(scope))
        return school.explanation_fr if school else self.explanation_fr

    @property
    def confidence(self) -> float:
        return ORIGIN_CONFIDENCE.get(self.origin, 0.6)

    def to_rule(self, priority: int = ADDITIVE_PRIORITY) -> IngredientRule:
        rulings = {
            f"ruling_{s.value}": self.school_rulings[s].ruling
            for s in MADHABS if s in self.school_rulings
        }
        references = sorted({
            r.scholarly_reference for r in self.school_rulings.values() if r.scholarly_reference
        })
        label_en = f"{self.code} ({self.name_en})" if self.name_en else self.code
        return IngredientRule(
            id=f"additive-{self.code.lower()}",
            pattern=self.code.lower(),
            match_type=MatchType.WORD_BOUNDARY,
            priority=priority,
            ruling_default=self.ruling_default,
            explanation=Explanation(
                fr=f"{self.code} ({self.name_fr}) : {self.explanation_fr or self.ruling_default.value}",
                en=label_en,
            ),
            confidence=self.confidence,
            scholarly_reference=", ".join(references) or None,
            category=self.category,
            **rulings,
        )

    def to_dict(self, scope: Scope | str | None = Scope.GENERAL) -> dict:
        scope = Scope.parse(scope)
        return {
            "code": self.code,
            "name_fr": self.name_fr,
            "name_en": self.name_en,
            "category": self.category,
            "origin": self.origin,
            "scope": scope.value,
            "ruling": self.ruling_for(scope).value,
            "ruling_default": self.ruling_default.value,
            "explanation": self.explanation_for(scope),
            "school_specific": scope in self.school_rulings,
            "confidence": self.confidence,
        }


class AdditiveTable:
    """Immutable code → Additive index."""

    def __init__(self, additives: Iterable[Additive]):
        self._by_code: dict[str, Additive] = {}
        for additive in additives:
            if additive.code in self._by_code:
                raise ConfigurationError(f"Duplicate additive code '{additive.code}'")
            self._by_code[additive.code] = additive

    @classmethod
    def from_rows(
        cls,
        additives: Iterable[tuple],
        school_rulings: Iterable[tuple] = (),
    ) -> "AdditiveTable":
        """
        Build from seed tuples.

        Raises:
            ConfigurationError: malformed code, unknown ruling or school,
                or a school ruling for a code not in the table.
        """
        per_code: dict[str, dict[Scope, SchoolRuling]] = {}
        for code, school, ruling, explanation, reference in school_rulings:
            try:
                scope = Scope.parse(school)
                entry = SchoolRuling(Ruling(ruling), explanation, reference or None)
            except ValueError as e:
                raise ConfigurationError(f"Invalid school ruling for {code}: {e}") from None
            if scope not in MADHABS:
                raise ConfigurationError(f"School ruling for {code} names no school: {school!r}")
            per_code.setdefault(code, {})[scope] = entry

        built = []
        for code, name_fr, name_en, category, origin, ruling, explanation in additives:
            if normalize_code(code) != code:
                raise ConfigurationError(f"Malformed additive code {code!r}")
            try:
                default = Ruling(ruling)
            except ValueError as e:
                raise ConfigurationError(f"Invalid ruling for {code}: {e}") from None
            built.append(Additive(
                code=code, name_fr=name_fr, name_en=name_en or None,
                category=category, origin=origin, ruling_default=default,
                explanation_fr=explanation or None,
                school_rulings=per_code.pop(code, {}),
            ))

        if per_code:
            raise ConfigurationError(
                f"School rulings for unknown additive(s): {', '.join(sorted(per_code))}"
            )
        return cls(built)

    def __len__(self) -> int:
        return len(self._by_code)

    def __iter__(self) -> Iterator[Additive]:
        return iter(sorted(self._by_code.values(), key=lambda a: a.code))

    def __contains__(self, code: str) -> bool:
        return self.lookup(code) is not None

    def lookup(self, code: Optional[str]) -> Optional[Additive]:
        """
        Find an additive by any spelling of its code.

        A sub-variant missing from the table resolves to its parent
        ("E322I" → "E322", "E150AII" → "E150A").
        """
        canonical = normalize_code(code)
        if canonical is None:
            return None
        match = _CODE_RE.match(canonical)
        digits, suffix = match.group(1), match.group(2)
        for n in range(len(suffix), -1, -1):
            found = self._by_code.get(f"E{digits}{suffix[:n]}")
            if found:
                return found
        return None

    def for_tags(self, tags: Iterable[str], scope: Scope | str | None = Scope.GENERAL) -> list[dict]:
        """Additives behind a product's tags, once each, in tag order. Unknown tags are skipped."""
        scope = Scope.parse(scope)
        seen: set[str] = set()
        out = []
        for tag in tags:
            additive = self.lookup(tag)
            if additive and additive.code not in seen:
                seen.add(additive.code)
                out.append(additive.to_dict(scope))
        return out

    def to_rules(
        self,
        exclude_patterns: Iterable[str] = (),
        priority: int = ADDITIVE_PRIORITY,
    ) -> list[IngredientRule]:
        """One word-boundary rule per code not already covered by a curated pattern."""
        covered = {normalize_text(p) for p in exclude_patterns}
        return [
            a.to_rule(priority) for a in self
            if normalize_text(a.code) not in covered
        ]
