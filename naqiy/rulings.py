"""
Ingredient Ruling Resolver

Classifies an ingredient or additive string as halal, doubtful or
haram against a versioned rule set.

Pipeline per call:
  1. Normalize the text (accents stripped, casefold, straight apostrophes,
     single spaces).
  2. Collect candidate rules whose pattern matches under their match type.
  3. Drop every candidate overridden by a matched candidate of strictly
     higher priority.
  4. Rank survivors: priority desc, then longer pattern, then rule id.
  5. Return the top survivor's ruling for the scope, or NO_MATCH.

Priority bands are a convention, not enforced:
  100+   compounds proven safe despite a haram keyword (wine vinegar)
  50-99  compounds proven haram (pork gelatin)
  1-49   bare keywords

Rule sets are validated and compiled once by RuleSet.load(). Bad regex
and override cycles fail there, never during resolution. A rule that
fails while matching is logged and skipped.
"""

from __future__ import annotations

import math
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from naqiy.errors import ConfigurationError, DataIntegrityError
from naqiy.logging import get_logger
from naqiy.normalizer import strip_diacritics
from naqiy.scopes import MADHABS, Scope

logger = get_logger("rulings")


class Ruling(str, Enum):
    HALAL = "halal"
    DOUBTFUL = "doubtful"
    HARAM = "haram"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {Ruling.HALAL: 0, Ruling.DOUBTFUL: 1, Ruling.HARAM: 2}


class MatchType(str, Enum):
    EXACT = "exact"
    CONTAINS = "contains"
    WORD_BOUNDARY = "word_boundary"
    REGEX = "regex"


_APOSTROPHES = str.maketrans({
    "’": "'", "‘": "'", "ʼ": "'", "`": "'", "´": "'",
})
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Canonical form used for both patterns and inputs.

    Accents are dropped so "LACTOSERUM" on a label matches "lactosérum".
    """
    text = unicodedata.normalize("NFC", strip_diacritics(text or ""))
    text = text.translate(_APOSTROPHES).casefold()
    return _WHITESPACE.sub(" ", text).strip()


# ============================================================
# RULES
# ============================================================

@dataclass(frozen=True)
class Explanation:
    """Rule explanation. French is always present."""
    fr: str
    en: Optional[str] = None
    ar: Optional[str] = None

    def get(self, language: str = "fr") -> str:
        return getattr(self, language, None) or self.fr

    def to_dict(self) -> dict:
        return {"fr": self.fr, "en": self.en, "ar": self.ar}


@dataclass(frozen=True)
class IngredientRule:
    id: str
    pattern: str
    match_type: MatchType
    priority: int
    ruling_default: Ruling
    explanation: Explanation
    confidence: float = 1.0
    ruling_hanafi: Optional[Ruling] = None
    ruling_shafii: Optional[Ruling] = None
    ruling_maliki: Optional[Ruling] = None
    ruling_hanbali: Optional[Ruling] = None
    overrides_keyword: Optional[str] = None
    scholarly_reference: Optional[str] = None
    fatwa_source_url: Optional[str] = None
    fatwa_source_name: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True

    def ruling_for(self, scope: Scope | str | None = Scope.GENERAL) -> Ruling:
        """School-specific ruling, falling back to the default."""
        scope = Scope.parse(scope)
        if scope is Scope.GENERAL:
            return self.ruling_default
        return getattr(self, f"ruling_{scope.value}") or self.ruling_default

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IngredientRule":
        """Build from a seed/fixture mapping with flat explanation_* keys."""
        try:
            match_type = MatchType(data.get("match_type", "contains"))
            default = Ruling(data["ruling_default"])
            per_scope = {
                f"ruling_{s.value}": (
                    Ruling(data[f"ruling_{s.value}"])
                    if data.get(f"ruling_{s.value}") else None
                )
                for s in MADHABS
            }
        except (KeyError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid rule {data.get('id') or data.get('pattern')!r}: {e}"
            ) from None

        pattern = data.get("pattern")
        if not pattern:
            raise ConfigurationError(f"Rule {data.get('id')!r} has no pattern")

        explanation = data.get("explanation")
        if not isinstance(explanation, Explanation):
            explanation = Explanation(
                fr=data.get("explanation_fr") or "",
                en=data.get("explanation_en"),
                ar=data.get("explanation_ar"),
            )

        return cls(
            id=data.get("id") or f"{match_type.value}:{normalize_text(pattern)}",
            pattern=pattern,
            match_type=match_type,
            priority=int(data.get("priority", 0)),
            ruling_default=default,
            explanation=explanation,
            confidence=data.get("confidence", 1.0),
            overrides_keyword=data.get("overrides_keyword"),
            scholarly_reference=data.get("scholarly_reference"),
            fatwa_source_url=data.get("fatwa_source_url"),
            fatwa_source_name=data.get("fatwa_source_name"),
            category=data.get("category"),
            is_active=data.get("is_active", True),
            **per_scope,
        )


@dataclass(frozen=True)
class RulingMatch:
    """The applicable ruling for one input under one scope."""
    rule_id: str
    pattern: str
    ruling: Ruling
    confidence: float
    explanation: Explanation
    scope: Scope
    priority: int
    category: Optional[str] = None
    scholarly_reference: Optional[str] = None
    fatwa_source_url: Optional[str] = None

    matched = True

    def to_dict(self, language: str = "fr") -> dict:
        return {
            "matched": True,
            "rule_id": self.rule_id,
            "pattern": self.pattern,
            "ruling": self.ruling.value,
            "confidence": self.confidence,
            "explanation": self.explanation.get(language),
            "scope": self.scope.value,
            "priority": self.priority,
            "category": self.category,
            "scholarly_reference": self.scholarly_reference,
            "fatwa_source_url": self.fatwa_source_url,
        }


class NoMatch:
    """Sentinel for unclassified input. Falsy, and never a ruling."""
    __slots__ = ()

    matched = False
    ruling = None
    confidence = None
    rule_id = None

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"

    def to_dict(self, language: str = "fr") -> dict:
        return {"matched": False, "ruling": None, "rule_id": None}


NO_MATCH = NoMatch()

Resolution = Union[RulingMatch, NoMatch]


# ============================================================
# RULE SET
# ============================================================

@dataclass(frozen=True)
class _CompiledRule:
    rule: IngredientRule
    normalized: str
    regex: Optional[re.Pattern[str]] = None

    def matches(self, text: str) -> bool:
        kind = self.rule.match_type
        if kind is MatchType.EXACT:
            return text == self.normalized
        if kind is MatchType.CONTAINS:
            return self.normalized in text
        return self.regex.search(text) is not None


def _compile(rule: IngredientRule) -> _CompiledRule:
    normalized = normalize_text(rule.pattern)
    if rule.match_type is MatchType.WORD_BOUNDARY:
        regex = re.compile(rf"(?<!\w){re.escape(normalized)}(?!\w)")
    elif rule.match_type is MatchType.REGEX:
        try:
            regex = re.compile(strip_diacritics(rule.pattern), re.IGNORECASE)
        except re.error as e:
            raise ConfigurationError(
                f"Rule '{rule.id}' has an invalid regex {rule.pattern!r}: {e}"
            ) from None
    else:
        regex = None
    return _CompiledRule(rule=rule, normalized=normalized, regex=regex)


def _check_confidence(rule: IngredientRule) -> None:
    c = rule.confidence
    if not isinstance(c, (int, float)) or isinstance(c, bool) or math.isnan(c) or not 0.0 <= c <= 1.0:
        raise DataIntegrityError(
            f"Rule '{rule.id}' has confidence {c!r} outside [0, 1]",
            field="confidence", value=c,
        )


class RuleSet:
    """Immutable, versioned, pre-compiled rules plus the resolved override graph."""

    def __init__(
        self,
        compiled: tuple[_CompiledRule, ...],
        version: str,
        overrides: Mapping[str, frozenset[str]],
    ):
        self._compiled = compiled
        self._by_id = {c.rule.id: c for c in compiled}
        self.version = version
        # rule id -> ids it suppresses
        self.overrides = dict(overrides)
        # rule id -> ids that suppress it
        overridden_by: dict[str, set[str]] = {}
        for source, targets in self.overrides.items():
            for target in targets:
                overridden_by.setdefault(target, set()).add(source)
        self.overridden_by = {k: frozenset(v) for k, v in overridden_by.items()}

    @classmethod
    def load(
        cls,
        rules: Iterable[IngredientRule | Mapping[str, Any]],
        version: str = "1",
    ) -> "RuleSet":
        """
        Validate and compile a rule collection.

        Raises:
            ConfigurationError: invalid regex, duplicate id, malformed
                rule, or a cycle in the override graph.
            DataIntegrityError: confidence outside [0, 1].
        """
        log = logger.bind(rule_set_version=version)
        compiled: list[_CompiledRule] = []
        seen: set[str] = set()
        for item in rules:
            rule = item if isinstance(item, IngredientRule) else IngredientRule.from_dict(item)
            if not rule.is_active:
                continue
            if rule.id in seen:
                raise ConfigurationError(f"Duplicate rule id '{rule.id}'")
            seen.add(rule.id)
            _check_confidence(rule)
            compiled.append(_compile(rule))

        by_pattern: dict[str, list[str]] = {}
        for c in compiled:
            by_pattern.setdefault(c.normalized, []).append(c.rule.id)

        overrides: dict[str, frozenset[str]] = {}
        for c in compiled:
            keyword = c.rule.overrides_keyword
            if not keyword:
                continue
            targets = [
                rid for rid in by_pattern.get(normalize_text(keyword), [])
                if rid != c.rule.id
            ]
            if not targets:
                log.warning(
                    "Override target not found in rule set",
                    extra={"rule_id": c.rule.id, "pattern": keyword},
                )
                continue
            overrides[c.rule.id] = frozenset(targets)

        _reject_cycles(overrides)

        log.info("Rule set loaded", extra={"processed": len(compiled)})
        return cls(tuple(compiled), version, overrides)

    def __len__(self) -> int:
        return len(self._compiled)

    def __iter__(self) -> Iterator[IngredientRule]:
        return (c.rule for c in self._compiled)

    def get(self, rule_id: str) -> Optional[IngredientRule]:
        c = self._by_id.get(rule_id)
        return c.rule if c else None

    @property
    def compiled(self) -> tuple[_CompiledRule, ...]:
        return self._compiled


def _reject_cycles(edges: Mapping[str, frozenset[str]]) -> None:
    """Depth-first search over the override graph. Any back edge is a cycle."""
    WHITE, GREY, BLACK = 0, 1, 2
    color: dict[str, int] = {}

    def visit(node: str, path: list[str]) -> None:
        color[node] = GREY
        path.append(node)
        for nxt in sorted(edges.get(node, ())):
            state = color.get(nxt, WHITE)
            if state == GREY:
                cycle = path[path.index(nxt):] + [nxt]
                raise ConfigurationError(
                    f"Override cycle between rules: {' -> '.join(cycle)}"
                )
            if state == WHITE:
                visit(nxt, path)
        path.pop()
        color[node] = BLACK

    for node in sorted(edges):
        if color.get(node, WHITE) == WHITE:
            visit(node, [])


# ============================================================
# RESOLVER
# ============================================================

def pattern_matches(text: str, pattern: str, match_type: MatchType | str) -> bool:
    """
    One-off match of a single pattern, outside any rule set.

    Unlike RuleSet.load(), an invalid regex here is reported as no match.
    """
    kind = MatchType(match_type)
    rule = IngredientRule(
        id="adhoc", pattern=pattern, match_type=kind, priority=0,
        ruling_default=Ruling.DOUBTFUL, explanation=Explanation(fr=""),
    )
    try:
        compiled = _compile(rule)
    except ConfigurationError:
        logger.warning("Invalid ad-hoc regex", extra={"pattern": pattern})
        return False
    return compiled.matches(normalize_text(text))


class IngredientRulingResolver:
    """Stateless resolver bound to one rule set. Safe to share across threads."""

    def __init__(self, rule_set: RuleSet):
        self.rule_set = rule_set
        self._log = logger.bind(rule_set_version=rule_set.version)

    def _candidates(self, normalized: str) -> list[_CompiledRule]:
        found = []
        for c in self.rule_set.compiled:
            try:
                if c.matches(normalized):
                    found.append(c)
            except Exception as e:
                self._log.warning(
                    "Rule failed while matching; skipped",
                    extra={"rule_id": c.rule.id, "error": str(e),
                           "error_type": type(e).__name__},
                )
        return found

    def _survivors(self, candidates: list[_CompiledRule]) -> list[_CompiledRule]:
        priority = {c.rule.id: c.rule.priority for c in candidates}
        overridden_by = self.rule_set.overridden_by

        # An override only applies when the overrider outranks its target.
        def suppressed(c: _CompiledRule) -> bool:
            return any(
                priority[s] > c.rule.priority
                for s in overridden_by.get(c.rule.id, ())
                if s in priority
            )

        survivors = [c for c in candidates if not suppressed(c)]
        survivors.sort(key=lambda c: (-c.rule.priority, -len(c.normalized), c.rule.id))
        return survivors

    @staticmethod
    def _to_match(c: _CompiledRule, scope: Scope) -> RulingMatch:
        rule = c.rule
        return RulingMatch(
            rule_id=rule.id,
            pattern=rule.pattern,
            ruling=rule.ruling_for(scope),
            confidence=float(rule.confidence),
            explanation=rule.explanation,
            scope=scope,
            priority=rule.priority,
            category=rule.category,
            scholarly_reference=rule.scholarly_reference,
            fatwa_source_url=rule.fatwa_source_url,
        )

    def match_all(self, text: str, scope: Scope | str | None = Scope.GENERAL) -> list[RulingMatch]:
        """Every surviving match, best first. Empty when nothing applies."""
        scope = Scope.parse(scope)
        normalized = normalize_text(text)
        if not normalized:
            return []
        survivors = self._survivors(self._candidates(normalized))
        return [self._to_match(c, scope) for c in survivors]

    def resolve(self, text: str, scope: Scope | str | None = Scope.GENERAL) -> Resolution:
        """The single applicable ruling, or NO_MATCH."""
        matches = self.match_all(text, scope)
        return matches[0] if matches else NO_MATCH

    def describe(self) -> list[dict]:
        """Rule set listing for read endpoints."""
        out = []
        for rule in self.rule_set:
            out.append({
                "id": rule.id,
                "pattern": rule.pattern,
                "match_type": rule.match_type.value,
                "priority": rule.priority,
                "ruling_default": rule.ruling_default.value,
                "rulings": {s.value: rule.ruling_for(s).value for s in MADHABS},
                "confidence": rule.confidence,
                "category": rule.category,
                "overrides": sorted(self.rule_set.overrides.get(rule.id, ())),
                "scholarly_reference": rule.scholarly_reference,
                "fatwa_source_name": rule.fatwa_source_name,
            })
        return out
