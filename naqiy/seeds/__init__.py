"""
Seed fixtures: the ingredient rule set, the E-number additive table
and sample certifying bodies.
"""

from naqiy.seeds.certifiers import CERTIFIERS, EVENTS
from naqiy.seeds.rulings import (
    INGREDIENT_RULES,
    RULE_SET_VERSION,
    default_additive_table,
    default_rule_set,
)


def seed_store(store) -> int:
    """Load the sample bodies and events into a CertifierStore."""
    return store.load(CERTIFIERS, EVENTS)


__all__ = [
    "CERTIFIERS",
    "EVENTS",
    "INGREDIENT_RULES",
    "RULE_SET_VERSION",
    "default_additive_table",
    "default_rule_set",
    "seed_store",
]
