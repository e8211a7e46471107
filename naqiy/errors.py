"""
Error Taxonomy

  ConfigurationError  — bad reference data or weight tables. Raised at
                        load/construction time, never per evaluated item.
  DataIntegrityError  — stored facts that cannot be trusted (malformed
                        timestamps, out-of-range confidences). Propagated
                        to the caller, never coerced to a default.

Unknown inputs (unrecognized allergens, unclassified ingredients,
undisclosed practices) are NOT errors. They produce no contribution.
"""

from __future__ import annotations


class NaqiyError(Exception):
    """Base class for engine errors."""


class ConfigurationError(NaqiyError):
    """Reference data or configuration is invalid."""


class DataIntegrityError(NaqiyError):
    """Input facts are malformed and must not be silently defaulted."""

    def __init__(self, message: str, field: str | None = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value
