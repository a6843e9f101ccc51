"""Error taxonomy for ``finwise``.

The budget and goal functions are pure; any error they raise is an input or
programming error, never a transient fault, so nothing here is retried.
"""

from __future__ import annotations


class FinwiseError(Exception):
    """Base class for all domain errors raised by ``finwise``."""


class NotFoundError(FinwiseError, LookupError):
    """A referenced entity does not exist for the calling user."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} not found: {entity_id!r}")
        self.kind = kind
        self.entity_id = entity_id


class ValidationError(FinwiseError, ValueError):
    """An amount, limit, or enum value failed a boundary check."""


__all__ = ["FinwiseError", "NotFoundError", "ValidationError"]
