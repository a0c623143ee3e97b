"""Exceptions raised by services and repositories.

Callers catch ``SparkbooksError`` to present a message.
"""

from __future__ import annotations


class SparkbooksError(Exception):
    """Base class for every error this package raises on purpose."""


class NotFoundError(SparkbooksError, ValueError):
    """A referenced customer, job, item or document does not exist."""


class ValidationError(SparkbooksError, ValueError):
    """Input was rejected before reaching the store."""

    @classmethod
    def from_pydantic(cls, exc) -> ValidationError:
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            msg = err.get("msg", "invalid value")
            parts.append(f"{loc}: {msg}" if loc else msg)
        return cls("; ".join(parts) or str(exc))


class StoreError(SparkbooksError, RuntimeError):
    """The database call failed. The driver message is kept as-is."""


class DuplicateNumberError(StoreError):
    """A document number collided with the unique constraint."""

    def __init__(self, number: str) -> None:
        super().__init__(f"Document number already in use: {number}")
        self.number = number
