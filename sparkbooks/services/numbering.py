"""Daily sequential document numbers: ``PREFIX-YYYYMMDD-NNNN``.

The sequence restarts at 1 each day for each prefix.  Past 9999 the suffix
simply grows a fifth digit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TypeVar

from sparkbooks.constants import SEQUENCE_WIDTH, today
from sparkbooks.errors import DuplicateNumberError, StoreError, ValidationError
from sparkbooks.repositories.base import DocumentRepository
from sparkbooks.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def date_stamp(day: date) -> str:
    return day.strftime("%Y%m%d")


def number_pattern(prefix: str, day: date) -> str:
    """LIKE pattern matching every number issued for ``prefix`` on ``day``."""
    return f"{prefix}-{date_stamp(day)}-%"


def format_number(prefix: str, day: date, sequence: int) -> str:
    return f"{prefix}-{date_stamp(day)}-{sequence:0{SEQUENCE_WIDTH}d}"


def next_sequence(latest: str | None) -> int:
    if not latest:
        return 1
    parts = latest.split("-")
    if len(parts) < 3 or not parts[2].isdigit():
        raise ValidationError(f"Cannot read sequence from document number {latest!r}")
    return int(parts[2]) + 1


class DocumentNumberGenerator:
    def __init__(self, repo: DocumentRepository, prefix: str) -> None:
        self.repo = repo
        self.prefix = prefix

    def generate(self, day: date | None = None) -> str:
        day = day or today()
        latest = self.repo.latest_number(number_pattern(self.prefix, day))
        number = format_number(self.prefix, day, next_sequence(latest))
        logger.debug("Generated document number %s (latest=%s)", number, latest)
        return number

    def insert_numbered(self, insert: Callable[[str], T], number: str | None = None) -> T:
        """Run ``insert`` with a document number, generating one if needed.

        A caller-supplied number that is already taken is a validation error.
        A generated one that loses a race against a concurrent insert is
        regenerated, up to ``settings.number_max_attempts`` times.
        """
        if number is not None:
            try:
                return insert(number)
            except DuplicateNumberError as exc:
                raise ValidationError(str(exc)) from exc

        attempts = settings.number_max_attempts
        for attempt in range(1, attempts + 1):
            candidate = self.generate()
            try:
                return insert(candidate)
            except DuplicateNumberError:
                logger.warning(
                    "Number %s was taken concurrently, retrying (attempt %d/%d)",
                    candidate,
                    attempt,
                    attempts,
                )
        raise StoreError(f"Could not allocate a unique {self.prefix} number after {attempts} attempts")
