"""Lifecycle of estimates and invoices.

``DocumentService`` holds everything the two document kinds share: creation
from a job's line items, validated partial updates, status changes and
deletion.  ``EstimateService`` and ``InvoiceService`` fill in the column
names, schemas and defaults.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Generic

from pydantic import BaseModel

from sparkbooks.constants import today
from sparkbooks.errors import DuplicateNumberError, NotFoundError, ValidationError
from sparkbooks.models.document import DocumentDraft, check_document_number
from sparkbooks.repositories.base import DocumentRepository, DocumentT, JobRepository
from sparkbooks.services.numbering import DocumentNumberGenerator
from sparkbooks.services.totals import apply_totals, compute_subtotal, document_totals
from sparkbooks.services.validation import parse_input, patch_fields
from sparkbooks.settings import settings

logger = logging.getLogger(__name__)


class DocumentService(Generic[DocumentT]):
    prefix: ClassVar[str]
    label: ClassVar[str]
    number_field: ClassVar[str]
    date_field: ClassVar[str]
    status_enum: ClassVar[type[Enum]]
    update_schema: ClassVar[type[BaseModel]]

    def __init__(self, repo: DocumentRepository[DocumentT], job_repo: JobRepository) -> None:
        self.repo = repo
        self.job_repo = job_repo
        self.numbers = DocumentNumberGenerator(repo, self.prefix)

    def _default_term_days(self) -> int:
        raise NotImplementedError

    def _build(self, fields: dict[str, Any]) -> DocumentT:
        raise NotImplementedError

    # ---- Reads ----

    def list_documents(self) -> list[DocumentT]:
        result = self.repo.list_all()
        logger.debug("Listed %d %ss", len(result), self.label)
        return result

    def list_for_job(self, job_id: int) -> list[DocumentT]:
        result = self.repo.list_by_job(job_id)
        logger.debug("Listed %d %ss for job=%s", len(result), self.label, job_id)
        return result

    def get_document(self, document_id: int) -> DocumentT | None:
        result = self.repo.get_by_id(document_id)
        logger.debug("get %s id=%s found=%s", self.label, document_id, result is not None)
        return result

    def require_document(self, document_id: int) -> DocumentT:
        document = self.repo.get_by_id(document_id)
        if document is None:
            logger.warning("%s %s not found", self.label.capitalize(), document_id)
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return document

    # ---- Writes ----

    def generate_number(self, day: date | None = None) -> str:
        return self.numbers.generate(day)

    def create_from_job(
        self,
        job_id: int,
        number: str | None = None,
        issue_date: date | str | None = None,
        secondary_date: date | str | None = None,
        tax_rate: Decimal | str | int | None = None,
        notes: str | None = None,
    ) -> DocumentT:
        draft = parse_input(
            DocumentDraft,
            {
                "job_id": job_id,
                "number": number,
                "issue_date": issue_date,
                "secondary_date": secondary_date,
                "tax_rate": tax_rate,
                "notes": notes,
            },
        )
        if draft.number:
            try:
                number = check_document_number(draft.number, self.prefix)
            except ValueError as exc:
                raise ValidationError(f"{self.number_field}: {exc}") from exc
        else:
            number = None

        if self.job_repo.get_by_id(draft.job_id) is None:
            logger.warning("Cannot create %s: job %s not found", self.label, draft.job_id)
            raise NotFoundError("Job not found")

        items = self.job_repo.list_items(draft.job_id)
        subtotal = compute_subtotal(items)
        rate = draft.tax_rate if draft.tax_rate is not None else settings.default_tax_rate
        tax_amount, total_amount = document_totals(subtotal, rate)
        issued = draft.issue_date or today()
        term_end = draft.secondary_date or issued + timedelta(days=self._default_term_days())

        def insert(doc_number: str) -> DocumentT:
            document = self._build(
                {
                    "job_id": draft.job_id,
                    self.number_field: doc_number,
                    "issue_date": issued,
                    self.date_field: term_end,
                    "status": self.status_enum("draft"),
                    "subtotal": subtotal,
                    "tax_rate": rate,
                    "tax_amount": tax_amount,
                    "total_amount": total_amount,
                    "notes": draft.notes,
                }
            )
            return self.repo.create(document)

        result = self.numbers.insert_numbered(insert, number)
        logger.info(
            "%s created: id=%s, number=%s, job=%s, items=%d, total=%s",
            self.label.capitalize(),
            result.id,
            getattr(result, self.number_field),
            draft.job_id,
            len(items),
            result.total_amount,
        )
        return result

    def update_document(self, document_id: int, data: dict[str, Any] | BaseModel) -> DocumentT:
        """Apply a partial update.

        Derived amounts are recalculated only when the patch carries both
        ``subtotal`` and ``tax_rate``.
        """
        fields = patch_fields(parse_input(self.update_schema, data), nullable=("notes",))
        existing = self.require_document(document_id)
        if "job_id" in fields and self.job_repo.get_by_id(fields["job_id"]) is None:
            raise NotFoundError("Job not found")
        if not fields:
            return existing
        fields = apply_totals(fields)
        try:
            result = self.repo.update(document_id, fields)
        except DuplicateNumberError as exc:
            raise ValidationError(str(exc)) from exc
        if result is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        logger.info("%s updated: id=%s, fields=%s", self.label.capitalize(), document_id, sorted(fields))
        return result

    def update_status(self, document_id: int, status: Enum | str) -> DocumentT:
        try:
            new_status = self.status_enum(status)
        except ValueError as exc:
            raise ValidationError(f"Unknown {self.label} status: {status}") from exc
        self.require_document(document_id)
        self.repo.update_status(document_id, new_status.value)
        logger.info("%s %s marked as %s", self.label.capitalize(), document_id, new_status.value)
        return self.require_document(document_id)

    def delete_document(self, document_id: int) -> None:
        self.require_document(document_id)
        self.repo.delete(document_id)
        logger.info("%s %s soft-deleted", self.label.capitalize(), document_id)
