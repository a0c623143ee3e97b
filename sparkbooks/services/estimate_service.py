from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from sparkbooks.constants import ESTIMATE_PREFIX, INVOICE_PREFIX, today
from sparkbooks.errors import StoreError
from sparkbooks.models.document import (
    ConversionRequest,
    Estimate,
    EstimateStatus,
    EstimateUpdate,
    Invoice,
    InvoiceStatus,
)
from sparkbooks.repositories.base import EstimateRepository, InvoiceRepository, JobRepository
from sparkbooks.services.document_service import DocumentService
from sparkbooks.services.numbering import DocumentNumberGenerator
from sparkbooks.services.validation import parse_input
from sparkbooks.settings import settings

logger = logging.getLogger(__name__)


def conversion_notes(estimate: Estimate) -> str:
    provenance = f"Converted from estimate {estimate.estimate_number}."
    if estimate.notes:
        return f"{provenance} {estimate.notes}"
    return provenance


class EstimateService(DocumentService[Estimate]):
    prefix = ESTIMATE_PREFIX
    label = "estimate"
    number_field = "estimate_number"
    date_field = "expiry_date"
    status_enum = EstimateStatus
    update_schema = EstimateUpdate

    repo: EstimateRepository

    def __init__(
        self,
        repo: EstimateRepository,
        job_repo: JobRepository,
        invoice_repo: InvoiceRepository,
    ) -> None:
        super().__init__(repo, job_repo)
        self.invoice_numbers = DocumentNumberGenerator(invoice_repo, INVOICE_PREFIX)

    def _default_term_days(self) -> int:
        return settings.estimate_validity_days

    def _build(self, fields: dict[str, Any]) -> Estimate:
        return Estimate(**fields)

    def convert_to_invoice(
        self,
        estimate_id: int,
        invoice_number: str | None = None,
        due_date: date | str | None = None,
    ) -> int:
        """Raise an invoice from an estimate and return the new invoice id.

        Money fields are copied as stored, not recalculated.  The estimate
        ends up accepted whatever its previous status.  Inserting the invoice
        and accepting the estimate happen in a single transaction.
        """
        request = parse_input(ConversionRequest, {"invoice_number": invoice_number, "due_date": due_date})
        estimate = self.require_document(estimate_id)

        issued = today()
        due = request.due_date or issued + timedelta(days=settings.invoice_due_days)

        def insert(number: str) -> Invoice:
            invoice = Invoice(
                job_id=estimate.job_id,
                invoice_number=number,
                issue_date=issued,
                due_date=due,
                status=InvoiceStatus.DRAFT,
                subtotal=estimate.subtotal,
                tax_rate=estimate.tax_rate,
                tax_amount=estimate.tax_amount,
                total_amount=estimate.total_amount,
                notes=conversion_notes(estimate),
            )
            return self.repo.convert_to_invoice(estimate_id, invoice)

        try:
            invoice = self.invoice_numbers.insert_numbered(insert, request.invoice_number)
        except StoreError:
            logger.exception(
                "Converting estimate %s failed; neither the invoice nor the status change was kept",
                estimate.estimate_number,
            )
            raise

        logger.info(
            "Estimate %s converted to invoice %s (id=%s)",
            estimate.estimate_number,
            invoice.invoice_number,
            invoice.id,
        )
        return invoice.id
