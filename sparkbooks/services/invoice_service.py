from __future__ import annotations

import logging
from typing import Any

from sparkbooks.constants import INVOICE_PREFIX
from sparkbooks.models.document import Invoice, InvoiceStatus, InvoiceUpdate
from sparkbooks.services.document_service import DocumentService
from sparkbooks.settings import settings

logger = logging.getLogger(__name__)


class InvoiceService(DocumentService[Invoice]):
    prefix = INVOICE_PREFIX
    label = "invoice"
    number_field = "invoice_number"
    date_field = "due_date"
    status_enum = InvoiceStatus
    update_schema = InvoiceUpdate

    def _default_term_days(self) -> int:
        return settings.invoice_due_days

    def _build(self, fields: dict[str, Any]) -> Invoice:
        return Invoice(**fields)

    def list_overdue(self) -> list[Invoice]:
        """Invoices past their due date that are neither paid nor cancelled."""
        result = [invoice for invoice in self.repo.list_all() if invoice.is_overdue]
        logger.debug("Found %d overdue invoices", len(result))
        return result
