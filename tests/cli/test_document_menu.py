from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

from sparkbooks.models.document import Estimate, EstimateStatus, Invoice, InvoiceStatus
from sparkbooks.services.estimate_service import EstimateService
from sparkbooks.services.invoice_service import InvoiceService


def _estimate(**overrides) -> Estimate:
    data = dict(
        id=7, job_id=1, estimate_number="EST-20240315-0001", issue_date=date(2024, 3, 15),
        expiry_date=date(2024, 4, 14), subtotal=Decimal("100"), tax_rate=Decimal("10"),
        tax_amount=Decimal("10"), total_amount=Decimal("110"),
    )
    data.update(overrides)
    return Estimate(**data)


def _estimate_service() -> MagicMock:
    service = MagicMock(spec=EstimateService)
    service.label = "estimate"
    service.number_field = "estimate_number"
    service.date_field = "expiry_date"
    return service


def _invoice_service() -> MagicMock:
    service = MagicMock(spec=InvoiceService)
    service.label = "invoice"
    service.number_field = "invoice_number"
    service.date_field = "due_date"
    return service


class TestDocumentsMenu:
    @patch("sparkbooks.cli.document_menu.questionary")
    def test_empty_list(self, mock_q):
        from sparkbooks.cli.document_menu import ALL_INVOICES, invoices_menu

        service = _invoice_service()
        service.list_documents.return_value = []
        mock_q.select.return_value.ask.return_value = ALL_INVOICES
        invoices_menu(service)
        assert mock_q.select.call_count == 1

    @patch("sparkbooks.cli.document_menu.questionary")
    def test_mark_invoice_paid(self, mock_q):
        from sparkbooks.cli.document_menu import ALL_INVOICES, invoices_menu

        invoice = Invoice(id=3, job_id=1, invoice_number="INV-20240315-0001", issue_date=date(2024, 3, 15),
                          due_date=date(2024, 4, 14), status=InvoiceStatus.SENT)
        service = _invoice_service()
        service.list_documents.return_value = [invoice]
        service.update_status.return_value = invoice.model_copy(update={"status": InvoiceStatus.PAID})
        mock_q.select.return_value.ask.side_effect = [
            ALL_INVOICES, "INV-20240315-0001", "Change Status", "Paid", "Back",
        ]

        invoices_menu(service)
        service.update_status.assert_called_once_with(3, "paid")

    @patch("sparkbooks.cli.document_menu.questionary")
    def test_overdue_invoices_only(self, mock_q):
        from sparkbooks.cli.document_menu import OVERDUE_INVOICES, invoices_menu

        invoice = Invoice(id=3, job_id=1, invoice_number="INV-20240315-0001", issue_date=date(2024, 3, 15),
                          due_date=date(2024, 4, 14), status=InvoiceStatus.SENT)
        service = _invoice_service()
        service.list_overdue.return_value = [invoice]
        mock_q.select.return_value.ask.side_effect = [OVERDUE_INVOICES, "Back"]

        invoices_menu(service)
        service.list_overdue.assert_called_once()
        service.list_documents.assert_not_called()
        choices = mock_q.select.call_args_list[1].kwargs["choices"]
        assert choices == ["INV-20240315-0001", "Back"]

    @patch("sparkbooks.cli.document_menu.questionary")
    def test_no_overdue_invoices(self, mock_q):
        from sparkbooks.cli.document_menu import OVERDUE_INVOICES, invoices_menu

        service = _invoice_service()
        service.list_overdue.return_value = []
        mock_q.select.return_value.ask.return_value = OVERDUE_INVOICES

        invoices_menu(service)
        assert mock_q.select.call_count == 1

    @patch("sparkbooks.cli.document_menu.questionary")
    def test_back_from_invoice_filter(self, mock_q):
        from sparkbooks.cli.document_menu import invoices_menu

        service = _invoice_service()
        mock_q.select.return_value.ask.return_value = "Back"
        invoices_menu(service)
        service.list_documents.assert_not_called()
        service.list_overdue.assert_not_called()

    @patch("sparkbooks.cli.document_menu.questionary")
    def test_delete_estimate(self, mock_q):
        from sparkbooks.cli.document_menu import estimates_menu

        service = _estimate_service()
        service.list_documents.return_value = [_estimate()]
        mock_q.select.return_value.ask.side_effect = ["EST-20240315-0001", "Delete"]
        mock_q.confirm.return_value.ask.return_value = True

        estimates_menu(service)
        service.delete_document.assert_called_once_with(7)


class TestDocumentDetailMenu:
    @patch("sparkbooks.cli.prompts.questionary")
    @patch("sparkbooks.cli.document_menu.questionary")
    def test_edit_amounts_sends_both_values(self, mock_q, mock_prompt_q):
        from sparkbooks.cli.document_menu import ESTIMATE_STATUS_LABELS, _document_detail_menu

        service = _estimate_service()
        service.update_document.return_value = _estimate(subtotal=Decimal("200"), total_amount=Decimal("220"))
        mock_q.select.return_value.ask.side_effect = ["Edit Amounts", "Back"]
        mock_prompt_q.text.return_value.ask.side_effect = ["200", "10"]

        _document_detail_menu(_estimate(), service, ESTIMATE_STATUS_LABELS, [])
        service.update_document.assert_called_once_with(7, {"subtotal": Decimal("200"), "tax_rate": Decimal("10")})

    @patch("sparkbooks.cli.document_menu.questionary")
    def test_clear_notes(self, mock_q):
        from sparkbooks.cli.document_menu import ESTIMATE_STATUS_LABELS, _document_detail_menu

        service = _estimate_service()
        service.update_document.return_value = _estimate()
        mock_q.select.return_value.ask.side_effect = ["Edit Notes", "Back"]
        mock_q.text.return_value.ask.return_value = "  "

        _document_detail_menu(_estimate(notes="old"), service, ESTIMATE_STATUS_LABELS, [])
        service.update_document.assert_called_once_with(7, {"notes": None})

    @patch("sparkbooks.cli.prompts.questionary")
    @patch("sparkbooks.cli.document_menu.questionary")
    def test_convert(self, mock_q, mock_prompt_q):
        from sparkbooks.cli.document_menu import CONVERT_ACTION, ESTIMATE_STATUS_LABELS, _document_detail_menu

        service = _estimate_service()
        service.convert_to_invoice.return_value = 42
        service.require_document.return_value = _estimate(status=EstimateStatus.ACCEPTED)
        mock_q.select.return_value.ask.side_effect = [CONVERT_ACTION, "Back"]
        mock_q.confirm.return_value.ask.return_value = True
        mock_prompt_q.text.return_value.ask.return_value = ""

        _document_detail_menu(_estimate(), service, ESTIMATE_STATUS_LABELS, [CONVERT_ACTION])
        service.convert_to_invoice.assert_called_once_with(7, due_date=None)
        service.require_document.assert_called_once_with(7)

    @patch("sparkbooks.cli.prompts.questionary")
    @patch("sparkbooks.cli.document_menu.questionary")
    def test_convert_declined(self, mock_q, mock_prompt_q):
        from sparkbooks.cli.document_menu import CONVERT_ACTION, ESTIMATE_STATUS_LABELS, _document_detail_menu

        service = _estimate_service()
        mock_q.select.return_value.ask.side_effect = [CONVERT_ACTION, "Back"]
        mock_q.confirm.return_value.ask.return_value = False
        mock_prompt_q.text.return_value.ask.return_value = ""

        _document_detail_menu(_estimate(), service, ESTIMATE_STATUS_LABELS, [CONVERT_ACTION])
        service.convert_to_invoice.assert_not_called()


class TestStatusText:
    def test_plain_label(self):
        from sparkbooks.cli.document_menu import ESTIMATE_STATUS_LABELS, _status_text

        estimate = _estimate(expiry_date=date(2999, 1, 1))
        assert _status_text(estimate, ESTIMATE_STATUS_LABELS) == ESTIMATE_STATUS_LABELS["draft"]

    def test_expired_estimate_flagged(self):
        from sparkbooks.cli.document_menu import ESTIMATE_STATUS_LABELS, _status_text

        text = _status_text(_estimate(status=EstimateStatus.SENT), ESTIMATE_STATUS_LABELS)
        assert text.startswith(ESTIMATE_STATUS_LABELS["sent"])
        assert "(expired)" in text

    def test_accepted_estimate_not_flagged(self):
        from sparkbooks.cli.document_menu import ESTIMATE_STATUS_LABELS, _status_text

        estimate = _estimate(status=EstimateStatus.ACCEPTED)
        assert _status_text(estimate, ESTIMATE_STATUS_LABELS) == ESTIMATE_STATUS_LABELS["accepted"]

    def test_overdue_invoice_flagged(self):
        from sparkbooks.cli.document_menu import INVOICE_STATUS_LABELS, _status_text

        invoice = Invoice(job_id=1, invoice_number="INV-20240315-0001", issue_date=date(2024, 3, 15),
                          due_date=date(2024, 4, 14), status=InvoiceStatus.SENT)
        assert "(overdue)" in _status_text(invoice, INVOICE_STATUS_LABELS)

    def test_overdue_status_not_repeated(self):
        from sparkbooks.cli.document_menu import INVOICE_STATUS_LABELS, _status_text

        invoice = Invoice(job_id=1, invoice_number="INV-20240315-0001", issue_date=date(2024, 3, 15),
                          due_date=date(2024, 4, 14), status=InvoiceStatus.OVERDUE)
        assert _status_text(invoice, INVOICE_STATUS_LABELS) == INVOICE_STATUS_LABELS["overdue"]
