"""Services wired to real repositories on the in-memory schema."""

from decimal import Decimal

import pytest

from sparkbooks.constants import today
from sparkbooks.errors import ValidationError
from sparkbooks.models.document import EstimateStatus, InvoiceStatus
from sparkbooks.repositories.factory import (
    get_customer_repository,
    get_estimate_repository,
    get_invoice_repository,
    get_job_repository,
)
from sparkbooks.services.customer_service import CustomerService
from sparkbooks.services.estimate_service import EstimateService
from sparkbooks.services.invoice_service import InvoiceService
from sparkbooks.services.job_service import JobService


@pytest.fixture()
def services(db_connection):
    customer_repo = get_customer_repository(db_connection)
    job_repo = get_job_repository(db_connection)
    invoice_repo = get_invoice_repository(db_connection)
    return (
        CustomerService(customer_repo),
        JobService(job_repo, customer_repo),
        EstimateService(get_estimate_repository(db_connection), job_repo, invoice_repo),
        InvoiceService(invoice_repo, job_repo),
    )


@pytest.fixture()
def job(services):
    customers, jobs, _, _ = services
    customer = customers.create_customer({"name": "Dana Whitfield"})
    job = jobs.create_job({"customer_id": customer.id, "title": "Panel upgrade"})
    jobs.add_job_item({"job_id": job.id, "description": "Breaker", "quantity": "1", "unit_price": "60"})
    jobs.add_job_item({"job_id": job.id, "description": "Labor", "quantity": "2", "unit_price": "20"})
    return job


class TestWorkflow:
    def test_numbers_follow_each_other(self, services, job):
        _, _, estimates, _ = services
        first = estimates.create_from_job(job.id)
        second = estimates.create_from_job(job.id)
        stamp = today().strftime("%Y%m%d")
        assert first.estimate_number == f"EST-{stamp}-0001"
        assert second.estimate_number == f"EST-{stamp}-0002"

    def test_number_continues_after_supplied_one(self, services, job):
        _, _, estimates, _ = services
        stamp = today().strftime("%Y%m%d")
        estimates.create_from_job(job.id, number=f"EST-{stamp}-0007")
        assert estimates.create_from_job(job.id).estimate_number == f"EST-{stamp}-0008"

    def test_supplied_duplicate_rejected(self, services, job):
        _, _, estimates, _ = services
        estimates.create_from_job(job.id, number="EST-20240315-0001")
        with pytest.raises(ValidationError, match="already in use"):
            estimates.create_from_job(job.id, number="EST-20240315-0001")

    def test_estimate_to_paid_invoice(self, services, job):
        _, _, estimates, invoices = services
        estimate = estimates.create_from_job(job.id, tax_rate="10", notes="Back porch")
        assert estimate.subtotal == Decimal("100")
        assert estimate.total_amount == Decimal("110")

        invoice_id = estimates.convert_to_invoice(estimate.id)
        invoice = invoices.require_document(invoice_id)
        assert invoice.job_id == job.id
        assert invoice.total_amount == Decimal("110")
        assert invoice.notes == f"Converted from estimate {estimate.estimate_number}. Back porch"
        assert estimates.require_document(estimate.id).status == EstimateStatus.ACCEPTED

        paid = invoices.update_status(invoice_id, "paid")
        assert paid.status == InvoiceStatus.PAID
        assert invoices.list_overdue() == []

    def test_partial_update_keeps_stored_totals(self, services, job):
        _, _, _, invoices = services
        invoice = invoices.create_from_job(job.id, tax_rate="10")
        updated = invoices.update_document(invoice.id, {"subtotal": "500"})
        assert updated.subtotal == Decimal("500")
        assert updated.tax_amount == Decimal("10")
        assert updated.total_amount == Decimal("110")

        updated = invoices.update_document(invoice.id, {"subtotal": "500", "tax_rate": "10"})
        assert updated.tax_amount == Decimal("50")
        assert updated.total_amount == Decimal("550")

    def test_deleted_job_keeps_documents(self, services, job):
        _, jobs, estimates, _ = services
        estimate = estimates.create_from_job(job.id)
        jobs.delete_job(job.id)
        assert jobs.get_job_items(job.id) == []
        assert estimates.get_document(estimate.id) is not None

    def test_long_amounts_survive_storage(self, services, job):
        _, jobs, estimates, _ = services
        quantity, unit_price = Decimal("1234.5678"), Decimal("98765.4321")
        big = jobs.create_job({"customer_id": job.customer_id, "title": "Warehouse rewire"})
        jobs.add_job_item({"job_id": big.id, "description": "Cable", "quantity": "1234.5678",
                           "unit_price": "98765.4321"})

        item = jobs.get_job_items(big.id)[0]
        assert item.total_price == quantity * unit_price

        estimate = estimates.require_document(estimates.create_from_job(big.id, tax_rate="8.25").id)
        assert estimate.subtotal == quantity * unit_price
        assert estimate.tax_amount == estimate.subtotal * estimate.tax_rate / 100
        assert estimate.total_amount == estimate.subtotal + estimate.tax_amount

    def test_fractional_tax_not_rounded(self, services, job):
        _, _, _, invoices = services
        invoice = invoices.create_from_job(job.id, tax_rate="8.25")
        updated = invoices.update_document(invoice.id, {"subtotal": "100.10", "tax_rate": "8.25"})
        stored = invoices.require_document(updated.id)
        assert stored.tax_amount == Decimal("8.258250")
        assert stored.total_amount == Decimal("108.358250")
