"""Seed the database with demo data for local development.

Usage:
    python -m sparkbooks.scripts.seed
"""

from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from faker import Faker
from rich.console import Console
from rich.table import Table
from sqlalchemy import text

from sparkbooks.constants import today
from sparkbooks.db import get_connection, initialize_db
from sparkbooks.logging import configure_logging, reconfigure
from sparkbooks.models import format_money
from sparkbooks.models.document import EstimateStatus, InvoiceStatus
from sparkbooks.models.job import JobStatus
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

console = Console()
fake = Faker("en_US")

NUM_CUSTOMERS = 8
TAX_RATES = [Decimal("0"), Decimal("6.25"), Decimal("8.875")]

TABLES_TO_TRUNCATE = ["invoices", "estimates", "job_items", "jobs", "customers"]

# (title, items) where items are (description, quantity, unit_price)
JOB_TEMPLATES = [
    (
        "Panel upgrade to 200A",
        [
            ("200A main breaker panel", "1", "685.00"),
            ("Labor (hours)", "8", "95.00"),
            ("Permit and inspection", "1", "175.00"),
        ],
    ),
    (
        "Kitchen recessed lighting",
        [
            ("6in LED recessed fixture", "8", "42.50"),
            ("14/2 NM cable (ft)", "120", "0.68"),
            ("Labor (hours)", "5.5", "95.00"),
        ],
    ),
    (
        "EV charger install",
        [
            ("Level 2 charger, 48A", "1", "599.00"),
            ("60A breaker", "1", "38.75"),
            ("6/3 NM cable (ft)", "45", "4.15"),
            ("Labor (hours)", "4", "95.00"),
        ],
    ),
    (
        "Outlet replacement",
        [
            ("GFCI receptacle", "4", "21.90"),
            ("Tamper-resistant receptacle", "10", "3.45"),
            ("Labor (hours)", "2.5", "95.00"),
        ],
    ),
    (
        "Troubleshoot tripping breaker",
        [
            ("Service call", "1", "125.00"),
            ("AFCI breaker", "1", "52.00"),
        ],
    ),
]


def _truncate() -> None:
    conn = get_connection()
    for table in TABLES_TO_TRUNCATE:
        conn.execute(text(f"DELETE FROM {table}"))
    conn.commit()


def seed() -> None:
    customer_repo = get_customer_repository()
    job_repo = get_job_repository()
    invoice_repo = get_invoice_repository()
    customers = CustomerService(customer_repo)
    jobs = JobService(job_repo, customer_repo)
    estimates = EstimateService(get_estimate_repository(), job_repo, invoice_repo)
    invoices = InvoiceService(invoice_repo, job_repo)

    summary = Table(title="Seeded documents")
    summary.add_column("Number", style="bold")
    summary.add_column("Customer")
    summary.add_column("Job")
    summary.add_column("Status")
    summary.add_column("Total", justify="right")

    for _ in range(NUM_CUSTOMERS):
        customer = customers.create_customer(
            {
                "name": fake.name(),
                "email": fake.email(),
                "phone": fake.phone_number(),
                "address": fake.street_address(),
                "city": fake.city(),
                "state": fake.state_abbr(),
                "zip": fake.zipcode(),
            }
        )
        for title, items in random.sample(JOB_TEMPLATES, k=random.randint(1, 2)):
            job = jobs.create_job(
                {
                    "customer_id": customer.id,
                    "title": title,
                    "location": customer.address,
                    "scheduled_date": today() + timedelta(days=random.randint(-20, 20)),
                    "status": random.choice(list(JobStatus)),
                }
            )
            for description, quantity, unit_price in items:
                jobs.add_job_item(
                    {"job_id": job.id, "description": description, "quantity": quantity, "unit_price": unit_price}
                )

            estimate = estimates.create_from_job(job.id, tax_rate=random.choice(TAX_RATES))
            status = random.choice(list(EstimateStatus))
            if status == EstimateStatus.ACCEPTED:
                invoice_id = estimates.convert_to_invoice(estimate.id)
                invoice = invoices.update_status(invoice_id, random.choice(list(InvoiceStatus)))
                summary.add_row(
                    invoice.invoice_number, customer.name, title, invoice.status.value, format_money(invoice.total_amount)
                )
                estimate = estimates.require_document(estimate.id)
            else:
                estimate = estimates.update_status(estimate.id, status)
            summary.add_row(
                estimate.estimate_number, customer.name, title, estimate.status.value, format_money(estimate.total_amount)
            )

    console.print(summary)


def main() -> None:
    configure_logging()
    initialize_db()
    reconfigure()
    _truncate()
    seed()
    console.print("[green bold]Seed complete.[/green bold]")


if __name__ == "__main__":
    main()
