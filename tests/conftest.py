"""Root conftest — in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from sparkbooks.models.customer import Customer
from sparkbooks.models.document import Estimate, EstimateStatus, Invoice, InvoiceStatus
from sparkbooks.models.job import Job, JobItem

# Matches Alembic head: 3f1c9a7d2e40 (initial schema)
SCHEMA_DDL = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255),
    phone VARCHAR(50),
    address TEXT,
    city VARCHAR(100),
    state VARCHAR(50),
    zip VARCHAR(20),
    notes TEXT,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    deleted_at DATETIME
);

CREATE TABLE jobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    title VARCHAR(255) NOT NULL,
    description TEXT,
    status VARCHAR(20) NOT NULL DEFAULT 'pending',
    scheduled_date DATE,
    completed_date DATE,
    location TEXT,
    notes TEXT,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    deleted_at DATETIME
);

CREATE TABLE job_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id INTEGER NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    quantity VARCHAR(40) NOT NULL,
    unit_price VARCHAR(40) NOT NULL,
    total_price VARCHAR(40) NOT NULL,
    notes TEXT,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE estimates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    job_id INTEGER NOT NULL REFERENCES jobs(id),
    issue_date DATE NOT NULL,
    subtotal VARCHAR(40) NOT NULL DEFAULT '0',
    tax_rate VARCHAR(40) NOT NULL DEFAULT '0',
    tax_amount VARCHAR(40) NOT NULL DEFAULT '0',
    total_amount VARCHAR(40) NOT NULL DEFAULT '0',
    notes TEXT,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    deleted_at DATETIME,
    estimate_number VARCHAR(32) NOT NULL UNIQUE,
    expiry_date DATE NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'draft'
);

CREATE TABLE invoices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    job_id INTEGER NOT NULL REFERENCES jobs(id),
    issue_date DATE NOT NULL,
    subtotal VARCHAR(40) NOT NULL DEFAULT '0',
    tax_rate VARCHAR(40) NOT NULL DEFAULT '0',
    tax_amount VARCHAR(40) NOT NULL DEFAULT '0',
    total_amount VARCHAR(40) NOT NULL DEFAULT '0',
    notes TEXT,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    deleted_at DATETIME,
    invoice_number VARCHAR(32) NOT NULL UNIQUE,
    due_date DATE NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'draft'
);
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_customer(**overrides) -> Customer:
    defaults = dict(
        name="Dana Whitfield",
        email="dana@example.com",
        phone="555-0142",
        address="12 Oak Street",
        city="Springfield",
        state="IL",
        zip="62701",
    )
    defaults.update(overrides)
    return Customer(**defaults)


def _sample_job(customer_id: int = 1, **overrides) -> Job:
    defaults = dict(
        customer_id=customer_id,
        title="Panel upgrade",
        description="Replace 100A panel with 200A",
        location="Basement",
    )
    defaults.update(overrides)
    return Job(**defaults)


def _sample_item(job_id: int = 1, **overrides) -> JobItem:
    defaults = dict(
        job_id=job_id,
        description="Labor (hours)",
        quantity=Decimal("2"),
        unit_price=Decimal("50"),
        total_price=Decimal("100"),
    )
    defaults.update(overrides)
    return JobItem(**defaults)


def _sample_estimate(job_id: int = 1, **overrides) -> Estimate:
    defaults = dict(
        job_id=job_id,
        estimate_number="EST-20240315-0001",
        issue_date=date(2024, 3, 15),
        expiry_date=date(2024, 4, 14),
        status=EstimateStatus.DRAFT,
        subtotal=Decimal("100"),
        tax_rate=Decimal("10"),
        tax_amount=Decimal("10"),
        total_amount=Decimal("110"),
    )
    defaults.update(overrides)
    return Estimate(**defaults)


def _sample_invoice(job_id: int = 1, **overrides) -> Invoice:
    defaults = dict(
        job_id=job_id,
        invoice_number="INV-20240315-0001",
        issue_date=date(2024, 3, 15),
        due_date=date(2024, 4, 14),
        status=InvoiceStatus.DRAFT,
        subtotal=Decimal("100"),
        tax_rate=Decimal("10"),
        tax_amount=Decimal("10"),
        total_amount=Decimal("110"),
    )
    defaults.update(overrides)
    return Invoice(**defaults)


@pytest.fixture()
def sample_customer():
    return _sample_customer


@pytest.fixture()
def sample_job():
    return _sample_job


@pytest.fixture()
def sample_item():
    return _sample_item


@pytest.fixture()
def sample_estimate():
    return _sample_estimate


@pytest.fixture()
def sample_invoice():
    return _sample_invoice
