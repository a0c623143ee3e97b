"""Estimates and invoices.

Both share the money fields and their derivation rules:
``tax_amount == subtotal * tax_rate / 100`` and
``total_amount == subtotal + tax_amount``.  The variants only differ in the
name of their number and secondary date columns and in their status set.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sparkbooks.constants import DOCUMENT_NUMBER_RE, ESTIMATE_PREFIX, INVOICE_PREFIX, today


class EstimateStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


def check_document_number(value: str, prefix: str) -> str:
    """Normalize a typed document number and make sure it carries ``prefix``."""
    value = value.strip().upper()
    if not DOCUMENT_NUMBER_RE.match(value) or not value.startswith(f"{prefix}-"):
        raise ValueError(f"must look like {prefix}-YYYYMMDD-0001")
    return value


class BusinessDocument(BaseModel):
    id: int | None = None
    uuid: str = ""
    job_id: int
    issue_date: date
    subtotal: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


class Estimate(BusinessDocument):
    estimate_number: str
    expiry_date: date
    status: EstimateStatus = EstimateStatus.DRAFT

    @property
    def number(self) -> str:
        return self.estimate_number

    @property
    def is_expired(self) -> bool:
        if self.status in (EstimateStatus.ACCEPTED, EstimateStatus.REJECTED):
            return False
        return today() > self.expiry_date


class Invoice(BusinessDocument):
    invoice_number: str
    due_date: date
    status: InvoiceStatus = InvoiceStatus.DRAFT

    @property
    def number(self) -> str:
        return self.invoice_number

    @property
    def is_overdue(self) -> bool:
        if self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
            return False
        return today() > self.due_date


class DocumentDraft(BaseModel):
    """Arguments accepted when creating a document from a job."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    job_id: int
    number: str | None = None
    issue_date: date | None = None
    secondary_date: date | None = None
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    notes: str | None = None


class EstimateUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    job_id: int | None = None
    estimate_number: str | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    status: EstimateStatus | None = None
    subtotal: Decimal | None = Field(default=None, ge=0)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    notes: str | None = None

    @field_validator("estimate_number")
    @classmethod
    def _check_number(cls, v: str | None) -> str | None:
        return None if v is None else check_document_number(v, ESTIMATE_PREFIX)


class InvoiceUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    job_id: int | None = None
    invoice_number: str | None = None
    issue_date: date | None = None
    due_date: date | None = None
    status: InvoiceStatus | None = None
    subtotal: Decimal | None = Field(default=None, ge=0)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    notes: str | None = None

    @field_validator("invoice_number")
    @classmethod
    def _check_number(cls, v: str | None) -> str | None:
        return None if v is None else check_document_number(v, INVOICE_PREFIX)


class ConversionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    invoice_number: str | None = None
    due_date: date | None = None

    @field_validator("invoice_number")
    @classmethod
    def _check_number(cls, v: str | None) -> str | None:
        return None if v is None else check_document_number(v, INVOICE_PREFIX)
