from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Job(BaseModel):
    id: int | None = None
    uuid: str = ""
    customer_id: int
    title: str
    description: str | None = None
    status: JobStatus = JobStatus.PENDING
    scheduled_date: date | None = None
    completed_date: date | None = None
    location: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


class JobInput(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    customer_id: int
    title: str = Field(min_length=1)
    description: str | None = None
    status: JobStatus = JobStatus.PENDING
    scheduled_date: date | None = None
    completed_date: date | None = None
    location: str | None = None
    notes: str | None = None


class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    customer_id: int | None = None
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: JobStatus | None = None
    scheduled_date: date | None = None
    completed_date: date | None = None
    location: str | None = None
    notes: str | None = None


class JobItem(BaseModel):
    """A billable line on a job. ``total_price`` is always quantity x unit_price."""

    id: int | None = None
    job_id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal = Decimal("0")
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class JobItemInput(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    job_id: int
    description: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    notes: str | None = None


class JobItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    description: str | None = Field(default=None, min_length=1)
    quantity: Decimal | None = Field(default=None, gt=0)
    unit_price: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None
