from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, NoReturn

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from ulid import ULID

from sparkbooks.constants import now
from sparkbooks.errors import DuplicateNumberError, StoreError
from sparkbooks.models.customer import Customer
from sparkbooks.models.document import BusinessDocument, Estimate, EstimateStatus, Invoice
from sparkbooks.models.job import Job, JobItem, JobStatus
from sparkbooks.repositories.base import (
    CustomerRepository,
    EstimateRepository,
    InvoiceRepository,
    JobRepository,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return now()


def _bind(value: Any) -> Any:
    """Convert model values into something every DB-API driver accepts."""
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _decimal(value: Any) -> Decimal:
    # amount columns store decimal strings
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _like_escape(query: str) -> str:
    return query.replace("!", "!!").replace("%", "!%").replace("_", "!_")


def _driver_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


@contextmanager
def _store_errors(conn: Connection, action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        conn.rollback()
        logger.error("Store call failed while trying to %s: %s", action, _driver_message(exc))
        raise StoreError(f"Could not {action}: {_driver_message(exc)}") from exc


def _set_clause(fields: dict[str, Any], allowed: tuple[str, ...]) -> tuple[str, dict[str, Any]]:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown columns: {', '.join(sorted(unknown))}")
    params = {name: _bind(value) for name, value in fields.items()}
    params["updated_at"] = _now()
    assignments = [f"{name} = :{name}" for name in fields] + ["updated_at = :updated_at"]
    return ", ".join(assignments), params


class SQLAlchemyCustomerRepository(CustomerRepository):
    COLUMNS = ("name", "email", "phone", "address", "city", "state", "zip", "notes")

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, customer: Customer) -> Customer:
        now_ = _now()
        params = {name: getattr(customer, name) for name in self.COLUMNS}
        params.update({"uuid": str(ULID()), "created_at": now_, "updated_at": now_})
        with _store_errors(self.conn, "create customer"):
            result = self.conn.execute(
                text(
                    "INSERT INTO customers (uuid, name, email, phone, address, city, state, zip, notes, "
                    "created_at, updated_at) VALUES (:uuid, :name, :email, :phone, :address, :city, "
                    ":state, :zip, :notes, :created_at, :updated_at)"
                ),
                params,
            )
            customer_id = result.lastrowid
            self.conn.commit()
        created = self.get_by_id(customer_id)
        if created is None:
            raise StoreError(f"Failed to retrieve customer after create (id={customer_id})")
        return created

    @staticmethod
    def _build_customer(row: RowMapping) -> Customer:
        return Customer(**dict(row))

    def _fetch_one(self, where: str, params: dict[str, Any]) -> Customer | None:
        with _store_errors(self.conn, "load customer"):
            row = (
                self.conn.execute(
                    text(f"SELECT * FROM customers WHERE {where} AND deleted_at IS NULL"),
                    params,
                )
                .mappings()
                .fetchone()
            )
        return None if row is None else self._build_customer(row)

    def get_by_id(self, customer_id: int) -> Customer | None:
        return self._fetch_one("id = :id", {"id": customer_id})

    def get_by_uuid(self, uuid: str) -> Customer | None:
        return self._fetch_one("uuid = :uuid", {"uuid": uuid})

    def list_all(self) -> list[Customer]:
        with _store_errors(self.conn, "list customers"):
            rows = (
                self.conn.execute(text("SELECT * FROM customers WHERE deleted_at IS NULL ORDER BY name"))
                .mappings()
                .fetchall()
            )
        return [self._build_customer(row) for row in rows]

    def search(self, query: str) -> list[Customer]:
        pattern = f"%{_like_escape(query.lower())}%"
        with _store_errors(self.conn, "search customers"):
            rows = (
                self.conn.execute(
                    text(
                        "SELECT * FROM customers WHERE deleted_at IS NULL AND ("
                        "LOWER(name) LIKE :q ESCAPE '!' OR "
                        "LOWER(COALESCE(email, '')) LIKE :q ESCAPE '!' OR "
                        "LOWER(COALESCE(phone, '')) LIKE :q ESCAPE '!'"
                        ") ORDER BY name"
                    ),
                    {"q": pattern},
                )
                .mappings()
                .fetchall()
            )
        return [self._build_customer(row) for row in rows]

    def update(self, customer_id: int, fields: dict[str, Any]) -> Customer | None:
        assignments, params = _set_clause(fields, self.COLUMNS)
        params["id"] = customer_id
        with _store_errors(self.conn, "update customer"):
            self.conn.execute(
                text(f"UPDATE customers SET {assignments} WHERE id = :id AND deleted_at IS NULL"),
                params,
            )
            self.conn.commit()
        return self.get_by_id(customer_id)

    def delete(self, customer_id: int) -> None:
        with _store_errors(self.conn, "delete customer"):
            self.conn.execute(
                text("UPDATE customers SET deleted_at = :deleted_at WHERE id = :id"),
                {"deleted_at": _now(), "id": customer_id},
            )
            self.conn.commit()


class SQLAlchemyJobRepository(JobRepository):
    COLUMNS = (
        "customer_id",
        "title",
        "description",
        "status",
        "scheduled_date",
        "completed_date",
        "location",
        "notes",
    )
    ITEM_COLUMNS = ("description", "quantity", "unit_price", "total_price", "notes")

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, job: Job) -> Job:
        now_ = _now()
        params = {name: _bind(getattr(job, name)) for name in self.COLUMNS}
        params.update({"uuid": str(ULID()), "created_at": now_, "updated_at": now_})
        with _store_errors(self.conn, "create job"):
            result = self.conn.execute(
                text(
                    "INSERT INTO jobs (uuid, customer_id, title, description, status, scheduled_date, "
                    "completed_date, location, notes, created_at, updated_at) "
                    "VALUES (:uuid, :customer_id, :title, :description, :status, :scheduled_date, "
                    ":completed_date, :location, :notes, :created_at, :updated_at)"
                ),
                params,
            )
            job_id = result.lastrowid
            self.conn.commit()
        created = self.get_by_id(job_id)
        if created is None:
            raise StoreError(f"Failed to retrieve job after create (id={job_id})")
        return created

    @staticmethod
    def _build_job(row: RowMapping) -> Job:
        data = dict(row)
        data["status"] = JobStatus(data["status"])
        return Job(**data)

    @staticmethod
    def _build_item(row: RowMapping) -> JobItem:
        return JobItem(
            id=row["id"],
            job_id=row["job_id"],
            description=row["description"],
            quantity=_decimal(row["quantity"]),
            unit_price=_decimal(row["unit_price"]),
            total_price=_decimal(row["total_price"]),
            notes=row["notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _fetch_jobs(self, where: str, params: dict[str, Any]) -> list[Job]:
        with _store_errors(self.conn, "load jobs"):
            rows = (
                self.conn.execute(
                    text(
                        f"SELECT * FROM jobs WHERE {where} AND deleted_at IS NULL ORDER BY created_at DESC, id DESC"
                    ),
                    params,
                )
                .mappings()
                .fetchall()
            )
        return [self._build_job(row) for row in rows]

    def get_by_id(self, job_id: int) -> Job | None:
        jobs = self._fetch_jobs("id = :id", {"id": job_id})
        return jobs[0] if jobs else None

    def get_by_uuid(self, uuid: str) -> Job | None:
        jobs = self._fetch_jobs("uuid = :uuid", {"uuid": uuid})
        return jobs[0] if jobs else None

    def list_all(self) -> list[Job]:
        return self._fetch_jobs("1 = 1", {})

    def list_by_customer(self, customer_id: int) -> list[Job]:
        return self._fetch_jobs("customer_id = :customer_id", {"customer_id": customer_id})

    def update(self, job_id: int, fields: dict[str, Any]) -> Job | None:
        assignments, params = _set_clause(fields, self.COLUMNS)
        params["id"] = job_id
        with _store_errors(self.conn, "update job"):
            self.conn.execute(
                text(f"UPDATE jobs SET {assignments} WHERE id = :id AND deleted_at IS NULL"),
                params,
            )
            self.conn.commit()
        return self.get_by_id(job_id)

    def delete(self, job_id: int) -> None:
        with _store_errors(self.conn, "delete job"):
            self.conn.execute(text("DELETE FROM job_items WHERE job_id = :job_id"), {"job_id": job_id})
            self.conn.execute(
                text("UPDATE jobs SET deleted_at = :deleted_at WHERE id = :id"),
                {"deleted_at": _now(), "id": job_id},
            )
            self.conn.commit()

    def list_items(self, job_id: int) -> list[JobItem]:
        with _store_errors(self.conn, "load job items"):
            rows = (
                self.conn.execute(
                    text("SELECT * FROM job_items WHERE job_id = :job_id ORDER BY created_at, id"),
                    {"job_id": job_id},
                )
                .mappings()
                .fetchall()
            )
        return [self._build_item(row) for row in rows]

    def get_item(self, item_id: int) -> JobItem | None:
        with _store_errors(self.conn, "load job item"):
            row = (
                self.conn.execute(text("SELECT * FROM job_items WHERE id = :id"), {"id": item_id})
                .mappings()
                .fetchone()
            )
        return None if row is None else self._build_item(row)

    def add_item(self, item: JobItem) -> JobItem:
        now_ = _now()
        with _store_errors(self.conn, "add job item"):
            result = self.conn.execute(
                text(
                    "INSERT INTO job_items (job_id, description, quantity, unit_price, total_price, notes, "
                    "created_at, updated_at) VALUES (:job_id, :description, :quantity, :unit_price, "
                    ":total_price, :notes, :created_at, :updated_at)"
                ),
                {
                    "job_id": item.job_id,
                    "description": item.description,
                    "quantity": _bind(item.quantity),
                    "unit_price": _bind(item.unit_price),
                    "total_price": _bind(item.total_price),
                    "notes": item.notes,
                    "created_at": now_,
                    "updated_at": now_,
                },
            )
            item_id = result.lastrowid
            self.conn.commit()
        created = self.get_item(item_id)
        if created is None:
            raise StoreError(f"Failed to retrieve job item after create (id={item_id})")
        return created

    def update_item(self, item_id: int, fields: dict[str, Any]) -> JobItem | None:
        assignments, params = _set_clause(fields, self.ITEM_COLUMNS)
        params["id"] = item_id
        with _store_errors(self.conn, "update job item"):
            self.conn.execute(text(f"UPDATE job_items SET {assignments} WHERE id = :id"), params)
            self.conn.commit()
        return self.get_item(item_id)

    def delete_item(self, item_id: int) -> None:
        with _store_errors(self.conn, "delete job item"):
            self.conn.execute(text("DELETE FROM job_items WHERE id = :id"), {"id": item_id})
            self.conn.commit()


class _SQLAlchemyDocumentRepository:
    """Shared SQL for the ``estimates`` and ``invoices`` tables."""

    table: ClassVar[str]
    number_column: ClassVar[str]
    date_column: ClassVar[str]
    label: ClassVar[str]

    MONEY_COLUMNS = ("subtotal", "tax_rate", "tax_amount", "total_amount")

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @property
    def columns(self) -> tuple[str, ...]:
        return (
            "job_id",
            self.number_column,
            "issue_date",
            self.date_column,
            "status",
            *self.MONEY_COLUMNS,
            "notes",
        )

    def _build(self, row: RowMapping) -> BusinessDocument:
        raise NotImplementedError

    def _row_data(self, row: RowMapping) -> dict[str, Any]:
        data = dict(row)
        for name in self.MONEY_COLUMNS:
            data[name] = _decimal(data[name])
        return data

    def _insert(self, document: BusinessDocument) -> int:
        """Insert without committing; the caller owns the transaction."""
        now_ = _now()
        params = {name: _bind(getattr(document, name)) for name in self.columns}
        params.update({"uuid": str(ULID()), "created_at": now_, "updated_at": now_})
        names = ["uuid", *self.columns, "created_at", "updated_at"]
        result = self.conn.execute(
            text(
                f"INSERT INTO {self.table} ({', '.join(names)}) "
                f"VALUES ({', '.join(':' + name for name in names)})"
            ),
            params,
        )
        return result.lastrowid

    def _number_taken(self, number: str, exclude_id: int | None = None) -> bool:
        row = self.conn.execute(
            text(f"SELECT 1 FROM {self.table} WHERE {self.number_column} = :number AND id != :exclude_id"),
            {"number": number, "exclude_id": exclude_id or 0},
        ).fetchone()
        return row is not None

    def _raise_integrity(self, exc: IntegrityError, number: str, document_id: int | None = None) -> NoReturn:
        self.conn.rollback()
        if self._number_taken(number, document_id):
            logger.warning("%s number %s already taken", self.label.capitalize(), number)
            raise DuplicateNumberError(number) from exc
        logger.error("Could not save %s: %s", self.label, _driver_message(exc))
        raise StoreError(f"Could not save {self.label}: {_driver_message(exc)}") from exc

    def create(self, document):
        number = getattr(document, self.number_column)
        with _store_errors(self.conn, f"create {self.label}"):
            try:
                document_id = self._insert(document)
                self.conn.commit()
            except IntegrityError as exc:
                self._raise_integrity(exc, number)
        created = self.get_by_id(document_id)
        if created is None:
            raise StoreError(f"Failed to retrieve {self.label} after create (id={document_id})")
        return created

    def _fetch(self, where: str, params: dict[str, Any], order: str = "issue_date DESC, id DESC"):
        with _store_errors(self.conn, f"load {self.label}"):
            rows = (
                self.conn.execute(
                    text(f"SELECT * FROM {self.table} WHERE {where} AND deleted_at IS NULL ORDER BY {order}"),
                    params,
                )
                .mappings()
                .fetchall()
            )
        return [self._build(row) for row in rows]

    def get_by_id(self, document_id: int):
        found = self._fetch("id = :id", {"id": document_id})
        return found[0] if found else None

    def get_by_uuid(self, uuid: str):
        found = self._fetch("uuid = :uuid", {"uuid": uuid})
        return found[0] if found else None

    def list_all(self):
        return self._fetch("1 = 1", {})

    def list_by_job(self, job_id: int):
        return self._fetch("job_id = :job_id", {"job_id": job_id})

    def update(self, document_id: int, fields: dict[str, Any]):
        assignments, params = _set_clause(fields, self.columns)
        params["id"] = document_id
        number = fields.get(self.number_column)
        with _store_errors(self.conn, f"update {self.label}"):
            try:
                self.conn.execute(
                    text(f"UPDATE {self.table} SET {assignments} WHERE id = :id AND deleted_at IS NULL"),
                    params,
                )
                self.conn.commit()
            except IntegrityError as exc:
                if number is None:
                    raise
                self._raise_integrity(exc, number, document_id)
        return self.get_by_id(document_id)

    def update_status(self, document_id: int, status: str) -> None:
        with _store_errors(self.conn, f"update {self.label} status"):
            self.conn.execute(
                text(
                    f"UPDATE {self.table} SET status = :status, updated_at = :updated_at "
                    "WHERE id = :id AND deleted_at IS NULL"
                ),
                {"status": _bind(status), "updated_at": _now(), "id": document_id},
            )
            self.conn.commit()

    def delete(self, document_id: int) -> None:
        with _store_errors(self.conn, f"delete {self.label}"):
            self.conn.execute(
                text(f"UPDATE {self.table} SET deleted_at = :deleted_at WHERE id = :id"),
                {"deleted_at": _now(), "id": document_id},
            )
            self.conn.commit()

    def latest_number(self, pattern: str) -> str | None:
        col = self.number_column
        with _store_errors(self.conn, f"read latest {self.label} number"):
            row = self.conn.execute(
                text(
                    f"SELECT {col} FROM {self.table} WHERE LOWER({col}) LIKE LOWER(:pattern) "
                    f"ORDER BY LENGTH({col}) DESC, {col} DESC LIMIT 1"
                ),
                {"pattern": pattern},
            ).fetchone()
        return None if row is None else row[0]


class SQLAlchemyInvoiceRepository(_SQLAlchemyDocumentRepository, InvoiceRepository):
    table = "invoices"
    number_column = "invoice_number"
    date_column = "due_date"
    label = "invoice"

    def _build(self, row: RowMapping) -> Invoice:
        return Invoice(**self._row_data(row))


class SQLAlchemyEstimateRepository(_SQLAlchemyDocumentRepository, EstimateRepository):
    table = "estimates"
    number_column = "estimate_number"
    date_column = "expiry_date"
    label = "estimate"

    def _build(self, row: RowMapping) -> Estimate:
        return Estimate(**self._row_data(row))

    def convert_to_invoice(self, estimate_id: int, invoice: Invoice) -> Invoice:
        invoices = SQLAlchemyInvoiceRepository(self.conn)
        with _store_errors(self.conn, "convert estimate to invoice"):
            try:
                invoice_id = invoices._insert(invoice)
                self.conn.execute(
                    text("UPDATE estimates SET status = :status, updated_at = :updated_at WHERE id = :id"),
                    {"status": EstimateStatus.ACCEPTED.value, "updated_at": _now(), "id": estimate_id},
                )
                self.conn.commit()
            except IntegrityError as exc:
                invoices._raise_integrity(exc, invoice.invoice_number)
        created = invoices.get_by_id(invoice_id)
        if created is None:
            raise StoreError(f"Failed to retrieve invoice after conversion (id={invoice_id})")
        return created
