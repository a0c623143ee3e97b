from sqlalchemy import Connection

from sparkbooks.repositories.base import (
    CustomerRepository,
    EstimateRepository,
    InvoiceRepository,
    JobRepository,
)


def _connection(conn: Connection | None) -> Connection:
    if conn is not None:
        return conn
    from sparkbooks.db import get_connection

    return get_connection()


def get_customer_repository(conn: Connection | None = None) -> CustomerRepository:
    from sparkbooks.repositories.sqlalchemy import SQLAlchemyCustomerRepository

    return SQLAlchemyCustomerRepository(_connection(conn))


def get_job_repository(conn: Connection | None = None) -> JobRepository:
    from sparkbooks.repositories.sqlalchemy import SQLAlchemyJobRepository

    return SQLAlchemyJobRepository(_connection(conn))


def get_estimate_repository(conn: Connection | None = None) -> EstimateRepository:
    from sparkbooks.repositories.sqlalchemy import SQLAlchemyEstimateRepository

    return SQLAlchemyEstimateRepository(_connection(conn))


def get_invoice_repository(conn: Connection | None = None) -> InvoiceRepository:
    from sparkbooks.repositories.sqlalchemy import SQLAlchemyInvoiceRepository

    return SQLAlchemyInvoiceRepository(_connection(conn))
