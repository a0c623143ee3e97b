import pytest
from sqlalchemy import Connection

from sparkbooks.repositories.sqlalchemy import (
    SQLAlchemyCustomerRepository,
    SQLAlchemyEstimateRepository,
    SQLAlchemyInvoiceRepository,
    SQLAlchemyJobRepository,
)


@pytest.fixture()
def customer_repo(db_connection: Connection) -> SQLAlchemyCustomerRepository:
    return SQLAlchemyCustomerRepository(db_connection)


@pytest.fixture()
def job_repo(db_connection: Connection) -> SQLAlchemyJobRepository:
    return SQLAlchemyJobRepository(db_connection)


@pytest.fixture()
def estimate_repo(db_connection: Connection) -> SQLAlchemyEstimateRepository:
    return SQLAlchemyEstimateRepository(db_connection)


@pytest.fixture()
def invoice_repo(db_connection: Connection) -> SQLAlchemyInvoiceRepository:
    return SQLAlchemyInvoiceRepository(db_connection)


@pytest.fixture()
def job(customer_repo, job_repo, sample_customer, sample_job):
    customer = customer_repo.create(sample_customer())
    return job_repo.create(sample_job(customer.id))
