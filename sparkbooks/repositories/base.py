from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from sparkbooks.models.customer import Customer
from sparkbooks.models.document import BusinessDocument, Estimate, Invoice
from sparkbooks.models.job import Job, JobItem

DocumentT = TypeVar("DocumentT", bound=BusinessDocument)


class CustomerRepository(ABC):
    @abstractmethod
    def create(self, customer: Customer) -> Customer: ...

    @abstractmethod
    def get_by_id(self, customer_id: int) -> Customer | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> Customer | None: ...

    @abstractmethod
    def list_all(self) -> list[Customer]: ...

    @abstractmethod
    def search(self, query: str) -> list[Customer]: ...

    @abstractmethod
    def update(self, customer_id: int, fields: dict[str, Any]) -> Customer | None: ...

    @abstractmethod
    def delete(self, customer_id: int) -> None: ...


class JobRepository(ABC):
    @abstractmethod
    def create(self, job: Job) -> Job: ...

    @abstractmethod
    def get_by_id(self, job_id: int) -> Job | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> Job | None: ...

    @abstractmethod
    def list_all(self) -> list[Job]: ...

    @abstractmethod
    def list_by_customer(self, customer_id: int) -> list[Job]: ...

    @abstractmethod
    def update(self, job_id: int, fields: dict[str, Any]) -> Job | None: ...

    @abstractmethod
    def delete(self, job_id: int) -> None: ...

    @abstractmethod
    def list_items(self, job_id: int) -> list[JobItem]: ...

    @abstractmethod
    def get_item(self, item_id: int) -> JobItem | None: ...

    @abstractmethod
    def add_item(self, item: JobItem) -> JobItem: ...

    @abstractmethod
    def update_item(self, item_id: int, fields: dict[str, Any]) -> JobItem | None: ...

    @abstractmethod
    def delete_item(self, item_id: int) -> None: ...


class DocumentRepository(ABC, Generic[DocumentT]):
    @abstractmethod
    def create(self, document: DocumentT) -> DocumentT: ...

    @abstractmethod
    def get_by_id(self, document_id: int) -> DocumentT | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> DocumentT | None: ...

    @abstractmethod
    def list_all(self) -> list[DocumentT]: ...

    @abstractmethod
    def list_by_job(self, job_id: int) -> list[DocumentT]: ...

    @abstractmethod
    def update(self, document_id: int, fields: dict[str, Any]) -> DocumentT | None: ...

    @abstractmethod
    def update_status(self, document_id: int, status: str) -> None: ...

    @abstractmethod
    def delete(self, document_id: int) -> None: ...

    @abstractmethod
    def latest_number(self, pattern: str) -> str | None:
        """Highest number matching a LIKE ``pattern``, deleted rows included."""


class EstimateRepository(DocumentRepository[Estimate]):
    @abstractmethod
    def convert_to_invoice(self, estimate_id: int, invoice: Invoice) -> Invoice:
        """Insert ``invoice`` and mark the estimate accepted in one transaction."""


class InvoiceRepository(DocumentRepository[Invoice]):
    pass
