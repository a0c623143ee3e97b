from __future__ import annotations

import logging
from typing import Any

from sparkbooks.errors import NotFoundError
from sparkbooks.models.job import Job, JobInput, JobItem, JobItemInput, JobItemUpdate, JobStatus, JobUpdate
from sparkbooks.repositories.base import CustomerRepository, JobRepository
from sparkbooks.services.totals import line_total
from sparkbooks.services.validation import parse_input, patch_fields

logger = logging.getLogger(__name__)

_NULLABLE = ("description", "scheduled_date", "completed_date", "location", "notes")


class JobService:
    def __init__(self, repo: JobRepository, customer_repo: CustomerRepository | None = None) -> None:
        self.repo = repo
        self.customer_repo = customer_repo

    def _check_customer(self, customer_id: int) -> None:
        if self.customer_repo is None:
            return
        if self.customer_repo.get_by_id(customer_id) is None:
            logger.warning("Customer %s not found for job", customer_id)
            raise NotFoundError("Customer not found")

    def list_jobs(self) -> list[Job]:
        result = self.repo.list_all()
        logger.debug("Listed %d jobs", len(result))
        return result

    def list_jobs_for_customer(self, customer_id: int) -> list[Job]:
        result = self.repo.list_by_customer(customer_id)
        logger.debug("Listed %d jobs for customer=%s", len(result), customer_id)
        return result

    def get_job(self, job_id: int) -> Job | None:
        result = self.repo.get_by_id(job_id)
        logger.debug("get_job id=%s found=%s", job_id, result is not None)
        return result

    def require_job(self, job_id: int) -> Job:
        job = self.repo.get_by_id(job_id)
        if job is None:
            logger.warning("Job %s not found", job_id)
            raise NotFoundError("Job not found")
        return job

    def create_job(self, data: dict[str, Any] | JobInput) -> Job:
        payload = parse_input(JobInput, data)
        self._check_customer(payload.customer_id)
        result = self.repo.create(Job(**payload.model_dump()))
        logger.info("Job created: id=%s, title=%s, customer=%s", result.id, result.title, result.customer_id)
        return result

    def update_job(self, job_id: int, data: dict[str, Any] | JobUpdate) -> Job:
        fields = patch_fields(parse_input(JobUpdate, data), nullable=_NULLABLE)
        existing = self.require_job(job_id)
        if "customer_id" in fields:
            self._check_customer(fields["customer_id"])
        if not fields:
            return existing
        result = self.repo.update(job_id, fields)
        if result is None:
            raise NotFoundError("Job not found")
        logger.info("Job updated: id=%s, fields=%s", job_id, sorted(fields))
        return result

    def update_job_status(self, job_id: int, status: JobStatus | str) -> Job:
        return self.update_job(job_id, {"status": status})

    def delete_job(self, job_id: int) -> None:
        """Drop the job's items and soft-delete the job.

        Estimates and invoices raised for the job are left untouched.
        """
        self.require_job(job_id)
        self.repo.delete(job_id)
        logger.info("Job %s soft-deleted with its items", job_id)

    def get_job_items(self, job_id: int) -> list[JobItem]:
        result = self.repo.list_items(job_id)
        logger.debug("Listed %d items for job=%s", len(result), job_id)
        return result

    def add_job_item(self, data: dict[str, Any] | JobItemInput) -> JobItem:
        payload = parse_input(JobItemInput, data)
        self.require_job(payload.job_id)
        item = JobItem(
            **payload.model_dump(),
            total_price=line_total(payload.quantity, payload.unit_price),
        )
        result = self.repo.add_item(item)
        logger.info("Job item added: id=%s, job=%s, total=%s", result.id, result.job_id, result.total_price)
        return result

    def update_job_item(self, item_id: int, data: dict[str, Any] | JobItemUpdate) -> JobItem:
        fields = patch_fields(parse_input(JobItemUpdate, data), nullable=("notes",))
        existing = self.repo.get_item(item_id)
        if existing is None:
            logger.warning("Job item %s not found", item_id)
            raise NotFoundError("Job item not found")
        if not fields:
            return existing
        if "quantity" in fields or "unit_price" in fields:
            fields["total_price"] = line_total(
                fields.get("quantity", existing.quantity),
                fields.get("unit_price", existing.unit_price),
            )
        result = self.repo.update_item(item_id, fields)
        if result is None:
            raise NotFoundError("Job item not found")
        logger.info("Job item updated: id=%s, fields=%s", item_id, sorted(fields))
        return result

    def delete_job_item(self, item_id: int) -> None:
        self.repo.delete_item(item_id)
        logger.info("Job item %s deleted", item_id)
