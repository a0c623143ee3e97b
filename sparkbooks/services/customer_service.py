from __future__ import annotations

import logging
from typing import Any

from sparkbooks.errors import NotFoundError
from sparkbooks.models.customer import Customer, CustomerInput, CustomerUpdate
from sparkbooks.repositories.base import CustomerRepository
from sparkbooks.services.validation import parse_input, patch_fields

logger = logging.getLogger(__name__)

_NULLABLE = ("email", "phone", "address", "city", "state", "zip", "notes")


class CustomerService:
    def __init__(self, repo: CustomerRepository) -> None:
        self.repo = repo

    def list_customers(self) -> list[Customer]:
        result = self.repo.list_all()
        logger.debug("Listed %d customers", len(result))
        return result

    def search_customers(self, query: str) -> list[Customer]:
        query = (query or "").strip()
        if not query:
            return self.list_customers()
        result = self.repo.search(query)
        logger.debug("Customer search %r matched %d", query, len(result))
        return result

    def get_customer(self, customer_id: int) -> Customer | None:
        result = self.repo.get_by_id(customer_id)
        logger.debug("get_customer id=%s found=%s", customer_id, result is not None)
        return result

    def get_customer_by_uuid(self, uuid: str) -> Customer | None:
        return self.repo.get_by_uuid(uuid)

    def require_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_by_id(customer_id)
        if customer is None:
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer not found")
        return customer

    def create_customer(self, data: dict[str, Any] | CustomerInput) -> Customer:
        payload = parse_input(CustomerInput, data)
        result = self.repo.create(Customer(**payload.model_dump()))
        logger.info("Customer created: id=%s, name=%s", result.id, result.name)
        return result

    def update_customer(self, customer_id: int, data: dict[str, Any] | CustomerUpdate) -> Customer:
        fields = patch_fields(parse_input(CustomerUpdate, data), nullable=_NULLABLE)
        existing = self.require_customer(customer_id)
        if not fields:
            return existing
        result = self.repo.update(customer_id, fields)
        if result is None:
            raise NotFoundError("Customer not found")
        logger.info("Customer updated: id=%s, fields=%s", customer_id, sorted(fields))
        return result

    def delete_customer(self, customer_id: int) -> None:
        self.require_customer(customer_id)
        self.repo.delete(customer_id)
        logger.info("Customer %s soft-deleted", customer_id)
