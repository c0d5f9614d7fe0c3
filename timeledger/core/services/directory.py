"""
Customer directory — customers, their company, email and projects.

Every mutation writes the full directory snapshot straight through to
the store.  Cardinalities are small (tens to low hundreds), so there
is no batching.  A write failure does not undo the in-memory change;
it is recorded in ``notices`` for the caller to report.
"""

from __future__ import annotations

import logging

from timeledger.core.errors import (
    DuplicateNameError,
    DuplicateProjectError,
    StorageWriteError,
    UnknownCustomerError,
    ValidationError,
)
from timeledger.core.models.customer import Customer, name_key
from timeledger.core.persistence.snapshot import DIRECTORY_KEY, SnapshotSlot
from timeledger.core.persistence.store import KeyValueStore

logger = logging.getLogger(__name__)


class Directory:
    """The ordered set of customers, unique by name (case-insensitive)."""

    def __init__(self, store: KeyValueStore, notices: list[StorageWriteError] | None = None):
        self._slot: SnapshotSlot[list[Customer]] = SnapshotSlot(
            store, DIRECTORY_KEY, list[Customer]
        )
        self._customers: list[Customer] = self._slot.load(list)
        self._notices = notices if notices is not None else []

    # ── Queries ─────────────────────────────────────────────────

    def list_customers(self) -> list[Customer]:
        """All customers, in the order they were added."""
        return list(self._customers)

    def find_customer(self, name: str | None) -> Customer | None:
        """Look up a customer by name (case-insensitive). None if unknown."""
        if not name:
            return None
        key = name_key(name)
        for customer in self._customers:
            if name_key(customer.name) == key:
                return customer
        return None

    def __len__(self) -> int:
        return len(self._customers)

    # ── Mutations ───────────────────────────────────────────────

    def add_customer(self, name: str, company_name: str, email: str | None = None) -> Customer:
        """Add a customer with an empty project list.

        Raises:
            ValidationError: If the name is blank.
            DuplicateNameError: If a customer with this name already exists.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Customer name cannot be empty")
        if self.find_customer(name) is not None:
            raise DuplicateNameError(name)

        customer = Customer(
            name=name,
            company_name=(company_name or "").strip(),
            email=(email or "").strip() or None,
        )
        self._customers.append(customer)
        logger.info("Added customer '%s'", name)
        self._persist()
        return customer

    def add_project(self, customer_name: str, project_name: str) -> None:
        """Append a project to a customer's project list.

        Raises:
            ValidationError: If the project name is blank.
            UnknownCustomerError: If the customer does not exist.
            DuplicateProjectError: If the customer already has the project.
        """
        customer = self.find_customer(customer_name)
        if customer is None:
            raise UnknownCustomerError(customer_name)
        project_name = (project_name or "").strip()
        if not project_name:
            raise ValidationError("Project name cannot be empty")
        if customer.has_project(project_name):
            raise DuplicateProjectError(customer.name, project_name)

        customer.projects.append(project_name)
        logger.info("Added project '%s' to '%s'", project_name, customer.name)
        self._persist()

    def remove_project(self, customer_name: str, project_name: str) -> None:
        """Remove a project if present. Unknown customer or project is a no-op."""
        customer = self.find_customer(customer_name)
        if customer is None or not customer.has_project(project_name):
            return

        key = name_key(project_name)
        customer.projects = [p for p in customer.projects if name_key(p) != key]
        logger.info("Removed project '%s' from '%s'", project_name, customer.name)
        self._persist()

    def set_customer_email(self, customer_name: str, email: str | None) -> None:
        """Set a customer's email. Unknown customer is a no-op."""
        customer = self.find_customer(customer_name)
        if customer is None:
            logger.debug("set_customer_email: unknown customer '%s' ignored", customer_name)
            return

        customer.email = (email or "").strip() or None
        self._persist()

    # ── Internal ────────────────────────────────────────────────

    def _persist(self) -> None:
        try:
            self._slot.save(self._customers)
        except StorageWriteError as e:
            logger.warning("Directory not persisted: %s", e)
            self._notices.append(e)
