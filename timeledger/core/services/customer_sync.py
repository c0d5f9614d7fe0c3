"""
Customer sync — submit directory customers to a remote service.

The remote call is an external collaborator with a success/error
contract.  Each customer is submitted independently: a failure (an
unsuccessful result or any exception from the transport) is counted
and recorded, and the batch carries on.  Local directory state is
never rolled back because of a sync outcome.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from timeledger import __version__
from timeledger.core.errors import RemoteSyncError
from timeledger.core.models.customer import Customer

logger = logging.getLogger(__name__)


class CustomerSubmission(BaseModel):
    """Payload sent for one customer. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    email: str | None = None
    company_name: str = ""

    @classmethod
    def from_customer(cls, customer: Customer) -> CustomerSubmission:
        return cls(name=customer.name, email=customer.email, company_name=customer.company_name)


class SubmitResult(BaseModel):
    """Outcome reported by the remote service."""

    success: bool
    error: str | None = None


class CustomerService(Protocol):
    """Anything that can accept a customer submission."""

    def submit_customer(self, submission: CustomerSubmission) -> SubmitResult: ...


class HttpCustomerService:
    """POSTs submissions as JSON to an HTTP endpoint.

    Transport failures are reported as unsuccessful results rather
    than raised, matching the service's success/error contract.
    """

    def __init__(self, endpoint: str, timeout: float = 10.0):
        self.endpoint = endpoint
        self.timeout = timeout

    def submit_customer(self, submission: CustomerSubmission) -> SubmitResult:
        body = submission.model_dump_json(by_alias=True).encode("utf-8")
        req = urllib.request.Request(
            self.endpoint,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"timeledger/{__version__}",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            return SubmitResult(success=False, error=f"HTTP {e.code}: {e.reason}")
        except (urllib.error.URLError, OSError) as e:
            return SubmitResult(success=False, error=f"Cannot reach {self.endpoint}: {e}")

        if not raw.strip():
            return SubmitResult(success=True)
        try:
            return SubmitResult.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as e:
            return SubmitResult(success=False, error=f"Unexpected response: {e}")


@dataclass
class SyncSummary:
    """Aggregated outcome of one sync batch."""

    succeeded: list[str] = field(default_factory=list)
    failures: list[RemoteSyncError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict:
        return {
            "succeeded": self.success_count,
            "failed": self.failure_count,
            "customers": self.succeeded,
            "errors": [{"customer": f.customer_name, "error": f.reason} for f in self.failures],
        }


def submit_one(customer: Customer, service: CustomerService) -> RemoteSyncError | None:
    """Submit a single customer. Returns the failure, or None on success."""
    submission = CustomerSubmission.from_customer(customer)
    try:
        result = service.submit_customer(submission)
    except Exception as e:
        logger.warning("Sync transport error for '%s': %s", customer.name, e)
        return RemoteSyncError(customer.name, str(e) or type(e).__name__)

    if result.success:
        logger.debug("Synced customer '%s'", customer.name)
        return None

    reason = result.error or "remote service reported failure"
    logger.warning("Sync rejected for '%s': %s", customer.name, reason)
    return RemoteSyncError(customer.name, reason)


def sync_customers(customers: Iterable[Customer], service: CustomerService) -> SyncSummary:
    """Submit every customer once, collecting per-customer outcomes."""
    summary = SyncSummary()
    for customer in customers:
        failure = submit_one(customer, service)
        if failure is None:
            summary.succeeded.append(customer.name)
        else:
            summary.failures.append(failure)

    logger.info(
        "Customer sync: %d succeeded, %d failed",
        summary.success_count, summary.failure_count,
    )
    return summary
