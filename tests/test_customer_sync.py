"""
Tests for customer sync — per-customer outcomes, retry handling, HTTP client.
"""

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from timeledger.core.reliability.retry_queue import RetryQueue
from timeledger.core.services.customer_sync import (
    CustomerSubmission,
    HttpCustomerService,
    SubmitResult,
    sync_customers,
)
from timeledger.core.use_cases.customers import retry_failed, sync_directory


class FakeService:
    """Scripted remote service: names in ``reject`` fail, names in ``explode`` raise."""

    def __init__(self, reject=(), explode=()):
        self.reject = set(reject)
        self.explode = set(explode)
        self.calls: list[CustomerSubmission] = []

    def submit_customer(self, submission: CustomerSubmission) -> SubmitResult:
        self.calls.append(submission)
        if submission.name in self.explode:
            raise ConnectionError("connection reset")
        if submission.name in self.reject:
            return SubmitResult(success=False, error="rejected")
        return SubmitResult(success=True)


@pytest.fixture
def customers_session(session):
    session.directory.add_customer("Acme", "Acme Corp.", "a@acme.test")
    session.directory.add_customer("Nexus", "Nexus Global")
    session.directory.add_customer("Apex", "Apex Industries")
    return session


class TestSyncCustomers:
    def test_all_succeed(self, customers_session):
        service = FakeService()
        summary = sync_customers(customers_session.directory.list_customers(), service)
        assert summary.success_count == 3
        assert summary.failure_count == 0
        assert service.calls[0] == CustomerSubmission(
            name="Acme", email="a@acme.test", company_name="Acme Corp."
        )

    def test_failures_do_not_abort_batch(self, customers_session):
        service = FakeService(reject={"Acme"}, explode={"Nexus"})
        summary = sync_customers(customers_session.directory.list_customers(), service)
        assert len(service.calls) == 3
        assert summary.succeeded == ["Apex"]
        assert {f.customer_name for f in summary.failures} == {"Acme", "Nexus"}
        reasons = {f.customer_name: f.reason for f in summary.failures}
        assert reasons["Acme"] == "rejected"
        assert "connection reset" in reasons["Nexus"]

    def test_directory_untouched_by_failures(self, customers_session):
        before = customers_session.directory.list_customers()
        sync_customers(before, FakeService(reject={"Acme", "Nexus", "Apex"}))
        assert customers_session.directory.list_customers() == before

    def test_summary_dict(self, customers_session):
        summary = sync_customers(
            customers_session.directory.list_customers(), FakeService(reject={"Apex"})
        )
        data = summary.to_dict()
        assert data["succeeded"] == 2
        assert data["failed"] == 1
        assert data["errors"] == [{"customer": "Apex", "error": "rejected"}]


class TestSyncWithRetry:
    def test_failures_are_queued(self, customers_session):
        queue = RetryQueue(customers_session.store, base_delay=0)
        result = sync_directory(customers_session, FakeService(reject={"Acme"}), queue)
        assert result.queued == 1
        [item] = queue.dequeue_ready()
        assert item.id == "Acme"
        assert item.last_error == "rejected"

    def test_success_clears_queue_entry(self, customers_session):
        queue = RetryQueue(base_delay=0)
        sync_directory(customers_session, FakeService(reject={"Acme"}), queue)
        sync_directory(customers_session, FakeService(), queue)
        assert queue.size == 0

    def test_retry_only_submits_queued(self, customers_session):
        queue = RetryQueue(base_delay=0)
        sync_directory(customers_session, FakeService(reject={"Nexus"}), queue)

        service = FakeService()
        result = retry_failed(customers_session, service, queue)
        assert [c.name for c in service.calls] == ["Nexus"]
        assert result.summary.succeeded == ["Nexus"]
        assert queue.size == 0

    def test_retry_gives_up_after_max_attempts(self, customers_session):
        queue = RetryQueue(max_attempts=2, base_delay=0)
        service = FakeService(reject={"Apex"})
        sync_directory(customers_session, service, queue)

        result = retry_failed(customers_session, service, queue)
        assert result.exhausted == ["Apex"]
        assert queue.size == 0

    def test_retry_drops_unknown_customers(self, session):
        queue = RetryQueue(base_delay=0)
        queue.enqueue("Ghost", error="down")
        service = FakeService()
        result = retry_failed(session, service, queue)
        assert service.calls == []
        assert result.summary.success_count == 0
        assert queue.size == 0


# ── HTTP client against a local server ─────────────────────────


class _Handler(BaseHTTPRequestHandler):
    responses: list[tuple[int, bytes]] = []
    received: list[dict] = []

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self.received.append(json.loads(self.rfile.read(length)))
        status, body = self.responses.pop(0)
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def server():
    _Handler.responses = []
    _Handler.received = []
    httpd = HTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()


class TestHttpCustomerService:
    def _url(self, httpd) -> str:
        return f"http://127.0.0.1:{httpd.server_address[1]}/customers"

    def test_success(self, server):
        _Handler.responses.append((200, b'{"success": true}'))
        service = HttpCustomerService(self._url(server), timeout=5)
        result = service.submit_customer(CustomerSubmission(name="Acme", company_name="Acme Corp."))
        assert result.success
        assert _Handler.received[0]["name"] == "Acme"
        assert _Handler.received[0]["companyName"] == "Acme Corp."

    def test_request_body_uses_camel_case(self, server):
        _Handler.responses.append((200, b'{"success": true}'))
        service = HttpCustomerService(self._url(server), timeout=5)
        service.submit_customer(
            CustomerSubmission(name="Acme", email="a@acme.test", company_name="Acme Corp.")
        )
        assert _Handler.received == [
            {"name": "Acme", "email": "a@acme.test", "companyName": "Acme Corp."}
        ]

    def test_reported_failure(self, server):
        _Handler.responses.append((200, b'{"success": false, "error": "duplicate"}'))
        service = HttpCustomerService(self._url(server), timeout=5)
        result = service.submit_customer(CustomerSubmission(name="Acme"))
        assert not result.success
        assert result.error == "duplicate"

    def test_http_error(self, server):
        _Handler.responses.append((500, b"{}"))
        service = HttpCustomerService(self._url(server), timeout=5)
        result = service.submit_customer(CustomerSubmission(name="Acme"))
        assert not result.success
        assert "HTTP 500" in result.error

    def test_unreachable(self):
        service = HttpCustomerService("http://127.0.0.1:9/customers", timeout=1)
        result = service.submit_customer(CustomerSubmission(name="Acme"))
        assert not result.success
        assert result.error
