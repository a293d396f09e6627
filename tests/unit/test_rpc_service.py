"""
Unit tests for the gRPC MailingListService adapter.

Calls the servicer methods directly with raw request bytes and a fake
ServicerContext, verifying decoding, status mapping and encoding.
"""

import json
import logging
from unittest.mock import MagicMock

import grpc
import pytest

from src.adapters.repository.memory import InMemoryEmailRepository
from src.api.models import EmailResponse, GetEmailBatchResponse
from src.api.rpc.service import SERVICE_NAME, MailingListService, add_to_server, encode_message
from src.domain.exceptions import StoreError
from src.domain.registry import EmailRegistry


class Aborted(Exception):
    """Raised by FakeContext.abort, as grpc raises from a real context."""

    def __init__(self, code: grpc.StatusCode, details: str) -> None:
        super().__init__(details)
        self.code = code
        self.details = details


class FakeContext:
    def abort(self, code: grpc.StatusCode, details: str) -> None:
        raise Aborted(code, details)


def payload(**fields) -> bytes:
    return json.dumps(fields).encode()


@pytest.fixture
def service(registry: EmailRegistry) -> MailingListService:
    return MailingListService(registry)


@pytest.fixture
def context() -> FakeContext:
    return FakeContext()


class TestOperations:
    """Tests for the five RPC methods."""

    def test_create_returns_post_create_read(self, service: MailingListService, context) -> None:
        response = service.CreateEmail(payload(email="user@example.com"), context)

        assert isinstance(response, EmailResponse)
        assert response.email_entry is not None
        assert response.email_entry.email == "user@example.com"
        assert response.email_entry.confirmed_at is None
        assert response.email_entry.opt_out is False

    def test_get_unknown_returns_empty_response(self, service: MailingListService, context) -> None:
        """Absence is an OK response with no record."""
        response = service.GetEmail(payload(email="nobody@example.com"), context)

        assert response.email_entry is None

    def test_update_then_get(self, service: MailingListService, context) -> None:
        service.CreateEmail(payload(email="user@example.com"), context)

        service.UpdateEmail(
            payload(
                email_entry={
                    "id": 1,
                    "email": "user@example.com",
                    "confirmed_at": 1700000000,
                    "opt_out": True,
                }
            ),
            context,
        )
        response = service.GetEmail(payload(email="user@example.com"), context)

        assert response.email_entry.confirmed_at == 1700000000
        assert response.email_entry.opt_out is True

    def test_delete_returns_empty(self, service: MailingListService, context) -> None:
        service.CreateEmail(payload(email="user@example.com"), context)

        response = service.DeleteEmail(payload(email="user@example.com"), context)

        assert response.email_entry is None

    def test_batch(self, service: MailingListService, context) -> None:
        for i in range(3):
            service.CreateEmail(payload(email=f"user{i}@example.com"), context)

        response = service.GetEmailBatch(payload(page=1, count=2), context)

        assert isinstance(response, GetEmailBatchResponse)
        assert [e.email for e in response.email_entries] == ["user2@example.com"]

    def test_batch_lists_store_rows_as_stored(
        self, service: MailingListService, repository: InMemoryEmailRepository, context
    ) -> None:
        """A row another Store client wrote is listed even if it fails address validation."""
        repository.create("ops@localhost")

        response = service.GetEmailBatch(payload(page=0, count=10), context)

        assert [e.email for e in response.email_entries] == ["ops@localhost"]
        assert json.loads(encode_message(response))["email_entries"][0]["email"] == "ops@localhost"


class TestStatusMapping:
    """Tests for error -> status code mapping."""

    def test_malformed_payload_is_invalid_argument(self, service: MailingListService, context) -> None:
        with pytest.raises(Aborted) as exc_info:
            service.GetEmail(b"{not json", context)
        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT

    def test_invalid_email_is_invalid_argument(self, service: MailingListService, context) -> None:
        with pytest.raises(Aborted) as exc_info:
            service.CreateEmail(payload(email="not-an-email"), context)
        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT

    def test_bad_paging_is_invalid_argument(self, service: MailingListService, context) -> None:
        with pytest.raises(Aborted) as exc_info:
            service.GetEmailBatch(payload(page=0, count=0), context)
        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT

    @pytest.mark.parametrize(("page", "count"), [(2**31, 10), (0, 2**31), (2**63, 2**63)])
    def test_oversized_paging_is_invalid_argument(
        self, service: MailingListService, context, page: int, count: int
    ) -> None:
        with pytest.raises(Aborted) as exc_info:
            service.GetEmailBatch(payload(page=page, count=count), context)
        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT
        assert "must be" in exc_info.value.details

    def test_out_of_range_timestamp_is_invalid_argument(
        self, service: MailingListService, context
    ) -> None:
        with pytest.raises(Aborted) as exc_info:
            service.UpdateEmail(
                payload(email_entry={"email": "user@example.com", "confirmed_at": 10**15}), context
            )
        assert exc_info.value.code == grpc.StatusCode.INVALID_ARGUMENT

    def test_store_failure_is_internal(self, context, caplog: pytest.LogCaptureFixture) -> None:
        registry = MagicMock(spec=EmailRegistry)
        registry.get.side_effect = StoreError("disk full")
        service = MailingListService(registry)

        with caplog.at_level(logging.ERROR), pytest.raises(Aborted) as exc_info:
            service.GetEmail(payload(email="user@example.com"), context)

        assert exc_info.value.code == grpc.StatusCode.INTERNAL
        assert exc_info.value.details == "Store failure"
        assert any(r.exc_info for r in caplog.records)

    def test_duplicate_create_is_internal(self, service: MailingListService, context) -> None:
        service.CreateEmail(payload(email="user@example.com"), context)

        with pytest.raises(Aborted) as exc_info:
            service.CreateEmail(payload(email="user@example.com"), context)
        assert exc_info.value.code == grpc.StatusCode.INTERNAL


class TestRegistration:
    """Tests for add_to_server and message encoding."""

    def test_registers_generic_handler(self) -> None:
        server = MagicMock(spec=grpc.Server)

        add_to_server(MailingListService(MagicMock()), server)

        (handlers,), _ = server.add_generic_rpc_handlers.call_args
        assert len(handlers) == 1
        assert isinstance(handlers[0], grpc.GenericRpcHandler)

    def test_service_name(self) -> None:
        assert SERVICE_NAME == "emaillist.MailingListService"

    def test_encode_message_is_json(self) -> None:
        encoded = encode_message(EmailResponse())
        assert json.loads(encoded) == {"email_entry": None}

    def test_every_method_explicit(self) -> None:
        """All five RPCs are defined on the class itself."""
        for name in ("GetEmail", "GetEmailBatch", "CreateEmail", "UpdateEmail", "DeleteEmail"):
            assert name in MailingListService.__dict__


class TestRequestLogging:
    def test_request_logged_before_dispatch(
        self, service: MailingListService, context, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="src.api.rpc.service"):
            service.GetEmail(payload(email="user@example.com"), context)

        assert any("gRPC GetEmail" in r.getMessage() for r in caplog.records)
