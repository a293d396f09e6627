"""
gRPC client for MailingListService.

Thin wrapper over a grpc channel exposing the five registry operations
with the same wire models the server uses.
"""

import grpc

from src.api.models import (
    EmailEntryModel,
    EmailRequest,
    EmailResponse,
    GetEmailBatchRequest,
    GetEmailBatchResponse,
    UpdateEmailRequest,
)
from src.api.rpc.service import SERVICE_NAME, encode_message


class MailingListClient:
    """
    Client for the gRPC registry API.

    Usage:
        with MailingListClient("localhost:8081") as client:
            client.create_email("user@example.com")

    Errors surface as grpc.RpcError with the server's status code.
    """

    def __init__(self, target: str, timeout: float | None = 10.0) -> None:
        self._channel = grpc.insecure_channel(target)
        self._timeout = timeout
        self._get_email = self._method("GetEmail", EmailResponse)
        self._get_email_batch = self._method("GetEmailBatch", GetEmailBatchResponse)
        self._create_email = self._method("CreateEmail", EmailResponse)
        self._update_email = self._method("UpdateEmail", EmailResponse)
        self._delete_email = self._method("DeleteEmail", EmailResponse)

    def __enter__(self) -> "MailingListClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._channel.close()

    def get_email(self, email: str) -> EmailEntryModel | None:
        return self._get_email(EmailRequest(email=email), timeout=self._timeout).email_entry

    def get_email_batch(self, page: int, count: int) -> list[EmailEntryModel]:
        request = GetEmailBatchRequest(page=page, count=count)
        return self._get_email_batch(request, timeout=self._timeout).email_entries

    def create_email(self, email: str) -> EmailEntryModel | None:
        return self._create_email(EmailRequest(email=email), timeout=self._timeout).email_entry

    def update_email(self, entry: EmailEntryModel) -> EmailEntryModel | None:
        request = UpdateEmailRequest(email_entry=entry.model_dump())
        return self._update_email(request, timeout=self._timeout).email_entry

    def delete_email(self, email: str) -> EmailEntryModel | None:
        return self._delete_email(EmailRequest(email=email), timeout=self._timeout).email_entry

    def _method(self, name: str, response_model):
        return self._channel.unary_unary(
            f"/{SERVICE_NAME}/{name}",
            request_serializer=encode_message,
            response_deserializer=response_model.model_validate_json,
        )
