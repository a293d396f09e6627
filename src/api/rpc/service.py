"""
gRPC service adapter - MailingListService over the shared registry.

Messages are the pydantic wire models from src.api.models encoded as
JSON, registered through grpc generic method handlers. Every method is
implemented explicitly; there is no base servicer with default bodies.

Status mapping:
- absent record     -> OK, email_entry is null
- invalid request   -> INVALID_ARGUMENT
- store failure     -> INTERNAL "Store failure"

The call's deadline is not forwarded to the Store: a cancelled client
does not stop a Store operation already in progress.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

import grpc
from pydantic import BaseModel, ValidationError

from src.api.models import (
    EmailRequest,
    EmailResponse,
    GetEmailBatchRequest,
    GetEmailBatchResponse,
    UpdateEmailRequest,
)
from src.domain.exceptions import InvalidRequest, StoreError
from src.domain.registry import EmailRegistry

logger = logging.getLogger(__name__)

SERVICE_NAME = "emaillist.MailingListService"

RequestT = TypeVar("RequestT", bound=BaseModel)


def encode_message(message: BaseModel) -> bytes:
    """Serialize a wire model for the gRPC transport."""
    return message.model_dump_json().encode()


class MailingListService:
    """
    Implements the five MailingListService RPCs.

    Handlers receive the raw request bytes so that malformed payloads can
    be reported as INVALID_ARGUMENT rather than a transport error.
    """

    def __init__(self, registry: EmailRegistry) -> None:
        self._registry = registry

    def GetEmail(self, request: bytes, context: grpc.ServicerContext) -> EmailResponse:
        request_data = self._decode(EmailRequest, request, context)
        logger.info("gRPC GetEmail: %s", request_data)
        return self._call(context, lambda: EmailResponse.from_entry(self._registry.get(request_data.email)))

    def GetEmailBatch(self, request: bytes, context: grpc.ServicerContext) -> GetEmailBatchResponse:
        request_data = self._decode(GetEmailBatchRequest, request, context)
        logger.info("gRPC GetEmailBatch: %s", request_data)
        return self._call(
            context,
            lambda: GetEmailBatchResponse.from_entries(
                self._registry.get_batch(request_data.page, request_data.count)
            ),
        )

    def CreateEmail(self, request: bytes, context: grpc.ServicerContext) -> EmailResponse:
        request_data = self._decode(EmailRequest, request, context)
        logger.info("gRPC CreateEmail: %s", request_data)
        return self._call(context, lambda: EmailResponse.from_entry(self._registry.create(request_data.email)))

    def UpdateEmail(self, request: bytes, context: grpc.ServicerContext) -> EmailResponse:
        request_data = self._decode(UpdateEmailRequest, request, context)
        logger.info("gRPC UpdateEmail: %s", request_data)
        return self._call(
            context,
            lambda: EmailResponse.from_entry(self._registry.update(request_data.email_entry.to_entry())),
        )

    def DeleteEmail(self, request: bytes, context: grpc.ServicerContext) -> EmailResponse:
        request_data = self._decode(EmailRequest, request, context)
        logger.info("gRPC DeleteEmail: %s", request_data)
        return self._call(context, lambda: EmailResponse.from_entry(self._registry.delete(request_data.email)))

    def _decode(
        self, model: type[RequestT], request: bytes, context: grpc.ServicerContext
    ) -> RequestT:
        try:
            return model.model_validate_json(request)
        except ValidationError as e:
            context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))
            raise  # unreachable: abort() raises

    def _call(self, context: grpc.ServicerContext, operation: Callable):
        """Run a registry call and build its response, mapping domain errors to statuses."""
        try:
            return operation()
        except InvalidRequest as e:
            context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))
            raise
        except StoreError:
            logger.exception("gRPC store failure")
            context.abort(grpc.StatusCode.INTERNAL, "Store failure")
            raise


def add_to_server(service: MailingListService, server: grpc.Server) -> None:
    """Register the service's methods on a grpc server."""
    methods = {
        "GetEmail": service.GetEmail,
        "GetEmailBatch": service.GetEmailBatch,
        "CreateEmail": service.CreateEmail,
        "UpdateEmail": service.UpdateEmail,
        "DeleteEmail": service.DeleteEmail,
    }
    handlers = {
        name: grpc.unary_unary_rpc_method_handler(method, response_serializer=encode_message)
        for name, method in methods.items()
    }
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),))
