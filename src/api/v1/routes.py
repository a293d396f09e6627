"""
API v1 routes.

Defines the JSON endpoints of the subscriber registry. Each route logs
the request, calls the shared EmailRegistry and encodes the result.
A missing record is a 200 response with a null email_entry.
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_email_address, get_registry
from src.api.models import (
    EmailRequest,
    EmailResponse,
    ErrorResponse,
    GetEmailBatchRequest,
    GetEmailBatchResponse,
    UpdateEmailRequest,
)
from src.domain.registry import EmailRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

_ERROR_RESPONSES = {
    422: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Store failure"},
}


@router.get(
    "/emails",
    response_model=GetEmailBatchResponse,
    responses=_ERROR_RESPONSES,
    summary="List subscribers one page at a time",
)
def get_email_batch(
    page: int = Query(..., description="Zero-based page index"),
    count: int = Query(..., description="Page size"),
    registry: EmailRegistry = Depends(get_registry),
) -> GetEmailBatchResponse:
    """
    Return page `page` of the listing, `count` records per page.

    The last page may be short; pages past the end are empty.
    """
    request_data = GetEmailBatchRequest(page=page, count=count)
    logger.info("JSON GetEmailBatch: %s", request_data)
    entries = registry.get_batch(request_data.page, request_data.count)
    return GetEmailBatchResponse.from_entries(entries)


@router.get(
    "/emails/{email}",
    response_model=EmailResponse,
    responses=_ERROR_RESPONSES,
    summary="Get a subscriber by address",
)
def get_email(
    email: str = Depends(get_email_address),
    registry: EmailRegistry = Depends(get_registry),
) -> EmailResponse:
    logger.info("JSON GetEmail: %s", EmailRequest(email=email))
    return EmailResponse.from_entry(registry.get(email))


@router.post(
    "/emails",
    response_model=EmailResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Create a subscriber",
    description="Creates an unconfirmed, opted-in subscriber and returns the record as read back from the store.",
)
def create_email(
    request_data: EmailRequest,
    registry: EmailRegistry = Depends(get_registry),
) -> EmailResponse:
    logger.info("JSON CreateEmail: %s", request_data)
    return EmailResponse.from_entry(registry.create(request_data.email))


@router.put(
    "/emails",
    response_model=EmailResponse,
    responses=_ERROR_RESPONSES,
    summary="Replace a subscriber record",
    description="Overwrites confirmed_at and opt_out of the record with the given email.",
)
def update_email(
    request_data: UpdateEmailRequest,
    registry: EmailRegistry = Depends(get_registry),
) -> EmailResponse:
    logger.info("JSON UpdateEmail: %s", request_data)
    entry = request_data.email_entry.to_entry()
    return EmailResponse.from_entry(registry.update(entry))


@router.delete(
    "/emails/{email}",
    response_model=EmailResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a subscriber",
    description="Deletes the record and returns the current state, which is normally empty.",
)
def delete_email(
    email: str = Depends(get_email_address),
    registry: EmailRegistry = Depends(get_registry),
) -> EmailResponse:
    logger.info("JSON DeleteEmail: %s", EmailRequest(email=email))
    return EmailResponse.from_entry(registry.delete(email))
