"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the registry
service and validated path parameters into routes.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.api.models import EmailRequest
from src.domain.registry import EmailRegistry


def get_registry(request: Request) -> EmailRegistry:
    """
    Get the registry service from app state.

    The registry is built once by the process supervisor and shared with
    the gRPC adapter, so both protocols operate on the same Store.
    """
    return request.app.state.registry


def get_email_address(email: str) -> str:
    """
    Validate an address taken from the URL path.

    Runs the same EmailRequest validation the request bodies use, and
    reports failures as a 422 like any other request validation error.
    """
    try:
        return EmailRequest(email=email).email
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from None
