"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory Store and the registry built on it
- A JSON API test client sharing that registry
- A live gRPC server and client over the same registry
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryEmailRepository
from src.api.main import create_app
from src.api.rpc import MailingListClient
from src.domain.registry import EmailRegistry
from src.server import GrpcApiServer


@pytest.fixture
def repository() -> InMemoryEmailRepository:
    """Fresh in-memory Store for each test."""
    return InMemoryEmailRepository()


@pytest.fixture
def registry(repository: InMemoryEmailRepository) -> EmailRegistry:
    """Registry service over the in-memory Store."""
    return EmailRegistry(repository)


@pytest.fixture
def app(registry: EmailRegistry) -> FastAPI:
    """JSON API application over the shared registry."""
    return create_app(registry)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def grpc_server(registry: EmailRegistry) -> Generator[GrpcApiServer, None, None]:
    """Running gRPC adapter on 127.0.0.1 with an OS-assigned port, sharing the registry."""
    server = GrpcApiServer(registry, "127.0.0.1:0", max_workers=4)
    assert server.start()
    yield server
    server.stop()


@pytest.fixture
def rpc_client(grpc_server: GrpcApiServer) -> Generator[MailingListClient, None, None]:
    """Client connected to the running gRPC adapter."""
    with MailingListClient(f"127.0.0.1:{grpc_server.port}", timeout=5.0) as client:
        yield client
