"""
Process supervisor - runs the JSON and gRPC adapters over one Store.

Startup sequence:
1. Resolve settings and configure logging
2. Open the Store once and ensure its schema exists
3. Build one EmailRegistry shared by both adapters
4. Serve JSON (uvicorn) and gRPC as two concurrent tasks, wait for both

Neither adapter stops on its own. If either task fails (for example its
listener cannot bind) every server is stopped at once and the process
exits with status 1; there is no graceful drain of the surviving adapter.
"""

import logging
import socket
import threading
from concurrent import futures

import grpc
import uvicorn
from psycopg_pool import ConnectionPool

from src.adapters.repository import InMemoryEmailRepository, PostgresEmailRepository
from src.api.main import create_app
from src.api.rpc import MailingListService, add_to_server
from src.config.settings import Settings, get_settings
from src.domain.exceptions import StoreError
from src.domain.ports import EmailRepository
from src.domain.registry import EmailRegistry

logger = logging.getLogger(__name__)

MEMORY_STORE = "memory://"


class FatalStartupError(RuntimeError):
    """Unrecoverable startup failure; halts the supervisor and every adapter."""

    pass


def parse_bind(bind: str) -> tuple[str, int]:
    """
    Split a host:port listen address.

    An empty host (":8080") binds all interfaces; IPv6 hosts may be
    bracketed ("[::1]:8080").

    Raises:
        FatalStartupError: If the address is malformed
    """
    host, sep, port = bind.rpartition(":")
    if not sep or not port.isdigit() or int(port) > 65535:
        raise FatalStartupError(f"invalid bind address '{bind}'")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


def format_target(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def open_repository(settings: Settings) -> EmailRepository:
    """Open the Store named by settings.db and ensure its schema exists."""
    if settings.db == MEMORY_STORE:
        logger.info("using in-memory store")
        repository: EmailRepository = InMemoryEmailRepository()
    else:
        logger.info("using database '%s'", _redact(settings.db))
        pool = ConnectionPool(
            conninfo=settings.db,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )
        repository = PostgresEmailRepository(pool)

    try:
        repository.ensure_schema()
    except StoreError as e:
        repository.close()
        raise FatalStartupError(f"cannot initialize store: {e}") from e
    return repository


def _redact(conninfo: str) -> str:
    """Hide the password part of a postgresql:// URL."""
    scheme, sep, rest = conninfo.partition("://")
    credentials, at, location = rest.rpartition("@")
    if not sep or not at or ":" not in credentials:
        return conninfo
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{location}"


class JsonApiServer:
    """JSON adapter: the FastAPI app served by uvicorn on a pre-bound socket."""

    def __init__(self, registry: EmailRegistry, bind: str) -> None:
        self.bind = bind
        self.port: int | None = None
        config = uvicorn.Config(create_app(registry), log_config=None)
        self._server = uvicorn.Server(config)

    def serve(self) -> None:
        sock = self._bind_socket()
        self.port = sock.getsockname()[1]
        logger.info("JSON API server listening on %s", self.bind)
        try:
            self._server.run(sockets=[sock])
        finally:
            sock.close()

    def stop(self) -> None:
        self._server.should_exit = True

    def _bind_socket(self) -> socket.socket:
        host, port = parse_bind(self.bind)
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as e:
            sock.close()
            raise FatalStartupError(f"JSON API server error: failure to bind {self.bind}") from e
        return sock


class GrpcApiServer:
    """gRPC adapter: MailingListService on a thread-pool grpc server."""

    def __init__(self, registry: EmailRegistry, bind: str, max_workers: int = 10) -> None:
        self.bind = bind
        self.port: int | None = None
        self._lock = threading.Lock()
        self._stopped = False
        # Port sharing would let a second server bind an address already in use
        self._server = grpc.server(
            futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="grpc"),
            options=[("grpc.so_reuseport", 0)],
        )
        add_to_server(MailingListService(registry), self._server)

    def serve(self) -> None:
        if self.start():
            self._server.wait_for_termination()

    def start(self) -> bool:
        """
        Bind and start serving without blocking.

        Returns:
            False if stop() was called before the server could start
        """
        host, port = parse_bind(self.bind)
        try:
            bound = self._server.add_insecure_port(format_target(host, port))
        except RuntimeError as e:
            raise FatalStartupError(f"gRPC server error: failure to bind {self.bind}") from e
        if bound == 0:
            raise FatalStartupError(f"gRPC server error: failure to bind {self.bind}")
        self.port = bound

        with self._lock:
            if self._stopped:
                return False
            self._server.start()
        logger.info("gRPC API server listening on %s", self.bind)
        return True

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            self._server.stop(grace=None)


def run(settings: Settings) -> None:
    """
    Run both adapters until one of them fails.

    Raises:
        FatalStartupError: If the Store cannot be opened or a listener cannot bind
    """
    repository = open_repository(settings)
    try:
        registry = EmailRegistry(repository)
        servers = [
            JsonApiServer(registry, settings.bind_json),
            GrpcApiServer(registry, settings.bind_grpc, settings.grpc_max_workers),
        ]
        serve_all(servers)
    finally:
        repository.close()


def serve_all(servers: list) -> None:
    """
    Run each server's serve() on its own thread and wait for all of them.

    The first failure stops every server and is re-raised.
    """
    with futures.ThreadPoolExecutor(max_workers=len(servers), thread_name_prefix="adapter") as executor:
        logger.info("starting %d API servers...", len(servers))
        tasks = [executor.submit(server.serve) for server in servers]
        try:
            done, _ = futures.wait(tasks, return_when=futures.FIRST_EXCEPTION)
            for task in done:
                task.result()
        finally:
            for server in servers:
                server.stop()


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        run(settings)
    except FatalStartupError as e:
        logger.critical("%s", e)
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
