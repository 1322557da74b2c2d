"""MongoDB connection service backed by pymongo."""

import logging
from typing import Any, Callable

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import InvalidOperation, PyMongoError

from .interfaces import DatabaseConnectionError, DatabaseConnectionInfo, DatabaseConnectionPort

logger = logging.getLogger("portal_api.db")


class PyMongoDatabaseService(DatabaseConnectionPort):
    """Database connection service holding one shared `MongoClient`."""

    def __init__(
        self,
        mongodb_uri: str | None,
        default_database: str,
        server_selection_timeout_ms: int = 30000,
        client_factory: Callable[..., Any] = MongoClient,
    ):
        """Initialize database connection service.

        Args:
            mongodb_uri: MongoDB connection string. May be None; connecting then fails.
            default_database: Database name used when the URI carries none.
            server_selection_timeout_ms: Driver wait before the ping is declared failed.
            client_factory: Client constructor, replaceable in tests.

        Raises:
            ValueError: Raised when default_database is blank.
        """

        if not default_database.strip():
            raise ValueError("default_database must not be blank")
        self._mongodb_uri = mongodb_uri
        self._default_database = default_database
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._client_factory = client_factory
        self._client: Any = None

    def db_connect(self) -> DatabaseConnectionInfo:
        """Create the client and ping the server once. No retry is attempted.

        Returns:
            DatabaseConnectionInfo: Connected host and database name.

        Raises:
            DatabaseConnectionError: Raised when the URI is missing or invalid, or the server is unreachable.
        """

        if not self._mongodb_uri:
            raise DatabaseConnectionError("MONGODB_URI is not set")

        client = None
        try:
            client = self._client_factory(
                self._mongodb_uri,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
            )
            client.admin.command("ping")
            database = client.get_default_database(default=self._default_database)
        except (PyMongoError, ValueError, TypeError) as error:
            if client is not None:
                client.close()
            raise DatabaseConnectionError(str(error)) from error

        self._client = client
        return DatabaseConnectionInfo(host=self._db_connected_host(client), database_name=database.name)

    def db_get_database(self) -> Database:
        if self._client is None:
            raise RuntimeError("database is not connected")
        return self._client.get_default_database(default=self._default_database)

    def db_close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.info("MongoDB connection closed")

    @staticmethod
    def _db_connected_host(client: Any) -> str:
        try:
            address = client.address
        except InvalidOperation:
            address = None
        if address is None:
            nodes = sorted(client.nodes)
            if not nodes:
                return "unknown"
            address = nodes[0]
        return str(address[0])
