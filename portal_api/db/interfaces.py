"""Typed interfaces for database-layer services.

All MongoDB driver access must remain in the db package and its submodules.
"""

from dataclasses import dataclass
from typing import Any, Protocol


class DatabaseConnectionError(ConnectionError):
    """Raised when the database connection cannot be established."""


@dataclass(frozen=True)
class DatabaseConnectionInfo:
    """Connection details reported after a successful startup connection.

    Attributes:
        host: Host name of the server the client connected to.
        database_name: Name of the default database handed to collaborators.
    """

    host: str
    database_name: str


class DatabaseConnectionPort(Protocol):
    """Port definition for the single process-wide database connection."""

    def db_connect(self) -> DatabaseConnectionInfo:
        """Open the connection and verify the server answers.

        Returns:
            DatabaseConnectionInfo: Connected host and database name.

        Raises:
            DatabaseConnectionError: Raised when the server cannot be reached or the URI is invalid.
        """

    def db_get_database(self) -> Any:
        """Return the default database handle for route collaborators.

        Returns:
            Any: Driver database handle.

        Raises:
            RuntimeError: Raised when called before `db_connect`.
        """

    def db_close(self) -> None:
        """Release the connection. Safe to call when never connected."""
