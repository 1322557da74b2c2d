"""Database layer package for the MongoDB connection boundary."""

from .interfaces import DatabaseConnectionError, DatabaseConnectionInfo, DatabaseConnectionPort
from .mongo import PyMongoDatabaseService

__all__ = [
    "DatabaseConnectionError",
    "DatabaseConnectionInfo",
    "DatabaseConnectionPort",
    "PyMongoDatabaseService",
]
