"""Database access, catalog lookup and order gateways."""
from .database import (
    Database,
    close_database,
    get_database,
    get_database_async,
    init_database,
)

__all__ = [
    "Database",
    "init_database",
    "get_database",
    "get_database_async",
    "close_database",
]
