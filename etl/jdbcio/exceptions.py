"""Errors raised by the JDBC connector itself.

Driver, network and SQL failures are not wrapped: they surface as the
``sqlalchemy.exc`` errors raised during transform execution.
"""

__all__ = [
    "JdbcIOError",
    "ConfigurationError",
    "UnsupportedOperationError",
]


class JdbcIOError(Exception):
    """Base error for connector failures."""


class ConfigurationError(JdbcIOError, ValueError):
    """Raised when connection configuration is missing or unreadable."""


class UnsupportedOperationError(JdbcIOError, NotImplementedError):
    """Raised when a connector is used against its declared mode."""
