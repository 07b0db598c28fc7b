"""Immutable descriptors for JDBC-style reads and writes."""

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

# "Let the driver choose" markers for fetch/batch size overrides.
USE_DEFAULT_FETCH_SIZE: None = None
USE_DEFAULT_BATCH_SIZE: None = None


class ConnectionOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    connection_url: str = Field(min_length=1)
    username: str
    password: str | None = Field(default=None, repr=False)
    driver: str | None = None

    @field_validator("username")
    @classmethod
    def _username_without_separator(cls, value: str) -> str:
        if ":" in value or "@" in value:
            raise ValueError("username must not contain ':' or '@'")
        return value


class ReadOptions(BaseModel):
    """Read descriptor: a query plus the callback that turns each row into a record.

    ``statement_preparator`` receives a :class:`~jdbcio.statement.PreparedStatement`
    and binds the query's named parameters; leave it unset for parameterless
    queries. ``fetch_size`` stays at ``USE_DEFAULT_FETCH_SIZE`` unless the driver
    default needs overriding.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    connection_options: ConnectionOptions
    query: str = Field(min_length=1)
    row_mapper: Callable[[Any], Any]
    statement_preparator: Callable[[Any], None] | None = None
    fetch_size: PositiveInt | None = USE_DEFAULT_FETCH_SIZE


class WriteOptions(BaseModel):
    """Write descriptor: a DML statement plus the callback that binds one record into it."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    connection_options: ConnectionOptions
    statement: str = Field(min_length=1)
    prepared_statement_setter: Callable[[Any, Any], None] | None = None
    batch_size: PositiveInt | None = USE_DEFAULT_BATCH_SIZE


JdbcIoOptions = ReadOptions | WriteOptions
