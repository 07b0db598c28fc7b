"""Source and sink connectors for relational databases."""

from dataclasses import dataclass
from typing import Any

from pipeline.io import EMPTY_TAP, ConnectorIO, Tap

from ._logging import get_logger
from .datasource import get_data_source_config
from .exceptions import UnsupportedOperationError
from .options import (
    USE_DEFAULT_BATCH_SIZE,
    USE_DEFAULT_FETCH_SIZE,
    ConnectionOptions,
    JdbcIoOptions,
    ReadOptions,
    WriteOptions,
)
from .transforms import (
    PreparedStatementSetter,
    ReadTransform,
    RowMapper,
    StatementPreparator,
    WriteTransform,
)

logger = get_logger("io")


def connection_id(options: ConnectionOptions, query: str) -> str:
    user = options.username if options.password is None else f"{options.username}:{options.password}"
    return f"{user}@{options.connection_url}:{query}"


def jdbc_io_id(options: JdbcIoOptions) -> str:
    """Identity of the database operation a descriptor describes.

    The identity embeds the password when one is set, so it must never be
    logged.
    """
    match options:
        case ReadOptions(connection_options=connection_options, query=query):
            return connection_id(connection_options, query)
        case WriteOptions(connection_options=connection_options, statement=statement):
            return connection_id(connection_options, statement)
    raise TypeError(f"Expected ReadOptions or WriteOptions, got {type(options).__name__}")


class JdbcIO(ConnectorIO):
    """Common base of the JDBC connectors.

    ``JdbcIO.of(options)`` builds an identity-only IO that matches a real
    connector built from the same descriptor, for registering test data.
    """

    options: JdbcIoOptions

    @property
    def test_id(self) -> str:
        return f"JdbcIO({jdbc_io_id(self.options)})"

    def tap(self, params: Any = None) -> Tap:
        return EMPTY_TAP

    @staticmethod
    def of(options: JdbcIoOptions) -> "JdbcIO":
        return JdbcTestIO(options)


@dataclass(frozen=True)
class JdbcTestIO(JdbcIO):
    options: JdbcIoOptions

    def read(self, context: Any, params: Any = None) -> Any:
        raise UnsupportedOperationError("JdbcIO test identity cannot be read outside test mode")

    def write(self, data: Any, params: Any = None) -> Tap:
        raise UnsupportedOperationError("JdbcIO test identity cannot be written outside test mode")


@dataclass(frozen=True)
class JdbcSelect(JdbcIO):
    read_options: ReadOptions
    record_type: type | None = None

    @property
    def options(self) -> ReadOptions:
        return self.read_options

    def build_transform(self, context: Any) -> ReadTransform:
        opts = self.read_options
        transform = (
            ReadTransform()
            .with_coder(context.coders.get_coder(self.record_type))
            .with_data_source_configuration(get_data_source_config(opts.connection_options))
            .with_query(opts.query)
            .with_row_mapper(RowMapper(opts.row_mapper))
        )
        if opts.statement_preparator is not None:
            transform = transform.with_statement_preparator(StatementPreparator(opts.statement_preparator))
        if opts.fetch_size is not USE_DEFAULT_FETCH_SIZE:
            transform = transform.with_fetch_size(opts.fetch_size)
        return transform

    def read(self, context: Any, params: Any = None) -> Any:
        return context.apply(self.build_transform(context))

    def write(self, data: Any = None, params: Any = None) -> Tap:
        raise UnsupportedOperationError("jdbc select is a read-only connector")


@dataclass(frozen=True)
class JdbcWrite(JdbcIO):
    write_options: WriteOptions

    @property
    def options(self) -> WriteOptions:
        return self.write_options

    def build_transform(self) -> WriteTransform:
        opts = self.write_options
        transform = (
            WriteTransform()
            .with_data_source_configuration(get_data_source_config(opts.connection_options))
            .with_statement(opts.statement)
        )
        if opts.prepared_statement_setter is not None:
            transform = transform.with_prepared_statement_setter(
                PreparedStatementSetter(opts.prepared_statement_setter)
            )
        if opts.batch_size is not USE_DEFAULT_BATCH_SIZE:
            transform = transform.with_batch_size(opts.batch_size)
        return transform

    def read(self, context: Any = None, params: Any = None) -> Any:
        raise UnsupportedOperationError("jdbc write is a write-only connector")

    def write(self, data: Any, params: Any = None) -> Tap:
        written = data.apply(self.build_transform())
        logger.info("Wrote %s records through %s", written, type(self).__name__)
        return EMPTY_TAP


def jdbc_connector(options: JdbcIoOptions, record_type: type | None = None) -> JdbcSelect | JdbcWrite:
    """Build the connector matching the descriptor's mode."""
    match options:
        case ReadOptions():
            return JdbcSelect(options, record_type)
        case WriteOptions():
            return JdbcWrite(options)
    raise TypeError(f"Expected ReadOptions or WriteOptions, got {type(options).__name__}")


def jdbc_select(context: Any, read_options: ReadOptions, record_type: type | None = None) -> Any:
    """Read records from the database described by ``read_options``."""
    return context.read(JdbcSelect(read_options, record_type))


def save_as_jdbc(data: Any, write_options: WriteOptions) -> Tap:
    """Write ``data`` to the database described by ``write_options``."""
    return data.write(JdbcWrite(write_options))
