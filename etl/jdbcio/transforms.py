"""Read/write transform specs assembled by the connectors, and their execution."""

from dataclasses import dataclass, replace
from itertools import islice
from typing import Any, Callable, Iterable, Iterator

from sqlalchemy import text

from ._logging import get_logger
from .datasource import DataSourceConfig, get_engine
from .exceptions import ConfigurationError
from .statement import PreparedStatement

LOGGER = get_logger("transforms")

DEFAULT_BATCH_SIZE = 1000


@dataclass(frozen=True)
class RowMapper:
    fn: Callable[[Any], Any]

    def map_row(self, row: Any) -> Any:
        return self.fn(row)


@dataclass(frozen=True)
class StatementPreparator:
    fn: Callable[[PreparedStatement], None]

    def set_parameters(self, statement: PreparedStatement) -> None:
        self.fn(statement)


@dataclass(frozen=True)
class PreparedStatementSetter:
    fn: Callable[[Any, PreparedStatement], None]

    def set_parameters(self, element: Any, statement: PreparedStatement) -> None:
        self.fn(element, statement)


def _positive(name: str, value: int) -> int:
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero")
    return value


def _batched(records: Iterable[Any], size: int) -> Iterator[list[Any]]:
    iterator = iter(records)
    while batch := list(islice(iterator, size)):
        yield batch


@dataclass(frozen=True)
class ReadTransform:
    data_source: DataSourceConfig | None = None
    query: str | None = None
    row_mapper: RowMapper | None = None
    statement_preparator: StatementPreparator | None = None
    fetch_size: int | None = None
    coder: Any = None

    def with_data_source_configuration(self, config: DataSourceConfig) -> "ReadTransform":
        return replace(self, data_source=config)

    def with_query(self, query: str) -> "ReadTransform":
        return replace(self, query=query)

    def with_row_mapper(self, row_mapper: RowMapper) -> "ReadTransform":
        return replace(self, row_mapper=row_mapper)

    def with_statement_preparator(self, preparator: StatementPreparator) -> "ReadTransform":
        return replace(self, statement_preparator=preparator)

    def with_fetch_size(self, fetch_size: int) -> "ReadTransform":
        return replace(self, fetch_size=_positive("fetch_size", fetch_size))

    def with_coder(self, coder: Any) -> "ReadTransform":
        return replace(self, coder=coder)

    def validate(self) -> None:
        if self.data_source is None:
            raise ConfigurationError("read transform requires a data source configuration")
        if not self.query:
            raise ConfigurationError("read transform requires a query")
        if self.row_mapper is None:
            raise ConfigurationError("read transform requires a row mapper")

    def expand(self) -> list[Any]:
        """Run the query and map every fetched row into a record."""
        self.validate()
        statement = PreparedStatement(self.query)
        if self.statement_preparator is not None:
            self.statement_preparator.set_parameters(statement)

        execution_options = {} if self.fetch_size is None else {"yield_per": self.fetch_size}
        engine = get_engine(self.data_source)

        records: list[Any] = []
        with engine.connect() as connection:
            result = connection.execute(
                text(self.query),
                statement.parameters,
                execution_options=execution_options,
            )
            for row in result:
                records.append(self.row_mapper.map_row(row))

        LOGGER.info("JDBC read finished rows=%s fetch_size=%s", len(records), self.fetch_size)
        return records


@dataclass(frozen=True)
class WriteTransform:
    data_source: DataSourceConfig | None = None
    statement: str | None = None
    prepared_statement_setter: PreparedStatementSetter | None = None
    batch_size: int | None = None

    def with_data_source_configuration(self, config: DataSourceConfig) -> "WriteTransform":
        return replace(self, data_source=config)

    def with_statement(self, statement: str) -> "WriteTransform":
        return replace(self, statement=statement)

    def with_prepared_statement_setter(self, setter: PreparedStatementSetter) -> "WriteTransform":
        return replace(self, prepared_statement_setter=setter)

    def with_batch_size(self, batch_size: int) -> "WriteTransform":
        return replace(self, batch_size=_positive("batch_size", batch_size))

    def validate(self) -> None:
        if self.data_source is None:
            raise ConfigurationError("write transform requires a data source configuration")
        if not self.statement:
            raise ConfigurationError("write transform requires a statement")

    def _bind(self, element: Any) -> dict[str, Any]:
        statement = PreparedStatement(self.statement)
        self.prepared_statement_setter.set_parameters(element, statement)
        return statement.parameters

    def expand(self, records: Iterable[Any]) -> int:
        """Write ``records`` in batches, one transaction per batch. Returns the record count."""
        self.validate()
        batch_size = self.batch_size or DEFAULT_BATCH_SIZE
        engine = get_engine(self.data_source)
        sql = text(self.statement)

        written = 0
        for batch in _batched(records, batch_size):
            with engine.begin() as connection:
                if self.prepared_statement_setter is None:
                    for _ in batch:
                        connection.execute(sql)
                else:
                    connection.execute(sql, [self._bind(element) for element in batch])
            written += len(batch)
            LOGGER.debug("JDBC write batch committed size=%s", len(batch))

        LOGGER.info("JDBC write finished rows=%s batch_size=%s", written, batch_size)
        return written
