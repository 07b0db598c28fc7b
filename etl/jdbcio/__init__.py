"""Declarative JDBC-style source and sink connectors for pipelines."""

from ._config import load_connection_config, load_connection_options
from ._engine_cache import dispose_all_engines
from .datasource import DataSourceConfig, get_data_source_config, get_engine, test_data_source_connection
from .exceptions import ConfigurationError, JdbcIOError, UnsupportedOperationError
from .io import JdbcIO, JdbcSelect, JdbcWrite, jdbc_connector, jdbc_io_id, jdbc_select, save_as_jdbc
from .options import (
    USE_DEFAULT_BATCH_SIZE,
    USE_DEFAULT_FETCH_SIZE,
    ConnectionOptions,
    JdbcIoOptions,
    ReadOptions,
    WriteOptions,
)
from .statement import PreparedStatement
from .transforms import ReadTransform, WriteTransform

__all__ = [
    "ConnectionOptions",
    "ReadOptions",
    "WriteOptions",
    "JdbcIoOptions",
    "USE_DEFAULT_FETCH_SIZE",
    "USE_DEFAULT_BATCH_SIZE",
    "PreparedStatement",
    "JdbcIO",
    "JdbcSelect",
    "JdbcWrite",
    "jdbc_connector",
    "jdbc_io_id",
    "jdbc_select",
    "save_as_jdbc",
    "ReadTransform",
    "WriteTransform",
    "DataSourceConfig",
    "get_data_source_config",
    "get_engine",
    "test_data_source_connection",
    "dispose_all_engines",
    "load_connection_config",
    "load_connection_options",
    "JdbcIOError",
    "ConfigurationError",
    "UnsupportedOperationError",
]
