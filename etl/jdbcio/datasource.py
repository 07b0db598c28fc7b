"""Resolve connection descriptors into SQLAlchemy data sources."""

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url

from ._engine_cache import get_or_create_engine
from ._logging import get_logger, redact_url
from .options import ConnectionOptions

LOGGER = get_logger("datasource")

_JDBC_PREFIX = "jdbc:"


class DataSourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(min_length=1)
    driver: str | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)

    def to_url(self) -> URL:
        url = make_url(self.url)
        if self.driver:
            url = url.set(drivername=self.driver)
        if self.username:
            url = url.set(username=self.username)
        if self.password is not None:
            url = url.set(password=self.password)
        return url


def _strip_jdbc_prefix(connection_url: str) -> str:
    if connection_url.lower().startswith(_JDBC_PREFIX):
        return connection_url[len(_JDBC_PREFIX):]
    return connection_url


def get_data_source_config(options: ConnectionOptions) -> DataSourceConfig:
    """Turn a connection descriptor into the data source the transforms execute against."""
    return DataSourceConfig(
        url=_strip_jdbc_prefix(options.connection_url),
        driver=options.driver,
        username=options.username or None,
        password=options.password,
    )


def get_engine(config: DataSourceConfig, *, reuse: bool = True) -> Engine:
    """Create or reuse the SQLAlchemy engine behind a data source."""

    def factory() -> Engine:
        url = config.to_url()
        LOGGER.info("Creating engine url=%s driver=%s", redact_url(url), config.driver)
        return create_engine(url, pool_pre_ping=True)

    return get_or_create_engine(config.model_dump(), factory, reuse=reuse)


def test_data_source_connection(
    options: ConnectionOptions,
    *,
    reuse: bool = True,
    raise_on_error: bool = False,
) -> bool:
    """Run a lightweight SELECT 1 against the described database."""
    try:
        engine = get_engine(get_data_source_config(options), reuse=reuse)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        LOGGER.exception("Connection test failed")
        if raise_on_error:
            raise
        return False
