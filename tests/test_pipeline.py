import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError, OperationalError

ROOT = Path(__file__).resolve().parents[1]
ETL_PATH = ROOT / "etl"
if str(ETL_PATH) not in sys.path:
    sys.path.insert(0, str(ETL_PATH))

from jdbcio import (  # noqa: E402
    ConnectionOptions,
    JdbcIO,
    JdbcSelect,
    JdbcWrite,
    ReadOptions,
    WriteOptions,
    dispose_all_engines,
    jdbc_select,
    save_as_jdbc,
)
from pipeline import (  # noqa: E402
    EMPTY_TAP,
    Coder,
    CoderRegistry,
    DuplicateRegistrationError,
    PickleCoder,
    PipelineContext,
    TestData,
)
from pipeline.runner import run_copy  # noqa: E402


@pytest.fixture(autouse=True)
def _dispose_engines():
    yield
    dispose_all_engines()


@pytest.fixture
def source_db(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'source.db'}"
    engine = create_engine(url)
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL)"))
        connection.execute(
            text("INSERT INTO users (id, name) VALUES (:id, :name)"),
            [{"id": 1, "name": "ada"}, {"id": 2, "name": "grace"}, {"id": 3, "name": "linus"}],
        )
    engine.dispose()
    return url


@pytest.fixture
def target_db(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'target.db'}"
    engine = create_engine(url)
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE users_copy (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)"))
    engine.dispose()
    return url


def _rows(url, sql):
    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            return [tuple(row) for row in connection.execute(text(sql))]
    finally:
        engine.dispose()


def _conn(url):
    return ConnectionOptions(connection_url=url, username="")


def _user_dict(row):
    return {"id": row.id, "name": row.name}


def _bind_user(record, statement):
    statement.set("id", record["id"]).set("name", record["name"])


def test_select_maps_every_row(source_db):
    options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT id, name FROM users ORDER BY id",
        row_mapper=_user_dict,
    )

    records = jdbc_select(PipelineContext(), options)

    assert records.to_list() == [
        {"id": 1, "name": "ada"},
        {"id": 2, "name": "grace"},
        {"id": 3, "name": "linus"},
    ]


def test_select_binds_statement_parameters(source_db):
    options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT name FROM users WHERE id >= :min_id ORDER BY id",
        row_mapper=lambda row: row.name,
        statement_preparator=lambda statement: statement.set("min_id", 2),
    )

    assert list(jdbc_select(PipelineContext(), options)) == ["grace", "linus"]


def test_select_with_fetch_size_override(source_db):
    options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT id FROM users ORDER BY id",
        row_mapper=lambda row: row.id,
        fetch_size=1,
    )

    assert list(jdbc_select(PipelineContext(), options)) == [1, 2, 3]


def test_select_accepts_jdbc_prefixed_url(source_db):
    options = ReadOptions(
        connection_options=_conn(f"jdbc:{source_db}"),
        query="SELECT COUNT(*) AS n FROM users",
        row_mapper=lambda row: row.n,
    )

    assert list(jdbc_select(PipelineContext(), options)) == [3]


def test_select_round_trips_records_through_registered_coder(source_db):
    class CountingCoder(Coder):
        def __init__(self):
            self.encoded = 0
            self.inner = PickleCoder()

        def encode(self, value):
            self.encoded += 1
            return self.inner.encode(value)

        def decode(self, data):
            return self.inner.decode(data)

    coder = CountingCoder()
    registry = CoderRegistry()
    registry.register(dict, coder)
    options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT id, name FROM users",
        row_mapper=_user_dict,
    )

    records = PipelineContext(coders=registry).read(JdbcSelect(options, record_type=dict))

    assert len(records) == 3
    assert coder.encoded == 3
    assert records.coder is coder


def test_sql_errors_propagate(source_db):
    options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT id FROM missing_table",
        row_mapper=lambda row: row.id,
    )

    with pytest.raises(OperationalError):
        jdbc_select(PipelineContext(), options)


def test_write_binds_each_record_in_batches(target_db):
    options = WriteOptions(
        connection_options=_conn(target_db),
        statement="INSERT INTO users_copy (id, name) VALUES (:id, :name)",
        prepared_statement_setter=_bind_user,
        batch_size=2,
    )
    context = PipelineContext()
    records = context.parallelize([{"id": 10, "name": "a"}, {"id": 11, "name": "b"}, {"id": 12, "name": "c"}])

    tap = save_as_jdbc(records, options)

    assert tap is EMPTY_TAP
    assert _rows(target_db, "SELECT id, name FROM users_copy ORDER BY id") == [(10, "a"), (11, "b"), (12, "c")]


def test_write_constant_statement_without_setter(target_db):
    options = WriteOptions(
        connection_options=_conn(target_db),
        statement="INSERT INTO users_copy DEFAULT VALUES",
    )
    records = PipelineContext().parallelize(["x", "y"])

    JdbcWrite(options).write(records)

    assert _rows(target_db, "SELECT COUNT(*) FROM users_copy") == [(2,)]


def test_failed_batch_is_rolled_back(target_db):
    options = WriteOptions(
        connection_options=_conn(target_db),
        statement="INSERT INTO users_copy (id, name) VALUES (:id, :name)",
        prepared_statement_setter=_bind_user,
    )
    records = PipelineContext().parallelize([{"id": 1, "name": "a"}, {"id": 1, "name": "dup"}])

    with pytest.raises(IntegrityError):
        save_as_jdbc(records, options)

    assert _rows(target_db, "SELECT COUNT(*) FROM users_copy") == [(0,)]


def test_test_mode_substitutes_registered_input():
    options = ReadOptions(
        connection_options=ConnectionOptions(connection_url="jdbc:db://host/db", username="svc", password="secret"),
        query="SELECT id FROM t",
        row_mapper=lambda row: row.id,
    )
    test_data = TestData().add_input(JdbcIO.of(options), [1, 2])

    records = jdbc_select(PipelineContext(test_data=test_data), options)

    assert records.to_list() == [1, 2]


def test_test_mode_captures_output():
    options = WriteOptions(
        connection_options=ConnectionOptions(connection_url="jdbc:db://host/db", username="svc"),
        statement="INSERT INTO t (id) VALUES (:id)",
    )
    test_data = TestData()
    context = PipelineContext(test_data=test_data)

    save_as_jdbc(context.parallelize([1, 2, 3]).map(lambda value: value * 10), options)

    assert test_data.output(JdbcIO.of(options)) == [10, 20, 30]


def test_duplicate_test_input_rejected():
    options = ReadOptions(
        connection_options=ConnectionOptions(connection_url="jdbc:db://host/db", username="svc"),
        query="SELECT id FROM t",
        row_mapper=lambda row: row.id,
    )
    test_data = TestData().add_input(JdbcSelect(options), [1])

    with pytest.raises(DuplicateRegistrationError):
        test_data.add_input(JdbcIO.of(options), [2])


def test_unregistered_test_input_raises():
    options = ReadOptions(
        connection_options=ConnectionOptions(connection_url="jdbc:db://host/db", username="svc"),
        query="SELECT id FROM t",
        row_mapper=lambda row: row.id,
    )

    with pytest.raises(KeyError):
        jdbc_select(PipelineContext(test_data=TestData()), options)


def test_coder_registry_falls_back_along_mro():
    class Base:
        pass

    class Child(Base):
        pass

    registry = CoderRegistry()
    coder = PickleCoder()
    registry.register(Base, coder)

    assert registry.get_coder(Child) is coder
    assert registry.get_coder(int) is not coder
    assert isinstance(registry.get_coder(None), PickleCoder)


def test_run_copy_happy_path(source_db, target_db):
    read_options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT id, name FROM users",
        row_mapper=_user_dict,
    )
    write_options = WriteOptions(
        connection_options=_conn(target_db),
        statement="INSERT INTO users_copy (id, name) VALUES (:id, :name)",
        prepared_statement_setter=_bind_user,
    )

    result = run_copy(read_options, write_options, pipeline_name="users_sync")

    assert result["status"] == "success"
    assert result["pipeline_name"] == "users_sync"
    assert result["rows_read"] == 3
    assert result["rows_written"] == 3
    assert _rows(target_db, "SELECT name FROM users_copy ORDER BY id") == [("ada",), ("grace",), ("linus",)]


def test_run_copy_exception_propagates(source_db, target_db):
    read_options = ReadOptions(
        connection_options=_conn(source_db),
        query="SELECT id, name FROM users",
        row_mapper=_user_dict,
    )
    write_options = WriteOptions(
        connection_options=_conn(target_db),
        statement="INSERT INTO users_copy (id, name) VALUES (:id, :name)",
        prepared_statement_setter=_bind_user,
    )

    with patch("pipeline.runner.JdbcWrite.write", side_effect=RuntimeError("Write error")):
        with pytest.raises(RuntimeError) as excinfo:
            run_copy(read_options, write_options)

    assert "Write error" in str(excinfo.value)
