import sys
from pathlib import Path

# Add the etl package to the path
ROOT = Path(__file__).resolve().parents[1]
ETL_PATH = ROOT / "etl"
if str(ETL_PATH) not in sys.path:
    sys.path.insert(0, str(ETL_PATH))

from jdbcio import ReadOptions, WriteOptions, load_connection_options
from pipeline.runner import run_copy


def main():
    """
    Example: copying active users from a source PostgreSQL database into a reporting database.

    This example assumes you have:
    1. SOURCE_CONNECTION_URL, SOURCE_USERNAME, SOURCE_PASSWORD set for the source
    2. TARGET_CONNECTION_URL, TARGET_USERNAME, TARGET_PASSWORD set for the target
    3. A users_snapshot table on the target
    """
    source = load_connection_options(driver="postgresql+psycopg", env_prefix="SOURCE")
    target = load_connection_options(driver="postgresql+psycopg", env_prefix="TARGET")

    read_options = ReadOptions(
        connection_options=source,
        query="SELECT id, email FROM public.users WHERE active = :active",
        row_mapper=lambda row: {"id": row.id, "email": row.email},
        statement_preparator=lambda statement: statement.set("active", True),
        fetch_size=5000,
    )
    write_options = WriteOptions(
        connection_options=target,
        statement="INSERT INTO users_snapshot (id, email) VALUES (:id, :email)",
        prepared_statement_setter=lambda user, statement: statement.set_parameters(**user),
        batch_size=500,
    )

    print("Starting users copy...")
    result = run_copy(read_options, write_options, pipeline_name="users_snapshot")
    print(f"Copied {result['rows_written']} rows in {result['duration_seconds']:.2f}s (run {result['run_id']})")


if __name__ == "__main__":
    main()
