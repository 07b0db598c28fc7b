import argparse
import json
import sys

from pydantic import ValidationError

from jdbcio import (
    ReadOptions,
    WriteOptions,
    jdbc_select,
    load_connection_options,
    test_data_source_connection,
)
from pipeline import PipelineContext
from pipeline.runner import run_copy


def _row_to_dict(row) -> dict:
    return dict(row._mapping)


def _bind_dict(record: dict, statement) -> None:
    statement.set_parameters(**record)


def cmd_test_connection(args):
    """Handle test-connection subcommand."""
    try:
        options = load_connection_options(file_path=args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    success = test_data_source_connection(options)
    label = f"Database from {args.config}"
    print(json.dumps({"success": success, "label": label}))

    if success:
        print(f"Connection to {label} successful.", file=sys.stderr)
        sys.exit(0)
    else:
        print(f"Connection to {label} failed.", file=sys.stderr)
        sys.exit(1)


def cmd_select(args):
    """Handle select subcommand."""
    try:
        connection_options = load_connection_options(file_path=args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        read_options = ReadOptions(
            connection_options=connection_options,
            query=args.query,
            row_mapper=_row_to_dict,
            fetch_size=args.fetch_size,
        )
    except ValidationError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        records = jdbc_select(PipelineContext(), read_options)
    except Exception as e:
        print(f"Query failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(records.to_list(), default=str))
    sys.exit(0)


def cmd_copy(args):
    """Handle copy subcommand."""
    try:
        source = load_connection_options(file_path=args.source_config)
        target = load_connection_options(file_path=args.target_config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        read_options = ReadOptions(
            connection_options=source,
            query=args.query,
            row_mapper=_row_to_dict,
            fetch_size=args.fetch_size,
        )
        write_options = WriteOptions(
            connection_options=target,
            statement=args.statement,
            prepared_statement_setter=_bind_dict,
            batch_size=args.batch_size,
        )
    except ValidationError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        result = run_copy(read_options, write_options, pipeline_name=args.pipeline)
    except Exception as e:
        print(f"Copy failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result))
    print(f"Copy finished. Rows written: {result['rows_written']}", file=sys.stderr)
    sys.exit(0)


def main():
    parser = argparse.ArgumentParser(description="JDBC connector CLI")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

    test_parser = subparsers.add_parser("test-connection", help="Test a database connection")
    test_parser.add_argument("--config", required=True, help="Path to connection JSON/YAML config")

    select_parser = subparsers.add_parser("select", help="Run a query and print rows as JSON")
    select_parser.add_argument("--config", required=True, help="Path to connection JSON/YAML config")
    select_parser.add_argument("--query", required=True, help="SQL query to run")
    select_parser.add_argument("--fetch-size", type=int, default=None, help="Override the driver fetch size")

    copy_parser = subparsers.add_parser("copy", help="Copy query results into another database")
    copy_parser.add_argument("--source-config", required=True, help="Path to source connection config")
    copy_parser.add_argument("--query", required=True, help="SQL query to read from the source")
    copy_parser.add_argument("--target-config", required=True, help="Path to target connection config")
    copy_parser.add_argument("--statement", required=True, help="DML statement with :named parameters")
    copy_parser.add_argument("--fetch-size", type=int, default=None, help="Override the driver fetch size")
    copy_parser.add_argument("--batch-size", type=int, default=None, help="Override the write batch size")
    copy_parser.add_argument("--pipeline", default="default", help="Pipeline name for logging")

    args = parser.parse_args()

    if args.command == "test-connection":
        cmd_test_connection(args)
    elif args.command == "select":
        cmd_select(args)
    elif args.command == "copy":
        cmd_copy(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
