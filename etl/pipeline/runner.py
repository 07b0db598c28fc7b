import uuid
from datetime import datetime, timezone as UTC

from jdbcio._logging import get_logger
from jdbcio.io import JdbcSelect, JdbcWrite
from jdbcio.options import ReadOptions, WriteOptions

from .context import PipelineContext

logger = get_logger("pipeline.runner")


def run_copy(
    read_options: ReadOptions,
    write_options: WriteOptions,
    context: PipelineContext | None = None,
    pipeline_name: str = "default",
) -> dict:
    """
    Copy records between two databases:
    1. Read with the source connector
    2. Write with the sink connector
    3. Report counts and timing
    """
    run_id = str(uuid.uuid4())
    started_at = datetime.now(UTC.utc)
    context = context or PipelineContext()
    logger.info("Starting copy pipeline=%s run_id=%s", pipeline_name, run_id)

    try:
        records = context.read(JdbcSelect(read_options))
        rows_read = len(records)
        records.write(JdbcWrite(write_options))
    except Exception:
        logger.exception("Copy pipeline failed", extra={"run_id": run_id})
        raise

    finished_at = datetime.now(UTC.utc)
    duration = (finished_at - started_at).total_seconds()
    logger.info(
        "Copy pipeline finished pipeline=%s run_id=%s rows=%s duration=%.3fs",
        pipeline_name,
        run_id,
        rows_read,
        duration,
    )

    return {
        "run_id": run_id,
        "pipeline_name": pipeline_name,
        "status": "success",
        "rows_read": rows_read,
        "rows_written": rows_read,
        "duration_seconds": duration,
    }
