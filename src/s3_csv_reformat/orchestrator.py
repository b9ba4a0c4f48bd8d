"""
Runs one reformat job end to end.

HEAD and sample the source object, plan the chunks, then execute and upload
every chunk on a bounded thread pool. The multipart upload is only completed
once every chunk task has succeeded; any failure aborts it instead.
"""

import logging
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from botocore.client import BaseClient

from s3_csv_reformat.chunk.estimator import (
    DEFAULT_SAMPLE_LINES,
    estimate_line_size,
    fetch_sample_window,
)
from s3_csv_reformat.chunk.executor import RowMapper, execute_chunk
from s3_csv_reformat.chunk.header import parse_header
from s3_csv_reformat.chunk.planner import plan_chunks
from s3_csv_reformat.chunk.types import ChunkSpec
from s3_csv_reformat.config import ReformatConfig
from s3_csv_reformat.errors import UploadError
from s3_csv_reformat.log import setup_default_logging
from s3_csv_reformat.s3.basic_ops import count_object_lines, head_content_length
from s3_csv_reformat.s3.multipart.coordinator import (
    abort_session,
    begin_session,
    finalize,
    upload_part,
)
from s3_csv_reformat.s3.multipart.upload_session import UploadSession
from s3_csv_reformat.types import SizeSuffix
from s3_csv_reformat.util import locked_print

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    total_records: int
    parts_uploaded: int
    upload_id: str | None
    output_line_count: int | None = None


def _process_chunk_task(
    s3_client: BaseClient,
    config: ReformatConfig,
    session: UploadSession,
    chunk: ChunkSpec,
    headers: list[str],
    row_mapper: RowMapper | None,
) -> int:
    assert config.delimiter is not None
    part = execute_chunk(
        s3_client=s3_client,
        bucket_name=config.bucket_name,
        object_name=config.input_file_key,
        chunk=chunk,
        headers=headers,
        delimiter=config.delimiter,
        row_mapper=row_mapper,
    )
    assert config.min_part_size is not None
    min_part_size = config.min_part_size.as_int()
    if not chunk.is_last() and len(part.payload) < min_part_size:
        # S3 only rejects an undersized non-final part at completion.
        raise UploadError(
            f"Part {part.part_number} is {SizeSuffix(len(part.payload))}, below the "
            f"minimum part size {config.min_part_size}, raise min_chunk_size",
            {"part": part.part_number, "bytes": len(part.payload)},
        )
    upload_part(session, part.part_number, part.payload)
    if config.verbose:
        locked_print(
            f"Uploaded part {part.part_number} ({len(part.payload)} bytes, "
            f"{part.record_count} records)"
        )
    return part.record_count


def _run_chunks(
    s3_client: BaseClient,
    config: ReformatConfig,
    session: UploadSession,
    chunks: list[ChunkSpec],
    headers: list[str],
    row_mapper: RowMapper | None,
) -> int:
    futures: list[Future[int]] = []
    with ThreadPoolExecutor(
        max_workers=config.max_concurrency, thread_name_prefix="chunk"
    ) as executor:
        for chunk in chunks:
            fut = executor.submit(
                _process_chunk_task,
                s3_client,
                config,
                session,
                chunk,
                headers,
                row_mapper,
            )
            futures.append(fut)
        wait(futures, return_when=ALL_COMPLETED)

    errors: list[BaseException] = []
    for chunk, fut in zip(chunks, futures):
        err = fut.exception()
        if err is not None:
            logger.error(f"Chunk {chunk.id} failed: {err}")
            errors.append(err)
    if errors:
        logger.error(f"{len(errors)} of {len(chunks)} chunks failed")
        raise errors[0]
    return sum(fut.result() for fut in futures)


def run_reformat_job(
    s3_client: BaseClient,
    config: ReformatConfig,
    row_mapper: RowMapper | None = None,
    sample_lines: int = DEFAULT_SAMPLE_LINES,
) -> JobResult:
    """Reformat config.input_file_key into config.output_file_key."""
    setup_default_logging()
    config.resolve_defaults()
    bucket = config.bucket_name
    src = config.input_file_key
    dst = config.output_file_key
    assert config.delimiter is not None
    assert config.min_lines_per_chunk is not None
    assert config.min_chunk_size is not None

    total_size = head_content_length(s3_client, bucket, src)
    if total_size == 0:
        logger.info(f"{bucket}/{src} is empty, nothing to process")
        return JobResult(total_records=0, parts_uploaded=0, upload_id=None)

    window = fetch_sample_window(s3_client, bucket, src)
    headers = parse_header(window, config.delimiter)
    estimate = estimate_line_size(window, sample_lines)
    chunks = plan_chunks(
        estimate,
        total_size,
        min_lines_per_chunk=config.min_lines_per_chunk,
        min_chunk_size=config.min_chunk_size.as_int(),
    )
    if not chunks:
        logger.info(f"{bucket}/{src} holds no records, nothing to upload")
        return JobResult(total_records=0, parts_uploaded=0, upload_id=None)

    session = begin_session(s3_client, bucket, dst)
    try:
        total_records = _run_chunks(
            s3_client, config, session, chunks, headers, row_mapper
        )
        finalize(session, expected_parts=len(chunks))
    except Exception:
        abort_session(session)
        raise
    locked_print(f"total records counts :- {total_records}")

    result = JobResult(
        total_records=total_records,
        parts_uploaded=len(chunks),
        upload_id=session.upload_id,
    )
    if config.verify_output:
        result.output_line_count = count_object_lines(s3_client, bucket, dst)
        locked_print(f"Output Line count: {result.output_line_count}")
    locked_print("All processing done")
    return result
