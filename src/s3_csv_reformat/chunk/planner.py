import logging

from s3_csv_reformat.chunk.types import ChunkSpec, LineSizeEstimate
from s3_csv_reformat.errors import PlanningError
from s3_csv_reformat.types import SizeSuffix

logger = logging.getLogger(__name__)

DEFAULT_MIN_LINES_PER_CHUNK = 5000
DEFAULT_MIN_CHUNK_SIZE = 5 * 1024 * 1024


def target_chunk_size(
    estimate: LineSizeEstimate, min_lines_per_chunk: int, min_chunk_size: int
) -> int:
    out = max(estimate.average_line_size * min_lines_per_chunk, min_chunk_size)
    if out <= 0:
        raise PlanningError(
            "Derived chunk size is not positive",
            {
                "average_line_size": estimate.average_line_size,
                "min_lines_per_chunk": min_lines_per_chunk,
                "min_chunk_size": min_chunk_size,
            },
        )
    return out


def plan_chunks(
    estimate: LineSizeEstimate,
    total_file_size: int,
    min_lines_per_chunk: int = DEFAULT_MIN_LINES_PER_CHUNK,
    min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE,
) -> list[ChunkSpec]:
    """
    Split [terminator_width, total_file_size] into chunks of the target size.

    The first terminator_width bytes are skipped, each chunk ends target bytes
    after it starts (clamped to the object size) and the next one starts one
    byte later. The last chunk always ends at total_file_size. An object no
    larger than the terminator yields no chunks.
    """
    chunk_size = target_chunk_size(estimate, min_lines_per_chunk, min_chunk_size)
    width = estimate.terminator_width
    if total_file_size <= width:
        logger.info(f"Object of {total_file_size} bytes has nothing to process")
        return []

    chunks: list[ChunkSpec] = []
    cursor = width
    part_id = 1
    while cursor < total_file_size:
        end = cursor + chunk_size
        if end >= total_file_size - 1:
            # A lone trailing byte would be left without a chunk of its own.
            end = total_file_size
        chunks.append(
            ChunkSpec(
                id=part_id,
                start_position=cursor,
                end_position=end,
                terminator_width=width,
                average_line_size=estimate.average_line_size,
                total_file_size=total_file_size,
            )
        )
        part_id += 1
        cursor = end + 1
    logger.info(
        f"Planned {len(chunks)} chunks of {SizeSuffix(chunk_size)} "
        f"over {SizeSuffix(total_file_size)}"
    )
    return chunks
