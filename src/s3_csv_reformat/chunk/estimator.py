import io
import logging

from botocore.client import BaseClient

from s3_csv_reformat.chunk.types import LineSizeEstimate
from s3_csv_reformat.errors import EstimationError
from s3_csv_reformat.s3.basic_ops import get_range

logger = logging.getLogger(__name__)

SAMPLE_WINDOW_SIZE = 1024 * 1024
DEFAULT_SAMPLE_LINES = 100


def fetch_sample_window(
    s3_client: BaseClient,
    bucket_name: str,
    object_name: str,
    window_size: int = SAMPLE_WINDOW_SIZE,
) -> bytes:
    """Read the first window_size bytes of the object (less if it is smaller)."""
    return get_range(s3_client, bucket_name, object_name, 0, window_size - 1)


def detect_terminator_width(window: bytes) -> int:
    """2 when the first line ends in CRLF, otherwise 1 (including no newline at all)."""
    prev = -1
    for curr in window:
        if curr == 0x0A:
            return 2 if prev == 0x0D else 1
        prev = curr
    return 1


def _iter_text_lines(window: bytes):
    reader = io.TextIOWrapper(
        io.BytesIO(window), encoding="utf-8", errors="replace", newline=None
    )
    for line in reader:
        if line.endswith("\n"):
            line = line[:-1]
        yield line


def estimate_line_size(
    window: bytes, sample_lines: int = DEFAULT_SAMPLE_LINES
) -> LineSizeEstimate:
    """
    Estimate the average line size of an object from a window at its head.

    Each sampled line costs its UTF-8 length plus the terminator width; the
    average is rounded with a +1 per line bias so padding derived from it errs
    on the large side.
    """
    terminator_width = detect_terminator_width(window)
    total_size = 0
    count = 0
    for line in _iter_text_lines(window):
        if count >= sample_lines:
            break
        total_size += len(line.encode("utf-8")) + terminator_width
        count += 1
    if count == 0:
        raise EstimationError(
            "No sample lines available to estimate line size",
            {"window_bytes": len(window)},
        )
    average = (total_size + count) // count
    logger.info(
        f"Estimated average line size {average} bytes over {count} lines, "
        f"terminator width {terminator_width}"
    )
    return LineSizeEstimate(average_line_size=average, terminator_width=terminator_width)
