import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from botocore.client import BaseClient

from s3_csv_reformat.chunk.types import ChunkSpec, ExecutedPart
from s3_csv_reformat.errors import LineBoundaryError
from s3_csv_reformat.s3.basic_ops import get_range

logger = logging.getLogger(__name__)

RowMapper = Callable[[str], str]


@dataclass
class _Line:
    content: bytes
    start: int  # absolute offset of the first byte
    end: int  # absolute offset just past the terminator
    terminated: bool


def _iter_lines(data: bytes, offset: int) -> Iterator[_Line]:
    """Lazily split data on newlines, tracking absolute offsets from offset."""
    pos = 0
    size = len(data)
    while pos < size:
        idx = data.find(b"\n", pos)
        if idx == -1:
            content = data[pos:]
            nxt = size
            terminated = False
        else:
            content = data[pos:idx]
            nxt = idx + 1
            terminated = True
            if content.endswith(b"\r"):
                content = content[:-1]
        yield _Line(content, offset + pos, offset + nxt, terminated)
        pos = nxt


def select_chunk_lines(chunk: ChunkSpec, data: bytes, read_start: int) -> list[bytes]:
    """
    Pick out the lines owned by chunk from its padded read.

    The first line of the read is always dropped: it is either the header or
    the tail of a line owned by the previous chunk. Lines are then kept while
    the running cursor stays within the chunk boundary, plus the one line that
    straddles it.

    Raises LineBoundaryError when the straddling line is cut off by the end of
    the padded read, which means some line is longer than the padding allows.
    """
    boundary = chunk.boundary()
    reaches_eof = read_start + len(data) >= chunk.total_file_size
    retained: list[bytes] = []

    lines = _iter_lines(data, read_start)
    if next(lines, None) is None and not reaches_eof:
        raise LineBoundaryError("Empty read before end of object", {"chunk": chunk.id})
    for line in lines:
        if line.start > boundary:
            return retained
        if not line.terminated and not reaches_eof:
            raise LineBoundaryError(
                "Line at chunk boundary exceeds the read padding",
                {
                    "chunk": chunk.id,
                    "line_start": line.start,
                    "padding": 2 * chunk.average_line_size,
                },
            )
        retained.append(line.content)
        if line.end > boundary:
            return retained
    if not reaches_eof:
        raise LineBoundaryError(
            "Padded read ended before the chunk boundary",
            {"chunk": chunk.id, "boundary": boundary, "read_bytes": len(data)},
        )
    return retained


def serialize_part(
    chunk: ChunkSpec,
    lines: list[bytes],
    headers: list[str],
    delimiter: str,
    row_mapper: RowMapper | None = None,
) -> bytes:
    rows = [line.decode("utf-8", errors="replace") for line in lines]
    if row_mapper is not None:
        rows = [row_mapper(row) for row in rows]
    body = "\n".join(rows)
    if rows:
        # Keeps the line break between this part and the next once stitched.
        body += "\n"
    if chunk.id == 1:
        body = delimiter.join(headers) + "\n" + body
    return body.encode("utf-8")


def execute_chunk(
    s3_client: BaseClient,
    bucket_name: str,
    object_name: str,
    chunk: ChunkSpec,
    headers: list[str],
    delimiter: str,
    row_mapper: RowMapper | None = None,
) -> ExecutedPart:
    """Read, trim and serialize one chunk. Nothing is written to storage here."""
    read_start, read_end = chunk.read_range()
    logger.debug(
        f"Chunk {chunk.id}: reading {read_start}-{read_end} for "
        f"{chunk.start_position}-{chunk.end_position}"
    )
    data = get_range(s3_client, bucket_name, object_name, read_start, read_end)
    lines = select_chunk_lines(chunk, data, read_start)
    payload = serialize_part(chunk, lines, headers, delimiter, row_mapper)
    return ExecutedPart(part_number=chunk.id, payload=payload, record_count=len(lines))
