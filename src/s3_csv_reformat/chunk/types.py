from dataclasses import dataclass


@dataclass(frozen=True)
class LineSizeEstimate:
    average_line_size: int
    terminator_width: int


@dataclass(frozen=True)
class ChunkSpec:
    """A planned byte range of the source object.

    Consecutive chunks leave one byte between them: the next chunk starts at
    end_position + 1 and recovers that byte with its look-back padding.
    """

    id: int
    start_position: int
    end_position: int
    terminator_width: int
    average_line_size: int
    total_file_size: int

    def __post_init__(self):
        assert self.id >= 1, f"Invalid chunk id: {self.id}"
        assert (
            self.end_position > self.start_position
        ), f"Invalid chunk range: {self.start_position}-{self.end_position}"
        assert self.terminator_width in (1, 2)

    def read_range(self) -> tuple[int, int]:
        """Padded (start, end) to fetch so the boundary lines are complete."""
        read_start = max(0, self.start_position - self.terminator_width)
        read_end = min(
            self.end_position + 2 * self.average_line_size, self.total_file_size
        )
        return read_start, read_end

    def boundary(self) -> int:
        """Offset where the next chunk's look-back read begins.

        A line belongs to this chunk when it starts at or before this offset.
        """
        return self.end_position + 1 - self.terminator_width

    def is_last(self) -> bool:
        return self.end_position >= self.total_file_size


@dataclass
class ExecutedPart:
    part_number: int
    payload: bytes
    record_count: int

    def __repr__(self) -> str:
        return (
            f"ExecutedPart(part_number={self.part_number}, "
            f"bytes={len(self.payload)}, records={self.record_count})"
        )
