import os
import warnings
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from s3_csv_reformat.chunk.planner import (
    DEFAULT_MIN_CHUNK_SIZE,
    DEFAULT_MIN_LINES_PER_CHUNK,
)
from s3_csv_reformat.errors import ConfigError
from s3_csv_reformat.types import SizeSuffix

DEFAULT_MAX_CONCURRENCY = 10
DEFAULT_DELIMITER = ","
# S3 rejects non-final parts smaller than this on completion.
S3_MIN_PART_SIZE = 5 * 1024 * 1024


@dataclass
class ReformatConfig:
    bucket_name: str
    input_file_key: str
    output_file_key: str
    delimiter: str | None = None
    max_concurrency: int | None = None
    min_lines_per_chunk: int | None = None
    min_chunk_size: SizeSuffix | None = None
    # Smallest accepted non-final part, 0 turns the check off.
    min_part_size: SizeSuffix | None = None
    verify_output: bool = False
    verbose: bool | None = None

    def resolve_defaults(self) -> None:
        if self.delimiter is None:
            self.delimiter = DEFAULT_DELIMITER
        if self.max_concurrency is None:
            self.max_concurrency = DEFAULT_MAX_CONCURRENCY
        if self.min_lines_per_chunk is None:
            self.min_lines_per_chunk = DEFAULT_MIN_LINES_PER_CHUNK
        self.min_chunk_size = SizeSuffix(
            DEFAULT_MIN_CHUNK_SIZE
            if self.min_chunk_size is None
            else self.min_chunk_size
        )
        self.min_part_size = SizeSuffix(
            S3_MIN_PART_SIZE if self.min_part_size is None else self.min_part_size
        )
        self.verbose = self.verbose or False
        self.validate()

    def validate(self) -> None:
        missing = [
            name
            for name in ("bucket_name", "input_file_key", "output_file_key")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")
        if self.input_file_key == self.output_file_key:
            raise ConfigError(
                "Input and output keys must differ", {"key": self.input_file_key}
            )
        if self.delimiter is not None and not self.delimiter:
            raise ConfigError("delimiter must not be empty")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ConfigError(
                "max_concurrency must be at least 1",
                {"max_concurrency": self.max_concurrency},
            )
        if self.min_lines_per_chunk is not None and self.min_lines_per_chunk < 1:
            raise ConfigError(
                "min_lines_per_chunk must be at least 1",
                {"min_lines_per_chunk": self.min_lines_per_chunk},
            )
        if self.min_chunk_size is not None and self.min_chunk_size.as_int() < 1:
            raise ConfigError(
                "min_chunk_size must be positive",
                {"min_chunk_size": self.min_chunk_size},
            )
        if self.min_part_size is not None and self.min_part_size.as_int() < 0:
            raise ConfigError(
                "min_part_size must not be negative",
                {"min_part_size": self.min_part_size},
            )
        if (
            self.min_chunk_size is not None
            and self.min_chunk_size.as_int() < S3_MIN_PART_SIZE
        ):
            warnings.warn(
                f"min_chunk_size {self.min_chunk_size} is below the S3 minimum part "
                f"size {SizeSuffix(S3_MIN_PART_SIZE)}, completion may be rejected"
            )

    @staticmethod
    def from_env(env_path: Path | None = None) -> "ReformatConfig":
        """Build a config from S3_CSV_* environment variables (and a .env file)."""
        load_dotenv(env_path)

        def _int(name: str) -> int | None:
            value = os.getenv(name)
            if not value:
                return None
            try:
                return int(value)
            except ValueError as e:
                raise ConfigError(f"{name} is not an integer: {value}") from e

        def _size(name: str) -> SizeSuffix | None:
            value = os.getenv(name)
            if not value:
                return None
            try:
                return SizeSuffix(value)
            except ValueError as e:
                raise ConfigError(f"{name} is invalid: {e}") from e

        out = ReformatConfig(
            bucket_name=os.getenv("S3_CSV_BUCKET", ""),
            input_file_key=os.getenv("S3_CSV_INPUT_KEY", ""),
            output_file_key=os.getenv("S3_CSV_OUTPUT_KEY", ""),
            delimiter=os.getenv("S3_CSV_DELIMITER") or None,
            max_concurrency=_int("S3_CSV_MAX_CONCURRENCY"),
            min_lines_per_chunk=_int("S3_CSV_MIN_LINES_PER_CHUNK"),
            min_chunk_size=_size("S3_CSV_MIN_CHUNK_SIZE"),
            min_part_size=_size("S3_CSV_MIN_PART_SIZE"),
        )
        out.resolve_defaults()
        return out
