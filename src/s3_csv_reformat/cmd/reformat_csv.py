import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from s3_csv_reformat.config import ReformatConfig
from s3_csv_reformat.errors import ReformatError
from s3_csv_reformat.log import configure_logging
from s3_csv_reformat.orchestrator import run_reformat_job
from s3_csv_reformat.s3.create import S3Config, create_s3_client
from s3_csv_reformat.s3.types import S3Credentials
from s3_csv_reformat.types import SizeSuffix
from s3_csv_reformat.util import get_verbose

_DELIMITER_ALIASES = {"tab": "\t", "\\t": "\t", "pipe": "|"}


@dataclass
class Args:
    bucket: str
    src: str
    dst: str
    delimiter: str
    max_concurrency: int
    min_lines_per_chunk: int
    min_chunk_size: SizeSuffix
    min_part_size: SizeSuffix
    verify: bool
    verbose: bool
    log_file: Path | None
    env_file: Path | None


def _parse_args(argv: list[str] | None = None) -> Args:
    parser = argparse.ArgumentParser(
        description="Reformat a delimited text object in S3 chunk by chunk into a new object."
    )
    parser.add_argument("bucket", help="Bucket holding both the source and the output")
    parser.add_argument("src", help="Key of the delimited file to read")
    parser.add_argument("dst", help="Key of the output object")
    parser.add_argument(
        "--delimiter",
        help="Field delimiter of the header line, 'tab' or '\\t' for tabs",
        type=str,
        default=",",
    )
    parser.add_argument(
        "--max-concurrency",
        help="Number of chunks read and uploaded in parallel",
        type=int,
        default=10,
    )
    parser.add_argument(
        "--min-lines-per-chunk",
        help="Lower bound on the lines in a chunk, multiplied by the estimated line size",
        type=int,
        default=5000,
    )
    parser.add_argument(
        "--min-chunk-size",
        help="Lower bound on the chunk size in SizeSuffix form, S3 needs at least 5M",
        type=SizeSuffix,
        default="5M",
    )
    parser.add_argument(
        "--min-part-size",
        help="Smallest non-final part accepted before upload, 0 disables the check",
        type=SizeSuffix,
        default="5M",
    )
    parser.add_argument(
        "--verify",
        help="Count the lines of the output object after completion",
        action="store_true",
    )
    parser.add_argument("-v", "--verbose", help="Verbose output", action="store_true")
    parser.add_argument("--log-file", help="Also log to this file", type=Path)
    parser.add_argument(
        "--env-file", help="Path to a .env file with S3_* settings", type=Path
    )

    args = parser.parse_args(argv)
    out = Args(
        bucket=args.bucket,
        src=args.src,
        dst=args.dst,
        delimiter=_DELIMITER_ALIASES.get(args.delimiter, args.delimiter),
        max_concurrency=args.max_concurrency,
        min_lines_per_chunk=args.min_lines_per_chunk,
        min_chunk_size=args.min_chunk_size,
        min_part_size=args.min_part_size,
        verify=args.verify,
        verbose=get_verbose(args.verbose or None),
        log_file=args.log_file,
        env_file=args.env_file,
    )
    return out


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_args(argv)
    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file
    )
    load_dotenv(args.env_file)
    config = ReformatConfig(
        bucket_name=args.bucket,
        input_file_key=args.src,
        output_file_key=args.dst,
        delimiter=args.delimiter,
        max_concurrency=args.max_concurrency,
        min_lines_per_chunk=args.min_lines_per_chunk,
        min_chunk_size=args.min_chunk_size,
        min_part_size=args.min_part_size,
        verify_output=args.verify,
        verbose=args.verbose,
    )
    try:
        config.resolve_defaults()
        assert config.max_concurrency is not None
        s3_client = create_s3_client(
            S3Credentials.from_env(),
            S3Config(
                max_pool_connections=max(config.max_concurrency, 10),
                verbose=args.verbose,
            ),
        )
        result = run_reformat_job(s3_client, config)
    except ReformatError as e:
        print(f"Error: {e}")
        return 1
    print(f"Done: {result.total_records} records in {result.parts_uploaded} parts")
    return 0


if __name__ == "__main__":
    sys.exit(main())
