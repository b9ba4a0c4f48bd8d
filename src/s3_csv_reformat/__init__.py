from .chunk.estimator import estimate_line_size
from .chunk.executor import execute_chunk
from .chunk.planner import plan_chunks
from .chunk.types import ChunkSpec, ExecutedPart, LineSizeEstimate
from .config import ReformatConfig
from .errors import (
    ConfigError,
    EstimationError,
    LineBoundaryError,
    PlanningError,
    ReadError,
    ReconciliationError,
    ReformatError,
    UploadError,
)
from .orchestrator import JobResult, run_reformat_job
from .s3.create import S3Config, create_s3_client
from .s3.types import S3Credentials, S3Provider
from .types import SizeSuffix

__all__ = [
    "run_reformat_job",
    "JobResult",
    "ReformatConfig",
    "ChunkSpec",
    "ExecutedPart",
    "LineSizeEstimate",
    "estimate_line_size",
    "plan_chunks",
    "execute_chunk",
    "create_s3_client",
    "S3Config",
    "S3Credentials",
    "S3Provider",
    "SizeSuffix",
    "ReformatError",
    "ConfigError",
    "EstimationError",
    "PlanningError",
    "ReadError",
    "LineBoundaryError",
    "UploadError",
    "ReconciliationError",
]
