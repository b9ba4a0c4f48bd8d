"""
Exceptions raised by a reformat job.

Every error is fatal to the job. Storage and I/O failures are wrapped at the
point they are raised so callers only need to catch ReformatError.
"""

from typing import Any


class ReformatError(Exception):
    """Base class for all reformat job failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.details = details or {}
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            message = f"{message} ({detail_str})"
        super().__init__(message)


class ConfigError(ReformatError):
    pass


class EstimationError(ReformatError):
    """No sample lines could be read from the head of the object."""


class PlanningError(ReformatError):
    """A non-positive chunk size was derived."""


class ReadError(ReformatError):
    """A range read failed or returned fewer bytes than declared."""


class LineBoundaryError(ReadError):
    """The line straddling a chunk boundary does not fit in the padded read."""


class UploadError(ReformatError):
    """A multipart call (create, upload part, complete) failed."""


class ReconciliationError(UploadError):
    """The storage part listing is not the contiguous set 1..N."""
