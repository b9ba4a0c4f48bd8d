import logging

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from s3_csv_reformat.errors import ReadError

logger = logging.getLogger(__name__)

_LINE_COUNT_CHUNK_SIZE = 1024 * 1024


def head_content_length(s3_client: BaseClient, bucket_name: str, object_name: str) -> int:
    """Return the size in bytes of the object, as reported by a HEAD call."""
    try:
        response = s3_client.head_object(Bucket=bucket_name, Key=object_name)
    except (BotoCoreError, ClientError) as e:
        raise ReadError(
            f"HEAD failed: {e}", {"bucket": bucket_name, "key": object_name}
        ) from e
    return int(response["ContentLength"])


def get_range(
    s3_client: BaseClient, bucket_name: str, object_name: str, start: int, end: int
) -> bytes:
    """
    Read the inclusive byte range start..end of an object.

    An end past the last byte is clamped by the storage side, so the returned
    payload may be shorter than end - start + 1. It must however match the
    length storage declared for the response.
    """
    range_header = f"bytes={start}-{end}"
    try:
        response = s3_client.get_object(
            Bucket=bucket_name, Key=object_name, Range=range_header
        )
        body = response["Body"]
        try:
            payload = body.read()
        finally:
            body.close()
    except (BotoCoreError, ClientError, OSError) as e:
        raise ReadError(
            f"Range read failed: {e}",
            {"bucket": bucket_name, "key": object_name, "range": range_header},
        ) from e
    declared = response.get("ContentLength")
    if declared is not None and int(declared) != len(payload):
        raise ReadError(
            f"Short read: got {len(payload)} of {declared} bytes",
            {"bucket": bucket_name, "key": object_name, "range": range_header},
        )
    return payload


def count_object_lines(s3_client: BaseClient, bucket_name: str, object_name: str) -> int:
    """Stream a whole object and count its lines.

    A final line without a trailing newline still counts as a line.
    """
    try:
        response = s3_client.get_object(Bucket=bucket_name, Key=object_name)
        body = response["Body"]
        count = 0
        last: bytes = b""
        try:
            while True:
                data = body.read(_LINE_COUNT_CHUNK_SIZE)
                if not data:
                    break
                count += data.count(b"\n")
                last = data
        finally:
            body.close()
    except (BotoCoreError, ClientError, OSError) as e:
        raise ReadError(
            f"Line count read failed: {e}", {"bucket": bucket_name, "key": object_name}
        ) from e
    if last and not last.endswith(b"\n"):
        count += 1
    return count
