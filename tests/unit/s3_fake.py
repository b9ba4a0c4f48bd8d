"""
In-memory stand-in for the handful of boto3 S3 client calls the reformat job makes.

Responses mirror the boto3 dict shapes. Failures can be injected per range
start, per part number, or by hiding parts from list_parts.
"""

import hashlib
import io
import re
import uuid
from threading import Lock

from botocore.exceptions import ClientError

_RANGE = re.compile(r"^bytes=(\d+)-(\d+)$")


def _client_error(code: str, operation: str, message: str = "") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


class FakeS3Client:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.uploads: dict[str, dict] = {}
        self.lock = Lock()
        self.calls: list[str] = []
        self.get_ranges: list[str] = []
        self.fail_range_starts: set[int] = set()
        self.short_read_range_starts: set[int] = set()
        self.fail_part_numbers: set[int] = set()
        self.hidden_part_numbers: set[int] = set()
        self.list_page_cap = 1000

    def _record(self, name: str) -> None:
        with self.lock:
            self.calls.append(name)

    def put_object(self, Bucket: str, Key: str, Body: bytes) -> dict:
        self._record("put_object")
        self.objects[(Bucket, Key)] = bytes(Body)
        return {"ETag": f'"{hashlib.md5(Body).hexdigest()}"'}

    def head_object(self, Bucket: str, Key: str) -> dict:
        self._record("head_object")
        if (Bucket, Key) not in self.objects:
            raise _client_error("404", "HeadObject", "Not Found")
        return {"ContentLength": len(self.objects[(Bucket, Key)])}

    def get_object(self, Bucket: str, Key: str, Range: str | None = None) -> dict:
        self._record("get_object")
        if (Bucket, Key) not in self.objects:
            raise _client_error("NoSuchKey", "GetObject")
        data = self.objects[(Bucket, Key)]
        if Range is None:
            return {"Body": io.BytesIO(data), "ContentLength": len(data)}
        with self.lock:
            self.get_ranges.append(Range)
        match = _RANGE.match(Range)
        assert match is not None, f"Bad range {Range}"
        start, end = int(match.group(1)), int(match.group(2))
        if start in self.fail_range_starts:
            raise _client_error("InternalError", "GetObject", "injected failure")
        if start >= len(data):
            raise _client_error("InvalidRange", "GetObject")
        payload = data[start : min(end, len(data) - 1) + 1]
        declared = len(payload)
        if start in self.short_read_range_starts:
            payload = payload[: declared // 2]
        return {"Body": io.BytesIO(payload), "ContentLength": declared}

    def create_multipart_upload(self, Bucket: str, Key: str) -> dict:
        self._record("create_multipart_upload")
        upload_id = uuid.uuid4().hex
        with self.lock:
            self.uploads[upload_id] = {
                "bucket": Bucket,
                "key": Key,
                "parts": {},
                "state": "open",
            }
        return {"UploadId": upload_id}

    def upload_part(
        self, Bucket: str, Key: str, PartNumber: int, UploadId: str, Body: bytes
    ) -> dict:
        self._record("upload_part")
        if PartNumber in self.fail_part_numbers:
            raise _client_error("SlowDown", "UploadPart", "injected failure")
        etag = f'"{hashlib.md5(Body).hexdigest()}"'
        with self.lock:
            upload = self.uploads[UploadId]
            assert upload["state"] == "open"
            upload["parts"][PartNumber] = (etag, bytes(Body))
        return {"ETag": etag}

    def list_parts(
        self,
        Bucket: str,
        Key: str,
        UploadId: str,
        MaxParts: int = 1000,
        PartNumberMarker: int = 0,
    ) -> dict:
        self._record("list_parts")
        with self.lock:
            parts = self.uploads[UploadId]["parts"]
            numbers = sorted(
                n
                for n in parts
                if n > PartNumberMarker and n not in self.hidden_part_numbers
            )
        page_size = min(MaxParts, self.list_page_cap)
        page = numbers[:page_size]
        truncated = len(numbers) > page_size
        out: dict = {
            "Parts": [
                {"PartNumber": n, "ETag": parts[n][0], "Size": len(parts[n][1])}
                for n in page
            ],
            "IsTruncated": truncated,
        }
        if truncated:
            out["NextPartNumberMarker"] = page[-1]
        return out

    def complete_multipart_upload(
        self, Bucket: str, Key: str, UploadId: str, MultipartUpload: dict
    ) -> dict:
        self._record("complete_multipart_upload")
        with self.lock:
            upload = self.uploads[UploadId]
            assert upload["state"] == "open"
            numbers = [p["PartNumber"] for p in MultipartUpload["Parts"]]
            if numbers != sorted(numbers):
                raise _client_error("InvalidPartOrder", "CompleteMultipartUpload")
            body = b""
            for p in MultipartUpload["Parts"]:
                etag, data = upload["parts"][p["PartNumber"]]
                if etag != p["ETag"]:
                    raise _client_error("InvalidPart", "CompleteMultipartUpload")
                body += data
            upload["state"] = "completed"
            self.objects[(Bucket, Key)] = body
        return {"Bucket": Bucket, "Key": Key}

    def abort_multipart_upload(self, Bucket: str, Key: str, UploadId: str) -> dict:
        self._record("abort_multipart_upload")
        with self.lock:
            self.uploads[UploadId]["state"] = "aborted"
        return {}
