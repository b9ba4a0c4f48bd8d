"""
Multipart upload session handling for the reformatted output object.

https://docs.aws.amazon.com/AmazonS3/latest/userguide/mpuoverview.html

The output object only becomes visible when finalize() completes the upload,
and finalize() refuses to run unless storage lists exactly parts 1..N.
"""

import logging

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from s3_csv_reformat.errors import ReconciliationError, UploadError
from s3_csv_reformat.s3.multipart.finished_piece import FinishedPiece
from s3_csv_reformat.s3.multipart.upload_session import UploadSession
from s3_csv_reformat.util import locked_print

logger = logging.getLogger(__name__)

_LIST_PARTS_PAGE_SIZE = 1000


def begin_session(
    s3_client: BaseClient, bucket_name: str, object_name: str
) -> UploadSession:
    """Open a multipart upload for bucket_name/object_name."""
    logger.info(f"Creating multipart upload for {bucket_name}/{object_name}")
    try:
        mpu = s3_client.create_multipart_upload(Bucket=bucket_name, Key=object_name)
    except (BotoCoreError, ClientError) as e:
        raise UploadError(
            f"Could not create multipart upload: {e}",
            {"bucket": bucket_name, "key": object_name},
        ) from e
    return UploadSession(
        s3_client=s3_client,
        bucket_name=bucket_name,
        object_name=object_name,
        upload_id=mpu["UploadId"],
    )


def upload_part(
    session: UploadSession, part_number: int, payload: bytes
) -> FinishedPiece:
    """Upload one part. Failures are not retried."""
    logger.debug(f"Uploading part {part_number} ({len(payload)} bytes)")
    try:
        response = session.s3_client.upload_part(
            Bucket=session.bucket_name,
            Key=session.object_name,
            PartNumber=part_number,
            UploadId=session.upload_id,
            Body=payload,
        )
    except (BotoCoreError, ClientError) as e:
        raise UploadError(
            f"Error uploading part {part_number}: {e}",
            {"key": session.object_name, "upload_id": session.upload_id},
        ) from e
    return FinishedPiece(part_number=part_number, etag=response["ETag"])


def list_parts(session: UploadSession) -> list[FinishedPiece]:
    """Every part storage has recorded for the session, sorted by part number."""
    parts: list[FinishedPiece] = []
    marker = 0
    try:
        while True:
            response = session.s3_client.list_parts(
                Bucket=session.bucket_name,
                Key=session.object_name,
                UploadId=session.upload_id,
                MaxParts=_LIST_PARTS_PAGE_SIZE,
                PartNumberMarker=marker,
            )
            for p in response.get("Parts", []):
                parts.append(FinishedPiece.from_json(p))
            if not response.get("IsTruncated"):
                break
            marker = int(response["NextPartNumberMarker"])
    except (BotoCoreError, ClientError) as e:
        raise UploadError(
            f"Could not list parts: {e}", {"upload_id": session.upload_id}
        ) from e
    parts.sort(key=lambda x: x.part_number)
    return parts


def _reconcile(parts: list[FinishedPiece], expected_parts: int) -> None:
    listed = [p.part_number for p in parts]
    expected = list(range(1, expected_parts + 1))
    if listed != expected:
        missing = sorted(set(expected) - set(listed))
        unexpected = sorted(set(listed) - set(expected))
        raise ReconciliationError(
            "Storage part listing does not match the planned parts",
            {
                "expected": expected_parts,
                "listed": len(listed),
                "missing": missing[:10],
                "unexpected": unexpected[:10],
            },
        )


def finalize(session: UploadSession, expected_parts: int) -> None:
    """Reconcile the storage part listing and complete the upload."""
    if session.finalized:
        raise UploadError("Upload already finalized", {"upload_id": session.upload_id})
    if session.aborted:
        raise UploadError("Upload was aborted", {"upload_id": session.upload_id})
    parts = list_parts(session)
    _reconcile(parts, expected_parts)
    locked_print(f"Upload complete, sending completion for {len(parts)} parts")
    try:
        session.s3_client.complete_multipart_upload(
            Bucket=session.bucket_name,
            Key=session.object_name,
            UploadId=session.upload_id,
            MultipartUpload={"Parts": FinishedPiece.to_json_array(parts)},
        )
    except (BotoCoreError, ClientError) as e:
        raise UploadError(
            f"Could not complete multipart upload: {e}",
            {"key": session.object_name, "upload_id": session.upload_id},
        ) from e
    session.finalized = True
    logger.info(
        f"Multipart upload completed: {session.bucket_name}/{session.object_name}"
    )


def abort_session(session: UploadSession) -> None:
    """Abort the upload so storage drops the parts. Errors are only logged."""
    if session.finalized or session.aborted:
        return
    try:
        session.s3_client.abort_multipart_upload(
            Bucket=session.bucket_name,
            Key=session.object_name,
            UploadId=session.upload_id,
        )
        session.aborted = True
        logger.warning(f"Aborted multipart upload {session.upload_id}")
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Error aborting upload {session.upload_id}: {e}")
