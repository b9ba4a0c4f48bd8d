from dataclasses import dataclass

from botocore.client import BaseClient


@dataclass
class UploadSession:
    """One open multipart upload. Storage's part listing is the record of parts."""

    s3_client: BaseClient
    bucket_name: str
    object_name: str
    upload_id: str
    finalized: bool = False
    aborted: bool = False
