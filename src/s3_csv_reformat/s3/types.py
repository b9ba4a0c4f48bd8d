import os
from dataclasses import dataclass
from enum import Enum


class S3Provider(Enum):
    AWS = "aws"
    S3 = "s3"  # generic S3
    BACKBLAZE = "b2"

    @staticmethod
    def from_str(value: str) -> "S3Provider":
        """Convert string to S3Provider."""
        for provider in S3Provider:
            if provider.value.lower() == value.lower():
                return provider
        raise ValueError(f"Unknown S3Provider: {value}")


@dataclass
class S3Credentials:
    """Credentials for accessing S3.

    Keys left as None fall through to boto3's default credential chain
    (environment, shared config, instance profile).
    """

    provider: S3Provider = S3Provider.AWS
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    region_name: str | None = None
    endpoint_url: str | None = None

    @staticmethod
    def from_env() -> "S3Credentials":
        provider = os.getenv("S3_PROVIDER")
        return S3Credentials(
            provider=S3Provider.from_str(provider) if provider else S3Provider.AWS,
            access_key_id=os.getenv("S3_ACCESS_KEY_ID"),
            secret_access_key=os.getenv("S3_SECRET_ACCESS_KEY"),
            session_token=os.getenv("S3_SESSION_TOKEN"),
            region_name=os.getenv("S3_REGION"),
            endpoint_url=os.getenv("S3_ENDPOINT_URL"),
        )
