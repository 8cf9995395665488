"""
Object store upload sink.

`S3Uploader` puts objects into AWS S3 (or any S3-compatible endpoint).
Transport failures propagate to the caller.
"""

import asyncio
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
JSON_CONTENT_TYPE = "application/json"


class UploadSink(Protocol):
    async def put(self, bucket: str, key: str, body: bytes, content_type: str) -> None: ...


def object_url(bucket: str, key: str) -> str:
    """Public virtual-hosted style URL of an object."""
    return f"https://{bucket}.s3.amazonaws.com/{key}"


class S3Uploader:
    """Upload sink backed by a boto3 S3 client."""

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        """
        Args:
            region: AWS region (uses boto3 default resolution if not set)
            endpoint_url: Custom endpoint for MinIO/compatible storage
            client: Pre-built boto3 S3 client (mainly for tests)
        """
        if client is None:
            import boto3

            kwargs = {}
            if region:
                kwargs["region_name"] = region
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)

        self._s3 = client

    async def put(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        # boto3 is blocking; keep the event loop free for other renders
        await asyncio.to_thread(
            self._s3.put_object,
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )
        logger.debug("S3 write: s3://%s/%s (%d bytes)", bucket, key, len(body))
