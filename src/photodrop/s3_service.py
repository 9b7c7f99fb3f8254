"""
Asynchronous S3 Client Service

Read-side access to the object store holding gallery originals and
thumbnails. aioboto3 keeps fetches off the event loop; a single instance is
created in the application lifespan and injected into routes.
"""

import logging
from typing import TYPE_CHECKING

import aioboto3
import boto3
from botocore.config import Config

from photodrop.cache_utils import cache_presigned_url, get_cached_presigned_url
from photodrop.config import S3Settings

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


class AsyncS3Client:
    """Asynchronous S3 Client

    Holds one shared aioboto3.Session; an S3 client is opened per operation
    with ``async with`` so connections are released when the call returns.
    """

    def __init__(self, settings: S3Settings | None = None):
        self.settings = settings or S3Settings()
        self._session: aioboto3.Session | None = None
        self._endpoint_url = self._get_endpoint_url()
        self._config = Config(
            signature_version=self.settings.signature_version,
            max_pool_connections=100,
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=10,
            read_timeout=60,
            s3={"addressing_style": "path"},
        )
        self._presign_client = None
        logger.info(f"AsyncS3Client initialized: endpoint={self._endpoint_url}, bucket={self.settings.bucket}, region={self.settings.region}")

    def _get_endpoint_url(self) -> str:
        endpoint = self.settings.endpoint
        if not endpoint.startswith(("http://", "https://")):
            protocol = "https" if self.settings.use_ssl else "http"
            return f"{protocol}://{endpoint}"
        return endpoint

    @property
    def session(self) -> aioboto3.Session:
        """Get or create the shared aioboto3 session."""
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
            )
        return self._session

    def _get_s3_client(self) -> "S3Client":
        """Usage: async with self._get_s3_client() as s3:"""
        return self.session.client("s3", endpoint_url=self._endpoint_url, config=self._config)

    def _get_presign_client(self):
        # Presigning is local computation, a sync client is enough
        if self._presign_client is None:
            self._presign_client = boto3.client(
                "s3",
                endpoint_url=self._endpoint_url,
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
                config=self._config,
            )
        return self._presign_client

    async def download_fileobj(self, key: str) -> bytes:
        """Download the full content of an object.

        Args:
            key: S3 object key

        Returns:
            File contents as bytes

        Raises:
            Exception: If download fails
        """
        try:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                response = await s3.get_object(Bucket=self.settings.bucket, Key=key)
                body = response.get("Body")
                if body is None:
                    raise ValueError(f"No body in response for key {key}")
                content: bytes = await body.read()
            logger.info(f"Successfully downloaded object: {key}")
            return content
        except Exception as e:
            logger.error(f"Failed to download object {key}: {e}")
            raise

    def generate_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        """Generate a presigned GET URL for an object.

        Args:
            key: S3 object key
            expires_in: URL expiration time in seconds (default: 1 hour)

        Returns:
            Presigned URL string
        """
        cached = get_cached_presigned_url(key)
        if cached:
            logger.debug(f"Using cached presigned URL for: {key}")
            return cached

        try:
            url = self._get_presign_client().generate_presigned_url(
                "get_object",
                Params={"Bucket": self.settings.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except Exception as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            raise

        cache_presigned_url(key, str(url), expires_in)
        logger.debug(f"Generated presigned URL for: {key}")
        return str(url)

    def generate_presigned_urls_batch(self, keys: list[str], expires_in: int = 3600) -> dict[str, str]:
        """Generate presigned URLs for many keys; keys that fail are left out.

        Returns:
            Dict mapping object key to presigned URL
        """
        urls: dict[str, str] = {}
        for key in keys:
            try:
                urls[key] = self.generate_presigned_url(key, expires_in)
            except Exception as e:
                logger.warning(f"Failed to generate presigned URL for {key}: {e}")
        return urls

    async def close(self) -> None:
        """Close the session and clean up resources."""
        if self._session is not None:
            logger.info("Closing AsyncS3Client session")
            self._session = None
        self._presign_client = None
