"""AWS S3 object store for FileGate.

Talks to S3 via aiobotocore. The container name is the S3 bucket and is
passed on every call, so the client itself is bucket-agnostic and can be
created once per process.

Credentials are resolved via the standard AWS credential chain
(env vars, ~/.aws/credentials, IAM role, etc.) unless explicit keys are
configured.
"""

import logging

from aiobotocore.session import AioSession
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = ("NoSuchKey", "404")


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class AWSObjectStore:
    """Object store backed by S3 buckets.

    Attributes:
        region: The AWS region for the client.
        endpoint_url: Optional custom endpoint (e.g. a local S3 emulator).
        use_path_style: Force path-style addressing.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str = "",
        use_path_style: bool = False,
        access_key_id: str = "",
        secret_access_key: str = "",
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self.use_path_style = use_path_style
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self._session = AioSession()
        self._client = None
        self._client_ctx = None

    async def init(self) -> None:
        """Create the aiobotocore S3 client. Calling twice is a no-op."""
        if self._client is not None:
            return

        client_kwargs: dict = {"region_name": self.region}
        if self.endpoint_url:
            client_kwargs["endpoint_url"] = self.endpoint_url
        if self.use_path_style:
            client_kwargs["config"] = BotoConfig(s3={"addressing_style": "path"})

        if self.access_key_id and self.secret_access_key:
            self._session.set_credentials(self.access_key_id, self.secret_access_key)

        self._client_ctx = self._session.create_client("s3", **client_kwargs)
        self._client = await self._client_ctx.__aenter__()

        logger.info(
            "AWS object store initialized: region=%s endpoint='%s'",
            self.region,
            self.endpoint_url,
        )

    async def close(self) -> None:
        """Close the aiobotocore client session."""
        if self._client_ctx is not None:
            await self._client_ctx.__aexit__(None, None, None)
            self._client = None
            self._client_ctx = None

    async def list_keys(self, container: str) -> list[str]:
        """List a single page of keys (at most 1000, S3's page limit)."""
        resp = await self._client.list_objects(Bucket=container)
        return [obj["Key"] for obj in resp.get("Contents") or []]

    async def get(self, container: str, key: str) -> bytes:
        """Download an object.

        Raises:
            FileNotFoundError: If the object does not exist.
        """
        try:
            resp = await self._client.get_object(Bucket=container, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                raise FileNotFoundError(f"Object not found: {container}/{key}") from e
            raise

        async with resp["Body"] as stream:
            return await stream.read()

    async def put(self, container: str, key: str, data: bytes) -> None:
        """Upload an object, overwriting any previous content."""
        await self._client.put_object(Bucket=container, Key=key, Body=data)

    async def delete(self, container: str, key: str) -> None:
        """Delete an object.

        Idempotent: S3 delete_object does not error on missing keys. A
        ``NoSuchKey`` from an S3-compatible store is still reported as
        ``FileNotFoundError``.
        """
        try:
            await self._client.delete_object(Bucket=container, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                raise FileNotFoundError(f"Object not found: {container}/{key}") from e
            raise
