from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

from anyio import to_thread
from boto3.session import Session
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from .config import GatewaySettings
    from .ranges import ByteRange

LOG = logging.getLogger("blob_gateway.store")

DEFAULT_CONTENT_TYPE = "application/octet-stream"
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


async def _run_sync(func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
    return await to_thread.run_sync(partial(func, *args, **kwargs))


class StoreError(Exception):
    """The object store failed for a reason other than a missing object."""


@dataclass(frozen=True, slots=True)
class ObjectMetadata:
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE


class ObjectBody(Protocol):
    def iter_bytes(self) -> AsyncIterator[bytes]: ...

    async def aclose(self) -> None: ...


class ObjectStore(Protocol):
    """What the gateway needs from a blob store.

    ``None`` means the object is absent; any other failure is raised as
    :class:`StoreError`.
    """

    async def head(self, key: str) -> ObjectMetadata | None: ...

    async def get(
        self, key: str, byte_range: ByteRange | None = None
    ) -> ObjectBody | None: ...


class S3ObjectBody:
    def __init__(self, stream: Any, chunk_size: int):
        self._stream = stream
        self._chunk_size = chunk_size

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await _run_sync(self._stream.read, self._chunk_size)
            if not chunk:
                break
            yield chunk

    async def aclose(self) -> None:
        await _run_sync(self._stream.close)


class S3ObjectStore:
    """Read-only view of one S3 bucket."""

    def __init__(self, client: Any, bucket: str, chunk_size: int = 64 * 1024):
        self._client = client
        self._bucket = bucket
        self._chunk_size = chunk_size

    @property
    def bucket(self) -> str:
        return self._bucket

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> S3ObjectStore:
        if not settings.bucket:
            msg = "no bucket configured"
            raise ValueError(msg)
        session = Session(
            aws_access_key_id=settings.access_key,
            aws_secret_access_key=settings.secret_key,
            aws_session_token=settings.session_token,
            region_name=settings.region,
        )
        client = session.client(
            "s3",
            endpoint_url=settings.endpoint,
            config=BotoConfig(
                signature_version="s3v4",
                retries={"max_attempts": 3},
                s3={"addressing_style": settings.addressing_style},
            ),
        )
        return cls(client, settings.bucket, chunk_size=settings.chunk_size)

    async def head(self, key: str) -> ObjectMetadata | None:
        try:
            result = await _run_sync(
                self._client.head_object, Bucket=self._bucket, Key=key
            )
        except ClientError as error:
            if _is_not_found(error):
                LOG.debug("head miss for s3://%s/%s", self._bucket, key)
                return None
            msg = f"head_object failed for s3://{self._bucket}/{key}: {error}"
            raise StoreError(msg) from error
        except BotoCoreError as error:
            msg = f"head_object failed for s3://{self._bucket}/{key}: {error}"
            raise StoreError(msg) from error

        return ObjectMetadata(
            size=int(result.get("ContentLength", 0)),
            content_type=result.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )

    async def get(
        self, key: str, byte_range: ByteRange | None = None
    ) -> S3ObjectBody | None:
        get_kwargs = {"Bucket": self._bucket, "Key": key}
        if byte_range is not None:
            get_kwargs["Range"] = byte_range.as_header()
        try:
            result = await _run_sync(self._client.get_object, **get_kwargs)
        except ClientError as error:
            if _is_not_found(error):
                LOG.debug("get miss for s3://%s/%s", self._bucket, key)
                return None
            msg = f"get_object failed for s3://{self._bucket}/{key}: {error}"
            raise StoreError(msg) from error
        except BotoCoreError as error:
            msg = f"get_object failed for s3://{self._bucket}/{key}: {error}"
            raise StoreError(msg) from error

        return S3ObjectBody(result["Body"], self._chunk_size)

    async def aclose(self) -> None:
        await _run_sync(self._client.close)


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in NOT_FOUND_CODES
