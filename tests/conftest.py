from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest
from blob_gateway.store import ObjectMetadata, StoreError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Generator

    from blob_gateway.ranges import ByteRange


class MemoryBody:
    def __init__(self, data: bytes, chunk_size: int = 64):
        self._data = data
        self._chunk_size = chunk_size
        self.closed = False

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        for offset in range(0, len(self._data), self._chunk_size):
            yield self._data[offset : offset + self._chunk_size]

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class MemoryObjectStore:
    """In-memory object store recording every call it receives."""

    objects: dict[str, tuple[bytes, str | None]] = field(default_factory=dict)
    calls: list[tuple[str, str, ByteRange | None]] = field(default_factory=list)
    bodies: list[MemoryBody] = field(default_factory=list)
    vanish_on_get: bool = False
    fail_with: StoreError | None = None

    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        self.objects[key] = (data, content_type)

    async def head(self, key: str) -> ObjectMetadata | None:
        self.calls.append(("head", key, None))
        if self.fail_with is not None:
            raise self.fail_with
        if key not in self.objects:
            return None
        data, content_type = self.objects[key]
        if content_type is None:
            return ObjectMetadata(size=len(data))
        return ObjectMetadata(size=len(data), content_type=content_type)

    async def get(
        self, key: str, byte_range: ByteRange | None = None
    ) -> MemoryBody | None:
        self.calls.append(("get", key, byte_range))
        if self.vanish_on_get or key not in self.objects:
            return None
        data, _ = self.objects[key]
        if byte_range is not None:
            data = data[byte_range.start : byte_range.end + 1]
        body = MemoryBody(data)
        self.bodies.append(body)
        return body


@pytest.fixture
def store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def gateway_env() -> Generator[dict[str, str]]:
    """Set gateway environment variables for the duration of a test."""
    env_vars = {
        "BLOB_GATEWAY_BUCKET": "media",
        "BLOB_GATEWAY_S3_ENDPOINT": "http://127.0.0.1:9000",
        "BLOB_GATEWAY_S3_ACCESS_KEY": "minioadmin",
        "BLOB_GATEWAY_S3_SECRET_KEY": "minioadmin",
        "BLOB_GATEWAY_S3_REGION": "us-east-1",
        "FORCE_PREVIEW_TYPES": " Video/MP4, ,audio/ ",
        "FORCE_DOWNLOAD_TYPES": "text/html",
    }

    original_values = {}
    for key, value in env_vars.items():
        original_values[key] = os.environ.get(key)
        os.environ[key] = value

    yield env_vars

    for key, original_value in original_values.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


async def _read_body(response) -> bytes:
    iterator = response.iterator
    if callable(iterator):
        iterator = iterator()
    chunks = [chunk async for chunk in iterator]
    return b"".join(chunks)


@pytest.fixture
def read_body():
    """Drain a litestar Stream response the way the transport would."""
    return _read_body
