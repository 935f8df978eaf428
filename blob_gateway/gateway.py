from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from anyio import CancelScope
from litestar.response import Response, Stream

from .config import GatewaySettings, load_settings_from_env
from .disposition import DispositionOverrides, resolve_disposition
from .errors import build_error_response
from .ranges import INVALID_RANGE, ByteRange, parse_range
from .store import DEFAULT_CONTENT_TYPE, S3ObjectStore, StoreError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from litestar import Request

    from .store import ObjectBody, ObjectMetadata, ObjectStore

LOG = logging.getLogger("blob_gateway.gateway")

ALLOWED_METHODS = frozenset({"GET", "HEAD"})
CHARSET_DEFAULT = "utf-8"
MAX_KEY_BYTES = 1024
STORE_NOT_CONFIGURED = "Object store is not configured, set BLOB_GATEWAY_BUCKET"


@dataclass(frozen=True, slots=True)
class RequestContext:
    method: str
    path: str
    range_header: str | None = None

    @property
    def key(self) -> str:
        """Object key: the request path without its leading slash."""
        return self.path.removeprefix("/")

    @classmethod
    def from_request(cls, request: Request, path: str) -> RequestContext:
        return cls(
            method=request.method.upper(),
            path=path,
            range_header=request.headers.get("range"),
        )


def content_type_with_charset(content_type: str) -> str:
    lowered = content_type.lower()
    if lowered.startswith("text/") and "charset" not in lowered:
        return f"{content_type}; charset={CHARSET_DEFAULT}"
    return content_type


async def _release(body: ObjectBody) -> None:
    # the transport may abandon the stream mid-body; cleanup must still run
    with CancelScope(shield=True):
        try:
            await body.aclose()
        except Exception:
            LOG.debug("failed to release object stream", exc_info=True)


def _body_iterator(body: ObjectBody) -> Callable[[], AsyncIterator[bytes]]:
    async def iterator() -> AsyncIterator[bytes]:
        try:
            async for chunk in body.iter_bytes():
                yield chunk
        finally:
            await _release(body)

    return iterator


class BlobGateway:
    def __init__(
        self,
        store: ObjectStore | None,
        overrides: DispositionOverrides | None = None,
    ):
        self._store = store
        self._overrides = overrides or DispositionOverrides()

    @property
    def overrides(self) -> DispositionOverrides:
        return self._overrides

    async def startup(self) -> None:
        LOG.info(
            "blob gateway ready (store=%s, preview=%s, download=%s)",
            self._describe_store(),
            ",".join(sorted(self._overrides.preview)) or "none",
            ",".join(sorted(self._overrides.download)) or "none",
        )

    async def shutdown(self) -> None:
        if isinstance(self._store, S3ObjectStore):
            await self._store.aclose()

    async def handle(self, context: RequestContext) -> Response:
        LOG.debug(
            "handle method=%s path=%s range=%s",
            context.method,
            context.path,
            context.range_header,
        )
        if context.method not in ALLOWED_METHODS:
            return self._error(context, 405, headers={"Allow": "GET, HEAD"})
        store = self._store
        if store is None:
            return self._error(context, 500, STORE_NOT_CONFIGURED)

        key = context.key
        if not key:
            return self._error(context, 404)
        if len(key.encode("utf-8")) > MAX_KEY_BYTES:
            LOG.debug("key too long (%d chars) for path %s", len(key), context.path)
            return self._error(context, 400)

        metadata = await self._head(store, key)
        if metadata is None:
            return self._error(context, 404)

        byte_range: ByteRange | None = None
        if context.range_header:
            parsed = parse_range(context.range_header, metadata.size)
            if parsed is INVALID_RANGE:
                LOG.debug(
                    "unsatisfiable range %r for %s (size=%d)",
                    context.range_header,
                    key,
                    metadata.size,
                )
                return self._error(context, 416)
            byte_range = parsed

        status_code = 200 if byte_range is None else 206
        headers = self._response_headers(metadata, byte_range)
        media_type = metadata.content_type or DEFAULT_CONTENT_TYPE

        if context.method == "HEAD":
            return Response(
                content=b"",
                status_code=status_code,
                headers=headers,
                media_type=media_type,
            )

        body = await self._get(store, key, byte_range)
        if body is None:
            return self._error(context, 404)

        LOG.debug("streaming %s status=%s", key, status_code)
        return Stream(
            content=_body_iterator(body),
            status_code=status_code,
            headers=headers,
            media_type=media_type,
        )

    def _response_headers(
        self, metadata: ObjectMetadata, byte_range: ByteRange | None
    ) -> dict[str, str]:
        content_type = metadata.content_type or DEFAULT_CONTENT_TYPE
        headers = {
            "Content-Type": content_type_with_charset(content_type),
            "Accept-Ranges": "bytes",
            "Content-Disposition": resolve_disposition(
                content_type, self._overrides.preview, self._overrides.download
            ),
        }
        if byte_range is None:
            headers["Content-Length"] = str(metadata.size)
        else:
            headers["Content-Range"] = byte_range.content_range(metadata.size)
            headers["Content-Length"] = str(byte_range.length)
        return headers

    @staticmethod
    async def _head(store: ObjectStore, key: str) -> ObjectMetadata | None:
        try:
            return await store.head(key)
        except StoreError as error:
            LOG.warning("metadata lookup failed for %s: %s", key, error)
            return None

    @staticmethod
    async def _get(
        store: ObjectStore, key: str, byte_range: ByteRange | None
    ) -> ObjectBody | None:
        try:
            body = await store.get(key, byte_range)
        except StoreError as error:
            LOG.warning("object fetch failed for %s: %s", key, error)
            return None
        if body is None:
            LOG.debug("object %s vanished between head and get", key)
        return body

    @staticmethod
    def _error(
        context: RequestContext,
        status_code: int,
        custom_message: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return build_error_response(
            status_code,
            custom_message,
            headers=headers,
            include_body=context.method != "HEAD",
        )

    def _describe_store(self) -> str:
        if self._store is None:
            return "not configured"
        if isinstance(self._store, S3ObjectStore):
            return f"s3://{self._store.bucket}"
        return type(self._store).__name__

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> BlobGateway:
        store = None
        if settings.store_configured:
            store = S3ObjectStore.from_settings(settings)
        return cls(store, settings.overrides)

    @classmethod
    def from_env(cls) -> BlobGateway:
        """Create a BlobGateway from environment variables.

        Returns:
            BlobGateway backed by the configured bucket, or without a store
            when no bucket is set.
        """
        return cls.from_settings(load_settings_from_env())
