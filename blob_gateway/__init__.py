"""HTTP gateway streaming objects from a blob store with byte-range support."""

from .app import create_app
from .config import GatewaySettings
from .disposition import DispositionOverrides, resolve_disposition
from .errors import build_error_response
from .gateway import BlobGateway, RequestContext
from .ranges import INVALID_RANGE, ByteRange, parse_range
from .store import ObjectMetadata, ObjectStore, S3ObjectStore, StoreError

__all__ = [
    "INVALID_RANGE",
    "BlobGateway",
    "ByteRange",
    "DispositionOverrides",
    "GatewaySettings",
    "ObjectMetadata",
    "ObjectStore",
    "RequestContext",
    "S3ObjectStore",
    "StoreError",
    "build_error_response",
    "create_app",
    "parse_range",
    "resolve_disposition",
]
