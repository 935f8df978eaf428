from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import unquote

from litestar import Litestar, Request, get
from litestar.config.cors import CORSConfig
from litestar.handlers import asgi
from litestar.plugins.prometheus import PrometheusConfig, PrometheusController

from .gateway import BlobGateway, RequestContext

if TYPE_CHECKING:
    from litestar.types import Receive, Scope, Send

SERVICE_PREFIX = "/_gateway"

prometheus_config = PrometheusConfig(app_name="blob_gateway", prefix="blob_gateway")


class MetricsController(PrometheusController):
    path = f"{SERVICE_PREFIX}/metrics"


def request_path(scope: Scope) -> str:
    """Path as the client sent it, before the mount rewrites ``scope["path"]``."""
    raw_path = scope.get("raw_path")
    if raw_path:
        path = unquote(raw_path.decode("latin-1").split("?", 1)[0])
    else:
        # the mount at "/" appends a slash to the rewritten path
        path = scope.get("path", "/")
        if path != "/" and path.endswith("/"):
            path = path[:-1]
    if not path.startswith("/"):
        path = f"/{path}"
    return path


def create_app(gateway: BlobGateway | None = None) -> Litestar:
    """Create the blob gateway ASGI application."""
    if gateway is None:
        gateway = BlobGateway.from_env()

    @get(f"{SERVICE_PREFIX}/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @asgi(path="/", is_mount=True, copy_scope=True)
    async def object_handler(scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope=scope, receive=receive)
        context = RequestContext.from_request(request, request_path(scope))
        response = await gateway.handle(context)
        asgi_response = response.to_asgi_response(None, request)
        await asgi_response(scope, receive, send)

    async def startup(app: Litestar) -> None:
        await gateway.startup()

    async def shutdown(app: Litestar) -> None:
        await gateway.shutdown()

    cors_config = CORSConfig(
        allow_origins=["*"],
        allow_methods=["GET", "HEAD"],
        allow_headers=["Range"],
        expose_headers=[
            "Accept-Ranges",
            "Content-Disposition",
            "Content-Length",
            "Content-Range",
        ],
    )

    return Litestar(
        route_handlers=[health, object_handler, MetricsController],
        on_startup=[startup],
        on_shutdown=[shutdown],
        cors_config=cors_config,
        middleware=[prometheus_config.middleware],
    )


app = create_app()
