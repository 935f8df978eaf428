from __future__ import annotations

from dataclasses import dataclass
from html import escape

from litestar.enums import MediaType
from litestar.response import Response

# litestar appends "; charset=utf-8" to text/ media types
ERROR_MEDIA_TYPE = MediaType.HTML
CONFIGURATION_ERROR_TITLE = "Configuration error"

DEFAULT_MESSAGES = {
    400: "Missing or invalid request parameters",
    404: "Resource not found",
    405: "Method not allowed",
    416: "Invalid range requested",
}
FALLBACK_MESSAGE = "The resource is forbidden or temporarily unavailable"

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
  <style>
    body {{
      font-family: system-ui, sans-serif;
      display: flex;
      justify-content: center;
      align-items: center;
      height: 100vh;
      margin: 0;
      background: #f4f6fb;
    }}
    .container {{
      text-align: center;
      background: white;
      padding: 2rem 3rem;
      border-radius: 12px;
      box-shadow: 0 5px 25px rgba(0, 0, 0, 0.1);
    }}
    .status {{ font-size: 4rem; color: #667eea; font-weight: bold; }}
    h1 {{ margin: 0.5rem 0; color: #333; }}
    p {{ color: #666; }}
  </style>
</head>
<body>
  <div class="container">
    <h1>{heading}</h1>
    <div class="status">{indicator}</div>
    <p>{message}</p>
  </div>
</body>
</html>
"""


@dataclass(frozen=True, slots=True)
class ErrorPage:
    """Structured error payload: what the client sees, minus the markup."""

    status_code: int
    title: str
    indicator: str
    message: str
    configuration_error: bool = False

    def render(self) -> str:
        heading = "Request status"
        if self.configuration_error:
            heading = CONFIGURATION_ERROR_TITLE
        return _PAGE_TEMPLATE.format(
            title=escape(self.title),
            heading=heading,
            indicator=escape(self.indicator),
            message=escape(self.message),
        )


def error_page(status_code: int, custom_message: str | None = None) -> ErrorPage:
    """Describe the error response for ``status_code``.

    A custom message marks an operator/configuration fault: it is always
    reported as HTTP 500, whatever status triggered it.
    """
    if custom_message:
        return ErrorPage(
            status_code=500,
            title=CONFIGURATION_ERROR_TITLE,
            indicator="!",
            message=custom_message,
            configuration_error=True,
        )
    return ErrorPage(
        status_code=status_code,
        title=f"Status {status_code}",
        indicator=str(status_code),
        message=DEFAULT_MESSAGES.get(status_code, FALLBACK_MESSAGE),
    )


def build_error_response(
    status_code: int,
    custom_message: str | None = None,
    *,
    headers: dict[str, str] | None = None,
    include_body: bool = True,
) -> Response:
    page = error_page(status_code, custom_message)
    return Response(
        content=page.render() if include_body else b"",
        status_code=page.status_code,
        headers=headers,
        media_type=ERROR_MEDIA_TYPE,
    )
