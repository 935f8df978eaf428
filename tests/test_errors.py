"""Tests for error responses."""

from __future__ import annotations

import pytest
from blob_gateway.errors import (
    ERROR_MEDIA_TYPE,
    FALLBACK_MESSAGE,
    build_error_response,
    error_page,
)


class TestErrorPage:
    @pytest.mark.parametrize(
        ("status_code", "message"),
        [
            (404, "Resource not found"),
            (416, "Invalid range requested"),
            (400, "Missing or invalid request parameters"),
            (405, "Method not allowed"),
            (403, FALLBACK_MESSAGE),
            (503, FALLBACK_MESSAGE),
        ],
    )
    def test_default_messages(self, status_code, message):
        page = error_page(status_code)
        assert page.status_code == status_code
        assert page.message == message
        assert page.indicator == str(status_code)
        assert page.configuration_error is False

    def test_custom_message_forces_500(self):
        page = error_page(404, "bucket binding missing")
        assert page.status_code == 500
        assert page.message == "bucket binding missing"
        assert page.indicator == "!"
        assert page.configuration_error is True
        assert page.title == "Configuration error"

    def test_render_escapes_message(self):
        html = error_page(500, "<script>alert(1)</script>").render()
        assert "<script>alert" not in html
        assert "&lt;script&gt;" in html


class TestBuildErrorResponse:
    def test_status_and_body(self):
        response = build_error_response(416)
        assert response.status_code == 416
        assert response.media_type == ERROR_MEDIA_TYPE
        assert "Invalid range requested" in response.content
        assert "Status 416" in response.content

    def test_configuration_fault(self):
        response = build_error_response(405, "not configured")
        assert response.status_code == 500
        assert "Configuration error" in response.content
        assert "not configured" in response.content

    def test_extra_headers(self):
        response = build_error_response(405, headers={"Allow": "GET, HEAD"})
        assert response.status_code == 405
        assert response.headers["Allow"] == "GET, HEAD"

    def test_bodyless(self):
        response = build_error_response(404, include_body=False)
        assert response.status_code == 404
        assert response.content == b""
