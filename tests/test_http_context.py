"""Tests for the response writer and the request context store."""

from __future__ import annotations

from phaselayer import context
from phaselayer.constants import ERROR_CONTEXT_KEY
from phaselayer.http import ResponseWriter, text_handler


class TestResponseWriter:
    def test_defaults(self) -> None:
        writer = ResponseWriter()
        assert writer.status_code is None
        assert not writer.written
        assert writer.body == b""

    def test_first_write_implies_ok(self) -> None:
        writer = ResponseWriter()
        assert writer.write("hello") == 5
        assert writer.status_code == 200
        assert writer.written

    def test_status_is_set_once(self) -> None:
        writer = ResponseWriter()
        writer.write_header(404)
        writer.write_header(500)
        writer.write(b"x")
        assert writer.status_code == 404

    def test_to_response(self) -> None:
        writer = ResponseWriter()
        writer.headers["x-layer"] = "1"
        writer.write_header(201)
        writer.write("created")
        response = writer.to_response()
        assert response.status_code == 201
        assert response.body == b"created"
        assert response.headers["x-layer"] == "1"

    def test_to_response_without_writes(self) -> None:
        assert ResponseWriter().to_response().status_code == 200


class TestTextHandler:
    def test_replies(self, http_request) -> None:
        writer = ResponseWriter()
        text_handler(418, "teapot", "text/plain")(writer, http_request)
        assert writer.status_code == 418
        assert writer.body == b"teapot"
        assert writer.headers["content-type"] == "text/plain"

    def test_keeps_existing_content_type(self, http_request) -> None:
        writer = ResponseWriter()
        writer.headers["content-type"] = "application/json"
        text_handler(500, "{}", "text/plain")(writer, http_request)
        assert writer.headers["content-type"] == "application/json"


class TestContext:
    def test_set_get(self, http_request) -> None:
        context.set(http_request, "user", "alice")
        assert context.get(http_request, "user") == "alice"

    def test_missing_key_default(self, http_request) -> None:
        assert context.get(http_request, "missing") is None
        assert context.get(http_request, "missing", 3) == 3

    def test_stored_none_is_returned(self, http_request) -> None:
        context.set(http_request, "maybe", None)
        assert context.get(http_request, "maybe", "default") is None

    def test_delete(self, http_request) -> None:
        context.set(http_request, "k", 1)
        context.delete(http_request, "k")
        context.delete(http_request, "k")
        assert context.get(http_request, "k") is None

    def test_scoped_per_request(self, request_factory) -> None:
        first, second = request_factory(), request_factory()
        context.set(first, "k", "v")
        assert context.get(second, "k") is None

    def test_get_error(self, http_request) -> None:
        exc = RuntimeError("x")
        assert context.get_error(http_request) is None
        context.set(http_request, ERROR_CONTEXT_KEY, exc)
        assert context.get_error(http_request) is exc
