"""Shared fixtures for phaselayer tests."""

from __future__ import annotations

from typing import Any, Callable, List

import pytest
from starlette.requests import Request

from phaselayer.http import ResponseWriter


def make_request(path: str = "/", method: str = "GET") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
    }
    return Request(scope)


@pytest.fixture
def request_factory() -> Callable[..., Request]:
    return make_request


@pytest.fixture
def http_request() -> Request:
    return make_request()


@pytest.fixture
def response() -> ResponseWriter:
    return ResponseWriter()


@pytest.fixture
def calls() -> List[Any]:
    return []
