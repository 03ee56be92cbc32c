"""Tests for handler shape classification and normalization."""

from __future__ import annotations

import functools
from typing import Any

import pytest

from phaselayer.adapter import (
    HandlerShape,
    Tagged,
    adapt,
    as_handler,
    capability,
    classify,
    continuation,
    direct,
    result,
)
from phaselayer.http import ResponseWriter

# ── Sample handlers in every shape ───────────────────────────────────────


def _downstream(response: ResponseWriter, request: Any) -> None:
    response.write("downstream")


def chain_mw(next_handler):
    def handler(response, request):
        response.write("chain>")
        next_handler(response, request)

    return handler


def result_mw(next_handler):
    def handler(response, request):
        response.write("result>")
        next_handler(response, request)

    return handler


def continuation_mw(response, request, next_handler):
    response.write("cont>")
    next_handler(response, request)


def simple_mw(response, request):
    response.write_header(204)


class DirectHandler:
    def serve(self, response, request):
        response.write("direct")


class CapabilityHandler:
    def handle(self, response, request, next_handler):
        response.write("cap>")
        next_handler(response, request)


class CallableSimple:
    def __call__(self, response, request):
        response.write("callable")


def _run(mw, request) -> ResponseWriter:
    response = ResponseWriter()
    mw(_downstream)(response, request)
    return response


# ── Classification ───────────────────────────────────────────────────────


class TestClassify:
    def test_chain_function(self) -> None:
        assert classify(chain_mw) is HandlerShape.CHAIN

    def test_continuation_function(self) -> None:
        assert classify(continuation_mw) is HandlerShape.CONTINUATION

    def test_simple_function(self) -> None:
        assert classify(simple_mw) is HandlerShape.SIMPLE

    def test_direct_object(self) -> None:
        assert classify(DirectHandler()) is HandlerShape.DIRECT

    def test_capability_object(self) -> None:
        assert classify(CapabilityHandler()) is HandlerShape.CAPABILITY

    def test_result_needs_tag(self) -> None:
        assert classify(result_mw) is HandlerShape.CHAIN
        assert classify(result(result_mw)) is HandlerShape.RESULT

    def test_bound_method_is_classified_without_self(self) -> None:
        assert classify(CapabilityHandler().handle) is HandlerShape.CONTINUATION

    def test_callable_instance(self) -> None:
        assert classify(CallableSimple()) is HandlerShape.SIMPLE

    def test_partial(self) -> None:
        def with_prefix(prefix, response, request):
            response.write(prefix)

        assert classify(functools.partial(with_prefix, "x")) is HandlerShape.SIMPLE

    def test_optional_next_prefers_continuation(self) -> None:
        def maybe_next(response, request, next_handler=None):
            pass

        assert classify(maybe_next) is HandlerShape.CONTINUATION

    @pytest.mark.parametrize(
        "value",
        [
            "handler",
            42,
            None,
            3.5,
            ["not", "a", "handler"],
            {"handle": "nope"},
            DirectHandler,
            lambda: None,
            lambda a, b, c, d: None,
            lambda *args: None,
            lambda response, request, *, strict: None,
        ],
    )
    def test_unsupported(self, value: Any) -> None:
        assert classify(value) is None
        assert adapt(value) is None

    def test_tag_checked_against_target(self) -> None:
        assert classify(direct(simple_mw)) is None
        assert classify(capability(DirectHandler())) is None
        assert adapt(Tagged(HandlerShape.CHAIN, "not callable")) is None


# ── Normalization ────────────────────────────────────────────────────────


class TestAdapt:
    def test_chain_passes_through(self) -> None:
        assert adapt(chain_mw) is chain_mw

    def test_chain_behaviour(self, http_request) -> None:
        assert _run(adapt(chain_mw), http_request).body == b"chain>downstream"

    def test_result_behaviour(self, http_request) -> None:
        assert _run(adapt(result(result_mw)), http_request).body == b"result>downstream"

    def test_result_coerces_handler_object(self, http_request) -> None:
        mw = adapt(result(lambda next_handler: DirectHandler()))
        assert _run(mw, http_request).body == b"direct"

    def test_result_rejects_non_handler(self, http_request) -> None:
        mw = adapt(result(lambda next_handler: 7))
        with pytest.raises(TypeError):
            mw(_downstream)

    def test_continuation_behaviour(self, http_request) -> None:
        assert _run(adapt(continuation_mw), http_request).body == b"cont>downstream"

    def test_decorated_continuation_stays_callable(self, http_request) -> None:
        tagged = continuation(continuation_mw)
        response = ResponseWriter()
        tagged(response, http_request, _downstream)
        assert response.body == b"cont>downstream"
        assert _run(adapt(tagged), http_request).body == b"cont>downstream"

    def test_simple_ignores_downstream(self, http_request) -> None:
        response = _run(adapt(simple_mw), http_request)
        assert response.status_code == 204
        assert response.body == b""

    def test_direct_ignores_downstream(self, http_request) -> None:
        assert _run(adapt(DirectHandler()), http_request).body == b"direct"

    def test_capability_behaviour(self, http_request) -> None:
        assert _run(adapt(CapabilityHandler()), http_request).body == b"cap>downstream"


class TestAsHandler:
    def test_function(self) -> None:
        assert as_handler(simple_mw) is simple_mw

    def test_object_with_serve(self) -> None:
        obj = DirectHandler()
        assert as_handler(obj) == obj.serve

    def test_rejects_plain_value(self) -> None:
        with pytest.raises(TypeError):
            as_handler("nope")
