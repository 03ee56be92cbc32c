"""Starlette binding for a :class:`~phaselayer.layer.Layer`.

The layer itself is synchronous; :class:`LayerApp` runs it in Starlette's
threadpool for every HTTP request and sends the buffered response.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.routing import Mount
from starlette.types import Receive, Scope, Send

from phaselayer import context
from phaselayer.constants import BODY_CONTEXT_KEY
from phaselayer.http import Handler, ResponseWriter
from phaselayer.layer import Layer

logger = logging.getLogger(__name__)


class LayerApp:
    """ASGI application running one phase of *layer* per request."""

    def __init__(
        self,
        layer: Layer,
        phase: Optional[str] = None,
        terminal: Optional[Handler] = None,
    ) -> None:
        self.layer = layer
        self.phase = phase or layer.request_phase
        self.terminal = terminal

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            raise RuntimeError(f"LayerApp only handles HTTP scopes, got '{scope['type']}'.")

        request = Request(scope, receive)
        context.set(request, BODY_CONTEXT_KEY, await request.body())

        writer = ResponseWriter()
        await run_in_threadpool(self.layer.run, self.phase, writer, request, self.terminal)

        response = writer.to_response()
        logger.debug(
            "%s %s → %d (%d bytes)",
            request.method,
            request.url.path,
            response.status_code,
            len(writer.body),
        )
        await response(scope, receive, send)


def create_app(layer: Layer, phase: Optional[str] = None, **starlette_kwargs: Any) -> Starlette:
    """Create a Starlette application serving every path through *layer*."""
    application = Starlette(
        routes=[Mount("/", app=LayerApp(layer, phase=phase))],
        **starlette_kwargs,
    )
    logger.info(
        "Starlette app created for phase '%s'.",
        phase or layer.request_phase,
    )
    return application
