"""HTTP primitives passed through every handler.

Handlers write into a :class:`ResponseWriter`, a buffered response that
the transport turns into a Starlette response once the chain returns.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol, Union

from starlette.responses import Response

logger = logging.getLogger(__name__)


class Handler(Protocol):
    """Callable that handles one request by writing into the response."""

    def __call__(self, response: ResponseWriter, request: Any) -> None: ...


#: Canonical form every accepted handler shape is normalized into.
Middleware = Callable[[Handler], Handler]


class ResponseWriter:
    """Buffered HTTP response.

    The status code is fixed by the first call to :meth:`write_header`
    (or implicitly to 200 by the first :meth:`write`); later calls are
    ignored.
    """

    def __init__(self) -> None:
        self.status_code: Optional[int] = None
        self.headers: Dict[str, str] = {}
        self._body = bytearray()

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    @property
    def written(self) -> bool:
        """True once a status code has been committed."""
        return self.status_code is not None

    def write_header(self, status_code: int) -> None:
        if self.status_code is not None:
            logger.debug(
                "Superfluous write_header(%d) ignored; status already %d.",
                status_code,
                self.status_code,
            )
            return
        self.status_code = status_code

    def write(self, data: Union[bytes, str]) -> int:
        if self.status_code is None:
            self.status_code = 200
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._body.extend(data)
        return len(data)

    def to_response(self) -> Response:
        """Convert the buffered state into a Starlette response."""
        return Response(
            content=self.body,
            status_code=self.status_code or 200,
            headers=self.headers,
        )


def text_handler(status_code: int, body: str, content_type: str) -> Handler:
    """Build a terminal handler replying with a fixed plain response."""

    def _reply(response: ResponseWriter, request: Any) -> None:
        response.headers.setdefault("content-type", content_type)
        response.write_header(status_code)
        response.write(body)

    return _reply
