"""ASGI entrypoint for the submission handler.

Any path, any method: the handler decides what is acceptable. The
handler is synchronous (validation is CPU-bound, SMTP is blocking), so
each request runs it in a worker thread via ``anyio.to_thread``::

    app = SubmissionApp(SubmissionHandler(form, SmtpTransport(SmtpConfig.from_env()),
                                          recipients_from_env()))
    # uvicorn module:app
"""

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

import anyio.to_thread

from formmail.http.codes import ResponseCode
from formmail.http.handler import SubmissionHandler, SubmissionResponse

# Raw ASGI types
type Scope = MutableMapping[str, Any]
type Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
type Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]

logger = logging.getLogger("formmail.http")

CONTENT_TYPE = b"application/json; charset=utf-8"


class SubmissionApp:
    """ASGI 3 application wrapping one ``SubmissionHandler``.

    Uncaught exceptions from the handler are logged and answered with
    ``internal_error`` (500) instead of crashing the connection.
    """

    __slots__ = ("handler",)

    def __init__(self, handler: SubmissionHandler) -> None:
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        method = scope.get("method", "GET")
        body = await _read_body(receive)

        try:
            response = await anyio.to_thread.run_sync(self.handler.handle, method, body)
        except Exception:
            logger.exception("500 %s %s", method, scope.get("path", "/"))
            response = SubmissionResponse(ResponseCode.INTERNAL_ERROR)

        logger.debug("%d %s %s: %s", response.status, method, scope.get("path", "/"), response.code.value)
        await _send_json(response, send)


async def _read_body(receive: Receive) -> bytes:
    """Collect the request body across ``http.request`` messages."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def _send_json(response: SubmissionResponse, send: Send) -> None:
    body = response.body_bytes
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": [
                (b"content-type", CONTENT_TYPE),
                (b"content-length", str(len(body)).encode("latin-1")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    """Acknowledge startup and shutdown; there is nothing to set up."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return
