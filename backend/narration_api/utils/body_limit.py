# narration_api/utils/body_limit.py
from __future__ import annotations

import logging
from typing import List

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..config import Settings

LOGGER = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``settings.max_body_bytes`` with 413.

    A declared ``Content-Length`` is checked up front. Bodies without one
    (chunked uploads) are buffered while counting and rejected as soon as the
    running total passes the limit, so at most one extra chunk is held.
    """

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        self.app = app
        self.settings = settings

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.settings.max_body_bytes
        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                await self._reject(scope, receive, send, 400, "Invalid Content-Length header")
                return
            if size > limit:
                LOGGER.warning("[http] rejected body of %d bytes (limit %d)", size, limit)
                await self._reject(scope, receive, send, 413, "Request body too large")
                return
            await self.app(scope, receive, send)
            return

        buffered: List[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > limit:
                LOGGER.warning("[http] rejected streamed body over %d bytes", limit)
                await self._reject(scope, receive, send, 413, "Request body too large")
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, status: int, message: str) -> None:
        response = JSONResponse(status_code=status, content={"error": message})
        await response(scope, receive, send)


__all__ = ["BodySizeLimitMiddleware"]
