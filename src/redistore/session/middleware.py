# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""SessionMiddleware — persists request sessions as the downstream app starts its response."""

from __future__ import annotations

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from redistore.session.registry import get_registry

logger = structlog.get_logger("redistore.session.middleware")


class SessionMiddleware:
    """Pure ASGI middleware that saves every session loaded during a request.

    Handlers load sessions with ``await store.get(request, name)`` and mutate
    them. When the app sends ``http.response.start``, each loaded session is
    saved and its ``Set-Cookie`` header is appended; every message is then
    forwarded unchanged, so streamed bodies are not buffered. Sessions first
    loaded after the response has started are not saved. A failed save is not
    swallowed: the response is never started and the error propagates.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive, send)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                registry = get_registry(request)
                if len(registry):
                    message.setdefault("headers", [])
                    cookies = Response()
                    cookies.raw_headers[:] = []
                    await registry.save(cookies)
                    headers = MutableHeaders(scope=message)
                    for name, value in cookies.raw_headers:
                        headers.append(name.decode("latin-1"), value.decode("latin-1"))
                    logger.debug("sessions_saved", count=len(registry), path=request.url.path)
            await send(message)

        await self.app(scope, receive, send_wrapper)
