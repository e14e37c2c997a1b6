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
"""WebFilterChainMiddleware — pure ASGI middleware running the WebFilter chain."""

from __future__ import annotations

import functools
from collections.abc import Sequence
from typing import cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from filesession.web.ports.filter import CallNext, WebFilter


class _ResponseRecorder:
    """ASGI ``send`` that collects the downstream response instead of sending it."""

    def __init__(self) -> None:
        self.status_code = 500
        self.raw_headers: list[tuple[bytes, bytes]] = []
        self.body = bytearray()

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.raw_headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")

    def to_response(self) -> Response:
        response = Response(content=bytes(self.body), status_code=self.status_code)
        response.raw_headers[:] = self.raw_headers
        return response


class WebFilterChainMiddleware:
    """Runs *filters* in order around the downstream ASGI app.

    The downstream response is buffered so filters can add headers (the
    session cookie among them) after the handler has returned.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = tuple(filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def _downstream(request: Request) -> Response:
            recorder = _ResponseRecorder()
            await self.app(scope, receive, recorder)
            return recorder.to_response()

        chain = functools.reduce(_wrap, reversed(self._filters), cast(CallNext, _downstream))
        response = cast(Response, await chain(Request(scope, receive, send)))
        await response(scope, receive, send)


def _wrap(next_call: CallNext, web_filter: WebFilter) -> CallNext:
    async def _inner(request: Request) -> Response:
        if web_filter.should_not_filter(request):
            return cast(Response, await next_call(request))
        return cast(Response, await web_filter.do_filter(request, next_call))

    return _inner
