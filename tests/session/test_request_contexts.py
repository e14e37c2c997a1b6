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
"""Tests for the request context adapters."""

from __future__ import annotations

from datetime import UTC, datetime

from starlette.requests import Request
from starlette.responses import PlainTextResponse

from filesession.session.adapters.memory import InMemoryRequestContext
from filesession.session.adapters.starlette import StarletteRequestContext
from filesession.session.cookies import expired_cookie, session_cookie
from filesession.session.ports.outbound import RequestContext


def _request(query: bytes = b"", cookie: bytes | None = None) -> Request:
    headers = [(b"cookie", cookie)] if cookie is not None else []
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": query,
        "headers": headers,
    }
    return Request(scope)


class TestInMemoryRequestContext:
    def test_conforms_to_port(self):
        assert isinstance(InMemoryRequestContext(), RequestContext)

    def test_lookups_and_cookies(self):
        ctx = InMemoryRequestContext(cookies={"SID": "A"}, params={"SID": "B"})
        assert ctx.get_cookie("SID") == "A"
        assert ctx.get_param("SID") == "B"
        assert ctx.get_cookie("missing") is None
        assert ctx.last_cookie is None
        ctx.set_cookie(session_cookie("SID", "C", 0))
        assert ctx.last_cookie is not None and ctx.last_cookie.value == "C"


class TestStarletteRequestContext:
    def test_conforms_to_port(self):
        assert isinstance(StarletteRequestContext(_request()), RequestContext)

    def test_reads_cookie_and_query_param(self):
        ctx = StarletteRequestContext(_request(query=b"SID=PARAM", cookie=b"SID=COOKIE"))
        assert ctx.get_cookie("SID") == "COOKIE"
        assert ctx.get_param("SID") == "PARAM"
        assert ctx.get_cookie("OTHER") is None

    def test_apply_writes_latest_cookie_per_name(self):
        ctx = StarletteRequestContext(_request())
        ctx.set_cookie(session_cookie("SID", "FIRST", 0))
        ctx.set_cookie(session_cookie("SID", "SECOND", 60, now=datetime(2030, 1, 1, tzinfo=UTC)))
        response = PlainTextResponse("ok")

        ctx.apply(response)

        headers = response.headers.getlist("set-cookie")
        assert len(headers) == 1
        assert "SID=SECOND" in headers[0]
        assert "2030" in headers[0]
        assert "HttpOnly" in headers[0]
        assert ctx.pending_cookies == []

    def test_apply_deletion(self):
        ctx = StarletteRequestContext(_request())
        ctx.set_cookie(expired_cookie("SID"))
        response = PlainTextResponse("ok")
        ctx.apply(response)
        assert "Max-Age=0" in response.headers["set-cookie"]
