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
"""Starlette request context — reads cookies/query params, writes Set-Cookie."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from filesession.session.cookies import SessionCookie


class StarletteRequestContext:
    """Adapts a Starlette :class:`Request` to the ``RequestContext`` port.

    Cookies queued during the request are held until :meth:`apply` writes
    them to the outgoing response.
    """

    def __init__(self, request: Request) -> None:
        self._request = request
        self._pending: list[SessionCookie] = []

    def get_cookie(self, name: str) -> str | None:
        return self._request.cookies.get(name)

    def get_param(self, name: str) -> str | None:
        return self._request.query_params.get(name)

    def set_cookie(self, cookie: SessionCookie) -> None:
        self._pending.append(cookie)

    @property
    def pending_cookies(self) -> list[SessionCookie]:
        return list(self._pending)

    def apply(self, response: Response) -> None:
        """Write queued cookies to *response*; later cookies win for one name."""
        latest: dict[str, SessionCookie] = {}
        for cookie in self._pending:
            latest[cookie.name] = cookie

        for cookie in latest.values():
            if cookie.is_deletion:
                response.delete_cookie(
                    key=cookie.name,
                    path=cookie.path,
                    domain=cookie.domain,
                    secure=cookie.secure,
                    httponly=cookie.http_only,
                    samesite=cookie.same_site,  # type: ignore[arg-type]
                )
                continue
            response.set_cookie(
                key=cookie.name,
                value=cookie.value,
                max_age=cookie.max_age,
                expires=cookie.expires,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
                samesite=cookie.same_site,  # type: ignore[arg-type]
            )
        self._pending.clear()
