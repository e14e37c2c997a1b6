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
"""SessionFilter — creates, exposes and commits a session for every request."""

from __future__ import annotations

import contextlib
from typing import cast

import structlog
from starlette.requests import Request
from starlette.responses import Response

from filesession.kernel.exceptions import SessionPersistenceException
from filesession.session.adapters.starlette import StarletteRequestContext
from filesession.session.factory import SessionFactory
from filesession.session.store import SessionStore
from filesession.web.filters import OncePerRequestFilter
from filesession.web.ports.filter import CallNext

logger = structlog.get_logger("filesession.web")


class SessionFilter(OncePerRequestFilter):
    """Attaches a lazily initialized ``SessionStore`` to ``request.state.session``.

    Handlers call ``await request.state.session.init()`` (or ``set()``)
    before reading.  After the handler returns, the filter commits the
    session and writes queued cookies to the response.  A failed commit is
    logged and re-raised, unless the handler itself raised; then the
    handler's exception propagates.
    """

    def __init__(self, factory: SessionFactory) -> None:
        self._factory = factory

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        context = StarletteRequestContext(request)
        session = self._factory.create(context)
        request.state.session = session

        try:
            response = cast(Response, await call_next(request))
        except Exception:
            # a failed commit is only logged; the handler's exception propagates
            with contextlib.suppress(SessionPersistenceException):
                await self._commit(session, request)
            raise

        await self._commit(session, request)
        context.apply(response)
        return response

    @staticmethod
    async def _commit(session: SessionStore, request: Request) -> None:
        try:
            await session.commit()
        except SessionPersistenceException as exc:
            logger.error(
                "session_commit_error",
                path=request.url.path,
                error=str(exc),
                failures=exc.context.get("failures", []),
            )
            raise
