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
"""SessionCookie — ``Set-Cookie`` instructions queued for the response."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class SessionCookie:
    """A cookie the request pipeline must write to the outgoing response.

    ``expires`` of ``None`` means a browser-session cookie.  A cookie with
    ``max_age == 0`` instructs the client to drop the cookie.
    """

    name: str
    value: str
    expires: datetime | None = None
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = True
    same_site: str = "lax"

    @property
    def is_deletion(self) -> bool:
        return self.max_age == 0


def cookie_expiry(expiry: int, now: datetime | None = None) -> datetime | None:
    """Absolute expiry for a cookie living *expiry* seconds, or ``None`` when 0."""
    if expiry <= 0:
        return None
    now = now or datetime.now(UTC)
    return now + timedelta(seconds=expiry)


def session_cookie(name: str, session_id: str, expiry: int, now: datetime | None = None) -> SessionCookie:
    """Build the cookie carrying *session_id*."""
    return SessionCookie(name=name, value=session_id, expires=cookie_expiry(expiry, now))


def expired_cookie(name: str) -> SessionCookie:
    """Build a cookie that removes *name* from the client."""
    return SessionCookie(name=name, value="", expires=_EPOCH, max_age=0)
