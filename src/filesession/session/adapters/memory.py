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
"""In-memory request context for tests, scripts and non-HTTP callers."""

from __future__ import annotations

from collections.abc import Mapping

from filesession.session.cookies import SessionCookie


class InMemoryRequestContext:
    """Request context backed by plain dictionaries.

    Queued cookies are collected in :attr:`cookies_set` in the order they
    were issued.
    """

    def __init__(
        self,
        cookies: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self._cookies = dict(cookies or {})
        self._params = dict(params or {})
        self.cookies_set: list[SessionCookie] = []

    def get_cookie(self, name: str) -> str | None:
        return self._cookies.get(name)

    def get_param(self, name: str) -> str | None:
        return self._params.get(name)

    def set_cookie(self, cookie: SessionCookie) -> None:
        self.cookies_set.append(cookie)

    @property
    def last_cookie(self) -> SessionCookie | None:
        """The most recently queued cookie, or ``None``."""
        return self.cookies_set[-1] if self.cookies_set else None
