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
"""Session ports — the collaborators the session engine depends on.

Request/response handling and payload encoding live outside the engine;
adapters for Starlette, plain in-memory contexts and JSON are provided in
``filesession.session.adapters``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from filesession.session.cookies import SessionCookie


@runtime_checkable
class SessionCodec(Protocol):
    """Reversible, self-describing encoding of a session mapping.

    ``decode`` must raise :class:`~filesession.kernel.exceptions.CorruptSessionDataException`
    for payloads it cannot read.  ``encode`` raises ``TypeError`` or
    ``ValueError`` for values it cannot represent.
    """

    def encode(self, data: dict[str, Any]) -> bytes: ...

    def decode(self, raw: bytes) -> dict[str, Any]: ...


@runtime_checkable
class RequestContext(Protocol):
    """Per-request view of cookies, parameters and outgoing cookies."""

    def get_cookie(self, name: str) -> str | None: ...

    def get_param(self, name: str) -> str | None: ...

    def set_cookie(self, cookie: SessionCookie) -> None: ...
