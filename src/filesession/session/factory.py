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
"""SessionFactory — builds one SessionStore per request."""

from __future__ import annotations

from pathlib import Path

from filesession.config.properties.session import SessionProperties
from filesession.core.config import Config
from filesession.session.adapters.json_codec import JsonSessionCodec
from filesession.session.files import SessionFileRepository
from filesession.session.ports.outbound import RequestContext, SessionCodec
from filesession.session.store import SessionStore


class SessionFactory:
    """Immutable builder for :class:`SessionStore` instances.

    Construct one factory per configuration at application startup and hand
    it to the request pipeline.  The save path is resolved to an absolute
    directory here, once; it is checked for existence on each ``init()``.
    """

    def __init__(
        self,
        properties: SessionProperties | None = None,
        *,
        codec: SessionCodec | None = None,
        content_root: str | Path | None = None,
    ) -> None:
        self._properties = properties or SessionProperties()
        self._codec: SessionCodec = codec or JsonSessionCodec()
        self._save_path = self._properties.resolve_save_path(content_root)
        self._files = SessionFileRepository(self._save_path, self._codec)

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        codec: SessionCodec | None = None,
        content_root: str | Path | None = None,
    ) -> SessionFactory:
        """Bind ``filesession.session.*`` from *config* and build a factory."""
        return cls(config.bind(SessionProperties), codec=codec, content_root=content_root)

    @property
    def properties(self) -> SessionProperties:
        return self._properties

    @property
    def save_path(self) -> Path:
        return self._save_path

    @property
    def session_key_name(self) -> str:
        return self._properties.session_key_name

    @property
    def expiry(self) -> int:
        return self._properties.expiry

    @property
    def files(self) -> SessionFileRepository:
        return self._files

    def create(self, context: RequestContext) -> SessionStore:
        """Return a new, uninitialized store bound to *context*."""
        return SessionStore(
            context,
            self._files,
            session_key_name=self._properties.session_key_name,
            expiry=self._properties.expiry,
            id_length=self._properties.id_length,
            max_allocation_attempts=self._properties.max_allocation_attempts,
        )
