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
"""Session subsystem configuration properties."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from filesession.core.config import config_properties


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class RetentionProperties(BaseModel):
    """File retention policy (filesession.session.retention.*).

    ``max_age`` is in seconds; ``0`` disables sweeping.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=_kebab)

    max_age: int = Field(default=0, ge=0)


@config_properties(prefix="filesession.session")
class SessionProperties(BaseModel):
    """Configuration for file-backed sessions (filesession.session.*).

    Instances are immutable: a different configuration is a different
    ``SessionProperties`` object, and therefore a different factory.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=_kebab)

    save_path: str = Field(default="sessions/", min_length=1)
    session_key_name: str = Field(default="UfrontSessionID", pattern=r"^[A-Za-z0-9_\-.]+$")
    expiry: int = Field(default=0, ge=0)
    id_length: int = Field(default=40, ge=16, le=128)
    max_allocation_attempts: int = Field(default=16, ge=1)
    retention: RetentionProperties = Field(default_factory=RetentionProperties)

    def resolve_save_path(self, content_root: str | Path | None = None) -> Path:
        """Return the absolute session directory.

        A relative ``save_path`` is joined against *content_root* (the
        current working directory when omitted).
        """
        path = Path(self.save_path).expanduser()
        if not path.is_absolute():
            root = Path(content_root) if content_root is not None else Path.cwd()
            path = root / path
        return path.resolve()
