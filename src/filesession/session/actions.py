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
"""Commit actions — the side effects a session queues for ``commit()``.

``SessionStore.commit()`` drains them in a fixed order: regenerate, write
data, expiry update, close.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RegenerateId:
    """Move the file of ``previous_id`` to ``session_id`` and re-issue the cookie."""

    session_id: str
    previous_id: str


@dataclass(frozen=True)
class WriteData:
    """Replace the session file with a snapshot of the in-memory mapping."""

    session_id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateExpiry:
    """Re-issue the session cookie with a new expiry; the file is untouched."""

    session_id: str
    expiry: int


@dataclass(frozen=True)
class CloseSession:
    """Delete the session file and expire the client's cookie."""

    session_id: str


CommitAction = RegenerateId | WriteData | UpdateExpiry | CloseSession
