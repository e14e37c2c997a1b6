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
"""SessionFileSweeper — explicit retention policy for session files.

The session store never expires data on its own; applications that want
old files removed schedule :meth:`SessionFileSweeper.sweep` themselves.
"""

from __future__ import annotations

import time
from pathlib import Path

import structlog

from filesession.config.properties.session import SessionProperties
from filesession.session.files import SESSION_FILE_SUFFIX, TEMP_FILE_SUFFIX
from filesession.session.identifiers import is_valid_session_id

logger = structlog.get_logger("filesession.session")


class SessionFileSweeper:
    """Deletes session files not modified for more than ``max_age`` seconds.

    A ``max_age`` of ``0`` disables sweeping.  Leftover temporary files from
    interrupted writes are removed on the same schedule.
    """

    def __init__(self, save_path: str | Path, max_age: int) -> None:
        if max_age < 0:
            raise ValueError(f"max_age must be >= 0, got {max_age}")
        self._save_path = Path(save_path)
        self._max_age = max_age

    @classmethod
    def from_properties(
        cls, properties: SessionProperties, content_root: str | Path | None = None
    ) -> SessionFileSweeper:
        return cls(properties.resolve_save_path(content_root), properties.retention.max_age)

    @property
    def enabled(self) -> bool:
        return self._max_age > 0

    def sweep(self, now: float | None = None) -> list[str]:
        """Remove stale files and return the identifiers of deleted sessions."""
        if not self.enabled or not self._save_path.is_dir():
            return []

        cutoff = (now if now is not None else time.time()) - self._max_age
        removed: list[str] = []

        for path in self._save_path.iterdir():
            is_session = path.suffix == SESSION_FILE_SUFFIX and is_valid_session_id(path.stem)
            is_temp = path.name.startswith(".") and path.suffix == TEMP_FILE_SUFFIX
            if not (is_session or is_temp):
                continue
            try:
                if path.stat().st_mtime >= cutoff:
                    continue
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("session_sweep_failed", path=str(path), error=str(exc))
                continue
            if is_session:
                removed.append(path.stem)

        if removed:
            logger.info("session_files_swept", count=len(removed), save_path=str(self._save_path))
        return removed
