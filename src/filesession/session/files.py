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
"""SessionFileRepository — one file per session under a save directory."""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from filesession.kernel.exceptions import (
    CorruptSessionDataException,
    SessionConfigurationException,
    SessionPersistenceException,
)
from filesession.session.identifiers import validate_session_id
from filesession.session.ports.outbound import SessionCodec

logger = structlog.get_logger("filesession.session")

SESSION_FILE_SUFFIX = ".sess"
TEMP_FILE_SUFFIX = ".tmp"


class SessionFileRepository:
    """Reads, writes and reserves session files.

    Every path is built from a validated identifier, so nothing outside
    ``[a-zA-Z0-9]`` ever reaches the filesystem.  All methods are blocking;
    the session store runs them in the default executor.
    """

    def __init__(self, directory: Path, codec: SessionCodec) -> None:
        self._directory = directory
        self._codec = codec

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, session_id: str) -> Path:
        return self._directory / f"{validate_session_id(session_id)}{SESSION_FILE_SUFFIX}"

    def check_directory(self) -> None:
        """Raise :class:`SessionConfigurationException` unless the directory exists."""
        if not self._directory.is_dir():
            raise SessionConfigurationException(
                f"Session save directory '{self._directory}' does not exist; it must be created and writable",
                context={"save_path": str(self._directory)},
            )

    def exists(self, session_id: str) -> bool:
        return self.path_for(session_id).is_file()

    def claim(self, session_id: str) -> bool:
        """Create an empty placeholder for *session_id* if no file exists.

        Returns ``False`` when the name is already taken.  The create is
        exclusive, so two callers can never both claim the same identifier.
        """
        path = self.path_for(session_id)
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError:
            return False
        except OSError as exc:
            raise SessionPersistenceException(
                f"Cannot reserve session file '{path}': {exc}",
                context={"session_id": session_id, "operation": "claim"},
            ) from exc
        os.close(fd)
        return True

    def allocate(self, generate: Callable[[], str], max_attempts: int) -> str:
        """Generate identifiers until one can be claimed; return it."""
        for attempt in range(1, max_attempts + 1):
            session_id = generate()
            if self.claim(session_id):
                return session_id
            logger.debug("session_id_collision", attempt=attempt)
        raise SessionPersistenceException(
            f"Could not allocate a free session identifier after {max_attempts} attempts",
            context={"operation": "allocate", "attempts": max_attempts},
        )

    def read(self, session_id: str) -> dict[str, Any] | None:
        """Return the decoded mapping, or ``None`` if there is no file.

        Raises :class:`~filesession.kernel.exceptions.CorruptSessionDataException`
        when the file cannot be read or decoded (an unfilled placeholder included).
        """
        try:
            raw = self.path_for(session_id).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CorruptSessionDataException(
                f"Cannot read session file: {exc}",
                context={"session_id": session_id, "operation": "read"},
            ) from exc
        return self._codec.decode(raw)

    def write(self, session_id: str, data: dict[str, Any]) -> None:
        """Atomically replace the session file with the encoding of *data*."""
        path = self.path_for(session_id)
        try:
            raw = self._codec.encode(data)
        except (TypeError, ValueError) as exc:
            raise SessionPersistenceException(
                f"Cannot encode session data: {exc}",
                context={"session_id": session_id, "operation": "write"},
            ) from exc

        try:
            fd, temp_path = tempfile.mkstemp(
                dir=self._directory,
                prefix=f".{session_id}.",
                suffix=TEMP_FILE_SUFFIX,
            )
        except OSError as exc:
            raise SessionPersistenceException(
                f"Cannot write session file '{path}': {exc}",
                context={"session_id": session_id, "operation": "write"},
            ) from exc

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(raw)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(temp_path)
            raise SessionPersistenceException(
                f"Cannot write session file '{path}': {exc}",
                context={"session_id": session_id, "operation": "write"},
            ) from exc

    def move(self, old_id: str, new_id: str) -> None:
        """Atomically rename the file of *old_id* onto *new_id*'s path."""
        try:
            os.replace(self.path_for(old_id), self.path_for(new_id))
        except OSError as exc:
            raise SessionPersistenceException(
                f"Cannot move session file from '{old_id}' to '{new_id}': {exc}",
                context={"session_id": new_id, "previous_id": old_id, "operation": "move"},
            ) from exc

    def delete(self, session_id: str) -> bool:
        """Remove the session file; ``False`` if it was already gone."""
        path = self.path_for(session_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise SessionPersistenceException(
                f"Cannot delete session file '{path}': {exc}",
                context={"session_id": session_id, "operation": "delete"},
            ) from exc
        return True

    def discard(self, session_id: str) -> None:
        """Best-effort delete; failures are logged and ignored."""
        try:
            self.delete(session_id)
        except SessionPersistenceException as exc:
            logger.warning("session_discard_failed", session_id=session_id, error=str(exc))
