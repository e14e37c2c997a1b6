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
"""SessionStore — per-request, file-backed session state."""

from __future__ import annotations

import asyncio
import dataclasses
import functools
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from filesession.kernel.exceptions import (
    CorruptSessionDataException,
    SessionNotStartedException,
    SessionPersistenceException,
)
from filesession.session.actions import CloseSession, CommitAction, RegenerateId, UpdateExpiry, WriteData
from filesession.session.cookies import expired_cookie, session_cookie
from filesession.session.files import SessionFileRepository
from filesession.session.identifiers import DEFAULT_ID_LENGTH, generate_session_id, validate_session_id
from filesession.session.ports.outbound import RequestContext

logger = structlog.get_logger("filesession.session")

T = TypeVar("T")


class SessionStore:
    """Session state for a single request.

    The store starts uninitialized.  ``init()`` restores the session named
    by the request's cookie (or parameter) or allocates a new one; accessors
    then work on an in-memory mapping and mark the store dirty; ``commit()``
    flushes everything at the end of the request.

    A store belongs to one request and must not be shared between tasks.
    Concurrent requests carrying the same identifier each load their own
    copy and the last commit wins.
    """

    def __init__(
        self,
        context: RequestContext,
        files: SessionFileRepository,
        *,
        session_key_name: str,
        expiry: int = 0,
        id_length: int = DEFAULT_ID_LENGTH,
        max_allocation_attempts: int = 16,
    ) -> None:
        self._context = context
        self._files = files
        self._session_key_name = session_key_name
        self._expiry = expiry
        self._id_length = id_length
        self._max_allocation_attempts = max_allocation_attempts

        self._id: str | None = None
        self._id_resolved = False
        self._data: dict[str, Any] | None = None
        self._is_new = False

        self._started = False
        self._commit_pending = False
        self._close_pending = False
        self._regenerate_pending = False
        self._expiry_change_pending = False
        self._previous_id: str | None = None
        self._closing_id: str | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def id(self) -> str | None:
        """The session identifier: cached, else the cookie, else the request parameter."""
        if not self._id_resolved:
            name = self._session_key_name
            self._id = self._context.get_cookie(name) or self._context.get_param(name) or None
            self._id_resolved = True
        return self._id

    def is_active(self) -> bool:
        return self.id is not None

    @property
    def started(self) -> bool:
        return self._started

    @property
    def is_new(self) -> bool:
        """``True`` if the session was allocated during this request."""
        return self._is_new

    @property
    def expiry(self) -> int:
        return self._expiry

    @property
    def previous_id(self) -> str | None:
        return self._previous_id

    @property
    def commit_pending(self) -> bool:
        return self._commit_pending

    @property
    def close_pending(self) -> bool:
        return self._close_pending

    @property
    def regenerate_pending(self) -> bool:
        return self._regenerate_pending

    @property
    def expiry_change_pending(self) -> bool:
        return self._expiry_change_pending

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """Restore or allocate the session.  Calling it again is a no-op.

        Raises:
            SessionConfigurationException: the save directory does not exist.
            InvalidSessionIdException: the client sent a non-alphanumeric identifier.
            SessionPersistenceException: a new session file could not be written.
        """
        if self._started:
            return

        await self._run(self._files.check_directory)

        data: dict[str, Any] | None = None
        candidate = self.id
        if candidate is not None:
            validate_session_id(candidate)
            try:
                data = await self._run(self._files.read, candidate)
            except CorruptSessionDataException as exc:
                logger.warning("session_discarded", session_id=candidate, reason="corrupt", error=str(exc))
                await self._run(self._files.discard, candidate)
            else:
                if data is None:
                    logger.info("session_discarded", session_id=candidate, reason="missing")

        if data is not None:
            self._data = data
            logger.debug("session_restored", session_id=candidate, keys=len(data))
        else:
            await self._allocate()

        self._started = True

    async def _allocate(self) -> None:
        session_id = await self._run(self._files.allocate, self._generate_id, self._max_allocation_attempts)
        self._id = session_id
        self._id_resolved = True
        self._data = {}
        self._is_new = True
        self._context.set_cookie(session_cookie(self._session_key_name, session_id, self._expiry))
        logger.info("session_created", session_id=session_id)

        # replace the empty placeholder with a real encoding straight away
        self._commit_pending = True
        await self._run(self._files.write, session_id, {})
        self._commit_pending = False

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default*."""
        return self._require_data().get(key, default)

    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, initializing the session first if needed."""
        if not self._started:
            await self.init()
        self._require_data()[key] = value
        self._commit_pending = True

    def exists(self, key: str) -> bool:
        if not self.is_active():
            return False
        return key in self._require_data()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.exists(key)

    def remove(self, key: str) -> None:
        data = self._require_data()
        data.pop(key, None)
        self._commit_pending = True

    def clear(self) -> None:
        """Drop every key.  Does nothing before init or after close."""
        if self._data is not None and self.is_active():
            self._data = {}
            self._commit_pending = True

    def keys(self) -> list[str]:
        return list(self._require_data())

    def _require_data(self) -> dict[str, Any]:
        if not self._started:
            raise SessionNotStartedException(
                "Session accessed before init(); await session.init() first",
                context={"session_key_name": self._session_key_name},
            )
        if self._data is None:
            raise SessionNotStartedException(
                "Session accessed after close()",
                context={"session_key_name": self._session_key_name},
            )
        return self._data

    # ------------------------------------------------------------------
    # Regeneration, expiry and close
    # ------------------------------------------------------------------

    def regenerate_id(self) -> str:
        """Assign a fresh identifier; the file is moved at commit time.

        Calling it twice before a commit keeps the original identifier as
        ``previous_id`` and discards the first new one.
        """
        self._require_data()
        if self._previous_id is None:
            self._previous_id = self._id
        self._id = self._generate_id()
        self._regenerate_pending = True
        return self._id

    def set_expiry(self, seconds: int) -> None:
        """Change the cookie lifetime; ``0`` means a browser-session cookie."""
        if seconds < 0:
            raise ValueError(f"Session expiry must be >= 0, got {seconds}")
        self._require_data()
        self._expiry = seconds
        self._expiry_change_pending = True

    async def close(self) -> None:
        """Discard the session; its file and cookie are removed at commit time."""
        if not self._started:
            await self.init()

        if self._regenerate_pending:
            # the file has not moved yet, so delete it where it is
            self._closing_id = self._previous_id
            self._regenerate_pending = False
            self._previous_id = None
        else:
            self._closing_id = self._id

        self._data = None
        self._id = None
        self._close_pending = True
        self._commit_pending = True

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def commit(self) -> bool:
        """Apply every pending change.  Returns ``True`` if anything was done.

        Every queued action runs even when an earlier one fails.

        Raises:
            SessionPersistenceException: one or more actions failed; the
                ``failures`` entry of its context lists each of them.
        """
        actions = self._drain_actions()
        if not actions:
            return False

        renamed: dict[str, str] = {}
        failures: list[tuple[CommitAction, SessionPersistenceException]] = []
        for action in actions:
            if action.session_id in renamed:
                action = dataclasses.replace(action, session_id=renamed[action.session_id])
            try:
                await self._apply(action, renamed)
            except SessionPersistenceException as exc:
                failures.append((action, exc))
                logger.error(
                    "session_commit_failed",
                    action=type(action).__name__,
                    session_id=action.session_id,
                    error=str(exc),
                )

        if failures:
            raise SessionPersistenceException(
                "Session commit failed: " + "; ".join(str(exc) for _, exc in failures),
                context={
                    "failures": [
                        {"action": type(action).__name__, "session_id": action.session_id, "error": str(exc)}
                        for action, exc in failures
                    ]
                },
            ) from failures[0][1]
        return True

    def _drain_actions(self) -> list[CommitAction]:
        actions: list[CommitAction] = []
        if self._regenerate_pending and self._previous_id is not None and self._id is not None:
            actions.append(RegenerateId(session_id=self._id, previous_id=self._previous_id))
        if self._commit_pending and self._data is not None and self._id is not None:
            actions.append(WriteData(session_id=self._id, data=dict(self._data)))
        if self._expiry_change_pending and self._id is not None:
            actions.append(UpdateExpiry(session_id=self._id, expiry=self._expiry))
        if self._close_pending and self._closing_id is not None:
            actions.append(CloseSession(session_id=self._closing_id))

        self._commit_pending = False
        self._close_pending = False
        self._regenerate_pending = False
        self._expiry_change_pending = False
        self._previous_id = None
        self._closing_id = None
        return actions

    async def _apply(self, action: CommitAction, renamed: dict[str, str]) -> None:
        if isinstance(action, RegenerateId):
            await self._apply_regenerate(action, renamed)
        elif isinstance(action, WriteData):
            await self._run(self._files.write, action.session_id, action.data)
            logger.debug("session_committed", session_id=action.session_id, keys=len(action.data))
        elif isinstance(action, UpdateExpiry):
            self._context.set_cookie(session_cookie(self._session_key_name, action.session_id, action.expiry))
            logger.debug("session_expiry_updated", session_id=action.session_id, expiry=action.expiry)
        elif isinstance(action, CloseSession):
            self._context.set_cookie(expired_cookie(self._session_key_name))
            await self._run(self._files.delete, action.session_id)
            logger.info("session_closed", session_id=action.session_id)

    async def _apply_regenerate(self, action: RegenerateId, renamed: dict[str, str]) -> None:
        claimed: str | None = None
        try:
            if await self._run(self._files.claim, action.session_id):
                claimed = action.session_id
            else:
                claimed = await self._run(self._files.allocate, self._generate_id, self._max_allocation_attempts)
            await self._run(self._files.move, action.previous_id, claimed)
        except SessionPersistenceException:
            # the remaining actions and the cookie stay on the old identifier
            if claimed is not None:
                await self._run(self._files.discard, claimed)
            renamed[action.session_id] = action.previous_id
            self._id = action.previous_id
            raise

        if claimed != action.session_id:
            renamed[action.session_id] = claimed
            self._id = claimed
        self._context.set_cookie(session_cookie(self._session_key_name, claimed, self._expiry))
        logger.info("session_regenerated", session_id=claimed, previous_id=action.previous_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _generate_id(self) -> str:
        return generate_session_id(self._id_length)

    @staticmethod
    async def _run(func: Callable[..., T], *args: Any) -> T:
        """Run blocking file I/O in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))
