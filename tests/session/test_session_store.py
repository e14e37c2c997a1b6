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
"""Tests for SessionStore — identifier resolution, init and accessors."""

from pathlib import Path
from typing import Any

import pytest

from filesession.config.properties import SessionProperties
from filesession.kernel.exceptions import (
    InvalidSessionIdException,
    SessionConfigurationException,
    SessionNotStartedException,
    SessionPersistenceException,
)
from filesession.session.adapters.json_codec import JsonSessionCodec
from filesession.session.adapters.memory import InMemoryRequestContext
from filesession.session.factory import SessionFactory

COOKIE = "UfrontSessionID"


def _factory(path: Path, **overrides: Any) -> SessionFactory:
    return SessionFactory(SessionProperties(save_path=str(path), **overrides))


def _read(factory: SessionFactory, session_id: str) -> dict[str, Any]:
    return JsonSessionCodec().decode((factory.save_path / f"{session_id}.sess").read_bytes())


class TestIdentifierResolution:
    def test_cookie_first(self, tmp_path: Path):
        ctx = InMemoryRequestContext(cookies={COOKIE: "FROMCOOKIE"}, params={COOKIE: "FROMPARAM"})
        store = _factory(tmp_path).create(ctx)
        assert store.id == "FROMCOOKIE"
        assert store.is_active()

    def test_param_fallback(self, tmp_path: Path):
        ctx = InMemoryRequestContext(params={COOKIE: "FROMPARAM"})
        assert _factory(tmp_path).create(ctx).id == "FROMPARAM"

    def test_no_identifier(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext())
        assert store.id is None
        assert not store.is_active()

    def test_resolution_is_cached(self, tmp_path: Path):
        ctx = InMemoryRequestContext(cookies={COOKIE: "FIRST"})
        store = _factory(tmp_path).create(ctx)
        assert store.id == "FIRST"
        ctx._cookies[COOKIE] = "SECOND"
        assert store.id == "FIRST"

    def test_custom_key_name(self, tmp_path: Path):
        ctx = InMemoryRequestContext(cookies={"SID": "ABC", COOKIE: "OTHER"})
        assert _factory(tmp_path, session_key_name="SID").create(ctx).id == "ABC"


class TestNewSession:
    @pytest.mark.asyncio
    async def test_new_session(self, tmp_path: Path):
        factory = _factory(tmp_path)
        ctx = InMemoryRequestContext()
        store = factory.create(ctx)

        await store.init()

        assert store.started
        assert store.is_new
        assert len(ctx.cookies_set) == 1
        cookie = ctx.cookies_set[0]
        assert cookie.name == COOKIE
        assert len(cookie.value) == 40
        assert cookie.value.isascii() and cookie.value.isalnum()
        assert cookie.expires is None
        assert cookie.path == "/"
        assert cookie.domain is None
        assert cookie.secure is False
        assert store.id == cookie.value
        assert _read(factory, cookie.value) == {}
        assert not store.commit_pending

    @pytest.mark.asyncio
    async def test_cookie_expiry_from_configuration(self, tmp_path: Path):
        ctx = InMemoryRequestContext()
        store = _factory(tmp_path, expiry=3600).create(ctx)
        await store.init()
        assert ctx.cookies_set[0].expires is not None

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path: Path):
        store = _factory(tmp_path / "missing").create(InMemoryRequestContext())
        with pytest.raises(SessionConfigurationException):
            await store.init()
        assert not store.started

    @pytest.mark.asyncio
    async def test_generated_ids_do_not_reuse_existing_files(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        factory = _factory(tmp_path)
        existing = [f"{i:040d}" for i in range(9)]
        for name in existing:
            (factory.save_path / f"{name}.sess").write_bytes(b'{"owner": "someone"}')
        candidates = iter([*existing, "N" * 40])
        monkeypatch.setattr("filesession.session.store.generate_session_id", lambda length: next(candidates))

        store = factory.create(InMemoryRequestContext())
        await store.init()

        assert store.id == "N" * 40
        for name in existing:
            assert _read(factory, name) == {"owner": "someone"}

    @pytest.mark.asyncio
    async def test_many_sessions_get_distinct_files(self, tmp_path: Path):
        factory = _factory(tmp_path)
        ids = set()
        for _ in range(20):
            store = factory.create(InMemoryRequestContext())
            await store.init()
            ids.add(store.id)
        assert len(ids) == 20
        assert len(list(factory.save_path.glob("*.sess"))) == 20

    @pytest.mark.asyncio
    async def test_allocation_exhausted(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        factory = _factory(tmp_path, max_allocation_attempts=2)
        (factory.save_path / f"{'X' * 40}.sess").write_bytes(b"{}")
        monkeypatch.setattr("filesession.session.store.generate_session_id", lambda length: "X" * 40)
        with pytest.raises(SessionPersistenceException):
            await factory.create(InMemoryRequestContext()).init()


class TestReturningSession:
    @pytest.mark.asyncio
    async def test_returning_session(self, tmp_path: Path):
        factory = _factory(tmp_path)
        (factory.save_path / "ABC123.sess").write_bytes(b'{"name":"Jason"}')
        ctx = InMemoryRequestContext(cookies={COOKIE: "ABC123"})
        store = factory.create(ctx)

        await store.init()

        assert store.get("name") == "Jason"
        assert store.id == "ABC123"
        assert not store.is_new
        assert ctx.cookies_set == []

    @pytest.mark.asyncio
    async def test_returning_via_param(self, tmp_path: Path):
        factory = _factory(tmp_path)
        (factory.save_path / "ABC123.sess").write_bytes(b'{"name":"Jason"}')
        store = factory.create(InMemoryRequestContext(params={COOKIE: "ABC123"}))
        await store.init()
        assert store.get("name") == "Jason"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"count": 1},
            {"name": "Jason", "roles": ["admin", "dev"], "profile": {"age": 30, "active": True}},
            {"point": (1, 2), "seen": {"a", "b"}, "token": b"\x01\x02", "none": None},
        ],
    )
    async def test_round_trip(self, tmp_path: Path, data: dict[str, Any]):
        factory = _factory(tmp_path)
        writer = factory.create(InMemoryRequestContext())
        for key, value in data.items():
            await writer.set(key, value)
        await writer.init()
        await writer.commit()

        reader = factory.create(InMemoryRequestContext(cookies={COOKIE: writer.id}))
        await reader.init()
        assert {key: reader.get(key) for key in reader.keys()} == data


class TestFreshSessionFallback:
    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path: Path):
        factory = _factory(tmp_path)
        (factory.save_path / "ZZZ.sess").write_bytes(b"\x00\x01garbage{{")
        ctx = InMemoryRequestContext(cookies={COOKIE: "ZZZ"})
        store = factory.create(ctx)

        await store.init()

        assert store.started
        assert store.keys() == []
        assert store.id != "ZZZ"
        assert not (factory.save_path / "ZZZ.sess").exists()
        assert ctx.cookies_set[0].value == store.id

    @pytest.mark.asyncio
    async def test_nonexistent_identifier(self, tmp_path: Path):
        factory = _factory(tmp_path)
        store = factory.create(InMemoryRequestContext(cookies={COOKIE: "GONE"}))
        await store.init()
        assert store.started
        assert store.keys() == []
        assert store.id not in (None, "GONE")

    @pytest.mark.asyncio
    async def test_unfilled_placeholder(self, tmp_path: Path):
        factory = _factory(tmp_path)
        (factory.save_path / "EMPTY.sess").write_bytes(b"")
        store = factory.create(InMemoryRequestContext(cookies={COOKIE: "EMPTY"}))
        await store.init()
        assert store.id != "EMPTY"
        assert store.keys() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        [
            b'{"x": {"__type__": "bytes", "value": 1}}',
            b'{"x": {"__type__": "bytes", "value": "@@@"}}',
            b"[" * 200000,
            b"[1, 2]",
        ],
        ids=["bytes-envelope-int", "bytes-envelope-base64", "deep-nesting", "not-an-object"],
    )
    async def test_undecodable_payload(self, tmp_path: Path, raw: bytes):
        factory = _factory(tmp_path)
        (factory.save_path / "BAD.sess").write_bytes(raw)
        ctx = InMemoryRequestContext(cookies={COOKIE: "BAD"})
        store = factory.create(ctx)

        await store.init()

        assert store.started
        assert store.keys() == []
        assert store.id not in (None, "BAD")
        assert not (factory.save_path / "BAD.sess").exists()
        assert ctx.last_cookie is not None and ctx.last_cookie.value == store.id

    @pytest.mark.asyncio
    async def test_unreadable_file(self, tmp_path: Path):
        factory = _factory(tmp_path)
        (factory.save_path / "DIR.sess").mkdir()
        ctx = InMemoryRequestContext(cookies={COOKIE: "DIR"})
        store = factory.create(ctx)

        await store.init()

        assert store.started
        assert store.keys() == []
        assert store.id not in (None, "DIR")
        assert _read(factory, store.id) == {}
        # a directory cannot be unlinked, so it is left behind
        assert (factory.save_path / "DIR.sess").is_dir()


class TestIdentifierValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", ["cookies", "params"])
    async def test_path_traversal_rejected(self, tmp_path: Path, source: str):
        save_dir = tmp_path / "sessions"
        save_dir.mkdir()
        (tmp_path / "secret.sess").write_bytes(b'{"secret": 1}')
        ctx = InMemoryRequestContext(**{source: {COOKIE: "../secret"}})
        store = _factory(save_dir).create(ctx)

        with pytest.raises(InvalidSessionIdException):
            await store.init()

        assert not store.started
        assert list(save_dir.iterdir()) == []
        assert (tmp_path / "secret.sess").exists()


class TestIdempotentInit:
    @pytest.mark.asyncio
    async def test_second_init_is_noop(self, tmp_path: Path):
        factory = _factory(tmp_path)
        ctx = InMemoryRequestContext()
        store = factory.create(ctx)
        await store.init()
        await store.set("count", 1)
        await store.commit()
        session_id = store.id
        before = (factory.save_path / f"{session_id}.sess").read_bytes()

        await store.init()

        assert store.id == session_id
        assert store.get("count") == 1
        assert len(ctx.cookies_set) == 1
        assert (factory.save_path / f"{session_id}.sess").read_bytes() == before
        assert len(list(factory.save_path.iterdir())) == 1


class TestAccessors:
    @pytest.mark.asyncio
    async def test_get_before_init_is_programming_error(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext())
        with pytest.raises(SessionNotStartedException):
            store.get("x")
        with pytest.raises(SessionNotStartedException):
            store.remove("x")
        with pytest.raises(SessionNotStartedException):
            store.keys()

    def test_exists_without_identifier_is_false(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext())
        assert store.exists("x") is False
        assert "x" not in store

    def test_exists_with_identifier_requires_init(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext(cookies={COOKIE: "ABC"}))
        with pytest.raises(SessionNotStartedException):
            store.exists("x")

    @pytest.mark.asyncio
    async def test_set_initializes(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext())
        await store.set("count", 1)
        assert store.started
        assert store.commit_pending
        assert store.get("count") == 1
        assert store.exists("count")
        assert "count" in store

    @pytest.mark.asyncio
    async def test_get_default(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext())
        await store.init()
        assert store.get("missing") is None
        assert store.get("missing", 0) == 0

    @pytest.mark.asyncio
    async def test_remove(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext())
        await store.set("a", 1)
        await store.commit()
        store.remove("a")
        store.remove("never-there")
        assert store.commit_pending
        assert not store.exists("a")

    @pytest.mark.asyncio
    async def test_clear(self, tmp_path: Path):
        factory = _factory(tmp_path)
        store = factory.create(InMemoryRequestContext())
        await store.set("a", 1)
        await store.set("b", 2)
        await store.commit()

        store.clear()

        assert store.commit_pending
        assert store.keys() == []
        await store.commit()
        assert _read(factory, store.id) == {}

    def test_clear_before_init_is_noop(self, tmp_path: Path):
        store = _factory(tmp_path).create(InMemoryRequestContext(cookies={COOKIE: "ABC"}))
        store.clear()
        assert not store.commit_pending
        assert not store.started
