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
"""Tests for SessionCookie construction."""

from datetime import UTC, datetime, timedelta

from filesession.session.cookies import cookie_expiry, expired_cookie, session_cookie


class TestSessionCookie:
    def test_browser_session_cookie_when_expiry_zero(self):
        cookie = session_cookie("UfrontSessionID", "ABC", 0)
        assert cookie.name == "UfrontSessionID"
        assert cookie.value == "ABC"
        assert cookie.expires is None
        assert cookie.max_age is None
        assert cookie.path == "/"
        assert cookie.domain is None
        assert cookie.secure is False
        assert not cookie.is_deletion

    def test_expiry_is_now_plus_seconds(self):
        now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
        cookie = session_cookie("SID", "ABC", 3600, now=now)
        assert cookie.expires == now + timedelta(hours=1)

    def test_cookie_expiry_without_now_is_in_the_future(self):
        expires = cookie_expiry(60)
        assert expires is not None
        assert expires > datetime.now(UTC)

    def test_expired_cookie(self):
        cookie = expired_cookie("SID")
        assert cookie.is_deletion
        assert cookie.value == ""
        assert cookie.expires is not None
        assert cookie.expires < datetime.now(UTC)
