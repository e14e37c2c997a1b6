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
"""Session identifier generation and validation."""

from __future__ import annotations

import re
import secrets
import string

from filesession.kernel.exceptions import InvalidSessionIdException

ID_ALPHABET = string.ascii_letters + string.digits
DEFAULT_ID_LENGTH = 40

_VALID_ID_RE = re.compile(r"[a-zA-Z0-9]+")


def generate_session_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """Return a random alphanumeric identifier of *length* characters."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def is_valid_session_id(value: str | None) -> bool:
    """``True`` if *value* is a non-empty, purely alphanumeric string."""
    return value is not None and _VALID_ID_RE.fullmatch(value) is not None


def validate_session_id(value: str) -> str:
    """Return *value* unchanged or raise :class:`InvalidSessionIdException`.

    Identifiers arriving from cookies or request parameters are untrusted and
    become part of a file name, so anything outside ``[a-zA-Z0-9]`` is refused.
    """
    if not is_valid_session_id(value):
        raise InvalidSessionIdException(
            "Session identifier contains characters outside [a-zA-Z0-9]",
            context={"session_id": value[:64]},
        )
    return value
