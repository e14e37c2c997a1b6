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
"""filesession Session — file-backed, per-request session state.

Import concrete adapters from the adapter package::

    from filesession.session.adapters.json_codec import JsonSessionCodec
    from filesession.session.adapters.starlette import StarletteRequestContext
"""

from filesession.session.cookies import SessionCookie
from filesession.session.factory import SessionFactory
from filesession.session.filter import SessionFilter
from filesession.session.ports.outbound import RequestContext, SessionCodec
from filesession.session.store import SessionStore
from filesession.session.sweeper import SessionFileSweeper

__all__ = [
    "RequestContext",
    "SessionCodec",
    "SessionCookie",
    "SessionFactory",
    "SessionFileSweeper",
    "SessionFilter",
    "SessionStore",
]
