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
"""filesession — file-backed, per-request HTTP session state.

Typical wiring at application startup::

    config = Config.from_sources(".")
    factory = SessionFactory.from_config(config, content_root=".")
    app = Starlette(
        routes=routes,
        middleware=[Middleware(WebFilterChainMiddleware, filters=[SessionFilter(factory)])],
    )
"""

from filesession.config.properties.session import SessionProperties
from filesession.core.config import Config
from filesession.session import (
    RequestContext,
    SessionCodec,
    SessionCookie,
    SessionFactory,
    SessionFileSweeper,
    SessionFilter,
    SessionStore,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "RequestContext",
    "SessionCodec",
    "SessionCookie",
    "SessionFactory",
    "SessionFileSweeper",
    "SessionFilter",
    "SessionProperties",
    "SessionStore",
    "__version__",
]
