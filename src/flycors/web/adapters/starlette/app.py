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
"""Starlette application factory with the CORS filter chain installed."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from flycors.core.config import Config
from flycors.cors.policy import CorsPolicy
from flycors.logging.structlog_adapter import StructlogAdapter
from flycors.web.adapters.starlette.cors_filter import CorsFilter
from flycors.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from flycors.web.ports.filter import WebFilter


def create_app(
    routes: Sequence[BaseRoute] | None = None,
    *,
    cors: CorsPolicy | CorsFilter | Mapping[str, Any] | None = None,
    config: Config | None = None,
    filters: Sequence[WebFilter] = (),
    middleware: Sequence[Middleware] | None = None,
    debug: bool = False,
    exception_handlers: Mapping[Any, Any] | None = None,
) -> Starlette:
    """Create a Starlette application with CORS handling.

    Args:
        routes: Application routes.
        cors: A policy, an options mapping, or a ready :class:`CorsFilter`.
            When omitted and *config* is given, the policy is read from the
            ``flycors.cors`` section; otherwise no CORS filter is installed.
        config: Application configuration.  Also configures logging.
        filters: Additional web filters; all filters run in ``@order`` sequence.
        middleware: Extra Starlette middleware, placed inside the filter chain.
        debug: Starlette debug mode.
        exception_handlers: Starlette exception handlers.
    """
    if config is not None:
        StructlogAdapter().configure(config)
        if cors is None:
            cors = CorsPolicy.from_config(config)

    chain: list[WebFilter] = list(filters)
    if isinstance(cors, CorsFilter):
        chain.append(cors)
    elif cors is not None:
        chain.append(CorsFilter(cors))

    return Starlette(
        debug=debug,
        routes=list(routes or []),
        middleware=[Middleware(WebFilterChainMiddleware, filters=chain), *(middleware or [])],
        exception_handlers=dict(exception_handlers or {}),
    )
