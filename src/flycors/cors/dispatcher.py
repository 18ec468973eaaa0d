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
"""CORS request dispatcher — the per-request middleware handler."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from flycors.cors.headers import apply_headers, compose_actual_headers, compose_preflight_headers
from flycors.cors.origin import is_resolver, match_origin, resolve_origin_rule
from flycors.cors.policy import CorsPolicy
from flycors.web.ports.exchange import Continuation, RequestReader, ResponseWriter

logger = structlog.get_logger("flycors.cors")

PREFLIGHT_METHOD = "OPTIONS"


class CorsDispatcher:
    """Applies a :class:`CorsPolicy` to one request at a time.

    Call it with ``(request, response, call_next)``.  The origin rule is resolved
    first (awaiting an asynchronous resolver if configured).  A resolver error
    is handed to ``call_next`` unchanged and a denied origin simply continues,
    both without CORS headers.  Otherwise the composed headers are applied
    and the request either continues or, for a preflight that does not
    continue, is answered here with ``options_success_status`` and an empty
    body.

    The dispatcher keeps no per-request state; one instance serves every
    request for the lifetime of the mounted middleware.
    """

    def __init__(self, policy: CorsPolicy | None = None) -> None:
        self._policy = policy or CorsPolicy()

    @property
    def policy(self) -> CorsPolicy:
        return self._policy

    async def __call__(self, request: RequestReader, response: ResponseWriter, call_next: Continuation) -> None:
        policy = self._policy
        request_origin = request.header("Origin")

        try:
            rule = await resolve_origin_rule(policy.origin, request_origin)
        except Exception as exc:
            logger.warning(
                "cors_origin_resolver_failed",
                origin=request_origin,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            await call_next(exc)
            return

        if _denies(policy.origin, rule):
            logger.debug("cors_origin_denied", origin=request_origin)
            await call_next()
            return

        decision = match_origin(request_origin, rule)
        method = (request.method or "").upper()

        if method == PREFLIGHT_METHOD:
            apply_headers(compose_preflight_headers(policy, request, decision), response)
            if policy.preflight_continue:
                await call_next()
                return
            response.set_status(policy.options_success_status)
            response.set_header("Content-Length", "0")
            response.end()
            logger.debug(
                "cors_preflight_handled",
                origin=request_origin,
                status_code=policy.options_success_status,
            )
            return

        apply_headers(compose_actual_headers(policy, decision), response)
        logger.debug("cors_headers_applied", origin=request_origin, method=method)
        await call_next()


def cors(options: Mapping[str, Any] | CorsPolicy | None = None, **overrides: Any) -> CorsDispatcher:
    """Create a CORS middleware handler.

    *options* may be an options mapping (camelCase or snake_case keys) or a
    ready :class:`CorsPolicy`; keyword *overrides* are applied on top.  The
    effective policy is built once, here.

    Example::

        handler = cors({"origin": ["https://a.example"], "credentials": True})
        await handler(request, response, call_next)
    """
    if isinstance(options, CorsPolicy):
        policy = options.merge(**overrides) if overrides else options
    else:
        policy = CorsPolicy.from_options(options, **overrides)
    return CorsDispatcher(policy)


def _denies(configured: Any, rule: Any) -> bool:
    """Whether the effective rule allows no origin at all.

    Any falsy resolver result (``None``, ``False``, ``""``, an empty list)
    denies.  A static empty list does not: it still reflects, matching nothing.
    """
    if is_resolver(configured):
        return not rule
    return rule is False or rule == ""
