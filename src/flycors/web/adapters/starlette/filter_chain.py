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
"""WebFilterChainMiddleware — pure ASGI middleware running the WebFilter chain."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from flycors.container.ordering import get_order
from flycors.web.ports.filter import CallNext, WebFilter


class WebFilterChainMiddleware:
    """Executes :class:`WebFilter` instances in ``@order`` sequence.

    The downstream application's response is captured into a Starlette
    :class:`Response` so filters can read and decorate it, or replace it
    entirely by not calling ``call_next``.  Non-HTTP scopes bypass the chain.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = sorted(filters, key=get_order)

    @property
    def filters(self) -> list[WebFilter]:
        return list(self._filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def _call_app(request: Request) -> Response:
            return await _capture(self.app, scope, receive)

        chain: CallNext = _call_app
        for web_filter in reversed(self._filters):
            chain = _wrap(web_filter, chain)

        response = cast(Response, await chain(Request(scope, receive, send)))
        await response(scope, receive, send)


async def _capture(app: ASGIApp, scope: Scope, receive: Receive) -> Response:
    """Run *app* and collect what it sends into a :class:`Response`."""
    status_code = 200
    raw_headers: list[tuple[bytes, bytes]] = []
    body_parts: list[bytes] = []

    async def _intercept(message: Message) -> None:
        nonlocal status_code, raw_headers
        if message["type"] == "http.response.start":
            status_code = message["status"]
            raw_headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body" and message.get("body"):
            body_parts.append(message["body"])

    await app(scope, receive, _intercept)

    response = Response(content=b"".join(body_parts), status_code=status_code)
    response.raw_headers[:] = raw_headers
    return response


def _wrap(web_filter: WebFilter, next_call: CallNext) -> CallNext:
    async def _inner(request: Any) -> Any:
        if web_filter.should_not_filter(request):
            return await next_call(request)
        return await web_filter.do_filter(request, next_call)

    return _inner
