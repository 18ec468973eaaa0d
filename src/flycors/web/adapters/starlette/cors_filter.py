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
"""CORS filter — runs the CORS dispatcher inside the WebFilter chain."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from flycors.container.ordering import HIGHEST_PRECEDENCE, order
from flycors.cors.dispatcher import CorsDispatcher, cors
from flycors.cors.policy import CorsPolicy
from flycors.web.adapters.starlette.exchange import BufferedResponseWriter, StarletteRequestReader
from flycors.web.filters import OncePerRequestFilter
from flycors.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 100)
class CorsFilter(OncePerRequestFilter):
    """Decorates responses with CORS headers and answers preflight requests.

    A resolver error passed to the continuation is re-raised, so it reaches
    Starlette's exception handling like any other error from the pipeline.
    """

    def __init__(self, policy: CorsPolicy | Mapping[str, Any] | None = None, **overrides: Any) -> None:
        self._dispatcher = cors(policy, **overrides)

    @property
    def dispatcher(self) -> CorsDispatcher:
        return self._dispatcher

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        writer = BufferedResponseWriter()
        downstream: list[Response] = []

        async def _continue(error: BaseException | None = None) -> None:
            if error is not None:
                raise error
            downstream.append(await call_next(request))

        await self._dispatcher(StarletteRequestReader(request), writer, _continue)

        if writer.ended:
            return writer.to_response()
        return writer.apply_to(downstream[0])
