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
"""Tests for WebFilterChainMiddleware — ordering, short-circuit, scoping."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flycors.container.ordering import HIGHEST_PRECEDENCE, get_order, order
from flycors.web.adapters.starlette import CorsFilter, WebFilterChainMiddleware
from flycors.web.filters import OncePerRequestFilter
from flycors.web.ports.filter import WebFilter


class _Trace(OncePerRequestFilter):
    """Appends its name to X-Trace on the way out."""

    name = ""

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        trail = response.headers.get("X-Trace")
        response.headers["X-Trace"] = f"{trail},{self.name}" if trail else self.name
        return response


@order(HIGHEST_PRECEDENCE + 10)
class OuterFilter(_Trace):
    name = "outer"


@order(20)
class InnerFilter(_Trace):
    name = "inner"


class ApiOnlyFilter(_Trace):
    name = "api"
    url_patterns = ["/api/*"]


class ShortCircuitFilter(OncePerRequestFilter):
    """Returns 429 without calling next."""

    async def do_filter(self, request, call_next):
        return JSONResponse({"error": "rate limited"}, status_code=429)


async def _ok_handler(request: Request) -> PlainTextResponse:
    return PlainTextResponse("OK")


def _make_app(*filters) -> Starlette:
    return Starlette(
        routes=[
            Route("/test", _ok_handler),
            Route("/api/data", _ok_handler),
            Route("/health", _ok_handler),
        ],
        middleware=[Middleware(WebFilterChainMiddleware, filters=list(filters))],
    )


class TestFilterChainOrdering:
    def test_filters_sorted_by_order(self):
        client = TestClient(_make_app(InnerFilter(), OuterFilter()))
        resp = client.get("/test")

        assert resp.status_code == 200
        # inner runs closest to the route, so it decorates first
        assert resp.headers["X-Trace"] == "inner,outer"

    def test_order_values(self):
        assert get_order(OuterFilter) < get_order(ApiOnlyFilter) < get_order(InnerFilter)
        assert get_order(CorsFilter()) == HIGHEST_PRECEDENCE + 100

    def test_filters_satisfy_protocol(self):
        assert isinstance(CorsFilter(), WebFilter)
        assert isinstance(OuterFilter(), WebFilter)

    def test_filters_property_is_sorted(self):
        chain = WebFilterChainMiddleware(_ok_handler, filters=[InnerFilter(), OuterFilter()])
        assert [type(f) for f in chain.filters] == [OuterFilter, InnerFilter]


class TestFilterChainScoping:
    def test_url_patterns(self):
        client = TestClient(_make_app(ApiOnlyFilter()))

        assert client.get("/api/data").headers["X-Trace"] == "api"
        assert "X-Trace" not in client.get("/health").headers

    def test_exclude_patterns_via_scoped(self):
        client = TestClient(_make_app(OuterFilter().scoped(exclude_patterns=["/health"])))

        assert client.get("/test").headers["X-Trace"] == "outer"
        assert "X-Trace" not in client.get("/health").headers


class TestFilterChainShortCircuit:
    def test_short_circuit(self):
        client = TestClient(_make_app(ShortCircuitFilter(), InnerFilter()))
        resp = client.get("/test")

        assert resp.status_code == 429
        assert resp.json() == {"error": "rate limited"}
        assert "X-Trace" not in resp.headers

    def test_body_is_preserved(self):
        client = TestClient(_make_app(OuterFilter()))
        assert client.get("/test").text == "OK"
