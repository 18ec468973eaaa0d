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
"""Header composition — the CORS response headers for one request.

Composition is pure: the same policy, request and origin decision always
yield the same directives.  Writing them to a response is a separate step
(:func:`apply_headers`).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from flycors.cors.origin import OriginDecision
from flycors.cors.policy import CorsPolicy
from flycors.cors.vary import VARY, vary
from flycors.web.ports.exchange import RequestReader, ResponseWriter

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
MAX_AGE = "Access-Control-Max-Age"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"

REQUEST_HEADERS = "Access-Control-Request-Headers"


@dataclass(frozen=True)
class HeaderDirective:
    """A header to emit; ``value=None`` means computed but not emitted."""

    name: str
    value: str | None

    @property
    def present(self) -> bool:
        return bool(self.value)


def _join(values: Iterable[str]) -> str:
    return ",".join(values)


def origin_headers(decision: OriginDecision) -> list[HeaderDirective]:
    directives = [HeaderDirective(ALLOW_ORIGIN, decision.allow_origin)]
    if decision.varies:
        directives.append(HeaderDirective(VARY, "Origin"))
    return directives


def credentials_header(policy: CorsPolicy) -> list[HeaderDirective]:
    if policy.credentials is True:
        return [HeaderDirective(ALLOW_CREDENTIALS, "true")]
    return []


def methods_header(policy: CorsPolicy) -> list[HeaderDirective]:
    return [HeaderDirective(ALLOW_METHODS, _join(policy.methods) or None)]


def allowed_headers_header(policy: CorsPolicy, request: RequestReader) -> list[HeaderDirective]:
    if policy.allowed_headers is not None:
        value = _join(policy.allowed_headers)
    else:
        value = request.header(REQUEST_HEADERS) or ""
    if not value:
        return []
    return [HeaderDirective(ALLOW_HEADERS, value)]


def max_age_header(policy: CorsPolicy) -> list[HeaderDirective]:
    value = policy.max_age_value()
    if value is None:
        return []
    return [HeaderDirective(MAX_AGE, value)]


def exposed_headers_header(policy: CorsPolicy) -> list[HeaderDirective]:
    if not policy.exposed_headers:
        return []
    return [HeaderDirective(EXPOSE_HEADERS, _join(policy.exposed_headers))]


def compose_preflight_headers(
    policy: CorsPolicy,
    request: RequestReader,
    decision: OriginDecision,
) -> tuple[HeaderDirective, ...]:
    """Headers answering an ``OPTIONS`` preflight request, in emission order."""
    return (
        *origin_headers(decision),
        *credentials_header(policy),
        *methods_header(policy),
        *allowed_headers_header(policy, request),
        *max_age_header(policy),
        *exposed_headers_header(policy),
    )


def compose_actual_headers(policy: CorsPolicy, decision: OriginDecision) -> tuple[HeaderDirective, ...]:
    """Headers decorating a simple/actual (non-``OPTIONS``) request."""
    return (
        *origin_headers(decision),
        *credentials_header(policy),
        *exposed_headers_header(policy),
    )


def apply_headers(directives: Iterable[HeaderDirective], response: ResponseWriter) -> None:
    """Write *directives* to *response*.

    Absent or empty values are skipped.  ``Vary`` is always accumulated into
    the existing header, never overwritten.
    """
    for directive in directives:
        if not directive.present:
            continue
        if directive.name == VARY:
            vary(response, directive.value)  # type: ignore[arg-type]
        else:
            response.set_header(directive.name, directive.value)  # type: ignore[arg-type]
