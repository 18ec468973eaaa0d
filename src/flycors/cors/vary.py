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
"""Vary accumulation — merge field names into a ``Vary`` header value.

``Vary`` is a comma-separated, case-insensitive set of request header
names.  Appending keeps existing tokens and their order, never adds a token
that is already present, and collapses to ``*`` once ``*`` is involved.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from flycors.kernel.exceptions import InvalidHeaderFieldError
from flycors.web.ports.exchange import ResponseWriter

VARY = "Vary"

# RFC 7230 section 3.2.6 token
_FIELD_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def parse_vary(value: str | None) -> list[str]:
    """Split a ``Vary`` value into its non-empty, trimmed tokens."""
    if not value:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]


def append_vary(header: str | None, field: str | Iterable[str]) -> str:
    """Return *header* with the field name(s) in *field* appended.

    Args:
        header: Current ``Vary`` value, or ``None`` when the header is absent.
        field: A field name, a comma-separated list of names, or an iterable
            of names.

    Raises:
        InvalidHeaderFieldError: If a field name is not a valid token.
    """
    fields = parse_vary(field) if isinstance(field, str) else [f.strip() for f in field if f.strip()]
    for name in fields:
        if not _FIELD_NAME_RE.match(name):
            raise InvalidHeaderFieldError(
                f"Invalid Vary field name: {name!r}",
                code="CORS_VARY_FIELD",
                context={"field": name},
            )

    current = header or ""
    if current.strip() == "*":
        return "*"
    if "*" in fields:
        return "*"

    seen = {token.lower() for token in parse_vary(current)}
    result = current
    for name in fields:
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        result = f"{result}, {name}" if result else name
    return result


def vary(response: ResponseWriter, field: str | Iterable[str]) -> None:
    """Accumulate *field* into the ``Vary`` header of *response*."""
    value = append_vary(response.get_header(VARY), field)
    if value:
        response.set_header(VARY, value)
