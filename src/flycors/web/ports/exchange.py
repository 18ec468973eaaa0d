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
"""Exchange ports — the request/response surface the CORS core consumes.

The host framework supplies these; the core never parses HTTP or owns a
connection.  Header names are matched case-insensitively by implementations.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable


@runtime_checkable
class RequestReader(Protocol):
    """Read-only view of the incoming request."""

    @property
    def method(self) -> str:
        """The HTTP method as sent by the client."""
        ...

    def header(self, name: str) -> str | None:
        """Return the request header *name*, or ``None`` when it is missing."""
        ...


@runtime_checkable
class ResponseWriter(Protocol):
    """Mutable view of the outgoing response."""

    def get_header(self, name: str) -> str | None:
        """Return the current value of response header *name*, if set."""
        ...

    def set_header(self, name: str, value: str) -> None:
        """Set response header *name*, replacing any previous value."""
        ...

    def set_status(self, status_code: int) -> None:
        """Set the response status code."""
        ...

    def end(self) -> None:
        """Terminate the response with no body."""
        ...


class Continuation(Protocol):
    """Invokes the next stage of the pipeline, optionally with an error."""

    def __call__(self, error: BaseException | None = None) -> Awaitable[None]: ...
