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
"""FlyCors exception hierarchy."""

from __future__ import annotations


class FlyCorsException(Exception):
    """Base exception for all FlyCors errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CORS_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class OriginResolverError(FlyCorsException):
    """Raised by an origin resolver that cannot decide for a request origin.

    Any exception a resolver raises is handed to the pipeline continuation
    unchanged; this type exists so resolvers have a conventional one to raise.
    """


class InvalidHeaderFieldError(FlyCorsException, ValueError):
    """A header field name is not a valid RFC 7230 token."""
