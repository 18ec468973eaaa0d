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
"""OncePerRequestFilter — WebFilter base class scoped by URL glob patterns."""

from __future__ import annotations

import abc
from collections.abc import Sequence
from fnmatch import fnmatch
from typing import Any

from flycors.web.ports.filter import CallNext


def _matches_any(path: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch(path, p) for p in patterns)


class OncePerRequestFilter(abc.ABC):
    """Abstract base class for :class:`WebFilter` implementations.

    Scoping is read from ``request.url.path``, so no Starlette import is
    needed here.  Patterns can be declared on the class or overridden per
    instance with :meth:`scoped`.

    Attributes:
        url_patterns: Glob patterns that this filter applies to.
            If empty (default), the filter applies to *all* paths.
        exclude_patterns: Glob patterns to exclude even if ``url_patterns``
            matches.
    """

    url_patterns: Sequence[str] = ()
    exclude_patterns: Sequence[str] = ()

    def scoped(
        self,
        url_patterns: Sequence[str] | None = None,
        exclude_patterns: Sequence[str] | None = None,
    ) -> OncePerRequestFilter:
        """Restrict this instance to the given patterns and return it."""
        if url_patterns is not None:
            self.url_patterns = tuple(url_patterns)
        if exclude_patterns is not None:
            self.exclude_patterns = tuple(exclude_patterns)
        return self

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` if the request path is outside this filter's scope."""
        path: str = request.url.path
        if self.url_patterns and not _matches_any(path, self.url_patterns):
            return True
        return _matches_any(path, self.exclude_patterns)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Execute the filter logic.  Must call ``await call_next(request)`` to proceed."""
        ...
