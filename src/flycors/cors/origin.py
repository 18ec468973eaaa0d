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
"""Origin matching — decide which ``Access-Control-Allow-Origin`` to emit."""

from __future__ import annotations

import abc
import inspect
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from flycors.cors.policy import WILDCARD, OriginRule


class OriginDecision(abc.ABC):
    """Outcome of matching a request origin against an origin rule."""

    @property
    @abc.abstractmethod
    def allow_origin(self) -> str | None:
        """Value for ``Access-Control-Allow-Origin``; ``None`` means do not emit."""

    @property
    def varies(self) -> bool:
        """Whether the response depends on the request ``Origin``."""
        return True


@dataclass(frozen=True)
class Wildcard(OriginDecision):
    """Any origin may read the response."""

    @property
    def allow_origin(self) -> str:
        return WILDCARD

    @property
    def varies(self) -> bool:
        return False


@dataclass(frozen=True)
class Fixed(OriginDecision):
    """A single configured origin, emitted whatever the request origin is."""

    value: str

    @property
    def allow_origin(self) -> str:
        return self.value


@dataclass(frozen=True)
class Reflected(OriginDecision):
    """The request's own origin, or ``None`` when it is not allowed."""

    value: str | None

    @property
    def allow_origin(self) -> str | None:
        return self.value

    @property
    def allowed(self) -> bool:
        return self.value is not None


def is_origin_allowed(origin: str | None, rule: Any) -> bool:
    """Return ``True`` if *origin* satisfies *rule*.

    Strings compare exactly, patterns use ``search``, sequences succeed on
    the first matching entry.  Any other rule falls back to its truthiness.
    """
    if isinstance(rule, str):
        return origin == rule
    if isinstance(rule, re.Pattern):
        return origin is not None and rule.search(origin) is not None
    if isinstance(rule, Sequence):
        return any(is_origin_allowed(origin, entry) for entry in rule)
    return bool(rule)


def match_origin(request_origin: str | None, rule: Any) -> OriginDecision:
    """Match *request_origin* against a static (already resolved) rule."""
    if rule is None or (isinstance(rule, str) and rule == WILDCARD):
        return Wildcard()
    if isinstance(rule, str):
        return Fixed(rule)
    if is_origin_allowed(request_origin, rule):
        return Reflected(request_origin)
    return Reflected(None)


def is_resolver(rule: OriginRule) -> bool:
    return callable(rule)


async def resolve_origin_rule(rule: OriginRule, request_origin: str | None) -> Any:
    """Turn *rule* into a static rule for this request.

    Resolver callables are invoked exactly once with the request origin and
    awaited when they return an awaitable.  Exceptions raised by a resolver
    propagate to the caller unchanged.  There is no timeout: a resolver that
    never completes stalls the request.
    """
    if not is_resolver(rule):
        return rule
    result = rule(request_origin)  # type: ignore[operator]
    if inspect.isawaitable(result):
        result = await result
    return result
