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
"""CORS policy model — the effective configuration a dispatcher serves.

A :class:`CorsPolicy` is built once, when the middleware is mounted, and is
never mutated afterwards.  Every field is validated on construction: ``None``
means "not supplied" and takes the documented default, any other explicit
value (falsy ones included) wins, and malformed values fall back to the
default with a ``cors_option_invalid`` warning instead of failing.
"""

from __future__ import annotations

import dataclasses
import math
import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

import structlog

from flycors.core.config import Config, config_properties

logger = structlog.get_logger("flycors.cors")

WILDCARD = "*"

DEFAULT_METHODS: tuple[str, ...] = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")
DEFAULT_OPTIONS_SUCCESS_STATUS = 204

StaticOriginRule = Union[bool, str, re.Pattern[str], tuple[Any, ...]]
OriginResolver = Callable[[str | None], Union[Any, Awaitable[Any]]]
OriginRule = Union[StaticOriginRule, OriginResolver]

# Mapping keys accepted by CorsPolicy.from_options.
_OPTION_NAMES: dict[str, str] = {
    "origin": "origin",
    "methods": "methods",
    "allowedHeaders": "allowed_headers",
    "allowed_headers": "allowed_headers",
    "exposedHeaders": "exposed_headers",
    "exposed_headers": "exposed_headers",
    "credentials": "credentials",
    "maxAge": "max_age",
    "max_age": "max_age",
    "preflightContinue": "preflight_continue",
    "preflight_continue": "preflight_continue",
    "optionsSuccessStatus": "options_success_status",
    "options_success_status": "options_success_status",
}
_HEADERS_ALIAS = "headers"


class _Invalid(ValueError):
    """Internal marker for a value that must fall back to its default."""


def _normalize_origin_item(value: Any) -> Any:
    if isinstance(value, (str, re.Pattern)):
        return value
    if isinstance(value, Sequence):
        return tuple(_normalize_origin_item(item) for item in value)
    raise _Invalid(f"unsupported origin entry {value!r}")


def _normalize_origin(value: Any) -> OriginRule:
    if isinstance(value, (bool, str, re.Pattern)):
        return value
    if isinstance(value, Sequence):
        return tuple(_normalize_origin_item(item) for item in value)
    if callable(value):
        return value
    raise _Invalid(f"unsupported origin rule {value!r}")


def _normalize_tokens(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items: Sequence[Any] = value.split(",")
    elif isinstance(value, Sequence):
        items = value
    else:
        raise _Invalid(f"expected a string or a sequence of strings, got {value!r}")
    tokens: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise _Invalid(f"expected a string, got {item!r}")
        if item.strip():
            tokens.append(item.strip())
    return tuple(tokens)


def _normalize_flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise _Invalid(f"expected a boolean, got {value!r}")
    return value


def _normalize_max_age(value: Any) -> int | float | str:
    if isinstance(value, bool):
        raise _Invalid(f"expected a number of seconds, got {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise _Invalid(f"expected a finite number of seconds, got {value!r}")
        return value
    if isinstance(value, str):
        try:
            float(value.strip())
        except ValueError:
            raise _Invalid(f"expected a numeric string, got {value!r}") from None
        return value.strip()
    raise _Invalid(f"expected a number of seconds, got {value!r}")


def _normalize_status(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 100 <= value <= 599:
        raise _Invalid(f"expected an HTTP status code, got {value!r}")
    return value


_NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    "origin": _normalize_origin,
    "methods": _normalize_tokens,
    "allowed_headers": _normalize_tokens,
    "exposed_headers": _normalize_tokens,
    "credentials": _normalize_flag,
    "max_age": _normalize_max_age,
    "preflight_continue": _normalize_flag,
    "options_success_status": _normalize_status,
}


@dataclass(frozen=True)
class CorsPolicy:
    """Effective CORS policy.

    Attributes:
        origin: ``"*"`` (default), a fixed origin string, ``True`` to reflect
            any request origin, ``False`` to disable CORS, a compiled pattern,
            a tuple of strings/patterns, or a resolver callable (sync or
            async) receiving the request origin.
        methods: Methods advertised in ``Access-Control-Allow-Methods``.
        allowed_headers: Headers advertised on preflight.  ``None`` echoes
            the request's ``Access-Control-Request-Headers``.
        exposed_headers: Headers listed in ``Access-Control-Expose-Headers``.
        credentials: Emit ``Access-Control-Allow-Credentials: true``.
        max_age: Preflight cache lifetime in seconds, number or numeric string.
        preflight_continue: Forward preflight requests down the pipeline
            instead of answering them.
        options_success_status: Status used to answer a preflight request.
    """

    origin: OriginRule = WILDCARD
    methods: tuple[str, ...] = DEFAULT_METHODS
    allowed_headers: tuple[str, ...] | None = None
    exposed_headers: tuple[str, ...] | None = None
    credentials: bool = False
    max_age: int | float | str | None = None
    preflight_continue: bool = False
    options_success_status: int = DEFAULT_OPTIONS_SUCCESS_STATUS

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None:
                object.__setattr__(self, f.name, f.default)
                continue
            try:
                normalized = _NORMALIZERS[f.name](value)
            except _Invalid as exc:
                logger.warning("cors_option_invalid", option=f.name, reason=str(exc))
                normalized = f.default
            object.__setattr__(self, f.name, normalized)

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None, **overrides: Any) -> CorsPolicy:
        """Build a policy from an options mapping plus keyword overrides.

        Accepts camelCase (``allowedHeaders``, ``maxAge``, ...) and snake_case
        keys.  ``headers`` is an alias for ``allowedHeaders`` and only applies
        when ``allowedHeaders`` is not supplied.
        """
        return cls(**_option_kwargs({**(options or {}), **overrides}))

    @classmethod
    def from_config(cls, config: Config) -> CorsPolicy:
        """Build a policy from the ``flycors.cors`` configuration section.

        Values that cannot be coerced to their declared type are logged and
        replaced by the field default.
        """

        def _invalid(option: str, value: Any, exc: ValueError) -> None:
            logger.warning("cors_option_invalid", option=option, value=value, reason=str(exc))

        return config.bind(CorsProperties, on_error=_invalid).to_policy()

    def merge(self, **changes: Any) -> CorsPolicy:
        """Return a copy of this policy with *changes* applied and validated.

        Keys follow the same rules as :meth:`from_options`.
        """
        return dataclasses.replace(self, **_option_kwargs(changes))

    @property
    def enabled(self) -> bool:
        """``False`` only when CORS was explicitly switched off."""
        return self.origin is not False

    def max_age_value(self) -> str | None:
        """``max_age`` rendered as a header value, or ``None`` when unset."""
        if self.max_age is None:
            return None
        if isinstance(self.max_age, float) and self.max_age.is_integer():
            return str(int(self.max_age))
        return str(self.max_age) or None


def _option_kwargs(options: Mapping[str, Any]) -> dict[str, Any]:
    """Map option keys to ``CorsPolicy`` field names, dropping unknown keys."""
    merged = dict(options)
    headers_alias = merged.pop(_HEADERS_ALIAS, None)

    kwargs: dict[str, Any] = {}
    for key, value in merged.items():
        name = _OPTION_NAMES.get(key)
        if name is None:
            logger.warning("cors_option_unknown", option=key)
            continue
        if value is not None:
            kwargs[name] = value

    if "allowed_headers" not in kwargs and headers_alias is not None:
        kwargs["allowed_headers"] = headers_alias
    return kwargs


def _string_list(option: str, value: Any, default: list[str]) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    logger.warning("cors_option_invalid", option=option, value=value, reason="expected a list of strings")
    return default


@config_properties(prefix="flycors.cors")
@dataclass
class CorsProperties:
    """Configuration-file view of a CORS policy (``flycors.cors.*``)."""

    enabled: bool = True
    allowed_origins: list[str] = field(default_factory=lambda: [WILDCARD])
    allowed_origin_patterns: list[str] = field(default_factory=list)
    allowed_methods: list[str] = field(default_factory=lambda: list(DEFAULT_METHODS))
    allowed_headers: list[str] | None = None
    exposed_headers: list[str] | None = None
    allow_credentials: bool = False
    max_age: int | None = None
    preflight_continue: bool = False
    options_success_status: int = DEFAULT_OPTIONS_SUCCESS_STATUS

    def origin_rule(self) -> OriginRule:
        """The policy origin rule; invalid patterns are logged and skipped."""
        if not self.enabled:
            return False
        origins = _string_list("allowed_origins", self.allowed_origins, [WILDCARD])
        patterns: list[re.Pattern[str]] = []
        for source in _string_list("allowed_origin_patterns", self.allowed_origin_patterns, []):
            try:
                patterns.append(re.compile(source))
            except re.error as exc:
                logger.warning("cors_option_invalid", option="allowed_origin_patterns", value=source, reason=str(exc))
        if WILDCARD in origins:
            return WILDCARD
        if len(origins) == 1 and not patterns:
            return origins[0]
        return (*origins, *patterns)

    def to_policy(self) -> CorsPolicy:
        return CorsPolicy(
            origin=self.origin_rule(),
            methods=self.allowed_methods,
            allowed_headers=self.allowed_headers,
            exposed_headers=self.exposed_headers,
            credentials=self.allow_credentials,
            max_age=self.max_age,
            preflight_continue=self.preflight_continue,
            options_success_status=self.options_success_status,
        )
