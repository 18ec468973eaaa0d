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
"""StructlogAdapter — structlog-backed logging for FlyCors.

The adapter binds the ``flycors.logging`` section into
:class:`LoggingProperties`::

    flycors:
      logging:
        format: json            # console | json
        trace_decisions: true   # emit per-request CORS debug events
        level:
          root: INFO
          flycors.web: WARNING

``level`` may also be a plain string, which sets the root level only; this
is what ``FLYCORS_LOGGING_LEVEL=DEBUG`` produces.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any

import structlog

from flycors.core.config import Config, config_properties

CORS_LOGGER = "flycors.cors"

FORMATS = ("console", "json")

logger = structlog.get_logger("flycors.logging")


@config_properties(prefix="flycors.logging")
@dataclass
class LoggingProperties:
    """Logging settings (``flycors.logging.*``)."""

    level: dict[str, str] | str = field(default_factory=dict)
    format: str = "console"
    trace_decisions: bool = False

    def root_level(self) -> str:
        if isinstance(self.level, str):
            return self.level.upper()
        return str(self.level.get("root", "INFO")).upper()

    def module_levels(self) -> dict[str, str]:
        if isinstance(self.level, str):
            return {}
        return {k: str(v).upper() for k, v in self.level.items() if k != "root"}


class StructlogAdapter:
    """Logging adapter backed by structlog.

    With ``trace_decisions`` on, the ``flycors.cors`` logger drops to DEBUG so
    denied origins, handled preflights and applied headers are each logged.
    An explicit per-module level for ``flycors.cors`` still wins.
    """

    def __init__(self) -> None:
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        """Configure structlog from the ``flycors.logging`` section of config."""
        props = config.bind(LoggingProperties, on_error=self._invalid)
        self._root_level = props.root_level()
        self._module_levels = props.module_levels()
        if props.trace_decisions:
            self._module_levels.setdefault(CORS_LOGGER, "DEBUG")

        self._format = props.format.lower()
        invalid_format = self._format not in FORMATS
        if invalid_format:
            self._format = "console"

        self._setup_structlog()
        self._apply_levels()

        if invalid_format:
            logger.warning("logging_option_invalid", option="format", value=props.format, expected=list(FORMATS))

    def get_logger(self, name: str) -> Any:
        """Get a structlog BoundLogger by name."""
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the level of a stdlib logger; unknown level names mean INFO."""
        logging.getLogger(name).setLevel(_level_number(level))

    @staticmethod
    def _invalid(option: str, value: Any, exc: ValueError) -> None:
        logger.warning("logging_option_invalid", option=option, value=value, reason=str(exc))

    def _setup_structlog(self) -> None:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
        ]
        renderer: structlog.types.Processor = (
            structlog.processors.JSONRenderer() if self._format == "json" else structlog.dev.ConsoleRenderer()
        )

        structlog.configure(
            processors=[*processors, renderer],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=_level_number(self._root_level),
            force=True,
        )

    def _apply_levels(self) -> None:
        for module, level in self._module_levels.items():
            self.set_level(module, level)


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO
