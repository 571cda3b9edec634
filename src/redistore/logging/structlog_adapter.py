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
"""StructlogAdapter — structured logging for the session store and its middleware.

redistore logs through ``structlog.get_logger("redistore.<component>")``.
Until :meth:`StructlogAdapter.configure` runs, those events follow whatever
structlog configuration the host application has. Configuring attaches a
handler to the ``redistore`` stdlib logger only; other loggers are untouched.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from redistore.config.properties.logging import LoggingProperties
from redistore.core.config import Config

ROOT_LOGGER = "redistore"

# Event fields that hold session identifiers or cache keys derived from them.
_MASKED_FIELDS = ("session_id", "key")
_VISIBLE_CHARS = 6


def mask_session_ids(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Shorten session identifiers so a log line cannot be replayed as a session."""
    for field in _MASKED_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str) and len(value) > _VISIBLE_CHARS:
            event_dict[field] = value[:_VISIBLE_CHARS] + "..."
    return event_dict


class StructlogAdapter:
    """Configures structlog and the ``redistore`` logger tree from ``LoggingProperties``."""

    def __init__(self, properties: LoggingProperties | None = None) -> None:
        self._properties = properties or LoggingProperties()
        self._handler: logging.Handler | None = None

    @classmethod
    def from_config(cls, config: Config) -> StructlogAdapter:
        return cls(config.bind(LoggingProperties))

    @property
    def properties(self) -> LoggingProperties:
        return self._properties

    @property
    def root_level(self) -> str:
        return str(self._properties.level.get("root", "INFO")).upper()

    @property
    def component_levels(self) -> dict[str, str]:
        """Per-logger levels, with names relative to ``redistore`` made absolute."""
        levels: dict[str, str] = {}
        for name, level in self._properties.level.items():
            if name == "root":
                continue
            full_name = name if name.startswith(ROOT_LOGGER) else f"{ROOT_LOGGER}.{name}"
            levels[full_name] = str(level).upper()
        return levels

    def configure(self) -> None:
        """Install the processor chain and route ``redistore.*`` records to stderr.

        Calling it again replaces the handler installed by the previous call.
        """
        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

        root = logging.getLogger(ROOT_LOGGER)
        if self._handler is not None:
            root.removeHandler(self._handler)
        self._handler = logging.StreamHandler(sys.stderr)
        self._handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(self._handler)
        root.setLevel(_level(self.root_level))
        root.propagate = self._properties.propagate

        for name, level in self.component_levels.items():
            logging.getLogger(name).setLevel(_level(level))

    def _processors(self) -> list[structlog.types.Processor]:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ]
        if self._properties.mask_session_ids:
            processors.append(mask_session_ids)
        if self._properties.format.lower() == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        return processors


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {name}")
    return level
