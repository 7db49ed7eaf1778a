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
"""structlog setup shared by the library loggers and the CLI.

sessionkeep modules log through ``logging.getLogger(__name__)``. The adapter
renders those records and structlog events with one formatter, so a
``json`` deployment gets JSON lines from both.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from sessionkeep.config.properties.logging import LoggingProperties
from sessionkeep.core.config import Config

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


class StructlogAdapter:
    """Configures logging from ``sessionkeep.logging`` and hands out structlog loggers.

    Output goes to *stream*, stderr by default, so CLI results printed on
    stdout stay separate from log lines.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._properties = LoggingProperties()

    @property
    def root_level(self) -> str:
        return str(self._properties.level.get("root", "INFO")).upper()

    @property
    def module_levels(self) -> dict[str, str]:
        return {k: str(v).upper() for k, v in self._properties.level.items() if k != "root"}

    @property
    def format(self) -> str:
        return self._properties.format.lower()

    def configure(self, config: Config) -> None:
        self._properties = config.bind(LoggingProperties)

        structlog.configure(
            processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        handler = logging.StreamHandler(self._stream or sys.stderr)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(self.format),
                ],
            )
        )
        logging.basicConfig(handlers=[handler], level=_level(self.root_level), force=True)

        for module, level in self.module_levels.items():
            self.set_level(module, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(_level(level))
