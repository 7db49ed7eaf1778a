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
"""Tests for StructlogAdapter — levels, formats and rendering of library records."""

from __future__ import annotations

import io
import json
import logging

from sessionkeep.core.config import Config
from sessionkeep.logging import StructlogAdapter


def _last_line(buffer: io.StringIO) -> str:
    return buffer.getvalue().strip().splitlines()[-1]


class TestConfigure:
    def test_defaults(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({}))
        assert adapter.root_level == "INFO"
        assert adapter.format == "console"
        assert adapter.module_levels == {}

    def test_levels_and_format_from_config(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        config = Config(
            {"sessionkeep": {"logging": {"format": "JSON", "level": {"root": "debug", "sessionkeep.levels_a": "warning"}}}}
        )
        adapter.configure(config)
        assert adapter.root_level == "DEBUG"
        assert adapter.format == "json"
        assert adapter.module_levels == {"sessionkeep.levels_a": "WARNING"}
        assert logging.getLogger("sessionkeep.levels_a").level == logging.WARNING
        assert logging.getLogger().level == logging.DEBUG

    def test_set_level(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.set_level("sessionkeep.levels_b", "error")
        assert logging.getLogger("sessionkeep.levels_b").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.set_level("sessionkeep.levels_c", "chatty")
        assert logging.getLogger("sessionkeep.levels_c").level == logging.INFO


class TestRendering:
    def test_json_renders_stdlib_records(self):
        buffer = io.StringIO()
        StructlogAdapter(stream=buffer).configure(Config({"sessionkeep": {"logging": {"format": "json"}}}))

        logging.getLogger("sessionkeep.render_stdlib").info("Deleting expired sessions from '%s'", "sessions")

        line = json.loads(_last_line(buffer))
        assert line["event"] == "Deleting expired sessions from 'sessions'"
        assert line["logger"] == "sessionkeep.render_stdlib"
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_json_renders_structured_events(self):
        buffer = io.StringIO()
        adapter = StructlogAdapter(stream=buffer)
        adapter.configure(Config({"sessionkeep": {"logging": {"format": "json"}}}))

        adapter.get_logger("sessionkeep.render_events").info("sweeper.started", table="sessions", period=60.0)

        line = json.loads(_last_line(buffer))
        assert line["event"] == "sweeper.started"
        assert line["table"] == "sessions"
        assert line["period"] == 60.0

    def test_console_format(self):
        buffer = io.StringIO()
        StructlogAdapter(stream=buffer).configure(Config({}))
        logging.getLogger("sessionkeep.render_console").warning("backend slow")
        assert "backend slow" in buffer.getvalue()

    def test_records_below_root_level_are_dropped(self):
        buffer = io.StringIO()
        StructlogAdapter(stream=buffer).configure(Config({"sessionkeep": {"logging": {"level": {"root": "WARNING"}}}}))
        logging.getLogger("sessionkeep.render_quiet").info("not shown")
        assert buffer.getvalue() == ""
