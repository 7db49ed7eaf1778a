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
"""Tests for the sessionkeep CLI commands."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from sessionkeep.cli.main import cli
from sessionkeep.core.config import Config
from sessionkeep.session.factory import close_session_store, open_session_store
from sessionkeep.session.record import SessionId, SessionRecord

pytest.importorskip("aiosqlite")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    import os

    for name in list(os.environ):
        if name.startswith("SESSIONKEEP_"):
            monkeypatch.delenv(name)


@pytest.fixture
def sqlite_config(tmp_path: Path) -> Path:
    path = tmp_path / "sessionkeep.yaml"
    path.write_text(
        "sessionkeep:\n"
        "  session:\n"
        "    backend: sqlalchemy\n"
        "    sqlalchemy:\n"
        f"      url: sqlite+aiosqlite:///{tmp_path / 'sessions.db'}\n"
    )
    return path


def _seed(config_path: Path, record: SessionRecord) -> None:
    async def _save() -> None:
        store = await open_session_store(Config.from_file(config_path))
        try:
            await store.save(record)
        finally:
            await close_session_store(store)

    asyncio.run(_save())


class TestCLI:
    def test_help_shows_banner(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "sessionkeep" in result.output
        assert "Copyright 2026 Firefly Software Solutions Inc." in result.output
        for command in ("sweep", "show", "delete"):
            assert command in result.output


class TestSweepCommand:
    def test_single_sweep_on_defaults(self):
        result = CliRunner().invoke(cli, ["sweep", "--once"])
        assert result.exit_code == 0, result.output
        assert "Deleted 0 expired session(s)" in result.output

    def test_single_sweep_removes_expired(self, sqlite_config):
        expired = SessionRecord(SessionId.generate(), {"k": 1}, datetime(2000, 1, 1, tzinfo=UTC))
        _seed(sqlite_config, expired)
        result = CliRunner().invoke(cli, ["sweep", "--once", "--config", str(sqlite_config)])
        assert result.exit_code == 0, result.output
        assert "Deleted 1 expired session(s)" in result.output

    def test_malformed_sweep_interval_exits_with_error(self, monkeypatch):
        monkeypatch.setenv("SESSIONKEEP_SESSION_SWEEP_INTERVAL", "abc")
        result = CliRunner().invoke(cli, ["sweep"])
        assert result.exit_code == 1
        assert "✗" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_non_positive_interval_exits_with_error(self):
        result = CliRunner().invoke(cli, ["sweep", "--interval", "0"])
        assert result.exit_code == 1
        assert "Sweep period must be positive" in result.output

    def test_missing_config_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["sweep", "--once", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2


class TestShowAndDelete:
    def test_show_prints_record(self, sqlite_config):
        record = SessionRecord(SessionId.generate(), {"user": "ada"}, datetime(2099, 1, 1, tzinfo=UTC))
        _seed(sqlite_config, record)
        result = CliRunner().invoke(cli, ["show", str(record.id), "--config", str(sqlite_config)])
        assert result.exit_code == 0, result.output
        assert "user" in result.output
        assert "'ada'" in result.output

    def test_show_missing_session(self):
        result = CliRunner().invoke(cli, ["show", str(SessionId.generate())])
        assert result.exit_code == 1
        assert "not found or expired" in result.output

    def test_invalid_session_id(self):
        result = CliRunner().invoke(cli, ["show", "not-a-session-id"])
        assert result.exit_code == 2

    def test_delete_then_show(self, sqlite_config):
        record = SessionRecord(SessionId.generate(), {"user": "ada"}, datetime(2099, 1, 1, tzinfo=UTC))
        _seed(sqlite_config, record)
        runner = CliRunner()

        deleted = runner.invoke(cli, ["delete", str(record.id), "--config", str(sqlite_config)])
        assert deleted.exit_code == 0, deleted.output
        assert f"Deleted session {record.id}" in deleted.output

        shown = runner.invoke(cli, ["show", str(record.id), "--config", str(sqlite_config)])
        assert shown.exit_code == 1

    def test_backend_misconfiguration_exits_with_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sessionkeep:\n  session:\n    backend: cassandra\n")
        result = CliRunner().invoke(cli, ["delete", str(SessionId.generate()), "--config", str(path)])
        assert result.exit_code == 1
        assert "Unknown session backend" in result.output
