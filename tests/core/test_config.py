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
"""Tests for Config — layered loading, env overrides, placeholders and binding."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from pydantic import BaseModel, Field

from sessionkeep.config.properties import LoggingProperties, SessionStoreProperties
from sessionkeep.core.config import Config, config_properties


@config_properties(prefix="myapp.cache")
class CacheSettings(BaseModel):
    size: int = Field(default=10, ge=1)
    name: str = "default"


@dataclass
class Undecorated:
    value: str = "nope"


class TestDefaults:
    def test_package_defaults_are_loaded(self):
        config = Config.from_file()
        assert config.get("sessionkeep.session.backend") == "memory"
        assert config.get("sessionkeep.session.table") == "sessions"
        assert "sessionkeep-defaults.yaml (package defaults)" in config.loaded_sources

    def test_skip_defaults(self):
        assert Config.from_file(load_defaults=False).to_dict() == {}

    def test_missing_file_keeps_defaults(self, tmp_path):
        config = Config.from_file(tmp_path / "absent.yaml")
        assert config.get("sessionkeep.session.backend") == "memory"
        assert len(config.loaded_sources) == 1


class TestFiles:
    def test_yaml_overrides_defaults(self, tmp_path):
        path = tmp_path / "sessionkeep.yaml"
        path.write_text("sessionkeep:\n  session:\n    table: app_sessions\n")
        config = Config.from_file(path)
        assert config.get("sessionkeep.session.table") == "app_sessions"
        assert config.get("sessionkeep.session.backend") == "memory"

    def test_toml_file(self, tmp_path):
        path = tmp_path / "sessionkeep.toml"
        path.write_text('[sessionkeep.session]\nbackend = "sqlalchemy"\n')
        assert Config.from_file(path).get("sessionkeep.session.backend") == "sqlalchemy"

    def test_profile_overlay(self, tmp_path):
        (tmp_path / "sessionkeep.yaml").write_text("sessionkeep:\n  session:\n    table: base\n")
        (tmp_path / "sessionkeep-prod.yaml").write_text("sessionkeep:\n  session:\n    table: prod\n")
        config = Config.from_file(tmp_path / "sessionkeep.yaml", active_profiles=["prod"])
        assert config.get("sessionkeep.session.table") == "prod"
        assert any("profile: prod" in s for s in config.loaded_sources)


class TestGet:
    def test_env_var_wins(self, monkeypatch):
        monkeypatch.setenv("SESSIONKEEP_SESSION_TABLE", "env_table")
        config = Config({"sessionkeep": {"session": {"table": "yaml_table"}}})
        assert config.get("sessionkeep.session.table") == "env_table"

    def test_dashed_keys_map_to_env(self):
        assert Config.env_key("sessionkeep.session.max-create-attempts") == "SESSIONKEEP_SESSION_MAX_CREATE_ATTEMPTS"

    def test_default_for_missing_key(self):
        assert Config({}).get("sessionkeep.nope", "fallback") == "fallback"

    def test_placeholder_uses_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://db/sessions")
        config = Config({"db": {"url": "${DATABASE_URL:sqlite+aiosqlite:///x.db}"}})
        assert config.get("db.url") == "postgresql+asyncpg://db/sessions"

    def test_placeholder_default(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        config = Config({"db": {"url": "${DATABASE_URL:sqlite+aiosqlite:///x.db}"}})
        assert config.get("db.url") == "sqlite+aiosqlite:///x.db"

    def test_placeholder_config_reference(self):
        config = Config({"a": {"name": "sessions"}, "b": {"table": "${a.name}_v2"}})
        assert config.get("b.table") == "sessions_v2"

    def test_unresolvable_placeholder(self, monkeypatch):
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
        with pytest.raises(ValueError, match="Cannot resolve placeholder"):
            Config({"x": "${NOT_SET_ANYWHERE}"}).get("x")

    def test_circular_placeholder(self):
        with pytest.raises(ValueError, match="circular"):
            Config({"a": "${b}", "b": "${a}"}).get("a")


class TestBind:
    def test_dataclass_defaults(self):
        props = Config({}).bind(SessionStoreProperties)
        assert props == SessionStoreProperties()

    def test_dataclass_dashed_keys_and_coercion(self, monkeypatch):
        monkeypatch.setenv("SESSIONKEEP_SESSION_SWEEP_INTERVAL", "2.5")
        config = Config({"sessionkeep": {"session": {"max-create-attempts": "5", "strict-id-check": "yes"}}})
        props = config.bind(SessionStoreProperties)
        assert props.max_create_attempts == 5
        assert props.strict_id_check is True
        assert props.sweep_interval == 2.5

    def test_logging_properties(self):
        config = Config({"sessionkeep": {"logging": {"format": "json", "level": {"root": "DEBUG"}}}})
        props = config.bind(LoggingProperties)
        assert props.format == "json"
        assert props.level == {"root": "DEBUG"}

    def test_pydantic_model(self):
        assert Config({"myapp": {"cache": {"size": "20"}}}).bind(CacheSettings).size == 20

    def test_pydantic_validation_failure(self):
        with pytest.raises(ValueError, match="Configuration validation failed for 'CacheSettings'"):
            Config({"myapp": {"cache": {"size": 0}}}).bind(CacheSettings)

    def test_undecorated_class_rejected(self):
        with pytest.raises(ValueError, match="not decorated"):
            Config({}).bind(Undecorated)
