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
"""Session store configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from sessionkeep.core.config import config_properties


@config_properties(prefix="sessionkeep.session")
@dataclass
class SessionStoreProperties:
    """Configuration for the session store (sessionkeep.session.*).

    Backend connection settings (``sqlalchemy.url``, ``mongodb.uri``) are
    read by the factory directly so placeholders and env overrides apply.
    """

    backend: str = "memory"
    table: str = "sessions"
    strict_id_check: bool = False
    max_create_attempts: int = 16
    sweep_interval: float = 60.0
