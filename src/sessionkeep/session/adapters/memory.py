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
"""In-memory session backend."""

from __future__ import annotations

import asyncio

from sessionkeep.session.record import StoredEntry


class InMemorySessionBackend:
    """Session backend holding entries in process memory, guarded by an asyncio.Lock.

    Suitable for development, testing, and single-process applications.
    Entries are dropped when the process exits.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, StoredEntry]] = {}
        self._lock = asyncio.Lock()

    async def fetch(self, table: str, key: str) -> StoredEntry | None:
        async with self._lock:
            return self._tables.get(table, {}).get(key)

    async def upsert(self, table: str, key: str, entry: StoredEntry) -> None:
        async with self._lock:
            self._tables.setdefault(table, {})[key] = entry

    async def insert_if_absent(self, table: str, key: str, entry: StoredEntry) -> bool:
        async with self._lock:
            rows = self._tables.setdefault(table, {})
            if key in rows:
                return False
            rows[key] = entry
            return True

    async def delete(self, table: str, key: str) -> None:
        async with self._lock:
            self._tables.get(table, {}).pop(key, None)

    async def delete_expired(self, table: str, now: int) -> int:
        async with self._lock:
            rows = self._tables.get(table, {})
            expired = [key for key, entry in rows.items() if entry.expiry_date <= now]
            for key in expired:
                del rows[key]
            return len(expired)
