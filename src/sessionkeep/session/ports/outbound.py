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
"""Session ports — the backend capability set and the store contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sessionkeep.session.record import SessionId, SessionRecord, StoredEntry


@runtime_checkable
class SessionBackend(Protocol):
    """Durable key-value capability a session store is built on.

    Entries are addressed by ``(table, key)`` where *key* is the session id
    as text. Every method is a single atomic backend operation. Adapters
    raise :class:`~sessionkeep.kernel.exceptions.BackendError` for driver
    failures.
    """

    async def fetch(self, table: str, key: str) -> StoredEntry | None: ...

    async def upsert(self, table: str, key: str, entry: StoredEntry) -> None: ...

    async def insert_if_absent(self, table: str, key: str, entry: StoredEntry) -> bool:
        """Insert only if *key* is free. Returns ``False`` when it already exists."""
        ...

    async def delete(self, table: str, key: str) -> None: ...

    async def delete_expired(self, table: str, now: int) -> int:
        """Delete every entry with ``expiry_date <= now``. Returns the number removed."""
        ...


@runtime_checkable
class SessionStore(Protocol):
    """Contract exposed to the session-management layer."""

    async def load(self, session_id: SessionId) -> SessionRecord | None: ...

    async def save(self, record: SessionRecord) -> None: ...

    async def create(self, record: SessionRecord) -> None: ...

    async def delete(self, session_id: SessionId) -> None: ...


@runtime_checkable
class ExpiredDeletion(Protocol):
    """Stores that can evict expired sessions in bulk."""

    async def delete_expired(self) -> int: ...
