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
"""Backend-agnostic session store."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from sessionkeep.kernel.exceptions import BackendError, IdCollisionError, SessionKeepException
from sessionkeep.session.codec import RecordCodec, to_unix_seconds
from sessionkeep.session.ports.outbound import SessionBackend
from sessionkeep.session.record import SessionId, SessionRecord

_logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TABLE = "sessions"
DEFAULT_MAX_CREATE_ATTEMPTS = 16


def _utc_now() -> datetime:
    return datetime.now(UTC)


class BackendSessionStore:
    """Session store over any :class:`SessionBackend`.

    Holds only the backend handle and configuration, all fixed at
    construction, so one instance can be shared by every request task.
    Each operation is a single backend round-trip, except ``create``
    which retries on id collisions. Concurrent ``save`` calls on the same
    id are last-writer-wins.

    Usage::

        store = BackendSessionStore(InMemorySessionBackend(), "sessions")
        await store.save(record)
        loaded = await store.load(record.id)
    """

    def __init__(
        self,
        backend: SessionBackend,
        table: str = DEFAULT_TABLE,
        *,
        codec: RecordCodec | None = None,
        clock: Callable[[], datetime] = _utc_now,
        id_generator: Callable[[], SessionId] = SessionId.generate,
        max_create_attempts: int = DEFAULT_MAX_CREATE_ATTEMPTS,
        strict_id_check: bool = False,
    ) -> None:
        if not table:
            raise ValueError("Session table name must not be empty")
        if max_create_attempts < 1:
            raise ValueError("max_create_attempts must be at least 1")
        self._backend = backend
        self._table = table
        self._codec = codec or RecordCodec()
        self._clock = clock
        self._id_generator = id_generator
        self._max_create_attempts = max_create_attempts
        self._strict_id_check = strict_id_check

    @property
    def backend(self) -> SessionBackend:
        return self._backend

    @property
    def table(self) -> str:
        return self._table

    def _now(self) -> int:
        return to_unix_seconds(self._clock())

    async def _call(
        self,
        operation: str,
        method: Callable[..., Awaitable[T]],
        *args: Any,
        session_id: SessionId | None = None,
    ) -> T:
        """Run one backend call, classifying foreign failures as :class:`BackendError`."""
        try:
            return await method(self._table, *args)
        except SessionKeepException:
            raise
        except Exception as exc:
            context: dict[str, Any] = {"operation": operation, "table": self._table}
            if session_id is not None:
                context["session_id"] = str(session_id)
            raise BackendError(str(exc) or type(exc).__name__, context=context) from exc

    async def load(self, session_id: SessionId) -> SessionRecord | None:
        """Return the unexpired record stored under *session_id*, or ``None``.

        Expired entries read as absent but are left in place for the sweep.
        """
        entry = await self._call("load", self._backend.fetch, str(session_id), session_id=session_id)
        if entry is None:
            return None
        if entry.expiry_date <= self._now():
            return None
        expected_id = session_id if self._strict_id_check else None
        return self._codec.decode(entry, expected_id=expected_id)

    async def save(self, record: SessionRecord) -> None:
        """Insert or fully replace the entry for ``record.id``."""
        entry = self._codec.encode(record)
        await self._call("save", self._backend.upsert, str(record.id), entry, session_id=record.id)

    async def create(self, record: SessionRecord) -> None:
        """Persist *record* under an id nobody else holds.

        Uses the backend's conditional insert, so two concurrent creates can
        never both claim one id. On a collision ``record.id`` is replaced with
        a freshly generated id and the insert is retried; the entry that
        already held the id is left untouched.
        """
        attempts = 0
        while True:
            entry = self._codec.encode(record)
            inserted = await self._call(
                "create", self._backend.insert_if_absent, str(record.id), entry, session_id=record.id
            )
            if inserted:
                return
            attempts += 1
            if attempts >= self._max_create_attempts:
                raise IdCollisionError(
                    f"No free session id after {attempts} attempts",
                    context={"table": self._table, "attempts": attempts},
                )
            _logger.debug("Session id collision in table '%s', drawing a new id", self._table)
            record.id = self._id_generator()

    async def delete(self, session_id: SessionId) -> None:
        """Remove the entry for *session_id*; a missing entry is not an error."""
        await self._call("delete", self._backend.delete, str(session_id), session_id=session_id)

    async def delete_expired(self) -> int:
        """Remove every entry whose expiry is at or before now, in one backend call."""
        _logger.info("Deleting expired sessions from '%s'", self._table)
        removed = await self._call("delete_expired", self._backend.delete_expired, self._now())
        _logger.debug("Deleted %d expired sessions from '%s'", removed, self._table)
        return removed
