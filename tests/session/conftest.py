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
"""Shared fixtures for session store tests: a controllable clock and every backend."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from sessionkeep.session.adapters.memory import InMemorySessionBackend
from sessionkeep.session.record import SessionId, SessionRecord
from sessionkeep.session.store import BackendSessionStore

TABLE = "sessions"


class FrozenClock:
    """Callable clock whose time only moves when a test moves it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 14, 15, 9, 26, tzinfo=UTC))


@pytest.fixture
def make_record(clock):
    def _make(data: dict | None = None, ttl: timedelta = timedelta(hours=1), session_id: SessionId | None = None):
        return SessionRecord(
            id=session_id or SessionId.generate(),
            data={"user": "alice"} if data is None else data,
            expiry_date=clock.now + ttl,
        )

    return _make


async def _memory_backend():
    yield InMemorySessionBackend()


async def _sqlalchemy_backend():
    pytest.importorskip("aiosqlite", reason="aiosqlite not installed")
    from sqlalchemy.ext.asyncio import create_async_engine

    from sessionkeep.session.adapters.sqlalchemy import SqlAlchemySessionBackend

    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    backend = SqlAlchemySessionBackend(engine)
    await backend.ensure_table(TABLE)
    yield backend
    await engine.dispose()


async def _mongodb_backend():
    mongomock_motor = pytest.importorskip("mongomock_motor", reason="mongomock-motor not installed")

    from sessionkeep.session.adapters.mongodb import MongoSessionBackend

    client = mongomock_motor.AsyncMongoMockClient()
    backend = MongoSessionBackend(client["sessionkeep_test"])
    await backend.ensure_indexes(TABLE)
    yield backend


_BACKENDS = {
    "memory": _memory_backend,
    "sqlalchemy": _sqlalchemy_backend,
    "mongodb": _mongodb_backend,
}


@pytest.fixture(params=sorted(_BACKENDS))
async def backend(request):
    """Every SessionBackend implementation, skipping those whose driver is missing."""
    async for instance in _BACKENDS[request.param]():
        yield instance


@pytest.fixture
def store(backend, clock) -> BackendSessionStore:
    return BackendSessionStore(backend, TABLE, clock=clock)
