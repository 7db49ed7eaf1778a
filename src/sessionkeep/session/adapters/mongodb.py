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
"""MongoDB-backed session backend using Motor."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from bson.binary import Binary
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from sessionkeep.kernel.exceptions import BackendError
from sessionkeep.session.record import StoredEntry

_logger = logging.getLogger(__name__)

_DUPLICATE_KEY = 11000


@contextmanager
def _translate_errors(operation: str, table: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        raise BackendError(
            str(exc),
            context={"operation": operation, "table": table, "backend": "mongodb"},
        ) from exc


class MongoSessionBackend:
    """Session backend storing one document per session in a MongoDB collection.

    Each logical table is a collection of ``{_id, data, expiry_date}``
    documents. Accepts a ``motor.motor_asyncio.AsyncIOMotorDatabase`` or any
    object with the same async collection API.
    """

    def __init__(self, database: Any) -> None:
        self._database = database

    def _collection(self, table: str) -> Any:
        return self._database[table]

    async def ensure_indexes(self, table: str) -> None:
        """Create the ascending index on ``expiry_date`` used by the sweep."""
        with _translate_errors("ensure_indexes", table):
            await self._collection(table).create_index(
                [("expiry_date", ASCENDING)], name="expiry_date_1"
            )
        _logger.debug("Ensured expiry index on collection '%s'", table)

    async def fetch(self, table: str, key: str) -> StoredEntry | None:
        with _translate_errors("fetch", table):
            doc = await self._collection(table).find_one(
                {"_id": key}, projection={"data": True, "expiry_date": True}
            )
        if doc is None:
            return None
        return StoredEntry(data=bytes(doc["data"]), expiry_date=int(doc["expiry_date"]))

    async def upsert(self, table: str, key: str, entry: StoredEntry) -> None:
        document = {"_id": key, "data": Binary(entry.data), "expiry_date": entry.expiry_date}
        with _translate_errors("upsert", table):
            await self._collection(table).replace_one({"_id": key}, document, upsert=True)

    async def insert_if_absent(self, table: str, key: str, entry: StoredEntry) -> bool:
        document = {"_id": key, "data": Binary(entry.data), "expiry_date": entry.expiry_date}
        with _translate_errors("insert_if_absent", table):
            try:
                await self._collection(table).insert_one(document)
            except PyMongoError as exc:
                if isinstance(exc, DuplicateKeyError) or getattr(exc, "code", None) == _DUPLICATE_KEY:
                    return False
                raise
        return True

    async def delete(self, table: str, key: str) -> None:
        with _translate_errors("delete", table):
            await self._collection(table).delete_one({"_id": key})

    async def delete_expired(self, table: str, now: int) -> int:
        with _translate_errors("delete_expired", table):
            result = await self._collection(table).delete_many({"expiry_date": {"$lte": now}})
        return int(result.deleted_count)

    async def close(self) -> None:
        """Close the client the database handle belongs to."""
        self._database.client.close()
