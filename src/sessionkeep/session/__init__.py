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
"""sessionkeep session — durable, expiring session records behind a small async contract.

Import optional backends from the adapter package::

    from sessionkeep.session.adapters.sqlalchemy import SqlAlchemySessionBackend
    from sessionkeep.session.adapters.mongodb import MongoSessionBackend
"""

from sessionkeep.session.adapters.memory import InMemorySessionBackend
from sessionkeep.session.codec import RecordCodec
from sessionkeep.session.factory import create_session_store, open_session_store
from sessionkeep.session.ports.outbound import ExpiredDeletion, SessionBackend, SessionStore
from sessionkeep.session.record import SessionId, SessionRecord, StoredEntry
from sessionkeep.session.store import BackendSessionStore
from sessionkeep.session.sweeper import ExpiredSessionSweeper, continuously_delete_expired

__all__ = [
    "BackendSessionStore",
    "ExpiredDeletion",
    "ExpiredSessionSweeper",
    "InMemorySessionBackend",
    "RecordCodec",
    "SessionBackend",
    "SessionId",
    "SessionRecord",
    "SessionStore",
    "StoredEntry",
    "continuously_delete_expired",
    "create_session_store",
    "open_session_store",
]
