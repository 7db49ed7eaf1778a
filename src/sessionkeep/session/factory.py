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
"""Build a session store from configuration."""

from __future__ import annotations

import importlib
import logging

from sessionkeep.config.properties.session import SessionStoreProperties
from sessionkeep.core.config import Config
from sessionkeep.session.store import BackendSessionStore

logger = logging.getLogger(__name__)

_DRIVERS: dict[str, tuple[str, str]] = {
    "sqlalchemy": ("sqlalchemy.ext.asyncio", "sessionkeep[sqlalchemy]"),
    "mongodb": ("motor.motor_asyncio", "sessionkeep[mongodb]"),
}


def is_available(module_name: str) -> bool:
    """Check if a Python package is importable."""
    try:
        importlib.import_module(module_name)
        return True
    except ImportError:
        return False


def _require_driver(backend: str) -> None:
    module_name, extra = _DRIVERS[backend]
    if not is_available(module_name):
        raise ImportError(
            f"The '{backend}' session backend requires {module_name.split('.')[0]}. "
            f"Install with: pip install '{extra}'"
        )


def create_session_store(config: Config) -> BackendSessionStore:
    """Create a store for the backend named in ``sessionkeep.session.backend``.

    Precedence for all fields: env vars > config file > package defaults.
    """
    props = config.bind(SessionStoreProperties)
    backend_type = props.backend.strip().lower()

    if backend_type == "memory":
        from sessionkeep.session.adapters.memory import InMemorySessionBackend

        backend = InMemorySessionBackend()

    elif backend_type == "sqlalchemy":
        url = str(config.get("sessionkeep.session.sqlalchemy.url") or "").strip()
        if not url:
            raise ValueError(
                "The sqlalchemy session backend requires a URL. "
                "Set sessionkeep.session.sqlalchemy.url or SESSIONKEEP_SESSION_SQLALCHEMY_URL."
            )
        _require_driver("sqlalchemy")
        from sqlalchemy.ext.asyncio import create_async_engine

        from sessionkeep.session.adapters.sqlalchemy import SqlAlchemySessionBackend

        echo = str(config.get("sessionkeep.session.sqlalchemy.echo", False)).lower() in ("true", "1", "yes")
        backend = SqlAlchemySessionBackend(create_async_engine(url, echo=echo))

    elif backend_type == "mongodb":
        uri = str(config.get("sessionkeep.session.mongodb.uri") or "").strip()
        if not uri:
            raise ValueError(
                "The mongodb session backend requires a URI. "
                "Set sessionkeep.session.mongodb.uri or SESSIONKEEP_SESSION_MONGODB_URI."
            )
        _require_driver("mongodb")
        from motor.motor_asyncio import AsyncIOMotorClient

        from sessionkeep.session.adapters.mongodb import MongoSessionBackend

        database = str(config.get("sessionkeep.session.mongodb.database", "sessionkeep"))
        backend = MongoSessionBackend(AsyncIOMotorClient(uri)[database])

    else:
        raise ValueError(
            f"Unknown session backend '{props.backend}'. Expected one of: memory, sqlalchemy, mongodb."
        )

    logger.debug("Created %s session store on table '%s'", backend_type, props.table)
    return BackendSessionStore(
        backend,
        props.table,
        max_create_attempts=props.max_create_attempts,
        strict_id_check=props.strict_id_check,
    )


async def open_session_store(config: Config) -> BackendSessionStore:
    """Like :func:`create_session_store`, then create the table/index if missing."""
    store = create_session_store(config)
    backend = store.backend
    if hasattr(backend, "ensure_table"):
        await backend.ensure_table(store.table)
    elif hasattr(backend, "ensure_indexes"):
        await backend.ensure_indexes(store.table)
    return store


async def close_session_store(store: BackendSessionStore) -> None:
    """Release the backend's connections, if it holds any."""
    close = getattr(store.backend, "close", None)
    if close is not None:
        await close()
