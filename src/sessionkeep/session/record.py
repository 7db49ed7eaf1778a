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
"""Session data model: identifiers, records, and their stored form."""

from __future__ import annotations

import base64
import re
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any

_ID_BYTES = 16
_ID_RE = re.compile(r"[A-Za-z0-9_-]{22}")


@dataclass(frozen=True, slots=True)
class SessionId:
    """Opaque 128-bit session identifier.

    Rendered as unpadded URL-safe base64 of its little-endian bytes, which is
    also the form used as the backend key. Ids are generated by the caller;
    the store only draws new ones to resolve a collision in ``create``.
    """

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < 1 << (8 * _ID_BYTES):
            raise ValueError(f"Session id out of 128-bit range: {self.value}")

    @classmethod
    def generate(cls) -> SessionId:
        return cls(secrets.randbits(8 * _ID_BYTES))

    @classmethod
    def parse(cls, text: str) -> SessionId:
        """Parse the string form produced by ``str(session_id)``."""
        if not _ID_RE.fullmatch(text):
            raise ValueError(f"Invalid session id: {text!r}")
        parsed = cls(int.from_bytes(base64.urlsafe_b64decode(text + "=="), "little"))
        # the last character carries 4 unused bits; only the canonical form is accepted
        if str(parsed) != text:
            raise ValueError(f"Invalid session id: {text!r}")
        return parsed

    def __str__(self) -> str:
        raw = self.value.to_bytes(_ID_BYTES, "little")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    def __repr__(self) -> str:
        return f"SessionId({str(self)!r})"


@dataclass
class SessionRecord:
    """A session as the session-management layer sees it.

    ``data`` maps string keys to serializable values; ``expiry_date`` must be
    timezone-aware. Two records are equal when id, data and expiry instant match.
    """

    id: SessionId
    data: dict[str, Any]
    expiry_date: datetime


@dataclass(frozen=True, slots=True)
class StoredEntry:
    """Backend-facing form of a record: encoded payload plus queryable expiry.

    ``expiry_date`` is whole seconds since the Unix epoch and always matches
    the expiry embedded in ``data``. Backends index and filter on it; the
    payload stays the single source of truth for record contents.
    """

    data: bytes
    expiry_date: int
