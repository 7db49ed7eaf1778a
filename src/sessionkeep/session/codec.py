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
"""Record codec — converts session records to and from their stored form.

The payload is a BSON document holding the whole record, id included, so a
blob can be verified without knowing the key it was stored under::

    {"v": 1, "id": "<session id>", "data": {...}, "expiry_date": <µs since epoch>}

The expiry is copied next to the payload as whole epoch seconds so backends
can filter on it without decoding anything.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError

from sessionkeep.kernel.exceptions import DecodeError, EncodeError
from sessionkeep.session.record import SessionId, SessionRecord, StoredEntry

FORMAT_VERSION = 1

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MICROSECOND = timedelta(microseconds=1)

_CODEC_OPTIONS: CodecOptions = CodecOptions(tz_aware=True, tzinfo=UTC)


def to_unix_micros(moment: datetime) -> int:
    return (moment - EPOCH) // _MICROSECOND


def to_unix_seconds(moment: datetime) -> int:
    """Whole seconds since the epoch, floored."""
    return to_unix_micros(moment) // 1_000_000


def _is_integer(value: Any) -> bool:
    # BSON hands 64-bit values back as bson.int64.Int64, an int subclass.
    return isinstance(value, int) and not isinstance(value, bool)


def _canonical(value: Any, path: str) -> Any:
    """Copy *value* with mapping keys in sorted order so payloads are deterministic."""
    if isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise EncodeError(
                    f"Session data key {key!r} at '{path}' is not a string",
                    context={"path": path},
                )
        return {key: _canonical(value[key], f"{path}.{key}") for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [_canonical(item, f"{path}[{i}]") for i, item in enumerate(value)]
    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise EncodeError(f"Session datetime at '{path}' must be timezone-aware", context={"path": path})
        if value.microsecond % 1000:
            raise EncodeError(
                f"Session datetime at '{path}' has sub-millisecond precision",
                context={"path": path},
            )
    return value


class RecordCodec:
    """Encodes :class:`SessionRecord` to :class:`StoredEntry` and back.

    Supported data values: ``None``, ``bool``, 64-bit ``int``, ``float``,
    ``str``, ``bytes``, timezone-aware ``datetime`` with whole milliseconds,
    and lists, tuples or string-keyed mappings of those. Tuples come back
    as lists.
    """

    def encode(self, record: SessionRecord) -> StoredEntry:
        """Serialize *record*; raises :class:`EncodeError` for unsupported data."""
        session_id = str(record.id)
        if record.expiry_date.tzinfo is None:
            raise EncodeError(
                "Session expiry_date must be timezone-aware",
                context={"session_id": session_id},
            )

        micros = to_unix_micros(record.expiry_date)
        document = {
            "v": FORMAT_VERSION,
            "id": session_id,
            "data": _canonical(record.data, "data"),
            "expiry_date": micros,
        }
        try:
            payload = bson.encode(document, codec_options=_CODEC_OPTIONS)
        except (BSONError, OverflowError, TypeError, ValueError) as exc:
            raise EncodeError(
                f"Session data is not serializable: {exc}",
                context={"session_id": session_id},
            ) from exc

        return StoredEntry(data=payload, expiry_date=micros // 1_000_000)

    def decode(self, entry: StoredEntry, expected_id: SessionId | None = None) -> SessionRecord:
        """Deserialize *entry*; raises :class:`DecodeError` if the payload is corrupt.

        With *expected_id*, the id embedded in the payload and the embedded
        expiry are cross-checked against the key and ``entry.expiry_date``.
        """
        context = {"session_id": str(expected_id)} if expected_id is not None else {}
        try:
            document = bson.decode(bytes(entry.data), codec_options=_CODEC_OPTIONS)
        except (BSONError, TypeError, ValueError, IndexError) as exc:
            raise DecodeError(f"Session payload does not parse: {exc}", context=context) from exc

        version = document.get("v")
        if not _is_integer(version) or version != FORMAT_VERSION:
            raise DecodeError(f"Unknown session payload version: {version!r}", context=context)

        raw_id = document.get("id")
        data = document.get("data")
        micros = document.get("expiry_date")
        if not isinstance(raw_id, str) or not isinstance(data, dict) or not _is_integer(micros):
            raise DecodeError("Session payload is missing required fields", context=context)

        try:
            session_id = SessionId.parse(raw_id)
            micros = int(micros)
            expiry_date = EPOCH + timedelta(microseconds=micros)
        except (ValueError, OverflowError) as exc:
            raise DecodeError(f"Session payload holds invalid values: {exc}", context=context) from exc

        if expected_id is not None:
            if session_id != expected_id:
                raise DecodeError(
                    f"Session payload id {raw_id!r} does not match key {str(expected_id)!r}",
                    context=context,
                )
            if micros // 1_000_000 != entry.expiry_date:
                raise DecodeError(
                    "Session payload expiry does not match stored expiry_date",
                    context={**context, "expiry_date": entry.expiry_date},
                )

        return SessionRecord(id=session_id, data=data, expiry_date=expiry_date)
