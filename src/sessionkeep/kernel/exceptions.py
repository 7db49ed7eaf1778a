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
"""Unified exception hierarchy for sessionkeep.

All library exceptions inherit from SessionKeepException so callers can catch
every store failure in one place, or a specific subclass for targeted handling.

Categories:
- DataIntegrityException: a session record could not be encoded or decoded
- ConflictException: an operation conflicts with what is already stored
- InfrastructureException: the storage backend failed or rejected a call

A missing session is never an exception; operations report it as ``None``.
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class SessionKeepException(Exception):
    """Base exception for all sessionkeep errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_DECODE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    default_code: str | None = None

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Data Integrity Exceptions
# =============================================================================


class DataIntegrityException(SessionKeepException):
    """Stored or supplied data violates the session record format."""


class CodecException(DataIntegrityException):
    """Base class for record codec failures."""


class EncodeError(CodecException):
    """A session record holds a value that cannot be serialized.

    Raised before any backend call is made, so no partial write occurs.
    """

    default_code = "SESSION_ENCODE"


class DecodeError(CodecException):
    """A stored payload is truncated, carries an unknown tag, or does not parse.

    The store never repairs or removes the offending entry.
    """

    default_code = "SESSION_DECODE"


# =============================================================================
# Conflict Exceptions
# =============================================================================


class ConflictException(SessionKeepException):
    """Operation conflicts with current state."""


class IdCollisionError(ConflictException):
    """``create`` could not find a free session id within its attempt budget."""

    default_code = "SESSION_ID_COLLISION"


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(SessionKeepException):
    """Infrastructure failures: database, network, driver."""


class BackendError(InfrastructureException):
    """The storage backend failed: transport, query, or backend-reported error.

    Always propagated to the caller and never retried by the store. The
    backend's own message is kept as the error message and the original
    exception is chained as ``__cause__``.
    """

    default_code = "SESSION_BACKEND"
