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
"""Session backends — concrete SessionBackend implementations.

Only the in-memory backend is imported eagerly; the others need optional
drivers::

    from sessionkeep.session.adapters.sqlalchemy import SqlAlchemySessionBackend
    from sessionkeep.session.adapters.mongodb import MongoSessionBackend
"""

from sessionkeep.session.adapters.memory import InMemorySessionBackend

__all__ = ["InMemorySessionBackend"]
