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
"""Shared Rich console for CLI output."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from sessionkeep.session.record import SessionRecord

SESSIONKEEP_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "brand": "bold magenta",
    "dim": "dim",
})

console = Console(theme=SESSIONKEEP_THEME)


def print_banner() -> None:
    from sessionkeep import __version__

    console.print(f"[brand]sessionkeep[/brand] [dim](v{__version__})[/dim]")
    console.print("  [dim]Copyright 2026 Firefly Software Solutions Inc. | Apache 2.0 License[/dim]\n")


def print_record(record: SessionRecord) -> None:
    """Print a session record as a key/value table."""
    table = Table(title=f"[brand]Session {record.id}[/brand]", border_style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key in sorted(record.data):
        table.add_row(key, repr(record.data[key]))
    console.print(table)
    console.print(f"  [dim]expires[/dim] {record.expiry_date.isoformat()}")
