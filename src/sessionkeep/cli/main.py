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
"""sessionkeep CLI — inspect sessions and run the expired-session sweep."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Awaitable, Callable
from datetime import timedelta
from pathlib import Path
from typing import TypeVar

import click

from sessionkeep.cli.console import console, print_banner, print_record
from sessionkeep.config.properties.session import SessionStoreProperties
from sessionkeep.core.config import Config
from sessionkeep.kernel.exceptions import SessionKeepException
from sessionkeep.logging.structlog_adapter import StructlogAdapter
from sessionkeep.session.factory import close_session_store, open_session_store
from sessionkeep.session.record import SessionId
from sessionkeep.session.store import BackendSessionStore
from sessionkeep.session.sweeper import ExpiredSessionSweeper

T = TypeVar("T")

_logging = StructlogAdapter()
_log = _logging.get_logger(__name__)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML or TOML config file layered over the package defaults.",
)


class SessionKeepCLI(click.Group):
    """Click group that shows the banner on help."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        print_banner()
        super().format_help(ctx, formatter)


@click.group(cls=SessionKeepCLI)
@click.version_option(package_name="sessionkeep")
def cli() -> None:
    """sessionkeep — session store maintenance."""


def _load_config(config_path: Path | None) -> Config:
    if config_path is not None and not config_path.is_file():
        raise click.BadParameter(f"{config_path} does not exist", param_hint="--config")
    config = Config.from_file(config_path)
    _logging.configure(config)
    return config


def _parse_id(text: str) -> SessionId:
    try:
        return SessionId.parse(text)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="SESSION_ID") from exc


def _run_with_store(config: Config, action: Callable[[BackendSessionStore], Awaitable[T]]) -> T:
    async def _main() -> T:
        store = await open_session_store(config)
        try:
            return await action(store)
        finally:
            await close_session_store(store)

    try:
        return asyncio.run(_main())
    except SessionKeepException as exc:
        console.print(f"[error]✗ {type(exc).__name__}: {exc}[/error]")
        raise SystemExit(1) from None
    except (ImportError, ValueError) as exc:
        console.print(f"[error]✗ {exc}[/error]")
        raise SystemExit(1) from None


@cli.command("sweep")
@_config_option
@click.option("--interval", type=float, default=None, help="Seconds between sweeps (default from config).")
@click.option("--once", is_flag=True, help="Run a single sweep and exit.")
def sweep_command(config_path: Path | None, interval: float | None, once: bool) -> None:
    """Delete expired sessions, once or repeatedly until interrupted."""
    config = _load_config(config_path)

    async def _sweep(store: BackendSessionStore) -> int:
        if once:
            return await store.delete_expired()

        period = interval if interval is not None else config.bind(SessionStoreProperties).sweep_interval
        sweeper = ExpiredSessionSweeper(store, timedelta(seconds=period))
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop.set)
        console.print(f"[info]Sweeping table '{store.table}' every {period:g}s (Ctrl+C to stop)[/info]")
        _log.info("sweeper.started", table=store.table, period=period)
        await sweeper.run(stop)
        _log.info("sweeper.stopped", table=store.table, sweeps=sweeper.sweeps)
        return sweeper.sweeps

    result = _run_with_store(config, _sweep)
    if once:
        console.print(f"[success]✓ Deleted {result} expired session(s)[/success]")
    else:
        console.print(f"[success]✓ Stopped after {result} sweep(s)[/success]")


@cli.command("show")
@click.argument("session_id")
@_config_option
def show_command(session_id: str, config_path: Path | None) -> None:
    """Print the stored session SESSION_ID."""
    sid = _parse_id(session_id)
    config = _load_config(config_path)
    record = _run_with_store(config, lambda store: store.load(sid))
    if record is None:
        console.print(f"[warning]Session {sid} not found or expired[/warning]")
        raise SystemExit(1)
    print_record(record)


@cli.command("delete")
@click.argument("session_id")
@_config_option
def delete_command(session_id: str, config_path: Path | None) -> None:
    """Delete the stored session SESSION_ID."""
    sid = _parse_id(session_id)
    config = _load_config(config_path)
    _run_with_store(config, lambda store: store.delete(sid))
    console.print(f"[success]✓ Deleted session {sid}[/success]")
