"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer

from hidpanel.backends.hidapi import HidapiBackend
from hidpanel.core.config import load_config
from hidpanel.core.errors import HidpanelError
from hidpanel.core.model import DeviceDescriptor, LogCategory, LogEntry
from hidpanel.core.session import Session

app = typer.Typer(help="Interactive control panel for HID devices")

_PANEL_HELP = "Commands: scan | select N|PATH | send [HEX ...] | clear | log | quit"


def _build_session(config_path: Path | None, verbose: bool) -> Session:
    config = load_config(config_path)
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    backend = HidapiBackend(
        report_size=config.report_size,
        response_timeout_ms=config.response_timeout_ms,
        listen_poll_ms=config.listen_poll_ms,
    )
    return Session(backend, config=config)


def _describe(index: int, device: DeviceDescriptor, selected: bool) -> str:
    marker = "*" if selected else " "
    target = " [control]" if device.is_vendor_control else ""
    return (
        f"{marker}[{index}] {device.display_name}{target}  "
        f"UP: {device.usage_page} | VID: {device.vendor_id} | PID: {device.product_id} | "
        f"IF: {device.interface_number} | Path: {device.path}"
    )


def _echo_entry(entry: LogEntry) -> None:
    typer.echo(entry.render(), err=entry.category is LogCategory.ERROR)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Path to a config YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    ctx.obj = {"config": config, "verbose": verbose}


@app.command("devices")
def list_devices(ctx: typer.Context) -> None:
    """Scan the HID bus and list visible devices."""
    try:
        session = _build_session(ctx.obj["config"], ctx.obj["verbose"])
        devices = asyncio.run(session.scan())
        if not devices:
            typer.echo("No HID devices found")
            return
        for index, device in enumerate(devices, start=1):
            typer.echo(_describe(index, device, selected=False))
    except HidpanelError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("send")
def send_command(
    ctx: typer.Context,
    command: list[str] | None = typer.Argument(None, help="Hex bytes, e.g. 00 C0 0A 00 00"),
    device: str = typer.Option(..., "--device", help="Device path as shown by 'devices'"),
) -> None:
    """Send one hex command to a device and print the session log."""

    async def _run(session: Session) -> None:
        async with session:
            await session.scan()
            if session.select(device) is None:
                raise HidpanelError(f"No device found with path '{device}'")
            await session.send(" ".join(command) if command else None)

    session: Session | None = None
    try:
        session = _build_session(ctx.obj["config"], ctx.obj["verbose"])
        asyncio.run(_run(session))
    except HidpanelError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    finally:
        if session is not None:
            for entry in session.log.entries:
                if entry.category is not LogCategory.ERROR:
                    typer.echo(entry.render())


async def _handle_line(session: Session, line: str) -> bool:
    verb, _, rest = line.strip().partition(" ")
    rest = rest.strip()
    if verb in ("quit", "exit"):
        return False
    if verb == "scan":
        devices = await session.scan()
        for index, device in enumerate(devices, start=1):
            typer.echo(_describe(index, device, device.path == session.catalog.selected_path))
    elif verb == "select":
        path = rest
        if rest.isdigit() and 1 <= int(rest) <= len(session.catalog):
            path = session.catalog.devices[int(rest) - 1].path
        if session.select(path) is None:
            typer.echo(f"Error: No device '{rest}' in the last scan", err=True)
    elif verb == "send":
        await session.send(rest or None)
    elif verb == "clear":
        session.clear_log()
    elif verb == "log":
        for entry in session.log.entries:
            _echo_entry(entry)
    elif verb:
        typer.echo(_PANEL_HELP)
    return True


async def _panel(session: Session) -> None:
    session.log.add_listener(_echo_entry)
    async with session:
        typer.echo(_PANEL_HELP)
        while True:
            try:
                line = await asyncio.to_thread(input, "hidpanel> ")
            except EOFError:
                break
            try:
                if not await _handle_line(session, line):
                    break
            except HidpanelError:
                # Already reported through the session log.
                continue


@app.command("panel")
def panel(ctx: typer.Context) -> None:
    """Run the interactive control panel."""
    try:
        session = _build_session(ctx.obj["config"], ctx.obj["verbose"])
        asyncio.run(_panel(session))
    except HidpanelError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
