from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from hidpanel import cli
from hidpanel.core.errors import BackendError
from hidpanel.core.model import DeviceDescriptor


class FakeBackend:
    def __init__(self, **kwargs) -> None:
        self.options = kwargs
        self.handlers: list = []

    async def scan_devices(self):
        return [
            DeviceDescriptor(
                path="dev-1",
                vendor_id="0x2dbf",
                product_id="0x0a01",
                product_string="Keystone",
                usage_page=0xFF00,
                interface_number=1,
            )
        ]

    async def start_listening(self, path: str) -> None:
        return None

    async def send_command(self, path: str, data: bytes) -> bytes:
        return b"\xaa"

    def subscribe(self, channel, handler):
        self.handlers.append(handler)
        handlers = self.handlers

        class _Handle:
            def close(self) -> None:
                handlers.remove(handler)

        return _Handle()


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setattr(cli, "HidapiBackend", FakeBackend)


def test_devices_command() -> None:
    result = runner.invoke(cli.app, ["devices"])
    assert result.exit_code == 0
    assert "Keystone [control]" in result.stdout
    assert "VID: 0x2dbf" in result.stdout
    assert "Path: dev-1" in result.stdout


def test_devices_scan_error_is_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    class BrokenBackend(FakeBackend):
        async def scan_devices(self):
            raise BackendError("hidapi init failed")

    monkeypatch.setattr(cli, "HidapiBackend", BrokenBackend)
    result = runner.invoke(cli.app, ["devices"])
    assert result.exit_code == 1
    assert "Error: hidapi init failed" in result.stderr
    assert "Traceback" not in result.stderr


def test_send_command_prints_log() -> None:
    result = runner.invoke(cli.app, ["send", "01", "02", "--device", "dev-1"])
    assert result.exit_code == 0
    assert "[OUT] 01 02" in result.stdout
    assert "[RESULT] AA" in result.stdout


def test_send_invalid_hex_is_clean() -> None:
    result = runner.invoke(cli.app, ["send", "ZZ", "--device", "dev-1"])
    assert result.exit_code == 1
    assert "Error: Token 1 'ZZ'" in result.stderr
    assert "Traceback" not in result.stderr


def test_send_unknown_device() -> None:
    result = runner.invoke(cli.app, ["send", "01", "--device", "dev-9"])
    assert result.exit_code == 1
    assert "No device found with path 'dev-9'" in result.stderr


def test_send_uses_config_default_command(tmp_path: Path) -> None:
    config = tmp_path / "panel.yaml"
    config.write_text('default_command: "7F"\n', encoding="utf-8")
    result = runner.invoke(cli.app, ["--config", str(config), "send", "--device", "dev-1"])
    assert result.exit_code == 0
    assert "[OUT] 7F" in result.stdout


def test_invalid_config_is_reported(tmp_path: Path) -> None:
    config = tmp_path / "panel.yaml"
    config.write_text("report_size: -1\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["--config", str(config), "devices"])
    assert result.exit_code == 1
    assert "Schema validation failed" in result.stderr


def test_panel_session() -> None:
    result = runner.invoke(cli.app, ["panel"], input="scan\nselect 1\nsend 01 02\nquit\n")
    assert result.exit_code == 0
    assert "Found 1 devices." in result.stdout
    assert "Device selected. Interface: 1" in result.stdout
    assert "[RESULT] AA" in result.stdout
