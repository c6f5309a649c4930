from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from hidpanel.api import HidapiBackend, PanelConfig, Session, open_session
from hidpanel.core.model import DeviceDescriptor


class FakeBackend:
    async def scan_devices(self):
        return [DeviceDescriptor(path="dev-1", vendor_id="0x0001", product_id="0x0002")]

    async def start_listening(self, path: str) -> None:
        return None

    async def send_command(self, path: str, data: bytes) -> bytes:
        return bytes(reversed(data))

    def subscribe(self, channel, handler):
        class _Handle:
            def close(self) -> None:
                return None

        return _Handle()


def test_open_session_with_custom_backend() -> None:
    session = open_session(backend=FakeBackend(), config=PanelConfig())
    assert isinstance(session, Session)

    async def scenario():
        async with session:
            await session.scan()
            session.select("dev-1")
            return await session.send("01 02")

    result = asyncio.run(scenario())
    assert result.response_hex == "02 01"


def test_open_session_builds_hidapi_backend_from_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    session = open_session(config=PanelConfig(report_size=32, response_timeout_ms=500))
    assert isinstance(session.backend, HidapiBackend)
    assert session.backend.report_size == 32
    assert session.backend.response_timeout_ms == 500
