"""Session object used by the CLI and any other frontend."""

from __future__ import annotations

import logging

from hidpanel.backends.base import Backend
from hidpanel.core.catalog import DeviceCatalog
from hidpanel.core.config import PanelConfig
from hidpanel.core.dispatch import DispatchController
from hidpanel.core.errors import BackendError, ScanError
from hidpanel.core.events import EventBridge
from hidpanel.core.listeners import ListenerRegistry
from hidpanel.core.model import DeviceDescriptor, DispatchResult, DispatchState, LogCategory
from hidpanel.core.session_log import SessionLog

LOGGER = logging.getLogger(__name__)


class Session:
    """Owns all per-session state and hands it to the components explicitly."""

    def __init__(self, backend: Backend, *, config: PanelConfig | None = None) -> None:
        self.config = config or PanelConfig()
        self.backend = backend
        self.log = SessionLog(max_entries=self.config.log_max_entries)
        self.catalog = DeviceCatalog(backend)
        self.listeners = ListenerRegistry()
        self.bridge = EventBridge(backend, self.log)
        self.controller = DispatchController(backend, self.catalog, self.listeners, self.log)

    async def __aenter__(self) -> Session:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def state(self) -> DispatchState:
        return self.controller.state

    def start(self) -> None:
        self.bridge.start()

    async def close(self) -> None:
        self.bridge.stop()
        stop_listening = getattr(self.backend, "stop_listening", None)
        if stop_listening is None:
            self.listeners.clear()
            return
        for path in self.listeners.active_paths():
            try:
                await stop_listening(path)
            except BackendError as exc:
                LOGGER.warning("Could not stop listener for %s: %s", path, exc)
        self.listeners.clear()

    async def scan(self) -> tuple[DeviceDescriptor, ...]:
        self.log.append("Scanning HID bus...", LogCategory.INFO)
        try:
            count = await self.catalog.scan()
        except ScanError as exc:
            self.log.append(f"Scan Error: {exc}", LogCategory.ERROR)
            raise
        self.log.append(f"Found {count} devices.", LogCategory.INFO)
        return self.catalog.devices

    def select(self, path: str) -> DeviceDescriptor | None:
        device = self.catalog.select(path)
        if device is not None:
            self.log.append(f"Device selected. Interface: {device.interface_number}", LogCategory.INFO)
        return device

    async def send(self, text: str | None = None) -> DispatchResult:
        if text is None:
            text = self.config.default_command
        return await self.controller.send(text)

    def clear_log(self) -> None:
        self.log.clear()
