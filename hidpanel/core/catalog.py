"""Device catalog: the latest enumeration and the operator's selection."""

from __future__ import annotations

import logging

from hidpanel.backends.base import Backend
from hidpanel.core.errors import ScanError
from hidpanel.core.model import DeviceDescriptor

LOGGER = logging.getLogger(__name__)


class DeviceCatalog:
    def __init__(self, backend: Backend) -> None:
        self._backend = backend
        self._devices: tuple[DeviceDescriptor, ...] = ()
        self._selected_path: str | None = None

    @property
    def devices(self) -> tuple[DeviceDescriptor, ...]:
        return self._devices

    @property
    def selected_path(self) -> str | None:
        return self._selected_path

    def __len__(self) -> int:
        return len(self._devices)

    async def scan(self) -> int:
        """Replace the catalog with a fresh enumeration.

        On failure the current list and selection are left as they were and
        `ScanError` is raised. A selection whose path disappeared from the new
        enumeration is cleared.
        """
        try:
            found = tuple(await self._backend.scan_devices())
        except Exception as exc:
            raise ScanError(str(exc)) from exc

        paths = [device.path for device in found]
        if len(set(paths)) != len(paths):
            raise ScanError("Backend returned duplicate device paths")

        self._devices = found
        if self._selected_path is not None and self._selected_path not in paths:
            LOGGER.info("Selected device %s vanished on rescan", self._selected_path)
            self._selected_path = None
        return len(found)

    def find(self, path: str) -> DeviceDescriptor | None:
        for device in self._devices:
            if device.path == path:
                return device
        return None

    def select(self, path: str) -> DeviceDescriptor | None:
        device = self.find(path)
        if device is not None:
            self._selected_path = path
        return device

    def selected(self) -> DeviceDescriptor | None:
        if self._selected_path is None:
            return None
        return self.find(self._selected_path)

    def clear_selection(self) -> None:
        self._selected_path = None
