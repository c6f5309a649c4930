"""Backend interfaces."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from hidpanel.core.model import DeviceDescriptor

HID_DATA_CHANNEL = "hid-data"

FrameHandler = Callable[[bytes], None]


class Subscription(Protocol):
    def close(self) -> None:
        """Stop delivering events to the subscribed handler."""


class Backend(Protocol):
    async def scan_devices(self) -> Sequence[DeviceDescriptor]:
        """Enumerate the devices currently visible to the backend."""

    async def start_listening(self, path: str) -> None:
        """Start the asynchronous reader for ``path``. Idempotent."""

    async def send_command(self, path: str, data: bytes) -> bytes:
        """Write ``data`` to the device and return any response bytes."""

    def subscribe(self, channel: str, handler: FrameHandler) -> Subscription:
        """Deliver frames pushed on ``channel`` to ``handler``."""
