"""Core data models used across the session, backends, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from hidpanel.core.encoder import format_hex

VENDOR_CONTROL_USAGE_PAGE = 0xFF00


@dataclass(frozen=True)
class DeviceDescriptor:
    path: str
    vendor_id: str
    product_id: str
    product_string: str | None = None
    manufacturer_string: str | None = None
    usage_page: int = 0
    interface_number: int = -1

    @property
    def display_name(self) -> str:
        return self.product_string or "Generic HID Device"

    @property
    def is_vendor_control(self) -> bool:
        return self.usage_page == VENDOR_CONTROL_USAGE_PAGE


class LogCategory(str, Enum):
    INFO = "info"
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    category: LogCategory
    message: str

    def render(self) -> str:
        stamp = self.timestamp.strftime("%H:%M:%S.") + f"{self.timestamp.microsecond // 1000:03d}"
        return f"[{stamp}] {self.message}"


class DispatchState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    DISPATCHING = "dispatching"


@dataclass(frozen=True)
class DispatchResult:
    path: str
    frame: bytes
    response: bytes
    listener_started: bool

    @property
    def response_hex(self) -> str | None:
        return format_hex(self.response) if self.response else None
