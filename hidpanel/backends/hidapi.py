"""HID backend implementation on top of the hidapi bindings."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from hidpanel.backends.base import HID_DATA_CHANNEL, FrameHandler
from hidpanel.core.errors import BackendError
from hidpanel.core.model import DeviceDescriptor

LOGGER = logging.getLogger(__name__)

_GENERIC_DESKTOP_USAGE_PAGE = 0x0001
_PAUSED_SLEEP_S = 0.05


def _hid() -> Any:
    try:
        import hid  # type: ignore
    except Exception as exc:  # pragma: no cover - import failure path
        raise BackendError(
            "HID backend requires 'hidapi'. Install dependency and retry."
        ) from exc
    return hid


def descriptor_from_info(info: dict[str, Any]) -> DeviceDescriptor:
    raw_path = info.get("path") or b""
    path = raw_path.decode("utf-8", errors="replace") if isinstance(raw_path, bytes) else str(raw_path)
    return DeviceDescriptor(
        path=path,
        vendor_id=f"{info.get('vendor_id', 0):#06x}",
        product_id=f"{info.get('product_id', 0):#06x}",
        product_string=info.get("product_string") or None,
        manufacturer_string=info.get("manufacturer_string") or None,
        usage_page=int(info.get("usage_page", 0)),
        interface_number=int(info.get("interface_number", -1)),
    )


def build_write_buffer(data: bytes, report_size: int) -> bytes:
    """Lay out ``data`` as one output report with a leading report id.

    A frame that already starts with report id ``0x00`` is copied as is;
    otherwise ``0x00`` is prepended. The buffer is always ``report_size + 1``
    bytes, zero padded and truncated to fit.
    """
    buffer = bytearray(report_size + 1)
    if data and data[0] == 0x00:
        chunk = data[: report_size + 1]
        buffer[: len(chunk)] = chunk
    else:
        chunk = data[:report_size]
        buffer[1 : len(chunk) + 1] = chunk
    return bytes(buffer)


class _Subscription:
    def __init__(self, handlers: list[FrameHandler], handler: FrameHandler) -> None:
        self._handlers = handlers
        self._handler = handler

    def close(self) -> None:
        if self._handler in self._handlers:
            self._handlers.remove(self._handler)


@dataclass
class _ManagedDevice:
    handle: Any
    lock: threading.Lock = field(default_factory=threading.Lock)
    paused: threading.Event = field(default_factory=threading.Event)
    stop: threading.Event = field(default_factory=threading.Event)
    thread: threading.Thread | None = None


class HidapiBackend:
    def __init__(
        self,
        *,
        report_size: int = 64,
        response_timeout_ms: int = 1000,
        listen_poll_ms: int = 100,
    ) -> None:
        self.report_size = report_size
        self.response_timeout_ms = response_timeout_ms
        self.listen_poll_ms = listen_poll_ms
        self._raw_paths: dict[str, bytes] = {}
        self._managed: dict[str, _ManagedDevice] = {}
        self._managed_lock = threading.Lock()
        self._handlers: dict[str, list[FrameHandler]] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    async def scan_devices(self) -> Sequence[DeviceDescriptor]:
        hid = _hid()
        try:
            infos = await asyncio.to_thread(hid.enumerate)
        except (OSError, ValueError) as exc:
            raise BackendError(f"HID enumeration failed: {exc}") from exc

        devices: list[DeviceDescriptor] = []
        for info in infos:
            # macOS owns generic desktop interfaces exclusively.
            if sys.platform == "darwin" and info.get("usage_page") == _GENERIC_DESKTOP_USAGE_PAGE:
                continue
            device = descriptor_from_info(info)
            raw_path = info.get("path")
            if isinstance(raw_path, bytes):
                self._raw_paths[device.path] = raw_path
            devices.append(device)
        return devices

    def subscribe(self, channel: str, handler: FrameHandler) -> _Subscription:
        handlers = self._handlers.setdefault(channel, [])
        handlers.append(handler)
        return _Subscription(handlers, handler)

    async def start_listening(self, path: str) -> None:
        self._loop = asyncio.get_running_loop()
        with self._managed_lock:
            if path in self._managed:
                return

        handle = await asyncio.to_thread(self._open, path)
        managed = _ManagedDevice(handle=handle)
        with self._managed_lock:
            if path in self._managed:
                handle.close()
                return
            self._managed[path] = managed
        managed.thread = threading.Thread(
            target=self._read_loop,
            args=(path, managed),
            name=f"hidpanel-reader-{path}",
            daemon=True,
        )
        managed.thread.start()
        LOGGER.info("Started listener for %s", path)

    async def stop_listening(self, path: str) -> None:
        with self._managed_lock:
            managed = self._managed.get(path)
        if managed is None:
            return
        managed.stop.set()
        if managed.thread is not None:
            await asyncio.to_thread(managed.thread.join, 1.0)

    async def send_command(self, path: str, data: bytes) -> bytes:
        with self._managed_lock:
            managed = self._managed.get(path)
        if managed is None:
            raise BackendError(f"Device {path} is not listening; start the listener first")

        managed.paused.set()
        try:
            return await asyncio.to_thread(self._write_and_read, managed, bytes(data))
        finally:
            managed.paused.clear()

    def _open(self, path: str) -> Any:
        hid = _hid()
        raw_path = self._raw_paths.get(path, path.encode("utf-8"))
        handle = hid.device()
        try:
            handle.open_path(raw_path)
        except (OSError, ValueError) as exc:
            raise BackendError(f"Could not open {path}: {exc}") from exc
        return handle

    def _write_and_read(self, managed: _ManagedDevice, data: bytes) -> bytes:
        buffer = build_write_buffer(data, self.report_size)
        with managed.lock:
            try:
                managed.handle.write(buffer)
            except (OSError, ValueError) as exc:
                raise BackendError(f"Write failed: {exc}") from exc
            try:
                response = managed.handle.read(self.report_size, self.response_timeout_ms)
            except (OSError, ValueError) as exc:
                raise BackendError(f"Read failed: {exc}") from exc
        return bytes(response or b"")

    def _read_loop(self, path: str, managed: _ManagedDevice) -> None:
        try:
            while not managed.stop.is_set():
                if managed.paused.is_set():
                    managed.stop.wait(_PAUSED_SLEEP_S)
                    continue
                with managed.lock:
                    try:
                        data = managed.handle.read(self.report_size, self.listen_poll_ms)
                    except (OSError, ValueError) as exc:
                        LOGGER.warning("Listener for %s stopped: %s", path, exc)
                        break
                if data:
                    self._emit(HID_DATA_CHANNEL, bytes(data))
        finally:
            with self._managed_lock:
                self._managed.pop(path, None)
            managed.handle.close()

    def _emit(self, channel: str, frame: bytes) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._deliver, channel, frame)

    def _deliver(self, channel: str, frame: bytes) -> None:
        for handler in list(self._handlers.get(channel, ())):
            handler(frame)
