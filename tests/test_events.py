from __future__ import annotations

from hidpanel.backends.base import HID_DATA_CHANNEL
from hidpanel.core.events import EventBridge
from hidpanel.core.model import LogCategory
from hidpanel.core.session_log import SessionLog


class PushBackend:
    def __init__(self) -> None:
        self.handlers: dict[str, list] = {}
        self.closed = 0

    def subscribe(self, channel, handler):
        self.handlers.setdefault(channel, []).append(handler)
        backend = self

        class _Handle:
            def close(self) -> None:
                backend.handlers[channel].remove(handler)
                backend.closed += 1

        return _Handle()

    def push(self, frame: bytes) -> None:
        for handler in list(self.handlers.get(HID_DATA_CHANNEL, [])):
            handler(frame)


def test_pushed_frame_is_logged_as_incoming_hex() -> None:
    backend = PushBackend()
    log = SessionLog()
    bridge = EventBridge(backend, log)
    bridge.start()

    backend.push(b"\x01\xab")

    assert len(log) == 1
    entry = log.entries[0]
    assert entry.category is LogCategory.INCOMING
    assert entry.message == "[ASYNC IN] 01 AB"


def test_restart_releases_previous_subscription() -> None:
    backend = PushBackend()
    log = SessionLog()
    bridge = EventBridge(backend, log)
    bridge.start()
    bridge.start()

    backend.push(b"\x10")

    assert backend.closed == 1
    assert len(backend.handlers[HID_DATA_CHANNEL]) == 1
    assert [e.message for e in log.entries] == ["[ASYNC IN] 10"]


def test_stop_detaches_from_channel() -> None:
    backend = PushBackend()
    log = SessionLog()
    bridge = EventBridge(backend, log)
    bridge.start()
    bridge.stop()
    bridge.stop()

    backend.push(b"\x10")
    assert not bridge.active
    assert backend.closed == 1
    assert len(log) == 0
