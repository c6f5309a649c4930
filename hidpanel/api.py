"""Public entry points for embedding hidpanel in other tools.

Frontends (GUIs, scripts, test rigs) should import from here; the `core` and
`backends` modules may change shape between releases.
"""

from __future__ import annotations

from hidpanel.backends.base import HID_DATA_CHANNEL, Backend, Subscription
from hidpanel.backends.hidapi import HidapiBackend
from hidpanel.core.config import PanelConfig, load_config
from hidpanel.core.encoder import encode_command, format_hex
from hidpanel.core.errors import (
    BackendError,
    CommandDispatchError,
    ConfigError,
    DispatchBusyError,
    EmptyCommandError,
    HidpanelError,
    InvalidCommandTextError,
    ListenerStartError,
    ScanError,
    SelectionMissingError,
)
from hidpanel.core.model import (
    DeviceDescriptor,
    DispatchResult,
    DispatchState,
    LogCategory,
    LogEntry,
)
from hidpanel.core.session import Session

__all__ = [
    "HidpanelError",
    "BackendError",
    "CommandDispatchError",
    "ConfigError",
    "DispatchBusyError",
    "EmptyCommandError",
    "InvalidCommandTextError",
    "ListenerStartError",
    "ScanError",
    "SelectionMissingError",
    "DeviceDescriptor",
    "DispatchResult",
    "DispatchState",
    "LogCategory",
    "LogEntry",
    "PanelConfig",
    "HID_DATA_CHANNEL",
    "Backend",
    "Subscription",
    "HidapiBackend",
    "Session",
    "encode_command",
    "format_hex",
    "open_session",
]


def open_session(
    *,
    backend: Backend | None = None,
    config: PanelConfig | None = None,
) -> Session:
    """Build a session wired to ``backend`` or to a hidapi backend from config.

    The returned session is not started; use it as an async context manager
    or call `Session.start` before sending.
    """
    config = config or load_config()
    if backend is None:
        backend = HidapiBackend(
            report_size=config.report_size,
            response_timeout_ms=config.response_timeout_ms,
            listen_poll_ms=config.listen_poll_ms,
        )
    return Session(backend, config=config)
