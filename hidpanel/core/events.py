"""Bridge from the backend push channel to the session log."""

from __future__ import annotations

import logging

from hidpanel.backends.base import HID_DATA_CHANNEL, Backend, Subscription
from hidpanel.core.encoder import format_hex
from hidpanel.core.model import LogCategory
from hidpanel.core.session_log import SessionLog

LOGGER = logging.getLogger(__name__)


class EventBridge:
    """Owns the single subscription to inbound device data.

    `start` always releases the previous subscription before taking a new
    one, so a pushed frame reaches the log once.
    """

    def __init__(self, backend: Backend, log: SessionLog, *, channel: str = HID_DATA_CHANNEL) -> None:
        self._backend = backend
        self._log = log
        self._channel = channel
        self._subscription: Subscription | None = None

    @property
    def active(self) -> bool:
        return self._subscription is not None

    def start(self) -> None:
        self.stop()
        self._subscription = self._backend.subscribe(self._channel, self._on_frame)
        LOGGER.debug("Subscribed to backend channel %s", self._channel)

    def stop(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.close()
            LOGGER.debug("Released backend channel %s", self._channel)

    def _on_frame(self, frame: bytes) -> None:
        self._log.append(f"[ASYNC IN] {format_hex(frame)}", LogCategory.INCOMING)
