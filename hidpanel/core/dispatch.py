"""Send-command state machine."""

from __future__ import annotations

import logging

from hidpanel.backends.base import Backend
from hidpanel.core.catalog import DeviceCatalog
from hidpanel.core.encoder import encode_command, format_hex
from hidpanel.core.errors import (
    CommandDispatchError,
    DispatchBusyError,
    InvalidCommandTextError,
    ListenerStartError,
    SelectionMissingError,
)
from hidpanel.core.listeners import ListenerRegistry
from hidpanel.core.model import DispatchResult, DispatchState, LogCategory
from hidpanel.core.session_log import SessionLog

LOGGER = logging.getLogger(__name__)


class DispatchController:
    """Ties a send request to listener start, the backend write and its outcome.

    States are ``IDLE`` (nothing selected), ``READY`` and ``DISPATCHING``. A
    second `send` while one is outstanding is rejected with
    `DispatchBusyError`. Every failure is logged before it is raised.
    """

    def __init__(
        self,
        backend: Backend,
        catalog: DeviceCatalog,
        listeners: ListenerRegistry,
        log: SessionLog,
    ) -> None:
        self._backend = backend
        self._catalog = catalog
        self._listeners = listeners
        self._log = log
        self._in_flight = False

    @property
    def state(self) -> DispatchState:
        if self._in_flight:
            return DispatchState.DISPATCHING
        if self._catalog.selected() is None:
            return DispatchState.IDLE
        return DispatchState.READY

    async def send(self, text: str) -> DispatchResult:
        device = self._catalog.selected()
        if device is None:
            self._log.append("Error: No device selected.", LogCategory.ERROR)
            raise SelectionMissingError("No device selected")

        try:
            frame = encode_command(text)
        except InvalidCommandTextError as exc:
            self._log.append(f"Error: {exc}", LogCategory.ERROR)
            raise

        if self._in_flight:
            self._log.append("Error: A command is already in flight.", LogCategory.ERROR)
            raise DispatchBusyError(f"A command to {device.path} is still outstanding")

        self._in_flight = True
        try:
            return await self._dispatch(device.path, frame)
        finally:
            self._in_flight = False

    async def _dispatch(self, path: str, frame: bytes) -> DispatchResult:
        self._log.append(f"[OUT] {format_hex(frame)}", LogCategory.OUTGOING)

        listener_started = False
        if not self._listeners.has_listener(path):
            self._log.append("[SYS] Starting background listener...", LogCategory.INFO)
            try:
                await self._backend.start_listening(path)
            except Exception as exc:
                self._log.append(f"Listener Failure: {exc}", LogCategory.ERROR)
                raise ListenerStartError(f"Could not start listener for {path}: {exc}") from exc
            self._listeners.mark_started(path)
            listener_started = True

        try:
            response = bytes(await self._backend.send_command(path, frame) or b"")
        except Exception as exc:
            self._log.append(f"Communication Failure: {exc}", LogCategory.ERROR)
            self._listeners.mark_failed(path)
            raise CommandDispatchError(f"Command to {path} failed: {exc}") from exc

        if response:
            self._log.append(f"[RESULT] {format_hex(response)}", LogCategory.INFO)
        else:
            LOGGER.debug("Empty response from %s", path)
        return DispatchResult(
            path=path,
            frame=frame,
            response=response,
            listener_started=listener_started,
        )
