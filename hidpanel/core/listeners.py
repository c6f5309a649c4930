"""Client-side bookkeeping of backend read listeners."""

from __future__ import annotations


class ListenerRegistry:
    """Paths for which a backend listener is believed to be running.

    This is belief, not ground truth: an entry is added after a successful
    listener start and dropped when a send against that path fails, so the
    next send asks the backend to start it again.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()

    def has_listener(self, path: str) -> bool:
        return path in self._paths

    def mark_started(self, path: str) -> None:
        self._paths.add(path)

    def mark_failed(self, path: str) -> None:
        self._paths.discard(path)

    def active_paths(self) -> tuple[str, ...]:
        return tuple(sorted(self._paths))

    def clear(self) -> None:
        self._paths.clear()
