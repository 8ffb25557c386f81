"""URL fragment state with history and cooperative change notification."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

FragmentListener = Callable[[str], None]


@runtime_checkable
class Scheduler(Protocol):
    """Anything that can run a callback on the next cooperative turn.

    ``asyncio`` event loops satisfy this protocol, as does TaskQueue.
    """

    def call_soon(self, callback: Callable[..., object], *args: Any) -> object: ...


class TaskQueue:
    """A FIFO of deferred callbacks, drained explicitly by the owner of the loop."""

    def __init__(self) -> None:
        self._tasks: deque[tuple[Callable[..., object], tuple[Any, ...]]] = deque()

    def __len__(self) -> int:
        return len(self._tasks)

    def call_soon(self, callback: Callable[..., object], *args: Any) -> None:
        self._tasks.append((callback, args))

    def run_until_idle(self) -> int:
        """Run queued tasks, including ones queued while running.

        Returns:
            The number of tasks run.
        """
        ran = 0
        while self._tasks:
            callback, args = self._tasks.popleft()
            callback(*args)
            ran += 1
        return ran


def normalize_fragment(fragment: str) -> str:
    """Return the fragment with a single leading '#', or '' when empty."""
    fragment = fragment.removeprefix("#")
    return f"#{fragment}" if fragment else ""


class FragmentLocation:
    """An in-memory URL fragment with browser-like history.

    Assigning a different fragment pushes a history entry and notifies
    subscribers; assigning the current fragment does nothing. With a
    scheduler, notifications are queued for the next turn the way a browser
    queues ``hashchange``; without one they are dispatched immediately.
    """

    def __init__(self, fragment: str = "", scheduler: Scheduler | None = None) -> None:
        self._history = [normalize_fragment(fragment)]
        self._index = 0
        self._scheduler = scheduler
        self._listeners: list[FragmentListener] = []

    @property
    def fragment(self) -> str:
        return self._history[self._index]

    @property
    def scheduler(self) -> Scheduler | None:
        """Where change notifications are queued; None dispatches them inline."""
        return self._scheduler

    @property
    def can_go_back(self) -> bool:
        return self._index > 0

    @property
    def can_go_forward(self) -> bool:
        return self._index < len(self._history) - 1

    def subscribe(self, listener: FragmentListener) -> None:
        self._listeners.append(listener)

    def assign(self, fragment: str) -> bool:
        """Navigate to a new fragment; returns False when it is unchanged."""
        fragment = normalize_fragment(fragment)
        if fragment == self.fragment:
            return False
        del self._history[self._index + 1 :]
        self._history.append(fragment)
        self._index += 1
        logger.debug("Fragment set to %r", fragment)
        self._notify()
        return True

    def back(self) -> bool:
        if not self.can_go_back:
            return False
        self._index -= 1
        self._notify()
        return True

    def forward(self) -> bool:
        if not self.can_go_forward:
            return False
        self._index += 1
        self._notify()
        return True

    def _notify(self) -> None:
        fragment = self.fragment
        for listener in self._listeners:
            if self._scheduler is None:
                listener(fragment)
            else:
                self._scheduler.call_soon(listener, fragment)
