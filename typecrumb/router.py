"""Keyboard and pointer event routing."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from typecrumb.navigation import NavigationEngine
from typecrumb.search import SearchOverlay

logger = logging.getLogger(__name__)


class Key(enum.Enum):
    """Keys the explorer reacts to, named like DOM ``KeyboardEvent.key`` values."""

    SLASH = "/"
    ESCAPE = "Escape"
    ENTER = "Enter"
    UP = "ArrowUp"
    DOWN = "ArrowDown"
    LEFT = "ArrowLeft"
    RIGHT = "ArrowRight"


@dataclass(frozen=True)
class KeyEvent:
    """A key press; in_text_input is True while focus is in a text field."""

    key: str
    in_text_input: bool = False


class InputRouter:
    """Maps key and pointer events onto the engine and the search overlay."""

    def __init__(self, engine: NavigationEngine, overlay: SearchOverlay) -> None:
        self.engine = engine
        self.overlay = overlay

    def handle_key(self, event: KeyEvent) -> bool:
        """Dispatch a key press.

        Returns:
            True when the key was consumed.
        """
        try:
            key = Key(event.key)
        except ValueError:
            return False

        if key is Key.SLASH and not event.in_text_input:
            self.overlay.open()
            return True
        if key is Key.ESCAPE:
            if self.overlay.is_open:
                self.overlay.close()
            return True

        if self.overlay.is_open:
            return self._handle_overlay_key(key)

        if key is Key.UP:
            self.engine.move_active(-1)
        elif key is Key.DOWN:
            self.engine.move_active(1)
        elif key is Key.RIGHT:
            self.engine.navigate_right()
        elif key is Key.LEFT:
            self.engine.navigate_left()
        elif key is Key.ENTER:
            self.engine.toggle_active_doc()
        else:
            return False
        return True

    def handle_search_input(self, text: str) -> None:
        """The overlay's text field changed."""
        self.overlay.set_filter(text)

    def click_entry(self, column_index: int, field_name: str) -> None:
        self.engine.select_field(column_index, field_name)

    def click_ellipsis(self, column_index: int, entry_index: int) -> bool:
        return self.engine.toggle_doc(column_index, entry_index)

    def click_result(self, type_name: str) -> None:
        self._open_type(self.overlay.confirm(type_name))

    def click_help(self) -> None:
        self.overlay.open()

    def click_backdrop(self) -> None:
        self.overlay.close()

    def _handle_overlay_key(self, key: Key) -> bool:
        # Only the overlay's own text field sees keys while it is open.
        if key is Key.ENTER:
            self._open_type(self.overlay.confirm())
            return True
        if key is Key.DOWN:
            self.overlay.move(1)
            return True
        if key is Key.UP:
            self.overlay.move(-1)
            return True
        return False

    def _open_type(self, type_name: str | None) -> None:
        if type_name is None:
            return
        logger.debug("Type selected: %s", type_name)
        self.engine.navigate_to_type(type_name)
