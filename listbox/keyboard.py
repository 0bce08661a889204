"""Pure mapping from key input to listbox actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from constants import (
    KEY_ALIASES,
    KEY_ARROW_DOWN,
    KEY_ARROW_UP,
    KEY_END,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_HOME,
    KEY_PAGE_DOWN,
    KEY_PAGE_UP,
    KEY_SPACE,
    KEY_TAB,
    MODIFIER_KEYS,
)


class Status(Enum):
    CLOSED = "closed"
    OPEN = "open"


class Direction(Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    FIRST = "first"
    LAST = "last"


class ActionKind(Enum):
    OPEN = "open"
    CLOSE = "close"
    MOVE = "move"
    SELECT = "select"
    SEARCH = "search"


@dataclass(frozen=True)
class KeyInput:
    """A key press expressed with DOM-style key names."""

    key: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def normalized(self) -> str:
        return KEY_ALIASES.get(self.key, self.key)

    @property
    def is_printable(self) -> bool:
        key = self.normalized
        return len(key) == 1 and key.isprintable() and not (self.ctrl or self.alt or self.meta)


@dataclass(frozen=True)
class KeyAction:
    kind: ActionKind
    direction: Optional[Direction] = None
    char: Optional[str] = None
    prevent_default: bool = True
    restore_focus: bool = True


_MOVES = {
    KEY_ARROW_DOWN: Direction.NEXT,
    KEY_ARROW_UP: Direction.PREVIOUS,
    KEY_HOME: Direction.FIRST,
    KEY_PAGE_UP: Direction.FIRST,
    KEY_END: Direction.LAST,
    KEY_PAGE_DOWN: Direction.LAST,
}


class KeyboardController:
    """Translate a key press into a :class:`KeyAction` for the current status.

    Returns ``None`` for keys that should cause no transition.
    """

    def resolve(
        self,
        key_input: KeyInput,
        status: Status,
        *,
        searching: bool = False,
    ) -> Optional[KeyAction]:
        key = key_input.normalized
        if key in MODIFIER_KEYS:
            return None
        if status is Status.CLOSED:
            return self._resolve_closed(key_input, key)
        return self._resolve_open(key_input, key, searching)

    @staticmethod
    def _resolve_closed(key_input: KeyInput, key: str) -> Optional[KeyAction]:
        if key in _MOVES:
            return KeyAction(ActionKind.OPEN, direction=_MOVES[key])
        if key in (KEY_ENTER, KEY_SPACE):
            return KeyAction(ActionKind.OPEN)
        if key_input.is_printable:
            return KeyAction(ActionKind.SEARCH, char=key)
        return None

    @staticmethod
    def _resolve_open(
        key_input: KeyInput, key: str, searching: bool
    ) -> Optional[KeyAction]:
        if key in _MOVES:
            return KeyAction(ActionKind.MOVE, direction=_MOVES[key])
        if key == KEY_SPACE and searching:
            return KeyAction(ActionKind.SEARCH, char=key)
        if key in (KEY_ENTER, KEY_SPACE):
            return KeyAction(ActionKind.SELECT)
        if key == KEY_ESCAPE:
            return KeyAction(ActionKind.CLOSE)
        if key == KEY_TAB:
            return KeyAction(ActionKind.CLOSE, prevent_default=False, restore_focus=False)
        if key_input.is_printable:
            return KeyAction(ActionKind.SEARCH, char=key)
        return None


__all__ = [
    "ActionKind",
    "Direction",
    "KeyAction",
    "KeyInput",
    "KeyboardController",
    "Status",
]
