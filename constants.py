"""Shared constants for the listbox engine."""

from __future__ import annotations

from typing import FrozenSet, Tuple

TYPEAHEAD_IDLE_MS: int = 350
TYPEAHEAD_MAX_LENGTH: int = 16

KEY_ARROW_DOWN = "ArrowDown"
KEY_ARROW_UP = "ArrowUp"
KEY_HOME = "Home"
KEY_END = "End"
KEY_PAGE_UP = "PageUp"
KEY_PAGE_DOWN = "PageDown"
KEY_ENTER = "Enter"
KEY_SPACE = " "
KEY_ESCAPE = "Escape"
KEY_TAB = "Tab"

NAVIGATION_KEYS: FrozenSet[str] = frozenset(
    {
        KEY_ARROW_DOWN,
        KEY_ARROW_UP,
        KEY_HOME,
        KEY_END,
        KEY_PAGE_UP,
        KEY_PAGE_DOWN,
    }
)

MODIFIER_KEYS: FrozenSet[str] = frozenset(
    {"Shift", "Control", "Alt", "Meta", "AltGraph", "CapsLock", "OS", "Fn"}
)

KEY_ALIASES: dict[str, str] = {
    "Space": KEY_SPACE,
    "Spacebar": KEY_SPACE,
    "Esc": KEY_ESCAPE,
}

LOG_LEVELS: Tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ELEMENT_ID_PREFIX: str = "listbox"


__all__ = [
    "TYPEAHEAD_IDLE_MS",
    "TYPEAHEAD_MAX_LENGTH",
    "KEY_ARROW_DOWN",
    "KEY_ARROW_UP",
    "KEY_HOME",
    "KEY_END",
    "KEY_PAGE_UP",
    "KEY_PAGE_DOWN",
    "KEY_ENTER",
    "KEY_SPACE",
    "KEY_ESCAPE",
    "KEY_TAB",
    "NAVIGATION_KEYS",
    "MODIFIER_KEYS",
    "KEY_ALIASES",
    "LOG_LEVELS",
    "ELEMENT_ID_PREFIX",
]
