"""Keyboard translation and binding helpers for Tk-hosted listboxes."""

from __future__ import annotations

import tkinter as tk
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from constants import (
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
)
from listbox import KeyInput, ListboxMachine
from logging_utils import logger

SHIFT_MASK = 0x0001
CONTROL_MASK = 0x0004
# Mod1 is Alt on X11; Windows reports Alt in bit 17.
ALT_MASK = 0x0008 | 0x20000
META_MASK = 0x0040

KEYSYM_MAP: dict[str, str] = {
    "Down": KEY_ARROW_DOWN,
    "KP_Down": KEY_ARROW_DOWN,
    "Up": KEY_ARROW_UP,
    "KP_Up": KEY_ARROW_UP,
    "Home": KEY_HOME,
    "KP_Home": KEY_HOME,
    "End": KEY_END,
    "KP_End": KEY_END,
    "Prior": KEY_PAGE_UP,
    "Next": KEY_PAGE_DOWN,
    "Return": KEY_ENTER,
    "KP_Enter": KEY_ENTER,
    "space": KEY_SPACE,
    "Escape": KEY_ESCAPE,
    "Tab": KEY_TAB,
    "ISO_Left_Tab": KEY_TAB,
}


@dataclass(frozen=True)
class Shortcut:
    """Represent a keyboard shortcut binding."""

    sequence: str
    handler: Callable[[tk.Event], str]
    funcid: str


@dataclass(frozen=True)
class _WidgetBinding:
    widget: tk.Misc
    sequence: str
    funcid: str


def translate_key_event(event: Any) -> Optional[KeyInput]:
    """Convert a Tk key event into a :class:`KeyInput`.

    Returns ``None`` for keys the listbox does not understand, such as bare
    modifier presses.
    """

    state = int(getattr(event, "state", 0) or 0)
    keysym = str(getattr(event, "keysym", ""))
    modifiers = {
        "ctrl": bool(state & CONTROL_MASK),
        "alt": bool(state & ALT_MASK),
        "meta": bool(state & META_MASK),
        "shift": bool(state & SHIFT_MASK) or keysym == "ISO_Left_Tab",
    }
    if keysym in KEYSYM_MAP:
        return KeyInput(KEYSYM_MAP[keysym], **modifiers)
    char = getattr(event, "char", "") or ""
    if len(char) == 1 and char.isprintable():
        return KeyInput(char, **modifiers)
    return None


def unbind_global(root: tk.Misc, sequence: str, funcid: str) -> None:
    """Remove one ``bind_all`` handler and keep any others on ``sequence``.

    ``unbind_all`` drops every script bound to the sequence, including
    handlers installed by the host application.
    """

    try:
        script = str(root.bind_all(sequence) or "")
        marker = f"[{funcid} "
        kept = "\n".join(
            line for line in script.split("\n") if line.strip() and marker not in line
        )
        root.bind_all(sequence, kept)
        root.tk.deletecommand(funcid)
    except tk.TclError as exc:
        logger.debug("Unable to remove global binding %s: %s", sequence, exc)


class KeyboardManager:
    """Manage global accelerators and per-listbox key bindings."""

    def __init__(self, master: tk.Misc) -> None:
        self._master = master
        self._registered_shortcuts: list[Shortcut] = []
        self._widget_bindings: list[_WidgetBinding] = []

    def register_shortcuts(
        self,
        shortcuts: dict[str, Callable[[tk.Event], str]],
    ) -> None:
        """Bind accelerator sequences to the provided handlers."""

        for sequence, handler in shortcuts.items():
            funcid = self._master.bind_all(sequence, handler, add="+")
            self._registered_shortcuts.append(Shortcut(sequence, handler, funcid))

    def bind_listbox(self, machine: ListboxMachine, widgets: Sequence[tk.Misc]) -> None:
        """Route key presses on ``widgets`` into ``machine``."""

        def on_key(event: tk.Event) -> str | None:
            key_input = translate_key_event(event)
            if key_input is None:
                return None
            result = machine.handle_key(key_input)
            if result is not None and result.prevent_default:
                return "break"
            return None

        for widget in widgets:
            funcid = widget.bind("<KeyPress>", on_key, add="+")
            self._widget_bindings.append(_WidgetBinding(widget, "<KeyPress>", funcid))

    def clear(self) -> None:
        """Remove registered shortcuts and key bindings when tearing down."""

        for shortcut in self._registered_shortcuts:
            unbind_global(self._master, shortcut.sequence, shortcut.funcid)
        self._registered_shortcuts.clear()
        for binding in self._widget_bindings:
            try:
                binding.widget.unbind(binding.sequence, binding.funcid)
            except tk.TclError:
                continue
        self._widget_bindings.clear()


__all__ = ["KeyboardManager", "Shortcut", "translate_key_event", "unbind_global"]
