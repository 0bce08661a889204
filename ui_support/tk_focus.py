"""Tk implementation of the focus coordinator."""

from __future__ import annotations

import tkinter as tk

from listbox import ContainerKind
from logging_utils import logger


def widget_contains(ancestor: tk.Misc, widget: object) -> bool:
    """Return whether ``widget`` is ``ancestor`` or one of its descendants."""

    if widget is None:
        return False
    ancestor_path = str(ancestor)
    path = str(widget)
    return path == ancestor_path or path.startswith(ancestor_path + ".")


class TkFocusCoordinator:
    """Move real Tk focus between the listbox button and options container."""

    def __init__(self, button: tk.Misc, container: tk.Misc) -> None:
        self._button = button
        self._container = container

    def focus_button(self) -> None:
        self._focus(self._button)

    def focus_options_container(self) -> None:
        self._focus(self._container)

    def is_focus_within(self, kind: ContainerKind) -> bool:
        target = self._button if kind is ContainerKind.BUTTON else self._container
        try:
            focused = target.focus_get()
        except (tk.TclError, KeyError):
            # focus_get raises KeyError while a Tk-internal popdown has focus
            return False
        return widget_contains(target, focused)

    @staticmethod
    def _focus(widget: tk.Misc) -> None:
        try:
            widget.focus_set()
        except tk.TclError as exc:
            logger.debug("Unable to move focus to %s: %s", widget, exc)


__all__ = ["TkFocusCoordinator", "widget_contains"]
