"""Glue between a :class:`ListboxMachine` and concrete Tk widgets."""

from __future__ import annotations

import tkinter as tk
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional

from config_manager import EngineSettings
from listbox import (
    UNSET,
    ListboxMachine,
    OptionRegistry,
    OutsideClickDispatcher,
    default_dispatcher,
)
from logging_utils import logger
from ui_support.keyboard_manager import KeyboardManager, unbind_global
from ui_support.tk_focus import TkFocusCoordinator, widget_contains
from ui_support.tk_scheduler import TkAfterScheduler

GLOBAL_PRESS_SEQUENCE = "<ButtonPress>"


@dataclass(frozen=True)
class _Binding:
    widget: tk.Misc
    sequence: str
    funcid: str


def _takes_focus(widget: Any) -> bool:
    try:
        return str(widget.cget("takefocus")) in {"1", "true"}
    except (AttributeError, tk.TclError):
        return False


def install_tk_outside_clicks(root: tk.Misc, dispatcher: OutsideClickDispatcher) -> None:
    """Back ``dispatcher`` with a global ``<ButtonPress>`` binding on ``root``.

    The binding only exists while at least one listbox holds the dispatcher.
    """

    funcids: List[str] = []

    def on_press(event: tk.Event) -> None:
        dispatcher.dispatch(event.widget, focusable=_takes_focus(event.widget))

    def install(_dispatcher: OutsideClickDispatcher) -> None:
        funcids.append(root.bind_all(GLOBAL_PRESS_SEQUENCE, on_press, add="+"))

    def uninstall(_dispatcher: OutsideClickDispatcher) -> None:
        while funcids:
            unbind_global(root, GLOBAL_PRESS_SEQUENCE, funcids.pop())

    dispatcher.configure_hooks(install=install, uninstall=uninstall)


class TkListboxBinding:
    """Wire pointer, keyboard and focus events of Tk widgets into a machine."""

    def __init__(
        self,
        machine: ListboxMachine,
        *,
        button: tk.Misc,
        container: tk.Misc,
        dispatcher: Optional[OutsideClickDispatcher] = None,
        keyboard: Optional[KeyboardManager] = None,
    ) -> None:
        self.machine = machine
        self._button = button
        self._container = container
        self._dispatcher = dispatcher or default_dispatcher()
        self._keyboard = keyboard or KeyboardManager(button.winfo_toplevel())
        self._bindings: List[_Binding] = []
        self._option_bindings: Dict[Hashable, List[_Binding]] = {}

        install_tk_outside_clicks(button.winfo_toplevel(), self._dispatcher)
        self._keyboard.bind_listbox(machine, (button, container))
        self._bindings.append(self._bind(button, "<Button-1>", self._on_button_press))
        self._bindings.append(self._bind(container, "<FocusOut>", self._on_focus_out))

    @classmethod
    def create(
        cls,
        *,
        button: tk.Misc,
        container: tk.Misc,
        registry: Optional[OptionRegistry] = None,
        value: Any = UNSET,
        settings: Optional[EngineSettings] = None,
        dispatcher: Optional[OutsideClickDispatcher] = None,
    ) -> "TkListboxBinding":
        """Build a machine backed by Tk focus and timers, then bind it."""

        dispatcher = dispatcher or default_dispatcher()
        machine = ListboxMachine(
            registry,
            value=value,
            focus=TkFocusCoordinator(button, container),
            scheduler=TkAfterScheduler(button),
            settings=settings,
            outside_clicks=dispatcher,
            owner_contains=lambda target: widget_contains(button, target)
            or widget_contains(container, target),
        )
        return cls(machine, button=button, container=container, dispatcher=dispatcher)

    def bind_option(self, widget: tk.Misc, option_id: Hashable) -> None:
        """Make ``widget`` the pointer surface for ``option_id``."""

        def on_enter(_event: tk.Event) -> None:
            if self.machine.state.active_id != option_id:
                self.machine.set_active(option_id)

        def on_leave(_event: tk.Event) -> None:
            self.machine.clear_active()

        def on_click(_event: tk.Event) -> str:
            self.machine.click_option(option_id)
            return "break"

        self.unbind_option(option_id)
        self._option_bindings[option_id] = [
            self._bind(widget, "<Enter>", on_enter),
            self._bind(widget, "<Motion>", on_enter),
            self._bind(widget, "<Leave>", on_leave),
            self._bind(widget, "<Button-1>", on_click),
        ]

    def unbind_option(self, option_id: Hashable) -> None:
        for binding in self._option_bindings.pop(option_id, []):
            self._unbind(binding)

    def destroy(self) -> None:
        """Release every binding and the machine's global scope."""

        for option_id in list(self._option_bindings):
            self.unbind_option(option_id)
        for binding in self._bindings:
            self._unbind(binding)
        self._bindings.clear()
        self._keyboard.clear()
        self.machine.dispose()

    def _on_button_press(self, _event: tk.Event) -> str:
        self.machine.toggle()
        return "break"

    def _on_focus_out(self, _event: tk.Event) -> None:
        # Focus has not settled on the new widget yet during FocusOut.
        self._container.after_idle(self.machine.handle_focus_lost)

    @staticmethod
    def _bind(widget: tk.Misc, sequence: str, handler: Any) -> _Binding:
        return _Binding(widget, sequence, widget.bind(sequence, handler, add="+"))

    @staticmethod
    def _unbind(binding: _Binding) -> None:
        try:
            binding.widget.unbind(binding.sequence, binding.funcid)
        except tk.TclError:
            logger.debug("Widget already destroyed: %s", binding.widget)


__all__ = ["TkListboxBinding", "install_tk_outside_clicks"]
