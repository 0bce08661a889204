"""Tkinter adapters that host the listbox engine in real widgets."""

from ui_support.keyboard_manager import KeyboardManager, translate_key_event, unbind_global
from ui_support.listbox_binding import TkListboxBinding, install_tk_outside_clicks
from ui_support.tk_focus import TkFocusCoordinator, widget_contains
from ui_support.tk_scheduler import TkAfterScheduler

__all__ = [
    "KeyboardManager",
    "TkAfterScheduler",
    "TkFocusCoordinator",
    "TkListboxBinding",
    "install_tk_outside_clicks",
    "translate_key_event",
    "unbind_global",
    "widget_contains",
]
