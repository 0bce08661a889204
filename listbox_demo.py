"""Entry point for a small Tk window hosting the listbox engine.

The module wires logging, configuration and the Tk adapters together so
the engine can be exercised interactively.
"""

from __future__ import annotations

import sys
import tkinter as tk
from tkinter import messagebox
from types import TracebackType
from typing import Dict, Hashable, Sequence

from config_manager import Config
from listbox import (
    ListboxState,
    OptionRegistry,
    Visibility,
    options_visibility,
    project_options,
)
from logging_utils import configure_logging, logger
from ui_support import KeyboardManager, TkListboxBinding

DEMO_OPTIONS: Sequence[tuple[str, bool]] = (
    ("Wade Cooper", False),
    ("Arlene McCoy", False),
    ("Devon Webb", False),
    ("Tom Cook", True),
    ("Tanya Fox", False),
    ("Hellen Schmidt", False),
)

ACTIVE_BG = "#dbeafe"
IDLE_BG = "#ffffff"
DISABLED_FG = "#9ca3af"
OPEN_SHORTCUT = "<Alt-l>"


def handle_uncaught_exception(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    """Log uncaught exceptions before the interpreter exits."""

    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger.critical(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback),
    )
    sys.exit(1)


class ListboxDemo:
    """Render a registry as Tk labels and keep them in sync with the engine."""

    def __init__(self, master: tk.Misc, config: Config) -> None:
        self.master = master
        self.button = tk.Button(master, text="Choose a person", anchor="w", width=28)
        self.button.pack(padx=12, pady=(12, 0), fill="x")
        self.container = tk.Frame(master, takefocus=True, relief="groove", borderwidth=1)
        self.labels: Dict[Hashable, tk.Label] = {}

        registry = OptionRegistry()
        for name, disabled in DEMO_OPTIONS:
            registry.register(name, name, disabled=disabled)

        self.binding = TkListboxBinding.create(
            button=self.button,
            container=self.container,
            registry=registry,
            settings=config.settings,
        )
        for option in registry:
            label = tk.Label(self.container, text=option.label, anchor="w", padx=8)
            label.pack(fill="x")
            self.labels[option.id] = label
            self.binding.bind_option(label, option.id)

        self.binding.machine.subscribe(self.render)
        self.render(self.binding.machine.state)
        self.shortcuts = KeyboardManager(master)
        self.shortcuts.register_shortcuts({OPEN_SHORTCUT: self.open_from_shortcut})

    def open_from_shortcut(self, _event: tk.Event) -> str:
        self.button.focus_set()
        self.binding.machine.open()
        return "break"

    def close(self) -> None:
        """Release shortcuts and listbox bindings."""

        self.shortcuts.clear()
        self.binding.destroy()

    def render(self, state: ListboxState) -> None:
        machine = self.binding.machine
        selected = machine.selected_option
        self.button.configure(text=selected.label if selected else "Choose a person")

        if options_visibility(state) is Visibility.MOUNTED:
            self.container.pack(padx=12, pady=(0, 12), fill="x")
        else:
            self.container.pack_forget()

        for flags in project_options(state, machine.registry, machine.compare):
            label = self.labels[flags.id]
            text = machine.registry.find(flags.id).label
            label.configure(
                text=f"✓ {text}" if flags.selected else f"  {text}",
                background=ACTIVE_BG if flags.active else IDLE_BG,
                foreground=DISABLED_FG if flags.disabled else "black",
            )


def main() -> None:
    """Launch the demo window."""

    root: tk.Tk | None = None
    try:
        config = Config()
        if not logger.handlers:
            configure_logging(level=config.settings.log_level)

        sys.excepthook = handle_uncaught_exception
        logger.info("Starting listbox demo")

        root = tk.Tk()
        root.title("Listbox Engine Demo")
        ListboxDemo(root, config)
        root.mainloop()
    except Exception as exc:
        logger.critical("Critical error in main: %s", exc, exc_info=True)
        if root:
            messagebox.showerror("Critical Error", f"A critical error has occurred: {exc}")
            root.destroy()
        raise


__all__ = ["ListboxDemo", "handle_uncaught_exception", "main"]


if __name__ == "__main__":
    main()
