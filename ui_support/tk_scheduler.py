"""Timer scheduling on the Tk event loop."""

from __future__ import annotations

import tkinter as tk
from typing import Any, Callable

from listbox.typeahead import monotonic_ms
from logging_utils import logger


class TkAfterScheduler:
    """Schedule typeahead expiry with ``after`` so it runs on the UI thread."""

    def __init__(self, master: tk.Misc) -> None:
        self._master = master

    def now(self) -> float:
        return monotonic_ms()

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        return self._master.after(delay_ms, callback)

    def cancel(self, handle: Any) -> None:
        try:
            self._master.after_cancel(handle)
        except tk.TclError as exc:
            logger.debug("after_cancel(%s) failed: %s", handle, exc)


__all__ = ["TkAfterScheduler"]
