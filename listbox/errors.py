"""Error taxonomy for the listbox engine."""

from __future__ import annotations

from typing import Hashable


class ListboxError(Exception):
    """Base class for listbox engine errors."""


class DuplicateIdError(ListboxError, ValueError):
    """Raised when an option id is registered twice."""

    def __init__(self, option_id: Hashable) -> None:
        super().__init__(f"Option id already registered: {option_id!r}")
        self.option_id = option_id


class OptionNotFoundError(ListboxError, LookupError):
    """Raised when an option id is not present in the registry."""

    def __init__(self, option_id: Hashable) -> None:
        super().__init__(f"Unknown option id: {option_id!r}")
        self.option_id = option_id


class InvalidTransitionError(ListboxError, RuntimeError):
    """Raised for rejected transitions when strict transitions are enabled.

    By default the state machine treats these as logged no-ops because they
    arise from ordinary input races.
    """

    def __init__(self, transition: str, reason: str) -> None:
        super().__init__(f"{transition} ignored: {reason}")
        self.transition = transition
        self.reason = reason


__all__ = [
    "ListboxError",
    "DuplicateIdError",
    "OptionNotFoundError",
    "InvalidTransitionError",
]
