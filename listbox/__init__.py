"""Headless interaction engine for single-select listboxes."""

from listbox.errors import (
    DuplicateIdError,
    InvalidTransitionError,
    ListboxError,
    OptionNotFoundError,
)
from listbox.focus import (
    ContainerKind,
    FocusCoordinator,
    HeadlessFocusCoordinator,
    OutsideClickDispatcher,
    default_dispatcher,
)
from listbox.keyboard import Direction, KeyInput, KeyboardController, Status
from listbox.projection import (
    Component,
    ListboxIds,
    OptionFlags,
    Visibility,
    options_visibility,
    project_listbox,
    project_options,
    resolve_output,
)
from listbox.registry import Option, OptionRegistry
from listbox.state_machine import (
    UNSET,
    CloseReason,
    KeyResult,
    ListboxMachine,
    ListboxState,
)
from listbox.typeahead import ManualScheduler, TimerScheduler, TypeaheadMatcher

__all__ = [
    "CloseReason",
    "Component",
    "ContainerKind",
    "Direction",
    "DuplicateIdError",
    "FocusCoordinator",
    "HeadlessFocusCoordinator",
    "InvalidTransitionError",
    "KeyInput",
    "KeyResult",
    "KeyboardController",
    "ListboxError",
    "ListboxIds",
    "ListboxMachine",
    "ListboxState",
    "ManualScheduler",
    "Option",
    "OptionFlags",
    "OptionNotFoundError",
    "OptionRegistry",
    "OutsideClickDispatcher",
    "Status",
    "TimerScheduler",
    "TypeaheadMatcher",
    "UNSET",
    "Visibility",
    "default_dispatcher",
    "options_visibility",
    "project_listbox",
    "project_options",
    "resolve_output",
]
