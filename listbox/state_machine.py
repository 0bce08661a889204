"""The listbox state machine.

The machine owns open/closed status, the active option and the selected
value. Every public transition runs to completion before the next one
starts: calls made while a transition is in progress (from a subscriber, a
registry listener or a timer) are queued and executed afterwards in arrival
order. Subscribers receive immutable :class:`ListboxState` snapshots.
"""

from __future__ import annotations

import functools
import operator
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    Deque,
    Hashable,
    List,
    Optional,
    TypeVar,
    cast,
)

from config_manager import EngineSettings
from listbox.errors import InvalidTransitionError
from listbox.focus import (
    ContainerKind,
    FocusCoordinator,
    HeadlessFocusCoordinator,
    OutsideClickDispatcher,
    default_dispatcher,
)
from listbox.keyboard import (
    ActionKind,
    Direction,
    KeyAction,
    KeyboardController,
    KeyInput,
    Status,
)
from listbox.registry import ChangeKind, Option, OptionRegistry, RegistryChange
from listbox.typeahead import (
    Clock,
    ManualScheduler,
    TimerScheduler,
    TypeaheadMatcher,
    monotonic_ms,
)
from logging_utils import logger


class _Unset:
    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class CloseReason(Enum):
    PROGRAMMATIC = "programmatic"
    ESCAPE = "escape"
    SELECT = "select"
    TAB_AWAY = "tab_away"
    OUTSIDE_CLICK = "outside_click"
    OUTSIDE_CLICK_FOCUSABLE = "outside_click_focusable"
    FOCUS_LOST = "focus_lost"
    DISABLED = "disabled"

    @property
    def restores_focus(self) -> bool:
        return self not in _KEEP_FOCUS_REASONS


_KEEP_FOCUS_REASONS = frozenset(
    {CloseReason.TAB_AWAY, CloseReason.FOCUS_LOST, CloseReason.OUTSIDE_CLICK_FOCUSABLE}
)


@dataclass(frozen=True)
class ListboxState:
    status: Status
    active_id: Optional[Hashable]
    selected_value: Any
    disabled: bool

    @property
    def is_open(self) -> bool:
        return self.status is Status.OPEN


@dataclass(frozen=True)
class KeyResult:
    handled: bool
    prevent_default: bool


StateListener = Callable[[ListboxState], None]
F = TypeVar("F", bound=Callable[..., Any])


def _serialized(method: F) -> F:
    """Run ``method`` to completion or queue it behind the running transition."""

    @functools.wraps(method)
    def wrapper(self: "ListboxMachine", *args: Any, **kwargs: Any) -> Any:
        if self._busy:
            logger.debug("Queueing %s behind running transition", method.__name__)
            self._pending.append(functools.partial(method, self, *args, **kwargs))
            return None
        self._busy = True
        try:
            result = method(self, *args, **kwargs)
            self._publish()
            while self._pending:
                self._pending.popleft()()
                self._publish()
        except Exception:
            self._pending.clear()
            raise
        finally:
            self._busy = False
        return result

    return cast(F, wrapper)


class ListboxMachine:
    """Single-select listbox interaction engine."""

    def __init__(
        self,
        registry: Optional[OptionRegistry] = None,
        *,
        value: Any = UNSET,
        disabled: bool = False,
        focus: Optional[FocusCoordinator] = None,
        scheduler: Optional[TimerScheduler] = None,
        clock: Optional[Clock] = None,
        settings: Optional[EngineSettings] = None,
        outside_clicks: Optional[OutsideClickDispatcher] = None,
        compare: Callable[[Any, Any], bool] = operator.eq,
        owner_contains: Optional[Callable[[Any], bool]] = None,
    ) -> None:
        self._registry = registry if registry is not None else OptionRegistry()
        self._settings = settings or EngineSettings()
        self._focus: FocusCoordinator = focus or HeadlessFocusCoordinator()
        self._scheduler: TimerScheduler = scheduler or ManualScheduler()
        if clock is None:
            clock = getattr(self._scheduler, "now", monotonic_ms)
        self._outside_clicks = outside_clicks or default_dispatcher()
        self._owner_contains = owner_contains or _contains_own_containers
        self._compare = compare
        self._keyboard = KeyboardController()
        self._typeahead = TypeaheadMatcher(
            self._registry,
            scheduler=self._scheduler,
            idle_ms=self._settings.typeahead_idle_ms,
            max_length=self._settings.typeahead_max_length,
            clock=clock,
            on_expire=self._run_serialized,
        )

        self._status = Status.CLOSED
        self._active_id: Optional[Hashable] = None
        self._selected_value: Any = value
        self._disabled = disabled

        self._busy = False
        self._pending: Deque[Callable[[], Any]] = deque()
        self._listeners: List[StateListener] = []
        self._last_published = self._snapshot()
        self._remove_registry_listener = self._registry.add_listener(
            self._on_registry_change
        )

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------
    @property
    def state(self) -> ListboxState:
        return self._snapshot()

    @property
    def registry(self) -> OptionRegistry:
        return self._registry

    @property
    def typeahead(self) -> TypeaheadMatcher:
        return self._typeahead

    @property
    def focus(self) -> FocusCoordinator:
        return self._focus

    @property
    def scheduler(self) -> TimerScheduler:
        return self._scheduler

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def compare(self) -> Callable[[Any, Any], bool]:
        return self._compare

    @property
    def active_option(self) -> Optional[Option]:
        return self._registry.get(self._active_id)

    @property
    def selected_option(self) -> Optional[Option]:
        if self._selected_value is UNSET:
            return None
        return self._registry.find_by_value(self._selected_value, self._compare)

    def is_selected(self, value: Any) -> bool:
        if self._selected_value is UNSET:
            return False
        return bool(self._compare(value, self._selected_value))

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for snapshot changes; returns an unsubscriber."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    @_serialized
    def open(self, initial: Optional[Direction] = None) -> bool:
        return self._open(initial)

    @_serialized
    def close(self, reason: CloseReason = CloseReason.PROGRAMMATIC) -> bool:
        return self._close(reason)

    @_serialized
    def toggle(self) -> bool:
        """Pointer activation of the button."""

        if self._status is Status.OPEN:
            return self._close(CloseReason.PROGRAMMATIC)
        return self._open(None)

    @_serialized
    def select_active(self) -> bool:
        return self._select_active()

    @_serialized
    def set_active(self, option_id: Hashable) -> bool:
        """Make ``option_id`` active without moving real focus."""

        return self._set_active(option_id)

    @_serialized
    def clear_active(self) -> bool:
        if self._status is not Status.OPEN:
            return self._reject("clear_active", "listbox is closed")
        self._active_id = None
        return True

    @_serialized
    def move_active(self, direction: Direction) -> bool:
        return self._move_active(direction)

    @_serialized
    def click_option(self, option_id: Hashable) -> bool:
        if not self._set_active(option_id):
            return False
        return self._select_active()

    @_serialized
    def set_disabled(self, disabled: bool) -> None:
        self._disabled = disabled
        if disabled and self._status is Status.OPEN:
            self._close(CloseReason.DISABLED)

    def disable(self) -> None:
        self.set_disabled(True)

    def enable(self) -> None:
        self.set_disabled(False)

    @_serialized
    def handle_key(self, key_input: KeyInput) -> KeyResult:
        action = self._keyboard.resolve(
            key_input, self._status, searching=self._typeahead.searching
        )
        if action is None or self._disabled:
            logger.debug("Ignoring key %r", key_input.key)
            return KeyResult(handled=False, prevent_default=False)
        self._apply(action)
        return KeyResult(handled=True, prevent_default=action.prevent_default)

    @_serialized
    def handle_outside_click(self, target: Any, focusable: bool = False) -> bool:
        if self._status is not Status.OPEN or self._owner_contains(target):
            return False
        reason = (
            CloseReason.OUTSIDE_CLICK_FOCUSABLE if focusable else CloseReason.OUTSIDE_CLICK
        )
        return self._close(reason)

    @_serialized
    def handle_focus_lost(self) -> bool:
        if self._status is not Status.OPEN:
            return False
        if self._focus.is_focus_within(ContainerKind.OPTIONS) or self._focus.is_focus_within(
            ContainerKind.BUTTON
        ):
            return False
        return self._close(CloseReason.FOCUS_LOST)

    def dispose(self) -> None:
        """Close without moving focus and release every held resource."""

        self._remove_registry_listener()
        self._status = Status.CLOSED
        self._active_id = None
        self._pending.clear()
        self._outside_clicks.release(self)
        self._typeahead.reset()
        self._listeners.clear()
        self._last_published = self._snapshot()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _apply(self, action: KeyAction) -> None:
        if action.kind is ActionKind.OPEN:
            self._open(action.direction)
        elif action.kind is ActionKind.MOVE:
            self._typeahead.reset()
            if action.direction is not None:
                self._move_active(action.direction)
        elif action.kind is ActionKind.SELECT:
            self._select_active()
        elif action.kind is ActionKind.CLOSE:
            self._close(CloseReason.ESCAPE if action.restore_focus else CloseReason.TAB_AWAY)
        elif action.kind is ActionKind.SEARCH and action.char is not None:
            self._search(action.char)

    def _open(self, initial: Optional[Direction]) -> bool:
        if self._disabled:
            logger.debug("open ignored: listbox is disabled")
            return False
        if self._status is Status.OPEN:
            return False
        self._status = Status.OPEN
        self._typeahead.reset()
        option = self._initial_active(initial)
        self._active_id = option.id if option is not None else None
        self._outside_clicks.acquire(self, self._owner_contains, self._dispatch_outside)
        self._focus.focus_options_container()
        logger.debug("Listbox opened; active=%r", self._active_id)
        return True

    def _close(self, reason: CloseReason) -> bool:
        if self._status is Status.CLOSED:
            return False
        self._status = Status.CLOSED
        self._active_id = None
        self._typeahead.reset()
        self._outside_clicks.release(self)
        if reason.restores_focus:
            self._focus.focus_button()
        logger.debug("Listbox closed (%s)", reason.value)
        return True

    def _initial_active(self, initial: Optional[Direction]) -> Optional[Option]:
        if initial is Direction.FIRST:
            return self._registry.first_enabled()
        if initial is Direction.LAST:
            return self._registry.last_enabled()
        selected = self.selected_option
        if selected is not None and selected.enabled:
            return selected
        if initial is Direction.PREVIOUS:
            return self._registry.last_enabled()
        return self._registry.first_enabled()

    def _select_active(self) -> bool:
        if self._status is not Status.OPEN:
            return self._reject("select_active", "listbox is closed")
        option = self.active_option
        if option is None or option.disabled:
            return self._reject("select_active", "no enabled active option")
        self._selected_value = option.value
        logger.debug("Selected option %r", option.id)
        self._close(CloseReason.SELECT)
        return True

    def _set_active(self, option_id: Hashable) -> bool:
        if self._status is not Status.OPEN:
            return self._reject("set_active", "listbox is closed")
        option = self._registry.get(option_id)
        if option is None or option.disabled:
            return self._reject("set_active", f"option {option_id!r} is not selectable")
        self._active_id = option.id
        return True

    def _move_active(self, direction: Direction) -> bool:
        if self._status is not Status.OPEN:
            return self._reject("move_active", "listbox is closed")
        wrap = self._settings.wrap_navigation
        if direction is Direction.FIRST:
            option = self._registry.first_enabled()
        elif direction is Direction.LAST:
            option = self._registry.last_enabled()
        elif direction is Direction.NEXT:
            option = self._registry.next_enabled(self._active_id, wrap=wrap)
        else:
            option = self._registry.previous_enabled(self._active_id, wrap=wrap)
        if option is None:
            if self._registry.first_enabled() is None:
                return self._reject("move_active", "no enabled options")
            # Unwrapped navigation at either end keeps the current option.
            return False
        self._active_id = option.id
        return True

    def _search(self, char: str) -> None:
        if self._status is Status.CLOSED:
            selected = self.selected_option
            anchor = selected.id if selected is not None and selected.enabled else None
            if not self._open(None):
                return
        else:
            anchor = self._active_id
        match = self._typeahead.feed(char, anchor)
        if match is not None:
            self._active_id = match.id

    def _reject(self, transition: str, reason: str) -> bool:
        if self._settings.strict_transitions:
            raise InvalidTransitionError(transition, reason)
        logger.debug("%s ignored: %s", transition, reason)
        return False

    def _dispatch_outside(self, target: Any, focusable: bool) -> None:
        self.handle_outside_click(target, focusable)

    @_serialized
    def _on_registry_change(self, change: RegistryChange) -> None:
        if self._active_id is None or change.option.id != self._active_id:
            return
        if change.kind is ChangeKind.REGISTERED:
            return
        if change.kind is ChangeKind.UPDATED and change.option.enabled:
            return
        replacement = self._registry.nearest_enabled(change.option.order)
        self._active_id = replacement.id if replacement is not None else None
        logger.debug(
            "Active option %r lost; re-resolved to %r", change.option.id, self._active_id
        )

    @_serialized
    def _run_serialized(self, callback: Callable[[], None]) -> None:
        callback()

    def _snapshot(self) -> ListboxState:
        return ListboxState(
            status=self._status,
            active_id=self._active_id,
            selected_value=self._selected_value,
            disabled=self._disabled,
        )

    def _publish(self) -> None:
        snapshot = self._snapshot()
        if snapshot == self._last_published:
            return
        self._last_published = snapshot
        for listener in list(self._listeners):
            listener(snapshot)


def _contains_own_containers(target: Any) -> bool:
    return isinstance(target, ContainerKind)


__all__ = [
    "CloseReason",
    "KeyResult",
    "ListboxMachine",
    "ListboxState",
    "StateListener",
    "UNSET",
]
