"""Headless replay of scripted listbox interactions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from config_manager import EngineSettings
from constants import KEY_ALIASES, KEY_ENTER, KEY_ESCAPE, KEY_TAB, NAVIGATION_KEYS
from listbox import (
    UNSET,
    ContainerKind,
    HeadlessFocusCoordinator,
    KeyInput,
    ListboxMachine,
    ManualScheduler,
    OptionRegistry,
    OutsideClickDispatcher,
)
from logging_utils import logger

NAMED_KEYS = NAVIGATION_KEYS | {KEY_ENTER, KEY_ESCAPE, KEY_TAB, *KEY_ALIASES}

OUTSIDE_TARGET = "outside"


class ReplayError(ValueError):
    """Raised for script tokens or options the session cannot interpret."""


@dataclass(frozen=True)
class ReplayEvent:
    kind: str
    argument: Optional[str] = None


@dataclass(frozen=True)
class StepRecord:
    """Observable state after one scripted event."""

    event: str
    status: str
    active: Optional[str]
    selected: Optional[str]
    focus: str
    buffer: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "status": self.status,
            "active": self.active,
            "selected": self.selected,
            "focus": self.focus,
            "buffer": self.buffer,
        }


def parse_event(token: str) -> ReplayEvent:
    """Translate a script token such as ``wait:400`` or ``ArrowDown``."""

    if token in NAMED_KEYS or len(token) == 1:
        return ReplayEvent("key", token)
    name, _, argument = token.partition(":")
    if name == "wait":
        try:
            delay = int(argument)
        except ValueError as exc:
            raise ReplayError(f"wait needs an integer delay: {token!r}") from exc
        if delay < 0:
            raise ReplayError(f"wait delay cannot be negative: {token!r}")
        return ReplayEvent("wait", argument)
    if name in {"click", "hover"} and (argument or name == "click"):
        return ReplayEvent(name, argument or None)
    if name == "outside" and argument in {"", "focusable"}:
        return ReplayEvent("outside", argument or None)
    if name in {"leave", "blur"} and not argument:
        return ReplayEvent(name)
    raise ReplayError(f"Unknown event token: {token!r}")


class ReplaySession:
    """Drive a :class:`ListboxMachine` with virtual time and headless focus."""

    def __init__(
        self,
        labels: Sequence[str],
        *,
        disabled: Iterable[str] = (),
        value: Optional[str] = None,
        listbox_disabled: bool = False,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        disabled_labels = set(disabled)
        unknown = disabled_labels.difference(labels)
        if unknown:
            raise ReplayError(f"Unknown disabled option(s): {', '.join(sorted(unknown))}")
        if value is not None and value not in labels:
            raise ReplayError(f"Unknown initial value: {value!r}")

        self.scheduler = ManualScheduler()
        self.focus = HeadlessFocusCoordinator(initial=ContainerKind.BUTTON)
        self.dispatcher = OutsideClickDispatcher()
        self.registry = OptionRegistry()
        for label in labels:
            self.registry.register(label, label, disabled=label in disabled_labels)
        self.machine = ListboxMachine(
            self.registry,
            value=UNSET if value is None else value,
            disabled=listbox_disabled,
            focus=self.focus,
            scheduler=self.scheduler,
            settings=settings,
            outside_clicks=self.dispatcher,
        )

    def apply(self, token: str) -> StepRecord:
        event = parse_event(token)
        logger.debug("Replaying %s", token)
        if event.kind == "key":
            self._press(event.argument or "")
        elif event.kind == "wait":
            self.scheduler.advance(int(event.argument or 0))
        elif event.kind == "click":
            if event.argument is None:
                self.machine.toggle()
            else:
                self.machine.click_option(self._require_option(event.argument))
        elif event.kind == "hover":
            self.machine.set_active(self._require_option(event.argument or ""))
        elif event.kind == "leave":
            self.machine.clear_active()
        elif event.kind == "outside":
            focusable = event.argument == "focusable"
            if focusable:
                self.focus.blur()
            self.dispatcher.dispatch(OUTSIDE_TARGET, focusable=focusable)
        elif event.kind == "blur":
            self.focus.blur()
            self.machine.handle_focus_lost()
        return self.snapshot(token)

    def run(self, tokens: Iterable[str]) -> List[StepRecord]:
        return [self.apply(token) for token in tokens]

    def snapshot(self, event: str) -> StepRecord:
        state = self.machine.state
        selected = self.machine.selected_option
        return StepRecord(
            event=event,
            status=state.status.value,
            active=None if state.active_id is None else str(state.active_id),
            selected=None if selected is None else selected.label,
            focus=self.focus.current.value if self.focus.current else "none",
            buffer=self.machine.typeahead.buffer,
        )

    def close(self) -> None:
        self.machine.dispose()

    def _press(self, key: str) -> None:
        result = self.machine.handle_key(KeyInput(key))
        if key == KEY_TAB and result is not None and not result.prevent_default:
            # Unprevented Tab moves focus along the natural tab order.
            self.focus.blur()

    def _require_option(self, label: str) -> str:
        if label not in self.registry:
            raise ReplayError(f"Unknown option: {label!r}")
        return label


__all__ = [
    "ReplayError",
    "ReplayEvent",
    "ReplaySession",
    "StepRecord",
    "parse_event",
]
