"""Tests for the headless focus coordinator and outside-click dispatcher."""

from __future__ import annotations

from listbox.focus import (
    ContainerKind,
    HeadlessFocusCoordinator,
    OutsideClickDispatcher,
    default_dispatcher,
)


def test_headless_focus_tracks_current_owner() -> None:
    focus = HeadlessFocusCoordinator()

    focus.focus_options_container()
    assert focus.is_focus_within(ContainerKind.OPTIONS)
    assert not focus.is_focus_within(ContainerKind.BUTTON)

    focus.focus_button()
    focus.blur()

    assert focus.current is None
    assert focus.history == [ContainerKind.OPTIONS, ContainerKind.BUTTON, None]


def test_dispatcher_installs_once_and_uninstalls_with_last_owner() -> None:
    events: list[str] = []
    dispatcher = OutsideClickDispatcher(
        install=lambda _d: events.append("install"),
        uninstall=lambda _d: events.append("uninstall"),
    )

    dispatcher.acquire("first", lambda _t: False, lambda *_a: None)
    dispatcher.acquire("second", lambda _t: False, lambda *_a: None)
    dispatcher.release("first")
    assert dispatcher.installed
    dispatcher.release("second")
    dispatcher.release("second")

    assert events == ["install", "uninstall"]
    assert not dispatcher.installed


def test_dispatch_targets_owners_not_containing_target() -> None:
    dispatcher = OutsideClickDispatcher()
    calls: list[tuple[str, object, bool]] = []

    dispatcher.acquire(
        "left",
        lambda target: target == "left-panel",
        lambda target, focusable: calls.append(("left", target, focusable)),
    )
    dispatcher.acquire(
        "right",
        lambda target: target == "right-panel",
        lambda target, focusable: calls.append(("right", target, focusable)),
    )

    notified = dispatcher.dispatch("left-panel", focusable=True)

    assert notified == 1
    assert calls == [("right", "left-panel", True)]


def test_default_dispatcher_is_shared() -> None:
    assert default_dispatcher() is default_dispatcher()
