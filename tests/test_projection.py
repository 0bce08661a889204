"""Tests for render projections and the semantic accessibility contract."""

from __future__ import annotations

from listbox import (
    UNSET,
    ListboxMachine,
    OptionRegistry,
    OutsideClickDispatcher,
    Status,
)
from listbox.projection import (
    FRAGMENT,
    Component,
    ListboxIds,
    Visibility,
    button_semantics,
    label_semantics,
    option_semantics,
    options_semantics,
    options_visibility,
    project_listbox,
    project_options,
    resolve_output,
)
from listbox.state_machine import ListboxState


def _machine(value=UNSET) -> ListboxMachine:
    registry = OptionRegistry()
    registry.register("a", "Alpha")
    registry.register("b", "Bravo", disabled=True)
    registry.register("c", "Charlie")
    return ListboxMachine(registry, value=value, outside_clicks=OutsideClickDispatcher())


def test_option_flags_reflect_active_selected_and_disabled() -> None:
    machine = _machine(value="Charlie")
    machine.open()

    flags = project_options(machine.state, machine.registry)

    assert [(f.id, f.active, f.selected, f.disabled) for f in flags] == [
        ("a", False, False, False),
        ("b", False, False, True),
        ("c", True, True, False),
    ]


def test_unset_selection_marks_nothing_selected() -> None:
    machine = _machine()

    flags = project_options(machine.state, machine.registry)

    assert not any(flag.selected for flag in flags)
    assert not any(flag.active for flag in flags)


def test_listbox_slot_mirrors_state() -> None:
    machine = _machine(value="Alpha")
    machine.open()

    slot = project_listbox(machine.state)

    assert slot.open
    assert not slot.disabled
    assert slot.value == "Alpha"


def test_ids_are_unique_per_allocation() -> None:
    first = ListboxIds.allocate()
    second = ListboxIds.allocate(with_label=True)

    assert first.button != second.button
    assert first.options != second.options
    assert first.label is None
    assert second.label is not None


def test_button_semantics_track_expanded_and_label() -> None:
    machine = _machine()
    ids = ListboxIds.allocate(with_label=True)

    closed = button_semantics(machine.state, ids)
    machine.open()
    opened = button_semantics(machine.state, ids)

    assert not closed.expanded
    assert opened.expanded
    assert opened.controls == ids.options
    assert opened.has_popup == "listbox"
    assert opened.labelled_by == (ids.label, ids.button)
    assert label_semantics(ids).id == ids.label


def test_options_semantics_reference_active_descendant() -> None:
    machine = _machine()
    ids = ListboxIds.allocate()

    assert options_semantics(machine.state, ids, machine.registry).active_descendant is None
    machine.open()
    semantics = options_semantics(machine.state, ids, machine.registry)

    assert semantics.role == "listbox"
    assert semantics.active_descendant == ids.option_id(machine.registry.find("a"))
    assert semantics.labelled_by is None
    assert label_semantics(ids) is None


def test_option_semantics() -> None:
    machine = _machine(value="Alpha")
    ids = ListboxIds.allocate()

    alpha = option_semantics(machine.state, ids, machine.registry.find("a"))
    bravo = option_semantics(machine.state, ids, machine.registry.find("b"))

    assert alpha.role == "option"
    assert alpha.selected and not alpha.disabled
    assert bravo.disabled and not bravo.selected
    assert alpha.id != bravo.id


def test_default_outputs_and_overrides() -> None:
    assert resolve_output(Component.BUTTON).tag == "button"
    assert resolve_output(Component.LABEL).tag == "label"
    assert resolve_output(Component.OPTIONS).tag == "ul"
    assert resolve_output(Component.OPTION).tag == "li"

    listbox = resolve_output(Component.LISTBOX)
    assert listbox.tag is FRAGMENT
    assert listbox.passthrough

    override = resolve_output(Component.OPTION, "div")
    assert override.tag == "div" and not override.passthrough
    assert resolve_output(Component.BUTTON, FRAGMENT).passthrough


def test_options_visibility_modes() -> None:
    closed = ListboxState(Status.CLOSED, None, UNSET, False)
    opened = ListboxState(Status.OPEN, None, UNSET, False)

    assert options_visibility(opened) is Visibility.MOUNTED
    assert options_visibility(closed) is Visibility.UNMOUNTED
    assert options_visibility(closed, unmount=False) is Visibility.HIDDEN
    assert options_visibility(closed, static=True) is Visibility.MOUNTED
