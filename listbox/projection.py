"""Pure projections from engine state to what a rendering layer needs.

Nothing here mutates the machine. Renderers call these functions with the
latest :class:`~listbox.state_machine.ListboxState` snapshot and materialise
the result however their toolkit requires.
"""

from __future__ import annotations

import itertools
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Hashable, Mapping, Optional, Tuple, Union

from constants import ELEMENT_ID_PREFIX
from listbox.registry import Option, OptionRegistry
from listbox.state_machine import UNSET, ListboxState

Compare = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class OptionFlags:
    id: Hashable
    active: bool
    selected: bool
    disabled: bool


@dataclass(frozen=True)
class ListboxSlot:
    open: bool
    disabled: bool
    value: Any


def _is_selected(state: ListboxState, option: Option, compare: Compare) -> bool:
    if state.selected_value is UNSET:
        return False
    return bool(compare(option.value, state.selected_value))


def project_option(
    state: ListboxState, option: Option, compare: Compare = operator.eq
) -> OptionFlags:
    return OptionFlags(
        id=option.id,
        active=state.active_id == option.id,
        selected=_is_selected(state, option, compare),
        disabled=option.disabled,
    )


def project_options(
    state: ListboxState, registry: OptionRegistry, compare: Compare = operator.eq
) -> Tuple[OptionFlags, ...]:
    return tuple(project_option(state, option, compare) for option in registry)


def project_listbox(state: ListboxState) -> ListboxSlot:
    return ListboxSlot(open=state.is_open, disabled=state.disabled, value=state.selected_value)


# ----------------------------------------------------------------------
# Semantic accessibility contract
# ----------------------------------------------------------------------
_ID_COUNTER = itertools.count(1)


@dataclass(frozen=True)
class ListboxIds:
    """Element ids linking label, button and options container."""

    button: str
    options: str
    label: Optional[str] = None

    @classmethod
    def allocate(cls, *, with_label: bool = False, prefix: str = ELEMENT_ID_PREFIX) -> "ListboxIds":
        number = next(_ID_COUNTER)
        return cls(
            button=f"{prefix}-button-{number}",
            options=f"{prefix}-options-{number}",
            label=f"{prefix}-label-{number}" if with_label else None,
        )

    def option_id(self, option: Option) -> str:
        return f"{self.options}-option-{option.order}"


@dataclass(frozen=True)
class LabelSemantics:
    id: str


@dataclass(frozen=True)
class ButtonSemantics:
    id: str
    controls: str
    expanded: bool
    disabled: bool
    labelled_by: Optional[Tuple[str, str]] = None
    has_popup: str = "listbox"


@dataclass(frozen=True)
class OptionsSemantics:
    id: str
    active_descendant: Optional[str]
    labelled_by: Optional[str] = None
    role: str = "listbox"
    orientation: str = "vertical"


@dataclass(frozen=True)
class OptionSemantics:
    id: str
    selected: bool
    disabled: bool
    role: str = "option"


def label_semantics(ids: ListboxIds) -> Optional[LabelSemantics]:
    return LabelSemantics(ids.label) if ids.label else None


def button_semantics(state: ListboxState, ids: ListboxIds) -> ButtonSemantics:
    return ButtonSemantics(
        id=ids.button,
        controls=ids.options,
        expanded=state.is_open,
        disabled=state.disabled,
        labelled_by=(ids.label, ids.button) if ids.label else None,
    )


def options_semantics(
    state: ListboxState, ids: ListboxIds, registry: OptionRegistry
) -> OptionsSemantics:
    active = registry.get(state.active_id)
    return OptionsSemantics(
        id=ids.options,
        active_descendant=ids.option_id(active) if active is not None else None,
        labelled_by=ids.label,
    )


def option_semantics(
    state: ListboxState,
    ids: ListboxIds,
    option: Option,
    compare: Compare = operator.eq,
) -> OptionSemantics:
    return OptionSemantics(
        id=ids.option_id(option),
        selected=_is_selected(state, option, compare),
        disabled=option.disabled,
    )


# ----------------------------------------------------------------------
# Output descriptors ("render as")
# ----------------------------------------------------------------------
class Component(Enum):
    LISTBOX = "listbox"
    LABEL = "label"
    BUTTON = "button"
    OPTIONS = "options"
    OPTION = "option"


class _Fragment:
    def __repr__(self) -> str:
        return "FRAGMENT"


FRAGMENT: Any = _Fragment()

OutputTarget = Union[str, Any]


@dataclass(frozen=True)
class OutputDescriptor:
    """What element or component a piece of the listbox materialises as."""

    tag: OutputTarget
    passthrough: bool = False


DEFAULT_OUTPUTS: Mapping[Component, OutputTarget] = {
    Component.LISTBOX: FRAGMENT,
    Component.LABEL: "label",
    Component.BUTTON: "button",
    Component.OPTIONS: "ul",
    Component.OPTION: "li",
}


def resolve_output(component: Component, as_: Optional[OutputTarget] = None) -> OutputDescriptor:
    """Return the caller's override for ``component`` or its default."""

    target = DEFAULT_OUTPUTS[component] if as_ is None else as_
    return OutputDescriptor(tag=target, passthrough=target is FRAGMENT)


class Visibility(Enum):
    MOUNTED = "mounted"
    HIDDEN = "hidden"
    UNMOUNTED = "unmounted"


def options_visibility(
    state: ListboxState, *, static: bool = False, unmount: bool = True
) -> Visibility:
    """Decide how the options container should be presented.

    In static mode the caller owns mounting, so the container is always
    reported as mounted regardless of status.
    """

    if static or state.is_open:
        return Visibility.MOUNTED
    return Visibility.UNMOUNTED if unmount else Visibility.HIDDEN


__all__ = [
    "ButtonSemantics",
    "Component",
    "DEFAULT_OUTPUTS",
    "FRAGMENT",
    "LabelSemantics",
    "ListboxIds",
    "ListboxSlot",
    "OptionFlags",
    "OptionSemantics",
    "OptionsSemantics",
    "OutputDescriptor",
    "Visibility",
    "button_semantics",
    "label_semantics",
    "option_semantics",
    "options_semantics",
    "options_visibility",
    "project_listbox",
    "project_option",
    "project_options",
    "resolve_output",
]
