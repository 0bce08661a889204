"""Ordered option registry with enabled-aware traversal."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Tuple

from listbox.errors import DuplicateIdError, OptionNotFoundError
from logging_utils import logger


@dataclass(frozen=True)
class Option:
    """A single candidate option.

    ``order`` is assigned by the registry and is the only ordering key.
    """

    id: Hashable
    value: Any
    label: str
    disabled: bool = False
    order: int = 0

    @property
    def enabled(self) -> bool:
        return not self.disabled


class ChangeKind(Enum):
    REGISTERED = "registered"
    UNREGISTERED = "unregistered"
    UPDATED = "updated"


@dataclass(frozen=True)
class RegistryChange:
    """Notification payload describing a registry mutation."""

    kind: ChangeKind
    option: Option


RegistryListener = Callable[[RegistryChange], None]


class OptionRegistry:
    """Keep options in registration order and answer traversal queries."""

    def __init__(self) -> None:
        self._options: Dict[Hashable, Option] = {}
        self._next_order = 0
        self._listeners: List[RegistryListener] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def register(
        self,
        option_id: Hashable,
        value: Any,
        *,
        label: Optional[str] = None,
        disabled: bool = False,
    ) -> Option:
        """Append an option with the next order index."""

        if option_id in self._options:
            logger.error("Duplicate option id registered: %r", option_id)
            raise DuplicateIdError(option_id)

        option = Option(
            id=option_id,
            value=value,
            label=str(value) if label is None else label,
            disabled=disabled,
            order=self._next_order,
        )
        self._next_order += 1
        self._options[option_id] = option
        logger.debug("Registered option %r at order %s", option_id, option.order)
        self._notify(RegistryChange(ChangeKind.REGISTERED, option))
        return option

    def unregister(self, option_id: Hashable) -> Option:
        """Remove an option and return it."""

        option = self._options.pop(option_id, None)
        if option is None:
            raise OptionNotFoundError(option_id)
        logger.debug("Unregistered option %r", option_id)
        self._notify(RegistryChange(ChangeKind.UNREGISTERED, option))
        return option

    def set_disabled(self, option_id: Hashable, disabled: bool) -> Option:
        """Toggle the disabled flag of an option."""

        current = self.find(option_id)
        if current.disabled == disabled:
            return current
        updated = replace(current, disabled=disabled)
        self._options[option_id] = updated
        self._notify(RegistryChange(ChangeKind.UPDATED, updated))
        return updated

    def add_listener(self, listener: RegistryListener) -> Callable[[], None]:
        """Subscribe to registry mutations; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, change: RegistryChange) -> None:
        for listener in list(self._listeners):
            listener(change)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def find(self, option_id: Hashable) -> Option:
        option = self._options.get(option_id)
        if option is None:
            raise OptionNotFoundError(option_id)
        return option

    def get(self, option_id: Optional[Hashable]) -> Optional[Option]:
        if option_id is None:
            return None
        return self._options.get(option_id)

    def options(self) -> Tuple[Option, ...]:
        return tuple(self._options.values())

    def find_by_value(
        self,
        value: Any,
        compare: Callable[[Any, Any], bool],
    ) -> Optional[Option]:
        """Return the first option whose value compares equal to ``value``."""

        for option in self._options.values():
            if compare(option.value, value):
                return option
        return None

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[Option]:
        return iter(self.options())

    def __contains__(self, option_id: object) -> bool:
        return option_id in self._options

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def first_enabled(self) -> Optional[Option]:
        return next((option for option in self._options.values() if option.enabled), None)

    def last_enabled(self) -> Optional[Option]:
        return next(
            (option for option in reversed(self._options.values()) if option.enabled),
            None,
        )

    def next_enabled(
        self, from_id: Optional[Hashable], wrap: bool = True
    ) -> Optional[Option]:
        """Scan forward from just past ``from_id`` for an enabled option."""

        if from_id is None or from_id not in self._options:
            return self.first_enabled()
        return self._scan(self._ordered_from(from_id, forward=True, wrap=wrap))

    def previous_enabled(
        self, from_id: Optional[Hashable], wrap: bool = True
    ) -> Optional[Option]:
        """Scan backward from just before ``from_id`` for an enabled option."""

        if from_id is None or from_id not in self._options:
            return self.last_enabled()
        return self._scan(self._ordered_from(from_id, forward=False, wrap=wrap))

    def nearest_enabled(self, order: int) -> Optional[Option]:
        """Return the closest enabled option to a (possibly vacated) position.

        Options after ``order`` are preferred; the last enabled option before
        it is used when nothing follows.
        """

        before: Optional[Option] = None
        for option in self._options.values():
            if not option.enabled or option.order == order:
                continue
            if option.order > order:
                return option
            before = option
        return before

    def match_by_prefix(
        self, text: str, after_id: Optional[Hashable] = None
    ) -> Optional[Option]:
        """Find the next enabled option whose label starts with ``text``.

        Matching ignores case. The search starts just after ``after_id`` and
        wraps, visiting ``after_id`` itself last.
        """

        if not text:
            return None
        needle = text.casefold()
        if after_id is None or after_id not in self._options:
            candidates = list(self._options.values())
        else:
            candidates = self._ordered_from(after_id, forward=True, wrap=True)
        for option in candidates:
            if option.enabled and option.label.casefold().startswith(needle):
                return option
        return None

    def _ordered_from(
        self, from_id: Hashable, *, forward: bool, wrap: bool
    ) -> List[Option]:
        ordered = list(self._options.values())
        if not forward:
            ordered.reverse()
        index = next(i for i, option in enumerate(ordered) if option.id == from_id)
        following = ordered[index + 1 :]
        if not wrap:
            return following
        return following + ordered[: index + 1]

    @staticmethod
    def _scan(candidates: List[Option]) -> Optional[Option]:
        return next((option for option in candidates if option.enabled), None)


__all__ = ["Option", "OptionRegistry", "RegistryChange", "ChangeKind", "RegistryListener"]
