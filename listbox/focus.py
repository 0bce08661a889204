"""Real-focus coordination and process-wide outside-click dispatch."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional, Protocol

from logging_utils import logger


class ContainerKind(Enum):
    BUTTON = "button"
    OPTIONS = "options"


class FocusCoordinator(Protocol):
    """Moves real input focus between the button and the options container."""

    def focus_button(self) -> None:
        ...

    def focus_options_container(self) -> None:
        ...

    def is_focus_within(self, kind: ContainerKind) -> bool:
        ...


class HeadlessFocusCoordinator:
    """Track focus ownership without a real widget toolkit."""

    def __init__(self, initial: Optional[ContainerKind] = None) -> None:
        self.current: Optional[ContainerKind] = initial
        self.history: List[Optional[ContainerKind]] = []

    def focus_button(self) -> None:
        self._move(ContainerKind.BUTTON)

    def focus_options_container(self) -> None:
        self._move(ContainerKind.OPTIONS)

    def blur(self) -> None:
        """Simulate focus leaving for an unrelated element."""

        self._move(None)

    def is_focus_within(self, kind: ContainerKind) -> bool:
        return self.current is kind

    def _move(self, target: Optional[ContainerKind]) -> None:
        self.current = target
        self.history.append(target)


OutsideHandler = Callable[[Any, bool], None]
Contains = Callable[[Any], bool]


class OutsideClickDispatcher:
    """Single pointer listener shared by every open listbox.

    Owners register while open and are released on close. ``install`` runs
    when the first owner arrives and ``uninstall`` when the last one leaves,
    so the global hook exists only while some listbox is open.
    """

    def __init__(
        self,
        *,
        install: Optional[Callable[["OutsideClickDispatcher"], None]] = None,
        uninstall: Optional[Callable[["OutsideClickDispatcher"], None]] = None,
    ) -> None:
        self._owners: Dict[Hashable, tuple[Contains, OutsideHandler]] = {}
        self._install = install
        self._uninstall = uninstall
        self.installed = False

    def configure_hooks(
        self,
        *,
        install: Optional[Callable[["OutsideClickDispatcher"], None]],
        uninstall: Optional[Callable[["OutsideClickDispatcher"], None]],
    ) -> None:
        self._install = install
        self._uninstall = uninstall

    @property
    def owners(self) -> int:
        return len(self._owners)

    def acquire(self, owner: Hashable, contains: Contains, on_outside: OutsideHandler) -> None:
        self._owners[owner] = (contains, on_outside)
        if not self.installed:
            self.installed = True
            if self._install is not None:
                self._install(self)
            logger.debug("Outside-click listener installed")

    def release(self, owner: Hashable) -> None:
        if self._owners.pop(owner, None) is None:
            return
        if not self._owners and self.installed:
            self.installed = False
            if self._uninstall is not None:
                self._uninstall(self)
            logger.debug("Outside-click listener removed")

    def dispatch(self, target: Any, *, focusable: bool = False) -> int:
        """Notify every owner that does not contain ``target``.

        Returns the number of owners notified.
        """

        notified = 0
        for contains, on_outside in list(self._owners.values()):
            if contains(target):
                continue
            on_outside(target, focusable)
            notified += 1
        return notified


_DEFAULT_DISPATCHER = OutsideClickDispatcher()


def default_dispatcher() -> OutsideClickDispatcher:
    return _DEFAULT_DISPATCHER


__all__ = [
    "ContainerKind",
    "FocusCoordinator",
    "HeadlessFocusCoordinator",
    "OutsideClickDispatcher",
    "default_dispatcher",
]
