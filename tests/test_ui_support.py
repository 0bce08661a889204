"""Tests for the Tk adapter layer."""

from __future__ import annotations

import tkinter as tk
from types import SimpleNamespace
from typing import Any, Callable, Dict, List

import pytest

from listbox import (
    ContainerKind,
    KeyInput,
    OptionRegistry,
    OutsideClickDispatcher,
    Status,
    default_dispatcher,
)
from ui_support import (
    KeyboardManager,
    TkAfterScheduler,
    TkFocusCoordinator,
    TkListboxBinding,
    translate_key_event,
    widget_contains,
)


@pytest.fixture(name="tk_root")
def fixture_tk_root() -> tk.Tk:
    """Create a Tk root for widget tests and ensure cleanup."""

    try:
        root = tk.Tk()
    except tk.TclError as exc:
        pytest.skip(f"Tk not available: {exc}")
    root.withdraw()
    yield root
    root.destroy()


class FakeWidget:
    """Records bindings and focus calls the way a Tk widget would receive them."""

    focused: "FakeWidget | None" = None

    def __init__(self, path: str, toplevel: "FakeWidget | None" = None) -> None:
        self.path = path
        self._toplevel = toplevel or self
        self.bindings: Dict[str, List[tuple[str, Callable[..., Any]]]] = {}
        self.global_bindings: Dict[str, List[tuple[str, Callable[..., Any]]]] = {}
        self.deleted_commands: List[str] = []
        self.tk = SimpleNamespace(deletecommand=self.deleted_commands.append)
        self.idle: List[Callable[[], Any]] = []
        self.after_calls: List[tuple[int, Callable[[], Any]]] = []
        self.cancelled: List[str] = []
        self.takefocus = "0"
        self._ids = 0

    def __str__(self) -> str:
        return self.path

    def winfo_toplevel(self) -> "FakeWidget":
        return self._toplevel

    def bind(self, sequence: str, handler: Callable[..., Any], add: str = "") -> str:
        self._ids += 1
        funcid = f"{self.path}-{self._ids}"
        self.bindings.setdefault(sequence, []).append((funcid, handler))
        return funcid

    def unbind(self, sequence: str, funcid: str | None = None) -> None:
        self.bindings[sequence] = [
            entry for entry in self.bindings.get(sequence, []) if entry[0] != funcid
        ]

    def bind_all(
        self, sequence: str, func: Callable[..., Any] | str | None = None, add: str = ""
    ) -> str | None:
        entries = self.global_bindings.setdefault(sequence, [])
        if func is None:
            return "\n".join(
                f'if {{"[{funcid} %# %b]" == "break"}} break' for funcid, _ in entries
            )
        if isinstance(func, str):
            self.global_bindings[sequence] = [
                entry for entry in entries if f"[{entry[0]} " in func
            ]
            return None
        self._ids += 1
        funcid = f"global{self._ids}on_event"
        if not add:
            entries.clear()
        entries.append((funcid, func))
        return funcid

    def global_handlers(self, sequence: str) -> List[Callable[..., Any]]:
        return [handler for _, handler in self.global_bindings.get(sequence, [])]

    def press_anywhere(self, widget: "FakeWidget") -> None:
        for handler in self.global_handlers("<ButtonPress>"):
            handler(SimpleNamespace(widget=widget))

    def fire(self, sequence: str, **event_fields: Any) -> List[Any]:
        event = SimpleNamespace(widget=self, **event_fields)
        return [handler(event) for _, handler in list(self.bindings.get(sequence, []))]

    def after_idle(self, callback: Callable[[], Any]) -> None:
        self.idle.append(callback)

    def after(self, delay: int, callback: Callable[[], Any]) -> str:
        self.after_calls.append((delay, callback))
        return f"after#{len(self.after_calls)}"

    def after_cancel(self, handle: str) -> None:
        self.cancelled.append(handle)

    def focus_set(self) -> None:
        FakeWidget.focused = self

    def focus_get(self) -> "FakeWidget | None":
        return FakeWidget.focused

    def cget(self, option: str) -> str:
        if option != "takefocus":
            raise tk.TclError(option)
        return self.takefocus


def _key(keysym: str, char: str = "", state: int = 0) -> SimpleNamespace:
    return SimpleNamespace(keysym=keysym, char=char, state=state)


def _build(*names: str) -> tuple[TkListboxBinding, FakeWidget, FakeWidget, OutsideClickDispatcher]:
    root = FakeWidget(".")
    button = FakeWidget(".button", root)
    container = FakeWidget(".options", root)
    registry = OptionRegistry()
    for name in names:
        registry.register(name, name)
    dispatcher = OutsideClickDispatcher()
    FakeWidget.focused = button
    binding = TkListboxBinding.create(
        button=button,  # type: ignore[arg-type]
        container=container,  # type: ignore[arg-type]
        registry=registry,
        dispatcher=dispatcher,
    )
    return binding, button, container, dispatcher


# ----------------------------------------------------------------------
# Key translation
# ----------------------------------------------------------------------
@pytest.mark.parametrize(
    ("keysym", "expected"),
    [
        ("Down", "ArrowDown"),
        ("Up", "ArrowUp"),
        ("Prior", "PageUp"),
        ("Next", "PageDown"),
        ("Return", "Enter"),
        ("KP_Enter", "Enter"),
        ("space", " "),
        ("Escape", "Escape"),
        ("Tab", "Tab"),
    ],
)
def test_translate_named_keys(keysym: str, expected: str) -> None:
    assert translate_key_event(_key(keysym)) == KeyInput(expected)


def test_translate_printable_and_modifiers() -> None:
    assert translate_key_event(_key("a", "a")) == KeyInput("a")
    assert translate_key_event(_key("A", "A", state=0x0001)) == KeyInput("A", shift=True)
    assert translate_key_event(_key("a", "\x01", state=0x0004)) is None
    assert translate_key_event(_key("x", "x", state=0x0004)).ctrl
    assert translate_key_event(_key("ISO_Left_Tab")).shift
    assert translate_key_event(_key("Shift_L")) is None


# ----------------------------------------------------------------------
# Focus and timers
# ----------------------------------------------------------------------
def test_widget_contains_matches_descendants() -> None:
    parent = FakeWidget(".frame")

    assert widget_contains(parent, FakeWidget(".frame"))
    assert widget_contains(parent, FakeWidget(".frame.label"))
    assert not widget_contains(parent, FakeWidget(".frame2"))
    assert not widget_contains(parent, None)


def test_tk_focus_coordinator_moves_focus() -> None:
    button = FakeWidget(".button")
    container = FakeWidget(".options")
    coordinator = TkFocusCoordinator(button, container)  # type: ignore[arg-type]

    coordinator.focus_options_container()
    assert coordinator.is_focus_within(ContainerKind.OPTIONS)
    assert not coordinator.is_focus_within(ContainerKind.BUTTON)

    coordinator.focus_button()
    assert coordinator.is_focus_within(ContainerKind.BUTTON)


def test_tk_focus_coordinator_tolerates_focus_get_errors() -> None:
    widget = SimpleNamespace(focus_get=lambda: (_ for _ in ()).throw(KeyError("popdown")))
    coordinator = TkFocusCoordinator(widget, widget)  # type: ignore[arg-type]

    assert not coordinator.is_focus_within(ContainerKind.OPTIONS)


def test_tk_after_scheduler_delegates_to_after() -> None:
    master = FakeWidget(".")
    scheduler = TkAfterScheduler(master)  # type: ignore[arg-type]
    fired: list[str] = []

    handle = scheduler.schedule(350, lambda: fired.append("expired"))
    scheduler.cancel(handle)

    assert master.after_calls[0][0] == 350
    assert master.cancelled == [handle]
    assert scheduler.now() > 0


def test_tk_after_scheduler_swallows_stale_cancel() -> None:
    def after_cancel(_handle: str) -> None:
        raise tk.TclError("gone")

    scheduler = TkAfterScheduler(SimpleNamespace(after_cancel=after_cancel))  # type: ignore[arg-type]

    scheduler.cancel("after#1")


# ----------------------------------------------------------------------
# Keyboard manager
# ----------------------------------------------------------------------
def test_keyboard_manager_shortcuts_and_clear() -> None:
    root = FakeWidget(".")
    manager = KeyboardManager(root)  # type: ignore[arg-type]

    def host_handler(_event: Any) -> None:
        return None

    root.bind_all("<Alt-l>", host_handler, add="+")
    manager.register_shortcuts({"<Alt-l>": lambda _event: "break"})
    assert len(root.global_handlers("<Alt-l>")) == 2

    manager.clear()
    assert root.global_handlers("<Alt-l>") == [host_handler]
    assert len(root.deleted_commands) == 1


def test_keyboard_manager_routes_keys_and_breaks_default() -> None:
    binding, button, container, _ = _build("A", "B")

    results = button.fire("<KeyPress>", **vars(_key("Down")))
    assert results == ["break"]
    assert binding.machine.state.status is Status.OPEN

    results = container.fire("<KeyPress>", **vars(_key("Tab")))
    assert results == [None]
    assert binding.machine.state.status is Status.CLOSED

    assert container.fire("<KeyPress>", **vars(_key("Shift_L"))) == [None]


# ----------------------------------------------------------------------
# Listbox binding
# ----------------------------------------------------------------------
def test_button_press_toggles_and_moves_focus() -> None:
    binding, button, container, _ = _build("A", "B")

    assert button.fire("<Button-1>") == ["break"]
    assert binding.machine.state.is_open
    assert FakeWidget.focused is container

    button.fire("<Button-1>")
    assert not binding.machine.state.is_open
    assert FakeWidget.focused is button


def test_option_pointer_bindings() -> None:
    binding, button, container, _ = _build("A", "B")
    option_widget = FakeWidget(".options.b", container.winfo_toplevel())
    binding.bind_option(option_widget, "B")  # type: ignore[arg-type]
    button.fire("<Button-1>")

    option_widget.fire("<Enter>")
    assert binding.machine.state.active_id == "B"
    option_widget.fire("<Leave>")
    assert binding.machine.state.active_id is None
    option_widget.fire("<Button-1>")

    assert binding.machine.state.selected_value == "B"
    assert not binding.machine.state.is_open


def test_rebinding_an_option_replaces_previous_handlers() -> None:
    binding, _, container, _ = _build("A")
    widget = FakeWidget(".options.a", container.winfo_toplevel())

    binding.bind_option(widget, "A")  # type: ignore[arg-type]
    binding.bind_option(widget, "A")  # type: ignore[arg-type]

    assert len(widget.bindings["<Enter>"]) == 1
    binding.unbind_option("A")
    assert widget.bindings["<Enter>"] == []


def test_global_press_is_installed_only_while_open() -> None:
    binding, button, container, dispatcher = _build("A")
    root = button.winfo_toplevel()
    assert root.global_handlers("<ButtonPress>") == []

    button.fire("<Button-1>")
    assert len(root.global_handlers("<ButtonPress>")) == 1
    root.press_anywhere(FakeWidget(".options.a"))
    assert binding.machine.state.is_open

    outside = FakeWidget(".entry")
    outside.takefocus = "1"
    root.press_anywhere(outside)

    assert not binding.machine.state.is_open
    assert root.global_handlers("<ButtonPress>") == []
    assert dispatcher.owners == 0


def test_closing_keeps_host_global_press_handlers() -> None:
    binding, button, _, _ = _build("A")
    root = button.winfo_toplevel()
    host_presses: list[str] = []

    def host_handler(event: Any) -> None:
        host_presses.append(str(event.widget))

    root.bind_all("<ButtonPress>", host_handler)

    for _ in range(2):
        button.fire("<Button-1>")
        assert len(root.global_handlers("<ButtonPress>")) == 2
        root.press_anywhere(FakeWidget(".entry"))
        assert not binding.machine.state.is_open
        assert root.global_handlers("<ButtonPress>") == [host_handler]

    root.press_anywhere(FakeWidget(".label"))
    assert host_presses == [".entry", ".entry", ".label"]
    assert len(root.deleted_commands) == 2


def test_focus_out_checks_focus_after_idle() -> None:
    binding, button, container, _ = _build("A")
    button.fire("<Button-1>")

    container.fire("<FocusOut>")
    FakeWidget.focused = FakeWidget(".elsewhere")
    for callback in container.idle:
        callback()

    assert not binding.machine.state.is_open
    assert str(FakeWidget.focused) == ".elsewhere"


def test_destroy_releases_all_bindings() -> None:
    binding, button, container, dispatcher = _build("A")
    button.fire("<Button-1>")

    binding.destroy()

    assert button.bindings["<Button-1>"] == []
    assert button.bindings["<KeyPress>"] == []
    assert container.bindings["<FocusOut>"] == []
    assert dispatcher.owners == 0


def test_binding_with_real_widgets(tk_root: tk.Tk) -> None:
    button = tk.Button(tk_root, text="Pick")
    container = tk.Frame(tk_root)
    label = tk.Label(container, text="Only")
    registry = OptionRegistry()
    registry.register("only", "Only")

    binding = TkListboxBinding.create(
        button=button,
        container=container,
        registry=registry,
        dispatcher=OutsideClickDispatcher(),
    )
    binding.bind_option(label, "only")

    assert "<Button-1>" in button.bind()
    assert container.bind()
    assert "<Enter>" in label.bind()

    binding.machine.toggle()
    assert binding.machine.state.active_id == "only"
    binding.machine.select_active()
    assert binding.machine.state.selected_value == "Only"

    binding.destroy()


def test_demo_renders_projection(tk_root: tk.Tk, tmp_path) -> None:
    from config_manager import Config
    from listbox_demo import DEMO_OPTIONS, ListboxDemo

    demo = ListboxDemo(tk_root, Config(str(tmp_path / "listbox.ini")))
    machine = demo.binding.machine

    assert len(demo.labels) == len(DEMO_OPTIONS)
    assert not demo.container.winfo_ismapped()

    assert tk_root.bind_all("<Alt-l>")
    assert demo.open_from_shortcut(None) == "break"
    assert machine.state.is_open
    machine.set_active("Devon Webb")
    machine.select_active()

    assert demo.button.cget("text") == "Devon Webb"
    assert demo.labels["Devon Webb"].cget("text").startswith("✓")
    assert demo.labels["Tom Cook"].cget("foreground") == "#9ca3af"

    demo.close()
    assert not tk_root.bind_all("<Alt-l>")
    default_dispatcher().configure_hooks(install=None, uninstall=None)
