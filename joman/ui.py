# -*- coding: utf-8 -*-
"""Textual UI for joman.

This file contains ONLY the UI: screens, modals, and the App wrapper.
It expects the backend in :mod:`joman.logic` to expose:
    - load_config(), save_config()
    - list_entries(), read_entry(), add_text()

Reading needs the private key; writing a new entry only touches the public
key, so the browser can be used to add entries on a machine that does not
hold the private key.

Theme switching:
    We use a single theme.css with 3 variants (vt220/amber/neon) implemented
    as CSS class scopes: `.theme-vt220`, `.theme-amber`, `.theme-neon`.
    The app toggles one of these classes at runtime based on the saved config.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
    TabPane,
    TabbedContent,
    TextArea,
)

from joman.errors import JomanError
from joman.logic import (
    add_text,
    list_entries,
    load_config,
    read_entry,
    save_config,
)

THEME_CSS_PATH = str(Path(__file__).with_name("theme.css"))

THEMES = {
    "vt220_green": "theme-vt220",
    "as400_amber": "theme-amber",
    "vector_neon": "theme-neon",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _apply_app_theme(app: App, theme_key: str) -> None:
    """Attach exactly one of the theme classes to the App."""
    target = THEMES.get(theme_key, "theme-vt220")
    for cls in THEMES.values():
        app.set_class(False, cls)
    app.set_class(True, target)


# ---------------------------------------------------------------------------
# Modals
# ---------------------------------------------------------------------------

class SettingsModal(ModalScreen[None]):
    """Theme choice, persisted to config."""

    def compose(self) -> ComposeResult:
        active = str(load_config().get("active_theme", "vt220_green"))
        yield Container(
            Static("SETTINGS", classes="title"),
            Horizontal(
                Button("VT220 GREEN", id="t_green", classes="-primary" if active == "vt220_green" else ""),
                Button("AS/400 AMBER", id="t_amber", classes="-primary" if active == "as400_amber" else ""),
                Button("VECTOR NEON", id="t_neon", classes="-primary" if active == "vector_neon" else ""),
                id="theme-row",
            ),
            Horizontal(Button("Close", id="close")),
            id="modal-card",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        choice = {
            "t_green": "vt220_green",
            "t_amber": "as400_amber",
            "t_neon": "vector_neon",
        }.get(event.button.id or "")
        if choice:
            cfg = load_config()
            cfg["active_theme"] = choice
            save_config(cfg)
            _apply_app_theme(self.app, choice)
            self.app.notify("Theme saved.")
        self.app.pop_screen()


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

class HomeScreen(Screen):
    """Browse / New Entry tabs."""

    BINDINGS = [Binding("escape", "app.quit", "Quit")]

    def compose(self) -> ComposeResult:
        yield Header()

        with Container(id="modal-card"):
            with TabbedContent():
                with TabPane("Browse"):
                    self.list_view = ListView(id="entries")
                    yield self.list_view
                with TabPane("New Entry"):
                    self.title_in = Input(placeholder="title (blank for entry_N)", id="title")
                    self.body_in = TextArea(id="body")
                    yield self.title_in
                    yield self.body_in
                    yield Button("Save Entry", id="save_entry", classes="-primary")
            yield Horizontal(
                Button("Refresh", id="refresh"),
                Button("Settings", id="open_settings"),
                Button("Quit", id="quit"),
                id="actions",
            )

        yield Footer()

    def on_mount(self) -> None:
        self.refresh_list()

    def refresh_list(self) -> None:
        self.list_view.clear()
        try:
            entries = list_entries(self.app.journal_root)
        except JomanError as exc:
            self.app.notify(str(exc), severity="error")
            return
        if not entries:
            self.list_view.append(ListItem(Label("No entries.")))
            return
        for info in entries:
            label = f"{info.modified:%Y-%m-%d %H:%M} — {info.name}"
            self.list_view.append(ListItem(Label(label), name=info.name))

    def save_entry(self) -> Optional[Path]:
        """Encrypt the New Entry form; return the written path."""
        title = self.title_in.value.strip() or None
        body = self.body_in.text
        if not body.strip():
            self.app.notify("Journal entry is empty.")
            return None
        try:
            dest = add_text(self.app.journal_root, body, title=title)
        except JomanError as exc:
            self.app.notify(str(exc), severity="error")
            return None
        self.title_in.value = ""
        self.body_in.text = ""
        self.refresh_list()
        self.app.notify(f"Saved {dest.name}")
        return dest

    async def on_list_view_selected(self, message: ListView.Selected) -> None:
        if message.item.name:
            await self.app.push_screen(ViewEntryScreen(message.item.name))

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "save_entry":
            self.save_entry()
        elif bid == "refresh":
            self.refresh_list()
        elif bid == "open_settings":
            await self.app.push_screen(SettingsModal())
        elif bid == "quit":
            self.app.exit()


class ViewEntryScreen(Screen):
    """Read-only view of one decrypted entry."""

    BINDINGS = [Binding("escape", "app.pop_screen", "Back")]

    def __init__(self, entry_name: str) -> None:
        super().__init__()
        self.entry_name = entry_name

    def compose(self) -> ComposeResult:
        yield Header()

        with Container(id="modal-card"):
            self.title_label = Static(self.entry_name, classes="title")
            yield self.title_label

            self.meta_label = Static("", classes="hint")
            yield self.meta_label

            self.body_area = TextArea(id="entry-text", read_only=True)
            yield self.body_area

            with Horizontal(id="actions"):
                yield Button("Back", id="back", classes="-primary")

        yield Footer()

    def on_mount(self) -> None:
        try:
            text = read_entry(self.app.journal_root, self.entry_name, self.app.key_path)
        except JomanError as exc:
            self.app.notify(f"Cannot read {self.entry_name}: {exc}", severity="error")
            self.meta_label.update("(unreadable)")
            return
        self.meta_label.update(f"{len(text)} characters")
        self.body_area.text = text
        self.set_focus(self.body_area)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if (event.button.id or "") == "back":
            self.app.pop_screen()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

class JomanApp(App):
    """Textual App wrapper. Loads CSS and the home screen; applies theme."""

    TITLE = "JOMAN"
    CSS_PATH = THEME_CSS_PATH

    def __init__(self, root: Path, key_path: Path) -> None:
        super().__init__()
        self.journal_root = Path(root)
        self.key_path = Path(key_path)

    async def on_mount(self) -> None:
        cfg = load_config()
        _apply_app_theme(self, str(cfg.get("active_theme", "vt220_green")))
        await self.push_screen(HomeScreen())
