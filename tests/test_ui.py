"""
joman - UI tests.

Runs the Textual browser headless and checks listing, reading and writing.
"""

import pytest

from joman import logic
from joman.ui import HomeScreen, JomanApp, ViewEntryScreen, _apply_app_theme


@pytest.mark.asyncio
async def test_home_lists_entries(journal_root):
    logic.add_text(journal_root, "first", title="alpha")
    logic.add_text(journal_root, "second", title="beta")
    app = JomanApp(journal_root, journal_root / "private.pem")

    async with app.run_test() as pilot:
        await pilot.pause()
        assert isinstance(app.screen, HomeScreen)
        names = [item.name for item in app.screen.list_view.query("ListItem")]
        assert names == ["alpha.enc", "beta.enc"]


@pytest.mark.asyncio
async def test_view_entry_decrypts(journal_root):
    logic.add_text(journal_root, "hello journal", title="hello")
    app = JomanApp(journal_root, journal_root / "private.pem")

    async with app.run_test() as pilot:
        await pilot.pause()
        await app.push_screen(ViewEntryScreen("hello.enc"))
        await pilot.pause()
        assert app.screen.body_area.text == "hello journal"


@pytest.mark.asyncio
async def test_view_entry_with_missing_key(journal_root):
    logic.add_text(journal_root, "hidden", title="hidden")
    app = JomanApp(journal_root, journal_root / "absent.pem")

    async with app.run_test() as pilot:
        await pilot.pause()
        await app.push_screen(ViewEntryScreen("hidden.enc"))
        await pilot.pause()
        assert app.screen.body_area.text == ""


@pytest.mark.asyncio
async def test_save_entry_from_form(journal_root):
    app = JomanApp(journal_root, journal_root / "private.pem")

    async with app.run_test() as pilot:
        await pilot.pause()
        home = app.screen
        home.title_in.value = "from-ui"
        home.body_in.text = "typed in the browser"
        dest = home.save_entry()
        await pilot.pause()

    assert dest is not None and dest.name == "from-ui.enc"
    key = journal_root / "private.pem"
    assert logic.read_entry(journal_root, "from-ui.enc", key) == "typed in the browser"


@pytest.mark.asyncio
async def test_empty_form_not_saved(journal_root):
    app = JomanApp(journal_root, journal_root / "private.pem")

    async with app.run_test() as pilot:
        await pilot.pause()
        app.screen.body_in.text = "   "
        assert app.screen.save_entry() is None

    assert logic.list_entries(journal_root) == []


@pytest.mark.asyncio
async def test_theme_class_applied(journal_root):
    app = JomanApp(journal_root, journal_root / "private.pem")

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.has_class("theme-vt220")
        _apply_app_theme(app, "as400_amber")
        assert app.has_class("theme-amber")
        assert not app.has_class("theme-vt220")
