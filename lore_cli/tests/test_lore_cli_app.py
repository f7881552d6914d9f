# test_lore_cli_app.py
# Description: Drives the Textual client with a pilot against the in-process lore server.
#
# Imports
import inspect
#
# 3rd-party Libraries
import pytest
from textual.app import App
from textual.widgets import Button, Input, ListView, Select, Switch, TextArea
#
# Local Imports
from lore_cli.lore_cli_app import config as cli_config
from lore_cli.lore_cli_app.app import AlertScreen, LoreCli
#
#######################################################################################################################
#
# Helpers

SCREEN_SIZE = (160, 60)


def fill_form(app, title="", type_="", tags="", body=""):
    app.query_one("#title-input", Input).value = title
    app.query_one("#type-input", Input).value = type_
    app.query_one("#tags-input", Input).value = tags
    app.query_one("#body-input", TextArea).load_text(body)


async def create_through_form(app, pilot, **fields):
    await app.clear_form()
    fill_form(app, **fields)
    await app.action_save_entry()
    await pilot.pause()
    return app.view_state.selected_entry()


def visible_rows(app):
    return len(app.query_one("#entry-list", ListView).children)


def preview_hidden(app):
    return app.query_one("#preview-card").has_class("hidden")


#######################################################################################################################
#
# Tests:


@pytest.mark.asyncio
async def test_create_edit_and_delete(make_api_client, server_library, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            assert visible_rows(app) == 0
            assert preview_hidden(app)
            assert app.query_one("#delete-btn", Button).disabled

            dragon = await create_through_form(app, pilot, title="Red Dragon", type_="npc", tags="boss, fire",
                                               body="Sleeps under the peak")
            assert dragon is not None
            assert dragon["tags"] == ["boss", "fire"]
            assert visible_rows(app) == 1
            assert not preview_hidden(app)
            assert not app.query_one("#delete-btn", Button).disabled
            assert [e.title for e in server_library.list_entries()] == ["Red Dragon"]

            # Editing the selected entry updates it in place
            app.query_one("#body-input", TextArea).load_text("Awake now")
            await app.action_save_entry()
            await pilot.pause()
            assert server_library.get_entry(dragon["id"]).body == "Awake now"
            assert len(server_library.list_entries()) == 1

            await app.delete_selected()
            await pilot.pause()
            assert server_library.list_entries() == []
            assert app.view_state.selected_id is None
            assert visible_rows(app) == 0
            assert preview_hidden(app)


@pytest.mark.asyncio
async def test_blank_title_is_saved_as_untitled(make_api_client, server_library, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            entry = await create_through_form(app, pilot, title="   ", body="nameless")
            assert entry["title"] == "Untitled"
            assert server_library.list_entries()[0].title == "Untitled"


@pytest.mark.asyncio
async def test_search_and_type_filter(make_api_client, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            await create_through_form(app, pilot, title="Red Dragon", type_="npc")
            await create_through_form(app, pilot, title="Harbor Town", type_="location")
            await create_through_form(app, pilot, title="Innkeeper", type_="npc")
            await app.clear_form()
            await pilot.pause()
            assert visible_rows(app) == 3

            app.query_one("#type-filter", Select).value = "npc"
            await pilot.pause()
            assert app.view_state.type_filter == "npc"
            assert visible_rows(app) == 2

            app.query_one("#search-input", Input).value = "drag"
            await pilot.pause()
            assert visible_rows(app) == 1

            app.query_one("#type-filter", Select).clear()
            app.query_one("#search-input", Input).value = ""
            await pilot.pause()
            assert visible_rows(app) == 3


@pytest.mark.asyncio
async def test_selection_hidden_by_filter_clears_preview(make_api_client, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            await create_through_form(app, pilot, title="Red Dragon", type_="npc")
            harbor = await create_through_form(app, pilot, title="Harbor Town", type_="location")
            assert app.view_state.selected_id == harbor["id"]
            assert not preview_hidden(app)

            app.query_one("#type-filter", Select).value = "npc"
            await pilot.pause()
            assert preview_hidden(app)
            assert app.view_state.selected_id == harbor["id"]


@pytest.mark.asyncio
async def test_selecting_from_list_fills_form(make_api_client, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            dragon = await create_through_form(app, pilot, title="Red Dragon", type_="npc", tags="boss")
            await app.clear_form()
            await pilot.pause()
            assert app.query_one("#title-input", Input).value == ""

            entry_list = app.query_one("#entry-list", ListView)
            entry_list.focus()
            entry_list.index = 0
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()

            assert app.view_state.selected_id == dragon["id"]
            assert app.query_one("#title-input", Input).value == "Red Dragon"
            assert app.query_one("#tags-input", Input).value == "boss"
            assert not preview_hidden(app)


@pytest.mark.asyncio
async def test_upload_requires_selected_entry(make_api_client, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            await app.upload_media()
            await pilot.pause()
            assert isinstance(app.screen, AlertScreen)
            assert app.screen.message == "Select or create a lore entry first, then upload."

            await pilot.press("escape")
            await pilot.pause()
            assert not isinstance(app.screen, AlertScreen)


@pytest.mark.asyncio
async def test_upload_attaches_media_and_rejection_alerts(make_api_client, server_library, cli_config_path,
                                                          tmp_path):
    image = tmp_path / "harbor map.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)
    notes = tmp_path / "notes.txt"
    notes.write_text("plain")

    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            harbor = await create_through_form(app, pilot, title="Harbor Town")

            app.query_one("#media-file", Input).value = str(image)
            await app.upload_media()
            await pilot.pause()
            media = server_library.get_entry(harbor["id"]).media
            assert len(media) == 1
            assert media[0].kind == "image"
            assert len(app.query_one("#preview-media", ListView).children) == 1
            assert app.query_one("#media-file", Input).value == ""

            app.query_one("#media-file", Input).value = str(notes)
            await app.upload_media()
            await pilot.pause()
            assert isinstance(app.screen, AlertScreen)
            assert app.screen.message.startswith("Upload failed: Unsupported file type")
            await pilot.press("escape")
            await pilot.pause()
            assert len(server_library.get_entry(harbor["id"]).media) == 1


@pytest.mark.asyncio
async def test_theme_toggle_is_persisted(make_api_client, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            assert app.theme == "textual-dark"

            app.query_one("#theme-toggle", Switch).value = True
            await pilot.pause()
            assert app.theme == "textual-light"
            assert cli_config.get_theme_preference() == cli_config.THEME_LIGHT

    reloaded = cli_config.load_config(cli_config_path, reload=True)
    assert reloaded["appearance"]["theme"] == "light"

    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            assert app.theme == "textual-light"
            assert app.query_one("#theme-toggle", Switch).value is True


def test_app_handlers_do_not_replace_framework_methods():
    # Textual calls its own App methods synchronously; an async override would never run.
    assert "clear_selection" not in vars(LoreCli)
    for name, member in vars(LoreCli).items():
        if name.startswith(("on_", "action_", "_")):
            # Message handlers and actions are dispatched through Textual's invoke, which awaits either kind
            continue
        base = getattr(App, name, None)
        if base is None or not callable(base):
            continue
        assert inspect.iscoroutinefunction(member) == inspect.iscoroutinefunction(base), name


@pytest.mark.asyncio
async def test_clear_button_resets_form(make_api_client, cli_config_path):
    http_client, api = make_api_client()
    async with http_client:
        app = LoreCli(client=api)
        async with app.run_test(size=SCREEN_SIZE) as pilot:
            await pilot.pause()
            await create_through_form(app, pilot, title="Red Dragon", type_="npc", body="Sleeps")
            assert app.view_state.selected_id is not None

            app.query_one("#clear-btn", Button).press()
            await pilot.pause()
            assert app.view_state.selected_id is None
            assert app.query_one("#title-input", Input).value == ""
            assert app.query_one("#body-input", TextArea).text == ""
            assert app.query_one("#delete-btn", Button).disabled
            assert preview_hidden(app)

#
# End of test_lore_cli_app.py
#######################################################################################################################
