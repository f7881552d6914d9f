# lore_cli - Textual client for the lore wiki
# Description: Main application for lore_cli: entry list with search and type filter, a preview pane,
#   the create/edit form, media upload/attach and the light/dark theme toggle.
#
# Imports
import logging
import webbrowser
from pathlib import Path
from typing import Any, Dict, Optional
#
# 3rd-Party Libraries
from rich.markup import escape
# --- Textual Imports ---
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import (
    Button, Footer, Header, Input, Label, ListItem, ListView, Select, Static, Switch, TextArea
)
#
# --- Local Imports ---
from .api_client import LoreAPIClient, LoreAPIError
from .config import THEME_DARK, THEME_LIGHT, get_setting, get_theme_preference, save_theme_preference
from .state import (
    LoreViewState, build_entry_payload, describe_entry_meta, entry_summary, format_timestamp, guess_mimetype
)
#
#######################################################################################################################
#
# Functions:

log = logging.getLogger(__name__)

TEXTUAL_THEMES = {THEME_DARK: "textual-dark", THEME_LIGHT: "textual-light"}


class AlertScreen(ModalScreen[None]):
    """Blocking message box; dismissed with the OK button or escape."""

    BINDINGS = [Binding("escape", "dismiss_alert", "Close")]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="alert-dialog"):
            yield Static(escape(self.message), id="alert-message")
            yield Button("OK", id="alert-ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_dismiss_alert(self) -> None:
        self.dismiss(None)


class LoreCli(App):
    """Textual front end over the lore server API."""

    TITLE = "Lore Wiki"
    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
        Binding("ctrl+s", "save_entry", "Save", show=True),
        Binding("ctrl+r", "refresh", "Reload", show=True),
    ]

    CSS = """
    #sidebar { width: 45%; min-width: 40; border-right: thick $background-darken-1; padding: 0 1; }
    #filters { height: auto; }
    #search-input { width: 1fr; }
    #type-filter { width: 24; }
    #count-row { height: 1; }
    #count-badge { color: $accent; text-style: bold; }
    #entry-list { height: 1fr; }
    #main-pane { width: 1fr; padding: 0 1; }
    #preview-card { height: auto; max-height: 50%; border: round $accent; padding: 0 1; }
    #preview-card.hidden { display: none; }
    #preview-title { text-style: bold; }
    #preview-meta { color: $text-muted; }
    #preview-media { height: auto; max-height: 8; }
    #body-input { height: 8; }
    .row { height: auto; }
    .row Button { margin-right: 1; }
    #media-file { width: 1fr; }
    #theme-row { height: auto; align-horizontal: right; }
    #alert-dialog { width: 60; height: auto; border: thick $error; background: $surface; padding: 1 2; }
    AlertScreen { align: center middle; }
    """

    def __init__(self, client: Optional[LoreAPIClient] = None):
        super().__init__()
        if client is None:
            client = LoreAPIClient(
                base_url=get_setting("server", "url", "http://127.0.0.1:3000"),
                timeout=float(get_setting("server", "timeout", 30.0)),
            )
        self.client = client
        self.view_state = LoreViewState()

    # --- Layout ---
    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="sidebar"):
                with Horizontal(id="filters"):
                    yield Input(placeholder="Search lore...", id="search-input")
                    yield Select([], prompt="All", allow_blank=True, id="type-filter")
                with Horizontal(id="count-row"):
                    yield Label("Entries: ")
                    yield Label("0", id="count-badge")
                yield ListView(id="entry-list")
            with VerticalScroll(id="main-pane"):
                with Horizontal(id="theme-row"):
                    yield Label("Dark", id="theme-label")
                    yield Switch(value=False, id="theme-toggle")
                with Vertical(id="preview-card", classes="hidden"):
                    yield Static("", id="preview-title")
                    yield Static("", id="preview-meta")
                    yield Static("", id="preview-body")
                    yield ListView(id="preview-media")
                    with Horizontal(classes="row"):
                        yield Button("Open media", id="open-media-btn")
                        yield Button("Remove media", id="detach-media-btn", variant="warning")
                yield Label("Title")
                yield Input(placeholder="Untitled", id="title-input")
                yield Label("Type")
                yield Input(placeholder="npc, location, item...", id="type-input")
                yield Label("Tags (comma separated)")
                yield Input(id="tags-input")
                yield Label("Body")
                yield TextArea(id="body-input")
                with Horizontal(classes="row"):
                    yield Button("Save", id="save-btn", variant="primary")
                    yield Button("Delete", id="delete-btn", variant="error", disabled=True)
                    yield Button("Clear", id="clear-btn")
                with Horizontal(classes="row"):
                    yield Input(placeholder="Path to image or audio file", id="media-file")
                    yield Button("Upload", id="upload-btn")
        yield Footer()

    async def on_mount(self) -> None:
        self.apply_theme(get_theme_preference(), persist=False)
        await self.refresh_entries()
        self.fill_form(None)

    async def on_unmount(self) -> None:
        await self.client.aclose()

    # --- Theme ---
    def apply_theme(self, theme: str, persist: bool = True) -> None:
        theme = THEME_LIGHT if theme == THEME_LIGHT else THEME_DARK
        self.theme = TEXTUAL_THEMES[theme]
        toggle = self.query_one("#theme-toggle", Switch)
        if toggle.value != (theme == THEME_LIGHT):
            toggle.value = theme == THEME_LIGHT
        self.query_one("#theme-label", Label).update("Light" if theme == THEME_LIGHT else "Dark")
        if persist:
            save_theme_preference(theme)
        log.debug(f"Theme set to {theme} (persist={persist})")

    def on_switch_changed(self, event: Switch.Changed) -> None:
        if event.switch.id == "theme-toggle":
            self.apply_theme(THEME_LIGHT if event.value else THEME_DARK)

    # --- Data refresh ---
    async def refresh_entries(self) -> None:
        """Re-fetches the whole collection and re-renders every pane."""
        try:
            entries = await self.client.list_entries()
        except LoreAPIError as e:
            log.error(f"Failed to load entries: {e}")
            self.notify(e.message, title="Could not load entries", severity="error")
            return
        self.view_state.replace_entries(entries)
        self.render_type_filter_options()
        await self.render_list()

    async def action_refresh(self) -> None:
        await self.refresh_entries()

    # --- Rendering ---
    def render_type_filter_options(self) -> None:
        type_filter = self.query_one("#type-filter", Select)
        current = self.view_state.type_filter
        options = self.view_state.type_options()
        type_filter.set_options((t, t) for t in options)
        if current and current in options:
            type_filter.value = current
        else:
            type_filter.clear()
            self.view_state.set_type_filter("")

    async def render_list(self) -> None:
        entry_list = self.query_one("#entry-list", ListView)
        filtered = self.view_state.filtered_entries()
        self.query_one("#count-badge", Label).update(str(len(filtered)))

        await entry_list.clear()
        items = []
        for entry in filtered:
            title = escape(entry.get("title") or "")
            type_chip = f"  [reverse] {escape(entry['type'])} [/reverse]" if entry.get("type") else ""
            top = f"[b]{title}[/b]{type_chip}  [dim]{format_timestamp(entry.get('updatedAt'))}[/dim]"
            bottom = escape(entry_summary(entry))
            item = ListItem(Label(top), Label(bottom), name=entry["id"])
            if entry["id"] == self.view_state.selected_id:
                item.add_class("active")
            items.append(item)
        await entry_list.extend(items)

        selected_index = next(
            (i for i, e in enumerate(filtered) if e["id"] == self.view_state.selected_id), None
        )
        if selected_index is not None:
            entry_list.index = selected_index
        await self.render_preview(self.view_state.visible_selection())

    async def render_preview(self, entry: Optional[Dict[str, Any]]) -> None:
        card = self.query_one("#preview-card", Vertical)
        media_list = self.query_one("#preview-media", ListView)
        await media_list.clear()
        if entry is None:
            card.add_class("hidden")
            return

        card.remove_class("hidden")
        self.query_one("#preview-title", Static).update(escape(entry.get("title") or ""))
        self.query_one("#preview-meta", Static).update(escape(describe_entry_meta(entry)))
        self.query_one("#preview-body", Static).update(escape(entry.get("body") or ""))

        items = []
        for media in entry.get("media") or []:
            kind = media.get("kind", "other")
            filename = escape(media.get("filename", ""))
            if kind in ("image", "audio"):
                text = f"[b]{kind}[/b]  {filename}"
            else:
                text = f"[u]{filename}[/u]  ({escape(self.client.media_url(media))})"
            items.append(ListItem(Label(text), name=media.get("filename", "")))
        await media_list.extend(items)

    def fill_form(self, entry: Optional[Dict[str, Any]]) -> None:
        self.query_one("#title-input", Input).value = (entry or {}).get("title", "")
        self.query_one("#type-input", Input).value = (entry or {}).get("type", "")
        self.query_one("#tags-input", Input).value = ", ".join((entry or {}).get("tags") or [])
        self.query_one("#body-input", TextArea).load_text((entry or {}).get("body", ""))
        self.query_one("#delete-btn", Button).disabled = entry is None

    async def _rerender_after_mutation(self) -> None:
        await self.refresh_entries()
        current = self.view_state.selected_entry()
        self.fill_form(current)

    # --- Search / filter ---
    async def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self.view_state.set_search(event.value)
            await self.render_list()

    async def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "type-filter":
            return
        value = event.value if isinstance(event.value, str) else ""
        if value == self.view_state.type_filter:
            return
        self.view_state.set_type_filter(value)
        await self.render_list()

    # --- Selection ---
    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        if event.list_view.id != "entry-list" or event.item is None:
            return
        entry = self.view_state.find(event.item.name)
        if entry is None:
            return
        self.view_state.select(entry["id"])
        self.fill_form(entry)
        await self.render_list()

    # --- Buttons ---
    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        log.debug(f"Button pressed: {button_id}")
        if button_id == "save-btn":
            await self.action_save_entry()
        elif button_id == "delete-btn":
            await self.delete_selected()
        elif button_id == "clear-btn":
            await self.clear_form()
        elif button_id == "upload-btn":
            await self.upload_media()
        elif button_id == "detach-media-btn":
            await self.detach_highlighted_media()
        elif button_id == "open-media-btn":
            self.open_highlighted_media()

    async def action_save_entry(self) -> None:
        payload = build_entry_payload(
            self.query_one("#title-input", Input).value,
            self.query_one("#type-input", Input).value,
            self.query_one("#tags-input", Input).value,
            self.query_one("#body-input", TextArea).text,
        )
        try:
            if self.view_state.selected_id:
                await self.client.update_entry(self.view_state.selected_id, payload)
            else:
                saved = await self.client.create_entry(payload)
                self.view_state.select(saved["id"])
        except LoreAPIError as e:
            self.notify(e.message, title="Save failed", severity="error")
            return
        await self._rerender_after_mutation()

    async def delete_selected(self) -> None:
        entry_id = self.view_state.selected_id
        if not entry_id:
            return
        try:
            await self.client.delete_entry(entry_id)
        except LoreAPIError as e:
            self.notify(e.message, title="Delete failed", severity="error")
        self.view_state.clear_selection()
        await self._rerender_after_mutation()

    async def clear_form(self) -> None:
        self.view_state.clear_selection()
        self.fill_form(None)
        await self.render_list()

    async def upload_media(self) -> None:
        entry_id = self.view_state.selected_id
        path_input = self.query_one("#media-file", Input)
        file_path = path_input.value.strip()

        if not entry_id:
            self.push_screen(AlertScreen("Select or create a lore entry first, then upload."))
            return
        if not file_path:
            self.push_screen(AlertScreen("Choose a file first."))
            return

        path = Path(file_path).expanduser()
        try:
            uploaded = await self.client.upload_file(path, guess_mimetype(path.name))
            await self.client.attach_media(entry_id, uploaded)
        except LoreAPIError as e:
            log.warning(f"Upload of {path} failed: {e}")
            self.push_screen(AlertScreen(f"Upload failed: {e.message}"))
            return

        self.view_state.select(entry_id)
        await self._rerender_after_mutation()
        path_input.value = ""

    def _highlighted_media_filename(self) -> Optional[str]:
        item = self.query_one("#preview-media", ListView).highlighted_child
        return item.name if item is not None else None

    async def detach_highlighted_media(self) -> None:
        entry_id = self.view_state.selected_id
        filename = self._highlighted_media_filename()
        if not entry_id or not filename:
            return
        try:
            await self.client.detach_media(entry_id, filename)
        except LoreAPIError as e:
            self.notify(e.message, title="Remove media failed", severity="error")
            return
        await self._rerender_after_mutation()

    def open_highlighted_media(self) -> None:
        entry = self.view_state.selected_entry()
        filename = self._highlighted_media_filename()
        if entry is None or not filename:
            return
        media = next((m for m in entry.get("media") or [] if m.get("filename") == filename), None)
        if media is not None:
            webbrowser.open(self.client.media_url(media))

#
# End of app.py
#######################################################################################################################
