# state.py
# Description: In-memory view state for the lore client: the fetched entry collection, the selection and the
#   active search/type filters, plus the pure helpers used to render them.
#
# Imports
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
#
# 3rd-Party Libraries
#
# Local Imports
#
#######################################################################################################################
#
# Functions:

Entry = Dict[str, Any]

DEFAULT_TITLE = "Untitled"
TAG_PREVIEW_COUNT = 3


def entry_haystack(entry: Entry) -> str:
    """Lowercased text searched by the free-text filter: title, type, body, tags and attached filenames."""
    parts = [
        entry.get("title") or "",
        entry.get("type") or "",
        entry.get("body") or "",
        " ".join(entry.get("tags") or []),
        " ".join(m.get("filename", "") for m in entry.get("media") or []),
    ]
    return " ".join(parts).lower()


def entry_matches(entry: Entry, query: str = "", type_filter: str = "") -> bool:
    wanted_type = (type_filter or "").strip().lower()
    if wanted_type and (entry.get("type") or "").lower() != wanted_type:
        return False
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return needle in entry_haystack(entry)


def filter_entries(entries: List[Entry], query: str = "", type_filter: str = "") -> List[Entry]:
    return [e for e in entries if entry_matches(e, query, type_filter)]


def type_options(entries: List[Entry]) -> List[str]:
    return sorted({e.get("type") for e in entries if e.get("type")})


def parse_tags_input(text: str) -> List[str]:
    return [t.strip() for t in (text or "").split(",") if t.strip()]


def build_entry_payload(title: str, type_: str, tags_text: str, body: str) -> Dict[str, Any]:
    return {
        "title": (title or "").strip() or DEFAULT_TITLE,
        "type": (type_ or "").strip(),
        "tags": parse_tags_input(tags_text),
        "body": (body or "").strip(),
    }


def format_timestamp(epoch_ms: Optional[int]) -> str:
    if not epoch_ms:
        return ""
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def describe_entry_meta(entry: Entry) -> str:
    bits = []
    if entry.get("type"):
        bits.append(entry["type"])
    if entry.get("tags"):
        bits.append("#" + " #".join(entry["tags"]))
    bits.append("Updated: " + format_timestamp(entry.get("updatedAt")))
    return " | ".join(bits)


def entry_summary(entry: Entry, width: int = 60) -> str:
    body = " ".join((entry.get("body") or "").split())
    if len(body) > width:
        body = body[: width - 1] + "…"
    chips = " ".join(f"[{t}]" for t in (entry.get("tags") or [])[:TAG_PREVIEW_COUNT])
    return f"{body} {chips}".strip()


def guess_mimetype(path: str) -> str:
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"


@dataclass
class LoreViewState:
    entries: List[Entry] = field(default_factory=list)
    selected_id: Optional[str] = None
    search_query: str = ""
    type_filter: str = ""

    def replace_entries(self, entries: List[Entry]) -> None:
        self.entries = list(entries)

    def select(self, entry_id: Optional[str]) -> None:
        self.selected_id = entry_id

    def clear_selection(self) -> None:
        self.selected_id = None

    def set_search(self, query: str) -> None:
        self.search_query = query or ""

    def set_type_filter(self, type_filter: str) -> None:
        self.type_filter = type_filter or ""

    def find(self, entry_id: Optional[str]) -> Optional[Entry]:
        if not entry_id:
            return None
        return next((e for e in self.entries if e.get("id") == entry_id), None)

    def selected_entry(self) -> Optional[Entry]:
        return self.find(self.selected_id)

    def filtered_entries(self) -> List[Entry]:
        return filter_entries(self.entries, self.search_query, self.type_filter)

    def visible_selection(self) -> Optional[Entry]:
        """The selected entry if it passes the current filters, else None (the preview clears)."""
        if not self.selected_id:
            return None
        return next((e for e in self.filtered_entries() if e.get("id") == self.selected_id), None)

    def type_options(self) -> List[str]:
        return type_options(self.entries)

#
# End of state.py
#######################################################################################################################
