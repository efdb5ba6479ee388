"""
Client-side search over the pre-built JSON index.

The index is a list of entries produced at build time (see build.py):

  [
    {
      "title": "...",
      "content": "plain text body",
      "summary": "...",
      "tags": ["..."],
      "date": "2024-03-05",
      "permalink": "/posts/some-post/"
    },
    ...
  ]
"""
import re
import sys
import html
import json
from enum import Enum
from pathlib import Path
from datetime import datetime
from dataclasses import dataclass, field

import httpx          # pip install httpx

MAX_RESULTS = 10
EXCERPT_LENGTH = 150
DEBOUNCE_SECONDS = 0.150

NO_RESULTS_HTML = '<div class="search__no-results">No results found</div>'


@dataclass
class SearchEntry:
    title: str
    content: str
    permalink: str
    date: str = ""
    summary: str = ""
    tags: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SearchEntry":
        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        elif not isinstance(tags, (list, tuple)):
            tags = []
        return cls(
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            permalink=str(data.get("permalink") or ""),
            date=str(data.get("date") or ""),
            summary=str(data.get("summary") or ""),
            tags=[str(t) for t in tags],
        )

    def searchable_text(self) -> str:
        return f"{self.title} {self.content} {' '.join(self.tags)}".lower()


class IndexStatus(Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class SearchState:
    """
    Owns the search index for one page view.

    The index is written once, when the fetch settles. Until then (and after
    a failed fetch) matching sees an empty index.
    """
    status: IndexStatus = IndexStatus.NOT_LOADED
    _entries: list = field(default_factory=list)

    @property
    def entries(self) -> list:
        if self.status is IndexStatus.LOADED:
            return self._entries
        return []

    @property
    def is_loaded(self) -> bool:
        return self.status is IndexStatus.LOADED

    def mark_loaded(self, entries: list):
        self._entries = list(entries)
        self.status = IndexStatus.LOADED

    def mark_failed(self):
        self._entries = []
        self.status = IndexStatus.FAILED


class IndexLoadError(Exception):
    """Raised when the index document cannot be fetched or decoded."""


# -----------------------
# Loading
# -----------------------

def parse_index(raw) -> list:
    """Decode an index document (text or already-parsed JSON) into entries."""
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(data, list):
        raise IndexLoadError(f"expected a JSON list, got {type(data).__name__}")
    return [SearchEntry.from_dict(item) for item in data if isinstance(item, dict)]


async def fetch_index_document(source, *, client=None):
    """Return the raw index document from an http(s) URL or a local path."""
    source = str(source)
    if not source.startswith(("http://", "https://")):
        return Path(source).read_text(encoding="utf-8")

    if client is not None:
        response = await client.get(source)
        response.raise_for_status()
        return response.json()

    async with httpx.AsyncClient(follow_redirects=True) as http:
        response = await http.get(source)
        response.raise_for_status()
        return response.json()


async def load_into(state: SearchState, source, *, client=None) -> SearchState:
    """
    Fetch the index and settle the state as loaded or failed.

    Failures (network, HTTP status, bad JSON) are reported on stderr and never
    raised; a failed state searches as an empty index.
    """
    try:
        raw = await fetch_index_document(source, client=client)
        entries = parse_index(raw)
    except (OSError, ValueError, IndexLoadError, httpx.HTTPError) as exc:
        print(f"ERROR: Failed to load search index from {source}: {exc}", file=sys.stderr)
        state.mark_failed()
        return state
    state.mark_loaded(entries)
    return state


async def load_search_index(source, *, client=None) -> list:
    """Fetch and decode the index, returning [] on any failure."""
    state = await load_into(SearchState(), source, client=client)
    return state.entries


# -----------------------
# Matching
# -----------------------

def match_entries(entries: list, query: str, limit: int = MAX_RESULTS) -> list:
    """Stable substring filter in index order, capped at `limit`."""
    needle = query.lower()
    results = []
    for entry in entries:
        if needle in entry.searchable_text():
            results.append(entry)
            if len(results) >= limit:
                break
    return results


def highlight_text(text: str, query: str) -> str:
    """
    HTML-escape text and wrap every case-insensitive occurrence of query
    in <mark>. The query is matched literally.
    """
    if not query:
        return html.escape(text)
    pattern = re.compile(re.escape(query), re.IGNORECASE)

    parts = []
    last = 0
    for m in pattern.finditer(text):
        parts.append(html.escape(text[last:m.start()]))
        parts.append(f"<mark>{html.escape(m.group(0))}</mark>")
        last = m.end()
    parts.append(html.escape(text[last:]))
    return "".join(parts)


def make_excerpt(entry: SearchEntry, length: int = EXCERPT_LENGTH) -> str:
    if entry.summary:
        return entry.summary
    return entry.content[:length] + "..."


def format_date(date_str: str) -> str:
    """'2024-03-05' -> 'Mar 5, 2024'. Unparseable values come back unchanged."""
    if not date_str:
        return ""
    try:
        dt = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError:
        return date_str
    return f"{dt:%b} {dt.day}, {dt.year}"


# -----------------------
# Rendering
# -----------------------

def render_result(entry: SearchEntry, query: str) -> str:
    tags_html = "".join(
        f'<span class="search__result-tag">{html.escape(tag)}</span>' for tag in entry.tags
    )
    href = html.escape(entry.permalink, quote=True)
    return f"""<div class="search__result">
  <h3 class="search__result-title">
    <a href="{href}">{highlight_text(entry.title, query)}</a>
  </h3>
  <p class="search__result-excerpt">{highlight_text(make_excerpt(entry), query)}</p>
  <div class="search__result-meta">
    <span class="search__result-date">{html.escape(format_date(entry.date))}</span>
    {tags_html}
  </div>
</div>"""


def render_results(results: list, query: str) -> str:
    if not results:
        return NO_RESULTS_HTML
    return "\n".join(render_result(entry, query) for entry in results)


def perform_search(query: str, entries: list) -> str:
    """
    Run a query and return the HTML for the results container.

    Empty (or whitespace) queries clear the container.
    """
    query = (query or "").strip()
    if not query:
        return ""
    return render_results(match_entries(entries, query), query)
