import json

import httpx
import pytest
from bs4 import BeautifulSoup

from uberstyle.search import (
    MAX_RESULTS,
    NO_RESULTS_HTML,
    IndexLoadError,
    IndexStatus,
    SearchEntry,
    SearchState,
    format_date,
    highlight_text,
    load_into,
    load_search_index,
    make_excerpt,
    match_entries,
    parse_index,
    perform_search,
)


class FakeResponse:
    def __init__(self, payload, error: Exception | None = None):
        self._payload = payload
        self._error = error

    def raise_for_status(self) -> None:
        if self._error:
            raise self._error

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class StubClient:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.urls = []

    async def get(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def test_query_matches_content_case_insensitively(entries) -> None:
    results = match_entries(entries, "lru")
    assert [r.permalink for r in results] == ["/p1"]


def test_query_matches_tags(entries) -> None:
    results = match_entries(entries, "MISC")
    assert [r.permalink for r in results] == ["/p2"]


def test_results_capped_and_in_index_order() -> None:
    entries = [
        SearchEntry(title=f"Post {i}", content="same body", permalink=f"/p{i}")
        for i in range(25)
    ]
    results = match_entries(entries, "body")
    assert len(results) == MAX_RESULTS
    assert [r.permalink for r in results] == [f"/p{i}" for i in range(MAX_RESULTS)]


def test_scenario_lru_highlights_excerpt(entries) -> None:
    html_out = perform_search("lru", entries)
    soup = BeautifulSoup(html_out, "html.parser")

    results = soup.select(".search__result")
    assert len(results) == 1
    assert results[0].select_one("a")["href"] == "/p1"

    excerpt = results[0].select_one(".search__result-excerpt")
    assert excerpt.mark.get_text() == "LRU"
    assert excerpt.decode_contents() == "<mark>LRU</mark> and LFU strategies..."


def test_empty_and_whitespace_query_clear_results(entries) -> None:
    assert perform_search("", entries) == ""
    assert perform_search("   ", entries) == ""


def test_no_matches_renders_no_results(entries) -> None:
    assert perform_search("kubernetes", entries) == NO_RESULTS_HTML


def test_query_is_trimmed(entries) -> None:
    assert "/p1" in perform_search("  lru  ", entries)


def test_result_shows_date_and_tags(entries) -> None:
    soup = BeautifulSoup(perform_search("caching", entries), "html.parser")
    assert soup.select_one(".search__result-date").get_text() == "Mar 5, 2024"
    assert [t.get_text() for t in soup.select(".search__result-tag")] == ["cache"]


def test_summary_preferred_over_content() -> None:
    entry = SearchEntry(title="T", content="x" * 300, summary="Short summary", permalink="/t")
    assert make_excerpt(entry) == "Short summary"


def test_excerpt_truncates_content() -> None:
    entry = SearchEntry(title="T", content="a" * 200, permalink="/t")
    assert make_excerpt(entry) == "a" * 150 + "..."


def test_highlight_escapes_regex_metacharacters() -> None:
    assert highlight_text("I like C++ a lot", "c++") == "I like <mark>C++</mark> a lot"
    assert highlight_text("f(a) and (a", "(a") == "f<mark>(a</mark>) and <mark>(a</mark>"


def test_highlight_escapes_html() -> None:
    out = highlight_text("<b>Tom & Jerry</b>", "tom")
    assert out == "&lt;b&gt;<mark>Tom</mark> &amp; Jerry&lt;/b&gt;"


def test_highlight_without_query_returns_escaped_text() -> None:
    assert highlight_text("a < b", "") == "a &lt; b"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-03-05", "Mar 5, 2024"),
        ("2024-03-05T10:00:00Z", "Mar 5, 2024"),
        ("2023-12-25T08:30:00+01:00", "Dec 25, 2023"),
        ("not a date", "not a date"),
        ("", ""),
    ],
)
def test_format_date(value, expected) -> None:
    assert format_date(value) == expected


def test_entry_from_dict_tolerates_missing_fields() -> None:
    entry = SearchEntry.from_dict({"title": "Only title", "tags": None})
    assert entry.title == "Only title"
    assert entry.tags == []
    assert entry.content == ""


def test_parse_index_rejects_non_list() -> None:
    with pytest.raises(IndexLoadError):
        parse_index(json.dumps({"title": "x"}))


def test_state_not_loaded_searches_as_empty(entries) -> None:
    state = SearchState()
    assert state.status is IndexStatus.NOT_LOADED
    assert state.entries == []
    assert perform_search("lru", state.entries) == NO_RESULTS_HTML

    state.mark_loaded(entries)
    assert state.is_loaded
    assert len(state.entries) == 2


@pytest.mark.asyncio
async def test_load_from_local_file(tmp_path) -> None:
    path = tmp_path / "index.json"
    path.write_text(
        json.dumps([{"title": "Intro", "content": "hello", "tags": ["misc"], "permalink": "/p2"}]),
        encoding="utf-8",
    )
    entries = await load_search_index(path)
    assert [e.title for e in entries] == ["Intro"]


@pytest.mark.asyncio
async def test_load_from_url_uses_client() -> None:
    client = StubClient(FakeResponse([{"title": "Remote", "content": "", "permalink": "/r"}]))
    entries = await load_search_index("https://blog.example/index.json", client=client)
    assert client.urls == ["https://blog.example/index.json"]
    assert entries[0].title == "Remote"


@pytest.mark.asyncio
async def test_network_failure_degrades_to_empty(capsys) -> None:
    client = StubClient(error=httpx.ConnectError("connection refused"))
    state = await load_into(SearchState(), "https://blog.example/index.json", client=client)

    assert state.status is IndexStatus.FAILED
    assert state.entries == []
    assert perform_search("anything", state.entries) == NO_RESULTS_HTML
    assert "Failed to load search index" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_http_error_status_degrades_to_empty() -> None:
    client = StubClient(FakeResponse([], error=httpx.HTTPError("500 Internal Server Error")))
    assert await load_search_index("https://blog.example/index.json", client=client) == []


@pytest.mark.asyncio
async def test_malformed_json_degrades_to_empty(tmp_path) -> None:
    path = tmp_path / "index.json"
    path.write_text("{not json", encoding="utf-8")
    assert await load_search_index(path) == []


@pytest.mark.asyncio
async def test_missing_file_degrades_to_empty(tmp_path) -> None:
    assert await load_search_index(tmp_path / "missing.json") == []


@pytest.mark.asyncio
async def test_non_list_tags_do_not_break_loading(tmp_path) -> None:
    path = tmp_path / "index.json"
    path.write_text(
        json.dumps(
            [
                {"title": "x", "content": "body", "tags": 5, "permalink": "/x"},
                {"title": "y", "content": "body", "tags": "solo", "permalink": "/y"},
            ]
        ),
        encoding="utf-8",
    )
    state = await load_into(SearchState(), path)

    assert state.status is IndexStatus.LOADED
    assert [e.tags for e in state.entries] == [[], ["solo"]]
