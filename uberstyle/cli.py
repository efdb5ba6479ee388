"""
Command line:

  uberstyle index [config.yml]              build index.json from content/
  uberstyle search QUERY --index PATH|URL   query a built index
  uberstyle preview PAGE.html --index ...   wire the theme UI onto a page and report
"""
import sys
import asyncio
import argparse
from pathlib import Path

from . import build
from .page import Page
from .search import load_search_index, match_entries, format_date, make_excerpt, perform_search
from .ui import bootstrap


def cmd_index(args) -> int:
    build.main([args.config] if args.config else [])
    return 0


def cmd_search(args) -> int:
    entries = asyncio.run(load_search_index(args.index))
    query = args.query.strip()

    if args.html:
        print(perform_search(query, entries))
        return 0

    if not query:
        return 0
    results = match_entries(entries, query)
    if not results:
        print("No results found")
        return 1
    for entry in results:
        print(f"{entry.title}  ({format_date(entry.date)})  {entry.permalink}")
        print(f"    {make_excerpt(entry)}")
    return 0


async def _preview(args) -> int:
    page = Page(Path(args.page).read_text(encoding="utf-8"))
    ui = bootstrap(page, verbose=True)

    for status in ui.features.values():
        state = "on" if status.available else "off"
        print(f"{status.name:<18} {state}")

    if ui.search is None:
        return 0
    if args.index:
        await ui.search.load_index(args.index)
    if args.query is not None:
        ui.search.open()
        ui.search.run_query(args.query)
        print(ui.search.results.decode_contents() if ui.search.results is not None else "")
    return 0


def cmd_preview(args) -> int:
    return asyncio.run(_preview(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uberstyle", description="Uber-style blog theme tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="Build the search index from content/")
    p_index.add_argument("config", nargs="?", help="Path to config.yml (default: ./config.yml)")
    p_index.set_defaults(func=cmd_index)

    p_search = sub.add_parser("search", help="Query a built search index")
    p_search.add_argument("query")
    p_search.add_argument("--index", default="public/index.json", help="Index path or URL")
    p_search.add_argument("--html", action="store_true", help="Print the rendered results markup")
    p_search.set_defaults(func=cmd_search)

    p_preview = sub.add_parser("preview", help="Wire the theme UI onto an HTML page")
    p_preview.add_argument("page", help="Rendered HTML page")
    p_preview.add_argument("--index", help="Index path or URL")
    p_preview.add_argument("--query", help="Run a search and print the results container")
    p_preview.set_defaults(func=cmd_preview)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
