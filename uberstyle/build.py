"""
Build the site search index (index.json) from Markdown articles.

Content layout:

  content/
    posts/
      caching-101.md
      intro.md
    authors/
      jane.md

Each file starts with a YAML front matter block:

  ---
  title: Caching 101
  date: 2024-03-05
  tags: [cache, performance]
  summary: A short tour of eviction policies.
  draft: false
  ---
"""
import re
import sys
import json
from pathlib import Path
from datetime import datetime, date

import markdown       # pip install markdown
import yaml           # pip install pyyaml
from bs4 import BeautifulSoup  # pip install beautifulsoup4

FRONT_MATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)

TRUE_VALUES = ("true", "yes", "1", "y", "on")


class FrontMatterError(ValueError):
    """Raised when an article's front matter cannot be parsed."""


# -----------------------
# Config
# -----------------------

def get_config_path_from_args(argv=None) -> Path:
    """
    Determine which config file to use.

    - If a path is passed as first argument, use that.
    - Otherwise, assume ./config.yml.
    """
    argv = sys.argv[1:] if argv is None else argv
    if argv:
        return Path(argv[0]).resolve()
    return (Path.cwd() / "config.yml").resolve()


def load_config(config_path: Path) -> dict:
    """Load YAML config and apply defaults."""
    if not config_path.exists():
        print(f"Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}

    # search_sections can be a string or a list
    sections = data.get("search_sections", ["posts"])
    if isinstance(sections, str):
        sections = [sections]
    elif not isinstance(sections, list):
        sections = ["posts"]

    cfg = {
        "site_title": data.get("site_title", "Blog"),
        "site_url": data.get("site_url", ""),          # optional, for absolute permalinks
        "content_root": data.get("content_root", "content"),
        "output_dir": data.get("output_dir", "public"),
        "search_sections": [str(s) for s in sections],
        "search_index_filename": data.get("search_index_filename", "index.json"),
        "permalink_style": data.get("permalink_style", "/{section}/{slug}/"),
        # default to newest first
        "order": data.get("order", "reverse"),         # "reverse" or "chronological"
        "include_drafts": bool(data.get("include_drafts", False)),
    }
    return cfg


# -----------------------
# Parsing articles
# -----------------------

def split_front_matter(text: str):
    """
    Split a content file into (meta, body).

    Files without a front matter block get an empty meta dict.
    """
    m = FRONT_MATTER_RE.match(text)
    if not m:
        return {}, text.strip()

    try:
        meta = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid YAML front matter: {exc}") from exc
    if not isinstance(meta, dict):
        raise FrontMatterError("front matter must be a mapping")

    return meta, text[m.end():].strip()


def slugify(text: str) -> str:
    """
    Convert a title like 'Caching 101' into a URL-friendly slug: 'caching-101'.
    """
    s = text.strip().lower()
    s = re.sub(r"[\s_]+", "-", s)
    s = re.sub(r"[^a-z0-9-]", "", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    return s or "page"


def normalize_tags(value) -> list:
    """Tags may be a YAML list or a comma-separated string."""
    if not value:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if not isinstance(value, (list, tuple)):
        return [str(value)]
    return [str(t).strip() for t in value if str(t).strip()]


def normalize_date(value) -> str:
    """Return an ISO-8601 string for YAML dates, datetimes and strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value or "")


def parse_draft(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def parse_article(path: Path, section: str) -> dict:
    """
    Parse one Markdown file into an article:

      {
        "title": "...",
        "date": "2024-03-05",
        "tags": [...],
        "summary": "...",
        "draft": False,
        "slug": "caching-101",
        "section": "posts",
        "content_md": "markdown text"
      }
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FrontMatterError(f"not valid UTF-8: {exc}") from exc
    meta, body = split_front_matter(text)

    title = str(meta.get("title") or path.stem.replace("-", " ").title())
    slug = str(meta.get("slug") or slugify(path.stem))

    return {
        "title": title,
        "date": normalize_date(meta.get("date")),
        "tags": normalize_tags(meta.get("tags")),
        "summary": str(meta.get("summary") or meta.get("description") or ""),
        "draft": parse_draft(meta.get("draft", False)),
        "slug": slug,
        "section": section,
        "url": meta.get("url"),
        "content_md": body,
        "source_file": path,
    }


def collect_articles(content_root: Path, sections: list, order: str = "reverse",
                     include_drafts: bool = False) -> list:
    """
    Walk the given section directories and collect articles.

    Articles are sorted by date according to `order`; undated articles sort last.
    Draft articles are skipped unless include_drafts=True. Files with broken
    front matter are reported and skipped.
    """
    articles = []

    for section in sections:
        section_dir = content_root / section
        if not section_dir.is_dir():
            print(f"WARNING: Section directory not found: {section_dir}", file=sys.stderr)
            continue

        for md_file in sorted(section_dir.glob("*.md")):
            if md_file.name.startswith("_index"):
                continue  # section list page, not an article
            try:
                article = parse_article(md_file, section)
            except FrontMatterError as exc:
                print(f"WARNING: Skipping {md_file}: {exc}", file=sys.stderr)
                continue
            if article["draft"] and not include_drafts:
                continue
            articles.append(article)

    dated = [a for a in articles if a["date"]]
    undated = [a for a in articles if not a["date"]]
    dated.sort(key=lambda a: a["date"], reverse=(order == "reverse"))
    return dated + undated


# -----------------------
# Search index
# -----------------------

def article_plain_text(content_md: str) -> str:
    html_body = markdown.markdown(content_md)
    return BeautifulSoup(html_body, "html.parser").get_text(" ", strip=True)


def make_permalink(article: dict, cfg: dict) -> str:
    if article.get("url"):
        path = str(article["url"])
    else:
        path = cfg["permalink_style"].format(section=article["section"], slug=article["slug"])

    site_url = (cfg.get("site_url") or "").rstrip("/")
    if site_url:
        return f"{site_url}/{path.lstrip('/')}"
    return path


def build_search_entries(articles: list, cfg: dict) -> list:
    """Turn articles into index entries (title, content, summary, tags, date, permalink)."""
    docs = []
    for a in articles:
        docs.append(
            {
                "title": a["title"],
                "content": article_plain_text(a["content_md"]),
                "summary": a["summary"],
                "tags": a["tags"],
                "date": a["date"],
                "permalink": make_permalink(a, cfg),
            }
        )
    return docs


def write_search_index(docs: list, cfg: dict, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    index_path = output_dir / cfg["search_index_filename"]
    index_path.write_text(json.dumps(docs, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Wrote search index to {index_path}")
    return index_path


# -----------------------
# main()
# -----------------------

def build(config_path: Path) -> Path:
    # 1. Load config; paths are relative to the config file
    project_root = config_path.parent
    cfg = load_config(config_path)

    content_root = (project_root / cfg["content_root"]).resolve()
    output_dir = (project_root / cfg["output_dir"]).resolve()

    # 2. Collect articles
    articles = collect_articles(
        content_root=content_root,
        sections=cfg["search_sections"],
        order=cfg["order"],
        include_drafts=cfg["include_drafts"],
    )

    if not articles:
        print("No articles found.", file=sys.stderr)
        sys.exit(1)

    # 3. Index
    docs = build_search_entries(articles, cfg)
    return write_search_index(docs, cfg, output_dir)


def main(argv=None):
    build(get_config_path_from_args(argv))

