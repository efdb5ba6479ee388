"""
Theme UI behaviours, wired onto a Page at startup:

  - mobile menu toggle
  - search overlay (toggle, close, Escape, Ctrl/Cmd+K, debounced input)
  - smooth scrolling for in-page anchors
  - reading progress bar

Each init_* function returns a FeatureStatus saying whether the behaviour is
available on this page. Missing optional elements are not errors.
"""
import sys
from dataclasses import dataclass

from bs4 import BeautifulSoup  # pip install beautifulsoup4

from .page import DOCUMENT, WINDOW, add_class, contains, has_class, remove_class, toggle_class
from .search import DEBOUNCE_SECONDS, SearchState, load_into, perform_search
from .debounce import Debouncer
from .progress import progress_width, reading_progress

# Class names the page template exposes
MENU_TOGGLE = ".nav__toggle"
MENU_PANEL = ".nav__mobile"
MENU_OPEN_CLASS = "nav__mobile--open"
MENU_ACTIVE_CLASS = "nav__toggle--active"

SEARCH_TOGGLE = ".search__toggle"
SEARCH_OVERLAY = ".search__overlay"
SEARCH_CLOSE = ".search__close"
SEARCH_INPUT = ".search__input"
SEARCH_RESULTS = ".search__results"
SEARCH_OPEN_CLASS = "search__overlay--open"
QUICK_OPEN_KEY = "k"

ARTICLE_CONTENT = ".article__content"
PROGRESS_CLASS = "reading-progress"
PROGRESS_FILL_CLASS = "reading-progress__bar"


@dataclass(frozen=True)
class FeatureStatus:
    name: str
    available: bool
    reason: str = ""

    @classmethod
    def ok(cls, name: str) -> "FeatureStatus":
        return cls(name, True)

    @classmethod
    def missing(cls, name: str, *selectors) -> "FeatureStatus":
        return cls(name, False, "missing " + ", ".join(selectors))


def _missing(page, *selectors) -> list:
    return [s for s in selectors if page.select_one(s) is None]


# -----------------------
# Mobile menu
# -----------------------

def init_mobile_menu(page) -> FeatureStatus:
    absent = _missing(page, MENU_TOGGLE, MENU_PANEL)
    if absent:
        return FeatureStatus.missing("mobile_menu", *absent)

    toggle = page.select_one(MENU_TOGGLE)
    panel = page.select_one(MENU_PANEL)

    def on_toggle(event):
        toggle_class(panel, MENU_OPEN_CLASS)
        toggle_class(toggle, MENU_ACTIVE_CLASS)

    def on_document_click(event):
        if not contains(toggle, event.target) and not contains(panel, event.target):
            remove_class(panel, MENU_OPEN_CLASS)
            remove_class(toggle, MENU_ACTIVE_CLASS)

    page.add_event_listener(toggle, "click", on_toggle)
    page.add_event_listener(DOCUMENT, "click", on_document_click)
    return FeatureStatus.ok("mobile_menu")


# -----------------------
# Search overlay
# -----------------------

class SearchController:
    """
    Search overlay wiring for one page view.

    Owns the SearchState and the debounced input task. The index is loaded
    separately with load_index(); until it settles queries see no entries.
    """

    def __init__(self, page, *, state=None, wait: float = DEBOUNCE_SECONDS, scheduler=None):
        self.page = page
        self.state = state or SearchState()
        self.toggle = page.select_one(SEARCH_TOGGLE)
        self.overlay = page.select_one(SEARCH_OVERLAY)
        self.close_button = page.select_one(SEARCH_CLOSE)
        self.input = page.select_one(SEARCH_INPUT)
        self.results = page.select_one(SEARCH_RESULTS)
        self.debounced_search = Debouncer(self.run_query, wait, scheduler=scheduler)

    @property
    def is_open(self) -> bool:
        return has_class(self.overlay, SEARCH_OPEN_CLASS)

    def open(self):
        add_class(self.overlay, SEARCH_OPEN_CLASS)
        if self.input is not None:
            self.page.focus(self.input)

    def close(self):
        remove_class(self.overlay, SEARCH_OPEN_CLASS)

    async def load_index(self, source, *, client=None) -> SearchState:
        return await load_into(self.state, source, client=client)

    def run_query(self, query: str) -> str:
        rendered = perform_search(query, self.state.entries)
        if self.results is not None:
            self.results.clear()
            for node in list(BeautifulSoup(rendered, "html.parser").contents):
                self.results.append(node.extract())
        return rendered

    def attach(self):
        page = self.page
        page.add_event_listener(self.toggle, "click", lambda event: self.open())
        if self.close_button is not None:
            page.add_event_listener(self.close_button, "click", lambda event: self.close())

        def on_overlay_click(event):
            # Backdrop only; clicks inside the overlay content bubble up here too
            if event.target is self.overlay:
                self.close()

        def on_keydown(event):
            if event.key == "Escape":
                self.close()
            if (event.meta_key or event.ctrl_key) and event.key.lower() == QUICK_OPEN_KEY:
                event.prevent_default()
                self.open()

        page.add_event_listener(self.overlay, "click", on_overlay_click)
        page.add_event_listener(DOCUMENT, "keydown", on_keydown)

        if self.input is not None and self.results is not None:
            def on_input(event):
                self.debounced_search(str(self.input.get("value", "")))

            page.add_event_listener(self.input, "input", on_input)


def init_search(page, *, state=None, scheduler=None):
    """Return (FeatureStatus, SearchController or None)."""
    absent = _missing(page, SEARCH_TOGGLE, SEARCH_OVERLAY)
    if absent:
        return FeatureStatus.missing("search", *absent), None

    controller = SearchController(page, state=state, scheduler=scheduler)
    controller.attach()
    return FeatureStatus.ok("search"), controller


# -----------------------
# Smooth scrolling
# -----------------------

def init_smooth_scrolling(page) -> FeatureStatus:
    links = page.select('a[href^="#"]')
    if not links:
        return FeatureStatus.missing("smooth_scroll", 'a[href^="#"]')

    def on_click(event):
        link = event.current_target
        target = page.get_element_by_id(link.get("href", "")[1:])
        if target is not None:
            event.prevent_default()
            page.scroll_into_view(target, behavior="smooth")

    for link in links:
        page.add_event_listener(link, "click", on_click)
    return FeatureStatus.ok("smooth_scroll")


# -----------------------
# Reading progress
# -----------------------

def init_reading_progress(page) -> FeatureStatus:
    article = page.select_one(ARTICLE_CONTENT)
    if article is None:
        return FeatureStatus.missing("reading_progress", ARTICLE_CONTENT)

    bar = page.select_one(f".{PROGRESS_CLASS}")
    created = bar is None
    if created:
        bar = page.soup.new_tag("div", attrs={"class": PROGRESS_CLASS})
        bar.append(page.soup.new_tag("div", attrs={"class": PROGRESS_FILL_CLASS}))
        page.body.append(bar)
    fill = bar.select_one(f".{PROGRESS_FILL_CLASS}")

    def update_progress(event=None):
        article_top, article_height = page.box(article)
        fraction = reading_progress(
            page.scroll_top, article_top, article_height, page.viewport_height
        )
        fill["style"] = progress_width(fraction)

    if created:
        page.add_event_listener(WINDOW, "scroll", update_progress)
    update_progress()
    return FeatureStatus.ok("reading_progress")


# -----------------------
# Bootstrap
# -----------------------

@dataclass
class PageUI:
    features: dict
    search: "SearchController | None" = None

    def unavailable(self) -> list:
        return [f for f in self.features.values() if not f.available]


def bootstrap(page, *, scheduler=None, verbose: bool = False) -> PageUI:
    """
    Wire all four behaviours onto the page. The search index is not fetched
    here; call `ui.search.load_index(...)` when a controller was created.
    """
    search_status, controller = init_search(page, scheduler=scheduler)
    statuses = [
        init_mobile_menu(page),
        search_status,
        init_smooth_scrolling(page),
        init_reading_progress(page),
    ]
    ui = PageUI(features={s.name: s for s in statuses}, search=controller)

    if verbose:
        for status in ui.unavailable():
            print(f"{status.name}: unavailable on this page ({status.reason})", file=sys.stderr)
    return ui
