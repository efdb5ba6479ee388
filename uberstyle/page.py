"""
Headless page model for the theme's UI behaviours.

A Page wraps a parsed HTML document (BeautifulSoup) together with the bits of
browser state the behaviours need: scroll offset, viewport height, element
geometry, keyboard focus and event listeners. Events bubble from the target up
through its ancestors, then to the document and finally the window.
"""
from bs4 import BeautifulSoup


DOCUMENT = "document"
WINDOW = "window"


class Event:
    """A dispatched DOM-style event."""

    def __init__(self, type, target=None, *, key="", ctrl_key=False, meta_key=False):
        self.type = type
        self.target = target
        self.key = key
        self.ctrl_key = ctrl_key
        self.meta_key = meta_key
        self.current_target = None
        self.default_prevented = False

    def prevent_default(self):
        self.default_prevented = True

    def __repr__(self):
        return f"Event({self.type!r}, key={self.key!r})"


# -----------------------
# Class list helpers
# -----------------------

def class_list(tag) -> list:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def has_class(tag, name: str) -> bool:
    return name in class_list(tag)


def add_class(tag, name: str):
    classes = class_list(tag)
    if name not in classes:
        classes.append(name)
    tag["class"] = classes


def remove_class(tag, name: str):
    classes = [c for c in class_list(tag) if c != name]
    if classes:
        tag["class"] = classes
    elif tag.has_attr("class"):
        del tag["class"]


def toggle_class(tag, name: str) -> bool:
    """Flip a class; return True when the class is now present."""
    if has_class(tag, name):
        remove_class(tag, name)
        return False
    add_class(tag, name)
    return True


def contains(ancestor, node) -> bool:
    """True when node is ancestor itself or one of its descendants."""
    if node is None or isinstance(node, str):
        return False
    if node is ancestor:
        return True
    return any(parent is ancestor for parent in node.parents)


class Page:
    """A parsed document plus the browser state the theme script touches."""

    def __init__(self, markup: str, *, viewport_height: float = 800):
        self.soup = BeautifulSoup(markup, "html.parser")
        self.viewport_height = viewport_height
        self.scroll_top = 0.0
        self.scroll_behavior = None
        self.focused = None
        self._listeners = {}
        self._boxes = {}

    # Queries

    def select_one(self, selector: str):
        return self.soup.select_one(selector)

    def select(self, selector: str) -> list:
        return self.soup.select(selector)

    def get_element_by_id(self, element_id: str):
        if not element_id:
            return None
        return self.soup.find(id=element_id)

    @property
    def body(self):
        return self.soup.body or self.soup

    # Geometry

    def set_box(self, tag, top: float, height: float):
        """Record the layout box (offsetTop, offsetHeight) of an element."""
        self._boxes[id(tag)] = (float(top), float(height))

    def box(self, tag):
        return self._boxes.get(id(tag), (0.0, 0.0))

    # Events

    def add_event_listener(self, target, type: str, handler):
        key = (self._key(target), type)
        self._listeners.setdefault(key, []).append(handler)

    def dispatch(self, event: Event) -> Event:
        if event.target in (DOCUMENT, WINDOW):
            path = [event.target]
        else:
            path = [event.target] + [p for p in event.target.parents if p is not self.soup]
            path.append(DOCUMENT)
        if WINDOW not in path:
            path.append(WINDOW)

        for node in path:
            event.current_target = node
            for handler in list(self._listeners.get((self._key(node), event.type), [])):
                handler(event)
        event.current_target = None
        return event

    def click(self, target) -> Event:
        if isinstance(target, str):
            target = self.select_one(target)
        return self.dispatch(Event("click", target))

    def press(self, key: str, *, ctrl: bool = False, meta: bool = False) -> Event:
        """Send a keydown to whatever currently has focus."""
        target = self.focused if self.focused is not None else self.body
        return self.dispatch(Event("keydown", target, key=key, ctrl_key=ctrl, meta_key=meta))

    def type_into(self, target, text: str) -> Event:
        """Replace an input's value and fire an input event on it."""
        if isinstance(target, str):
            target = self.select_one(target)
        target["value"] = text
        return self.dispatch(Event("input", target))

    def focus(self, tag):
        self.focused = tag

    def scroll_to(self, offset: float, *, behavior=None) -> Event:
        self.scroll_top = max(0.0, float(offset))
        self.scroll_behavior = behavior
        return self.dispatch(Event("scroll", WINDOW))

    def scroll_into_view(self, tag, *, behavior="smooth") -> Event:
        top, _ = self.box(tag)
        return self.scroll_to(top, behavior=behavior)

    @staticmethod
    def _key(target):
        if target in (DOCUMENT, WINDOW):
            return target
        return id(target)
