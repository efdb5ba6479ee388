import pytest

from uberstyle.search import SearchEntry


class FakeTask:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Collects scheduled tasks; run_pending() fires the ones not cancelled."""

    def __init__(self):
        self.tasks = []

    def __call__(self, delay, callback):
        task = FakeTask(delay, callback)
        self.tasks.append(task)
        return task

    def live(self) -> list:
        return [t for t in self.tasks if not t.cancelled and not t.fired]

    def run_pending(self) -> None:
        for task in self.live():
            task.fired = True
            task.callback()


PAGE_HTML = """<!DOCTYPE html>
<html lang="en">
<head><title>Caching 101</title></head>
<body>
<nav class="nav">
  <button class="nav__toggle">Menu</button>
  <div class="nav__mobile"><a class="nav__link" href="/about/">About</a></div>
</nav>
<button class="search__toggle">Search</button>
<div class="search__overlay">
  <div class="search__content">
    <input class="search__input" type="search">
    <button class="search__close">Close</button>
    <div class="search__results"></div>
  </div>
</div>
<a class="toc" href="#intro">Intro</a>
<a class="broken" href="#missing">Missing</a>
<article class="article">
  <div class="article__content">
    <h2 id="intro">Intro</h2>
    <p>Least recently used.</p>
  </div>
</article>
<footer class="footer">Footer</footer>
</body>
</html>
"""


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def page_html() -> str:
    return PAGE_HTML


@pytest.fixture
def entries() -> list:
    return [
        SearchEntry(
            title="Caching 101",
            content="LRU and LFU strategies",
            tags=["cache"],
            permalink="/p1",
            date="2024-03-05",
        ),
        SearchEntry(
            title="Intro",
            content="hello world",
            tags=["misc"],
            permalink="/p2",
            date="2024-01-10",
        ),
    ]
