"""Reading progress through an article."""


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def reading_progress(scroll_top: float, article_top: float, article_height: float,
                     viewport_height: float) -> float:
    """
    Fraction of the article read, in [0, 1]:

      (scroll_top - article_top + viewport_height) / article_height

    A zero-height article is read as soon as its top enters the viewport.
    """
    if article_height <= 0:
        return 1.0 if scroll_top + viewport_height >= article_top else 0.0
    return clamp((scroll_top - article_top + viewport_height) / article_height)


def progress_width(fraction: float) -> str:
    """CSS width declaration for the progress fill, e.g. 'width: 42.5%'."""
    return f"width: {fraction * 100:g}%"
