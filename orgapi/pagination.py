"""
Offset pagination and ``Link`` header construction.

A list request names a window with ``maxItems`` and ``skipCount``.  The
organization manager answers with a ``Page``: the items inside that
window plus the total number of items in the full result set.  From the
page and the original request URL this module derives the navigation
links sent back in the ``Link`` header::

    Link: <http://host/organization?maxItems=3&skipCount=3>; rel="prev",
          <http://host/organization?maxItems=3&skipCount=9>; rel="next"

Locator scheme: the request URL without its query string, followed by
the original query parameters in their original order with ``maxItems``
and ``skipCount`` overwritten (appended when the request omitted them).

Window parameters are validated by ``orgapi.validation`` before they
get here; nothing in this module re-checks them.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar
from urllib.parse import urlencode

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_MAX_ITEMS = 30
DEFAULT_SKIP_COUNT = 0

MAX_ITEMS_PARAM = "maxItems"
SKIP_COUNT_PARAM = "skipCount"


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    A bounded, offset-addressed slice of a larger ordered result set.

    ``items`` holds at most ``max_items`` entries starting at offset
    ``skip_count``; ``total_count`` counts the whole result set.
    """

    items: list[T]
    skip_count: int
    max_items: int
    total_count: int

    @classmethod
    def from_sequence(
        cls, sequence: Sequence[T], max_items: int, skip_count: int
    ) -> "Page[T]":
        """Slice an already-ordered sequence into a page."""
        return cls(
            items=list(sequence[skip_count : skip_count + max_items]),
            skip_count=skip_count,
            max_items=max_items,
            total_count=len(sequence),
        )

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def has_previous_page(self) -> bool:
        return self.skip_count > 0

    @property
    def has_next_page(self) -> bool:
        return self.skip_count + self.size < self.total_count

    def map(self, func: Callable[[T], U]) -> "Page[U]":
        """Return a new page with ``func`` applied to every item."""
        return Page(
            items=[func(item) for item in self.items],
            skip_count=self.skip_count,
            max_items=self.max_items,
            total_count=self.total_count,
        )


@dataclass(frozen=True)
class PageWindow:
    """The ``maxItems``/``skipCount`` pair addressing one page."""

    max_items: int
    skip_count: int


@dataclass(frozen=True)
class PageNavigation:
    """Which adjacent pages exist and the windows that address them."""

    prev: PageWindow | None
    next: PageWindow | None


def paginate(
    total_count: int, max_items: int, skip_count: int, item_count: int
) -> PageNavigation:
    """
    Work out the previous/next windows for a page.

    Args:
        total_count: Number of items in the full result set.
        max_items:   Requested page size.
        skip_count:  Requested offset.
        item_count:  Number of items actually returned for the window.

    Returns:
        A ``PageNavigation``; a direction is ``None`` when that page
        does not exist.  An empty result set has no navigation at all.
    """
    if total_count == 0:
        return PageNavigation(prev=None, next=None)

    prev_window = None
    if skip_count > 0:
        prev_window = PageWindow(max_items, max(0, skip_count - max_items))

    next_window = None
    if skip_count + item_count < total_count:
        next_window = PageWindow(max_items, skip_count + max_items)

    return PageNavigation(prev=prev_window, next=next_window)


def page_locator(
    base_url: str, query: Iterable[tuple[str, str]], window: PageWindow
) -> str:
    """
    Rebuild the request URL with the window parameters substituted.

    Args:
        base_url: The request URL without its query string.
        query:    The original ``(name, value)`` query pairs, in order.
        window:   The window to address.
    """
    substitutions = {
        MAX_ITEMS_PARAM: str(window.max_items),
        SKIP_COUNT_PARAM: str(window.skip_count),
    }
    pairs: list[tuple[str, str]] = []
    written: set[str] = set()
    for name, value in query:
        if name in substitutions:
            if name in written:
                continue
            value = substitutions[name]
            written.add(name)
        pairs.append((name, value))
    for name, value in substitutions.items():
        if name not in written:
            pairs.append((name, value))
    return f"{base_url}?{urlencode(pairs)}"


def build_link_set(
    page: Page, base_url: str, query: Iterable[tuple[str, str]] = ()
) -> dict[str, str]:
    """
    Map relation names (``prev``, ``next``) to locators for a page.

    Only directions that exist are present; the dict is ordered
    ``prev`` before ``next``.
    """
    query = list(query)
    navigation = paginate(
        page.total_count, page.max_items, page.skip_count, page.size
    )
    links: dict[str, str] = {}
    if navigation.prev is not None:
        links["prev"] = page_locator(base_url, query, navigation.prev)
    if navigation.next is not None:
        links["next"] = page_locator(base_url, query, navigation.next)
    return links


def format_link_header(links: dict[str, str]) -> str:
    """Serialize a link set as a single RFC 8288 ``Link`` header value."""
    return ", ".join(f'<{locator}>; rel="{rel}"' for rel, locator in links.items())
