"""
Greedy pagination of document nodes into slide-sized pages.

Pages are filled left to right. A new page starts when a top-level heading
arrives (forced break), when the next node would run past the bottom of the
page (overflow), or around a table (tables get a page of their own by
default). A page is never closed while empty, so every page holds at least
one node and a node taller than the page simply sits alone on it.

Lists are the one node type that may be split further: ``split_list`` walks
the items of a single list and breaks them into chunks that each fit on a
slide.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from .estimate import BODY_FONT_SIZE, estimate_height, item_height
from .nodes import Heading, ListItem, Table

logger = logging.getLogger(__name__)

DEFAULT_BREAK_LEVEL = 2


class TablePolicy(enum.Enum):
    OWN_PAGE = "own-page"  # a table always sits alone on its page
    INLINE = "inline"  # a table follows the ordinary overflow rule


@dataclass(frozen=True)
class PageBudget:
    """Vertical budget of a slide: content starts at margin_top, ends at max_y."""

    margin_top: float
    max_y: float

    @property
    def usable(self) -> float:
        return self.max_y - self.margin_top


@dataclass
class Page:
    margin_top: float
    nodes: list = field(default_factory=list)
    heights: list[float] = field(default_factory=list)
    height: float = 0.0

    def __post_init__(self):
        if not self.nodes:
            self.height = self.margin_top

    def add(self, node, height: float):
        self.nodes.append(node)
        self.heights.append(height)
        self.height += height

    def placements(self) -> Iterator[tuple[object, float, float]]:
        """Yield ``(node, top, height)`` for every node on the page."""
        top = self.margin_top
        for node, height in zip(self.nodes, self.heights):
            yield node, top, height
            top += height

    def exceeds(self, max_y: float) -> bool:
        return self.height > max_y


def paginate(
    nodes: list,
    budget: PageBudget,
    font_size_for: Optional[Callable[[object], Optional[float]]] = None,
    break_level: int = DEFAULT_BREAK_LEVEL,
    table_policy: TablePolicy = TablePolicy.OWN_PAGE,
) -> list[Page]:
    """Partition *nodes* into pages that fit within *budget*.

    *font_size_for* maps a node to the font size it will be rendered with;
    when it is omitted (or returns None) the estimator's defaults apply.
    Headings with ``level <= break_level`` always open a new page.
    """
    pages: list[Page] = []
    current = Page(budget.margin_top)

    def close():
        nonlocal current
        pages.append(current)
        current = Page(budget.margin_top)

    for node in nodes:
        font_size = font_size_for(node) if font_size_for else None
        h = estimate_height(node, font_size)
        own_page = isinstance(node, Table) and table_policy is TablePolicy.OWN_PAGE

        if current.nodes:
            if isinstance(node, Heading) and node.level <= break_level:
                logger.debug("Forced break before heading %r", node.text[:40])
                close()
            elif own_page:
                logger.debug("Break before table (%d rows)", len(node.rows))
                close()
            elif current.height + h > budget.max_y:
                logger.debug(
                    "Overflow break: %.2f + %.2f > %.2f",
                    current.height,
                    h,
                    budget.max_y,
                )
                close()

        current.add(node, h)
        if own_page:
            close()

    if current.nodes:
        pages.append(current)
    return pages


# ── List sub-pagination ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class ListEntry:
    item: ListItem
    depth: int
    height: float


@dataclass
class ListChunk:
    entries: list[ListEntry] = field(default_factory=list)
    height: float = 0.0

    def add(self, entry: ListEntry):
        self.entries.append(entry)
        self.height += entry.height


def flatten_items(
    items, font_size: float = BODY_FONT_SIZE, depth: int = 0
) -> Iterator[ListEntry]:
    """Walk list items depth-first, parents before their nested items."""
    for item in items:
        yield ListEntry(item, depth, item_height(item, font_size))
        if item.children:
            yield from flatten_items(item.children, font_size, depth + 1)


def split_list(
    items,
    available: float,
    budget: PageBudget,
    font_size: float = BODY_FONT_SIZE,
) -> list[ListChunk]:
    """Split list items into chunks that each fit on one slide.

    The first chunk has *available* inches (what is left on the current
    slide); every later chunk gets a fresh slide's usable height. A chunk is
    flushed only when it already holds an entry, so an entry taller than a
    whole slide still gets placed. Item order is preserved.
    """
    chunks: list[ListChunk] = []
    current = ListChunk()
    room = available

    for entry in flatten_items(items, font_size):
        if current.entries and current.height + entry.height > room:
            chunks.append(current)
            current = ListChunk()
            room = budget.usable
        current.add(entry)

    if current.entries:
        chunks.append(current)
    return chunks
