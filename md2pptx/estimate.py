"""
Height estimation for document nodes.

Predicts how much vertical space (in inches) a node will take on a slide
without rendering it. Line counts come from a characters-per-line heuristic
that depends on the node type and on whether the text is wide-script (CJK
glyphs are roughly twice as wide as Latin ones, so fewer fit on a line).

The font size passed in must be the same one the renderer will use, otherwise
page breaks computed from these estimates drift from the drawn result.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .nodes import CodeBlock, Heading, ListBlock, ListItem, Paragraph
from .script import is_wide_script


@dataclass(frozen=True)
class LineMetrics:
    """Per-node-type constants for the line-count heuristic."""

    narrow_chars: int  # characters per line, Latin-like text
    wide_chars: int  # characters per line, CJK text
    line_factor: float  # line height as a multiple of the font size
    floor: float  # minimum text height, inches
    margin: float  # gap added after the block, inches

    def chars_per_line(self, text: str) -> int:
        return self.wide_chars if is_wide_script(text) else self.narrow_chars

    def line_height(self, font_size: float) -> float:
        return font_size / 72.0 * self.line_factor


HEADING_METRICS = LineMetrics(50, 30, 1.2, 0.5, 0.3)
PARAGRAPH_METRICS = LineMetrics(70, 40, 1.3, 0.4, 0.2)
LIST_ITEM_METRICS = LineMetrics(65, 35, 1.3, 0.35, 0.0)
# Code is measured in source lines, so characters per line are unused
CODE_METRICS = LineMetrics(0, 0, 1.4, 0.5, 0.3)

LIST_MARGIN = 0.4  # added once after the whole list
FIXED_BLOCK_HEIGHT = 0.5  # tables, images and unknown nodes

# ── Default font sizes (pt) when no template style is available ──────────────
HEADING_FONT_SIZES = {1: 32, 2: 28}
HEADING_FONT_SIZE_DEEP = 24
BODY_FONT_SIZE = 14
CODE_FONT_SIZE = 10


def default_font_size(node) -> float:
    """Built-in font size for *node* when nothing else resolves one."""
    if isinstance(node, Heading):
        return HEADING_FONT_SIZES.get(node.level, HEADING_FONT_SIZE_DEEP)
    if isinstance(node, CodeBlock):
        return CODE_FONT_SIZE
    return BODY_FONT_SIZE


def _text_height(text: str, font_size: float, metrics: LineMetrics) -> float:
    lines = math.ceil(len(text) / metrics.chars_per_line(text))
    return max(metrics.floor, lines * metrics.line_height(font_size))


def item_height(item: ListItem, font_size: float = BODY_FONT_SIZE) -> float:
    """Height of one list item's own text, excluding nested items."""
    return _text_height(item.text, font_size, LIST_ITEM_METRICS)


def _items_height(items, font_size: float) -> float:
    total = 0.0
    for item in items:
        total += item_height(item, font_size)
        if item.children:
            total += _items_height(item.children, font_size)
    return total


def block_gap(node) -> float:
    """Trailing gap included in ``estimate_height`` for *node*."""
    if isinstance(node, Heading):
        return HEADING_METRICS.margin
    if isinstance(node, Paragraph):
        return PARAGRAPH_METRICS.margin
    if isinstance(node, ListBlock):
        return LIST_MARGIN
    if isinstance(node, CodeBlock):
        return CODE_METRICS.margin
    return 0.0


def estimate_height(node, font_size: Optional[float] = None) -> float:
    """Estimate the vertical extent of *node* in inches.

    Headings and paragraphs wrap at a fixed number of characters per line;
    lists sum the height of every item (nested items included); code blocks
    count source lines. Everything else takes a fixed block height. Empty
    content still yields the type's floor, never zero.
    """
    if font_size is None:
        font_size = default_font_size(node)

    if isinstance(node, Heading):
        return _text_height(node.text, font_size, HEADING_METRICS) + HEADING_METRICS.margin
    if isinstance(node, Paragraph):
        return (
            _text_height(node.text, font_size, PARAGRAPH_METRICS)
            + PARAGRAPH_METRICS.margin
        )
    if isinstance(node, ListBlock):
        return _items_height(node.items, font_size) + LIST_MARGIN
    if isinstance(node, CodeBlock):
        lines = node.text.count("\n") + 1
        height = max(CODE_METRICS.floor, lines * CODE_METRICS.line_height(font_size))
        return height + CODE_METRICS.margin
    return FIXED_BLOCK_HEIGHT
