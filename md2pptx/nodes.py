"""
Document node types.

Each node kind is its own frozen dataclass carrying only the fields it needs,
so a heading always has a level, a list always has items and a table always
has rows. ``node_from_dict`` accepts the loose ``{"type", "content", ...}``
shape produced by external Markdown parsers.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union


@dataclass(frozen=True)
class Heading:
    level: int
    text: str = ""

    kind: ClassVar[str] = "heading"

    def __post_init__(self):
        # Out-of-range levels from sloppy parsers are clamped, not rejected
        object.__setattr__(self, "level", min(max(int(self.level), 1), 6))


@dataclass(frozen=True)
class Paragraph:
    text: str = ""

    kind: ClassVar[str] = "paragraph"


@dataclass(frozen=True)
class ListItem:
    text: str = ""
    children: tuple["ListItem", ...] = ()

    kind: ClassVar[str] = "listItem"


@dataclass(frozen=True)
class ListBlock:
    items: tuple[ListItem, ...] = ()
    ordered: bool = False

    kind: ClassVar[str] = "list"


@dataclass(frozen=True)
class CodeBlock:
    text: str = ""
    lang: Optional[str] = None

    kind: ClassVar[str] = "code"


@dataclass(frozen=True)
class Table:
    """A table; the first row is treated as the header row."""

    rows: tuple[tuple[str, ...], ...] = ()

    kind: ClassVar[str] = "table"

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def padded_rows(self) -> list[list[str]]:
        """Rows padded with empty cells up to ``column_count``."""
        width = self.column_count
        return [list(row) + [""] * (width - len(row)) for row in self.rows]


@dataclass(frozen=True)
class Image:
    src: str = ""
    alt: str = ""

    kind: ClassVar[str] = "image"


@dataclass(frozen=True)
class Unrecognized:
    """A node type the pipeline does not know; passed through, never drawn."""

    kind: str
    text: str = ""


Node = Union[Heading, Paragraph, ListBlock, CodeBlock, Table, Image, Unrecognized]


@dataclass
class Document:
    nodes: list = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


# ── Loose dict contract ──────────────────────────────────────────────────────


def _cell_text(cell: Any) -> str:
    if isinstance(cell, dict):
        return str(cell.get("content") or "")
    return "" if cell is None else str(cell)


def _list_item_from_dict(data: dict) -> ListItem:
    children = tuple(_list_item_from_dict(c) for c in data.get("children") or [])
    return ListItem(text=data.get("content") or "", children=children)


def node_from_dict(data: dict) -> Node:
    """Build a typed node from ``{"type": ..., "content": ..., ...}``."""
    kind = data.get("type") or ""
    content = data.get("content") or ""
    children = data.get("children") or []

    if kind == "heading":
        return Heading(level=data.get("level") or 1, text=content)
    if kind == "paragraph":
        return Paragraph(text=content)
    if kind == "list":
        items = tuple(_list_item_from_dict(c) for c in children)
        return ListBlock(items=items, ordered=bool(data.get("ordered", False)))
    if kind == "code":
        return CodeBlock(text=content, lang=data.get("lang") or None)
    if kind == "table":
        rows = []
        for row in children:
            cells = (row.get("children") or []) if isinstance(row, dict) else row
            rows.append(tuple(_cell_text(c) for c in cells))
        return Table(rows=tuple(rows))
    if kind == "image":
        return Image(src=data.get("src") or "", alt=data.get("alt") or "")
    return Unrecognized(kind=kind or "unknown", text=content)


def document_from_dict(data: dict) -> Document:
    nodes = [node_from_dict(n) for n in data.get("nodes") or []]
    return Document(nodes=nodes, metadata=dict(data.get("metadata") or {}))
