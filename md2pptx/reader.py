"""
Markdown reader: turns Markdown source into a ``Document`` of typed nodes.

Block structure comes from markdown-it-py's token tree. Inline content is kept
as raw Markdown so emphasis markers survive for the inline formatter. Raw HTML
blocks are reduced to their visible text with BeautifulSoup.
"""

from typing import Optional

from bs4 import BeautifulSoup
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from .nodes import (
    CodeBlock,
    Document,
    Heading,
    Image,
    ListBlock,
    ListItem,
    Paragraph,
    Table,
    Unrecognized,
)


def build_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True})
    md.enable("table")
    return md


# ── HTML helpers ─────────────────────────────────────────────────────────────


def html_to_text(html: str) -> str:
    """Visible text of an HTML fragment; ``<br>`` becomes a newline."""
    soup = BeautifulSoup(html, "lxml")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    # Use " " separator so inline tags don't fuse neighbouring words
    text = soup.get_text(" ")
    lines = [" ".join(line.split()) for line in text.split("\n")]
    return "\n".join(line for line in lines if line).strip()


# ── Token tree walking ───────────────────────────────────────────────────────


def _inline_content(node: SyntaxTreeNode) -> str:
    """Raw inline Markdown of a paragraph/heading/cell node."""
    for child in node.children:
        if child.type == "inline":
            return child.content
    return ""


def _standalone_image(paragraph: SyntaxTreeNode) -> Optional[Image]:
    for child in paragraph.children:
        if child.type != "inline":
            continue
        parts = [
            c
            for c in child.children
            if not (c.type == "text" and not c.content.strip())
        ]
        if len(parts) == 1 and parts[0].type == "image":
            img = parts[0]
            return Image(src=str(img.attrs.get("src", "")), alt=img.content)
    return None


def _list_item(node: SyntaxTreeNode) -> ListItem:
    texts: list[str] = []
    children: list[ListItem] = []
    for child in node.children:
        if child.type == "paragraph":
            texts.append(_inline_content(child))
        elif child.type in ("bullet_list", "ordered_list"):
            children.extend(_list_item(item) for item in child.children)
    return ListItem(text=" ".join(texts), children=tuple(children))


def _table_rows(node: SyntaxTreeNode) -> list[tuple[str, ...]]:
    rows = []
    for section in node.children:  # thead / tbody
        for tr in section.children:
            rows.append(tuple(_inline_content(cell) for cell in tr.children))
    return rows


def _collect_text(node: SyntaxTreeNode) -> str:
    texts = []
    for child in node.children:
        if child.type == "inline":
            texts.append(child.content)
        elif child.children:
            texts.append(_collect_text(child))
    return "\n".join(t for t in texts if t)


def _to_node(node: SyntaxTreeNode):
    kind = node.type
    if kind == "heading":
        return Heading(level=int(node.tag[1:]), text=_inline_content(node))
    if kind == "paragraph":
        return _standalone_image(node) or Paragraph(text=_inline_content(node))
    if kind in ("bullet_list", "ordered_list"):
        items = tuple(_list_item(item) for item in node.children)
        return ListBlock(items=items, ordered=kind == "ordered_list")
    if kind in ("fence", "code_block"):
        lang = node.info.split()[0] if kind == "fence" and node.info.strip() else None
        return CodeBlock(text=node.content.rstrip("\n"), lang=lang)
    if kind == "table":
        return Table(rows=tuple(_table_rows(node)))
    if kind == "html_block":
        text = html_to_text(node.content)
        return Paragraph(text=text) if text else None
    return Unrecognized(kind=kind, text=_collect_text(node))


def read_markdown(markdown: str, parser: Optional[MarkdownIt] = None) -> Document:
    """Parse *markdown* into a Document, preserving block order."""
    parser = parser or build_parser()
    tree = SyntaxTreeNode(parser.parse(markdown))
    nodes = []
    for child in tree.children:
        node = _to_node(child)
        if node is not None:
            nodes.append(node)
    return Document(nodes=nodes, metadata={"source_lines": len(markdown.splitlines())})
