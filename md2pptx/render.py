"""
PowerPoint rendering of paginated documents using python-pptx.

Each page becomes one slide (lists that do not fit spill onto extra slides).
Nodes are placed at the vertical offsets computed by the paginator, and each
text box is sized from the same height estimate, minus the gap that follows
the block.
"""

import logging
from pathlib import Path
from typing import Optional

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from .estimate import block_gap
from .inline import FormattedSpan, parse
from .nodes import CodeBlock, Heading, Image, ListBlock, Paragraph, Table
from .paginate import Page, PageBudget, split_list
from .styles import StyleRecord, Template, resolve, role_for

logger = logging.getLogger(__name__)

# ── Geometry ─────────────────────────────────────────────────────────────────
CONTENT_LEFT = 0.5  # inches
LIST_INDENT = 0.2  # extra left offset for list boxes
DEFAULT_MARGIN_TOP = 0.5
DEFAULT_MARGIN_BOTTOM = 0.5
TABLE_ROW_HEIGHT = 0.37

CODE_BG = RGBColor(0xF5, 0xF5, 0xF5)
CODE_BORDER = RGBColor(0xDD, 0xDD, 0xDD)

BULLETS = ("•", "–", "◦")

_ALIGN = {"left": PP_ALIGN.LEFT, "center": PP_ALIGN.CENTER, "right": PP_ALIGN.RIGHT}
_ANCHOR = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}


# ── Helper: hex string → RGBColor ────────────────────────────────────────────
def hex_to_rgb(hex_str: Optional[str]) -> Optional[RGBColor]:
    """Convert RGB / RRGGBB (with or without '#') to RGBColor."""
    if not hex_str:
        return None
    hex_str = hex_str.strip().lstrip("#")
    if len(hex_str) == 3:
        hex_str = "".join(c * 2 for c in hex_str)
    if len(hex_str) != 6:
        return None
    try:
        r, g, b = int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16)
        return RGBColor(r, g, b)
    except ValueError:
        return None


def budget_for(
    template: Template,
    margin_top: float = DEFAULT_MARGIN_TOP,
    margin_bottom: float = DEFAULT_MARGIN_BOTTOM,
) -> PageBudget:
    """Vertical page budget for the template's slide size."""
    return PageBudget(margin_top=margin_top, max_y=template.slide_height - margin_bottom)


# ── Low-level shape helpers ───────────────────────────────────────────────────


def set_slide_background(slide, color: RGBColor):
    """Set solid background color for a slide."""
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = color


def _set_font(run, style: StyleRecord, bold: bool = False, italic: bool = False):
    """Apply a resolved style to a run; span emphasis adds to the style's own."""
    run.font.name = style.font_face
    run.font.size = Pt(style.font_size)
    run.font.bold = bool(style.bold) or bold
    run.font.italic = bool(style.italic) or italic
    color = hex_to_rgb(style.color)
    if color is not None:
        run.font.color.rgb = color


def _fill_paragraph(p, spans: list[FormattedSpan], style: StyleRecord):
    if not spans:
        # Empty paragraph still needs a run to carry the font size
        run = p.add_run()
        run.text = ""
        _set_font(run, style)
        return
    for span in spans:
        run = p.add_run()
        run.text = span.text
        _set_font(run, style, bold=span.bold, italic=span.italic)


def _split_lines(spans: list[FormattedSpan]) -> list[list[FormattedSpan]]:
    """Split spans on newlines into one span list per paragraph."""
    paragraphs: list[list[FormattedSpan]] = [[]]
    for span in spans:
        for i, part in enumerate(span.text.split("\n")):
            if i > 0:
                paragraphs.append([])
            if part:
                paragraphs[-1].append(FormattedSpan(part, span.bold, span.italic))
    return paragraphs


def add_rich_text_box(
    slide,
    spans: list[FormattedSpan],
    left: float,
    top: float,
    width: float,
    height: float,
    style: StyleRecord,
):
    """Add a text box with one run per formatted span."""
    box = slide.shapes.add_textbox(
        Inches(left), Inches(top), Inches(width), Inches(height)
    )
    tf = box.text_frame
    tf.word_wrap = True
    tf.auto_size = None
    tf.vertical_anchor = _ANCHOR.get(style.valign, MSO_ANCHOR.TOP)

    for p_idx, p_spans in enumerate(_split_lines(spans)):
        p = tf.paragraphs[0] if p_idx == 0 else tf.add_paragraph()
        p.alignment = _ALIGN.get(style.align, PP_ALIGN.LEFT)
        _fill_paragraph(p, p_spans, style)
    return box


def add_filled_box(
    slide,
    left: float,
    top: float,
    width: float,
    height: float,
    fill_color: RGBColor = CODE_BG,
    border_color: Optional[RGBColor] = CODE_BORDER,
):
    """Add a filled rectangle (code block background)."""
    shape = slide.shapes.add_shape(
        MSO_SHAPE.RECTANGLE, Inches(left), Inches(top), Inches(width), Inches(height)
    )
    shape.fill.solid()
    shape.fill.fore_color.rgb = fill_color
    if border_color:
        shape.line.color.rgb = border_color
        shape.line.width = Pt(0.75)
    else:
        shape.line.fill.background()
    return shape


# ── Renderer ─────────────────────────────────────────────────────────────────


class SlideRenderer:
    """Draws pages onto slides of a new presentation."""

    def __init__(
        self,
        template: Template,
        layout_name: Optional[str] = None,
        budget: Optional[PageBudget] = None,
        base_dir: Optional[Path] = None,
    ):
        self.template = template
        # Raises ConfigurationError before any drawing happens
        self.layout = template.get_layout(layout_name)
        self.budget = budget or budget_for(template)
        self.base_dir = Path(base_dir) if base_dir else None

        self.prs = Presentation()
        self.prs.slide_width = Inches(template.slide_width)
        self.prs.slide_height = Inches(template.slide_height)
        self.blank_layout = self.prs.slide_layouts[6]
        self.content_width = template.slide_width - 2 * CONTENT_LEFT

        self.warnings: list[str] = []
        self._slide = None

    # ── Styles ───────────────────────────────────────────────────────────────

    def style_for(self, node) -> StyleRecord:
        return resolve(self.template, self.layout.name, role_for(node))

    def font_size_for(self, node) -> float:
        """Font size *node* will be drawn with; pagination must use the same."""
        return self.style_for(node).font_size

    # ── Slides ───────────────────────────────────────────────────────────────

    def _new_slide(self):
        self._slide = self.prs.slides.add_slide(self.blank_layout)
        background = hex_to_rgb(self.layout.background_color)
        if background is not None:
            set_slide_background(self._slide, background)
        return self._slide

    def render(self, pages: list[Page]) -> Presentation:
        for page_num, page in enumerate(pages, start=1):
            self.render_page(page, page_num)
        return self.prs

    def render_page(self, page: Page, page_num: int = 0):
        self._new_slide()
        alone = len(page.nodes) == 1
        y = self.budget.margin_top
        for node, _, height in page.placements():
            y = self._render_node(node, y, height, alone)
        logger.debug("Page %d rendered down to %.2f in", page_num, y)

    def _render_node(self, node, top: float, height: float, alone: bool) -> float:
        """Draw *node* at *top* and return the y where the next node starts."""
        if isinstance(node, (Heading, Paragraph)):
            self._add_text(node, top, height)
        elif isinstance(node, ListBlock):
            return self._add_list(node, top)
        elif isinstance(node, CodeBlock):
            self._add_code_block(node, top, height)
        elif isinstance(node, Table):
            self._add_table(node, top)
        elif isinstance(node, Image):
            self._add_image(node, top, height, alone)
        return top + height

    # ── Text ─────────────────────────────────────────────────────────────────

    def _add_text(self, node, top: float, height: float):
        style = self.style_for(node)
        add_rich_text_box(
            self._slide,
            parse(node.text),
            left=CONTENT_LEFT,
            top=top,
            width=self.content_width,
            height=height - block_gap(node),
            style=style,
        )

    # ── Lists ────────────────────────────────────────────────────────────────

    def _add_list(self, node: ListBlock, top: float) -> float:
        """Draw a list, continuing on new slides when it runs out of room."""
        style = self.style_for(node)
        chunks = split_list(
            node.items, self.budget.max_y - top, self.budget, style.font_size
        )
        counters: list[int] = []
        for chunk_idx, chunk in enumerate(chunks):
            if chunk_idx > 0:
                self._new_slide()
                top = self.budget.margin_top
                logger.debug("List continues on a new slide (chunk %d)", chunk_idx)

            box = self._slide.shapes.add_textbox(
                Inches(CONTENT_LEFT + LIST_INDENT),
                Inches(top),
                Inches(self.content_width - LIST_INDENT),
                Inches(chunk.height),
            )
            tf = box.text_frame
            tf.word_wrap = True
            tf.auto_size = None

            for e_idx, entry in enumerate(chunk.entries):
                del counters[entry.depth + 1 :]
                while len(counters) <= entry.depth:
                    counters.append(0)
                counters[entry.depth] += 1

                if node.ordered and entry.depth == 0:
                    marker = f"{counters[0]}."
                else:
                    marker = BULLETS[min(entry.depth, len(BULLETS) - 1)]

                p = tf.paragraphs[0] if e_idx == 0 else tf.add_paragraph()
                p.level = min(entry.depth, 8)
                p.alignment = _ALIGN.get(style.align, PP_ALIGN.LEFT)
                spans = [FormattedSpan(f"{marker} ")] + parse(entry.item.text)
                _fill_paragraph(p, spans, style)

            top += chunk.height
        return top + block_gap(node)

    # ── Code blocks ──────────────────────────────────────────────────────────

    def _add_code_block(self, node: CodeBlock, top: float, height: float):
        style = self.style_for(node)
        box_h = height - block_gap(node)
        add_filled_box(self._slide, CONTENT_LEFT, top, self.content_width, box_h)

        box = self._slide.shapes.add_textbox(
            Inches(CONTENT_LEFT + 0.1),
            Inches(top),
            Inches(self.content_width - 0.2),
            Inches(box_h),
        )
        tf = box.text_frame
        tf.word_wrap = True
        tf.auto_size = None
        for line_idx, line in enumerate(node.text.split("\n")):
            p = tf.paragraphs[0] if line_idx == 0 else tf.add_paragraph()
            p.space_before = Pt(0)
            p.space_after = Pt(0)
            # Code is literal: no emphasis parsing
            _fill_paragraph(p, [FormattedSpan(line)] if line else [], style)

    # ── Tables ───────────────────────────────────────────────────────────────

    def _add_table(self, node: Table, top: float):
        """Add a data table; short rows are padded to the widest row."""
        rows = node.padded_rows()
        num_cols = node.column_count
        if not rows or num_cols == 0:
            return

        style = self.style_for(node)
        room = max(self.budget.max_y - top, TABLE_ROW_HEIGHT)
        height = min(len(rows) * TABLE_ROW_HEIGHT, room)
        shape = self._slide.shapes.add_table(
            len(rows),
            num_cols,
            Inches(CONTENT_LEFT),
            Inches(top),
            Inches(self.content_width),
            Inches(height),
        )
        table = shape.table
        for row_idx, row in enumerate(rows):
            is_header = row_idx == 0
            for col_idx, text in enumerate(row):
                tf = table.cell(row_idx, col_idx).text_frame
                p = tf.paragraphs[0]
                spans = [
                    FormattedSpan(s.text, s.bold or is_header, s.italic)
                    for s in parse(text)
                ]
                _fill_paragraph(p, spans if text else [], style)

    # ── Images ───────────────────────────────────────────────────────────────

    def _resolve_image(self, src: str) -> Optional[Path]:
        if not src:
            return None
        path = Path(src)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path if path.is_file() else None

    def _add_image(self, node: Image, top: float, height: float, alone: bool):
        path = self._resolve_image(node.src)
        if path is None:
            self.warnings.append(f"Image not found, showing alt text: {node.src}")
            caption = node.alt or node.src
            style = self.style_for(node)
            add_rich_text_box(
                self._slide,
                [FormattedSpan(caption, italic=True)],
                left=CONTENT_LEFT,
                top=top,
                width=self.content_width,
                height=height,
                style=style,
            )
            return

        # An image alone on its slide may use the whole page
        box_h = self.budget.max_y - top if alone else height
        picture = self._slide.shapes.add_picture(
            str(path), Inches(CONTENT_LEFT), Inches(top), height=Inches(box_h)
        )
        max_width = Inches(self.content_width)
        if picture.width > max_width:
            # Shrink to the content width, keeping the aspect ratio
            picture.height = int(picture.height * max_width / picture.width)
            picture.width = max_width

    def save(self, output_path: str):
        """Save the presentation to a file."""
        self.prs.save(output_path)
