"""
Markdown to PowerPoint conversion: read, paginate, render.

Each ``convert`` call runs the whole pipeline on fresh state; the only thing
a converter keeps between calls is its template and options.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pptx import Presentation

from .exceptions import ConfigurationError
from .nodes import Document, ListBlock
from .optimizer import optimize_markdown
from .paginate import DEFAULT_BREAK_LEVEL, Page, TablePolicy, paginate
from .reader import read_markdown
from .render import DEFAULT_MARGIN_BOTTOM, DEFAULT_MARGIN_TOP, SlideRenderer, budget_for
from .styles import Template

logger = logging.getLogger(__name__)


@dataclass
class ConverterOptions:
    layout: Optional[str] = None  # template default layout when None
    break_level: int = DEFAULT_BREAK_LEVEL  # headings up to this level start a slide
    margin_top: float = DEFAULT_MARGIN_TOP
    margin_bottom: float = DEFAULT_MARGIN_BOTTOM
    table_policy: TablePolicy = TablePolicy.OWN_PAGE
    optimize: bool = False  # run optimize_markdown before parsing

    def __post_init__(self):
        if not 1 <= self.break_level <= 6:
            raise ConfigurationError(
                f"break_level must be between 1 and 6, got {self.break_level}"
            )


class MarkdownToPptxConverter:
    """Converts Markdown documents to PowerPoint using a template."""

    def __init__(
        self,
        template: Template,
        options: Optional[ConverterOptions] = None,
        base_dir: Optional[Path] = None,
    ):
        self.template = template
        self.options = options or ConverterOptions()
        self.base_dir = base_dir
        self.budget = budget_for(
            template, self.options.margin_top, self.options.margin_bottom
        )
        # Fail on an unknown layout before any work is done
        template.get_layout(self.options.layout)

        self.prs: Optional[Presentation] = None
        self.pages: list[Page] = []
        self.warnings: list[str] = []

    def _new_renderer(self, base_dir: Optional[Path] = None) -> SlideRenderer:
        return SlideRenderer(
            self.template,
            self.options.layout,
            self.budget,
            base_dir=base_dir or self.base_dir,
        )

    # ── Pipeline stages ──────────────────────────────────────────────────────

    def read(self, markdown: str) -> Document:
        if self.options.optimize:
            markdown = optimize_markdown(markdown)
        return read_markdown(markdown)

    def paginate_document(
        self, document: Document, renderer: Optional[SlideRenderer] = None
    ) -> list[Page]:
        """Paginate with the font sizes the renderer will draw with."""
        renderer = renderer or self._new_renderer()
        return paginate(
            document.nodes,
            self.budget,
            font_size_for=renderer.font_size_for,
            break_level=self.options.break_level,
            table_policy=self.options.table_policy,
        )

    def _check_pages(self, pages: list[Page]):
        for page_num, page in enumerate(pages, start=1):
            if not page.exceeds(self.budget.max_y):
                continue
            node = page.nodes[0]
            # Overfull lists are split across slides by the renderer
            if len(page.nodes) == 1 and not isinstance(node, ListBlock):
                self.warnings.append(
                    f"Page {page_num}: {node.kind} is taller than the slide "
                    f"({page.height:.2f} in > {self.budget.max_y:.2f} in)"
                )

    # ── Convert & Save ───────────────────────────────────────────────────────

    def convert_document(
        self, document: Document, base_dir: Optional[Path] = None
    ) -> Presentation:
        """Paginate and render *document*; images resolve against *base_dir*."""
        renderer = self._new_renderer(base_dir)
        self.warnings = []
        self.pages = self.paginate_document(document, renderer)
        self._check_pages(self.pages)
        logger.debug(
            "Paginated %d nodes into %d pages", len(document.nodes), len(self.pages)
        )

        self.prs = renderer.render(self.pages)
        self.warnings.extend(renderer.warnings)
        return self.prs

    def convert(self, markdown: str, base_dir: Optional[Path] = None) -> Presentation:
        """Convert Markdown source to a PowerPoint presentation."""
        return self.convert_document(self.read(markdown), base_dir)

    def save(self, output_path: Union[str, Path]):
        """Save the last converted presentation to a file."""
        if self.prs is None:
            raise RuntimeError("Nothing to save; call convert() first")
        self.prs.save(str(output_path))

    def convert_file(
        self,
        markdown_path: Union[str, Path],
        output_path: Union[str, Path, None] = None,
    ) -> Path:
        """Convert a Markdown file; output defaults to the same name with .pptx."""
        markdown_path = Path(markdown_path)
        output = Path(output_path) if output_path else markdown_path.with_suffix(".pptx")
        # Images resolve next to this file unless the converter has a base_dir
        base_dir = self.base_dir or markdown_path.parent

        self.convert(markdown_path.read_text(encoding="utf-8"), base_dir)
        self.save(output)
        return output
