"""
Templates, style resolution and the template cache.

A template holds named layouts; each layout maps a role (``title``,
``heading2``, ``body``, ``code`` ...) to a partial style record. Resolving a
role fills every field through the chain role record -> ``body`` record ->
built-in default.
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Union

from .exceptions import ConfigurationError
from .nodes import CodeBlock, Heading

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# ── Slide geometry defaults (inches, 16:9) ────────────────────────────────────
SLIDE_WIDTH = 10.0
SLIDE_HEIGHT = 5.625

DEFAULT_FONT = "Arial"
CODE_FONT = "Courier New"
DEFAULT_COLOR = "363636"
CODE_COLOR = "000000"

ROLES = ("title", "heading1", "heading2", "heading3", "body", "code")


@dataclass(frozen=True)
class StyleRecord:
    font_size: Optional[float] = None
    font_face: Optional[str] = None
    color: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    align: Optional[str] = None
    valign: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "StyleRecord":
        data = data or {}
        return cls(
            font_size=data.get("fontSize"),
            font_face=data.get("fontFace"),
            color=data.get("color"),
            bold=data.get("bold"),
            italic=data.get("italic"),
            align=data.get("align"),
            valign=data.get("valign"),
        )


def _builtin(
    font_size: float,
    bold: bool = False,
    font_face: str = DEFAULT_FONT,
    color: str = DEFAULT_COLOR,
) -> StyleRecord:
    return StyleRecord(
        font_size=font_size,
        font_face=font_face,
        color=color,
        bold=bold,
        italic=False,
        align="left",
        valign="top",
    )


DEFAULT_STYLES: dict[str, StyleRecord] = {
    "title": _builtin(32, bold=True),
    "heading1": _builtin(32, bold=True),
    "heading2": _builtin(28, bold=True),
    "heading3": _builtin(24, bold=True),
    "body": _builtin(14),
    "code": _builtin(10, font_face=CODE_FONT, color=CODE_COLOR),
}


@dataclass
class Layout:
    name: str
    styles: dict[str, StyleRecord] = field(default_factory=dict)
    background_color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Layout":
        background = data.get("background") or {}
        styles = {
            role: StyleRecord.from_dict(style)
            for role, style in (data.get("styles") or {}).items()
        }
        return cls(
            name=data.get("name", ""),
            styles=styles,
            background_color=background.get("color"),
        )


@dataclass
class Template:
    id: str
    name: str
    layouts: list[Layout]
    default_layout: str
    version: str = "1.0.0"
    description: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    colors: list[str] = field(default_factory=list)
    slide_size: Optional[tuple[float, float]] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        size = data.get("slideSize")
        slide_size = (float(size["width"]), float(size["height"])) if size else None
        layouts = [Layout.from_dict(layout) for layout in data.get("layouts") or []]
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            layouts=layouts,
            default_layout=data.get("defaultLayout", ""),
            version=str(data.get("version", "1.0.0")),
            description=data.get("description"),
            category=data.get("category"),
            author=data.get("author"),
            colors=list(data.get("colors") or []),
            slide_size=slide_size,
        )

    @property
    def slide_width(self) -> float:
        return self.slide_size[0] if self.slide_size else SLIDE_WIDTH

    @property
    def slide_height(self) -> float:
        return self.slide_size[1] if self.slide_size else SLIDE_HEIGHT

    def get_layout(self, name: Optional[str] = None) -> Layout:
        """Return the layout called *name* (the default layout if None)."""
        name = name or self.default_layout
        for layout in self.layouts:
            if layout.name == name:
                return layout
        raise ConfigurationError(
            f'Layout "{name}" not found in template "{self.id or self.name}"'
        )


# ── Resolution ───────────────────────────────────────────────────────────────


def role_for(node) -> str:
    """Map a node to the template role that styles it."""
    if isinstance(node, Heading):
        if node.level == 1:
            return "title"
        return "heading2" if node.level == 2 else "heading3"
    if isinstance(node, CodeBlock):
        return "code"
    return "body"


def resolve(template: Template, layout_name: Optional[str], role: str) -> StyleRecord:
    """Resolve *role* in *layout_name* to a fully populated style record.

    Raises ConfigurationError if the layout does not exist.
    """
    layout = template.get_layout(layout_name)
    own = layout.styles.get(role) or StyleRecord()
    body = layout.styles.get("body") or StyleRecord()
    builtin = DEFAULT_STYLES.get(role, DEFAULT_STYLES["body"])

    values = {}
    for f in fields(StyleRecord):
        for source in (own, body, builtin):
            value = getattr(source, f.name)
            if value is not None:
                values[f.name] = value
                break
    return replace(builtin, **values)


# ── Template cache ───────────────────────────────────────────────────────────


class TemplateCache:
    """Loads templates by id or path and keeps them until invalidated.

    Owned by whoever drives conversions (a CLI run, a server process); it is
    the only state shared between conversion calls.
    """

    def __init__(self, search_dirs: Optional[list[Union[str, Path]]] = None):
        self.search_dirs = [Path(d) for d in search_dirs or []] + [TEMPLATES_DIR]
        self._templates: dict[str, Template] = {}

    def _locate(self, template_id: str) -> Path:
        candidate = Path(template_id)
        if candidate.suffix == ".json" and candidate.is_file():
            return candidate
        for directory in self.search_dirs:
            path = directory / f"{template_id}.json"
            if path.is_file():
                return path
        raise ConfigurationError(f'Template "{template_id}" not found')

    def get_or_load(self, template_id: str) -> Template:
        cached = self._templates.get(template_id)
        if cached is not None:
            return cached

        path = self._locate(template_id)
        logger.debug("Loading template %s from %s", template_id, path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read template {path}: {e}") from e

        template = Template.from_dict(data)
        self._templates[template_id] = template
        return template

    def invalidate(self, template_id: Optional[str] = None):
        """Drop one cached template, or all of them."""
        if template_id is None:
            self._templates.clear()
        else:
            self._templates.pop(template_id, None)

    def available(self) -> list[str]:
        ids: set[str] = set()
        for directory in self.search_dirs:
            if directory.is_dir():
                ids.update(p.stem for p in directory.glob("*.json"))
        return sorted(ids)

    def describe_all(self) -> list[dict]:
        """Summary metadata of every template found in the search dirs."""
        result = []
        for template_id in self.available():
            template = self.get_or_load(template_id)
            result.append(
                {
                    "id": template.id or template_id,
                    "name": template.name,
                    "description": template.description,
                    "category": template.category,
                    "colors": template.colors,
                }
            )
        return result
