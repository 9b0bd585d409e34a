"""
Markdown clean-up and advice before conversion.

``optimize_markdown`` rewrites loosely structured notes into something that
paginates well (a title, section headings, blank lines where the parser
needs them). ``analyze_markdown`` reports problems without changing anything.
"""

import re
from dataclasses import dataclass
from typing import Optional

LONG_LINE_CHARS = 200
LONG_SECTION_LINES = 20

_H1_RE = re.compile(r"^#\s", re.MULTILINE)
# A short standalone line that does not start like a heading, list or number
_TITLE_LIKE_RE = re.compile(r"\n\n([^\n#*\-•\d][^\n]{10,58})(?=\n\n)")
_TERMINAL_PUNCT = (".", "。", "!", "！", "?", "？")
_HEADING_LINE_RE = re.compile(r"\n(#{1,6}\s[^\n]+)\n(?!\n)")
_BULLET_RE = re.compile(r"\n([-*+•]\s)")
_NUMBERED_RE = re.compile(r"\n(\d+\.\s)")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_SECTION_SPLIT_RE = re.compile(r"\n#{1,2}\s")


@dataclass(frozen=True)
class Suggestion:
    kind: str  # "info", "warning" or "error"
    message: str
    line: Optional[int] = None


def _promote_title(match: re.Match) -> str:
    content = match.group(1)
    if content.rstrip().endswith(_TERMINAL_PUNCT):
        return match.group(0)
    return f"\n\n## {content.strip()}"


def optimize_markdown(markdown: str) -> str:
    """Restructure *markdown* for slide conversion."""
    text = markdown

    # Use the first line as the deck title when there is no H1
    if not _H1_RE.search(text):
        first_line = text.split("\n", 1)[0]
        if first_line and not first_line.startswith("#"):
            text = f"# {first_line}\n\n{text[len(first_line):].strip()}"

    text = _TITLE_LIKE_RE.sub(_promote_title, text)
    text = _HEADING_LINE_RE.sub(lambda m: f"\n{m.group(1)}\n\n", text)
    text = _BULLET_RE.sub(lambda m: f"\n\n{m.group(1)}", text)
    text = _NUMBERED_RE.sub(lambda m: f"\n\n{m.group(1)}", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


def analyze_markdown(markdown: str) -> list[Suggestion]:
    """Return suggestions about structure that will paginate poorly."""
    suggestions: list[Suggestion] = []
    lines = markdown.split("\n")

    if not any(_H1_RE.match(line) for line in lines):
        suggestions.append(
            Suggestion(
                "warning",
                "No H1 heading found. Add a title for the first slide.",
            )
        )

    for index, line in enumerate(lines, start=1):
        if len(line) > LONG_LINE_CHARS:
            suggestions.append(
                Suggestion(
                    "warning",
                    f"Line {index}: very long line may not fit on a slide.",
                    line=index,
                )
            )

    for index, section in enumerate(_SECTION_SPLIT_RE.split(markdown)):
        if index == 0:
            continue
        non_blank = [line for line in section.split("\n") if line.strip()]
        if len(non_blank) > LONG_SECTION_LINES:
            suggestions.append(
                Suggestion(
                    "info",
                    f"Section {index} is long. Consider splitting it with more headings.",
                )
            )

    return suggestions
