"""Inline emphasis parsing (``***bold italic***``, ``**bold**``, ``*italic*``)."""

import re
from dataclasses import dataclass

# Alternatives are tried in order, so the triple form wins over the others
_EMPHASIS_RE = re.compile(r"\*\*\*(.+?)\*\*\*|\*\*(.+?)\*\*|\*(.+?)\*")


@dataclass(frozen=True)
class FormattedSpan:
    text: str
    bold: bool = False
    italic: bool = False


def parse(text: str) -> list[FormattedSpan]:
    """Split *text* into formatted spans, stripping the emphasis markers.

    Plain text between matches becomes an unformatted span. Unterminated
    markers never match, so they stay in the plain text as literal ``*``.
    Text without markers (including ``""``) yields a single plain span.
    """
    spans: list[FormattedSpan] = []
    pos = 0
    for m in _EMPHASIS_RE.finditer(text):
        if m.start() > pos:
            spans.append(FormattedSpan(text[pos : m.start()]))
        if m.group(1) is not None:
            spans.append(FormattedSpan(m.group(1), bold=True, italic=True))
        elif m.group(2) is not None:
            spans.append(FormattedSpan(m.group(2), bold=True))
        else:
            spans.append(FormattedSpan(m.group(3), italic=True))
        pos = m.end()

    if pos < len(text):
        spans.append(FormattedSpan(text[pos:]))

    if not spans:
        spans.append(FormattedSpan(text))
    return spans


def plain_text(text: str) -> str:
    """Return *text* with emphasis markers removed."""
    return "".join(span.text for span in parse(text))
