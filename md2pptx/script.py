"""Wide-script (CJK) detection for text metrics."""

import re

# CJK punctuation, kana, full/half-width forms and unified ideographs
_WIDE_SCRIPT_RE = re.compile(
    r"[\u3000-\u303f\u3040-\u30ff\uff00-\uff9f\u4e00-\u9faf]"
)


def is_wide_script(text: str) -> bool:
    """Return True if *text* holds at least one wide-script character."""
    return bool(text) and _WIDE_SCRIPT_RE.search(text) is not None
