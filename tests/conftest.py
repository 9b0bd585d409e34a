import sys
from pathlib import Path

import pytest

# Ensure the project root is importable when running `pytest` via its entrypoint
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from md2pptx.paginate import PageBudget  # noqa: E402
from md2pptx.styles import TemplateCache  # noqa: E402


@pytest.fixture
def template_cache():
    return TemplateCache()


@pytest.fixture
def default_template(template_cache):
    return template_cache.get_or_load("default")


@pytest.fixture
def budget():
    """16:9 slide with half-inch top and bottom margins."""
    return PageBudget(margin_top=0.5, max_y=5.125)
