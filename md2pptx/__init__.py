"""md2pptx - paginate Markdown documents into PowerPoint slides."""

from .converter import ConverterOptions, MarkdownToPptxConverter
from .estimate import estimate_height
from .exceptions import ConfigurationError
from .inline import FormattedSpan, parse
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
    document_from_dict,
    node_from_dict,
)
from .paginate import Page, PageBudget, TablePolicy, paginate, split_list
from .reader import read_markdown
from .script import is_wide_script
from .styles import StyleRecord, Template, TemplateCache, resolve

__version__ = "0.1.0"
