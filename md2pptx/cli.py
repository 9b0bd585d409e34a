"""
md2pptx command line.

Usage:
    md2pptx <input.md> [output.pptx] [--template ID|PATH] [--break-level N]
    md2pptx <input.md> --check
    md2pptx --list-templates

If output path is not specified, uses the input filename with .pptx extension.
"""

import argparse
import logging
import sys
from pathlib import Path

from .converter import ConverterOptions, MarkdownToPptxConverter
from .exceptions import ConfigurationError
from .optimizer import analyze_markdown
from .paginate import DEFAULT_BREAK_LEVEL, TablePolicy
from .styles import TemplateCache


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2pptx",
        description="Convert Markdown documents to PowerPoint presentations.",
    )
    parser.add_argument("input", nargs="?", help="Input Markdown file path")
    parser.add_argument(
        "output", nargs="?", help="Output PPTX file path (default: same name as input)"
    )
    parser.add_argument(
        "--template",
        default="default",
        help="Bundled template id or path to a template JSON file",
    )
    parser.add_argument("--layout", help="Layout name (default: template default)")
    parser.add_argument(
        "--break-level",
        type=int,
        default=DEFAULT_BREAK_LEVEL,
        help="Headings up to this level start a new slide (1-6)",
    )
    parser.add_argument(
        "--table-policy",
        choices=[p.value for p in TablePolicy],
        default=TablePolicy.OWN_PAGE.value,
        help="Give tables their own slide, or place them inline",
    )
    parser.add_argument(
        "--optimize", action="store_true", help="Restructure the Markdown first"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Print structure suggestions and exit without converting",
    )
    parser.add_argument(
        "--list-templates", action="store_true", help="List bundled templates"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cache = TemplateCache()
    if args.list_templates:
        for info in cache.describe_all():
            category = f" [{info['category']}]" if info["category"] else ""
            print(f"{info['id']}: {info['name']}{category}")
            if info["description"]:
                print(f"    {info['description']}")
        return

    if not args.input:
        parser.error("the following arguments are required: input")

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    if args.check:
        suggestions = analyze_markdown(input_path.read_text(encoding="utf-8"))
        if not suggestions:
            print("No suggestions.")
        for s in suggestions:
            print(f"[{s.kind}] {s.message}")
        return

    output_path = Path(args.output) if args.output else input_path.with_suffix(".pptx")

    print(f"Converting: {input_path}")
    print(f"Output: {output_path}")

    try:
        template = cache.get_or_load(args.template)
        options = ConverterOptions(
            layout=args.layout,
            break_level=args.break_level,
            table_policy=TablePolicy(args.table_policy),
            optimize=args.optimize,
        )
        converter = MarkdownToPptxConverter(
            template, options, base_dir=input_path.parent
        )
        converter.convert_file(input_path, output_path)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if converter.warnings:
        print(f"\nWarnings ({len(converter.warnings)}):", file=sys.stderr)
        for w in converter.warnings:
            print(f"  - {w}", file=sys.stderr)

    num_slides = len(converter.prs.slides)
    print(f"Done! Created {output_path} ({num_slides} slides)")


if __name__ == "__main__":
    main()
