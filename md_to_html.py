"""
MD to HTML Guide Converter
Command-line entry point for rendering a guide Markdown file to HTML.

Usage:
    uv run md_to_html.py guide.md [guide.html]
    uv run md_to_html.py guide.md --fragment        # Bare fragment, no page shell
    uv run md_to_html.py guide.md --theme dark.yaml # Override CSS classes
    uv run md_to_html.py guide.md --title "Fire Mage"
"""

import sys
import time
import argparse
import logging
from html import escape
from pathlib import Path
from typing import Optional

from charset_normalizer import from_bytes

from md_parser import FrontmatterParser
from md_renderer import RenderConfig, render_markdown
from md_theme import DEFAULT_THEME, load_theme


# ═══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════

OUTPUT_SUFFIX = ".html"

FALLBACK_ENCODINGS = ["utf-8", "cp1252"]

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body>
<article class="guide-content">
{body}
</article>
</body>
</html>
"""

logger = logging.getLogger("md_to_html")


# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════════


class LogFormatter(logging.Formatter):
    """Log formatter with level-based prefixes"""

    PREFIXES = {
        logging.DEBUG: "[DEBUG]",
        logging.INFO: "[INFO]",
        logging.WARNING: "[WARNING]",
        logging.ERROR: "[ERROR]",
        logging.CRITICAL: "[CRITICAL]",
    }

    def format(self, record: logging.LogRecord) -> str:
        prefix = self.PREFIXES.get(record.levelno, "[LOG]")
        return f"{prefix} {record.getMessage()}"


def setup_logging(verbose: bool = False):
    """Configure logging for the converter and the renderer modules"""
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LogFormatter())

    for name in ("md_to_html", "md_renderer", "md_parser", "md_theme", "md_inline"):
        module_logger = logging.getLogger(name)
        module_logger.setLevel(level)
        module_logger.handlers.clear()
        module_logger.addHandler(handler)


# ═══════════════════════════════════════════════════════════════════════════════
# FILE HANDLING
# ═══════════════════════════════════════════════════════════════════════════════


def read_markdown_file(file_path: Path) -> str:
    """
    Read file content with encoding detection.

    Strategy:
        1. UTF-8 BOM
        2. charset_normalizer statistical detection
        3. Sequential fallback: UTF-8 → CP1252 → Latin-1

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    raw_bytes = file_path.read_bytes()
    if not raw_bytes:
        return ""

    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        return raw_bytes.decode("utf-8-sig")

    result = from_bytes(raw_bytes).best()
    if result is not None and result.encoding:
        logger.debug("Encoding detected by charset_normalizer: %s", result.encoding)
        return str(result)

    for enc in FALLBACK_ENCODINGS:
        try:
            return raw_bytes.decode(enc)
        except UnicodeDecodeError:
            logger.debug("Decoding as %s failed, trying next encoding", enc)

    # latin-1 decodes any byte sequence
    return raw_bytes.decode("latin-1")


def generate_output_path(input_path: Path, output_file: Optional[str] = None) -> Path:
    """Use the explicit output path, or the input path with an .html suffix"""
    if output_file:
        return Path(output_file).resolve()
    return input_path.with_suffix(OUTPUT_SUFFIX)


def build_page(fragment: str, title: str) -> str:
    """Wrap a rendered fragment in a minimal HTML5 page"""
    return PAGE_TEMPLATE.format(title=escape(title, quote=True), body=fragment)


# ═══════════════════════════════════════════════════════════════════════════════
# CONVERSION
# ═══════════════════════════════════════════════════════════════════════════════


def convert_file(
    input_path: Path,
    output_path: Path,
    theme_path: Optional[str] = None,
    fragment_only: bool = False,
    title: Optional[str] = None,
) -> Path:
    """
    Render one markdown file and write the HTML result.

    Returns:
        The path that was written

    Raises:
        FileNotFoundError: Missing input or theme file
        ValueError: Invalid theme file
    """
    start_time = time.perf_counter()

    theme = load_theme(theme_path) if theme_path else DEFAULT_THEME

    logger.info("Reading: %s", input_path.name)
    content = read_markdown_file(input_path)

    metadata, lines = FrontmatterParser.parse(content.splitlines())
    page_title = title or metadata.title or input_path.stem
    logger.debug("Title: %s", page_title)

    rendered = render_markdown("\n".join(lines), RenderConfig(theme=theme))
    document = rendered.html if fragment_only else build_page(rendered.html, page_title)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document, encoding="utf-8")

    elapsed = time.perf_counter() - start_time
    logger.info("Wrote %s in %.2fs", output_path, elapsed)
    return output_path


# ═══════════════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════════════


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser"""
    parser = argparse.ArgumentParser(
        description="Render guide Markdown files to sanitized HTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    uv run md_to_html.py guide.md                       # Writes guide.html
    uv run md_to_html.py guide.md out/guide.html        # Explicit output
    uv run md_to_html.py guide.md --fragment            # Fragment only
    uv run md_to_html.py guide.md --theme theme.yaml    # Custom classes
        """,
    )

    parser.add_argument("input_file", help="Input Markdown file")
    parser.add_argument(
        "output_file",
        nargs="?",
        help="Output HTML path (optional, defaults to the input name with .html)",
    )

    output_group = parser.add_argument_group("output options")
    output_group.add_argument(
        "--fragment",
        action="store_true",
        help="Write the bare HTML fragment instead of a full page",
    )
    output_group.add_argument(
        "--title",
        help="Page title (defaults to frontmatter title, then file name)",
    )
    output_group.add_argument(
        "--theme",
        help="YAML file overriding the CSS classes of rendered elements",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    return parser


def run_conversion(args) -> int:
    """
    Execute conversion for the parsed CLI arguments.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    input_path = Path(args.input_file).resolve()
    output_path = generate_output_path(input_path, args.output_file)

    try:
        convert_file(
            input_path,
            output_path,
            theme_path=args.theme,
            fragment_only=args.fragment,
            title=args.title,
        )
        return 0

    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    except ValueError as e:
        logger.error("%s", e)
        return 1

    except OSError as e:
        logger.error("Could not write output: %s", e)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


def main(argv=None):
    """Main entry point with CLI argument parsing"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    sys.exit(run_conversion(args))


if __name__ == "__main__":
    main()
