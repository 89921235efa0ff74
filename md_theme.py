"""
Theme Module for the Guide Markdown Renderer
Holds the CSS class strings emitted by the renderer and loads overrides
from YAML theme files.

Theme file example::

    paragraph: "my-2 text-gray-200"
    h1: "text-4xl font-black"
    bullet: "*"

Dependencies:
    Required: pyyaml
"""

import logging
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Union

import yaml


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# THEME MODEL
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ThemeClasses:
    """CSS classes for every element the renderer emits."""

    # Inline
    strong: str = "font-semibold text-white"
    em: str = "text-gray-300"

    # Code
    code_block: str = (
        "bg-black bg-opacity-30 rounded-lg p-4 my-4 overflow-x-auto "
        "border-l-4 border-[var(--class-color)]"
    )
    code: str = "text-sm font-mono text-gray-300 whitespace-pre-wrap"

    # Blockquote
    blockquote: str = (
        "border-l-4 border-[var(--class-color)] pl-4 my-4 italic "
        "text-gray-400 bg-gray-900/30 py-2 rounded-r"
    )
    blockquote_line: str = "my-2"
    blockquote_nested: str = "ml-4 border-l-2 border-gray-600 pl-3"

    # Table
    table_wrapper: str = "overflow-x-auto my-4"
    table: str = "w-full border-collapse border border-gray-600 rounded-lg overflow-hidden"
    table_cell: str = "border border-gray-600 px-4 py-2"
    header_cell: str = "bg-gray-800 font-bold text-[var(--class-color)]"
    data_cell: str = "text-gray-300"

    # List
    bullet_list: str = "list-none pl-2 my-4 space-y-2 text-gray-300"
    list_item: str = "flex items-start"
    list_bullet: str = "mr-3 mt-1.5 text-[var(--class-color)] text-xs"
    list_text: str = "leading-relaxed"
    bullet: str = "◆"

    # Headers / paragraph
    h1: str = "text-3xl font-bold mt-8 mb-6 border-b-2 border-[var(--class-color)] pb-2 text-white"
    h2: str = "text-2xl font-bold mt-10 mb-4 border-b border-gray-700 pb-2 text-white flex items-center"
    h3: str = "text-xl font-bold mt-8 mb-3 text-[var(--class-color)] tracking-wide flex items-center"
    h3_accent: str = "w-1.5 h-6 bg-[var(--class-color)] mr-3 rounded-full"
    paragraph: str = "my-3 leading-7 text-gray-300/90"


DEFAULT_THEME = ThemeClasses()

# Keys whose values are text content rather than class attributes
TEXT_KEYS = frozenset(["bullet"])

# Characters allowed inside a class attribute value (Tailwind-style arbitrary
# values included). Quotes, angle brackets, '=', '&' and ';' are rejected.
_CLASS_VALUE_RE = re.compile(r"^[\w\s\-:/\[\]().%#,!@]*$")


# ═══════════════════════════════════════════════════════════════════════════════
# LOADING
# ═══════════════════════════════════════════════════════════════════════════════


def theme_from_mapping(data: Dict[str, object], base: ThemeClasses = DEFAULT_THEME) -> ThemeClasses:
    """
    Build a ThemeClasses from a mapping of overrides.

    Args:
        data: Mapping of field name -> class string
        base: Theme supplying values for keys not present in ``data``

    Returns:
        A new ThemeClasses instance

    Raises:
        ValueError: If a value is not a string or is not a safe class string
    """
    known = {f.name for f in fields(ThemeClasses)}
    overrides: Dict[str, str] = {}

    for raw_key, value in data.items():
        key = str(raw_key).strip().lower()
        if key not in known:
            logger.warning("Unknown theme key ignored: %s", raw_key)
            continue
        if not isinstance(value, str):
            raise ValueError(
                f"Theme value for '{key}' must be a string, got {type(value).__name__}"
            )
        if key not in TEXT_KEYS and (
            not _CLASS_VALUE_RE.match(value) or "javascript:" in value.lower()
        ):
            raise ValueError(f"Theme value for '{key}' contains characters not allowed in a class")
        overrides[key] = value.strip() if key not in TEXT_KEYS else value

    return replace(base, **overrides)


def load_theme(path: Union[str, Path]) -> ThemeClasses:
    """
    Load a YAML theme file on top of the default theme.

    Args:
        path: Path to a YAML file containing a mapping

    Returns:
        ThemeClasses with the file's overrides applied

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a valid YAML mapping of class strings
    """
    theme_path = Path(path)
    if not theme_path.is_file():
        raise FileNotFoundError(f"Theme file not found: {theme_path}")

    try:
        data = yaml.safe_load(theme_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in theme file {theme_path}: {e}") from e

    if data is None:
        logger.debug("Theme file %s is empty; using defaults", theme_path)
        return DEFAULT_THEME

    if not isinstance(data, dict):
        raise ValueError(
            f"Theme file {theme_path} must contain a mapping, got {type(data).__name__}"
        )

    theme = theme_from_mapping(data)
    logger.debug("Loaded theme %s (%d overrides)", theme_path, len(data))
    return theme
