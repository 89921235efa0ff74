"""
Inline Formatter Module for the Guide Markdown Renderer
Turns the raw text of a single line into escaped HTML with emphasis and
ability tooltip cards.

Processing order (escaping always runs first):
    1. HTML escaping (plus event-handler / javascript: neutralization)
    2. **bold**
    3. *italic*
    4. [Ability]{Cooldown: X. ID: Y. Description: Z} tooltip cards
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Optional

from md_theme import DEFAULT_THEME, ThemeClasses


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# ESCAPING
# ═══════════════════════════════════════════════════════════════════════════════

# Text that reads like an event-handler attribute (onload=, onClick =)
_EVENT_HANDLER_RE = re.compile(r"(on\w+\s*)=", re.IGNORECASE)

_JAVASCRIPT_SCHEME_RE = re.compile(r"(javascript):", re.IGNORECASE)

# Segments are escaped one at a time; a leading "=" could complete a handler
# shape left at the end of the previous segment (code block lines)
_LEADING_EQUALS_RE = re.compile(r"^(\s*)=")

# Markup generated by earlier passes; raw "<" never survives escaping
_TAG_RE = re.compile(r"<[^>]*>")


def escape_html(text: str) -> str:
    """
    Escape text for use as HTML content.

    Besides ``& < > " '`` this writes the '=' of event-handler shaped text
    (or a leading '=') and the ':' of ``javascript:`` as numeric entities,
    which browsers display unchanged.
    """
    escaped = html.escape(text, quote=True)
    escaped = _EVENT_HANDLER_RE.sub(r"\1&#61;", escaped)
    escaped = _LEADING_EQUALS_RE.sub(r"\1&#61;", escaped)
    return _JAVASCRIPT_SCHEME_RE.sub(r"\1&#58;", escaped)


# ═══════════════════════════════════════════════════════════════════════════════
# TOOLTIPS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class TooltipDescriptor:
    """Fields of an ability tooltip.

    Values are escaped text that may already carry emphasis markup.
    """

    ability_name: str
    spell_id: str = "???"
    cooldown: str = "N/A"
    description: str = ""

    @property
    def has_spell_id(self) -> bool:
        return self.spell_id != "???"

    @property
    def has_cooldown(self) -> bool:
        return self.cooldown != "N/A"

    @property
    def avatar_letter(self) -> str:
        """First letter of the ability name, upper-cased and escaped"""
        name = html.unescape(_TAG_RE.sub("", self.ability_name)).strip()
        return escape_html(name[:1].upper())


class TooltipParser:
    """Extracts and renders the [Name]{Field: value...} micro-syntax"""

    TOOLTIP_RE = re.compile(r"\[([^\]]+)\]\{([^\}]+)\}")

    COOLDOWN_RE = re.compile(r"Cooldown:\s*([^.]+)", re.IGNORECASE)
    ID_RE = re.compile(r"ID:\s*(\d+)", re.IGNORECASE)
    DESCRIPTION_RE = re.compile(r"Description:\s*(.+)$", re.IGNORECASE)

    # Clock icon shown beside the cooldown
    _CLOCK_SVG = (
        '<svg class="w-3 h-3 mr-1" fill="currentColor" viewBox="0 0 20 20">'
        '<path fill-rule="evenodd" d="M10 18a8 8 0 100-16 8 8 0 000 16zm1-12a1 1 0 '
        "10-2 0v4a1 1 0 00.293.707l2.828 2.829a1 1 0 101.415-1.415L11 9.586V6z"
        '" clip-rule="evenodd"/></svg>'
    )

    @classmethod
    def extract(cls, name: str, body: str) -> TooltipDescriptor:
        """
        Extract tooltip fields from the bracket and brace groups.

        When the body carries none of the Cooldown / ID / Description
        keywords the whole body becomes the description.
        """
        cooldown_match = cls.COOLDOWN_RE.search(body)
        id_match = cls.ID_RE.search(body)
        desc_match = cls.DESCRIPTION_RE.search(body)

        if desc_match:
            description = desc_match.group(1).strip()
        elif cooldown_match or id_match:
            description = ""
        else:
            logger.debug("Tooltip '%s' has no keyed fields; body used as description", name)
            description = body.strip()

        return TooltipDescriptor(
            ability_name=name.strip(),
            spell_id=id_match.group(1).strip() if id_match else "???",
            cooldown=cooldown_match.group(1).strip() if cooldown_match else "N/A",
            description=description,
        )

    @classmethod
    def render(cls, tooltip: TooltipDescriptor) -> str:
        """Build the hover-card markup for a tooltip"""
        id_badge = ""
        if tooltip.has_spell_id:
            id_badge = (
                '<span class="text-gray-500 text-xs font-mono ml-1 group-hover:text-gray-400">'
                f"[ID:{tooltip.spell_id}]</span>"
            )

        cooldown_row = ""
        if tooltip.has_cooldown:
            cooldown_row = (
                '<div class="flex items-center text-xs font-bold text-gray-400 uppercase '
                f'tracking-wider mb-2">{cls._CLOCK_SVG}'
                f'Cooldown: <span class="text-white ml-1">{tooltip.cooldown}</span></div>'
            )

        return (
            '<span class="group relative inline-block font-medium cursor-help">'
            '<span class="text-yellow-300 border-b border-dashed border-yellow-500/60 '
            'hover:text-yellow-200 hover:border-yellow-300 transition-colors">'
            f"{tooltip.ability_name}{id_badge}</span>"
            '<span class="invisible group-hover:visible opacity-0 group-hover:opacity-100 '
            "transition-all duration-200 absolute bottom-full left-1/2 -translate-x-1/2 mb-3 "
            "w-72 bg-gray-900 border border-gray-700 rounded-lg shadow-2xl z-50 "
            'pointer-events-none overflow-hidden">'
            # header
            '<div class="bg-gray-800 px-4 py-3 border-b border-gray-700 flex items-center">'
            '<div class="h-10 w-10 rounded bg-gradient-to-br from-gray-700 to-gray-800 '
            "border border-gray-600 flex items-center justify-center text-lg font-bold "
            f'text-yellow-500 shadow-inner mr-3">{tooltip.avatar_letter}</div>'
            f'<div><strong class="block text-yellow-400 text-base leading-tight">'
            f"{tooltip.ability_name}</strong>"
            f'<span class="text-xs text-gray-400 font-mono">ID: {tooltip.spell_id}</span>'
            "</div></div>"
            # body
            f'<div class="p-4">{cooldown_row}'
            f'<p class="text-sm text-gray-300 leading-relaxed">{tooltip.description}</p>'
            "</div>"
            '<div class="absolute left-1/2 -bottom-1.5 -translate-x-1/2 w-3 h-3 bg-gray-900 '
            'border-b border-r border-gray-700 rotate-45"></div>'
            "</span></span>"
        )

    @classmethod
    def replace_all(cls, text: str) -> str:
        """Replace every tooltip occurrence in already-escaped text"""

        def _replace(match: re.Match) -> str:
            tooltip = cls.extract(match.group(1), match.group(2))
            return cls.render(tooltip)

        return cls.TOOLTIP_RE.sub(_replace, text)


# ═══════════════════════════════════════════════════════════════════════════════
# INLINE FORMATTER
# ═══════════════════════════════════════════════════════════════════════════════


class InlineFormatter:
    """Applies escaping, emphasis and tooltips to a single line of text"""

    BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
    ITALIC_RE = re.compile(r"\*(.*?)\*")

    def __init__(self, theme: Optional[ThemeClasses] = None):
        self.theme = theme or DEFAULT_THEME
        self._strong_open = f'<strong class="{self.theme.strong}">'
        self._em_open = f'<em class="{self.theme.em}">'

    def format(self, text: str) -> str:
        """Format one line of raw text into an HTML fragment."""
        processed = escape_html(text)
        processed = self.BOLD_RE.sub(lambda m: f"{self._strong_open}{m.group(1)}</strong>", processed)
        processed = self.ITALIC_RE.sub(lambda m: f"{self._em_open}{m.group(1)}</em>", processed)
        return TooltipParser.replace_all(processed)


# ═══════════════════════════════════════════════════════════════════════════════
# CONVENIENCE FUNCTION
# ═══════════════════════════════════════════════════════════════════════════════


def format_inline(text: str, theme: Optional[ThemeClasses] = None) -> str:
    """
    Format a single line of inline markdown into escaped HTML.

    Args:
        text: Raw line text (may contain user- or model-supplied markup)
        theme: Optional class theme for <strong>/<em>

    Returns:
        HTML fragment safe for injection
    """
    return InlineFormatter(theme).format(text)
