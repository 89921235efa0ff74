"""
HTML Renderer Module for the Guide Markdown Renderer
Scans markdown line by line and renders sanitized HTML fragments.

Supported blocks: fenced code, (nested) blockquotes, tables with column
alignment, bullet lists, h1-h3 headers and paragraphs. Inline text goes
through md_inline.format_inline.

The renderer never raises: malformed input degrades to paragraphs or plain
escaped text and unterminated blocks are closed at end of input.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from md_inline import InlineFormatter, escape_html
from md_parser import Alignment, ClassifiedLine, LineClassifier, LineKind, TableParser
from md_theme import DEFAULT_THEME, ThemeClasses

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    """Configuration for HTML rendering."""

    theme: ThemeClasses = DEFAULT_THEME


@dataclass(frozen=True)
class RenderedMarkdown:
    """Rendered output envelope."""

    html: str

    def __str__(self) -> str:
        return self.html


@dataclass
class ParseState:
    """Block context carried across lines of a single render call."""

    in_code_block: bool = False
    in_list: bool = False
    in_table: bool = False
    in_blockquote: bool = False
    table_alignments: List[Alignment] = field(default_factory=list)
    # Index of the separator row under the last header row; never rendered
    separator_index: int = -1


class HtmlRenderer:
    """Renders markdown text to an HTML fragment.

    Instances only hold immutable configuration; every ``render`` call works
    on its own ParseState, so one instance can be shared between threads.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        self.theme = self.config.theme
        self.inline = InlineFormatter(self.theme)

    def render(self, text: str) -> RenderedMarkdown:
        """Render markdown text to a RenderedMarkdown envelope."""
        if not text:
            return RenderedMarkdown(html="")

        lines = text.split("\n")
        state = ParseState()
        out: List[str] = []

        # Index-based so table headers can peek at lines[i + 1]
        i = 0
        while i < len(lines):
            self._render_line(lines, i, state, out)
            i += 1

        self._close_all(state, out)

        html = "".join(out)
        logger.debug("Rendered %d lines into %d characters of HTML", len(lines), len(html))
        return RenderedMarkdown(html=html)

    # ── Dispatch ────────────────────────────────────────────────────────────

    def _render_line(
        self, lines: List[str], i: int, state: ParseState, out: List[str]
    ) -> None:
        line = LineClassifier.classify(lines[i])

        # ── Code fence / code content ───────────────────────────────────────
        if line.kind == LineKind.CODE_FENCE:
            self._toggle_code_block(state, out)
            return

        if state.in_code_block:
            out.append(escape_html(line.raw) + "\n")
            return

        # Separator consumed by the header row above it
        if i == state.separator_index:
            return

        # ── Blockquote ──────────────────────────────────────────────────────
        if line.kind == LineKind.BLOCKQUOTE:
            self._render_blockquote_line(line, state, out)
            return

        if state.in_blockquote:
            self._close_blockquote(state, out)

        # ── Table ───────────────────────────────────────────────────────────
        if line.kind == LineKind.TABLE_ROW:
            self._render_table_row(line, lines, i, state, out)
            return

        if state.in_table:
            self._close_table(state, out)

        if line.kind == LineKind.TABLE_SEPARATOR:
            # Stray separator with no header row above it
            return

        # ── List ────────────────────────────────────────────────────────────
        if line.kind == LineKind.LIST_ITEM:
            self._render_list_item(line, state, out)
            return

        if line.kind == LineKind.BLANK:
            # An open list survives blank lines
            return

        if state.in_list:
            self._close_list(state, out)

        # ── Header / paragraph ──────────────────────────────────────────────
        if line.kind == LineKind.HEADER:
            out.append(self._render_header(line))
        else:
            out.append(f'<p class="{self.theme.paragraph}">{self.inline.format(line.text)}</p>')

    # ── Code ────────────────────────────────────────────────────────────────

    def _toggle_code_block(self, state: ParseState, out: List[str]) -> None:
        if state.in_code_block:
            out.append("</code></pre>")
            state.in_code_block = False
            return

        self._close_list(state, out)
        self._close_blockquote(state, out)
        self._close_table(state, out)
        out.append(
            f'<pre class="{self.theme.code_block}"><code class="{self.theme.code}">'
        )
        state.in_code_block = True

    # ── Blockquote ──────────────────────────────────────────────────────────

    def _render_blockquote_line(
        self, line: ClassifiedLine, state: ParseState, out: List[str]
    ) -> None:
        if not state.in_blockquote:
            self._close_list(state, out)
            self._close_table(state, out)
            out.append(f'<blockquote class="{self.theme.blockquote}">')
            state.in_blockquote = True

        classes = self.theme.blockquote_line
        if line.level > 1:
            classes = f"{classes} {self.theme.blockquote_nested}"
        out.append(f'<p class="{classes}">{self.inline.format(line.text)}</p>')

    # ── Table ───────────────────────────────────────────────────────────────

    def _render_table_row(
        self,
        line: ClassifiedLine,
        lines: List[str],
        i: int,
        state: ParseState,
        out: List[str],
    ) -> None:
        if not state.in_table:
            self._close_list(state, out)
            out.append(
                f'<div class="{self.theme.table_wrapper}"><table class="{self.theme.table}">'
            )
            state.in_table = True

        next_line = lines[i + 1] if i + 1 < len(lines) else ""
        is_header = TableParser.is_separator(next_line)
        if is_header:
            state.separator_index = i + 1
            if not state.table_alignments:
                state.table_alignments = TableParser.parse_alignments(next_line)

        cell_tag = "th" if is_header else "td"
        role_class = self.theme.header_cell if is_header else self.theme.data_cell

        cells = []
        for index, cell in enumerate(TableParser.split_row(line.text)):
            alignment = (
                state.table_alignments[index]
                if index < len(state.table_alignments)
                else Alignment.LEFT
            )
            cells.append(
                f'<{cell_tag} class="{self.theme.table_cell} {alignment.css_class} {role_class}">'
                f"{self.inline.format(cell)}</{cell_tag}>"
            )
        out.append("<tr>" + "".join(cells) + "</tr>")

    # ── List ────────────────────────────────────────────────────────────────

    def _render_list_item(self, line: ClassifiedLine, state: ParseState, out: List[str]) -> None:
        if not state.in_list:
            out.append(f'<ul class="{self.theme.bullet_list}">')
            state.in_list = True

        out.append(
            f'<li class="{self.theme.list_item}">'
            f'<span class="{self.theme.list_bullet}">{escape_html(self.theme.bullet)}</span>'
            f'<span class="{self.theme.list_text}">{self.inline.format(line.text)}</span>'
            "</li>"
        )

    # ── Headers ─────────────────────────────────────────────────────────────

    def _render_header(self, line: ClassifiedLine) -> str:
        content = self.inline.format(line.text)
        if line.level == 3:
            return (
                f'<h3 class="{self.theme.h3}"><span class="{self.theme.h3_accent}"></span>'
                f"{content}</h3>"
            )
        if line.level == 2:
            return f'<h2 class="{self.theme.h2}">{content}</h2>'
        return f'<h1 class="{self.theme.h1}">{content}</h1>'

    # ── Closing ─────────────────────────────────────────────────────────────

    @staticmethod
    def _close_list(state: ParseState, out: List[str]) -> None:
        if state.in_list:
            out.append("</ul>")
            state.in_list = False

    @staticmethod
    def _close_blockquote(state: ParseState, out: List[str]) -> None:
        if state.in_blockquote:
            out.append("</blockquote>")
            state.in_blockquote = False

    @staticmethod
    def _close_table(state: ParseState, out: List[str]) -> None:
        if state.in_table:
            out.append("</table></div>")
            state.in_table = False
            state.table_alignments = []

    def _close_all(self, state: ParseState, out: List[str]) -> None:
        """Close whatever is still open at end of input."""
        self._close_list(state, out)
        if state.in_code_block:
            logger.debug("Unterminated code fence closed at end of input")
            out.append("</code></pre>")
            state.in_code_block = False
        if state.in_blockquote:
            logger.debug("Blockquote closed at end of input")
        self._close_blockquote(state, out)
        if state.in_table:
            logger.debug("Table closed at end of input")
        self._close_table(state, out)


# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════════


def render_markdown(text: str, config: Optional[RenderConfig] = None) -> RenderedMarkdown:
    """
    Render markdown text to a sanitized HTML fragment.

    Args:
        text: Markdown source (AI-generated or user-authored)
        config: Optional render configuration (theme classes)

    Returns:
        RenderedMarkdown whose ``html`` is safe for direct injection
    """
    return HtmlRenderer(config).render(text)
