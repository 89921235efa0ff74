"""
MD Parser Module for the Guide Markdown Renderer
Classifies markdown lines into tagged variants and provides the table and
frontmatter helpers used by the block scanner and the CLI.

Line variants:
    CODE_FENCE       ``` (toggles a verbatim code region)
    BLOCKQUOTE       > text, >> text, > > text (level = nesting depth)
    TABLE_ROW        | cell | cell |  (any line whose trimmed text starts with |)
    TABLE_SEPARATOR  --- | ---  (separator shape without a leading pipe)
    LIST_ITEM        - item / * item
    HEADER           #, ##, ### (level = 1..3)
    BLANK            empty or whitespace only
    PLAIN            anything else (paragraph text)

Dependencies:
    Required: pyyaml
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Dict, Tuple
import re
import logging

import yaml


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════


class LineKind(Enum):
    """Kinds of markdown lines"""

    CODE_FENCE = auto()
    BLOCKQUOTE = auto()
    TABLE_SEPARATOR = auto()
    TABLE_ROW = auto()
    LIST_ITEM = auto()
    HEADER = auto()
    BLANK = auto()
    PLAIN = auto()


class Alignment(Enum):
    """Table column alignment"""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @property
    def css_class(self) -> str:
        return f"text-{self.value}"


# ═══════════════════════════════════════════════════════════════════════════════
# DATA MODELS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class ClassifiedLine:
    """A single input line tagged with its kind"""

    kind: LineKind
    text: str = ""  # payload with markers stripped
    level: int = 0  # blockquote depth or header level
    raw: str = ""


@dataclass
class DocumentMetadata:
    """Document metadata from frontmatter"""

    title: str = ""
    extra: Dict[str, str] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# TABLE HELPERS
# ═══════════════════════════════════════════════════════════════════════════════


class TableParser:
    """Row splitting, separator detection and alignment parsing"""

    _SEPARATOR_CHARS = frozenset("|-: \t")

    @staticmethod
    def split_row(line: str) -> List[str]:
        """
        Split a table row into trimmed cell contents.

        The segment before the first pipe is dropped, and so is the segment
        after the last pipe when it is blank. Empty cells in between are kept.
        """
        segments = line.strip().split("|")[1:]
        if segments and not segments[-1].strip():
            segments = segments[:-1]
        return [segment.strip() for segment in segments]

    @classmethod
    def is_separator(cls, line: str) -> bool:
        """Check if a line is a |---|:---:| style separator row"""
        stripped = line.strip()
        return (
            "|" in stripped
            and "-" in stripped
            and set(stripped).issubset(cls._SEPARATOR_CHARS)
        )

    @staticmethod
    def parse_alignments(separator_line: str) -> List[Alignment]:
        """Parse column alignments from a separator row"""
        alignments: List[Alignment] = []
        for cell in TableParser.split_row(separator_line):
            if cell.startswith(":") and cell.endswith(":") and len(cell) > 1:
                alignments.append(Alignment.CENTER)
            elif cell.endswith(":"):
                alignments.append(Alignment.RIGHT)
            else:
                alignments.append(Alignment.LEFT)
        return alignments


# ═══════════════════════════════════════════════════════════════════════════════
# LINE CLASSIFIER
# ═══════════════════════════════════════════════════════════════════════════════


class LineClassifier:
    """Tags a single line with its LineKind (pure, no parse state)"""

    FENCE_MARKER = "```"
    LIST_PATTERN = re.compile(r"^(\*|-)\s")

    # Longest prefix first so "### " is not taken for "# "
    HEADER_PREFIXES: Tuple[Tuple[str, int], ...] = (
        ("### ", 3),
        ("## ", 2),
        ("# ", 1),
    )

    _BLOCKQUOTE_MARKER_RE = re.compile(r"^>\s?")

    @classmethod
    def classify(cls, line: str) -> ClassifiedLine:
        """
        Classify a raw line.

        Precedence: fence, blockquote, table row, stray separator, list item,
        header, blank, plain.
        """
        if line.startswith(cls.FENCE_MARKER):
            return ClassifiedLine(kind=LineKind.CODE_FENCE, raw=line)

        if line.startswith(">"):
            text, depth = cls._strip_blockquote_markers(line)
            return ClassifiedLine(kind=LineKind.BLOCKQUOTE, text=text, level=depth, raw=line)

        if line.strip().startswith("|"):
            return ClassifiedLine(kind=LineKind.TABLE_ROW, text=line.strip(), raw=line)

        if "---" in line and TableParser.is_separator(line):
            return ClassifiedLine(kind=LineKind.TABLE_SEPARATOR, raw=line)

        if cls.LIST_PATTERN.match(line):
            return ClassifiedLine(kind=LineKind.LIST_ITEM, text=line[2:], raw=line)

        for prefix, level in cls.HEADER_PREFIXES:
            if line.startswith(prefix):
                return ClassifiedLine(
                    kind=LineKind.HEADER, text=line[len(prefix) :], level=level, raw=line
                )

        if not line.strip():
            return ClassifiedLine(kind=LineKind.BLANK, raw=line)

        return ClassifiedLine(kind=LineKind.PLAIN, text=line, raw=line)

    @classmethod
    def _strip_blockquote_markers(cls, line: str) -> Tuple[str, int]:
        """Strip leading '>' markers (each with one optional space) and count them"""
        text = line
        depth = 0
        while text.startswith(">"):
            text = cls._BLOCKQUOTE_MARKER_RE.sub("", text, count=1)
            depth += 1
        return text, depth


# ═══════════════════════════════════════════════════════════════════════════════
# FRONTMATTER
# ═══════════════════════════════════════════════════════════════════════════════


class FrontmatterParser:
    """Parses YAML frontmatter from markdown"""

    _SIMPLE_KEY_VALUE_RE = re.compile(r"^[A-Za-z0-9_.-]+\s*:\s*.*$")

    @staticmethod
    def parse(lines: List[str]) -> Tuple[DocumentMetadata, List[str]]:
        """
        Parse YAML frontmatter and return metadata + remaining lines.

        Args:
            lines: All lines from the markdown file

        Returns:
            Tuple of (DocumentMetadata, remaining_lines). Lines are returned
            untouched when there is no valid frontmatter block.
        """
        metadata = DocumentMetadata()

        if not lines or lines[0].strip() != "---":
            return metadata, lines

        content_start_idx = 0
        frontmatter_lines: List[str] = []

        for i, line in enumerate(lines[1:], 1):
            if line.strip() == "---":
                content_start_idx = i + 1
                break
            frontmatter_lines.append(line)

        if content_start_idx == 0:
            return metadata, lines

        if not FrontmatterParser._is_key_value_block(frontmatter_lines):
            logger.debug("Frontmatter markers found, but content is not YAML frontmatter")
            return metadata, lines

        try:
            parsed_data = yaml.safe_load("\n".join(frontmatter_lines)) or {}
        except yaml.YAMLError as e:
            logger.debug("Frontmatter YAML parse failed (%s); treating block as content", e)
            return metadata, lines

        if not isinstance(parsed_data, dict):
            logger.warning(
                "Frontmatter parsed to %s (not mapping); treating as document content",
                type(parsed_data).__name__,
            )
            return metadata, lines

        data = {
            str(key).strip().lower(): value for key, value in parsed_data.items() if key is not None
        }

        metadata.title = str(data.get("title") or "")
        metadata.extra = {k: str(v) for k, v in data.items() if k != "title"}

        return metadata, lines[content_start_idx:]

    @staticmethod
    def _is_key_value_block(frontmatter_lines: List[str]) -> bool:
        """
        Check that a block looks like metadata, not markdown content.

        Guards documents that open with a horizontal rule.
        """
        has_key_value = False
        for line in frontmatter_lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if line[:1].isspace() or stripped.startswith("- "):
                # nested YAML values
                continue
            if not FrontmatterParser._SIMPLE_KEY_VALUE_RE.match(stripped):
                return False
            has_key_value = True
        return has_key_value
