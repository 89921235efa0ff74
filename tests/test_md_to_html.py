"""
Tests for md_to_html module.

Tests the command-line converter: file reading, page building and exit codes.
"""

from pathlib import Path

import pytest
import md_to_html
from md_to_html import (
    build_page,
    convert_file,
    generate_output_path,
    main,
    read_markdown_file,
)


GUIDE = """---
title: Fire Mage Guide
patch: 11.0.2
---
# Rotation

- Cast [Fireball]{Cooldown: 0 sec. ID: 133}
- Use **Combustion** on cooldown
"""


@pytest.fixture
def guide_file(tmp_path):
    path = tmp_path / "fire.md"
    path.write_text(GUIDE, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from attaching its own handlers during tests."""
    monkeypatch.setattr(md_to_html, "setup_logging", lambda verbose=False: None)


# ═══════════════════════════════════════════════════════════════════════════════
# FILE READING
# ═══════════════════════════════════════════════════════════════════════════════


class TestReadMarkdownFile:
    """Tests for read_markdown_file."""

    def test_reads_utf8(self, tmp_path):
        """UTF-8 text is read unchanged."""
        path = tmp_path / "a.md"
        path.write_text("# Heading\n\nPlain text.\n", encoding="utf-8")

        assert read_markdown_file(path) == "# Heading\n\nPlain text.\n"

    def test_strips_bom(self, tmp_path):
        """A UTF-8 BOM is removed."""
        path = tmp_path / "bom.md"
        path.write_bytes(b"\xef\xbb\xbf# Heading\n")

        assert read_markdown_file(path) == "# Heading\n"

    def test_empty_file(self, tmp_path):
        """An empty file reads as an empty string."""
        path = tmp_path / "empty.md"
        path.write_bytes(b"")

        assert read_markdown_file(path) == ""

    def test_missing_file(self, tmp_path):
        """A missing input raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_markdown_file(tmp_path / "nope.md")


# ═══════════════════════════════════════════════════════════════════════════════
# PATHS AND PAGES
# ═══════════════════════════════════════════════════════════════════════════════


class TestOutput:
    """Tests for output path and page helpers."""

    def test_default_output_path(self):
        """Default output swaps the suffix for .html."""
        assert generate_output_path(Path("/tmp/guide.md")) == Path("/tmp/guide.html")

    def test_explicit_output_path(self, tmp_path):
        """An explicit output path is resolved."""
        target = tmp_path / "out" / "page.html"
        assert generate_output_path(Path("guide.md"), str(target)) == target.resolve()

    def test_build_page_wraps_fragment(self):
        """The fragment sits inside the article element."""
        page = build_page("<p>x</p>", "Guide")
        assert page.startswith("<!DOCTYPE html>")
        assert "<title>Guide</title>" in page
        assert '<article class="guide-content">\n<p>x</p>\n</article>' in page

    def test_build_page_escapes_title(self):
        """The page title is escaped."""
        page = build_page("", '</title><script>alert("x")</script>')
        assert "<script>" not in page
        assert "&lt;/title&gt;" in page


# ═══════════════════════════════════════════════════════════════════════════════
# CONVERSION
# ═══════════════════════════════════════════════════════════════════════════════


class TestConvertFile:
    """Tests for convert_file."""

    def test_writes_full_page(self, guide_file, tmp_path):
        """A full page uses the frontmatter title."""
        output = tmp_path / "fire.html"

        convert_file(guide_file, output)

        page = output.read_text(encoding="utf-8")
        assert "<title>Fire Mage Guide</title>" in page
        assert "<h1" in page
        assert "Rotation" in page
        assert "<ul" in page

    def test_frontmatter_not_rendered(self, guide_file, tmp_path):
        """Frontmatter keys do not leak into the page."""
        output = tmp_path / "fire.html"

        convert_file(guide_file, output)

        page = output.read_text(encoding="utf-8")
        assert "patch:" not in page
        assert "11.0.2" not in page

    def test_fragment_only(self, guide_file, tmp_path):
        """Fragment mode writes the bare fragment."""
        output = tmp_path / "fragment.html"

        convert_file(guide_file, output, fragment_only=True)

        fragment = output.read_text(encoding="utf-8")
        assert "<!DOCTYPE" not in fragment
        assert fragment.startswith("<h1")

    def test_explicit_title_wins(self, guide_file, tmp_path):
        """An explicit title overrides frontmatter."""
        output = tmp_path / "fire.html"

        convert_file(guide_file, output, title="Custom")

        assert "<title>Custom</title>" in output.read_text(encoding="utf-8")

    def test_title_defaults_to_file_stem(self, tmp_path):
        """Without frontmatter the file stem is the title."""
        source = tmp_path / "frost.md"
        source.write_text("Just text\n", encoding="utf-8")
        output = tmp_path / "frost.html"

        convert_file(source, output)

        assert "<title>frost</title>" in output.read_text(encoding="utf-8")

    def test_crlf_input(self, tmp_path):
        """Windows line endings are handled."""
        source = tmp_path / "win.md"
        source.write_bytes(b"# Title\r\n\r\nBody\r\n")
        output = tmp_path / "win.html"

        convert_file(source, output, fragment_only=True)

        fragment = output.read_text(encoding="utf-8")
        assert "\r" not in fragment
        assert "Title</h1>" in fragment

    def test_theme_applied(self, guide_file, tmp_path):
        """Theme file classes reach the output."""
        theme = tmp_path / "theme.yaml"
        theme.write_text('h1: "display-1"\n', encoding="utf-8")
        output = tmp_path / "fire.html"

        convert_file(guide_file, output, theme_path=str(theme), fragment_only=True)

        assert '<h1 class="display-1">' in output.read_text(encoding="utf-8")

    def test_creates_output_directory(self, guide_file, tmp_path):
        """Missing output directories are created."""
        output = tmp_path / "nested" / "dir" / "fire.html"

        convert_file(guide_file, output)

        assert output.exists()


# ═══════════════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════════════


class TestMain:
    """Tests for the CLI entry point and its exit codes."""

    def test_success_writes_default_output(self, guide_file):
        """A successful run exits 0 and writes beside the input."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(guide_file)])

        assert exc_info.value.code == 0
        assert guide_file.with_suffix(".html").exists()

    def test_fragment_flag(self, guide_file, tmp_path):
        """--fragment writes a fragment."""
        output = tmp_path / "out.html"

        with pytest.raises(SystemExit) as exc_info:
            main([str(guide_file), str(output), "--fragment"])

        assert exc_info.value.code == 0
        assert "<!DOCTYPE" not in output.read_text(encoding="utf-8")

    def test_missing_input_exits_1(self, tmp_path):
        """A missing input exits 1."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.md")])

        assert exc_info.value.code == 1

    def test_invalid_theme_exits_1(self, guide_file, tmp_path):
        """An invalid theme exits 1."""
        theme = tmp_path / "bad.yaml"
        theme.write_text("- not\n- a mapping\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main([str(guide_file), "--theme", str(theme)])

        assert exc_info.value.code == 1

    def test_missing_theme_exits_1(self, guide_file, tmp_path):
        """A missing theme exits 1."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(guide_file), "--theme", str(tmp_path / "none.yaml")])

        assert exc_info.value.code == 1
