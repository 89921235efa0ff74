"""
Tests for md_theme module.

Tests theme defaults, mapping overrides and YAML theme file loading.
"""

import logging

import pytest
from md_theme import DEFAULT_THEME, ThemeClasses, load_theme, theme_from_mapping


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestDefaults:
    """Tests for the built-in theme."""

    def test_default_theme_is_instance(self):
        """The module exposes a default theme instance."""
        assert isinstance(DEFAULT_THEME, ThemeClasses)

    def test_default_bullet_glyph(self):
        """The default bullet is the diamond glyph."""
        assert DEFAULT_THEME.bullet == "◆"

    def test_default_theme_is_frozen(self):
        """Themes are immutable."""
        with pytest.raises(AttributeError):
            DEFAULT_THEME.h1 = "changed"


# ═══════════════════════════════════════════════════════════════════════════════
# MAPPING OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════════


class TestThemeFromMapping:
    """Tests for theme_from_mapping."""

    def test_override_single_key(self):
        """One override leaves the other classes untouched."""
        theme = theme_from_mapping({"h1": "text-4xl font-black"})
        assert theme.h1 == "text-4xl font-black"
        assert theme.h2 == DEFAULT_THEME.h2

    def test_keys_are_case_insensitive(self):
        """Keys are matched case-insensitively."""
        theme = theme_from_mapping({"Paragraph": "my-2"})
        assert theme.paragraph == "my-2"

    def test_arbitrary_tailwind_values_allowed(self):
        """Bracketed Tailwind values pass validation."""
        value = "border-[var(--accent)] bg-gray-900/30 w-[calc(100%-2rem)]"
        theme = theme_from_mapping({"code_block": value})
        assert theme.code_block == value

    def test_unknown_key_warns_and_is_ignored(self, caplog):
        """Unknown keys are logged and skipped."""
        with caplog.at_level(logging.WARNING, logger="md_theme"):
            theme = theme_from_mapping({"sidebar": "w-64"})
        assert theme == DEFAULT_THEME
        assert "sidebar" in caplog.text

    def test_non_string_value_rejected(self):
        """Values must be strings."""
        with pytest.raises(ValueError, match="must be a string"):
            theme_from_mapping({"h1": 42})

    @pytest.mark.parametrize(
        "value",
        [
            'x" onclick="alert(1)',
            "x' onmouseover='y",
            "a<b",
            "a=b",
            "a&amp;b",
            "x; color: red",
            "javascript:alert(1)",
        ],
    )
    def test_unsafe_class_value_rejected(self, value):
        """Values that could break out of a class attribute are rejected."""
        with pytest.raises(ValueError, match="not allowed"):
            theme_from_mapping({"paragraph": value})

    def test_bullet_is_text_not_class(self):
        """The bullet glyph is content, so it may use any characters."""
        theme = theme_from_mapping({"bullet": "•"})
        assert theme.bullet == "•"

    def test_base_theme_respected(self):
        """Keys not overridden come from the base theme."""
        base = ThemeClasses(h2="base-h2")
        theme = theme_from_mapping({"h1": "new-h1"}, base=base)
        assert theme.h1 == "new-h1"
        assert theme.h2 == "base-h2"


# ═══════════════════════════════════════════════════════════════════════════════
# FILE LOADING
# ═══════════════════════════════════════════════════════════════════════════════


class TestLoadTheme:
    """Tests for load_theme."""

    def test_load_valid_file(self, tmp_path):
        """A YAML mapping overrides the defaults."""
        path = tmp_path / "theme.yaml"
        path.write_text('h1: "text-4xl"\nbullet: "-"\n', encoding="utf-8")

        theme = load_theme(path)

        assert theme.h1 == "text-4xl"
        assert theme.bullet == "-"

    def test_accepts_string_path(self, tmp_path):
        """Plain string paths are accepted."""
        path = tmp_path / "theme.yaml"
        path.write_text("em: italic\n", encoding="utf-8")

        assert load_theme(str(path)).em == "italic"

    def test_missing_file(self, tmp_path):
        """A missing theme file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_theme(tmp_path / "missing.yaml")

    def test_empty_file_gives_defaults(self, tmp_path):
        """An empty file yields the default theme."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_theme(path) == DEFAULT_THEME

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML raises ValueError."""
        path = tmp_path / "broken.yaml"
        path.write_text("h1: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_theme(path)

    def test_non_mapping_document(self, tmp_path):
        """A YAML list is not a theme."""
        path = tmp_path / "list.yaml"
        path.write_text("- h1\n- h2\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            load_theme(path)

    def test_unsafe_value_in_file(self, tmp_path):
        """Unsafe values in a file are rejected."""
        path = tmp_path / "evil.yaml"
        path.write_text("paragraph: 'x\" onclick=\"steal()'\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_theme(path)
