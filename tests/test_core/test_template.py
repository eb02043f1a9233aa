from __future__ import annotations

from pathlib import Path

import pytest

from tagwatch.exceptions import TemplateError
from tagwatch.core.template import load_template, render


@pytest.mark.unit
class TestRender:
    """Tests for @NAME@ substitution."""

    def test_substitutes_known_names(self) -> None:
        """Test every known placeholder is replaced."""
        result = render(
            '#define V "@V_FULL@"\n#define D @V_DIRTY@\n',
            {"V_FULL": "1.2.3", "V_DIRTY": "0"},
        )

        assert result == '#define V "1.2.3"\n#define D 0\n'

    def test_leaves_unknown_placeholders(self) -> None:
        """Test unknown @NAME@ text survives untouched."""
        assert render("@OTHER@ @V@", {"V": "1"}) == "@OTHER@ 1"

    def test_empty_value(self) -> None:
        """Test a placeholder can be replaced with an empty string."""
        assert render("[@SHA@]", {"SHA": ""}) == "[]"

    def test_ignores_dollar_syntax(self) -> None:
        """Test ${NAME} is not a placeholder."""
        assert render("${V} @V@", {"V": "1"}) == "${V} 1"

    def test_adjacent_placeholders(self) -> None:
        """Test placeholders directly next to each other."""
        assert render("@A@@B@", {"A": "x", "B": "y"}) == "xy"

    def test_values_are_not_rescanned(self) -> None:
        """Test substituted values are inserted literally."""
        assert render("@A@", {"A": "@B@", "B": "no"}) == "@B@"

    def test_email_address_survives(self) -> None:
        """Test text with a single @ is left alone."""
        text = "contact: dev@example.com"

        assert render(text, {"example": "x"}) == text


@pytest.mark.unit
class TestLoadTemplate:
    """Tests for load_template."""

    def test_reads_file(self, tmp_path: Path) -> None:
        """Test the template text is returned verbatim."""
        template = tmp_path / "version.h.in"
        template.write_text("@V@\r\n", encoding="utf-8", newline="")

        assert load_template(template) == "@V@\r\n"

    def test_missing_template(self, tmp_path: Path) -> None:
        """Test a missing template is a TemplateError."""
        missing = tmp_path / "missing.in"

        with pytest.raises(TemplateError) as exc_info:
            load_template(missing)

        assert exc_info.value.template_path == str(missing)
