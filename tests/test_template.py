"""Tests for template rendering and helpers."""
import pytest

from skeletor.core.errors import TemplateRenderError
from skeletor.core.template import package_name, render, to_json, to_yaml
from skeletor.project.extras import LicenseInfo


class TestHelpers:
    """Test template helper functions."""

    @pytest.mark.parametrize("value,expected", [
        ("github.com/acme/my-tool", "mytool"),
        ("My_Project", "myproject"),
        ("plain", "plain"),
        ("a/b/", ""),
    ])
    def test_package_name(self, value, expected):
        assert package_name(value) == expected

    def test_to_yaml(self):
        assert to_yaml({"b": 1, "a": {"c": True}}) == "a:\n  c: true\nb: 1\n"

    def test_to_json_objects_with_to_dict(self):
        info = LicenseInfo(key="mit", name="MIT License")
        assert to_json({"license": info}) == (
            '{"license": {"body": "", "key": "mit", "name": "MIT License"}}'
        )


class TestRender:
    """Test rendering against a context."""

    def test_renders_context(self):
        assert render("{{ Project.Name }}", {"Project": {"Name": "widget"}}) == "widget"

    def test_trailing_newline_kept(self):
        assert render("x\n", {}) == "x\n"

    def test_helpers_as_filters_and_globals(self):
        context = {"Values": {"pkg": "github.com/acme/My-Tool"}}
        assert render("{{ Values.pkg | package_name }}", context) == "mytool"
        assert render("{{ package_name(Values.pkg) }}", context) == "mytool"
        assert render("{{ Values | toYaml }}", context) == "pkg: github.com/acme/My-Tool\n"

    def test_no_autoescape(self):
        assert render("{{ v }}", {"v": "<a & b>"}) == "<a & b>"

    def test_undefined_value_fails(self):
        with pytest.raises(TemplateRenderError) as exc_info:
            render("line1\n{{ Values.missing }}", {"Values": {}}, name="README.md.skel")

        assert exc_info.value.template_name == "README.md.skel"
        assert "README.md.skel" in str(exc_info.value)

    def test_syntax_error_has_line(self):
        with pytest.raises(TemplateRenderError) as exc_info:
            render("ok\n{% if %}", {}, name="broken.skel")

        assert exc_info.value.lineno == 2
