"""Unit tests for body content helpers."""

from dataclasses import dataclass

import pytest

from email_sender.infra.email import html_to_text, is_html, substitute_placeholders


@dataclass
class Customer:
    Name: str
    Code: int | None = None


class TestSubstitutePlaceholders:
    """Test {{FieldName}} substitution."""

    def test_substitutes_mapping_values(self):
        """Test values are read from mapping keys."""
        result = substitute_placeholders("Hi {{Name}}, code {{Code}}", {"Name": "Ann", "Code": 42})

        assert result == "Hi Ann, code 42"

    def test_substitutes_object_attributes(self):
        """Test values are read from object attributes."""
        result = substitute_placeholders("Hi {{Name}}, code {{Code}}", Customer(Name="Ann", Code=42))

        assert result == "Hi Ann, code 42"

    def test_missing_field_becomes_empty(self):
        """Test absent fields substitute an empty string."""
        assert substitute_placeholders("Hi {{Name}}, code {{Code}}", {"Name": "Ann"}) == "Hi Ann, code "

    def test_none_value_becomes_empty(self):
        """Test None values substitute an empty string."""
        assert substitute_placeholders("Hi {{Name}}, code {{Code}}", Customer(Name="Ann")) == "Hi Ann, code "

    def test_field_names_are_case_sensitive(self):
        assert substitute_placeholders("{{name}}", {"Name": "Ann"}) == ""

    def test_repeated_placeholders(self):
        assert substitute_placeholders("{{A}}-{{A}}", {"A": "x"}) == "x-x"

    @pytest.mark.parametrize("template", ["{{ Name }}", "{{a.b}}", "{Name}", "{{}}"])
    def test_non_identifier_tokens_untouched(self, template):
        """Test tokens that are not bare identifiers are left as-is."""
        assert substitute_placeholders(template, {"Name": "Ann", "a": "x"}) == template

    def test_no_placeholders(self):
        assert substitute_placeholders("Hello", {"Name": "Ann"}) == "Hello"


class TestIsHtml:
    """Test markup detection."""

    @pytest.mark.parametrize(
        "content",
        [
            "<p>Hello</p>",
            "<!DOCTYPE html><html></html>",
            "<div class='x'>Hi</div>",
            "<H1>Title</H1>",
        ],
    )
    def test_detects_html(self, content):
        assert is_html(content) is True

    @pytest.mark.parametrize("content", ["", "Hello", "a < b and c > d", "<pre>x</pre>"])
    def test_plain_text(self, content):
        assert is_html(content) is False


class TestHtmlToText:
    """Test plain-text alternative generation."""

    def test_strips_tags_and_unescapes(self):
        assert html_to_text("<p>Fish &amp; chips</p>") == "Fish & chips"

    def test_links_keep_url(self):
        result = html_to_text('<p>Visit <a href="https://example.com">our site</a></p>')

        assert result == "Visit our site (https://example.com)"

    def test_drops_style_blocks(self):
        result = html_to_text("<style>p { color: red; }</style><p>Hello</p>")

        assert result == "Hello"

    def test_paragraphs_become_blank_lines(self):
        assert html_to_text("<p>One</p><p>Two</p>") == "One\n\nTwo"

    def test_empty(self):
        assert html_to_text("") == ""
