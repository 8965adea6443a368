"""Tests for formmail.validation.filters."""

import pytest

from formmail.validation.context import FormContext
from formmail.validation.field import FieldDefinition
from formmail.validation.filters import (
    CallbackFilter,
    HtmlEscapeFilter,
    NormalizeNewlinesFilter,
    RemoveEmojiFilter,
    RemoveUrlFilter,
    SanitizeEmailFilter,
    SanitizePhoneFilter,
    SanitizeTextFilter,
    StripTagsFilter,
    TrimFilter,
)

FIELD = FieldDefinition("value")

ALL_FILTERS = [
    TrimFilter(),
    StripTagsFilter(),
    HtmlEscapeFilter(),
    SanitizeTextFilter(),
    SanitizeEmailFilter(),
    RemoveUrlFilter(),
    RemoveEmojiFilter(),
    NormalizeNewlinesFilter(),
    SanitizePhoneFilter(),
]


class TestCommonContract:
    @pytest.mark.parametrize("flt", ALL_FILTERS, ids=lambda f: type(f).__name__)
    @pytest.mark.parametrize("value", [None, 42, 3.5, ["a"], {"k": "v"}, True])
    def test_non_strings_pass_through(self, flt: object, value: object) -> None:
        assert flt.apply(value, FIELD) is value  # type: ignore[attr-defined]

    @pytest.mark.parametrize("flt", ALL_FILTERS, ids=lambda f: type(f).__name__)
    def test_process_never_records_errors(self, flt: object) -> None:
        ctx = FormContext()
        flt.process("<b>x</b> @ \x00", FIELD, ctx)  # type: ignore[attr-defined]
        assert not ctx.has_any_errors()


# ---------------------------------------------------------------------------
# Whitespace
# ---------------------------------------------------------------------------


class TestTrimFilter:
    def test_both_sides(self) -> None:
        assert TrimFilter().apply("  Julien  ", FIELD) == "Julien"

    def test_unicode_spaces(self) -> None:
        assert TrimFilter().apply("\u3000Julien\u3000", FIELD) == "Julien"

    def test_zero_width_characters(self) -> None:
        assert TrimFilter().apply("\u200bhello\u200b", FIELD) == "hello"

    def test_ascii_mode_keeps_unicode_spaces(self) -> None:
        value = "\u3000Julien\u3000"
        assert TrimFilter(unicode_aware=False).apply(value, FIELD) == value

    def test_ascii_mode_strips_ascii_whitespace(self) -> None:
        assert TrimFilter(unicode_aware=False).apply("\t\n Julien \0\v", FIELD) == "Julien"

    def test_left_only(self) -> None:
        assert TrimFilter(mode="left").apply("   Julien  ", FIELD) == "Julien  "

    def test_right_only(self) -> None:
        assert TrimFilter(mode="right").apply("   Julien  ", FIELD) == "   Julien"

    def test_all_whitespace(self) -> None:
        assert TrimFilter().apply(" \t\u3000 ", FIELD) == ""

    def test_invalid_mode(self) -> None:
        with pytest.raises(ValueError, match="trim mode"):
            TrimFilter(mode="middle")

    def test_idempotent(self) -> None:
        flt = TrimFilter()
        once = flt.apply("\u3000 x \n", FIELD)
        assert flt.apply(once, FIELD) == once


class TestNormalizeNewlinesFilter:
    def test_crlf_and_cr(self) -> None:
        assert NormalizeNewlinesFilter().apply("a\r\nb\rc", FIELD) == "a\nb\nc\n"

    def test_trailing_blank_lines_collapsed(self) -> None:
        assert NormalizeNewlinesFilter().apply("Hi\n\n\n", FIELD) == "Hi\n"

    def test_inner_blank_lines_kept(self) -> None:
        assert NormalizeNewlinesFilter().apply("a\n\nb", FIELD) == "a\n\nb\n"

    def test_without_trailing_newline(self) -> None:
        flt = NormalizeNewlinesFilter(ensure_trailing_newline=False)
        assert flt.apply("a\r\nb", FIELD) == "a\nb"
        assert flt.apply("Hi\r\n\r\n", FIELD) == "Hi\n"


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------


class TestStripTagsFilter:
    def test_removes_tags_keeps_text(self) -> None:
        assert StripTagsFilter().apply("<p>Hello <b>World</b></p>", FIELD) == "Hello World"

    def test_removes_script_with_content(self) -> None:
        assert StripTagsFilter().apply("<script>alert(1)</script>Safe", FIELD) == "Safe"

    def test_removes_style_with_content(self) -> None:
        value = '<STYLE type="text/css">p { color: red }</STYLE>Text'
        assert StripTagsFilter().apply(value, FIELD) == "Text"

    def test_allowed_tags(self) -> None:
        value = "<b><i>Deep</i> inside</b>"
        assert StripTagsFilter(["<b>"]).apply(value, FIELD) == "<b>Deep inside</b>"
        assert StripTagsFilter(["b"]).apply(value, FIELD) == "<b>Deep inside</b>"

    def test_entities_untouched(self) -> None:
        assert StripTagsFilter().apply("&lt;b&gt; &amp;", FIELD) == "&lt;b&gt; &amp;"

    def test_broken_markup(self) -> None:
        assert StripTagsFilter().apply("<b><i>Broken", FIELD) == "Broken"

    def test_comments_removed(self) -> None:
        assert StripTagsFilter().apply("<!-- hidden -->Visible", FIELD) == "Visible"

    def test_lone_angle_bracket_kept(self) -> None:
        assert StripTagsFilter().apply("a < b", FIELD) == "a < b"


class TestHtmlEscapeFilter:
    def test_html5_default(self) -> None:
        value = "<a href=\"x\">Tom's</a>"
        expected = "&lt;a href=&quot;x&quot;&gt;Tom&apos;s&lt;/a&gt;"
        assert HtmlEscapeFilter().apply(value, FIELD) == expected

    def test_html401_apostrophe(self) -> None:
        assert HtmlEscapeFilter(flavor="html401").apply("it's", FIELD) == "it&#039;s"

    def test_double_encodes_by_default(self) -> None:
        assert HtmlEscapeFilter().apply("&lt;a", FIELD) == "&amp;lt;a"

    def test_keeps_existing_entities(self) -> None:
        flt = HtmlEscapeFilter(double_encode=False)
        assert flt.apply("&lt; & &#39; &#x27;", FIELD) == "&lt; &amp; &#39; &#x27;"

    def test_idempotent_without_double_encoding(self) -> None:
        flt = HtmlEscapeFilter(double_encode=False)
        once = flt.apply("<b>Fish & Chips</b>", FIELD)
        assert flt.apply(once, FIELD) == once

    def test_lone_surrogate_replaced(self) -> None:
        assert HtmlEscapeFilter().apply("a\udcffb", FIELD) == "a\ufffdb"

    def test_invalid_flavor(self) -> None:
        with pytest.raises(ValueError, match="flavor"):
            HtmlEscapeFilter(flavor="html3")

    def test_unknown_encoding(self) -> None:
        with pytest.raises(ValueError, match="encoding"):
            HtmlEscapeFilter(encoding="no-such-codec")


# ---------------------------------------------------------------------------
# Text hygiene
# ---------------------------------------------------------------------------


class TestSanitizeTextFilter:
    def test_invalid_bytes_and_controls(self) -> None:
        value = b"Bad\xc3\x28Stuff\x01\tDone "
        assert SanitizeTextFilter().apply(value, FIELD) == "Bad(Stuff\tDone"

    def test_replacement_character_removed(self) -> None:
        assert SanitizeTextFilter().apply("Valid©Invalid\ufffd", FIELD) == "Valid©Invalid"

    def test_replacement_character_kept(self) -> None:
        flt = SanitizeTextFilter(remove_replacement_char=False)
        assert flt.apply("x\ufffd", FIELD) == "x\ufffd"

    def test_line_breaks_kept_inside(self) -> None:
        assert SanitizeTextFilter().apply("Line1\nLine2\r\n", FIELD) == "Line1\nLine2"

    def test_control_characters_removed(self) -> None:
        assert SanitizeTextFilter().apply("\x00\x07Hi\x7f", FIELD) == "Hi"

    def test_lone_surrogate_dropped(self) -> None:
        assert SanitizeTextFilter().apply("a\udc80b", FIELD) == "ab"


class TestRemoveEmojiFilter:
    def test_removes_emoji_and_tidies_spacing(self) -> None:
        assert RemoveEmojiFilter().apply("Hello 👋 World 🌍!", FIELD) == "Hello World!"

    def test_removes_variation_selector(self) -> None:
        assert RemoveEmojiFilter().apply("I ❤\ufe0f Python", FIELD) == "I Python"

    def test_removes_flags(self) -> None:
        assert RemoveEmojiFilter().apply("🇫🇷 France", FIELD) == "France"

    def test_removes_joined_sequences(self) -> None:
        assert RemoveEmojiFilter().apply("👨\u200d👩\u200d👧", FIELD) == ""

    def test_combining_marks_preserved(self) -> None:
        assert RemoveEmojiFilter().apply("Cafe\u0301", FIELD) == "Cafe\u0301"


class TestSanitizePhoneFilter:
    def test_digits_only(self) -> None:
        assert SanitizePhoneFilter().apply("+1 (555) 010-9999", FIELD) == "15550109999"

    def test_non_ascii_digits_removed(self) -> None:
        assert SanitizePhoneFilter().apply("12٣", FIELD) == "12"


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


class TestRemoveUrlFilter:
    def test_placeholder(self) -> None:
        flt = RemoveUrlFilter(replace_with_placeholder=True)
        value = "Visit http://example.com and www.site.org"
        assert flt.apply(value, FIELD) == "Visit [link removed] and [link removed]"

    def test_removal_collapses_spaces(self) -> None:
        assert RemoveUrlFilter().apply("See http://a.com and https://b.org", FIELD) == "See and"

    def test_bare_domain(self) -> None:
        assert RemoveUrlFilter().apply("Go to example.com now", FIELD) == "Go to now"

    def test_url_with_path(self) -> None:
        assert RemoveUrlFilter().apply("Check https://secure.site/login", FIELD) == "Check"

    def test_obfuscated_brackets(self) -> None:
        assert RemoveUrlFilter().apply("Go to example[.]com now", FIELD) == "Go to now"

    def test_obfuscated_dot_word(self) -> None:
        assert RemoveUrlFilter().apply("Go to example (dot) com now", FIELD) == "Go to now"

    def test_hxxp(self) -> None:
        assert RemoveUrlFilter().apply("Open hxxps://evil.com/x please", FIELD) == "Open please"

    def test_fullwidth_dot(self) -> None:
        assert RemoveUrlFilter().apply("visit example．com", FIELD) == "visit"

    def test_email_preserved(self) -> None:
        value = "Email me at john@example.com"
        assert RemoveUrlFilter().apply(value, FIELD) == value

    def test_non_aggressive_leaves_obfuscation(self) -> None:
        value = "Go to example[.]com"
        assert RemoveUrlFilter(aggressive=False).apply(value, FIELD) == value


# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------


class TestSanitizeEmailFilter:
    def test_header_injection_defused(self) -> None:
        result = SanitizeEmailFilter().apply("user@example.com\r\nCC:evil@hack.com", FIELD)
        assert "\r" not in result
        assert "\n" not in result
        assert "cc:" not in result.lower()
        assert result == "user@example.comevilhack.com"

    def test_encoded_line_breaks_defused(self) -> None:
        result = SanitizeEmailFilter().apply("user%0Abcc:victim@x.com", FIELD)
        assert "\n" not in result
        assert "bcc" not in result.lower()

    def test_leading_keyword_removed(self) -> None:
        assert SanitizeEmailFilter().apply("to: bob@example.com", FIELD) == "bob@example.com"

    def test_angle_brackets_and_domain_case(self) -> None:
        assert SanitizeEmailFilter().apply("<John@Example.COM>", FIELD) == "John@example.com"

    def test_domain_case_kept(self) -> None:
        flt = SanitizeEmailFilter(normalize_case=False)
        assert flt.apply("John@Example.COM", FIELD) == "John@Example.COM"

    def test_idn_domain_strict_local(self) -> None:
        flt = SanitizeEmailFilter()
        assert flt.apply("MýName+Tag@dömäin.fr", FIELD) == "MName+Tag@xn--dmin-moa0i.fr"

    def test_relaxed_local_keeps_letters(self) -> None:
        assert SanitizeEmailFilter().apply("tést@exámple.com", FIELD) == "tst@xn--exmple-qta.com"
        relaxed = SanitizeEmailFilter(strict=False)
        assert relaxed.apply("tést@exámple.com", FIELD) == "tést@xn--exmple-qta.com"

    def test_idn_disabled(self) -> None:
        flt = SanitizeEmailFilter(normalize_idn=False)
        assert flt.apply("a@exámple.com", FIELD) == "a@exámple.com"

    def test_multiple_at_signs_collapsed(self) -> None:
        assert SanitizeEmailFilter().apply("a@@b.com", FIELD) == "a@b.com"

    def test_dots_collapsed_and_trimmed(self) -> None:
        assert SanitizeEmailFilter().apply(".john..doe.@example.com", FIELD) == "john.doe@example.com"

    def test_without_at_sign(self) -> None:
        assert SanitizeEmailFilter().apply("just text", FIELD) == "justtext"

    def test_blank(self) -> None:
        assert SanitizeEmailFilter().apply("   ", FIELD) == ""


# ---------------------------------------------------------------------------
# Custom
# ---------------------------------------------------------------------------


class TestCallbackFilter:
    def test_value_only(self) -> None:
        assert CallbackFilter(str.upper).apply("abc", FIELD) == "ABC"

    def test_value_and_field(self) -> None:
        flt = CallbackFilter(lambda value, field: f"{field.name}:{value}")
        assert flt.apply("x", FIELD) == "value:x"

    def test_context_through_process(self) -> None:
        flt = CallbackFilter(lambda value, field, context: context.get_input("other"))
        assert flt.process("x", FIELD, FormContext({"other": "o"})) == "o"

    def test_callback_sees_non_strings(self) -> None:
        assert CallbackFilter(lambda value: value * 2).apply(21, FIELD) == 42
