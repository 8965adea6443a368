"""Tests for formmail.validation.transformers."""

import pytest

from formmail.validation import (
    CallbackRule,
    CallbackTransformer,
    FieldDefinition,
    FormDefinition,
    HtmlEntitiesTransformer,
    LowercaseTransformer,
)
from formmail.validation.context import FormContext

FIELD = FieldDefinition("value")


def _run(transformer: object, value: object) -> tuple[object, FormContext]:
    ctx = FormContext()
    result = transformer.process(value, FIELD, ctx)  # type: ignore[attr-defined]
    return result, ctx


class TestLowercaseTransformer:
    def test_unicode(self) -> None:
        result, _ = _run(LowercaseTransformer(), "ÉLÈVE")
        assert result == "élève"

    def test_ascii_only(self) -> None:
        result, _ = _run(LowercaseTransformer(unicode_aware=False), "ÉLÈVE")
        assert result == "ÉlÈve"

    def test_writes_context(self) -> None:
        result, ctx = _run(LowercaseTransformer(), "ABC")
        assert result == "abc"
        assert ctx.get_value("value") == "abc"

    def test_non_string_pass_through(self) -> None:
        result, ctx = _run(LowercaseTransformer(), 42)
        assert result == 42
        assert ctx.get_value("value") == 42

    def test_idempotent(self) -> None:
        once, _ = _run(LowercaseTransformer(), "MiXeD ÇA")
        twice, _ = _run(LowercaseTransformer(), once)
        assert once == twice

    def test_never_records_errors(self) -> None:
        _, ctx = _run(LowercaseTransformer(), "X")
        assert not ctx.has_any_errors()


class TestHtmlEntitiesTransformer:
    def test_named_entities(self) -> None:
        result, _ = _run(HtmlEntitiesTransformer(), "Café")
        assert result == "Caf&eacute;"

    def test_special_characters(self) -> None:
        result, _ = _run(HtmlEntitiesTransformer(), "<b>Tom's</b>")
        assert result == "&lt;b&gt;Tom&#039;s&lt;/b&gt;"

    def test_html5_apostrophe(self) -> None:
        result, _ = _run(HtmlEntitiesTransformer(flavor="html5"), "it's")
        assert result == "it&apos;s"

    def test_existing_entities_kept(self) -> None:
        result, _ = _run(HtmlEntitiesTransformer(), "Fish &amp; Chips & Co")
        assert result == "Fish &amp; Chips &amp; Co"

    def test_double_encode(self) -> None:
        result, _ = _run(HtmlEntitiesTransformer(double_encode=True), "&amp;")
        assert result == "&amp;amp;"

    def test_characters_without_names_kept(self) -> None:
        result, _ = _run(HtmlEntitiesTransformer(), "ł €")
        assert result == "ł &euro;"

    def test_idempotent(self) -> None:
        once, _ = _run(HtmlEntitiesTransformer(), "Crème brûlée & <tea>")
        twice, _ = _run(HtmlEntitiesTransformer(), once)
        assert once == twice

    def test_empty_string(self) -> None:
        result, ctx = _run(HtmlEntitiesTransformer(), "")
        assert result == ""
        assert ctx.get_value("value") == ""

    def test_invalid_flavor(self) -> None:
        with pytest.raises(ValueError, match="flavor"):
            HtmlEntitiesTransformer(flavor="sgml")


class TestCallbackTransformer:
    def test_value_only(self) -> None:
        result, ctx = _run(CallbackTransformer(lambda v: v.replace(" ", "-")), "a b")
        assert result == "a-b"
        assert ctx.get_value("value") == "a-b"

    def test_full_signature(self) -> None:
        def slug(value, field, context):
            return f"{field.name}-{context.get_input('id')}"

        ctx = FormContext({"id": 7})
        assert CallbackTransformer(slug).process("x", FIELD, ctx) == "value-7"

    def test_result_visible_to_later_fields(self) -> None:
        def same_as_username(value, field, context):
            return [] if value == context.get_value("username") else ["mismatch"]

        form = FormDefinition(
            [
                FieldDefinition("username", processors=[LowercaseTransformer()]),
                FieldDefinition("confirm", processors=[CallbackRule(same_as_username)]),
            ]
        )
        assert form.process({"username": "JULIEN", "confirm": "julien"}).valid
