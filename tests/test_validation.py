"""Tests for formmail.validation — ValidationResult and validate()."""

import json

import pytest

from formmail.validation import (
    EmailRule,
    FormContext,
    MinLengthRule,
    RequiredRule,
    TrimFilter,
    ValidationError,
    ValidationResult,
    validate,
)


def _failed_result() -> ValidationResult:
    return ValidationResult(
        valid=False,
        errors={
            "email": [
                ValidationError("required", 'The field "{field}" is required.', {"field": "email"}, "email"),
                ValidationError("invalid_email", "Invalid email format.", {"value": ""}, "email"),
            ],
            "name": [ValidationError("too_short", "Min {min}", {"min": 2}, "name")],
        },
        data={"email": "", "name": "J"},
    )


class TestValidationResult:
    def test_valid_is_truthy(self) -> None:
        result = ValidationResult(valid=True, errors={}, data={"a": 1})
        assert result
        assert result.is_valid
        assert not result.failed

    def test_invalid_is_falsy(self) -> None:
        result = _failed_result()
        assert not result
        assert result.failed

    def test_from_context(self) -> None:
        ctx = FormContext({"a": "raw"})
        ctx.set_value("a", "clean")
        ctx.add_error("a", ValidationError("x"))
        result = ValidationResult.from_context(ctx)
        assert not result.valid
        assert result.data == {"a": "clean"}
        assert result.get_errors("a")[0].code == "x"

    def test_from_context_without_errors_is_valid(self) -> None:
        assert ValidationResult.from_context(FormContext()).valid

    def test_maps_are_copied_and_read_only(self) -> None:
        data = {"a": 1}
        errors = {"a": [ValidationError("x")]}
        result = ValidationResult(valid=False, errors=errors, data=data)
        data["a"] = 2
        errors["a"].append(ValidationError("y"))
        assert result.data["a"] == 1
        assert len(result.get_errors("a")) == 1
        with pytest.raises(TypeError):
            result.data["a"] = 3  # type: ignore[index]

    def test_hashable(self) -> None:
        assert hash(_failed_result()) == hash(_failed_result())
        assert _failed_result() in {_failed_result()}

    def test_accessors(self) -> None:
        result = _failed_result()
        assert result.has_error("email")
        assert not result.has_error("missing")
        assert result.first_error("email").code == "required"  # type: ignore[union-attr]
        assert result.first_error("missing") is None
        assert result.get_errors("missing") == []
        assert set(result.all_errors()) == {"email", "name"}
        assert result.all_data() == {"email": "", "name": "J"}

    def test_messages(self) -> None:
        result = _failed_result()
        assert result.messages("email") == ['The field "email" is required.', "Invalid email format."]
        assert result.messages_all()["name"] == ["Min 2"]

    def test_interpolate(self) -> None:
        err = ValidationError("x", "Hello {who}", {"who": "you"})
        assert ValidationResult.interpolate(err) == "Hello you"

    def test_to_dict(self) -> None:
        payload = _failed_result().to_dict()
        assert payload["valid"] is False
        assert payload["data"] == {"email": "", "name": "J"}
        assert payload["errors"]["name"] == [
            {"code": "too_short", "message": "Min {min}", "context": {"min": 2}, "field": "name"}
        ]

    def test_to_dict_interpolated(self) -> None:
        payload = _failed_result().to_dict(interpolate=True)
        assert payload["errors"]["name"] == ["Min 2"]

    def test_to_json_keeps_unicode(self) -> None:
        result = ValidationResult(valid=True, errors={}, data={"name": "Élodie"})
        text = result.to_json()
        assert "Élodie" in text
        assert json.loads(text) == {"valid": True, "errors": {}, "data": {"name": "Élodie"}}


class TestValidate:
    def test_valid(self) -> None:
        result = validate(
            {"email": " moi@jturbide.com ", "message": "Hello there!"},
            {
                "email": [TrimFilter(), RequiredRule(), EmailRule()],
                "message": [RequiredRule(), MinLengthRule(10)],
            },
        )
        assert result.valid
        assert result.data["email"] == "moi@jturbide.com"

    def test_invalid(self) -> None:
        result = validate({"message": "Hi"}, {"message": [RequiredRule(), MinLengthRule(10)]})
        assert not result
        assert result.first_error("message").code == "too_short"  # type: ignore[union-attr]
