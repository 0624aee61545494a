import re
from datetime import date

import pytest

from wayne_rm.core.validation import (
    ValidationRule, FormValidator, FieldValidator, validate_value, validate_data, VALIDATORS,
)


def test_required_comes_first():
    rule = ValidationRule(required=True, min_length=3)
    assert validate_value(rule, "") == "Este campo é obrigatório"
    assert validate_value(rule, "   ") == "Este campo é obrigatório"
    assert validate_value(rule, None) == "Este campo é obrigatório"


def test_empty_optional_field_skips_rules():
    rule = ValidationRule(min_length=3, email=True)
    assert validate_value(rule, "") is None
    assert validate_value(None, "anything") is None


def test_rules_apply_in_order():
    rule = ValidationRule(min_length=3, max_length=10, email=True)
    assert validate_value(rule, "ab") == "Deve ter pelo menos 3 caracteres"
    assert validate_value(rule, "a" * 11) == "Deve ter no máximo 10 caracteres"
    assert validate_value(rule, "b@wayne") == "Digite um email válido"
    assert validate_value(rule, "b@wayne.br") is None


def test_pattern_and_custom():
    assert validate_value(ValidationRule(pattern=re.compile(r"^\d+$")), "12a") == "Formato inválido"
    assert validate_value(ValidationRule(pattern=re.compile(r"^\d+$")), "123") is None

    custom = ValidationRule(custom=lambda v: "Nome reservado" if v == "admin" else None)
    assert validate_value(custom, "admin") == "Nome reservado"
    assert validate_value(custom, "alfred") is None


@pytest.mark.parametrize("name, args, expected", [
    ("email", ("bruce@wayne.com",), None),
    ("email", ("bruce@", ), "Digite um email válido"),
    ("password", ("Abc12",), "A senha deve ter pelo menos 6 caracteres"),
    ("password", ("abcdef",), "A senha deve conter pelo menos uma letra maiúscula, uma minúscula e um número"),
    ("password", ("Batman1",), None),
    ("phone", ("(11) 98765-4321",), None),
    ("phone", ("11 4321-8765",), None),
    ("phone", ("123",), "Digite um telefone válido"),
    ("cpf", ("123.456.789-09",), None),
    ("cpf", ("111.111.111-11",), "CPF inválido"),
    ("cpf", ("123",), "CPF deve ter 11 dígitos"),
    ("url", ("https://wayne.app.br",), None),
    ("url", ("wayne",), "Digite uma URL válida"),
    ("positive_number", (0,), "Deve ser um número positivo"),
    ("positive_number", (0.5,), None),
    ("date_range", (date(2024, 3, 1), date(2024, 3, 1)), None),
    ("date_range", (date(2024, 3, 2), date(2024, 3, 1)), "Data inicial deve ser anterior à data final"),
])
def test_validators(name, args, expected):
    assert VALIDATORS[name](*args) == expected


def test_validate_data_collects_every_field():
    schema = {
        "name": ValidationRule(required=True),
        "email": ValidationRule(email=True),
    }
    result = validate_data({"name": "", "email": "nope"}, schema)
    assert not result.is_valid
    assert [(e.field, e.message) for e in result.errors] == [
        ("name", "Este campo é obrigatório"),
        ("email", "Digite um email válido"),
    ]


def _form():
    return FormValidator(
        {"name": "", "email": ""},
        {"name": ValidationRule(required=True, min_length=3), "email": ValidationRule(email=True)},
    )


def test_form_validates_touched_fields_only():
    form = _form()
    form.set_value("name", "ab")
    assert form.errors == {}

    form.set_touched("name")
    assert form.errors == {"name": "Deve ter pelo menos 3 caracteres"}
    assert form.has_errors

    form.set_value("name", "Bruce")
    assert form.errors == {}
    assert form.is_valid


def test_form_submit():
    form = _form()
    submitted = []

    assert not form.submit(submitted.append)
    assert submitted == []
    assert form.errors == {"name": "Este campo é obrigatório"}

    form.set_value("name", "Lucius")
    assert form.submit(submitted.append)
    assert submitted == [{"name": "Lucius", "email": ""}]
    assert not form.is_submitting


def test_form_submit_callback_failure():
    form = _form()
    form.set_value("name", "Lucius")

    def boom(values):
        raise RuntimeError("offline")

    assert not form.submit(boom)
    assert not form.is_submitting


def test_form_reset():
    form = _form()
    form.set_value("name", "x")
    form.set_touched("name")
    form.reset()
    assert form.values == {"name": "", "email": ""}
    assert form.errors == {}
    assert form.touched == {}


def test_field_validator():
    field = FieldValidator("", ValidationRule(required=True))
    field.set_value("")
    assert field.error is None

    field.blur()
    assert field.error == "Este campo é obrigatório"

    field.set_value("Gotham")
    assert field.is_valid
