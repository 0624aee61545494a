"""
Form validation rules and validators.

Messages are user-facing and kept in Portuguese, the application's
default language.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    "required": "Este campo é obrigatório",
    "min_length": "Deve ter pelo menos {} caracteres",
    "max_length": "Deve ter no máximo {} caracteres",
    "email": "Digite um email válido",
    "pattern": "Formato inválido",
}

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\(?\d{2}\)?[\s-]?\d{4,5}[\s-]?\d{4}$")


class ValidationRule(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[re.Pattern] = None
    email: bool = False
    custom: Optional[Callable[[Any], Optional[str]]] = None


ValidationSchema = Dict[str, ValidationRule]


class FormError(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[FormError] = []


def validate_email(value: str) -> Optional[str]:
    return None if EMAIL_RE.match(value) else "Digite um email válido"


def validate_password(value: str) -> Optional[str]:
    if len(value) < 6:
        return "A senha deve ter pelo menos 6 caracteres"
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        return "A senha deve conter pelo menos uma letra maiúscula, uma minúscula e um número"
    return None


def validate_phone(value: str) -> Optional[str]:
    return None if PHONE_RE.match(value) else "Digite um telefone válido"


def validate_cpf(value: str) -> Optional[str]:
    cpf = re.sub(r"\D", "", value)
    if len(cpf) != 11:
        return "CPF deve ter 11 dígitos"
    if len(set(cpf)) == 1:
        return "CPF inválido"
    return None


def validate_url(value: str) -> Optional[str]:
    try:
        parsed = urlparse(value)
    except ValueError:
        return "Digite uma URL válida"
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        return "Digite uma URL válida"
    return None


def validate_positive_number(value: Union[int, float]) -> Optional[str]:
    return None if value > 0 else "Deve ser um número positivo"


def validate_date_range(start: Union[date, datetime], end: Union[date, datetime]) -> Optional[str]:
    return None if start <= end else "Data inicial deve ser anterior à data final"


VALIDATORS: Dict[str, Callable[..., Optional[str]]] = {
    "email": validate_email,
    "password": validate_password,
    "phone": validate_phone,
    "cpf": validate_cpf,
    "url": validate_url,
    "positive_number": validate_positive_number,
    "date_range": validate_date_range,
}


def _is_blank(value: Any) -> bool:
    return not value or (isinstance(value, str) and not value.strip())


def validate_value(rule: Optional[ValidationRule], value: Any) -> Optional[str]:
    """Apply one rule to one value; returns the first error message or None."""
    if rule is None:
        return None

    if rule.required and _is_blank(value):
        return DEFAULT_MESSAGES["required"]

    # Empty optional fields skip the remaining rules
    if _is_blank(value):
        return None

    if rule.min_length and isinstance(value, str) and len(value) < rule.min_length:
        return DEFAULT_MESSAGES["min_length"].format(rule.min_length)

    if rule.max_length and isinstance(value, str) and len(value) > rule.max_length:
        return DEFAULT_MESSAGES["max_length"].format(rule.max_length)

    if rule.email and isinstance(value, str):
        return validate_email(value)

    if rule.pattern is not None and isinstance(value, str) and not rule.pattern.search(value):
        return DEFAULT_MESSAGES["pattern"]

    if rule.custom is not None:
        return rule.custom(value)

    return None


def validate_data(values: Dict[str, Any], schema: ValidationSchema) -> ValidationResult:
    """Validate every field named in the schema against a plain dict of values."""
    errors = []
    for field_name, rule in schema.items():
        message = validate_value(rule, values.get(field_name))
        if message:
            errors.append(FormError(field=field_name, message=message))
    return ValidationResult(is_valid=not errors, errors=errors)


class FormValidator:
    """Stateful form: values, per-field errors and touched flags."""

    def __init__(self, initial_values: Dict[str, Any], schema: ValidationSchema):
        self.initial_values = dict(initial_values)
        self.schema = schema
        self.values: Dict[str, Any] = dict(initial_values)
        self.errors: Dict[str, str] = {}
        self.touched: Dict[str, bool] = {}
        self.is_submitting = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def validate_field(self, field_name: str, value: Any) -> Optional[str]:
        return validate_value(self.schema.get(field_name), value)

    def _store_error(self, field_name: str, error: Optional[str]):
        if error:
            self.errors[field_name] = error
        else:
            self.errors.pop(field_name, None)

    def set_value(self, field_name: str, value: Any):
        self.values[field_name] = value
        # Live validation only once the field has been touched
        if self.touched.get(field_name):
            self._store_error(field_name, self.validate_field(field_name, value))

    def set_touched(self, field_name: str, is_touched: bool = True):
        self.touched[field_name] = is_touched
        if is_touched:
            self._store_error(field_name, self.validate_field(field_name, self.values.get(field_name)))

    def validate_all(self) -> ValidationResult:
        result = validate_data(self.values, self.schema)
        self.errors = {e.field: e.message for e in result.errors}
        return result

    def submit(self, on_submit: Callable[[Dict[str, Any]], Any]) -> bool:
        """Validate, then call on_submit with the values. False on invalid input or callback failure."""
        self.is_submitting = True
        try:
            if not self.validate_all().is_valid:
                return False
            try:
                on_submit(dict(self.values))
                return True
            except Exception as e:
                logger.error(f"Form submit failed: {e}")
                return False
        finally:
            self.is_submitting = False

    def reset(self):
        self.values = dict(self.initial_values)
        self.errors = {}
        self.touched = {}
        self.is_submitting = False


class FieldValidator:
    """Single-field variant of FormValidator."""

    def __init__(self, initial_value: Any, rule: ValidationRule):
        self.rule = rule
        self.value = initial_value
        self.error: Optional[str] = None
        self.touched = False

    @property
    def is_valid(self) -> bool:
        return not self.error

    def validate(self) -> Optional[str]:
        return validate_value(self.rule, self.value)

    def set_value(self, value: Any):
        self.value = value
        if self.touched:
            self.error = self.validate()

    def blur(self):
        self.touched = True
        self.error = self.validate()
