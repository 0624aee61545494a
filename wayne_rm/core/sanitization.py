"""
Input sanitization table.

Each sanitizer is a fixed sequence of regular-expression rewrites; the
optional SanitizationConfig applies trimming, case folding, character
filtering and truncation afterwards.
"""

import re
from typing import Any, Callable, Dict, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict

SanitizationType = Literal[
    "html", "sql", "xss", "filename", "email", "phone", "alphanumeric", "numeric", "text"
]

_I = re.IGNORECASE
_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")
_DANGEROUS_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_EVENT_HANDLER = re.compile(r"on\w+\s*=", _I)


class SanitizationConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    max_length: Optional[int] = None
    # Body of a character class, e.g. "a-z0-9"; everything else is removed
    allowed_chars: Optional[str] = None
    remove_chars: Optional[Union[str, re.Pattern]] = None
    trim: bool = True
    to_lower: bool = False
    to_upper: bool = False


def _html(value: str) -> str:
    value = re.sub(r"<script[^>]*>.*?</script>", "", value, flags=_I)
    value = re.sub(r"<[^>]*>", "", value)
    value = re.sub(r"javascript:", "", value, flags=_I)
    value = _EVENT_HANDLER.sub("", value)
    return (
        value.replace("&lt;", "<")
        .replace("&gt;", ">")
        .replace("&amp;", "&")
        .replace("&quot;", '"')
        .replace("&#x27;", "'")
    )


def _sql(value: str) -> str:
    value = re.sub(r"['\"\\]", "", value)
    value = value.replace(";", "").replace("--", "").replace("/*", "").replace("*/", "")
    return re.sub(r"\b(DROP|DELETE|INSERT|UPDATE|SELECT|UNION|ALTER|CREATE)\b", "", value, flags=_I)


def _xss(value: str) -> str:
    value = (
        value.replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
        .replace("/", "&#x2F;")
    )
    value = re.sub(r"javascript:", "", value, flags=_I)
    value = re.sub(r"vbscript:", "", value, flags=_I)
    return _EVENT_HANDLER.sub("", value)


def _filename(value: str) -> str:
    value = re.sub(r"[<>:\"/\\|?*]", "", value)
    value = re.sub(r"\.\.+", ".", value)
    # Only the first leading or trailing dot
    value = re.sub(r"^\.|\.$", "", value, count=1)
    return value[:255]


def _email(value: str) -> str:
    value = value.lower().strip()
    value = re.sub(r"[^a-z0-9@._-]", "", value)
    value = re.sub(r"\.{2,}", ".", value)
    value = re.sub(r"_{2,}", "_", value)
    return re.sub(r"-{2,}", "-", value)


def _phone(value: str) -> str:
    value = re.sub(r"[^0-9+()\-\s]", "", value)
    return re.sub(r"\s+", " ", value).strip()


def _alphanumeric(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "", value)


def _numeric(value: str) -> str:
    return re.sub(r"[^0-9.-]", "", value)


def _text(value: str) -> str:
    value = _CONTROL_CHARS.sub("", value)
    return re.sub(r"\s+", " ", value).strip()


SANITIZERS: Dict[str, Callable[[str], str]] = {
    "html": _html,
    "sql": _sql,
    "xss": _xss,
    "filename": _filename,
    "email": _email,
    "phone": _phone,
    "alphanumeric": _alphanumeric,
    "numeric": _numeric,
    "text": _text,
}


def sanitize(value: Any, type: SanitizationType, config: Optional[SanitizationConfig] = None) -> str:
    if not value or not isinstance(value, str):
        return ""

    sanitized = SANITIZERS[type](value)

    if config is None:
        return sanitized

    if config.trim:
        sanitized = sanitized.strip()

    if config.to_lower:
        sanitized = sanitized.lower()
    elif config.to_upper:
        sanitized = sanitized.upper()

    if config.remove_chars is not None:
        sanitized = re.sub(config.remove_chars, "", sanitized)

    if config.allowed_chars:
        sanitized = re.sub(f"[^{config.allowed_chars}]", "", sanitized)

    if config.max_length and len(sanitized) > config.max_length:
        sanitized = sanitized[:config.max_length]

    return sanitized


def sanitize_object(obj: Dict[str, Any], schema: Dict[str, tuple]) -> Dict[str, Any]:
    """schema maps field -> (type, config or None); non-string values pass through."""
    sanitized = dict(obj)
    for field, (type_, config) in schema.items():
        if isinstance(sanitized.get(field), str):
            sanitized[field] = sanitize(sanitized[field], type_, config)
    return sanitized


def is_safe(original: str, sanitized: str, threshold: float = 0.8) -> bool:
    """True when sanitization kept at least `threshold` of the original length."""
    if not original or not sanitized:
        return True
    return len(sanitized) / len(original) >= threshold


def _url_preset(value: str) -> str:
    sanitized = sanitize(value, "text", SanitizationConfig(trim=True, max_length=2048))
    parsed = urlparse(sanitized)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        return ""
    return sanitized


PRESETS: Dict[str, Callable[[str], str]] = {
    "search": lambda v: sanitize(v, "xss", SanitizationConfig(max_length=100, trim=True)),
    # Free-text filters matched against stored values
    "query": lambda v: sanitize(v, "text", SanitizationConfig(max_length=100, trim=True)),
    "username": lambda v: sanitize(v, "alphanumeric", SanitizationConfig(max_length=50, to_lower=True)),
    "password": lambda v: sanitize(v, "text", SanitizationConfig(max_length=128)),
    "url": _url_preset,
    # Stored free text; encoding is left to whatever renders it
    "note": lambda v: sanitize(v, "text", SanitizationConfig(max_length=1000, trim=True)),
    "comment": lambda v: sanitize(v, "xss", SanitizationConfig(max_length=1000, trim=True)),
    "code": lambda v: sanitize(v, "text", SanitizationConfig(max_length=10000, remove_chars=_DANGEROUS_CONTROL_CHARS)),
}


def preset(name: str, value: Any) -> str:
    return PRESETS[name](value)


# Security checks

_XSS_PATTERNS = [
    re.compile(r"<script[^>]*>.*?</script>", _I),
    re.compile(r"javascript:", _I),
    _EVENT_HANDLER,
    re.compile(r"<iframe[^>]*>.*?</iframe>", _I),
    re.compile(r"<object[^>]*>.*?</object>", _I),
    re.compile(r"<embed[^>]*>.*?</embed>", _I),
]

_SQL_PATTERNS = [
    re.compile(r"('|(--)|(;)|(\|)|(\*))"),
    re.compile(r"\b(ALTER|CREATE|DELETE|DROP|EXEC(UTE)?|INSERT( +INTO)?|MERGE|SELECT|UPDATE|UNION( +ALL)?)\b", _I),
]


def detect_xss(value: str) -> bool:
    return any(p.search(value) for p in _XSS_PATTERNS)


def detect_sql_injection(value: str) -> bool:
    return any(p.search(value) for p in _SQL_PATTERNS)


def detect_suspicious_chars(value: str) -> bool:
    return bool(_DANGEROUS_CONTROL_CHARS.search(value))


def _to_base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return sign + "".join(reversed(out))


def simple_hash(value: str) -> str:
    """31-multiplier rolling hash over UTF-16 code units, wrapped to signed 32 bits, in base 36."""
    h = 0
    units = value.encode("utf-16-le")
    for i in range(0, len(units), 2):
        code = units[i] | (units[i + 1] << 8)
        h = ((h << 5) - h + code) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(h)
