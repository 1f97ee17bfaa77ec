# backend/utils/values.py
"""Shape-tolerant readers for submitted configuration values.

Configurations arrive as arbitrary JSON, so every helper accepts any input
and reports "nothing usable" instead of raising.
"""
import math
from typing import Any, Mapping, Optional

from models.parameter import ENUMERABLE_TYPES, ParameterType, SUPPORTED_TYPES
from utils.catalog import find_value_in
from utils.i18n import message, pick


class _NotSupported:
    """Result of formatting a value of a kind the configurator cannot handle yet."""

    def __repr__(self) -> str:
        return "NOT_SUPPORTED"

    def __bool__(self) -> bool:
        return False


NOT_SUPPORTED = _NotSupported()

TRUE_STRINGS = {"true", "1", "yes"}
FALSE_STRINGS = {"false", "0", "no"}


def lookup_value(configuration: Mapping, parameter_id: int) -> Any:
    # JSON objects carry string keys, in-process callers may use ints
    if parameter_id in configuration:
        return configuration[parameter_id]
    return configuration.get(str(parameter_id))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return all(is_blank(item) for item in value)
    return False


def parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    return None


def format_number(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    return f"{number:.10f}".rstrip("0").rstrip(".")


def as_text(value: Any) -> Optional[str]:
    """Scalar value as the text a SELECT entry is matched against."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        number = parse_number(value)
        return format_number(number) if number is not None else None
    return None


def format_value(parameter, value: Any, locale: Optional[str]):
    """Human readable, name-less rendering of one configured value."""
    kind = parameter.kind
    if kind not in SUPPORTED_TYPES:
        return NOT_SUPPORTED

    if kind == ParameterType.NUMBER:
        number = parse_number(value)
        text = format_number(number) if number is not None else str(value).strip()
        return f"{text}{parameter.unit or ''}"

    if kind in ENUMERABLE_TYPES:
        text = as_text(value)
        if text is None:
            return str(value)
        entry = find_value_in(parameter.values, text)
        if entry is None:
            return text
        rendered = pick(locale, entry.value, entry.value_localized)
        if entry.ral_code:
            rendered = f"{rendered} ({entry.ral_code})"
        return rendered

    if kind == ParameterType.TEXT:
        if isinstance(value, (list, tuple)):
            return ", ".join(item.strip() for item in value if isinstance(item, str) and item.strip())
        return str(value).strip()

    if kind == ParameterType.BOOLEAN:
        flag = parse_bool(value)
        if flag is None:
            return str(value)
        return message(locale, "yes" if flag else "no")

    return str(value)
