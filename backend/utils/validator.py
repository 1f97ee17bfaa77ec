# backend/utils/validator.py
"""Validation of a submitted configuration against effective parameters.

Every parameter is checked independently and all problems are collected.
Nothing is raised for bad input: a value of the wrong shape is simply an
error for that parameter.
"""
import logging
from typing import Any, Iterable, Mapping, Optional

from models.parameter import ENUMERABLE_TYPES, ParameterType
from schemas.configurator import EffectiveParameter, ValidationResult
from utils.catalog import find_value_in
from utils.i18n import message
from utils.values import as_text, format_number, is_blank, lookup_value, parse_bool, parse_number

logger = logging.getLogger(__name__)

NON_FIELD_KEY = "_configuration"


def has_any_value(configuration: Mapping) -> bool:
    # Keys starting with "_" carry metadata, not parameter values
    return any(
        not is_blank(value)
        for key, value in configuration.items()
        if not str(key).startswith("_")
    )


def _check_number(parameter: EffectiveParameter, value: Any, locale, label: str) -> Optional[str]:
    number = parse_number(value)
    if number is None:
        return message(locale, "not_a_number", name=label)
    # step is a UI hint only and is not enforced here
    unit = parameter.unit or ""
    if parameter.min_value is not None and number < parameter.min_value:
        return message(locale, "below_min", name=label, limit=format_number(parameter.min_value), unit=unit)
    if parameter.max_value is not None and number > parameter.max_value:
        return message(locale, "above_max", name=label, limit=format_number(parameter.max_value), unit=unit)
    return None


def _check_choice(parameter: EffectiveParameter, value: Any, locale, label: str) -> Optional[str]:
    text = as_text(value)
    if text is None or find_value_in(parameter.values, text) is None:
        return message(locale, "unknown_value", name=label, value=value)
    return None


def _check_text(value: Any, locale, label: str) -> Optional[str]:
    if isinstance(value, str):
        return None
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) or item is None for item in value):
        return None
    return message(locale, "not_text", name=label)


def check_parameter(parameter: EffectiveParameter, value: Any, locale: Optional[str] = None) -> Optional[str]:
    """Reason why ``value`` is not acceptable for ``parameter``, or None."""
    label = parameter.label(locale)

    if parameter.kind == ParameterType.BOOLEAN:
        # Only an explicit true/false counts, False is a perfectly good answer
        if is_blank(value):
            return message(locale, "required", name=label) if parameter.required else None
        if parse_bool(value) is None:
            return message(locale, "not_boolean", name=label)
        return None

    if is_blank(value):
        return message(locale, "required", name=label) if parameter.required else None

    if not parameter.supported:
        return message(locale, "not_supported", name=label, kind=parameter.kind.value)
    if parameter.kind == ParameterType.NUMBER:
        return _check_number(parameter, value, locale, label)
    if parameter.kind in ENUMERABLE_TYPES:
        return _check_choice(parameter, value, locale, label)
    if parameter.kind == ParameterType.TEXT:
        return _check_text(value, locale, label)
    return None


def validate_configuration(
    effective_parameters: Iterable[EffectiveParameter],
    configuration: Any,
    locale: Optional[str] = None,
) -> ValidationResult:
    if effective_parameters is None:
        raise TypeError("effective_parameters is required")
    if not isinstance(configuration, Mapping):
        configuration = {}

    errors = {}
    for parameter in effective_parameters:
        reason = check_parameter(parameter, lookup_value(configuration, parameter.parameter_id), locale)
        if reason:
            errors[str(parameter.parameter_id)] = reason

    if not has_any_value(configuration):
        errors[NON_FIELD_KEY] = message(locale, "empty_configuration")

    if errors:
        logger.debug("Configuration rejected: %s", sorted(errors))
    return ValidationResult(ok=not errors, errors=errors)
