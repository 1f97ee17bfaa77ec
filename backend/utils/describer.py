# backend/utils/describer.py
"""Line description of a configured product.

Token order is fixed: dimensions, other values (effective parameter order),
boolean "Name: Yes/No" pairs, then the note. Tokens are joined with " | ".
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional

from models.parameter import ParameterType
from schemas.configurator import EffectiveParameter
from utils.i18n import message
from utils.values import NOT_SUPPORTED, format_number, format_value, is_blank, lookup_value, parse_bool, parse_number

logger = logging.getLogger(__name__)

SEPARATOR = " | "
WIDTH_NAMES = {"width", "larghezza", "ширина"}
HEIGHT_NAMES = {"height", "altezza", "высота"}


def _is_named(parameter: EffectiveParameter, names) -> bool:
    return any((n or "").strip().lower() in names for n in (parameter.name, parameter.name_localized))


def _dimension(parameters: List[EffectiveParameter], configuration: Mapping, names) -> Optional[str]:
    for parameter in parameters:
        if not (parameter.is_system and parameter.kind == ParameterType.NUMBER and _is_named(parameter, names)):
            continue
        value = lookup_value(configuration, parameter.parameter_id)
        if is_blank(value):
            return None
        number = parse_number(value)
        return format_number(number) if number is not None else str(value).strip()
    return None


def dimensions_token(parameters: List[EffectiveParameter], configuration: Mapping) -> Optional[str]:
    width = _dimension(parameters, configuration, WIDTH_NAMES)
    height = _dimension(parameters, configuration, HEIGHT_NAMES)
    if width and height:
        return f"{width}x{height}"
    return width or height


def describe_configuration(
    effective_parameters: Iterable[EffectiveParameter],
    configuration: Any,
    locale: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    if effective_parameters is None:
        raise TypeError("effective_parameters is required")
    parameters = list(effective_parameters)
    if not isinstance(configuration, Mapping):
        configuration = {}

    tokens: List[str] = []
    dimensions = dimensions_token(parameters, configuration)
    if dimensions:
        tokens.append(dimensions)

    flags: List[str] = []
    for parameter in parameters:
        if parameter.is_system:
            continue
        value = lookup_value(configuration, parameter.parameter_id)

        if parameter.kind == ParameterType.BOOLEAN:
            flag = parse_bool(value)
            if flag is not None:
                answer = message(locale, "yes" if flag else "no")
                flags.append(f"{parameter.label(locale)}: {answer}")
            continue

        if is_blank(value):
            continue
        token = format_value(parameter, value, locale)
        if token is NOT_SUPPORTED:
            logger.debug("Skipping %s value of parameter %s", parameter.kind.value, parameter.parameter_id)
            continue
        if token:
            tokens.append(token)

    tokens.extend(flags)
    if notes and notes.strip():
        tokens.append(f"{message(locale, 'note')}: {notes.strip()}")

    if not tokens:
        return message(locale, "placeholder")
    return SEPARATOR.join(tokens)
