# backend/utils/i18n.py
"""Labels and messages emitted by the configurator engine itself.

Only ``it`` has catalog translations (the ``*_localized`` columns); every
other locale reads the primary text.
"""
from typing import Optional

LOCALIZED_LOCALE = "it"

MESSAGES = {
    "en": {
        "yes": "Yes",
        "no": "No",
        "note": "Note",
        "placeholder": "Product",
        "required": 'Parameter "{name}" is required',
        "not_a_number": 'Parameter "{name}" must be a number',
        "below_min": '"{name}" cannot be less than {limit}{unit}',
        "above_max": '"{name}" cannot be greater than {limit}{unit}',
        "unknown_value": '"{name}": value "{value}" is not available',
        "not_text": '"{name}" must be text or a list of text lines',
        "not_boolean": '"{name}" must be true or false',
        "not_supported": '"{name}": parameter type {kind} is not supported yet',
        "empty_configuration": "At least one parameter must be filled in",
    },
    "ru": {
        "yes": "Да",
        "no": "Нет",
        "note": "Примечание",
        "placeholder": "Товар",
        "required": 'Параметр "{name}" обязателен для заполнения',
        "not_a_number": 'Параметр "{name}" должен быть числом',
        "below_min": '"{name}" не может быть меньше {limit}{unit}',
        "above_max": '"{name}" не может быть больше {limit}{unit}',
        "unknown_value": '"{name}": значение "{value}" недоступно',
        "not_text": '"{name}" должен быть текстом или списком строк',
        "not_boolean": '"{name}" должен быть да или нет',
        "not_supported": '"{name}": тип параметра {kind} пока не поддерживается',
        "empty_configuration": "Необходимо заполнить хотя бы один параметр",
    },
    "it": {
        "yes": "Sì",
        "no": "No",
        "note": "Note",
        "placeholder": "Prodotto",
        "required": 'Il parametro "{name}" è obbligatorio',
        "not_a_number": 'Il parametro "{name}" deve essere un numero',
        "below_min": '"{name}" non può essere inferiore a {limit}{unit}',
        "above_max": '"{name}" non può essere superiore a {limit}{unit}',
        "unknown_value": '"{name}": il valore "{value}" non è disponibile',
        "not_text": '"{name}" deve essere un testo o un elenco di righe',
        "not_boolean": '"{name}" deve essere sì o no',
        "not_supported": '"{name}": il tipo di parametro {kind} non è ancora supportato',
        "empty_configuration": "È necessario compilare almeno un parametro",
    },
}

FALLBACK_LOCALE = "en"


def message(locale: Optional[str], key: str, **kwargs) -> str:
    table = MESSAGES.get((locale or "").lower(), MESSAGES[FALLBACK_LOCALE])
    return table[key].format(**kwargs)


def pick(locale: Optional[str], primary: Optional[str], localized: Optional[str]) -> str:
    """Return the localized text for the secondary locale, primary otherwise."""
    if (locale or "").lower() == LOCALIZED_LOCALE and localized and localized.strip():
        return localized
    return primary or localized or ""
