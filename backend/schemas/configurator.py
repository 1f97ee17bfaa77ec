# backend/schemas/configurator.py
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Literal, Optional, Tuple

from models.parameter import ParameterType, SUPPORTED_TYPES
from schemas.parameter import ParameterValueOut
from utils.i18n import pick


# A parameter after supplier override resolution. Built fresh on every
# resolution call and never mutated afterwards.
class EffectiveParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    parameter_id: int
    name: str
    name_localized: Optional[str] = None
    display_name: Optional[str] = None
    display_name_localized: Optional[str] = None
    kind: ParameterType
    unit: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None
    order: int = 0
    is_system: bool = False
    is_global: bool = False
    is_required: bool = False
    is_always_required: bool = False
    values: Tuple[ParameterValueOut, ...] = ()
    group: Literal["system", "other"] = "other"

    @property
    def required(self) -> bool:
        return self.is_required or self.is_always_required

    @property
    def supported(self) -> bool:
        return self.kind in SUPPORTED_TYPES

    def label(self, locale: Optional[str]) -> str:
        return pick(
            locale,
            self.display_name or self.name,
            self.display_name_localized or self.name_localized,
        )


# Field errors are keyed by str(parameter_id); document level problems by "_configuration"
class ValidationResult(BaseModel):
    ok: bool
    errors: Dict[str, str] = {}


class ConfigurationRequest(BaseModel):
    category_id: int
    supplier_id: int
    configuration: Dict[str, Any] = {}
    notes: Optional[str] = None
    locale: Optional[str] = None


class DescriptionResponse(BaseModel):
    description: str
    validation: ValidationResult


class EffectiveParametersResponse(BaseModel):
    category_id: int
    supplier_id: int
    parameters: List[EffectiveParameter]
