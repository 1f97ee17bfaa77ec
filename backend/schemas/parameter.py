# backend/schemas/parameter.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional

from models.parameter import ParameterType

# Legacy names of the parameter that is required in every category
MODEL_PARAMETER_NAMES = {"model", "modello", "модель"}


def is_model_parameter(name: Optional[str], name_localized: Optional[str] = None) -> bool:
    """True for the conventional "Model" parameter."""
    return any((n or "").strip().lower() in MODEL_PARAMETER_NAMES for n in (name, name_localized))


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# =========================
# CATALOG (engine input)
# =========================
class ParameterValueOut(ORMBase):
    id: int
    value: str
    value_localized: Optional[str] = None
    hex_color: Optional[str] = None
    ral_code: Optional[str] = None
    order: int = 0
    is_active: bool = True
    # Synthetic entries injected from a supplier override
    is_custom: bool = False


class ParameterOut(ORMBase):
    id: int
    name: str
    name_localized: Optional[str] = None
    kind: ParameterType
    description: Optional[str] = None
    unit: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None
    order: int = 0
    is_system: bool = False
    is_global: bool = False
    # None derives the flag from the name
    is_always_required: Optional[bool] = None
    is_active: bool = True
    values: List[ParameterValueOut] = []

    @model_validator(mode="after")
    def _derive_always_required(self):
        if self.is_always_required is None:
            self.is_always_required = is_model_parameter(self.name, self.name_localized)
        return self


class CategoryParameterOut(ORMBase):
    id: Optional[int] = None
    category_id: int
    parameter_id: int
    is_required: bool = False
    is_visible: bool = True
    order: int = 0
    display_name: Optional[str] = None
    display_name_localized: Optional[str] = None


class SupplierOverrideOut(ORMBase):
    id: Optional[int] = None
    supplier_id: int
    parameter_id: int
    is_available: bool = True
    min_override: Optional[float] = None
    max_override: Optional[float] = None
    custom_values: Optional[List[str]] = None


# =========================
# CATALOG ADMINISTRATION (API input)
# =========================
class ParameterValueCreate(BaseModel):
    value: str = Field(min_length=1, max_length=255)
    value_localized: Optional[str] = Field(None, max_length=255)
    hex_color: Optional[str] = Field(None, max_length=7)
    ral_code: Optional[str] = Field(None, max_length=32)
    order: Optional[int] = None


class ParameterValueUpdate(BaseModel):
    """Schema for PATCH requests - all fields optional."""
    value: Optional[str] = Field(None, min_length=1, max_length=255)
    value_localized: Optional[str] = Field(None, max_length=255)
    hex_color: Optional[str] = Field(None, max_length=7)
    ral_code: Optional[str] = Field(None, max_length=32)
    order: Optional[int] = None
    is_active: Optional[bool] = None


class ParameterCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    name_localized: Optional[str] = Field(None, max_length=255)
    kind: ParameterType
    description: Optional[str] = Field(None, max_length=1024)
    unit: Optional[str] = Field(None, max_length=32)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = Field(None, gt=0)
    order: int = 0
    is_system: bool = False
    is_global: bool = False
    # None means "derive from the name" (legacy Model convention)
    is_always_required: Optional[bool] = None
    values: List[ParameterValueCreate] = []


class ParameterUpdate(BaseModel):
    """Schema for PATCH requests - all fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    name_localized: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1024)
    unit: Optional[str] = Field(None, max_length=32)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = Field(None, gt=0)
    order: Optional[int] = None
    is_global: Optional[bool] = None
    is_always_required: Optional[bool] = None
    is_active: Optional[bool] = None


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    name_localized: Optional[str] = Field(None, max_length=255)


class CategoryOut(ORMBase):
    id: int
    name: str
    name_localized: Optional[str] = None
    is_active: bool = True


class CategoryParameterLink(BaseModel):
    parameter_id: int
    is_required: bool = False
    is_visible: bool = True
    order: int = Field(0, ge=0)
    display_name: Optional[str] = Field(None, max_length=255)
    display_name_localized: Optional[str] = Field(None, max_length=255)


class CategoryParameterUpdate(BaseModel):
    """Schema for PATCH requests - all fields optional."""
    is_required: Optional[bool] = None
    is_visible: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)
    display_name: Optional[str] = Field(None, max_length=255)
    display_name_localized: Optional[str] = Field(None, max_length=255)


# Category-local view of a bound parameter, as returned by bindings_for
class BoundParameterOut(BaseModel):
    parameter: ParameterOut
    binding: CategoryParameterOut


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    short_name: Optional[str] = Field(None, max_length=64)
    short_name_localized: Optional[str] = Field(None, max_length=64)
    email: Optional[str] = None
    phone: Optional[str] = None


class SupplierOut(ORMBase):
    id: int
    name: str
    short_name: Optional[str] = None
    short_name_localized: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str = "active"


class SupplierCategoryCreate(BaseModel):
    category_id: int


class SupplierCategoryOut(ORMBase):
    id: int
    supplier_id: int
    category_id: int
    is_active: bool = True


class SupplierOverrideCreate(BaseModel):
    parameter_id: int
    is_available: bool = True
    min_override: Optional[float] = None
    max_override: Optional[float] = None
    custom_values: Optional[List[str]] = None


class SupplierOverrideUpdate(BaseModel):
    """Schema for PATCH requests - all fields optional."""
    is_available: Optional[bool] = None
    min_override: Optional[float] = None
    max_override: Optional[float] = None
    custom_values: Optional[List[str]] = None
