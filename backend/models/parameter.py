# backend/models/parameter.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, func, Enum, Boolean
from sqlalchemy.orm import relationship
from database import Base
import enum

# Kinds of configurable product attributes
class ParameterType(str, enum.Enum):
    NUMBER = "NUMBER"
    SELECT = "SELECT"
    COLOR = "COLOR"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    # Recognized by the catalog, no configurator support yet
    MULTI_SELECT = "MULTI_SELECT"
    DATE = "DATE"
    RANGE = "RANGE"

SUPPORTED_TYPES = frozenset({
    ParameterType.NUMBER,
    ParameterType.SELECT,
    ParameterType.COLOR,
    ParameterType.TEXT,
    ParameterType.BOOLEAN,
})

# Kinds that carry a list of selectable ParameterValue rows
ENUMERABLE_TYPES = frozenset({ParameterType.SELECT, ParameterType.COLOR})

# A configurable product attribute (width, material, glazing...)
class Parameter(Base):
    __tablename__ = "parameters"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    name_localized = Column(String(255), nullable=True)
    kind = Column(Enum(ParameterType), nullable=False)
    description = Column(String(1024), nullable=True)

    # NUMBER only
    unit = Column(String(32), nullable=True)
    min_value = Column(Float, nullable=True)
    max_value = Column(Float, nullable=True)
    step = Column(Float, nullable=True)

    order = Column(Integer, default=0, nullable=False)

    # System parameters (width, height) are rendered first and cannot be deleted
    is_system = Column(Boolean, default=False, nullable=False)
    # Global parameters apply to every category without a binding
    is_global = Column(Boolean, default=False, nullable=False)
    # Required in every category regardless of binding flags.
    # NULL means "derive from the name" (the "Model" convention)
    is_always_required = Column(Boolean, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    values = relationship(
        "ParameterValue",
        back_populates="parameter",
        cascade="all, delete-orphan",
        order_by="ParameterValue.order",
    )

# One selectable option of a SELECT / COLOR parameter
class ParameterValue(Base):
    __tablename__ = "parameter_values"

    id = Column(Integer, primary_key=True, index=True)
    parameter_id = Column(Integer, ForeignKey("parameters.id"), nullable=False, index=True)
    value = Column(String(255), nullable=False)
    value_localized = Column(String(255), nullable=True)

    # Colour data, ral_code is derived from hex_color when not given
    hex_color = Column(String(7), nullable=True)
    ral_code = Column(String(32), nullable=True)

    order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    parameter = relationship("Parameter", back_populates="values")
