# backend/routes/parameters.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from utils.audit import client_ip, write_log
from utils.ral import hex_to_ral, normalize_hex
from models.parameter import Parameter, ParameterValue, ParameterType, ENUMERABLE_TYPES
from models.category import CategoryParameter
from models.supplier import SupplierParameterOverride
import schemas.parameter as parameter_schemas

router = APIRouter(tags=["Parameters"])

# ---- HELPERS ----
def _get_parameter(db: Session, parameter_id: int) -> Parameter:
    parameter = db.query(Parameter).filter(Parameter.id == parameter_id).first()
    if not parameter:
        raise HTTPException(status_code=404, detail="Parameter not found")
    return parameter

def _check_bounds(min_value: Optional[float], max_value: Optional[float]):
    if min_value is not None and max_value is not None and min_value > max_value:
        raise HTTPException(status_code=400, detail="min_value cannot be greater than max_value")

def _apply_color(value: ParameterValue):
    """Normalizes the hex colour and derives the RAL code when none was given."""
    if value.hex_color:
        normalized = normalize_hex(value.hex_color)
        if normalized is None:
            raise HTTPException(status_code=400, detail=f"Invalid hex colour '{value.hex_color}'")
        value.hex_color = normalized
        if not value.ral_code:
            value.ral_code = hex_to_ral(normalized)

def _next_value_order(db: Session, parameter_id: int) -> int:
    current = db.query(func.max(ParameterValue.order)).filter(ParameterValue.parameter_id == parameter_id).scalar()
    return (current or 0) + 1


# =========================
# PARAMETERS
# =========================
@router.get("/parameters", response_model=List[parameter_schemas.ParameterOut])
def list_parameters(
    kind: Optional[ParameterType] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Parameter)
    if kind is not None:
        query = query.filter(Parameter.kind == kind)
    if is_active is not None:
        query = query.filter(Parameter.is_active == is_active)
    return query.order_by(Parameter.order.asc(), Parameter.id.asc()).all()


@router.get("/parameters/{parameter_id}", response_model=parameter_schemas.ParameterOut)
def get_parameter(parameter_id: int, db: Session = Depends(get_db)):
    return _get_parameter(db, parameter_id)


@router.post("/parameters", response_model=parameter_schemas.ParameterOut, status_code=201)
def create_parameter(
    payload: parameter_schemas.ParameterCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    _check_bounds(payload.min_value, payload.max_value)
    if payload.values and payload.kind not in ENUMERABLE_TYPES:
        raise HTTPException(status_code=400, detail="Only SELECT and COLOR parameters have values")

    parameter = Parameter(
        name=payload.name.strip(),
        name_localized=payload.name_localized,
        kind=payload.kind,
        description=payload.description,
        unit=payload.unit,
        min_value=payload.min_value,
        max_value=payload.max_value,
        step=payload.step,
        order=payload.order,
        is_system=payload.is_system,
        is_global=payload.is_global,
        is_always_required=payload.is_always_required,
    )
    for idx, value_data in enumerate(payload.values, start=1):
        value = ParameterValue(
            value=value_data.value.strip(),
            value_localized=value_data.value_localized,
            hex_color=value_data.hex_color,
            ral_code=value_data.ral_code,
            order=value_data.order if value_data.order is not None else idx,
        )
        _apply_color(value)
        parameter.values.append(value)

    db.add(parameter)
    db.commit()
    db.refresh(parameter)

    write_log(
        db, action="PARAMETER_CREATE", resource="parameters", resource_id=parameter.id, ip=client_ip(request),
        meta={"parameter_id": parameter.id, "kind": parameter.kind.value, "values": len(parameter.values)},
    )
    return parameter


@router.patch("/parameters/{parameter_id}", response_model=parameter_schemas.ParameterOut)
def update_parameter(
    parameter_id: int,
    payload: parameter_schemas.ParameterUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    parameter = _get_parameter(db, parameter_id)
    data = payload.model_dump(exclude_unset=True)

    _check_bounds(data.get("min_value", parameter.min_value), data.get("max_value", parameter.max_value))
    # A renamed parameter without an explicit flag falls back to the name rule
    if ("name" in data or "name_localized" in data) and "is_always_required" not in data:
        data["is_always_required"] = None
    for key, value in data.items():
        setattr(parameter, key, value)

    db.commit()
    db.refresh(parameter)

    write_log(
        db, action="PARAMETER_UPDATE", resource="parameters", resource_id=parameter.id, ip=client_ip(request),
        meta={"parameter_id": parameter.id, "fields": sorted(data)},
    )
    return parameter


@router.delete("/parameters/{parameter_id}")
def delete_parameter(parameter_id: int, request: Request, db: Session = Depends(get_db)):
    parameter = _get_parameter(db, parameter_id)
    if parameter.is_system:
        raise HTTPException(status_code=400, detail="System parameters cannot be deleted")

    # Parameters stay while a binding or override still points at them
    bound = db.query(CategoryParameter).filter(CategoryParameter.parameter_id == parameter_id).count()
    overridden = db.query(SupplierParameterOverride).filter(SupplierParameterOverride.parameter_id == parameter_id).count()
    if bound or overridden:
        raise HTTPException(
            status_code=400,
            detail=f"Parameter is still used by {bound} categories and {overridden} supplier overrides",
        )

    db.delete(parameter)
    db.commit()

    write_log(db, action="PARAMETER_DELETE", resource="parameters", resource_id=parameter_id, ip=client_ip(request), meta={"parameter_id": parameter_id})
    return {"message": "Parameter deleted"}


# =========================
# VALUES
# =========================
@router.post("/parameters/{parameter_id}/values", response_model=parameter_schemas.ParameterValueOut, status_code=201)
def add_parameter_value(
    parameter_id: int,
    payload: parameter_schemas.ParameterValueCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    parameter = _get_parameter(db, parameter_id)
    if parameter.kind not in ENUMERABLE_TYPES:
        raise HTTPException(status_code=400, detail="Only SELECT and COLOR parameters have values")

    value = ParameterValue(
        parameter_id=parameter.id,
        value=payload.value.strip(),
        value_localized=payload.value_localized,
        hex_color=payload.hex_color,
        ral_code=payload.ral_code,
        order=payload.order if payload.order is not None else _next_value_order(db, parameter.id),
    )
    _apply_color(value)
    db.add(value)
    db.commit()
    db.refresh(value)

    write_log(
        db, action="PARAMETER_VALUE_CREATE", resource="parameter_values", resource_id=value.id, ip=client_ip(request),
        meta={"parameter_id": parameter.id, "value_id": value.id},
    )
    return value


@router.patch("/parameter-values/{value_id}", response_model=parameter_schemas.ParameterValueOut)
def update_parameter_value(
    value_id: int,
    payload: parameter_schemas.ParameterValueUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    value = db.query(ParameterValue).filter(ParameterValue.id == value_id).first()
    if not value:
        raise HTTPException(status_code=404, detail="Parameter value not found")

    data = payload.model_dump(exclude_unset=True)
    for key, new_value in data.items():
        setattr(value, key, new_value)
    # A new colour without an explicit RAL code gets a freshly derived one
    if "hex_color" in data and "ral_code" not in data:
        value.ral_code = None
    _apply_color(value)

    db.commit()
    db.refresh(value)

    write_log(
        db, action="PARAMETER_VALUE_UPDATE", resource="parameter_values", resource_id=value.id, ip=client_ip(request),
        meta={"value_id": value.id, "fields": sorted(data)},
    )
    return value


@router.delete("/parameter-values/{value_id}")
def delete_parameter_value(value_id: int, request: Request, db: Session = Depends(get_db)):
    value = db.query(ParameterValue).filter(ParameterValue.id == value_id).first()
    if not value:
        raise HTTPException(status_code=404, detail="Parameter value not found")

    db.delete(value)
    db.commit()

    write_log(db, action="PARAMETER_VALUE_DELETE", resource="parameter_values", resource_id=value_id, ip=client_ip(request), meta={"value_id": value_id})
    return {"message": "Parameter value deleted"}
