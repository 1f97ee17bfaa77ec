# backend/routes/suppliers.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.audit import client_ip, write_log
from models.category import Category
from models.parameter import Parameter
from models.supplier import Supplier, SupplierCategory, SupplierParameterOverride
import schemas.parameter as parameter_schemas

router = APIRouter(tags=["Suppliers"])


def _get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier

def _check_override_bounds(min_override: Optional[float], max_override: Optional[float]):
    if min_override is not None and max_override is not None and min_override > max_override:
        raise HTTPException(status_code=400, detail="min_override cannot be greater than max_override")

def _clean_custom_values(values: Optional[List[str]]) -> Optional[List[str]]:
    # Stored stripped, blank entries dropped
    if values is None:
        return None
    return [v.strip() for v in values if v and v.strip()]


@router.get("/suppliers", response_model=List[parameter_schemas.SupplierOut])
def list_suppliers(db: Session = Depends(get_db)):
    return db.query(Supplier).order_by(Supplier.name.asc()).all()


@router.get("/suppliers/{supplier_id}", response_model=parameter_schemas.SupplierOut)
def get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return _get_supplier(db, supplier_id)


@router.post("/suppliers", response_model=parameter_schemas.SupplierOut, status_code=201)
def create_supplier(payload: parameter_schemas.SupplierCreate, request: Request, db: Session = Depends(get_db)):
    supplier = Supplier(**payload.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)

    write_log(
        db, action="SUPPLIER_CREATE", resource="suppliers", resource_id=supplier.id,
        ip=client_ip(request),
        meta={"supplier_id": supplier.id, "name": supplier.name},
    )
    return supplier


# =========================
# SUPPLIER CATEGORIES
# =========================
@router.get("/suppliers/{supplier_id}/categories", response_model=List[parameter_schemas.SupplierCategoryOut])
def list_supplier_categories(supplier_id: int, db: Session = Depends(get_db)):
    _get_supplier(db, supplier_id)
    return db.query(SupplierCategory).filter(SupplierCategory.supplier_id == supplier_id).all()


@router.post("/suppliers/{supplier_id}/categories", response_model=parameter_schemas.SupplierCategoryOut, status_code=201)
def add_supplier_category(
    supplier_id: int,
    payload: parameter_schemas.SupplierCategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    _get_supplier(db, supplier_id)
    if not db.query(Category).filter(Category.id == payload.category_id).first():
        raise HTTPException(status_code=404, detail="Category not found")

    exists = db.query(SupplierCategory).filter(
        SupplierCategory.supplier_id == supplier_id,
        SupplierCategory.category_id == payload.category_id,
    ).first()
    if exists:
        raise HTTPException(status_code=409, detail="Supplier already offers this category")

    link = SupplierCategory(supplier_id=supplier_id, category_id=payload.category_id)
    db.add(link)
    db.commit()
    db.refresh(link)

    write_log(
        db, action="SUPPLIER_CATEGORY_ADD", resource="suppliers", resource_id=supplier_id,
        ip=client_ip(request),
        meta={"supplier_id": supplier_id, "category_id": payload.category_id},
    )
    return link


# =========================
# PARAMETER OVERRIDES
# =========================
@router.get("/suppliers/{supplier_id}/parameter-overrides", response_model=List[parameter_schemas.SupplierOverrideOut])
def list_overrides(supplier_id: int, db: Session = Depends(get_db)):
    _get_supplier(db, supplier_id)
    return (
        db.query(SupplierParameterOverride)
        .filter(SupplierParameterOverride.supplier_id == supplier_id)
        .order_by(SupplierParameterOverride.parameter_id.asc())
        .all()
    )


@router.post("/suppliers/{supplier_id}/parameter-overrides", response_model=parameter_schemas.SupplierOverrideOut, status_code=201)
def create_override(
    supplier_id: int,
    payload: parameter_schemas.SupplierOverrideCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    _get_supplier(db, supplier_id)
    if not db.query(Parameter).filter(Parameter.id == payload.parameter_id).first():
        raise HTTPException(status_code=404, detail="Parameter not found")
    _check_override_bounds(payload.min_override, payload.max_override)

    # At most one override per supplier and parameter
    exists = db.query(SupplierParameterOverride).filter(
        SupplierParameterOverride.supplier_id == supplier_id,
        SupplierParameterOverride.parameter_id == payload.parameter_id,
    ).first()
    if exists:
        raise HTTPException(status_code=409, detail="Override for this parameter already exists")

    data = payload.model_dump()
    data["custom_values"] = _clean_custom_values(data["custom_values"])
    override = SupplierParameterOverride(supplier_id=supplier_id, **data)
    db.add(override)
    db.commit()
    db.refresh(override)

    write_log(
        db, action="SUPPLIER_OVERRIDE_CREATE", resource="suppliers", resource_id=supplier_id,
        ip=client_ip(request),
        meta={"supplier_id": supplier_id, "parameter_id": payload.parameter_id},
    )
    return override


@router.patch("/supplier-parameter-overrides/{override_id}", response_model=parameter_schemas.SupplierOverrideOut)
def update_override(
    override_id: int,
    payload: parameter_schemas.SupplierOverrideUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    override = db.query(SupplierParameterOverride).filter(SupplierParameterOverride.id == override_id).first()
    if not override:
        raise HTTPException(status_code=404, detail="Override not found")

    data = payload.model_dump(exclude_unset=True)
    _check_override_bounds(
        data.get("min_override", override.min_override),
        data.get("max_override", override.max_override),
    )
    if "custom_values" in data:
        data["custom_values"] = _clean_custom_values(data["custom_values"])
    for key, value in data.items():
        setattr(override, key, value)

    db.commit()
    db.refresh(override)

    write_log(
        db, action="SUPPLIER_OVERRIDE_UPDATE", resource="suppliers", resource_id=override.id,
        ip=client_ip(request),
        meta={"override_id": override.id, "fields": sorted(data)},
    )
    return override


@router.delete("/supplier-parameter-overrides/{override_id}")
def delete_override(override_id: int, request: Request, db: Session = Depends(get_db)):
    override = db.query(SupplierParameterOverride).filter(SupplierParameterOverride.id == override_id).first()
    if not override:
        raise HTTPException(status_code=404, detail="Override not found")

    db.delete(override)
    db.commit()

    write_log(
        db, action="SUPPLIER_OVERRIDE_DELETE", resource="suppliers", resource_id=override_id,
        ip=client_ip(request),
        meta={"override_id": override_id},
    )
    return {"message": "Override deleted"}
