# backend/routes/categories.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session, selectinload

from database import get_db
from utils.audit import client_ip, write_log
from utils.catalog import CategoryBindings, ParameterCatalog
from models.category import Category, CategoryParameter
from models.parameter import Parameter
import schemas.parameter as parameter_schemas

router = APIRouter(prefix="/categories", tags=["Categories"])


def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category

def _get_binding(db: Session, category_id: int, parameter_id: int) -> CategoryParameter:
    binding = db.query(CategoryParameter).filter(
        CategoryParameter.category_id == category_id,
        CategoryParameter.parameter_id == parameter_id,
    ).first()
    if not binding:
        raise HTTPException(status_code=404, detail="Parameter is not bound to this category")
    return binding


@router.get("", response_model=List[parameter_schemas.CategoryOut])
def list_categories(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
):
    query = db.query(Category)
    if not include_inactive:
        query = query.filter(Category.is_active == True)
    return query.order_by(Category.name.asc()).all()


@router.get("/{category_id}", response_model=parameter_schemas.CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_category(db, category_id)


@router.post("", response_model=parameter_schemas.CategoryOut, status_code=201)
def create_category(
    payload: parameter_schemas.CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    category = Category(name=payload.name.strip(), name_localized=payload.name_localized)
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(
        db, action="CATEGORY_CREATE", resource="categories", resource_id=category.id,
        ip=client_ip(request),
        meta={"category_id": category.id, "name": category.name},
    )
    return category


# =========================
# PARAMETER BINDINGS
# =========================
@router.get("/{category_id}/parameters", response_model=List[parameter_schemas.BoundParameterOut])
def list_category_parameters(category_id: int, db: Session = Depends(get_db)):
    """Bound parameters in form order: system parameters first, then by binding order."""
    _get_category(db, category_id)

    rows = db.query(CategoryParameter).filter(CategoryParameter.category_id == category_id).all()
    parameters = (
        db.query(Parameter)
        .options(selectinload(Parameter.values))
        .filter(Parameter.id.in_([b.parameter_id for b in rows]))
        .all()
    )
    catalog = ParameterCatalog([parameter_schemas.ParameterOut.model_validate(p) for p in parameters])
    bindings = CategoryBindings(catalog, [parameter_schemas.CategoryParameterOut.model_validate(b) for b in rows])

    return [
        parameter_schemas.BoundParameterOut(parameter=parameter, binding=binding)
        for parameter, binding in bindings.bindings_for(category_id)
    ]


@router.post("/{category_id}/parameters", response_model=parameter_schemas.CategoryParameterOut, status_code=201)
def bind_parameter(
    category_id: int,
    payload: parameter_schemas.CategoryParameterLink,
    request: Request,
    db: Session = Depends(get_db),
):
    _get_category(db, category_id)
    if not db.query(Parameter).filter(Parameter.id == payload.parameter_id).first():
        raise HTTPException(status_code=404, detail="Parameter not found")

    exists = db.query(CategoryParameter).filter(
        CategoryParameter.category_id == category_id,
        CategoryParameter.parameter_id == payload.parameter_id,
    ).first()
    if exists:
        raise HTTPException(status_code=409, detail="Parameter is already bound to this category")

    binding = CategoryParameter(category_id=category_id, **payload.model_dump())
    db.add(binding)
    db.commit()
    db.refresh(binding)

    write_log(
        db, action="CATEGORY_PARAMETER_BIND", resource="categories", resource_id=category_id,
        ip=client_ip(request),
        meta={"category_id": category_id, "parameter_id": payload.parameter_id},
    )
    return binding


@router.patch("/{category_id}/parameters/{parameter_id}", response_model=parameter_schemas.CategoryParameterOut)
def update_binding(
    category_id: int,
    parameter_id: int,
    payload: parameter_schemas.CategoryParameterUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    binding = _get_binding(db, category_id, parameter_id)
    data = payload.model_dump(exclude_unset=True)
    for key, value in data.items():
        setattr(binding, key, value)

    db.commit()
    db.refresh(binding)

    write_log(
        db, action="CATEGORY_PARAMETER_UPDATE", resource="categories", resource_id=category_id,
        ip=client_ip(request),
        meta={"category_id": category_id, "parameter_id": parameter_id, "fields": sorted(data)},
    )
    return binding


@router.delete("/{category_id}/parameters/{parameter_id}")
def unbind_parameter(category_id: int, parameter_id: int, request: Request, db: Session = Depends(get_db)):
    binding = _get_binding(db, category_id, parameter_id)
    db.delete(binding)
    db.commit()

    write_log(
        db, action="CATEGORY_PARAMETER_UNBIND", resource="categories", resource_id=category_id,
        ip=client_ip(request),
        meta={"category_id": category_id, "parameter_id": parameter_id},
    )
    return {"message": "Parameter unbound"}
