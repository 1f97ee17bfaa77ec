# backend/utils/loader.py
"""Loads engine inputs from the database for one (category, supplier) pair."""
from typing import List, Tuple

from sqlalchemy.orm import Session, selectinload

from models.category import Category, CategoryParameter
from models.parameter import Parameter
from models.supplier import Supplier, SupplierParameterOverride
from schemas.configurator import EffectiveParameter
from schemas.parameter import CategoryParameterOut, ParameterOut, SupplierOverrideOut
from utils.catalog import ParameterCatalog
from utils.resolver import resolve_effective_parameters


def load_catalog(db: Session, category_id: int, supplier_id: int) -> Tuple[ParameterCatalog, list, list]:
    parameters = db.query(Parameter).options(selectinload(Parameter.values)).all()

    category = db.get(Category, category_id)
    supplier = db.get(Supplier, supplier_id)
    catalog = ParameterCatalog(
        [ParameterOut.model_validate(p) for p in parameters],
        category_ids=[category.id] if category and category.is_active else [],
        supplier_ids=[supplier.id] if supplier else [],
    )

    bindings = [
        CategoryParameterOut.model_validate(b)
        for b in db.query(CategoryParameter).filter(CategoryParameter.category_id == category_id).all()
    ]
    overrides = [
        SupplierOverrideOut.model_validate(o)
        for o in db.query(SupplierParameterOverride).filter(SupplierParameterOverride.supplier_id == supplier_id).all()
    ]
    return catalog, bindings, overrides


def load_effective_parameters(db: Session, category_id: int, supplier_id: int) -> List[EffectiveParameter]:
    catalog, bindings, overrides = load_catalog(db, category_id, supplier_id)
    return resolve_effective_parameters(category_id, supplier_id, catalog, bindings, overrides)
