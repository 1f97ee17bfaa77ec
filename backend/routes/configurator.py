# backend/routes/configurator.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from utils.describer import describe_configuration
from utils.loader import load_effective_parameters
from utils.validator import validate_configuration
import schemas.configurator as configurator_schemas

router = APIRouter(prefix="/configurator", tags=["Configurator"])


@router.get("/parameters", response_model=configurator_schemas.EffectiveParametersResponse)
def get_effective_parameters(
    category_id: int = Query(...),
    supplier_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """Form the operator fills in for a category offered by a supplier."""
    parameters = load_effective_parameters(db, category_id, supplier_id)
    return configurator_schemas.EffectiveParametersResponse(
        category_id=category_id, supplier_id=supplier_id, parameters=parameters
    )


@router.post("/validate", response_model=configurator_schemas.ValidationResult)
def validate(payload: configurator_schemas.ConfigurationRequest, db: Session = Depends(get_db)):
    parameters = load_effective_parameters(db, payload.category_id, payload.supplier_id)
    return validate_configuration(parameters, payload.configuration, payload.locale or settings.DEFAULT_LOCALE)


@router.post("/describe", response_model=configurator_schemas.DescriptionResponse)
def describe(payload: configurator_schemas.ConfigurationRequest, db: Session = Depends(get_db)):
    # Description is produced even for invalid input, the validation result travels alongside
    locale: Optional[str] = payload.locale or settings.DEFAULT_LOCALE
    parameters = load_effective_parameters(db, payload.category_id, payload.supplier_id)
    return configurator_schemas.DescriptionResponse(
        description=describe_configuration(parameters, payload.configuration, locale, notes=payload.notes),
        validation=validate_configuration(parameters, payload.configuration, locale),
    )
