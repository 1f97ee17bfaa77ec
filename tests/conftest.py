import os
import tempfile

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PDF_STORAGE_DIR"] = tempfile.mkdtemp(prefix="proposals-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.parameter import ParameterType
from schemas.parameter import CategoryParameterOut, ParameterOut, ParameterValueOut
from utils.catalog import ParameterCatalog
from utils.resolver import resolve_effective_parameters

CATEGORY_ID = 1
SUPPLIER_ID = 10
OTHER_SUPPLIER_ID = 11

WIDTH, HEIGHT, MATERIAL, GLAZED, MODEL = 1, 2, 3, 4, 5


# =========================
# ENGINE FIXTURES
# =========================
@pytest.fixture
def door_parameters():
    return [
        ParameterOut(
            id=WIDTH, name="Width", name_localized="Larghezza", kind=ParameterType.NUMBER,
            unit="mm", min_value=400, max_value=1200, order=1, is_system=True,
        ),
        ParameterOut(
            id=HEIGHT, name="Height", name_localized="Altezza", kind=ParameterType.NUMBER,
            unit="mm", min_value=1800, max_value=2400, order=2, is_system=True,
        ),
        ParameterOut(
            id=MATERIAL, name="Material", name_localized="Materiale", kind=ParameterType.SELECT,
            values=[
                ParameterValueOut(id=31, value="MDF", value_localized="MDF", order=1),
                ParameterValueOut(id=32, value="Wood", value_localized="Legno", order=2),
            ],
        ),
        ParameterOut(id=GLAZED, name="Glazed", name_localized="Vetrato", kind=ParameterType.BOOLEAN),
        ParameterOut(
            id=MODEL, name="Model", name_localized="Modello", kind=ParameterType.SELECT,
            is_always_required=True,
            values=[
                ParameterValueOut(id=51, value="Classic", order=1),
                ParameterValueOut(id=52, value="Modern", order=2),
            ],
        ),
    ]


@pytest.fixture
def door_bindings():
    return [
        CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=HEIGHT, is_required=True, order=0),
        CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=WIDTH, is_required=True, order=0),
        CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=MATERIAL, order=1),
        CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=GLAZED, order=2),
        # Not required through the binding, only through is_always_required
        CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=MODEL, order=3),
    ]


@pytest.fixture
def door_catalog(door_parameters):
    return ParameterCatalog(
        door_parameters,
        category_ids=[CATEGORY_ID],
        supplier_ids=[SUPPLIER_ID, OTHER_SUPPLIER_ID],
    )


@pytest.fixture
def door_effective(door_catalog, door_bindings):
    return resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, [])


# =========================
# API FIXTURES
# =========================
@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(client):
    """Interior doors offered by one supplier, created through the API."""

    def post(url, payload):
        response = client.post(url, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    width = post("/parameters", {
        "name": "Width", "name_localized": "Larghezza", "kind": "NUMBER", "unit": "mm",
        "min_value": 400, "max_value": 1200, "order": 1, "is_system": True,
    })
    height = post("/parameters", {
        "name": "Height", "name_localized": "Altezza", "kind": "NUMBER", "unit": "mm",
        "min_value": 1800, "max_value": 2400, "order": 2, "is_system": True,
    })
    material = post("/parameters", {
        "name": "Material", "name_localized": "Materiale", "kind": "SELECT",
        "values": [{"value": "MDF"}, {"value": "Wood", "value_localized": "Legno"}],
    })
    glazed = post("/parameters", {"name": "Glazed", "name_localized": "Vetrato", "kind": "BOOLEAN"})
    model = post("/parameters", {
        "name": "Model", "name_localized": "Modello", "kind": "SELECT",
        "values": [{"value": "Classic"}, {"value": "Modern"}],
    })

    category = post("/categories", {"name": "Interior doors", "name_localized": "Porte interne"})
    for order, (parameter, required) in enumerate(
        [(width, True), (height, True), (material, False), (glazed, False), (model, False)]
    ):
        post(f"/categories/{category['id']}/parameters", {
            "parameter_id": parameter["id"], "is_required": required, "order": order,
        })

    supplier = post("/suppliers", {"name": "Doors Inc.", "short_name": "DI"})
    link = post(f"/suppliers/{supplier['id']}/categories", {"category_id": category["id"]})

    return {
        "width": width["id"],
        "height": height["id"],
        "material": material["id"],
        "glazed": glazed["id"],
        "model": model["id"],
        "category": category["id"],
        "supplier": supplier["id"],
        "supplier_category": link["id"],
    }
