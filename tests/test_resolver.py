import pytest
from pydantic import ValidationError

from models.parameter import ParameterType
from schemas.parameter import CategoryParameterOut, ParameterOut, ParameterValueOut, SupplierOverrideOut
from utils.catalog import CategoryBindings, ParameterCatalog
from utils.resolver import resolve_effective_parameters

from conftest import CATEGORY_ID, GLAZED, HEIGHT, MATERIAL, MODEL, OTHER_SUPPLIER_ID, SUPPLIER_ID, WIDTH


def _by_id(parameters):
    return {p.parameter_id: p for p in parameters}


def test_resolution_order(door_effective):
    assert [p.parameter_id for p in door_effective] == [WIDTH, HEIGHT, MATERIAL, GLAZED, MODEL]
    assert [p.group for p in door_effective] == ["system", "system", "other", "other", "other"]


def test_accepts_prebuilt_bindings(door_catalog, door_bindings, door_effective):
    bindings = CategoryBindings(door_catalog, door_bindings)
    assert resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, bindings, []) == door_effective


def test_unavailable_override_wins_over_required_binding(door_catalog, door_bindings):
    overrides = [SupplierOverrideOut(supplier_id=SUPPLIER_ID, parameter_id=WIDTH, is_available=False)]
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, overrides)
    assert WIDTH not in _by_id(resolved)
    assert HEIGHT in _by_id(resolved)


def test_range_override_replaces_each_bound():
    depth = ParameterOut(id=6, name="Depth", kind=ParameterType.NUMBER, min_value=0, max_value=100)
    catalog = ParameterCatalog([depth], category_ids=[CATEGORY_ID], supplier_ids=[SUPPLIER_ID])
    bindings = [CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=6)]
    overrides = [SupplierOverrideOut(supplier_id=SUPPLIER_ID, parameter_id=6, min_override=10)]

    (effective,) = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, catalog, bindings, overrides)
    assert effective.min_value == 10
    assert effective.max_value == 100
    # The catalog itself is untouched
    assert catalog.get(6).min_value == 0


def test_custom_values_are_appended(door_catalog, door_bindings):
    overrides = [SupplierOverrideOut(
        supplier_id=SUPPLIER_ID, parameter_id=MATERIAL, custom_values=["Oak", "  ", "Ash "],
    )]
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, overrides)
    material = _by_id(resolved)[MATERIAL]

    assert [v.value for v in material.values] == ["MDF", "Wood", "Oak", "Ash"]
    assert [v.id for v in material.values] == [31, 32, -1, -2]
    assert [v.is_custom for v in material.values] == [False, False, True, True]
    assert [v.order for v in material.values] == [1, 2, 3, 4]
    assert len(door_catalog.get(MATERIAL).values) == 2


def test_custom_values_are_fresh_per_call(door_catalog, door_bindings):
    overrides = [SupplierOverrideOut(supplier_id=SUPPLIER_ID, parameter_id=MATERIAL, custom_values=["Oak"])]
    first = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, overrides)
    second = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, overrides)

    assert first == second
    assert _by_id(first)[MATERIAL].values is not _by_id(second)[MATERIAL].values


def test_overrides_of_other_suppliers_are_ignored(door_catalog, door_bindings):
    overrides = [SupplierOverrideOut(supplier_id=OTHER_SUPPLIER_ID, parameter_id=WIDTH, is_available=False)]
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, overrides)
    assert WIDTH in _by_id(resolved)


def test_duplicate_override_keeps_first(door_catalog, door_bindings):
    overrides = [
        SupplierOverrideOut(supplier_id=SUPPLIER_ID, parameter_id=WIDTH, max_override=1000),
        SupplierOverrideOut(supplier_id=SUPPLIER_ID, parameter_id=WIDTH, is_available=False),
    ]
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, overrides)
    assert _by_id(resolved)[WIDTH].max_value == 1000


def test_unknown_category_or_supplier_resolves_to_nothing(door_catalog, door_bindings):
    assert resolve_effective_parameters(99, SUPPLIER_ID, door_catalog, door_bindings, []) == []
    assert resolve_effective_parameters(CATEGORY_ID, 99, door_catalog, door_bindings, []) == []


def test_catalog_without_ids_knows_every_category_and_supplier(door_parameters, door_bindings):
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, ParameterCatalog(door_parameters), door_bindings, [])
    assert [p.parameter_id for p in resolved] == [WIDTH, HEIGHT, MATERIAL, GLAZED, MODEL]


def test_missing_inputs_raise(door_catalog, door_bindings):
    with pytest.raises(TypeError):
        resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, None, door_bindings, [])
    with pytest.raises(TypeError):
        resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, None, [])
    with pytest.raises(TypeError):
        resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, None)


def test_hidden_inactive_and_global_parameters(door_parameters, door_bindings):
    door_parameters[3] = door_parameters[3].model_copy(update={"is_active": False})  # Glazed
    warranty = ParameterOut(id=8, name="Warranty", kind=ParameterType.TEXT, is_global=True)
    finish = ParameterOut(id=7, name="Finish", kind=ParameterType.TEXT, is_global=True)
    catalog = ParameterCatalog(
        door_parameters + [warranty, finish], category_ids=[CATEGORY_ID], supplier_ids=[SUPPLIER_ID],
    )
    bindings = [b for b in door_bindings if b.parameter_id != MATERIAL] + [
        CategoryParameterOut(category_id=CATEGORY_ID, parameter_id=MATERIAL, order=1, is_visible=False),
    ]

    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, catalog, bindings, [])
    ids = [p.parameter_id for p in resolved]
    assert MATERIAL not in ids
    assert GLAZED not in ids
    # Unbound globals follow the bound parameters, by their catalog order
    assert ids[-2:] == [7, 8]
    assert _by_id(resolved)[7].is_required is False


def test_inactive_values_are_excluded(door_parameters, door_bindings):
    door_parameters[2] = door_parameters[2].model_copy(update={"values": [
        ParameterValueOut(id=31, value="MDF", order=1, is_active=False),
        ParameterValueOut(id=32, value="Wood", order=2),
    ]})
    catalog = ParameterCatalog(door_parameters, category_ids=[CATEGORY_ID], supplier_ids=[SUPPLIER_ID])
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, catalog, door_bindings, [])
    assert [v.value for v in _by_id(resolved)[MATERIAL].values] == ["Wood"]


def test_binding_labels_and_flags_carry_over(door_catalog, door_bindings):
    door_bindings[2] = door_bindings[2].model_copy(update={
        "display_name": "Door leaf", "display_name_localized": "Anta", "is_required": True,
    })
    resolved = resolve_effective_parameters(CATEGORY_ID, SUPPLIER_ID, door_catalog, door_bindings, [])
    material = _by_id(resolved)[MATERIAL]

    assert material.required
    assert material.label("en") == "Door leaf"
    assert material.label("it") == "Anta"
    assert _by_id(resolved)[MODEL].required


def test_effective_parameters_are_frozen(door_effective):
    with pytest.raises(ValidationError):
        door_effective[0].min_value = 0
