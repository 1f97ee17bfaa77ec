# backend/utils/resolver.py
"""Effective parameter list of a (category, supplier) pair.

Applies, in this order: eligibility (binding or global), visibility and
activity filters, supplier availability, NUMBER bound replacement and
append-only custom values for SELECT / COLOR.
"""
import logging
from typing import Dict, Iterable, List, Optional, Union

from models.parameter import ENUMERABLE_TYPES, ParameterType
from schemas.configurator import EffectiveParameter
from schemas.parameter import CategoryParameterOut, ParameterOut, ParameterValueOut, SupplierOverrideOut
from utils.catalog import CategoryBindings, ParameterCatalog, parameter_sort_key, value_sort_key

logger = logging.getLogger(__name__)


def _index_overrides(supplier_id: int, overrides: Iterable[SupplierOverrideOut]) -> Dict[int, SupplierOverrideOut]:
    indexed: Dict[int, SupplierOverrideOut] = {}
    for override in overrides:
        if override.supplier_id != supplier_id:
            continue
        if override.parameter_id in indexed:
            logger.warning(
                "Duplicate override for supplier %s / parameter %s, keeping the first one",
                supplier_id, override.parameter_id,
            )
            continue
        indexed[override.parameter_id] = override
    return indexed


def _custom_values(override: SupplierOverrideOut, start_order: int) -> List[ParameterValueOut]:
    entries: List[ParameterValueOut] = []
    for text in override.custom_values or []:
        if not isinstance(text, str) or not text.strip():
            continue
        position = len(entries) + 1
        entries.append(ParameterValueOut(
            id=-position,
            value=text.strip(),
            value_localized=text.strip(),
            order=start_order + position,
            is_custom=True,
        ))
    return entries


def _effective(
    parameter: ParameterOut,
    binding: Optional[CategoryParameterOut],
    override: Optional[SupplierOverrideOut],
) -> EffectiveParameter:
    min_value, max_value = parameter.min_value, parameter.max_value
    if parameter.kind == ParameterType.NUMBER and override is not None:
        # Each bound given by the supplier replaces the catalog one outright
        if override.min_override is not None:
            min_value = override.min_override
        if override.max_override is not None:
            max_value = override.max_override

    values = []
    if parameter.kind in ENUMERABLE_TYPES:
        values = [v.model_copy() for v in sorted(parameter.values, key=value_sort_key) if v.is_active]
        if override is not None and override.custom_values:
            last_order = values[-1].order if values else 0
            values.extend(_custom_values(override, last_order))

    return EffectiveParameter(
        parameter_id=parameter.id,
        name=parameter.name,
        name_localized=parameter.name_localized,
        display_name=binding.display_name if binding else None,
        display_name_localized=binding.display_name_localized if binding else None,
        kind=parameter.kind,
        unit=parameter.unit,
        min_value=min_value,
        max_value=max_value,
        step=parameter.step,
        order=binding.order if binding else parameter.order,
        is_system=parameter.is_system,
        is_global=parameter.is_global,
        is_required=binding.is_required if binding else False,
        is_always_required=parameter.is_always_required,
        values=tuple(values),
        group="system" if parameter.is_system else "other",
    )


def resolve_effective_parameters(
    category_id: int,
    supplier_id: int,
    catalog: ParameterCatalog,
    bindings: Union[CategoryBindings, Iterable[CategoryParameterOut]],
    overrides: Iterable[SupplierOverrideOut],
) -> List[EffectiveParameter]:
    """
    Returns the parameters an operator configures for this category and
    supplier: system parameters first (by their own order), then the rest
    (bound ones by binding order, then unbound globals).
    An unknown category or supplier yields an empty list.
    """
    if catalog is None or bindings is None or overrides is None:
        raise TypeError("catalog, bindings and overrides are required")

    if not catalog.has_category(category_id) or not catalog.has_supplier(supplier_id):
        logger.debug("Nothing to resolve for category %s / supplier %s", category_id, supplier_id)
        return []

    if not isinstance(bindings, CategoryBindings):
        bindings = CategoryBindings(catalog, bindings)
    supplier_overrides = _index_overrides(supplier_id, overrides)

    candidates = list(bindings.bindings_for(category_id))
    bound_ids = {parameter.id for parameter, _ in candidates}
    for parameter in catalog.global_parameters():
        if parameter.id not in bound_ids:
            candidates.append((parameter, None))

    system: List[tuple] = []
    other: List[EffectiveParameter] = []
    dropped = 0
    for parameter, binding in candidates:
        if not parameter.is_active or (binding is not None and not binding.is_visible):
            dropped += 1
            continue
        override = supplier_overrides.get(parameter.id)
        if override is not None and not override.is_available:
            dropped += 1
            continue

        effective = _effective(parameter, binding, override)
        if parameter.is_system:
            system.append((parameter_sort_key(parameter), effective))
        else:
            other.append(effective)

    system.sort(key=lambda pair: pair[0])
    resolved = [effective for _, effective in system] + other
    logger.debug(
        "Resolved %d parameters for category %s / supplier %s (%d dropped)",
        len(resolved), category_id, supplier_id, dropped,
    )
    return resolved
