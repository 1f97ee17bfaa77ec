# backend/utils/catalog.py
"""In-memory parameter catalog and category bindings.

Both are plain lookup structures built from whatever the caller loaded
(ORM rows converted to schemas, or fixtures). They never mutate their inputs.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from models.parameter import ENUMERABLE_TYPES
from schemas.parameter import CategoryParameterOut, ParameterOut, ParameterValueOut

logger = logging.getLogger(__name__)


def value_sort_key(value: ParameterValueOut) -> Tuple[int, int]:
    return (value.order, value.id)


def parameter_sort_key(parameter: ParameterOut) -> Tuple[int, int]:
    return (parameter.order, parameter.id)


class ParameterCatalog:
    """Parameters (with their values) plus the category and supplier ids they can be resolved for.

    Without explicit ids every category and supplier counts as known.
    """

    def __init__(
        self,
        parameters: Iterable[ParameterOut],
        category_ids: Optional[Iterable[int]] = None,
        supplier_ids: Optional[Iterable[int]] = None,
    ):
        if parameters is None:
            raise TypeError("parameters must not be None")
        self._parameters: Dict[int, ParameterOut] = {p.id: p for p in parameters}
        self.category_ids = frozenset(category_ids) if category_ids is not None else None
        self.supplier_ids = frozenset(supplier_ids) if supplier_ids is not None else None

    def __len__(self) -> int:
        return len(self._parameters)

    def __contains__(self, parameter_id: int) -> bool:
        return parameter_id in self._parameters

    def get(self, parameter_id: int) -> Optional[ParameterOut]:
        return self._parameters.get(parameter_id)

    @property
    def parameters(self) -> List[ParameterOut]:
        return sorted(self._parameters.values(), key=parameter_sort_key)

    def global_parameters(self) -> List[ParameterOut]:
        return [p for p in self.parameters if p.is_global]

    def has_category(self, category_id: int) -> bool:
        return self.category_ids is None or category_id in self.category_ids

    def has_supplier(self, supplier_id: int) -> bool:
        return self.supplier_ids is None or supplier_id in self.supplier_ids

    def find_value(self, parameter_id: int, value: Union[int, str]) -> Optional[ParameterValueOut]:
        """Look up a value of an enumerable parameter by value id or by its (localized) text."""
        parameter = self.get(parameter_id)
        if parameter is None or parameter.kind not in ENUMERABLE_TYPES:
            return None
        return find_value_in(parameter.values, value)


def find_value_in(values: Iterable[ParameterValueOut], value: Union[int, str]) -> Optional[ParameterValueOut]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return next((v for v in values if v.id == value), None)
    if isinstance(value, str):
        return next((v for v in values if value in (v.value, v.value_localized)), None)
    return None


class CategoryBindings:
    """Category <-> parameter edges with their per-category flags."""

    def __init__(self, catalog: ParameterCatalog, bindings: Iterable[CategoryParameterOut]):
        if catalog is None or bindings is None:
            raise TypeError("catalog and bindings must not be None")
        self.catalog = catalog
        self._by_category: Dict[int, List[CategoryParameterOut]] = {}
        for binding in bindings:
            self._by_category.setdefault(binding.category_id, []).append(binding)

    def bindings_for(self, category_id: int) -> List[Tuple[ParameterOut, CategoryParameterOut]]:
        """Bound parameters of a category: system parameters first, then by binding order."""
        pairs = []
        for binding in self._by_category.get(category_id, []):
            parameter = self.catalog.get(binding.parameter_id)
            if parameter is None:
                logger.warning(
                    "Binding of category %s points to unknown parameter %s",
                    category_id, binding.parameter_id,
                )
                continue
            pairs.append((parameter, binding))

        pairs.sort(key=lambda pair: (not pair[0].is_system, pair[1].order, pair[0].id))
        return pairs

    def is_bound(self, category_id: int, parameter_id: int) -> bool:
        return any(b.parameter_id == parameter_id for b in self._by_category.get(category_id, []))
