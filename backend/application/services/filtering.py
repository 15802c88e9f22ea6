"""
Facet Filter Engine.

Narrows the product catalog with independent multi-select facets plus
free text, sorts, pages, and projects the facet values still available
in the filtered result.

Composition:
- each facet kind maps to one pure extractor returning the values a
  product exposes for that facet (lookup name and id);
- a facet matches when the product's values intersect its candidates;
- active facets are folded with AND; empty facets are skipped, values
  inside one facet are ORed;
- Code / Name / Name2 terms are case-insensitive substrings, ORed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple
import logging

from application.dto import (
    FilterCriteria,
    FilterItems,
    ProductGroupTypeDto,
    ProductListFilter,
)
from application.mappers import definition_to_dto, lookup_to_dto
from domain.catalog.aggregates import Product
from domain.catalog.graph import EntityGraph
from domain.shared.exceptions import UnknownFacetFieldException, ValidationException
from domain.shared.value_objects import LookupKind, SortDirection

logger = logging.getLogger(__name__)

Extractor = Callable[[EntityGraph, Product], FrozenSet[str]]
Predicate = Callable[[Product], bool]


class Facet(str, Enum):
    """Filterable facet kinds; values match FilterCriteria attribute names."""

    SELLER = "seller"
    BRAND = "brand"
    BUDGET_GROUP = "budget_group"
    SALES_GROUP = "sales_group"
    PRODUCTION_PLACE = "production_place"
    RAW_MATERIAL_GROUP = "raw_material_group"
    PACKAGING = "packaging"
    STORAGE_CONDITION = "storage_condition"
    SALES_BASED = "sales_based"
    CUTTING_TYPE = "cutting_type"
    QUALITY_TYPE = "quality_type"
    COLOR_TYPE = "color_type"
    PRODUCT_STATUS = "product_status"
    PRODUCT_GROUP = "product_group"
    SEMI_PRODUCT_GROUP = "semi_product_group"
    PRODUCT_GROUP_TYPE_DEFINITION = "product_group_type_definition"
    CREATED_BY = "created_by"
    UPDATED_BY = "updated_by"


# =============================================================================
# EXTRACTORS
# =============================================================================

def _lookup_values(kind: LookupKind) -> Extractor:
    def extract(graph: EntityGraph, product: Product) -> FrozenSet[str]:
        lookup = graph.lookup(kind, product.lookup_id(kind))
        if lookup is None:
            return frozenset()
        return frozenset((lookup.name, str(lookup.id)))
    return extract


def _definition_values(graph: EntityGraph, product: Product) -> FrozenSet[str]:
    values: Set[str] = set()
    for definition in graph.definitions_for_product(product.id):
        values.add(definition.name)
        values.add(str(definition.id))
    return frozenset(values)


def _user_values(attribute: str) -> Extractor:
    def extract(graph: EntityGraph, product: Product) -> FrozenSet[str]:
        user_id = getattr(product, attribute)
        return frozenset() if user_id is None else frozenset((str(user_id),))
    return extract


FACET_EXTRACTORS: Dict[Facet, Extractor] = {
    Facet.SELLER: _lookup_values(LookupKind.SELLER),
    Facet.BRAND: _lookup_values(LookupKind.BRAND),
    Facet.BUDGET_GROUP: _lookup_values(LookupKind.BUDGET_GROUP),
    Facet.SALES_GROUP: _lookup_values(LookupKind.SALES_GROUP),
    Facet.PRODUCTION_PLACE: _lookup_values(LookupKind.PRODUCTION_PLACE),
    Facet.RAW_MATERIAL_GROUP: _lookup_values(LookupKind.RAW_MATERIAL_GROUP),
    Facet.PACKAGING: _lookup_values(LookupKind.PACKAGING),
    Facet.STORAGE_CONDITION: _lookup_values(LookupKind.STORAGE_CONDITION),
    Facet.SALES_BASED: _lookup_values(LookupKind.SALES_BASED),
    Facet.CUTTING_TYPE: _lookup_values(LookupKind.CUTTING_TYPE),
    Facet.QUALITY_TYPE: _lookup_values(LookupKind.QUALITY_TYPE),
    Facet.COLOR_TYPE: _lookup_values(LookupKind.COLOR_TYPE),
    Facet.PRODUCT_STATUS: _lookup_values(LookupKind.PRODUCT_STATUS),
    Facet.PRODUCT_GROUP: _lookup_values(LookupKind.PRODUCT_GROUP),
    Facet.SEMI_PRODUCT_GROUP: _lookup_values(LookupKind.SEMI_PRODUCT_GROUP),
    Facet.PRODUCT_GROUP_TYPE_DEFINITION: _definition_values,
    Facet.CREATED_BY: _user_values("created_by"),
    Facet.UPDATED_BY: _user_values("updated_by"),
}

TEXT_FIELDS = ("code", "name", "name2")


# =============================================================================
# SORTING
# =============================================================================

SORT_KEYS: Dict[str, Callable[[EntityGraph, Product], Any]] = {
    "id": lambda graph, p: p.id,
    "code": lambda graph, p: p.code,
    "name": lambda graph, p: p.name,
    "name2": lambda graph, p: p.name2,
    "seller": lambda graph, p: graph.lookup_name(LookupKind.SELLER, p.seller_id),
    "brand": lambda graph, p: graph.lookup_name(LookupKind.BRAND, p.brand_id),
    "productgroup": lambda graph, p: graph.lookup_name(LookupKind.PRODUCT_GROUP, p.product_group_id),
    "storagecondition": lambda graph, p: graph.lookup_name(
        LookupKind.STORAGE_CONDITION, p.storage_condition_id
    ),
    "createddate": lambda graph, p: p.created_date,
    "updateddate": lambda graph, p: p.updated_date,
}


def _normalize_sort_field(order_by: str) -> str:
    return order_by.strip().replace("_", "").lower()


def _sortable(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


# =============================================================================
# PROJECTION
# =============================================================================

PROJECTED_LOOKUPS: Tuple[Tuple[str, LookupKind], ...] = (
    ("sellers", LookupKind.SELLER),
    ("brands", LookupKind.BRAND),
    ("product_groups", LookupKind.PRODUCT_GROUP),
    ("storage_conditions", LookupKind.STORAGE_CONDITION),
    ("product_types", LookupKind.PRODUCT_TYPE),
    ("sku_follow_types", LookupKind.SKU_FOLLOW_TYPE),
    ("sku_follow_units", LookupKind.SKU_FOLLOW_UNIT),
)
DEFINITIONS_KEY = "product_group_type_definitions"


def merge_projections(projections: Iterable[Dict[str, Set[int]]]) -> Dict[str, Set[int]]:
    """Union of partial facet projections."""
    merged: Dict[str, Set[int]] = {key: set() for key, _ in PROJECTED_LOOKUPS}
    merged[DEFINITIONS_KEY] = set()
    for projection in projections:
        for key, ids in projection.items():
            merged.setdefault(key, set()).update(ids)
    return merged


@dataclass
class FilterResult:
    """Sorted, filtered products; ``page`` is the requested slice."""

    matched: List[Product] = field(default_factory=list)
    page: List[Product] = field(default_factory=list)
    warnings: List[UnknownFacetFieldException] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.matched)


class FacetFilterEngine:
    """Facet filtering over the products of one EntityGraph."""

    def __init__(self, graph: EntityGraph):
        self.graph = graph

    # =========================================================================
    # PREDICATES
    # =========================================================================

    def predicates(self, criteria: FilterCriteria) -> List[Predicate]:
        """Active predicates of a request; empty facets contribute none."""
        active: List[Predicate] = []

        terms = []
        for field_name in TEXT_FIELDS:
            value = getattr(criteria, field_name)
            if value and value.strip():
                terms.append((field_name, value.strip().casefold()))
        if terms:
            active.append(self._text_predicate(terms))

        for facet, extractor in FACET_EXTRACTORS.items():
            candidates = frozenset(
                str(value).strip()
                for value in getattr(criteria, facet.value) or ()
                if value is not None and str(value).strip()
            )
            if candidates:
                active.append(self._facet_predicate(extractor, candidates))
        return active

    def _facet_predicate(self, extractor: Extractor, candidates: FrozenSet[str]) -> Predicate:
        graph = self.graph
        return lambda product: not candidates.isdisjoint(extractor(graph, product))

    @staticmethod
    def _text_predicate(terms: List[Tuple[str, str]]) -> Predicate:
        def matches(product: Product) -> bool:
            for field_name, term in terms:
                value = getattr(product, field_name)
                if value and term in value.casefold():
                    return True
            return False
        return matches

    def filter(
        self,
        criteria: FilterCriteria,
        products: Optional[Iterable[Product]] = None,
    ) -> List[Product]:
        """Products matching every active predicate, in id order."""
        active = self.predicates(criteria)
        candidates = self.graph.products if products is None else sorted(products, key=lambda p: p.id)
        return [product for product in candidates if all(pred(product) for pred in active)]

    # =========================================================================
    # ORDERING AND PAGING
    # =========================================================================

    def sort(
        self,
        products: Iterable[Product],
        order_by: Optional[str],
        order_type: Optional[str] = None,
    ) -> Tuple[List[Product], List[UnknownFacetFieldException]]:
        """
        Sort by the requested field with an ascending id tie-break.

        Products without a value for the field come last. An unknown
        field keeps id order and is reported as a warning.
        """
        ordered = sorted(products, key=lambda p: p.id)
        if not order_by or not order_by.strip():
            return ordered, []

        key_fn = SORT_KEYS.get(_normalize_sort_field(order_by))
        if key_fn is None:
            warning = UnknownFacetFieldException(order_by, SORT_KEYS.keys())
            logger.warning(f"{warning.message}; using default order")
            return ordered, [warning]

        direction = SortDirection.parse(order_type)
        keyed = [(key_fn(self.graph, product), product) for product in ordered]
        present = [(value, product) for value, product in keyed if value is not None]
        missing = [product for value, product in keyed if value is None]
        present.sort(key=lambda pair: _sortable(pair[0]), reverse=direction.is_descending)
        return [product for _, product in present] + missing, []

    @staticmethod
    def paginate(items: List[Any], offset: Optional[int] = None, limit: Optional[int] = None) -> List[Any]:
        offset = offset or 0
        if offset < 0:
            raise ValidationException("Offset cannot be negative", "offset", offset)
        if limit is None:
            return items[offset:]
        if limit < 0:
            raise ValidationException("Limit cannot be negative", "limit", limit)
        return items[offset:offset + limit]

    def query(
        self,
        criteria: Optional[FilterCriteria] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> FilterResult:
        """Filter, sort and page; the row count is taken before paging."""
        criteria = criteria or FilterCriteria()
        matched = self.filter(criteria)
        ordered, warnings = self.sort(matched, criteria.order_by, criteria.order_type)
        return FilterResult(
            matched=ordered,
            page=self.paginate(ordered, offset, limit),
            warnings=warnings,
        )

    # =========================================================================
    # AVAILABLE FACET VALUES
    # =========================================================================

    def project(self, products: Iterable[Product]) -> Dict[str, Set[int]]:
        """Distinct lookup ids referenced by ``products``, per facet list."""
        projection: Dict[str, Set[int]] = {key: set() for key, _ in PROJECTED_LOOKUPS}
        projection[DEFINITIONS_KEY] = set()
        for product in products:
            for key, kind in PROJECTED_LOOKUPS:
                lookup_id = product.lookup_id(kind)
                if lookup_id is not None:
                    projection[key].add(lookup_id)
            for link in self.graph.definition_links(product.id):
                projection[DEFINITIONS_KEY].add(link.product_group_type_definition_id)
        return projection

    def items_from_projection(self, projection: Dict[str, Set[int]]) -> FilterItems:
        """Resolve projected ids to lookup DTOs, ordered by name then id."""
        items = FilterItems()
        for key, kind in PROJECTED_LOOKUPS:
            lookups = [self.graph.lookup(kind, lookup_id) for lookup_id in projection.get(key, ())]
            lookups = sorted(
                (lookup for lookup in lookups if lookup is not None),
                key=lambda lookup: (lookup.name.casefold(), lookup.id),
            )
            setattr(items, key, [lookup_to_dto(lookup) for lookup in lookups])

        by_type: Dict[int, List] = {}
        for definition_id in projection.get(DEFINITIONS_KEY, ()):
            definition = self.graph.definition(definition_id)
            if definition is not None:
                by_type.setdefault(definition.product_group_type_id, []).append(definition)

        group_types = []
        for type_id, definitions in by_type.items():
            group_type = self.graph.lookup(LookupKind.PRODUCT_GROUP_TYPE, type_id)
            if group_type is None:
                continue
            definitions.sort(key=lambda d: (d.name.casefold(), d.id))
            group_types.append(ProductGroupTypeDto(
                id=group_type.id,
                name=group_type.name,
                definitions=[definition_to_dto(d) for d in definitions],
            ))
        items.product_group_types = sorted(group_types, key=lambda t: (t.name.casefold(), t.id))
        return items

    def available_items(self, products: Iterable[Product]) -> FilterItems:
        return self.items_from_projection(self.project(products))

    # =========================================================================
    # EXACT-ID LIST FILTER
    # =========================================================================

    def filtered_list(self, list_filter: ProductListFilter, default_limit: int = 10) -> List[Product]:
        """
        Exact-id filtering in id order.

        ``code_or_name`` applies only when longer than two characters.
        """
        checks: List[Predicate] = []
        exact = (
            ("seller_id", list_filter.seller_id),
            ("brand_id", list_filter.brand_id),
            ("product_group_id", list_filter.product_group_id),
            ("storage_condition_id", list_filter.storage_condition_id),
            ("product_type_id", list_filter.product_type_id),
            ("sku_follow_type_id", list_filter.sku_follow_type_id),
            ("sku_follow_unit_id", list_filter.sku_follow_unit_id),
        )
        for attribute, wanted in exact:
            if wanted is not None:
                checks.append(lambda p, a=attribute, w=wanted: getattr(p, a) == w)

        graph = self.graph
        if list_filter.product_group_type_id is not None:
            type_id = list_filter.product_group_type_id
            checks.append(lambda p: any(
                link.product_group_type_id == type_id for link in graph.definition_links(p.id)
            ))
        if list_filter.product_group_type_definition_id is not None:
            definition_id = list_filter.product_group_type_definition_id
            checks.append(lambda p: any(
                link.product_group_type_definition_id == definition_id
                for link in graph.definition_links(p.id)
            ))

        term = (list_filter.code_or_name or "").strip()
        if len(term) > 2:
            checks.append(self._text_predicate([("code", term.casefold()), ("name", term.casefold())]))

        matched = [p for p in self.graph.products if all(check(p) for check in checks)]
        limit = list_filter.limit if list_filter.limit is not None else default_limit
        return self.paginate(matched, list_filter.offset, limit)

