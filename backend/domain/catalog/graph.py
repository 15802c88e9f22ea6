"""
Catalog Domain - Entity Graph.

Immutable, per-request view over the catalog. Every node is addressed by
an integer id and resolved through an index owned by the graph; there
are no live back-pointers between entities. Reverse relations
(where-used, consumers, group members) are derived indexes built once
when the graph is loaded.
"""

from __future__ import annotations
from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from domain.bom.entities import (
    Norm,
    NormDetail,
    Recipe,
    RecipeDetail,
    Spec,
    SpecDetail,
)
from domain.inventory.entities import Stock
from domain.shared.exceptions import EntityNotFoundException, InvalidRecipeDetailException
from domain.shared.value_objects import ItemKind, LookupKind

from .aggregates import Good, Product, RawMaterial, SemiProduct
from .entities import Lookup, ProductGroupTypeDefinition, ProductToProductGroupTypeDefinition
from .repositories import CatalogRepository

logger = logging.getLogger(__name__)

Node = Tuple[ItemKind, int]


def _by_id(rows: Iterable) -> Dict[int, object]:
    return {row.id: row for row in sorted(rows, key=lambda row: row.id)}


def _grouped(rows: Iterable, key) -> Dict[int, List]:
    grouped = defaultdict(list)
    for row in sorted(rows, key=lambda row: row.id):
        grouped[key(row)].append(row)
    return dict(grouped)


class EntityGraph:
    """
    Id-indexed catalog snapshot for one request.

    Built either directly from row collections or with ``load`` from a
    CatalogRepository. Inputs are never mutated after construction.
    """

    def __init__(
        self,
        *,
        products: Iterable[Product] = (),
        semi_products: Iterable[SemiProduct] = (),
        raw_materials: Iterable[RawMaterial] = (),
        lookups: Iterable[Lookup] = (),
        definitions: Iterable[ProductGroupTypeDefinition] = (),
        definition_links: Iterable[ProductToProductGroupTypeDefinition] = (),
        recipes: Iterable[Recipe] = (),
        recipe_details: Iterable[RecipeDetail] = (),
        norms: Iterable[Norm] = (),
        norm_details: Iterable[NormDetail] = (),
        specs: Iterable[Spec] = (),
        spec_details: Iterable[SpecDetail] = (),
        stocks: Iterable[Stock] = (),
    ):
        self._goods: Dict[ItemKind, Dict[int, Good]] = {
            ItemKind.PRODUCT: _by_id(products),
            ItemKind.SEMI_PRODUCT: _by_id(semi_products),
            ItemKind.RAW_MATERIAL: _by_id(raw_materials),
        }
        self._lookups: Dict[Tuple[LookupKind, int], Lookup] = {
            (lookup.kind, lookup.id): lookup
            for lookup in sorted(lookups, key=lambda row: (row.kind.value, row.id))
        }
        self._definitions = _by_id(definitions)
        self._links_by_product = _grouped(definition_links, lambda link: link.product_id)

        self._recipes = _by_id(recipes)
        self._recipe_by_owner: Dict[Node, Recipe] = {}
        for recipe in self._recipes.values():
            current = self._recipe_by_owner.get(recipe.owner)
            if current is not None:
                logger.warning(
                    f"{recipe.owner[0].label} {recipe.owner[1]} has several recipes; "
                    f"using recipe {recipe.id} instead of {current.id}"
                )
            self._recipe_by_owner[recipe.owner] = recipe
        self._details_by_recipe = _grouped(recipe_details, lambda detail: detail.recipe_id)

        self._norms = _by_id(norms)
        self._norm_details = _grouped(norm_details, lambda detail: detail.norm_id)
        self._specs = _by_id(specs)
        self._spec_details = _grouped(spec_details, lambda detail: detail.spec_id)

        self._stocks: Dict[Node, Stock] = {stock.owner: stock for stock in stocks}

        self._where_used = self._build_where_used()

    # =========================================================================
    # LOADING
    # =========================================================================

    @classmethod
    def load(cls, repository: CatalogRepository, company_id: Optional[int] = None) -> EntityGraph:
        """
        Build a graph from the active rows of one company.

        ``company_id=None`` loads every company.
        """

        def visible(row) -> bool:
            if not getattr(row, "status", True):
                return False
            return company_id is None or getattr(row, "company_id", None) in (None, company_id)

        def fetch(entity_type):
            return repository.fetch_where(entity_type, visible)

        graph = cls(
            products=fetch(Product),
            semi_products=fetch(SemiProduct),
            raw_materials=fetch(RawMaterial),
            lookups=fetch(Lookup),
            definitions=fetch(ProductGroupTypeDefinition),
            definition_links=fetch(ProductToProductGroupTypeDefinition),
            recipes=fetch(Recipe),
            recipe_details=fetch(RecipeDetail),
            norms=fetch(Norm),
            norm_details=fetch(NormDetail),
            specs=fetch(Spec),
            spec_details=fetch(SpecDetail),
            stocks=fetch(Stock),
        )
        logger.debug(
            f"Loaded entity graph for company {company_id}: "
            f"{len(graph.products)} products, {len(graph.semi_products)} semi products, "
            f"{len(graph.raw_materials)} raw materials"
        )
        return graph

    def _build_where_used(self) -> Dict[Node, List[Node]]:
        index: Dict[Node, List[Node]] = defaultdict(list)
        for recipe_id, details in self._details_by_recipe.items():
            recipe = self._recipes.get(recipe_id)
            if recipe is None:
                continue
            for detail in details:
                try:
                    ingredient = detail.ingredient
                except InvalidRecipeDetailException as exc:
                    logger.debug(f"Skipping recipe detail in where-used index: {exc.message}")
                    continue
                if recipe.owner not in index[ingredient]:
                    index[ingredient].append(recipe.owner)
        return {node: sorted(owners, key=lambda owner: (owner[0].value, owner[1]))
                for node, owners in index.items()}

    # =========================================================================
    # GOODS
    # =========================================================================

    @property
    def products(self) -> List[Product]:
        return list(self._goods[ItemKind.PRODUCT].values())

    @property
    def semi_products(self) -> List[SemiProduct]:
        return list(self._goods[ItemKind.SEMI_PRODUCT].values())

    @property
    def raw_materials(self) -> List[RawMaterial]:
        return list(self._goods[ItemKind.RAW_MATERIAL].values())

    def good(self, kind: ItemKind, item_id: int) -> Optional[Good]:
        return self._goods[kind].get(item_id)

    def require(self, kind: ItemKind, item_id: int) -> Good:
        """Get a good or raise EntityNotFoundException."""
        good = self.good(kind, item_id)
        if good is None:
            raise EntityNotFoundException(kind.label, item_id)
        return good

    def product(self, product_id: int) -> Optional[Product]:
        return self._goods[ItemKind.PRODUCT].get(product_id)

    def semi_product(self, semi_product_id: int) -> Optional[SemiProduct]:
        return self._goods[ItemKind.SEMI_PRODUCT].get(semi_product_id)

    def raw_material(self, raw_material_id: int) -> Optional[RawMaterial]:
        return self._goods[ItemKind.RAW_MATERIAL].get(raw_material_id)

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def lookup(self, kind: LookupKind, lookup_id: Optional[int]) -> Optional[Lookup]:
        if lookup_id is None:
            return None
        return self._lookups.get((kind, lookup_id))

    def lookup_name(self, kind: LookupKind, lookup_id: Optional[int]) -> Optional[str]:
        lookup = self.lookup(kind, lookup_id)
        return lookup.name if lookup else None

    def require_lookup(self, kind: LookupKind, lookup_id: int) -> Lookup:
        lookup = self.lookup(kind, lookup_id)
        if lookup is None:
            raise EntityNotFoundException(kind.value, lookup_id)
        return lookup

    def lookups_of(self, kind: LookupKind) -> List[Lookup]:
        return [lookup for (lookup_kind, _), lookup in self._lookups.items() if lookup_kind == kind]

    def definition(self, definition_id: int) -> Optional[ProductGroupTypeDefinition]:
        return self._definitions.get(definition_id)

    def definition_links(self, product_id: int) -> List[ProductToProductGroupTypeDefinition]:
        return list(self._links_by_product.get(product_id, ()))

    def definitions_for_product(self, product_id: int) -> List[ProductGroupTypeDefinition]:
        """Group type definitions assigned to a product; dangling links are ignored."""
        definitions = []
        for link in self._links_by_product.get(product_id, ()):
            definition = self._definitions.get(link.product_group_type_definition_id)
            if definition is not None:
                definitions.append(definition)
        return definitions

    def raw_material_group_members(self, group_id: int) -> List[RawMaterial]:
        return [rm for rm in self.raw_materials if rm.raw_material_group_id == group_id]

    def semi_product_group_members(self, group_id: int) -> List[SemiProduct]:
        return [sp for sp in self.semi_products if sp.semi_product_group_id == group_id]

    # =========================================================================
    # COMPOSITION
    # =========================================================================

    @property
    def recipes(self) -> List[Recipe]:
        return list(self._recipes.values())

    def recipe(self, recipe_id: int) -> Optional[Recipe]:
        return self._recipes.get(recipe_id)

    def recipe_for(self, kind: ItemKind, item_id: int) -> Optional[Recipe]:
        """The recipe owned by a good, or None for a leaf good."""
        return self._recipe_by_owner.get((kind, item_id))

    def recipe_details(self, recipe_id: int) -> List[RecipeDetail]:
        return list(self._details_by_recipe.get(recipe_id, ()))

    def where_used(self, kind: ItemKind, item_id: int) -> List[Node]:
        """Owners whose recipe references the good directly."""
        return list(self._where_used.get((kind, item_id), ()))

    def consumers_of(self, semi_product_id: int) -> List[Product]:
        """Products made directly from a semi product, in id order."""
        consumers = []
        for owner_kind, owner_id in self.where_used(ItemKind.SEMI_PRODUCT, semi_product_id):
            if owner_kind is ItemKind.PRODUCT:
                product = self.product(owner_id)
                if product is not None:
                    consumers.append(product)
        return consumers

    # =========================================================================
    # DOCUMENTS
    # =========================================================================

    @property
    def norms(self) -> List[Norm]:
        return list(self._norms.values())

    def norm(self, norm_id: int) -> Optional[Norm]:
        return self._norms.get(norm_id)

    def norm_details(self, norm_id: int) -> List[NormDetail]:
        return list(self._norm_details.get(norm_id, ()))

    @property
    def specs(self) -> List[Spec]:
        return list(self._specs.values())

    def spec(self, spec_id: int) -> Optional[Spec]:
        return self._specs.get(spec_id)

    def spec_details(self, spec_id: int) -> List[SpecDetail]:
        return list(self._spec_details.get(spec_id, ()))

    # =========================================================================
    # STOCK
    # =========================================================================

    def stock_for(self, kind: ItemKind, item_id: int) -> Optional[Stock]:
        return self._stocks.get((kind, item_id))

    @property
    def stocks(self) -> Mapping[Node, Stock]:
        return MappingProxyType(self._stocks)
