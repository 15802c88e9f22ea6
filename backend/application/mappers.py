"""
Entity to DTO conversion.

Explicit, hand-written converters; one function per shape.
"""

from __future__ import annotations
from typing import List, Optional

from domain.bom.entities import Norm, Recipe, Spec
from domain.bom.resolver import Resolution
from domain.catalog.aggregates import Good, Product, RawMaterial, SemiProduct
from domain.catalog.entities import Lookup, ProductGroupTypeDefinition
from domain.catalog.graph import EntityGraph
from domain.inventory.aggregator import StockFigures
from domain.shared.value_objects import ItemKind, LookupKind

from .dto import (
    BomDto,
    BomLineDto,
    DetailsDto,
    DocumentDetailRowDto,
    LeafTotalDto,
    LookupDto,
    OwnerDto,
    ProductGroupTypeDefinitionLinkDto,
    ProductSummary,
    ProductWithDetails,
    RawMaterialDto,
    RecipeDetailRowDto,
    SemiProductDto,
    StockDto,
)


def lookup_to_dto(lookup: Optional[Lookup]) -> Optional[LookupDto]:
    if lookup is None:
        return None
    return LookupDto(id=lookup.id, name=lookup.name, code=lookup.code)


def definition_to_dto(definition: ProductGroupTypeDefinition) -> LookupDto:
    return LookupDto(id=definition.id, name=definition.name)


def product_to_summary(product: Product) -> ProductSummary:
    return ProductSummary(id=product.id, code=product.code, name=product.name)


def product_to_details(graph: EntityGraph, product: Product) -> ProductWithDetails:
    """Product row with its lookups and group type definitions resolved."""
    links = []
    for link in graph.definition_links(product.id):
        definition = graph.definition(link.product_group_type_definition_id)
        links.append(ProductGroupTypeDefinitionLinkDto(
            product_group_type_id=link.product_group_type_id,
            product_group_type_name=graph.lookup_name(
                LookupKind.PRODUCT_GROUP_TYPE, link.product_group_type_id
            ),
            product_group_type_definition_id=link.product_group_type_definition_id,
            product_group_type_definition_name=definition.name if definition else None,
        ))

    return ProductWithDetails(
        id=product.id,
        code=product.code,
        code2=product.code2,
        code3=product.code3,
        name=product.name,
        name2=product.name2,
        seller_id=product.seller_id,
        product_group_id=product.product_group_id,
        brand_id=product.brand_id,
        product_type_id=product.product_type_id,
        sku_follow_type_id=product.sku_follow_type_id,
        sku_follow_unit_id=product.sku_follow_unit_id,
        storage_condition_id=product.storage_condition_id,
        weight=product.weight,
        volume=product.volume,
        density=product.density,
        width=product.width,
        length=product.length,
        height=product.height,
        critical_stock_amount=product.critical_stock_amount,
        shelflife_limit=product.shelflife_limit,
        max_stack=product.max_stack,
        qty_in_box=product.qty_in_box,
        stock_tracking=product.stock_tracking,
        bbd_tracking=product.bbd_tracking,
        lot_tracking=product.lot_tracking,
        is_blocked=product.is_blocked,
        is_setted_product=product.is_setted_product,
        created_by=product.created_by,
        updated_by=product.updated_by,
        created_date=product.created_date,
        updated_date=product.updated_date,
        seller=lookup_to_dto(graph.lookup(LookupKind.SELLER, product.seller_id)),
        product_group=lookup_to_dto(graph.lookup(LookupKind.PRODUCT_GROUP, product.product_group_id)),
        product_type=lookup_to_dto(graph.lookup(LookupKind.PRODUCT_TYPE, product.product_type_id)),
        brand=lookup_to_dto(graph.lookup(LookupKind.BRAND, product.brand_id)),
        sku_follow_type=lookup_to_dto(graph.lookup(LookupKind.SKU_FOLLOW_TYPE, product.sku_follow_type_id)),
        sku_follow_unit=lookup_to_dto(graph.lookup(LookupKind.SKU_FOLLOW_UNIT, product.sku_follow_unit_id)),
        storage_condition=lookup_to_dto(
            graph.lookup(LookupKind.STORAGE_CONDITION, product.storage_condition_id)
        ),
        product_group_type_definitions=links,
    )


def semi_product_to_dto(graph: EntityGraph, semi_product: SemiProduct) -> SemiProductDto:
    return SemiProductDto(
        id=semi_product.id,
        code=semi_product.code,
        code2=semi_product.code2,
        code3=semi_product.code3,
        old_code=semi_product.old_code,
        name=semi_product.name,
        semi_product_group_id=semi_product.semi_product_group_id,
        semi_product_group_name=graph.lookup_name(
            LookupKind.SEMI_PRODUCT_GROUP, semi_product.semi_product_group_id
        ),
    )


def raw_material_to_dto(graph: EntityGraph, raw_material: RawMaterial) -> RawMaterialDto:
    return RawMaterialDto(
        id=raw_material.id,
        code=raw_material.code,
        code2=raw_material.code2,
        code3=raw_material.code3,
        name=raw_material.name,
        raw_material_group_id=raw_material.raw_material_group_id,
        raw_material_group_name=graph.lookup_name(
            LookupKind.RAW_MATERIAL_GROUP, raw_material.raw_material_group_id
        ),
    )


def figures_to_stock_dto(figures: StockFigures) -> StockDto:
    return StockDto(
        product_id=figures.owner_id if figures.owner_kind is ItemKind.PRODUCT else None,
        semi_product_id=figures.owner_id if figures.owner_kind is ItemKind.SEMI_PRODUCT else None,
        code1=figures.code1,
        code2=figures.code2,
        code3=figures.code3,
        code1_stock=figures.code1_stock,
        code2_stock=figures.code2_stock,
        code3_stock=figures.code3_stock,
        total_stock=figures.total_stock,
        total_stock_in_box=figures.total_stock_in_box,
        total_product_stock=figures.total_product_stock,
        total_product_stock_in_box=figures.total_product_stock_in_box,
        grand_total_in_box=figures.grand_total_in_box,
    )


def resolution_to_dto(resolution: Resolution) -> BomDto:
    return BomDto(
        root_kind=resolution.root_kind.value,
        root_id=resolution.root_id,
        quantity=resolution.quantity,
        single_level=resolution.single_level,
        lines=[
            BomLineDto(
                kind=line.kind.value,
                item_id=line.item_id,
                code=line.code,
                name=line.name,
                amount=line.amount,
                unit=line.unit,
                level=line.level,
                parent_kind=line.parent_kind.value,
                parent_id=line.parent_id,
                recipe_detail_id=line.recipe_detail_id,
            )
            for line in resolution.lines
        ],
        leaf_totals=[
            LeafTotalDto(raw_material_id=raw_material_id, amount=quantity.value, unit=unit)
            for (raw_material_id, unit), quantity in resolution.leaf_totals().items()
        ],
        issues=[issue.as_dict() for issue in resolution.issues],
    )


def owner_to_dto(graph: EntityGraph, kind: ItemKind, item_id: int) -> OwnerDto:
    good: Optional[Good] = graph.good(kind, item_id)
    return OwnerDto(
        kind=kind.value,
        id=item_id,
        code=good.code if good else None,
        name=good.name if good else None,
    )


# =============================================================================
# DOCUMENTS
# =============================================================================

def recipe_to_details(graph: EntityGraph, recipe: Recipe) -> DetailsDto:
    rows: List[RecipeDetailRowDto] = []
    for detail in graph.recipe_details(recipe.id):
        raw_material = (
            graph.raw_material(detail.raw_material_id)
            if detail.raw_material_id is not None else None
        )
        semi_product = (
            graph.semi_product(detail.semi_product_id)
            if detail.semi_product_id is not None else None
        )
        rows.append(RecipeDetailRowDto(
            id=detail.id,
            raw_material_id=detail.raw_material_id,
            raw_material_name=raw_material.name if raw_material else None,
            semi_product_id=detail.semi_product_id,
            semi_product_name=semi_product.name if semi_product else None,
            amount=detail.amount,
            unit=detail.unit,
            package_code=detail.package_code,
            aux_material_code=detail.aux_material_code,
        ))

    product = graph.product(recipe.product_id) if recipe.product_id is not None else None
    owner_semi = (
        graph.semi_product(recipe.semi_product_id)
        if recipe.semi_product_id is not None else None
    )
    return DetailsDto(
        id=recipe.id,
        name=recipe.name,
        product_code=product.code if product else None,
        product_name=product.name if product else None,
        product_id=recipe.product_id,
        details=rows,
        semi_product_id=recipe.semi_product_id,
        semi_product_name=owner_semi.name if owner_semi else None,
    )


def _document_to_details(graph: EntityGraph, document, rows) -> DetailsDto:
    product = graph.product(document.product_id)
    return DetailsDto(
        id=document.id,
        name=document.name,
        product_code=product.code if product else None,
        product_name=product.name if product else None,
        product_id=document.product_id,
        details=[
            DocumentDetailRowDto(id=row.id, title=row.title, description=row.description)
            for row in rows
        ],
    )


def norm_to_details(graph: EntityGraph, norm: Norm) -> DetailsDto:
    return _document_to_details(graph, norm, graph.norm_details(norm.id))


def spec_to_details(graph: EntityGraph, spec: Spec) -> DetailsDto:
    return _document_to_details(graph, spec, graph.spec_details(spec.id))
