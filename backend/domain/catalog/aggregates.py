"""
Catalog Domain - Goods.

Product, SemiProduct and RawMaterial are the nodes of the composition
graph. Each good can be tracked in up to three ERP ledgers, identified
by ``code``, ``code2`` and ``code3``. The engine treats them read-only.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional

from domain.shared.base_entity import AuditableEntity
from domain.shared.value_objects import ItemKind, LookupKind


@dataclass(eq=False, kw_only=True)
class Good(AuditableEntity):
    """Common shape of every node in the composition graph."""

    kind = ItemKind.PRODUCT

    name: str
    code: Optional[str] = None
    code2: Optional[str] = None
    code3: Optional[str] = None

    @property
    def ledger_codes(self) -> tuple:
        return (self.code, self.code2, self.code3)

    @property
    def node(self) -> tuple:
        """Graph address of this good."""
        return (self.kind, self.id)


@dataclass(eq=False, kw_only=True)
class Product(Good):
    """
    Finished good.

    Carries one foreign key per classification table; ``LOOKUP_FIELDS``
    maps each lookup kind to the attribute holding the reference.
    """

    kind = ItemKind.PRODUCT

    name2: Optional[str] = None

    # Classification
    seller_id: Optional[int] = None
    brand_id: Optional[int] = None
    budget_group_id: Optional[int] = None
    sales_group_id: Optional[int] = None
    production_place_id: Optional[int] = None
    raw_material_group_id: Optional[int] = None
    packaging_id: Optional[int] = None
    storage_condition_id: Optional[int] = None
    sales_based_id: Optional[int] = None
    cutting_type_id: Optional[int] = None
    quality_type_id: Optional[int] = None
    color_type_id: Optional[int] = None
    product_status_id: Optional[int] = None
    product_group_id: Optional[int] = None
    semi_product_group_id: Optional[int] = None
    product_type_id: Optional[int] = None
    sku_follow_type_id: Optional[int] = None
    sku_follow_unit_id: Optional[int] = None

    # Physical attributes
    weight: Optional[float] = None
    volume: Optional[float] = None
    density: Optional[float] = None
    width: Optional[float] = None
    length: Optional[float] = None
    height: Optional[float] = None
    critical_stock_amount: Optional[float] = None
    shelflife_limit: Optional[float] = None
    max_stack: Optional[int] = None

    # Packaging factor: units per box
    qty_in_box: Optional[float] = None

    # Tracking and status flags
    stock_tracking: Optional[bool] = None
    bbd_tracking: Optional[bool] = None
    lot_tracking: Optional[bool] = None
    is_blocked: Optional[bool] = None
    is_setted_product: Optional[bool] = None

    LOOKUP_FIELDS = {
        LookupKind.SELLER: "seller_id",
        LookupKind.BRAND: "brand_id",
        LookupKind.BUDGET_GROUP: "budget_group_id",
        LookupKind.SALES_GROUP: "sales_group_id",
        LookupKind.PRODUCTION_PLACE: "production_place_id",
        LookupKind.RAW_MATERIAL_GROUP: "raw_material_group_id",
        LookupKind.PACKAGING: "packaging_id",
        LookupKind.STORAGE_CONDITION: "storage_condition_id",
        LookupKind.SALES_BASED: "sales_based_id",
        LookupKind.CUTTING_TYPE: "cutting_type_id",
        LookupKind.QUALITY_TYPE: "quality_type_id",
        LookupKind.COLOR_TYPE: "color_type_id",
        LookupKind.PRODUCT_STATUS: "product_status_id",
        LookupKind.PRODUCT_GROUP: "product_group_id",
        LookupKind.SEMI_PRODUCT_GROUP: "semi_product_group_id",
        LookupKind.PRODUCT_TYPE: "product_type_id",
        LookupKind.SKU_FOLLOW_TYPE: "sku_follow_type_id",
        LookupKind.SKU_FOLLOW_UNIT: "sku_follow_unit_id",
    }

    def lookup_id(self, kind: LookupKind) -> Optional[int]:
        """Foreign key of this product into the ``kind`` table."""
        field_name = self.LOOKUP_FIELDS.get(kind)
        if field_name is None:
            return None
        return getattr(self, field_name)

    @property
    def lookup_ids(self) -> Dict[LookupKind, Optional[int]]:
        return {kind: getattr(self, name) for kind, name in self.LOOKUP_FIELDS.items()}

    @property
    def box_factor(self) -> float:
        """Units-to-box factor; an unknown factor counts as zero."""
        return float(self.qty_in_box or 0)


@dataclass(eq=False, kw_only=True)
class SemiProduct(Good):
    """Intermediate good; may own a recipe of its own."""

    kind = ItemKind.SEMI_PRODUCT

    old_code: Optional[str] = None
    semi_product_group_id: Optional[int] = None

    @property
    def box_factor(self) -> float:
        """Semi product stock is already kept in box units."""
        return 1.0


@dataclass(eq=False, kw_only=True)
class RawMaterial(Good):
    """Leaf good; never owns a recipe."""

    kind = ItemKind.RAW_MATERIAL

    raw_material_group_id: Optional[int] = None
