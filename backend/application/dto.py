"""
Data Transfer Objects.

Request and response shapes of the catalog query service. Field lists
follow the external interface of the catalog API, in snake_case.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional


# =============================================================================
# REQUESTS
# =============================================================================

FACET_FIELDS = (
    "seller",
    "brand",
    "budget_group",
    "sales_group",
    "production_place",
    "raw_material_group",
    "packaging",
    "storage_condition",
    "sales_based",
    "cutting_type",
    "quality_type",
    "color_type",
    "product_status",
    "product_group",
    "semi_product_group",
    "product_group_type_definition",
    "created_by",
    "updated_by",
)


@dataclass
class FilterCriteria:
    """
    Multi-facet filter request.

    Every facet is a list of candidate values; an empty list leaves the
    facet unconstrained.
    """

    code: Optional[str] = None
    name: Optional[str] = None
    name2: Optional[str] = None
    seller: List[str] = field(default_factory=list)
    brand: List[str] = field(default_factory=list)
    budget_group: List[str] = field(default_factory=list)
    sales_group: List[str] = field(default_factory=list)
    production_place: List[str] = field(default_factory=list)
    raw_material_group: List[str] = field(default_factory=list)
    packaging: List[str] = field(default_factory=list)
    storage_condition: List[str] = field(default_factory=list)
    sales_based: List[str] = field(default_factory=list)
    cutting_type: List[str] = field(default_factory=list)
    quality_type: List[str] = field(default_factory=list)
    color_type: List[str] = field(default_factory=list)
    product_status: List[str] = field(default_factory=list)
    product_group: List[str] = field(default_factory=list)
    semi_product_group: List[str] = field(default_factory=list)
    product_group_type_definition: List[str] = field(default_factory=list)
    created_by: List[str] = field(default_factory=list)
    updated_by: List[str] = field(default_factory=list)
    order_by: Optional[str] = None
    order_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FilterCriteria:
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        for facet in FACET_FIELDS:
            if values.get(facet) is None:
                values.pop(facet, None)
            else:
                values[facet] = [str(v) for v in values[facet]]
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ProductListFilter:
    """Exact-id product list filter."""

    product_group_type_id: Optional[int] = None
    product_group_type_definition_id: Optional[int] = None
    seller_id: Optional[int] = None
    brand_id: Optional[int] = None
    product_group_id: Optional[int] = None
    storage_condition_id: Optional[int] = None
    product_type_id: Optional[int] = None
    sku_follow_type_id: Optional[int] = None
    sku_follow_unit_id: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    code_or_name: Optional[str] = None


# =============================================================================
# LOOKUPS
# =============================================================================

@dataclass
class LookupDto:
    id: int
    name: str
    code: Optional[str] = None


@dataclass
class ProductGroupTypeDto:
    id: int
    name: str
    definitions: List[LookupDto] = field(default_factory=list)


@dataclass
class FilterItems:
    """Facet values available in the currently filtered result."""

    product_group_types: List[ProductGroupTypeDto] = field(default_factory=list)
    sellers: List[LookupDto] = field(default_factory=list)
    brands: List[LookupDto] = field(default_factory=list)
    product_groups: List[LookupDto] = field(default_factory=list)
    storage_conditions: List[LookupDto] = field(default_factory=list)
    product_types: List[LookupDto] = field(default_factory=list)
    sku_follow_types: List[LookupDto] = field(default_factory=list)
    sku_follow_units: List[LookupDto] = field(default_factory=list)


@dataclass
class DashboardCounts:
    products: int = 0
    semi_products: int = 0
    raw_materials: int = 0
    product_groups: int = 0
    semi_product_groups: int = 0
    raw_material_groups: int = 0


# =============================================================================
# STOCK AND BOM
# =============================================================================

@dataclass
class StockDto:
    product_id: Optional[int] = None
    semi_product_id: Optional[int] = None
    code1: Optional[str] = None
    code2: Optional[str] = None
    code3: Optional[str] = None
    code1_stock: Optional[int] = None
    code2_stock: Optional[int] = None
    code3_stock: Optional[int] = None
    total_stock: int = 0
    total_stock_in_box: Optional[float] = None
    total_product_stock: Optional[int] = None
    total_product_stock_in_box: Optional[float] = None
    grand_total_in_box: Optional[float] = None


@dataclass
class BomLineDto:
    kind: str
    item_id: int
    code: Optional[str]
    name: str
    amount: Decimal
    unit: str
    level: int
    parent_kind: str
    parent_id: int
    recipe_detail_id: int


@dataclass
class LeafTotalDto:
    raw_material_id: int
    amount: Decimal
    unit: str


@dataclass
class BomDto:
    root_kind: str
    root_id: int
    quantity: Decimal
    single_level: bool
    lines: List[BomLineDto] = field(default_factory=list)
    leaf_totals: List[LeafTotalDto] = field(default_factory=list)
    issues: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class OwnerDto:
    kind: str
    id: int
    code: Optional[str]
    name: Optional[str]


@dataclass
class WhereUsedDto:
    kind: str
    item_id: int
    owners: List[OwnerDto] = field(default_factory=list)


# =============================================================================
# PRODUCTS
# =============================================================================

@dataclass
class ProductSummary:
    """Lightweight product row of a result page."""

    id: int
    code: Optional[str]
    name: str


@dataclass
class ProductGroupTypeDefinitionLinkDto:
    product_group_type_id: int
    product_group_type_name: Optional[str]
    product_group_type_definition_id: int
    product_group_type_definition_name: Optional[str]


@dataclass
class ProductWithDetails:
    id: int
    code: Optional[str]
    code2: Optional[str]
    code3: Optional[str]
    name: str
    name2: Optional[str]
    seller_id: Optional[int] = None
    product_group_id: Optional[int] = None
    brand_id: Optional[int] = None
    product_type_id: Optional[int] = None
    sku_follow_type_id: Optional[int] = None
    sku_follow_unit_id: Optional[int] = None
    storage_condition_id: Optional[int] = None
    weight: Optional[float] = None
    volume: Optional[float] = None
    density: Optional[float] = None
    width: Optional[float] = None
    length: Optional[float] = None
    height: Optional[float] = None
    critical_stock_amount: Optional[float] = None
    shelflife_limit: Optional[float] = None
    max_stack: Optional[int] = None
    qty_in_box: Optional[float] = None
    stock_tracking: Optional[bool] = None
    bbd_tracking: Optional[bool] = None
    lot_tracking: Optional[bool] = None
    is_blocked: Optional[bool] = None
    is_setted_product: Optional[bool] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    seller: Optional[LookupDto] = None
    product_group: Optional[LookupDto] = None
    product_type: Optional[LookupDto] = None
    brand: Optional[LookupDto] = None
    sku_follow_type: Optional[LookupDto] = None
    sku_follow_unit: Optional[LookupDto] = None
    storage_condition: Optional[LookupDto] = None
    product_group_type_definitions: List[ProductGroupTypeDefinitionLinkDto] = field(default_factory=list)
    bom: Optional[BomDto] = None
    stock: Optional[StockDto] = None


@dataclass
class WebFilterResponse:
    products_with_details: List[ProductWithDetails] = field(default_factory=list)
    products: List[ProductSummary] = field(default_factory=list)
    row_count: int = 0


@dataclass
class ProductDetail:
    product: ProductWithDetails
    bom: BomDto
    stock: StockDto


@dataclass
class ProductStockDto:
    product: ProductSummary
    qty_in_box: Optional[float]
    stock: StockDto


# =============================================================================
# SEMI PRODUCTS AND RAW MATERIALS
# =============================================================================

@dataclass
class SemiProductDto:
    id: int
    code: Optional[str]
    code2: Optional[str]
    code3: Optional[str]
    old_code: Optional[str]
    name: str
    semi_product_group_id: Optional[int]
    semi_product_group_name: Optional[str]


@dataclass
class SemiProductReport:
    semi_product: SemiProductDto
    stock: StockDto
    bom: Optional[BomDto] = None
    products: List[ProductStockDto] = field(default_factory=list)
    issues: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class RawMaterialDto:
    id: int
    code: Optional[str]
    code2: Optional[str]
    code3: Optional[str]
    name: str
    raw_material_group_id: Optional[int]
    raw_material_group_name: Optional[str]


@dataclass
class RawMaterialReport:
    raw_material: RawMaterialDto
    stock: StockDto
    semi_products: List[SemiProductReport] = field(default_factory=list)
    issues: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class GroupMemberDto:
    id: int
    code: Optional[str]
    name: str
    stock: StockDto


@dataclass
class GroupReport:
    id: int
    name: str
    code: Optional[str]
    kind: str
    total_stock: int
    members: List[GroupMemberDto] = field(default_factory=list)
    issues: List[Dict[str, Any]] = field(default_factory=list)


# =============================================================================
# DOCUMENTS
# =============================================================================

@dataclass
class RecipeDetailRowDto:
    id: int
    raw_material_id: Optional[int]
    raw_material_name: Optional[str]
    semi_product_id: Optional[int]
    semi_product_name: Optional[str]
    amount: Decimal
    unit: str
    package_code: Optional[str]
    aux_material_code: Optional[str]


@dataclass
class DocumentDetailRowDto:
    id: int
    title: str
    description: str


@dataclass
class DetailsDto:
    """Parent header plus detail rows; shared by recipes, norms and specs."""

    id: int
    name: str
    product_code: Optional[str]
    product_name: Optional[str]
    product_id: Optional[int]
    details: List[Any] = field(default_factory=list)
    semi_product_id: Optional[int] = None
    semi_product_name: Optional[str] = None
