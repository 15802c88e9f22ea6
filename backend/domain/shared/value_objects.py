"""
Shared Value Objects used across multiple domains.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional
import math
import time

from domain.shared.exceptions import DeadlineExceededException, ValidationException


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ItemKind(str, Enum):
    """Kind of good in the composition graph."""

    PRODUCT = "product"
    SEMI_PRODUCT = "semi_product"
    RAW_MATERIAL = "raw_material"

    @property
    def can_own_recipe(self) -> bool:
        """Products and semi products may be composed; raw materials are leaves."""
        return self is not ItemKind.RAW_MATERIAL

    @property
    def can_be_ingredient(self) -> bool:
        """Recipe rows reference raw materials or semi products only."""
        return self is not ItemKind.PRODUCT

    @property
    def label(self) -> str:
        return {
            ItemKind.PRODUCT: "Product",
            ItemKind.SEMI_PRODUCT: "SemiProduct",
            ItemKind.RAW_MATERIAL: "RawMaterial",
        }[self]

    @classmethod
    def parse(cls, value: str) -> ItemKind:
        """Accept ``semi_product``, ``semi-product`` or ``SemiProduct``."""
        normalized = str(value).strip().replace("-", "_").lower()
        aliases = {
            "semiproduct": "semi_product",
            "rawmaterial": "raw_material",
        }
        try:
            return cls(aliases.get(normalized, normalized))
        except ValueError:
            raise ValidationException(f"Unknown item kind '{value}'", "kind", value)


class LookupKind(str, Enum):
    """Flat classification tables referenced by products and goods."""

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
    PRODUCT_TYPE = "product_type"
    SKU_FOLLOW_TYPE = "sku_follow_type"
    SKU_FOLLOW_UNIT = "sku_follow_unit"
    PRODUCT_GROUP_TYPE = "product_group_type"


class SortDirection(str, Enum):
    """Order type of a filter request."""

    ASC = "asc"
    DESC = "desc"

    @property
    def is_descending(self) -> bool:
        return self is SortDirection.DESC

    @classmethod
    def parse(cls, value: Optional[str]) -> SortDirection:
        """Anything other than a case-insensitive ``desc`` sorts ascending."""
        if value and value.strip().lower() == "desc":
            return cls.DESC
        return cls.ASC


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class Quantity:
    """
    Value object representing quantity with unit of measure.
    """

    value: Decimal
    unit: str = ""

    def __post_init__(self):
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))
        if self.value < 0:
            raise ValidationException("Quantity cannot be negative", "quantity", self.value)

    def __add__(self, other: Quantity) -> Quantity:
        if self.unit != other.unit:
            raise ValueError(f"Cannot add {self.unit} and {other.unit}")
        return Quantity(self.value + other.value, self.unit)

    def __mul__(self, factor: int | float | Decimal) -> Quantity:
        return Quantity(self.value * Decimal(str(factor)), self.unit)

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return f"{self.value} {self.unit}".strip()


@dataclass(frozen=True)
class Deadline:
    """
    Caller-supplied time budget for one request.

    Checked at the top of each independent traversal or aggregation unit,
    never inside a single BOM subtree.
    """

    expires_at: float = math.inf

    @classmethod
    def never(cls) -> Deadline:
        return cls()

    @classmethod
    def within(cls, seconds: Optional[float]) -> Deadline:
        """A deadline ``seconds`` from now; zero or ``None`` means unbounded."""
        if not seconds or seconds <= 0:
            return cls.never()
        return cls(time.monotonic() + float(seconds))

    @property
    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self, unit: str) -> None:
        """Raise if the deadline passed before ``unit`` could start."""
        if self.expired:
            raise DeadlineExceededException(unit)
