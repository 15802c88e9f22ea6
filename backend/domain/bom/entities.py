"""
BOM Domain - Entities.

Recipe is the composition of one Product or one SemiProduct; each
RecipeDetail row names exactly one ingredient. Norms and Specs are the
product's quality documents and share the header + rows shape.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from domain.shared.base_entity import AuditableEntity
from domain.shared.exceptions import InvalidRecipeDetailException, ValidationException
from domain.shared.value_objects import ItemKind, Quantity


@dataclass(eq=False, kw_only=True)
class Recipe(AuditableEntity):
    """
    Composition header.

    Belongs to exactly one Product OR one SemiProduct.
    """

    name: str
    product_id: Optional[int] = None
    semi_product_id: Optional[int] = None

    def __post_init__(self):
        if (self.product_id is None) == (self.semi_product_id is None):
            raise ValidationException(
                f"Recipe '{self.id}' must belong to exactly one product or semi product",
                "owner",
                (self.product_id, self.semi_product_id),
            )

    @property
    def owner(self) -> Tuple[ItemKind, int]:
        if self.product_id is not None:
            return (ItemKind.PRODUCT, self.product_id)
        return (ItemKind.SEMI_PRODUCT, self.semi_product_id)


@dataclass(eq=False, kw_only=True)
class RecipeDetail(AuditableEntity):
    """
    One ingredient row of a recipe.

    ``amount`` is the quantity needed for one unit of the recipe owner.
    Rows are loaded as stored; integrity is checked by ``ingredient``
    when the resolver reads the row.
    """

    recipe_id: int
    raw_material_id: Optional[int] = None
    semi_product_id: Optional[int] = None
    amount: Decimal = Decimal("0")
    unit: str = ""
    package_code: Optional[str] = None
    aux_material_code: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))

    # =========================================================================
    # VALIDATION
    # =========================================================================

    @property
    def ingredient(self) -> Tuple[ItemKind, int]:
        """
        Graph address of the referenced ingredient.

        Raises InvalidRecipeDetailException unless exactly one of
        raw_material_id / semi_product_id is set.
        """
        has_raw = self.raw_material_id is not None
        has_semi = self.semi_product_id is not None
        if has_raw and has_semi:
            raise InvalidRecipeDetailException(
                self.id, "references both a raw material and a semi product"
            )
        if not has_raw and not has_semi:
            raise InvalidRecipeDetailException(self.id, "references no ingredient")
        if has_raw:
            return (ItemKind.RAW_MATERIAL, self.raw_material_id)
        return (ItemKind.SEMI_PRODUCT, self.semi_product_id)

    @property
    def quantity(self) -> Quantity:
        if self.amount < 0:
            raise InvalidRecipeDetailException(self.id, f"negative amount {self.amount}")
        return Quantity(self.amount, self.unit)


@dataclass(eq=False, kw_only=True)
class Norm(AuditableEntity):
    """Quality norm document of a product."""

    name: str
    product_id: int


@dataclass(eq=False, kw_only=True)
class NormDetail(AuditableEntity):
    norm_id: int
    title: str = ""
    description: str = ""


@dataclass(eq=False, kw_only=True)
class Spec(AuditableEntity):
    """Specification document of a product."""

    name: str
    product_id: int


@dataclass(eq=False, kw_only=True)
class SpecDetail(AuditableEntity):
    spec_id: int
    title: str = ""
    description: str = ""
