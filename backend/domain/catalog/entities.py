"""
Catalog Domain - Entities.

Flat classification tables (brands, sellers, groups, types...) and the
second, orthogonal classification axis formed by product group types and
their definitions.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from domain.shared.base_entity import AuditableEntity
from domain.shared.value_objects import LookupKind


@dataclass(eq=False, kw_only=True)
class Lookup(AuditableEntity):
    """
    A row of one of the flat lookup tables.

    All lookup tables share the same shape, so a single entity tagged with
    its ``kind`` replaces one class per table. Identity is ``(kind, id)``.
    """

    kind: LookupKind
    name: str
    code: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.kind, LookupKind):
            self.kind = LookupKind(self.kind)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Lookup):
            return False
        return self.kind == other.kind and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.kind.value, self.id))

    def __repr__(self) -> str:
        return f"<Lookup {self.kind.value} id={self.id} name={self.name!r}>"


@dataclass(eq=False, kw_only=True)
class ProductGroupTypeDefinition(AuditableEntity):
    """A selectable value within a product group type (e.g. "Frozen" in "Shelf")."""

    product_group_type_id: int
    name: str


@dataclass(eq=False, kw_only=True)
class ProductToProductGroupTypeDefinition(AuditableEntity):
    """Many-to-many link assigning a product to a group type definition."""

    product_id: int
    product_group_type_definition_id: int
    product_group_type_id: int
