"""
Inventory Domain - Entities.

Stock is the ledger snapshot of one Product, SemiProduct or RawMaterial
as reported by up to three ERP company databases.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from domain.shared.base_entity import Entity
from domain.shared.value_objects import ItemKind


@dataclass(eq=False, kw_only=True)
class Stock(Entity):
    """
    Three parallel ledger balances of the same physical good.

    A ledger that does not track the good reports ``None``.
    """

    owner_kind: ItemKind
    owner_id: int
    code1: Optional[str] = None
    code2: Optional[str] = None
    code3: Optional[str] = None
    code1_stock: Optional[int] = None
    code2_stock: Optional[int] = None
    code3_stock: Optional[int] = None
    company_id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.owner_kind, ItemKind):
            self.owner_kind = ItemKind.parse(self.owner_kind)

    @property
    def owner(self) -> Tuple[ItemKind, int]:
        return (self.owner_kind, self.owner_id)

    @property
    def ledger_balances(self) -> Tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.code1_stock, self.code2_stock, self.code3_stock)
