"""
Inventory Domain - Stock Aggregator.

Numeric roll-ups over the three parallel ERP ledgers:

- TotalStock        = Code1Stock + Code2Stock + Code3Stock (absent ledgers are 0)
- TotalStockInBox   = TotalStock * qty-in-box of the good
- For a SemiProduct, the stock of the Products made from it:
  TotalProductStock, TotalProductStockInBox (each product with its own
  factor) and GrandTotalInBox = TotalStockInBox + TotalProductStockInBox
- Group TotalStock  = sum of member TotalStock

Unit counts are integers; box figures are floats. Every sum is order
independent (integer addition and ``math.fsum``), so partial rollups
computed by separate workers merge to the same result in any order.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import math

from domain.catalog.aggregates import Good, Product, SemiProduct
from domain.catalog.graph import EntityGraph
from domain.shared.exceptions import DeadlineExceededException, ValidationException
from domain.shared.value_objects import Deadline, ItemKind, LookupKind

from .entities import Stock

logger = logging.getLogger(__name__)


def ledger_total(stock: Optional[Stock]) -> int:
    """Sum of the three ledger balances; a missing row or ledger counts as 0."""
    if stock is None:
        return 0
    return sum(int(balance or 0) for balance in stock.ledger_balances)


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class AggregationIssue:
    """A unit that could not be aggregated and was zeroed instead."""

    reason: str
    owner_kind: ItemKind
    owner_id: int
    message: str

    def as_dict(self) -> dict:
        return {
            "reason": self.reason,
            "owner_kind": self.owner_kind.value,
            "owner_id": self.owner_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class StockFigures:
    """Computed stock of one good."""

    owner_kind: ItemKind
    owner_id: int
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
    zeroed: bool = False

    @classmethod
    def zero(cls, good: Good) -> StockFigures:
        """Explicit zero figures for a unit that could not be aggregated."""
        code1, code2, code3 = good.ledger_codes
        return cls(
            owner_kind=good.kind,
            owner_id=good.id,
            code1=code1,
            code2=code2,
            code3=code3,
            total_stock=0,
            total_stock_in_box=0.0 if good.kind is not ItemKind.RAW_MATERIAL else None,
            zeroed=True,
        )


@dataclass
class ConsumerStock:
    product: Product
    figures: StockFigures


@dataclass
class SemiProductStock:
    """Stock of a semi product together with the products made from it."""

    semi_product: SemiProduct
    figures: StockFigures
    consumers: List[ConsumerStock] = field(default_factory=list)
    issues: List[AggregationIssue] = field(default_factory=list)


@dataclass
class GroupRollup:
    """
    Group-level stock, possibly partial.

    Two rollups of the same group merge by summation; merging is
    associative and commutative.
    """

    group_kind: LookupKind
    group_id: int
    total_stock: int = 0
    members: List[StockFigures] = field(default_factory=list)
    issues: List[AggregationIssue] = field(default_factory=list)

    def merge(self, other: GroupRollup) -> GroupRollup:
        if (self.group_kind, self.group_id) != (other.group_kind, other.group_id):
            raise ValidationException(
                f"Cannot merge {other.group_kind.value} {other.group_id} "
                f"into {self.group_kind.value} {self.group_id}",
                "group_id",
                other.group_id,
            )
        return GroupRollup(
            group_kind=self.group_kind,
            group_id=self.group_id,
            total_stock=self.total_stock + other.total_stock,
            members=sorted(self.members + other.members, key=lambda f: f.owner_id),
            issues=sorted(
                self.issues + other.issues,
                key=lambda issue: (issue.owner_id, issue.reason),
            ),
        )

    @property
    def is_complete(self) -> bool:
        return not self.issues


def merge_rollups(rollups: Iterable[GroupRollup]) -> Dict[Tuple[LookupKind, int], GroupRollup]:
    """Fold partial rollups into one rollup per group."""
    merged: Dict[Tuple[LookupKind, int], GroupRollup] = {}
    for rollup in rollups:
        key = (rollup.group_kind, rollup.group_id)
        merged[key] = merged[key].merge(rollup) if key in merged else rollup
    return merged


# =============================================================================
# AGGREGATOR
# =============================================================================

class StockAggregator:
    """Computes stock figures from the Stock rows held by an EntityGraph."""

    def __init__(self, graph: EntityGraph):
        self.graph = graph

    # =========================================================================
    # CALCULATIONS
    # =========================================================================

    def figures(self, good: Good) -> StockFigures:
        """
        Ledger figures of one good.

        A good without a Stock row has zero stock; ledger codes then
        default to the good's own codes.
        """
        stock = self.graph.stock_for(good.kind, good.id)
        total = ledger_total(stock)
        in_box = None
        if good.kind is not ItemKind.RAW_MATERIAL:
            in_box = total * good.box_factor

        if stock is None:
            code1, code2, code3 = good.ledger_codes
            balances = (None, None, None)
        else:
            code1 = stock.code1 if stock.code1 is not None else good.code
            code2 = stock.code2 if stock.code2 is not None else good.code2
            code3 = stock.code3 if stock.code3 is not None else good.code3
            balances = stock.ledger_balances

        return StockFigures(
            owner_kind=good.kind,
            owner_id=good.id,
            code1=code1,
            code2=code2,
            code3=code3,
            code1_stock=balances[0],
            code2_stock=balances[1],
            code3_stock=balances[2],
            total_stock=total,
            total_stock_in_box=in_box,
        )

    def semi_product_stock(
        self,
        semi_product: SemiProduct,
        deadline: Optional[Deadline] = None,
    ) -> SemiProductStock:
        """
        Semi product figures folding in the stock of consuming products.

        A product consumed by several semi products is counted in full
        against each of them.
        """
        (deadline or Deadline.never()).check(f"semi product {semi_product.id}")

        own = self.figures(semi_product)
        consumers: List[ConsumerStock] = []
        issues: List[AggregationIssue] = []
        for owner_kind, owner_id in self.graph.where_used(ItemKind.SEMI_PRODUCT, semi_product.id):
            if owner_kind is not ItemKind.PRODUCT:
                continue
            product = self.graph.product(owner_id)
            if product is None:
                issue = AggregationIssue(
                    reason="missing_entity",
                    owner_kind=ItemKind.PRODUCT,
                    owner_id=owner_id,
                    message=f"Product {owner_id} consuming semi product "
                            f"{semi_product.id} is not in the catalog; counted as 0",
                )
                logger.warning(issue.message)
                issues.append(issue)
                continue
            consumers.append(ConsumerStock(product=product, figures=self.figures(product)))

        total_product_stock = sum(c.figures.total_stock for c in consumers)
        total_product_stock_in_box = math.fsum(
            c.figures.total_stock_in_box or 0.0 for c in consumers
        )
        own = replace(
            own,
            total_product_stock=total_product_stock,
            total_product_stock_in_box=total_product_stock_in_box,
            grand_total_in_box=(own.total_stock_in_box or 0.0) + total_product_stock_in_box,
        )
        return SemiProductStock(
            semi_product=semi_product,
            figures=own,
            consumers=consumers,
            issues=issues,
        )

    def group_total(self, members: Iterable[Good]) -> int:
        """Sum of member TotalStock."""
        return sum(ledger_total(self.graph.stock_for(m.kind, m.id)) for m in members)

    # =========================================================================
    # GROUP ROLLUPS
    # =========================================================================

    def raw_material_group_rollup(
        self,
        group_id: int,
        deadline: Optional[Deadline] = None,
        member_ids: Optional[Iterable[int]] = None,
    ) -> GroupRollup:
        members = self.graph.raw_material_group_members(group_id)
        return self._rollup(LookupKind.RAW_MATERIAL_GROUP, group_id, members, deadline, member_ids)

    def semi_product_group_rollup(
        self,
        group_id: int,
        deadline: Optional[Deadline] = None,
        member_ids: Optional[Iterable[int]] = None,
    ) -> GroupRollup:
        members = self.graph.semi_product_group_members(group_id)
        return self._rollup(LookupKind.SEMI_PRODUCT_GROUP, group_id, members, deadline, member_ids)

    def _rollup(
        self,
        group_kind: LookupKind,
        group_id: int,
        members: List[Good],
        deadline: Optional[Deadline],
        member_ids: Optional[Iterable[int]],
    ) -> GroupRollup:
        """
        Each member is one aggregation unit. The deadline is checked
        before every member; once expired, the remaining members are
        zeroed and flagged rather than dropped.
        """
        deadline = deadline or Deadline.never()
        if member_ids is not None:
            wanted = set(member_ids)
            members = [member for member in members if member.id in wanted]

        rollup = GroupRollup(group_kind=group_kind, group_id=group_id)
        expired = False
        for member in members:
            if not expired:
                try:
                    deadline.check(f"{group_kind.value} {group_id} member {member.id}")
                except DeadlineExceededException:
                    expired = True
                    logger.warning(
                        f"Deadline exceeded in {group_kind.value} {group_id} rollup; "
                        f"zeroing remaining members from {member.kind.label} {member.id}"
                    )
            if expired:
                rollup.members.append(StockFigures.zero(member))
                rollup.issues.append(AggregationIssue(
                    reason="deadline_exceeded",
                    owner_kind=member.kind,
                    owner_id=member.id,
                    message=f"{member.kind.label} {member.id} not aggregated before deadline; counted as 0",
                ))
                continue

            figures = self.figures(member)
            rollup.members.append(figures)
            rollup.total_stock += figures.total_stock
        return rollup
