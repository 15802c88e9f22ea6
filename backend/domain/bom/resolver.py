"""
BOM Domain - Recipe Resolver.

Expands the recipe of a Product or SemiProduct into a flattened,
quantity-scaled bill of materials.

Expansion is depth-first in recipe row order. A raw material row emits a
leaf line at ``multiplier * amount``. A semi product row emits an
intermediate line at the same scaled amount and then recurses into the
semi product's own recipe with that amount as the new multiplier.
"""

from __future__ import annotations
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple
import logging

from domain.catalog.graph import EntityGraph
from domain.shared.exceptions import (
    CycleDetectedException,
    InvalidRecipeDetailException,
    ValidationException,
)
from domain.shared.value_objects import Deadline, ItemKind, Quantity

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

Node = Tuple[ItemKind, int]


@dataclass(frozen=True)
class BomLine:
    """One resolved ingredient of a bill of materials."""

    kind: ItemKind
    item_id: int
    code: Optional[str]
    name: str
    amount: Decimal
    unit: str
    level: int
    parent_kind: ItemKind
    parent_id: int
    recipe_detail_id: int

    @property
    def is_leaf(self) -> bool:
        return self.kind is ItemKind.RAW_MATERIAL


@dataclass
class Resolution:
    """Result of resolving one root good."""

    root_kind: ItemKind
    root_id: int
    quantity: Decimal
    single_level: bool = False
    lines: List[BomLine] = field(default_factory=list)
    issues: List[InvalidRecipeDetailException] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def leaf_totals(self) -> Dict[Tuple[int, str], Quantity]:
        """Total raw material requirement per (raw material id, unit), in first-seen order."""
        totals: Dict[Tuple[int, str], Quantity] = OrderedDict()
        for line in self.lines:
            if not line.is_leaf:
                continue
            key = (line.item_id, line.unit)
            quantity = Quantity(line.amount, line.unit)
            totals[key] = totals[key] + quantity if key in totals else quantity
        return totals


class RecipeResolver:
    """
    Depth-first recipe expansion over an EntityGraph.

    The current path is tracked as a visited set keyed by (kind, id);
    revisiting a node on the path, or going deeper than ``max_depth``,
    raises CycleDetectedException. Malformed recipe rows are excluded
    from the result and reported in ``Resolution.issues``.
    """

    def __init__(self, graph: EntityGraph, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValidationException("max_depth must be at least 1", "max_depth", max_depth)
        self.graph = graph
        self.max_depth = max_depth

    def resolve(
        self,
        kind: ItemKind,
        item_id: int,
        quantity: Decimal | int | str = 1,
        *,
        single_level: bool = False,
        deadline: Optional[Deadline] = None,
    ) -> Resolution:
        """
        Resolve the bill of materials of one good.

        Raises EntityNotFoundException when the root is absent and
        CycleDetectedException when the composition is not acyclic.
        A good without a recipe resolves to an empty list.
        """
        (deadline or Deadline.never()).check(f"resolve {kind.value} {item_id}")
        root = self.graph.require(kind, item_id)
        multiplier = Decimal(str(quantity))
        if multiplier < 0:
            raise ValidationException("Quantity cannot be negative", "quantity", quantity)

        resolution = Resolution(
            root_kind=kind,
            root_id=root.id,
            quantity=multiplier,
            single_level=single_level,
        )
        node = (kind, root.id)
        try:
            self._expand(node, multiplier, 1, [node], {node}, resolution)
        except CycleDetectedException as exc:
            logger.error(f"Cycle resolving {kind.label} {item_id}: {exc.details['path']}")
            raise

        if resolution.issues:
            logger.warning(
                f"Resolved {kind.label} {item_id} with {len(resolution.issues)} "
                f"invalid recipe detail(s) excluded"
            )
        return resolution

    def _expand(
        self,
        node: Node,
        multiplier: Decimal,
        level: int,
        path: List[Node],
        on_path: Set[Node],
        resolution: Resolution,
    ) -> None:
        if level > self.max_depth:
            raise CycleDetectedException(self._describe(path), max_depth=self.max_depth)

        recipe = self.graph.recipe_for(*node)
        if recipe is None:
            return

        for detail in self.graph.recipe_details(recipe.id):
            try:
                ingredient = detail.ingredient
                quantity = detail.quantity
                good = self.graph.good(*ingredient)
                if good is None:
                    raise InvalidRecipeDetailException(
                        detail.id,
                        f"references missing {ingredient[0].label} {ingredient[1]}",
                    )
            except InvalidRecipeDetailException as exc:
                logger.warning(exc.message)
                resolution.issues.append(exc)
                continue

            if ingredient in on_path:
                raise CycleDetectedException(self._describe(path + [ingredient]))

            amount = multiplier * quantity.value
            resolution.lines.append(BomLine(
                kind=ingredient[0],
                item_id=good.id,
                code=good.code,
                name=good.name,
                amount=amount,
                unit=quantity.unit,
                level=level,
                parent_kind=node[0],
                parent_id=node[1],
                recipe_detail_id=detail.id,
            ))

            if ingredient[0] is ItemKind.SEMI_PRODUCT and not resolution.single_level:
                path.append(ingredient)
                on_path.add(ingredient)
                self._expand(ingredient, amount, level + 1, path, on_path, resolution)
                on_path.discard(ingredient)
                path.pop()

    @staticmethod
    def _describe(path: List[Node]) -> List[str]:
        return [f"{kind.value}:{item_id}" for kind, item_id in path]

    # =========================================================================
    # REVERSE LOOKUP
    # =========================================================================

    def where_used(self, kind: ItemKind, item_id: int) -> List[Node]:
        """Direct owners whose recipe references the good."""
        self.graph.require(kind, item_id)
        return self.graph.where_used(kind, item_id)
