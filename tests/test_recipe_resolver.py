"""
Tests for multi-level recipe expansion.
"""

from decimal import Decimal

import pytest

from domain.bom.entities import Recipe, RecipeDetail
from domain.bom.resolver import RecipeResolver
from domain.catalog.aggregates import Product, RawMaterial, SemiProduct
from domain.catalog.graph import EntityGraph
from domain.shared.exceptions import (
    CycleDetectedException,
    DeadlineExceededException,
    EntityNotFoundException,
    ValidationException,
)
from domain.shared.value_objects import Deadline, ItemKind
from infrastructure.persistence.snapshot import SnapshotCatalogRepository


def amounts(resolution):
    return {(line.kind, line.item_id): line.amount for line in resolution.lines}


def chain_graph(length):
    """Product 1 -> semi 1 -> semi 2 -> ... -> semi ``length`` -> raw 1."""
    semi_products = [SemiProduct(id=i, name=f"S{i}") for i in range(1, length + 1)]
    recipes = [Recipe(id=1, name="P", product_id=1)]
    details = [RecipeDetail(id=1, recipe_id=1, semi_product_id=1, amount=1, unit="kg")]
    for i in range(1, length + 1):
        recipes.append(Recipe(id=i + 1, name=f"S{i}", semi_product_id=i))
        if i < length:
            details.append(RecipeDetail(id=i + 1, recipe_id=i + 1, semi_product_id=i + 1, amount=1, unit="kg"))
        else:
            details.append(RecipeDetail(id=i + 1, recipe_id=i + 1, raw_material_id=1, amount=1, unit="kg"))
    return EntityGraph(
        products=[Product(id=1, name="P")],
        semi_products=semi_products,
        raw_materials=[RawMaterial(id=1, name="R")],
        recipes=recipes,
        recipe_details=details,
    )


class TestResolve:

    def test_multi_level_example(self, graph):
        resolution = RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1)

        assert amounts(resolution) == {
            (ItemKind.SEMI_PRODUCT, 1): Decimal("2"),
            (ItemKind.RAW_MATERIAL, 2): Decimal("6"),
            (ItemKind.RAW_MATERIAL, 1): Decimal("1"),
        }
        assert not resolution.has_issues

    def test_depth_first_order_and_levels(self, graph):
        lines = RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1).lines

        assert [(line.kind, line.item_id, line.level) for line in lines] == [
            (ItemKind.SEMI_PRODUCT, 1, 1),
            (ItemKind.RAW_MATERIAL, 2, 2),
            (ItemKind.RAW_MATERIAL, 1, 1),
        ]
        assert (lines[1].parent_kind, lines[1].parent_id) == (ItemKind.SEMI_PRODUCT, 1)
        assert (lines[2].parent_kind, lines[2].parent_id) == (ItemKind.PRODUCT, 1)
        assert lines[0].code == "SP-001"
        assert lines[0].name == "Dough"

    @pytest.mark.parametrize("quantity", ["2", "0.5", 10])
    def test_linear_in_quantity(self, graph, quantity):
        resolver = RecipeResolver(graph)
        unit = amounts(resolver.resolve(ItemKind.PRODUCT, 1))
        scaled = amounts(resolver.resolve(ItemKind.PRODUCT, 1, quantity))

        factor = Decimal(str(quantity))
        assert scaled == {node: amount * factor for node, amount in unit.items()}

    def test_single_level(self, graph):
        resolution = RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1, single_level=True)

        assert amounts(resolution) == {
            (ItemKind.SEMI_PRODUCT, 1): Decimal("2"),
            (ItemKind.RAW_MATERIAL, 1): Decimal("1"),
        }
        assert resolution.single_level

    def test_good_without_recipe_is_empty(self, graph):
        resolver = RecipeResolver(graph)

        assert resolver.resolve(ItemKind.PRODUCT, 3).is_empty
        assert resolver.resolve(ItemKind.SEMI_PRODUCT, 2).is_empty

    def test_semi_product_root(self, graph):
        resolution = RecipeResolver(graph).resolve(ItemKind.SEMI_PRODUCT, 1, 4)

        assert amounts(resolution) == {(ItemKind.RAW_MATERIAL, 2): Decimal("12")}

    def test_missing_root(self, graph):
        with pytest.raises(EntityNotFoundException) as exc_info:
            RecipeResolver(graph).resolve(ItemKind.PRODUCT, 99)

        assert exc_info.value.details == {"entity_type": "Product", "entity_id": "99"}

    def test_negative_quantity(self, graph):
        with pytest.raises(ValidationException):
            RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1, -1)

    def test_expired_deadline(self, graph):
        with pytest.raises(DeadlineExceededException):
            RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1, deadline=Deadline(expires_at=0))

    def test_max_depth_must_be_positive(self, graph):
        with pytest.raises(ValidationException):
            RecipeResolver(graph, max_depth=0)


class TestCycles:

    def test_mutual_reference_terminates(self):
        graph = EntityGraph(
            semi_products=[SemiProduct(id=1, name="A"), SemiProduct(id=2, name="B")],
            recipes=[
                Recipe(id=1, name="A", semi_product_id=1),
                Recipe(id=2, name="B", semi_product_id=2),
            ],
            recipe_details=[
                RecipeDetail(id=1, recipe_id=1, semi_product_id=2, amount=1),
                RecipeDetail(id=2, recipe_id=2, semi_product_id=1, amount=1),
            ],
        )

        with pytest.raises(CycleDetectedException) as exc_info:
            RecipeResolver(graph).resolve(ItemKind.SEMI_PRODUCT, 1)

        assert exc_info.value.details["path"] == [
            "semi_product:1", "semi_product:2", "semi_product:1",
        ]
        assert exc_info.value.details["max_depth"] is None

    def test_self_reference(self):
        graph = EntityGraph(
            semi_products=[SemiProduct(id=1, name="A")],
            recipes=[Recipe(id=1, name="A", semi_product_id=1)],
            recipe_details=[RecipeDetail(id=1, recipe_id=1, semi_product_id=1, amount=2)],
        )

        with pytest.raises(CycleDetectedException):
            RecipeResolver(graph).resolve(ItemKind.SEMI_PRODUCT, 1)

    def test_depth_bound(self):
        graph = chain_graph(3)

        with pytest.raises(CycleDetectedException) as exc_info:
            RecipeResolver(graph, max_depth=2).resolve(ItemKind.PRODUCT, 1)
        assert exc_info.value.details["max_depth"] == 2

        resolution = RecipeResolver(graph, max_depth=4).resolve(ItemKind.PRODUCT, 1)
        assert resolution.lines[-1].level == 4

    def test_shared_ingredient_is_not_a_cycle(self, graph):
        # Cake uses Dough directly and Pie uses it too; siblings are not on one path.
        resolution = RecipeResolver(graph).resolve(ItemKind.PRODUCT, 2)

        assert amounts(resolution) == {
            (ItemKind.SEMI_PRODUCT, 1): Decimal("1"),
            (ItemKind.RAW_MATERIAL, 2): Decimal("3"),
            (ItemKind.SEMI_PRODUCT, 2): Decimal("0.5"),
        }


class TestInvalidDetails:

    @pytest.fixture
    def broken_graph(self, catalog_data):
        catalog_data["recipe_details"] += [
            {"id": 10, "recipe_id": 1, "raw_material_id": 3, "semi_product_id": 2, "amount": "1"},
            {"id": 11, "recipe_id": 1, "amount": "1"},
            {"id": 12, "recipe_id": 1, "raw_material_id": 3, "amount": "-1"},
            {"id": 13, "recipe_id": 1, "raw_material_id": 99, "amount": "1"},
        ]
        return EntityGraph.load(SnapshotCatalogRepository.from_dict(catalog_data))

    def test_invalid_rows_are_reported_and_excluded(self, broken_graph):
        resolution = RecipeResolver(broken_graph).resolve(ItemKind.PRODUCT, 1)

        assert amounts(resolution) == {
            (ItemKind.SEMI_PRODUCT, 1): Decimal("2"),
            (ItemKind.RAW_MATERIAL, 2): Decimal("6"),
            (ItemKind.RAW_MATERIAL, 1): Decimal("1"),
        }
        assert [issue.details["recipe_detail_id"] for issue in resolution.issues] == [
            "10", "11", "12", "13",
        ]
        assert {issue.code for issue in resolution.issues} == {"INVALID_RECIPE_DETAIL"}

    def test_invalid_rows_are_logged(self, broken_graph, caplog):
        RecipeResolver(broken_graph).resolve(ItemKind.PRODUCT, 1)

        assert "4 invalid recipe detail(s) excluded" in caplog.text


class TestLeafTotals:

    def test_totals_per_raw_material(self, graph):
        totals = RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1).leaf_totals()

        assert list(totals) == [(2, "kg"), (1, "kg")]
        assert totals[(2, "kg")].value == Decimal("6")

    def test_repeated_raw_material_is_summed(self, catalog_data):
        catalog_data["recipe_details"].append(
            {"id": 20, "recipe_id": 2, "raw_material_id": 1, "amount": "0.5", "unit": "kg"}
        )
        graph = EntityGraph.load(SnapshotCatalogRepository.from_dict(catalog_data))

        totals = RecipeResolver(graph).resolve(ItemKind.PRODUCT, 1).leaf_totals()

        assert totals[(1, "kg")].value == Decimal("2")


class TestWhereUsed:

    def test_direct_owners(self, graph):
        resolver = RecipeResolver(graph)

        assert resolver.where_used(ItemKind.SEMI_PRODUCT, 1) == [
            (ItemKind.PRODUCT, 1), (ItemKind.PRODUCT, 2),
        ]
        assert resolver.where_used(ItemKind.RAW_MATERIAL, 2) == [(ItemKind.SEMI_PRODUCT, 1)]
        assert resolver.where_used(ItemKind.RAW_MATERIAL, 4) == []

    def test_unknown_good(self, graph):
        with pytest.raises(EntityNotFoundException):
            RecipeResolver(graph).where_used(ItemKind.RAW_MATERIAL, 99)
