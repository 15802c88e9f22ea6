"""
Tests for the catalog query service: web filter, details, reports and
documents.
"""

from decimal import Decimal

import pytest

from application.dto import FilterCriteria, ProductListFilter
from application.services.catalog_query import CatalogQueryService
from domain.bom.entities import Recipe, RecipeDetail
from domain.catalog.aggregates import Product, SemiProduct
from domain.catalog.graph import EntityGraph
from domain.shared.exceptions import (
    CycleDetectedException,
    DeadlineExceededException,
    EntityNotFoundException,
)
from domain.shared.value_objects import Deadline, ItemKind
from infrastructure.persistence.snapshot import SnapshotCatalogRepository


class TestWebFilter:

    def test_page_and_row_count(self, service):
        response = service.web_filter(FilterCriteria(brand=["Brand A", "Brand B"]), limit=2, offset=1)

        assert response.row_count == 4
        assert [p.id for p in response.products] == [2, 3]
        assert [p.id for p in response.products_with_details] == [2, 3]
        assert response.products_with_details[0].bom is None

    def test_detail_rows_resolve_lookups(self, service):
        row = service.web_filter(FilterCriteria(code="PRD-001")).products_with_details[0]

        assert row.brand.name == "Brand A"
        assert row.seller.name == "North"
        assert row.storage_condition.code == "CLD"
        assert row.product_type is None
        assert [link.product_group_type_definition_name for link in row.product_group_type_definitions] == [
            "Top shelf",
        ]
        assert row.product_group_type_definitions[0].product_group_type_name == "Shelf"

    def test_expand_adds_bom_and_stock(self, service):
        row = service.web_filter(FilterCriteria(code="PRD-001"), expand=True).products_with_details[0]

        assert [(line.kind, line.item_id, line.amount) for line in row.bom.lines] == [
            ("semi_product", 1, Decimal("2")),
            ("raw_material", 2, Decimal("6")),
            ("raw_material", 1, Decimal("1")),
        ]
        assert row.stock.product_id == 1
        assert row.stock.total_stock_in_box == 120.0

    def test_expand_flags_cycles_instead_of_failing(self):
        graph = EntityGraph(
            products=[Product(id=1, name="P")],
            semi_products=[SemiProduct(id=1, name="A")],
            recipes=[
                Recipe(id=1, name="P", product_id=1),
                Recipe(id=2, name="A", semi_product_id=1),
            ],
            recipe_details=[
                RecipeDetail(id=1, recipe_id=1, semi_product_id=1, amount=1),
                RecipeDetail(id=2, recipe_id=2, semi_product_id=1, amount=1),
            ],
        )

        row = CatalogQueryService(graph).web_filter(expand=True).products_with_details[0]

        assert row.bom.lines == []
        assert row.bom.issues[0]["code"] == "CYCLE_DETECTED"

    def test_filter_items(self, service):
        items = service.filter_items(FilterCriteria(brand=["Brand B"]))

        assert [b.name for b in items.brands] == ["Brand B"]
        assert [s.name for s in items.sellers] == ["North"]

    def test_filtered_list_uses_default_limit(self, graph):
        service = CatalogQueryService(graph, default_limit=2)

        rows = service.filtered_list(ProductListFilter())

        assert [row.id for row in rows] == [1, 2]
        assert rows[0].brand.name == "Brand A"


class TestDetails:

    def test_product_detail(self, service):
        detail = service.product_detail(1, quantity=2)

        assert detail.product.code == "PRD-001"
        assert detail.bom.quantity == Decimal("2")
        assert [(t.raw_material_id, t.amount) for t in detail.bom.leaf_totals] == [
            (2, Decimal("12")),
            (1, Decimal("2")),
        ]
        assert detail.stock.total_stock == 12

    def test_product_detail_single_level(self, service):
        detail = service.product_detail(1, single_level=True)

        assert [line.level for line in detail.bom.lines] == [1, 1]

    def test_missing_product(self, service):
        with pytest.raises(EntityNotFoundException):
            service.product_detail(99)

    def test_semi_product_detail(self, service):
        report = service.semi_product_detail(1)

        assert report.semi_product.semi_product_group_name == "Doughs"
        assert report.stock.semi_product_id == 1
        assert report.stock.grand_total_in_box == 137.0
        assert [(p.product.id, p.qty_in_box, p.stock.total_stock) for p in report.products] == [
            (1, 10, 12),
            (2, 4, 3),
        ]
        assert [line.item_id for line in report.bom.lines] == [2]

    def test_raw_material_detail(self, service):
        report = service.raw_material_detail(2)

        assert report.raw_material.raw_material_group_name == "Flours"
        assert report.stock.total_stock == 8
        assert report.stock.product_id is None
        assert report.stock.semi_product_id is None
        assert [sp.semi_product.id for sp in report.semi_products] == [1]
        assert report.semi_products[0].bom is None
        assert report.issues == []

    def test_raw_material_detail_skips_inactive_semi_product(self, catalog_data):
        # Dough is inactive but its recipe still lists Rye flour.
        catalog_data["semi_products"][0]["status"] = False
        graph = EntityGraph.load(SnapshotCatalogRepository.from_dict(catalog_data))

        report = CatalogQueryService(graph).raw_material_detail(2)

        assert report.semi_products == []
        assert report.stock.total_stock == 8
        assert [(i["reason"], i["owner_id"]) for i in report.issues] == [("missing_entity", 1)]

    def test_raw_material_used_only_by_products(self, service):
        assert service.raw_material_detail(1).semi_products == []

    def test_raw_material_detail_after_deadline(self, graph):
        service = CatalogQueryService(graph, deadline=Deadline(expires_at=0))

        report = service.raw_material_detail(2)

        assert report.semi_products[0].stock.total_stock == 0
        assert report.semi_products[0].issues[0]["reason"] == "deadline_exceeded"
        assert len(report.issues) == 1

    def test_expired_deadline_fails_single_resolution(self, graph):
        service = CatalogQueryService(graph, deadline=Deadline(expires_at=0))

        with pytest.raises(DeadlineExceededException):
            service.product_detail(1)


class TestGroupReports:

    def test_raw_material_group(self, service):
        report = service.raw_material_group_report(1)

        assert (report.name, report.code, report.kind) == ("Flours", "RMG-1", "raw_material_group")
        assert report.total_stock == 24
        assert [(m.code, m.stock.total_stock) for m in report.members] == [
            ("RM-001", 8), ("RM-002", 8), ("RM-003", 8),
        ]

    def test_semi_product_group(self, service):
        report = service.semi_product_group_report(1)

        assert report.kind == "semi_product_group"
        assert [m.id for m in report.members] == [1, 2]
        assert report.total_stock == 5

    def test_unknown_group(self, service):
        with pytest.raises(EntityNotFoundException):
            service.raw_material_group_report(9)


class TestBom:

    def test_resolve_bom(self, service):
        bom = service.resolve_bom(ItemKind.SEMI_PRODUCT, 1, "0.5")

        assert (bom.root_kind, bom.root_id) == ("semi_product", 1)
        assert [(line.item_id, line.amount, line.unit) for line in bom.lines] == [(2, Decimal("1.5"), "kg")]

    def test_resolve_bom_cycle(self):
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

        with pytest.raises(CycleDetectedException):
            CatalogQueryService(graph).resolve_bom(ItemKind.SEMI_PRODUCT, 2)

    def test_where_used(self, service):
        where_used = service.where_used(ItemKind.SEMI_PRODUCT, 1)

        assert [(o.kind, o.id, o.code) for o in where_used.owners] == [
            ("product", 1, "PRD-001"),
            ("product", 2, "PRD-002"),
        ]


class TestDocuments:

    def test_recipe_details(self, service):
        recipe = service.recipe_details(1)

        assert (recipe.name, recipe.product_code, recipe.product_name) == ("Pie recipe", "PRD-001", "Pie")
        assert [(row.semi_product_name, row.raw_material_name) for row in recipe.details] == [
            ("Dough", None),
            (None, "Flour"),
        ]

    def test_semi_product_recipe(self, service):
        recipe = service.recipe_details(2)

        assert recipe.product_id is None
        assert (recipe.semi_product_id, recipe.semi_product_name) == (1, "Dough")

    def test_norm_and_spec_share_the_shape(self, service):
        norm = service.norm_details(1)
        spec = service.spec_details(1)

        assert [row.title for row in norm.details] == ["Oven", "Time"]
        assert [row.title for row in spec.details] == ["Net weight"]
        assert norm.product_name == spec.product_name == "Pie"

    @pytest.mark.parametrize("method,entity_type", [
        ("recipe_details", "Recipe"),
        ("norm_details", "Norm"),
        ("spec_details", "Spec"),
    ])
    def test_missing_document(self, service, method, entity_type):
        with pytest.raises(EntityNotFoundException) as exc_info:
            getattr(service, method)(42)

        assert exc_info.value.details["entity_type"] == entity_type

    def test_all_documents(self, service):
        assert [r.id for r in service.all_recipe_details()] == [1, 2, 3]
        assert len(service.all_norm_details()) == 1
        assert len(service.all_spec_details()) == 1


def test_dashboard_counts(service):
    counts = service.dashboard_counts()

    assert (counts.products, counts.semi_products, counts.raw_materials) == (5, 2, 4)
    assert (counts.product_groups, counts.semi_product_groups, counts.raw_material_groups) == (2, 1, 2)
