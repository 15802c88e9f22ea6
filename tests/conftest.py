"""
Shared fixtures: a small catalog of one company, loaded through the
snapshot repository exactly as the API loads it.
"""

import copy
import json

import pytest

from application.services.catalog_query import CatalogQueryService
from domain.catalog.graph import EntityGraph
from infrastructure.persistence.snapshot import SnapshotCatalogRepository, clear_repository_cache


CATALOG = {
    "lookups": [
        {"kind": "brand", "id": 1, "name": "Brand A", "company_id": 1},
        {"kind": "brand", "id": 2, "name": "Brand B", "company_id": 1},
        {"kind": "brand", "id": 3, "name": "Brand C", "company_id": 1},
        {"kind": "seller", "id": 1, "name": "North", "company_id": 1},
        {"kind": "seller", "id": 2, "name": "South", "company_id": 1},
        {"kind": "product_group", "id": 1, "name": "Frozen", "company_id": 1},
        {"kind": "product_group", "id": 2, "name": "Dry", "company_id": 1},
        {"kind": "storage_condition", "id": 1, "name": "Cold", "code": "CLD", "company_id": 1},
        {"kind": "product_group_type", "id": 1, "name": "Shelf", "company_id": 1},
        {"kind": "semi_product_group", "id": 1, "name": "Doughs", "code": "SPG-1", "company_id": 1},
        {"kind": "raw_material_group", "id": 1, "name": "Flours", "code": "RMG-1", "company_id": 1},
        {"kind": "raw_material_group", "id": 2, "name": "Salts", "code": "RMG-2", "company_id": 1},
    ],
    "product_group_type_definitions": [
        {"id": 1, "product_group_type_id": 1, "name": "Top shelf", "company_id": 1},
        {"id": 2, "product_group_type_id": 1, "name": "Bottom shelf", "company_id": 1},
    ],
    "product_group_type_definition_links": [
        {"id": 1, "product_id": 1, "product_group_type_definition_id": 1,
         "product_group_type_id": 1, "company_id": 1},
        {"id": 2, "product_id": 3, "product_group_type_definition_id": 2,
         "product_group_type_id": 1, "company_id": 1},
    ],
    "products": [
        {"id": 1, "code": "PRD-001", "name": "Pie", "name2": "Apple pie", "brand_id": 1, "seller_id": 1,
         "product_group_id": 1, "storage_condition_id": 1, "qty_in_box": 10, "created_by": 7,
         "created_date": "2024-01-05T10:00:00+00:00", "company_id": 1},
        {"id": 2, "code": "PRD-002", "name": "Cake", "brand_id": 1, "seller_id": 2,
         "product_group_id": 2, "qty_in_box": 4, "created_by": 8,
         "created_date": "2024-01-01T10:00:00+00:00", "company_id": 1},
        {"id": 3, "code": "PRD-003", "name": "Bread", "brand_id": 2, "seller_id": 1,
         "product_group_id": 1, "qty_in_box": 2.5, "company_id": 1},
        {"id": 4, "code": "PRD-004", "name": "bagel", "brand_id": 3, "seller_id": 2, "company_id": 1},
        {"id": 5, "code": "PRD-005", "name": "Muffin", "brand_id": 2, "product_group_id": 2,
         "company_id": 1},
    ],
    "semi_products": [
        {"id": 1, "code": "SP-001", "name": "Dough", "semi_product_group_id": 1, "company_id": 1},
        {"id": 2, "code": "SP-002", "name": "Glaze", "semi_product_group_id": 1, "company_id": 1},
    ],
    "raw_materials": [
        {"id": 1, "code": "RM-001", "name": "Flour", "raw_material_group_id": 1, "company_id": 1},
        {"id": 2, "code": "RM-002", "name": "Rye flour", "raw_material_group_id": 1, "company_id": 1},
        {"id": 3, "code": "RM-003", "name": "Corn flour", "raw_material_group_id": 1, "company_id": 1},
        {"id": 4, "code": "RM-004", "name": "Salt", "raw_material_group_id": 2, "company_id": 1},
    ],
    "recipes": [
        {"id": 1, "name": "Pie recipe", "product_id": 1, "company_id": 1},
        {"id": 2, "name": "Dough recipe", "semi_product_id": 1, "company_id": 1},
        {"id": 3, "name": "Cake recipe", "product_id": 2, "company_id": 1},
    ],
    "recipe_details": [
        {"id": 1, "recipe_id": 1, "semi_product_id": 1, "amount": "2", "unit": "kg", "company_id": 1},
        {"id": 2, "recipe_id": 1, "raw_material_id": 1, "amount": "1", "unit": "kg", "company_id": 1},
        {"id": 3, "recipe_id": 2, "raw_material_id": 2, "amount": "3", "unit": "kg", "company_id": 1},
        {"id": 4, "recipe_id": 3, "semi_product_id": 1, "amount": "1", "unit": "kg", "company_id": 1},
        {"id": 5, "recipe_id": 3, "semi_product_id": 2, "amount": "0.5", "unit": "kg", "company_id": 1},
    ],
    "norms": [
        {"id": 1, "name": "Pie baking norm", "product_id": 1, "company_id": 1},
    ],
    "norm_details": [
        {"id": 1, "norm_id": 1, "title": "Oven", "description": "180 C", "company_id": 1},
        {"id": 2, "norm_id": 1, "title": "Time", "description": "40 minutes", "company_id": 1},
    ],
    "specs": [
        {"id": 1, "name": "Pie specification", "product_id": 1, "company_id": 1},
    ],
    "spec_details": [
        {"id": 1, "spec_id": 1, "title": "Net weight", "description": "500 g", "company_id": 1},
    ],
    "stocks": [
        {"id": 1, "owner_kind": "product", "owner_id": 1, "code1": "PRD-001",
         "code1_stock": 10, "code3_stock": 2, "company_id": 1},
        {"id": 2, "owner_kind": "product", "owner_id": 2, "code1": "PRD-002",
         "code1_stock": 3, "company_id": 1},
        {"id": 3, "owner_kind": "semi_product", "owner_id": 1, "code1": "SP-001",
         "code1_stock": 4, "code2_stock": 1, "company_id": 1},
        {"id": 4, "owner_kind": "raw_material", "owner_id": 1, "code1_stock": 5, "code2_stock": 0,
         "code3_stock": 3, "company_id": 1},
        {"id": 5, "owner_kind": "raw_material", "owner_id": 2, "code1_stock": 5, "code2_stock": 0,
         "code3_stock": 3, "company_id": 1},
        {"id": 6, "owner_kind": "raw_material", "owner_id": 3, "code1_stock": 5, "code2_stock": 0,
         "code3_stock": 3, "company_id": 1},
    ],
}


@pytest.fixture
def catalog_data():
    """A fresh, mutable copy of the test catalog."""
    return copy.deepcopy(CATALOG)


@pytest.fixture
def repository(catalog_data):
    return SnapshotCatalogRepository.from_dict(catalog_data)


@pytest.fixture
def graph(repository):
    return EntityGraph.load(repository, company_id=1)


@pytest.fixture
def service(graph):
    return CatalogQueryService(graph)


@pytest.fixture
def snapshot_file(tmp_path, catalog_data, settings):
    """Point the configured repository at a snapshot of the test catalog."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_data), encoding="utf-8")

    settings.CATALOG_REPOSITORY = "infrastructure.persistence.snapshot.load_snapshot_repository"
    settings.CATALOG_SNAPSHOT_PATH = str(path)
    settings.DEFAULT_COMPANY_ID = 1
    settings.ENGINE_DEADLINE_SECONDS = 0
    settings.MEDIA_ROOT = tmp_path / "media"
    clear_repository_cache()
    yield path
    clear_repository_cache()
