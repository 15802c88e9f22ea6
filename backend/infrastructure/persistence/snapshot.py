"""
Snapshot Catalog Repository.

Read-only implementation of CatalogRepository over a JSON export of the
catalog tables. The export is a single object keyed by table name:

    {
        "products": [{"id": 1, "name": "...", "code": "...", ...}],
        "semi_products": [...],
        "raw_materials": [...],
        "lookups": [{"kind": "brand", "id": 1, "name": "A"}, ...],
        "product_group_type_definitions": [...],
        "product_group_type_definition_links": [...],
        "recipes": [...],
        "recipe_details": [...],
        "norms": [...], "norm_details": [...],
        "specs": [...], "spec_details": [...],
        "stocks": [{"owner_kind": "semi_product", "owner_id": 1, ...}]
    }

Missing tables are empty. Unknown columns are ignored.
"""

from __future__ import annotations
from dataclasses import fields
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
import json
import logging

from django.conf import settings
from django.utils.dateparse import parse_datetime

from domain.bom.entities import Norm, NormDetail, Recipe, RecipeDetail, Spec, SpecDetail
from domain.catalog.aggregates import Product, RawMaterial, SemiProduct
from domain.catalog.entities import (
    Lookup,
    ProductGroupTypeDefinition,
    ProductToProductGroupTypeDefinition,
)
from domain.catalog.repositories import CatalogRepository
from domain.inventory.entities import Stock
from domain.shared.exceptions import DomainException, ValidationException

logger = logging.getLogger(__name__)

T = TypeVar("T")

TABLES: Dict[str, type] = {
    "products": Product,
    "semi_products": SemiProduct,
    "raw_materials": RawMaterial,
    "lookups": Lookup,
    "product_group_type_definitions": ProductGroupTypeDefinition,
    "product_group_type_definition_links": ProductToProductGroupTypeDefinition,
    "recipes": Recipe,
    "recipe_details": RecipeDetail,
    "norms": Norm,
    "norm_details": NormDetail,
    "specs": Spec,
    "spec_details": SpecDetail,
    "stocks": Stock,
}

DATETIME_FIELDS = {"created_date", "updated_date"}
DECIMAL_FIELDS = {"amount"}


# =============================================================================
# ROW CONVERSION
# =============================================================================

def _parse_datetime(value: Any, table: str, column: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    parsed = parse_datetime(str(value))
    if parsed is None:
        raise ValidationException(f"Invalid datetime in {table}.{column}", column, value)
    return parsed


def _parse_decimal(value: Any, table: str, column: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationException(f"Invalid number in {table}.{column}", column, value)


def row_to_entity(table: str, entity_type: Type[T], row: Dict[str, Any]) -> T:
    """
    Build one domain entity from a raw export row.

    Raises ValidationException for rows the entity cannot be built from.
    """
    if not isinstance(row, dict):
        raise ValidationException(f"Rows of {table} must be objects", table, row)

    known = {f.name for f in fields(entity_type)}
    values = {}
    for column, value in row.items():
        if column not in known:
            continue
        if column in DATETIME_FIELDS:
            value = _parse_datetime(value, table, column)
        elif column in DECIMAL_FIELDS and value is not None:
            value = _parse_decimal(value, table, column)
        values[column] = value

    try:
        return entity_type(**values)
    except TypeError as e:
        raise ValidationException(f"Invalid row in {table}: {e}", table, row.get("id"))
    except ValueError as e:
        raise ValidationException(f"Invalid value in {table}: {e}", table, row.get("id"))


# =============================================================================
# REPOSITORY
# =============================================================================

class SnapshotCatalogRepository(CatalogRepository):
    """In-memory catalog rows, keyed by entity type, in id order."""

    def __init__(self, rows: Optional[Dict[type, List[Any]]] = None, source: str = "<memory>"):
        self.source = source
        self._rows: Dict[type, List[Any]] = {entity_type: [] for entity_type in TABLES.values()}
        for entity_type, entities in (rows or {}).items():
            self._rows[entity_type] = sorted(entities, key=lambda entity: entity.id)

    @classmethod
    def from_dict(cls, data: Dict[str, List[Dict[str, Any]]], source: str = "<memory>") -> SnapshotCatalogRepository:
        unknown = set(data) - set(TABLES)
        if unknown:
            logger.warning(f"Ignoring unknown tables in {source}: {', '.join(sorted(unknown))}")

        rows: Dict[type, List[Any]] = {}
        for table, entity_type in TABLES.items():
            table_rows = data.get(table) or []
            if not isinstance(table_rows, list):
                raise ValidationException(f"Table {table} must be a list", table, None)
            rows[entity_type] = [row_to_entity(table, entity_type, row) for row in table_rows]

        repository = cls(rows, source=source)
        logger.info(
            f"Loaded catalog snapshot {source}: "
            + ", ".join(f"{table}={len(rows[t])}" for table, t in TABLES.items() if rows[t])
        )
        return repository

    @classmethod
    def from_file(cls, path: str | Path) -> SnapshotCatalogRepository:
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise DomainException(
                f"Catalog snapshot not found: {path}",
                code="SNAPSHOT_NOT_FOUND",
                details={"path": str(path)},
            )
        except json.JSONDecodeError as e:
            raise ValidationException(f"Catalog snapshot {path} is not valid JSON: {e}", "path", str(path))

        if not isinstance(data, dict):
            raise ValidationException(f"Catalog snapshot {path} must be a JSON object", "path", str(path))
        return cls.from_dict(data, source=str(path))

    # =========================================================================
    # CatalogRepository
    # =========================================================================

    def fetch_by_id(self, entity_type: Type[T], entity_id: int) -> Optional[T]:
        for entity in self._rows.get(entity_type, []):
            if entity.id == entity_id:
                return entity
        return None

    def fetch_all(self, entity_type: Type[T]) -> List[T]:
        return list(self._rows.get(entity_type, []))

    def fetch_where(self, entity_type: Type[T], predicate: Callable[[T], bool]) -> List[T]:
        return [entity for entity in self._rows.get(entity_type, []) if predicate(entity)]


# =============================================================================
# FACTORIES
# =============================================================================

_snapshot_cache: Dict[str, SnapshotCatalogRepository] = {}


def load_snapshot_repository() -> SnapshotCatalogRepository:
    """
    Repository over ``settings.CATALOG_SNAPSHOT_PATH``.

    Parsed snapshots are cached per path; ``clear_repository_cache``
    forces a reload.
    """
    path = str(settings.CATALOG_SNAPSHOT_PATH)
    if path not in _snapshot_cache:
        _snapshot_cache[path] = SnapshotCatalogRepository.from_file(path)
    return _snapshot_cache[path]


def clear_repository_cache() -> None:
    _snapshot_cache.clear()
