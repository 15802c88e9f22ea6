"""
Service providers.

Wire the configured data-access capability and engine settings into a
per-request CatalogQueryService.
"""

from typing import Optional

from django.conf import settings
from django.utils.module_loading import import_string

from application.services.catalog_query import CatalogQueryService
from domain.catalog.repositories import CatalogRepository
from domain.shared.value_objects import Deadline


def get_catalog_repository() -> CatalogRepository:
    """Data-access capability configured by ``settings.CATALOG_REPOSITORY``."""
    factory = import_string(settings.CATALOG_REPOSITORY)
    return factory()


def build_query_service(
    company_id: Optional[int] = None,
    deadline_seconds: Optional[float] = None,
) -> CatalogQueryService:
    """
    Load the catalog of one company and bind the engine settings.

    The deadline starts now; ``deadline_seconds`` overrides
    ``ENGINE_DEADLINE_SECONDS`` and 0 disables it.
    """
    if deadline_seconds is None:
        deadline_seconds = settings.ENGINE_DEADLINE_SECONDS
    return CatalogQueryService.from_repository(
        get_catalog_repository(),
        company_id=company_id,
        max_depth=settings.BOM_MAX_DEPTH,
        deadline=Deadline.within(deadline_seconds),
        default_limit=settings.FILTER_DEFAULT_LIMIT,
    )
