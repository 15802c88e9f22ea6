"""
Views Package.

All API views for the quality catalog.
"""

from .base import CatalogServiceMixin, CatalogViewSet
from .bom import DocumentViewSet, NormViewSet, RecipeViewSet, SpecViewSet
from .catalog import ProductViewSet
from .inventory import (
    GroupViewSet,
    RawMaterialGroupViewSet,
    RawMaterialViewSet,
    SemiProductGroupViewSet,
    SemiProductViewSet,
)
