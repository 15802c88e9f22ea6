"""
API v1 URL Configuration.

All API endpoints for version 1.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views.catalog import ProductViewSet
from .views.inventory import (
    SemiProductViewSet,
    RawMaterialViewSet,
    RawMaterialGroupViewSet,
    SemiProductGroupViewSet,
)
from .views.bom import (
    RecipeViewSet,
    NormViewSet,
    SpecViewSet,
)

# Create router
router = DefaultRouter()

# Catalog
router.register(r'products', ProductViewSet, basename='products')

# Inventory
router.register(r'semi-products', SemiProductViewSet, basename='semi-products')
router.register(r'raw-materials', RawMaterialViewSet, basename='raw-materials')
router.register(r'raw-material-groups', RawMaterialGroupViewSet, basename='raw-material-groups')
router.register(r'semi-product-groups', SemiProductGroupViewSet, basename='semi-product-groups')

# Documents
router.register(r'recipes', RecipeViewSet, basename='recipes')
router.register(r'norms', NormViewSet, basename='norms')
router.register(r'specs', SpecViewSet, basename='specs')

urlpatterns = [
    path('', include(router.urls)),
]
