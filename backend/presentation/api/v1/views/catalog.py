"""
Catalog Views.

API views for products: exact-id lists, the multi-facet web filter,
facet availability and product details.
"""

import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from application.tasks.bom_tasks import export_bom_to_excel
from domain.shared.value_objects import ItemKind
from ..serializers.bom import BomQuerySerializer, BomSerializer, ExportBomSerializer
from ..serializers.catalog import (
    DashboardCountsSerializer,
    FilterCriteriaSerializer,
    FilterItemsSerializer,
    ProductDetailSerializer,
    ProductListFilterSerializer,
    ProductWithDetailsSerializer,
    WebFilterResponseSerializer,
    WebFilterSerializer,
)
from .base import CatalogViewSet

logger = logging.getLogger(__name__)


class ProductViewSet(CatalogViewSet):
    """
    ViewSet for products.

    Endpoints:
    - GET  /products/                  - Exact-id filtered list
    - GET  /products/{id}/             - Product with BOM and stock
    - POST /products/web-filter/       - Multi-facet filter, paged
    - POST /products/filter-items/     - Facet values of the filtered result
    - GET  /products/dashboard/        - Catalog counts
    - GET  /products/{id}/bom/         - Resolved BOM
    - POST /products/{id}/export-bom/  - Queue an Excel export of the BOM
    """

    serializer_class = ProductWithDetailsSerializer
    serializer_classes = {
        'list': ProductWithDetailsSerializer,
        'retrieve': ProductDetailSerializer,
        'web_filter': WebFilterResponseSerializer,
        'filter_items': FilterItemsSerializer,
        'dashboard': DashboardCountsSerializer,
        'bom': BomSerializer,
    }

    def list(self, request):
        params = self.validated(ProductListFilterSerializer, request.query_params)
        products = self.get_service().filtered_list(params.to_filter())
        return self.respond(products, many=True)

    def retrieve(self, request, pk=None):
        query = self.validated(BomQuerySerializer, request.query_params).validated_data
        detail = self.get_service().product_detail(
            self.parse_pk(pk),
            query['quantity'],
            single_level=query['single_level'],
        )
        return self.respond(detail)

    @action(detail=False, methods=['post'], url_path='web-filter')
    def web_filter(self, request):
        """Filter, sort and page products by facets and free text."""
        params = self.validated(WebFilterSerializer, request.data)
        data = params.validated_data
        response = self.get_service().web_filter(
            params.to_criteria(),
            limit=data.get('limit'),
            offset=data.get('offset'),
            expand=data.get('expand', False),
        )
        return self.respond(response)

    @action(detail=False, methods=['post'], url_path='filter-items')
    def filter_items(self, request):
        """Facet values present in the filtered result."""
        params = self.validated(FilterCriteriaSerializer, request.data)
        return self.respond(self.get_service().filter_items(params.to_criteria()))

    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        return self.respond(self.get_service().dashboard_counts())

    @action(detail=True, methods=['get'])
    def bom(self, request, pk=None):
        query = self.validated(BomQuerySerializer, request.query_params).validated_data
        bom = self.get_service().resolve_bom(
            ItemKind.PRODUCT,
            self.parse_pk(pk),
            query['quantity'],
            single_level=query['single_level'],
        )
        return self.respond(bom)

    @action(detail=True, methods=['post'], url_path='export-bom')
    def export_bom(self, request, pk=None):
        """Queue an Excel export of the product BOM."""
        product_id = self.parse_pk(pk)
        quantity = self.validated(ExportBomSerializer, request.data).validated_data['quantity']

        # Fail fast on unknown products before queueing.
        self.get_service().graph.require(ItemKind.PRODUCT, product_id)

        task = export_bom_to_excel.delay(
            ItemKind.PRODUCT.value, product_id, str(quantity), self.get_company_id()
        )
        logger.info(f"Queued BOM export of product {product_id} (task {task.id})")
        return Response(
            {'task_id': task.id, 'status': task.status, 'product_id': product_id},
            status=status.HTTP_202_ACCEPTED,
        )
