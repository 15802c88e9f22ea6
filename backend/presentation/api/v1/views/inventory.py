"""
Inventory Views.

API views for semi products, raw materials and group stock reports.
"""

import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from application.tasks.stock_tasks import schedule_group_rollups
from domain.shared.value_objects import ItemKind
from ..serializers.bom import BomQuerySerializer, BomSerializer, WhereUsedSerializer
from ..serializers.inventory import (
    GroupReportSerializer,
    RawMaterialReportSerializer,
    RollupRequestSerializer,
    SemiProductReportSerializer,
)
from .base import CatalogViewSet

logger = logging.getLogger(__name__)


class SemiProductViewSet(CatalogViewSet):
    """
    ViewSet for semi products.

    Endpoints:
    - GET /semi-products/{id}/            - Stock, BOM and consuming products
    - GET /semi-products/{id}/bom/        - Resolved BOM
    - GET /semi-products/{id}/where-used/ - Direct recipe owners
    """

    serializer_class = SemiProductReportSerializer
    serializer_classes = {
        'retrieve': SemiProductReportSerializer,
        'bom': BomSerializer,
        'where_used': WhereUsedSerializer,
    }

    def retrieve(self, request, pk=None):
        query = self.validated(BomQuerySerializer, request.query_params).validated_data
        report = self.get_service().semi_product_detail(
            self.parse_pk(pk),
            query['quantity'],
            single_level=query['single_level'],
        )
        return self.respond(report)

    @action(detail=True, methods=['get'])
    def bom(self, request, pk=None):
        query = self.validated(BomQuerySerializer, request.query_params).validated_data
        bom = self.get_service().resolve_bom(
            ItemKind.SEMI_PRODUCT,
            self.parse_pk(pk),
            query['quantity'],
            single_level=query['single_level'],
        )
        return self.respond(bom)

    @action(detail=True, methods=['get'], url_path='where-used')
    def where_used(self, request, pk=None):
        service = self.get_service()
        semi_product_id = self.parse_pk(pk)
        service.graph.require(ItemKind.SEMI_PRODUCT, semi_product_id)
        return self.respond(service.where_used(ItemKind.SEMI_PRODUCT, semi_product_id))


class RawMaterialViewSet(CatalogViewSet):
    """
    ViewSet for raw materials.

    Endpoints:
    - GET /raw-materials/{id}/            - Stock and consuming semi products
    - GET /raw-materials/{id}/where-used/ - Direct recipe owners
    """

    serializer_class = RawMaterialReportSerializer
    serializer_classes = {
        'retrieve': RawMaterialReportSerializer,
        'where_used': WhereUsedSerializer,
    }

    def retrieve(self, request, pk=None):
        return self.respond(self.get_service().raw_material_detail(self.parse_pk(pk)))

    @action(detail=True, methods=['get'], url_path='where-used')
    def where_used(self, request, pk=None):
        service = self.get_service()
        raw_material_id = self.parse_pk(pk)
        service.graph.require(ItemKind.RAW_MATERIAL, raw_material_id)
        return self.respond(service.where_used(ItemKind.RAW_MATERIAL, raw_material_id))


GROUP_REPORTS = {
    'raw_material_group': 'raw_material_group_report',
    'semi_product_group': 'semi_product_group_report',
}


class GroupViewSet(CatalogViewSet):
    """
    Base ViewSet for group stock reports.

    Endpoints:
    - GET  /{groups}/{id}/    - Member stock and group total
    - POST /{groups}/rollup/  - Queue background rollups of many groups
    """

    group_kind = None
    serializer_class = GroupReportSerializer

    def retrieve(self, request, pk=None):
        report = getattr(self.get_service(), GROUP_REPORTS[self.group_kind])
        return self.respond(report(self.parse_pk(pk)))

    @action(detail=False, methods=['post'])
    def rollup(self, request):
        group_ids = self.validated(RollupRequestSerializer, request.data).validated_data['group_ids']
        task = schedule_group_rollups.delay(self.group_kind, group_ids, self.get_company_id())
        logger.info(f"Queued {self.group_kind} rollups (task {task.id})")
        return Response(
            {'task_id': task.id, 'status': task.status, 'kind': self.group_kind, 'group_ids': group_ids},
            status=status.HTTP_202_ACCEPTED,
        )


class RawMaterialGroupViewSet(GroupViewSet):
    group_kind = 'raw_material_group'


class SemiProductGroupViewSet(GroupViewSet):
    group_kind = 'semi_product_group'
