"""
Base Views.

Common view mixins and base classes.
"""

from django.conf import settings
from rest_framework import viewsets
from rest_framework.response import Response

from application.services.catalog_query import CatalogQueryService
from domain.shared.exceptions import ValidationException
from infrastructure.persistence.providers import build_query_service


class CatalogServiceMixin:
    """
    Mixin that builds the catalog query service for the request.

    The tenant comes from the ``X-Company-Id`` header, the ``company_id``
    query parameter or ``DEFAULT_COMPANY_ID``, in that order.
    """

    def get_company_id(self):
        raw = self.request.headers.get('X-Company-Id') or self.request.query_params.get('company_id')
        if raw in (None, ''):
            return settings.DEFAULT_COMPANY_ID
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ValidationException("company_id must be an integer", 'company_id', raw)

    def get_service(self) -> CatalogQueryService:
        if getattr(self, '_service', None) is None:
            self._service = build_query_service(self.get_company_id())
        return self._service

    def get_serializer_class(self):
        return self.serializer_classes.get(self.action, self.serializer_class)

    def validated(self, serializer_class, data):
        serializer = serializer_class(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer

    def respond(self, instance, serializer_class=None, many=False, status=None):
        serializer_class = serializer_class or self.get_serializer_class()
        return Response(serializer_class(instance, many=many).data, status=status)


class CatalogViewSet(CatalogServiceMixin, viewsets.ViewSet):
    """
    Read-only ViewSet over the catalog query service.

    Subclasses map actions to output serializers in ``serializer_classes``.
    """

    serializer_class = None
    serializer_classes = {}

    def parse_pk(self, pk):
        try:
            return int(pk)
        except (TypeError, ValueError):
            raise ValidationException("id must be an integer", 'id', pk)
