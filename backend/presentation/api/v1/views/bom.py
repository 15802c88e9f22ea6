"""
BOM Views.

API views for recipe, norm and spec documents.
"""

from ..serializers.bom import DetailsSerializer
from .base import CatalogViewSet


class DocumentViewSet(CatalogViewSet):
    """
    Base ViewSet for header + detail documents.

    Subclasses name the service methods returning one document and all
    documents.
    """

    serializer_class = DetailsSerializer
    detail_method = None
    list_method = None

    def list(self, request):
        documents = getattr(self.get_service(), self.list_method)()
        return self.respond(documents, many=True)

    def retrieve(self, request, pk=None):
        document = getattr(self.get_service(), self.detail_method)(self.parse_pk(pk))
        return self.respond(document)


class RecipeViewSet(DocumentViewSet):
    """Recipes with their ingredient rows."""

    detail_method = 'recipe_details'
    list_method = 'all_recipe_details'


class NormViewSet(DocumentViewSet):
    detail_method = 'norm_details'
    list_method = 'all_norm_details'


class SpecViewSet(DocumentViewSet):
    detail_method = 'spec_details'
    list_method = 'all_spec_details'
