"""
Catalog Serializers.

Product filter requests, product rows and facet availability.
"""

from rest_framework import serializers

from application.dto import FACET_FIELDS, FilterCriteria, ProductListFilter
from .base import LookupSerializer, ProductSummarySerializer
from .bom import BomSerializer
from .inventory import StockSerializer


# =============================================================================
# REQUESTS
# =============================================================================

class FilterCriteriaSerializer(serializers.Serializer):
    """
    Multi-facet filter request.

    Facet values are lookup names (or ids); an empty list leaves the
    facet unconstrained.
    """

    code = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    name = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    name2 = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    order_by = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    order_type = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def get_fields(self):
        fields = super().get_fields()
        for facet in FACET_FIELDS:
            fields[facet] = serializers.ListField(
                child=serializers.CharField(),
                required=False,
                allow_null=True,
            )
        return fields

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria.from_dict(self.validated_data)


class WebFilterSerializer(FilterCriteriaSerializer):
    """Filter request with paging; no limit returns the whole result."""

    limit = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    offset = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    expand = serializers.BooleanField(required=False, default=False)


class ProductListFilterSerializer(serializers.Serializer):
    """Exact-id product list query parameters."""

    product_group_type_id = serializers.IntegerField(required=False)
    product_group_type_definition_id = serializers.IntegerField(required=False)
    seller_id = serializers.IntegerField(required=False)
    brand_id = serializers.IntegerField(required=False)
    product_group_id = serializers.IntegerField(required=False)
    storage_condition_id = serializers.IntegerField(required=False)
    product_type_id = serializers.IntegerField(required=False)
    sku_follow_type_id = serializers.IntegerField(required=False)
    sku_follow_unit_id = serializers.IntegerField(required=False)
    limit = serializers.IntegerField(required=False, min_value=0)
    offset = serializers.IntegerField(required=False, min_value=0)
    code_or_name = serializers.CharField(required=False, allow_blank=True)

    def to_filter(self) -> ProductListFilter:
        return ProductListFilter(**self.validated_data)


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductGroupTypeDefinitionLinkSerializer(serializers.Serializer):
    product_group_type_id = serializers.IntegerField()
    product_group_type_name = serializers.CharField(allow_null=True)
    product_group_type_definition_id = serializers.IntegerField()
    product_group_type_definition_name = serializers.CharField(allow_null=True)


class ProductWithDetailsSerializer(serializers.Serializer):
    """Product row with resolved lookups; BOM and stock when expanded."""

    id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    code2 = serializers.CharField(allow_null=True)
    code3 = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    name2 = serializers.CharField(allow_null=True)
    seller_id = serializers.IntegerField(allow_null=True)
    product_group_id = serializers.IntegerField(allow_null=True)
    brand_id = serializers.IntegerField(allow_null=True)
    product_type_id = serializers.IntegerField(allow_null=True)
    sku_follow_type_id = serializers.IntegerField(allow_null=True)
    sku_follow_unit_id = serializers.IntegerField(allow_null=True)
    storage_condition_id = serializers.IntegerField(allow_null=True)
    weight = serializers.FloatField(allow_null=True)
    volume = serializers.FloatField(allow_null=True)
    density = serializers.FloatField(allow_null=True)
    width = serializers.FloatField(allow_null=True)
    length = serializers.FloatField(allow_null=True)
    height = serializers.FloatField(allow_null=True)
    critical_stock_amount = serializers.FloatField(allow_null=True)
    shelflife_limit = serializers.FloatField(allow_null=True)
    max_stack = serializers.IntegerField(allow_null=True)
    qty_in_box = serializers.FloatField(allow_null=True)
    stock_tracking = serializers.BooleanField(allow_null=True)
    bbd_tracking = serializers.BooleanField(allow_null=True)
    lot_tracking = serializers.BooleanField(allow_null=True)
    is_blocked = serializers.BooleanField(allow_null=True)
    is_setted_product = serializers.BooleanField(allow_null=True)
    created_by = serializers.IntegerField(allow_null=True)
    updated_by = serializers.IntegerField(allow_null=True)
    created_date = serializers.DateTimeField(allow_null=True)
    updated_date = serializers.DateTimeField(allow_null=True)
    seller = LookupSerializer(allow_null=True)
    product_group = LookupSerializer(allow_null=True)
    product_type = LookupSerializer(allow_null=True)
    brand = LookupSerializer(allow_null=True)
    sku_follow_type = LookupSerializer(allow_null=True)
    sku_follow_unit = LookupSerializer(allow_null=True)
    storage_condition = LookupSerializer(allow_null=True)
    product_group_type_definitions = ProductGroupTypeDefinitionLinkSerializer(many=True)
    bom = BomSerializer(allow_null=True)
    stock = StockSerializer(allow_null=True)


class WebFilterResponseSerializer(serializers.Serializer):
    products_with_details = ProductWithDetailsSerializer(many=True)
    products = ProductSummarySerializer(many=True)
    row_count = serializers.IntegerField()


class ProductDetailSerializer(serializers.Serializer):
    product = ProductWithDetailsSerializer()
    bom = BomSerializer()
    stock = StockSerializer()


# =============================================================================
# FACETS
# =============================================================================

class ProductGroupTypeSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    definitions = LookupSerializer(many=True)


class FilterItemsSerializer(serializers.Serializer):
    """Facet values available in the filtered result."""

    product_group_types = ProductGroupTypeSerializer(many=True)
    sellers = LookupSerializer(many=True)
    brands = LookupSerializer(many=True)
    product_groups = LookupSerializer(many=True)
    storage_conditions = LookupSerializer(many=True)
    product_types = LookupSerializer(many=True)
    sku_follow_types = LookupSerializer(many=True)
    sku_follow_units = LookupSerializer(many=True)


class DashboardCountsSerializer(serializers.Serializer):
    products = serializers.IntegerField()
    semi_products = serializers.IntegerField()
    raw_materials = serializers.IntegerField()
    product_groups = serializers.IntegerField()
    semi_product_groups = serializers.IntegerField()
    raw_material_groups = serializers.IntegerField()
