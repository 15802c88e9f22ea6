"""
Inventory Serializers.

Stock figures, semi product and raw material reports and group rollups.
"""

from rest_framework import serializers

from .base import IssuesField, ProductSummarySerializer
from .bom import BomSerializer


class StockSerializer(serializers.Serializer):
    """Ledger figures of one good."""

    product_id = serializers.IntegerField(allow_null=True)
    semi_product_id = serializers.IntegerField(allow_null=True)
    code1 = serializers.CharField(allow_null=True)
    code2 = serializers.CharField(allow_null=True)
    code3 = serializers.CharField(allow_null=True)
    code1_stock = serializers.IntegerField(allow_null=True)
    code2_stock = serializers.IntegerField(allow_null=True)
    code3_stock = serializers.IntegerField(allow_null=True)
    total_stock = serializers.IntegerField()
    total_stock_in_box = serializers.FloatField(allow_null=True)
    total_product_stock = serializers.IntegerField(allow_null=True)
    total_product_stock_in_box = serializers.FloatField(allow_null=True)
    grand_total_in_box = serializers.FloatField(allow_null=True)


class ProductStockSerializer(serializers.Serializer):
    product = ProductSummarySerializer()
    qty_in_box = serializers.FloatField(allow_null=True)
    stock = StockSerializer()


class SemiProductSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    code2 = serializers.CharField(allow_null=True)
    code3 = serializers.CharField(allow_null=True)
    old_code = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    semi_product_group_id = serializers.IntegerField(allow_null=True)
    semi_product_group_name = serializers.CharField(allow_null=True)


class SemiProductReportSerializer(serializers.Serializer):
    """Semi product with its stock, BOM and the products made from it."""

    semi_product = SemiProductSerializer()
    stock = StockSerializer()
    bom = BomSerializer(allow_null=True)
    products = ProductStockSerializer(many=True)
    issues = IssuesField()


class RawMaterialSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    code2 = serializers.CharField(allow_null=True)
    code3 = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    raw_material_group_id = serializers.IntegerField(allow_null=True)
    raw_material_group_name = serializers.CharField(allow_null=True)


class RawMaterialReportSerializer(serializers.Serializer):
    raw_material = RawMaterialSerializer()
    stock = StockSerializer()
    semi_products = SemiProductReportSerializer(many=True)
    issues = IssuesField()


class GroupMemberSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    stock = StockSerializer()


class GroupReportSerializer(serializers.Serializer):
    """Group-level stock rollup."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    code = serializers.CharField(allow_null=True)
    kind = serializers.CharField()
    total_stock = serializers.IntegerField()
    members = GroupMemberSerializer(many=True)
    issues = IssuesField()


class RollupRequestSerializer(serializers.Serializer):
    """Groups to roll up in the background; empty means every group."""

    group_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
    )

    def validate_group_ids(self, value):
        return list(dict.fromkeys(value))
