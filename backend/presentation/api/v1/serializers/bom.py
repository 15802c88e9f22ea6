"""
BOM Serializers.

Resolved bills of materials, where-used lists and the recipe, norm and
spec documents.
"""

from rest_framework import serializers

from application.dto import RecipeDetailRowDto
from .base import AmountField, IssuesField


class BomQuerySerializer(serializers.Serializer):
    """Query parameters of a BOM resolution."""

    quantity = serializers.DecimalField(
        max_digits=20, decimal_places=6, min_value=0, required=False, default=1
    )
    single_level = serializers.BooleanField(required=False, default=False)


class BomLineSerializer(serializers.Serializer):
    kind = serializers.CharField()
    item_id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    amount = AmountField()
    unit = serializers.CharField(allow_blank=True)
    level = serializers.IntegerField()
    parent_kind = serializers.CharField()
    parent_id = serializers.IntegerField()
    recipe_detail_id = serializers.IntegerField()


class LeafTotalSerializer(serializers.Serializer):
    raw_material_id = serializers.IntegerField()
    amount = AmountField()
    unit = serializers.CharField(allow_blank=True)


class BomSerializer(serializers.Serializer):
    """Flattened, quantity-scaled bill of materials."""

    root_kind = serializers.CharField()
    root_id = serializers.IntegerField()
    quantity = AmountField()
    single_level = serializers.BooleanField()
    lines = BomLineSerializer(many=True)
    leaf_totals = LeafTotalSerializer(many=True)
    issues = IssuesField()


class OwnerSerializer(serializers.Serializer):
    kind = serializers.CharField()
    id = serializers.IntegerField()
    code = serializers.CharField(allow_null=True)
    name = serializers.CharField(allow_null=True)


class WhereUsedSerializer(serializers.Serializer):
    kind = serializers.CharField()
    item_id = serializers.IntegerField()
    owners = OwnerSerializer(many=True)


class ExportBomSerializer(serializers.Serializer):
    """Export request for a product BOM."""

    quantity = serializers.DecimalField(
        max_digits=20, decimal_places=6, min_value=0, required=False, default=1
    )


# =============================================================================
# DOCUMENTS
# =============================================================================

class RecipeDetailRowSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    raw_material_id = serializers.IntegerField(allow_null=True)
    raw_material_name = serializers.CharField(allow_null=True)
    semi_product_id = serializers.IntegerField(allow_null=True)
    semi_product_name = serializers.CharField(allow_null=True)
    amount = AmountField()
    unit = serializers.CharField(allow_blank=True)
    package_code = serializers.CharField(allow_null=True)
    aux_material_code = serializers.CharField(allow_null=True)


class DocumentDetailRowSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)


class DetailsSerializer(serializers.Serializer):
    """
    Header plus detail rows of a recipe, norm or spec.

    Recipe rows carry ingredient columns; norm and spec rows carry
    title and description.
    """

    id = serializers.IntegerField()
    name = serializers.CharField()
    product_id = serializers.IntegerField(allow_null=True)
    product_code = serializers.CharField(allow_null=True)
    product_name = serializers.CharField(allow_null=True)
    semi_product_id = serializers.IntegerField(allow_null=True)
    semi_product_name = serializers.CharField(allow_null=True)
    details = serializers.SerializerMethodField()

    def get_details(self, obj):
        rows = []
        for row in obj.details:
            if isinstance(row, RecipeDetailRowDto):
                rows.append(RecipeDetailRowSerializer(row).data)
            else:
                rows.append(DocumentDetailRowSerializer(row).data)
        return rows
