"""
Serializers Package.

All API serializers for the quality catalog.
"""

from .base import AmountField, IssuesField, LookupSerializer, ProductSummarySerializer

from .bom import (
    BomQuerySerializer,
    BomLineSerializer,
    LeafTotalSerializer,
    BomSerializer,
    OwnerSerializer,
    WhereUsedSerializer,
    ExportBomSerializer,
    RecipeDetailRowSerializer,
    DocumentDetailRowSerializer,
    DetailsSerializer,
)

from .inventory import (
    StockSerializer,
    ProductStockSerializer,
    SemiProductSerializer,
    SemiProductReportSerializer,
    RawMaterialSerializer,
    RawMaterialReportSerializer,
    GroupMemberSerializer,
    GroupReportSerializer,
    RollupRequestSerializer,
)

from .catalog import (
    FilterCriteriaSerializer,
    WebFilterSerializer,
    ProductListFilterSerializer,
    ProductGroupTypeDefinitionLinkSerializer,
    ProductWithDetailsSerializer,
    WebFilterResponseSerializer,
    ProductDetailSerializer,
    ProductGroupTypeSerializer,
    FilterItemsSerializer,
    DashboardCountsSerializer,
)
