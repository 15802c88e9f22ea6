"""
Catalog Query Service.

Response builder over one EntityGraph: composes the Facet Filter Engine,
the Recipe Resolver and the Stock Aggregator into the external-facing
detail, report and web filter shapes. No algorithm of its own.
"""

from __future__ import annotations
from decimal import Decimal
from typing import List, Optional
import logging

from application.dto import (
    BomDto,
    DashboardCounts,
    DetailsDto,
    FilterCriteria,
    FilterItems,
    GroupMemberDto,
    GroupReport,
    ProductDetail,
    ProductListFilter,
    ProductStockDto,
    ProductWithDetails,
    RawMaterialReport,
    SemiProductReport,
    WebFilterResponse,
    WhereUsedDto,
)
from application.mappers import (
    figures_to_stock_dto,
    norm_to_details,
    owner_to_dto,
    product_to_details,
    product_to_summary,
    raw_material_to_dto,
    recipe_to_details,
    resolution_to_dto,
    semi_product_to_dto,
    spec_to_details,
)
from domain.bom.resolver import DEFAULT_MAX_DEPTH, RecipeResolver
from domain.catalog.aggregates import Product, SemiProduct
from domain.catalog.graph import EntityGraph
from domain.catalog.repositories import CatalogRepository
from domain.inventory.aggregator import (
    AggregationIssue,
    GroupRollup,
    StockAggregator,
    StockFigures,
)
from domain.shared.exceptions import (
    CycleDetectedException,
    DeadlineExceededException,
    EntityNotFoundException,
)
from domain.shared.value_objects import Deadline, ItemKind, LookupKind

from .filtering import FacetFilterEngine

logger = logging.getLogger(__name__)


class CatalogQueryService:
    """
    Read-side operations of the quality catalog.

    One instance serves one request: the graph is an immutable snapshot
    and the deadline, if any, bounds the whole request.
    """

    def __init__(
        self,
        graph: EntityGraph,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        deadline: Optional[Deadline] = None,
        default_limit: int = 10,
    ):
        self.graph = graph
        self.deadline = deadline or Deadline.never()
        self.default_limit = default_limit
        self.resolver = RecipeResolver(graph, max_depth=max_depth)
        self.aggregator = StockAggregator(graph)
        self.filters = FacetFilterEngine(graph)

    @classmethod
    def from_repository(
        cls,
        repository: CatalogRepository,
        company_id: Optional[int] = None,
        **options,
    ) -> CatalogQueryService:
        return cls(EntityGraph.load(repository, company_id=company_id), **options)

    # =========================================================================
    # FILTERING
    # =========================================================================

    def web_filter(
        self,
        criteria: Optional[FilterCriteria] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        expand: bool = False,
    ) -> WebFilterResponse:
        """
        Paged product summaries plus detail rows for the page.

        ``row_count`` counts the unpaged filtered set. With ``expand``
        every detail row also carries its resolved BOM and stock.
        """
        result = self.filters.query(criteria, offset=offset, limit=limit)
        details = []
        for product in result.page:
            row = product_to_details(self.graph, product)
            if expand:
                row.bom = self._expanded_bom(product)
                row.stock = figures_to_stock_dto(self.aggregator.figures(product))
            details.append(row)

        logger.debug(
            f"Web filter matched {result.row_count} products, "
            f"returning {len(result.page)} (offset={offset}, limit={limit})"
        )
        return WebFilterResponse(
            products_with_details=details,
            products=[product_to_summary(product) for product in result.page],
            row_count=result.row_count,
        )

    def _expanded_bom(self, product: Product) -> BomDto:
        """Resolve one page row; a failed unit is returned empty and flagged."""
        try:
            return resolution_to_dto(self.resolver.resolve(
                ItemKind.PRODUCT, product.id, deadline=self.deadline
            ))
        except (CycleDetectedException, DeadlineExceededException) as exc:
            logger.warning(f"BOM of product {product.id} not resolved: {exc.message}")
            return BomDto(
                root_kind=ItemKind.PRODUCT.value,
                root_id=product.id,
                quantity=Decimal(1),
                single_level=False,
                issues=[exc.as_dict()],
            )

    def filter_items(self, criteria: Optional[FilterCriteria] = None) -> FilterItems:
        """Facet values present in the filtered (unpaged) result."""
        matched = self.filters.filter(criteria or FilterCriteria())
        return self.filters.available_items(matched)

    def filtered_list(self, list_filter: Optional[ProductListFilter] = None) -> List[ProductWithDetails]:
        products = self.filters.filtered_list(
            list_filter or ProductListFilter(), default_limit=self.default_limit
        )
        return [product_to_details(self.graph, product) for product in products]

    # =========================================================================
    # DETAILS
    # =========================================================================

    def product_detail(
        self,
        product_id: int,
        quantity: Decimal | int | str = 1,
        single_level: bool = False,
    ) -> ProductDetail:
        product = self.graph.require(ItemKind.PRODUCT, product_id)
        resolution = self.resolver.resolve(
            ItemKind.PRODUCT, product_id, quantity,
            single_level=single_level, deadline=self.deadline,
        )
        return ProductDetail(
            product=product_to_details(self.graph, product),
            bom=resolution_to_dto(resolution),
            stock=figures_to_stock_dto(self.aggregator.figures(product)),
        )

    def semi_product_detail(
        self,
        semi_product_id: int,
        quantity: Decimal | int | str = 1,
        single_level: bool = False,
    ) -> SemiProductReport:
        semi_product = self.graph.require(ItemKind.SEMI_PRODUCT, semi_product_id)
        report = self._semi_product_report(semi_product)
        report.bom = resolution_to_dto(self.resolver.resolve(
            ItemKind.SEMI_PRODUCT, semi_product_id, quantity,
            single_level=single_level, deadline=self.deadline,
        ))
        return report

    def _semi_product_report(self, semi_product: SemiProduct) -> SemiProductReport:
        stock = self.aggregator.semi_product_stock(semi_product, deadline=self.deadline)
        return SemiProductReport(
            semi_product=semi_product_to_dto(self.graph, semi_product),
            stock=figures_to_stock_dto(stock.figures),
            products=[
                ProductStockDto(
                    product=product_to_summary(consumer.product),
                    qty_in_box=consumer.product.qty_in_box,
                    stock=figures_to_stock_dto(consumer.figures),
                )
                for consumer in stock.consumers
            ],
            issues=[issue.as_dict() for issue in stock.issues],
        )

    def raw_material_detail(self, raw_material_id: int) -> RawMaterialReport:
        """
        Raw material stock with every semi product consuming it.

        Each consuming semi product is one aggregation unit; a unit the
        deadline cuts off is reported with zero stock and flagged.
        """
        raw_material = self.graph.require(ItemKind.RAW_MATERIAL, raw_material_id)
        report = RawMaterialReport(
            raw_material=raw_material_to_dto(self.graph, raw_material),
            stock=figures_to_stock_dto(self.aggregator.figures(raw_material)),
        )
        for owner_kind, owner_id in self.graph.where_used(ItemKind.RAW_MATERIAL, raw_material_id):
            if owner_kind is not ItemKind.SEMI_PRODUCT:
                continue
            semi_product = self.graph.semi_product(owner_id)
            if semi_product is None:
                issue = AggregationIssue(
                    reason="missing_entity",
                    owner_kind=ItemKind.SEMI_PRODUCT,
                    owner_id=owner_id,
                    message=f"SemiProduct {owner_id} consuming raw material "
                            f"{raw_material_id} is not in the catalog; skipped",
                )
                logger.warning(issue.message)
                report.issues.append(issue.as_dict())
                continue
            try:
                report.semi_products.append(self._semi_product_report(semi_product))
            except DeadlineExceededException as exc:
                logger.warning(f"Raw material {raw_material_id} report: {exc.message}")
                issue = AggregationIssue(
                    reason="deadline_exceeded",
                    owner_kind=ItemKind.SEMI_PRODUCT,
                    owner_id=owner_id,
                    message=f"SemiProduct {owner_id} not aggregated before deadline; counted as 0",
                )
                report.semi_products.append(SemiProductReport(
                    semi_product=semi_product_to_dto(self.graph, semi_product),
                    stock=figures_to_stock_dto(StockFigures.zero(semi_product)),
                    issues=[issue.as_dict()],
                ))
                report.issues.append(issue.as_dict())
        return report

    # =========================================================================
    # GROUP REPORTS
    # =========================================================================

    def raw_material_group_report(self, group_id: int) -> GroupReport:
        group = self.graph.require_lookup(LookupKind.RAW_MATERIAL_GROUP, group_id)
        rollup = self.aggregator.raw_material_group_rollup(group_id, deadline=self.deadline)
        return self._group_report(group, rollup)

    def semi_product_group_report(self, group_id: int) -> GroupReport:
        group = self.graph.require_lookup(LookupKind.SEMI_PRODUCT_GROUP, group_id)
        rollup = self.aggregator.semi_product_group_rollup(group_id, deadline=self.deadline)
        return self._group_report(group, rollup)

    def _group_report(self, group, rollup: GroupRollup) -> GroupReport:
        members = []
        for figures in rollup.members:
            good = self.graph.good(figures.owner_kind, figures.owner_id)
            members.append(GroupMemberDto(
                id=good.id,
                code=good.code,
                name=good.name,
                stock=figures_to_stock_dto(figures),
            ))
        return GroupReport(
            id=group.id,
            name=group.name,
            code=group.code,
            kind=rollup.group_kind.value,
            total_stock=rollup.total_stock,
            members=members,
            issues=[issue.as_dict() for issue in rollup.issues],
        )

    # =========================================================================
    # BOM
    # =========================================================================

    def resolve_bom(
        self,
        kind: ItemKind,
        item_id: int,
        quantity: Decimal | int | str = 1,
        single_level: bool = False,
    ) -> BomDto:
        resolution = self.resolver.resolve(
            kind, item_id, quantity, single_level=single_level, deadline=self.deadline
        )
        return resolution_to_dto(resolution)

    def where_used(self, kind: ItemKind, item_id: int) -> WhereUsedDto:
        owners = self.resolver.where_used(kind, item_id)
        return WhereUsedDto(
            kind=kind.value,
            item_id=item_id,
            owners=[owner_to_dto(self.graph, owner_kind, owner_id) for owner_kind, owner_id in owners],
        )

    # =========================================================================
    # DOCUMENTS
    # =========================================================================

    def recipe_details(self, recipe_id: int) -> DetailsDto:
        recipe = self.graph.recipe(recipe_id)
        if recipe is None:
            raise EntityNotFoundException("Recipe", recipe_id)
        return recipe_to_details(self.graph, recipe)

    def all_recipe_details(self) -> List[DetailsDto]:
        return [recipe_to_details(self.graph, recipe) for recipe in self.graph.recipes]

    def norm_details(self, norm_id: int) -> DetailsDto:
        norm = self.graph.norm(norm_id)
        if norm is None:
            raise EntityNotFoundException("Norm", norm_id)
        return norm_to_details(self.graph, norm)

    def all_norm_details(self) -> List[DetailsDto]:
        return [norm_to_details(self.graph, norm) for norm in self.graph.norms]

    def spec_details(self, spec_id: int) -> DetailsDto:
        spec = self.graph.spec(spec_id)
        if spec is None:
            raise EntityNotFoundException("Spec", spec_id)
        return spec_to_details(self.graph, spec)

    def all_spec_details(self) -> List[DetailsDto]:
        return [spec_to_details(self.graph, spec) for spec in self.graph.specs]

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def dashboard_counts(self) -> DashboardCounts:
        return DashboardCounts(
            products=len(self.graph.products),
            semi_products=len(self.graph.semi_products),
            raw_materials=len(self.graph.raw_materials),
            product_groups=len(self.graph.lookups_of(LookupKind.PRODUCT_GROUP)),
            semi_product_groups=len(self.graph.lookups_of(LookupKind.SEMI_PRODUCT_GROUP)),
            raw_material_groups=len(self.graph.lookups_of(LookupKind.RAW_MATERIAL_GROUP)),
        )
