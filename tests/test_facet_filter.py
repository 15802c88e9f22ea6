"""
Tests for facet filtering, ordering, paging and facet availability.
"""

import pytest

from application.dto import FACET_FIELDS, FilterCriteria, ProductListFilter
from application.services.filtering import (
    FACET_EXTRACTORS,
    Facet,
    FacetFilterEngine,
    merge_projections,
)
from domain.shared.exceptions import ValidationException


@pytest.fixture
def engine(graph):
    return FacetFilterEngine(graph)


def ids(products):
    return [product.id for product in products]


class TestFilter:

    def test_brand_example(self, engine):
        result = engine.query(FilterCriteria(brand=["Brand A"], product_group=[]))

        assert ids(result.matched) == [1, 2]
        assert result.row_count == 2

    def test_no_criteria_matches_everything(self, engine):
        assert ids(engine.filter(FilterCriteria())) == [1, 2, 3, 4, 5]

    def test_values_within_facet_are_ored(self, engine):
        assert ids(engine.filter(FilterCriteria(brand=["Brand A", "Brand C"]))) == [1, 2, 4]

    def test_facets_are_anded(self, engine):
        criteria = FilterCriteria(brand=["Brand A", "Brand B"], seller=["North"])

        assert ids(engine.filter(criteria)) == [1, 3]

    def test_facet_matches_lookup_id(self, engine):
        assert ids(engine.filter(FilterCriteria(seller=["2"]))) == [2, 4]

    def test_blank_values_are_ignored(self, engine):
        assert ids(engine.filter(FilterCriteria(brand=["", "  "]))) == [1, 2, 3, 4, 5]

    def test_unknown_value_matches_nothing(self, engine):
        assert engine.filter(FilterCriteria(brand=["Brand Z"])) == []

    def test_product_without_reference_never_matches(self, engine):
        # Product 4 has no product group.
        assert 4 not in ids(engine.filter(FilterCriteria(product_group=["Frozen", "Dry"])))

    def test_group_type_definition(self, engine):
        assert ids(engine.filter(FilterCriteria(product_group_type_definition=["Bottom shelf"]))) == [3]
        assert ids(engine.filter(FilterCriteria(product_group_type_definition=["1", "2"]))) == [1, 3]

    def test_created_by(self, engine):
        assert ids(engine.filter(FilterCriteria(created_by=["7"]))) == [1]

    def test_text_terms_are_case_insensitive_substrings(self, engine):
        assert ids(engine.filter(FilterCriteria(name="BAGEL"))) == [4]
        assert ids(engine.filter(FilterCriteria(code="prd-00"))) == [1, 2, 3, 4, 5]

    def test_text_fields_are_ored(self, engine):
        assert ids(engine.filter(FilterCriteria(name="cake", name2="apple"))) == [1, 2]

    def test_text_and_facets_are_anded(self, engine):
        assert ids(engine.filter(FilterCriteria(code="PRD", brand=["Brand B"]))) == [3, 5]

    def test_every_facet_has_an_extractor(self):
        assert {facet.value for facet in FACET_EXTRACTORS} == set(FACET_FIELDS) - {"code", "name", "name2"}
        assert set(Facet) == set(FACET_EXTRACTORS)

    @pytest.mark.parametrize("facet,value", [
        ("brand", "Brand A"),
        ("seller", "South"),
        ("product_group", "Frozen"),
        ("storage_condition", "Cold"),
        ("product_group_type_definition", "Top shelf"),
    ])
    def test_adding_a_constraint_never_grows_the_result(self, engine, facet, value):
        base = FilterCriteria(brand=["Brand A", "Brand B"])
        narrowed = FilterCriteria(brand=["Brand A", "Brand B"])
        getattr(narrowed, facet).append(value)
        if facet == "brand":
            narrowed.seller.append("North")

        assert set(ids(engine.filter(narrowed))) <= set(ids(engine.filter(base)))


class TestSort:

    def test_default_is_id_order(self, engine, graph):
        ordered, warnings = engine.sort(reversed(graph.products), None)

        assert ids(ordered) == [1, 2, 3, 4, 5]
        assert warnings == []

    def test_sort_by_name_is_case_insensitive(self, engine, graph):
        ordered, _ = engine.sort(graph.products, "Name", "asc")

        assert [p.name for p in ordered] == ["bagel", "Bread", "Cake", "Muffin", "Pie"]

    def test_descending(self, engine, graph):
        ordered, _ = engine.sort(graph.products, "name", "DESC")

        assert [p.name for p in ordered] == ["Pie", "Muffin", "Cake", "Bread", "bagel"]

    def test_ties_break_by_id(self, engine, graph):
        ordered, _ = engine.sort(graph.products, "brand", "asc")

        assert ids(ordered) == [1, 2, 3, 5, 4]

    def test_missing_values_come_last(self, engine, graph):
        ascending, _ = engine.sort(graph.products, "created_date", "asc")
        descending, _ = engine.sort(graph.products, "CreatedDate", "desc")

        assert ids(ascending) == [2, 1, 3, 4, 5]
        assert ids(descending) == [1, 2, 3, 4, 5]

    def test_unknown_field_falls_back_with_warning(self, engine, graph):
        ordered, warnings = engine.sort(graph.products, "colour", "desc")

        assert ids(ordered) == [1, 2, 3, 4, 5]
        assert [w.code for w in warnings] == ["UNKNOWN_FACET_FIELD"]
        assert warnings[0].details["field"] == "colour"

    def test_query_reports_sort_warning(self, engine):
        result = engine.query(FilterCriteria(order_by="nope"))

        assert result.row_count == 5
        assert len(result.warnings) == 1


class TestPaging:

    def test_pages_are_disjoint_and_stable(self, engine):
        criteria = FilterCriteria(order_by="brand")

        first = ids(engine.query(criteria, offset=0, limit=2).page)
        second = ids(engine.query(criteria, offset=2, limit=2).page)
        both = ids(engine.query(criteria, offset=0, limit=4).page)

        assert not set(first) & set(second)
        assert first + second == both
        assert ids(engine.query(criteria, offset=0, limit=2).page) == first

    def test_row_count_ignores_paging(self, engine):
        result = engine.query(FilterCriteria(), offset=1, limit=2)

        assert ids(result.page) == [2, 3]
        assert result.row_count == 5

    def test_no_limit_returns_the_rest(self, engine):
        assert ids(engine.query(FilterCriteria(), offset=3).page) == [4, 5]

    def test_offset_past_end(self, engine):
        assert engine.query(FilterCriteria(), offset=10, limit=5).page == []

    @pytest.mark.parametrize("offset,limit", [(-1, 5), (0, -1)])
    def test_negative_values_are_rejected(self, engine, offset, limit):
        with pytest.raises(ValidationException):
            engine.query(FilterCriteria(), offset=offset, limit=limit)


class TestAvailableItems:

    def test_projection_of_filtered_set(self, engine):
        matched = engine.filter(FilterCriteria(brand=["Brand A"]))
        projection = engine.project(matched)

        assert projection["brands"] == {1}
        assert projection["sellers"] == {1, 2}
        assert projection["product_groups"] == {1, 2}
        assert projection["product_group_type_definitions"] == {1}

    def test_items_are_resolved_and_ordered(self, engine, graph):
        items = engine.available_items(graph.products)

        assert [b.name for b in items.brands] == ["Brand A", "Brand B", "Brand C"]
        assert [g.name for g in items.product_groups] == ["Dry", "Frozen"]
        assert [s.code for s in items.storage_conditions] == ["CLD"]
        assert items.product_types == []
        assert [t.name for t in items.product_group_types] == ["Shelf"]
        assert [d.name for d in items.product_group_types[0].definitions] == ["Bottom shelf", "Top shelf"]

    def test_selecting_a_facet_narrows_the_others(self, engine):
        matched = engine.filter(FilterCriteria(seller=["South"]))
        items = engine.available_items(matched)

        assert [b.name for b in items.brands] == ["Brand A", "Brand C"]

    def test_merged_chunks_equal_whole(self, engine, graph):
        products = graph.products
        whole = engine.project(products)
        merged = merge_projections([engine.project(products[:2]), engine.project(products[2:])])

        assert merged == whole

    def test_unknown_ids_are_dropped(self, engine):
        items = engine.items_from_projection({"brands": {1, 42}})

        assert [b.id for b in items.brands] == [1]


class TestFilteredList:

    def test_default_limit(self, engine):
        assert ids(engine.filtered_list(ProductListFilter(), default_limit=3)) == [1, 2, 3]

    def test_exact_ids(self, engine):
        assert ids(engine.filtered_list(ProductListFilter(brand_id=1, seller_id=2))) == [2]

    def test_group_type(self, engine):
        assert ids(engine.filtered_list(ProductListFilter(product_group_type_id=1))) == [1, 3]
        assert ids(engine.filtered_list(ProductListFilter(product_group_type_definition_id=2))) == [3]

    def test_code_or_name(self, engine):
        assert ids(engine.filtered_list(ProductListFilter(code_or_name="bread"))) == [3]
        assert ids(engine.filtered_list(ProductListFilter(code_or_name="-005"))) == [5]

    def test_short_term_is_ignored(self, engine):
        assert len(engine.filtered_list(ProductListFilter(code_or_name="zz"))) == 5

    def test_offset_and_limit(self, engine):
        assert ids(engine.filtered_list(ProductListFilter(offset=2, limit=2))) == [3, 4]
