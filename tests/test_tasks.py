"""
Tests for the Celery tasks. Tasks run eagerly against the test
snapshot configured by the ``snapshot_file`` fixture.
"""

import os

import openpyxl
import pytest

from application.tasks.bom_tasks import export_bom_to_excel
from application.tasks.stock_tasks import (
    compute_filter_items_chunk,
    merge_filter_items,
    merge_group_rollups,
    rollup_from_dict,
    rollup_raw_material_group,
    rollup_semi_product_group,
    rollup_to_dict,
    schedule_filter_items,
    schedule_group_rollups,
)
from domain.inventory.aggregator import StockAggregator


pytestmark = pytest.mark.usefixtures("snapshot_file")


class TestGroupRollups:

    def test_raw_material_group(self):
        result = rollup_raw_material_group.apply(args=(1,)).get()

        assert result['group_kind'] == 'raw_material_group'
        assert result['total_stock'] == 24
        assert [m['owner_id'] for m in result['members']] == [1, 2, 3]
        assert result['issues'] == []

    def test_semi_product_group(self):
        result = rollup_semi_product_group(1, company_id=1)

        assert result['total_stock'] == 5

    def test_unknown_group_is_reported(self):
        result = rollup_raw_material_group(99)

        assert result['group_id'] == 99
        assert result['error']['code'] == 'ENTITY_NOT_FOUND'

    def test_dict_round_trip_keeps_totals(self, graph):
        rollup = StockAggregator(graph).raw_material_group_rollup(1)

        restored = rollup_from_dict(rollup_to_dict(rollup))

        assert restored.total_stock == rollup.total_stock
        assert restored.members == rollup.members

    def test_merge_partials_in_any_order(self, graph):
        aggregator = StockAggregator(graph)
        partials = [
            rollup_to_dict(aggregator.raw_material_group_rollup(1, member_ids=[member_id]))
            for member_id in (3, 1, 2)
        ]
        partials.append(rollup_to_dict(aggregator.raw_material_group_rollup(2)))
        failed = {'group_kind': 'raw_material_group', 'group_id': 9, 'error': {'code': 'ENTITY_NOT_FOUND'}}

        merged = merge_group_rollups(partials + [failed])

        assert [(g['group_id'], g['total_stock']) for g in merged['groups']] == [(1, 24), (2, 0)]
        assert merged['total_stock'] == 24
        assert merged['errors'] == [failed]

    def test_schedule_unknown_kind(self):
        result = schedule_group_rollups('warehouse')

        assert 'error' in result
        assert result['known_kinds'] == ['raw_material_group', 'semi_product_group']

    def test_schedule_every_group(self):
        result = schedule_group_rollups('raw_material_group', company_id=1)

        assert result['scheduled'] == 2
        assert result['group_ids'] == [1, 2]

    def test_schedule_rolls_up_each_group_once(self):
        result = schedule_group_rollups('raw_material_group', [2, 1, 2, 1], company_id=1)

        assert result['scheduled'] == 2
        assert result['group_ids'] == [2, 1]


class TestFilterItems:

    def test_chunk_projection(self):
        projection = compute_filter_items_chunk([1, 2], company_id=1)

        assert projection['brands'] == [1]
        assert projection['sellers'] == [1, 2]

    def test_merge_chunks(self):
        chunks = [
            compute_filter_items_chunk([1, 2], company_id=1),
            compute_filter_items_chunk([3], company_id=1),
            {'error': {'code': 'VALIDATION_ERROR'}},
        ]

        items = merge_filter_items(chunks, company_id=1)

        assert [b['name'] for b in items['brands']] == ['Brand A', 'Brand B']
        assert [t['name'] for t in items['product_group_types']] == ['Shelf']
        assert items['errors'] == [{'code': 'VALIDATION_ERROR'}]

    def test_schedule_splits_into_chunks(self, settings):
        settings.FILTER_ITEMS_CHUNK_SIZE = 2

        result = schedule_filter_items(company_id=1)

        assert (result['products'], result['chunks']) == (5, 3)
        assert result['task_id']

    def test_schedule_filtered_products(self):
        result = schedule_filter_items({'brand': ['Brand A']}, company_id=1)

        assert (result['products'], result['chunks']) == (2, 1)


class TestBomExport:

    def test_workbook_contents(self):
        result = export_bom_to_excel('product', 1, '2', company_id=1)

        assert result['lines'] == 3
        assert result['filename'].startswith('BOM_PRD-001_')
        assert result['download_url'].endswith(result['filename'])
        assert os.path.exists(result['filepath'])

        workbook = openpyxl.load_workbook(result['filepath'])
        lines = list(workbook['BOM'].iter_rows(min_row=2, values_only=True))
        assert [(row[0], row[2].strip(), row[4]) for row in lines] == [
            (1, 'SP-001', 4.0),
            (2, 'RM-002', 12.0),
            (1, 'RM-001', 2.0),
        ]
        totals = list(workbook['Raw materials'].iter_rows(min_row=2, values_only=True))
        assert totals == [('RM-002', 'Rye flour', 12.0, 'kg'), ('RM-001', 'Flour', 2.0, 'kg')]

    def test_headers_are_bold(self):
        result = export_bom_to_excel('semi_product', 1)

        sheet = openpyxl.load_workbook(result['filepath'])['BOM']
        assert sheet['A1'].value == 'Level'
        assert sheet['A1'].font.bold

    def test_unknown_item(self):
        result = export_bom_to_excel('product', 99)

        assert result['error']['code'] == 'ENTITY_NOT_FOUND'

    def test_unknown_kind(self):
        result = export_bom_to_excel('warehouse', 1)

        assert result['error']['code'] == 'VALIDATION_ERROR'
