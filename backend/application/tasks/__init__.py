"""
Celery tasks of the quality catalog.

Imported here so ``autodiscover_tasks(['application'])`` registers them.
"""

from .bom_tasks import export_bom_to_excel
from .stock_tasks import (
    compute_filter_items_chunk,
    merge_filter_items,
    merge_group_rollups,
    rollup_raw_material_group,
    rollup_semi_product_group,
    schedule_filter_items,
    schedule_group_rollups,
)

__all__ = [
    'export_bom_to_excel',
    'compute_filter_items_chunk',
    'merge_filter_items',
    'merge_group_rollups',
    'rollup_raw_material_group',
    'rollup_semi_product_group',
    'schedule_filter_items',
    'schedule_group_rollups',
]
