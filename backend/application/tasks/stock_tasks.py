"""
Stock Tasks.

Celery tasks for group stock rollups and facet availability. Each group
(or product chunk) is computed by its own worker; partial results are
plain dicts merged by summation or union, so completion order does not
matter.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from celery import chord, shared_task
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# SERIALIZATION
# =============================================================================

def rollup_to_dict(rollup) -> Dict[str, Any]:
    return {
        'group_kind': rollup.group_kind.value,
        'group_id': rollup.group_id,
        'total_stock': rollup.total_stock,
        'members': [
            {**asdict(figures), 'owner_kind': figures.owner_kind.value}
            for figures in rollup.members
        ],
        'issues': [issue.as_dict() for issue in rollup.issues],
    }


def rollup_from_dict(data: Dict[str, Any]):
    from domain.inventory.aggregator import AggregationIssue, GroupRollup, StockFigures
    from domain.shared.value_objects import ItemKind, LookupKind

    return GroupRollup(
        group_kind=LookupKind(data['group_kind']),
        group_id=data['group_id'],
        total_stock=data['total_stock'],
        members=[
            StockFigures(**{**member, 'owner_kind': ItemKind(member['owner_kind'])})
            for member in data.get('members', [])
        ],
        issues=[
            AggregationIssue(
                reason=issue['reason'],
                owner_kind=ItemKind(issue['owner_kind']),
                owner_id=issue['owner_id'],
                message=issue['message'],
            )
            for issue in data.get('issues', [])
        ],
    )


# =============================================================================
# GROUP ROLLUPS
# =============================================================================

def _rollup_group(task, kind: str, group_id: int, company_id: Optional[int]):
    from domain.shared.exceptions import DomainException
    from domain.shared.value_objects import LookupKind
    from infrastructure.persistence.providers import build_query_service

    try:
        service = build_query_service(company_id)
        group_kind = LookupKind(kind)
        service.graph.require_lookup(group_kind, group_id)

        if group_kind is LookupKind.RAW_MATERIAL_GROUP:
            rollup = service.aggregator.raw_material_group_rollup(group_id, deadline=service.deadline)
        else:
            rollup = service.aggregator.semi_product_group_rollup(group_id, deadline=service.deadline)

        logger.info(
            f"Rolled up {kind} {group_id}: total_stock={rollup.total_stock}, "
            f"members={len(rollup.members)}, issues={len(rollup.issues)}"
        )
        return rollup_to_dict(rollup)

    except DomainException as e:
        logger.error(f"Cannot roll up {kind} {group_id}: {e.message}")
        return {'group_kind': kind, 'group_id': group_id, 'error': e.as_dict()}
    except Exception as e:
        logger.error(f"Error rolling up {kind} {group_id}: {e}")
        raise task.retry(exc=e, countdown=60)


@shared_task(bind=True, max_retries=3)
def rollup_raw_material_group(self, group_id: int, company_id: Optional[int] = None):
    """Stock rollup of one raw material group."""
    return _rollup_group(self, 'raw_material_group', group_id, company_id)


@shared_task(bind=True, max_retries=3)
def rollup_semi_product_group(self, group_id: int, company_id: Optional[int] = None):
    """Stock rollup of one semi product group."""
    return _rollup_group(self, 'semi_product_group', group_id, company_id)


@shared_task
def merge_group_rollups(results: List[Dict[str, Any]]):
    """
    Merge partial rollups into one result per group.

    Failed groups are passed through under ``errors``.
    """
    from domain.inventory.aggregator import merge_rollups

    errors = [result for result in results if 'error' in result]
    partials = [rollup_from_dict(result) for result in results if 'error' not in result]
    merged = merge_rollups(partials)

    groups = [
        rollup_to_dict(rollup)
        for _, rollup in sorted(merged.items(), key=lambda item: (item[0][0].value, item[0][1]))
    ]
    logger.info(f"Merged {len(partials)} rollups into {len(groups)} groups ({len(errors)} failed)")
    return {
        'groups': groups,
        'total_stock': sum(group['total_stock'] for group in groups),
        'errors': errors,
    }


ROLLUP_TASKS = {
    'raw_material_group': rollup_raw_material_group,
    'semi_product_group': rollup_semi_product_group,
}


@shared_task
def schedule_group_rollups(kind: str, group_ids: Optional[List[int]] = None, company_id: Optional[int] = None):
    """
    Fan out one rollup per group and merge the results with a chord.

    Without ``group_ids`` every group of ``kind`` is rolled up.
    """
    from domain.shared.value_objects import LookupKind
    from infrastructure.persistence.providers import build_query_service

    task = ROLLUP_TASKS.get(kind)
    if task is None:
        return {'error': f"Unknown group kind '{kind}'", 'known_kinds': sorted(ROLLUP_TASKS)}

    if not group_ids:
        service = build_query_service(company_id)
        group_ids = [group.id for group in service.graph.lookups_of(LookupKind(kind))]
    else:
        group_ids = list(dict.fromkeys(group_ids))

    if not group_ids:
        return {'kind': kind, 'scheduled': 0, 'group_ids': []}

    result = chord(task.s(group_id, company_id) for group_id in group_ids)(merge_group_rollups.s())
    logger.info(f"Scheduled {len(group_ids)} {kind} rollups")
    return {'kind': kind, 'scheduled': len(group_ids), 'group_ids': group_ids, 'task_id': result.id}


# =============================================================================
# FACET AVAILABILITY
# =============================================================================

@shared_task(bind=True, max_retries=3)
def compute_filter_items_chunk(self, product_ids: List[int], company_id: Optional[int] = None):
    """Distinct lookup ids referenced by one chunk of products."""
    from domain.shared.exceptions import DomainException
    from infrastructure.persistence.providers import build_query_service

    try:
        service = build_query_service(company_id)
        wanted = set(product_ids)
        products = [product for product in service.graph.products if product.id in wanted]
        projection = service.filters.project(products)
        return {key: sorted(ids) for key, ids in projection.items()}

    except DomainException as e:
        logger.error(f"Cannot compute filter items for {len(product_ids)} products: {e.message}")
        return {'error': e.as_dict()}
    except Exception as e:
        logger.error(f"Error computing filter items chunk: {e}")
        raise self.retry(exc=e, countdown=60)


@shared_task
def merge_filter_items(chunks: List[Dict[str, List[int]]], company_id: Optional[int] = None):
    """Union of chunk projections, resolved to facet lists."""
    from application.services.filtering import merge_projections
    from infrastructure.persistence.providers import build_query_service

    errors = [chunk['error'] for chunk in chunks if 'error' in chunk]
    merged = merge_projections(chunk for chunk in chunks if 'error' not in chunk)
    service = build_query_service(company_id)
    items = service.filters.items_from_projection(merged)
    result = asdict(items)
    if errors:
        result['errors'] = errors
    return result


@shared_task
def schedule_filter_items(criteria: Optional[Dict[str, Any]] = None, company_id: Optional[int] = None):
    """
    Facet availability of a filtered result, computed in product chunks
    of ``FILTER_ITEMS_CHUNK_SIZE``.
    """
    from django.conf import settings
    from application.dto import FilterCriteria
    from infrastructure.persistence.providers import build_query_service

    service = build_query_service(company_id)
    matched = service.filters.filter(FilterCriteria.from_dict(criteria or {}))
    ids = [product.id for product in matched]
    size = max(1, settings.FILTER_ITEMS_CHUNK_SIZE)
    chunks = [ids[i:i + size] for i in range(0, len(ids), size)] or [[]]

    result = chord(
        compute_filter_items_chunk.s(chunk, company_id) for chunk in chunks
    )(merge_filter_items.s(company_id=company_id))
    logger.info(f"Scheduled filter items for {len(ids)} products in {len(chunks)} chunks")
    return {'products': len(ids), 'chunks': len(chunks), 'task_id': result.id}
