"""
BOM Tasks.

Celery tasks for BOM-related operations.
"""

from celery import shared_task
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


@shared_task
def export_bom_to_excel(kind: str, item_id: int, quantity: str = '1', company_id: int = None):
    """
    Export a resolved BOM to Excel file.

    One sheet with the flattened lines, one with raw material totals.
    The file is stored under MEDIA_ROOT for download.
    """
    from application.services.catalog_query import CatalogQueryService
    from domain.shared.exceptions import DomainException
    from domain.shared.value_objects import ItemKind
    from infrastructure.persistence.providers import build_query_service
    import openpyxl
    from openpyxl.styles import Font
    from django.conf import settings
    import os

    try:
        item_kind = ItemKind.parse(kind)
        service: CatalogQueryService = build_query_service(company_id)
        root = service.graph.require(item_kind, item_id)
        bom = service.resolve_bom(item_kind, item_id, quantity)

        # Create workbook
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "BOM"

        header_font = Font(bold=True)

        headers = ['Level', 'Kind', 'Code', 'Name', 'Amount', 'Unit', 'Parent']
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font

        for row, line in enumerate(bom.lines, 2):
            indent = "  " * (line.level - 1)
            ws.cell(row=row, column=1, value=line.level)
            ws.cell(row=row, column=2, value=ItemKind(line.kind).label)
            ws.cell(row=row, column=3, value=f"{indent}{line.code or ''}")
            ws.cell(row=row, column=4, value=line.name)
            ws.cell(row=row, column=5, value=float(line.amount))
            ws.cell(row=row, column=6, value=line.unit)
            ws.cell(row=row, column=7, value=f"{ItemKind(line.parent_kind).label} {line.parent_id}")

        totals = wb.create_sheet("Raw materials")
        for col, header in enumerate(['Code', 'Name', 'Amount', 'Unit'], 1):
            cell = totals.cell(row=1, column=col, value=header)
            cell.font = header_font

        for row, total in enumerate(bom.leaf_totals, 2):
            raw_material = service.graph.raw_material(total.raw_material_id)
            totals.cell(row=row, column=1, value=raw_material.code if raw_material else None)
            totals.cell(row=row, column=2, value=raw_material.name if raw_material else None)
            totals.cell(row=row, column=3, value=float(total.amount))
            totals.cell(row=row, column=4, value=total.unit)

        # Auto-width columns
        for sheet in (ws, totals):
            for column in sheet.columns:
                column_letter = column[0].column_letter
                max_length = max(len(str(cell.value)) for cell in column if cell.value is not None)
                sheet.column_dimensions[column_letter].width = max_length + 2

        # Save file
        export_dir = os.path.join(settings.MEDIA_ROOT, 'exports', 'bom')
        os.makedirs(export_dir, exist_ok=True)

        code = root.code or f"{item_kind.value}-{item_id}"
        filename = f"BOM_{code}_{timezone.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        filepath = os.path.join(export_dir, filename)
        wb.save(filepath)

        logger.info(f"Exported BOM of {item_kind.label} {item_id} to {filename}")

        return {
            'kind': item_kind.value,
            'item_id': item_id,
            'lines': len(bom.lines),
            'issues': bom.issues,
            'filename': filename,
            'filepath': filepath,
            'download_url': f"{settings.MEDIA_URL}exports/bom/{filename}",
        }

    except DomainException as e:
        logger.error(f"Cannot export BOM of {kind} {item_id}: {e.message}")
        return {'error': e.as_dict()}
