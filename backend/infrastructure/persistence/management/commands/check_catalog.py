"""
Django management command to check the integrity of a catalog snapshot.

Resolves the BOM of every product and semi product and reports cycles
and invalid recipe rows.
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from application.services.catalog_query import CatalogQueryService
from domain.shared.exceptions import CycleDetectedException, DomainException
from domain.shared.value_objects import ItemKind
from infrastructure.persistence.providers import get_catalog_repository
from infrastructure.persistence.snapshot import SnapshotCatalogRepository


class Command(BaseCommand):
    help = 'Check recipes of a catalog snapshot for cycles and invalid rows'

    def add_arguments(self, parser):
        parser.add_argument(
            '--path',
            type=str,
            default=None,
            help='Snapshot file to check (defaults to the configured repository)'
        )
        parser.add_argument(
            '--company',
            type=int,
            default=None,
            help='Only check rows of this company'
        )
        parser.add_argument(
            '--strict',
            action='store_true',
            help='Exit with an error when problems are found'
        )

    def handle(self, *args, **options):
        try:
            if options['path']:
                repository = SnapshotCatalogRepository.from_file(options['path'])
            else:
                repository = get_catalog_repository()
        except DomainException as e:
            raise CommandError(e.message)

        service = CatalogQueryService.from_repository(
            repository,
            company_id=options['company'],
            max_depth=settings.BOM_MAX_DEPTH,
        )
        counts = service.dashboard_counts()

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("CATALOG CHECK"))
        self.stdout.write("=" * 80)
        self.stdout.write(f"Products:            {counts.products}")
        self.stdout.write(f"Semi products:       {counts.semi_products}")
        self.stdout.write(f"Raw materials:       {counts.raw_materials}")
        self.stdout.write(f"Product groups:      {counts.product_groups}")
        self.stdout.write(f"Semi product groups: {counts.semi_product_groups}")
        self.stdout.write(f"Raw material groups: {counts.raw_material_groups}")
        self.stdout.write("")

        problems = 0
        roots = [(ItemKind.PRODUCT, p.id) for p in service.graph.products]
        roots += [(ItemKind.SEMI_PRODUCT, s.id) for s in service.graph.semi_products]
        for kind, item_id in roots:
            try:
                bom = service.resolve_bom(kind, item_id)
            except CycleDetectedException as e:
                problems += 1
                path = " -> ".join(e.details['path'])
                self.stdout.write(self.style.ERROR(f"✗ {kind.label} {item_id}: {e.message} ({path})"))
                continue

            for issue in bom.issues:
                problems += 1
                self.stdout.write(self.style.WARNING(f"⚠ {kind.label} {item_id}: {issue['message']}"))

        self.stdout.write("")
        if problems:
            message = f"{problems} problem(s) found in {len(roots)} recipes"
            if options['strict']:
                raise CommandError(message)
            self.stdout.write(self.style.WARNING(message))
        else:
            self.stdout.write(self.style.SUCCESS(f"✓ {len(roots)} recipes resolved without problems"))
