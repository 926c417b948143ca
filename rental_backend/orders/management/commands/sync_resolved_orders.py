# orders/management/commands/sync_resolved_orders.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from orders.models import Order
from orders.services.status_sync import sync_resolved_order_statuses


class Command(BaseCommand):
    help = (
        "Move every 'returned_with_issue' order whose violations are all settled "
        "to 'returned' and create its deposit refund."
    )

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Report without writing to DB")

    def handle(self, *args, **options):
        dry_run = bool(options.get("dry_run"))

        candidates = Order.objects.filter(status=Order.STATUS_RETURNED_WITH_ISSUE).count()

        self.stdout.write(self.style.MIGRATE_HEADING("Sync resolved orders"))
        self.stdout.write(f"Orders returned with issue: {candidates}")

        if dry_run:
            self.stdout.write("DRY RUN: no database changes will be saved.")

        updated = sync_resolved_order_statuses(dry_run=dry_run)

        verb = "would be updated" if dry_run else "updated"
        self.stdout.write(self.style.SUCCESS(f"{updated} order(s) {verb}."))
