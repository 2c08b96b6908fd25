"""Management command to rebuild cached customer balances from the ledger."""

from django.core.management.base import BaseCommand

from rewardman.models import Customer
from rewardman.services import ledger


class Command(BaseCommand):
    help = "Recompute total/lifetime points and tier of customers from the ledger"

    def add_arguments(self, parser):
        parser.add_argument(
            "--restaurant",
            default=None,
            help="Only customers of this restaurant slug",
        )

    def handle(self, *args, **options):
        qs = Customer.objects.filter(is_active=True)
        if options["restaurant"]:
            qs = qs.filter(restaurant__slug=options["restaurant"])

        rebuilt = 0
        for customer_id in list(qs.values_list("pk", flat=True)):
            if ledger.rebuild_aggregates(customer_id):
                rebuilt += 1

        self.stdout.write(
            self.style.SUCCESS(f"Rebuilt {rebuilt} customer balance(s).")
        )
