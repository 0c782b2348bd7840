"""Management command to re-derive reward instances from stamp balances."""

from django.core.management.base import BaseCommand

from loyaltyledger.services.customers import backfill_reward_instances


class Command(BaseCommand):
    help = "Create and unlock reward instances for every card cycle customers have reached"

    def add_arguments(self, parser):
        parser.add_argument(
            "--customer",
            default=None,
            help="Only backfill this customer code",
        )

    def handle(self, *args, **options):
        stats = backfill_reward_instances(options["customer"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Processed {stats['customers_processed']} customer(s), "
                f"created {stats['instances_created']} reward instance(s)."
            )
        )
