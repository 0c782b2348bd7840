"""Management command to expire stale reward instances."""

from django.core.management.base import BaseCommand

from loyaltyledger.services.expiration import sweep_expired


class Command(BaseCommand):
    help = "Mark non-redeemed reward instances past their expiry date as expired"

    def handle(self, *args, **options):
        count = sweep_expired()
        self.stdout.write(
            self.style.SUCCESS(f"Marked {count} reward instance(s) as expired.")
        )
