from django.apps import AppConfig


class LoyaltyLedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "loyaltyledger"
    verbose_name = "Loyalty Ledger"
