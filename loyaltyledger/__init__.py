"""
Django Loyalty Ledger - stamp cards, points tiers and reward redemption.

Usage:
    from loyaltyledger import LedgerService, LedgerError

    result = LedgerService.record_stamp_event("CUST-001", 2)
    result.display_stamps, result.total_stamps, result.card_was_reset

    LedgerService.record_purchase_event("CUST-002", Decimal("25.00"))
    LedgerService.redeem_reward("CUST-001", reward.pk, card_cycle_number=1)
    LedgerService.redeem_benefit("CUST-002", tier.pk, "Free coffee")
    LedgerService.sweep_expired()
"""


def __getattr__(name):
    if name == "LedgerService":
        from loyaltyledger.service import LedgerService

        return LedgerService
    if name == "LedgerError":
        from loyaltyledger.exceptions import LedgerError

        return LedgerError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LedgerService", "LedgerError"]
__version__ = "0.1.0"
