"""Transaction ledger writer."""

from decimal import Decimal

from loyaltyledger.models import Customer, LedgerTransaction


def record(
    customer: Customer,
    description: str,
    points: int = 0,
    stamps_earned: int | None = None,
    amount: Decimal | None = None,
    tax_amount: Decimal | None = None,
) -> LedgerTransaction:
    """Append one immutable transaction row."""
    return LedgerTransaction.objects.create(
        customer=customer,
        points=points,
        stamps_earned=stamps_earned,
        description=description[:255],
        amount=amount,
        tax_amount=tax_amount,
    )


def history(customer: Customer, limit: int | None = None) -> list[LedgerTransaction]:
    """Transactions for a customer, newest first."""
    if limit is None:
        from loyaltyledger.conf import ledger_settings

        limit = ledger_settings.TRANSACTION_HISTORY_LIMIT
    return list(LedgerTransaction.objects.filter(customer=customer)[:limit])
