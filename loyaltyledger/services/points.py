"""Purchase events for points programs."""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from loyaltyledger.exceptions import LedgerError
from loyaltyledger.models import Customer, LedgerTransaction
from loyaltyledger.services import customers, ledger, tiers
from loyaltyledger.signals import tier_upgraded

logger = logging.getLogger(__name__)


@dataclass
class PurchaseEventResult:
    """Balances after a purchase."""

    points: int
    points_earned: int
    tier: str
    tier_upgrade: tiers.TierUpgrade | None
    transaction: LedgerTransaction


def _to_decimal(value, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerError("INVALID_INPUT", message=f"{name} must be a number", **{name: value})


def calculate_points(amount: Decimal, multiplier: Decimal) -> int:
    """Points for a pre-tax amount, rounded half-up."""
    return int((amount * multiplier).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def record_purchase_event(
    customer_code: str,
    amount,
    points_multiplier=None,
    description: str = "",
    tax_amount=None,
    merchant_code: str | None = None,
) -> PurchaseEventResult:
    """
    Credit points for a purchase and apply any tier upgrade.

    Args:
        customer_code: Customer code
        amount: Purchase amount excluding tax (must be positive)
        points_multiplier: Points per unit; defaults to the merchant's
        description: Ledger description (defaults to "Purchase of $X.XX")
        tax_amount: Tax recorded on the ledger row, never earns points
        merchant_code: Caller's merchant, checked against the customer

    Raises:
        LedgerError: INVALID_INPUT, CUSTOMER_NOT_FOUND, OWNERSHIP_MISMATCH,
        NOT_APPLICABLE (stamp program)
    """
    amount = _to_decimal(amount, "amount")
    if not amount.is_finite() or amount <= 0:
        raise LedgerError("INVALID_INPUT", message="amount must be positive", amount=str(amount))
    if tax_amount is not None:
        tax_amount = _to_decimal(tax_amount, "tax_amount")

    with transaction.atomic():
        customer = customers.get_for_update(customer_code, merchant_code)
        merchant = customer.merchant
        if merchant.is_stamp_program:
            raise LedgerError(
                "NOT_APPLICABLE",
                message="Points can only be earned on a points program",
                merchant_code=merchant.code,
            )

        if points_multiplier is None:
            multiplier = merchant.effective_points_multiplier
        else:
            multiplier = _to_decimal(points_multiplier, "points_multiplier")
        if not multiplier.is_finite() or multiplier <= 0:
            raise LedgerError(
                "INVALID_INPUT",
                message="points_multiplier must be positive",
                points_multiplier=str(multiplier),
            )

        points_earned = calculate_points(amount, multiplier)
        customer.points += points_earned
        customer.save(update_fields=["points", "updated_at"])

        upgrade = tiers.check_and_upgrade_tier(customer, customer.points)

        tx = ledger.record(
            customer,
            description or f"Purchase of ${amount:.2f}",
            points=points_earned,
            amount=amount,
            tax_amount=tax_amount,
        )

        if upgrade.upgraded:
            transaction.on_commit(
                lambda: tier_upgraded.send(sender=Customer, customer=customer, upgrade=upgrade)
            )

    return PurchaseEventResult(
        points=customer.points,
        points_earned=points_earned,
        tier=customer.tier,
        tier_upgrade=upgrade if upgrade.upgraded else None,
        transaction=tx,
    )
