"""Customer lookups, enrollment and read models.

All balance mutations go through ``get_for_update()`` inside
transaction.atomic(), which serialises concurrent events for one customer.
"""

import logging
from dataclasses import dataclass, field

from django.db import transaction

from loyaltyledger.exceptions import LedgerError
from loyaltyledger.models import (
    Customer,
    Merchant,
    RedeemedReward,
    RewardInstance,
    RewardStatus,
)
from loyaltyledger.services import cycle, tiers, unlock

logger = logging.getLogger(__name__)


@dataclass
class CardSummary:
    """Everything a scanner, dashboard or QR lookup shows for one customer."""

    code: str
    name: str
    merchant_code: str
    loyalty_type: str
    points: int
    tier: str
    stamps: int
    card_cycle_number: int
    card_size: int
    display_stamps: int
    total_stamps: int
    tier_benefits: list[dict] = field(default_factory=list)
    tier_upgrade: tiers.TierUpgrade | None = None
    redeemed_reward_ids: list[int] = field(default_factory=list)
    all_redeemed_reward_ids: list[int] = field(default_factory=list)


def get(customer_code: str, merchant_code: str | None = None) -> Customer:
    """
    Get active customer, checking merchant ownership.

    Raises:
        LedgerError: CUSTOMER_NOT_FOUND or OWNERSHIP_MISMATCH
    """
    try:
        customer = Customer.objects.select_related("merchant").get(
            code=customer_code, is_active=True
        )
    except Customer.DoesNotExist:
        raise LedgerError("CUSTOMER_NOT_FOUND", customer_code=customer_code)
    _check_ownership(customer, merchant_code)
    return customer


def get_for_update(customer_code: str, merchant_code: str | None = None) -> Customer:
    """
    Get active customer with a row-level lock for mutation.

    MUST be called inside transaction.atomic().
    Prevents lost updates on concurrent stamp/purchase/redeem events.
    """
    try:
        customer = (
            Customer.objects
            .select_for_update(of=("self",))
            .select_related("merchant")
            .get(code=customer_code, is_active=True)
        )
    except Customer.DoesNotExist:
        raise LedgerError("CUSTOMER_NOT_FOUND", customer_code=customer_code)
    _check_ownership(customer, merchant_code)
    return customer


def _check_ownership(customer: Customer, merchant_code: str | None) -> None:
    if merchant_code is not None and customer.merchant.code != merchant_code:
        raise LedgerError(
            "OWNERSHIP_MISMATCH",
            customer_code=customer.code,
            merchant_code=merchant_code,
        )


def enroll(merchant_code: str, code: str, name: str, email: str = "") -> Customer:
    """
    Create a customer on the merchant's entry tier with an empty first card.

    Idempotent — returns the existing customer for a known code.

    Raises:
        LedgerError: MERCHANT_NOT_FOUND, or OWNERSHIP_MISMATCH if the code
        belongs to another merchant
    """
    try:
        merchant = Merchant.objects.get(code=merchant_code, is_active=True)
    except Merchant.DoesNotExist:
        raise LedgerError("MERCHANT_NOT_FOUND", merchant_code=merchant_code)

    entry_tier = merchant.tiers.order_by("order").first()
    customer, created = Customer.objects.get_or_create(
        code=code,
        defaults={
            "merchant": merchant,
            "name": name,
            "email": email,
            "tier": entry_tier.name if entry_tier else "",
        },
    )
    if customer.merchant_id != merchant.pk:
        raise LedgerError("OWNERSHIP_MISMATCH", customer_code=code, merchant_code=merchant_code)
    if created:
        logger.info("Enrolled customer %s at %s", code, merchant_code)
    return customer


def card_summary(customer_code: str, merchant_code: str | None = None) -> CardSummary:
    """Derived card view. display/total stamps are recomputed, never stored."""
    customer = get(customer_code, merchant_code)
    merchant = customer.merchant

    redeemed = RedeemedReward.objects.filter(customer=customer)
    current_ids = sorted(
        redeemed.filter(card_cycle_number=customer.card_cycle_number)
        .values_list("stamp_reward_id", flat=True)
    )
    all_ids = sorted(set(redeemed.values_list("stamp_reward_id", flat=True)))

    return CardSummary(
        code=customer.code,
        name=customer.name,
        merchant_code=merchant.code,
        loyalty_type=merchant.loyalty_type,
        points=customer.points,
        tier=customer.tier,
        stamps=customer.stamps,
        card_cycle_number=customer.card_cycle_number,
        card_size=merchant.card_size,
        display_stamps=customer.display_stamps,
        total_stamps=customer.total_stamps,
        tier_benefits=tiers.tier_benefits(customer),
        tier_upgrade=tiers.recent_upgrade(customer),
        redeemed_reward_ids=current_ids,
        all_redeemed_reward_ids=all_ids,
    )


def reward_instances(
    customer_code: str,
    include_expired: bool = False,
    merchant_code: str | None = None,
) -> list[RewardInstance]:
    """
    Instances of the current and previous card, newest cycle first.

    The previous card is included so its unredeemed rewards stay visible.
    """
    customer = get(customer_code, merchant_code)
    current = customer.card_cycle_number
    qs = RewardInstance.objects.select_related("stamp_reward").filter(
        customer=customer,
        card_cycle_number__in=[current, current - 1],
    )
    if not include_expired:
        qs = qs.exclude(status=RewardStatus.EXPIRED)
    return list(qs.order_by("-card_cycle_number", "stamp_reward__order", "stamp_reward__stamps_required"))


def backfill_reward_instances(customer_code: str | None = None) -> dict:
    """
    Re-derive reward instances for every card cycle from stored stamp state.

    Creates missing rows and unlocks those the cumulative totals qualify for.
    Existing redeemed or expired rows are left alone, so this is safe to re-run.

    Returns:
        {"customers_processed": int, "instances_created": int}
    """
    qs = Customer.objects.select_related("merchant").filter(
        is_active=True,
        merchant__loyalty_type="stamps",
    )
    if customer_code:
        qs = qs.filter(code=customer_code)

    stats = {"customers_processed": 0, "instances_created": 0}
    for customer_id in qs.values_list("pk", flat=True):
        with transaction.atomic():
            customer = (
                Customer.objects
                .select_for_update(of=("self",))
                .select_related("merchant")
                .get(pk=customer_id)
            )
            rewards = list(customer.merchant.stamp_rewards.all())
            before = RewardInstance.objects.filter(customer=customer).count()
            cycle.ensure_reward_instances(customer, rewards, 1, customer.card_cycle_number)
            unlock.unlock_rewards(customer, rewards)
            after = RewardInstance.objects.filter(customer=customer).count()
        stats["customers_processed"] += 1
        stats["instances_created"] += after - before

    logger.info(
        "Backfilled %d reward instance(s) for %d customer(s)",
        stats["instances_created"],
        stats["customers_processed"],
    )
    return stats

