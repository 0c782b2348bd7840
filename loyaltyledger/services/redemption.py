"""Redemption engine — exactly-once redemption of rewards and benefits.

Both paths take the customer row lock and then flip the status with a
conditional UPDATE (``WHERE status = available``). Of any number of
concurrent attempts exactly one UPDATE matches; the rest see
ALREADY_REDEEMED.
"""

import logging

from django.db import transaction
from django.utils import timezone

from loyaltyledger.exceptions import LedgerError
from loyaltyledger.models import (
    BenefitStatus,
    CustomerBenefit,
    RewardInstance,
    RewardStatus,
    StampReward,
    Tier,
)
from loyaltyledger.services import customers, ledger
from loyaltyledger.signals import benefit_redeemed, reward_redeemed

logger = logging.getLogger(__name__)


def _find_instance(customer, reward, card_cycle_number: int | None) -> RewardInstance | None:
    qs = RewardInstance.objects.filter(customer=customer, stamp_reward=reward)
    if card_cycle_number is not None:
        return qs.filter(card_cycle_number=card_cycle_number).first()

    # current card first, then the previous one
    current = customer.card_cycle_number
    candidates = list(
        qs.filter(card_cycle_number__in=[current, current - 1]).order_by("-card_cycle_number")
    )
    for instance in candidates:
        if instance.status == RewardStatus.AVAILABLE:
            return instance
    return candidates[0] if candidates else None


def _check_redeemable(instance: RewardInstance, now) -> None:
    if instance.status == RewardStatus.REDEEMED:
        raise LedgerError(
            "ALREADY_REDEEMED",
            message="This reward has already been redeemed",
            card_cycle_number=instance.card_cycle_number,
        )
    if instance.status == RewardStatus.EXPIRED or instance.expires_at < now:
        raise LedgerError("REWARD_EXPIRED", card_cycle_number=instance.card_cycle_number)
    if instance.status == RewardStatus.LOCKED:
        raise LedgerError(
            "REWARD_LOCKED",
            message="This reward is not yet available (not enough stamps)",
            card_cycle_number=instance.card_cycle_number,
        )


def redeem_reward(
    customer_code: str,
    stamp_reward_id: int,
    card_cycle_number: int | None = None,
    merchant_code: str | None = None,
) -> RewardInstance:
    """
    Redeem one stamp reward instance.

    Args:
        customer_code: Customer code
        stamp_reward_id: StampReward primary key
        card_cycle_number: Cycle to redeem; if omitted, the newest available
            instance of the current or previous card
        merchant_code: Caller's merchant, checked against the customer

    Returns:
        The redeemed RewardInstance

    Raises:
        LedgerError: CUSTOMER_NOT_FOUND, OWNERSHIP_MISMATCH, NOT_APPLICABLE,
        REWARD_NOT_FOUND, ALREADY_REDEEMED, REWARD_LOCKED, REWARD_EXPIRED
    """
    with transaction.atomic():
        customer = customers.get_for_update(customer_code, merchant_code)
        merchant = customer.merchant
        if not merchant.is_stamp_program:
            raise LedgerError(
                "NOT_APPLICABLE",
                message="This is not a stamp-based program",
                merchant_code=merchant.code,
            )

        try:
            reward = merchant.stamp_rewards.get(pk=stamp_reward_id)
        except StampReward.DoesNotExist:
            raise LedgerError("REWARD_NOT_FOUND", stamp_reward_id=stamp_reward_id)

        instance = _find_instance(customer, reward, card_cycle_number)
        if instance is None:
            raise LedgerError(
                "REWARD_NOT_FOUND",
                stamp_reward_id=stamp_reward_id,
                card_cycle_number=card_cycle_number,
            )

        now = timezone.now()
        _check_redeemable(instance, now)

        updated = RewardInstance.objects.filter(
            pk=instance.pk,
            status=RewardStatus.AVAILABLE,
            expires_at__gte=now,
        ).update(status=RewardStatus.REDEEMED, redeemed_at=now)
        if not updated:
            instance.refresh_from_db()
            _check_redeemable(instance, now)
            raise LedgerError("ALREADY_REDEEMED", card_cycle_number=instance.card_cycle_number)

        instance.status = RewardStatus.REDEEMED
        instance.redeemed_at = now

        ledger.record(
            customer,
            f"Reward redeemed: {reward.reward_name}",
            stamps_earned=-reward.stamps_required,
        )

        logger.info(
            "Customer %s redeemed reward %s (cycle %d)",
            customer.code,
            reward.pk,
            instance.card_cycle_number,
        )
        transaction.on_commit(
            lambda: reward_redeemed.send(sender=RewardInstance, instance=instance)
        )

    return instance


def redeem_benefit(
    customer_code: str,
    tier_id: int,
    benefit_name: str,
    merchant_code: str | None = None,
) -> CustomerBenefit:
    """
    Use one tier benefit.

    A benefit listed on the tier but never materialised for the customer is
    created directly in ``used`` state. An already unlocked benefit stays
    redeemable after its name is removed from the tier.

    Raises:
        LedgerError: INVALID_INPUT, CUSTOMER_NOT_FOUND, OWNERSHIP_MISMATCH,
        NOT_APPLICABLE, TIER_NOT_FOUND, BENEFIT_NOT_FOUND, ALREADY_REDEEMED
    """
    benefit_name = (benefit_name or "").strip()
    if not benefit_name:
        raise LedgerError("INVALID_INPUT", message="benefit_name is required")

    with transaction.atomic():
        customer = customers.get_for_update(customer_code, merchant_code)
        merchant = customer.merchant
        if merchant.is_stamp_program:
            raise LedgerError(
                "NOT_APPLICABLE",
                message="Tier benefits only exist on points programs",
                merchant_code=merchant.code,
            )

        try:
            tier = merchant.tiers.get(pk=tier_id)
        except Tier.DoesNotExist:
            raise LedgerError("TIER_NOT_FOUND", tier_id=tier_id)

        exists = CustomerBenefit.objects.filter(
            customer=customer, tier=tier, benefit_name=benefit_name
        ).exists()
        if not exists and benefit_name not in tier.benefits:
            raise LedgerError("BENEFIT_NOT_FOUND", tier_id=tier_id, benefit_name=benefit_name)

        now = timezone.now()
        benefit, created = CustomerBenefit.objects.get_or_create(
            customer=customer,
            tier=tier,
            benefit_name=benefit_name,
            defaults={"status": BenefitStatus.USED, "used_at": now},
        )
        if not created:
            updated = CustomerBenefit.objects.filter(
                pk=benefit.pk,
                status=BenefitStatus.AVAILABLE,
            ).update(status=BenefitStatus.USED, used_at=now)
            if not updated:
                raise LedgerError(
                    "ALREADY_REDEEMED",
                    message="Benefit has already been redeemed",
                    benefit_name=benefit_name,
                )
            benefit.status = BenefitStatus.USED
            benefit.used_at = now

        logger.info("Customer %s used benefit %r of tier %s", customer.code, benefit_name, tier.name)
        transaction.on_commit(
            lambda: benefit_redeemed.send(sender=CustomerBenefit, benefit=benefit)
        )

    return benefit
