"""Reward unlock engine.

Reward milestones are measured in cumulative stamps. Cumulative stamps at
the end of cycle c are::

    (c - 1) * N + N            for every completed cycle c < current
    (c - 1) * N + stamps       for the current cycle

A reward unlocks in every cycle whose cumulative total reaches its
milestone, so an unclaimed reward from an earlier card stays claimable.
"""

import logging

from django.utils import timezone

from loyaltyledger.models import Customer, RewardInstance, RewardStatus, StampReward

logger = logging.getLogger(__name__)


def total_stamps_at_cycle(cycle: int, card_cycle_number: int, stamps: int, card_size: int) -> int:
    """Cumulative stamps held at the end of ``cycle`` (or now, for the current one)."""
    stamps_at_cycle_end = card_size if cycle < card_cycle_number else stamps
    return (cycle - 1) * card_size + stamps_at_cycle_end


def first_qualifying_cycle(
    stamps_required: int,
    card_cycle_number: int,
    stamps: int,
    card_size: int,
) -> int | None:
    """
    Lowest cycle in ``1..card_cycle_number`` whose cumulative total meets
    ``stamps_required``, or None.

    Cumulative totals grow with the cycle number, so every later cycle up to
    the current one qualifies as well.
    """
    if card_size < 1:
        return None
    # completed cycle c holds c * N stamps
    first_completed = max(1, -(-stamps_required // card_size))
    if first_completed < card_cycle_number:
        return first_completed
    current_total = total_stamps_at_cycle(card_cycle_number, card_cycle_number, stamps, card_size)
    if current_total >= stamps_required:
        return card_cycle_number
    return None


def unlock_rewards(
    customer: Customer,
    rewards: list[StampReward],
    now=None,
) -> tuple[list[StampReward], list[StampReward]]:
    """
    Move qualifying ``locked`` instances to ``available``.

    Only ``locked`` rows are touched, so re-running never resets a redeemed
    or expired instance and cycles already resolved cost nothing.

    Returns:
        (rewards unlocked by this call in any cycle,
         rewards available in the current cycle)
    """
    now = now or timezone.now()
    card_size = customer.merchant.card_size
    cycle = customer.card_cycle_number

    newly_unlocked = []
    for reward in rewards:
        first = first_qualifying_cycle(reward.stamps_required, cycle, customer.stamps, card_size)
        if first is None:
            continue
        updated = RewardInstance.objects.filter(
            customer=customer,
            stamp_reward=reward,
            card_cycle_number__gte=first,
            card_cycle_number__lte=cycle,
            status=RewardStatus.LOCKED,
        ).update(status=RewardStatus.AVAILABLE, unlocked_at=now)
        if updated:
            newly_unlocked.append(reward)
            logger.info(
                "Unlocked reward %s for customer %s in %d cycle(s)",
                reward.pk,
                customer.code,
                updated,
            )

    available_ids = set(
        RewardInstance.objects.filter(
            customer=customer,
            card_cycle_number=cycle,
            status=RewardStatus.AVAILABLE,
        ).values_list("stamp_reward_id", flat=True)
    )
    available = [r for r in rewards if r.pk in available_ids]
    return newly_unlocked, available
