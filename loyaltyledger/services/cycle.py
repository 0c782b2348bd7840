"""Stamp cycle engine — card arithmetic and per-cycle reward instances.

A card holds N stamps. A card that reaches exactly N stays full (N/N) until
the next stamp; a stamp batch that overflows rolls over as many cards as it
fills, so one event may advance several cycles.
"""

import logging
from dataclasses import dataclass

from django.utils import timezone

from loyaltyledger.exceptions import LedgerError
from loyaltyledger.models import Customer, RewardInstance, RewardStatus, StampReward
from loyaltyledger.models import calculate_expiry_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardAdvance:
    """Outcome of adding stamps to a card."""

    stamps: int
    card_cycle_number: int
    cards_completed: int

    @property
    def card_was_reset(self) -> bool:
        return self.cards_completed > 0


def advance_card(
    stamps: int,
    card_cycle_number: int,
    stamps_to_add: int,
    card_size: int,
) -> CardAdvance:
    """
    Apply a stamp batch to the current card.

    Example (card of 10):
        9 stamps on card 1, +21 -> 30 total -> 3 cards completed, 0 stamps, card 4
        9 stamps on card 1, +1  -> 10/10 on card 1 (full, not rolled)
        10 stamps on card 1, +1 -> 1/10 on card 2

    Raises:
        LedgerError: INVALID_INPUT if stamps_to_add < 1 or card_size < 1
    """
    if stamps_to_add < 1:
        raise LedgerError("INVALID_INPUT", message="stamps_to_add must be at least 1")
    if card_size < 1:
        raise LedgerError("INVALID_INPUT", message="Card size must be at least 1")

    new_total = stamps + stamps_to_add
    if new_total <= card_size:
        return CardAdvance(new_total, card_cycle_number, 0)

    cards_completed = new_total // card_size
    return CardAdvance(
        stamps=new_total % card_size,
        card_cycle_number=card_cycle_number + cards_completed,
        cards_completed=cards_completed,
    )


def ensure_reward_instances(
    customer: Customer,
    rewards: list[StampReward],
    from_cycle: int,
    to_cycle: int,
    now=None,
) -> int:
    """
    Create missing ``locked`` instances for every reward in cycles
    ``from_cycle..to_cycle`` (inclusive).

    Existing rows are skipped at the database level, so concurrent
    initialisation of the same (customer, reward, cycle) never fails.
    Passing the customer's previous cycle as ``from_cycle`` back-fills the
    first card lazily, since cycle 1 has no explicit opening event.

    Returns:
        Number of instance rows requested (existing rows included)
    """
    if not rewards or to_cycle < from_cycle:
        return 0

    now = now or timezone.now()
    expires_at = calculate_expiry_date(now)
    instances = [
        RewardInstance(
            customer=customer,
            stamp_reward=reward,
            card_cycle_number=cycle,
            status=RewardStatus.LOCKED,
            created_at=now,
            expires_at=expires_at,
        )
        for cycle in range(max(from_cycle, 1), to_cycle + 1)
        for reward in rewards
    ]
    RewardInstance.objects.bulk_create(instances, ignore_conflicts=True)
    return len(instances)
