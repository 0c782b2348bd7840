"""Stamp events — cycle engine, unlock engine and ledger in one transaction."""

import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from loyaltyledger.exceptions import LedgerError
from loyaltyledger.models import Customer, LedgerTransaction, StampReward
from loyaltyledger.models.customer import display_stamps_for, total_stamps_for
from loyaltyledger.services import customers, cycle, ledger, unlock
from loyaltyledger.signals import rewards_unlocked, stamps_recorded

logger = logging.getLogger(__name__)


@dataclass
class StampEventResult:
    """Balances after a stamp event."""

    stamps: int
    card_cycle_number: int
    display_stamps: int
    total_stamps: int
    card_was_reset: bool
    available_rewards: list[StampReward] = field(default_factory=list)
    transaction: LedgerTransaction | None = None


def record_stamp_event(
    customer_code: str,
    stamps_to_add: int,
    description: str = "",
    merchant_code: str | None = None,
) -> StampEventResult:
    """
    Add stamps to a customer's card.

    Rolls over as many cards as the batch fills, opens reward instances for
    every newly entered cycle, unlocks rewards the cumulative total now
    reaches and appends a ledger row, all under the customer row lock.

    Raises:
        LedgerError: INVALID_INPUT, CUSTOMER_NOT_FOUND, OWNERSHIP_MISMATCH,
        NOT_APPLICABLE (points program)
    """
    if isinstance(stamps_to_add, bool) or not isinstance(stamps_to_add, int) or stamps_to_add < 1:
        raise LedgerError(
            "INVALID_INPUT",
            message="stamps_to_add must be a positive integer",
            stamps_to_add=stamps_to_add,
        )

    with transaction.atomic():
        customer = customers.get_for_update(customer_code, merchant_code)
        merchant = customer.merchant
        if not merchant.is_stamp_program:
            raise LedgerError(
                "NOT_APPLICABLE",
                message="Stamps can only be added on a stamp program",
                merchant_code=merchant.code,
            )

        now = timezone.now()
        card_size = merchant.card_size
        previous_cycle = customer.card_cycle_number
        advance = cycle.advance_card(customer.stamps, previous_cycle, stamps_to_add, card_size)

        customer.stamps = advance.stamps
        customer.card_cycle_number = advance.card_cycle_number
        customer.save(update_fields=["stamps", "card_cycle_number", "updated_at"])

        rewards = list(merchant.stamp_rewards.all())
        cycle.ensure_reward_instances(
            customer, rewards, previous_cycle, advance.card_cycle_number, now=now
        )
        newly_unlocked, available = unlock.unlock_rewards(customer, rewards, now=now)

        tx = ledger.record(
            customer,
            description or f"Earned {stamps_to_add} stamp{'s' if stamps_to_add != 1 else ''}",
            stamps_earned=stamps_to_add,
        )

        if advance.card_was_reset:
            logger.info(
                "Customer %s completed %d card(s): cycle %d -> %d",
                customer.code,
                advance.cards_completed,
                previous_cycle,
                advance.card_cycle_number,
            )

        result = StampEventResult(
            stamps=advance.stamps,
            card_cycle_number=advance.card_cycle_number,
            display_stamps=display_stamps_for(advance.stamps, card_size),
            total_stamps=total_stamps_for(advance.stamps, advance.card_cycle_number, card_size),
            card_was_reset=advance.card_was_reset,
            available_rewards=available,
            transaction=tx,
        )

        transaction.on_commit(
            lambda: stamps_recorded.send(sender=Customer, customer=customer, result=result)
        )
        if newly_unlocked:
            transaction.on_commit(
                lambda: rewards_unlocked.send(
                    sender=Customer, customer=customer, rewards=newly_unlocked
                )
            )

    return result
