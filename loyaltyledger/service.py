"""
Loyalty ledger public API.

CORE (events):
    LedgerService.record_stamp_event(code, n)        - Add stamps, roll cards, unlock rewards
    LedgerService.record_purchase_event(code, amount) - Earn points, upgrade tier
    LedgerService.redeem_reward(code, reward_id, cycle) - Redeem a stamp reward instance
    LedgerService.redeem_benefit(code, tier_id, name) - Use a tier benefit
    LedgerService.sweep_expired()                      - Expire stale reward instances

CONVENIENCE (reads):
    LedgerService.enroll(...)             - Create customer
    LedgerService.card_summary(code)      - Derived card view
    LedgerService.reward_instances(code)  - Current/previous card rewards
    LedgerService.get_transactions(code)  - Ledger history
    LedgerService.backfill_reward_instances() - Re-derive instances from stored state
"""

from loyaltyledger.models import Customer, CustomerBenefit, LedgerTransaction, RewardInstance
from loyaltyledger.services import customers, expiration, ledger, points, redemption, stamps
from loyaltyledger.services.customers import CardSummary
from loyaltyledger.services.points import PurchaseEventResult
from loyaltyledger.services.stamps import StampEventResult


class LedgerService:
    """
    Loyalty ledger public API.

    Uses @classmethod for extensibility. Every mutation runs in its own
    transaction.atomic() block under the customer row lock.
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def record_stamp_event(
        cls,
        customer_code: str,
        stamps_to_add: int,
        description: str = "",
        merchant_code: str | None = None,
    ) -> StampEventResult:
        """Add stamps to the customer's card. See services.stamps."""
        return stamps.record_stamp_event(
            customer_code,
            stamps_to_add,
            description=description,
            merchant_code=merchant_code,
        )

    @classmethod
    def record_purchase_event(
        cls,
        customer_code: str,
        amount,
        points_multiplier=None,
        description: str = "",
        tax_amount=None,
        merchant_code: str | None = None,
    ) -> PurchaseEventResult:
        """Credit points for a purchase. See services.points."""
        return points.record_purchase_event(
            customer_code,
            amount,
            points_multiplier=points_multiplier,
            description=description,
            tax_amount=tax_amount,
            merchant_code=merchant_code,
        )

    @classmethod
    def redeem_reward(
        cls,
        customer_code: str,
        stamp_reward_id: int,
        card_cycle_number: int | None = None,
        merchant_code: str | None = None,
    ) -> RewardInstance:
        """Redeem a stamp reward exactly once per cycle."""
        return redemption.redeem_reward(
            customer_code,
            stamp_reward_id,
            card_cycle_number=card_cycle_number,
            merchant_code=merchant_code,
        )

    @classmethod
    def redeem_benefit(
        cls,
        customer_code: str,
        tier_id: int,
        benefit_name: str,
        merchant_code: str | None = None,
    ) -> CustomerBenefit:
        """Use a tier benefit exactly once."""
        return redemption.redeem_benefit(
            customer_code,
            tier_id,
            benefit_name,
            merchant_code=merchant_code,
        )

    @classmethod
    def sweep_expired(cls, now=None) -> int:
        """Expire stale reward instances. Returns rows matched."""
        return expiration.sweep_expired(now=now)

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def enroll(cls, merchant_code: str, code: str, name: str, email: str = "") -> Customer:
        """Create a customer on the merchant's entry tier (idempotent)."""
        return customers.enroll(merchant_code, code, name, email=email)

    @classmethod
    def card_summary(cls, customer_code: str, merchant_code: str | None = None) -> CardSummary:
        return customers.card_summary(customer_code, merchant_code)

    @classmethod
    def reward_instances(
        cls,
        customer_code: str,
        include_expired: bool = False,
        merchant_code: str | None = None,
    ) -> list[RewardInstance]:
        return customers.reward_instances(
            customer_code,
            include_expired=include_expired,
            merchant_code=merchant_code,
        )

    @classmethod
    def get_transactions(
        cls,
        customer_code: str,
        limit: int | None = None,
        merchant_code: str | None = None,
    ) -> list[LedgerTransaction]:
        """Transaction history, newest first."""
        customer = customers.get(customer_code, merchant_code)
        return ledger.history(customer, limit=limit)

    @classmethod
    def backfill_reward_instances(cls, customer_code: str | None = None) -> dict:
        return customers.backfill_reward_instances(customer_code)
