"""Loyalty ledger models (the ledger store).

- Merchant, Tier, StampReward: program configuration
- Customer: balances (points, stamps, card cycle, tier)
- RewardInstance: per-cycle reward state; RedeemedReward is a derived view
- CustomerBenefit: tier benefits unlocked per customer
- LedgerTransaction: append-only history
"""

from loyaltyledger.models.merchant import (
    LoyaltyType,
    Merchant,
    StampReward,
    Tier,
    parse_benefits,
)
from loyaltyledger.models.customer import Customer
from loyaltyledger.models.reward_instance import (
    RedeemedReward,
    RewardInstance,
    RewardStatus,
    calculate_expiry_date,
)
from loyaltyledger.models.benefit import BenefitStatus, CustomerBenefit
from loyaltyledger.models.transaction import LedgerTransaction

__all__ = [
    # Program configuration
    "LoyaltyType",
    "Merchant",
    "Tier",
    "StampReward",
    "parse_benefits",
    # Balances
    "Customer",
    # Stamp rewards
    "RewardInstance",
    "RewardStatus",
    "RedeemedReward",
    "calculate_expiry_date",
    # Tier benefits
    "CustomerBenefit",
    "BenefitStatus",
    # History
    "LedgerTransaction",
]
