"""Loyalty ledger services.

- cycle: stamp card arithmetic and reward-instance creation
- unlock: cumulative-stamp reward unlocking
- tiers: tier upgrades and benefit unlocking
- redemption: exactly-once reward and benefit redemption
- expiration: expiry sweep
- ledger: append-only transaction writer
- stamps, points: event entry points combining the engines above
- customers: lookups, enrollment and read models
"""

from loyaltyledger.services import (
    customers,
    cycle,
    expiration,
    ledger,
    points,
    redemption,
    stamps,
    tiers,
    unlock,
)

__all__ = [
    "customers",
    "cycle",
    "expiration",
    "ledger",
    "points",
    "redemption",
    "stamps",
    "tiers",
    "unlock",
]
