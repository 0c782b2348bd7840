"""Pytest fixtures for loyalty ledger tests."""

from decimal import Decimal

import pytest

from loyaltyledger.models import Customer, Merchant, StampReward, Tier


# ═══════════════════════════════════════════════════════════════════
# Stamp program
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def cafe(db):
    """Stamp program, 10 stamps per card."""
    return Merchant.objects.create(
        code="CAFE",
        name="Corner Cafe",
        loyalty_type="stamps",
        stamps_required=10,
    )


@pytest.fixture
def cafe_rewards(cafe):
    """Milestones at 5, 10 and 15 cumulative stamps."""
    return [
        StampReward.objects.create(
            merchant=cafe, stamps_required=5, reward_name="Free cookie", order=1
        ),
        StampReward.objects.create(
            merchant=cafe, stamps_required=10, reward_name="Free coffee", order=2
        ),
        StampReward.objects.create(
            merchant=cafe, stamps_required=15, reward_name="Free lunch", order=3
        ),
    ]


@pytest.fixture
def stamp_customer(cafe, cafe_rewards):
    return Customer.objects.create(
        merchant=cafe,
        code="STAMP-001",
        name="Ana Lima",
        email="ana@example.com",
    )


# ═══════════════════════════════════════════════════════════════════
# Points program
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def bakery(db):
    """Points program, 1 point per unit spent."""
    return Merchant.objects.create(
        code="BAKERY",
        name="Daily Bread",
        loyalty_type="points",
        points_multiplier=Decimal("1.00"),
    )


@pytest.fixture
def tiers(bakery):
    """Bronze(0) / Silver(100) / Gold(500)."""
    return {
        "bronze": Tier.objects.create(
            merchant=bakery,
            name="Bronze",
            order=1,
            points_required=0,
            benefits=["Welcome drink"],
            color="#cd7f32",
        ),
        "silver": Tier.objects.create(
            merchant=bakery,
            name="Silver",
            order=2,
            points_required=100,
            benefits=["Free coffee", "Priority seating"],
            color="#c0c0c0",
        ),
        "gold": Tier.objects.create(
            merchant=bakery,
            name="Gold",
            order=3,
            points_required=500,
            benefits=["Free dessert"],
            color="#ffd700",
        ),
    }


@pytest.fixture
def points_customer(bakery, tiers):
    return Customer.objects.create(
        merchant=bakery,
        code="POINTS-001",
        name="Bruno Costa",
        tier="Bronze",
    )
