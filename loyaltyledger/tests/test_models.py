"""Tests for loyalty ledger models."""

import pytest

from loyaltyledger.exceptions import BaseError, LedgerError
from loyaltyledger.models import (
    Customer,
    LedgerTransaction,
    Merchant,
    RedeemedReward,
    RewardInstance,
    RewardStatus,
    Tier,
    parse_benefits,
)
from loyaltyledger.models.customer import display_stamps_for, total_stamps_for


class TestParseBenefits:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (["Free coffee", " Lounge "], ["Free coffee", "Lounge"]),
            ('["Free coffee", "Lounge"]', ["Free coffee", "Lounge"]),
            ("Free coffee, Lounge", ["Free coffee", "Lounge"]),
            ("Free coffee\nLounge\n\n", ["Free coffee", "Lounge"]),
            ('{"a": 1}', []),
            ("", []),
            (None, []),
            (42, []),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_benefits(raw) == expected

    @pytest.mark.django_db
    def test_tier_normalises_on_save(self, bakery):
        tier = Tier.objects.create(
            merchant=bakery, name="Silver", order=2, benefits="Free coffee,\nPriority seating"
        )
        tier.refresh_from_db()
        assert tier.benefits == ["Free coffee", "Priority seating"]


class TestDerivedStamps:
    @pytest.mark.parametrize(
        "stamps,size,expected",
        [(0, 10, 0), (3, 10, 3), (10, 10, 10), (12, 10, 2)],
    )
    def test_display_stamps(self, stamps, size, expected):
        assert display_stamps_for(stamps, size) == expected

    @pytest.mark.parametrize(
        "stamps,cycle,size,expected",
        [(0, 1, 10, 0), (1, 2, 10, 11), (10, 1, 10, 10), (0, 4, 10, 30)],
    )
    def test_total_stamps(self, stamps, cycle, size, expected):
        assert total_stamps_for(stamps, cycle, size) == expected

    @pytest.mark.django_db
    def test_customer_properties(self, cafe):
        customer = Customer.objects.create(
            merchant=cafe, code="C-1", name="Caio", stamps=10, card_cycle_number=3
        )
        assert customer.display_stamps == 10
        assert customer.total_stamps == 30


@pytest.mark.django_db
class TestMerchant:
    def test_card_size_fallback(self, settings):
        settings.LOYALTY_LEDGER = {"DEFAULT_STAMPS_REQUIRED": 12}
        merchant = Merchant.objects.create(code="M", name="M", loyalty_type="stamps")
        assert merchant.card_size == 12

    def test_points_multiplier_fallback(self):
        merchant = Merchant.objects.create(code="M", name="M")
        assert str(merchant.effective_points_multiplier) == "1.0"


@pytest.mark.django_db
class TestRewardInstance:
    def test_unique_per_cycle(self, stamp_customer, cafe_rewards):
        from django.db import IntegrityError, transaction

        RewardInstance.objects.create(
            customer=stamp_customer, stamp_reward=cafe_rewards[0], card_cycle_number=1
        )
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                RewardInstance.objects.create(
                    customer=stamp_customer, stamp_reward=cafe_rewards[0], card_cycle_number=1
                )

    def test_expiry_defaults_on_save(self, stamp_customer, cafe_rewards):
        instance = RewardInstance.objects.create(
            customer=stamp_customer, stamp_reward=cafe_rewards[0], card_cycle_number=1
        )
        assert instance.expires_at.year == instance.created_at.year + 1
        assert instance.status == RewardStatus.LOCKED
        assert instance.is_terminal is False

    def test_redeemed_reward_view(self, stamp_customer, cafe_rewards):
        for cycle, status in [(1, RewardStatus.REDEEMED), (2, RewardStatus.AVAILABLE)]:
            RewardInstance.objects.create(
                customer=stamp_customer,
                stamp_reward=cafe_rewards[0],
                card_cycle_number=cycle,
                status=status,
            )

        redeemed = RedeemedReward.objects.filter(customer=stamp_customer)
        assert list(redeemed.values_list("card_cycle_number", flat=True)) == [1]


@pytest.mark.django_db
class TestLedgerTransaction:
    def test_append_only(self, stamp_customer):
        tx = LedgerTransaction.objects.create(
            customer=stamp_customer, stamps_earned=1, description="Stamp"
        )

        tx.description = "Changed"
        with pytest.raises(ValueError):
            tx.save()
        with pytest.raises(ValueError):
            tx.delete()

    def test_str(self, stamp_customer):
        redemption = LedgerTransaction(customer=stamp_customer, stamps_earned=-5, description="Cookie")
        purchase = LedgerTransaction(customer=stamp_customer, points=30, description="Order")
        assert str(redemption) == "-5 stamps — Cookie"
        assert str(purchase) == "+30pts — Order"


class TestLedgerError:
    def test_inherits_from_base_error(self):
        assert isinstance(LedgerError("CUSTOMER_NOT_FOUND"), BaseError)

    def test_default_messages(self):
        err = LedgerError("ALREADY_REDEEMED")
        assert err.message == "Already redeemed"
        assert err.code == "ALREADY_REDEEMED"
        assert "ALREADY_REDEEMED" in str(err)

    def test_custom_message(self):
        err = LedgerError("INVALID_INPUT", message="Custom msg")
        assert err.message == "Custom msg"

    def test_as_dict(self):
        err = LedgerError("OWNERSHIP_MISMATCH", customer_code="C-1", merchant_code="M")
        d = err.as_dict()
        assert d["code"] == "OWNERSHIP_MISMATCH"
        assert d["data"] == {"customer_code": "C-1", "merchant_code": "M"}

    @pytest.mark.parametrize(
        "code,kind",
        [
            ("CUSTOMER_NOT_FOUND", "NotFound"),
            ("BENEFIT_NOT_FOUND", "NotFound"),
            ("OWNERSHIP_MISMATCH", "OwnershipMismatch"),
            ("ALREADY_REDEEMED", "AlreadyRedeemed"),
            ("INVALID_INPUT", "InvalidInput"),
            ("NOT_APPLICABLE", "NotApplicable"),
            ("REWARD_LOCKED", "NotApplicable"),
        ],
    )
    def test_kind(self, code, kind):
        assert LedgerError(code).kind == kind
