"""Tests for the tier engine and purchase events."""

from decimal import Decimal

import pytest

from loyaltyledger.exceptions import LedgerError
from loyaltyledger.models import BenefitStatus, CustomerBenefit, LedgerTransaction, Tier
from loyaltyledger.services.points import calculate_points, record_purchase_event
from loyaltyledger.services.tiers import check_and_upgrade_tier, qualifying_tier
from loyaltyledger.signals import tier_upgraded


pytestmark = pytest.mark.django_db


class TestQualifyingTier:
    def test_highest_threshold_reached(self, tiers):
        all_tiers = list(tiers.values())
        assert qualifying_tier(all_tiers, 0).name == "Bronze"
        assert qualifying_tier(all_tiers, 99).name == "Bronze"
        assert qualifying_tier(all_tiers, 100).name == "Silver"
        assert qualifying_tier(all_tiers, 10_000).name == "Gold"

    def test_no_tier_reached(self, bakery):
        tier = Tier.objects.create(merchant=bakery, name="Club", order=1, points_required=50)
        assert qualifying_tier([tier], 10) is None


class TestCheckAndUpgradeTier:
    def test_upgrade_unlocks_benefits(self, points_customer, tiers):
        result = check_and_upgrade_tier(points_customer, 110)

        assert result.upgraded is True
        assert (result.old_tier, result.new_tier) == ("Bronze", "Silver")
        assert result.unlocked_benefits == ["Free coffee", "Priority seating"]

        points_customer.refresh_from_db()
        assert points_customer.tier == "Silver"
        assert points_customer.last_tier_upgrade_date is not None
        benefits = CustomerBenefit.objects.filter(customer=points_customer, tier=tiers["silver"])
        assert set(benefits.values_list("status", flat=True)) == {BenefitStatus.AVAILABLE}
        assert benefits.count() == 2

    def test_rerun_is_noop(self, points_customer, tiers):
        check_and_upgrade_tier(points_customer, 110)

        again = check_and_upgrade_tier(points_customer, 110)
        higher = check_and_upgrade_tier(points_customer, 400)

        assert again.upgraded is False
        assert higher.upgraded is False
        assert higher.unlocked_benefits == []
        assert CustomerBenefit.objects.filter(customer=points_customer).count() == 2

    def test_existing_benefit_not_reported(self, points_customer, tiers):
        CustomerBenefit.objects.create(
            customer=points_customer,
            tier=tiers["silver"],
            benefit_name="Free coffee",
            status=BenefitStatus.USED,
        )

        result = check_and_upgrade_tier(points_customer, 110)

        assert result.unlocked_benefits == ["Priority seating"]
        used = CustomerBenefit.objects.get(customer=points_customer, benefit_name="Free coffee")
        assert used.status == BenefitStatus.USED

    def test_jump_unlocks_target_tier_only(self, points_customer, tiers):
        result = check_and_upgrade_tier(points_customer, 600)

        assert result.new_tier == "Gold"
        assert result.unlocked_benefits == ["Free dessert"]
        assert not CustomerBenefit.objects.filter(tier=tiers["silver"]).exists()

    def test_no_downgrade_when_points_drop(self, points_customer, tiers):
        check_and_upgrade_tier(points_customer, 600)

        result = check_and_upgrade_tier(points_customer, 50)

        assert result.upgraded is False
        points_customer.refresh_from_db()
        assert points_customer.tier == "Gold"

    def test_customer_without_tier(self, bakery, tiers):
        from loyaltyledger.models import Customer

        customer = Customer.objects.create(merchant=bakery, code="NEW-001", name="Eva")

        result = check_and_upgrade_tier(customer, 0)

        assert result.upgraded is True
        assert (result.old_tier, result.new_tier) == ("", "Bronze")
        assert result.unlocked_benefits == ["Welcome drink"]


class TestRecordPurchaseEvent:
    def test_silver_scenario(self, points_customer, tiers):
        """80 points + 30 -> 110, upgrade to Silver."""
        points_customer.points = 80
        points_customer.save()

        result = record_purchase_event("POINTS-001", Decimal("30.00"))

        assert result.points == 110
        assert result.points_earned == 30
        assert result.tier == "Silver"
        assert result.tier_upgrade.upgraded is True
        assert result.tier_upgrade.old_tier == "Bronze"
        assert result.tier_upgrade.unlocked_benefits == ["Free coffee", "Priority seating"]
        assert CustomerBenefit.objects.filter(
            customer=points_customer, status=BenefitStatus.AVAILABLE
        ).count() == 2

    def test_no_upgrade(self, points_customer, tiers):
        result = record_purchase_event("POINTS-001", "12.40")

        assert result.points == 12
        assert result.tier == "Bronze"
        assert result.tier_upgrade is None

    def test_ledger_row(self, points_customer, tiers):
        result = record_purchase_event("POINTS-001", "25", tax_amount="2.50")

        tx = LedgerTransaction.objects.get(customer=points_customer)
        assert tx == result.transaction
        assert tx.points == 25
        assert tx.amount == Decimal("25.00")
        assert tx.tax_amount == Decimal("2.50")
        assert tx.stamps_earned is None
        assert tx.description == "Purchase of $25.00"

    def test_merchant_multiplier(self, points_customer, bakery, tiers):
        bakery.points_multiplier = Decimal("2.50")
        bakery.save()

        result = record_purchase_event("POINTS-001", "10")

        assert result.points_earned == 25

    def test_explicit_multiplier(self, points_customer, tiers):
        result = record_purchase_event("POINTS-001", "10.50", points_multiplier="1.5")
        assert result.points_earned == 16

    @pytest.mark.parametrize(
        "amount,multiplier,expected",
        [("0.5", "1", 1), ("0.49", "1", 0), ("2.5", "1", 3), ("10.50", "1.5", 16)],
    )
    def test_rounds_half_up(self, amount, multiplier, expected):
        assert calculate_points(Decimal(amount), Decimal(multiplier)) == expected

    @pytest.mark.parametrize("amount", [0, "-5", "abc", None])
    def test_invalid_amount(self, points_customer, tiers, amount):
        with pytest.raises(LedgerError) as exc:
            record_purchase_event("POINTS-001", amount)
        assert exc.value.kind == "InvalidInput"

    @pytest.mark.parametrize("multiplier", ["0", "-1"])
    def test_invalid_multiplier(self, points_customer, tiers, multiplier):
        with pytest.raises(LedgerError, match="INVALID_INPUT"):
            record_purchase_event("POINTS-001", "10", points_multiplier=multiplier)
        points_customer.refresh_from_db()
        assert points_customer.points == 0

    def test_stamp_program_not_applicable(self, stamp_customer):
        with pytest.raises(LedgerError, match="NOT_APPLICABLE"):
            record_purchase_event("STAMP-001", "10")

    def test_ownership_mismatch(self, points_customer, tiers):
        with pytest.raises(LedgerError, match="OWNERSHIP_MISMATCH"):
            record_purchase_event("POINTS-001", "10", merchant_code="CAFE")

    def test_tier_upgraded_signal(self, points_customer, tiers, django_capture_on_commit_callbacks):
        upgrades = []

        def receiver(sender, customer, upgrade, **kwargs):
            upgrades.append(upgrade)

        tier_upgraded.connect(receiver)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                record_purchase_event("POINTS-001", "99")
                record_purchase_event("POINTS-001", "1")
        finally:
            tier_upgraded.disconnect(receiver)

        assert [u.new_tier for u in upgrades] == ["Silver"]
