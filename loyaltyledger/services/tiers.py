"""Tier engine (points programs).

Tiers are sticky: a customer keeps the highest tier ever reached, even if
points are later reduced by a manual correction. Only the target tier's
benefits are unlocked on an upgrade.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from django.utils import timezone

from loyaltyledger.models import BenefitStatus, Customer, CustomerBenefit, Tier

logger = logging.getLogger(__name__)


@dataclass
class TierUpgrade:
    """Result of a tier evaluation."""

    upgraded: bool
    old_tier: str
    new_tier: str
    unlocked_benefits: list[str] = field(default_factory=list)


def qualifying_tier(tiers: list[Tier], points: int) -> Tier | None:
    """Tier with the highest threshold that ``points`` reaches."""
    best = None
    for tier in tiers:
        if points >= tier.points_required:
            if best is None or tier.points_required > best.points_required:
                best = tier
    return best


def check_and_upgrade_tier(
    customer: Customer,
    new_points_total: int,
    now=None,
) -> TierUpgrade:
    """
    Upgrade the customer to the highest qualifying tier and unlock its benefits.

    MUST be called inside transaction.atomic() with the customer row locked.
    Benefits that already exist for (customer, tier) are neither recreated
    nor reported.
    """
    old_tier = customer.tier
    tiers = list(customer.merchant.tiers.all())
    target = qualifying_tier(tiers, new_points_total)

    if target is None or target.name == old_tier:
        return TierUpgrade(False, old_tier, old_tier)

    current = next((t for t in tiers if t.name == old_tier), None)
    if current is not None and current.order >= target.order:
        # no downgrades
        return TierUpgrade(False, old_tier, old_tier)

    now = now or timezone.now()
    customer.tier = target.name
    customer.last_tier_upgrade_date = now
    customer.save(update_fields=["tier", "last_tier_upgrade_date", "updated_at"])

    unlocked = []
    for name in target.benefits:
        _, created = CustomerBenefit.objects.get_or_create(
            customer=customer,
            tier=target,
            benefit_name=name,
            defaults={"status": BenefitStatus.AVAILABLE},
        )
        if created:
            unlocked.append(name)

    logger.info(
        "Customer %s upgraded %s -> %s (%d benefit(s) unlocked)",
        customer.code,
        old_tier or "-",
        target.name,
        len(unlocked),
    )
    return TierUpgrade(True, old_tier, target.name, unlocked)


def tier_benefits(customer: Customer) -> list[dict]:
    """
    Benefits of every tier at or below the customer's, with per-customer status.

    Benefits never materialised for the customer are reported ``available``.
    """
    tiers = list(customer.merchant.tiers.order_by("order"))
    current = next((t for t in tiers if t.name == customer.tier), None)
    current_order = current.order if current else None

    owned = {
        (b.tier_id, b.benefit_name): b
        for b in CustomerBenefit.objects.filter(customer=customer)
    }

    result = []
    for tier in tiers:
        if current_order is None or tier.order > current_order:
            continue
        benefits = []
        for name in tier.benefits:
            record = owned.get((tier.pk, name))
            benefits.append({
                "name": name,
                "status": record.status if record else BenefitStatus.AVAILABLE,
                "unlocked_at": record.unlocked_at if record else None,
                "used_at": record.used_at if record else None,
            })
        result.append({
            "tier_id": tier.pk,
            "tier_name": tier.name,
            "tier_color": tier.color or None,
            "benefits": benefits,
        })
    return result


def recent_upgrade(customer: Customer, now=None) -> TierUpgrade | None:
    """
    Upgrade within RECENT_UPGRADE_HOURS, reconstructed from tier order.

    The previous tier is the one ranked directly below the current tier.
    """
    from loyaltyledger.conf import ledger_settings

    if not customer.last_tier_upgrade_date:
        return None
    now = now or timezone.now()
    window = timedelta(hours=ledger_settings.RECENT_UPGRADE_HOURS)
    if customer.last_tier_upgrade_date <= now - window:
        return None

    tiers = list(customer.merchant.tiers.order_by("order"))
    current = next((t for t in tiers if t.name == customer.tier), None)
    if current is None:
        return None
    below = [t for t in tiers if t.order < current.order]
    if not below:
        return None
    return TierUpgrade(True, below[-1].name, current.name, list(current.benefits))
