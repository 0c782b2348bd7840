"""RewardInstance — per-cycle unlock/redeem state of a stamp reward.

One row per (customer, stamp_reward, card_cycle_number). Status only moves
forward:

    locked -> available -> redeemed
                        -> expired
    locked -> expired

``redeemed`` and ``expired`` are terminal. RedeemedReward is a read-only
view over redeemed instances kept for callers of the old per-cycle
redemption marker; it holds no state of its own.
"""

from datetime import datetime

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class RewardStatus(models.TextChoices):
    LOCKED = "locked", _("Locked")
    AVAILABLE = "available", _("Available")
    REDEEMED = "redeemed", _("Redeemed")
    EXPIRED = "expired", _("Expired")


def calculate_expiry_date(created_at: datetime, years: int | None = None) -> datetime:
    """
    End of the year after creation, in the current timezone.

    Example: created 2025-01-15 -> expires 2026-12-31 23:59:59.999
    """
    if years is None:
        from loyaltyledger.conf import ledger_settings

        years = ledger_settings.REWARD_EXPIRY_YEARS
    local = timezone.localtime(created_at) if timezone.is_aware(created_at) else created_at
    expiry = datetime(local.year + years, 12, 31, 23, 59, 59, 999000)
    if not settings.USE_TZ:
        return expiry
    return timezone.make_aware(expiry)


class RewardInstance(models.Model):
    """Materialised state of one reward definition on one card cycle."""

    customer = models.ForeignKey(
        "loyaltyledger.Customer",
        on_delete=models.CASCADE,
        related_name="reward_instances",
        verbose_name=_("customer"),
    )
    stamp_reward = models.ForeignKey(
        "loyaltyledger.StampReward",
        on_delete=models.CASCADE,
        related_name="instances",
        verbose_name=_("reward"),
    )
    card_cycle_number = models.PositiveIntegerField(_("card cycle"))

    status = models.CharField(
        _("status"),
        max_length=20,
        choices=RewardStatus.choices,
        default=RewardStatus.LOCKED,
        db_index=True,
    )
    created_at = models.DateTimeField(_("created at"), default=timezone.now)
    unlocked_at = models.DateTimeField(_("unlocked at"), null=True, blank=True)
    redeemed_at = models.DateTimeField(_("redeemed at"), null=True, blank=True)
    expires_at = models.DateTimeField(_("expires at"), db_index=True)

    class Meta:
        verbose_name = _("reward instance")
        verbose_name_plural = _("reward instances")
        ordering = ["-card_cycle_number", "stamp_reward__order", "stamp_reward__stamps_required"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "stamp_reward", "card_cycle_number"],
                name="loyaltyledger_unique_reward_instance",
            ),
        ]
        indexes = [
            models.Index(
                fields=["customer", "card_cycle_number"],
                name="loyaltyledg_reward_cust_idx",
            ),
            models.Index(
                fields=["status", "expires_at"],
                name="loyaltyledg_reward_exp_idx",
            ),
        ]

    def __str__(self):
        return f"{self.customer_id}:{self.stamp_reward_id}#{self.card_cycle_number} [{self.status}]"

    def save(self, *args, **kwargs):
        if not self.expires_at:
            self.expires_at = calculate_expiry_date(self.created_at or timezone.now())
        super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status in (RewardStatus.REDEEMED, RewardStatus.EXPIRED)


class RedeemedRewardManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(status=RewardStatus.REDEEMED)


class RedeemedReward(RewardInstance):
    """Redeemed (customer, reward, cycle) triples, derived from RewardInstance."""

    objects = RedeemedRewardManager()

    class Meta:
        proxy = True
        verbose_name = _("redeemed reward")
        verbose_name_plural = _("redeemed rewards")
