"""Merchant configuration — program type, tiers and stamp rewards."""

import json
import re
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyType(models.TextChoices):
    POINTS = "points", _("Points")
    STAMPS = "stamps", _("Stamps")


def parse_benefits(raw) -> list[str]:
    """
    Normalise a tier benefit list to a list of non-empty strings.

    Accepts a list, a JSON array string, or free text separated by commas
    or newlines. Anything else yields an empty list.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(b).strip() for b in raw if str(b).strip()]
    if not isinstance(raw, str):
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        return [b.strip() for b in re.split(r"[,\n]", raw) if b.strip()]
    if isinstance(parsed, list):
        return parse_benefits(parsed)
    return []


class Merchant(models.Model):
    """
    Business running a loyalty program.

    A merchant runs either a points program (tiers + benefits) or a stamp
    program (cyclic cards + stamp rewards), never both.
    """

    code = models.CharField(_("code"), max_length=50, unique=True)
    name = models.CharField(_("name"), max_length=200)

    loyalty_type = models.CharField(
        _("loyalty type"),
        max_length=10,
        choices=LoyaltyType.choices,
        default=LoyaltyType.POINTS,
    )
    stamps_required = models.PositiveIntegerField(
        _("stamps per card"),
        null=True,
        blank=True,
        help_text=_("Stamps needed to fill one card (falls back to DEFAULT_STAMPS_REQUIRED)"),
    )
    points_multiplier = models.DecimalField(
        _("points multiplier"),
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Points per currency unit spent, before tax"),
    )

    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        verbose_name = _("merchant")
        verbose_name_plural = _("merchants")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def card_size(self) -> int:
        """Effective stamps per card."""
        if self.stamps_required:
            return self.stamps_required
        from loyaltyledger.conf import ledger_settings

        return ledger_settings.DEFAULT_STAMPS_REQUIRED

    @property
    def effective_points_multiplier(self) -> Decimal:
        if self.points_multiplier:
            return self.points_multiplier
        from loyaltyledger.conf import ledger_settings

        return Decimal(ledger_settings.DEFAULT_POINTS_MULTIPLIER)

    @property
    def is_stamp_program(self) -> bool:
        return self.loyalty_type == LoyaltyType.STAMPS


class Tier(models.Model):
    """
    Points threshold that gates a named set of benefits.

    ``order`` ranks tiers; ``benefits`` is always a list of strings.
    """

    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name="tiers",
        verbose_name=_("merchant"),
    )
    name = models.CharField(_("name"), max_length=100)
    order = models.PositiveIntegerField(_("order"))
    points_required = models.PositiveIntegerField(_("points required"), default=0)
    benefits = models.JSONField(_("benefits"), default=list, blank=True)
    color = models.CharField(_("color"), max_length=20, blank=True)

    class Meta:
        verbose_name = _("tier")
        verbose_name_plural = _("tiers")
        ordering = ["merchant", "order"]
        constraints = [
            models.UniqueConstraint(
                fields=["merchant", "name"],
                name="loyaltyledger_unique_tier_name",
            ),
            models.UniqueConstraint(
                fields=["merchant", "order"],
                name="loyaltyledger_unique_tier_order",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.points_required}+)"

    def save(self, *args, **kwargs):
        self.benefits = parse_benefits(self.benefits)
        super().save(*args, **kwargs)


class StampReward(models.Model):
    """Reward milestone, measured in cumulative stamps across all cards."""

    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name="stamp_rewards",
        verbose_name=_("merchant"),
    )
    stamps_required = models.PositiveIntegerField(_("stamps required"))
    reward_name = models.CharField(_("reward"), max_length=200)
    reward_description = models.TextField(_("description"), blank=True)
    order = models.PositiveIntegerField(_("order"), default=0)

    class Meta:
        verbose_name = _("stamp reward")
        verbose_name_plural = _("stamp rewards")
        ordering = ["merchant", "order", "stamps_required"]

    def __str__(self):
        return f"{self.reward_name} @ {self.stamps_required}"
