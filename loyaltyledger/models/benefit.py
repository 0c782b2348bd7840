"""CustomerBenefit — a tier benefit unlocked for one customer."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class BenefitStatus(models.TextChoices):
    AVAILABLE = "available", _("Available")
    USED = "used", _("Used")


class CustomerBenefit(models.Model):
    """
    One named benefit of one tier for one customer.

    Rules:
    - One record per (customer, tier, benefit_name), never recreated
    - Created ``available`` on tier upgrade, or directly ``used`` when a
      merchant redeems a benefit that was never materialised
    - ``used`` is terminal
    """

    customer = models.ForeignKey(
        "loyaltyledger.Customer",
        on_delete=models.CASCADE,
        related_name="benefits",
        verbose_name=_("customer"),
    )
    tier = models.ForeignKey(
        "loyaltyledger.Tier",
        on_delete=models.CASCADE,
        related_name="customer_benefits",
        verbose_name=_("tier"),
    )
    benefit_name = models.CharField(_("benefit"), max_length=200)

    status = models.CharField(
        _("status"),
        max_length=20,
        choices=BenefitStatus.choices,
        default=BenefitStatus.AVAILABLE,
    )
    unlocked_at = models.DateTimeField(_("unlocked at"), auto_now_add=True)
    used_at = models.DateTimeField(_("used at"), null=True, blank=True)

    class Meta:
        verbose_name = _("customer benefit")
        verbose_name_plural = _("customer benefits")
        ordering = ["-unlocked_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "tier", "benefit_name"],
                name="loyaltyledger_unique_customer_benefit",
            ),
        ]

    def __str__(self):
        return f"{self.benefit_name} [{self.status}]"
