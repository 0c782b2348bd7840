"""Customer model — balances of one customer at one merchant.

Stamp state:
    stamps              stamps on the current card, 0 <= stamps <= card size.
    card_cycle_number   current card, starts at 1 and never decreases.

    display_stamps and total_stamps are derived and never stored:
        display_stamps = card size when the card is full (N/N), else stamps mod N
        total_stamps   = (card_cycle_number - 1) * N + stamps

Points state:
    points   running total, tier is the highest tier ever reached.
"""

import uuid as uuid_lib

from django.db import models
from django.utils.translation import gettext_lazy as _


def display_stamps_for(stamps: int, card_size: int) -> int:
    """Stamps shown on the card: a full card shows N/N until it rolls over."""
    if card_size <= 0:
        return stamps
    if stamps == card_size:
        return card_size
    return stamps % card_size


def total_stamps_for(stamps: int, card_cycle_number: int, card_size: int) -> int:
    """Lifetime stamps across every card the customer has held."""
    if card_size <= 0:
        return stamps
    return (card_cycle_number - 1) * card_size + stamps


class Customer(models.Model):
    """Loyalty member. Balances are mutated only by the ledger services."""

    merchant = models.ForeignKey(
        "loyaltyledger.Merchant",
        on_delete=models.PROTECT,
        related_name="customers",
        verbose_name=_("merchant"),
    )
    code = models.CharField(_("code"), max_length=50, unique=True)
    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)
    name = models.CharField(_("name"), max_length=200)
    email = models.EmailField(_("email"), blank=True, db_index=True)

    points = models.PositiveIntegerField(_("points"), default=0)
    tier = models.CharField(_("tier"), max_length=100, blank=True)
    last_tier_upgrade_date = models.DateTimeField(
        _("last tier upgrade"), null=True, blank=True
    )

    stamps = models.PositiveIntegerField(
        _("stamps"),
        default=0,
        help_text=_("Stamps on the current card"),
    )
    card_cycle_number = models.PositiveIntegerField(
        _("card cycle"),
        default=1,
        help_text=_("Current card number (never decreases)"),
    )

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("customer")
        verbose_name_plural = _("customers")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def display_stamps(self) -> int:
        return display_stamps_for(self.stamps, self.merchant.card_size)

    @property
    def total_stamps(self) -> int:
        return total_stamps_for(self.stamps, self.card_cycle_number, self.merchant.card_size)
