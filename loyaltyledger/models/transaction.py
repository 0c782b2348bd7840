"""LedgerTransaction — append-only history of balance-affecting events."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LedgerTransaction(models.Model):
    """
    Immutable record of a purchase, stamp award or reward redemption.

    ``stamps_earned`` is negative for redemptions; that value is a
    bookkeeping signal only and never decrements the customer's stamps.
    Transactions are append-only — never modified or deleted.
    """

    customer = models.ForeignKey(
        "loyaltyledger.Customer",
        on_delete=models.CASCADE,
        related_name="transactions",
        verbose_name=_("customer"),
    )

    points = models.IntegerField(_("points"), default=0)
    stamps_earned = models.IntegerField(_("stamps"), null=True, blank=True)
    description = models.CharField(_("description"), max_length=255)
    amount = models.DecimalField(
        _("amount"), max_digits=12, decimal_places=2, null=True, blank=True
    )
    tax_amount = models.DecimalField(
        _("tax"), max_digits=12, decimal_places=2, null=True, blank=True
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("ledger transaction")
        verbose_name_plural = _("ledger transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["customer", "-created_at"],
                name="loyaltyledg_tx_cust_idx",
            ),
        ]

    def __str__(self):
        if self.stamps_earned:
            sign = "+" if self.stamps_earned > 0 else ""
            return f"{sign}{self.stamps_earned} stamps — {self.description}"
        sign = "+" if self.points > 0 else ""
        return f"{sign}{self.points}pts — {self.description}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Ledger transactions are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Ledger transactions are append-only")
