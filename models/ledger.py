"""Points ledger model."""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from rewardman.exceptions import ValidationError


class EntryType(models.TextChoices):
    """Ledger entry types."""

    PURCHASE = "purchase", _("Compra")
    BONUS = "bonus", _("Bônus")
    REFERRAL = "referral", _("Indicação")
    SIGNUP = "signup", _("Cadastro")
    REDEMPTION = "redemption", _("Resgate")


ACCRUAL_TYPES = frozenset(
    {EntryType.PURCHASE, EntryType.BONUS, EntryType.REFERRAL, EntryType.SIGNUP}
)


class LedgerEntry(models.Model):
    """
    Immutable record of one point-affecting event.

    Entries are append-only: saving an existing entry or deleting one
    raises. Positive points for accruals, negative for redemptions.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        "rewardman.Customer",
        on_delete=models.CASCADE,
        related_name="ledger_entries",
        verbose_name=_("cliente"),
    )

    entry_type = models.CharField(_("tipo"), max_length=20, choices=EntryType.choices)
    points = models.IntegerField(
        _("pontos"),
        help_text=_("Positivo para acúmulo, negativo para resgate"),
    )
    balance_after = models.IntegerField(_("saldo após"))
    amount_spent = models.DecimalField(
        _("valor gasto"), max_digits=12, decimal_places=2, null=True, blank=True
    )

    reward = models.ForeignKey(
        "rewardman.Reward",
        on_delete=models.PROTECT,
        related_name="redemptions",
        null=True,
        blank=True,
        verbose_name=_("recompensa"),
    )
    redemption_code = models.CharField(_("código de resgate"), max_length=40, blank=True)

    description = models.CharField(_("descrição"), max_length=200, blank=True)
    reference = models.CharField(
        _("referência"),
        max_length=100,
        blank=True,
        help_text=_("ID externo (ex: order:123)"),
    )
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True, db_index=True)
    created_by = models.CharField(_("criado por"), max_length=100, blank=True)

    class Meta:
        db_table = "rewardman_ledger_entry"
        verbose_name = _("lançamento de pontos")
        verbose_name_plural = _("lançamentos de pontos")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["redemption_code"],
                condition=~models.Q(redemption_code=""),
                name="rewardman_unique_redemption_code",
            ),
            models.UniqueConstraint(
                fields=["customer", "entry_type", "reference"],
                condition=~models.Q(reference=""),
                name="rewardman_unique_entry_reference",
            ),
        ]
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="rewardman_ledger_cust_idx"),
        ]

    def __str__(self):
        sign = "+" if self.points > 0 else ""
        return f"{sign}{self.points}pts {self.entry_type}"

    @property
    def is_accrual(self) -> bool:
        return self.entry_type in ACCRUAL_TYPES

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("LEDGER_IMMUTABLE", entry_id=str(self.pk))
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LEDGER_IMMUTABLE", entry_id=str(self.pk))
