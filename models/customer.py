"""Customer model.

Data architecture:
    LedgerEntry
        Source of truth for points. Append-only.

    Customer.total_points / lifetime_points / current_tier / tier_progress
        Denormalized cache of the ledger for fast reads. Written only by
        rewardman.services.ledger, in the same transaction as the entry,
        guarded by `version` (compare-and-swap).
"""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from rewardman.tiers import Tier


class Customer(models.Model):
    """Loyalty program member of one restaurant."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        "rewardman.Restaurant",
        on_delete=models.CASCADE,
        related_name="customers",
        verbose_name=_("restaurante"),
    )

    first_name = models.CharField(_("nome"), max_length=100)
    last_name = models.CharField(_("sobrenome"), max_length=100, blank=True)
    email = models.EmailField(_("email"))
    phone = models.CharField(_("telefone"), max_length=20, blank=True)
    date_of_birth = models.DateField(_("data de nascimento"), null=True, blank=True)

    # Ledger cache
    total_points = models.IntegerField(
        _("saldo de pontos"),
        default=0,
        help_text=_("Pontos disponíveis para resgate"),
    )
    lifetime_points = models.IntegerField(
        _("pontos acumulados"),
        default=0,
        help_text=_("Total de pontos já acumulados (nunca decresce)"),
    )
    current_tier = models.CharField(
        _("nível"),
        max_length=20,
        choices=Tier.choices,
        default=Tier.BRONZE,
    )
    tier_progress = models.PositiveSmallIntegerField(
        _("progresso do nível"),
        default=0,
        help_text=_("Percentual até o próximo nível (0-100)"),
    )
    version = models.PositiveIntegerField(_("versão"), default=0)

    # Visit stats
    visit_count = models.PositiveIntegerField(_("visitas"), default=0)
    total_spent = models.DecimalField(
        _("total gasto"), max_digits=12, decimal_places=2, default=0
    )

    is_active = models.BooleanField(_("ativo"), default=True, db_index=True)
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    class Meta:
        db_table = "rewardman_customer"
        verbose_name = _("cliente")
        verbose_name_plural = _("clientes")
        ordering = ["first_name", "last_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "email"],
                name="rewardman_unique_customer_email",
            ),
            models.CheckConstraint(
                condition=models.Q(total_points__gte=0),
                name="rewardman_customer_points_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["restaurant", "email"], name="rewardman_cust_email_idx"),
        ]

    def __str__(self):
        return f"{self.name}: {self.total_points}pts | {self.current_tier}"

    @property
    def name(self) -> str:
        """Full name (first + last)."""
        return f"{self.first_name} {self.last_name}".strip()

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower().strip()
        super().save(*args, **kwargs)
