"""Reward catalog model."""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from rewardman.tiers import Tier


class RewardCategory(models.TextChoices):
    FOOD = "food", _("Comida")
    DRINK = "drink", _("Bebida")
    DESSERT = "dessert", _("Sobremesa")
    DISCOUNT = "discount", _("Desconto")
    MERCHANDISE = "merchandise", _("Produto")
    EXPERIENCE = "experience", _("Experiência")
    OTHER = "other", _("Outro")


class Reward(models.Model):
    """
    Reward redeemable for points.

    Published rewards are not edited; staff only toggle is_active.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        "rewardman.Restaurant",
        on_delete=models.CASCADE,
        related_name="rewards",
        verbose_name=_("restaurante"),
    )

    name = models.CharField(_("nome"), max_length=200)
    description = models.TextField(_("descrição"), blank=True)
    points_required = models.PositiveIntegerField(_("pontos necessários"))
    category = models.CharField(
        _("categoria"),
        max_length=20,
        choices=RewardCategory.choices,
        default=RewardCategory.OTHER,
    )
    min_tier = models.CharField(
        _("nível mínimo"),
        max_length=20,
        choices=Tier.choices,
        default=Tier.BRONZE,
    )

    is_active = models.BooleanField(_("disponível"), default=True, db_index=True)
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    class Meta:
        db_table = "rewardman_reward"
        verbose_name = _("recompensa")
        verbose_name_plural = _("recompensas")
        ordering = ["points_required", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_required__gt=0),
                name="rewardman_reward_points_positive",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.points_required}pts)"
