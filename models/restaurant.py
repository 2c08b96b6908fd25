"""Restaurant model - namespace owner for customers and rewards."""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class Restaurant(models.Model):
    """
    Restaurant running a loyalty program.

    Only the fields the points engine needs. Settings and branding are
    managed elsewhere.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("nome"), max_length=200)
    slug = models.SlugField(_("slug"), max_length=100, unique=True)
    is_active = models.BooleanField(_("ativo"), default=True, db_index=True)
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)

    class Meta:
        db_table = "rewardman_restaurant"
        verbose_name = _("restaurante")
        verbose_name_plural = _("restaurantes")
        ordering = ["name"]

    def __str__(self):
        return self.name
