# Initial schema for restaurants, customers, rewards and the points ledger

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Restaurant",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="nome")),
                ("slug", models.SlugField(max_length=100, unique=True, verbose_name="slug")),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, verbose_name="ativo"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
            ],
            options={
                "verbose_name": "restaurante",
                "verbose_name_plural": "restaurantes",
                "db_table": "rewardman_restaurant",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("first_name", models.CharField(max_length=100, verbose_name="nome")),
                (
                    "last_name",
                    models.CharField(blank=True, max_length=100, verbose_name="sobrenome"),
                ),
                ("email", models.EmailField(max_length=254, verbose_name="email")),
                ("phone", models.CharField(blank=True, max_length=20, verbose_name="telefone")),
                (
                    "date_of_birth",
                    models.DateField(blank=True, null=True, verbose_name="data de nascimento"),
                ),
                (
                    "total_points",
                    models.IntegerField(
                        default=0,
                        help_text="Pontos disponíveis para resgate",
                        verbose_name="saldo de pontos",
                    ),
                ),
                (
                    "lifetime_points",
                    models.IntegerField(
                        default=0,
                        help_text="Total de pontos já acumulados (nunca decresce)",
                        verbose_name="pontos acumulados",
                    ),
                ),
                (
                    "current_tier",
                    models.CharField(
                        choices=[
                            ("bronze", "Bronze"),
                            ("silver", "Silver"),
                            ("gold", "Gold"),
                            ("platinum", "Platinum"),
                        ],
                        default="bronze",
                        max_length=20,
                        verbose_name="nível",
                    ),
                ),
                (
                    "tier_progress",
                    models.PositiveSmallIntegerField(
                        default=0,
                        help_text="Percentual até o próximo nível (0-100)",
                        verbose_name="progresso do nível",
                    ),
                ),
                ("version", models.PositiveIntegerField(default=0, verbose_name="versão")),
                ("visit_count", models.PositiveIntegerField(default=0, verbose_name="visitas")),
                (
                    "total_spent",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=12,
                        verbose_name="total gasto",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, verbose_name="ativo"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="criado em"),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="customers",
                        to="rewardman.restaurant",
                        verbose_name="restaurante",
                    ),
                ),
            ],
            options={
                "verbose_name": "cliente",
                "verbose_name_plural": "clientes",
                "db_table": "rewardman_customer",
                "ordering": ["first_name", "last_name"],
                "indexes": [
                    models.Index(fields=["restaurant", "email"], name="rewardman_cust_email_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("restaurant", "email"),
                        name="rewardman_unique_customer_email",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(total_points__gte=0),
                        name="rewardman_customer_points_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Reward",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="nome")),
                ("description", models.TextField(blank=True, verbose_name="descrição")),
                ("points_required", models.PositiveIntegerField(verbose_name="pontos necessários")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("food", "Comida"),
                            ("drink", "Bebida"),
                            ("dessert", "Sobremesa"),
                            ("discount", "Desconto"),
                            ("merchandise", "Produto"),
                            ("experience", "Experiência"),
                            ("other", "Outro"),
                        ],
                        default="other",
                        max_length=20,
                        verbose_name="categoria",
                    ),
                ),
                (
                    "min_tier",
                    models.CharField(
                        choices=[
                            ("bronze", "Bronze"),
                            ("silver", "Silver"),
                            ("gold", "Gold"),
                            ("platinum", "Platinum"),
                        ],
                        default="bronze",
                        max_length=20,
                        verbose_name="nível mínimo",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, verbose_name="disponível"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rewards",
                        to="rewardman.restaurant",
                        verbose_name="restaurante",
                    ),
                ),
            ],
            options={
                "verbose_name": "recompensa",
                "verbose_name_plural": "recompensas",
                "db_table": "rewardman_reward",
                "ordering": ["points_required", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(points_required__gt=0),
                        name="rewardman_reward_points_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("purchase", "Compra"),
                            ("bonus", "Bônus"),
                            ("referral", "Indicação"),
                            ("signup", "Cadastro"),
                            ("redemption", "Resgate"),
                        ],
                        max_length=20,
                        verbose_name="tipo",
                    ),
                ),
                (
                    "points",
                    models.IntegerField(
                        help_text="Positivo para acúmulo, negativo para resgate",
                        verbose_name="pontos",
                    ),
                ),
                ("balance_after", models.IntegerField(verbose_name="saldo após")),
                (
                    "amount_spent",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        verbose_name="valor gasto",
                    ),
                ),
                (
                    "redemption_code",
                    models.CharField(blank=True, max_length=40, verbose_name="código de resgate"),
                ),
                (
                    "description",
                    models.CharField(blank=True, max_length=200, verbose_name="descrição"),
                ),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="ID externo (ex: order:123)",
                        max_length=100,
                        verbose_name="referência",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="criado em"),
                ),
                (
                    "created_by",
                    models.CharField(blank=True, max_length=100, verbose_name="criado por"),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_entries",
                        to="rewardman.customer",
                        verbose_name="cliente",
                    ),
                ),
                (
                    "reward",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="redemptions",
                        to="rewardman.reward",
                        verbose_name="recompensa",
                    ),
                ),
            ],
            options={
                "verbose_name": "lançamento de pontos",
                "verbose_name_plural": "lançamentos de pontos",
                "db_table": "rewardman_ledger_entry",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["customer", "-created_at"],
                        name="rewardman_ledger_cust_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("redemption_code", ""), _negated=True),
                        fields=("redemption_code",),
                        name="rewardman_unique_redemption_code",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("reference", ""), _negated=True),
                        fields=("customer", "entry_type", "reference"),
                        name="rewardman_unique_entry_reference",
                    ),
                ],
            },
        ),
    ]
