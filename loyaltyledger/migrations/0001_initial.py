# Initial schema for the loyalty ledger

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Merchant",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="code")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                (
                    "loyalty_type",
                    models.CharField(
                        choices=[("points", "Points"), ("stamps", "Stamps")],
                        default="points",
                        max_length=10,
                        verbose_name="loyalty type",
                    ),
                ),
                (
                    "stamps_required",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Stamps needed to fill one card (falls back to DEFAULT_STAMPS_REQUIRED)",
                        null=True,
                        verbose_name="stamps per card",
                    ),
                ),
                (
                    "points_multiplier",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Points per currency unit spent, before tax",
                        max_digits=8,
                        null=True,
                        verbose_name="points multiplier",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
            ],
            options={
                "verbose_name": "merchant",
                "verbose_name_plural": "merchants",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="code")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                (
                    "email",
                    models.EmailField(
                        blank=True, db_index=True, max_length=254, verbose_name="email"
                    ),
                ),
                ("points", models.PositiveIntegerField(default=0, verbose_name="points")),
                ("tier", models.CharField(blank=True, max_length=100, verbose_name="tier")),
                (
                    "last_tier_upgrade_date",
                    models.DateTimeField(blank=True, null=True, verbose_name="last tier upgrade"),
                ),
                (
                    "stamps",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Stamps on the current card",
                        verbose_name="stamps",
                    ),
                ),
                (
                    "card_cycle_number",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Current card number (never decreases)",
                        verbose_name="card cycle",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="customers",
                        to="loyaltyledger.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "customer",
                "verbose_name_plural": "customers",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="StampReward",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("stamps_required", models.PositiveIntegerField(verbose_name="stamps required")),
                ("reward_name", models.CharField(max_length=200, verbose_name="reward")),
                ("reward_description", models.TextField(blank=True, verbose_name="description")),
                ("order", models.PositiveIntegerField(default=0, verbose_name="order")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stamp_rewards",
                        to="loyaltyledger.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "stamp reward",
                "verbose_name_plural": "stamp rewards",
                "ordering": ["merchant", "order", "stamps_required"],
            },
        ),
        migrations.CreateModel(
            name="Tier",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=100, verbose_name="name")),
                ("order", models.PositiveIntegerField(verbose_name="order")),
                ("points_required", models.PositiveIntegerField(default=0, verbose_name="points required")),
                ("benefits", models.JSONField(blank=True, default=list, verbose_name="benefits")),
                ("color", models.CharField(blank=True, max_length=20, verbose_name="color")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tiers",
                        to="loyaltyledger.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "tier",
                "verbose_name_plural": "tiers",
                "ordering": ["merchant", "order"],
            },
        ),
        migrations.CreateModel(
            name="RewardInstance",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("card_cycle_number", models.PositiveIntegerField(verbose_name="card cycle")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("locked", "Locked"),
                            ("available", "Available"),
                            ("redeemed", "Redeemed"),
                            ("expired", "Expired"),
                        ],
                        db_index=True,
                        default="locked",
                        max_length=20,
                        verbose_name="status",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now, verbose_name="created at"),
                ),
                ("unlocked_at", models.DateTimeField(blank=True, null=True, verbose_name="unlocked at")),
                ("redeemed_at", models.DateTimeField(blank=True, null=True, verbose_name="redeemed at")),
                ("expires_at", models.DateTimeField(db_index=True, verbose_name="expires at")),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reward_instances",
                        to="loyaltyledger.customer",
                        verbose_name="customer",
                    ),
                ),
                (
                    "stamp_reward",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="instances",
                        to="loyaltyledger.stampreward",
                        verbose_name="reward",
                    ),
                ),
            ],
            options={
                "verbose_name": "reward instance",
                "verbose_name_plural": "reward instances",
                "ordering": [
                    "-card_cycle_number",
                    "stamp_reward__order",
                    "stamp_reward__stamps_required",
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerBenefit",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("benefit_name", models.CharField(max_length=200, verbose_name="benefit")),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Available"), ("used", "Used")],
                        default="available",
                        max_length=20,
                        verbose_name="status",
                    ),
                ),
                ("unlocked_at", models.DateTimeField(auto_now_add=True, verbose_name="unlocked at")),
                ("used_at", models.DateTimeField(blank=True, null=True, verbose_name="used at")),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="benefits",
                        to="loyaltyledger.customer",
                        verbose_name="customer",
                    ),
                ),
                (
                    "tier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="customer_benefits",
                        to="loyaltyledger.tier",
                        verbose_name="tier",
                    ),
                ),
            ],
            options={
                "verbose_name": "customer benefit",
                "verbose_name_plural": "customer benefits",
                "ordering": ["-unlocked_at"],
            },
        ),
        migrations.CreateModel(
            name="LedgerTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("points", models.IntegerField(default=0, verbose_name="points")),
                ("stamps_earned", models.IntegerField(blank=True, null=True, verbose_name="stamps")),
                ("description", models.CharField(max_length=255, verbose_name="description")),
                (
                    "amount",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="amount"
                    ),
                ),
                (
                    "tax_amount",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="tax"
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="loyaltyledger.customer",
                        verbose_name="customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "ledger transaction",
                "verbose_name_plural": "ledger transactions",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="RedeemedReward",
            fields=[],
            options={
                "verbose_name": "redeemed reward",
                "verbose_name_plural": "redeemed rewards",
                "proxy": True,
                "indexes": [],
                "constraints": [],
            },
            bases=("loyaltyledger.rewardinstance",),
        ),
        migrations.AddConstraint(
            model_name="tier",
            constraint=models.UniqueConstraint(
                fields=("merchant", "name"),
                name="loyaltyledger_unique_tier_name",
            ),
        ),
        migrations.AddConstraint(
            model_name="tier",
            constraint=models.UniqueConstraint(
                fields=("merchant", "order"),
                name="loyaltyledger_unique_tier_order",
            ),
        ),
        migrations.AddConstraint(
            model_name="rewardinstance",
            constraint=models.UniqueConstraint(
                fields=("customer", "stamp_reward", "card_cycle_number"),
                name="loyaltyledger_unique_reward_instance",
            ),
        ),
        migrations.AddIndex(
            model_name="rewardinstance",
            index=models.Index(
                fields=["customer", "card_cycle_number"],
                name="loyaltyledg_reward_cust_idx",
            ),
        ),
        migrations.AddIndex(
            model_name="rewardinstance",
            index=models.Index(
                fields=["status", "expires_at"],
                name="loyaltyledg_reward_exp_idx",
            ),
        ),
        migrations.AddConstraint(
            model_name="customerbenefit",
            constraint=models.UniqueConstraint(
                fields=("customer", "tier", "benefit_name"),
                name="loyaltyledger_unique_customer_benefit",
            ),
        ),
        migrations.AddIndex(
            model_name="ledgertransaction",
            index=models.Index(
                fields=["customer", "-created_at"],
                name="loyaltyledg_tx_cust_idx",
            ),
        ),
    ]
