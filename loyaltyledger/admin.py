"""Loyalty ledger admin."""

from django.contrib import admin
from django.utils.html import format_html

from loyaltyledger.models import (
    Customer,
    CustomerBenefit,
    LedgerTransaction,
    Merchant,
    RewardInstance,
    StampReward,
    Tier,
)


class TierInline(admin.TabularInline):
    model = Tier
    extra = 0
    ordering = ["order"]


class StampRewardInline(admin.TabularInline):
    model = StampReward
    extra = 0
    ordering = ["order", "stamps_required"]


@admin.register(Merchant)
class MerchantAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "loyalty_type", "stamps_required", "points_multiplier", "is_active"]
    list_filter = ["loyalty_type", "is_active"]
    search_fields = ["code", "name"]
    inlines = [TierInline, StampRewardInline]


class LedgerTransactionInline(admin.TabularInline):
    model = LedgerTransaction
    extra = 0
    readonly_fields = ["points", "stamps_earned", "description", "amount", "tax_amount", "created_at"]
    ordering = ["-created_at"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "merchant", "points", "tier", "stamps_progress", "is_active"]
    list_filter = ["merchant", "is_active"]
    search_fields = ["code", "name", "email"]
    readonly_fields = [
        "points",
        "tier",
        "last_tier_upgrade_date",
        "stamps",
        "card_cycle_number",
        "created_at",
        "updated_at",
    ]
    inlines = [LedgerTransactionInline]

    def stamps_progress(self, obj):
        return format_html(
            "{}/{} (card {}, {} total)",
            obj.display_stamps,
            obj.merchant.card_size,
            obj.card_cycle_number,
            obj.total_stamps,
        )

    stamps_progress.short_description = "Stamps"


@admin.register(RewardInstance)
class RewardInstanceAdmin(admin.ModelAdmin):
    list_display = [
        "customer",
        "stamp_reward",
        "card_cycle_number",
        "status_badge",
        "unlocked_at",
        "redeemed_at",
        "expires_at",
    ]
    list_filter = ["status"]
    search_fields = ["customer__code", "stamp_reward__reward_name"]
    readonly_fields = [
        "customer",
        "stamp_reward",
        "card_cycle_number",
        "status",
        "created_at",
        "unlocked_at",
        "redeemed_at",
        "expires_at",
    ]

    def has_add_permission(self, request):
        return False

    def status_badge(self, obj):
        colors = {
            "locked": "#6c757d",
            "available": "#28a745",
            "redeemed": "#007bff",
            "expired": "#dc3545",
        }
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            colors.get(obj.status, "#6c757d"),
            obj.get_status_display(),
        )

    status_badge.short_description = "Status"


@admin.register(CustomerBenefit)
class CustomerBenefitAdmin(admin.ModelAdmin):
    list_display = ["customer", "tier", "benefit_name", "status", "unlocked_at", "used_at"]
    list_filter = ["status", "tier"]
    search_fields = ["customer__code", "benefit_name"]
    readonly_fields = ["unlocked_at", "used_at"]


@admin.register(LedgerTransaction)
class LedgerTransactionAdmin(admin.ModelAdmin):
    list_display = ["created_at", "customer_code", "points_display", "stamps_earned", "description"]
    search_fields = ["customer__code", "description"]
    readonly_fields = [
        "customer",
        "points",
        "stamps_earned",
        "description",
        "amount",
        "tax_amount",
        "created_at",
    ]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def customer_code(self, obj):
        return obj.customer.code

    customer_code.short_description = "Customer"

    def points_display(self, obj):
        if obj.points > 0:
            return format_html('<span style="color:green">+{}</span>', obj.points)
        return format_html("<span>{}</span>", obj.points)

    points_display.short_description = "Points"
