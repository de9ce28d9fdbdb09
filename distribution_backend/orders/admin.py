# orders/admin.py

"""
Admin is for operational visibility only.

Orders, items, payments and returns are created by the fulfillment
services; editing them here would bypass stock and credit bookkeeping,
so those models are read-only. Deliveries and vehicles stay editable.
"""

from django.contrib import admin

from orders.models import (
    Delivery,
    DisplaySequence,
    Order,
    OrderItem,
    OrderReturn,
    Payment,
    ReturnItem,
    Vehicle,
)


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# ORDER ADMIN
# ======================================================


class OrderItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("code", "product", "batch", "quantity", "unit_price", "discount", "total_price")
    readonly_fields = fields


class PaymentInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("code", "amount", "method", "reference_number", "payment_date")
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "code",
        "customer",
        "order_date",
        "payment_type",
        "payment_status",
        "status",
        "total_amount",
        "final_amount",
    )
    search_fields = ("code", "customer__name")
    list_filter = ("status", "payment_status", "payment_type", "order_date")
    inlines = [OrderItemInline, PaymentInline]


# ======================================================
# RETURN ADMIN
# ======================================================


class ReturnItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ReturnItem
    extra = 0
    fields = ("code", "product", "batch", "quantity", "unit_price", "total_price", "reason")
    readonly_fields = fields


@admin.register(OrderReturn)
class OrderReturnAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("code", "order", "total_amount", "status", "processed_by", "return_date")
    search_fields = ("code", "order__code")
    inlines = [ReturnItemInline]


# ======================================================
# DELIVERY ADMIN
# ======================================================


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("name", "registration_number", "status")
    list_filter = ("status",)


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ("order", "driver", "vehicle", "scheduled_date", "delivery_date", "status")
    list_filter = ("status",)
    search_fields = ("order__code",)


@admin.register(DisplaySequence)
class DisplaySequenceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("key", "last_value")
