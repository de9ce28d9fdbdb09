# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe inventory):

- Batches are created here (receipt), but current_quantity is never edited
  through a form. The batch change form takes a signed "adjust_by" value
  that is applied through batch_ledger.adjust(), so every correction leaves
  a StockMovement row.
- StockMovement rows are immutable and read-only.
"""

from __future__ import annotations

from django import forms
from django.contrib import admin, messages

from products.models import Product, ProductBatch, StockMovement, Supplier
from products.services import batch_ledger


# =====================================================
# SUPPLIER
# =====================================================

@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_person", "phone", "is_active")
    search_fields = ("name", "contact_person")
    list_filter = ("is_active",)


# =====================================================
# PRODUCT
# =====================================================

class ProductBatchInline(admin.TabularInline):
    model = ProductBatch
    extra = 0
    can_delete = False
    fields = (
        "batch_number",
        "supplier",
        "expiry_date",
        "selling_price",
        "initial_quantity",
        "current_quantity",
        "is_active",
    )
    readonly_fields = ("current_quantity",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "unit_price", "reorder_level", "is_active")
    search_fields = ("name", "sku")
    list_filter = ("is_active",)
    inlines = [ProductBatchInline]


# =====================================================
# PRODUCT BATCH
# =====================================================

class ProductBatchAdminForm(forms.ModelForm):
    adjust_by = forms.IntegerField(
        required=False,
        help_text="Signed stock correction (e.g. -2 for breakage, 3 for a recount surplus)",
    )

    class Meta:
        model = ProductBatch
        exclude = ("current_quantity",)

    def clean_adjust_by(self):
        value = self.cleaned_data.get("adjust_by")
        if value and self.instance._state.adding:
            raise forms.ValidationError("Corrections apply to existing batches only.")
        return value


@admin.register(ProductBatch)
class ProductBatchAdmin(admin.ModelAdmin):
    form = ProductBatchAdminForm
    list_display = (
        "product",
        "batch_number",
        "expiry_date",
        "received_date",
        "selling_price",
        "initial_quantity",
        "current_quantity",
        "is_active",
    )
    list_filter = ("is_active", "expiry_date")
    search_fields = ("batch_number", "product__name", "product__sku")
    readonly_fields = ("current_quantity", "created_at")
    actions = ["deactivate_batches"]

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return self.readonly_fields + ("initial_quantity", "product")
        return self.readonly_fields

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)

        delta = form.cleaned_data.get("adjust_by")
        if change and delta:
            batch_ledger.adjust(obj.pk, delta, user=request.user)
            obj.refresh_from_db(fields=["current_quantity"])
            self.message_user(
                request,
                f"Stock adjusted by {delta}; on hand now {obj.current_quantity}.",
                messages.SUCCESS,
            )

    @admin.action(description="Deactivate selected batches (stop allocating from them)")
    def deactivate_batches(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f"{count} batch(es) deactivated.", messages.SUCCESS)


# =====================================================
# STOCK MOVEMENT (READ ONLY)
# =====================================================

@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("created_at", "product", "batch", "direction", "reason", "quantity", "order")
    list_filter = ("direction", "reason")
    search_fields = ("batch__batch_number", "product__name", "order__code")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
