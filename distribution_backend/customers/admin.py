# customers/admin.py

from django.contrib import admin

from customers.models import Customer


# ======================================================
# CUSTOMER ADMIN
# ======================================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "city",
        "area",
        "credit_limit",
        "credit_balance",
        "is_active",
    )
    # Balance moves only through the credit service.
    readonly_fields = ("credit_balance", "created_at", "updated_at")
    search_fields = ("name", "contact_person", "phone")
    list_filter = ("is_active", "city")
