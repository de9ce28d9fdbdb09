# customers/apps.py

"""
CUSTOMERS APP CONFIG

Minimal customer persistence needed by fulfillment:
- Customer record (active flag, credit limit)
- Running credit balance mutated only through customers.services.credit
"""

from django.apps import AppConfig


class CustomersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "customers"
    verbose_name = "Customers"
