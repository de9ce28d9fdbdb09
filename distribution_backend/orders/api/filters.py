# orders/api/filters.py

import django_filters
from django.db.models import Q

from orders.models import Order


class OrderFilterSet(django_filters.FilterSet):
    """
    Order history filters:
    ?status=&payment_status=&payment_type=&customer=&sales_rep=
    ?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD&q=<code or customer name>
    """

    status = django_filters.ChoiceFilter(choices=Order.STATUS_CHOICES)
    payment_status = django_filters.ChoiceFilter(choices=Order.PAYMENT_STATUS_CHOICES)
    payment_type = django_filters.ChoiceFilter(choices=Order.PAYMENT_TYPE_CHOICES)
    customer = django_filters.UUIDFilter(field_name="customer_id")
    sales_rep = django_filters.NumberFilter(field_name="sales_rep_id")
    date_from = django_filters.DateFilter(field_name="order_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="order_date", lookup_expr="lte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Order
        fields = [
            "status",
            "payment_status",
            "payment_type",
            "customer",
            "sales_rep",
            "date_from",
            "date_to",
            "q",
        ]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(code__icontains=value) | Q(customer__name__icontains=value)
        )
