# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Count
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Order(models.Model):
    """
    A customer order committed against specific stock batches.

    GUARANTEES:
    - Created once by orders.services.order_transaction
    - Afterwards only status / payment_status / final_amount / notes change
    - Status moves only through orders.services.order_lifecycle
    - payment_status never moves backwards
    """

    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_STATUS_PENDING = "pending"
    PAYMENT_STATUS_PARTIAL = "partial"
    PAYMENT_STATUS_PAID = "paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_STATUS_PENDING, "Pending"),
        (PAYMENT_STATUS_PARTIAL, "Partial"),
        (PAYMENT_STATUS_PAID, "Paid"),
    ]

    # Rank used to keep payment_status monotonic
    PAYMENT_STATUS_RANK = {
        PAYMENT_STATUS_PENDING: 0,
        PAYMENT_STATUS_PARTIAL: 1,
        PAYMENT_STATUS_PAID: 2,
    }

    PAYMENT_TYPE_CASH = "cash"
    PAYMENT_TYPE_CREDIT = "credit"
    PAYMENT_TYPE_CHEQUE = "cheque"

    PAYMENT_TYPE_CHOICES = [
        (PAYMENT_TYPE_CASH, "Cash"),
        (PAYMENT_TYPE_CREDIT, "Credit"),
        (PAYMENT_TYPE_CHEQUE, "Cheque"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(
        max_length=32,
        unique=True,
        help_text="Human-readable order code (O1001, O1002, ...)",
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    sales_rep = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    order_date = models.DateField(default=timezone.localdate)
    delivery_date = models.DateField(null=True, blank=True)

    payment_type = models.CharField(max_length=16, choices=PAYMENT_TYPE_CHOICES)
    payment_status = models.CharField(
        max_length=16,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_STATUS_PENDING,
    )
    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    final_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="total_amount minus returned value",
    )

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
            models.Index(fields=["customer", "order_date"], name="order_customer_date_idx"),
            models.Index(fields=["order_date"], name="order_date_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "code",
        "customer_id",
        "payment_type",
        "order_date",
    )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Order.objects.filter(pk=self.pk).first()
            if previous is not None:
                for field in self._IMMUTABLE_FIELDS:
                    if getattr(self, field) != getattr(previous, field):
                        raise ValidationError(f"Order field '{field}' cannot be changed.")

                if (
                    self.PAYMENT_STATUS_RANK[self.payment_status]
                    < self.PAYMENT_STATUS_RANK[previous.payment_status]
                ):
                    raise ValidationError(
                        f"payment_status cannot move from "
                        f"'{previous.payment_status}' to '{self.payment_status}'"
                    )

        super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.STATUS_DELIVERED, self.STATUS_CANCELLED)

    @property
    def split_across_batches(self) -> bool:
        """
        True when any product on this order was drawn from more than one batch.
        """
        return (
            self.items.values("product")
            .annotate(batches=Count("batch", distinct=True))
            .filter(batches__gt=1)
            .exists()
        )

    def __str__(self):
        return f"{self.code} | {self.status} | {self.total_amount}"
