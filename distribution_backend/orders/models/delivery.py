# orders/models/delivery.py

"""
DELIVERY HAND-OFF (MINIMAL)

Scheduling lives elsewhere. Fulfillment only needs:
- the delivery attached to an order
- to close it (and free its vehicle) when the order is delivered
"""

import uuid

from django.conf import settings
from django.db import models


class Vehicle(models.Model):
    STATUS_AVAILABLE = "available"
    STATUS_ON_ROUTE = "on_route"
    STATUS_MAINTENANCE = "maintenance"

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Available"),
        (STATUS_ON_ROUTE, "On Route"),
        (STATUS_MAINTENANCE, "Maintenance"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=128)
    registration_number = models.CharField(max_length=32, unique=True)
    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_AVAILABLE,
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.registration_number})"


class Delivery(models.Model):
    STATUS_SCHEDULED = "scheduled"
    STATUS_IN_PROGRESS = "in_progress"
    STATUS_DELIVERED = "delivered"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_SCHEDULED, "Scheduled"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="delivery",
    )
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deliveries",
    )
    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deliveries",
    )

    scheduled_date = models.DateField(null=True, blank=True)
    delivery_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_SCHEDULED,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["scheduled_date"]
        verbose_name_plural = "deliveries"

    def __str__(self):
        return f"Delivery for {self.order_id} | {self.status}"
