# orders/models/display_sequence.py

from django.db import models


class DisplaySequence(models.Model):
    """
    Counter behind the human-readable codes (O1001, OI1001, P1001, ...).

    One row per prefix. Incremented ONLY via orders.services.identifiers
    (locked row + F() update), never by reading MAX(code).
    """

    key = models.CharField(max_length=8, primary_key=True)
    last_value = models.PositiveBigIntegerField(default=0)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}: {self.last_value}"
