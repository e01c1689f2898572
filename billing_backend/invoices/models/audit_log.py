# invoices/models/audit_log.py

"""
INVOICE AUDIT LOG (APPEND-ONLY)

One row per lifecycle event on an invoice:
- created   (invoice finalized)
- edited    (fields changed inside the edit window)
- credited  (credit note issued against it)

Created once. Never updated. Never deleted.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from .invoice import Invoice

User = settings.AUTH_USER_MODEL


class InvoiceAuditLog(models.Model):
    CHANGE_CREATED = "created"
    CHANGE_EDITED = "edited"
    CHANGE_CREDITED = "credited"

    CHANGE_TYPES = [
        (CHANGE_CREATED, "Created"),
        (CHANGE_EDITED, "Edited"),
        (CHANGE_CREDITED, "Credited"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name="audit_logs",
    )

    changed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoice_audit_logs",
    )

    change_type = models.CharField(max_length=20, choices=CHANGE_TYPES)
    changes = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["invoice", "created_at"], name="invoice_audit_invoice_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Invoice audit entries are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Invoice audit entries cannot be deleted")

    def __str__(self):
        return f"{self.change_type} | {self.invoice_id}"
