# invoices/api/serializers.py

from rest_framework import serializers

from accounting.api.serializers import JournalEntrySerializer
from accounting.models.journal import JournalEntry
from inventory.services.dispatch_cost import dispatch_summary
from invoices.models import Invoice, InvoiceAuditLog, InvoiceItem, Payment

# ======================================================
# COMMAND SERIALIZERS (INPUT ONLY, NO DB WRITES)
# ======================================================


class InvoiceLineInputSerializer(serializers.Serializer):
    product_reference = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_rate = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    gst_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        required=False,
        help_text="Total GST rate; split into CGST+SGST or charged as IGST",
    )
    cgst_rate = serializers.DecimalField(max_digits=6, decimal_places=3, required=False)
    sgst_rate = serializers.DecimalField(max_digits=6, decimal_places=3, required=False)
    igst_rate = serializers.DecimalField(max_digits=6, decimal_places=3, required=False)
    is_inter_state = serializers.BooleanField(
        required=False,
        allow_null=True,
        default=None,
        help_text="Override the invoice-level place-of-supply regime for this line",
    )


class InvoiceEditCommandSerializer(serializers.Serializer):
    """
    Replacement content for an invoice inside its edit window.
    """

    items = InvoiceLineInputSerializer(many=True, allow_empty=False)
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    adjustment_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True)
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)


class InvoiceCreateCommandSerializer(InvoiceEditCommandSerializer):
    customer_id = serializers.UUIDField()
    dispatch_id = serializers.UUIDField(required=False, allow_null=True)


class DispatchPreviewQuerySerializer(serializers.Serializer):
    dispatch_id = serializers.UUIDField()


class DispatchInvoiceCommandSerializer(DispatchPreviewQuerySerializer):
    """
    Bill a goods dispatch; lines come from the dispatched items.
    """

    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreditNoteCommandSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class PaymentCommandSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_mode = serializers.ChoiceField(choices=Payment.PAYMENT_MODES)
    payment_date = serializers.DateField(required=False)
    reference_number = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ======================================================
# READ SERIALIZERS
# ======================================================


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = [
            "id",
            "product_reference",
            "description",
            "quantity",
            "unit_rate",
            "discount_percent",
            "discount_amount",
            "taxable_amount",
            "cgst_rate",
            "cgst_amount",
            "sgst_rate",
            "sgst_amount",
            "igst_rate",
            "igst_amount",
            "line_total",
        ]
        read_only_fields = fields


class InvoiceAuditLogSerializer(serializers.ModelSerializer):
    changed_by_email = serializers.SerializerMethodField()

    class Meta:
        model = InvoiceAuditLog
        fields = ["id", "change_type", "changes", "changed_by", "changed_by_email", "created_at"]
        read_only_fields = fields

    def get_changed_by_email(self, obj):
        user = getattr(obj, "changed_by", None)
        return getattr(user, "email", None)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "payment_number",
            "payment_date",
            "amount",
            "payment_mode",
            "reference_number",
            "notes",
            "journal_entry",
            "created_at",
        ]
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "document_number",
            "customer",
            "customer_name",
            "invoice_date",
            "due_date",
            "subtotal",
            "gst_amount",
            "discount_amount",
            "adjustment_amount",
            "total_amount",
            "total_paid",
            "balance_due",
            "status",
            "payment_status",
            "is_credit_note",
            "credit_note_for",
            "revision",
            "created_at",
        ]
        read_only_fields = fields


class InvoiceDetailSerializer(InvoiceListSerializer):
    """
    Full read view: invoice, customer + dispatch summaries, items,
    audit trail, payments and every journal entry touching the invoice.
    """

    customer_summary = serializers.SerializerMethodField()
    dispatch_summary = serializers.SerializerMethodField()
    items = InvoiceItemSerializer(many=True, read_only=True)
    audit_trail = InvoiceAuditLogSerializer(source="audit_logs", many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    credit_notes = serializers.SerializerMethodField()
    journal_entries = serializers.SerializerMethodField()

    class Meta(InvoiceListSerializer.Meta):
        fields = InvoiceListSerializer.Meta.fields + [
            "notes",
            "finalized_at",
            "finalized_by",
            "edited_at",
            "edited_by",
            "customer_summary",
            "dispatch_summary",
            "items",
            "audit_trail",
            "payments",
            "credit_notes",
            "journal_entries",
        ]
        read_only_fields = fields

    def get_customer_summary(self, obj):
        customer = obj.customer
        return {
            "id": str(customer.id),
            "name": customer.name,
            "state": customer.state,
            "gstin": customer.gstin,
            "is_inter_state": customer.is_inter_state_for(obj.company),
        }

    def get_dispatch_summary(self, obj):
        return dispatch_summary(obj.dispatch)

    def get_credit_notes(self, obj):
        return [
            {"id": str(cn.id), "document_number": cn.document_number, "total_amount": str(cn.total_amount)}
            for cn in obj.credit_notes.all().order_by("created_at")
        ]

    def get_journal_entries(self, obj):
        transaction_ids = [str(obj.pk)] + [str(pk) for pk in obj.payments.values_list("pk", flat=True)]
        entries = (
            JournalEntry.objects.filter(company_id=obj.company_id, transaction_id__in=transaction_ids)
            .prefetch_related("lines", "lines__ledger_account")
            .order_by("created_at")
        )
        return JournalEntrySerializer(entries, many=True).data
