# invoices/admin.py

from django.contrib import admin

from invoices.models import Invoice, InvoiceAuditLog, InvoiceItem, Payment

# ============================================================
# INVOICE (READ-ONLY: changes go through the lifecycle services)
# ============================================================


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product_reference",
        "description",
        "quantity",
        "unit_rate",
        "taxable_amount",
        "cgst_amount",
        "sgst_amount",
        "igst_amount",
        "line_total",
    )
    fields = readonly_fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "document_number",
        "company",
        "customer",
        "invoice_date",
        "total_amount",
        "balance_due",
        "status",
        "payment_status",
        "is_credit_note",
    )
    list_filter = ("status", "payment_status", "is_credit_note", "company")
    search_fields = ("document_number", "customer__name")
    ordering = ("-created_at",)
    inlines = [InvoiceItemInline]

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InvoiceAuditLog)
class InvoiceAuditLogAdmin(admin.ModelAdmin):
    list_display = ("invoice", "change_type", "changed_by", "created_at")
    list_filter = ("change_type",)
    search_fields = ("invoice__document_number",)
    readonly_fields = ("invoice", "change_type", "changes", "changed_by", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_number", "invoice", "amount", "payment_mode", "payment_date")
    list_filter = ("payment_mode", "company")
    search_fields = ("payment_number", "invoice__document_number", "reference_number")

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
