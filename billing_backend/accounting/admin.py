# accounting/admin.py

from django.contrib import admin

from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.models.ledger_account import LedgerAccount

# ============================================================
# LEDGER ACCOUNT
# ============================================================


@admin.register(LedgerAccount)
class LedgerAccountAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "company",
        "account_type",
        "group_name",
        "current_balance",
        "is_system_ledger",
        "is_active",
    )
    list_filter = ("account_type", "is_system_ledger", "is_cash_ledger", "is_active", "company")
    search_fields = ("name", "group_name")
    ordering = ("company", "name")

    # Balance moves only through journal postings
    readonly_fields = ("current_balance", "created_at", "updated_at")

    fieldsets = (
        (
            "Ledger Identity",
            {
                "fields": ("company", "name", "account_type", "group_name", "customer"),
            },
        ),
        (
            "Balances",
            {
                "fields": ("opening_balance", "current_balance"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_system_ledger", "is_cash_ledger", "is_active"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# JOURNAL ENTRY (READ-ONLY)
# ============================================================


class JournalEntryLineInline(admin.TabularInline):
    model = JournalEntryLine
    extra = 0
    can_delete = False
    readonly_fields = ("ledger_account", "debit_amount", "credit_amount", "bill_reference")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "entry_number",
        "company",
        "entry_date",
        "transaction_type",
        "reference",
        "created_at",
    )
    list_filter = ("transaction_type", "entry_date", "company")
    search_fields = ("entry_number", "narration", "reference", "transaction_id")
    ordering = ("-created_at",)
    inlines = [JournalEntryLineInline]

    readonly_fields = (
        "company",
        "entry_number",
        "entry_date",
        "narration",
        "transaction_type",
        "transaction_id",
        "reference",
        "created_by",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
