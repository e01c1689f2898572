import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("companies", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerAccount",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=150)),
                ("account_type", models.CharField(choices=[("asset", "Asset"), ("liability", "Liability"), ("income", "Income"), ("expense", "Expense"), ("equity", "Equity")], max_length=20)),
                ("group_name", models.CharField(blank=True, default="", help_text="Reporting group, e.g. Sundry Debtors, Duties & Taxes", max_length=100)),
                ("opening_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("current_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Running balance in the account's normal direction", max_digits=14)),
                ("is_system_ledger", models.BooleanField(default=False)),
                ("is_cash_ledger", models.BooleanField(default=False, help_text="Debits above the cash transaction limit are refused")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_accounts", to="companies.company")),
                ("customer", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="ledger_account", to="companies.customer")),
            ],
            options={
                "verbose_name": "Ledger Account",
                "verbose_name_plural": "Ledger Accounts",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["company", "account_type"], name="ledger_company_type_idx"),
                    models.Index(fields=["company", "is_system_ledger"], name="ledger_company_system_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "name"), name="uniq_ledger_company_name"),
                    models.CheckConstraint(condition=models.Q(("name", ""), _negated=True), name="chk_ledger_name_not_blank"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("entry_number", models.CharField(max_length=30)),
                ("entry_date", models.DateField(default=django.utils.timezone.localdate)),
                ("narration", models.TextField()),
                ("transaction_type", models.CharField(choices=[("invoice", "Invoice"), ("invoice_edit", "Invoice edit"), ("credit_note", "Credit note"), ("cogs", "Cost of goods sold"), ("payment", "Payment"), ("manual", "Manual"), ("void", "Void")], max_length=20)),
                ("transaction_id", models.CharField(blank=True, default="", help_text="Id of the source document (invoice, payment, ...)", max_length=64)),
                ("reference", models.CharField(blank=True, help_text="Idempotency key, e.g. INVOICE:<id>", max_length=120, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_entries", to="companies.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="journal_entries", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-entry_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["company", "entry_date"], name="je_company_date_idx"),
                    models.Index(fields=["transaction_type", "transaction_id"], name="je_transaction_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "entry_number"), name="uniq_journal_entry_number_per_company"),
                    models.UniqueConstraint(condition=models.Q(("reference__isnull", False), models.Q(("reference", ""), _negated=True)), fields=("reference",), name="uniq_journal_reference_not_blank"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntryLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("debit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("credit_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("bill_reference", models.CharField(blank=True, default="", max_length=50)),
                ("journal_entry", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="lines", to="accounting.journalentry")),
                ("ledger_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="accounting.ledgeraccount")),
            ],
            options={
                "verbose_name": "Journal Entry Line",
                "verbose_name_plural": "Journal Entry Lines",
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)), name="chk_journal_line_non_negative"),
                    models.CheckConstraint(condition=models.Q(models.Q(("debit_amount__gt", 0), ("credit_amount", 0)), models.Q(("debit_amount", 0), ("credit_amount__gt", 0)), _connector="OR"), name="chk_journal_line_one_side"),
                ],
            },
        ),
    ]
