# accounting/api/serializers/journal_entries.py

from rest_framework import serializers

from accounting.models.journal import JournalEntry, JournalEntryLine


class JournalEntryLineSerializer(serializers.ModelSerializer):
    ledger_account_name = serializers.CharField(source="ledger_account.name", read_only=True)

    class Meta:
        model = JournalEntryLine
        fields = [
            "id",
            "ledger_account",
            "ledger_account_name",
            "debit_amount",
            "credit_amount",
            "bill_reference",
        ]
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    """
    Posted journal entry with its lines (read-only, audit-safe).
    """

    lines = JournalEntryLineSerializer(many=True, read_only=True)
    total_debit = serializers.SerializerMethodField()
    total_credit = serializers.SerializerMethodField()

    class Meta:
        model = JournalEntry
        fields = [
            "id",
            "entry_number",
            "entry_date",
            "narration",
            "transaction_type",
            "transaction_id",
            "reference",
            "created_by",
            "created_at",
            "total_debit",
            "total_credit",
            "lines",
        ]
        read_only_fields = fields

    def get_total_debit(self, obj):
        return str(sum((line.debit_amount for line in obj.lines.all()), 0))

    def get_total_credit(self, obj):
        return str(sum((line.credit_amount for line in obj.lines.all()), 0))


class ManualJournalLineSerializer(serializers.Serializer):
    ledger_account_id = serializers.UUIDField()
    debit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    credit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    bill_reference = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)


class ManualJournalEntryCommandSerializer(serializers.Serializer):
    """
    Command serializer for manual journal entries.
    Balancing and ledger checks happen in the service.
    """

    narration = serializers.CharField(max_length=500)
    entry_date = serializers.DateField(required=False, allow_null=True)
    lines = ManualJournalLineSerializer(many=True)

    def validate_lines(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("Journal entry must have at least 2 lines")
        return value
