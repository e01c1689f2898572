# accounting/api/serializers/ledgers.py

from rest_framework import serializers

from accounting.models.ledger_account import LedgerAccount


class LedgerAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerAccount
        fields = [
            "id",
            "name",
            "account_type",
            "group_name",
            "opening_balance",
            "current_balance",
            "is_system_ledger",
            "is_cash_ledger",
            "customer",
            "is_active",
        ]
        read_only_fields = fields
