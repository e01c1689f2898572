"""
PATH: accounting/api/views/ledgers.py

LEDGER API (READ-ONLY)

- GET /api/accounting/ledgers/                 company ledgers with balances
- GET /api/accounting/ledgers/<id>/
- GET /api/accounting/ledgers/trial-balance/   recomputed from journal lines

Filtering: ?account_type=asset, ?is_system_ledger=true (django-filter)
"""

from __future__ import annotations

from decimal import Decimal

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.errors import error_response, success_response
from accounting.api.serializers import LedgerAccountSerializer
from accounting.models.ledger_account import LedgerAccount
from accounting.services.balance_service import get_trial_balance
from permissions.roles import CAP_LEDGER_VIEW, HasCapability, scope_to_actor_company


@extend_schema(tags=["accounting"])
class LedgerAccountViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_LEDGER_VIEW
    serializer_class = LedgerAccountSerializer
    filterset_fields = ["account_type", "is_system_ledger", "is_cash_ledger", "is_active"]

    queryset = LedgerAccount.objects.all().order_by("name")

    def get_queryset(self):
        return scope_to_actor_company(super().get_queryset(), self.request.user)

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="as_of",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Snapshot date (YYYY-MM-DD). Defaults to all postings.",
            ),
        ],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"], url_path="trial-balance")
    def trial_balance(self, request):
        company = getattr(request.user, "company", None)
        if company is None:
            return error_response(
                code="NO_COMPANY",
                message="Your account is not linked to a company.",
                http_status=400,
            )

        as_of = None
        raw = request.query_params.get("as_of")
        if raw:
            as_of = parse_date(raw)
            if as_of is None:
                return error_response(
                    code="VALIDATION_ERROR",
                    message="as_of must be YYYY-MM-DD",
                    http_status=400,
                )

        rows = get_trial_balance(company, as_of=as_of)
        total_debit = sum((r["debit_total"] for r in rows), Decimal("0.00"))
        total_credit = sum((r["credit_total"] for r in rows), Decimal("0.00"))

        return success_response(
            {
                "as_of": as_of.isoformat() if as_of else None,
                "rows": [
                    {
                        **r,
                        "account_id": str(r["account_id"]),
                        "debit_total": str(r["debit_total"]),
                        "credit_total": str(r["credit_total"]),
                        "balance": str(r["balance"]),
                    }
                    for r in rows
                ],
                "total_debit": str(total_debit),
                "total_credit": str(total_credit),
                "is_balanced": total_debit == total_credit,
            }
        )
