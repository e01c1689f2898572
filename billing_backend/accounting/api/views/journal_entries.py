"""
PATH: accounting/api/views/journal_entries.py

JOURNAL ENTRY API

- GET  /api/accounting/journal-entries/        list (company-scoped)
- GET  /api/accounting/journal-entries/<id>/   entry with lines + ledger names
- POST /api/accounting/journal-entries/        manual entry (journal.post)

Entries are immutable: no PUT / PATCH / DELETE.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated

from accounting.api.errors import (
    HANDLED_ERRORS,
    error_response,
    service_error_response,
    success_response,
)
from accounting.api.serializers import (
    JournalEntrySerializer,
    ManualJournalEntryCommandSerializer,
)
from accounting.models.journal import JournalEntry
from accounting.services.manual_entry_service import post_manual_entry
from permissions.roles import (
    CAP_JOURNAL_POST,
    CAP_LEDGER_VIEW,
    HasCapability,
    scope_to_actor_company,
)


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = JournalEntrySerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "head", "options"]
    filterset_fields = ["transaction_type", "transaction_id", "entry_date"]

    queryset = (
        JournalEntry.objects
        .prefetch_related("lines", "lines__ledger_account")
        .order_by("-created_at")
    )

    # Capability hook used by HasCapability
    required_capability = None

    def get_permissions(self):
        if self.action == "create":
            self.required_capability = CAP_JOURNAL_POST
        else:
            self.required_capability = CAP_LEDGER_VIEW
        return [IsAuthenticated(), HasCapability()]

    def get_serializer_class(self):
        if self.action == "create":
            return ManualJournalEntryCommandSerializer
        return JournalEntrySerializer

    def get_queryset(self):
        return scope_to_actor_company(super().get_queryset(), self.request.user)

    @extend_schema(
        request=ManualJournalEntryCommandSerializer,
        responses={201: JournalEntrySerializer},
        description="Post a balanced manual journal entry",
    )
    def create(self, request, *args, **kwargs):
        command = ManualJournalEntryCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        company = getattr(request.user, "company", None)
        if company is None:
            return error_response(
                code="NO_COMPANY",
                message="Your account is not linked to a company.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            entry = post_manual_entry(
                actor=request.user,
                company=company,
                narration=data["narration"],
                lines=[dict(line) for line in data["lines"]],
                entry_date=data.get("entry_date"),
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        entry = self.get_queryset().get(pk=entry.pk)
        return success_response(
            {"journal_entry": JournalEntrySerializer(entry).data},
            http_status=status.HTTP_201_CREATED,
        )
