# invoices/api/views.py

"""
INVOICE API

    GET  /api/invoices/                       list (company-scoped, filterable)
    POST /api/invoices/                       create (finalized immediately)
    GET  /api/invoices/<id>/                  full read view
    POST /api/invoices/<id>/edit/             edit inside the 24h window
    POST /api/invoices/<id>/credit-note/      issue credit note
    POST /api/invoices/<id>/payments/         record payment
    GET  /api/invoices/dispatch-preview/        prefill from a goods dispatch (no writes)
    POST /api/invoices/from-dispatch/           bill a goods dispatch

Every write returns {"success": true, ...} or the canonical error envelope.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from accounting.api.errors import (
    HANDLED_ERRORS,
    error_response,
    service_error_response,
    success_response,
)
from companies.models import Customer
from inventory.models import GoodsDispatch
from invoices.api.serializers import (
    CreditNoteCommandSerializer,
    DispatchInvoiceCommandSerializer,
    DispatchPreviewQuerySerializer,
    InvoiceCreateCommandSerializer,
    InvoiceDetailSerializer,
    InvoiceEditCommandSerializer,
    InvoiceListSerializer,
    PaymentCommandSerializer,
    PaymentSerializer,
)
from invoices.models import Invoice
from invoices.services.credit_note_service import create_credit_note
from invoices.services.dispatch_invoice import (
    create_invoice_from_dispatch,
    get_dispatch_for_actor,
    preview_invoice_from_dispatch,
)
from invoices.services.invoice_service import create_invoice, edit_invoice
from invoices.services.payment_service import record_payment
from permissions.roles import (
    CAP_INVOICE_CREATE,
    CAP_INVOICE_CREDIT,
    CAP_INVOICE_EDIT,
    CAP_INVOICE_VIEW,
    CAP_PAYMENT_RECORD,
    HasCapability,
    scope_to_actor_company,
)

ACTION_CAPABILITIES = {
    "create": CAP_INVOICE_CREATE,
    "edit": CAP_INVOICE_EDIT,
    "credit_note": CAP_INVOICE_CREDIT,
    "payments": CAP_PAYMENT_RECORD,
    "dispatch_preview": CAP_INVOICE_CREATE,
    "from_dispatch": CAP_INVOICE_CREATE,
}


def _line_items(validated_items) -> list[dict]:
    return [dict(item) for item in validated_items]


@extend_schema(tags=["invoices"])
class InvoiceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = (
        Invoice.objects
        .select_related("company", "customer", "dispatch")
        .prefetch_related("items", "audit_logs__changed_by", "payments")
    )
    serializer_class = InvoiceListSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "payment_status", "is_credit_note", "customer", "invoice_date"]

    # Capability hook used by HasCapability
    required_capability = None

    def get_permissions(self):
        self.required_capability = ACTION_CAPABILITIES.get(self.action, CAP_INVOICE_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        return scope_to_actor_company(super().get_queryset(), self.request.user).order_by(
            "-created_at"
        )

    def get_serializer_class(self):
        return {
            "retrieve": InvoiceDetailSerializer,
            "create": InvoiceCreateCommandSerializer,
            "edit": InvoiceEditCommandSerializer,
            "credit_note": CreditNoteCommandSerializer,
            "payments": PaymentCommandSerializer,
            "dispatch_preview": DispatchPreviewQuerySerializer,
            "from_dispatch": DispatchInvoiceCommandSerializer,
        }.get(self.action, InvoiceListSerializer)

    def _detail(self, invoice):
        return InvoiceDetailSerializer(self.get_queryset().get(pk=invoice.pk)).data

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    @extend_schema(
        request=InvoiceCreateCommandSerializer,
        responses={201: InvoiceDetailSerializer},
        description="Create an invoice; it is finalized and posted to the ledger immediately",
    )
    def create(self, request, *args, **kwargs):
        command = InvoiceCreateCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        company = getattr(request.user, "company", None)
        if company is None:
            return error_response(
                code="NO_COMPANY",
                message="Your account is not linked to a company.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        customer = Customer.objects.filter(pk=data["customer_id"], company=company).first()
        if customer is None:
            return error_response(
                code="NOT_FOUND",
                message="Customer not found",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        dispatch = None
        if data.get("dispatch_id"):
            dispatch = GoodsDispatch.objects.filter(pk=data["dispatch_id"], company=company).first()
            if dispatch is None:
                return error_response(
                    code="NOT_FOUND",
                    message="Dispatch not found",
                    http_status=status.HTTP_404_NOT_FOUND,
                )

        try:
            invoice = create_invoice(
                actor=request.user,
                company=company,
                customer=customer,
                items=_line_items(data["items"]),
                invoice_date=data.get("invoice_date"),
                due_date=data.get("due_date"),
                discount_amount=data.get("discount_amount", 0),
                adjustment_amount=data.get("adjustment_amount", 0),
                notes=data.get("notes", ""),
                dispatch=dispatch,
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return success_response(
            {"invoice": self._detail(invoice)},
            http_status=status.HTTP_201_CREATED,
        )

    # --------------------------------------------------
    # EDIT (24H WINDOW)
    # --------------------------------------------------

    @extend_schema(
        request=InvoiceEditCommandSerializer,
        responses={200: InvoiceDetailSerializer},
        description="Replace items and totals inside the edit window; unpaid invoices only",
    )
    @action(detail=True, methods=["post"], url_path="edit")
    def edit(self, request, pk=None):
        invoice = self.get_object()

        command = InvoiceEditCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            invoice = edit_invoice(
                actor=request.user,
                invoice=invoice,
                items=_line_items(data["items"]),
                discount_amount=data.get("discount_amount", 0),
                adjustment_amount=data.get("adjustment_amount", 0),
                notes=data.get("notes"),
                invoice_date=data.get("invoice_date"),
                due_date=data.get("due_date"),
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return success_response({"invoice": self._detail(invoice)})

    # --------------------------------------------------
    # CREDIT NOTE
    # --------------------------------------------------

    @extend_schema(
        request=CreditNoteCommandSerializer,
        responses={201: InvoiceDetailSerializer},
        description="Issue a credit note that fully reverses the invoice",
    )
    @action(detail=True, methods=["post"], url_path="credit-note")
    def credit_note(self, request, pk=None):
        invoice = self.get_object()

        command = CreditNoteCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            credit_note = create_credit_note(
                actor=request.user,
                invoice=invoice,
                reason=command.validated_data["reason"],
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return success_response(
            {
                "credit_note": self._detail(credit_note),
                "invoice": self._detail(invoice),
            },
            http_status=status.HTTP_201_CREATED,
        )

    # --------------------------------------------------
    # PAYMENTS
    # --------------------------------------------------

    @extend_schema(
        request=PaymentCommandSerializer,
        responses={201: PaymentSerializer},
        description="Record a payment against the invoice",
    )
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        invoice = self.get_object()

        command = PaymentCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            payment = record_payment(
                actor=request.user,
                invoice=invoice,
                amount=data["amount"],
                payment_mode=data["payment_mode"],
                payment_date=data.get("payment_date"),
                reference_number=data.get("reference_number", ""),
                notes=data.get("notes", ""),
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return success_response(
            {
                "payment": PaymentSerializer(payment).data,
                "invoice": self._detail(invoice),
            },
            http_status=status.HTTP_201_CREATED,
        )

    # --------------------------------------------------
    # BILL A GOODS DISPATCH
    # --------------------------------------------------

    @extend_schema(
        parameters=[OpenApiParameter("dispatch_id", str, required=True)],
        description="Invoice lines and totals prefilled from a goods dispatch; nothing is saved",
    )
    @action(detail=False, methods=["get"], url_path="dispatch-preview")
    def dispatch_preview(self, request):
        query = DispatchPreviewQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            dispatch = get_dispatch_for_actor(request.user, query.validated_data["dispatch_id"])
            preview = preview_invoice_from_dispatch(actor=request.user, dispatch=dispatch)
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return success_response({"preview": preview})

    @extend_schema(
        request=DispatchInvoiceCommandSerializer,
        responses={201: InvoiceDetailSerializer},
        description="Create and post an invoice for every item of a goods dispatch",
    )
    @action(detail=False, methods=["post"], url_path="from-dispatch")
    def from_dispatch(self, request):
        command = DispatchInvoiceCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            dispatch = get_dispatch_for_actor(request.user, data["dispatch_id"])
            invoice = create_invoice_from_dispatch(
                actor=request.user,
                dispatch=dispatch,
                invoice_date=data.get("invoice_date"),
                due_date=data.get("due_date"),
                notes=data.get("notes", ""),
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        return success_response(
            {"invoice": self._detail(invoice)},
            http_status=status.HTTP_201_CREATED,
        )
