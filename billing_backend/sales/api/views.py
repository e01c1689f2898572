# sales/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated

from accounting.api.errors import (
    HANDLED_ERRORS,
    error_response,
    service_error_response,
    success_response,
)
from companies.models import Customer
from permissions.roles import (
    CAP_INVOICE_VIEW,
    CAP_SALES_ORDER_CREATE,
    HasCapability,
    scope_to_actor_company,
)
from sales.api.serializers import SalesOrderCreateCommandSerializer, SalesOrderSerializer
from sales.models import SalesOrder
from sales.services.sales_order_service import create_sales_order


@extend_schema(tags=["sales"])
class SalesOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Sales orders.

    - list/retrieve: anyone who can view invoices
    - create: sales_order.create
    """

    queryset = SalesOrder.objects.select_related("customer").prefetch_related("items")
    serializer_class = SalesOrderSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "customer", "order_date"]

    # Capability hook used by HasCapability
    required_capability = None

    def get_permissions(self):
        if self.action == "create":
            self.required_capability = CAP_SALES_ORDER_CREATE
        else:
            self.required_capability = CAP_INVOICE_VIEW
        return [IsAuthenticated(), HasCapability()]

    def get_serializer_class(self):
        if self.action == "create":
            return SalesOrderCreateCommandSerializer
        return SalesOrderSerializer

    def get_queryset(self):
        return scope_to_actor_company(super().get_queryset(), self.request.user)

    @extend_schema(
        request=SalesOrderCreateCommandSerializer,
        responses={201: SalesOrderSerializer},
        description="Create a sales order numbered SO-YYYY-MM-NNNNN",
    )
    def create(self, request, *args, **kwargs):
        command = SalesOrderCreateCommandSerializer(data=request.data)
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

        try:
            order = create_sales_order(
                actor=request.user,
                company=company,
                customer=customer,
                items=[dict(line) for line in data["line_items"]],
                order_date=data.get("order_date"),
                expected_delivery_date=data.get("expected_delivery_date"),
                advance_amount=data.get("advance_amount", 0),
                discount_amount=data.get("discount_amount", 0),
                notes=data.get("notes", ""),
            )
        except HANDLED_ERRORS as exc:
            return service_error_response(exc)

        order = self.get_queryset().get(pk=order.pk)
        return success_response(
            {"sales_order": SalesOrderSerializer(order).data},
            http_status=status.HTTP_201_CREATED,
        )
