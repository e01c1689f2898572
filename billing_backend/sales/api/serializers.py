# sales/api/serializers.py

from rest_framework import serializers

from sales.models import SalesOrder, SalesOrderItem


class SalesOrderLineInputSerializer(serializers.Serializer):
    product_reference = serializers.CharField(max_length=100)
    required_quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_rate = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class SalesOrderCreateCommandSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    order_date = serializers.DateField(required=False)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    advance_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    line_items = SalesOrderLineInputSerializer(many=True, allow_empty=False)


class SalesOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SalesOrderItem
        fields = ["id", "product_reference", "required_quantity", "unit_rate", "notes"]
        read_only_fields = fields


class SalesOrderSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    items = SalesOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesOrder
        fields = [
            "id",
            "order_number",
            "customer",
            "customer_name",
            "order_date",
            "expected_delivery_date",
            "advance_amount",
            "discount_amount",
            "total_amount",
            "status",
            "notes",
            "created_at",
            "items",
        ]
        read_only_fields = fields
