# sales/admin.py

from django.contrib import admin

from sales.models import SalesOrder, SalesOrderItem


class SalesOrderItemInline(admin.TabularInline):
    model = SalesOrderItem
    extra = 0


@admin.register(SalesOrder)
class SalesOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "company", "customer", "order_date", "total_amount", "status")
    list_filter = ("status", "company")
    search_fields = ("order_number", "customer__name")
    readonly_fields = ("order_number", "created_at")
    ordering = ("-created_at",)
    inlines = [SalesOrderItemInline]
