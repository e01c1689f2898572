# inventory/admin.py

from django.contrib import admin

from inventory.models import GoodsDispatch, GoodsDispatchItem


class GoodsDispatchItemInline(admin.TabularInline):
    model = GoodsDispatchItem
    extra = 0


@admin.register(GoodsDispatch)
class GoodsDispatchAdmin(admin.ModelAdmin):
    list_display = ("dispatch_number", "company", "customer", "dispatch_date")
    list_filter = ("company",)
    search_fields = ("dispatch_number",)
    inlines = [GoodsDispatchItemInline]
