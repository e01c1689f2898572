# companies/admin.py

from django.contrib import admin

from companies.models import Company, Customer


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "state", "gstin", "created_at")
    search_fields = ("name", "gstin")
    readonly_fields = ("created_at",)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "state", "gstin", "is_active")
    list_filter = ("company", "is_active")
    search_fields = ("name", "gstin", "email")
    readonly_fields = ("created_at",)
