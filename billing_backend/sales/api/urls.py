# sales/api/urls.py

"""
SALES API URLS

    /api/sales/orders/         list + create
    /api/sales/orders/<uuid>/  retrieve
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.views import SalesOrderViewSet

router = DefaultRouter()
router.register(r"orders", SalesOrderViewSet, basename="sales-order")

urlpatterns = [
    path("", include(router.urls)),
]
