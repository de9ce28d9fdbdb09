# orders/api/urls.py

"""
ORDERS API URLS

Rules:
- Explicit non-PK routes (like "allocate") MUST be registered BEFORE router URLs.

Provides:
- Allocation quote:
    POST /api/orders/allocate/

- Orders:
    GET/POST /api/orders/orders/
    GET      /api/orders/orders/<uuid>/
    POST     /api/orders/orders/<uuid>/status/
    POST     /api/orders/orders/<uuid>/payments/
    POST     /api/orders/orders/<uuid>/returns/
    POST     /api/orders/orders/<uuid>/notes/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.api.viewsets.order import OrderViewSet
from orders.views.allocation import AllocateView

router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="orders")

urlpatterns = [
    path("allocate/", AllocateView.as_view(), name="orders-allocate"),
    path("", include(router.urls)),
]
