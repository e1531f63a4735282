# track_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from track_core.iam.api.auth import LoginView, LogoutView, RefreshView
from track_core.iam.api.me import MeView
from track_core.iam.api.views import EmployeeViewSet
from track_core.orders.api.views import OrderViewSet, TrackOrderView
from track_core.tenants.api.views import TenantViewSet

router = DefaultRouter()

# ViewSet-backed modules (centralized)
router.register(r"orders", OrderViewSet, basename="orders")
router.register(r"employees", EmployeeViewSet, basename="employees")
router.register(r"tenants", TenantViewSet, basename="tenants")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Public customer tracking (no auth, readable whatever the subscription status)
    path("track/<slug:tenant_code>/<str:number>/", TrackOrderView.as_view(), name="track-order"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
