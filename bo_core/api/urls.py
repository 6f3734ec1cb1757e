# bo_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from bo_core.audit.api.views import (
    AuditEventViewSet,
    AuditStatsView,
    ResourceAuditView,
    RetentionCleanupView,
    RetentionPreviewView,
)
from bo_core.catalog.api.views import CategoryViewSet, ItemViewSet
from bo_core.iam.api.auth import LoginView, LogoutView, RefreshView
from bo_core.iam.api.me import MeView
from bo_core.iam.api.views import RoleViewSet, UserViewSet
from bo_core.numbering.api.views import NumberFormatViewSet
from bo_core.orders.api.views import OrderViewSet

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"items", ItemViewSet, basename="items")
router.register(r"orders", OrderViewSet, basename="orders")
router.register(r"users", UserViewSet, basename="users")
router.register(r"roles", RoleViewSet, basename="roles")
router.register(r"number-formats", NumberFormatViewSet, basename="number-formats")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    path("audit/retention/preview/", RetentionPreviewView.as_view(), name="audit-retention-preview"),
    path("audit/retention/cleanup/", RetentionCleanupView.as_view(), name="audit-retention-cleanup"),
    path("audit/stats/", AuditStatsView.as_view(), name="audit-stats"),

    path("", include(router.urls)),

    path("audit/<str:resource>/<str:resource_id>/", ResourceAuditView.as_view(), name="audit-resource"),
]
