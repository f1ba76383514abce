# a1_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from a1_core.attendances.api.views import AttendanceViewSet
from a1_core.audit.api.views import AuditEventViewSet
from a1_core.establishments.api.views import EstablishmentViewSet
from a1_core.iam.api.auth import LoginView, LogoutView, RefreshView
from a1_core.iam.api.me import MeView
from a1_core.iam.api.users import UserViewSet
from a1_core.patients.api.views import PatientViewSet

router = DefaultRouter()

router.register(r"establishments", EstablishmentViewSet, basename="establishments")
router.register(r"users", UserViewSet, basename="users")
router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"attendances", AttendanceViewSet, basename="attendances")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
