"""
URL configuration for core app.
"""

from django.urls import path

from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import branch_views, views

app_name = "core"

urlpatterns = [
    # Authentication
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/auth/me/", views.me, name="me"),
    # Branches
    path("api/branches/", branch_views.BranchListCreateView.as_view(), name="branch_list"),
    path(
        "api/branches/<uuid:id>/", branch_views.BranchDetailView.as_view(), name="branch_detail"
    ),
    path(
        "api/branches/<uuid:branch_id>/metrics/",
        branch_views.branch_metrics,
        name="branch_metrics",
    ),
    path("api/branches/current/", branch_views.current_branch, name="current_branch"),
    # Store settings
    path("api/settings/", views.store_settings, name="store_settings"),
    path("api/settings/logo/", views.upload_logo, name="upload_logo"),
    # Employees
    path("api/employees/", views.EmployeeListView.as_view(), name="employee_list"),
    path("api/employees/create/", views.EmployeeCreateView.as_view(), name="employee_create"),
    path("api/employees/<uuid:id>/", views.EmployeeDetailView.as_view(), name="employee_detail"),
    path("api/employees/hours/", views.employee_hours, name="employee_hours"),
    # Shifts
    path("api/shifts/", views.ShiftListView.as_view(), name="shift_list"),
    path("api/shifts/start/", views.shift_start, name="shift_start"),
    path("api/shifts/end/", views.shift_end, name="shift_end"),
]
