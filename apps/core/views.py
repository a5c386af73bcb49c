"""
Views for store settings, employees and shift tracking.
"""

import logging

from django.utils.dateparse import parse_date

from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from . import services
from .branch_context import (
    BranchScopedMixin,
    get_current_branch,
    resolve_branch_id,
    scope_to_branch,
)
from .models import Shift, StoreSettings, User
from .permissions import IsStoreAdmin
from .serializers import (
    EmployeeCreateUpdateSerializer,
    EmployeeListSerializer,
    LogoUploadSerializer,
    ShiftActionSerializer,
    ShiftSerializer,
    StoreSettingsSerializer,
)

logger = logging.getLogger(__name__)


def _parse_bool(value):
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def me(request):
    """Return the authenticated user's profile and open shift."""
    user = request.user
    shift = user.get_open_shift()
    return Response(
        {
            "user": EmployeeListSerializer(user).data,
            "open_shift": ShiftSerializer(shift).data if shift else None,
        },
        status=status.HTTP_200_OK,
    )


# Store settings


@api_view(["GET", "PATCH"])
@permission_classes([permissions.IsAuthenticated])
def store_settings(request):
    """
    Get or update the store settings. Updating requires an administrator.
    """
    store = StoreSettings.load()

    if request.method == "PATCH":
        if not request.user.is_admin_role():
            return Response(
                {"detail": "Only store administrators can change settings."},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = StoreSettingsSerializer(
            store, data=request.data, partial=True, context={"request": request}
        )
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        logger.info(f"Store settings updated by {request.user.username}")
        return Response(serializer.data, status=status.HTTP_200_OK)

    return Response(
        StoreSettingsSerializer(store, context={"request": request}).data,
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
@parser_classes([MultiPartParser, FormParser])
def upload_logo(request):
    """
    Upload the store logo and return its public URL.
    """
    serializer = LogoUploadSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    store = StoreSettings.load()
    if store.logo:
        store.logo.delete(save=False)
    store.logo = serializer.validated_data["logo"]
    store.save()

    logo_url = request.build_absolute_uri(store.logo.url)
    logger.info(f"Store logo uploaded: {store.logo.name}")
    return Response({"logo_url": logo_url}, status=status.HTTP_201_CREATED)


# Employees


class EmployeeListView(BranchScopedMixin, generics.ListAPIView):
    """
    API endpoint for listing employees.

    Query parameters:
    - search: Search by username, name or phone
    - role: Filter by role
    - is_active: Filter by active flag (true/false)
    - on_shift: Only employees with (true) or without (false) an open shift
    """

    serializer_class = EmployeeListSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["username", "first_name", "date_joined", "role"]
    ordering = ["username"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(User.objects.select_related("branch"))
        return services.filter_employees(
            queryset,
            role=params.get("role"),
            is_active=_parse_bool(params.get("is_active")),
            on_shift=_parse_bool(params.get("on_shift")),
            search=params.get("search"),
        )


class EmployeeCreateView(generics.CreateAPIView):
    serializer_class = EmployeeCreateUpdateSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]

    def perform_create(self, serializer):
        if not serializer.validated_data.get("branch"):
            serializer.validated_data["branch"] = get_current_branch(self.request)
        employee = serializer.save()
        logger.info(f"Employee {employee.username} ({employee.role}) created")


class EmployeeDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for retrieving, updating and deleting an employee.
    """

    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    queryset = User.objects.select_related("branch")
    lookup_field = "id"

    def get_serializer_class(self):
        if self.request.method == "GET":
            return EmployeeListSerializer
        return EmployeeCreateUpdateSerializer

    def perform_destroy(self, instance):
        if instance == self.request.user:
            from rest_framework.exceptions import ValidationError

            raise ValidationError({"detail": "You cannot delete your own account."})
        logger.info(f"Employee {instance.username} deleted by {self.request.user.username}")
        instance.delete()


# Shifts


def _shift_target(request, serializer):
    """Resolve which employee a shift action applies to."""
    employee_id = serializer.validated_data.get("employee_id")
    if employee_id and employee_id != request.user.id:
        if not request.user.is_admin_role():
            return None
        return User.objects.get(id=employee_id)
    return request.user


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def shift_start(request):
    """
    Start a shift for the current user (or, for admins, another employee).

    Request body:
    {
        "employee_id": "uuid" (optional),
        "notes": "" (optional)
    }
    """
    serializer = ShiftActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    employee = _shift_target(request, serializer)
    if employee is None:
        return Response(
            {"detail": "You cannot start a shift for another employee."},
            status=status.HTTP_403_FORBIDDEN,
        )

    try:
        shift = services.start_shift(
            employee,
            branch=employee.branch or get_current_branch(request),
            notes=serializer.validated_data.get("notes", ""),
        )
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def shift_end(request):
    """
    End the open shift of the current user (or, for admins, another employee).
    """
    serializer = ShiftActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    employee = _shift_target(request, serializer)
    if employee is None:
        return Response(
            {"detail": "You cannot end a shift for another employee."},
            status=status.HTTP_403_FORBIDDEN,
        )

    try:
        shift = services.end_shift(employee)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(ShiftSerializer(shift).data, status=status.HTTP_200_OK)


def _filter_shifts(request, queryset):
    """Apply the shift list filters; non-admin users only see their own shifts."""
    params = request.query_params

    if not request.user.is_admin_role():
        queryset = queryset.filter(employee=request.user)

    employee_id = params.get("employee")
    if employee_id:
        queryset = queryset.filter(employee_id=employee_id)

    date_from = parse_date(params.get("date_from") or "")
    if date_from:
        queryset = queryset.filter(start_time__date__gte=date_from)

    date_to = parse_date(params.get("date_to") or "")
    if date_to:
        queryset = queryset.filter(start_time__date__lte=date_to)

    is_open = _parse_bool(params.get("open"))
    if is_open is not None:
        queryset = queryset.filter(end_time__isnull=is_open)

    return queryset


class ShiftListView(BranchScopedMixin, generics.ListAPIView):
    """
    API endpoint for listing shifts.

    Query parameters:
    - employee: Filter by employee id
    - date_from / date_to: Filter by start date (YYYY-MM-DD)
    - open: Only open (true) or closed (false) shifts
    """

    serializer_class = ShiftSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["start_time", "total_hours"]
    ordering = ["-start_time"]

    def get_queryset(self):
        queryset = self.scope(Shift.objects.select_related("employee", "branch"))
        return _filter_shifts(self.request, queryset)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def employee_hours(request):
    """
    Hours worked per employee over a date range (closed shifts only).

    Accepts the same filters as the shift list.
    """
    shifts = scope_to_branch(Shift.objects.all(), resolve_branch_id(request))
    shifts = _filter_shifts(request, shifts)
    return Response(
        {"results": services.employee_hours_summary(shifts)}, status=status.HTTP_200_OK
    )
