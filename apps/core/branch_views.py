"""
Branch management API.

Implements multi-branch administration:
- Branch list/create/update/delete
- Selecting the active branch for the session
- Per-branch performance metrics
"""

import logging

from django.db.models import Avg, Count, ProtectedError, Sum
from django.utils import timezone

from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .branch_context import get_current_branch, is_multi_branch_enabled, set_current_branch
from .models import Branch
from .permissions import IsAdminOrReadOnly
from .serializers import BranchSerializer, SelectBranchSerializer

logger = logging.getLogger(__name__)


class BranchListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating branches.

    Query parameters:
    - search: Search by name or code
    - is_active: Filter by active flag (true/false)
    """

    serializer_class = BranchSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "code", "address"]
    ordering_fields = ["name", "code", "created_at"]
    ordering = ["name"]

    def get_queryset(self):
        queryset = Branch.objects.all()
        is_active = self.request.query_params.get("is_active")
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == "true")
        return queryset

    def perform_create(self, serializer):
        branch = serializer.save()
        logger.info(f"Branch {branch.code} created by {self.request.user.username}")


class BranchDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for retrieving, updating and deleting a branch.

    Branches that still own sales, products or stock records cannot be deleted.
    """

    serializer_class = BranchSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    queryset = Branch.objects.all()
    lookup_field = "id"

    def destroy(self, request, *args, **kwargs):
        branch = self.get_object()
        if branch.is_main:
            return Response(
                {"detail": "The main branch cannot be deleted."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            branch.delete()
        except ProtectedError:
            logger.warning(f"Refused to delete branch {branch.code}: it still has records")
            return Response(
                {"detail": "Branch has related records and cannot be deleted."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info(f"Branch {branch.code} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET", "POST"])
@permission_classes([permissions.IsAuthenticated])
def current_branch(request):
    """
    Get or select the branch the session works on.

    POST body:
    {
        "branch_id": "uuid"
    }
    """
    if request.method == "POST":
        if not request.user.can_switch_branch():
            return Response(
                {"detail": "You can only work in your assigned branch."},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = SelectBranchSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        branch = Branch.objects.get(id=serializer.validated_data["branch_id"])
        set_current_branch(request, branch)
        return Response(
            {
                "branch": BranchSerializer(branch).data,
                "multi_branch_enabled": is_multi_branch_enabled(),
            },
            status=status.HTTP_200_OK,
        )

    branch = get_current_branch(request)
    return Response(
        {
            "branch": BranchSerializer(branch).data if branch else None,
            "multi_branch_enabled": is_multi_branch_enabled(),
        },
        status=status.HTTP_200_OK,
    )


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def branch_metrics(request, branch_id):
    """
    Sales metrics for one branch: today's and this month's revenue and sale count.
    """
    from apps.sales.models import Sale

    try:
        branch = Branch.objects.get(id=branch_id)
    except Branch.DoesNotExist:
        return Response({"detail": "Branch not found."}, status=status.HTTP_404_NOT_FOUND)

    today = timezone.localdate()
    sales = Sale.objects.filter(branch=branch, status=Sale.COMPLETED)

    today_stats = sales.filter(created_at__date=today).aggregate(
        revenue=Sum("total"), count=Count("id"), average=Avg("total")
    )
    month_stats = sales.filter(
        created_at__year=today.year, created_at__month=today.month
    ).aggregate(revenue=Sum("total"), count=Count("id"), profit=Sum("profit"))

    return Response(
        {
            "branch": BranchSerializer(branch).data,
            "today": {
                "revenue": today_stats["revenue"] or 0,
                "sales_count": today_stats["count"],
                "average_sale": today_stats["average"] or 0,
            },
            "month": {
                "revenue": month_stats["revenue"] or 0,
                "sales_count": month_stats["count"],
                "profit": month_stats["profit"] or 0,
            },
            "employees": branch.users.filter(is_active=True).count(),
        },
        status=status.HTTP_200_OK,
    )
