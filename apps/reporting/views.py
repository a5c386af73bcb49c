"""
Views for sales analytics.

Every endpoint accepts:
- date_from / date_to: Inclusive date range (YYYY-MM-DD)
- branch: Branch id (defaults to the current branch)
"""

import logging

from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_date

from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.branch_context import is_multi_branch_enabled, resolve_branch_id
from apps.core.permissions import IsStoreAdmin

from .services import ReportExportService, SalesAnalytics, sales_queryset

logger = logging.getLogger(__name__)

TOP_LIMIT = 50


class ReportFilterError(ValueError):
    pass


def _analytics(request):
    params = request.query_params
    dates = {}
    for key in ("date_from", "date_to"):
        value = params.get(key)
        if value:
            parsed = parse_date(value)
            if parsed is None:
                raise ReportFilterError(f"Invalid {key}: {value}. Use YYYY-MM-DD.")
            dates[key] = parsed
    if dates.get("date_from") and dates.get("date_to") and dates["date_from"] > dates["date_to"]:
        raise ReportFilterError("date_from must not be after date_to.")

    branch_id = None
    if is_multi_branch_enabled():
        branch_id = resolve_branch_id(request, params.get("branch"))
    return SalesAnalytics(branch_id=branch_id, **dates)


def _report(request, build):
    try:
        analytics = _analytics(request)
    except ReportFilterError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(build(analytics), status=status.HTTP_200_OK)


def _limit(request):
    try:
        return min(int(request.query_params.get("limit", TOP_LIMIT)), 500)
    except ValueError:
        return TOP_LIMIT


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def sales_summary(request):
    """Revenue, profit, sale count and average ticket, with a daily breakdown."""
    return _report(request, lambda analytics: analytics.summary())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def sales_by_customer(request):
    limit = _limit(request)
    return _report(request, lambda analytics: analytics.by_customer(limit))


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def sales_by_product(request):
    limit = _limit(request)
    return _report(request, lambda analytics: analytics.by_product(limit))


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def sales_by_category(request):
    return _report(request, lambda analytics: analytics.by_category())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def sales_heatmap(request):
    """Sale counts keyed by day of week (0 = Sunday) and hour."""
    return _report(request, lambda analytics: analytics.heatmap())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def net_profit(request):
    return _report(request, lambda analytics: analytics.net_profit())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def export_sales_excel(request):
    """
    Download the filtered sales as an .xlsx workbook.
    """
    try:
        analytics = _analytics(request)
    except ReportFilterError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    queryset = sales_queryset(analytics.branch_id, analytics.date_from, analytics.date_to)
    try:
        content = ReportExportService().export_sales_to_excel(queryset)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"Sales export failed: {e}", exc_info=True)
        return Response(
            {"detail": "Failed to generate the export."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    filename = f"sales_{timezone.localdate().strftime('%Y%m%d')}.xlsx"
    response = HttpResponse(
        content,
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    logger.info(f"Sales export {filename} downloaded by {request.user.username}")
    return response
