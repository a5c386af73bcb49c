"""
Service functions for branches, employees and shifts.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from .models import Branch, Shift, User

logger = logging.getLogger(__name__)


def ensure_main_branch():
    """
    Return the MAIN branch, creating it when the store has no branches yet.
    """
    branch = Branch.get_main()
    if branch is None:
        branch = Branch.objects.create(name="Main Branch", code=settings.MAIN_BRANCH_CODE)
        logger.info(f"Created default branch {branch.code}")
    return branch


@transaction.atomic
def start_shift(employee, branch=None, start_time=None, notes=""):
    """
    Open a shift for an employee.

    Raises:
        ValueError: If the employee already has an open shift or is inactive
    """
    # Lock the employee row so two terminals cannot open two shifts
    employee = User.objects.select_for_update().get(pk=employee.pk)

    if not employee.is_active:
        raise ValueError("Inactive employees cannot start a shift.")

    if Shift.objects.filter(employee=employee, end_time__isnull=True).exists():
        raise ValueError(f"{employee.username} already has an open shift.")

    shift = Shift.objects.create(
        employee=employee,
        branch=branch or employee.branch,
        start_time=start_time or timezone.now(),
        notes=notes,
    )
    logger.info(f"Shift started for {employee.username} at {shift.start_time.isoformat()}")
    return shift


@transaction.atomic
def end_shift(employee, end_time=None):
    """
    Close the employee's open shift and compute hours worked.

    Raises:
        ValueError: If the employee has no open shift
    """
    shift = (
        Shift.objects.select_for_update()
        .filter(employee=employee, end_time__isnull=True)
        .order_by("-start_time")
        .first()
    )
    if shift is None:
        raise ValueError(f"{employee.username} has no open shift.")

    shift.close(end_time=end_time)
    logger.info(f"Shift ended for {employee.username}: {shift.total_hours} hours")
    return shift


def employee_hours_summary(shifts):
    """
    Sum closed-shift hours per employee.

    Args:
        shifts: Shift queryset, already filtered by branch/date

    Returns:
        List of dicts with employee id, username, shift count and total hours,
        highest hours first.
    """
    rows = (
        shifts.filter(end_time__isnull=False)
        .values("employee_id", "employee__username", "employee__first_name", "employee__last_name")
        .annotate(shift_count=Count("id"), total_hours=Sum("total_hours"))
        .order_by("-total_hours")
    )
    return [
        {
            "employee_id": str(row["employee_id"]),
            "username": row["employee__username"],
            "name": f"{row['employee__first_name']} {row['employee__last_name']}".strip(),
            "shift_count": row["shift_count"],
            "total_hours": row["total_hours"] or Decimal("0.00"),
        }
        for row in rows
    ]


def filter_employees(queryset, role=None, is_active=None, on_shift=None, search=None):
    """Apply the employee list filters used by the back office."""
    if role:
        queryset = queryset.filter(role=role)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if on_shift is not None:
        open_shift_ids = Shift.objects.filter(end_time__isnull=True).values("employee_id")
        if on_shift:
            queryset = queryset.filter(id__in=open_shift_ids)
        else:
            queryset = queryset.exclude(id__in=open_shift_ids)
    if search:
        queryset = queryset.filter(
            Q(username__icontains=search)
            | Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
            | Q(phone__icontains=search)
        )
    return queryset.distinct()
