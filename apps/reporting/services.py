"""
Sales analytics and exports.

All aggregation runs in the database. Every report takes the same filters:
a branch id (None for all branches) and an inclusive date range.
"""

import io
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Sum, Value
from django.db.models.functions import Coalesce, ExtractHour, ExtractWeekDay, TruncDate
from django.utils import timezone

import openpyxl
from import_export import fields, resources
from import_export.formats.base_formats import XLSX
from openpyxl.styles import Font, PatternFill

from apps.core.models import StoreSettings
from apps.finance.models import Expense
from apps.sales.models import Sale, SaleItem

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"
ZERO = Value(Decimal("0.00"), output_field=DecimalField(max_digits=14, decimal_places=2))


def _money(value):
    return value if value is not None else Decimal("0.00")


def sales_queryset(branch_id=None, date_from=None, date_to=None):
    """Sales that count towards revenue: everything except cancelled sales."""
    queryset = Sale.objects.exclude(status=Sale.CANCELLED)
    if branch_id:
        queryset = queryset.filter(branch_id=branch_id)
    if date_from:
        queryset = queryset.filter(date__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__date__lte=date_to)
    return queryset


def sale_items_queryset(branch_id=None, date_from=None, date_to=None):
    return SaleItem.objects.filter(sale__in=sales_queryset(branch_id, date_from, date_to))


class SalesAnalytics:
    """
    Aggregate reports over a filtered set of sales.

    Usage:
        analytics = SalesAnalytics(branch_id=branch.id, date_from=start, date_to=end)
        analytics.summary()
    """

    def __init__(self, branch_id=None, date_from=None, date_to=None):
        self.branch_id = branch_id
        self.date_from = date_from
        self.date_to = date_to

    @property
    def sales(self):
        return sales_queryset(self.branch_id, self.date_from, self.date_to)

    @property
    def items(self):
        return sale_items_queryset(self.branch_id, self.date_from, self.date_to)

    def summary(self) -> Dict[str, Any]:
        totals = self.sales.aggregate(
            revenue=Coalesce(Sum("total"), ZERO),
            profit=Coalesce(Sum("profit"), ZERO),
            discount=Coalesce(Sum("discount"), ZERO),
            sale_count=Count("id"),
            average_ticket=Avg("total"),
        )
        average = totals["average_ticket"]
        if average is None:
            totals["average_ticket"] = Decimal("0.00")
        else:
            totals["average_ticket"] = Decimal(str(average)).quantize(Decimal("0.01"))
        totals["daily"] = list(
            self.sales.annotate(day=TruncDate("date"))
            .values("day")
            .annotate(revenue=Sum("total"), profit=Sum("profit"), sale_count=Count("id"))
            .order_by("day")
        )
        return totals

    def by_customer(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Total spent and sale count per customer, biggest spenders first."""
        rows = (
            self.sales.exclude(customer_name="")
            .values("customer_id", "customer_name", "customer_phone")
            .annotate(total_spent=Sum("total"), order_count=Count("id"))
            .order_by("-total_spent", "customer_name")
        )
        return list(rows[:limit] if limit else rows)

    def by_product(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Quantity sold and revenue per product, best sellers first."""
        rows = (
            self.items.values("product_id", "product_name")
            .annotate(
                total_quantity=Sum("quantity"),
                revenue=Sum("total"),
                cost=Sum(
                    ExpressionWrapper(
                        F("purchase_price") * F("quantity"),
                        output_field=DecimalField(max_digits=14, decimal_places=2),
                    )
                ),
            )
            .order_by("-total_quantity", "product_name")
        )
        return list(rows[:limit] if limit else rows)

    def by_category(self) -> List[Dict[str, Any]]:
        """Revenue per main category. Lines without one are ``uncategorized``."""
        rows = (
            self.items.values("product__category_id", "product__category__name")
            .annotate(total_quantity=Sum("quantity"), revenue=Sum("total"))
            .order_by("-revenue")
        )
        result = []
        for row in rows:
            result.append(
                {
                    "category_id": row["product__category_id"],
                    "category_name": row["product__category__name"] or UNCATEGORIZED,
                    "total_quantity": row["total_quantity"],
                    "revenue": row["revenue"],
                }
            )
        return result

    def heatmap(self) -> List[Dict[str, int]]:
        """
        Sale counts by day of week (0 = Sunday) and hour (0-23).
        """
        rows = (
            self.sales.annotate(weekday=ExtractWeekDay("date"), hour=ExtractHour("date"))
            .values("weekday", "hour")
            .annotate(count=Count("id"))
            .order_by("weekday", "hour")
        )
        # ExtractWeekDay is 1 (Sunday) to 7 (Saturday)
        return [
            {"day_of_week": row["weekday"] - 1, "hour": row["hour"], "count": row["count"]}
            for row in rows
        ]

    def expenses_total(self) -> Decimal:
        expenses = Expense.objects.all()
        if self.branch_id:
            expenses = expenses.filter(branch_id=self.branch_id)
        if self.date_from:
            expenses = expenses.filter(date__gte=self.date_from)
        if self.date_to:
            expenses = expenses.filter(date__lte=self.date_to)
        return _money(expenses.aggregate(total=Sum("amount"))["total"])

    def net_profit(self) -> Dict[str, Decimal]:
        """Revenue minus cost of goods sold minus expenses."""
        revenue = _money(self.sales.aggregate(total=Sum("total"))["total"])
        cost = _money(
            self.items.aggregate(
                total=Sum(
                    ExpressionWrapper(
                        F("purchase_price") * F("quantity"),
                        output_field=DecimalField(max_digits=14, decimal_places=2),
                    )
                )
            )["total"]
        ).quantize(Decimal("0.01"))
        expenses = self.expenses_total()
        return {
            "revenue": revenue,
            "cost": cost,
            "gross_profit": revenue - cost,
            "expenses": expenses,
            "net_profit": revenue - cost - expenses,
        }


class SaleExportResource(resources.ModelResource):
    """
    Django-import-export resource for the sales spreadsheet.
    """

    invoice_number = fields.Field(attribute="invoice_number", column_name="Invoice")
    date = fields.Field(attribute="date", column_name="Date")
    branch = fields.Field(attribute="branch__name", column_name="Branch")
    cashier = fields.Field(attribute="cashier__username", column_name="Cashier")
    customer_name = fields.Field(attribute="customer_name", column_name="Customer")
    customer_phone = fields.Field(attribute="customer_phone", column_name="Phone")
    subtotal = fields.Field(attribute="subtotal", column_name="Subtotal")
    discount = fields.Field(attribute="discount", column_name="Discount")
    total = fields.Field(attribute="total", column_name="Total")
    profit = fields.Field(attribute="profit", column_name="Profit")
    payment_method = fields.Field(attribute="payment_method", column_name="Payment")
    status = fields.Field(attribute="status", column_name="Status")

    class Meta:
        model = Sale
        fields = (
            "invoice_number",
            "date",
            "branch",
            "cashier",
            "customer_name",
            "customer_phone",
            "subtotal",
            "discount",
            "total",
            "profit",
            "payment_method",
            "status",
        )

    def dehydrate_date(self, sale):
        return timezone.localtime(sale.date).strftime("%Y-%m-%d %H:%M")


class ReportExportService:
    """
    Excel exports: django-import-export builds the sheet, openpyxl formats it.
    """

    HEADER_FILL = PatternFill(start_color="CCCCCC", end_color="CCCCCC", fill_type="solid")
    MONEY_COLUMNS = ("Subtotal", "Discount", "Total", "Profit")

    def __init__(self, store: Optional[StoreSettings] = None):
        self.store = store or StoreSettings.load()

    def export_sales_to_excel(self, queryset, report_name: str = "Sales") -> bytes:
        """
        Export sales as an .xlsx workbook.

        Raises:
            ValueError: If there are no sales to export
        """
        if not queryset.exists():
            raise ValueError("No data to export")

        dataset = SaleExportResource().export(
            queryset.select_related("branch", "cashier").order_by("date")
        )
        workbook_bytes = XLSX().export_data(dataset)
        return self._format_workbook(workbook_bytes, report_name)

    def _format_workbook(self, workbook_bytes: bytes, report_name: str) -> bytes:
        workbook = openpyxl.load_workbook(io.BytesIO(workbook_bytes))
        worksheet = workbook.active
        worksheet.title = report_name[:31]

        worksheet.insert_rows(1, 3)
        worksheet["A1"] = f"{self.store.store_name} - {report_name}"
        worksheet["A1"].font = Font(size=16, bold=True)
        worksheet["A2"] = f"Generated on: {timezone.now().strftime('%Y-%m-%d %H:%M:%S')}"

        headers = {}
        for cell in worksheet[4]:
            if cell.value:
                cell.font = Font(bold=True)
                cell.fill = self.HEADER_FILL
                headers[cell.value] = cell.column_letter

        for name in self.MONEY_COLUMNS:
            letter = headers.get(name)
            if letter:
                for cell in worksheet[letter][4:]:
                    cell.number_format = "#,##0.00"

        self._adjust_columns(worksheet)

        output = io.BytesIO()
        workbook.save(output)
        return output.getvalue()

    def _adjust_columns(self, worksheet):
        for column in worksheet.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column if cell.value is not None), default=0
            )
            worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)
