"""
Tests for sales analytics and the Excel export.
"""

import io
from datetime import date, datetime
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone

import openpyxl
import pytest

from apps.finance.models import Expense
from apps.inventory.models import Category
from apps.reporting.services import UNCATEGORIZED, ReportExportService, SalesAnalytics
from apps.sales.models import Sale, SaleItem

# A Sunday
SUNDAY_AFTERNOON = datetime(2026, 10, 18, 14, 30)


def _sale(branch, cashier, lines, when=None, discount="0.00", status=Sale.COMPLETED, **extra):
    subtotal = sum(Decimal(price) * Decimal(quantity) for _, quantity, price in lines)
    cost = sum(
        product.purchase_price * Decimal(quantity) for product, quantity, _ in lines
    )
    total = subtotal - Decimal(discount)
    sale = Sale.objects.create(
        invoice_number=f"INV-{Sale.objects.count() + 1}",
        date=timezone.make_aware(when or SUNDAY_AFTERNOON),
        branch=branch,
        cashier=cashier,
        subtotal=subtotal,
        discount=Decimal(discount),
        total=total,
        profit=total - cost,
        status=status,
        **extra,
    )
    for product, quantity, price in lines:
        SaleItem.objects.create(
            sale=sale,
            product=product,
            product_name=product.name,
            quantity=Decimal(quantity),
            unit_price=Decimal(price),
            purchase_price=product.purchase_price,
            total=Decimal(price) * Decimal(quantity),
        )
    return sale


@pytest.fixture
def sales(branch, admin_user, make_product):
    dairy = Category.objects.create(name="Dairy")
    milk = make_product(name="Milk", price="20.00", purchase_price="15.00", category=dairy)
    bread = make_product(name="Bread", price="5.00", purchase_price="3.00")

    _sale(
        branch,
        admin_user,
        [(milk, "3", "20.00"), (bread, "4", "5.00")],
        customer_name="Ahmed",
        customer_phone="0100000000",
    )
    _sale(branch, admin_user, [(bread, "10", "5.00")], discount="5.00")
    _sale(
        branch,
        admin_user,
        [(milk, "100", "20.00")],
        status=Sale.CANCELLED,
        customer_name="Mona",
    )
    return {"milk": milk, "bread": bread}


@pytest.mark.django_db
class TestSalesAnalytics:
    def test_summary_excludes_cancelled_sales(self, sales):
        summary = SalesAnalytics().summary()

        assert summary["revenue"] == Decimal("125.00")
        assert summary["sale_count"] == 2
        assert summary["discount"] == Decimal("5.00")
        assert summary["average_ticket"] == Decimal("62.50")
        assert summary["profit"] == Decimal("38.00")
        assert len(summary["daily"]) == 1

    def test_date_range_filters(self, sales):
        summary = SalesAnalytics(date_from=date(2026, 10, 19)).summary()
        assert summary["sale_count"] == 0
        assert summary["revenue"] == Decimal("0.00")
        assert summary["average_ticket"] == Decimal("0.00")

    def test_by_product_orders_by_quantity(self, sales):
        rows = SalesAnalytics().by_product()
        assert [row["product_name"] for row in rows] == ["Bread", "Milk"]
        assert rows[0]["total_quantity"] == Decimal("14")

    def test_by_category_buckets_missing_category(self, sales):
        rows = {row["category_name"]: row["revenue"] for row in SalesAnalytics().by_category()}
        assert rows == {"Dairy": Decimal("60.00"), UNCATEGORIZED: Decimal("70.00")}

    def test_by_customer_skips_anonymous_sales(self, sales):
        rows = SalesAnalytics().by_customer()
        assert [row["customer_name"] for row in rows] == ["Ahmed"]
        assert rows[0]["total_spent"] == Decimal("80.00")

    def test_heatmap_uses_sunday_as_zero(self, sales):
        assert SalesAnalytics().heatmap() == [{"day_of_week": 0, "hour": 14, "count": 2}]

    def test_net_profit_subtracts_expenses(self, sales, branch):
        Expense.objects.create(
            branch=branch,
            expense_type="utilities",
            amount=Decimal("20.00"),
            date=date(2026, 10, 18),
        )

        report = SalesAnalytics().net_profit()

        assert report["revenue"] == Decimal("125.00")
        assert report["cost"] == Decimal("87.00")
        assert report["gross_profit"] == Decimal("38.00")
        assert report["expenses"] == Decimal("20.00")
        assert report["net_profit"] == Decimal("18.00")


@pytest.mark.django_db
class TestReportEndpoints:
    def test_summary_endpoint(self, authenticated_client, sales):
        response = authenticated_client.get(reverse("reporting:sales_summary"))
        assert response.status_code == 200
        assert response.json()["sale_count"] == 2

    def test_invalid_dates(self, authenticated_client):
        response = authenticated_client.get(
            reverse("reporting:sales_summary"), {"date_from": "18/10/2026"}
        )
        assert response.status_code == 400

        response = authenticated_client.get(
            reverse("reporting:sales_summary"),
            {"date_from": "2026-10-19", "date_to": "2026-10-18"},
        )
        assert response.status_code == 400

    def test_cashier_cannot_read_reports(self, cashier_client):
        response = cashier_client.get(reverse("reporting:net_profit"))
        assert response.status_code == 403


@pytest.mark.django_db
class TestSalesExport:
    def test_export_workbook(self, authenticated_client, sales, store_settings):
        response = authenticated_client.get(reverse("reporting:sales_export"))

        assert response.status_code == 200
        assert response["Content-Disposition"].startswith("attachment;")
        worksheet = openpyxl.load_workbook(io.BytesIO(response.content)).active
        assert worksheet["A1"].value == f"{store_settings.store_name} - Sales"
        assert worksheet["A4"].value == "Invoice"
        invoices = {worksheet.cell(row=row, column=1).value for row in (5, 6)}
        assert invoices == {"INV-1", "INV-2"}
        assert worksheet.max_row == 6

    def test_empty_export(self, authenticated_client):
        response = authenticated_client.get(reverse("reporting:sales_export"))
        assert response.status_code == 404

    def test_service_refuses_empty_queryset(self, store_settings):
        with pytest.raises(ValueError):
            ReportExportService(store_settings).export_sales_to_excel(Sale.objects.none())
