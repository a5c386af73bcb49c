"""
Tests for POS checkout, invoices and the return workflow.
"""

import re
from datetime import datetime
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone

import pytest

from apps.crm.models import Customer
from apps.sales import services
from apps.sales.models import ReturnOrder, Sale

INVOICE_PATTERN = re.compile(r"^\d{6}-\d{4}$")


def _checkout(client, items, **extra):
    payload = {"items": items, "payment_method": "cash"}
    payload.update(extra)
    return client.post(reverse("sales:pos_create_sale"), payload, format="json")


@pytest.fixture
def sale(cashier_client, product):
    response = _checkout(
        cashier_client,
        [{"product_id": str(product.id), "quantity": "3"}],
        customer_name="Ahmed",
        customer_phone="0100000000",
    )
    assert response.status_code == 201
    return Sale.objects.get(id=response.json()["id"])


@pytest.mark.django_db
class TestCheckout:
    def test_invoice_discount_and_totals(self, cashier_client, make_product, branch):
        product = make_product(price="100.00", purchase_price="60.00", quantity="20")

        response = _checkout(
            cashier_client,
            [{"product_id": str(product.id), "quantity": "5"}],
            discount="50.00",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["subtotal"] == "500.00"
        assert data["discount"] == "50.00"
        assert data["total"] == "450.00"
        assert data["profit"] == "150.00"
        assert data["cash_amount"] == "450.00"
        assert INVOICE_PATTERN.match(data["invoice_number"])
        assert data["branch"] == str(branch.id)

        product.refresh_from_db()
        assert product.quantity == Decimal("15")

    def test_mixed_payment_must_match_total(self, cashier_client, product):
        items = [{"product_id": str(product.id), "quantity": "2"}]

        response = _checkout(
            cashier_client,
            items,
            payment_method="mixed",
            cash_amount="40.00",
            card_amount="50.00",
        )
        assert response.status_code == 400

        response = _checkout(
            cashier_client,
            items,
            payment_method="mixed",
            cash_amount="40.00",
            card_amount="60.00",
        )
        assert response.status_code == 201
        assert response.json()["card_amount"] == "60.00"

    def test_insufficient_stock_creates_nothing(self, cashier_client, make_product):
        plenty = make_product(name="Plenty", quantity="10")
        scarce = make_product(name="Scarce", quantity="1")

        response = _checkout(
            cashier_client,
            [
                {"product_id": str(plenty.id), "quantity": "2"},
                {"product_id": str(scarce.id), "quantity": "5"},
            ],
        )

        assert response.status_code == 400
        assert Sale.objects.count() == 0
        plenty.refresh_from_db()
        assert plenty.quantity == Decimal("10")

    def test_scale_line_uses_weight(self, cashier_client, make_product):
        cheese = make_product(
            name="Feta", price="120.00", purchase_price="90.00", barcode_type="scale"
        )

        response = _checkout(
            cashier_client, [{"product_id": str(cheese.id), "quantity": "0.750"}]
        )

        assert response.status_code == 201
        assert response.json()["total"] == "90.00"

    def test_phone_links_customer_and_records_purchase(self, sale):
        customer = Customer.objects.get(phone="0100000000")
        assert sale.customer == customer
        assert customer.total_purchases == Decimal("150.00")


@pytest.mark.django_db
class TestInvoiceNumbers:
    def test_numbers_count_up_within_the_day(self, sale, cashier_user):
        now = timezone.now()
        prefix = timezone.localtime(now).strftime("%y%m%d")
        assert sale.invoice_number == f"{prefix}-0001"
        assert services.generate_invoice_number(now) == f"{prefix}-0002"

    def test_new_day_starts_at_one(self, sale):
        tomorrow = timezone.make_aware(datetime(2099, 1, 2, 10, 0))
        assert services.generate_invoice_number(tomorrow) == "990102-0001"


@pytest.mark.django_db
class TestReceipts:
    def test_html_receipt(self, cashier_client, sale):
        response = cashier_client.get(reverse("sales:receipt_html_standard", args=[sale.id]))
        assert response.status_code == 200
        assert sale.invoice_number in response.content.decode()

    def test_unknown_format(self, cashier_client, sale):
        response = cashier_client.get(reverse("sales:receipt_html", args=[sale.id, "poster"]))
        assert response.status_code == 400

    @pytest.mark.parametrize("format_type", ["standard", "thermal"])
    def test_pdf_receipt(self, cashier_client, sale, format_type):
        response = cashier_client.get(reverse("sales:receipt_pdf", args=[sale.id, format_type]))

        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert sale.invoice_number in response["Content-Disposition"]
        assert response.content.startswith(b"%PDF")

    def test_invoice_barcode(self, cashier_client, sale):
        response = cashier_client.get(reverse("sales:invoice_barcode", args=[sale.id]))

        assert response.status_code == 200
        assert response["Content-Type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")


@pytest.mark.django_db
class TestReturns:
    def _request_return(self, client, sale, product, quantity="1"):
        return client.post(
            reverse("sales:return_create"),
            {
                "order_type": "pos",
                "sale_id": str(sale.id),
                "reason": "Damaged packaging",
                "items": [{"product_id": str(product.id), "quantity": quantity}],
            },
            format="json",
        )

    def test_quantity_above_sold_is_refused(self, cashier_client, sale, product):
        response = self._request_return(cashier_client, sale, product, quantity="4")
        assert response.status_code == 400
        assert ReturnOrder.objects.count() == 0

    def test_reject_requires_reason(self, cashier_client, authenticated_client, sale, product):
        return_id = self._request_return(cashier_client, sale, product).json()["id"]

        response = authenticated_client.post(
            reverse("sales:return_reject", args=[return_id]), {"reason": "  "}, format="json"
        )
        assert response.status_code == 400

        response = authenticated_client.post(
            reverse("sales:return_reject", args=[return_id]),
            {"reason": "Opened"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    def test_approve_restocks_once(self, cashier_client, authenticated_client, sale, product):
        return_id = self._request_return(cashier_client, sale, product, quantity="3").json()["id"]
        url = reverse("sales:return_approve", args=[return_id])

        response = authenticated_client.post(url, {"restock": True}, format="json")
        assert response.status_code == 200

        response = authenticated_client.post(url, {"restock": True}, format="json")
        assert response.status_code == 400

        product.refresh_from_db()
        sale.refresh_from_db()
        assert product.quantity == Decimal("100")
        assert sale.status == Sale.RETURNED
        assert Customer.objects.get(phone="0100000000").total_purchases == Decimal("0.00")

    def test_partial_return_then_nothing_left(
        self, cashier_client, authenticated_client, sale, product
    ):
        return_id = self._request_return(cashier_client, sale, product, quantity="2").json()["id"]
        authenticated_client.post(reverse("sales:return_approve", args=[return_id]), {}, format="json")

        sale.refresh_from_db()
        assert sale.status == Sale.PARTIALLY_RETURNED

        response = self._request_return(cashier_client, sale, product, quantity="2")
        assert response.status_code == 400

    def test_cashier_cannot_approve(self, cashier_client, sale, product):
        return_id = self._request_return(cashier_client, sale, product).json()["id"]
        response = cashier_client.post(
            reverse("sales:return_approve", args=[return_id]), {}, format="json"
        )
        assert response.status_code == 403

    def test_same_product_on_two_lines(self, cashier_client, authenticated_client, product):
        response = _checkout(
            cashier_client,
            [
                {"product_id": str(product.id), "quantity": "2"},
                {"product_id": str(product.id), "quantity": "3"},
            ],
        )
        sale = Sale.objects.get(id=response.json()["id"])

        return_id = self._request_return(cashier_client, sale, product, quantity="3").json()["id"]
        authenticated_client.post(reverse("sales:return_approve", args=[return_id]), {}, format="json")
        sale.refresh_from_db()
        assert sale.status == Sale.PARTIALLY_RETURNED

        return_id = self._request_return(cashier_client, sale, product, quantity="2").json()["id"]
        authenticated_client.post(reverse("sales:return_approve", args=[return_id]), {}, format="json")
        sale.refresh_from_db()
        assert sale.status == Sale.RETURNED

    def test_refund_price_is_capped_at_price_paid(
        self, cashier_client, authenticated_client, sale, product
    ):
        payload = {
            "order_type": "pos",
            "sale_id": str(sale.id),
            "reason": "Damaged packaging",
            "items": [{"product_id": str(product.id), "quantity": "1", "price": "9999.00"}],
        }
        response = cashier_client.post(reverse("sales:return_create"), payload, format="json")
        assert response.status_code == 400
        assert ReturnOrder.objects.count() == 0

        payload["items"][0]["price"] = "20.00"
        response = cashier_client.post(reverse("sales:return_create"), payload, format="json")
        assert response.status_code == 201
        assert response.json()["total"] == "20.00"

        authenticated_client.post(
            reverse("sales:return_approve", args=[response.json()["id"]]), {}, format="json"
        )
        assert Customer.objects.get(phone="0100000000").total_purchases == Decimal("130.00")

    def test_default_refund_uses_net_price(self, cashier_client, product):
        response = _checkout(
            cashier_client,
            [{"product_id": str(product.id), "quantity": "2", "discount": "10.00"}],
            discount="9.00",
        )
        assert response.json()["total"] == "81.00"
        sale = Sale.objects.get(id=response.json()["id"])

        response = self._request_return(cashier_client, sale, product, quantity="1")

        assert response.status_code == 201
        assert response.json()["items"][0]["price"] == "40.50"
        assert response.json()["total"] == "40.50"


@pytest.mark.django_db
class TestCancelSale:
    def test_cancel_restocks_and_reverses_purchases(self, authenticated_client, sale, product):
        response = authenticated_client.post(
            reverse("sales:sale_cancel", args=[sale.id]), {"reason": "Entered twice"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["status"] == Sale.CANCELLED
        assert response.json()["cancellation_reason"] == "Entered twice"
        product.refresh_from_db()
        assert product.quantity == Decimal("100")
        assert Customer.objects.get(phone="0100000000").total_purchases == Decimal("0.00")

        response = authenticated_client.post(
            reverse("sales:sale_cancel", args=[sale.id]), {}, format="json"
        )
        assert response.status_code == 400

    def test_sale_with_pending_return_cannot_be_cancelled(
        self, cashier_client, authenticated_client, sale, product
    ):
        cashier_client.post(
            reverse("sales:return_create"),
            {
                "order_type": "pos",
                "sale_id": str(sale.id),
                "reason": "Wrong size",
                "items": [{"product_id": str(product.id), "quantity": "1"}],
            },
            format="json",
        )

        response = authenticated_client.post(
            reverse("sales:sale_cancel", args=[sale.id]), {}, format="json"
        )

        assert response.status_code == 400
        sale.refresh_from_db()
        assert sale.status == Sale.COMPLETED

    def test_cancelled_sale_cannot_be_returned(
        self, cashier_client, authenticated_client, sale, product
    ):
        authenticated_client.post(reverse("sales:sale_cancel", args=[sale.id]), {}, format="json")

        response = cashier_client.post(
            reverse("sales:return_create"),
            {
                "order_type": "pos",
                "sale_id": str(sale.id),
                "reason": "Changed mind",
                "items": [{"product_id": str(product.id), "quantity": "1"}],
            },
            format="json",
        )
        assert response.status_code == 400

    def test_cashier_cannot_cancel(self, cashier_client, sale):
        response = cashier_client.post(reverse("sales:sale_cancel", args=[sale.id]), {}, format="json")
        assert response.status_code == 403
