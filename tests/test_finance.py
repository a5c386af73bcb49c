"""
Tests for cash registers, expenses, suppliers and purchases.
"""

from decimal import Decimal

from django.urls import reverse

import pytest

from apps.finance import services
from apps.finance.models import CashTracking, CashTransaction, Purchase, RegisterType, Supplier


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(name="Delta Foods", phone="0223456789")


def _cash(client, amount, transaction_type, register_type="store"):
    return client.post(
        reverse("finance:cash_transaction_create"),
        {"amount": amount, "transaction_type": transaction_type, "register_type": register_type},
        format="json",
    )


@pytest.mark.django_db
class TestCashRegister:
    def test_deposit_then_withdraw_tracks_balance(self, authenticated_client, branch):
        assert _cash(authenticated_client, "500.00", "deposit").status_code == 201
        response = _cash(authenticated_client, "120.50", "withdrawal")

        assert response.status_code == 201
        assert response.json()["balance_after"] == "379.50"
        assert services.current_balance(branch.id, RegisterType.STORE) == Decimal("379.50")

    def test_overdraw_is_refused(self, authenticated_client, branch):
        _cash(authenticated_client, "100.00", "deposit")

        response = _cash(authenticated_client, "100.01", "withdrawal")

        assert response.status_code == 400
        assert "Insufficient funds" in response.json()["detail"]
        assert CashTransaction.objects.count() == 1

    def test_registers_are_separate(self, authenticated_client, branch):
        _cash(authenticated_client, "100.00", "deposit", register_type="online")
        response = _cash(authenticated_client, "10.00", "withdrawal", register_type="store")
        assert response.status_code == 400

    def test_balance_falls_back_to_counted_closing_balance(self, branch):
        CashTracking.objects.create(
            branch=branch,
            register_type=RegisterType.STORE,
            opening_balance=Decimal("200.00"),
            closing_balance=Decimal("250.00"),
        )
        assert services.current_balance(branch.id, RegisterType.STORE) == Decimal("250.00")

        withdrawal = services.record_cash_transaction(
            "50.00", CashTransaction.WITHDRAWAL, RegisterType.STORE, branch
        )
        assert withdrawal.balance_after == Decimal("200.00")

    def test_cash_record_difference(self, branch):
        record = CashTracking.objects.create(
            branch=branch,
            register_type=RegisterType.STORE,
            opening_balance=Decimal("200.00"),
            closing_balance=Decimal("180.00"),
        )
        assert record.difference == Decimal("-20.00")

    def test_transfer_between_registers(self, authenticated_client, branch):
        _cash(authenticated_client, "300.00", "deposit", register_type="delivery")

        response = authenticated_client.post(
            reverse("finance:cash_transfer"),
            {"amount": "120.00", "from_register": "delivery", "to_register": "store"},
            format="json",
        )

        assert response.status_code == 201
        assert services.current_balance(branch.id, RegisterType.DELIVERY) == Decimal("180.00")
        assert services.current_balance(branch.id, RegisterType.STORE) == Decimal("120.00")

    def test_summary(self, authenticated_client, branch):
        _cash(authenticated_client, "500.00", "deposit")
        _cash(authenticated_client, "200.00", "withdrawal")

        response = authenticated_client.get(reverse("finance:cash_summary"))

        assert response.status_code == 200
        data = response.json()
        assert data["current_balance"] == "300.00"
        assert data["total_deposits"] == "500.00"
        assert data["total_withdrawals"] == "200.00"
        assert data["net_change"] == "300.00"
        assert data["transaction_count"] == 2
        assert len(data["recent_transactions"]) == 2

    def test_cashier_has_no_access(self, cashier_client):
        assert _cash(cashier_client, "10.00", "deposit").status_code == 403


@pytest.mark.django_db
class TestPurchases:
    def test_purchase_adds_stock_and_supplier_balance(
        self, authenticated_client, branch, supplier, product
    ):
        services.record_cash_transaction("1000.00", CashTransaction.DEPOSIT, RegisterType.STORE, branch)

        response = authenticated_client.post(
            reverse("finance:purchase_create"),
            {
                "supplier": str(supplier.id),
                "invoice_number": "INV-1001",
                "paid": "300.00",
                "items": [
                    {"product_id": str(product.id), "quantity": "20", "unit_cost": "40.00"}
                ],
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["total"] == "800.00"
        product.refresh_from_db()
        supplier.refresh_from_db()
        assert product.quantity == Decimal("120")
        assert supplier.balance == Decimal("500.00")
        assert services.current_balance(branch.id, RegisterType.STORE) == Decimal("700.00")

    def test_paid_above_total_is_refused(self, authenticated_client, supplier, product):
        response = authenticated_client.post(
            reverse("finance:purchase_create"),
            {
                "supplier": str(supplier.id),
                "invoice_number": "INV-1002",
                "paid": "500.00",
                "register_type": None,
                "items": [{"product_id": str(product.id), "quantity": "1", "unit_cost": "40.00"}],
            },
            format="json",
        )
        assert response.status_code == 400
        assert Purchase.objects.count() == 0

    def test_failed_register_withdrawal_rolls_everything_back(self, branch, supplier, product):
        with pytest.raises(ValueError):
            services.create_purchase(
                supplier,
                "INV-1003",
                [{"product": product, "quantity": Decimal("5"), "unit_cost": Decimal("40.00")}],
                paid=Decimal("200.00"),
                branch=branch,
            )

        product.refresh_from_db()
        supplier.refresh_from_db()
        assert Purchase.objects.count() == 0
        assert product.quantity == Decimal("100")
        assert supplier.balance == Decimal("0.00")

    def test_unpaid_purchase_without_register(self, branch, supplier, product):
        purchase = services.create_purchase(
            supplier,
            "INV-1004",
            [{"product": product, "quantity": Decimal("2"), "unit_cost": Decimal("12.50")}],
            branch=branch,
            register_type=None,
        )

        supplier.refresh_from_db()
        assert purchase.total == Decimal("25.00")
        assert purchase.remaining == Decimal("25.00")
        assert supplier.balance == Decimal("25.00")


@pytest.mark.django_db
class TestSuppliers:
    def test_pay_supplier_reduces_balance_and_register(self, authenticated_client, branch, supplier):
        Supplier.objects.filter(pk=supplier.pk).update(balance=Decimal("400.00"))
        services.record_cash_transaction("1000.00", CashTransaction.DEPOSIT, RegisterType.STORE, branch)

        response = authenticated_client.post(
            reverse("finance:supplier_pay", args=[supplier.id]), {"amount": "150.00"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["balance"] == "250.00"
        assert services.current_balance(branch.id, RegisterType.STORE) == Decimal("850.00")

    def test_cannot_overpay(self, authenticated_client, supplier):
        response = authenticated_client.post(
            reverse("finance:supplier_pay", args=[supplier.id]), {"amount": "1.00"}, format="json"
        )
        assert response.status_code == 400

    def test_supplier_with_purchases_cannot_be_deleted(
        self, authenticated_client, branch, supplier, product
    ):
        services.create_purchase(
            supplier,
            "INV-1005",
            [{"product": product, "quantity": Decimal("1"), "unit_cost": Decimal("10.00")}],
            branch=branch,
            register_type=None,
        )
        response = authenticated_client.delete(reverse("finance:supplier_detail", args=[supplier.id]))
        assert response.status_code == 400
        assert Supplier.objects.filter(pk=supplier.pk).exists()


@pytest.mark.django_db
class TestExpenses:
    def test_create_expense(self, authenticated_client, branch):
        response = authenticated_client.post(
            reverse("finance:expense_list"),
            {"expense_type": "rent", "amount": "1500.00", "description": "October rent"},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["amount"] == "1500.00"
