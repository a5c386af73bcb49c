"""
Tests for the product catalog, barcode lookup, stock, batches, the
spreadsheet import and inter-branch transfers.
"""

import io
from datetime import timedelta
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone

import openpyxl
import pytest

from apps.inventory import barcode_utils, services
from apps.inventory.import_service import QuantityImportService
from apps.inventory.models import (
    Category,
    Company,
    DamagedProduct,
    InventoryTransfer,
    Product,
    ProductBatch,
)


def _workbook(rows, header=("Name", "Barcode", "Category", "Price", "Quantity")):
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.append(list(header))
    for row in rows:
        worksheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer


@pytest.mark.django_db
class TestProductCRUD:
    def test_create_stores_values_exactly(self, authenticated_client, branch):
        response = authenticated_client.post(
            reverse("inventory:product_create"),
            {
                "name": "Cheddar",
                "barcode": "6221000000024",
                "price": "12.75",
                "purchase_price": "9.10",
                "quantity": "3.250",
            },
            format="json",
        )

        assert response.status_code == 201
        product = Product.objects.get(name="Cheddar")
        assert product.price == Decimal("12.75")
        assert product.purchase_price == Decimal("9.10")
        assert product.quantity == Decimal("3.250")
        assert product.branch == branch

    def test_duplicate_barcode_is_rejected(self, authenticated_client, product):
        response = authenticated_client.post(
            reverse("inventory:product_create"),
            {
                "name": "Copy",
                "barcode": product.barcode,
                "price": "1.00",
                "purchase_price": "1.00",
            },
            format="json",
        )
        assert response.status_code == 400
        assert "barcode" in response.json()

    def test_cashier_cannot_create_products(self, cashier_client):
        response = cashier_client.post(
            reverse("inventory:product_create"),
            {"name": "X", "price": "1.00", "purchase_price": "1.00"},
            format="json",
        )
        assert response.status_code == 403

    def test_offer_price_applies_when_on_offer(self, make_product):
        product = make_product(is_offer=True, offer_price=Decimal("45.00"))
        assert product.unit_price == Decimal("45.00")
        assert product.unit_discount == Decimal("5.00")

    def test_low_stock_list(self, authenticated_client, make_product):
        make_product(name="Plenty", quantity="100", min_quantity=Decimal("5"))
        make_product(name="Scarce", quantity="2", min_quantity=Decimal("5"))

        response = authenticated_client.get(reverse("inventory:low_stock"))

        assert response.status_code == 200
        assert [row["name"] for row in response.json()["results"]] == ["Scarce"]


@pytest.mark.django_db
class TestBarcodeLookup:
    def test_normal_barcode(self, product):
        match = services.lookup_barcode(product.barcode)
        assert match["product"] == product
        assert match["kind"] == services.MATCH_NORMAL
        assert match["quantity"] == Decimal("1")

    def test_bulk_barcode_prices_the_pack(self, make_product):
        product = make_product(
            name="Water 600ml",
            price="5.00",
            purchase_price="3.00",
            barcode="6221000000031",
            bulk_enabled=True,
            bulk_quantity=Decimal("12"),
            bulk_price=Decimal("54.00"),
            bulk_barcode="6221000000048",
        )

        match = services.lookup_barcode("6221000000048")

        assert match["product"] == product
        assert match["kind"] == services.MATCH_BULK
        assert match["quantity"] == Decimal("12")
        assert match["line_total"] == Decimal("54.00")
        assert match["discount"] == Decimal("6.00")

    def test_scale_barcode_carries_weight(self, make_product):
        make_product(
            name="Feta",
            price="120.00",
            purchase_price="90.00",
            barcode="2000123",
            barcode_type=Product.SCALE,
        )

        match = services.lookup_barcode("2000123012505")

        assert match["kind"] == services.MATCH_SCALE
        assert match["quantity"] == Decimal("1.25")
        assert match["line_total"] == Decimal("150.00")

    def test_unknown_barcode_returns_404(self, authenticated_client, product):
        response = authenticated_client.get(
            reverse("inventory:barcode_lookup"), {"barcode": "0000000"}
        )
        assert response.status_code == 404

    def test_missing_barcode_returns_400(self, authenticated_client):
        response = authenticated_client.get(reverse("inventory:barcode_lookup"))
        assert response.status_code == 400


@pytest.mark.django_db
class TestProductGroups:
    def test_products_by_category_subcategory_and_company(
        self, authenticated_client, make_product
    ):
        dairy = Category.objects.create(name="Dairy")
        cheese = Category.objects.create(name="Cheese", parent=dairy)
        juhayna = Company.objects.create(name="Juhayna")
        feta = make_product(name="Feta", subcategory=cheese, company=juhayna)
        milk = make_product(name="Milk", category=dairy)
        make_product(name="Rice")
        make_product(name="Old milk", category=dairy, is_active=False)

        def names(route, group):
            response = authenticated_client.get(reverse(route, args=[group.id]))
            assert response.status_code == 200
            return {row["name"] for row in response.json()["results"]}

        assert names("inventory:products_by_category", dairy) == {feta.name, milk.name}
        assert names("inventory:products_by_subcategory", cheese) == {feta.name}
        assert names("inventory:products_by_company", juhayna) == {feta.name}

    def test_other_branch_products_are_hidden(
        self, authenticated_client, multi_branch, make_product, other_branch
    ):
        dairy = Category.objects.create(name="Dairy")
        make_product(name="Milk", category=dairy)
        make_product(name="Nasr milk", category=dairy, branch=other_branch)

        response = authenticated_client.get(
            reverse("inventory:products_by_category", args=[dairy.id])
        )

        assert [row["name"] for row in response.json()["results"]] == ["Milk"]


@pytest.mark.django_db
class TestBarcodeImages:
    def test_product_barcode_png(self, authenticated_client, product):
        response = authenticated_client.get(reverse("inventory:product_barcode", args=[product.id]))

        assert response.status_code == 200
        assert response["Content-Type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_unencodable_barcode_renders_error_image(self, authenticated_client, make_product):
        product = make_product(barcode="NOT-A-NUMBER")

        response = authenticated_client.get(
            reverse("inventory:product_barcode", args=[product.id]), {"format": "ean13"}
        )

        assert response.status_code == 200
        assert response.content.startswith(b"\x89PNG")

    def test_product_without_barcode(self, authenticated_client, make_product):
        product = make_product(barcode=None)
        response = authenticated_client.get(reverse("inventory:product_barcode", args=[product.id]))
        assert response.status_code == 400

    def test_product_label_png(self, authenticated_client, make_product):
        product = make_product(
            barcode="6221000000024", is_offer=True, offer_price=Decimal("45.00")
        )

        response = authenticated_client.get(reverse("inventory:product_label", args=[product.id]))

        assert response.status_code == 200
        assert response["Content-Type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_label_falls_back_to_error_image(self, monkeypatch):
        def broken(*args, **kwargs):
            raise OSError("writer unavailable")

        monkeypatch.setattr(barcode_utils, "generate_barcode_image", broken)

        image = barcode_utils.generate_product_label(
            name="Feta", price="120.00", barcode_data="2000123", currency="EGP"
        )
        assert image.startswith(b"\x89PNG")


@pytest.mark.django_db
class TestStock:
    def test_deduct_more_than_stock_is_refused(self, authenticated_client, product):
        response = authenticated_client.post(
            reverse("inventory:stock_adjustment", args=[product.id]),
            {"adjustment_type": "deduct", "quantity": "1000"},
            format="json",
        )

        assert response.status_code == 400
        product.refresh_from_db()
        assert product.quantity == Decimal("100")

    def test_set_quantity(self, authenticated_client, product):
        response = authenticated_client.post(
            reverse("inventory:stock_adjustment", args=[product.id]),
            {"adjustment_type": "set", "quantity": "7"},
            format="json",
        )

        assert response.status_code == 200
        product.refresh_from_db()
        assert product.quantity == Decimal("7")

    def test_variant_sharing_parent_stock_deducts_parent(self, make_product):
        parent = make_product(name="Cola", quantity="50")
        variant = make_product(
            name="Cola Zero", quantity="0", parent=parent, shares_parent_inventory=True
        )

        variant.deduct_quantity(Decimal("5"))

        parent.refresh_from_db()
        variant.refresh_from_db()
        assert parent.quantity == Decimal("45")
        assert variant.quantity == Decimal("0")
        assert variant.available_quantity == Decimal("45")


@pytest.mark.django_db
class TestQuantityImport:
    def test_unmatched_rows_fail_and_matched_rows_apply(self, make_product):
        first = make_product(name="A", barcode="1001", quantity="1")
        second = make_product(name="B", barcode="1002", quantity="1")
        rows = [
            ("A", "1001", "", "", 10),
            ("Missing", "9999", "", "", 5),
            ("B", "1002", "", "", 20),
            ("Missing too", "9998", "", "", 1),
        ]

        results = QuantityImportService().import_file(_workbook(rows))

        assert results["total"] == 4
        assert results["success"] == 2
        assert results["failed"] == 2
        assert results["progress"] == 100
        assert [error["barcode"] for error in results["errors"]] == ["9999", "9998"]
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.quantity == Decimal("10")
        assert second.quantity == Decimal("20")

    def test_add_mode_and_custom_columns(self, make_product):
        product = make_product(barcode="1001", quantity="5")
        workbook = _workbook([("1001", 3)], header=("Barcode", "Qty"))

        results = QuantityImportService(
            barcode_column=1, quantity_column=2, mode="add"
        ).import_file(workbook)

        assert results["success"] == 1
        product.refresh_from_db()
        assert product.quantity == Decimal("8")

    def test_import_endpoint(self, authenticated_client, make_product):
        make_product(barcode="1001", quantity="1")
        upload = SimpleUploadedFile(
            "stock.xlsx",
            _workbook([("A", "1001", "", "", 4)]).getvalue(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

        response = authenticated_client.post(
            reverse("inventory:import_quantities"), {"file": upload}, format="multipart"
        )

        assert response.status_code == 200
        assert response.json()["success"] == 1

    def test_unreadable_quantity_keeps_earlier_rows(self, authenticated_client, make_product):
        first = make_product(name="A", barcode="1001", quantity="1")
        second = make_product(name="B", barcode="1002", quantity="1")
        upload = SimpleUploadedFile(
            "stock.xlsx",
            _workbook([("A", "1001", "", "", 7), ("B", "1002", "", "", "NaN")]).getvalue(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

        response = authenticated_client.post(
            reverse("inventory:import_quantities"), {"file": upload}, format="multipart"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] == 1
        assert data["failed"] == 1
        assert data["errors"][0]["barcode"] == "1002"
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.quantity == Decimal("7")
        assert second.quantity == Decimal("1")

    @pytest.mark.parametrize("raw", ["Infinity", "-3", "ten"])
    def test_invalid_quantities_fail_the_row(self, make_product, raw):
        product = make_product(barcode="1001", quantity="2")

        results = QuantityImportService().import_file(_workbook([("A", "1001", "", "", raw)]))

        assert results["failed"] == 1
        product.refresh_from_db()
        assert product.quantity == Decimal("2")

    def test_rejects_non_excel_upload(self, authenticated_client):
        upload = SimpleUploadedFile("stock.csv", b"a,b\n", content_type="text/csv")
        response = authenticated_client.post(
            reverse("inventory:import_quantities"), {"file": upload}, format="multipart"
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestExpiredBatches:
    def test_mark_damaged_is_all_or_nothing(self, product, branch, admin_user):
        batch = ProductBatch.objects.create(
            product=product,
            branch=branch,
            batch_number="LOT-1",
            quantity=Decimal("10"),
            expiry_date=timezone.localdate() - timedelta(days=1),
        )

        damage = services.mark_batch_damaged(batch.id, user=admin_user)

        batch.refresh_from_db()
        product.refresh_from_db()
        assert batch.quantity == Decimal("0")
        assert product.quantity == Decimal("90")
        assert damage.cost == Decimal("400.00")
        assert DamagedProduct.objects.count() == 1

    def test_replace_requires_future_expiry(self, product, branch):
        batch = ProductBatch.objects.create(
            product=product,
            branch=branch,
            batch_number="LOT-1",
            quantity=Decimal("10"),
            expiry_date=timezone.localdate(),
        )
        with pytest.raises(ValueError):
            services.replace_batch(batch.id, "LOT-2", timezone.localdate())


@pytest.mark.django_db
class TestInventoryTransfers:
    def test_transfer_moves_stock_between_branches(
        self, authenticated_client, product, branch, other_branch
    ):
        response = authenticated_client.post(
            reverse("inventory:transfer_create"),
            {
                "from_branch_id": str(branch.id),
                "to_branch_id": str(other_branch.id),
                "items": [{"product_id": str(product.id), "quantity": "30"}],
            },
            format="json",
        )
        assert response.status_code == 201
        transfer = InventoryTransfer.objects.get()

        response = authenticated_client.post(
            reverse("inventory:transfer_complete", args=[transfer.id]), {}, format="json"
        )
        assert response.status_code == 400

        authenticated_client.post(
            reverse("inventory:transfer_approve", args=[transfer.id]), {}, format="json"
        )
        response = authenticated_client.post(
            reverse("inventory:transfer_complete", args=[transfer.id]), {}, format="json"
        )
        assert response.status_code == 200

        product.refresh_from_db()
        destination = Product.objects.get(branch=other_branch, name=product.name)
        assert product.quantity == Decimal("70")
        assert destination.quantity == Decimal("30")
