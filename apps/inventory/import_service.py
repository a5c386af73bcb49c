"""
Stock quantity import from Excel workbooks.

Each data row names a product by barcode and gives a quantity. Rows are
applied one by one, each in its own savepoint, so a bad row never undoes the
rows before it.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from django.db import DatabaseError, transaction

import openpyxl

from apps.core.branch_context import scope_to_branch

from .models import Product

logger = logging.getLogger(__name__)

MODE_SET = "set"
MODE_ADD = "add"
MODES = (MODE_SET, MODE_ADD)


class QuantityImportService:
    """
    Update product quantities from the first worksheet of an ``.xlsx`` file.

    Columns are 1-based; by default column 2 holds the barcode and column 5
    the quantity, and the first row is a header.
    """

    def __init__(
        self,
        barcode_column: int = 2,
        quantity_column: int = 5,
        mode: str = MODE_SET,
        has_header: bool = True,
        branch_id=None,
    ):
        if mode not in MODES:
            raise ValueError(f"Unsupported import mode: {mode}")
        if barcode_column < 1 or quantity_column < 1:
            raise ValueError("Column numbers start at 1.")
        self.barcode_column = barcode_column
        self.quantity_column = quantity_column
        self.mode = mode
        self.has_header = has_header
        self.branch_id = branch_id

    def import_file(self, file_obj) -> Dict:
        """
        Apply every row of the workbook.

        Returns:
            Dict with total, success, failed, progress (percent) and per-row errors
        """
        rows = self._parse_excel_file(file_obj)
        if not rows:
            raise ValueError("No valid rows found in the file.")

        results = {"total": len(rows), "success": 0, "failed": 0, "progress": 0, "errors": []}

        for done, (row_num, barcode_value, raw_quantity) in enumerate(rows, 1):
            try:
                with transaction.atomic():
                    self._apply_row(barcode_value, raw_quantity)
                results["success"] += 1
            except (ValueError, ArithmeticError, DatabaseError, Product.DoesNotExist) as e:
                logger.warning(f"Import row {row_num} ({barcode_value}) failed: {e}")
                results["failed"] += 1
                results["errors"].append({"row": row_num, "barcode": barcode_value, "error": str(e)})
            results["progress"] = round(done * 100 / len(rows))

        logger.info(
            f"Quantity import ({self.mode}) finished: "
            f"{results['success']}/{results['total']} rows applied"
        )
        return results

    def _parse_excel_file(self, file_obj) -> List[Tuple[int, str, object]]:
        """Read (row number, barcode, quantity) triples, skipping incomplete rows."""
        try:
            workbook = openpyxl.load_workbook(file_obj, read_only=True, data_only=True)
        except Exception as e:
            logger.error(f"Could not read import workbook: {e}", exc_info=True)
            raise ValueError("The file is not a valid Excel workbook.")

        worksheet = workbook.worksheets[0]
        min_row = 2 if self.has_header else 1

        rows = []
        for row_num, row in enumerate(worksheet.iter_rows(min_row=min_row, values_only=True), min_row):
            barcode_value = self._cell(row, self.barcode_column)
            quantity = self._cell(row, self.quantity_column)
            if barcode_value is None or str(barcode_value).strip() == "" or quantity is None:
                continue
            rows.append((row_num, self._barcode_text(barcode_value), quantity))

        workbook.close()
        return rows

    @staticmethod
    def _cell(row, column):
        return row[column - 1] if len(row) >= column else None

    @staticmethod
    def _barcode_text(value) -> str:
        # Excel stores long numeric barcodes as floats
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value).strip()

    @staticmethod
    def _parse_quantity(raw) -> Decimal:
        try:
            quantity = Decimal(str(raw).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid quantity: {raw}")
        if not quantity.is_finite():
            raise ValueError(f"Invalid quantity: {raw}")
        if quantity < 0:
            raise ValueError(f"Quantity cannot be negative: {raw}")
        return quantity

    def _find_product(self, barcode_value: str) -> Optional[Product]:
        queryset = scope_to_branch(Product.objects.all(), self.branch_id)
        product = queryset.select_for_update().filter(barcode=barcode_value).first()
        if product is None:
            raise Product.DoesNotExist(f"No product found with barcode: {barcode_value}")
        return product

    def _apply_row(self, barcode_value: str, raw_quantity):
        quantity = self._parse_quantity(raw_quantity)
        product = self._find_product(barcode_value)
        if self.mode == MODE_ADD:
            if quantity > 0:
                product.add_quantity(quantity)
        else:
            product.set_quantity(quantity)
