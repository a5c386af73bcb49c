"""
Cash register and purchasing services.

Every function that moves money runs in one transaction and locks the rows
it reads, so two concurrent withdrawals cannot both spend the same balance.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, F, Sum

from apps.core.models import Branch
from apps.inventory.models import Product

from .models import CashTracking, CashTransaction, Purchase, PurchaseItem, RegisterType, Supplier

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS_LIMIT = 10


def current_balance(branch_id, register_type, lock=False):
    """
    Register balance: the latest transaction's ``balance_after``, else the
    latest counted closing balance, else zero.
    """
    transactions = CashTransaction.objects.filter(
        branch_id=branch_id, register_type=register_type
    ).order_by("-transaction_date")
    if lock:
        transactions = transactions.select_for_update()
    latest = transactions.first()
    if latest is not None:
        return latest.balance_after

    record = (
        CashTracking.objects.filter(branch_id=branch_id, register_type=register_type)
        .order_by("-date", "-created_at")
        .first()
    )
    if record is not None:
        return record.closing_balance
    return Decimal("0.00")


@transaction.atomic
def record_cash_transaction(
    amount, transaction_type, register_type=RegisterType.STORE, branch=None, notes="", user=None
):
    """
    Deposit into or withdraw from a register.

    Raises:
        ValueError: If the amount is not positive, the type is unknown, or a
            withdrawal exceeds the register balance
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise ValueError("Amount must be greater than zero.")
    if transaction_type not in (CashTransaction.DEPOSIT, CashTransaction.WITHDRAWAL):
        raise ValueError(f"Invalid transaction type: {transaction_type}")
    if register_type not in dict(RegisterType.CHOICES):
        raise ValueError(f"Invalid register type: {register_type}")

    branch_id = branch.pk if isinstance(branch, Branch) else branch
    if branch_id:
        # Serializes writers on the same branch
        Branch.objects.select_for_update().filter(pk=branch_id).first()

    balance = current_balance(branch_id, register_type, lock=True)
    if transaction_type == CashTransaction.DEPOSIT:
        balance_after = balance + amount
    else:
        if amount > balance:
            raise ValueError(f"Insufficient funds. Current balance: {balance}")
        balance_after = balance - amount

    cash_transaction = CashTransaction.objects.create(
        branch_id=branch_id,
        register_type=register_type,
        transaction_type=transaction_type,
        amount=amount,
        balance_after=balance_after,
        notes=notes,
        created_by=user,
    )
    logger.info(
        f"Cash {transaction_type} of {amount} on {register_type} register "
        f"(branch {branch_id}), balance {balance_after}"
    )
    return cash_transaction


@transaction.atomic
def transfer_between_registers(amount, from_register, to_register, branch=None, notes="", user=None):
    """
    Move cash from one register to another.

    Returns:
        Tuple of (withdrawal, deposit)
    """
    if from_register == to_register:
        raise ValueError("Cannot transfer to the same register.")
    label = notes or f"Transfer {from_register} -> {to_register}"
    withdrawal = record_cash_transaction(
        amount, CashTransaction.WITHDRAWAL, from_register, branch, label, user
    )
    deposit = record_cash_transaction(
        amount, CashTransaction.DEPOSIT, to_register, branch, label, user
    )
    return withdrawal, deposit


def cash_summary(branch_id=None, register_type=RegisterType.STORE, date_from=None, date_to=None):
    """
    Deposits, withdrawals and the current balance of a register, with its
    most recent transactions.
    """
    transactions = CashTransaction.objects.filter(register_type=register_type)
    if branch_id:
        transactions = transactions.filter(branch_id=branch_id)
    if date_from:
        transactions = transactions.filter(transaction_date__date__gte=date_from)
    if date_to:
        transactions = transactions.filter(transaction_date__date__lte=date_to)

    totals = {
        row["transaction_type"]: row
        for row in transactions.values("transaction_type").annotate(
            total=Sum("amount"), count=Count("id")
        )
    }
    deposits = totals.get(CashTransaction.DEPOSIT, {})
    withdrawals = totals.get(CashTransaction.WITHDRAWAL, {})
    total_deposits = deposits.get("total") or Decimal("0.00")
    total_withdrawals = withdrawals.get("total") or Decimal("0.00")

    return {
        "register_type": register_type,
        "current_balance": current_balance(branch_id, register_type),
        "total_deposits": total_deposits,
        "total_withdrawals": total_withdrawals,
        "net_change": total_deposits - total_withdrawals,
        "transaction_count": deposits.get("count", 0) + withdrawals.get("count", 0),
        "recent_transactions": list(
            transactions.select_related("created_by").order_by("-transaction_date")[
                :RECENT_TRANSACTIONS_LIMIT
            ]
        ),
    }


@transaction.atomic
def create_purchase(
    supplier,
    invoice_number,
    items,
    paid=Decimal("0.00"),
    branch=None,
    date=None,
    description="",
    invoice_file_url="",
    register_type=RegisterType.STORE,
    user=None,
):
    """
    Record a supplier invoice.

    Pays ``paid`` out of the register, adds every item to stock, and adds
    the unpaid remainder to the supplier's balance. Any failure rolls back
    all of it.

    Args:
        items: Iterable of dicts with ``product``, ``quantity`` and ``unit_cost``
        register_type: Register the payment comes from, or None to skip the
            cash withdrawal

    Raises:
        ValueError: If paid exceeds the total or the register cannot cover it
    """
    paid = Decimal(paid or 0)
    lines = list(items)
    if not lines:
        raise ValueError("A purchase needs at least one item.")

    total = sum(
        ((Decimal(line["unit_cost"]) * Decimal(line["quantity"])).quantize(Decimal("0.01"))
         for line in lines),
        Decimal("0.00"),
    )
    if paid > total:
        raise ValueError(f"Paid amount {paid} exceeds the purchase total {total}.")

    purchase = Purchase(
        supplier=supplier,
        branch=branch,
        invoice_number=invoice_number,
        total=total,
        paid=paid,
        description=description,
        invoice_file_url=invoice_file_url,
        created_by=user,
    )
    if date:
        purchase.date = date
    purchase.save()

    if paid > 0 and register_type:
        record_cash_transaction(
            paid,
            CashTransaction.WITHDRAWAL,
            register_type,
            branch,
            f"Purchase {invoice_number} from {supplier.name}",
            user,
        )

    for line in lines:
        product = Product.objects.select_for_update().get(pk=line["product"].pk)
        product.add_quantity(line["quantity"])
        PurchaseItem.objects.create(
            purchase=purchase,
            product=product,
            quantity=line["quantity"],
            unit_cost=line["unit_cost"],
        )

    remaining = total - paid
    if remaining:
        Supplier.objects.filter(pk=supplier.pk).update(balance=F("balance") + remaining)

    logger.info(
        f"Purchase {invoice_number} from {supplier.name} recorded: "
        f"total {total}, paid {paid}, {len(lines)} items"
    )
    return purchase


@transaction.atomic
def pay_supplier(supplier_id, amount, register_type=RegisterType.STORE, branch=None, user=None):
    """
    Pay down a supplier's balance from a register.

    Raises:
        Supplier.DoesNotExist: If the supplier does not exist
        ValueError: If the amount exceeds what is owed or the register balance
    """
    supplier = Supplier.objects.select_for_update().get(pk=supplier_id)
    amount = Decimal(amount)
    if amount <= 0:
        raise ValueError("Amount must be greater than zero.")
    if amount > supplier.balance:
        raise ValueError(f"Payment {amount} exceeds the amount owed ({supplier.balance}).")

    record_cash_transaction(
        amount,
        CashTransaction.WITHDRAWAL,
        register_type,
        branch,
        f"Payment to {supplier.name}",
        user,
    )
    supplier.balance -= amount
    supplier.save(update_fields=["balance", "updated_at"])
    logger.info(f"Paid {amount} to supplier {supplier.name}, owed {supplier.balance}")
    return supplier
