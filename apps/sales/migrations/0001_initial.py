# Initial schema: POS sales, sale items and return orders

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('crm', '0001_initial'),
        ('inventory', '0001_initial'),
        ('orders', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Sale',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the sale', primary_key=True, serialize=False)),
                ('invoice_number', models.CharField(help_text='Invoice number in the form YYMMDD-XXXX', max_length=20, unique=True)),
                ('date', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When the sale was made')),
                ('customer_name', models.CharField(blank=True, help_text='Customer name at time of sale', max_length=255)),
                ('customer_phone', models.CharField(blank=True, help_text='Customer phone at time of sale', max_length=20)),
                ('subtotal', models.DecimalField(decimal_places=2, help_text='Sum of line totals', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Invoice-level discount', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('total', models.DecimalField(decimal_places=2, help_text='Total amount (subtotal - discount)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('profit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Total less the purchase cost of the sold items', max_digits=12)),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('card', 'Card'), ('mixed', 'Mixed')], default='cash', help_text='How the sale was paid', max_length=10)),
                ('cash_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Amount paid in cash', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('card_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Amount paid by card', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('status', models.CharField(choices=[('completed', 'Completed'), ('returned', 'Returned'), ('partially_returned', 'Partially Returned'), ('cancelled', 'Cancelled')], default='completed', help_text='Current status of the sale', max_length=20)),
                ('notes', models.TextField(blank=True, help_text='Additional notes about the sale')),
                ('cancellation_reason', models.TextField(blank=True, help_text='Why the sale was voided')),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch where the sale was made', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='sales', to='core.branch')),
                ('cashier', models.ForeignKey(blank=True, help_text='Employee who processed the sale', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales_processed', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(blank=True, help_text='Customer who made the purchase (optional for walk-in sales)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales', to='crm.customer')),
            ],
            options={
                'verbose_name': 'Sale',
                'verbose_name_plural': 'Sales',
                'db_table': 'sales',
                'ordering': ['-date'],
                'indexes': [
                    models.Index(fields=['branch', '-date'], name='sale_branch_date_idx'),
                    models.Index(fields=['status'], name='sale_status_idx'),
                    models.Index(fields=['customer', '-date'], name='sale_cust_date_idx'),
                    models.Index(fields=['payment_method'], name='sale_payment_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SaleItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the sale item', primary_key=True, serialize=False)),
                ('product_name', models.CharField(help_text='Product name at time of sale', max_length=255)),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Quantity sold, or weight in kg for scale products', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('unit_price', models.DecimalField(decimal_places=2, help_text='Unit price at time of sale', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('purchase_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Unit purchase cost at time of sale', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Discount applied to this line', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('total', models.DecimalField(decimal_places=2, help_text='Line total (quantity * unit_price - discount)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('is_bulk', models.BooleanField(default=False, help_text='Whether sold as a bulk pack')),
                ('product', models.ForeignKey(help_text='Product that was sold', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sale_items', to='inventory.product')),
                ('sale', models.ForeignKey(help_text='Sale that this item belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='items', to='sales.sale')),
            ],
            options={
                'verbose_name': 'Sale Item',
                'verbose_name_plural': 'Sale Items',
                'db_table': 'sale_items',
                'ordering': ['sale', 'product_name'],
                'indexes': [models.Index(fields=['product'], name='saleitem_product_idx')],
            },
        ),
        migrations.CreateModel(
            name='ReturnOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the return', primary_key=True, serialize=False)),
                ('order_type', models.CharField(choices=[('pos', 'Point of Sale'), ('online', 'Online Order')], default='pos', help_text='Whether the return is against a POS sale or an online order', max_length=10)),
                ('customer_name', models.CharField(blank=True, max_length=255)),
                ('customer_phone', models.CharField(blank=True, max_length=20)),
                ('reason', models.TextField(help_text='Why the merchandise is returned')),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Value of the returned items', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('status', django_fsm.FSMField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', help_text='Current status of the return', max_length=50, protected=True)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.TextField(blank=True)),
                ('restocked', models.BooleanField(default=False, help_text='Whether approval put the items back in stock')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch of the originating sale or order', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='return_orders', to='core.branch')),
                ('online_order', models.ForeignKey(blank=True, help_text='Originating online order', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='returns', to='orders.onlineorder')),
                ('processed_by', models.ForeignKey(blank=True, help_text='User who approved or rejected the return', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='returns_processed', to=settings.AUTH_USER_MODEL)),
                ('requested_by', models.ForeignKey(help_text='User who created the return', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='return_requests', to=settings.AUTH_USER_MODEL)),
                ('sale', models.ForeignKey(blank=True, help_text='Originating POS sale', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='returns', to='sales.sale')),
            ],
            options={
                'verbose_name': 'Return Order',
                'verbose_name_plural': 'Return Orders',
                'db_table': 'return_orders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', '-created_at'], name='return_status_idx'),
                    models.Index(fields=['branch', '-created_at'], name='return_branch_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReturnOrderItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_name', models.CharField(max_length=255)),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Returned quantity', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('price', models.DecimalField(decimal_places=2, help_text='Unit price refunded', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('product', models.ForeignKey(help_text='Returned product', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='return_items', to='inventory.product')),
                ('return_order', models.ForeignKey(help_text='Return this line belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='items', to='sales.returnorder')),
            ],
            options={
                'verbose_name': 'Return Order Item',
                'verbose_name_plural': 'Return Order Items',
                'db_table': 'return_order_items',
            },
        ),
    ]
