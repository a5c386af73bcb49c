# Initial schema: online orders and their items

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('crm', '0001_initial'),
        ('delivery', '0001_initial'),
        ('inventory', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='OnlineOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the order', primary_key=True, serialize=False)),
                ('order_number', models.CharField(editable=False, help_text="Order number (e.g., 'ORD-20240101-0001')", max_length=50, unique=True)),
                ('customer_name', models.CharField(help_text='Customer name at order time', max_length=255)),
                ('customer_phone', models.CharField(help_text='Customer phone at order time', max_length=20)),
                ('shipping_address', models.TextField(blank=True, help_text='Street address for delivery')),
                ('shipping_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Delivery price quoted for the location and type', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Sum of item totals', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Subtotal plus shipping', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('payment_method', models.CharField(choices=[('cash_on_delivery', 'Cash on Delivery'), ('card', 'Card')], default='cash_on_delivery', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed'), ('refunded', 'Refunded')], default='pending', max_length=20)),
                ('status', django_fsm.FSMField(choices=[('pending', 'Pending'), ('processing', 'Processing'), ('ready', 'Ready for Delivery'), ('shipped', 'Shipped'), ('delivered', 'Delivered'), ('cancelled', 'Cancelled')], default='pending', help_text='Current status of the order', max_length=50, protected=True)),
                ('tracking_number', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('shipped_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch that fulfils the order', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='online_orders', to='core.branch')),
                ('customer', models.ForeignKey(blank=True, help_text='Customer who placed the order', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='online_orders', to='crm.customer')),
                ('delivery_employee', models.ForeignKey(blank=True, help_text='Employee delivering the order', limit_choices_to={'role': 'delivery'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='deliveries', to=settings.AUTH_USER_MODEL)),
                ('delivery_location', models.ForeignKey(help_text='Location the order is delivered to', on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='delivery.deliverylocation')),
                ('delivery_type', models.ForeignKey(blank=True, help_text='Delivery type chosen by the customer', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='delivery.deliverytype')),
            ],
            options={
                'verbose_name': 'Online Order',
                'verbose_name_plural': 'Online Orders',
                'db_table': 'online_orders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', '-created_at'], name='order_status_created_idx'),
                    models.Index(fields=['branch', '-created_at'], name='order_branch_created_idx'),
                    models.Index(fields=['payment_status'], name='order_payment_status_idx'),
                    models.Index(fields=['delivery_employee'], name='order_delivery_emp_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_name', models.CharField(max_length=255)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('purchase_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Unit purchase cost at order time', max_digits=12)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('order', models.ForeignKey(help_text='Order this line belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.onlineorder')),
                ('product', models.ForeignKey(help_text='Ordered product', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_items', to='inventory.product')),
            ],
            options={
                'verbose_name': 'Order Item',
                'verbose_name_plural': 'Order Items',
                'db_table': 'online_order_items',
            },
        ),
    ]
