# Initial schema: catalog, batches, damage records and inter-branch transfers

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
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the category', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Category name (e.g., Dairy, Cheese)', max_length=100)),
                ('image', models.ImageField(blank=True, help_text='Category image shown in the catalog', upload_to='categories/')),
                ('description', models.TextField(blank=True, help_text='Optional description of the category')),
                ('sort_order', models.PositiveIntegerField(default=0, help_text='Display order in the catalog')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this category is active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('parent', models.ForeignKey(blank=True, help_text='Main category this sub-category belongs to', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='subcategories', to='inventory.category')),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'db_table': 'inventory_categories',
                'ordering': ['sort_order', 'name'],
                'indexes': [models.Index(fields=['parent', 'is_active'], name='cat_parent_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the company', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Company name', max_length=255, unique=True)),
                ('logo', models.ImageField(blank=True, help_text='Company logo', upload_to='companies/')),
                ('description', models.TextField(blank=True, help_text='Company description')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this company is active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Company',
                'verbose_name_plural': 'Companies',
                'db_table': 'inventory_companies',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the product', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Product name', max_length=255)),
                ('barcode', models.CharField(blank=True, help_text='Product barcode (unique when present)', max_length=64, null=True, unique=True)),
                ('barcode_type', models.CharField(choices=[('normal', 'Normal'), ('scale', 'Scale (weighed)')], default='normal', help_text='Scale barcodes embed the weight of the item', max_length=10)),
                ('price', models.DecimalField(decimal_places=2, help_text='Selling price per unit (or per kg for scale products)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('purchase_price', models.DecimalField(decimal_places=2, help_text='Purchase price per unit', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('offer_price', models.DecimalField(blank=True, decimal_places=2, help_text='Offer price used while is_offer is set', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('is_offer', models.BooleanField(default=False, help_text='Whether the offer price applies')),
                ('bulk_enabled', models.BooleanField(default=False, help_text='Whether bulk pricing is enabled')),
                ('bulk_quantity', models.DecimalField(blank=True, decimal_places=3, help_text='Units contained in one bulk pack', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.000'))])),
                ('bulk_price', models.DecimalField(blank=True, decimal_places=2, help_text='Price of one bulk pack', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('bulk_barcode', models.CharField(blank=True, help_text='Barcode printed on the bulk pack', max_length=64, null=True, unique=True)),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Quantity on hand', max_digits=12)),
                ('min_quantity', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Low stock threshold', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.000'))])),
                ('shares_parent_inventory', models.BooleanField(default=False, help_text="Whether this variant sells from its parent's stock")),
                ('image', models.ImageField(blank=True, help_text='Product image', upload_to='products/')),
                ('description', models.TextField(blank=True, help_text='Product description')),
                ('shelf_location', models.CharField(blank=True, help_text='Shelf location code', max_length=50)),
                ('is_active', models.BooleanField(default=True, help_text='Whether the product is for sale')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch stocking this product (empty for the shared catalog)', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='products', to='core.branch')),
                ('category', models.ForeignKey(blank=True, help_text='Main category (derived from the sub-category when one is set)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='inventory.category')),
                ('company', models.ForeignKey(blank=True, help_text='Brand or manufacturer', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='inventory.company')),
                ('parent', models.ForeignKey(blank=True, help_text='Parent product of this variant', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='variants', to='inventory.product')),
                ('subcategory', models.ForeignKey(blank=True, help_text='Sub-category', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='subcategory_products', to='inventory.category')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'db_table': 'products',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['branch', 'is_active'], name='product_branch_active_idx'),
                    models.Index(fields=['category'], name='product_category_idx'),
                    models.Index(fields=['subcategory'], name='product_subcategory_idx'),
                    models.Index(fields=['company'], name='product_company_idx'),
                    models.Index(fields=['name'], name='product_name_idx'),
                    models.Index(fields=['quantity', 'min_quantity'], name='product_low_stock_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ProductBatch',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the batch', primary_key=True, serialize=False)),
                ('batch_number', models.CharField(help_text='Supplier batch/lot number', max_length=100)),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Remaining quantity in this batch', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.000'))])),
                ('expiry_date', models.DateField(help_text='Expiry date of this batch')),
                ('shelf_location', models.CharField(blank=True, help_text='Shelf location code', max_length=50)),
                ('notes', models.TextField(blank=True, help_text='Batch notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch holding this batch', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='product_batches', to='core.branch')),
                ('product', models.ForeignKey(help_text='Product in this batch', on_delete=django.db.models.deletion.CASCADE, related_name='batches', to='inventory.product')),
            ],
            options={
                'verbose_name': 'Product Batch',
                'verbose_name_plural': 'Product Batches',
                'db_table': 'product_batches',
                'ordering': ['expiry_date'],
                'indexes': [
                    models.Index(fields=['branch', 'expiry_date'], name='batch_branch_expiry_idx'),
                    models.Index(fields=['product', 'expiry_date'], name='batch_product_expiry_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DamagedProduct',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the record', primary_key=True, serialize=False)),
                ('batch_number', models.CharField(blank=True, help_text='Batch number', max_length=100)),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Damaged quantity', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('cost', models.DecimalField(decimal_places=2, help_text='Cost of the damaged stock (quantity x purchase price)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('damage_date', models.DateField(default=django.utils.timezone.localdate, help_text='Date of the damage')),
                ('notes', models.TextField(blank=True, help_text='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch where the damage was recorded', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='damaged_products', to='core.branch')),
                ('product', models.ForeignKey(help_text='Damaged product', on_delete=django.db.models.deletion.CASCADE, related_name='damage_records', to='inventory.product')),
                ('recorded_by', models.ForeignKey(blank=True, help_text='User who recorded the damage', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='damage_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Damaged Product',
                'verbose_name_plural': 'Damaged Products',
                'db_table': 'damaged_products',
                'ordering': ['-damage_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['damage_date'], name='damage_date_idx'),
                    models.Index(fields=['branch', 'damage_date'], name='damage_branch_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InventoryTransfer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the transfer', primary_key=True, serialize=False)),
                ('transfer_number', models.CharField(help_text='Transfer number (e.g., TRF-20240115-0001)', max_length=50, unique=True)),
                ('status', django_fsm.FSMField(choices=[('pending', 'Pending Approval'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', help_text='Current status of the transfer', max_length=50, protected=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, help_text='Transfer notes')),
                ('rejection_reason', models.TextField(blank=True, help_text='Reason for rejection')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('from_branch', models.ForeignKey(help_text='Source branch', on_delete=django.db.models.deletion.PROTECT, related_name='transfers_out', to='core.branch')),
                ('processed_by', models.ForeignKey(blank=True, help_text='User who last moved the transfer forward', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transfers_processed', to=settings.AUTH_USER_MODEL)),
                ('requested_by', models.ForeignKey(help_text='User who requested the transfer', on_delete=django.db.models.deletion.PROTECT, related_name='transfers_requested', to=settings.AUTH_USER_MODEL)),
                ('to_branch', models.ForeignKey(help_text='Destination branch', on_delete=django.db.models.deletion.PROTECT, related_name='transfers_in', to='core.branch')),
            ],
            options={
                'verbose_name': 'Inventory Transfer',
                'verbose_name_plural': 'Inventory Transfers',
                'db_table': 'inventory_transfers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', '-created_at'], name='transfer_status_created_idx'),
                    models.Index(fields=['from_branch'], name='transfer_from_branch_idx'),
                    models.Index(fields=['to_branch'], name='transfer_to_branch_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InventoryTransferItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the transfer item', primary_key=True, serialize=False)),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Quantity to transfer', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Purchase price per unit at time of transfer', max_digits=12)),
                ('product', models.ForeignKey(help_text='Product moved out of the source branch', on_delete=django.db.models.deletion.PROTECT, related_name='transfer_items', to='inventory.product')),
                ('transfer', models.ForeignKey(help_text='Transfer this item belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='items', to='inventory.inventorytransfer')),
            ],
            options={
                'verbose_name': 'Inventory Transfer Item',
                'verbose_name_plural': 'Inventory Transfer Items',
                'db_table': 'inventory_transfer_items',
            },
        ),
    ]
