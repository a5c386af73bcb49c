# Initial schema: delivery location tree, delivery types and per-location prices

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='DeliveryLocation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the location', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Location name', max_length=255)),
                ('level', models.CharField(choices=[('governorate', 'Governorate'), ('city', 'City'), ('area', 'Area'), ('neighborhood', 'Neighborhood')], help_text='Level of this node in the hierarchy', max_length=20)),
                ('price', models.DecimalField(blank=True, decimal_places=2, help_text='Default delivery price (neighborhoods only)', max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('estimated_time', models.CharField(blank=True, help_text='Estimated delivery time (neighborhoods only)', max_length=50)),
                ('is_active', models.BooleanField(default=True, help_text='Whether deliveries are offered here')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('parent', models.ForeignKey(blank=True, help_text='Parent location (empty for governorates)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='delivery.deliverylocation')),
            ],
            options={
                'verbose_name': 'Delivery Location',
                'verbose_name_plural': 'Delivery Locations',
                'db_table': 'delivery_locations',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['level', 'is_active'], name='location_level_active_idx'),
                    models.Index(fields=['parent'], name='location_parent_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DeliveryType',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the delivery type', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Delivery type name', max_length=100, unique=True)),
                ('description', models.TextField(blank=True, help_text='Description')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this type is offered')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Delivery Type',
                'verbose_name_plural': 'Delivery Types',
                'db_table': 'delivery_types',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='DeliveryTypePrice',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the price', primary_key=True, serialize=False)),
                ('price', models.DecimalField(decimal_places=2, help_text='Delivery price', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('estimated_time', models.CharField(blank=True, help_text='Estimated time', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('delivery_type', models.ForeignKey(help_text='Delivery type', on_delete=django.db.models.deletion.CASCADE, related_name='prices', to='delivery.deliverytype')),
                ('location', models.ForeignKey(help_text='Location this price applies to', on_delete=django.db.models.deletion.CASCADE, related_name='type_prices', to='delivery.deliverylocation')),
            ],
            options={
                'verbose_name': 'Delivery Type Price',
                'verbose_name_plural': 'Delivery Type Prices',
                'db_table': 'delivery_type_prices',
                'unique_together': {('location', 'delivery_type')},
            },
        ),
    ]
