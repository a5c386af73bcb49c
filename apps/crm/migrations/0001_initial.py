# Initial schema: customers

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('delivery', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the customer', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text="Customer's name", max_length=255)),
                ('phone', models.CharField(blank=True, help_text="Customer's phone number (unique when present)", max_length=20, null=True, unique=True)),
                ('email', models.EmailField(blank=True, help_text="Customer's email address", max_length=254, null=True)),
                ('address', models.TextField(blank=True, help_text='Street address')),
                ('notes', models.TextField(blank=True, help_text='Internal notes about the customer')),
                ('is_verified', models.BooleanField(default=False, help_text="Whether the customer's phone/location has been verified")),
                ('total_purchases', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Total amount spent across sales and delivered orders', max_digits=14)),
                ('last_purchase_at', models.DateTimeField(blank=True, help_text='When the customer made their last purchase', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('area', models.ForeignKey(blank=True, help_text='Area', limit_choices_to={'level': 'area'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='delivery.deliverylocation')),
                ('city', models.ForeignKey(blank=True, help_text='City', limit_choices_to={'level': 'city'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='delivery.deliverylocation')),
                ('governorate', models.ForeignKey(blank=True, help_text='Governorate', limit_choices_to={'level': 'governorate'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='delivery.deliverylocation')),
                ('neighborhood', models.ForeignKey(blank=True, help_text='Neighborhood used for delivery pricing', limit_choices_to={'level': 'neighborhood'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customers', to='delivery.deliverylocation')),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'db_table': 'customers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['name'], name='customer_name_idx'),
                    models.Index(fields=['-total_purchases'], name='customer_purchases_idx'),
                ],
            },
        ),
    ]
