# Initial schema: branches, store settings, users and shifts

import uuid

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Branch',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the branch', primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Branch name', max_length=255, unique=True)),
                ('code', models.CharField(help_text="Short branch code (e.g., 'MAIN', 'NASR-CITY')", max_length=20, unique=True)),
                ('address', models.TextField(blank=True, help_text='Branch address')),
                ('phone', models.CharField(blank=True, help_text='Branch phone number', max_length=20)),
                ('opening_hours', models.JSONField(blank=True, default=dict, help_text="Branch opening hours (e.g., {'saturday': '9:00-23:00', ...})")),
                ('is_active', models.BooleanField(default=True, help_text='Whether the branch is active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Branch',
                'verbose_name_plural': 'Branches',
                'db_table': 'branches',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['is_active'], name='branch_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='StoreSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_name', models.CharField(default='My Store', help_text='Store name', max_length=255)),
                ('phone', models.CharField(blank=True, help_text='Store phone number', max_length=20)),
                ('address', models.TextField(blank=True, help_text='Store address printed on invoices')),
                ('logo', models.ImageField(blank=True, help_text='Store logo printed on invoices', upload_to='store/logos/')),
                ('currency', models.CharField(default='EGP', help_text='Display currency code', max_length=10)),
                ('multi_branch_enabled', models.BooleanField(default=False, help_text='When enabled, branch-scoped data is filtered by the active branch')),
                ('invoice_footer', models.TextField(blank=True, default='Thank you for shopping with us!', help_text='Footer text printed on invoices')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Store Settings',
                'verbose_name_plural': 'Store Settings',
                'db_table': 'store_settings',
            },
        ),
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the user', primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('super_admin', 'Super Administrator'), ('admin', 'Administrator'), ('cashier', 'Cashier'), ('employee', 'Employee'), ('delivery', 'Delivery')], default='employee', help_text="User's role in the store", max_length=20)),
                ('phone', models.CharField(blank=True, help_text="User's phone number", max_length=20)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch that this user is assigned to', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='core.branch')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'db_table': 'users',
                'ordering': ['username'],
                'indexes': [
                    models.Index(fields=['role'], name='user_role_idx'),
                    models.Index(fields=['branch'], name='user_branch_idx'),
                ],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Shift',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier for the shift', primary_key=True, serialize=False)),
                ('start_time', models.DateTimeField(default=django.utils.timezone.now, help_text='Shift start')),
                ('end_time', models.DateTimeField(blank=True, help_text='Shift end', null=True)),
                ('total_hours', models.DecimalField(blank=True, decimal_places=2, help_text='Hours worked, set when the shift ends', max_digits=6, null=True)),
                ('notes', models.TextField(blank=True, help_text='Shift notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('branch', models.ForeignKey(blank=True, help_text='Branch where the shift was worked', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shifts', to='core.branch')),
                ('employee', models.ForeignKey(help_text='Employee working this shift', on_delete=django.db.models.deletion.CASCADE, related_name='shifts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Shift',
                'verbose_name_plural': 'Shifts',
                'db_table': 'shifts',
                'ordering': ['-start_time'],
                'indexes': [
                    models.Index(fields=['employee', '-start_time'], name='shift_emp_start_idx'),
                    models.Index(fields=['branch', '-start_time'], name='shift_branch_start_idx'),
                ],
            },
        ),
    ]
