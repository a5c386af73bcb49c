"""
Management command to initialise a fresh store.

Creates the MAIN branch, the store settings row and, optionally, the first
super administrator.

Usage:
    python manage.py setup_store --admin-username owner --admin-password '...'
"""

from django.core.management.base import BaseCommand, CommandError

from apps.core.models import StoreSettings, User
from apps.core.services import ensure_main_branch


class Command(BaseCommand):
    help = "Create the main branch, store settings and an optional super administrator"

    def add_arguments(self, parser):
        parser.add_argument("--store-name", default=None, help="Store name for invoices")
        parser.add_argument("--admin-username", default=None)
        parser.add_argument("--admin-password", default=None)

    def handle(self, *args, **options):
        branch = ensure_main_branch()
        self.stdout.write(self.style.SUCCESS(f"✓ Main branch: {branch}"))

        store = StoreSettings.load()
        if options["store_name"]:
            store.store_name = options["store_name"]
            store.save()
        self.stdout.write(self.style.SUCCESS(f"✓ Store settings: {store.store_name}"))

        username = options["admin_username"]
        if username:
            password = options["admin_password"]
            if not password:
                raise CommandError("--admin-password is required with --admin-username")
            if User.objects.filter(username=username).exists():
                self.stdout.write(self.style.WARNING(f"User {username} already exists"))
                return
            User.objects.create_superuser(
                username=username,
                password=password,
                email="",
                role=User.SUPER_ADMIN,
                branch=branch,
            )
            self.stdout.write(self.style.SUCCESS(f"✓ Created super administrator {username}"))
