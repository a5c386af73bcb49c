"""
Online orders app configuration.
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.orders"
    verbose_name = "Online Orders"

    def ready(self):
        """Import signals when app is ready."""
        from . import signals  # noqa: F401
