"""
Django admin configuration for core models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Branch, Shift, StoreSettings, User


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ["name", "code", "phone", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name", "code", "address"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(StoreSettings)
class StoreSettingsAdmin(admin.ModelAdmin):
    list_display = ["store_name", "currency", "multi_branch_enabled", "updated_at"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for User model."""

    list_display = ["username", "email", "first_name", "last_name", "role", "branch", "is_active"]
    list_filter = ["role", "is_active", "is_staff", "is_superuser", "branch"]
    search_fields = ["username", "email", "first_name", "last_name", "phone"]
    readonly_fields = ["date_joined", "last_login"]

    fieldsets = BaseUserAdmin.fieldsets + (("Store", {"fields": ("role", "branch", "phone")}),)
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Store", {"fields": ("role", "branch", "phone")}),
    )


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ["employee", "branch", "start_time", "end_time", "total_hours"]
    list_filter = ["branch", "start_time"]
    search_fields = ["employee__username", "employee__first_name", "employee__last_name"]
    date_hierarchy = "start_time"
