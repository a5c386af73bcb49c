"""
Serializers for branches, store settings, employees and shifts.
"""

from django.contrib.auth.password_validation import validate_password

from rest_framework import serializers

from .models import Branch, Shift, StoreSettings, User


class BranchSerializer(serializers.ModelSerializer):
    """Serializer for branch CRUD."""

    is_main = serializers.BooleanField(read_only=True)

    class Meta:
        model = Branch
        fields = [
            "id",
            "name",
            "code",
            "address",
            "phone",
            "opening_hours",
            "is_active",
            "is_main",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_code(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Branch code is required.")
        queryset = Branch.objects.filter(code=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("A branch with this code already exists.")
        return value


class StoreSettingsSerializer(serializers.ModelSerializer):
    logo_url = serializers.SerializerMethodField()

    class Meta:
        model = StoreSettings
        fields = [
            "store_name",
            "phone",
            "address",
            "logo_url",
            "currency",
            "multi_branch_enabled",
            "invoice_footer",
            "updated_at",
        ]
        read_only_fields = ["logo_url", "updated_at"]

    def get_logo_url(self, obj):
        if not obj.logo:
            return None
        request = self.context.get("request")
        return request.build_absolute_uri(obj.logo.url) if request else obj.logo.url


class LogoUploadSerializer(serializers.Serializer):
    logo = serializers.ImageField()


class EmployeeListSerializer(serializers.ModelSerializer):
    """Serializer for the employee list, with live shift status."""

    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)
    full_name = serializers.CharField(source="get_full_name", read_only=True)
    on_shift = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "full_name",
            "first_name",
            "last_name",
            "email",
            "phone",
            "role",
            "branch",
            "branch_name",
            "is_active",
            "on_shift",
            "last_login",
            "date_joined",
        ]

    def get_on_shift(self, obj):
        return obj.get_open_shift() is not None


class EmployeeCreateUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for creating and updating employees.

    The password is optional on update and always write-only.
    """

    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "password",
            "first_name",
            "last_name",
            "email",
            "phone",
            "role",
            "branch",
            "is_active",
        ]
        read_only_fields = ["id"]

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate_role(self, value):
        request = self.context.get("request")
        if (
            value == User.SUPER_ADMIN
            and request is not None
            and request.user.role != User.SUPER_ADMIN
            and not request.user.is_superuser
        ):
            raise serializers.ValidationError("Only a super administrator can grant that role.")
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": "Password is required."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class ShiftSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.get_full_name", read_only=True)
    employee_username = serializers.CharField(source="employee.username", read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = Shift
        fields = [
            "id",
            "employee",
            "employee_name",
            "employee_username",
            "branch",
            "branch_name",
            "start_time",
            "end_time",
            "total_hours",
            "is_open",
            "notes",
        ]
        read_only_fields = fields


class ShiftActionSerializer(serializers.Serializer):
    """
    Input for start/end shift actions.

    ``employee_id`` lets an administrator act for another employee.
    """

    employee_id = serializers.UUIDField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_employee_id(self, value):
        if not User.objects.filter(id=value).exists():
            raise serializers.ValidationError("Employee not found.")
        return value


class SelectBranchSerializer(serializers.Serializer):
    branch_id = serializers.UUIDField()

    def validate_branch_id(self, value):
        try:
            branch = Branch.objects.get(id=value)
        except Branch.DoesNotExist:
            raise serializers.ValidationError("Branch not found.")
        if not branch.is_active:
            raise serializers.ValidationError("Branch is inactive.")
        return value
