"""
Serializers for customers.
"""

from rest_framework import serializers

from apps.delivery.models import DeliveryLocation

from .models import Customer

EMPTY_PLACEHOLDER = "—"


class CustomerListSerializer(serializers.ModelSerializer):
    """Serializer for the customer list; missing contact details show a placeholder."""

    email = serializers.SerializerMethodField()
    location = serializers.CharField(source="get_location_path", read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "location",
            "is_verified",
            "total_purchases",
            "last_purchase_at",
            "created_at",
        ]

    def get_email(self, obj):
        return obj.email or EMPTY_PLACEHOLDER


class CustomerSerializer(serializers.ModelSerializer):
    """Serializer for creating, updating and showing one customer."""

    location = serializers.CharField(source="get_location_path", read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "address",
            "notes",
            "is_verified",
            "governorate",
            "city",
            "area",
            "neighborhood",
            "location",
            "total_purchases",
            "last_purchase_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "total_purchases",
            "last_purchase_at",
            "created_at",
            "updated_at",
        ]
        # Duplicate phones are handled by add_customer(), which returns the match
        extra_kwargs = {"phone": {"validators": []}}

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Customer name is required.")
        return value

    def validate_phone(self, value):
        value = (value or "").strip() or None
        if value and self.instance:
            if Customer.objects.filter(phone=value).exclude(pk=self.instance.pk).exists():
                raise serializers.ValidationError("Another customer already uses this phone.")
        return value

    def validate(self, data):
        expected = {
            "governorate": DeliveryLocation.GOVERNORATE,
            "city": DeliveryLocation.CITY,
            "area": DeliveryLocation.AREA,
            "neighborhood": DeliveryLocation.NEIGHBORHOOD,
        }
        for field, level in expected.items():
            location = data.get(field)
            if location is not None and location.level != level:
                raise serializers.ValidationError({field: f"Choose a {level}."})
        return data


class FindOrCreateCustomerSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    governorate = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryLocation.objects.filter(level=DeliveryLocation.GOVERNORATE),
        required=False,
        allow_null=True,
    )
    city = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryLocation.objects.filter(level=DeliveryLocation.CITY),
        required=False,
        allow_null=True,
    )
    area = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryLocation.objects.filter(level=DeliveryLocation.AREA),
        required=False,
        allow_null=True,
    )
    neighborhood = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryLocation.objects.filter(level=DeliveryLocation.NEIGHBORHOOD),
        required=False,
        allow_null=True,
    )

    def validate(self, data):
        if not data.get("name", "").strip() and not (data.get("phone") or "").strip():
            raise serializers.ValidationError("A name or phone number is required.")
        return data
