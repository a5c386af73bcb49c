"""
Serializers for delivery locations, types and pricing.
"""

from django.core.exceptions import ValidationError as DjangoValidationError

from rest_framework import serializers

from .models import DeliveryLocation, DeliveryType, DeliveryTypePrice


class DeliveryLocationSerializer(serializers.ModelSerializer):
    full_path = serializers.CharField(source="get_full_path", read_only=True)
    children_count = serializers.IntegerField(source="children.count", read_only=True)

    class Meta:
        model = DeliveryLocation
        fields = [
            "id",
            "name",
            "level",
            "parent",
            "full_path",
            "price",
            "estimated_time",
            "is_active",
            "children_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, data):
        # Run the model's hierarchy rules on the merged instance
        instance = DeliveryLocation(**data)
        if self.instance:
            for field in ("name", "level", "parent", "price", "estimated_time", "is_active"):
                if field not in data:
                    setattr(instance, field, getattr(self.instance, field))
        try:
            instance.clean()
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict)
        return data


class DeliveryTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryType
        fields = ["id", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class DeliveryTypePriceSerializer(serializers.ModelSerializer):
    delivery_type_name = serializers.CharField(source="delivery_type.name", read_only=True)
    location_name = serializers.CharField(source="location.name", read_only=True)

    class Meta:
        model = DeliveryTypePrice
        fields = [
            "id",
            "location",
            "location_name",
            "delivery_type",
            "delivery_type_name",
            "price",
            "estimated_time",
        ]
        read_only_fields = ["id", "location"]
        validators = []


class DeliveryQuoteRequestSerializer(serializers.Serializer):
    location_id = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryLocation.objects.all(), source="location"
    )
    delivery_type_id = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryType.objects.all(),
        source="delivery_type",
        required=False,
        allow_null=True,
    )


class DeliveryQuoteSerializer(serializers.Serializer):
    location = serializers.UUIDField(source="location.id")
    location_name = serializers.CharField(source="location.get_full_path")
    delivery_type = serializers.UUIDField(source="delivery_type.id", default=None)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    estimated_time = serializers.CharField(allow_blank=True)
