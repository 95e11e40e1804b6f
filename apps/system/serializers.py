from decimal import Decimal

from rest_framework import serializers
from .models import SystemSettings


class SystemSettingsSerializer(serializers.ModelSerializer):
    """Read and partially update the application settings."""

    default_brokerage_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False
    )
    updated_by_name = serializers.SerializerMethodField()

    class Meta:
        model = SystemSettings
        fields = [
            'company_name',
            'contact_email',
            'default_currency',
            'date_format',
            'auto_logout_minutes',
            'enable_notifications',
            'default_brokerage_rate',
            'updated_at',
            'updated_by_name',
        ]
        read_only_fields = ['updated_at', 'updated_by_name']

    def get_updated_by_name(self, obj):
        return obj.updated_by.get_display_name() if obj.updated_by else None
