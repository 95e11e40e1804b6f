from rest_framework import serializers
from .models import Activity, ActivityType


class ActivitySerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    party_name = serializers.CharField(source='party.name', read_only=True, default=None)
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)

    class Meta:
        model = Activity
        fields = [
            'id',
            'type',
            'title',
            'description',
            'timestamp',
            'user',
            'user_name',
            'party',
            'party_name',
            'invoice',
            'invoice_number',
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.get_display_name() if obj.user else None


class ActivityFilterSerializer(serializers.Serializer):
    """Validate activity feed query parameters."""

    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
    type = serializers.ChoiceField(choices=ActivityType.choices, required=False)
    party = serializers.UUIDField(required=False)
    invoice = serializers.UUIDField(required=False)
