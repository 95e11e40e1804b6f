from rest_framework import serializers
from .models import Party, phone_validator


# =============================================================================
# Input Serializers
# =============================================================================

class PartyFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for party listing.

    Query Parameters:
        search (str): Match against name, contact person, phone or email
    """

    search = serializers.CharField(max_length=200, required=False, allow_blank=True)


class PartyInputSerializer(serializers.Serializer):
    """Validate create/update payloads for parties."""

    name = serializers.CharField(min_length=2, max_length=200)
    contact_person = serializers.CharField(max_length=200, required=False, allow_blank=True)
    phone = serializers.CharField(
        max_length=20,
        required=False,
        allow_blank=True,
        validators=[phone_validator]
    )
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    gstin = serializers.CharField(max_length=15, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return value

    def validate_gstin(self, value):
        return value.strip().upper()


class PartyNameCheckSerializer(serializers.Serializer):
    """
    Validate query parameters for the name availability check.

    Query Parameters:
        name (str): Candidate name (min 2 characters)
        exclude (UUID): Party being edited, ignored in the check
    """

    name = serializers.CharField(min_length=2, max_length=200)
    exclude = serializers.UUIDField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class PartySummarySerializer(serializers.ModelSerializer):
    """Minimal party info for nested serialization."""

    class Meta:
        model = Party
        fields = ['id', 'name', 'contact_person', 'phone']
        read_only_fields = fields


class PartySerializer(serializers.ModelSerializer):
    """Full party with balance annotations (when the queryset provides them)."""

    outstanding = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        read_only=True,
        default=None
    )
    last_transaction_date = serializers.DateField(read_only=True, default=None)

    class Meta:
        model = Party
        fields = [
            'id',
            'name',
            'contact_person',
            'phone',
            'email',
            'address',
            'gstin',
            'notes',
            'outstanding',
            'last_transaction_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SimilarPartySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    similarity = serializers.IntegerField()


class PartyNameCheckResponseSerializer(serializers.Serializer):
    available = serializers.BooleanField()
    message = serializers.CharField()
    similar_names = SimilarPartySerializer(many=True)


class HasInvoicesResponseSerializer(serializers.Serializer):
    has_invoices = serializers.BooleanField()
    invoice_count = serializers.IntegerField()
