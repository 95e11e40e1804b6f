from rest_framework import serializers
from .models import Role


class RoleSerializer(serializers.ModelSerializer):
    """Role with the number of users currently holding it."""

    user_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Role
        fields = [
            'id',
            'name',
            'description',
            'permissions',
            'user_count',
            'is_system',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class RoleInputSerializer(serializers.Serializer):
    """Validate role create/update payloads."""

    name = serializers.RegexField(
        regex=r'^[A-Za-z0-9 _-]{2,50}$',
        error_messages={'invalid': 'Role name must be 2-50 letters, digits, spaces, _ or -'},
    )
    description = serializers.CharField(required=False, allow_blank=True, default='')
    permissions = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        default=list,
    )


class PermissionEntrySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()


class PermissionCategorySerializer(serializers.Serializer):
    category = serializers.CharField()
    permissions = PermissionEntrySerializer(many=True)
