from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, UserStatus


MOBILE_REGEX = r'^\+?[0-9\s-]{10,15}$'


class UserSerializer(serializers.ModelSerializer):
    """User profile with effective status."""

    status = serializers.CharField(read_only=True)
    has_password = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'full_name',
            'email',
            'mobile',
            'address',
            'role',
            'status',
            'has_password',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields

    def get_has_password(self, obj):
        return obj.has_usable_password()


class CurrentUserSerializer(UserSerializer):
    """Current user plus the permission ids granted by their role."""

    permissions = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['permissions']
        read_only_fields = fields

    def get_permissions(self, obj):
        return sorted(obj.get_app_permissions())


class ProfileUpdateSerializer(serializers.Serializer):
    """Fields a user may change on their own profile."""

    full_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    mobile = serializers.RegexField(
        regex=MOBILE_REGEX,
        required=False,
        allow_blank=True,
        error_messages={'invalid': 'Enter a valid mobile number'},
    )
    address = serializers.CharField(required=False, allow_blank=True)


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for self-service registration."""

    username = serializers.CharField(min_length=3, max_length=150)
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    full_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    mobile = serializers.RegexField(
        regex=MOBILE_REGEX,
        required=False,
        allow_blank=True,
        default='',
        error_messages={'invalid': 'Enter a valid mobile number'},
    )
    address = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    username = serializers.CharField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(style={'input_type': 'password'})
    new_password = serializers.CharField(
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(style={'input_type': 'password'})

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs


# =============================================================================
# Availability checks
# =============================================================================

class UsernameCheckSerializer(serializers.Serializer):
    username = serializers.CharField(
        min_length=3,
        error_messages={'min_length': 'Username must be at least 3 characters'},
    )
    exclude = serializers.UUIDField(required=False, help_text='User id to ignore (when editing)')


class EmailCheckSerializer(serializers.Serializer):
    email = serializers.EmailField()
    exclude = serializers.UUIDField(required=False)


class MobileCheckSerializer(serializers.Serializer):
    mobile = serializers.RegexField(
        regex=MOBILE_REGEX,
        error_messages={'invalid': 'Enter a valid mobile number'},
    )
    exclude = serializers.UUIDField(required=False)


class AvailabilityResponseSerializer(serializers.Serializer):
    available = serializers.BooleanField()
    message = serializers.CharField()


# =============================================================================
# User administration
# =============================================================================

class UserFilterSerializer(serializers.Serializer):
    """Validate query parameters for the user listing."""

    role = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class UserCreateSerializer(serializers.Serializer):
    """Admin-side account creation. Password is optional."""

    username = serializers.CharField(min_length=3, max_length=150)
    full_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    mobile = serializers.RegexField(
        regex=MOBILE_REGEX,
        required=False,
        allow_blank=True,
        default='',
        error_messages={'invalid': 'Enter a valid mobile number'},
    )
    address = serializers.CharField(required=False, allow_blank=True, default='')
    role = serializers.CharField(max_length=50, default='user')
    status = serializers.ChoiceField(choices=UserStatus.choices, default=UserStatus.ACTIVE)
    password = serializers.CharField(
        required=False,
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )

    def validate_role(self, value):
        from apps.roles.services import role_exists

        if not role_exists(value):
            raise serializers.ValidationError(f"Unknown role: {value}")
        return value

    def to_service_kwargs(self):
        data = dict(self.validated_data)
        data['is_active'] = data.pop('status') == UserStatus.ACTIVE
        return data


class UserUpdateSerializer(ProfileUpdateSerializer):
    """Admin-side account update."""

    role = serializers.CharField(max_length=50, required=False)
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)

    validate_role = UserCreateSerializer.validate_role

    def to_service_kwargs(self):
        data = dict(self.validated_data)
        if 'status' in data:
            data['is_active'] = data.pop('status') == UserStatus.ACTIVE
        return data


# =============================================================================
# Password setup
# =============================================================================

class VerifyUserSerializer(serializers.Serializer):
    username = serializers.CharField()
    email = serializers.EmailField()
    mobile = serializers.CharField()


class VerifyUserResponseSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    has_password = serializers.BooleanField()


class SetupPasswordSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    password = serializers.CharField(
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(style={'input_type': 'password'})

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserPublicSerializer(serializers.ModelSerializer):
    """Minimal user info embedded in invoices, activities, etc."""

    class Meta:
        model = User
        fields = ['id', 'username', 'full_name']
        read_only_fields = fields
