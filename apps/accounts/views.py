import logging

from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import login as session_login, logout as session_logout
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.roles.permissions import requires
from .models import User, UserStatus
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    CurrentUserSerializer,
    ProfileUpdateSerializer,
    PasswordChangeSerializer,
    UsernameCheckSerializer,
    EmailCheckSerializer,
    MobileCheckSerializer,
    AvailabilityResponseSerializer,
    UserFilterSerializer,
    UserCreateSerializer,
    UserUpdateSerializer,
    VerifyUserSerializer,
    VerifyUserResponseSerializer,
    SetupPasswordSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    is_identifier_available,
    create_user_by_admin,
    update_user,
    delete_user,
    change_password,
    search_users,
    verify_user_for_setup,
    setup_password,
    AccountsServiceError,
    DuplicateUserError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    SelfDeletionError,
    PasswordAlreadySetError,
)

logger = logging.getLogger(__name__)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = CurrentUserSerializer()
    tokens = TokensResponseSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


def _issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


# =============================================================================
# Authentication
# =============================================================================

@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new account, start a session and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_user(**data)
    except AccountsServiceError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    session_login(request, user, backend='django.contrib.auth.backends.ModelBackend')

    return Response({
        'message': 'Registration successful',
        'user': CurrentUserSerializer(user).data,
        'tokens': _issue_tokens(user),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with username and password. Starts a session cookie and returns JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with username and password."""
    serializer = UserLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    session_login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    logger.info("User %s logged in", user.username)

    return Response({
        'message': 'Login successful',
        'user': CurrentUserSerializer(user).data,
        'tokens': _issue_tokens(user),
    })


@extend_schema(
    request=None,
    responses={200: MessageResponseSerializer},
    description="End the current session.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Logout and clear the session."""
    session_logout(request)
    return Response({'message': 'Logout successful'})


@extend_schema(
    responses={200: CurrentUserSerializer},
    description="Get the current authenticated user's profile and permissions.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(CurrentUserSerializer(request.user).data)


@extend_schema(
    request=ProfileUpdateSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's profile.",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = ProfileUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    try:
        user = update_user(user_id=request.user.id, **serializer.validated_data)
    except DuplicateUserError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(UserSerializer(user).data)


@extend_schema(
    request=PasswordChangeSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Change the current user's password.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_password(request):
    serializer = PasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        change_password(
            user=request.user,
            current_password=serializer.validated_data['current_password'],
            new_password=serializer.validated_data['new_password'],
        )
    except AccountsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    # Keep the session valid after the hash changes
    if request.session.session_key:
        from django.contrib.auth import update_session_auth_hash
        update_session_auth_hash(request, request.user)

    return Response({'message': 'Password updated'})


# =============================================================================
# Availability checks
# =============================================================================

def _availability_response(available, label):
    message = f'{label} is available' if available else f'{label} is already taken'
    return Response({'available': available, 'message': message})


@extend_schema(
    parameters=[
        OpenApiParameter('username', OpenApiTypes.STR, description='Username to check (min 3 chars)'),
        OpenApiParameter('exclude', OpenApiTypes.UUID, description='User id to ignore'),
    ],
    responses={200: AvailabilityResponseSerializer},
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def check_username(request):
    """Check whether a username is still free."""
    serializer = UsernameCheckSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    available = is_identifier_available(
        field='username',
        value=serializer.validated_data['username'],
        exclude_id=serializer.validated_data.get('exclude'),
    )
    return _availability_response(available, 'Username')


@extend_schema(
    parameters=[
        OpenApiParameter('email', OpenApiTypes.EMAIL, description='Email to check'),
        OpenApiParameter('exclude', OpenApiTypes.UUID, description='User id to ignore'),
    ],
    responses={200: AvailabilityResponseSerializer},
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def check_email(request):
    serializer = EmailCheckSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    available = is_identifier_available(
        field='email',
        value=serializer.validated_data['email'],
        exclude_id=serializer.validated_data.get('exclude'),
    )
    return _availability_response(available, 'Email')


@extend_schema(
    parameters=[
        OpenApiParameter('mobile', OpenApiTypes.STR, description='Mobile number to check'),
        OpenApiParameter('exclude', OpenApiTypes.UUID, description='User id to ignore'),
    ],
    responses={200: AvailabilityResponseSerializer},
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def check_mobile(request):
    serializer = MobileCheckSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    available = is_identifier_available(
        field='mobile',
        value=serializer.validated_data['mobile'],
        exclude_id=serializer.validated_data.get('exclude'),
    )
    return _availability_response(available, 'Mobile number')


# =============================================================================
# User administration
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('role', OpenApiTypes.STR, description='Filter by role name'),
        OpenApiParameter('status', OpenApiTypes.STR, description="'active' or 'inactive'"),
        OpenApiParameter('search', OpenApiTypes.STR, description='Match username, name, email or mobile'),
    ],
    responses={200: UserSerializer(many=True)},
    description="List user accounts.",
    tags=['users'],
)
@extend_schema(
    methods=['POST'],
    request=UserCreateSerializer,
    responses={201: UserSerializer, 400: ErrorResponseSerializer},
    description="Create a user account. Without a password the owner must complete password setup.",
    tags=['users'],
)
@api_view(['GET', 'POST'])
@permission_classes([requires(GET='users.view', POST='users.create')])
def user_list(request):
    """List or create user accounts."""
    if request.method == 'POST':
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = create_user_by_admin(**serializer.to_service_kwargs())
        except DuplicateUserError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    filter_serializer = UserFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    is_active = None
    if 'status' in params:
        is_active = params['status'] == UserStatus.ACTIVE

    users = search_users(
        role=params.get('role'),
        is_active=is_active,
        search=params.get('search'),
    )
    return Response(UserSerializer(users, many=True).data)


@extend_schema(
    methods=['PATCH'],
    request=UserUpdateSerializer,
    responses={200: UserSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=['users'],
)
@extend_schema(methods=['GET'], responses={200: UserSerializer}, tags=['users'])
@extend_schema(methods=['DELETE'], responses={204: None, 400: ErrorResponseSerializer}, tags=['users'])
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([requires(GET='users.view', PATCH='users.edit', DELETE='users.delete')])
def user_detail(request, pk):
    """Retrieve, update or delete a single account."""
    if request.method == 'GET':
        user = get_object_or_404(User, pk=pk)
        return Response(UserSerializer(user).data)

    if request.method == 'DELETE':
        try:
            delete_user(user_id=pk, acting_user=request.user)
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SelfDeletionError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UserUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    changes = serializer.to_service_kwargs()

    # Changing someone's role requires the dedicated permission
    if 'role' in changes and not request.user.has_app_permission('users.manage_roles'):
        return Response(
            {'error': 'You do not have permission to change user roles.'},
            status=status.HTTP_403_FORBIDDEN
        )

    try:
        user = update_user(user_id=pk, **changes)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except DuplicateUserError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(UserSerializer(user).data)


# =============================================================================
# Password setup
# =============================================================================

@extend_schema(
    request=VerifyUserSerializer,
    responses={200: VerifyUserResponseSerializer, 404: ErrorResponseSerializer},
    description="Verify username, email and mobile before setting up a password.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def verify_user(request):
    serializer = VerifyUserSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = verify_user_for_setup(**serializer.validated_data)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({
        'user_id': user.id,
        'has_password': user.has_usable_password(),
    })


@extend_schema(
    request=SetupPasswordSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Set the first password on an account created by an administrator.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def setup_password_view(request):
    serializer = SetupPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        setup_password(
            user_id=serializer.validated_data['user_id'],
            password=serializer.validated_data['password'],
        )
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (PasswordAlreadySetError, InactiveAccountError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Password set successfully. You can now log in.'})
