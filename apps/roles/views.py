from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from .catalog import catalog_as_list
from .models import Role
from .permissions import HasAppPermission
from .serializers import (
    RoleSerializer,
    RoleInputSerializer,
    PermissionCategorySerializer,
)
from .services import (
    list_roles,
    create_role,
    update_role,
    delete_role,
    RoleNotFoundError,
    DuplicateRoleError,
    SystemRoleError,
    RoleInUseError,
    UnknownPermissionError,
)


class RoleViewSet(viewsets.ViewSet):
    """
    Role and permission management.

    list: All roles (system roles are created on first access)
    create: Create a custom role
    retrieve: Get a role
    update / partial_update: Change name, description or permissions
    destroy: Delete a custom role that no user holds
    catalog: The permission catalog grouped by category
    """

    permission_classes = [HasAppPermission]
    lookup_value_regex = '[0-9a-f-]{36}'
    required_permissions = {
        'list': 'roles.view',
        'retrieve': 'roles.view',
        'catalog': 'roles.view',
        'create': 'roles.create',
        'update': 'roles.edit',
        'partial_update': 'roles.edit',
        'destroy': 'roles.delete',
    }

    @extend_schema(responses={200: RoleSerializer(many=True)}, tags=['roles'])
    def list(self, request):
        return Response(RoleSerializer(list_roles(), many=True).data)

    @extend_schema(responses={200: RoleSerializer}, tags=['roles'])
    def retrieve(self, request, pk=None):
        role = get_object_or_404(Role, pk=pk)
        return Response(RoleSerializer(role).data)

    @extend_schema(request=RoleInputSerializer, responses={201: RoleSerializer}, tags=['roles'])
    def create(self, request):
        serializer = RoleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            role = create_role(**serializer.validated_data)
        except (DuplicateRoleError, UnknownPermissionError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)

    def _update(self, request, pk, partial):
        serializer = RoleInputSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            role = update_role(role_id=pk, **serializer.validated_data)
        except RoleNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (DuplicateRoleError, SystemRoleError, UnknownPermissionError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(RoleSerializer(role).data)

    @extend_schema(request=RoleInputSerializer, responses={200: RoleSerializer}, tags=['roles'])
    def update(self, request, pk=None):
        return self._update(request, pk, partial=False)

    @extend_schema(request=RoleInputSerializer, responses={200: RoleSerializer}, tags=['roles'])
    def partial_update(self, request, pk=None):
        return self._update(request, pk, partial=True)

    @extend_schema(responses={204: None}, tags=['roles'])
    def destroy(self, request, pk=None):
        try:
            delete_role(role_id=pk)
        except RoleNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SystemRoleError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except RoleInUseError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: PermissionCategorySerializer(many=True)}, tags=['roles'])
    @action(detail=False, methods=['get'], url_path='permissions')
    def catalog(self, request):
        """
        Get the permission catalog.

        GET /api/roles/permissions/
        """
        return Response(catalog_as_list())
