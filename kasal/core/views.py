import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.paginator import Paginator
from django.shortcuts import get_object_or_404

from .cache_utils import get_cached_shop_settings
from .models import Role, Permission, AuditLog
from .permissions import role_permission
from .serializers import (
    UserSerializer, UserCreateSerializer, ChangePasswordSerializer,
    RoleSerializer, PermissionSerializer,
    ShopSettingsSerializer, PublicShopSettingsSerializer, AuditLogSerializer
)
from .utils import create_audit_log

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if self.user.status != 'active':
            raise AuthenticationFailed(f'User account is {self.user.status}.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role.name if user.role_id else None
        token['permissions'] = user.get_permission_codes()
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that rejects tokens of deleted users"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except User.DoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role and permission codes"""
    return Response(UserSerializer(request.user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save()
    create_audit_log(
        request=request,
        action='update',
        model_name='User',
        object_id=request.user.id,
        object_name=request.user.username,
        changes={'password_changed': True}
    )
    return Response({'message': 'Password updated successfully.'})


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, role_permission('manage_users')])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.select_related('role').order_by('username')
        status_filter = request.query_params.get('status')
        if status_filter:
            users = users.filter(status=status_filter)
        return Response(UserSerializer(users, many=True).data)

    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='User',
            object_id=user.id,
            object_name=user.username,
            changes={'role': user.role.name if user.role_id else None}
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, role_permission('manage_users')])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if user.pk == request.user.pk:
        return Response({'error': 'You cannot delete your own account.'}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(
        request=request,
        action='delete',
        model_name='User',
        object_id=user.id,
        object_name=user.username,
    )
    user.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Role views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, role_permission('manage_users')])
def role_list_create(request):
    if request.method == 'GET':
        roles = Role.objects.prefetch_related('permissions')
        return Response(RoleSerializer(roles, many=True).data)

    serializer = RoleSerializer(data=request.data)
    if serializer.is_valid():
        role = serializer.save()
        return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, role_permission('manage_users')])
def role_detail(request, pk):
    role = get_object_or_404(Role, pk=pk)

    if request.method == 'GET':
        return Response(RoleSerializer(role).data)
    elif request.method == 'PUT':
        serializer = RoleSerializer(role, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if role.users.exists():
        return Response(
            {'error': f'Role "{role.name}" is still assigned to {role.users.count()} user(s).'},
            status=status.HTTP_400_BAD_REQUEST
        )
    role.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, role_permission('manage_users')])
def permission_list(request):
    return Response(PermissionSerializer(Permission.objects.all(), many=True).data)


@api_view(['GET', 'PUT'])
@permission_classes([AllowAny])
def shop_settings(request):
    """Shop settings; anonymous callers get the storefront subset"""
    settings_obj = get_cached_shop_settings()

    if request.method == 'GET':
        if request.user and request.user.is_authenticated:
            return Response(ShopSettingsSerializer(settings_obj).data)
        return Response(PublicShopSettingsSerializer(settings_obj).data)

    if not request.user or not request.user.is_authenticated:
        return Response({'error': 'Authentication credentials were not provided.'}, status=status.HTTP_401_UNAUTHORIZED)
    if not request.user.has_role_permission('manage_settings'):
        return Response({'error': 'You do not have permission to perform this action.'}, status=status.HTTP_403_FORBIDDEN)

    slots = request.data.get('appointment_slots_per_day')
    if slots is not None:
        try:
            if int(slots) < 0 or str(int(slots)) != str(slots).strip():
                raise ValueError
        except (TypeError, ValueError):
            return Response(
                {'error': 'Appointment slots must be a non-negative whole number.'},
                status=status.HTTP_400_BAD_REQUEST
            )

    serializer = ShopSettingsSerializer(settings_obj, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='ShopSettings',
            object_id=settings_obj.pk,
            changes=serializer.validated_data
        )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views
@api_view(['GET'])
@permission_classes([IsAuthenticated, role_permission('view_audit_logs')])
def audit_log_list(request):
    """List audit logs with filtering and pagination"""
    queryset = AuditLog.objects.select_related('user')

    action = request.query_params.get('action')
    if action:
        queryset = queryset.filter(action=action)

    model_name = request.query_params.get('model_name')
    if model_name:
        queryset = queryset.filter(model_name=model_name)

    object_id = request.query_params.get('object_id')
    if object_id:
        queryset = queryset.filter(object_id=object_id)

    reference = request.query_params.get('reference')
    if reference:
        queryset = queryset.filter(object_reference__icontains=reference)

    date_from = request.query_params.get('date_from')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)

    date_to = request.query_params.get('date_to')
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    page = int(request.query_params.get('page', 1))
    limit = int(request.query_params.get('limit', 50))
    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    return Response({
        'results': AuditLogSerializer(page_obj, many=True).data,
        'count': paginator.count,
        'page': page_obj.number,
        'total_pages': paginator.num_pages,
    })
