from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from .authentication import issue_tokens
from .models import AuditLog
from .serializers import (
    UserSerializer, AdminUserSerializer, RegisterSerializer, AdminUserCreateSerializer,
    ProfileSerializer, PasswordChangeSerializer, AuditLogSerializer,
    UserTokenObtainPairSerializer, AdminTokenObtainPairSerializer, UserTokenRefreshSerializer
)
from .utils import create_audit_log, paginate

User = get_user_model()


class UserLoginView(TokenObtainPairView):
    serializer_class = UserTokenObtainPairSerializer


class AdminLoginView(TokenObtainPairView):
    serializer_class = AdminTokenObtainPairSerializer


class UserTokenRefreshView(TokenRefreshView):
    """Token refresh that handles deleted users gracefully"""
    serializer_class = UserTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Liveness probe"""
    return Response({'status': 'ok', 'timestamp': timezone.now().isoformat()})


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Shopper registration endpoint"""
    email = request.data.get('email')
    if email and User.objects.filter(email__iexact=email).exists():
        return Response({'error': 'Email already registered'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)
    user = serializer.save()
    return Response({
        'user': UserSerializer(user).data,
        **issue_tokens(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current shopper profile"""
    return Response(UserSerializer(request.user).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_profile(request):
    """Update contact and shipping details of the current user"""
    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    return Response(serializer.data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def user_password(request):
    """Change password after verifying the current one"""
    serializer = PasswordChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid password'}, status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    if not user.check_password(serializer.validated_data['current_password']):
        return Response({'error': 'Current password is incorrect'}, status=status.HTTP_400_BAD_REQUEST)

    user.set_password(serializer.validated_data['new_password'])
    user.save(update_fields=['password', 'updated_at'])
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_me(request):
    """Get current admin"""
    user = request.user
    return Response({'id': user.id, 'email': user.email, 'name': user.name})


# Admin user management
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('-created_at')
        is_staff = request.query_params.get('is_staff')
        if is_staff is not None:
            users = users.filter(is_staff=is_staff.lower() == 'true')
        search = request.query_params.get('search', '').strip()
        if search:
            users = users.filter(Q(email__icontains=search) | Q(name__icontains=search))
        items, pagination = paginate(request, users, default_limit=20)
        return Response({
            'users': AdminUserSerializer(items, many=True).data,
            'pagination': pagination,
        })
    else:
        serializer = AdminUserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request=request, action='user_create', model_name='User',
                             object_id=user.id, object_reference=user.email)
            return Response(AdminUserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = AdminUserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AdminUserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='user_update', model_name='User',
                             object_id=user.id, object_reference=user.email,
                             changes=dict(request.data))
            return Response(serializer.data)
        return Response({'error': 'Validation failed', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='user_delete', model_name='User',
                         object_id=user.id, object_reference=user.email)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    items, pagination = paginate(request, queryset, default_limit=50)
    return Response({
        'logs': AuditLogSerializer(items, many=True).data,
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)
    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
