from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'address', 'city', 'zip', 'country', 'created_at']
        read_only_fields = ['id', 'email', 'created_at']


class AdminUserSerializer(serializers.ModelSerializer):
    """User representation for back-office account management"""
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'address', 'city', 'zip', 'country',
                  'is_active', 'is_staff', 'is_superuser', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['last_login', 'created_at', 'updated_at']


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6, validators=[validate_password])
    name = serializers.CharField(min_length=2, max_length=200)

    class Meta:
        model = User
        fields = ['email', 'password', 'name']

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class AdminUserCreateSerializer(RegisterSerializer):
    class Meta(RegisterSerializer.Meta):
        fields = ['email', 'password', 'name', 'phone', 'is_staff', 'is_active']


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'address', 'city', 'zip', 'country']
        read_only_fields = ['id', 'email']


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    new_password = serializers.CharField(min_length=6)


class UserTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Email/password login for shoppers"""
    token_type = 'user'

    def validate(self, attrs):
        data = super().validate(attrs)
        # Ensure user is active
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['type'] = cls.token_type
        return token


class AdminTokenObtainPairSerializer(UserTokenObtainPairSerializer):
    """Email/password login restricted to back-office staff"""
    token_type = 'admin'

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_staff:
            raise AuthenticationFailed('Invalid credentials')
        data['admin'] = data.pop('user')
        return data


class UserTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that rejects tokens of deleted or disabled users"""
    def validate(self, attrs):
        try:
            refresh = RefreshToken(attrs['refresh'])
        except TokenError:
            raise InvalidToken('Token is invalid or expired.')

        user_id = refresh.get(jwt_settings.USER_ID_CLAIM)
        if not User.objects.filter(pk=user_id, is_active=True).exists():
            # User referenced in token doesn't exist anymore
            raise InvalidToken('Token is invalid. User no longer exists.')

        try:
            return super().validate(attrs)
        except TokenError:
            raise InvalidToken('Token is invalid or expired.')


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_email', 'action', 'model_name', 'object_id',
                  'object_reference', 'changes', 'ip_address', 'created_at']
