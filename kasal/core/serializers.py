from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Role, Permission, ShopSettings, AuditLog


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ['code', 'description']


class RoleSerializer(serializers.ModelSerializer):
    permissions = serializers.SlugRelatedField(
        slug_field='code', many=True, queryset=Permission.objects.all(), required=False
    )
    user_count = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = ['id', 'name', 'description', 'permissions', 'user_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_user_count(self, obj):
        return obj.users.count()


class UserSerializer(serializers.ModelSerializer):
    role_name = serializers.CharField(source='role.name', read_only=True, default=None)
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role', 'role_name',
                  'permissions', 'status', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_superuser', 'created_at', 'updated_at']

    def get_permissions(self, obj):
        return obj.get_permission_codes()

    def update(self, instance, validated_data):
        user = super().update(instance, validated_data)
        # Suspended or inactive accounts cannot authenticate
        active = user.status == 'active'
        if user.is_active != active:
            user.is_active = active
            user.save(update_fields=['is_active'])
        return user


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone', 'role', 'status']

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('A user with this email already exists.')
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        status = validated_data.get('status', 'active')
        user = User.objects.create(**validated_data, is_active=(status == 'active'))
        user.set_password(password)
        user.save()
        return user


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect.')
        return value


class ShopSettingsSerializer(serializers.ModelSerializer):
    appointment_slots_per_day = serializers.IntegerField(min_value=0, required=False)

    class Meta:
        model = ShopSettings
        fields = ['appointment_slots_per_day', 'gcash_name', 'gcash_number', 'shop_address',
                  'shop_contact_number', 'shop_email', 'updated_at']
        read_only_fields = ['updated_at']


class PublicShopSettingsSerializer(serializers.ModelSerializer):
    """Subset of settings shown on the storefront"""
    class Meta:
        model = ShopSettings
        fields = ['appointment_slots_per_day', 'gcash_name', 'gcash_number', 'shop_address',
                  'shop_contact_number', 'shop_email']


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
