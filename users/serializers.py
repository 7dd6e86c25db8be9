# ==================== USERS/SERIALIZERS.PY ====================
from django.contrib.auth import authenticate
from django.utils import timezone
from rest_framework import serializers

from utils.distance_calculator import validate_coordinates
from .models import CustomUser, WalletTransaction


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)

    class Meta:
        model = CustomUser
        fields = ['name', 'email', 'phone_number', 'password']

    def validate_email(self, value):
        value = value.lower()
        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists")
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        # Email doubles as the username, role is never self-assigned
        return CustomUser.objects.create_user(
            username=validated_data['email'],
            password=password,
            **validated_data
        )


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(
            request=self.context.get('request'),
            username=data['email'].lower(),
            password=data['password']
        )
        if not user:
            raise serializers.ValidationError("Invalid credentials")
        data['user'] = user
        return data


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class WalletTransactionSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='transaction_type', read_only=True)

    class Meta:
        model = WalletTransaction
        fields = ['id', 'type', 'amount', 'description', 'balance_after', 'timestamp']
        read_only_fields = fields


class UserProfileSerializer(serializers.ModelSerializer):
    owned_parkings = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = CustomUser
        fields = ['id', 'name', 'email', 'phone_number', 'role', 'coins', 'latitude', 'longitude',
                  'location_updated_at', 'owned_parkings', 'staff_parking', 'is_active',
                  'last_login', 'created_at']
        read_only_fields = ['email', 'role', 'coins', 'location_updated_at', 'owned_parkings',
                            'staff_parking', 'is_active', 'last_login', 'created_at']

    def validate(self, data):
        latitude = data.get('latitude', getattr(self.instance, 'latitude', None))
        longitude = data.get('longitude', getattr(self.instance, 'longitude', None))
        if 'latitude' in data or 'longitude' in data:
            try:
                validate_coordinates(longitude, latitude)
            except ValueError as e:
                raise serializers.ValidationError({'location': str(e)})
            data['location_updated_at'] = timezone.now()
        return data

    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        # coins only moves through WalletService; never write back a stale balance
        instance.save(update_fields=[*validated_data, 'updated_at'])
        return instance


class WalletSerializer(serializers.Serializer):
    coins = serializers.IntegerField(read_only=True)
    transactions = WalletTransactionSerializer(many=True, read_only=True)
