from rest_framework import serializers
from django.contrib.auth import authenticate

from common.constants import MIN_PASSWORD_LENGTH, MIN_RADIUS_KM, MAX_RADIUS_KM
from .models import User


class UserBasicSerializer(serializers.ModelSerializer):
    """
    Lite public representation used inside posts, messages and requests.
    """
    class Meta:
        model = User
        fields = ["id", "name", "image"]


class UserSummarySerializer(serializers.ModelSerializer):
    """User card shown in friend lists, search results and the user directory."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "image", "bio"]


class UserProfileSerializer(serializers.ModelSerializer):
    """Full public profile, as shown on a profile page."""

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "image",
            "bio",
            "profession",
            "location",
            "radius_km",
            "account_links",
            "interests",
            "current_latitude",
            "current_longitude",
        ]
        read_only_fields = ["id", "email", "current_latitude", "current_longitude"]


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Partial profile update; only the fields sent are changed."""
    radius_km = serializers.FloatField(
        required=False,
        min_value=MIN_RADIUS_KM,
        max_value=MAX_RADIUS_KM,
        error_messages={
            "min_value": f"Radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km",
            "max_value": f"Radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km",
        },
    )

    class Meta:
        model = User
        fields = [
            "name",
            "bio",
            "image",
            "profession",
            "location",
            "radius_km",
            "account_links",
            "interests",
        ]


class LocationUpdateSerializer(serializers.Serializer):
    """
    Validates latitude/longitude sent by a client.

    Restricts values to valid Earth coordinate ranges.
    """
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)


class NearbyUsersQuerySerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    radius = serializers.FloatField(required=False, min_value=MIN_RADIUS_KM, max_value=MAX_RADIUS_KM)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(
            request=self.context.get("request"),
            email=data["email"],
            password=data["password"],
        )
        if not user:
            raise serializers.ValidationError("Invalid email or password")
        return user


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        min_length=MIN_PASSWORD_LENGTH,
        error_messages={"min_length": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"},
    )
    email = serializers.EmailField(max_length=254)
    name = serializers.CharField(max_length=150)

    class Meta:
        model = User
        fields = ['email', 'name', 'password']

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            name=validated_data['name'],
            password=validated_data['password'],
        )
