from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Friendship


class FriendshipSerializer(serializers.ModelSerializer):
    """Friendship as returned to the requester, with the target's card."""
    friend = UserSummarySerializer(read_only=True)

    class Meta:
        model = Friendship
        fields = ["id", "user_id", "friend_id", "friend", "status", "created_at"]


class PendingRequestSerializer(serializers.ModelSerializer):
    """Incoming request as seen by its target, with the requester's card."""
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Friendship
        fields = ["id", "user_id", "friend_id", "user", "status", "created_at"]


class FriendRequestCreateSerializer(serializers.Serializer):
    friend_email = serializers.EmailField(required=False, allow_blank=True)
    friend_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, data):
        if not data.get("friend_email") and data.get("friend_id") is None:
            raise serializers.ValidationError("Must provide friend_email or friend_id")
        return data
