from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    """Message with the sender's public fields"""
    sender = UserBasicSerializer(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id", "sender_id", "receiver_id", "sender", "content", "type",
            "image_url", "latitude", "longitude", "read", "created_at",
        ]


class ConversationSerializer(serializers.Serializer):
    """One row of the conversation list"""
    user = UserBasicSerializer(read_only=True)
    last_message = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)
    type = serializers.CharField(read_only=True)
