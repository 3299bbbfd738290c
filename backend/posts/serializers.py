from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from .models import JoinRequest, Post


class JoinRequestStatusSerializer(serializers.ModelSerializer):
    """Who asked to join a post and where that stands; embedded in feed items."""

    class Meta:
        model = JoinRequest
        fields = ["sender_id", "status"]


class PostSerializer(serializers.ModelSerializer):
    """Serializer for feed posts"""
    author = UserBasicSerializer(read_only=True)
    join_requests = JoinRequestStatusSerializer(many=True, read_only=True)

    class Meta:
        model = Post
        fields = [
            "id", "author", "title", "content", "price", "category", "image_url",
            "latitude", "longitude", "active", "created_at", "join_requests",
        ]


class FriendPostSerializer(PostSerializer):
    """Friend's post with only the caller's own join requests attached."""
    join_requests = JoinRequestStatusSerializer(many=True, read_only=True, source="my_join_requests")


class PostCreateSerializer(serializers.Serializer):
    """Serializer for creating posts"""
    content = serializers.CharField()
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    price = serializers.CharField(required=False, allow_blank=True, max_length=50)
    category = serializers.CharField(required=False, allow_blank=True, max_length=50)
    image_url = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class LocationQuerySerializer(serializers.Serializer):
    """Validates ?lat=&lng= query parameters."""
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class JoinRequestSerializer(serializers.ModelSerializer):
    """Join request as returned to the requester."""

    class Meta:
        model = JoinRequest
        fields = ["id", "post_id", "sender_id", "status", "created_at"]


class JoinRequestDetailSerializer(serializers.ModelSerializer):
    """Join request as listed for the post author."""
    sender = serializers.SerializerMethodField()
    post = serializers.SerializerMethodField()

    class Meta:
        model = JoinRequest
        fields = ["id", "post", "sender", "status", "created_at"]

    def get_sender(self, obj):
        return {
            "id": obj.sender.id,
            "name": obj.sender.name,
            "email": obj.sender.email,
            "image": obj.sender.image,
        }

    def get_post(self, obj):
        return {
            "id": obj.post.id,
            "title": obj.post.title,
            "content": obj.post.content,
        }


class JoinRequestCreateSerializer(serializers.Serializer):
    post_id = serializers.IntegerField()


class JoinRequestResponseSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=[JoinRequest.STATUS_ACCEPTED, JoinRequest.STATUS_REJECTED])
