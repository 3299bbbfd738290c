from rest_framework import serializers


class NotificationPollQuerySerializer(serializers.Serializer):
    """Validates ?lat=&lng=&last_checked= for the nearby-posts poll."""
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    last_checked = serializers.DateTimeField(required=False)


class NotificationPostSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    content = serializers.CharField(read_only=True)
    latitude = serializers.FloatField(read_only=True)
    longitude = serializers.FloatField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class SubscriptionKeysSerializer(serializers.Serializer):
    p256dh = serializers.CharField(max_length=255)
    auth = serializers.CharField(max_length=255)


class PushSubscribeSerializer(serializers.Serializer):
    """Browser PushSubscription JSON: {"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}"""
    endpoint = serializers.URLField(max_length=500)
    keys = SubscriptionKeysSerializer()


class PushSendSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    title = serializers.CharField(max_length=255)
    body = serializers.CharField(allow_blank=True)
    url = serializers.CharField(required=False, allow_blank=True, default="/")
