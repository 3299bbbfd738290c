from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

from services import discovery, push

from .serializers import (
    NotificationPollQuerySerializer,
    NotificationPostSerializer,
    PushSendSerializer,
    PushSubscribeSerializer,
)


class NearbyNotificationsView(APIView):
    """
    GET: New posts within 1 km created after ?last_checked= (POLLING ENDPOINT)

    The client keeps last_checked and moves it forward after every poll.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        query = NotificationPollQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        posts = discovery.poll_new_nearby_posts(
            query.validated_data["lat"],
            query.validated_data["lng"],
            since=query.validated_data.get("last_checked"),
        )
        return Response({"posts": NotificationPostSerializer(posts, many=True).data})


class PushSubscribeView(APIView):
    """POST: Register this device's push endpoint for the caller."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = PushSubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        push.subscribe(
            request.user,
            endpoint=serializer.validated_data["endpoint"],
            p256dh=serializer.validated_data["keys"]["p256dh"],
            auth=serializer.validated_data["keys"]["auth"],
        )
        return Response({"success": True})


class PushSendView(APIView):
    """POST: Push a notification to every device of `user_id`."""
    permission_classes = [IsAuthenticated]
    push_sender = None

    def get_push_sender(self):
        return self.push_sender or push.get_push_sender()

    def post(self, request):
        serializer = PushSendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.get_push_sender().send_to_user(
            data["user_id"], data["title"], data["body"], data.get("url") or "/"
        )

        if result.attempted == 0:
            return Response({"message": "No subscriptions found"})

        return Response({
            "success": True,
            "count": result.attempted,
            "delivered": result.delivered,
            "removed": len(result.removed),
        })
