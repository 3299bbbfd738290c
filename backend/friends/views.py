from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.serializers import UserSummarySerializer
from posts.serializers import FriendPostSerializer
from services import social

from .serializers import (
    FriendRequestCreateSerializer,
    FriendshipSerializer,
    PendingRequestSerializer,
)


class FriendsView(APIView):
    """
    GET  -> Accepted friends, their recent active posts and requests waiting on the caller
    POST -> Add a friend by email (accepted at once) or by id (pending request)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        overview = social.get_friends_overview(request.user)
        return Response({
            "friends": UserSummarySerializer(overview["friends"], many=True).data,
            "posts": FriendPostSerializer(overview["posts"], many=True).data,
            "pending_requests": PendingRequestSerializer(overview["pending_requests"], many=True).data,
        })

    def post(self, request):
        serializer = FriendRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        friendship = social.request_friendship(
            request.user,
            friend_email=serializer.validated_data.get("friend_email") or None,
            friend_id=serializer.validated_data.get("friend_id"),
        )
        return Response(FriendshipSerializer(friendship).data, status=status.HTTP_201_CREATED)


class FriendRequestDetailView(APIView):
    """
    PUT    -> Accept a pending request sent to the caller
    DELETE -> Reject (delete) a pending request sent to the caller
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, friendship_id: int):
        friendship = social.accept_friendship(request.user, friendship_id)
        return Response(PendingRequestSerializer(friendship).data)

    def delete(self, request, friendship_id: int):
        social.reject_friendship(request.user, friendship_id)
        return Response({"success": True})
