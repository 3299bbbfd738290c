from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from common.constants import DEFAULT_MESSAGE_PAGE
from common.utils import int_param
from services import messaging

from .serializers import ConversationSerializer, MessageSerializer


class MessageListView(APIView):
    """
    GET  -> Conversation list (one row per counterpart, latest first)
    POST -> Send a text, image or location message

    POST Body:
    {
        "receiver_id": 12,
        "content": "On my way",
        "type": "text",              // or "image" / "location"
        "image_url": "data:image/…",  // image messages
        "latitude": 37.0,            // location messages
        "longitude": -122.0
    }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        conversations = messaging.list_conversations(request.user)
        return Response(ConversationSerializer(conversations, many=True).data)

    def post(self, request):
        data = request.data
        message = messaging.send_message(
            request.user,
            data.get("receiver_id"),
            data.get("content"),
            message_type=data.get("type"),
            image_url=data.get("image_url"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class ConversationHistoryView(APIView):
    """
    GET: Messages with one user, newest first (POLLING ENDPOINT)

    ?since=<ISO timestamp> returns only newer messages for incremental updates,
    ?take= (max 100) and ?skip= page through older history.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        take = int_param(request.query_params, "take", DEFAULT_MESSAGE_PAGE)
        skip = int_param(request.query_params, "skip", 0)
        since = messaging.parse_since(request.query_params.get("since"))

        messages = messaging.list_messages(request.user, user_id, since=since, take=take, skip=skip)
        return Response(MessageSerializer(messages, many=True).data)
