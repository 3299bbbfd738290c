from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from common.constants import DEFAULT_JOIN_REQUEST_PAGE
from common.utils import int_param
from services import social

from ..serializers import (
    JoinRequestCreateSerializer,
    JoinRequestDetailSerializer,
    JoinRequestResponseSerializer,
    JoinRequestSerializer,
)


class JoinRequestView(APIView):
    """
    GET  -> Requests made on the caller's posts (?take=&skip=)
    POST -> Ask to join a post; repeating the call returns the existing request
    PUT  -> Accept or reject a request on one of the caller's posts
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        take = int_param(request.query_params, "take", DEFAULT_JOIN_REQUEST_PAGE)
        skip = int_param(request.query_params, "skip", 0)

        join_requests = social.list_join_requests(request.user, take=take, skip=skip)
        return Response(JoinRequestDetailSerializer(join_requests, many=True).data)

    def post(self, request):
        serializer = JoinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request, created = social.create_join_request(
            request.user,
            serializer.validated_data["post_id"],
        )
        return Response(
            JoinRequestSerializer(join_request).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def put(self, request):
        serializer = JoinRequestResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = social.respond_to_join_request(
            request.user,
            serializer.validated_data["request_id"],
            serializer.validated_data["status"],
        )
        return Response(JoinRequestDetailSerializer(join_request).data)
