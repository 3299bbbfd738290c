from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

from services import discovery

from ..serializers import LocationQuerySerializer, PostCreateSerializer, PostSerializer


class PostFeedView(APIView):
    """
    GET  -> Active posts within 1 km of ?lat=&lng=, newest first (no login needed)
    POST -> Publish a post at the given coordinates
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request):
        query = LocationQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        posts = discovery.find_nearby_posts(
            query.validated_data["lat"],
            query.validated_data["lng"],
        )
        return Response(PostSerializer(posts, many=True).data)

    def post(self, request):
        serializer = PostCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        post = discovery.create_post(
            author=request.user,
            content=data["content"],
            lat=data["lat"],
            lng=data["lng"],
            title=data.get("title"),
            price=data.get("price"),
            category=data.get("category"),
            image_url=data.get("image_url"),
        )
        return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)
