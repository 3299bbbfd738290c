from django.db import IntegrityError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken

from common.constants import DEFAULT_DISCOVERY_RADIUS_KM
from common.exceptions import ConflictError
from services import discovery

from .models import User
from .serializers import (
    LocationUpdateSerializer,
    LoginSerializer,
    NearbyUsersQuerySerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserProfileSerializer,
    UserSummarySerializer,
)


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


class RegisterView(APIView):
    """
    Register a new account with email and password

    POST Body:
    {
        "email": "jane@example.com",
        "name": "Jane",
        "password": "secret1"  // at least 6 characters
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if User.objects.filter(email__iexact=serializer.validated_data['email']).exists():
            raise ConflictError("Email already registered")

        try:
            user = serializer.save()
        except IntegrityError:
            raise ConflictError("Email already registered")

        return Response({
            'success': True,
            'message': 'User registered successfully',
            'user': {'id': user.id, 'email': user.email, 'name': user.name},
            'tokens': _tokens_for(user),
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Login with email and password to get JWT tokens

    POST Body:
    {
        "email": "jane@example.com",
        "password": "secret1"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data

        return Response({
            "message": "Login successful",
            "user": UserSummarySerializer(user).data,
            "tokens": _tokens_for(user),
        }, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    """
    Refresh JWT access token

    POST Body:
    {
        "refresh": "your_refresh_token"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        refresh_token = request.data.get('refresh')

        if not refresh_token:
            return Response(
                {'error': 'Refresh token is required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            refresh = RefreshToken(refresh_token)
            return Response({
                'access': str(refresh.access_token)
            })
        except Exception:
            return Response(
                {'error': 'Invalid refresh token'},
                status=status.HTTP_401_UNAUTHORIZED
            )


class ProfileView(APIView):
    """
    GET -> Own profile
    PUT -> Partially update own profile
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserProfileSerializer(request.user).data)

    def put(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserProfileSerializer(user).data)


class ProfileLocationView(APIView):
    """POST: Store the caller's last-known coordinates (makes them discoverable)."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LocationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lat = serializer.validated_data["latitude"]
        lng = serializer.validated_data["longitude"]
        discovery.update_user_location(request.user, lat, lng)

        return Response({
            "message": "Location updated",
            "latitude": lat,
            "longitude": lng,
        })


class UserListView(APIView):
    """GET: All other users with the caller's friendship status."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        entries = discovery.list_other_users(request.user)
        return Response([
            {
                **UserSummarySerializer(entry["user"]).data,
                "is_friend": entry["is_friend"],
                "friendship_status": entry["friendship_status"],
            }
            for entry in entries
        ])


class UserDetailView(APIView):
    """GET: Public profile of one user."""
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        user = get_object_or_404(User, id=user_id)
        response = Response(UserProfileSerializer(user).data)
        response['Cache-Control'] = 'public, s-maxage=60, stale-while-revalidate=30'
        return response


class UserSearchView(APIView):
    """GET ?q=: Search other users by name or email (at least 2 characters)."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        results = discovery.search_users(request.user, request.query_params.get('q', ''))
        return Response([
            {
                **UserSummarySerializer(entry["user"]).data,
                "is_friend": entry["is_friend"],
            }
            for entry in results
        ])


class NearbyUsersView(APIView):
    """GET ?lat=&lng=&radius=: Users within `radius` km (default 5), closest first."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        query = NearbyUsersQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        lat = query.validated_data["lat"]
        lng = query.validated_data["lng"]
        radius = query.validated_data.get("radius", DEFAULT_DISCOVERY_RADIUS_KM)

        nearby = discovery.find_nearby_users(request.user, lat, lng, radius)
        return Response([
            {
                **UserSummarySerializer(entry["user"]).data,
                "current_latitude": entry["user"].current_latitude,
                "current_longitude": entry["user"].current_longitude,
                "distance": entry["distance"],
                "friendship_status": entry["friendship_status"],
            }
            for entry in nearby
        ])
