from django.urls import path
from .views import (
    LoginView,
    NearbyUsersView,
    ProfileLocationView,
    ProfileView,
    RefreshTokenView,
    RegisterView,
    UserDetailView,
    UserListView,
    UserSearchView,
)

urlpatterns = [
    # Auth
    path("register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshTokenView.as_view(), name="token-refresh"),

    # Own profile
    path("profile/", ProfileView.as_view(), name="profile"),
    path("profile/location/", ProfileLocationView.as_view(), name="profile-location"),

    # Directory
    path("users/", UserListView.as_view(), name="user-list"),
    path("users/nearby/", NearbyUsersView.as_view(), name="users-nearby"),
    path("users/search/", UserSearchView.as_view(), name="users-search"),
    path("users/<int:user_id>/", UserDetailView.as_view(), name="user-detail"),
]
