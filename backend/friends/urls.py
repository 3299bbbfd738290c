from django.urls import path
from .views import FriendsView, FriendRequestDetailView

app_name = "friends"

urlpatterns = [
    path("", FriendsView.as_view(), name="friends"),
    path("<int:friendship_id>/", FriendRequestDetailView.as_view(), name="friend-request"),
]
