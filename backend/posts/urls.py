from django.urls import path

from .views.feed import PostFeedView
from .views.join_requests import JoinRequestView
from .views.upload import ImageUploadView

app_name = "posts"

urlpatterns = [
    path("posts/", PostFeedView.as_view(), name="post-feed"),
    path("join-requests/", JoinRequestView.as_view(), name="join-requests"),
    path("upload/", ImageUploadView.as_view(), name="upload"),
]
