from django.urls import path
from .views import NearbyNotificationsView, PushSendView, PushSubscribeView

app_name = "notifications"

urlpatterns = [
    path("", NearbyNotificationsView.as_view(), name="nearby-posts"),
    path("subscribe/", PushSubscribeView.as_view(), name="push-subscribe"),
    path("send/", PushSendView.as_view(), name="push-send"),
]
