from django.urls import path
from . import views

app_name = "chat"

urlpatterns = [
    path("", views.MessageListView.as_view(), name="messages"),
    path("<int:user_id>/", views.ConversationHistoryView.as_view(), name="conversation-history"),
]
