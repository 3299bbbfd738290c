from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check), # Health check endpoint

    # Accounts: register, login/refresh, profile and user directory (at /api/)
    path('api/', include('accounts.urls')),

    # Posts feed, join requests and image upload (at /api/)
    path('api/', include('posts.urls')),

    # Friendships (at /api/friends/)
    path('api/friends/', include('friends.urls')),

    # Direct messages (at /api/messages/)
    path('api/messages/', include('chat.urls')),

    # Nearby-post polling and web push (at /api/notifications/)
    path('api/notifications/', include('notifications.urls')),
]
