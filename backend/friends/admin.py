from django.contrib import admin
from .models import Friendship


@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "friend", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("user__email", "friend__email")
