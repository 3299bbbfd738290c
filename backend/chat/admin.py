from django.contrib import admin
from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "sender", "receiver", "type", "read", "created_at")
    list_filter = ("type", "read")
    search_fields = ("sender__email", "receiver__email", "content")
    readonly_fields = ("created_at",)
