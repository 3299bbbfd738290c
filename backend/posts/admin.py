"""Tells what to show in the Django admin interface for posts app"""

from django.contrib import admin
from .models import Post, JoinRequest


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ['id', 'author', 'title', 'category', 'price', 'active', 'created_at']
    list_filter = ['active', 'category', 'created_at']
    search_fields = ['title', 'content', 'author__email', 'author__name']
    readonly_fields = ['created_at']
    date_hierarchy = 'created_at'


@admin.register(JoinRequest)
class JoinRequestAdmin(admin.ModelAdmin):
    list_display = ("post", "sender", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("post__id", "sender__email")
