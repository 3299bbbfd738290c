from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from accounts.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin panel for custom User model"""

    list_display = [
        "email",
        "name",
        "location",
        "radius_km",
        "is_active",
        "is_staff",
    ]

    list_filter = [
        "is_active",
        "is_staff",
        "date_joined",
    ]

    search_fields = [
        "email",
        "name",
    ]

    ordering = ("email",)

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            "Profile",
            {
                "fields": (
                    "name",
                    "image",
                    "bio",
                    "profession",
                    "location",
                    "interests",
                    "account_links",
                )
            },
        ),
        (
            "Discovery",
            {
                "fields": (
                    "current_latitude",
                    "current_longitude",
                    "radius_km",
                )
            },
        ),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    # For create user page in admin
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "name", "password1", "password2"),
            },
        ),
    )
