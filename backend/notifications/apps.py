"""Notifications app configuration."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'notifications'

    def ready(self):
        # Push sender threads are released when the process exits
        import atexit
        from services.push import shutdown_push_sender
        atexit.register(shutdown_push_sender)
