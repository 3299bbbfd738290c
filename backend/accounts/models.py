from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager


class UserManager(BaseUserManager):
    """Manager for the email-keyed user model"""

    use_in_migrations = True

    @classmethod
    def normalize_email(cls, email):
        # Emails are stored lower-case so lookups at login match registration
        return super().normalize_email(email).lower()

    def get_by_natural_key(self, username):
        return self.get(**{self.model.USERNAME_FIELD: self.normalize_email(username)})

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            # OAuth sign-ins have no local password
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """User profile with last-known location and discovery radius"""
    username = None

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)

    # Profile
    image = models.TextField(null=True, blank=True)
    bio = models.TextField(null=True, blank=True)
    profession = models.CharField(max_length=150, null=True, blank=True)
    location = models.CharField(max_length=255, null=True, blank=True)
    interests = models.TextField(null=True, blank=True)
    account_links = models.TextField(null=True, blank=True)  # JSON-encoded social links

    # Discovery
    current_latitude = models.FloatField(null=True, blank=True)
    current_longitude = models.FloatField(null=True, blank=True)
    radius_km = models.FloatField(default=1.0)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.name or self.email} ({self.email})"
