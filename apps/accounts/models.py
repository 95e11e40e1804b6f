from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class UserStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'


class UserManager(BaseUserManager):
    """Custom user manager for username-based authentication."""

    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError('Username is required')

        email = extra_fields.pop('email', '')
        if email:
            extra_fields['email'] = self.normalize_email(email)
        user = self.model(username=username, **extra_fields)
        # A missing password leaves the account waiting for password setup
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', 'admin')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(username, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """BussNote operator account."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=150, unique=True)
    full_name = models.CharField(max_length=200, blank=True)
    email = models.EmailField(max_length=255, unique=True, null=True, blank=True)
    mobile = models.CharField(max_length=20, unique=True, null=True, blank=True)
    address = models.TextField(blank=True)

    # Access control: role name resolved through apps.roles
    role = models.CharField(max_length=50, default='user', db_index=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['email']

    class Meta:
        db_table = 'users'
        ordering = ['username']
        indexes = [
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return self.username

    @property
    def status(self):
        return UserStatus.ACTIVE if self.is_active else UserStatus.INACTIVE

    def get_display_name(self):
        """Return full name or username."""
        return self.full_name or self.username

    def get_app_permissions(self):
        """Return the set of permission ids granted by the user's role."""
        from apps.roles.services import get_role_permissions

        if self.is_superuser:
            return get_role_permissions('admin')
        return get_role_permissions(self.role)

    def has_app_permission(self, permission_id):
        return permission_id in self.get_app_permissions()
