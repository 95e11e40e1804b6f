from django.db import models
import uuid


class Role(models.Model):
    """Named permission bundle assigned to users by name."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    permissions = models.JSONField(default=list, blank=True)
    is_system = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'roles'
        ordering = ['-is_system', 'name']

    def __str__(self):
        return self.name

    @property
    def user_count(self):
        from apps.accounts.models import User
        return User.objects.filter(role=self.name).count()
