from django.contrib import admin
from .models import Role


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'is_system', 'user_count', 'updated_at']
    list_filter = ['is_system']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']
