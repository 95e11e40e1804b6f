from django.contrib import admin
from .models import Activity


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ['timestamp', 'type', 'title', 'user', 'party', 'invoice']
    list_filter = ['type', 'timestamp']
    search_fields = ['title', 'description']
    raw_id_fields = ['user', 'party', 'invoice']
    readonly_fields = ['timestamp']
    date_hierarchy = 'timestamp'
