from django.contrib import admin
from .models import Party


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'phone', 'email', 'gstin', 'created_at']
    search_fields = ['name', 'contact_person', 'phone', 'email', 'gstin']
    ordering = ['name']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Party', {
            'fields': ('id', 'name', 'gstin')
        }),
        ('Contact', {
            'fields': ('contact_person', 'phone', 'email', 'address')
        }),
        ('Notes', {
            'fields': ('notes',),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )
