from django.contrib import admin
from django.utils.html import format_html
from .models import Invoice, InvoiceItem, InvoiceStatus, Transaction


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    fields = ['line_number', 'description', 'quantity', 'rate', 'amount']
    readonly_fields = ['amount']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """
    Admin interface for invoices.

    Figures are read-only here; they are recomputed by the invoice
    services whenever items change.
    """

    list_display = [
        'invoice_number',
        'invoice_date',
        'party',
        'buyer',
        'currency',
        'total',
        'brokerage_inr',
        'status_badge',
        'is_closed',
    ]
    list_filter = ['status', 'is_closed', 'currency', 'terms', 'invoice_date']
    search_fields = ['invoice_number', 'invoice_no', 'party__name', 'buyer__name']
    date_hierarchy = 'invoice_date'
    ordering = ['-invoice_date']
    autocomplete_fields = ['party', 'buyer']
    inlines = [InvoiceItemInline]

    readonly_fields = [
        'id',
        'subtotal',
        'brokerage_amount',
        'brokerage_inr',
        'balance_brokerage',
        'total',
        'payment_date',
        'created_by',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Invoice', {
            'fields': ('id', 'invoice_number', 'invoice_no', 'party', 'buyer')
        }),
        ('Dates & Terms', {
            'fields': ('invoice_date', 'due_days', 'terms', 'due_date')
        }),
        ('Brokerage', {
            'fields': (
                'currency',
                'exchange_rate',
                'brokerage_rate',
                'subtotal',
                'brokerage_amount',
                'brokerage_inr',
                'received_brokerage',
                'balance_brokerage',
                'total',
            )
        }),
        ('Status', {
            'fields': ('status', 'is_closed', 'payment_date')
        }),
        ('Notes', {
            'fields': ('notes', 'remarks'),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def status_badge(self, obj):
        colors = {
            InvoiceStatus.PENDING: '#F9A825',
            InvoiceStatus.PAID: '#2E7D32',
            InvoiceStatus.CANCELLED: '#757575',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#757575'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['date', 'type', 'amount', 'party', 'invoice', 'reference']
    list_filter = ['type', 'date']
    search_fields = ['party__name', 'invoice__invoice_number', 'reference']
    date_hierarchy = 'date'
    raw_id_fields = ['party', 'invoice']
    readonly_fields = ['id', 'created_by', 'created_at']
