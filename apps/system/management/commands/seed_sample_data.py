"""
Management command to seed a fresh database with sample data.

Usage:
    python manage.py seed_sample_data [--clear]

This creates:
- The system roles (admin, user)
- An admin account (admin / password123)
- 5 sample parties
- A handful of invoices in different currencies and states
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.activities.models import Activity
from apps.invoices.models import Invoice, InvoiceItem, Transaction, InvoiceStatus
from apps.invoices.services import create_invoice, update_invoice_status
from apps.parties.models import Party
from apps.parties.services import create_party
from apps.roles.services import ensure_system_roles
from apps.system.models import SystemSettings


SAMPLE_PARTIES = [
    {'name': 'Sharma Enterprises', 'contact_person': 'Rajesh Sharma', 'phone': '+91 9876543210', 'email': 'rajesh@sharma.com'},
    {'name': 'Gupta Trading Co.', 'contact_person': 'Anil Gupta', 'phone': '+91 9871234567', 'email': 'anil@guptatrading.com'},
    {'name': 'Patel & Sons', 'contact_person': 'Suresh Patel', 'phone': '+91 9988776655', 'email': 'suresh@patelsons.com'},
    {'name': 'Singh Hardware', 'contact_person': 'Manpreet Singh', 'phone': '+91 9856324170', 'email': 'manpreet@singhhardware.com'},
    {'name': 'Kumar Textiles', 'contact_person': 'Vijay Kumar', 'phone': '+91 9012345678', 'email': 'vijay@kumartextiles.com'},
]

# (seller index, buyer index, days ago, currency, exchange rate, items, final status)
SAMPLE_INVOICES = [
    (0, 1, 45, 'INR', None, [('Cotton bales', 20, '4500.00')], InvoiceStatus.PAID),
    (1, 2, 30, 'USD', '83.25', [('Steel rods', 100, '12.50'), ('Fasteners', 500, '0.80')], InvoiceStatus.PENDING),
    (2, 3, 20, 'INR', None, [('Cement bags', 200, '380.00')], InvoiceStatus.PENDING),
    (3, 4, 12, 'EUR', '90.10', [('Machine parts', 8, '240.00')], InvoiceStatus.PAID),
    (4, 0, 5, 'INR', None, [('Silk fabric', 150, '650.00')], InvoiceStatus.CANCELLED),
    (0, 2, 2, 'AED', '22.65', [('Dry fruits', 40, '95.00')], InvoiceStatus.PENDING),
]


class Command(BaseCommand):
    help = 'Seed the database with an admin account, sample parties and invoices'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing invoices, transactions, activities and parties first',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Seeding sample data...')

        ensure_system_roles()
        SystemSettings.load()
        admin = self.create_admin()
        parties = self.create_parties(admin)

        if Invoice.objects.exists():
            self.stdout.write('  Invoices already exist, skipping sample invoices')
        else:
            self.create_invoices(admin, parties)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Login: admin / password123')

    def clear_data(self):
        """Delete business data in dependency order; users and roles are kept."""
        Activity.objects.all().delete()
        Transaction.objects.all().delete()
        InvoiceItem.objects.all().delete()
        Invoice.objects.all().delete()
        Party.objects.all().delete()

    def create_admin(self):
        self.stdout.write('  Creating admin user...')
        admin = User.objects.filter(username='admin').first()
        if admin is None:
            admin = User.objects.create_superuser(
                username='admin',
                email='admin@example.com',
                password='password123',
                full_name='Administrator',
            )
        return admin

    def create_parties(self, admin):
        self.stdout.write('  Creating parties...')
        parties = []
        for data in SAMPLE_PARTIES:
            party = Party.objects.filter(name__iexact=data['name']).first()
            if party is None:
                party = create_party(
                    user=admin,
                    address='123 Main Street, Mumbai, India',
                    **data
                )
            parties.append(party)
        return parties

    def create_invoices(self, admin, parties):
        self.stdout.write('  Creating invoices...')
        today = timezone.localdate()

        for seller, buyer, days_ago, currency, rate, items, final_status in SAMPLE_INVOICES:
            invoice = create_invoice(
                user=admin,
                party=parties[seller],
                buyer=parties[buyer],
                invoice_date=today - timedelta(days=days_ago),
                due_days=30,
                currency=currency,
                exchange_rate=Decimal(rate) if rate else None,
                items=[
                    {'description': description, 'quantity': quantity, 'rate': Decimal(price)}
                    for description, quantity, price in items
                ],
            )
            if final_status != InvoiceStatus.PENDING:
                update_invoice_status(invoice_id=invoice.id, status=final_status, user=admin)
