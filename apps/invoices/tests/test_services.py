"""
Service layer unit tests for invoices app.

Tests cover:
- Brokerage arithmetic and rounding
- Invoice numbering
- Create/update with item replacement
- Status transitions and payment transactions
- Deletion cascade, including the raw SQL fallback
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch
from django.db import DatabaseError

from apps.activities.models import Activity, ActivityType
from apps.invoices.models import Invoice, InvoiceItem, InvoiceStatus, Transaction
from apps.invoices.services import (
    calculate_invoice_figures,
    effective_exchange_rate,
    quantize_money,
    next_invoice_number,
    update_invoice,
    update_invoice_notes,
    set_invoice_closed,
    update_invoice_status,
    record_transaction,
    delete_invoice,
    raw_delete_invoice,
)
from apps.invoices.services.exceptions import (
    InvoiceNotFoundError,
    SameSellerBuyerError,
    EmptyInvoiceError,
    DuplicateInvoiceNumberError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    TransactionValidationError,
    InvoiceDeletionError,
)
from apps.parties.models import Party
from apps.system.models import SystemSettings


# =============================================================================
# Brokerage Tests
# =============================================================================

class TestBrokerage:
    """Tests for brokerage.py arithmetic."""

    def test_inr_invoice(self):
        figures = calculate_invoice_figures(
            [{'quantity': 10, 'rate': Decimal('150.00')}],
            brokerage_rate=Decimal('0.75'),
            exchange_rate=Decimal('83.00'),
            currency='INR',
        )

        assert figures['exchange_rate'] == Decimal('1.00')
        assert figures['subtotal'] == Decimal('1500.00')
        assert figures['brokerage_amount'] == Decimal('11.25')
        assert figures['brokerage_inr'] == Decimal('11.25')
        assert figures['total'] == Decimal('1511.25')

    def test_foreign_currency_converts_brokerage(self):
        figures = calculate_invoice_figures(
            [
                {'quantity': 2, 'rate': Decimal('1000.00')},
                {'quantity': 1, 'rate': Decimal('500.00')},
            ],
            brokerage_rate=Decimal('1.00'),
            exchange_rate=Decimal('83.25'),
            currency='USD',
            received_brokerage=Decimal('1000.00'),
        )

        assert figures['subtotal'] == Decimal('2500.00')
        assert figures['brokerage_amount'] == Decimal('25.00')
        assert figures['brokerage_inr'] == Decimal('2081.25')
        assert figures['balance_brokerage'] == Decimal('1081.25')
        assert figures['total'] == Decimal('2525.00')

    def test_rounds_half_up(self):
        # 333.33 * 0.75% = 2.499975 -> 2.50
        figures = calculate_invoice_figures(
            [{'quantity': 1, 'rate': Decimal('333.33')}],
            brokerage_rate=Decimal('0.75'),
            exchange_rate=None,
            currency='INR',
        )

        assert figures['brokerage_amount'] == Decimal('2.50')

    def test_zero_brokerage(self):
        figures = calculate_invoice_figures(
            [{'quantity': 3, 'rate': Decimal('10.00')}],
            brokerage_rate=Decimal('0'),
            exchange_rate=Decimal('1.00'),
            currency='INR',
        )

        assert figures['brokerage_amount'] == Decimal('0.00')
        assert figures['total'] == Decimal('30.00')

    def test_quantize_money(self):
        assert quantize_money('1.005') == Decimal('1.01')
        assert quantize_money(2) == Decimal('2.00')

    def test_effective_exchange_rate(self):
        assert effective_exchange_rate('INR', Decimal('80')) == Decimal('1.00')
        assert effective_exchange_rate('EUR', Decimal('90.456')) == Decimal('90.46')


# =============================================================================
# Numbering Tests
# =============================================================================

@pytest.mark.django_db
class TestNumbering:
    """Tests for numbering.py."""

    def test_first_number_of_year(self):
        assert next_invoice_number(2025) == 'INV-2025-0001'

    def test_continues_after_highest(self, make_invoice):
        make_invoice(invoice_number='INV-2025-0041')

        assert next_invoice_number(2025) == 'INV-2025-0042'

    def test_sequence_restarts_each_year(self, make_invoice):
        make_invoice(invoice_number='INV-2024-0099', invoice_date=date(2024, 12, 31))

        assert next_invoice_number(2025) == 'INV-2025-0001'

    def test_ignores_non_numeric_suffix(self, make_invoice):
        make_invoice(invoice_number='INV-2025-SPECIAL')

        assert next_invoice_number(2025) == 'INV-2025-0001'

    def test_grows_past_four_digits(self, make_invoice):
        make_invoice(invoice_number='INV-2025-9999')

        assert next_invoice_number(2025) == 'INV-2025-10000'


# =============================================================================
# Create / Update Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceManagement:
    """Tests for invoice_management.py service functions."""

    def test_create_invoice(self, make_invoice, user):
        invoice = make_invoice(items=[
            {'description': 'Cotton bales', 'quantity': 10, 'rate': Decimal('150.00')},
            {'description': 'Yarn', 'quantity': 4, 'rate': Decimal('25.50')},
        ])

        assert invoice.invoice_number == 'INV-2025-0001'
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.due_date == date(2025, 4, 9)
        assert invoice.subtotal == Decimal('1602.00')
        assert invoice.created_by == user
        items = list(invoice.items.order_by('line_number'))
        assert [item.line_number for item in items] == [1, 2]
        assert items[1].amount == Decimal('102.00')
        assert Activity.objects.filter(type=ActivityType.INVOICE_CREATED, invoice=invoice).count() == 1

    def test_create_invoice_uses_system_defaults(self, make_invoice):
        system = SystemSettings.load()
        system.default_brokerage_rate = Decimal('1.50')
        system.default_currency = 'USD'
        system.save()

        invoice = make_invoice(brokerage_rate=None, currency=None, exchange_rate=Decimal('80.00'))

        assert invoice.brokerage_rate == Decimal('1.50')
        assert invoice.currency == 'USD'
        assert invoice.brokerage_inr == Decimal('1800.00')

    def test_same_seller_and_buyer(self, make_invoice, seller):
        with pytest.raises(SameSellerBuyerError):
            make_invoice(buyer=seller)

        assert Invoice.objects.count() == 0

    def test_empty_items(self, make_invoice):
        with pytest.raises(EmptyInvoiceError):
            make_invoice(items=[])

    def test_duplicate_explicit_number(self, make_invoice):
        make_invoice(invoice_number='INV-2025-0007')

        with pytest.raises(DuplicateInvoiceNumberError):
            make_invoice(invoice_number='INV-2025-0007')

    def test_update_replaces_items(self, invoice, user):
        old_ids = set(invoice.items.values_list('id', flat=True))

        updated = update_invoice(
            invoice_id=invoice.id,
            user=user,
            items=[{'description': 'Polyester', 'quantity': 2, 'rate': Decimal('300.00')}],
        )

        assert set(updated.items.values_list('id', flat=True)).isdisjoint(old_ids)
        assert updated.items.count() == 1
        assert updated.subtotal == Decimal('600.00')
        assert updated.total == Decimal('604.50')

    def test_update_header_recomputes_figures(self, invoice, user):
        updated = update_invoice(invoice_id=invoice.id, user=user, brokerage_rate=Decimal('2.00'))

        assert updated.brokerage_amount == Decimal('30.00')
        assert InvoiceItem.objects.filter(invoice=invoice).count() == 1

    def test_update_due_days_moves_due_date(self, invoice, user):
        updated = update_invoice(invoice_id=invoice.id, user=user, due_days=10)

        assert updated.due_date == invoice.invoice_date + timedelta(days=10)

    def test_update_with_status_paid(self, invoice, user):
        updated = update_invoice(invoice_id=invoice.id, user=user, status='paid')

        assert updated.status == InvoiceStatus.PAID
        assert Transaction.objects.filter(invoice=invoice).count() == 1

    def test_update_to_same_seller_and_buyer(self, invoice, user, seller):
        with pytest.raises(SameSellerBuyerError):
            update_invoice(invoice_id=invoice.id, user=user, buyer=seller)

    def test_update_missing_invoice(self, user):
        with pytest.raises(InvoiceNotFoundError):
            update_invoice(invoice_id='00000000-0000-0000-0000-000000000000', user=user, notes='x')

    def test_update_notes(self, invoice):
        updated = update_invoice_notes(invoice_id=invoice.id, notes='Call before dispatch')

        assert updated.notes == 'Call before dispatch'

    def test_close_and_reopen(self, invoice, user):
        closed = set_invoice_closed(invoice_id=invoice.id, is_closed=True, user=user)
        assert closed.is_closed is True
        assert closed.status == InvoiceStatus.PENDING

        # Closing twice logs once
        set_invoice_closed(invoice_id=invoice.id, is_closed=True, user=user)
        assert Activity.objects.filter(type=ActivityType.INVOICE_CLOSED).count() == 1

        reopened = set_invoice_closed(invoice_id=invoice.id, is_closed=False, user=user)
        assert reopened.is_closed is False
        assert Activity.objects.filter(type=ActivityType.INVOICE_REOPENED).count() == 1


# =============================================================================
# Status / Payment Tests
# =============================================================================

@pytest.mark.django_db
class TestPayments:
    """Tests for payments.py service functions."""

    def test_mark_paid_creates_one_transaction(self, invoice, user):
        updated = update_invoice_status(invoice_id=invoice.id, status='paid', user=user)

        assert updated.status == InvoiceStatus.PAID
        assert updated.payment_date is not None
        txn = Transaction.objects.get(invoice=invoice)
        assert txn.amount == invoice.total
        assert txn.type == 'payment'
        assert txn.party == invoice.party
        assert Activity.objects.filter(type=ActivityType.PAYMENT_RECEIVED, invoice=invoice).exists()

    def test_mark_paid_twice_is_noop(self, invoice, user):
        update_invoice_status(invoice_id=invoice.id, status='paid', user=user)
        update_invoice_status(invoice_id=invoice.id, status='paid', user=user)

        assert Transaction.objects.filter(invoice=invoice).count() == 1

    def test_paid_is_terminal(self, invoice, user):
        update_invoice_status(invoice_id=invoice.id, status='paid', user=user)

        with pytest.raises(InvalidStatusTransitionError):
            update_invoice_status(invoice_id=invoice.id, status='pending', user=user)

    def test_cancel_and_restore(self, invoice, user):
        update_invoice_status(invoice_id=invoice.id, status='cancelled', user=user)
        restored = update_invoice_status(invoice_id=invoice.id, status='pending', user=user)

        assert restored.status == InvoiceStatus.PENDING
        assert restored.payment_date is None
        assert Activity.objects.filter(type=ActivityType.STATUS_CHANGED).count() == 2
        assert not Transaction.objects.exists()

    def test_invalid_status(self, invoice, user):
        with pytest.raises(InvalidStatusError):
            update_invoice_status(invoice_id=invoice.id, status='archived', user=user)

    def test_status_missing_invoice(self, user):
        with pytest.raises(InvoiceNotFoundError):
            update_invoice_status(invoice_id='00000000-0000-0000-0000-000000000000', status='paid', user=user)

    def test_payment_marks_pending_invoice_paid(self, invoice, user, seller):
        record_transaction(user=user, party=seller, amount=Decimal('1511.25'), invoice=invoice)

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.payment_date is not None
        assert Transaction.objects.filter(invoice=invoice).count() == 1

    def test_refund_keeps_status(self, invoice, user, buyer):
        record_transaction(user=user, party=buyer, amount=Decimal('100.00'), invoice=invoice, type='refund')

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.PENDING
        assert Activity.objects.filter(type=ActivityType.TRANSACTION_RECORDED).exists()

    def test_payment_on_cancelled_invoice_marks_paid(self, invoice, user, seller):
        update_invoice_status(invoice_id=invoice.id, status='cancelled', user=user)

        txn = record_transaction(user=user, party=seller, amount=invoice.total, invoice=invoice)

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.payment_date is not None
        assert list(Transaction.objects.filter(invoice=invoice)) == [txn]
        assert Activity.objects.filter(type=ActivityType.PAYMENT_RECEIVED, invoice=invoice).exists()

    def test_transaction_party_must_be_on_invoice(self, invoice, user):
        outsider = Party.objects.create(name='Outsider Co')

        with pytest.raises(TransactionValidationError):
            record_transaction(user=user, party=outsider, amount=Decimal('10.00'), invoice=invoice)

    def test_transaction_without_invoice(self, user, seller):
        txn = record_transaction(user=user, party=seller, amount=Decimal('250.00'), type='adjustment')

        assert txn.invoice is None
        assert txn.date is not None


# =============================================================================
# Deletion Tests
# =============================================================================

@pytest.mark.django_db
class TestInvoiceDeletion:
    """Tests for invoice_deletion.py."""

    def test_delete_removes_dependents(self, invoice, user):
        update_invoice_status(invoice_id=invoice.id, status='paid', user=user)

        delete_invoice(invoice_id=invoice.id, user=user)

        assert not Invoice.objects.filter(id=invoice.id).exists()
        assert not InvoiceItem.objects.filter(invoice_id=invoice.id).exists()
        assert not Transaction.objects.filter(invoice_id=invoice.id).exists()
        assert not Activity.objects.filter(invoice_id=invoice.id).exists()

    def test_delete_logs_activity_without_invoice_link(self, invoice, user, seller):
        number = invoice.invoice_number

        delete_invoice(invoice_id=invoice.id, user=user)

        activity = Activity.objects.get(type=ActivityType.INVOICE_DELETED)
        assert activity.invoice is None
        assert activity.party == seller
        assert number in activity.title

    def test_delete_missing_invoice(self, user):
        with pytest.raises(InvoiceNotFoundError):
            delete_invoice(invoice_id='00000000-0000-0000-0000-000000000000', user=user)

    def test_falls_back_to_raw_sql(self, invoice, user):
        with patch(
            'apps.invoices.services.invoice_deletion._delete_with_orm',
            side_effect=DatabaseError('constraint failed'),
        ):
            delete_invoice(invoice_id=invoice.id, user=user)

        assert not Invoice.objects.filter(id=invoice.id).exists()
        assert not InvoiceItem.objects.filter(invoice_id=invoice.id).exists()

    def test_both_paths_fail(self, invoice, user):
        with patch(
            'apps.invoices.services.invoice_deletion._delete_with_orm',
            side_effect=DatabaseError('constraint failed'),
        ), patch(
            'apps.invoices.services.invoice_deletion.raw_delete_invoice',
            return_value=False,
        ):
            with pytest.raises(InvoiceDeletionError):
                delete_invoice(invoice_id=invoice.id, user=user)

        assert Invoice.objects.filter(id=invoice.id).exists()

    def test_raw_delete(self, invoice, user):
        update_invoice_status(invoice_id=invoice.id, status='paid', user=user)

        assert raw_delete_invoice(invoice.id) is True
        assert not Invoice.objects.filter(id=invoice.id).exists()
        assert not Transaction.objects.exists()

    def test_raw_delete_missing_invoice(self, db):
        assert raw_delete_invoice('00000000-0000-0000-0000-000000000000') is False
