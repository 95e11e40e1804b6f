"""
Analytics Module
=================

This module provides the query methods behind the dashboard, the financial
reports and the analytics pages. It aggregates invoices (and their parties)
into plain dictionaries ready for JSON responses and file exports.

Classes:
    AnalyticsQueries: Static methods for dashboard stats, reports and analytics.

Key Features:
    - Dashboard KPIs for a relative date range
    - Outstanding and closed invoice reports with totals
    - Sales report grouped by day/week/month/quarter with currency breakdown
    - Brokerage analytics per currency with a monthly trend
    - Top parties and their share of sales
    - Sales trends with year-over-year comparison

Example:
    Getting a monthly sales report::

        from apps.analytics.analytics import AnalyticsQueries

        report = AnalyticsQueries.sales_report(
            date_from=date(2025, 1, 1),
            date_to=date(2025, 3, 31),
            group_by='monthly',
        )
        for period in report['periods']:
            print(f"{period['label']}: {period['gross_sales']}")

Note:
    This module is read-only and doesn't modify any data. All methods
    are static and can be called without instantiation.
"""

from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum, Count, Max, Q, F, Value, DecimalField, DateField
from django.db.models.functions import (
    Coalesce,
    TruncDate,
    TruncDay,
    TruncWeek,
    TruncMonth,
    TruncQuarter,
    TruncYear,
    ExtractIsoYear,
    ExtractYear,
    ExtractWeek,
    ExtractMonth,
    ExtractQuarter,
)
from django.utils import timezone

from apps.invoices.models import Invoice, InvoiceStatus
from .exceptions import InvalidDateRangeError, InvalidGroupingError


ZERO = Decimal('0.00')

DATE_RANGES = ('today', 'yesterday', 'week', 'month', 'year')
SALES_GROUPINGS = ('daily', 'weekly', 'monthly', 'quarterly')
TREND_PERIODS = ('weekly', 'monthly', 'quarterly', 'yearly')
CLOSED_STATUSES = ('paid', 'cancelled', 'all')


def _money(field, **filter_kwargs):
    """Sum of a money field, 0.00 instead of NULL."""
    aggregate = Sum(field, filter=Q(**filter_kwargs)) if filter_kwargs else Sum(field)
    return Coalesce(
        aggregate,
        Value(ZERO),
        output_field=DecimalField(max_digits=16, decimal_places=2),
    )


def _round(value):
    return Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _percentage(part, whole):
    if not whole:
        return ZERO
    return _round(Decimal(part) / Decimal(whole) * 100)


def _check_range(date_from, date_to):
    if date_from and date_to and date_from > date_to:
        raise InvalidDateRangeError("date_from must be on or before date_to")


def _sales_period(day, group_by):
    """Return (id, label) of the sales report period containing ``day``."""
    if group_by == 'daily':
        return day.isoformat(), day.strftime('%b %d, %Y')
    if group_by == 'weekly':
        # Weeks start on Monday
        week_end = day + timedelta(days=6)
        return day.isoformat(), f"{day.strftime('%b %d')} - {week_end.strftime('%b %d, %Y')}"
    if group_by == 'monthly':
        return day.strftime('%Y-%m'), day.strftime('%B %Y')
    quarter = (day.month - 1) // 3 + 1
    return f"{day.year}-Q{quarter}", f"Q{quarter} {day.year}"


def _trend_period(day, period_type):
    if period_type == 'weekly':
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if period_type == 'monthly':
        return day.strftime('%Y-%m')
    if period_type == 'quarterly':
        return f"{day.year}-Q{(day.month - 1) // 3 + 1}"
    return str(day.year)


class AnalyticsQueries:
    """
    Aggregation queries for dashboard, report and analytics endpoints.

    Every method reads invoices only and returns plain dictionaries or
    lists of dictionaries. Money values are Decimals rounded to two places.

    Methods:
        resolve_date_range: Turn a named range into (date_from, date_to).
        dashboard_stats: KPI cards for the dashboard.
        outstanding_report: Pending invoices with days overdue.
        closed_report: Paid and/or cancelled invoices.
        sales_report: Sales grouped by period with currency breakdown.
        brokerage_analytics: Brokerage per currency and monthly trend.
        party_sales: Top selling parties and sales distribution.
        sales_trends: Sales per period with year-over-year comparison.

    Example:
        Dashboard data aggregation::

            stats = AnalyticsQueries.dashboard_stats('month')
            outstanding = AnalyticsQueries.outstanding_report()

    Note:
        Dates are compared against ``invoice_date`` unless stated otherwise;
        "today" is the local date in the configured TIME_ZONE.
    """

    @staticmethod
    def resolve_date_range(date_range='month', today=None):
        """
        Resolve a named dashboard range to concrete dates.

        Args:
            date_range (str): 'today', 'yesterday', 'week', 'month' or 'year'.
            today (date, optional): Reference date, defaults to the local date.

        Returns:
            tuple[date, date]: Inclusive (date_from, date_to). Weeks start on
            Monday; 'week', 'month' and 'year' run up to today.

        Raises:
            InvalidGroupingError: If date_range is not a known name.
        """
        today = today or timezone.localdate()

        if date_range == 'today':
            return today, today
        if date_range == 'yesterday':
            yesterday = today - timedelta(days=1)
            return yesterday, yesterday
        if date_range == 'week':
            return today - timedelta(days=today.weekday()), today
        if date_range == 'month':
            return today.replace(day=1), today
        if date_range == 'year':
            return today.replace(month=1, day=1), today

        raise InvalidGroupingError(
            f"Invalid date range: '{date_range}'. Valid options: {', '.join(DATE_RANGES)}"
        )

    @staticmethod
    def dashboard_stats(date_range='month'):
        """
        Calculate dashboard KPIs for a relative date range.

        Args:
            date_range (str): 'today', 'yesterday', 'week', 'month' or 'year'.
                Defaults to 'month'.

        Returns:
            dict: Dictionary containing:
                - date_range (str): The requested range name.
                - date_from, date_to (date): Resolved bounds.
                - total_sales (Decimal): Sum of totals of paid invoices.
                - total_invoices (int): All invoices in the range.
                - pending_invoices (int): Pending invoices in the range.
                - active_parties (int): Distinct sellers in the range.
                - outstanding_amount (Decimal): Sum of totals of pending invoices.
                - total_brokerage_inr (Decimal): Brokerage of non-cancelled invoices.
                - received_brokerage (Decimal): Brokerage already received.
                - pending_brokerage (Decimal): total_brokerage_inr - received_brokerage.

        Example:
            >>> AnalyticsQueries.dashboard_stats('week')['total_invoices']
            12
        """
        date_from, date_to = AnalyticsQueries.resolve_date_range(date_range)

        invoices = Invoice.objects.filter(invoice_date__gte=date_from, invoice_date__lte=date_to)
        not_cancelled = ~Q(status=InvoiceStatus.CANCELLED)

        stats = invoices.aggregate(
            total_sales=_money('total', status=InvoiceStatus.PAID),
            total_invoices=Count('id'),
            pending_invoices=Count('id', filter=Q(status=InvoiceStatus.PENDING)),
            active_parties=Count('party', distinct=True),
            outstanding_amount=_money('total', status=InvoiceStatus.PENDING),
        )
        brokerage = invoices.filter(not_cancelled).aggregate(
            total_brokerage_inr=_money('brokerage_inr'),
            received_brokerage=_money('received_brokerage'),
        )

        return {
            'date_range': date_range,
            'date_from': date_from,
            'date_to': date_to,
            **stats,
            **brokerage,
            'pending_brokerage': brokerage['total_brokerage_inr'] - brokerage['received_brokerage'],
        }

    @staticmethod
    def outstanding_report(date_from=None, date_to=None):
        """
        List pending invoices, soonest due first.

        Args:
            date_from (date, optional): Invoice date lower bound (inclusive).
            date_to (date, optional): Invoice date upper bound (inclusive).

        Returns:
            dict: Dictionary containing:
                - invoices (list[dict]): One row per invoice with id,
                  invoice_number, invoice_date, due_date, status, currency,
                  total, brokerage_inr, party_id, party_name, buyer_name and
                  days_overdue (0 when not yet due).
                - totals (dict): invoice_count, total_amount, total_brokerage.
                - date_from, date_to: The bounds used.

        Raises:
            InvalidDateRangeError: If date_from is after date_to.
        """
        _check_range(date_from, date_to)

        queryset = Invoice.objects.filter(status=InvoiceStatus.PENDING).select_related('party', 'buyer')
        if date_from:
            queryset = queryset.filter(invoice_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(invoice_date__lte=date_to)

        today = timezone.localdate()
        rows = []
        for invoice in queryset.order_by('due_date', 'invoice_number'):
            rows.append({
                'id': invoice.id,
                'invoice_number': invoice.invoice_number,
                'invoice_date': invoice.invoice_date,
                'due_date': invoice.due_date,
                'status': invoice.status,
                'currency': invoice.currency,
                'total': invoice.total,
                'brokerage_inr': invoice.brokerage_inr,
                'party_id': invoice.party_id,
                'party_name': invoice.party.name,
                'buyer_name': invoice.buyer.name,
                'days_overdue': max((today - invoice.due_date).days, 0),
            })

        return {
            'invoices': rows,
            'totals': {
                'invoice_count': len(rows),
                'total_amount': sum((row['total'] for row in rows), ZERO),
                'total_brokerage': sum((row['brokerage_inr'] for row in rows), ZERO),
            },
            'date_from': date_from,
            'date_to': date_to,
        }

    @staticmethod
    def closed_report(date_from=None, date_to=None, status='all'):
        """
        List paid and/or cancelled invoices, most recently closed first.

        Args:
            date_from (date, optional): Lower bound on the closing date.
            date_to (date, optional): Upper bound on the closing date.
            status (str): 'paid', 'cancelled' or 'all'. 'all' also includes
                pending bills that were flagged closed.

        Returns:
            dict: Dictionary containing:
                - invoices (list[dict]): Rows with id, invoice_number,
                  invoice_date, closed_date, status, is_closed, currency,
                  total, brokerage_inr, party_id, party_name, buyer_name.
                - totals (dict): invoice_count, total_amount, total_brokerage.
                - status, date_from, date_to: The filters used.

        Note:
            The closing date is the payment date when there is one and
            the invoice date otherwise.

        Raises:
            InvalidDateRangeError: If date_from is after date_to.
            InvalidGroupingError: If status is not a known value.
        """
        _check_range(date_from, date_to)
        if status not in CLOSED_STATUSES:
            raise InvalidGroupingError(
                f"Invalid status: '{status}'. Valid options: {', '.join(CLOSED_STATUSES)}"
            )

        if status == 'all':
            condition = Q(status__in=[InvoiceStatus.PAID, InvoiceStatus.CANCELLED]) | Q(is_closed=True)
        else:
            condition = Q(status=status)

        queryset = (
            Invoice.objects
            .filter(condition)
            .select_related('party', 'buyer')
            .annotate(closed_date=Coalesce(TruncDate('payment_date'), F('invoice_date'), output_field=DateField()))
        )
        if date_from:
            queryset = queryset.filter(closed_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(closed_date__lte=date_to)

        rows = [
            {
                'id': invoice.id,
                'invoice_number': invoice.invoice_number,
                'invoice_date': invoice.invoice_date,
                'closed_date': invoice.closed_date,
                'status': invoice.status,
                'is_closed': invoice.is_closed,
                'currency': invoice.currency,
                'total': invoice.total,
                'brokerage_inr': invoice.brokerage_inr,
                'party_id': invoice.party_id,
                'party_name': invoice.party.name,
                'buyer_name': invoice.buyer.name,
            }
            for invoice in queryset.order_by('-closed_date', '-invoice_number')
        ]

        return {
            'invoices': rows,
            'totals': {
                'invoice_count': len(rows),
                'total_amount': sum((row['total'] for row in rows), ZERO),
                'total_brokerage': sum((row['brokerage_inr'] for row in rows), ZERO),
            },
            'status': status,
            'date_from': date_from,
            'date_to': date_to,
        }

    @staticmethod
    def sales_report(date_from=None, date_to=None, group_by='monthly'):
        """
        Aggregate non-cancelled invoices into sales periods.

        Args:
            date_from (date, optional): Defaults to the first of the current month.
            date_to (date, optional): Defaults to the last day of the current month.
            group_by (str): 'daily', 'weekly', 'monthly' or 'quarterly'.

        Returns:
            dict: Dictionary containing:
                - periods (list[dict]): Sorted by id, each with id, label,
                  invoice_count, gross_sales (subtotals), brokerage
                  (brokerage_inr), received_brokerage, net_sales (totals)
                  and currencies, a mapping of currency code to
                  {invoice_count, gross_sales, brokerage}.
                - totals (dict): The same figures summed over all periods.
                - date_from, date_to, group_by: The parameters used.

        Raises:
            InvalidDateRangeError: If date_from is after date_to.
            InvalidGroupingError: If group_by is not a known value.

        Example:
            >>> report = AnalyticsQueries.sales_report(group_by='quarterly')
            >>> report['periods'][0]['label']
            'Q1 2025'
        """
        truncs = {
            'daily': TruncDay,
            'weekly': TruncWeek,
            'monthly': TruncMonth,
            'quarterly': TruncQuarter,
        }
        if group_by not in truncs:
            raise InvalidGroupingError(
                f"Invalid grouping: '{group_by}'. Valid options: {', '.join(SALES_GROUPINGS)}"
            )

        today = timezone.localdate()
        if date_from is None:
            date_from = today.replace(day=1)
        if date_to is None:
            next_month = (today.replace(day=28) + timedelta(days=4)).replace(day=1)
            date_to = next_month - timedelta(days=1)
        _check_range(date_from, date_to)

        rows = (
            Invoice.objects
            .filter(invoice_date__gte=date_from, invoice_date__lte=date_to)
            .exclude(status=InvoiceStatus.CANCELLED)
            .annotate(period_start=truncs[group_by]('invoice_date', output_field=DateField()))
            .values('period_start', 'currency')
            .annotate(
                invoice_count=Count('id'),
                gross_sales=_money('subtotal'),
                brokerage=_money('brokerage_inr'),
                received_brokerage=_money('received_brokerage'),
                net_sales=_money('total'),
            )
            .order_by('period_start', 'currency')
        )

        periods = OrderedDict()
        for row in rows:
            period_id, label = _sales_period(row['period_start'], group_by)
            period = periods.setdefault(period_id, {
                'id': period_id,
                'label': label,
                'invoice_count': 0,
                'gross_sales': ZERO,
                'brokerage': ZERO,
                'received_brokerage': ZERO,
                'net_sales': ZERO,
                'currencies': {},
            })
            period['invoice_count'] += row['invoice_count']
            period['gross_sales'] += row['gross_sales']
            period['brokerage'] += row['brokerage']
            period['received_brokerage'] += row['received_brokerage']
            period['net_sales'] += row['net_sales']
            period['currencies'][row['currency']] = {
                'invoice_count': row['invoice_count'],
                'gross_sales': row['gross_sales'],
                'brokerage': row['brokerage'],
            }

        period_list = sorted(periods.values(), key=lambda p: p['id'])
        totals = {
            'invoice_count': sum(p['invoice_count'] for p in period_list),
            'gross_sales': sum((p['gross_sales'] for p in period_list), ZERO),
            'brokerage': sum((p['brokerage'] for p in period_list), ZERO),
            'received_brokerage': sum((p['received_brokerage'] for p in period_list), ZERO),
            'net_sales': sum((p['net_sales'] for p in period_list), ZERO),
        }

        return {
            'periods': period_list,
            'totals': totals,
            'date_from': date_from,
            'date_to': date_to,
            'group_by': group_by,
        }

    @staticmethod
    def brokerage_analytics(date_from=None, date_to=None):
        """
        Brokerage earned per currency and per month.

        Args:
            date_from (date, optional): Defaults to one year before today.
            date_to (date, optional): Defaults to today.

        Returns:
            dict: Dictionary containing:
                - by_currency (list[dict]): currency, invoice_count,
                  total_sales, total_brokerage_inr, total_received,
                  total_pending, brokerage_percentage; largest sales first.
                - totals (dict): The same figures across currencies, with
                  brokerage_percentage computed on the summed values.
                - monthly_trend (list[dict]): month ('YYYY-MM'),
                  brokerage_inr, received_brokerage, sales.
                - date_from, date_to: The bounds used.

        Note:
            brokerage_percentage = brokerage_inr / sales * 100, where sales
            is the sum of invoice totals. Cancelled invoices are excluded.
        """
        today = timezone.localdate()
        date_from = date_from or today - timedelta(days=365)
        date_to = date_to or today
        _check_range(date_from, date_to)

        invoices = (
            Invoice.objects
            .filter(invoice_date__gte=date_from, invoice_date__lte=date_to)
            .exclude(status=InvoiceStatus.CANCELLED)
        )
        figures = dict(
            invoice_count=Count('id'),
            total_sales=_money('total'),
            total_brokerage_inr=_money('brokerage_inr'),
            total_received=_money('received_brokerage'),
        )

        def finish(row):
            row['total_pending'] = row['total_brokerage_inr'] - row['total_received']
            row['brokerage_percentage'] = _percentage(row['total_brokerage_inr'], row['total_sales'])
            return row

        by_currency = [
            finish(dict(row))
            for row in invoices.values('currency').annotate(**figures).order_by('-total_sales', 'currency')
        ]
        totals = finish(invoices.aggregate(**figures))

        monthly_trend = [
            {
                'month': row['month'].strftime('%Y-%m'),
                'brokerage_inr': row['brokerage_inr'],
                'received_brokerage': row['received_brokerage'],
                'sales': row['sales'],
            }
            for row in (
                invoices
                .annotate(month=TruncMonth('invoice_date', output_field=DateField()))
                .values('month')
                .annotate(
                    brokerage_inr=_money('brokerage_inr'),
                    received_brokerage=_money('received_brokerage'),
                    sales=_money('total'),
                )
                .order_by('month')
            )
        ]

        return {
            'by_currency': by_currency,
            'totals': totals,
            'monthly_trend': monthly_trend,
            'date_from': date_from,
            'date_to': date_to,
        }

    @staticmethod
    def party_sales(date_from=None, date_to=None, limit=10):
        """
        Rank selling parties by sales (sum of invoice subtotals).

        Returns:
            dict: top_parties (id, name, invoice_count, total_sales,
            last_invoice_date, currencies) and sales_distribution (id, name,
            sales_amount, contribution_percentage), both limited to
            ``limit`` rows, plus date_from and date_to.
        """
        today = timezone.localdate()
        date_from = date_from or today - timedelta(days=365)
        date_to = date_to or today
        _check_range(date_from, date_to)

        invoices = (
            Invoice.objects
            .filter(invoice_date__gte=date_from, invoice_date__lte=date_to)
            .exclude(status=InvoiceStatus.CANCELLED)
        )
        overall = invoices.aggregate(amount=_money('subtotal'))['amount']

        ranked = list(
            invoices
            .values('party_id', 'party__name')
            .annotate(
                invoice_count=Count('id'),
                total_sales=_money('subtotal'),
                last_invoice_date=Max('invoice_date'),
            )
            .order_by('-total_sales', 'party__name')[:limit]
        )

        currencies = {}
        for party_id, currency in (
            invoices
            .filter(party_id__in=[row['party_id'] for row in ranked])
            .order_by()
            .values_list('party_id', 'currency')
            .distinct()
        ):
            currencies.setdefault(party_id, set()).add(currency)

        top_parties = [
            {
                'id': row['party_id'],
                'name': row['party__name'],
                'invoice_count': row['invoice_count'],
                'total_sales': row['total_sales'],
                'last_invoice_date': row['last_invoice_date'],
                'currencies': sorted(currencies.get(row['party_id'], ())),
            }
            for row in ranked
        ]
        sales_distribution = [
            {
                'id': row['party_id'],
                'name': row['party__name'],
                'sales_amount': row['total_sales'],
                'contribution_percentage': _percentage(row['total_sales'], overall),
            }
            for row in ranked
        ]

        return {
            'top_parties': top_parties,
            'sales_distribution': sales_distribution,
            'date_from': date_from,
            'date_to': date_to,
        }

    @staticmethod
    def sales_trends(date_from=None, date_to=None, period_type='monthly'):
        """
        Sales per period with a per-currency breakdown and a year-over-year view.

        Args:
            date_from (date, optional): Defaults to one year before today.
            date_to (date, optional): Defaults to today.
            period_type (str): 'weekly', 'monthly', 'quarterly' or 'yearly'.

        Returns:
            dict: Dictionary containing:
                - data (list[dict]): period label ('2025-W07', '2025-02',
                  '2025-Q1' or '2025'), total_sales (subtotals),
                  total_brokerage, received_brokerage, invoice_count and
                  currencies mapping code to {sales, brokerage, received}.
                - comparison (dict): period_type ('week', 'month',
                  'quarter' or 'year') and data, a list of {period_num,
                  yearly_sales} where yearly_sales maps year to the summed
                  invoice totals of that period number.
                - period_type, date_from, date_to: The parameters used.

        Raises:
            InvalidGroupingError: If period_type is not a known value.
        """
        truncs = {
            'weekly': (TruncWeek, ExtractWeek, ExtractIsoYear, 'week'),
            'monthly': (TruncMonth, ExtractMonth, ExtractYear, 'month'),
            'quarterly': (TruncQuarter, ExtractQuarter, ExtractYear, 'quarter'),
            'yearly': (TruncYear, ExtractYear, ExtractYear, 'year'),
        }
        if period_type not in truncs:
            raise InvalidGroupingError(
                f"Invalid period type: '{period_type}'. Valid options: {', '.join(TREND_PERIODS)}"
            )
        trunc, extract_num, extract_year, compare_label = truncs[period_type]

        today = timezone.localdate()
        date_from = date_from or today - timedelta(days=365)
        date_to = date_to or today
        _check_range(date_from, date_to)

        invoices = (
            Invoice.objects
            .filter(invoice_date__gte=date_from, invoice_date__lte=date_to)
            .exclude(status=InvoiceStatus.CANCELLED)
        )

        rows = (
            invoices
            .annotate(period_start=trunc('invoice_date', output_field=DateField()))
            .values('period_start', 'currency')
            .annotate(
                invoice_count=Count('id'),
                sales=_money('subtotal'),
                brokerage=_money('brokerage_inr'),
                received=_money('received_brokerage'),
            )
            .order_by('period_start', 'currency')
        )

        periods = OrderedDict()
        for row in rows:
            label = _trend_period(row['period_start'], period_type)
            period = periods.setdefault(label, {
                'period': label,
                'total_sales': ZERO,
                'total_brokerage': ZERO,
                'received_brokerage': ZERO,
                'invoice_count': 0,
                'currencies': {},
            })
            period['total_sales'] += row['sales']
            period['total_brokerage'] += row['brokerage']
            period['received_brokerage'] += row['received']
            period['invoice_count'] += row['invoice_count']
            period['currencies'][row['currency']] = {
                'sales': row['sales'],
                'brokerage': row['brokerage'],
                'received': row['received'],
            }

        comparison = OrderedDict()
        for row in (
            invoices
            .annotate(year=extract_year('invoice_date'), period_num=extract_num('invoice_date'))
            .values('year', 'period_num')
            .annotate(total=_money('total'))
            .order_by('period_num', 'year')
        ):
            entry = comparison.setdefault(row['period_num'], {
                'period_num': row['period_num'],
                'yearly_sales': {},
            })
            entry['yearly_sales'][str(row['year'])] = row['total']

        return {
            'data': list(periods.values()),
            'comparison': {
                'period_type': compare_label,
                'data': list(comparison.values()),
            },
            'period_type': period_type,
            'date_from': date_from,
            'date_to': date_to,
        }
