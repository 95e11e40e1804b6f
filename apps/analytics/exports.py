"""
Report exports.

Turns the report dictionaries from :class:`AnalyticsQueries` into
downloadable CSV, XLSX (openpyxl) or printable HTML files. The HTML is
meant to be printed to PDF from the browser.
"""

import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal

from django.template.loader import render_to_string
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .analytics import AnalyticsQueries
from .exceptions import UnknownReportError

logger = logging.getLogger(__name__)

FILE_TYPES = ('csv', 'xlsx', 'pdf')

CONTENT_TYPES = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'pdf': 'text/html; charset=utf-8',
}
EXTENSIONS = {
    'csv': 'csv',
    'xlsx': 'xlsx',
    'pdf': 'html',
}


# (header, row key) per report
REPORT_COLUMNS = {
    'outstanding': [
        ('Invoice Number', 'invoice_number'),
        ('Party', 'party_name'),
        ('Buyer', 'buyer_name'),
        ('Invoice Date', 'invoice_date'),
        ('Due Date', 'due_date'),
        ('Currency', 'currency'),
        ('Amount', 'total'),
        ('Brokerage (INR)', 'brokerage_inr'),
        ('Days Overdue', 'days_overdue'),
    ],
    'closed': [
        ('Invoice Number', 'invoice_number'),
        ('Party', 'party_name'),
        ('Buyer', 'buyer_name'),
        ('Invoice Date', 'invoice_date'),
        ('Closed Date', 'closed_date'),
        ('Status', 'status'),
        ('Currency', 'currency'),
        ('Amount', 'total'),
        ('Brokerage (INR)', 'brokerage_inr'),
    ],
    'sales': [
        ('Period', 'label'),
        ('Invoices', 'invoice_count'),
        ('Gross Sales', 'gross_sales'),
        ('Brokerage (INR)', 'brokerage'),
        ('Received Brokerage', 'received_brokerage'),
        ('Net Sales', 'net_sales'),
    ],
}

REPORT_TITLES = {
    'outstanding': 'Outstanding Invoices',
    'closed': 'Closed Invoices',
    'sales': 'Sales Report',
}


def build_report(report, params):
    """
    Run a report query and return (rows, totals_row).

    ``params`` holds the validated query parameters of the report endpoint.
    """
    if report == 'outstanding':
        data = AnalyticsQueries.outstanding_report(params.get('date_from'), params.get('date_to'))
        rows = data['invoices']
        totals = {'invoice_number': 'Total', 'total': data['totals']['total_amount'],
                  'brokerage_inr': data['totals']['total_brokerage']}
    elif report == 'closed':
        data = AnalyticsQueries.closed_report(
            params.get('date_from'), params.get('date_to'), params.get('status', 'all')
        )
        rows = data['invoices']
        totals = {'invoice_number': 'Total', 'total': data['totals']['total_amount'],
                  'brokerage_inr': data['totals']['total_brokerage']}
    elif report == 'sales':
        data = AnalyticsQueries.sales_report(
            params.get('date_from'), params.get('date_to'), params.get('group_by', 'monthly')
        )
        rows = data['periods']
        totals = {'label': 'Total', **data['totals']}
    else:
        raise UnknownReportError(f"Unknown report: '{report}'. Valid options: {', '.join(REPORT_COLUMNS)}")

    return rows, totals


def _cell(value):
    if value is None:
        return ''
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


FORMULA_PREFIXES = ('=', '+', '-', '@', '\t', '\r')


def _spreadsheet_safe(values):
    """Quote text cells a spreadsheet would otherwise evaluate as formulas."""
    return [
        f"'{value}" if isinstance(value, str) and value.startswith(FORMULA_PREFIXES) else value
        for value in values
    ]


def _table(report, rows, totals):
    columns = REPORT_COLUMNS[report]
    header = [title for title, _ in columns]
    body = [[_cell(row.get(key)) for _, key in columns] for row in rows]
    footer = [_cell(totals.get(key)) for _, key in columns]
    return header, body, footer


def export_csv(report, rows, totals):
    header, body, footer = _table(report, rows, totals)

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow(header)
    writer.writerows(_spreadsheet_safe(values) for values in body)
    writer.writerow(_spreadsheet_safe(footer))
    return buffer.getvalue().encode('utf-8')


def export_xlsx(report, rows, totals):
    """Single-sheet workbook with a bold header row and sized columns."""
    header, body, footer = _table(report, rows, totals)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = REPORT_TITLES[report]

    sheet.append(header)
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for values in body:
        sheet.append(_spreadsheet_safe([float(v) if isinstance(v, Decimal) else v for v in values]))

    sheet.append(_spreadsheet_safe([float(v) if isinstance(v, Decimal) else v for v in footer]))
    for cell in sheet[sheet.max_row]:
        cell.font = Font(bold=True)

    for index, title in enumerate(header, start=1):
        width = max([len(str(title))] + [len(str(values[index - 1])) for values in body + [footer]])
        sheet.column_dimensions[get_column_letter(index)].width = min(width + 2, 50)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_html(report, rows, totals, params=None):
    header, body, footer = _table(report, rows, totals)

    from apps.system.models import SystemSettings

    html = render_to_string('analytics/report_print.html', {
        'title': REPORT_TITLES[report],
        'company_name': SystemSettings.load().company_name,
        'generated_at': timezone.localtime(),
        'params': params or {},
        'header': header,
        'rows': body,
        'footer': footer,
    })
    return html.encode('utf-8')


def export_report(report, file_type, params):
    """
    Build the export file for a report.

    Args:
        report: 'outstanding', 'closed' or 'sales'
        file_type: 'csv', 'xlsx' or 'pdf' (printable HTML)
        params: Validated report query parameters

    Returns:
        Tuple (filename, content_type, content); the file name is
        ``<report>_<YYYY-MM-DD>.<ext>``

    Raises:
        UnknownReportError: If report is not exportable
        InvalidDateRangeError / InvalidGroupingError: From the report query
    """
    rows, totals = build_report(report, params)

    if file_type == 'csv':
        content = export_csv(report, rows, totals)
    elif file_type == 'xlsx':
        content = export_xlsx(report, rows, totals)
    else:
        content = export_html(report, rows, totals, params)

    filename = f"{report}_{timezone.localdate().isoformat()}.{EXTENSIONS[file_type]}"
    logger.info("Exported %s report as %s (%d rows)", report, file_type, len(rows))
    return filename, CONTENT_TYPES[file_type], content
