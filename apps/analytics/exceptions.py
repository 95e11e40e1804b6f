"""
Domain exceptions for analytics app.

This module defines domain-specific exceptions that are raised by the
analytics query and export layers. These exceptions represent invalid
report parameters, separate from HTTP concerns.

Exception Hierarchy:
    AnalyticsServiceError (base)
    ├── InvalidDateRangeError
    ├── InvalidGroupingError
    └── UnknownReportError

Usage:
    from apps.analytics.exceptions import InvalidGroupingError

    if group_by not in SALES_GROUPINGS:
        raise InvalidGroupingError(f"Invalid grouping: {group_by}")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics service errors.

    All domain-specific exceptions in the analytics app inherit from this
    class, making it easy to catch all analytics errors in views:

        try:
            data = AnalyticsQueries.sales_report(group_by='hourly')
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidDateRangeError(AnalyticsServiceError):
    """
    Raised when date range is invalid.

    Typically when date_from is after date_to.

    Example:
        raise InvalidDateRangeError("date_from must be on or before date_to")
    """

    pass


class InvalidGroupingError(AnalyticsServiceError):
    """
    Raised when a grouping, period type, named range or status filter is
    not one of the supported values.

    Example:
        raise InvalidGroupingError(
            "Invalid grouping: 'hourly'. Valid options: daily, weekly, monthly, quarterly"
        )
    """

    pass


class UnknownReportError(AnalyticsServiceError):
    """
    Raised when an export is requested for a report that does not exist.

    Valid reports are: outstanding, closed, sales.
    """

    pass
