"""
Brokerage arithmetic.

All invoice money figures are derived here from the line items and the
brokerage inputs:

    subtotal          = sum(quantity * rate)
    brokerage_amount  = subtotal * brokerage_rate / 100
    brokerage_inr     = brokerage_amount * exchange_rate
    balance_brokerage = brokerage_inr - received_brokerage
    total             = subtotal + brokerage_amount

Every intermediate is rounded half-up to paise/cents.
"""

from decimal import Decimal, ROUND_HALF_UP

from apps.invoices.models import Currency

TWO_PLACES = Decimal('0.01')
INR_EXCHANGE_RATE = Decimal('1.00')


def quantize_money(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_amount(quantity, rate) -> Decimal:
    return quantize_money(Decimal(quantity) * Decimal(rate))


def effective_exchange_rate(currency: str, exchange_rate) -> Decimal:
    """INR invoices are always booked at 1.00."""
    if currency == Currency.INR or exchange_rate is None:
        return INR_EXCHANGE_RATE
    return quantize_money(exchange_rate)


def calculate_invoice_figures(
    items,
    *,
    brokerage_rate,
    exchange_rate,
    currency: str,
    received_brokerage=Decimal('0.00'),
) -> dict:
    """
    Compute the derived money fields of an invoice.

    Args:
        items: Iterable of mappings with ``quantity`` and ``rate``
        brokerage_rate: Percent of subtotal charged as brokerage
        exchange_rate: Units of INR per unit of ``currency``
        currency: ISO code; INR forces the exchange rate to 1.00
        received_brokerage: Brokerage already collected, in INR

    Returns:
        dict with exchange_rate, subtotal, brokerage_amount, brokerage_inr,
        received_brokerage, balance_brokerage and total (all Decimal)

    Example:
        >>> figures = calculate_invoice_figures(
        ...     [{'quantity': 10, 'rate': Decimal('150.00')}],
        ...     brokerage_rate=Decimal('0.75'),
        ...     exchange_rate=Decimal('1.00'),
        ...     currency='INR',
        ... )
        >>> figures['brokerage_amount']
        Decimal('11.25')
    """
    rate = effective_exchange_rate(currency, exchange_rate)
    received = quantize_money(received_brokerage or 0)

    subtotal = quantize_money(sum(
        (line_amount(item['quantity'], item['rate']) for item in items),
        Decimal('0.00'),
    ))
    brokerage_amount = quantize_money(subtotal * Decimal(brokerage_rate) / Decimal('100'))
    brokerage_inr = quantize_money(brokerage_amount * rate)

    return {
        'exchange_rate': rate,
        'subtotal': subtotal,
        'brokerage_amount': brokerage_amount,
        'brokerage_inr': brokerage_inr,
        'received_brokerage': received,
        'balance_brokerage': quantize_money(brokerage_inr - received),
        'total': quantize_money(subtotal + brokerage_amount),
    }
