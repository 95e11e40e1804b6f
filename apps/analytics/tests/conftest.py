import pytest
from datetime import date
from decimal import Decimal
from apps.invoices.services import update_invoice_status


# =============================================================================
# Invoices
# =============================================================================

@pytest.fixture
def q1_invoices(make_invoice, user, seller, buyer):
    """
    Four invoices in Q1 2025.

    jan_inr       Sharma -> Gupta, pending, 10 x 150.00 INR at 0.75%
    feb_usd       Sharma -> Gupta, paid, 2 x 500.00 USD at 1% (rate 80)
    feb_cancelled Sharma -> Gupta, cancelled, 1 x 1000.00 INR
    mar_inr       Gupta -> Sharma, pending, 4 x 250.00 INR, 5.00 brokerage received
    """
    jan_inr = make_invoice(invoice_date=date(2025, 1, 15))
    feb_usd = make_invoice(
        invoice_date=date(2025, 2, 10),
        currency='USD',
        exchange_rate=Decimal('80.00'),
        brokerage_rate=Decimal('1.00'),
        items=[{'description': 'Yarn', 'quantity': 2, 'rate': Decimal('500.00')}],
    )
    update_invoice_status(invoice_id=feb_usd.id, status='paid', user=user)
    feb_cancelled = make_invoice(
        invoice_date=date(2025, 2, 20),
        items=[{'description': 'Samples', 'quantity': 1, 'rate': Decimal('1000.00')}],
    )
    update_invoice_status(invoice_id=feb_cancelled.id, status='cancelled', user=user)
    mar_inr = make_invoice(
        party=buyer,
        buyer=seller,
        invoice_date=date(2025, 3, 5),
        received_brokerage=Decimal('5.00'),
        items=[{'description': 'Denim', 'quantity': 4, 'rate': Decimal('250.00')}],
    )

    return {
        'jan_inr': jan_inr,
        'feb_usd': feb_usd,
        'feb_cancelled': feb_cancelled,
        'mar_inr': mar_inr,
    }


@pytest.fixture
def q1_params():
    return {'date_from': date(2025, 1, 1), 'date_to': date(2025, 3, 31)}
