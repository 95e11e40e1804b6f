import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.activities.models import Activity, ActivityType
from apps.invoices.services import update_invoice_status
from apps.parties.models import Party
from apps.parties.services import find_similar_parties, normalize_name


# =============================================================================
# List / Retrieve Tests
# =============================================================================

@pytest.mark.django_db
class TestPartyList:
    """Tests for GET /api/parties/"""

    def test_list_parties(self, authenticated_client, seller, buyer):
        response = authenticated_client.get(reverse('parties:party-list'))

        assert response.status_code == status.HTTP_200_OK
        # Ordered by name, not paginated
        assert [p['name'] for p in response.data] == ['Gupta Exports', 'Sharma Traders']

    def test_list_parties_search(self, authenticated_client, seller, buyer):
        response = authenticated_client.get(reverse('parties:party-list'), {'search': 'anita'})

        assert [p['name'] for p in response.data] == ['Gupta Exports']

    def test_list_parties_unauthenticated(self, api_client):
        response = api_client.get(reverse('parties:party-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_outstanding_counts_pending_invoices_as_seller(self, authenticated_client, make_invoice, seller, buyer, user):
        make_invoice()
        paid = make_invoice()
        update_invoice_status(invoice_id=paid.id, status='paid', user=user)

        response = authenticated_client.get(reverse('parties:party-detail', kwargs={'pk': seller.id}))

        assert response.status_code == status.HTTP_200_OK
        # One pending invoice of 1500.00 + 11.25 brokerage
        assert response.data['outstanding'] == Decimal('1511.25')
        assert response.data['last_transaction_date'] is not None

    def test_outstanding_zero_without_invoices(self, authenticated_client, buyer):
        response = authenticated_client.get(reverse('parties:party-detail', kwargs={'pk': buyer.id}))

        assert response.data['outstanding'] == Decimal('0.00')
        assert response.data['last_transaction_date'] is None

    def test_retrieve_missing_party(self, authenticated_client):
        url = reverse('parties:party-detail', kwargs={'pk': '00000000-0000-0000-0000-000000000000'})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Create / Update Tests
# =============================================================================

@pytest.mark.django_db
class TestPartyCreateUpdate:
    """Tests for POST/PATCH /api/parties/"""

    def test_create_party(self, authenticated_client):
        data = {
            'name': '  Mehta Spinning Mills ',
            'contact_person': 'Vikram Mehta',
            'phone': '+91 98765-43210',
            'gstin': '24abcde1234f1z5',
        }
        response = authenticated_client.post(reverse('parties:party-list'), data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Mehta Spinning Mills'
        assert response.data['gstin'] == '24ABCDE1234F1Z5'
        assert response.data['outstanding'] == Decimal('0.00')

    def test_create_party_logs_activity(self, authenticated_client, user):
        authenticated_client.post(reverse('parties:party-list'), {'name': 'Mehta Spinning Mills'})

        activity = Activity.objects.get(type=ActivityType.PARTY_ADDED)
        assert activity.user == user
        assert activity.party.name == 'Mehta Spinning Mills'

    def test_create_duplicate_name_case_insensitive(self, authenticated_client, seller):
        response = authenticated_client.post(reverse('parties:party-list'), {'name': 'SHARMA TRADERS'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Party.objects.count() == 1

    def test_create_party_invalid_phone(self, authenticated_client):
        response = authenticated_client.post(
            reverse('parties:party-list'),
            {'name': 'Mehta Spinning Mills', 'phone': '12ab'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'phone' in response.data

    def test_create_party_name_too_short(self, authenticated_client):
        response = authenticated_client.post(reverse('parties:party-list'), {'name': ' A '})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_party_requires_permission(self, viewer_client):
        response = viewer_client.post(reverse('parties:party-list'), {'name': 'Mehta Spinning Mills'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_update_party(self, authenticated_client, seller):
        url = reverse('parties:party-detail', kwargs={'pk': seller.id})
        response = authenticated_client.patch(url, {'contact_person': 'Suresh Sharma'})

        assert response.status_code == status.HTTP_200_OK
        seller.refresh_from_db()
        assert seller.contact_person == 'Suresh Sharma'
        assert Activity.objects.filter(type=ActivityType.PARTY_UPDATED, party=seller).exists()

    def test_rename_to_existing_name(self, authenticated_client, seller, buyer):
        url = reverse('parties:party-detail', kwargs={'pk': seller.id})
        response = authenticated_client.patch(url, {'name': 'gupta exports'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_keep_own_name(self, authenticated_client, seller):
        url = reverse('parties:party-detail', kwargs={'pk': seller.id})
        response = authenticated_client.put(url, {'name': 'Sharma Traders', 'phone': '9811122299'})

        assert response.status_code == status.HTTP_200_OK


# =============================================================================
# Delete Tests
# =============================================================================

@pytest.mark.django_db
class TestPartyDelete:
    """Tests for DELETE /api/parties/{id}/"""

    def test_delete_party_requires_permission(self, authenticated_client, seller):
        """The default role may not delete parties."""
        url = reverse('parties:party-detail', kwargs={'pk': seller.id})
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_unused_party(self, admin_client, seller):
        url = reverse('parties:party-detail', kwargs={'pk': seller.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Party.objects.filter(id=seller.id).exists()
        assert Activity.objects.filter(type=ActivityType.PARTY_DELETED).exists()

    def test_delete_party_with_invoices_conflict(self, admin_client, invoice, buyer):
        """A party referenced only as buyer is still protected."""
        url = reverse('parties:party-detail', kwargs={'pk': buyer.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Party has related records'
        assert Party.objects.filter(id=buyer.id).exists()

    def test_delete_missing_party(self, admin_client):
        url = reverse('parties:party-detail', kwargs={'pk': '00000000-0000-0000-0000-000000000000'})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Related Records Tests
# =============================================================================

@pytest.mark.django_db
class TestPartyRelated:
    """Tests for invoices / transactions / has-invoices actions"""

    def test_party_invoices_include_buyer_side(self, authenticated_client, invoice, buyer):
        url = reverse('parties:party-invoices', kwargs={'pk': buyer.id})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [i['invoice_number'] for i in response.data] == [invoice.invoice_number]

    def test_party_transactions(self, authenticated_client, invoice, seller, user):
        update_invoice_status(invoice_id=invoice.id, status='paid', user=user)

        url = reverse('parties:party-transactions', kwargs={'pk': seller.id})
        response = authenticated_client.get(url)

        assert len(response.data) == 1
        assert response.data[0]['amount'] == invoice.total

    def test_has_invoices(self, authenticated_client, invoice, seller):
        url = reverse('parties:party-has-invoices', kwargs={'pk': seller.id})
        response = authenticated_client.get(url)

        assert response.data == {'has_invoices': True, 'invoice_count': 1}

    def test_has_no_invoices(self, authenticated_client, seller):
        url = reverse('parties:party-has-invoices', kwargs={'pk': seller.id})
        response = authenticated_client.get(url)

        assert response.data == {'has_invoices': False, 'invoice_count': 0}


# =============================================================================
# Name Check Tests
# =============================================================================

@pytest.mark.django_db
class TestPartyNameCheck:
    """Tests for GET /api/parties/check-name/"""

    def test_name_available(self, authenticated_client, seller):
        response = authenticated_client.get(reverse('parties:party-check-name'), {'name': 'Kapoor Textiles'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['available'] is True
        assert response.data['message'] == 'Name is available'
        assert response.data['similar_names'] == []

    def test_name_taken_suggests_existing(self, authenticated_client, seller):
        response = authenticated_client.get(reverse('parties:party-check-name'), {'name': 'sharma traders'})

        assert response.data['available'] is False
        assert response.data['message'] == 'A party with this name already exists'
        assert response.data['similar_names'][0]['id'] == seller.id
        assert response.data['similar_names'][0]['similarity'] == 100

    def test_similar_name_available_with_suggestion(self, authenticated_client, seller):
        response = authenticated_client.get(reverse('parties:party-check-name'), {'name': 'Sharma Trader'})

        assert response.data['available'] is True
        assert [s['name'] for s in response.data['similar_names']] == ['Sharma Traders']

    def test_exclude_self(self, authenticated_client, seller):
        response = authenticated_client.get(
            reverse('parties:party-check-name'),
            {'name': 'Sharma Traders', 'exclude': str(seller.id)}
        )

        assert response.data['available'] is True
        assert response.data['similar_names'] == []

    def test_name_too_short(self, authenticated_client):
        response = authenticated_client.get(reverse('parties:party-check-name'), {'name': 'S'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestPartyMatching:
    """Tests for party_matching.py helpers."""

    def test_normalize_name(self):
        assert normalize_name('  Sharma   Traders Pvt. Ltd. ') == 'sharma traders pvt ltd'

    def test_find_similar_parties_ignores_punctuation(self, seller):
        matches = find_similar_parties(name='Sharma-Traders.')

        assert matches[0][0] == seller
