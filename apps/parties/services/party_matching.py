"""Party name availability and similar-name suggestions using fuzzy matching."""

from typing import List, Tuple
import re

from fuzzywuzzy import fuzz

from ..models import Party


# Thresholds for fuzzy matching
SIMILAR_NAME_THRESHOLD = 85
MAX_SUGGESTIONS = 5


def normalize_name(text: str) -> str:
    """
    Normalize a party name for comparison.

    Lowercases, collapses whitespace and strips punctuation, so
    "Sharma Traders Pvt. Ltd." and "sharma  traders pvt ltd" compare equal.
    """
    text = text.lower().strip()
    text = re.sub(r'\s+', ' ', text)
    text = re.sub(r'[^\w\s-]', '', text)
    return text


def is_party_name_available(*, name: str, exclude_id=None) -> bool:
    """Case-insensitive exact-match check."""
    queryset = Party.objects.filter(name__iexact=name.strip())
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    return not queryset.exists()


def find_similar_parties(
    *,
    name: str,
    exclude_id=None,
    threshold: int = SIMILAR_NAME_THRESHOLD
) -> List[Tuple[Party, int]]:
    """
    Find parties whose names look like ``name``.

    Args:
        name: Candidate party name
        exclude_id: Party to ignore (when editing)
        threshold: Minimum similarity score (0-100)

    Returns:
        List of (party, similarity_score) tuples, best match first
    """
    name_norm = normalize_name(name)
    if not name_norm:
        return []

    queryset = Party.objects.all()
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)

    candidates = []
    for party in queryset.only('id', 'name'):
        score = fuzz.ratio(name_norm, normalize_name(party.name))
        if score >= threshold:
            candidates.append((party, score))

    candidates.sort(key=lambda x: x[1], reverse=True)
    return candidates[:MAX_SUGGESTIONS]
