"""
Google Fact Check Tools integration.
Turns ClaimReview records into raw evidence hits.
"""

import logging
from typing import Any, Dict, List, Optional

from .credibility import confidence_from_rating, stance_from_rating
from .http_client import HttpClient, create_http_client

GOOGLE_FACTCHECK_API_URL = 'https://factchecktools.googleapis.com/v1alpha1/claims:search'


class GoogleFactCheckSource:
    """
    Search capability backed by the Google Fact Check Tools claims:search API.
    """

    name = 'google_factcheck'

    def __init__(self, api_key: str, http_client: Optional[HttpClient] = None, page_size: int = 10):
        self.api_key = api_key
        self.http_client = http_client or create_http_client()
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    def search(self, query: str, language: str, category: str,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {
            'query': query,
            'languageCode': language,
            'key': self.api_key,
            'pageSize': limit or self.page_size,
        }
        data = self.http_client.get_json(GOOGLE_FACTCHECK_API_URL, params=params)

        hits = []
        for claim_data in data.get('claims', []) or []:
            for review in claim_data.get('claimReview', []) or []:
                hits.append(self._review_to_hit(claim_data, review))

        self.logger.debug(f"Google Fact Check returned {len(hits)} reviews for '{query[:50]}'")
        return hits[:limit] if limit else hits

    def _review_to_hit(self, claim_data: Dict[str, Any], review: Dict[str, Any]) -> Dict[str, Any]:
        publisher = review.get('publisher') or {}
        rating = review.get('textualRating')
        return {
            'source_name': publisher.get('name') or 'Fact Checker',
            'publisher_name': publisher.get('name') or 'Unknown Fact Checker',
            'source_url': review.get('url') or '',
            'title': review.get('title') or '',
            'snippet': claim_data.get('text') or '',
            'published_at': review.get('reviewDate'),
            'evidence_type': 'claimreview',
            'stance': stance_from_rating(rating).value,
            'confidence': confidence_from_rating(rating),
            'fact_check_rating': rating,
            'credibility_indicators': self._review_indicators(review),
        }

    @staticmethod
    def _review_indicators(review: Dict[str, Any]) -> List[str]:
        indicators = []
        if (review.get('publisher') or {}).get('site'):
            indicators.append('verified_publisher')
        if str(review.get('url') or '').startswith('https://'):
            indicators.append('secure_source')
        if review.get('reviewDate'):
            indicators.append('dated_review')
        if review.get('textualRating'):
            indicators.append('structured_rating')
        return indicators
