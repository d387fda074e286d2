"""
NewsAPI integration for news evidence.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .http_client import HttpClient, create_http_client

NEWS_API_URL = 'https://newsapi.org/v2/everything'
NEWS_API_LANGUAGES = ('bn', 'hi')


def clean_html(text: Optional[str]) -> str:
    """Strip markup from an article description."""
    if not text:
        return ''
    return BeautifulSoup(text, 'html.parser').get_text(' ', strip=True)


class NewsAPISource:
    """
    Search capability backed by the NewsAPI ``everything`` endpoint.

    Stance and confidence are left to the retriever, which infers them from
    the article text and the matched publisher.
    """

    name = 'newsapi'

    def __init__(self, api_key: str, http_client: Optional[HttpClient] = None, page_size: int = 10):
        self.api_key = api_key
        self.http_client = http_client or create_http_client()
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    def search(self, query: str, language: str, category: str,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {
            'q': query,
            'apiKey': self.api_key,
            'language': language if language in NEWS_API_LANGUAGES else 'en',
            'sortBy': 'relevancy',
            'pageSize': limit or self.page_size,
        }
        data = self.http_client.get_json(NEWS_API_URL, params=params)

        hits = []
        for article in data.get('articles', []) or []:
            url = article.get('url') or ''
            if not url:
                continue
            domain = urlparse(url).netloc.lower().replace('www.', '')
            hits.append({
                'source_name': (article.get('source') or {}).get('name') or domain,
                'publisher_name': domain,
                'source_url': url,
                'title': clean_html(article.get('title')),
                'snippet': clean_html(article.get('description')),
                'published_at': article.get('publishedAt'),
                'evidence_type': 'news',
            })
        return hits
