"""
Session-backed HTTP access for the API evidence sources.

Retries on connection errors and transient status codes come from a urllib3
``Retry`` policy mounted on the session; failures are logged once here and
re-raised for the retriever to classify.
"""

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..constants import ConfigDefaults

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; ClaimCheck/1.0)"


def build_retry_policy(max_retries: int, backoff_factor: float) -> Retry:
    """Retry policy for idempotent requests."""
    return Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=list(RETRY_STATUS_CODES),
        allowed_methods=["HEAD", "GET", "OPTIONS"]
    )


def accept_language(language: str) -> str:
    if language == 'en':
        return 'en'
    return f'{language};q=0.9,en;q=0.8'


class HttpClient:
    """
    HTTP client shared by the Google Fact Check and NewsAPI sources.
    """

    def __init__(
        self,
        timeout: int = ConfigDefaults.REQUEST_TIMEOUT,
        max_retries: int = ConfigDefaults.MAX_RETRIES,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
        language: str = "en"
    ):
        """
        Args:
            timeout: Per-request timeout in seconds
            max_retries: Retries for connection errors and retryable status codes
            backoff_factor: Backoff multiplier between retries
            user_agent: User agent string for requests
            language: Preferred response language
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

        self.session = requests.Session()
        adapter = HTTPAdapter(max_retries=build_retry_policy(max_retries, backoff_factor))
        for prefix in ("http://", "https://"):
            self.session.mount(prefix, adapter)

        self.session.headers.update({
            'User-Agent': user_agent,
            'Accept': 'application/json, text/html;q=0.9, */*;q=0.8',
            'Accept-Language': accept_language(language),
        })

    def _log_failure(self, url: str, error: requests.RequestException) -> None:
        if isinstance(error, requests.Timeout):
            self.logger.error(f"Request timeout for {url}: {error}")
        elif isinstance(error, requests.ConnectionError):
            self.logger.error(f"Connection error for {url}: {error}")
        elif isinstance(error, requests.HTTPError):
            status = error.response.status_code if error.response is not None else 'unknown'
            self.logger.error(f"HTTP error for {url}: {status}")
        else:
            self.logger.error(f"Request failed for {url}: {error}")

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None
    ) -> requests.Response:
        """
        GET with the session's retry policy.

        Raises:
            requests.RequestException: When the request still fails after retries
        """
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=timeout or self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self._log_failure(url, e)
            raise
        return response

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None
    ) -> Dict[str, Any]:
        """GET a JSON object; raises ``ValueError`` when the body is not one."""
        payload = self.get(url, params=params, headers=headers, timeout=timeout).json()
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object from {url}, got {type(payload).__name__}")
        return payload

    def get_with_fallback(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None
    ) -> Optional[requests.Response]:
        """GET that returns None instead of raising."""
        try:
            return self.get(url, params=params, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            self.logger.warning(f"Request failed for {url}, returning None: {e}")
            return None

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_http_client(
    timeout: int = ConfigDefaults.REQUEST_TIMEOUT,
    max_retries: int = ConfigDefaults.MAX_RETRIES,
    language: str = "en"
) -> HttpClient:
    """Factory for an HTTP client with the standard configuration."""
    return HttpClient(timeout=timeout, max_retries=max_retries, language=language)
