"""
Tests for the shared HTTP client.
"""

import logging
from unittest.mock import Mock, patch

import pytest
import requests

from claimcheck.sources.http_client import HttpClient, build_retry_policy, create_http_client


class TestHttpClient:

    def setup_method(self):
        self.client = create_http_client(timeout=5, max_retries=2, language='bn')

    def teardown_method(self):
        self.client.close()

    def test_session_configuration(self):
        adapter = self.client.session.get_adapter("https://factchecktools.googleapis.com")

        assert adapter.max_retries.total == 2
        assert 503 in adapter.max_retries.status_forcelist
        assert self.client.session.headers['Accept-Language'] == 'bn;q=0.9,en;q=0.8'
        assert HttpClient().session.headers['Accept-Language'] == 'en'

    def test_retry_policy_only_for_idempotent_methods(self):
        policy = build_retry_policy(3, 0.5)

        assert 'POST' not in policy.allowed_methods
        assert policy.backoff_factor == 0.5

    def test_get_json(self):
        response = Mock()
        response.json.return_value = {'claims': []}
        with patch.object(self.client.session, 'get', return_value=response) as mock_get:
            payload = self.client.get_json('https://example.org/api', params={'q': 'rice'})

        assert payload == {'claims': []}
        mock_get.assert_called_once_with('https://example.org/api', params={'q': 'rice'}, headers=None, timeout=5)
        response.raise_for_status.assert_called_once()

    def test_get_json_rejects_non_object(self):
        response = Mock()
        response.json.return_value = ['not', 'an', 'object']
        with patch.object(self.client.session, 'get', return_value=response):
            with pytest.raises(ValueError):
                self.client.get_json('https://example.org/api')

    def test_timeout_is_logged_and_raised(self, caplog):
        with patch.object(self.client.session, 'get', side_effect=requests.Timeout("read timed out")):
            with caplog.at_level(logging.ERROR):
                with pytest.raises(requests.Timeout):
                    self.client.get('https://example.org/slow')

        assert "Request timeout for https://example.org/slow" in caplog.text

    def test_http_error_status_is_logged(self, caplog):
        response = Mock(status_code=429)
        error = requests.HTTPError("Too Many Requests", response=response)
        failing = Mock()
        failing.raise_for_status.side_effect = error
        with patch.object(self.client.session, 'get', return_value=failing):
            with caplog.at_level(logging.ERROR):
                with pytest.raises(requests.HTTPError):
                    self.client.get('https://example.org/limited')

        assert "HTTP error for https://example.org/limited: 429" in caplog.text

    def test_get_with_fallback(self):
        with patch.object(self.client.session, 'get', side_effect=requests.ConnectionError("refused")):
            assert self.client.get_with_fallback('https://example.org/down') is None

    def test_context_manager_closes_session(self):
        client = HttpClient()
        with patch.object(client.session, 'close') as mock_close:
            with client:
                pass
        mock_close.assert_called_once()
