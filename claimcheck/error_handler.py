"""
Error handling utilities for the claim verification pipeline.

Provides standardized error classification shared by the evidence retriever,
the reasoning client and the pipeline API.
"""

import asyncio
import json
from enum import Enum
from typing import Optional

import requests


class ErrorCategory(Enum):
    """Enumeration of different error categories for better error handling."""
    NETWORK_ERROR = "network_error"
    AUTHENTICATION_ERROR = "authentication_error"
    QUOTA_ERROR = "quota_error"
    TIMEOUT_ERROR = "timeout_error"
    PARSING_ERROR = "parsing_error"
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN_ERROR = "unknown_error"


class VerificationError(Exception):
    """Custom exception for verification errors with categorization."""

    def __init__(self, message: str, category: ErrorCategory, recoverable: bool = False, retry_delay: Optional[int] = None):
        super().__init__(message)
        self.category = category
        self.recoverable = recoverable
        self.retry_delay = retry_delay
        self.message = message

    def __str__(self):
        return f"[{self.category.value}] {self.message}"


class ReasoningUnavailableError(VerificationError):
    """Raised when the external reasoning capability has no credential."""

    def __init__(self, message: str = "No reasoning capability configured"):
        super().__init__(message, ErrorCategory.CONFIGURATION_ERROR, recoverable=False)


def classify_error(error: Exception, context: str = "") -> VerificationError:
    """
    Classify an exception into a specific error category with recovery information.

    Args:
        error: The exception to classify
        context: Additional context about where the error occurred

    Returns:
        VerificationError with appropriate category and recovery information
    """
    if isinstance(error, VerificationError):
        return error

    # Type-based classification first
    if isinstance(error, (asyncio.TimeoutError, requests.Timeout)):
        return VerificationError(
            f"Timeout in {context}: {error}",
            ErrorCategory.TIMEOUT_ERROR,
            recoverable=True,
            retry_delay=5
        )

    if isinstance(error, requests.ConnectionError):
        return VerificationError(
            f"Network error in {context}: {error}",
            ErrorCategory.NETWORK_ERROR,
            recoverable=True,
            retry_delay=2
        )

    if isinstance(error, json.JSONDecodeError):
        return VerificationError(
            f"Parsing error in {context}: {error}",
            ErrorCategory.PARSING_ERROR,
            recoverable=False
        )

    error_str = str(error).lower()

    # Network-related errors
    if any(pattern in error_str for pattern in ['connection', 'timeout', 'timed out', 'network', 'dns', 'ssl']):
        if 'timeout' in error_str or 'timed out' in error_str:
            return VerificationError(
                f"Network timeout in {context}: {error}",
                ErrorCategory.TIMEOUT_ERROR,
                recoverable=True,
                retry_delay=5
            )
        return VerificationError(
            f"Network error in {context}: {error}",
            ErrorCategory.NETWORK_ERROR,
            recoverable=True,
            retry_delay=2
        )

    # Authentication errors
    if any(pattern in error_str for pattern in ['unauthorized', 'forbidden', 'authentication', 'api key', 'credentials', '401', '403']):
        return VerificationError(
            f"Authentication error in {context}: {error}",
            ErrorCategory.AUTHENTICATION_ERROR,
            recoverable=False
        )

    # Quota/rate limit errors
    if any(pattern in error_str for pattern in ['quota', 'rate limit', 'too many requests', '429']):
        return VerificationError(
            f"Quota exceeded in {context}: {error}",
            ErrorCategory.QUOTA_ERROR,
            recoverable=True,
            retry_delay=60
        )

    # Malformed payloads
    if any(pattern in error_str for pattern in ['json', 'decode', 'malformed', 'parse']):
        return VerificationError(
            f"Parsing error in {context}: {error}",
            ErrorCategory.PARSING_ERROR,
            recoverable=False
        )

    # Configuration errors
    if any(pattern in error_str for pattern in ['configuration', 'config', 'environment']):
        return VerificationError(
            f"Configuration error in {context}: {error}",
            ErrorCategory.CONFIGURATION_ERROR,
            recoverable=False
        )

    if isinstance(error, (ValueError, TypeError, KeyError)):
        return VerificationError(
            f"Validation error in {context}: {error}",
            ErrorCategory.VALIDATION_ERROR,
            recoverable=False
        )

    # Default to unknown error
    return VerificationError(
        f"Unknown error in {context}: {error}",
        ErrorCategory.UNKNOWN_ERROR,
        recoverable=False
    )
