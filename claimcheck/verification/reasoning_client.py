"""
External reasoning capability backed by an OpenAI-compatible chat API.
"""

import json
import logging
from typing import Any, Dict, Optional, Protocol

from openai import OpenAI

from ..constants import ConfigDefaults, ErrorMessages
from ..error_handler import ErrorCategory, ReasoningUnavailableError, VerificationError


class ReasoningCapability(Protocol):
    """Anything that turns a system and user prompt into a JSON object."""

    def complete(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        ...


class OpenAIReasoningClient:
    """
    Reasoning capability using the chat completions endpoint in JSON mode.

    Works against OpenAI or any compatible server via ``base_url``.
    """

    def __init__(self,
                 api_key: Optional[str] = None,
                 base_url: Optional[str] = None,
                 model: str = ConfigDefaults.REASONING_MODEL,
                 temperature: float = 0.05,
                 max_tokens: int = 3000,
                 timeout: float = ConfigDefaults.REASONING_TIMEOUT,
                 client: Optional[Any] = None):
        if client is None and not api_key:
            raise ReasoningUnavailableError(ErrorMessages.REASONING_UNAVAILABLE)

        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.logger = logging.getLogger(__name__)

    def complete(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise VerificationError(ErrorMessages.MALFORMED_REASONING.format(details="empty response"),
                                    ErrorCategory.PARSING_ERROR)
        try:
            result = json.loads(content)
        except json.JSONDecodeError as e:
            raise VerificationError(ErrorMessages.MALFORMED_REASONING.format(details=e),
                                    ErrorCategory.PARSING_ERROR) from e

        if not isinstance(result, dict):
            raise VerificationError(ErrorMessages.MALFORMED_REASONING.format(details="expected a JSON object"),
                                    ErrorCategory.PARSING_ERROR)

        self.logger.debug(f"Reasoning response with verdict {result.get('verdict')!r} from {self.model}")
        return result


def create_reasoning_client(api_key: Optional[str], base_url: Optional[str] = None,
                            model: str = ConfigDefaults.REASONING_MODEL,
                            timeout: float = ConfigDefaults.REASONING_TIMEOUT) -> Optional[OpenAIReasoningClient]:
    """Build a client when a credential is configured, otherwise None."""
    if not api_key:
        return None
    return OpenAIReasoningClient(api_key=api_key, base_url=base_url, model=model, timeout=timeout)
