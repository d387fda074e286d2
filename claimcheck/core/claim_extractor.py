"""
Claim extraction functionality for the verification pipeline.
Identifies checkable assertions in free text and tags them as factual,
opinion or prediction claims.
"""

import asyncio
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from .models import ClaimType, ExtractedClaim, ExtractionResult
from ..constants import LogMessages

EXTRACTION_SYSTEM_PROMPT = (
    "You extract checkable factual claims from text. Respond with a JSON object "
    "{\"claims\": [{\"text\": str, \"confidence\": number between 0 and 1, "
    "\"type\": \"factual\" | \"opinion\" | \"prediction\"}]} listing at most 5 claims "
    "in the order they appear."
)


class ClaimExtractor:
    """
    Extracts candidate claims from text using indicator patterns.

    Each sentence starts at a base confidence that factual, opinion,
    prediction and specificity indicators adjust; the result is clamped to
    [0.3, 0.95]. Optionally delegates to a reasoning capability first.
    """

    BASE_CONFIDENCE = 0.6
    MIN_CONFIDENCE = 0.3
    MAX_CONFIDENCE = 0.95
    MIN_SEGMENT_LENGTH = 15   # Segments must be longer than this
    MIN_SENTENCE_LENGTH = 20  # Shorter sentences are skipped
    MAX_SENTENCES = 8
    MAX_CLAIMS = 5

    def __init__(self, reasoning_client: Optional[Any] = None, use_advanced_nlp: bool = False,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.reasoning_client = reasoning_client
        self.use_advanced_nlp = use_advanced_nlp
        self.executor = executor
        self.logger = logging.getLogger(__name__)

        self.sentence_splitter = re.compile(r'[.!?]+')

        # Attribution, change, percentage, announcement and state-of-affairs phrasing
        self.factual_patterns = [
            re.compile(r'\b(according to|reports show|data indicates|studies reveal|statistics show)\b', re.IGNORECASE),
            re.compile(r'\b(increased by|decreased by|rose to|fell to)\b', re.IGNORECASE),
            re.compile(r'\b\d+(?:\.\d+)?%'),
            re.compile(r'\b(announced|confirmed|stated|declared)\b', re.IGNORECASE),
            re.compile(r'\b(will be|has been|was|is expected to)\b', re.IGNORECASE),
        ]
        self.opinion_pattern = re.compile(r'\b(believe|think|feel|opinion|should|must|ought)\b', re.IGNORECASE)
        self.prediction_pattern = re.compile(r'\b(will|would|might|could|may|predict|forecast)\b', re.IGNORECASE)
        self.specificity_pattern = re.compile(r'\b(\d+|statistics|data|research|study)\b', re.IGNORECASE)

    def extract(self, text: str, language: str = 'en') -> ExtractionResult:
        """
        Extract up to five claims from text, in source order.

        Never raises: failures fall back to the first sentence (or the first
        100 characters) at confidence 0.4 with method ``fallback``.
        """
        start_time = time.time()
        if not text or not text.strip():
            return self._empty_result(language, start_time)

        reasoned = None
        if self._advanced_enabled():
            reasoned = self._extract_with_reasoning(text, language)
        return self._assemble(text, language, start_time, reasoned)

    async def extract_async(self, text: str, language: str = 'en') -> ExtractionResult:
        """
        Same as ``extract`` for use inside a running event loop.

        A blocking reasoning capability runs in the executor; a coroutine
        capability is awaited.
        """
        start_time = time.time()
        if not text or not text.strip():
            return self._empty_result(language, start_time)

        reasoned = None
        if self._advanced_enabled():
            reasoned = await self._extract_with_reasoning_async(text, language)
        return self._assemble(text, language, start_time, reasoned)

    def _advanced_enabled(self) -> bool:
        return self.use_advanced_nlp and self.reasoning_client is not None

    @staticmethod
    def _empty_result(language: str, start_time: float) -> ExtractionResult:
        return ExtractionResult(claims=[], processing_time=time.time() - start_time,
                                method='rule_based', language=language)

    def _assemble(self, text: str, language: str, start_time: float,
                  reasoned: Optional[List[ExtractedClaim]]) -> ExtractionResult:
        try:
            method = 'advanced_nlp' if reasoned else 'rule_based'
            claims = reasoned or self._extract_with_rules(text)

            result = ExtractionResult(
                claims=claims[:self.MAX_CLAIMS],
                processing_time=time.time() - start_time,
                method=method,
                language=language
            )
        except Exception as e:
            self.logger.error(f"Claim extraction failed, using fallback: {e}")
            result = self._fallback_result(text, language, start_time)

        self.logger.debug(LogMessages.EXTRACTION_DONE.format(
            count=len(result.claims), method=result.method, time=result.processing_time))
        return result

    def split_sentences(self, text: str) -> List[str]:
        """Candidate sentences: segments whose stripped length exceeds 15 characters."""
        return [s for s in self.sentence_splitter.split(text) if len(s.strip()) > self.MIN_SEGMENT_LENGTH]

    def score_sentence(self, sentence: str) -> ExtractedClaim:
        """Apply the indicator families to one sentence."""
        confidence = self.BASE_CONFIDENCE
        claim_type = ClaimType.FACTUAL

        if any(pattern.search(sentence) for pattern in self.factual_patterns):
            confidence += 0.2
            claim_type = ClaimType.FACTUAL

        if self.opinion_pattern.search(sentence):
            confidence -= 0.1
            claim_type = ClaimType.OPINION

        # Evaluated last so prediction wins over opinion
        if self.prediction_pattern.search(sentence):
            confidence -= 0.05
            claim_type = ClaimType.PREDICTION

        if self.specificity_pattern.search(sentence):
            confidence += 0.1

        confidence = min(self.MAX_CONFIDENCE, max(self.MIN_CONFIDENCE, confidence))
        return ExtractedClaim(text=sentence, confidence=round(confidence, 4), claim_type=claim_type)

    def _extract_with_rules(self, text: str) -> List[ExtractedClaim]:
        sentences = self.split_sentences(text)
        claims = []

        for sentence in sentences[:self.MAX_SENTENCES]:
            trimmed = sentence.strip()
            if len(trimmed) < self.MIN_SENTENCE_LENGTH:
                continue
            claims.append(self.score_sentence(trimmed))

        if not claims:
            first = self._first_sentence(text, sentences)
            if first:
                claims.append(ExtractedClaim(text=first, confidence=0.5, claim_type=ClaimType.FACTUAL))

        return claims

    def _first_sentence(self, text: str, sentences: List[str]) -> str:
        if sentences:
            return sentences[0].strip()
        for segment in self.sentence_splitter.split(text):
            if segment.strip():
                return segment.strip()
        return text.strip()[:100]

    def _extract_with_reasoning(self, text: str, language: str) -> List[ExtractedClaim]:
        """Ask the reasoning capability for claims; any problem yields an empty list."""
        complete = self.reasoning_client.complete
        if asyncio.iscoroutinefunction(complete):
            self.logger.warning("Asynchronous reasoning client needs extract_async, using rules")
            return []
        try:
            response = complete(EXTRACTION_SYSTEM_PROMPT, self._reasoning_prompt(text, language))
            return self._parse_reasoning_claims(response)
        except Exception as e:
            self.logger.warning(f"Advanced claim extraction failed, using rules: {e}")
            return []

    async def _extract_with_reasoning_async(self, text: str, language: str) -> List[ExtractedClaim]:
        complete = self.reasoning_client.complete
        user_prompt = self._reasoning_prompt(text, language)
        try:
            if asyncio.iscoroutinefunction(complete):
                response = await complete(EXTRACTION_SYSTEM_PROMPT, user_prompt)
            else:
                loop = asyncio.get_running_loop()
                response = await loop.run_in_executor(self.executor, complete,
                                                      EXTRACTION_SYSTEM_PROMPT, user_prompt)
            return self._parse_reasoning_claims(response)
        except Exception as e:
            self.logger.warning(f"Advanced claim extraction failed, using rules: {e}")
            return []

    @staticmethod
    def _reasoning_prompt(text: str, language: str) -> str:
        return f"LANGUAGE: {language}\n\nTEXT:\n{text}"

    def _parse_reasoning_claims(self, response: Dict[str, Any]) -> List[ExtractedClaim]:
        claims = []
        for item in (response or {}).get('claims', []) or []:
            if not isinstance(item, dict):
                continue
            claim_text = str(item.get('text', '')).strip()
            if not claim_text:
                continue
            try:
                claim_type = ClaimType(item.get('type', 'factual'))
            except ValueError:
                claim_type = ClaimType.FACTUAL
            try:
                confidence = float(item.get('confidence', self.BASE_CONFIDENCE))
            except (TypeError, ValueError):
                confidence = self.BASE_CONFIDENCE
            confidence = min(self.MAX_CONFIDENCE, max(self.MIN_CONFIDENCE, confidence))
            claims.append(ExtractedClaim(text=claim_text, confidence=confidence, claim_type=claim_type))
        return claims

    def _fallback_result(self, text: str, language: str, start_time: float) -> ExtractionResult:
        sentences = self.split_sentences(text)
        fallback_text = sentences[0].strip() if sentences else text[:100]
        return ExtractionResult(
            claims=[ExtractedClaim(text=fallback_text, confidence=0.4, claim_type=ClaimType.FACTUAL)],
            processing_time=time.time() - start_time,
            method='fallback',
            language=language
        )


def extract_claims(text: str, language: str = 'en') -> List[ExtractedClaim]:
    """
    Convenience function to extract claims from text.
    """
    return ClaimExtractor().extract(text, language).claims
