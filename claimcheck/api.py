"""
Main claim checking API.

Wires extraction, evidence retrieval, verdict generation, caching and
persistence into one pipeline. This is the primary entry point for callers.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Union

from .config import PipelineConfig
from .constants import ErrorMessages, LogMessages, SUPPORTED_LANGUAGES
from .core.claim_cache import ClaimCache
from .core.claim_extractor import ClaimExtractor
from .core.models import BatchResult, Claim, ClaimResult, RetrievalResult, Tier, Verdict
from .error_handler import classify_error
from .logging_config import setup_logging
from .repositories import create_verification_repository
from .repositories.interfaces import VerificationRepositoryInterface
from .sources.evidence_retriever import EvidenceRetriever
from .sources.fact_checkers import GoogleFactCheckSource
from .sources.http_client import create_http_client
from .sources.news import NewsAPISource
from .verification.reasoning_client import create_reasoning_client
from .verification.verdict_generator import VerdictGenerator, VerdictOptions


class ClaimCheckAPI:
    """
    Claim verification pipeline.

    Claims extracted from one text are verified concurrently under a
    semaphore; each claim's retrieval and verdict run at most once per claim
    signature thanks to the cache.
    """

    def __init__(self,
                 config: Optional[PipelineConfig] = None,
                 extractor: Optional[ClaimExtractor] = None,
                 retriever: Optional[EvidenceRetriever] = None,
                 verdict_generator: Optional[VerdictGenerator] = None,
                 cache: Optional[ClaimCache] = None,
                 repository: Optional[VerificationRepositoryInterface] = None):
        self.config = config or PipelineConfig()
        self.logger = logging.getLogger(__name__)

        self.extractor = extractor or ClaimExtractor()
        self.retriever = retriever or EvidenceRetriever(
            tier_settings=self.config.tiers,
            category_timeout=self.config.category_timeout,
            max_workers=self.config.max_workers,
        )
        self.verdict_generator = verdict_generator or VerdictGenerator(
            reasoning_timeout=self.config.reasoning_timeout)
        self.repository = repository
        self.cache = cache or ClaimCache(repository)

    def _validate_language(self, language: str) -> str:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(ErrorMessages.UNSUPPORTED_LANGUAGE.format(
                language=language, supported=', '.join(SUPPORTED_LANGUAGES)))
        return language

    @staticmethod
    def _resolve_tier(tier: Union[Tier, str]) -> Tier:
        return tier if isinstance(tier, Tier) else Tier.from_plan(tier)

    def verdict_options(self, tier: Tier, options: Optional[VerdictOptions] = None) -> VerdictOptions:
        """
        Options for a request: the tier's threshold unless the caller passed
        their own, and the reasoning path only for premium requests.
        """
        if options is None:
            options = VerdictOptions(confidence_threshold=self.config.tier_settings(tier).confidence_threshold)
        use_ai = options.use_ai and tier == Tier.PREMIUM and self.verdict_generator.reasoning_available
        return VerdictOptions(
            use_ai=use_ai,
            confidence_threshold=options.confidence_threshold,
            require_consensus=options.require_consensus,
            weight_by_credibility=options.weight_by_credibility,
            use_advanced_reasoning=options.use_advanced_reasoning,
            include_uncertainty=options.include_uncertainty,
        )

    async def check_text(self, text: str, language: str = 'en', tier: Union[Tier, str] = Tier.FREE,
                         options: Optional[VerdictOptions] = None) -> BatchResult:
        """
        Extract claims from text and verify each of them.

        Raises ValueError for an unsupported language. Every extracted claim
        (up to the tier's cap) yields exactly one result, in extraction order.
        """
        start_time = time.time()
        language = self._validate_language(language)
        tier = self._resolve_tier(tier)
        settings = self.config.tier_settings(tier)

        extraction = await self.extractor.extract_async(text, language)
        claims = [
            Claim.create(extracted.text, language,
                         extraction_confidence=extracted.confidence,
                         claim_type=extracted.claim_type)
            for extracted in extraction.claims[:settings.max_claims]
        ]

        verdict_options = self.verdict_options(tier, options)
        semaphore = asyncio.Semaphore(self.config.max_concurrent_claims)
        results = await asyncio.gather(*[
            self._process_claim(claim, language, tier, verdict_options, semaphore)
            for claim in claims
        ])

        processing_time_ms = (time.time() - start_time) * 1000
        self.logger.info(LogMessages.BATCH_DONE.format(
            count=len(results), language=language, time=processing_time_ms))

        return BatchResult(
            results=list(results),
            processing_time_ms=processing_time_ms,
            claims_processed=len(results),
            language=language,
        )

    async def check_claim(self, claim_text: str, language: str = 'en', tier: Union[Tier, str] = Tier.FREE,
                          options: Optional[VerdictOptions] = None) -> ClaimResult:
        """Verify one already-isolated claim, skipping extraction."""
        language = self._validate_language(language)
        tier = self._resolve_tier(tier)
        if not claim_text or not claim_text.strip():
            raise ValueError("claim_text must not be empty")

        claim = Claim.create(claim_text, language)
        semaphore = asyncio.Semaphore(1)
        return await self._process_claim(claim, language, tier, self.verdict_options(tier, options), semaphore)

    async def _process_claim(self, claim: Claim, language: str, tier: Tier,
                             options: VerdictOptions, semaphore: asyncio.Semaphore) -> ClaimResult:
        async with semaphore:
            start_time = time.time()
            retrievals: List[RetrievalResult] = []

            async def compute() -> Verdict:
                retrieval = await self.retriever.retrieve(claim.canonical_text, language, tier, claim.id)
                retrievals.append(retrieval)
                return await self.verdict_generator.generate_verdict(
                    claim.canonical_text, retrieval.evidence, language, options)

            try:
                claim, verdict, cached = await self.cache.get_or_compute(claim, compute)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                error = classify_error(e, "claim verification")
                self.logger.error(LogMessages.CLAIM_FAILED.format(claim=claim.canonical_text[:50], error=error))
                return ClaimResult.degraded(
                    claim,
                    ErrorMessages.PIPELINE_FAILURE.format(error=error.message),
                    processing_time_ms=(time.time() - start_time) * 1000,
                )

            if cached:
                verdict = self.verdict_generator.apply_threshold(verdict, options.confidence_threshold)
                return ClaimResult.from_verdict(claim, verdict, list(verdict.key_evidence),
                                                processing_time_ms=0, cached=True)

            retrieval = retrievals[0]
            self._persist(claim, verdict, retrieval)
            return ClaimResult.from_verdict(claim, verdict, retrieval.evidence,
                                            processing_time_ms=(time.time() - start_time) * 1000)

    def _persist(self, claim: Claim, verdict: Verdict, retrieval: RetrievalResult) -> None:
        """Store evidence and analysis metadata next to the cached claim and verdict."""
        if self.repository is None:
            return
        try:
            stored = self.repository.get_claim_by_signature(claim.claim_signature) or claim
            self.repository.save_evidence(stored.id, retrieval.evidence)
            self.repository.save_analysis_metadata(stored.id, {
                'methodology': list(verdict.methodology),
                'limitations': list(verdict.limitations),
                'confidence_factors': [f.to_dict() for f in verdict.confidence_factors],
                'search_queries': list(retrieval.search_queries),
                'processing_stats': {
                    'retrieval_time': retrieval.processing_time,
                    'verdict_time': verdict.processing_time,
                    'reasoning_path': verdict.reasoning_path,
                    'failed_categories': list(retrieval.failed_categories),
                    'summary': retrieval.summary.to_dict(),
                },
                'uncertainty_analysis': verdict.uncertainty.to_dict() if verdict.uncertainty else {},
            })
        except Exception as e:
            self.logger.warning(f"Could not persist evidence for claim {claim.id}: {classify_error(e, 'persistence')}")

    def get_component_status(self) -> Dict[str, Any]:
        """Get status of all pipeline components."""
        return {
            "claim_extractor": "operational",
            "evidence_retriever": "operational",
            "verdict_generator": "operational",
            "claim_cache": "operational",
            "fact_check_api": "operational" if self.retriever.fact_check_source is not None else "disabled",
            "news_api": "operational" if self.retriever.news_source is not None else "disabled",
            "reasoning": "operational" if self.verdict_generator.reasoning_available else "disabled",
            "repository": "operational" if self.repository is not None else "disabled",
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform a health check of the configured components."""
        health = {
            "status": "healthy",
            "components": self.get_component_status(),
            "cache": self.cache.stats(),
            "config": self.config.to_dict(),
        }

        issues = []
        try:
            extraction = self.extractor.extract("According to official data, inflation rose to 5% last year.")
            if not extraction.claims:
                issues.append("Claim extraction not working")
        except Exception as e:
            issues.append(f"Claim extraction error: {e}")

        if self.repository is not None:
            try:
                self.repository.lookup_by_signature("health-check")
            except Exception as e:
                issues.append(f"Repository error: {e}")

        if issues:
            health["status"] = "degraded"
            health["issues"] = issues

        return health

    def close(self) -> None:
        self.retriever.close()
        for source in (self.retriever.fact_check_source, self.retriever.news_source):
            if source is not None:
                source.http_client.close()


def create_claimcheck_api(config: Optional[PipelineConfig] = None,
                          repository: Optional[VerificationRepositoryInterface] = None,
                          use_environment: bool = False) -> ClaimCheckAPI:
    """
    Factory function to create a configured claim checking API.

    Args:
        config: Pipeline configuration; read from the environment when
            ``use_environment`` is set and no config is given
        repository: Verification storage; a SQLite repository is built from
            ``config.database_path`` when one is configured

    Returns:
        Configured ClaimCheckAPI instance
    """
    if config is None:
        config = PipelineConfig.from_environment() if use_environment else PipelineConfig()
    if use_environment:
        setup_logging(config.log_level)

    if repository is None and config.database_path:
        repository = create_verification_repository(config.database_path)

    fact_check_source = None
    news_source = None
    if config.factcheck_api_key:
        fact_check_source = GoogleFactCheckSource(
            config.factcheck_api_key,
            http_client=create_http_client(config.request_timeout, config.max_retries))
    if config.news_api_key:
        news_source = NewsAPISource(
            config.news_api_key,
            http_client=create_http_client(config.request_timeout, config.max_retries))

    retriever = EvidenceRetriever(
        fact_check_source=fact_check_source,
        news_source=news_source,
        tier_settings=config.tiers,
        category_timeout=config.category_timeout,
        max_workers=config.max_workers,
    )

    reasoning_client = create_reasoning_client(
        config.openai_api_key,
        base_url=config.openai_base_url,
        model=config.reasoning_model,
        timeout=config.reasoning_timeout,
    )
    verdict_generator = VerdictGenerator(
        reasoning_client=reasoning_client,
        reasoning_timeout=config.reasoning_timeout,
        executor=retriever.executor,
    )

    return ClaimCheckAPI(
        config=config,
        retriever=retriever,
        verdict_generator=verdict_generator,
        repository=repository,
    )
