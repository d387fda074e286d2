"""
Credibility, stance and ranking heuristics for retrieved evidence.
"""

import re
from datetime import datetime
from typing import Dict, List, Optional
from urllib.parse import urlparse

from ..core.models import Evidence, EvidenceType, Publisher, PublisherType, Stance
from ..core.text_analysis import extract_keywords

SUPPORT_INDICATORS: Dict[str, List[str]] = {
    'en': ['confirms', 'verifies', 'supports', 'proves', 'shows', 'demonstrates', 'validates', 'corroborates'],
    'bn': ['নিশ্চিত করে', 'যাচাই করে', 'সমর্থন করে', 'প্রমাণ করে', 'দেখায়', 'প্রদর্শন করে'],
    'hi': ['पुष्टि करता है', 'सत्यापित करता है', 'समर्थन करता है', 'साबित करता है', 'दिखाता है'],
    'ur': ['تصدیق کرتا ہے', 'ثابت کرتا ہے', 'سپورٹ کرتا ہے', 'دکھاتا ہے'],
    'ar': ['يؤكد', 'يثبت', 'يدعم', 'يظهر', 'يبرهن'],
}

REFUTE_INDICATORS: Dict[str, List[str]] = {
    'en': ['denies', 'refutes', 'contradicts', 'disproves', 'debunks', 'disputes', 'rejects', 'false'],
    'bn': ['অস্বীকার করে', 'খণ্ডন করে', 'বিরোধিতা করে', 'মিথ্যা প্রমাণ করে', 'মিথ্যা'],
    'hi': ['इनकार करता है', 'खंडन करता है', 'विरोध करता है', 'झूठा साबित करता है', 'झूठा'],
    'ur': ['انکار کرتا ہے', 'رد کرتا ہے', 'مخالفت کرتا ہے', 'جھوٹا ثابت کرتا ہے', 'جھوٹا'],
    'ar': ['ينكر', 'يدحض', 'يعارض', 'يثبت كذب', 'كاذب'],
}

PUBLISHER_TYPE_BONUS: Dict[PublisherType, int] = {
    PublisherType.FACT_CHECKER: 15,
    PublisherType.GOVERNMENT: 10,
    PublisherType.ACADEMIC: 12,
    PublisherType.INTERNATIONAL: 8,
    PublisherType.NEWS: 5,
}

EVIDENCE_TYPE_SCORES: Dict[EvidenceType, int] = {
    EvidenceType.CLAIMREVIEW: 100,
    EvidenceType.KB: 90,
    EvidenceType.NEWS: 70,
}

TRUSTED_DOMAINS = [
    'bbc.com', 'cnn.com', 'reuters.com', 'ap.org', 'npr.org',
    'prothomalo.com', 'thedailystar.net', 'dhakatribune.com',
    'bdnews24.com', 'newagebd.net', 'snopes.com', 'factcheck.org',
]

SUSPICIOUS_DOMAIN_PATTERNS = [
    re.compile(r'\d{4,}'),                 # long digit runs
    re.compile(r'[.-]{2,}'),               # repeated dots or dashes
    re.compile(r'^[a-z]{1,3}\.[a-z]{1,3}$'),  # very short domains
]

CONTEXT_WINDOW = 50


def publisher_indicators(publisher: Publisher) -> List[str]:
    """Credibility indicators implied by a publisher's weight and type."""
    indicators = []
    if publisher.weight > 0.9:
        indicators.append('high_authority')
    if publisher.weight > 0.8:
        indicators.append('trusted_source')
    if publisher.type == PublisherType.FACT_CHECKER:
        indicators.append('fact_checking_organization')
    if publisher.type == PublisherType.GOVERNMENT:
        indicators.append('official_source')
    if publisher.type == PublisherType.ACADEMIC:
        indicators.append('academic_institution')
    if publisher.type == PublisherType.INTERNATIONAL:
        indicators.append('international_media')
    return indicators


def url_indicators(url: str) -> List[str]:
    """Indicators derived from the scheme and host of a URL."""
    indicators = []
    try:
        parsed = urlparse(url)
    except ValueError:
        return ['invalid_url']

    if not parsed.scheme or not parsed.netloc:
        return ['invalid_url']

    if parsed.scheme == 'https':
        indicators.append('secure_connection')

    domain = (parsed.hostname or '').lower()
    if any(trusted in domain for trusted in TRUSTED_DOMAINS):
        indicators.append('trusted_domain')
    if '.gov' in domain or '.edu' in domain:
        indicators.append('institutional_domain')
    if any(pattern.search(domain) for pattern in SUSPICIOUS_DOMAIN_PATTERNS):
        indicators.append('suspicious_domain')
    return indicators


def _has_any(text: str, words: List[str]) -> bool:
    return any(word.lower() in text for word in words)


def stance_from_text(text: str, claim: str, language: str = 'en') -> Stance:
    """
    Infer stance from language-specific support and refute indicators.

    Each indicator found counts once; claim keywords contribute when the
    text surrounding them carries a support or refute indicator.
    """
    lower_text = text.lower()
    support_words = SUPPORT_INDICATORS.get(language, SUPPORT_INDICATORS['en'])
    refute_words = REFUTE_INDICATORS.get(language, REFUTE_INDICATORS['en'])

    support_score = sum(1 for word in support_words if word.lower() in lower_text)
    refute_score = sum(1 for word in refute_words if word.lower() in lower_text)

    contextual = 0
    for keyword in extract_keywords(claim.lower()):
        index = lower_text.find(keyword)
        if index < 0:
            continue
        window = lower_text[max(0, index - CONTEXT_WINDOW):index + len(keyword) + CONTEXT_WINDOW]
        if _has_any(window, support_words):
            contextual += 1
        elif _has_any(window, refute_words):
            contextual -= 1

    total_support = support_score + max(0, contextual)
    total_refute = refute_score + max(0, -contextual)

    if total_support > total_refute and total_support > 0:
        return Stance.SUPPORTS
    if total_refute > total_support and total_refute > 0:
        return Stance.REFUTES
    return Stance.NEUTRAL


def stance_from_rating(rating: Optional[str]) -> Stance:
    """Map a textual fact-check rating onto a stance."""
    if not rating:
        return Stance.NEUTRAL
    lowered = rating.lower()
    if any(word in lowered for word in ('true', 'correct', 'accurate', 'verified', 'confirmed')):
        return Stance.SUPPORTS
    if any(word in lowered for word in ('false', 'incorrect', 'debunked', 'refuted', 'denied')):
        return Stance.REFUTES
    return Stance.NEUTRAL


def confidence_from_rating(rating: Optional[str]) -> int:
    """Confidence (0-100) implied by a textual fact-check rating."""
    if not rating:
        return 50
    lowered = rating.lower()
    if 'true' in lowered or 'false' in lowered:
        return 90
    if any(word in lowered for word in ('verified', 'confirmed', 'debunked')):
        return 85
    if 'mostly' in lowered:
        return 75
    if 'partly' in lowered or 'mixed' in lowered:
        return 60
    if 'misleading' in lowered:
        return 70
    if any(word in lowered for word in ('unproven', 'unverified', 'unclear')):
        return 40
    if 'disputed' in lowered or 'contested' in lowered:
        return 45
    return 50


def source_confidence(publisher: Publisher, relevance: float) -> float:
    """Confidence for an unrated hit: weight, relevance and publisher type, clamped to [20, 100]."""
    confidence = publisher.weight * 100 + relevance * 20 + PUBLISHER_TYPE_BONUS.get(publisher.type, 0)
    return min(100.0, max(20.0, confidence))


def publisher_confidence(publisher: Publisher, stance: Stance) -> int:
    """Confidence a directory publisher assigns to its own finding, clamped to [30, 100]."""
    confidence = publisher.weight * 100
    if publisher.type == PublisherType.FACT_CHECKER and stance == Stance.REFUTES:
        confidence += 10
    if publisher.type == PublisherType.GOVERNMENT and stance == Stance.SUPPORTS:
        confidence += 8
    if stance == Stance.NEUTRAL:
        confidence -= 5
    return int(min(100, max(30, round(confidence))))


def recency_score(published_at: Optional[datetime], now: Optional[datetime] = None) -> float:
    if published_at is None:
        return 0.5
    now = now or datetime.now(published_at.tzinfo)
    if (published_at.tzinfo is None) != (now.tzinfo is None):
        published_at, now = published_at.replace(tzinfo=None), now.replace(tzinfo=None)
    days = (now - published_at).total_seconds() / 86400.0
    if days <= 1:
        return 1.0
    if days <= 7:
        return 0.9
    if days <= 30:
        return 0.8
    if days <= 90:
        return 0.6
    if days <= 365:
        return 0.4
    return 0.2


def ranking_score(evidence: Evidence, now: Optional[datetime] = None) -> float:
    """Multi-factor ranking over confidence, credibility, relevance, recency and type."""
    return (evidence.confidence * 0.3 +
            evidence.publisher.weight * 100 * 0.25 +
            evidence.relevance_score * 100 * 0.25 +
            recency_score(evidence.published_at, now) * 100 * 0.1 +
            EVIDENCE_TYPE_SCORES.get(evidence.evidence_type, 50) * 0.1)


def enhanced_indicators(evidence: Evidence) -> List[str]:
    """Evidence indicators extended with source, type and URL signals, deduplicated in order."""
    indicators = list(evidence.credibility_indicators)
    if evidence.publisher.type == PublisherType.FACT_CHECKER:
        indicators.append('professional_fact_checker')
    if evidence.publisher.weight > 0.9:
        indicators.append('high_credibility_source')
    if evidence.evidence_type == EvidenceType.CLAIMREVIEW:
        indicators.append('structured_fact_check')
    if evidence.source_url:
        indicators.extend(url_indicators(evidence.source_url))
    return list(dict.fromkeys(indicators))
