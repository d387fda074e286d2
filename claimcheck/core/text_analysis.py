"""Text helpers shared by retrieval and verdict generation.

Keyword and entity extraction, word-overlap similarity and the relevance
score used to rank evidence against a claim.
"""

import re
from typing import List, Set

STOP_WORDS: Set[str] = {
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'from', 'up', 'about', 'into', 'through', 'during', 'before', 'after', 'above', 'below',
    'is', 'are', 'was', 'were', 'be', 'been', 'being', 'have', 'has', 'had', 'do', 'does', 'did',
    'will', 'would', 'could', 'should', 'may', 'might', 'must', 'can', 'this', 'that', 'these', 'those'
}

_NUMBER_PATTERN = re.compile(r'\d+(?:\.\d+)?%?')
_DATE_PATTERN = re.compile(r'\d{4}|\d{1,2}/\d{1,2}/\d{2,4}|\d{1,2}-\d{1,2}-\d{2,4}')
_PROPER_NOUN_PATTERN = re.compile(r'\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*')
_QUOTE_PATTERN = re.compile(r'"([^"]+)"')
_CURRENCY_PATTERN = re.compile(r'[$£€¥₹৳]\s*\d+(?:,\d{3})*(?:\.\d{2})?')


def extract_keywords(text: str, limit: int = 20) -> List[str]:
    """Meaningful words (longer than 2 chars, not stop words), in order of appearance."""
    keywords = []
    for word in text.split():
        cleaned = re.sub(r'[^\w]', '', word)
        if len(cleaned) > 2 and cleaned.lower() not in STOP_WORDS:
            keywords.append(cleaned)
    return keywords[:limit]


def extract_entities(text: str, language: str = 'en', limit: int = 15) -> List[str]:
    """Numbers, dates, currency amounts and (for English) proper nouns and quotes."""
    entities: List[str] = []
    entities.extend(_NUMBER_PATTERN.findall(text))
    entities.extend(_DATE_PATTERN.findall(text))

    if language == 'en':
        entities.extend(_PROPER_NOUN_PATTERN.findall(text))
        entities.extend(_QUOTE_PATTERN.findall(text))

    entities.extend(_CURRENCY_PATTERN.findall(text))

    # Deduplicate preserving order
    seen = set()
    unique = []
    for entity in entities:
        if entity not in seen:
            seen.add(entity)
            unique.append(entity)
    return unique[:limit]


def keyword_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the keyword sets of two texts."""
    words1 = set(extract_keywords(text1.lower()))
    words2 = set(extract_keywords(text2.lower()))
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def word_overlap(text1: str, text2: str) -> float:
    """Jaccard similarity over raw whitespace tokens."""
    words1 = set(text1.lower().split())
    words2 = set(text2.lower().split())
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def relevance_score(evidence_text: str, claim: str) -> float:
    """
    Relevance of an evidence text to a claim in [0, 1].

    Weighted combination of keyword coverage (0.4), entity coverage (0.4)
    and keyword Jaccard similarity (0.2).
    """
    claim_words = extract_keywords(claim.lower())
    evidence_words = set(extract_keywords(evidence_text.lower()))
    keyword_matches = sum(1 for word in claim_words if word in evidence_words)
    keyword_score = keyword_matches / len(claim_words) if claim_words else 0.0

    claim_entities = extract_entities(claim, 'en')
    evidence_entities = [e.lower() for e in extract_entities(evidence_text, 'en')]
    entity_matches = 0
    for entity in claim_entities:
        if any(entity.lower() in candidate for candidate in evidence_entities):
            entity_matches += 1
    entity_score = entity_matches / len(claim_entities) if claim_entities else 0.0

    semantic_score = keyword_similarity(claim, evidence_text)

    score = keyword_score * 0.4 + entity_score * 0.4 + semantic_score * 0.2
    return max(0.0, min(1.0, score))
