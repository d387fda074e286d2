"""
Query building functionality for evidence retrieval.
Generates per-category search queries for a claim, plus language-aware
expansion queries (entities, negations, context and statistics).
"""

import re
from typing import Dict, List

from .text_analysis import extract_entities

FACT_CHECK_TERMS: Dict[str, List[str]] = {
    'en': ['fact check', 'verification', 'debunked', 'verified', 'false claim', 'true claim', 'misleading'],
    'bn': ['ফ্যাক্ট চেক', 'যাচাই', 'মিথ্যা', 'সত্য', 'ভুল তথ্য', 'সঠিক তথ্য', 'বিভ্রান্তিকর'],
    'hi': ['तथ्य जांच', 'सत्यापन', 'झूठा', 'सच', 'गलत जानकारी', 'सही जानकारी', 'भ्रामक'],
    'ur': ['حقائق کی جانچ', 'تصدیق', 'جھوٹا', 'سچ', 'غلط معلومات', 'صحیح معلومات', 'گمراہ کن'],
    'ar': ['فحص الحقائق', 'التحقق', 'كاذب', 'صحيح', 'معلومات خاطئة', 'معلومات صحيحة', 'مضلل'],
}

NEGATION_TERMS: Dict[str, List[str]] = {
    'en': ['not true', 'false', 'incorrect', 'wrong', 'debunked', 'refuted'],
    'bn': ['সত্য নয়', 'মিথ্যা', 'ভুল', 'অসত্য', 'খণ্ডিত'],
    'hi': ['सच नहीं', 'झूठ', 'गलत', 'असत्य', 'खंडित'],
    'ur': ['سچ نہیں', 'جھوٹ', 'غلط', 'باطل', 'مردود'],
    'ar': ['ليس صحيحاً', 'كاذب', 'خاطئ', 'باطل', 'مدحوض'],
}

CONTEXT_TERMS: Dict[str, List[str]] = {
    'en': ['background', 'history', 'context', 'explanation', 'details', 'information'],
    'bn': ['পটভূমি', 'ইতিহাস', 'প্রসঙ্গ', 'ব্যাখ্যা', 'বিস্তারিত', 'তথ্য'],
    'hi': ['पृष्ठभूमि', 'इतिहास', 'संदर्भ', 'व्याख्या', 'विवरण', 'जानकारी'],
    'ur': ['پس منظر', 'تاریخ', 'سیاق', 'وضاحت', 'تفصیلات', 'معلومات'],
    'ar': ['خلفية', 'تاريخ', 'سياق', 'شرح', 'تفاصيل', 'معلومات'],
}

STATISTICAL_TERMS: Dict[str, List[str]] = {
    'en': ['statistics', 'data', 'survey', 'study', 'research', 'report', 'analysis'],
    'bn': ['পরিসংখ্যান', 'তথ্য', 'সমীক্ষা', 'অধ্যয়ন', 'গবেষণা', 'প্রতিবেদন', 'বিশ্লেষণ'],
    'hi': ['आंकड़े', 'डेटा', 'सर्वेक्षण', 'अध्ययन', 'अनुसंधान', 'रिपोर्ट', 'विश्लेषण'],
    'ur': ['اعداد و شمار', 'ڈیٹا', 'سروے', 'مطالعہ', 'تحقیق', 'رپورٹ', 'تجزیہ'],
    'ar': ['إحصائيات', 'بيانات', 'مسح', 'دراسة', 'بحث', 'تقرير', 'تحليل'],
}


def _terms(table: Dict[str, List[str]], language: str) -> List[str]:
    return table.get(language, table['en'])


def _dedupe(queries: List[str]) -> List[str]:
    seen = set()
    unique = []
    for query in queries:
        cleaned = ' '.join(query.split())
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            unique.append(cleaned)
    return unique


class QueryBuilder:
    """
    Builds search queries for the evidence source categories.
    """

    def __init__(self, max_expanded_queries: int = 10):
        self.max_expanded_queries = max_expanded_queries

    def fact_check_queries(self, claim: str) -> List[str]:
        return _dedupe([claim, f'"{claim}" fact check', f'{claim} verification'])

    def news_queries(self, claim: str) -> List[str]:
        return _dedupe([f'"{claim}"', f'{claim} news', f'{claim} report'])

    def government_queries(self, claim: str) -> List[str]:
        return _dedupe([f'{claim} official', f'{claim} government', f'{claim} statistics'])

    def academic_queries(self, claim: str) -> List[str]:
        return _dedupe([f'{claim} research', f'{claim} study', f'{claim} academic'])

    def queries_for_category(self, category: str, claim: str) -> List[str]:
        """Queries for one source category name (fact_checker, news, government, academic)."""
        builders = {
            'fact_checker': self.fact_check_queries,
            'news': self.news_queries,
            'government': self.government_queries,
            'academic': self.academic_queries,
        }
        if category not in builders:
            raise ValueError(f"Unknown source category: {category}")
        return builders[category](claim)

    def build_expanded_queries(self, claim: str, language: str = 'en') -> List[str]:
        """
        Language-aware query expansion.

        Combines the raw claim, entity + fact-check term pairs, negation
        queries, context queries and statistical queries, deduplicated and
        capped.
        """
        queries = [claim]
        entities = extract_entities(claim, language)

        for entity in entities:
            for term in _terms(FACT_CHECK_TERMS, language):
                queries.append(f'"{entity}" {term}')

        for term in _terms(NEGATION_TERMS, language):
            queries.append(f'{claim} {term}')

        queries.extend(self._context_queries(entities, language))
        queries.extend(self._statistical_queries(claim, language))

        return _dedupe(queries)[:self.max_expanded_queries]

    def _context_queries(self, entities: List[str], language: str) -> List[str]:
        queries = []
        for entity in entities[:3]:
            queries.append(f'{entity} context background')
            queries.append(f'{entity} history timeline')
            for term in _terms(CONTEXT_TERMS, language)[:2]:
                queries.append(f'{entity} {term}')
        return queries

    def _statistical_queries(self, claim: str, language: str) -> List[str]:
        queries = []
        numbers = re.findall(r'\d+(?:\.\d+)?%?', claim)
        for number in numbers[:3]:
            for term in _terms(STATISTICAL_TERMS, language)[:2]:
                queries.append(f'{number} {term}')
        return queries
