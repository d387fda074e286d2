"""
Registry of known evidence publishers and their credibility weights.
"""

import re
from typing import List, Optional
from urllib.parse import urlparse

from ..core.models import Publisher, PublisherType

PUBLISHERS = (
    # International fact-checkers
    Publisher('ifcn_generic', 'IFCN Network', 1.0, 'global', 'multi', PublisherType.INTERNATIONAL,
              'https://www.poynter.org/ifcn/', 'International Fact-Checking Network'),
    Publisher('snopes', 'Snopes', 0.95, 'global', 'en', PublisherType.FACT_CHECKER,
              'https://www.snopes.com/', 'Fact-checking website'),
    Publisher('factcheck_org', 'FactCheck.org', 0.92, 'global', 'en', PublisherType.FACT_CHECKER,
              'https://www.factcheck.org/', 'Nonpartisan fact-checking organization'),

    # Bangladesh fact-checkers
    Publisher('rumorscanner_bd', 'Rumor Scanner Bangladesh', 0.9, 'BD', 'bn', PublisherType.FACT_CHECKER,
              'https://www.rumorscanner.com/', 'Leading fact-checking organization in Bangladesh'),
    Publisher('factwatch_ulab', 'FactWatch (ULAB)', 0.85, 'BD', 'bn', PublisherType.ACADEMIC,
              'https://factwatch.org/', 'University of Liberal Arts Bangladesh fact-checking initiative'),
    Publisher('boom_bangladesh', 'BOOM Bangladesh', 0.82, 'BD', 'bn', PublisherType.FACT_CHECKER,
              'https://www.boomlive.in/bangladesh', 'BOOM fact-checking for Bangladesh'),

    # Bangladesh news
    Publisher('prothom_alo', 'Prothom Alo', 0.88, 'BD', 'bn', PublisherType.NEWS,
              'https://www.prothomalo.com/', 'Leading Bengali daily newspaper'),
    Publisher('daily_star', 'The Daily Star', 0.86, 'BD', 'en', PublisherType.NEWS,
              'https://www.thedailystar.net/', 'Leading English daily in Bangladesh'),
    Publisher('dhaka_tribune', 'Dhaka Tribune', 0.83, 'BD', 'en', PublisherType.NEWS,
              'https://www.dhakatribune.com/', 'English daily newspaper'),
    Publisher('bdnews24', 'bdnews24.com', 0.81, 'BD', 'multi', PublisherType.NEWS,
              'https://bdnews24.com/', 'Online news portal'),

    # Government
    Publisher('bbs_gov_bd', 'Bangladesh Bureau of Statistics', 0.95, 'BD', 'multi', PublisherType.GOVERNMENT,
              'https://bbs.gov.bd/', 'Official statistics agency of Bangladesh'),
    Publisher('mof_gov_bd', 'Ministry of Finance, Bangladesh', 0.92, 'BD', 'multi', PublisherType.GOVERNMENT,
              'https://mof.gov.bd/', 'Ministry of Finance official website'),

    # International news
    Publisher('bbc_bangla', 'BBC Bangla', 0.94, 'BD', 'bn', PublisherType.INTERNATIONAL,
              'https://www.bbc.com/bangla', 'BBC Bengali service'),
    Publisher('dw_bangla', 'Deutsche Welle Bangla', 0.89, 'BD', 'bn', PublisherType.INTERNATIONAL,
              'https://www.dw.com/bn', 'Deutsche Welle Bengali service'),
    Publisher('voa_bangla', 'Voice of America Bangla', 0.87, 'BD', 'bn', PublisherType.INTERNATIONAL,
              'https://www.voabangla.com/', 'VOA Bengali service'),

    # Academic and research
    Publisher('transparency_bd', 'Transparency International Bangladesh', 0.88, 'BD', 'multi',
              PublisherType.ACADEMIC, 'https://www.ti-bangladesh.org/', 'Anti-corruption organization'),
    Publisher('cpd_bd', 'Centre for Policy Dialogue', 0.85, 'BD', 'multi', PublisherType.ACADEMIC,
              'https://cpd.org.bd/', 'Policy research institute'),
)

UNKNOWN_PUBLISHER_WEIGHT = 0.5


def _by_weight(publishers) -> List[Publisher]:
    return sorted(publishers, key=lambda p: p.weight, reverse=True)


def _host(url: Optional[str]) -> str:
    if not url:
        return ''
    host = urlparse(url).netloc.lower()
    return host[4:] if host.startswith('www.') else host


class PublisherRegistry:
    """
    Lookup and filtering over the publisher catalogue.

    Every listing method returns publishers sorted by weight, highest first.
    """

    def __init__(self, publishers=PUBLISHERS):
        self._publishers = tuple(publishers)
        self._by_id = {p.id: p for p in self._publishers}

    def get_publisher(self, publisher_id: str) -> Optional[Publisher]:
        return self._by_id.get(publisher_id)

    def get_publishers_by_region(self, region: str) -> List[Publisher]:
        return _by_weight(p for p in self._publishers if p.region in (region, 'global'))

    def get_publishers_by_language(self, language: str) -> List[Publisher]:
        return _by_weight(p for p in self._publishers if p.lang in (language, 'multi'))

    def get_publishers_by_type(self, publisher_type: PublisherType) -> List[Publisher]:
        return _by_weight(p for p in self._publishers if p.type == publisher_type)

    def _filter(self, types, region: Optional[str], language: Optional[str]) -> List[Publisher]:
        selected = [p for p in self._publishers if p.type in types]
        if region:
            selected = [p for p in selected if p.region in (region, 'global')]
        if language:
            selected = [p for p in selected if p.lang in (language, 'multi')]
        return _by_weight(selected)

    def get_fact_checkers(self, region: Optional[str] = None, language: Optional[str] = None) -> List[Publisher]:
        """Fact-checking organizations plus international outlets."""
        return self._filter((PublisherType.FACT_CHECKER, PublisherType.INTERNATIONAL), region, language)

    def get_news_sources(self, region: Optional[str] = None, language: Optional[str] = None) -> List[Publisher]:
        """News outlets plus international outlets."""
        return self._filter((PublisherType.NEWS, PublisherType.INTERNATIONAL), region, language)

    def get_government_sources(self, region: Optional[str] = None) -> List[Publisher]:
        """Government sources; the region must match exactly when given."""
        selected = [p for p in self._publishers if p.type == PublisherType.GOVERNMENT]
        if region:
            selected = [p for p in selected if p.region == region]
        return _by_weight(selected)

    def get_academic_sources(self, region: Optional[str] = None, language: Optional[str] = None) -> List[Publisher]:
        return self._filter((PublisherType.ACADEMIC,), region, language)

    def get_all_publishers(self) -> List[Publisher]:
        return _by_weight(self._publishers)

    def search_publishers(self, query: str) -> List[Publisher]:
        """Case-insensitive substring search over names and descriptions."""
        needle = query.lower()
        return _by_weight(
            p for p in self._publishers
            if needle in p.name.lower() or (p.description and needle in p.description.lower())
        )

    def find_by_url(self, url: str) -> Optional[Publisher]:
        """Publisher whose homepage shares the host of ``url``."""
        host = _host(url)
        if not host:
            return None
        for publisher in self.get_all_publishers():
            if _host(publisher.url) == host:
                return publisher
        return None

    def find_or_create(self, name: str) -> Publisher:
        """Best registry match for a name, or an ad-hoc publisher with a neutral weight."""
        name = (name or '').strip() or 'Unknown Fact Checker'
        matches = self.search_publishers(name)
        if matches:
            return matches[0]

        slug = re.sub(r'[^a-z0-9]+', '_', name.lower()).strip('_') or 'publisher'
        return Publisher(
            id=f'unknown_{slug}',
            name=name,
            weight=UNKNOWN_PUBLISHER_WEIGHT,
            region='global',
            lang='multi',
            type=PublisherType.FACT_CHECKER,
            description='Unknown publisher',
        )


# Global registry instance
publisher_registry = PublisherRegistry()
