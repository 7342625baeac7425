"""
Enhanced Research Agent

Live search-engine research for a prospect:
- Keyword positions for service + location queries
- Competitors inferred from who actually ranks in the top 10
- Location opportunities for local and regional packages
- "People also ask" questions as content gaps

Queries run concurrently (bounded) through the search client, which
applies the shared retry policy. Failures after retries propagate.
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..utils.domain_filter import MAJOR_BRAND_MARKERS, is_excluded_domain
from .keywords import generate_keywords, get_services_for_industry, parse_location
from .models import (
    CompetitorRanking,
    ContentOpportunity,
    DiscoveredCompetitor,
    EnhancedResearchResult,
    KeywordRanking,
    LocationOpportunity,
    ResearchRequest,
    extract_domain,
)
from .search import SerpApiClient, organic_results

logger = logging.getLogger(__name__)


# ============================================================================
# HEURISTICS
# ============================================================================

# Organic CTR by position (positions 1-10)
CTR_CURVE: Dict[int, float] = {
    1: 0.317,
    2: 0.247,
    3: 0.187,
    4: 0.133,
    5: 0.095,
    6: 0.069,
    7: 0.051,
    8: 0.038,
    9: 0.029,
    10: 0.022,
}


def get_ctr_for_position(position: int) -> float:
    """Estimated CTR for a SERP position."""
    if position <= 0:
        return 0.0
    if position <= 10:
        return CTR_CURVE.get(position, 0.01)
    if position <= 20:
        return 0.01 - (position - 10) * 0.0005
    return 0.001


def estimate_search_volume(keyword: str) -> int:
    """
    Heuristic monthly volume from keyword shape.

    Broad single words search most, long-tail least.
    """
    words = keyword.lower().split()
    if len(words) == 1:
        return 1000
    if len(words) == 2:
        return 500
    if "near me" in keyword.lower() or "in" in words:
        return 300
    if len(words) >= 4:
        return 100
    return 250


def estimate_difficulty(results: List[Dict[str, Any]]) -> str:
    """Difficulty from who occupies the top 10."""
    top = results[:10]
    links = [(r.get("link") or "").lower() for r in top]

    has_wikipedia = any("wikipedia" in link for link in links)
    has_major_brand = any(brand in link for link in links for brand in MAJOR_BRAND_MARKERS)

    if has_wikipedia and has_major_brand:
        return "Very High"
    if has_major_brand:
        return "High"
    if len(top) >= 8:
        return "Medium"
    return "Low"


def detect_intent(keyword: str) -> str:
    """Search intent from keyword modifiers."""
    kw = keyword.lower()

    if any(term in kw for term in ("buy", "price", "cost")):
        return "Transactional"
    if any(term in kw for term in ("how to", "what is", "guide")):
        return "Informational"
    if any(term in kw for term in ("best", "top", "review")):
        return "Commercial"
    if "near me" in kw or "in " in kw:
        return "Local"
    return "Navigational"


def competitor_name_from_title(title: str, domain: str) -> str:
    """Business name from a result title ("Acme Roofing | Leeds Roofers" -> "Acme Roofing")."""
    name = (title or "").split("|")[0].split(" - ")[0].split(" – ")[0].strip()
    return name or domain


def find_client_position(results: List[Dict[str, Any]], domain: Optional[str]) -> Optional[int]:
    """1-based position of the client's domain (or a subdomain of it), or None."""
    for index, result in enumerate(results):
        if is_client_link(result.get("link") or "", domain):
            return result.get("position") or index + 1
    return None


def is_client_link(link: str, domain: Optional[str]) -> bool:
    """Hostname match, so "notacme.co.uk" is not "acme.co.uk"."""
    if not domain or not link:
        return False
    domain = extract_domain(domain)
    if "://" not in link:
        link = f"https://{link}"
    try:
        host = urlparse(link.strip()).hostname or ""
    except ValueError:
        return False
    if host.startswith("www."):
        host = host[4:]
    return host == domain or host.endswith(f".{domain}")


def identify_quick_wins(
    keywords: List[KeywordRanking],
    competitors: List[DiscoveredCompetitor],
) -> List[str]:
    """Summary lines of the easiest opportunities."""
    quick_wins = []

    easy_high_volume = [k for k in keywords if k.difficulty == "Low" and k.search_volume > 200]
    if easy_high_volume:
        quick_wins.append(f"Target {len(easy_high_volume)} low-competition, high-volume keywords")

    striking_distance = [k for k in keywords if k.position and 4 <= k.position <= 20]
    if striking_distance:
        quick_wins.append(
            f"{len(striking_distance)} keywords already ranking 4-20 can move onto page one"
        )

    local = [k for k in keywords if k.intent == "Local"]
    if local:
        quick_wins.append(f"Capitalize on {len(local)} local search opportunities")

    if keywords and not competitors:
        quick_wins.append("No consistent competitor dominates these searches")

    return quick_wins


# ============================================================================
# AGENT
# ============================================================================

class EnhancedResearchAgent:
    """
    Gathers live search data for a research request.

    Usage:
        async with SerpApiClient(api_key) as search:
            agent = EnhancedResearchAgent(search)
            result = await agent.conduct(request)
    """

    MAX_CONCURRENT_QUERIES = 4
    COMPETITOR_KEYWORDS = 3
    MAX_COMPETITORS = 5
    MAX_LOCATIONS = 3
    MAX_CONTENT_OPPORTUNITIES = 10

    def __init__(
        self,
        search_client: SerpApiClient,
        max_concurrent: int = MAX_CONCURRENT_QUERIES,
    ):
        self.search = search_client
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def _search(self, query: str, location: str, num: int) -> Dict[str, Any]:
        async with self._semaphore:
            return await self.search.search(query, location=location, num=num)

    async def conduct(
        self,
        request: ResearchRequest,
        target_keywords: Optional[List[str]] = None,
    ) -> EnhancedResearchResult:
        """
        Run all search queries for a request.

        Args:
            request: Research request
            target_keywords: Explicit keywords (generated from industry when omitted)

        Returns:
            EnhancedResearchResult
        """
        keywords = target_keywords or generate_keywords(request.industry, request.location)
        location = parse_location(request.location)
        search_location = location.full if request.location else "United Kingdom"
        domain = request.domain

        logger.info(
            f"Enhanced research for {request.company_name}: "
            f"{len(keywords)} keywords in {search_location}"
        )

        # Deep results only matter when we look for the client's own position
        depth = 100 if domain else 10

        keyword_responses = await asyncio.gather(
            *[self._search(kw, search_location, depth) for kw in keywords]
        )

        location_queries = self._location_queries(request, location.parts)
        location_responses = await asyncio.gather(
            *[self._search(query, search_location, 10) for _, query in location_queries]
        )

        rankings = [
            self._keyword_ranking(kw, response, domain)
            for kw, response in zip(keywords, keyword_responses)
        ]
        competitors = self._find_competitors(
            keywords[: self.COMPETITOR_KEYWORDS],
            keyword_responses[: self.COMPETITOR_KEYWORDS],
            domain,
        )
        location_opportunities = [
            LocationOpportunity(
                location=place,
                keyword=query,
                estimated_volume=estimate_search_volume(query),
                competition=estimate_difficulty(organic_results(response)),
            )
            for (place, query), response in zip(location_queries, location_responses)
        ]
        content_opportunities = self._content_opportunities(
            list(keyword_responses) + list(location_responses)
        )

        result = EnhancedResearchResult(
            keywords=rankings,
            competitors=competitors,
            location_opportunities=location_opportunities,
            content_opportunities=content_opportunities,
            quick_wins=identify_quick_wins(rankings, competitors),
        )

        logger.info(
            f"Enhanced research complete: {len(rankings)} keywords, "
            f"{len(competitors)} competitors, {len(location_opportunities)} locations, "
            f"{len(content_opportunities)} questions"
        )
        return result

    def _location_queries(self, request: ResearchRequest, parts: List[str]) -> List[tuple]:
        """(location, query) pairs for local and regional packages."""
        if not request.is_local or not parts:
            return []

        service = get_services_for_industry(request.industry).primary_services[0]
        places = [p for p in parts if p.upper() not in ("UK", "GB", "UNITED KINGDOM", "ENGLAND")]
        return [(place, f"{service} {place}") for place in places[: self.MAX_LOCATIONS]]

    def _keyword_ranking(
        self,
        keyword: str,
        response: Dict[str, Any],
        domain: Optional[str],
    ) -> KeywordRanking:
        results = organic_results(response)
        position = find_client_position(results, domain)

        url = None
        if position is not None:
            url = next(
                (r.get("link") for r in results if is_client_link(r.get("link") or "", domain)),
                None,
            )

        return KeywordRanking(
            keyword=keyword,
            position=position,
            search_volume=estimate_search_volume(keyword),
            difficulty=estimate_difficulty(results),
            intent=detect_intent(keyword),
            url=url,
        )

    def _find_competitors(
        self,
        keywords: List[str],
        responses: List[Dict[str, Any]],
        client_domain: Optional[str],
    ) -> List[DiscoveredCompetitor]:
        """Domains that keep appearing in the top 10, by appearance count."""
        seen: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

        for keyword, response in zip(keywords, responses):
            for index, result in enumerate(organic_results(response)[:10]):
                domain = extract_domain(result.get("link") or "")
                if not domain or is_client_link(domain, client_domain) or is_excluded_domain(domain):
                    continue

                entry = seen.setdefault(domain, {
                    "name": competitor_name_from_title(result.get("title", ""), domain),
                    "rankings": [],
                })
                entry["rankings"].append(CompetitorRanking(keyword=keyword, position=index + 1))

        competitors = []
        for domain, entry in seen.items():
            rankings = entry["rankings"]
            traffic = sum(
                round(estimate_search_volume(r.keyword) * get_ctr_for_position(r.position))
                for r in rankings
            )
            competitors.append(DiscoveredCompetitor(
                name=entry["name"],
                domain=domain,
                appearances=len(rankings),
                rankings=rankings,
                estimated_traffic=traffic,
            ))

        # Stable sort keeps first-seen order among ties
        competitors.sort(key=lambda c: c.appearances, reverse=True)
        return competitors[: self.MAX_COMPETITORS]

    def _content_opportunities(self, responses: List[Dict[str, Any]]) -> List[ContentOpportunity]:
        """Unique "people also ask" questions across all responses."""
        questions: "OrderedDict[str, ContentOpportunity]" = OrderedDict()

        for response in responses:
            for item in (response or {}).get("related_questions") or []:
                question = (item.get("question") or "").strip()
                if not question or question.lower() in questions:
                    continue
                questions[question.lower()] = ContentOpportunity(
                    question=question,
                    snippet=item.get("snippet") or "",
                    source=item.get("link") or "",
                )

        return list(questions.values())[: self.MAX_CONTENT_OPPORTUNITIES]
