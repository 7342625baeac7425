"""
Test Suite for Prospect Research

Tests keyword generation, domain filtering, the search heuristics, the
SerpAPI client (mock transport), live search research and the Claude
deep-research agent.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from proposal_engine.llm import ProposalParseError, RetryPolicy
from proposal_engine.research import (
    CompanyResearchAgent,
    EnhancedResearchAgent,
    RequestValidationError,
    ResearchRequest,
    ResearchResult,
    ResearchValidationError,
    SearchAPIError,
    SerpApiClient,
    build_research_prompt,
    detect_intent,
    estimate_difficulty,
    estimate_search_volume,
    extract_domain,
    generate_keywords,
    get_services_for_industry,
    parse_location,
    validate_company_data,
    validate_research_request,
)
from proposal_engine.research.external import (
    competitor_name_from_title,
    find_client_position,
    get_ctr_for_position,
)
from proposal_engine.research.keywords import match_industry
from proposal_engine.research.models import coerce_int
from proposal_engine.utils.domain_filter import get_exclusion_reason, is_excluded_domain


ACME = ResearchRequest(
    company_name="Acme Roofing",
    website="https://www.acmeroofing.co.uk",
    industry="Roofing",
    location="Leeds, UK",
    package_tier="local",
)


# ============================================================================
# Keywords
# ============================================================================

class TestKeywords:
    """Industry matching and service + location queries."""

    def test_generate_keywords_for_roofing(self):
        keywords = generate_keywords("Roofing", "Leeds, UK")

        assert keywords[:4] == [
            "roofing services Leeds",
            "roof installation Leeds",
            "roofers Leeds",
            "roof repairs Leeds",
        ]
        assert "roofing services near me" in keywords
        assert len(keywords) == 8
        assert len(set(keywords)) == len(keywords)

    def test_max_keywords(self):
        assert len(generate_keywords("Plumbing", "Bristol", max_keywords=3)) == 3

    def test_without_location_uses_bare_services(self):
        keywords = generate_keywords("Roofing", None)
        assert keywords[0] == "roofing services"

    def test_industry_matching(self):
        assert match_industry("roofing") == "Roofing"
        assert match_industry("Commercial Roofing Contractors") == "Roofing"
        assert match_industry("Roofing.  ") == "Roofing"
        assert match_industry(None) == "Services"
        assert match_industry("Underwater basket weaving") == "Services"

    def test_services_never_empty(self):
        services = get_services_for_industry("something unknown")
        assert services.primary_services

    @pytest.mark.parametrize("industry", ["", "   ", None, "\t\n"])
    def test_blank_industry_gets_default_services(self, industry):
        assert match_industry(industry) == "Services"
        assert get_services_for_industry(industry).primary_services

    def test_parse_location(self):
        location = parse_location("Leeds, West Yorkshire, UK")
        assert location.city == "Leeds"
        assert location.county == "West Yorkshire"
        assert location.country == "UK"
        assert parse_location(None).full == "UK"
        assert parse_location("Leeds").city == "Leeds"


# ============================================================================
# Domain Filter
# ============================================================================

class TestDomainFilter:
    """Directories and platforms are never competitors."""

    @pytest.mark.parametrize("domain", [
        "yell.com", "www.checkatrade.com", "uk.trustpilot.com",
        "en.wikipedia.org", "leeds.gov.uk", "facebook.com", "",
    ])
    def test_excluded(self, domain):
        assert is_excluded_domain(domain)

    def test_real_business_is_kept(self):
        assert not is_excluded_domain("leedsroofing.co.uk")
        assert get_exclusion_reason("leedsroofing.co.uk") is None

    def test_exclusion_reason(self):
        assert get_exclusion_reason("yell.com") == "Trade directory"
        assert get_exclusion_reason("www.youtube.com") == "Video platform"


# ============================================================================
# Heuristics
# ============================================================================

class TestSearchHeuristics:
    """Volume, difficulty, intent and CTR estimates."""

    def test_search_volume_by_shape(self):
        assert estimate_search_volume("roofers") == 1000
        assert estimate_search_volume("roofers leeds") == 500
        assert estimate_search_volume("roofers near me") == 300
        assert estimate_search_volume("best flat roof repair company") == 100
        assert estimate_search_volume("flat roof repair") == 250

    def test_difficulty(self):
        assert estimate_difficulty([]) == "Low"
        assert estimate_difficulty([{"link": f"https://site{i}.co.uk"} for i in range(10)]) == "Medium"
        assert estimate_difficulty([{"link": "https://www.amazon.co.uk/roof"}]) == "High"
        assert estimate_difficulty([
            {"link": "https://en.wikipedia.org/wiki/Roof"},
            {"link": "https://www.bbc.co.uk/news"},
        ]) == "Very High"

    def test_intent(self):
        assert detect_intent("roof replacement cost") == "Transactional"
        assert detect_intent("how to fix a leaking roof") == "Informational"
        assert detect_intent("best roofers leeds") == "Commercial"
        assert detect_intent("roofers near me") == "Local"
        assert detect_intent("acme roofing") == "Navigational"

    def test_ctr_curve(self):
        assert get_ctr_for_position(1) == pytest.approx(0.317)
        assert get_ctr_for_position(0) == 0.0
        assert get_ctr_for_position(15) == pytest.approx(0.0075)
        assert get_ctr_for_position(50) == pytest.approx(0.001)

    def test_client_position(self):
        results = [{"link": "https://other.co.uk"}, {"link": "https://acmeroofing.co.uk/a", "position": 2}]
        assert find_client_position(results, "acmeroofing.co.uk") == 2
        assert find_client_position(results, None) is None
        assert find_client_position(results, "missing.co.uk") is None

    @pytest.mark.parametrize("link,expected", [
        ("https://notacme.co.uk/roofing", None),
        ("https://acme.co.uk.evil.com/", None),
        ("https://example.com/?ref=acme.co.uk", None),
        ("https://www.acme.co.uk/services", 1),
        ("https://blog.acme.co.uk/post", 1),
        ("https://ACME.co.uk", 1),
    ])
    def test_client_position_matches_hostname(self, link, expected):
        assert find_client_position([{"link": link}], "acme.co.uk") == expected

    def test_client_subdomain_is_not_a_competitor(self):
        agent = EnhancedResearchAgent(MagicMock())
        responses = [{"organic_results": [
            {"link": "https://blog.acmeroofing.co.uk/guide", "title": "Acme blog"},
            {"link": "https://notacmeroofing.co.uk", "title": "Not Acme"},
        ]}]
        competitors = agent._find_competitors(["roofers leeds"], responses, "acmeroofing.co.uk")
        assert [c.domain for c in competitors] == ["notacmeroofing.co.uk"]

    def test_competitor_name_from_title(self):
        assert competitor_name_from_title("Leeds Roofing Co | Roofers in Leeds", "x.co.uk") == "Leeds Roofing Co"
        assert competitor_name_from_title("", "x.co.uk") == "x.co.uk"


# ============================================================================
# Request Validation
# ============================================================================

class TestRequestValidation:
    """Preconditions checked before any network call."""

    def test_domain(self):
        assert ACME.domain == "acmeroofing.co.uk"
        assert extract_domain("HTTP://WWW.Example.com/path?q=1") == "example.com"

    def test_missing_name_raises(self):
        with pytest.raises(RequestValidationError):
            validate_company_data(ResearchRequest(company_name="  "))

    def test_missing_fields_warn(self):
        warnings = validate_company_data(ResearchRequest(company_name="Acme"))
        assert len(warnings) == 3

    def test_name_too_long(self):
        with pytest.raises(RequestValidationError):
            validate_research_request(ResearchRequest(company_name="A" * 100))

    def test_invalid_tier(self):
        with pytest.raises(RequestValidationError):
            validate_research_request(ResearchRequest(company_name="Acme", package_tier="global"))

    def test_invalid_website(self):
        with pytest.raises(RequestValidationError):
            validate_research_request(ResearchRequest(company_name="Acme", website="not a url"))

    def test_valid_request(self):
        validate_research_request(ACME)

    def test_coerce_int(self):
        assert coerce_int("1,200 visitors") == 1200
        assert coerce_int(12.7) == 12
        assert coerce_int("unknown") is None
        assert coerce_int(True) is None

    @pytest.mark.parametrize("value,expected", [
        ("1.2K", 1200),
        ("2.5m", 2_500_000),
        ("~3k monthly visitors", 3000),
        ("1.5 M", 1_500_000),
        ("500 monthly visitors", 500),
        ("12 km away", 12),
    ])
    def test_coerce_int_suffixes(self, value, expected):
        assert coerce_int(value) == expected

    def test_suffixed_traffic_reaches_metrics(self, sample_research_data):
        sample_research_data["competitorAnalysis"]["currentMetrics"]["monthlyTraffic"] = "1.2K"
        research = ResearchResult.model_validate(sample_research_data)
        assert research.current_monthly_traffic == 1200


# ============================================================================
# SerpAPI Client
# ============================================================================

class TestSerpApiClient:
    """HTTP handling against a mock transport."""

    @pytest.mark.asyncio
    async def test_search_sends_params(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(dict(request.url.params))
            return httpx.Response(200, json={"organic_results": [{"position": 1, "link": "https://a.co.uk"}]})

        async with SerpApiClient("key", transport=httpx.MockTransport(handler)) as client:
            result = await client.search("roofers Leeds", location="Leeds, UK", num=100)

        assert result["organic_results"][0]["link"] == "https://a.co.uk"
        assert seen["q"] == "roofers Leeds"
        assert seen["location"] == "Leeds, UK"
        assert seen["num"] == "100"
        assert seen["gl"] == "uk"
        assert seen["api_key"] == "key"

    @pytest.mark.asyncio
    async def test_no_results_is_not_an_error(self):
        def handler(request):
            return httpx.Response(200, json={"error": "Google hasn't returned any results for this query."})

        async with SerpApiClient("key", transport=httpx.MockTransport(handler)) as client:
            result = await client.search("very obscure query")

        assert result["organic_results"] == []

    @pytest.mark.asyncio
    async def test_server_errors_retried_then_raised(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, json={"error": "busy"})

        policy = RetryPolicy(max_retries=2, sleep=AsyncMock())
        async with SerpApiClient("key", retry_policy=policy, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(SearchAPIError) as exc_info:
                await client.search("roofers")

        assert exc_info.value.status_code == 503
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_invalid_key_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"error": "Invalid API key"})

        policy = RetryPolicy(max_retries=3, sleep=AsyncMock())
        async with SerpApiClient("bad", retry_policy=policy, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(SearchAPIError):
                await client.search("roofers")

        assert len(calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["<html>maintenance</html>", "[1, 2, 3]"])
    async def test_non_object_body_fails_once(self, body):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text=body)

        policy = RetryPolicy(max_retries=3, sleep=AsyncMock())
        async with SerpApiClient("key", retry_policy=policy, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(SearchAPIError) as exc_info:
                await client.search("roofers")

        assert "Invalid JSON response" in str(exc_info.value)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connection_errors_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"organic_results": []})

        policy = RetryPolicy(max_retries=2, sleep=AsyncMock())
        async with SerpApiClient("key", retry_policy=policy, transport=httpx.MockTransport(handler)) as client:
            result = await client.search("roofers")

        assert result["organic_results"] == []
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_closed_client_raises(self):
        client = SerpApiClient("key", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        await client.close()
        with pytest.raises(SearchAPIError):
            await client.search("roofers")


# ============================================================================
# Enhanced Research
# ============================================================================

class TestEnhancedResearchAgent:
    """Live search research with a mocked search client."""

    @pytest.fixture
    def search_client(self, serp_response):
        responses = {
            "roofers Leeds": serp_response([
                "https://leedsroofing.co.uk/",
                "https://www.yell.com/roofers-leeds",
                "https://acmeroofing.co.uk/roofers",
                "https://yorkshireroofers.com/",
            ], questions=["How much does a new roof cost?"]),
            "roof repairs Leeds": serp_response([
                "https://leedsroofing.co.uk/repairs",
                "https://yorkshireroofers.com/repairs",
            ]),
            "roofing services Leeds": serp_response(
                ["https://www.leedsroofing.co.uk/services"],
                questions=["How much does a new roof cost?", "Do roofers need planning permission?"],
            ),
        }

        async def fake_search(query, location=None, num=10):
            return responses.get(query, {"organic_results": []})

        client = MagicMock()
        client.search = AsyncMock(side_effect=fake_search)
        return client

    @pytest.mark.asyncio
    async def test_conduct(self, search_client):
        agent = EnhancedResearchAgent(search_client)
        result = await agent.conduct(
            ACME,
            target_keywords=["roofers Leeds", "roof repairs Leeds", "roofing services Leeds", "roofers near me"],
        )

        rankings = {k.keyword: k for k in result.keywords}
        assert rankings["roofers Leeds"].position == 3
        assert rankings["roofers Leeds"].url == "https://acmeroofing.co.uk/roofers"
        assert rankings["roof repairs Leeds"].position is None
        assert rankings["roofers near me"].intent == "Local"

        domains = [c.domain for c in result.competitors]
        assert domains == ["leedsroofing.co.uk", "yorkshireroofers.com"]
        assert result.competitors[0].appearances == 3
        assert "yell.com" not in domains
        assert "acmeroofing.co.uk" not in domains

        assert [o.location for o in result.location_opportunities] == ["Leeds"]
        assert [q.question for q in result.content_opportunities] == [
            "How much does a new roof cost?",
            "Do roofers need planning permission?",
        ]

    @pytest.mark.asyncio
    async def test_deep_results_requested_when_domain_known(self, search_client):
        await EnhancedResearchAgent(search_client).conduct(ACME, target_keywords=["roofers Leeds"])

        first_call = search_client.search.await_args_list[0]
        assert first_call.kwargs["num"] == 100
        assert first_call.kwargs["location"] == "Leeds, UK"

    @pytest.mark.asyncio
    async def test_national_skips_location_queries(self, search_client):
        national = ResearchRequest(company_name="Acme", industry="Roofing", location="Leeds, UK",
                                   package_tier="national")
        result = await EnhancedResearchAgent(search_client).conduct(national, target_keywords=["roofers Leeds"])

        assert result.location_opportunities == []
        assert search_client.search.await_count == 1

    @pytest.mark.asyncio
    async def test_search_failure_propagates(self):
        client = MagicMock()
        client.search = AsyncMock(side_effect=SearchAPIError("down", status_code=500))

        with pytest.raises(SearchAPIError):
            await EnhancedResearchAgent(client).conduct(ACME, target_keywords=["roofers Leeds"])


# ============================================================================
# Company Research
# ============================================================================

class TestCompanyResearchAgent:
    """Claude deep research with mocked gateway and search data."""

    @pytest.fixture
    def enhanced_agent(self, enhanced_research):
        agent = MagicMock()
        agent.conduct = AsyncMock(return_value=enhanced_research)
        return agent

    def test_prompt_includes_live_data_and_notes(self, enhanced_research):
        prompt = build_research_prompt(ACME, enhanced_research, "Owner wants more flat roof work")

        assert "Acme Roofing" in prompt
        assert "mapped to: Roofing" in prompt
        assert "leedsroofing.co.uk" in prompt
        assert "Owner wants more flat roof work" in prompt

    def test_prompt_without_live_data(self):
        prompt = build_research_prompt(ACME, None)
        assert "LIVE SEARCH DATA: not available" in prompt

    @pytest.mark.asyncio
    async def test_research_with_live_data(self, mock_gateway, make_llm_response, sample_research_data,
                                           enhanced_agent, enhanced_research):
        mock_gateway.call_for_research.return_value = make_llm_response(
            sample_research_data, input_tokens=9000, output_tokens=3000, thinking_tokens=2000, cost=0.4,
        )
        progress = []

        result = await CompanyResearchAgent(mock_gateway, enhanced_agent).perform_deep_research(
            ACME, on_progress=lambda stage, percent: progress.append(percent),
        )

        assert result.enhanced_research == enhanced_research
        assert result.current_monthly_traffic == 300
        assert result.total_tokens_used == 14000
        assert result.thinking_tokens_used == 2000
        assert result.estimated_cost == pytest.approx(0.4)
        assert result.location_strategy is not None
        assert progress == [10, 40, 90, 100]

    @pytest.mark.asyncio
    async def test_research_without_search_client(self, mock_gateway, make_llm_response, sample_research_data):
        mock_gateway.call_for_research.return_value = make_llm_response(sample_research_data)

        result = await CompanyResearchAgent(mock_gateway).perform_deep_research(ACME)

        assert result.enhanced_research is None

    @pytest.mark.asyncio
    async def test_national_drops_location_strategy(self, mock_gateway, make_llm_response, sample_research_data):
        mock_gateway.call_for_research.return_value = make_llm_response(sample_research_data)
        national = ResearchRequest(company_name="Acme Roofing", industry="Roofing", package_tier="national")

        result = await CompanyResearchAgent(mock_gateway).perform_deep_research(national)

        assert result.location_strategy is None

    @pytest.mark.asyncio
    async def test_missing_name_fails_before_any_call(self, mock_gateway, enhanced_agent):
        with pytest.raises(RequestValidationError):
            await CompanyResearchAgent(mock_gateway, enhanced_agent).perform_deep_research(
                ResearchRequest(company_name="")
            )

        enhanced_agent.conduct.assert_not_awaited()
        mock_gateway.call_for_research.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_response(self, mock_gateway, make_llm_response):
        mock_gateway.call_for_research.return_value = make_llm_response("I could not research this company.")

        with pytest.raises(ProposalParseError):
            await CompanyResearchAgent(mock_gateway).perform_deep_research(ACME)

    @pytest.mark.asyncio
    async def test_incomplete_research(self, mock_gateway, make_llm_response, sample_research_data):
        del sample_research_data["keywordResearch"]
        mock_gateway.call_for_research.return_value = make_llm_response(sample_research_data)

        with pytest.raises(ResearchValidationError) as exc_info:
            await CompanyResearchAgent(mock_gateway).perform_deep_research(ACME)
        assert exc_info.value.errors
