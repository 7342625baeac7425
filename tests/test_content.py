"""
Test Suite for Proposal Content

Tests package tiers, the projection calculator, the sanitizer, the typed
proposal schemas, the reference document loader and both content
generators (prompt building and pinning of calculated figures).
"""

import json

import pytest

from proposal_engine.content import (
    ConciseContentGenerator,
    ConciseProposal,
    ContentGenerationRequest,
    ContentValidationError,
    DetailedContentGenerator,
    DetailedProposal,
    ReferenceDocumentLoader,
    calculate_monthly_progression,
    calculate_projections,
    calculate_roi,
    describe_package,
    fix_encoding,
    format_projections_for_prompt,
    get_package,
    growth_multiplier_for,
    load_proposal_content,
    parse_proposal_content,
    require_package,
    sanitize_content,
)
from proposal_engine.content.projections import normalize_conversion_rate, round_half_up
from proposal_engine.llm import ProposalParseError
from proposal_engine.research.models import coerce_int


# ============================================================================
# Packages
# ============================================================================

class TestPackages:
    """Fixed tier table."""

    def test_lookup_by_tier_and_name(self):
        assert get_package("local").monthly_investment == 2000
        assert get_package("Regional Authority").tier == "regional"
        assert get_package("NATIONAL").monthly_investment == 5000
        assert get_package("enterprise") is None

    def test_require_unknown_tier(self):
        with pytest.raises(ValueError):
            require_package("enterprise")

    def test_growth_multipliers(self):
        assert growth_multiplier_for("local") == 2.0
        assert growth_multiplier_for("regional") == 3.0
        assert growth_multiplier_for("national") == 4.0
        assert growth_multiplier_for("Mystery Package") == 1.5
        assert growth_multiplier_for(None) == 1.5

    def test_annual_investment(self):
        assert get_package("regional").annual_investment == 36000

    def test_describe(self):
        text = describe_package("local")
        assert "Local Dominance" in text
        assert "£2,000/month" in text


# ============================================================================
# Projections
# ============================================================================

class TestProjections:
    """Deterministic funnel arithmetic."""

    def test_local_projection(self):
        projection = calculate_projections(300, "local")

        assert projection.current_traffic == 300
        assert projection.multiplier == 2.0
        assert projection.projected_traffic == 600
        assert projection.monthly_leads == 36
        assert projection.monthly_customers == 13
        assert projection.monthly_revenue == 65000
        assert projection.annual_leads == 432
        assert projection.annual_revenue == 780000
        assert projection.package_name == "Local Dominance"

    def test_same_inputs_same_outputs(self):
        assert calculate_projections(1234, "regional", 7500) == calculate_projections(1234, "regional", 7500)

    def test_unknown_traffic_defaults_to_200(self):
        projection = calculate_projections(None, "local")
        assert projection.current_traffic == 200
        assert projection.projected_traffic == 400
        assert projection.monthly_customers == 8
        assert projection.monthly_revenue == 40000

    def test_zero_traffic_is_a_real_value(self):
        projection = calculate_projections(0, "national")
        assert projection.current_traffic == 0
        assert projection.projected_traffic == 0
        assert projection.monthly_revenue == 0

    @pytest.mark.parametrize("package", ["local", "regional", "national", "Mystery Package"])
    def test_more_traffic_never_projects_less(self, package):
        previous = None
        for traffic in [0, 1, 5, 17, 99, 100, 250, 1200, 9999, 50000]:
            projection = calculate_projections(traffic, package)
            if previous is not None:
                assert projection.projected_traffic >= previous.projected_traffic
                assert projection.monthly_revenue >= previous.monthly_revenue
                assert projection.annual_revenue >= previous.annual_revenue
            previous = projection

    def test_suffixed_traffic_projects_growth(self):
        projection = calculate_projections(coerce_int("1.2K"), "local")
        assert projection.current_traffic == 1200
        assert projection.projected_traffic == 2400
        assert projection.monthly_revenue > 0

    def test_unknown_package_uses_default_multiplier(self):
        projection = calculate_projections(100, "Mystery Package")
        assert projection.multiplier == 1.5
        assert projection.projected_traffic == 150
        assert projection.package_name == "Mystery Package"

    def test_missing_deal_value_uses_default(self):
        assert calculate_projections(300, "local", avg_deal_value=None).avg_deal_value == 5000
        assert calculate_projections(300, "local", avg_deal_value=0).avg_deal_value == 5000

    def test_customer_conversion_rate(self):
        projection = calculate_projections(300, "local", conversion_rate=5)
        assert projection.conversion_rates.visitor_to_lead == pytest.approx(0.05)
        assert projection.monthly_leads == 30

    def test_profit_per_deal(self):
        projection = calculate_projections(300, "local", profit_per_deal=1500)
        assert projection.monthly_profit == 19500
        assert projection.annual_profit == 234000
        assert calculate_projections(300, "local").annual_profit is None

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.4) == 2

    def test_normalize_conversion_rate(self):
        assert normalize_conversion_rate(0.04) == pytest.approx(0.04)
        assert normalize_conversion_rate(4) == pytest.approx(0.04)
        assert normalize_conversion_rate(0) is None
        assert normalize_conversion_rate("n/a") is None

    def test_progression(self):
        points = calculate_monthly_progression(300, 2.0)

        assert [p.month for p in points] == [0, 1, 2, 3, 6, 9, 12]
        by_month = {p.month: p for p in points}
        assert by_month[0].traffic == 300
        assert by_month[3].traffic == 390
        assert by_month[6].traffic == 480
        assert by_month[6].leads == 29
        assert by_month[6].revenue == 50000
        assert by_month[9].traffic == 555
        assert by_month[12].traffic == 600

    def test_roi(self):
        roi = calculate_roi(2000, calculate_projections(300, "local"))
        assert roi.annual_investment == 24000
        assert roi.roi_percentage == 3150
        assert roi.breakeven_months == 1

    def test_roi_without_revenue(self):
        roi = calculate_roi(2000, calculate_projections(0, "local"))
        assert roi.breakeven_months is None
        assert roi.roi_percentage == -100

    def test_prompt_block(self):
        text = format_projections_for_prompt(calculate_projections(300, "local"), 2000)
        assert "Projected Traffic (Month 12): 600 visitors/month" in text
        assert "Monthly Revenue: £65,000" in text
        assert "ROI: 3150%" in text


# ============================================================================
# Sanitizer
# ============================================================================

class TestSanitizer:
    """Mojibake repair and null removal."""

    def test_fix_pound_sign(self):
        assert fix_encoding("Â£2,000 per month") == "£2,000 per month"

    def test_fix_smart_quote(self):
        assert fix_encoding("donâ€™t wait") == "don’t wait"

    def test_control_characters_removed(self):
        assert fix_encoding("ab\x00c\x07d") == "abcd"

    def test_clean_text_untouched(self):
        assert fix_encoding("£2,000 – done") == "£2,000 – done"

    def test_nulls_dropped_recursively(self):
        data = {"a": None, "b": {"c": None, "d": "Â£5"}, "e": [None, "x"]}
        cleaned = sanitize_content(data)

        assert cleaned == {"b": {"d": "£5"}, "e": ["x"]}
        assert data["a"] is None


# ============================================================================
# Schemas
# ============================================================================

class TestSchemas:
    """Typed proposal validation."""

    def test_concise_parses(self, sample_concise_content):
        content = parse_proposal_content(sample_concise_content, "concise")

        assert isinstance(content, ConciseProposal)
        assert content.kind == "concise"
        assert content.investment.monthly_investment == 2000
        assert content.strategy.timeline[0].phase == "Month 1-2"

    def test_detailed_parses(self, sample_detailed_content):
        content = parse_proposal_content(sample_detailed_content, "detailed")

        assert isinstance(content, DetailedProposal)
        assert content.company_name == "Acme Roofing"
        assert content.local_seo is not None
        assert content.brutal_truth_callouts[0].type == "warning"

    def test_kind_comes_from_caller(self, sample_concise_content):
        sample_concise_content["kind"] = "detailed"
        assert parse_proposal_content(sample_concise_content, "concise").kind == "concise"

    def test_missing_section_raises(self, sample_concise_content):
        del sample_concise_content["investment"]

        with pytest.raises(ContentValidationError) as exc_info:
            parse_proposal_content(sample_concise_content, "concise")
        assert "investment" in str(exc_info.value)

    def test_not_an_object(self):
        with pytest.raises(ContentValidationError):
            parse_proposal_content(["a"], "concise")

    def test_unknown_kind(self, sample_concise_content):
        with pytest.raises(ValueError):
            parse_proposal_content(sample_concise_content, "brochure")

    def test_lenient_numbers_and_text(self, sample_concise_content):
        sample_concise_content["investment"]["monthlyInvestment"] = "£2,000/month"
        sample_concise_content["investment"]["roiSummary"]["projectedRevenue"] = "1.2k"
        sample_concise_content["introduction"]["currentLandscape"] = ["Line one", "Line two"]
        sample_concise_content["competition"]["keyGaps"] = "Only one gap"

        content = parse_proposal_content(sample_concise_content, "concise")

        assert content.investment.monthly_investment == 2000
        assert content.investment.roi_summary.projected_revenue == 1200
        assert content.introduction.current_landscape == "Line one\nLine two"
        assert content.competition.key_gaps == ["Only one gap"]

    @pytest.mark.parametrize("value,expected", [
        (1500000.0, "1500000"),
        (1e16, "10000000000000000"),
        (12.5, "12.5"),
        (42, "42"),
    ])
    def test_numbers_as_text_keep_every_digit(self, sample_concise_content, value, expected):
        sample_concise_content["introduction"]["currentLandscape"] = value
        content = parse_proposal_content(sample_concise_content, "concise")
        assert content.introduction.current_landscape == expected

    @pytest.mark.parametrize("value,expected", [("1.2K", 1200), ("2.5m", 2_500_000), ("£3,500", 3500)])
    def test_suffixed_amounts(self, sample_concise_content, value, expected):
        sample_concise_content["investment"]["roiSummary"]["projectedRevenue"] = value
        content = parse_proposal_content(sample_concise_content, "concise")
        assert content.investment.roi_summary.projected_revenue == expected

    def test_callout_type_normalized(self, sample_detailed_content):
        sample_detailed_content["brutalTruthCallouts"] = [
            {"title": "A", "content": "x", "type": "INFO"},
            {"title": "B", "content": "y", "type": "danger"},
        ]
        content = parse_proposal_content(sample_detailed_content, "detailed")
        assert [c.type for c in content.brutal_truth_callouts] == ["info", "warning"]

    def test_stored_content_round_trip(self, sample_detailed_content):
        stored = parse_proposal_content(sample_detailed_content, "detailed").model_dump(by_alias=True)
        assert isinstance(load_proposal_content(stored), DetailedProposal)


# ============================================================================
# Reference Document
# ============================================================================

class TestReferenceDocumentLoader:
    """Lazy cached reference PDF."""

    def test_directory_resolves_default_filename(self, tmp_path):
        loader = ReferenceDocumentLoader(tmp_path)
        assert loader.path == tmp_path / "reference-proposal.pdf"

    def test_missing_document(self, tmp_path):
        loader = ReferenceDocumentLoader(tmp_path)
        assert not loader.is_available()
        assert loader.load() is None
        assert loader.as_attachment() is None

    def test_load_is_cached_until_invalidated(self, tmp_path):
        path = tmp_path / "reference-proposal.pdf"
        path.write_bytes(b"%PDF-1.4 reference")
        loader = ReferenceDocumentLoader(path)

        assert loader.load() == b"%PDF-1.4 reference"
        path.unlink()
        assert loader.load() == b"%PDF-1.4 reference"

        loader.invalidate()
        assert loader.load() is None

    def test_attachment_block(self, tmp_path):
        path = tmp_path / "reference-proposal.pdf"
        path.write_bytes(b"%PDF-1.4")
        block = ReferenceDocumentLoader(path).as_attachment()

        assert block["type"] == "document"
        assert block["source"]["media_type"] == "application/pdf"
        assert block["source"]["data"] == "JVBERi0xLjQ="


# ============================================================================
# Generators
# ============================================================================

@pytest.fixture
def content_request(research_result):
    return ContentGenerationRequest(
        research=research_result,
        company_name="Acme Roofing",
        package_tier="local",
        contact_name="Jane Smith",
        location="Leeds, UK",
        notes="Owner says average job is £5,000. Wants 2 more roofs a month.",
    )


class TestConciseContentGenerator:
    """Concise proposal generation with a mocked gateway."""

    @pytest.mark.asyncio
    async def test_calculated_figures_are_pinned(self, mock_gateway, make_llm_response,
                                                 sample_concise_content, content_request):
        sample_concise_content["investment"]["monthlyInvestment"] = 1500
        sample_concise_content["investment"]["packageName"] = "Starter"
        sample_concise_content["investment"]["roiSummary"]["roi"] = 999
        mock_gateway.call_for_content.return_value = make_llm_response(sample_concise_content, cost=0.07)

        result = await ConciseContentGenerator(mock_gateway).generate_with_telemetry(content_request)
        content = result.content

        assert content.company_name == "Acme Roofing"
        assert content.investment.package_name == "Local Dominance"
        assert content.investment.monthly_investment == 2000
        assert content.investment.roi_summary.roi == 3150
        assert content.investment.roi_summary.total_investment == 24000
        assert content.investment.roi_summary.projected_revenue == 780000
        assert content.investment.roi_summary.breakeven == "1 months"
        assert content.cover_page.prepared_for == "Jane Smith"
        assert result.projection.projected_traffic == 600
        assert result.cost == pytest.approx(0.07)
        assert result.usage.total_tokens == 1500

    @pytest.mark.asyncio
    async def test_prompt_contents(self, mock_gateway, make_llm_response, sample_concise_content, content_request):
        mock_gateway.call_for_content.return_value = make_llm_response(sample_concise_content)

        await ConciseContentGenerator(mock_gateway).generate(content_request)

        system_prompt, user_prompt, options = mock_gateway.call_for_content.await_args.args
        assert "CONCISE" in system_prompt
        assert "SDR NOTES (USE THESE EXACT NUMBERS):" in user_prompt
        assert "Owner says average job is £5,000" in user_prompt
        assert "Monthly Revenue: £65,000" in user_prompt
        assert "leedsroofing.co.uk" in user_prompt
        assert options.model is None
        assert options.attachments == []

    @pytest.mark.asyncio
    async def test_prefer_opus(self, mock_gateway, make_llm_response, sample_concise_content, content_request):
        mock_gateway.call_for_content.return_value = make_llm_response(sample_concise_content)
        content_request.prefer_opus = True

        await ConciseContentGenerator(mock_gateway).generate(content_request)

        options = mock_gateway.call_for_content.await_args.args[2]
        assert options.model == "claude-opus-4-20250514"

    @pytest.mark.asyncio
    async def test_fenced_response(self, mock_gateway, make_llm_response, sample_concise_content, content_request):
        fenced = "```json\n" + json.dumps(sample_concise_content) + "\n```"
        mock_gateway.call_for_content.return_value = make_llm_response(fenced)

        content = await ConciseContentGenerator(mock_gateway).generate(content_request)
        assert content.summary.call_to_action == "Let's get started this month."

    @pytest.mark.asyncio
    async def test_malformed_response(self, mock_gateway, make_llm_response, content_request):
        mock_gateway.call_for_content.return_value = make_llm_response(
            "Sure, here's your proposal: {not valid json"
        )

        with pytest.raises(ProposalParseError):
            await ConciseContentGenerator(mock_gateway).generate(content_request)

    @pytest.mark.asyncio
    async def test_incomplete_response(self, mock_gateway, make_llm_response,
                                       sample_concise_content, content_request):
        del sample_concise_content["strategy"]
        mock_gateway.call_for_content.return_value = make_llm_response(sample_concise_content)

        with pytest.raises(ContentValidationError):
            await ConciseContentGenerator(mock_gateway).generate(content_request)


class TestDetailedContentGenerator:
    """Detailed proposal generation with a mocked gateway."""

    @pytest.mark.asyncio
    async def test_projections_pinned(self, mock_gateway, make_llm_response,
                                      sample_detailed_content, content_request):
        sample_detailed_content["projections"]["month12"]["revenue"] = 99999
        sample_detailed_content["projections"]["roi"]["percentage"] = 12
        sample_detailed_content["simpleMathBreakdown"] = {
            "steps": [{"month": "Month 1", "traffic": 1, "leads": 1, "customers": 1, "revenue": 1}],
            "totalInvestment": 1,
            "totalReturn": 1,
            "roi": 1,
        }
        mock_gateway.call_for_content.return_value = make_llm_response(sample_detailed_content)

        content = await DetailedContentGenerator(mock_gateway).generate(content_request)

        assert content.projections.month12.revenue == 65000
        assert content.projections.month6.traffic == 480
        assert content.projections.roi.percentage == 3150
        assert content.projections.roi.lifetime_value == 780000
        assert [o.tier for o in content.package_options] == ["local", "regional", "national"]
        assert content.cover_page.company_name == "Acme Roofing"
        assert content.cover_page.prepared_for == "Jane Smith"

        steps = content.simple_math_breakdown.steps
        assert [s.month for s in steps] == ["Month 3", "Month 6", "Month 12"]
        assert steps[-1].revenue == 65000
        assert content.simple_math_breakdown.total_investment == 24000
        assert content.simple_math_breakdown.roi == 3150

    @pytest.mark.asyncio
    async def test_national_drops_local_seo(self, mock_gateway, make_llm_response,
                                            sample_detailed_content, content_request):
        content_request.package_tier = "national"
        mock_gateway.call_for_content.return_value = make_llm_response(sample_detailed_content)

        content = await DetailedContentGenerator(mock_gateway).generate(content_request)

        assert content.local_seo is None
        assert content.projections.month12.traffic == 1200

    @pytest.mark.asyncio
    async def test_reference_document_attached(self, mock_gateway, make_llm_response,
                                               sample_detailed_content, content_request, tmp_path):
        path = tmp_path / "reference-proposal.pdf"
        path.write_bytes(b"%PDF-1.4 reference")
        mock_gateway.call_for_content.return_value = make_llm_response(sample_detailed_content)

        generator = DetailedContentGenerator(mock_gateway, ReferenceDocumentLoader(path))
        await generator.generate(content_request)

        options = mock_gateway.call_for_content.await_args.args[2]
        assert options.attachments[0]["type"] == "document"

    @pytest.mark.asyncio
    async def test_missing_reference_document(self, mock_gateway, make_llm_response,
                                              sample_detailed_content, content_request, tmp_path):
        mock_gateway.call_for_content.return_value = make_llm_response(sample_detailed_content)

        generator = DetailedContentGenerator(mock_gateway, ReferenceDocumentLoader(tmp_path))
        await generator.generate(content_request)

        options = mock_gateway.call_for_content.await_args.args[2]
        assert options.attachments == []

    def test_prompt_contents(self, mock_gateway, content_request):
        generator = DetailedContentGenerator(mock_gateway)
        projection, progression = generator.calculate(content_request)
        prompt = generator.build_user_prompt(content_request, get_package("local"), projection, progression)

        assert "Generate a comprehensive SEO proposal for: **Acme Roofing**" in prompt
        assert '"localSEO"' in prompt
        assert "SDR NOTES" in prompt
        assert "Month 6: 480 visitors" in prompt
