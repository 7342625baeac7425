"""
Test Suite for the Proposal API

Exercises the FastAPI endpoints with dependency overrides, so no run
touches Claude, search or a browser.
"""

import logging
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

import api.proposals as proposals_api
from api.proposals import app, get_orchestrator, get_proposal_store, log_level
from proposal_engine.pipeline import (
    GenerationTimeout,
    InMemoryProposalStore,
    MissingContentError,
    ProposalNotFoundError,
    ProposalRecord,
    iter_sse_events,
)
from proposal_engine.renderer import PDFRenderError


class FakeOrchestrator:
    """Records requests and replays a fixed event stream."""

    def __init__(self):
        self.requests = []
        self.rerenders = []

    async def stream(self, request):
        self.requests.append(request)
        yield 'data: {"stage": "validating", "progress": 5}\n\n'
        yield 'data: {"complete": true, "proposalNumber": "P-0007", "pdfUrl": "memory://p.pdf", "metadata": {}}\n\n'

    async def rerender(self, proposal_id, template_style=None, output_format=None):
        self.rerenders.append((proposal_id, template_style, output_format))
        if proposal_id == "missing":
            raise ProposalNotFoundError(f"Proposal {proposal_id} not found")
        if proposal_id == "legacy":
            raise MissingContentError("Proposal P-0001 has no stored content. Please generate a new proposal.")
        if proposal_id == "slow":
            raise GenerationTimeout(0.5)
        if proposal_id == "broken":
            raise PDFRenderError("chromium crashed")
        return ProposalRecord(
            id=proposal_id, proposal_number="P-0007", customer_id="a",
            url=f"memory://p.{output_format or 'pdf'}", package_tier="local",
            proposal_mode="concise", template_style=template_style or "classic",
            company_name="Acme", created_at=datetime(2026, 1, 1),
            output_format=output_format or "pdf", content={"kind": "concise"},
            updated_at=datetime(2026, 1, 2),
        )


@pytest.fixture
def fake_orchestrator():
    return FakeOrchestrator()


@pytest.fixture
def client(fake_orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: fake_orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestMetadataEndpoints:
    """Health, templates and estimates."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "timestamp" in body

    def test_templates(self, client):
        body = client.get("/api/proposals/templates").json()
        assert body["default"] == "classic"
        assert [t["id"] for t in body["templates"]] == ["classic", "modern"]

    def test_estimate_defaults_to_local(self, client):
        body = client.get("/api/proposals/estimate").json()
        assert body["packageTier"] == "local"
        assert body["time"]["averageSeconds"] == 90
        assert body["cost"]["averageCost"] == 0.75

    def test_estimate_rejects_unknown_tier(self, client):
        assert client.get("/api/proposals/estimate", params={"packageTier": "global"}).status_code == 422


class TestGenerateEndpoint:
    """Streaming generation."""

    def test_streams_events(self, client, fake_orchestrator):
        response = client.post("/api/proposals/generate", json={
            "customerId": "cust-1",
            "packageTier": "regional",
            "proposalMode": "detailed",
            "templateStyle": "modern",
            "preferOpus": True,
        })

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = list(iter_sse_events(response.text.splitlines()))
        assert events[0] == {"stage": "validating", "progress": 5}
        assert events[-1]["proposalNumber"] == "P-0007"

        request = fake_orchestrator.requests[0]
        assert request.customer_id == "cust-1"
        assert request.package_tier == "regional"
        assert request.proposal_mode == "detailed"
        assert request.template_style == "modern"
        assert request.prefer_opus is True
        assert request.output_format == "pdf"

    @pytest.mark.parametrize("field,value", [
        ("packageTier", "global"),
        ("proposalMode", "brochure"),
        ("templateStyle", "retro"),
        ("outputFormat", "docx"),
    ])
    def test_rejects_invalid_fields(self, client, fake_orchestrator, field, value):
        response = client.post("/api/proposals/generate", json={"customerId": "cust-1", field: value})

        assert response.status_code == 422
        assert fake_orchestrator.requests == []

    def test_requires_customer_id(self, client):
        assert client.post("/api/proposals/generate", json={}).status_code == 422


class TestListEndpoint:
    """Proposal listing."""

    @pytest.fixture
    def store(self):
        store = InMemoryProposalStore()
        store._proposals = [
            ProposalRecord(id="1", proposal_number="P-0001", customer_id="a", url="u1",
                           package_tier="local", proposal_mode="concise", template_style="classic",
                           company_name="Acme", created_at=datetime(2026, 1, 1)),
            ProposalRecord(id="2", proposal_number="P-0002", customer_id="b", url="u2",
                           package_tier="national", proposal_mode="detailed", template_style="modern",
                           company_name="Beta", created_at=datetime(2026, 1, 2)),
        ]
        app.dependency_overrides[get_proposal_store] = lambda: store
        return store

    def test_lists_newest_first(self, client, store):
        body = client.get("/api/proposals").json()
        assert body["count"] == 2
        assert [p["proposal_number"] for p in body["proposals"]] == ["P-0002", "P-0001"]

    def test_filters_by_customer(self, client, store):
        body = client.get("/api/proposals", params={"customerId": "a"}).json()
        assert body["count"] == 1
        assert body["proposals"][0]["company_name"] == "Acme"
        assert body["proposals"][0]["created_at"] == "2026-01-01T00:00:00"

    def test_rows_leave_out_stored_content(self, client, store):
        store._proposals[0].content = {"kind": "concise"}
        body = client.get("/api/proposals", params={"customerId": "a"}).json()
        assert "content" not in body["proposals"][0]
        assert "research" not in body["proposals"][0]


class TestRegenerateEndpoint:
    """Re-rendering a stored proposal."""

    def test_rerenders_with_requested_style(self, client, fake_orchestrator):
        response = client.post(
            "/api/proposals/p1/regenerate",
            json={"templateStyle": "modern", "outputFormat": "html"},
        )

        assert response.status_code == 200
        assert fake_orchestrator.rerenders == [("p1", "modern", "html")]
        body = response.json()
        assert body["template_style"] == "modern"
        assert body["output_format"] == "html"
        assert body["url"] == "memory://p.html"
        assert body["updated_at"] == "2026-01-02T00:00:00"
        assert "content" not in body

    def test_empty_body_keeps_stored_choices(self, client, fake_orchestrator):
        assert client.post("/api/proposals/p1/regenerate").status_code == 200
        assert fake_orchestrator.rerenders == [("p1", None, None)]

    @pytest.mark.parametrize("proposal_id,status,detail", [
        ("missing", 404, "not found"),
        ("legacy", 400, "no stored content"),
        ("slow", 504, "timed out after 0.5 seconds"),
        ("broken", 500, "Failed to render proposal document"),
    ])
    def test_errors_map_to_status(self, client, proposal_id, status, detail):
        response = client.post(f"/api/proposals/{proposal_id}/regenerate", json={})
        assert response.status_code == status
        assert detail in response.json()["detail"]

    @pytest.mark.parametrize("body", [{"templateStyle": "brutalist"}, {"outputFormat": "docx"}])
    def test_invalid_choices_rejected(self, client, fake_orchestrator, body):
        assert client.post("/api/proposals/p1/regenerate", json=body).status_code == 422
        assert fake_orchestrator.rerenders == []


class TestShutdown:
    """The search client's pool is released when the app stops."""

    def test_shutdown_closes_orchestrator(self, monkeypatch):
        orchestrator = MagicMock()
        orchestrator.close = AsyncMock()
        monkeypatch.setattr(proposals_api, "_orchestrator", orchestrator)

        with TestClient(app) as client:
            client.get("/health")

        orchestrator.close.assert_awaited_once()
        assert proposals_api._orchestrator is None

    def test_shutdown_without_orchestrator(self, monkeypatch):
        monkeypatch.setattr(proposals_api, "_orchestrator", None)
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200


class TestLogLevel:
    """LOG_LEVEL names map onto logging levels."""

    @pytest.mark.parametrize("name,level", [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        (" error ", logging.ERROR),
        ("INFO", logging.INFO),
        ("chatty", logging.INFO),
    ])
    def test_log_level(self, name, level):
        assert log_level(name) == level
