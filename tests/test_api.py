"""HTTP API tests against the FastAPI app with scripted completions"""

import json
from unittest.mock import AsyncMock, MagicMock
import pytest
from fastapi.testclient import TestClient
from landify_api.agents.orchestrator import ContentPipeline
from landify_api.api.build import BuildSession
from landify_api.core.config import settings
from landify_api.core.rate_limit import RateLimiter
from landify_api.core.state_machine import PipelinePhase, PipelineState
from landify_api.main import app
from landify_api.models.business import PlaceDetails
from landify_api.models.errors import ApplicationError, ErrorCode
from conftest import ANALYSIS_JSON, REFINED_ANALYSIS_JSON, STRATEGY_JSON, THEME_JSON, VALID_HTML, ScriptedGateway

PIZZA = {
    "name": "Tony's Pizza",
    "type": "pizza restaurant",
    "address": "12 Elm Street, Springfield, IL",
    "phone": "(555) 123-4567",
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "page_store_dir", str(tmp_path / "pages"))
    with TestClient(app) as test_client:
        yield test_client


def use_gateway(client, gateway, **options):
    client.app.state.pipeline = ContentPipeline(gateway, **options)


def sse_events(response):
    return [json.loads(line[len("data: "):]) for line in response.text.splitlines() if line.startswith("data: ")]


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestGenerate:

    def test_generate(self, client):
        use_gateway(client, ScriptedGateway([ANALYSIS_JSON, REFINED_ANALYSIS_JSON, STRATEGY_JSON, STRATEGY_JSON, VALID_HTML, THEME_JSON]))
        response = client.post("/api/content-generation/generate", json={"businessData": PIZZA})

        assert response.status_code == 200
        body = response.json()
        assert body["htmlDocument"] == VALID_HTML
        assert body["headline"] == "Tony's Pizza: Wood-Fired Slices on Elm Street"
        assert body["contactInfo"]["phone"] == "(555) 123-4567"
        assert body["meta"]["fallbacks"] == []

    @pytest.mark.parametrize("business", [{"type": "cafe"}, {"name": "   "}])
    def test_missing_name_is_400(self, client, business):
        use_gateway(client, ScriptedGateway())
        response = client.post("/api/content-generation/generate", json={"businessData": business})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_unknown_strategy_is_400(self, client):
        response = client.post("/api/content-generation/generate", json={"businessData": PIZZA, "strategy": "slow"})
        assert response.status_code == 400

    def test_strict_failure_is_502(self, client):
        use_gateway(client, ScriptedGateway(default="not html"), policy="strict")
        response = client.post("/api/content-generation/generate", json={"businessData": PIZZA})
        assert response.status_code == 502
        body = response.json()
        assert body["code"] == "INVALID_ARTIFACT"
        assert body["message"] == "AI did not return valid HTML"
        assert body["retryable"] is True

    def test_capabilities(self, client):
        response = client.get("/api/content-generation/capabilities", params={"strategy": "fast"})
        assert response.status_code == 200
        assert response.json()["strategy"] == "fast"
        assert client.get("/api/content-generation/capabilities", params={"strategy": "slow"}).status_code == 400

    def test_rate_limit(self, client):
        use_gateway(client, ScriptedGateway(default="no json"))
        client.app.state.rate_limiter = RateLimiter(max_requests=1, window_seconds=60)

        assert client.post("/api/content-generation/generate", json={"businessData": PIZZA}).status_code == 200
        response = client.post("/api/content-generation/generate", json={"businessData": PIZZA})
        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"


class TestStreaming:

    def test_sse_generate(self, client):
        use_gateway(client, ScriptedGateway(default="no json"), strategy="fast")
        response = client.post("/sse/generate", json={"businessData": PIZZA})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"
        events = sse_events(response)
        assert [e["progress"] for e in events if e["type"] == "progress"] == [0, 20, 70, 90, 100]
        assert events[-1]["type"] == "result"
        assert events[-1]["data"]["meta"]["fallbacks"] == ["analysis", "strategy", "html"]

    def test_sse_generate_error_event(self, client):
        use_gateway(client, ScriptedGateway(default="no json"), policy="strict")
        events = sse_events(client.post("/sse/generate", json={"businessData": PIZZA}))
        assert events[-1] == {"type": "error", "code": "INVALID_ARTIFACT", "message": "AI did not return valid HTML", "retryable": True}

    def test_build_then_progress_and_result(self, client):
        use_gateway(client, ScriptedGateway(default="no json"))
        response = client.post("/api/build", json={"businessData": PIZZA})
        assert response.status_code == 202
        session_id = response.json()["sessionId"]
        assert response.json()["status"] == "started"

        events = sse_events(client.get(f"/sse/progress/{session_id}"))
        progress = [e for e in events if e["type"] == "progress"]
        assert [e["progress"] for e in progress] == [0, 10, 33, 35, 66, 70, 95, 100]
        assert all(e["ts"].endswith("Z") for e in progress)
        assert events[-1]["type"] == "result"

        result = client.get(f"/api/result/{session_id}")
        assert result.status_code == 200
        assert result.json()["headline"] == "Welcome to Tony's Pizza"

    def test_progress_for_failed_session(self, client):
        state = PipelineState("failed-run")
        state.advance(PipelinePhase.ANALYZING, "Analyzing", stage="business_analysis", progress=10)
        state.fail("OpenAI call timed out", "GATEWAY_ERROR")
        client.app.state.sessions["failed-run"] = BuildSession(state=state)

        events = sse_events(client.get("/sse/progress/failed-run"))
        assert [e["type"] for e in events] == ["progress", "error"]
        assert events[-1]["code"] == "GATEWAY_ERROR"
        assert events[-1]["message"] == "OpenAI call timed out"

    def test_unknown_session(self, client):
        assert client.get("/sse/progress/nope").status_code == 404
        assert client.get("/api/result/nope").status_code == 404

    def test_result_not_ready(self, client):
        state = PipelineState("running")
        state.advance(PipelinePhase.STRATEGIZING, "Planning")
        client.app.state.sessions["running"] = BuildSession(state=state)
        response = client.get("/api/result/running")
        assert response.status_code == 404
        assert "strategizing" in response.json()["detail"]


class TestPages:

    def test_crud_and_download(self, client, pizza_content):
        body = {"businessData": PIZZA, "content": pizza_content.to_wire()}
        created = client.post("/api/pages", json=body)
        assert created.status_code == 201
        page_id = created.json()["id"]

        page = client.get(f"/api/pages/{page_id}").json()
        assert page["content"]["headline"] == "Slices on Elm"
        assert page["businessData"]["name"] == "Tony's Pizza"
        assert [p["id"] for p in client.get("/api/pages").json()["pages"]] == [page_id]

        body["content"]["headline"] = "Edited"
        assert client.put(f"/api/pages/{page_id}", json=body).json()["content"]["headline"] == "Edited"

        download = client.get(f"/api/pages/{page_id}/html")
        assert download.status_code == 200
        assert download.text == VALID_HTML
        assert download.headers["content-disposition"] == 'attachment; filename="tony-s-pizza.html"'

        assert client.delete(f"/api/pages/{page_id}").status_code == 204
        missing = client.get(f"/api/pages/{page_id}")
        assert missing.status_code == 404
        assert missing.json()["code"] == "NOT_FOUND"

    def test_update_missing_page(self, client, pizza_content):
        body = {"businessData": PIZZA, "content": pizza_content.to_wire()}
        assert client.put("/api/pages/00000000-0000-0000-0000-000000000000", json=body).status_code == 404


class TestPlaces:

    @pytest.fixture
    def places(self, client):
        places = MagicMock()
        places.close = AsyncMock()
        client.app.state.places = places
        return places

    def test_business_data(self, client, places):
        places.details = AsyncMock(return_value=PlaceDetails(
            place_id="p1",
            name="Tony's Pizza",
            address="12 Elm Street, Springfield, IL",
            phone="(555) 123-4567",
            category="restaurant",
            hours=["Monday: 11:00 AM – 10:00 PM"],
        ))
        response = client.get("/api/google-maps/places/details/p1/business-data")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Tony's Pizza"
        assert body["type"] == "restaurant"
        assert body["hours"]["monday"] == "11:00 AM – 10:00 PM"
        places.details.assert_awaited_once_with("p1")

    def test_invalid_place_id(self, client, places):
        places.details = AsyncMock(side_effect=ApplicationError(ErrorCode.INVALID_PLACE_ID, "Place not found: nope"))
        response = client.get("/api/google-maps/places/details/nope")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PLACE_ID"

    def test_autocomplete(self, client, places):
        places.autocomplete = AsyncMock(return_value=[{"placeId": "p1", "description": "Tony's", "mainText": "Tony's", "secondaryText": ""}])
        response = client.get("/api/google-maps/places/autocomplete", params={"input": "ton"})
        assert response.json()["predictions"][0]["placeId"] == "p1"

    def test_search_requires_query(self, client, places):
        assert client.get("/api/google-maps/places/search").status_code == 400
