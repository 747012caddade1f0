"""Tests for the manager API endpoints."""

import json
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from common.config import settings
from manager.job_registry import job_registry
from manager.main import app


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def translate_payload(sample_srt_content):
    return {
        "content": sample_srt_content,
        "filename": "movie.srt",
        "source_language": "en",
        "target_language": "fr",
        "provider": "mock",
        "model": "mock-model",
    }


def read_events(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


class TestRootEndpoint:
    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Subtitle Translation API"
        assert data["version"] == "1.0.0"
        assert "mock" in data["providers"]


class TestHealthEndpoint:
    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTranslateEndpoint:
    def test_streams_progress_then_result(self, client, translate_payload):
        response = client.post("/api/translate", json=translate_payload)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")

        events = read_events(response)
        assert [event["type"] for event in events] == [
            "job",
            "progress",
            "progress",
            "progress",
            "progress",
            "result",
        ]
        assert events[1] == {"type": "progress", "percent": 0, "completed": 0, "total": 3}
        assert [event["percent"] for event in events[1:5]] == [0, 33, 67, 100]

        result = events[-1]
        assert result["success"] is True
        assert result["filename"] == "movie_translated.srt"
        assert "[en->fr] Welcome to this video" in result["content"]

    def test_multi_line_options(self, client, translate_payload):
        translate_payload["options"] = {"mode": "multi", "multi_line_batch_size": 2}

        events = read_events(client.post("/api/translate", json=translate_payload))

        progress = [event for event in events if event["type"] == "progress"]
        assert [event["completed"] for event in progress] == [0, 2, 3]
        assert events[-1]["type"] == "result"

    def test_progress_events_carry_entries(self, client, translate_payload):
        events = read_events(client.post("/api/translate", json=translate_payload))

        first = events[2]
        assert first["entries"][0]["pending"] is False
        assert first["entries"][1]["pending"] is True

    def test_empty_document(self, client, translate_payload):
        translate_payload["content"] = ""

        events = read_events(client.post("/api/translate", json=translate_payload))

        assert [event["type"] for event in events] == ["job", "progress", "result"]
        assert events[-1]["content"] == ""

    def test_job_removed_after_completion(self, client, translate_payload):
        client.post("/api/translate", json=translate_payload)

        assert len(job_registry) == 0

    @pytest.mark.parametrize(
        "field,value",
        [("filename", "movie.vtt"), ("output_format", "ass"), ("provider", "babelfish")],
    )
    def test_rejects_unsupported_input(self, client, translate_payload, field, value):
        translate_payload[field] = value
        translate_payload["api_key"] = "sk-test"

        response = client.post("/api/translate", json=translate_payload)

        assert response.status_code == 400

    def test_missing_api_key(self, client, translate_payload, monkeypatch):
        monkeypatch.setattr(settings, "translator_api_key", None)
        translate_payload["provider"] = "openai"

        response = client.post("/api/translate", json=translate_payload)

        assert response.status_code == 400
        assert "API key" in response.json()["detail"]

    def test_empty_filename_is_validation_error(self, client, translate_payload):
        translate_payload["filename"] = "  "

        response = client.post("/api/translate", json=translate_payload)

        assert response.status_code == 422


class TestCancelEndpoint:
    def test_cancel_unknown_job(self, client):
        response = client.post(f"/api/jobs/{uuid4()}/cancel")

        assert response.status_code == 404

    def test_cancel_registered_job(self, client):
        job = job_registry.register()
        try:
            response = client.post(f"/api/jobs/{job.job_id}/cancel")

            assert response.status_code == 200
            assert response.json() == {"job_id": str(job.job_id), "cancelled": True}
            assert job.abort_signal.aborted is True
        finally:
            job_registry.remove(job.job_id)

    def test_invalid_job_id(self, client):
        response = client.post("/api/jobs/not-a-uuid/cancel")

        assert response.status_code == 422
