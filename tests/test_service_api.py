"""HTTP tests for the dictionary, voice, upload and health endpoints."""

import re

from sqlalchemy.exc import SQLAlchemyError

from healthspeak.routers import healthcheck


class TestDictionaryApi:
    def test_abbreviation_lookup(self, client):
        response = client.get("/dictionary/abbreviations/BID")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["abbreviation"] == "bid"
        assert data["fullForm"] == "twice a day"
        assert data["commonUsage"]

    def test_unknown_abbreviation_is_404(self, client):
        response = client.get("/dictionary/abbreviations/zzz")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_drug_lookup_by_brand(self, client):
        data = client.get("/dictionary/drugs/Advil").json()["data"]

        assert data["name"] == "ibuprofen"
        assert "Advil" in data["brandNames"]

    def test_drug_search_and_category(self, client):
        by_query = client.get("/dictionary/drugs", params={"q": "amox"}).json()["data"]
        by_category = client.get("/dictionary/drugs", params={"category": "statin"}).json()["data"]
        everything = client.get("/dictionary/drugs").json()["data"]

        assert [drug["name"] for drug in by_query] == ["amoxicillin"]
        assert [drug["name"] for drug in by_category] == ["atorvastatin"]
        assert len(everything) == 5

    def test_categories(self, client):
        assert "antibiotic" in client.get("/dictionary/categories").json()["data"]

    def test_expand(self, client):
        response = client.post("/dictionary/expand", json={"text": "Take 1 tablet bid after meals"})

        data = response.json()["data"]
        assert data["expandedText"] == "Take 1 tablet twice a day after meals"
        assert data["dosageInstructions"] == "Take 1 tablet twice daily after meals"
        assert "after meals" in data["medicalTerms"]

    def test_expand_rejects_harmful_text(self, client):
        response = client.post("/dictionary/expand", json={"text": "javascript:alert(1)"})

        assert response.status_code == 400


class TestTtsApi:
    def test_config_is_clamped_and_defaulted(self, client):
        response = client.post("/tts", json={"text": "Take one tablet twice a day", "speed": 5})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "TTS configuration prepared successfully"
        config = body["data"]
        assert config["speed"] == 2.0
        assert config["voice"] == "default"
        assert config["language"] == "en-US"
        assert config["instructions"]["useWebSpeechAPI"] is True

    def test_slow_speed_is_clamped(self, client):
        config = client.post("/tts", json={"text": "Take one tablet", "speed": 0.1}).json()["data"]

        assert config["speed"] == 0.5

    def test_empty_text_is_rejected(self, client):
        response = client.post("/tts", json={"text": ""})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_text_over_limit_is_rejected(self, client):
        response = client.post("/tts", json={"text": "a" * 5001})

        assert response.status_code == 400
        assert "5000" in response.json()["error"]

    def test_voices(self, client):
        data = client.get("/tts/voices").json()["data"]

        assert any(voice["recommended"] for voice in data["voices"])
        assert "note" in data["instructions"]


class TestUploadsApi:
    def test_valid_image(self, client):
        response = client.post(
            "/uploads/validate",
            json={"filename": "../rx scan.png", "size": 2048, "contentType": "image/PNG"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["filename"] == "rx scan.png"
        assert data["contentType"] == "image/png"
        assert re.fullmatch(r"rx scan_\d+_[0-9a-f]{6}\.png", data["storageName"])

    def test_oversized_pdf_is_rejected(self, client):
        response = client.post(
            "/uploads/validate",
            json={"filename": "rx.pdf", "size": 10 * 1024 * 1024, "contentType": "application/pdf"},
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("File validation failed")


class TestHealthcheck:
    def test_healthy(self, client):
        response = client.get("/healthcheck", params={"detailed": "true"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "healthy"
        assert data["services"]["database"]["status"] == "up"
        assert data["services"]["database"]["type"] == "sqlite"
        assert data["stats"] == {"totalPrescriptions": 0, "recentActivity": 0}

    def test_head(self, client):
        response = client.head("/healthcheck")

        assert response.status_code == 200
        assert response.headers["X-Health-Status"] == "healthy"
        assert response.headers["X-Database-Status"] == "up"

    def test_database_down_is_503(self, client, monkeypatch):
        async def refuse():
            raise SQLAlchemyError("database is down")

        monkeypatch.setattr(client.app.state.database, "ping", refuse)

        response = client.get("/healthcheck")

        assert response.status_code == 503
        data = response.json()["data"]
        assert data["status"] == "unhealthy"
        assert data["services"]["database"]["status"] == "down"
        assert data["services"]["database"]["connection"] == "error"

    def test_head_database_down_is_503(self, client, monkeypatch):
        async def refuse():
            raise SQLAlchemyError("database is down")

        monkeypatch.setattr(client.app.state.database, "ping", refuse)

        response = client.head("/healthcheck")

        assert response.status_code == 503
        assert response.headers["X-Health-Status"] == "unhealthy"


class TestErrors:
    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert "timestamp" in body


class TestPeakMemory:
    def test_reported_when_available(self):
        assert healthcheck._format_peak_memory() != "0 Bytes"

    def test_unavailable_without_resource_module(self, monkeypatch):
        monkeypatch.setattr(healthcheck, "_peak_memory_bytes", lambda: None)

        assert healthcheck._format_peak_memory() == "unavailable"
