"""HTTP tests for /history."""

from sqlalchemy.exc import SQLAlchemyError

from conftest import sample_prescription
from healthspeak.core.errors import StorageError


def create(client, text="Amoxicillin 500mg capsule tid for 7 days", **extra):
    body = {"originalText": text, "simplifiedText": f"Take {text}"}
    body.update(extra)
    response = client.post("/history", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreate:
    def test_created_item_envelope(self, client):
        response = client.post(
            "/history",
            json={
                "originalText": "Amoxicillin 500mg tid",
                "simplifiedText": "Take amoxicillin three times a day",
                "prescription": sample_prescription(),
                "tags": ["sinus"],
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Prescription saved to history successfully"
        assert body["timestamp"].endswith("Z")

        item = body["data"]
        assert item["id"]
        assert item["createdAt"] == item["updatedAt"]
        assert item["processingStatus"] == "completed"
        assert item["prescription"]["items"][0]["medicine"]["name"] == "amoxicillin"

    def test_plain_record_defaults_to_completed(self, client):
        response = client.post(
            "/history",
            json={
                "originalText": "Take Paracetamol 500mg twice daily",
                "simplifiedText": "Take 1 Paracetamol tablet (500mg) two times per day",
                "tags": ["fever"],
            },
        )

        assert response.status_code == 201
        item = response.json()["data"]
        assert item["id"]
        assert item["createdAt"] == item["updatedAt"]
        assert item["processingStatus"] == "completed"
        assert item["tags"] == ["fever"]

    def test_markup_is_stripped(self, client):
        item = create(client, "<b>Paracetamol</b> 500mg when needed", tags=["<i>fever</i>", "<br>"])

        assert item["originalText"] == "Paracetamol 500mg when needed"
        assert item["tags"] == ["fever"]

    def test_missing_text_is_rejected(self, client):
        response = client.post("/history", json={"originalText": "Only the original text"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"

    def test_text_empty_after_sanitizing_is_rejected(self, client):
        response = client.post("/history", json={"originalText": "<p></p>", "simplifiedText": "Some text"})

        assert response.status_code == 400
        assert "Original text validation failed" in response.json()["error"]

    def test_invalid_prescription_is_rejected(self, client):
        response = client.post(
            "/history",
            json={"originalText": "Some prescription", "simplifiedText": "Some text", "prescription": {"items": []}},
        )

        assert response.status_code == 400


class TestRead:
    def test_pagination(self, client):
        for index in range(3):
            create(client, f"Prescription text number {index}")

        body = client.get("/history", params={"page": 1, "limit": 2}).json()

        assert len(body["data"]["items"]) == 2
        assert body["data"]["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "totalPages": 2,
            "hasNext": True,
            "hasPrev": False,
        }

    def test_search(self, client):
        create(client, "Metformin 500mg twice daily after meals")
        create(client, "Atorvastatin 10mg at bedtime")

        body = client.get("/history", params={"q": "metformin"}).json()

        assert [item["originalText"] for item in body["data"]["items"]] == ["Metformin 500mg twice daily after meals"]
        assert body["data"]["pagination"]["total"] == 1

    def test_get_by_id(self, client):
        item = create(client)

        response = client.get("/history", params={"id": item["id"]})

        assert response.status_code == 200
        assert response.json()["data"] == item

    def test_unknown_id_is_404(self, client):
        response = client.get("/history", params={"id": "9b2f4f7e-8d9a-4a55-9f43-0a5f8e2d1c11"})

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_stats(self, client):
        create(client)
        create(client)
        create(client, processingStatus="failed")

        data = client.get("/history", params={"stats": "true"}).json()["data"]

        assert data["total"] == 3
        assert data["completed"] == 2
        assert data["failed"] == 1
        assert data["pending"] == 0
        assert data["thisWeek"] == 3
        assert data["thisMonth"] == 3


class TestUpdate:
    def test_partial_update(self, client):
        item = create(client)

        response = client.put(
            "/history",
            json={"id": item["id"], "tags": ["reviewed"], "createdAt": "2000-01-01T00:00:00.000Z"},
        )

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["tags"] == ["reviewed"]
        assert updated["originalText"] == item["originalText"]
        assert updated["createdAt"] == item["createdAt"]
        assert updated["updatedAt"] >= item["updatedAt"]

    def test_unknown_id_is_404(self, client):
        response = client.put("/history", json={"id": "9b2f4f7e-8d9a-4a55-9f43-0a5f8e2d1c11", "tags": []})

        assert response.status_code == 404

    def test_missing_id_is_400(self, client):
        response = client.put("/history", json={"tags": ["x"]})

        assert response.status_code == 400


class TestDelete:
    def test_delete(self, client):
        item = create(client)

        first = client.delete("/history", params={"id": item["id"]})
        second = client.delete("/history", params={"id": item["id"]})

        assert first.status_code == 200
        assert first.json()["data"] is None
        assert second.status_code == 404

    def test_unknown_id_is_404(self, client):
        response = client.delete("/history", params={"id": "does-not-exist"})

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_missing_id_is_400(self, client):
        response = client.delete("/history")

        assert response.status_code == 400
        assert response.json()["error"] == "ID is required for deletion"


def failing_storage(message):
    async def fail(*args, **kwargs):
        raise StorageError(message) from SQLAlchemyError("connection refused")

    return fail


class TestErrorHandling:
    def test_blank_search_is_rejected(self, client):
        create(client)

        for query in ("  ", "<b></b>"):
            response = client.get("/history", params={"q": query})

            assert response.status_code == 400
            assert response.json()["code"] == "VALIDATION_ERROR"

    def test_storage_error_hides_details(self, client, monkeypatch):
        repository = client.app.state.history_repository
        monkeypatch.setattr(repository, "list_items", failing_storage("Failed to fetch history from database"))

        response = client.get("/history")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "STORAGE_ERROR"
        assert body["error"] == "Failed to fetch history from database"
        assert "details" not in body

    def test_storage_error_details_in_development(self, dev_client, monkeypatch):
        repository = dev_client.app.state.history_repository
        monkeypatch.setattr(repository, "add", failing_storage("Failed to save prescription to database"))

        response = dev_client.post("/history", json={"originalText": "Some prescription", "simplifiedText": "Text"})

        assert response.status_code == 500
        assert response.json()["details"] == "connection refused"

    def test_validation_details_only_in_development(self, client, dev_client):
        body = {"originalText": "Only the original text"}

        assert "details" not in client.post("/history", json=body).json()
        assert dev_client.post("/history", json=body).json()["details"]
