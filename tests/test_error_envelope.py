"""
Every response, including failures, uses the {errCode, msg, data} envelope.
"""
from fastapi.testclient import TestClient


class TestErrorEnvelope:

    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {
            "errCode": 404,
            "msg": "The requested resource does not exist",
            "data": None,
        }

    def test_malformed_body(self, client: TestClient, master_headers):
        response = client.post(
            "/api/roles",
            headers={**master_headers, "Content-Type": "application/json"},
            content="{not json",
        )

        assert response.status_code == 400
        assert response.json()["errCode"] == 400

    def test_invalid_path_parameter(self, client: TestClient, master_headers):
        response = client.get("/api/roles/not-a-number", headers=master_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["errCode"] == 400
        assert "role_id" in body["msg"]

    def test_unauthenticated(self, client: TestClient):
        response = client.get("/api/roles")

        assert response.status_code == 401
        assert response.json() == {"errCode": 401, "msg": "Please log in first", "data": None}

    def test_forbidden(self, client: TestClient, viewer_headers):
        response = client.delete("/api/api-keys/1", headers=viewer_headers)

        assert response.status_code == 403
        assert response.json()["msg"] == "You do not have permission to perform this action"


class TestHealth:

    def test_health(self, client: TestClient):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["errCode"] == 200
        assert body["data"]["database"] == "ok"
