def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_api_info_advertises_poll_interval(client):
    payload = client.get("/api").json()
    assert payload["service"]
    assert payload["poll_interval_seconds"] == 3.0


def test_validation_errors_use_message_envelope(client):
    response = client.post("/api/register", json={"username": "only-name"})
    assert response.status_code == 422
    body = response.json()
    assert body["message"]
    assert any(error["field"].endswith("password") for error in body["errors"])


def test_unknown_route_uses_message_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}
