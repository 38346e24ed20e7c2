def test_health_reports_services(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["services"]["database"] == "ok"
    assert body["services"]["redis"] == "unavailable"


def test_unknown_route_404(client):
    assert client.get("/api/v1/nope").status_code == 404


def test_validation_errors_use_envelope(client):
    res = client.post("/api/v1/auth/login", json={"email": "not-an-email"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "validation_error"
    assert body["errors"]
