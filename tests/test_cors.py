def test_preflight_answered_uniformly(client):
    response = client.options(
        "/api/scientists",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "PATCH" in response.headers["access-control-allow-methods"]
    assert response.headers["access-control-max-age"] == "86400"


def test_allowed_origin_is_echoed(client):
    response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_disallowed_origin_is_forbidden(client):
    response = client.get("/api/scientists", headers={"Origin": "https://evil.example"})
    assert response.status_code == 403
    assert response.json()["message"] == "Origin not allowed"


def test_request_without_origin_allowed(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers
