# =============================================================================
# tests/test_app.py - Envelope, error handling and app wiring
# =============================================================================


def test_healthcheck(client):
    resp = client.get("/api/v1/healthcheck")

    assert resp.status_code == 200
    assert resp.json() == {"statusCode": 200, "data": "OK", "message": "Health check passed", "success": True}


def test_unknown_route_uses_error_object(client):
    resp = client.get("/api/v1/nothing-here")

    assert resp.status_code == 404
    assert resp.json() == {"status": 404, "message": "Not Found", "success": False}


def test_malformed_json_is_bad_request(client):
    resp = client.post(
        "/api/v1/user/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_json_body_limit(client):
    resp = client.post(
        "/api/v1/user/login",
        content=b'{"email": "' + b"a" * 30000 + b'"}',
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 413
    assert resp.json()["message"] == "Request body too large"


def test_cors_allows_configured_origin_with_credentials(client):
    resp = client.options(
        "/api/v1/user/login",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert resp.headers["access-control-allow-credentials"] == "true"
