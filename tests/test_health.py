def test_health(client):
    res = client.get("/health")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["environment"] == "test"
    assert body["uptime"] >= 0
    assert res.headers["x-request-id"]


def test_unknown_route_uses_error_shape(client):
    res = client.get("/nope")

    assert res.status_code == 404
    assert res.json() == {"error": "Not found", "message": "Not Found"}


def test_security_headers(client):
    for res in (client.get("/health"), client.get("/nope")):
        assert res.headers["x-content-type-options"] == "nosniff"
        assert res.headers["x-frame-options"] == "SAMEORIGIN"
        assert res.headers["referrer-policy"] == "no-referrer"
        # HSTS is production only
        assert "strict-transport-security" not in res.headers
