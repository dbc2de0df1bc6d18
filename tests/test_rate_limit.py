from modular_house.middleware.rate_limit import RateLimiter, general_rate_limiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_window_resets():
    clock = FakeClock()
    limiter = RateLimiter("t", limit=2, window_seconds=60, error="e", message="m",
                          retry_after="1 minute", clock=clock)

    assert limiter.hit("1.1.1.1") is None
    assert limiter.hit("1.1.1.1") is None
    clock.now += 20
    assert limiter.hit("1.1.1.1") == 40
    assert limiter.hit("2.2.2.2") is None

    clock.now += 40
    assert limiter.hit("1.1.1.1") is None


def test_unknown_ip_shares_a_bucket():
    limiter = general_rate_limiter()
    for _ in range(limiter.limit):
        assert limiter.hit(None) is None
    assert limiter.hit(None) is not None


def test_eleventh_submission_is_rejected(client, enquiry):
    headers = {"X-Forwarded-For": "198.51.100.20"}
    for _ in range(10):
        assert client.post("/submissions/enquiry", json=enquiry, headers=headers).status_code == 200

    res = client.post("/submissions/enquiry", json=enquiry, headers=headers)

    assert res.status_code == 429
    assert res.json() == {
        "error": "Too many submission requests",
        "message": "You have exceeded the maximum number of submissions allowed per hour. Please try again later.",
        "retryAfter": "1 hour",
    }
    assert int(res.headers["Retry-After"]) > 0

    other = client.post("/submissions/enquiry", json=enquiry, headers={"X-Forwarded-For": "198.51.100.21"})
    assert other.status_code == 200


def test_invalid_requests_still_count(client, enquiry):
    headers = {"X-Forwarded-For": "198.51.100.30"}
    for _ in range(10):
        client.post("/submissions/enquiry", json={}, headers=headers)

    assert client.post("/submissions/enquiry", json=enquiry, headers=headers).status_code == 429


def test_expired_windows_are_pruned_once_per_window():
    clock = FakeClock()
    limiter = RateLimiter("t", limit=5, window_seconds=60, error="e", message="m",
                          retry_after="1 minute", clock=clock)

    for n in range(500):
        limiter.hit(f"10.0.{n // 256}.{n % 256}")
    clock.now += 30
    limiter.hit("10.9.9.9")
    # Still inside the first window, nothing is dropped
    assert len(limiter._windows) == 501

    clock.now += 31
    limiter.hit("10.9.9.8")
    assert set(limiter._windows) == {"t:10.9.9.9", "t:10.9.9.8"}
