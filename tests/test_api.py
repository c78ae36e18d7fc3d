from ridefx.routers.deps import get_rate_client
from ridefx.services.currency.preference import COOKIE_NAME
from ridefx.services.currency.refresh import RateClient
from ridefx.services.http_client import HttpError


class StaticRateClient(RateClient):
    def __init__(self, rates):
        self.rates = rates

    def get_rate(self, base, target):
        if target not in self.rates:
            raise HttpError(f"no rate for {target}")
        return self.rates[target]


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"

    def test_request_id_header(self, client):
        r = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert r.headers["X-Request-ID"] == "abc-123"
        assert client.get("/health").headers["X-Request-ID"]


class TestPreferenceEndpoints:
    """Cookie round trips through the preference endpoints."""

    def test_browser_detection(self, client):
        r = client.get("/currency/preference", headers={"Accept-Language": "en-GB,en;q=0.8"})
        assert r.json() == {"code": "GBP", "source": "browser"}

    def test_detected_currency_not_enabled(self, client):
        r = client.get("/currency/preference", headers={"Accept-Language": "ja-JP"})
        assert r.json() == {"code": "AED", "source": "default"}

    def test_put_sets_cookie(self, client):
        r = client.put("/currency/preference", json={"code": "eur"})
        assert r.status_code == 200
        assert r.json() == {"code": "EUR", "source": "cookie"}
        set_cookie = r.headers["set-cookie"].lower()
        assert set_cookie.startswith(f"{COOKIE_NAME}=eur")
        assert "samesite=lax" in set_cookie

        again = client.get("/currency/preference", headers={"Accept-Language": "en-US"})
        assert again.json() == {"code": "EUR", "source": "cookie"}

    def test_put_rejects_unsupported(self, client):
        r = client.put("/currency/preference", json={"code": "XYZ"})
        assert r.status_code == 400
        assert r.json()["error"] == "http_error"

    def test_put_rejects_disabled(self, client):
        r = client.put("/currency/preference", json={"code": "JPY"})
        assert r.status_code == 400
        assert "not enabled" in r.json()["detail"]

    def test_delete_clears_cookie(self, client):
        client.put("/currency/preference", json={"code": "USD"})

        r = client.delete("/currency/preference", headers={"Accept-Language": "de-DE"})
        assert r.json() == {"code": "EUR", "source": "browser"}
        assert "max-age=0" in r.headers["set-cookie"].lower()

        after = client.get("/currency/preference", headers={"Accept-Language": "de-DE"})
        assert after.json()["source"] == "browser"


class TestCurrencyEndpoints:
    def test_enabled_currencies(self, client):
        body = client.get("/currency/currencies").json()
        assert body["default_currency"] == "AED"
        assert body["used_fallback"] is False
        assert [c["code"] for c in body["currencies"]] == ["AED", "USD", "EUR", "GBP"]
        assert body["currencies"][1]["flag"] == "\U0001F1FA\U0001F1F8"

    def test_featured_currencies(self, client):
        client.put("/admin/currencies/GBP/featured", json={"is_featured": False})
        body = client.get("/currency/currencies", params={"featured": True}).json()
        assert [c["code"] for c in body["currencies"]] == ["AED", "USD", "EUR"]

    def test_format_uses_fallback_rates(self, client):
        r = client.get("/currency/format", params={"amount": 100, "currency": "usd"})
        assert r.status_code == 200
        assert r.json() == {"currency": "USD", "amount": 27.0, "formatted": "$27.00"}

    def test_format_defaults_to_preference(self, client):
        r = client.get(
            "/currency/format",
            params={"amount": 100, "show_code": True},
            headers={"Accept-Language": "en-GB"},
        )
        assert r.json()["formatted"] == "£22.00 GBP"

    def test_format_amount_too_large_to_round(self, client):
        for amount in (1e26, 1e30, 1.7e308):
            params = {"amount": amount, "currency": "USD", "source": "USD"}
            r = client.get("/currency/format", params=params)
            assert r.status_code == 200
            assert r.json()["formatted"] == "$0.00"

        r = client.get("/currency/format", params={"amount": 1e30, "currency": "USD"})
        assert r.json() == {"currency": "USD", "amount": 0.0, "formatted": "$0.00"}

    def test_format_unknown_currency(self, client):
        r = client.get("/currency/format", params={"amount": 1, "currency": "XYZ"})
        assert r.status_code == 400

    def test_format_requires_amount(self, client):
        r = client.get("/currency/format")
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"

    def test_format_range(self, client):
        r = client.get("/currency/format-range", params={"min": 10, "max": 20, "currency": "USD"})
        assert r.json() == {"currency": "USD", "formatted": "$2.70 - $5.40"}

    def test_format_range_rejects_inverted(self, client):
        r = client.get("/currency/format-range", params={"min": 20, "max": 10, "currency": "USD"})
        assert r.status_code == 400

    def test_display_price(self, client):
        body = client.get("/currency/display-price", params={"amount": 100, "currency": "USD"}).json()
        assert body["display_amount"] == "$27.00"
        assert body["original_amount"].startswith("100.00")
        assert body["is_converted"] is True

    def test_unknown_route(self, client):
        r = client.get("/nope")
        assert r.status_code == 404
        assert r.json() == {"error": "not_found", "detail": "No route for GET /nope"}


class TestRateEndpoints:
    def test_rates_fallback(self, client):
        body = client.get("/rates").json()
        assert body["base"] == "AED"
        assert body["used_fallback"] is True
        assert body["rates"]["USD"] == 0.27

    def test_status_without_stored_rates(self, client):
        body = client.get("/rates/status").json()
        assert body["last_updated"] is None
        assert body["is_stale"] is True

    def test_refresh(self, app, client):
        app.dependency_overrides[get_rate_client] = lambda: StaticRateClient(
            {"USD": 0.2723, "EUR": 0.2481, "GBP": 0.2155}
        )
        client.get("/rates")  # prime the cache

        r = client.post("/rates/refresh")
        assert r.status_code == 200
        assert r.json()["source"] == "api"

        body = client.get("/rates").json()
        assert body["used_fallback"] is False
        assert body["rates"]["USD"] == 0.2723
        assert client.get("/rates/status").json()["is_stale"] is False

    def test_refresh_skips_fresh_rates_unless_forced(self, app, client):
        app.dependency_overrides[get_rate_client] = lambda: StaticRateClient(
            {"USD": 0.27, "EUR": 0.25, "GBP": 0.22}
        )
        client.post("/rates/refresh")

        r = client.post("/rates/refresh", json={"force": False})
        assert r.json()["source"] == "cache"

    def test_refresh_failure(self, app, client):
        app.dependency_overrides[get_rate_client] = lambda: StaticRateClient({})
        r = client.post("/rates/refresh")
        assert r.status_code == 502
        assert r.json()["success"] is False

    def test_refresh_disabled(self, settings, client):
        settings.enable_rate_refresh = False
        r = client.post("/rates/refresh")
        assert r.status_code == 403


class TestAdminEndpoints:
    def test_list(self, client):
        body = client.get("/admin/currencies").json()
        assert len(body) > 4
        assert body[0]["code"] == "AED"
        assert body[0]["is_default"] is True

    def test_enable_shows_in_selector(self, client):
        r = client.put("/admin/currencies/JPY/enabled", json={"is_enabled": True})
        assert r.status_code == 200
        assert r.json()["is_enabled"] is True

        codes = [c["code"] for c in client.get("/currency/currencies").json()["currencies"]]
        assert "JPY" in codes

    def test_cannot_disable_default(self, client):
        r = client.put("/admin/currencies/AED/enabled", json={"is_enabled": False})
        assert r.status_code == 400

    def test_unknown_code(self, client):
        r = client.put("/admin/currencies/XYZ/default")
        assert r.status_code == 404
        assert r.json()["error"] == "not_found"

    def test_set_default(self, client):
        r = client.put("/admin/currencies/usd/default")
        assert r.json()["is_default"] is True
        assert client.get("/currency/currencies").json()["default_currency"] == "USD"

    def test_order_validation(self, client):
        assert client.put("/admin/currencies/GBP/order", json={"display_order": -1}).status_code == 422
        r = client.put("/admin/currencies/GBP/order", json={"display_order": 0})
        assert r.json()["display_order"] == 0
