"""
HTTP tests for the offer / ad endpoints, health checks and middleware
(request IDs, rate limiting, JSON error bodies).
"""

from __future__ import annotations

from app import MSG_INVALID_VALUE, MSG_MISSING_FIELDS, VALIDATION_MESSAGES, create_app

L = "\u2066"
P = "\u2069"


def test_generate_offer_ok(client, offer_payload):
    r = client.post("/api/generate-offer", json=offer_payload)
    assert r.status_code == 200
    data = r.get_json()
    assert data["success"] is True
    assert data["description"] == f"تخفیف {L}20%{P} قهوه فقط تا {L}7{P} {L}June{P} {L}2024{P}"


def test_generate_offer_keeps_farsi_unescaped(client, offer_payload):
    r = client.post("/api/generate-offer", json=offer_payload)
    assert "تخفیف" in r.get_data(as_text=True)


def test_generate_offer_missing_fields(client, offer_payload):
    offer_payload.pop("productOrService")
    offer_payload["endDate"] = ""
    r = client.post("/api/generate-offer", json=offer_payload)
    assert r.status_code == 400
    data = r.get_json()
    assert data["success"] is False
    assert data["error"] == MSG_MISSING_FIELDS
    assert data["fields"] == ["productOrService", "endDate"]


def test_generate_offer_rejects_non_json(client):
    r = client.post("/api/generate-offer", data="goal=x", content_type="text/plain")
    assert r.status_code == 400
    assert r.get_json() == {"success": False, "error": "bad_request"}


def test_generate_offer_rejects_json_array(client):
    r = client.post("/api/generate-offer", json=["goal"])
    assert r.status_code == 400


def test_generate_offer_unknown_tone(client, fake, offer_payload):
    offer_payload["tone"] = "sarcastic"
    r = client.post("/api/generate-offer", json=offer_payload)
    assert r.status_code == 400
    assert r.get_json()["fields"] == ["tone"]
    assert fake.calls == []


def test_generate_offer_get_not_allowed(client):
    r = client.get("/api/generate-offer")
    assert r.status_code == 405
    assert r.get_json()["error"] == "method_not_allowed"


def test_generate_ad_ok(client, ad_payload):
    r = client.post("/api/generate-ad", json=ad_payload)
    assert r.status_code == 200
    data = r.get_json()
    assert data["success"] is True
    assert data["adText"]
    assert data["imagePrompt"].startswith("Modern professional ")


def test_generate_ad_missing_image_description(client, ad_payload):
    ad_payload.pop("imageDescription")
    r = client.post("/api/generate-ad", json=ad_payload)
    assert r.status_code == 400
    assert r.get_json()["fields"] == ["imageDescription"]


def test_unknown_route_is_json_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.get_json()["error"] == "not_found"


def test_health_version_ready(client):
    assert client.get("/health").data == b"ok"
    v = client.get("/version").get_json()
    assert v["model"] == "gpt-4"
    assert v["enhance_inputs"] is False
    assert client.get("/ready").get_json()["ready"] is True


def test_request_id_is_echoed(client):
    r = client.get("/", headers={"X-Request-ID": "req_test123"})
    assert r.headers["X-Request-ID"] == "req_test123"
    assert client.get("/").headers["X-Request-ID"].startswith("req_")


def test_rate_limit_returns_429(config_override, fake):
    app = create_app(dict(config_override, RATE_LIMIT_PER_MIN=2, RATE_LIMIT_BURST=0), completions=fake)
    c = app.test_client()
    assert c.get("/").status_code == 200
    assert c.get("/").status_code == 200
    r = c.get("/")
    assert r.status_code == 429
    assert r.get_json()["error"] == "rate_limited"
    # health checks are never limited
    assert c.get("/health").status_code == 200


def test_rate_limit_is_per_path(config_override, fake):
    app = create_app(dict(config_override, RATE_LIMIT_PER_MIN=1, RATE_LIMIT_BURST=0), completions=fake)
    c = app.test_client()
    assert c.get("/").status_code == 200
    assert c.get("/").status_code == 429
    assert c.get("/nope").status_code == 404


# ------------- payload types -------------

def test_non_string_fields_are_rejected_with_400(client, fake, offer_payload):
    for key, value in (("goal", 5), ("category", ["cafe"]), ("tone", 3)):
        body = dict(offer_payload, **{key: value})
        r = client.post("/api/generate-offer", json=body)
        assert r.status_code == 400, key
        data = r.get_json()
        assert data["code"] == "invalid_value"
        assert data["fields"] == [key]
        assert data["error"] == MSG_INVALID_VALUE
    assert fake.calls == []


def test_null_required_field_counts_as_missing(client, offer_payload):
    offer_payload["goal"] = None
    r = client.post("/api/generate-offer", json=offer_payload)
    assert r.status_code == 400
    assert r.get_json()["code"] == "missing_fields"
    assert r.get_json()["fields"] == ["goal"]


def test_ad_rejects_non_string_title(client, ad_payload):
    ad_payload["title"] = {"fa": "کافه"}
    r = client.post("/api/generate-ad", json=ad_payload)
    assert r.status_code == 400
    assert r.get_json()["fields"] == ["title"]


def test_date_errors_carry_their_own_message(client, offer_payload):
    r = client.post("/api/generate-offer", json=dict(offer_payload, startDate="tomorrow"))
    data = r.get_json()
    assert r.status_code == 400
    assert data["code"] == "invalid_date"
    assert data["error"] == VALIDATION_MESSAGES["invalid_date"]
    assert data["error"] != MSG_MISSING_FIELDS

    r = client.post("/api/generate-offer", json=dict(offer_payload, endDate="2024-05-01"))
    data = r.get_json()
    assert data["code"] == "date_range"
    assert data["error"] == VALIDATION_MESSAGES["date_range"]


# ------------- client address -------------

def test_forwarded_for_header_does_not_bypass_limit(config_override, fake):
    app = create_app(dict(config_override, RATE_LIMIT_PER_MIN=1, RATE_LIMIT_BURST=0), completions=fake)
    c = app.test_client()
    codes = [c.get("/", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code for i in range(5)]
    assert codes == [200, 429, 429, 429, 429]


def test_forwarded_for_trusted_behind_configured_proxy(config_override, fake):
    app = create_app(
        dict(config_override, RATE_LIMIT_PER_MIN=1, RATE_LIMIT_BURST=0, PROXY_HOPS=1),
        completions=fake,
    )
    c = app.test_client()
    assert c.get("/", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert c.get("/", headers={"X-Forwarded-For": "10.0.0.2"}).status_code == 200
    assert c.get("/", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
