from nonprofitsuite import __version__
from nonprofitsuite.db import models


def _create_person(client, headers, **kw):
    body = {"first_name": "Grace", "last_name": "Hopper", "email": "grace@example.org"}
    body.update(kw)
    return client.post("/people", json=body, headers=headers)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "nonprofitsuite", "version": __version__}


def test_requests_without_identity_are_rejected(client):
    resp = client.get("/donors")
    assert resp.status_code == 401
    assert resp.json() == {"error": {"code": "not_authenticated", "message": "Authentication required"}}


def test_admin_emails_are_elevated(client, db, admin_headers, reader_headers):
    assert client.get("/license", headers=admin_headers).status_code == 200
    admin = db.query(models.User).filter(models.User.email == "admin@example.org").one()
    assert admin.role == "administrator"

    resp = client.get("/license", headers=reader_headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "permission_denied"


def test_donor_flow(client, admin_headers):
    person = _create_person(client, admin_headers)
    assert person.status_code == 201
    person_id = person.json()["id"]

    donor = client.post("/donors", json={"person_id": person_id, "donor_level": "Gold"}, headers=admin_headers)
    assert donor.status_code == 201
    donor_id = donor.json()["id"]
    assert donor.json()["total_donated"] == 0

    gift = client.post(f"/donors/{donor_id}/donations",
                       json={"amount": 250, "donation_date": "2026-03-01"}, headers=admin_headers)
    assert gift.status_code == 201

    fetched = client.get(f"/donors/{donor_id}", headers=admin_headers).json()
    assert fetched["total_donated"] == 250
    assert fetched["last_donation_date"] == "2026-03-01"

    page = client.get("/donors", params={"per_page": 10}, headers=admin_headers).json()
    assert page["pagination"]["total"] == 1
    history = client.get(f"/donors/{donor_id}/donations", headers=admin_headers).json()
    assert [d["amount"] for d in history] == [250]


def test_error_body_shape(client, admin_headers):
    resp = client.post("/donors", json={"donor_type": "alien", "person_id": 1}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json() == {"error": {"code": "invalid_donor_type", "message": "Invalid donor type."}}

    resp = client.get("/donors/999", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_readers_cannot_create_people(client, reader_headers):
    resp = _create_person(client, reader_headers)
    assert resp.status_code == 403


def test_anonymous_report_round_trip(client, admin_headers):
    resp = client.post("/anonymous-reports/submit", json={"category": "fraud", "description": "Ledger gap"})
    assert resp.status_code == 201
    number = resp.json()["report_number"]

    status = client.get(f"/anonymous-reports/status/{number}")
    assert status.status_code == 200
    assert status.json()["status_label"] == "Submitted - Under Review"
    assert client.get("/anonymous-reports/status/AR000").status_code == 404

    assert client.get("/anonymous-reports").status_code == 401
    listed = client.get("/anonymous-reports", headers=admin_headers).json()
    assert listed["items"][0]["report_number"] == number


def test_mobile_token_flow_is_logged(client, db, admin_headers):
    created = client.post("/api-tokens", json={"token_name": "Board phone"}, headers=admin_headers)
    assert created.status_code == 201
    token = created.json()["token"]

    auth = client.post("/api/v1/auth", headers={"X-API-Token": token})
    assert auth.status_code == 200
    assert auth.json()["authenticated"] is True

    assert client.get("/api/v1/meetings", headers={"Authorization": f"Bearer {token}"}).json() == []
    assert client.get("/api/v1/tasks", headers={"X-API-Key": token}).status_code == 200

    logs = db.query(models.ApiLog).order_by(models.ApiLog.id).all()
    assert [log.endpoint for log in logs] == ["/api/v1/auth", "/api/v1/meetings", "/api/v1/tasks"]
    assert all(log.token_id == created.json()["token_id"] for log in logs)

    usage = client.get(f"/api-tokens/{created.json()['token_id']}/usage", headers=admin_headers).json()
    assert usage["total_requests"] == 3


def test_mobile_rejects_missing_and_bad_tokens(client):
    resp = client.get("/api/v1/meetings")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "no_token"
    resp = client.get("/api/v1/meetings", headers={"X-API-Token": "ns_pat_abc_def"})
    assert resp.status_code == 401
    assert resp.json()["error"] == {"code": "invalid_token", "message": "Invalid or expired API token"}


def test_metrics_embed_is_html(client, admin_headers):
    assert client.get("/metrics/2026/embed", headers=admin_headers).text == ""
    saved = client.post("/metrics", json={"metric_year": 2026, "total_revenue": 900}, headers=admin_headers)
    assert saved.status_code == 200

    resp = client.get("/metrics/2026/embed", headers=admin_headers)
    assert resp.headers["content-type"].startswith("text/html")
    assert "Total Revenue: $900.00" in resp.text


def test_pro_gate_returns_402(client, admin_headers, free_tier):
    person = _create_person(client, admin_headers).json()
    resp = client.post("/donors", json={"person_id": person["id"]}, headers=admin_headers)
    assert resp.status_code == 402
    assert resp.json()["error"]["code"] == "pro_required"


def test_cache_endpoints(client, admin_headers, reader_headers):
    stats = client.get("/cache/stats", headers=admin_headers)
    assert stats.status_code == 200
    assert set(stats.json()) == {"object_count", "transient_count", "transient_size", "cache_group"}
    assert client.post("/cache/clear", headers=admin_headers).status_code == 200
    assert client.get("/cache/stats", headers=reader_headers).status_code == 403
