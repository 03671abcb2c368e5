from customerbook.db.base import Base


PAYLOAD = {
    "name": "Alice Cooper",
    "email": "alice.cooper@music.com",
    "phone": "555-1111",
    "address": "1 Rock Rd",
}


def _create(client, **overrides):
    r = client.post("/api/v1/customers", json={**PAYLOAD, **overrides})
    assert r.status_code == 201, r.text
    return r.json()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert "timestamp" in r.json()


def test_create_and_get(client):
    created = _create(client)
    assert created["id"] > 0
    assert created["name"] == "Alice Cooper"
    assert created["created_at"]

    r = client.get(f"/api/v1/customers/{created['id']}")
    assert r.status_code == 200
    assert r.json() == created


def test_get_missing_is_404(client):
    r = client.get("/api/v1/customers/999999")
    assert r.status_code == 404


def test_create_rejects_bad_email(client):
    r = client.post("/api/v1/customers", json={**PAYLOAD, "email": "not-an-email"})
    assert r.status_code == 422


def test_create_rejects_blank_name(client):
    r = client.post("/api/v1/customers", json={**PAYLOAD, "name": "  "})
    assert r.status_code == 422


def test_list_all(client):
    _create(client)
    _create(client, name="Bob", email="bob@testmail.org")
    r = client.get("/api/v1/customers")
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 2
    assert {c["name"] for c in body["items"]} == {"Alice Cooper", "Bob"}


def test_list_empty(client):
    r = client.get("/api/v1/customers")
    assert r.status_code == 200
    assert r.json() == {"items": [], "total": 0}


def test_recent_orders_newest_first(client):
    ids = [_create(client, name=f"C{n}")["id"] for n in range(1, 13)]
    r = client.get("/api/v1/customers/recent")
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["items"]] == list(reversed(ids))[:10]

    r = client.get("/api/v1/customers/recent", params={"limit": 3})
    assert [c["id"] for c in r.json()["items"]] == list(reversed(ids))[:3]


def test_recent_rejects_zero_limit(client):
    r = client.get("/api/v1/customers/recent", params={"limit": 0})
    assert r.status_code == 422


def test_search(client):
    alice = _create(client)
    bob = _create(client, name="Bob", email="bob@testmail.org", phone="555-2222")

    r = client.get("/api/v1/customers/search", params={"q": "COOPER"})
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["items"]] == [alice["id"]]

    r = client.get("/api/v1/customers/search", params={"q": "testmail"})
    assert [c["id"] for c in r.json()["items"]] == [bob["id"]]

    r = client.get("/api/v1/customers/search", params={"q": "555"})
    assert r.json()["items"] == []


def test_search_blank_query_is_422(client):
    r = client.get("/api/v1/customers/search", params={"q": "   "})
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"] == "query"


def test_patch_partial_update(client):
    created = _create(client)
    r = client.patch(f"/api/v1/customers/{created['id']}", json={"phone": "555-0000"})
    assert r.status_code == 200
    body = r.json()
    assert body["phone"] == "555-0000"
    assert body["name"] == created["name"]
    assert body["email"] == created["email"]
    assert body["address"] == created["address"]
    assert body["created_at"] == created["created_at"]


def test_patch_empty_body_is_no_op(client):
    created = _create(client)
    r = client.patch(f"/api/v1/customers/{created['id']}", json={})
    assert r.status_code == 200
    assert r.json() == created


def test_patch_empty_string_is_rejected(client):
    created = _create(client)
    r = client.patch(f"/api/v1/customers/{created['id']}", json={"name": ""})
    assert r.status_code == 422
    assert client.get(f"/api/v1/customers/{created['id']}").json() == created


def test_patch_missing_customer_is_404(client):
    r = client.patch("/api/v1/customers/999999", json={"name": "X"})
    assert r.status_code == 404
    assert "999999" in r.json()["detail"]


def test_storage_failure_is_503(client, database):
    Base.metadata.drop_all(bind=database.engine)
    r = client.get("/api/v1/customers")
    assert r.status_code == 503
    assert r.json()["detail"] == "Storage temporarily unavailable."


def test_bad_body_uses_store_error_shape(client):
    r = client.post("/api/v1/customers", json={**PAYLOAD, "email": "not-an-email"})
    assert r.status_code == 422
    body = r.json()
    assert isinstance(body["detail"], str)
    assert [e["field"] for e in body["errors"]] == ["email"]


def test_missing_query_param_uses_store_error_shape(client):
    r = client.get("/api/v1/customers/search")
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"] == "q"


def test_search_keeps_leading_space(client):
    _create(client, name="Jane Doe", email="smithers@example.com")
    r = client.get("/api/v1/customers/search", params={"q": " smithers"})
    assert r.status_code == 200
    assert r.json()["items"] == []


def test_create_keeps_values_as_given(client):
    created = _create(client, name="N" * 300, address="1 Main St\nSpringfield\n")
    assert created["name"] == "N" * 300
    assert created["address"] == "1 Main St\nSpringfield\n"
