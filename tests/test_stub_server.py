from fastapi.testclient import TestClient

from src.contracts.store import load
from src.stubs.mappings import generate_mappings
from src.stubs.server import create_stub_app


def _client(contracts, **kwargs):
    return TestClient(create_stub_app(generate_mappings(contracts), **kwargs))


def test_serves_greeting_stub(greeting_contracts):
    client = _client(greeting_contracts)

    response = client.get("/greeting/Pivotal")

    assert response.status_code == 200
    assert response.json() == {"greeting": "Hello, Pivotal!"}
    assert response.headers["content-type"].startswith("application/json")


def test_unmatched_request_is_404_with_details(greeting_contracts):
    client = _client(greeting_contracts)

    response = client.get("/greeting/Nobody")

    assert response.status_code == 404
    body = response.json()
    assert body["message"] == "Request was not matched"
    assert body["request"]["url"] == "/greeting/Nobody"
    assert body["closest_stub"] == "shouldReturnGreeting"


def test_post_with_json_body(orders_contracts):
    client = _client(orders_contracts)

    created = client.post("/orders", json={"item": "book", "quantity": 2})
    rejected = client.post("/orders", json={"item": "pen"})

    assert created.status_code == 201
    assert created.headers["location"] == "/orders/42"
    assert created.json()["id"] == 42
    assert rejected.status_code == 400
    assert rejected.text == "invalid order"


def test_admin_mappings_and_health(orders_contracts):
    client = _client(orders_contracts)

    mappings = client.get("/__admin/mappings").json()
    health = client.get("/__admin/health").json()

    assert mappings["meta"]["total"] == 3
    assert {m["name"] for m in mappings["mappings"]} == {
        "shouldCreateOrder",
        "shouldListOrdersByStatus",
        "shouldRejectAnyOtherOrder",
    }
    assert health == {"status": "UP", "mappings": 3}


def test_request_journal_records_and_resets(greeting_contracts):
    client = _client(greeting_contracts, journal_size=2)

    client.get("/greeting/Pivotal")
    client.get("/greeting/Nobody")
    client.get("/greeting/Pivotal?x=1")

    requests = client.get("/__admin/requests").json()["requests"]
    assert [r["url"] for r in requests] == ["/greeting/Nobody", "/greeting/Pivotal?x=1"]
    assert [r["matched"] for r in requests] == [False, False]

    client.post("/__admin/reset")
    assert client.get("/__admin/requests").json()["meta"]["total"] == 0


def test_unhandled_errors_return_500(greeting_contracts, monkeypatch):
    app = create_stub_app(generate_mappings(greeting_contracts))

    def boom(request):
        raise RuntimeError("matcher exploded")

    monkeypatch.setattr(app.state.matcher, "match", boom)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/greeting/Pivotal")

    assert response.status_code == 500
    body = response.json()
    assert body["error_type"] == "RuntimeError"
    assert "matcher exploded" in body["metadata"]["error"]


def test_percent_encoded_url_is_matched(tmp_path):
    path = tmp_path / "spaced.yml"
    path.write_text(
        "request: {method: GET, url: /greeting/John%20Doe}\n"
        "response: {status: 200, body: {greeting: 'Hello, John Doe!'}}\n",
        encoding="utf-8",
    )
    client = _client(load(path))

    response = client.get("/greeting/John%20Doe")

    assert response.status_code == 200
    assert response.json() == {"greeting": "Hello, John Doe!"}


def test_scalar_json_body_is_matched(tmp_path):
    path = tmp_path / "beta.yml"
    path.write_text(
        "request: {method: PUT, url: /flags/beta, body: true}\nresponse: {status: 204}\n",
        encoding="utf-8",
    )
    client = _client(load(path))

    assert client.put("/flags/beta", json=True).status_code == 204
    assert client.put("/flags/beta", json=False).status_code == 404
