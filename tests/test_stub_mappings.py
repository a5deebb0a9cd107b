import json

import pytest

from src.contracts.store import ContractParseError, load
from src.stubs.mappings import contract_to_mapping, generate_mappings, read_mappings, write_mappings


def test_greeting_contract_becomes_wiremock_mapping(greeting_contracts):
    mapping = contract_to_mapping(greeting_contracts[0])
    data = mapping.to_json_dict()

    assert data["name"] == "shouldReturnGreeting"
    assert data["request"]["method"] == "GET"
    assert data["request"]["url"] == "/greeting/Pivotal"
    assert data["response"] == {
        "status": 200,
        "headers": {"Content-Type": "application/json"},
        "jsonBody": {"greeting": "Hello, Pivotal!"},
    }


def test_mapping_ids_are_stable(greeting_contracts):
    first = contract_to_mapping(greeting_contracts[0])
    second = contract_to_mapping(greeting_contracts[0])
    assert first.id == second.id


def test_request_body_and_headers_become_patterns(orders_contracts):
    contract = next(c for c in orders_contracts if c.name == "shouldCreateOrder")
    data = contract_to_mapping(contract).to_json_dict()

    assert data["priority"] == 1
    assert data["request"]["headers"] == {"Content-Type": {"equalTo": "application/json"}}
    assert data["request"]["bodyPatterns"] == [{"equalToJson": {"item": "book", "quantity": 2}}]


def test_url_path_and_query_parameters(orders_contracts):
    contract = next(c for c in orders_contracts if c.name == "shouldListOrdersByStatus")
    request = contract_to_mapping(contract).to_json_dict()["request"]

    assert request["urlPath"] == "/orders"
    assert "url" not in request
    assert request["queryParameters"] == {"status": {"equalTo": "OPEN"}}


def test_text_body_is_plain_body(orders_contracts):
    contract = next(c for c in orders_contracts if c.name == "shouldRejectAnyOtherOrder")
    response = contract_to_mapping(contract).to_json_dict()["response"]

    assert response["body"] == "invalid order"
    assert "jsonBody" not in response


def test_regex_matchers_override_literals(tmp_path):
    from src.contracts.store import load

    path = tmp_path / "matchers.yml"
    path.write_text(
        "request:\n"
        "  method: GET\n"
        "  url: /users/1\n"
        "  headers: {Authorization: Bearer abc}\n"
        "  matchers:\n"
        "    url: {regex: '/users/[0-9]+'}\n"
        "    headers:\n"
        "      - {key: authorization, regex: 'Bearer .+'}\n"
        "response: {status: 200}\n",
        encoding="utf-8",
    )
    request = contract_to_mapping(load(path)[0]).to_json_dict()["request"]

    assert request["urlPattern"] == "/users/[0-9]+"
    assert request["headers"] == {"authorization": {"matches": "Bearer .+"}}


def test_generate_skips_ignored_contracts(orders_contracts):
    names = [m.name for m in generate_mappings(orders_contracts)]
    assert "legacyPing" not in names
    assert len(names) == 3


def test_write_and_read_mappings(tmp_path, orders_contracts):
    mappings = generate_mappings(orders_contracts)
    written = write_mappings(mappings, tmp_path / "mappings")

    assert sorted(p.name for p in written) == [
        "shouldCreateOrder.json",
        "shouldListOrdersByStatus.json",
        "shouldRejectAnyOtherOrder.json",
    ]
    on_disk = json.loads((tmp_path / "mappings" / "shouldCreateOrder.json").read_text(encoding="utf-8"))
    assert on_disk["response"]["status"] == 201

    loaded = {m.name: m for m in read_mappings(tmp_path / "mappings")}
    assert loaded["shouldCreateOrder"].response.has_json_body
    assert not loaded["shouldRejectAnyOtherOrder"].response.has_json_body


def test_read_mappings_accepts_wiremock_bundle(tmp_path):
    bundle = {
        "mappings": [
            {"id": "1", "name": "a", "request": {"method": "GET", "url": "/a"}, "response": {"status": 200}},
            {"id": "2", "name": "b", "request": {"method": "GET", "url": "/b"}, "response": {"status": 204}},
        ]
    }
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(bundle), encoding="utf-8")

    assert [m.name for m in read_mappings(path)] == ["a", "b"]


def test_read_mappings_rejects_bad_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ContractParseError):
        read_mappings(path)


def test_read_mappings_rejects_bad_regex(tmp_path):
    mapping = {"id": "1", "name": "a", "request": {"method": "GET", "urlPattern": "/users/(["}, "response": {"status": 200}}
    path = tmp_path / "bad_regex.json"
    path.write_text(json.dumps(mapping), encoding="utf-8")

    with pytest.raises(ContractParseError, match="invalid regex"):
        read_mappings(path)


def test_scalar_request_body_is_json_pattern(tmp_path):
    path = tmp_path / "beta.yml"
    path.write_text(
        "request: {method: PUT, url: /flags/beta, body: true}\nresponse: {status: 204}\n",
        encoding="utf-8",
    )

    mapping = contract_to_mapping(load(path)[0])

    assert mapping.to_json_dict()["request"]["bodyPatterns"] == [{"equalToJson": True}]
