from pathlib import Path

import pytest

from src.contracts.models import Contract
from src.contracts.store import ContractParseError, ContractStore, load


def test_load_single_file_derives_name_from_file(contracts_root):
    contracts = load(contracts_root / "greeting-producer" / "shouldReturnGreeting.yml")

    assert len(contracts) == 1
    contract = contracts[0]
    assert contract.name == "shouldReturnGreeting"
    assert contract.request.method == "GET"
    assert contract.request.url == "/greeting/Pivotal"
    assert contract.response.status == 200
    assert contract.response.body == {"greeting": "Hello, Pivotal!"}
    assert contract.response.headers == {"Content-Type": "application/json"}


def test_load_multi_document_file_sorted_by_name(orders_contracts):
    names = [c.name for c in orders_contracts]
    assert names == sorted(names)
    assert set(names) == {"legacyPing", "shouldCreateOrder", "shouldListOrdersByStatus", "shouldRejectAnyOtherOrder"}
    assert all(c.producer == "orders-producer" for c in orders_contracts)


def test_unnamed_documents_get_indexed_names(tmp_path):
    path = tmp_path / "pair.yml"
    path.write_text(
        "request: {method: get, url: /a}\nresponse: {status: 200}\n"
        "---\n"
        "request: {method: get, url: /b}\nresponse: {status: 204}\n",
        encoding="utf-8",
    )

    contracts = load(path)

    assert [c.name for c in contracts] == ["pair_0", "pair_1"]
    assert contracts[0].request.method == "GET"


def test_url_path_with_query_parameters(orders_contracts):
    contract = next(c for c in orders_contracts if c.name == "shouldListOrdersByStatus")
    assert contract.request.url is None
    assert contract.request.url_path == "/orders"
    assert contract.request.query_parameters == {"status": "OPEN"}
    assert contract.request.target() == "/orders?status=OPEN"


def test_header_values_are_coerced_to_text(tmp_path):
    path = tmp_path / "count.yml"
    path.write_text(
        "request: {method: GET, url: /count}\n"
        "response: {status: 200, headers: {X-Total: 5}}\n",
        encoding="utf-8",
    )
    assert load(path)[0].response.headers == {"X-Total": "5"}


def test_contracts_are_hashable_and_immutable(greeting_contracts):
    contract = greeting_contracts[0]
    assert contract in set(greeting_contracts)
    with pytest.raises(Exception):
        contract.name = "renamed"


@pytest.mark.parametrize(
    "text",
    [
        "request: [unclosed\n",
        "- just\n- a list\n",
        "request: {method: GET, url: /x}\n",
        "request: {method: GET}\nresponse: {status: 200}\n",
        "request: {method: GET, url: /x, urlPath: /x}\nresponse: {status: 200}\n",
        "request: {method: GET, url: x}\nresponse: {status: 200}\n",
        "request: {method: GET, url: /x}\nresponse: {status: 999}\n",
        "request: {method: GET, url: /x, stauts: 1}\nresponse: {status: 200}\n",
        "request: {method: GET, url: /x?a=1, queryParameters: {a: 1}}\nresponse: {status: 200}\n",
        "request: {method: GET, url: /x, matchers: {url: {regex: \"/users/([\"}}}\nresponse: {status: 200}\n",
        "request:\n  method: GET\n  url: /x\n  matchers:\n    headers: [{key: Accept, regex: \"*json\"}]\nresponse: {status: 200}\n",
    ],
)
def test_malformed_contracts_raise_parse_error(tmp_path, text):
    path = tmp_path / "broken.yml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ContractParseError) as info:
        load(path)

    assert info.value.path == path
    assert isinstance(info.value, ValueError)


def test_duplicate_names_are_rejected(tmp_path):
    body = "name: same\nrequest: {method: GET, url: /x}\nresponse: {status: 200}\n"
    (tmp_path / "a.yml").write_text(body, encoding="utf-8")
    (tmp_path / "b.yml").write_text(body, encoding="utf-8")

    with pytest.raises(ContractParseError, match="duplicate contract name 'same'"):
        load(tmp_path)


def test_missing_path_raises_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        load(tmp_path / "nope")


def test_store_groups_contracts_per_producer(contracts_root):
    store = ContractStore(contracts_root)

    assert store.producers() == ["greeting-producer", "orders-producer"]
    assert [c.name for c in store.contracts_for("greeting-producer")] == ["shouldReturnGreeting"]
    assert "legacyPing" not in [c.name for c in store.active("orders-producer")]
    assert store.get("orders-producer", "shouldCreateOrder").priority == 1
    assert len(list(store.all_contracts())) == 5


def test_store_unknown_producer_or_contract(contracts_root):
    store = ContractStore(contracts_root)

    with pytest.raises(KeyError):
        store.contracts_for("nobody")
    with pytest.raises(KeyError):
        store.get("greeting-producer", "missing")


def test_store_reload_picks_up_new_contracts(contracts_root):
    store = ContractStore(contracts_root)
    assert len(store.contracts_for("greeting-producer")) == 1

    (contracts_root / "greeting-producer" / "shouldGreetAnonymous.yml").write_text(
        "request: {method: GET, url: /greeting/anonymous}\nresponse: {status: 200}\n",
        encoding="utf-8",
    )
    assert len(store.contracts_for("greeting-producer")) == 1

    store.reload()
    assert len(store.contracts_for("greeting-producer")) == 2


def test_bundled_greeting_contract_loads():
    contracts = ContractStore(Path(__file__).parent.parent / "contracts").contracts_for("greeting-producer")

    assert [c.name for c in contracts] == ["shouldReturnGreeting"]
    assert isinstance(contracts[0], Contract)
    assert contracts[0].description.startswith("Represents a successful scenario")
