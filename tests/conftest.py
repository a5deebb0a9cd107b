"""Pytest fixtures for contract, stub and verifier tests."""

import pytest

from src.contracts.store import load


GREETING_CONTRACT = """\
request:
  method: GET
  url: /greeting/Pivotal
response:
  status: 200
  body:
    greeting: "Hello, Pivotal!"
  headers:
    Content-Type: application/json
"""

ORDERS_CONTRACTS = """\
name: shouldCreateOrder
priority: 1
request:
  method: POST
  url: /orders
  headers:
    Content-Type: application/json
  body:
    item: book
    quantity: 2
response:
  status: 201
  headers:
    Content-Type: application/json
    Location: /orders/42
  body:
    id: 42
    item: book
    quantity: 2
---
name: shouldListOrdersByStatus
request:
  method: GET
  urlPath: /orders
  queryParameters:
    status: OPEN
response:
  status: 200
  body:
    - id: 42
      status: OPEN
---
name: shouldRejectAnyOtherOrder
priority: 5
request:
  method: POST
  url: /orders
response:
  status: 400
  body: "invalid order"
---
name: legacyPing
ignored: true
request:
  method: GET
  url: /ping
response:
  status: 200
"""


@pytest.fixture
def contracts_root(tmp_path):
    """Contracts root with a greeting producer and an orders producer."""
    root = tmp_path / "contracts"
    (root / "greeting-producer").mkdir(parents=True)
    (root / "greeting-producer" / "shouldReturnGreeting.yml").write_text(GREETING_CONTRACT, encoding="utf-8")
    (root / "orders-producer").mkdir(parents=True)
    (root / "orders-producer" / "orders.yml").write_text(ORDERS_CONTRACTS, encoding="utf-8")
    return root


@pytest.fixture
def greeting_contracts(contracts_root):
    return load(contracts_root / "greeting-producer", producer="greeting-producer")


@pytest.fixture
def orders_contracts(contracts_root):
    return load(contracts_root / "orders-producer", producer="orders-producer")
