"""
Generates pytest modules that verify a producer against its contracts.

One test function per active contract, so a failing contract shows up as a
failing test with the contract's name in it. The generated module reads the
contracts from disk when it runs; regenerate it only when contracts are added,
renamed or removed.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from src.contracts.store import load

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL_ENV = "PRODUCER_BASE_URL"

_HEADER = '''"""
Contract verification tests for {producer}.

Generated by scripts/generate_tests.py. Do not edit by hand.
"""

import os

import httpx
import pytest

from src.contracts.store import ContractStore
from src.verifier.verifier import ContractVerifier

CONTRACTS_ROOT = {contracts_root!r}
PRODUCER = {producer!r}

'''

_APP_CLIENT = '''
def _client() -> httpx.AsyncClient:
    from {app_module} import {app_attr} as app

    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://producer")

'''

_URL_CLIENT = '''
def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=os.getenv({env!r}, {default_url!r}))

'''

_VERIFY = '''
async def _verify(name: str) -> None:
    contract = ContractStore(CONTRACTS_ROOT).get(PRODUCER, name)
    async with _client() as client:
        result = await ContractVerifier(client=client).verify_contract(contract)
    assert result.passed, result.message
'''

_TEST = '''

@pytest.mark.asyncio
async def {test_name}():
    await _verify({contract_name!r})
'''


def function_name_for(contract_name: str) -> str:
    """shouldReturnGreeting -> test_should_return_greeting"""
    snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", contract_name)
    snake = re.sub(r"[^0-9a-zA-Z]+", "_", snake).strip("_").lower()
    return f"test_{snake or 'contract'}"


def _split_app_import(app_import: str) -> List[str]:
    module, sep, attr = app_import.partition(":")
    if not sep or not module or not attr:
        raise ValueError(f"App import must look like 'package.module:app', got {app_import!r}")
    return [module, attr]


def generate_test_module(
    producer: str,
    contracts_root: Union[str, Path],
    app_import: Optional[str] = None,
    base_url_env: str = DEFAULT_BASE_URL_ENV,
    default_base_url: str = "http://localhost:8080",
) -> str:
    contracts_root = Path(contracts_root)
    contracts = [c for c in load(contracts_root / producer, producer=producer) if not c.ignored]

    parts = [_HEADER.format(producer=producer, contracts_root=str(contracts_root))]
    if app_import:
        module, attr = _split_app_import(app_import)
        parts.append(_APP_CLIENT.format(app_module=module, app_attr=attr))
    else:
        parts.append(_URL_CLIENT.format(env=base_url_env, default_url=default_base_url))
    parts.append(_VERIFY)

    seen = set()
    for contract in contracts:
        name = function_name_for(contract.name)
        candidate, suffix = name, 2
        while candidate in seen:
            candidate = f"{name}_{suffix}"
            suffix += 1
        seen.add(candidate)
        parts.append(_TEST.format(test_name=candidate, contract_name=contract.name))

    return "".join(parts)


def write_test_module(producer: str, contracts_root: Union[str, Path], out_dir: Union[str, Path], **kwargs) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    module_name = re.sub(r"[^0-9a-zA-Z]+", "_", producer).strip("_").lower()
    target = out_dir / f"test_{module_name}_contracts.py"
    target.write_text(generate_test_module(producer, contracts_root, **kwargs), encoding="utf-8")
    logger.info("Wrote contract tests for %s to %s", producer, target)
    return target
