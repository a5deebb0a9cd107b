#!/usr/bin/env python3
"""
Verify a producer against the contracts its consumers published.

  python scripts/verify_producer.py --producer greeting-producer --base-url http://localhost:8080
  python scripts/verify_producer.py --producer greeting-producer --app src.samples.greeting_producer:app

Exits with status 1 when any contract fails, so it can gate a build.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

import httpx

from src.contracts.store import ContractParseError, ContractStore
from src.utils.config_loader import load_contract_config, resolve_path
from src.verifier.report import VerificationReport
from src.verifier.verifier import ContractVerifier


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def load_app(app_import: str):
    module_name, _, attr = app_import.partition(":")
    if not attr:
        raise ValueError(f"App import must look like 'package.module:app', got {app_import!r}")
    return getattr(importlib.import_module(module_name), attr)


async def verify_in_process(app, contracts, producer: str) -> VerificationReport:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://producer") as client:
        return await ContractVerifier(client=client).verify(contracts, producer=producer)


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify a producer against its contracts.")
    parser.add_argument("--producer", required=True, help="Producer directory under the contracts root")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--base-url", type=str, default=None, help="Running producer URL")
    target.add_argument("--app", type=str, default=None, help="ASGI app to verify in-process, module:attr")
    parser.add_argument("--contracts-root", type=Path, default=None, help="Contracts root directory")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--config", type=Path, default=None, help="Path to contract_config.yml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    cfg = load_contract_config(args.config)

    store = ContractStore(args.contracts_root or resolve_path(cfg.contracts.root))
    try:
        contracts = store.contracts_for(args.producer)
    except (KeyError, ContractParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.app:
        report = asyncio.run(verify_in_process(load_app(args.app), contracts, args.producer))
    else:
        verifier = ContractVerifier(
            base_url=args.base_url or cfg.verifier.base_url,
            timeout_seconds=cfg.verifier.timeout_seconds,
        )
        report = verifier.verify_sync(contracts, producer=args.producer)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        print(report.summary())

    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
