#!/usr/bin/env python3
"""
Run the stub server in the foreground.

  python scripts/run_stub_server.py --producer greeting-producer
  python scripts/run_stub_server.py --producer greeting-producer --version 0.0.1-SNAPSHOT
  python scripts/run_stub_server.py --contracts contracts/greeting-producer --port 8090
  python scripts/run_stub_server.py --mappings build/stubs/greeting-producer/mappings

--producer without --version serves the contracts under the contracts root;
with --version it serves stubs installed in the local stub repository.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from src.contracts.store import ContractParseError, load
from src.stubs.mappings import generate_mappings, read_mappings
from src.stubs.repository import StubNotFoundError, StubRepository
from src.stubs.server import create_stub_app
from src.utils.config_loader import load_contract_config, resolve_path


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description="Serve contract stubs over HTTP.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--producer", type=str, help="Producer name")
    source.add_argument("--contracts", type=Path, help="Contract file or directory")
    source.add_argument("--mappings", type=Path, help="Directory of stub mapping JSON files")
    parser.add_argument("--version", type=str, default=None, help="Installed stub version (with --producer)")
    parser.add_argument("--repo", type=Path, default=None, help="Stub repository directory")
    parser.add_argument("--host", type=str, default=None, help="Bind host")
    parser.add_argument("--port", type=int, default=None, help="Bind port")
    parser.add_argument("--config", type=Path, default=None, help="Path to contract_config.yml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.version and not args.producer:
        parser.error("--version requires --producer.")

    setup_logging(args.verbose)
    cfg = load_contract_config(args.config)

    try:
        if args.mappings:
            mappings = read_mappings(args.mappings)
        elif args.contracts:
            mappings = generate_mappings(load(args.contracts))
        elif args.version:
            repository = StubRepository(args.repo or resolve_path(cfg.stubs.repository_dir))
            mappings = repository.load_mappings(args.producer, args.version)
        else:
            contracts_path = resolve_path(cfg.contracts.root) / args.producer
            mappings = generate_mappings(load(contracts_path, producer=args.producer))
    except (FileNotFoundError, ContractParseError, StubNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    app = create_stub_app(mappings, journal_size=cfg.server.journal_size)
    uvicorn.run(
        app,
        host=args.host or cfg.server.host,
        port=args.port if args.port is not None else cfg.server.port,
        log_level="debug" if args.verbose else "info",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
