#!/usr/bin/env python3
"""
Install a producer's contracts and stubs into the local stub repository, so
consumers can resolve them by producer and version.

  python scripts/publish_stubs.py --producer greeting-producer --version 0.0.1-SNAPSHOT
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.contracts.store import ContractParseError
from src.stubs.repository import StubRepository
from src.utils.config_loader import load_contract_config, resolve_path


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description="Publish stubs to the local stub repository.")
    parser.add_argument("--producer", required=True, help="Producer name")
    parser.add_argument("--version", required=True, help="Stub version, e.g. 0.0.1-SNAPSHOT")
    parser.add_argument("--contracts", type=Path, default=None, help="Contracts directory (default: <root>/<producer>)")
    parser.add_argument("--repo", type=Path, default=None, help="Stub repository directory")
    parser.add_argument("--config", type=Path, default=None, help="Path to contract_config.yml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    cfg = load_contract_config(args.config)

    contracts_path = args.contracts or resolve_path(cfg.contracts.root) / args.producer
    repository = StubRepository(args.repo or resolve_path(cfg.stubs.repository_dir))

    try:
        target = repository.install(args.producer, args.version, contracts_path)
    except (FileNotFoundError, ContractParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Installed {args.producer}:{args.version} to {target}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
