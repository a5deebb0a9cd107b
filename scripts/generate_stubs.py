#!/usr/bin/env python3
"""
Generate WireMock-style stub mappings from consumer contracts.

  python scripts/generate_stubs.py --producer greeting-producer
  python scripts/generate_stubs.py --contracts contracts/greeting-producer --out build/stubs/greeting
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.contracts.store import ContractParseError, load
from src.stubs.mappings import generate_mappings, write_mappings
from src.utils.config_loader import load_contract_config, resolve_path


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate stub mappings from contracts.")
    parser.add_argument("--producer", type=str, default=None, help="Producer directory under the contracts root")
    parser.add_argument("--contracts", type=Path, default=None, help="Contract file or directory (overrides --producer)")
    parser.add_argument("--out", type=Path, default=None, help="Output directory for mapping JSON files")
    parser.add_argument("--config", type=Path, default=None, help="Path to contract_config.yml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.producer is None and args.contracts is None:
        parser.error("Provide --producer or --contracts.")

    setup_logging(args.verbose)
    cfg = load_contract_config(args.config)

    contracts_path = args.contracts or resolve_path(cfg.contracts.root) / args.producer
    out_dir = args.out or resolve_path(cfg.stubs.output_dir) / (args.producer or contracts_path.stem) / "mappings"

    try:
        contracts = load(contracts_path, producer=args.producer)
    except (FileNotFoundError, ContractParseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    written = write_mappings(generate_mappings(contracts), out_dir)
    for path in written:
        print(f"  {path}")
    print(f"Generated {len(written)} stub mapping(s) in {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
