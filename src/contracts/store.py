"""
Contract store.

Loads YAML contracts from disk and groups them per producer.

Layout expected by ContractStore:

    contracts/
        greeting-producer/
            shouldReturnGreeting.yml
        another-producer/
            nested/dir/anyContract.yaml

A single file may hold several YAML documents separated by `---`; each one is
a separate contract.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml
from pydantic import ValidationError

from .models import Contract

logger = logging.getLogger(__name__)

CONTRACT_SUFFIXES = (".yml", ".yaml")


class ContractParseError(ValueError):
    def __init__(self, message: str, *, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = Path(path) if path else None


def _contract_files(path: Path) -> List[Path]:
    if path.is_file():
        return [path]
    return sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in CONTRACT_SUFFIXES)


def _parse_documents(path: Path) -> List[Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except yaml.YAMLError as exc:
        raise ContractParseError(f"invalid YAML: {exc}", path=path) from exc


def _build_contract(doc: Any, path: Path, index: int, total: int, producer: Optional[str]) -> Contract:
    if not isinstance(doc, dict):
        raise ContractParseError(f"document {index} is not a mapping", path=path)

    data: Dict[str, Any] = dict(doc)
    if not data.get("name"):
        data["name"] = path.stem if total == 1 else f"{path.stem}_{index}"
    data["producer"] = producer
    data["source"] = str(path)

    try:
        return Contract.model_validate(data)
    except ValidationError as exc:
        raise ContractParseError(f"invalid contract '{data['name']}': {exc}", path=path) from exc


def load(path: Union[str, Path], producer: Optional[str] = None) -> List[Contract]:
    """
    Load every contract found at `path`.

    Args:
        path: A contract file or a directory searched recursively
        producer: Producer name stamped on each contract

    Returns:
        Contracts sorted by name. Names are unique within the result.

    Raises:
        FileNotFoundError: If path doesn't exist
        ContractParseError: On malformed YAML, schema violations or duplicate names
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Contract path not found: {path}")

    contracts: Dict[str, Contract] = {}
    for file_path in _contract_files(path):
        docs = _parse_documents(file_path)
        for index, doc in enumerate(docs):
            contract = _build_contract(doc, file_path, index, len(docs), producer)
            existing = contracts.get(contract.name)
            if existing is not None:
                raise ContractParseError(
                    f"duplicate contract name '{contract.name}' (also defined in {existing.source})",
                    path=file_path,
                )
            contracts[contract.name] = contract

    logger.info("Loaded %d contract(s) from %s", len(contracts), path)
    return sorted(contracts.values(), key=lambda c: c.name)


class ContractStore:
    """Per-producer view over a contracts root directory."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)
        self._cache: Dict[str, List[Contract]] = {}

    def producers(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir() and not p.name.startswith("."))

    def contracts_for(self, producer: str) -> List[Contract]:
        if producer not in self._cache:
            producer_dir = self.root / producer
            if not producer_dir.is_dir():
                raise KeyError(f"Unknown producer '{producer}' under {self.root}")
            self._cache[producer] = load(producer_dir, producer=producer)
        return list(self._cache[producer])

    def active(self, producer: str) -> List[Contract]:
        return [c for c in self.contracts_for(producer) if not c.ignored]

    def get(self, producer: str, name: str) -> Contract:
        for contract in self.contracts_for(producer):
            if contract.name == name:
                return contract
        raise KeyError(f"No contract '{name}' for producer '{producer}'")

    def all_contracts(self) -> Iterable[Contract]:
        for producer in self.producers():
            yield from self.contracts_for(producer)

    def reload(self) -> None:
        self._cache.clear()
