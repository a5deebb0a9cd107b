"""
Local stub repository.

Producers publish their contracts and generated stub mappings here; consumers
resolve them by producer name and version.

    <root>/<producer>/<version>/
        contracts/            copy of the producer's contract files
        mappings/             generated stub mappings (JSON)
        stub-manifest.json
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from src.contracts.store import load

from .mappings import StubMapping, generate_mappings, read_mappings, write_mappings

logger = logging.getLogger(__name__)

MANIFEST_FILE = "stub-manifest.json"
LATEST_ALIASES = {"latest", "+", "LATEST"}


class StubNotFoundError(LookupError):
    pass


def _version_key(version: str) -> Tuple[Any, ...]:
    # 1.2.0-rc1 and 1.2.0-SNAPSHOT sort before 1.2.0.
    release, _, qualifier = version.partition("-")
    parts = tuple((1, int(p)) if p.isdigit() else (0, p) for p in re.split(r"[._+]", release) if p)
    return (parts, qualifier == "", qualifier)


class StubRepository:
    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).expanduser()

    def _producer_dir(self, producer: str) -> Path:
        return self.root / producer

    def install(self, producer: str, version: str, contracts_path: Union[str, Path]) -> Path:
        """Copy contracts and freshly generated mappings into the repository."""
        contracts_path = Path(contracts_path)
        contracts = load(contracts_path, producer=producer)
        mappings = generate_mappings(contracts)

        target = self._producer_dir(producer) / version
        if target.exists():
            logger.info("Overwriting installed stubs %s:%s", producer, version)
            shutil.rmtree(target)

        contracts_target = target / "contracts"
        if contracts_path.is_dir():
            shutil.copytree(contracts_path, contracts_target)
        else:
            contracts_target.mkdir(parents=True)
            shutil.copy2(contracts_path, contracts_target / contracts_path.name)

        write_mappings(mappings, target / "mappings")

        manifest: Dict[str, Any] = {
            "producer": producer,
            "version": version,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "contracts": [c.name for c in contracts],
            "mappings": [m.name for m in mappings],
        }
        (target / MANIFEST_FILE).write_text(json.dumps(manifest, indent=2), encoding="utf-8")

        logger.info("Installed %d stub(s) for %s:%s into %s", len(mappings), producer, version, target)
        return target

    def producers(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def versions(self, producer: str) -> List[str]:
        producer_dir = self._producer_dir(producer)
        if not producer_dir.is_dir():
            return []
        installed = [p.name for p in producer_dir.iterdir() if (p / MANIFEST_FILE).is_file()]
        return sorted(installed, key=_version_key)

    def manifest(self, producer: str, version: str = "latest") -> Dict[str, Any]:
        version_dir = self._resolve_version_dir(producer, version)
        return json.loads((version_dir / MANIFEST_FILE).read_text(encoding="utf-8"))

    def _resolve_version_dir(self, producer: str, version: str) -> Path:
        versions = self.versions(producer)
        if not versions:
            raise StubNotFoundError(f"No stubs installed for producer '{producer}' in {self.root}")
        if version in LATEST_ALIASES:
            version = versions[-1]
        if version not in versions:
            raise StubNotFoundError(
                f"Stubs {producer}:{version} not found. Installed versions: {', '.join(versions)}"
            )
        return self._producer_dir(producer) / version

    def resolve(self, producer: str, version: str = "latest") -> Path:
        """Return the mappings directory for producer:version."""
        return self._resolve_version_dir(producer, version) / "mappings"

    def load_mappings(self, producer: str, version: str = "latest") -> List[StubMapping]:
        return read_mappings(self.resolve(producer, version))
