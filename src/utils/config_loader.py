"""
Configuration loader for the contract toolkit
"""

import os
import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, ValidationError
import logging

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


class ContractsConfig(BaseModel):
    """Where consumer contracts live"""

    root: str = "contracts"


class StubsConfig(BaseModel):
    """Stub generation and publishing"""

    output_dir: str = "build/stubs"
    repository_dir: str = "~/.contract_stubs"


class ServerConfig(BaseModel):
    """Stub server settings"""

    host: str = "127.0.0.1"
    port: int = Field(default=8090, ge=0, le=65535)
    journal_size: int = Field(default=500, ge=1, le=100000)


class VerifierConfig(BaseModel):
    """Producer verification settings"""

    base_url: str = "http://localhost:8080"
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    tests_output_dir: str = "build/generated-tests"


class ContractToolConfig(BaseModel):
    """Complete toolkit configuration"""

    contracts: ContractsConfig = Field(default_factory=ContractsConfig)
    stubs: StubsConfig = Field(default_factory=StubsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    verifier: VerifierConfig = Field(default_factory=VerifierConfig)


def _apply_env_overrides(data: dict) -> dict:
    overrides = {
        ("contracts", "root"): os.getenv("CONTRACTS_DIR"),
        ("stubs", "repository_dir"): os.getenv("STUB_REPOSITORY_DIR"),
        ("verifier", "base_url"): os.getenv("PRODUCER_BASE_URL"),
        ("server", "port"): os.getenv("STUB_SERVER_PORT"),
    }
    for (section, key), value in overrides.items():
        if value:
            data.setdefault(section, {})[key] = value
    return data


def load_contract_config(config_path: Optional[Path] = None) -> ContractToolConfig:
    """
    Load and validate toolkit configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/contract_config.yml

    Returns:
        Validated ContractToolConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = PROJECT_ROOT / "config" / "contract_config.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    try:
        config = ContractToolConfig(**_apply_env_overrides(config_data))
        logger.info(f"Successfully loaded config from {config_path}")
        return config
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise


def resolve_path(value: str) -> Path:
    """Expand ~ and resolve relative paths against the project root"""
    path = Path(value).expanduser()
    return path if path.is_absolute() else PROJECT_ROOT / path
