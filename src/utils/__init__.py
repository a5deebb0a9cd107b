"""
Utility modules for the contract toolkit
"""
from .config_loader import load_contract_config, resolve_path

__all__ = [
    'load_contract_config',
    'resolve_path',
]
