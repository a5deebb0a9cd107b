"""
Contracts layer.

This package defines what a consumer-driven contract is and how contracts are
read from disk:
- models.py: request/response contract models (pydantic)
- store.py: YAML loading and the per-producer ContractStore

Key rule:
- Stub generation and verification consume Contract objects only.
- Raw YAML is parsed in ONE place (store.py).
"""

from .models import Contract, ContractRequest, ContractResponse, HeaderMatcher, RequestMatchers, UrlMatcher
from .store import ContractParseError, ContractStore, load

__all__ = [
    "Contract",
    "ContractParseError",
    "ContractRequest",
    "ContractResponse",
    "ContractStore",
    "HeaderMatcher",
    "RequestMatchers",
    "UrlMatcher",
    "load",
]
