"""
Producer-side contract verification.

This package wires together:
- contracts.store (which contracts to check)
- verifier.verifier (replays requests with httpx, compares responses)
- verifier.generator (pytest modules with one test per contract)
"""

from .comparison import first_difference
from .generator import generate_test_module, write_test_module
from .report import VerificationReport, VerificationResult
from .verifier import ContractVerifier

__all__ = [
    "ContractVerifier",
    "VerificationReport",
    "VerificationResult",
    "first_difference",
    "generate_test_module",
    "write_test_module",
]
