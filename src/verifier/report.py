"""Verification results, one entry per contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class VerificationResult:
    contract: str
    passed: bool
    field: Optional[str] = None
    expected: Any = None
    actual: Any = None
    message: str = ""

    @classmethod
    def success(cls, contract: str) -> "VerificationResult":
        return cls(contract=contract, passed=True, message="OK")

    @classmethod
    def failure(cls, contract: str, field: str, expected: Any, actual: Any, message: str = "") -> "VerificationResult":
        if not message:
            message = f"{field}: expected {expected!r} but was {actual!r}"
        return cls(contract=contract, passed=False, field=field, expected=expected, actual=actual, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract": self.contract,
            "passed": self.passed,
            "field": self.field,
            "expected": self.expected,
            "actual": self.actual,
            "message": self.message,
        }


@dataclass
class VerificationReport:
    producer: Optional[str] = None
    results: List[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> List[VerificationResult]:
        return [r for r in self.results if r.passed]

    @property
    def failed(self) -> List[VerificationResult]:
        return [r for r in self.results if not r.passed]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        lines = [
            f"Contract verification for {self.producer or 'producer'}: "
            f"{len(self.passed)} passed, {len(self.failed)} failed, {len(self.results)} total"
        ]
        for result in self.results:
            status = "PASS" if result.passed else "FAIL"
            line = f"  [{status}] {result.contract}"
            if not result.passed:
                line += f" -> {result.message}"
            lines.append(line)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "producer": self.producer,
            "ok": self.ok,
            "total": len(self.results),
            "passed": len(self.passed),
            "failed": len(self.failed),
            "results": [r.to_dict() for r in self.results],
        }
