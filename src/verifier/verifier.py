"""
Contract verifier.

Purpose:
- Replays each contract's request against a running producer
- Checks the producer's response against the contract: status first, then the
  headers the contract names, then the body
- Reports one result per contract, naming the first field that differs

Usage:
- scripts/verify_producer.py for a producer reachable over HTTP
- generated test modules (src/verifier/generator.py)
- tests pass an httpx.AsyncClient bound to an ASGI app to verify in-process

Implementation notes:
- Use httpx for async requests
- An unreachable producer is a failed result (field "connection"), not an exception
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, Optional

import httpx

from src.contracts.models import Contract

from .comparison import first_difference, header_matches
from .report import VerificationReport, VerificationResult

logger = logging.getLogger(__name__)


class ContractVerifier:
    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 10.0,
        default_headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if base_url is None and client is None:
            raise ValueError("Either base_url or client is required to verify a producer.")
        self.base_url = base_url.rstrip("/") if base_url else None
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.default_headers = dict(default_headers or {})

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_seconds) as client:
            yield client

    def _request_kwargs(self, contract: Contract) -> Dict[str, Any]:
        request = contract.request
        headers = {**self.default_headers, **request.headers}
        kwargs: Dict[str, Any] = {"headers": headers}

        if isinstance(request.body, str):
            kwargs["content"] = request.body.encode("utf-8")
        elif request.body is not None:
            kwargs["json"] = request.body
        return kwargs

    async def _verify_with(self, client: httpx.AsyncClient, contract: Contract) -> VerificationResult:
        request = contract.request
        path = request.target()

        try:
            response = await client.request(request.method, path, **self._request_kwargs(contract))
        except httpx.TransportError as exc:
            target = self.base_url or str(client.base_url)
            logger.warning("Producer unreachable for contract '%s': %s", contract.name, exc)
            return VerificationResult.failure(
                contract.name,
                "connection",
                expected=target,
                actual=None,
                message=f"I/O error on {request.method} request for {target}{path}: {exc}",
            )

        result = self._compare(contract, response)
        if result.passed:
            logger.debug("Contract '%s' verified", contract.name)
        else:
            logger.warning("Contract '%s' failed: %s", contract.name, result.message)
        return result

    @staticmethod
    def _compare(contract: Contract, response: httpx.Response) -> VerificationResult:
        expected = contract.response

        if response.status_code != expected.status:
            return VerificationResult.failure(contract.name, "status", expected.status, response.status_code)

        for name, value in expected.headers.items():
            actual = response.headers.get(name)
            if not header_matches(name, value, actual):
                return VerificationResult.failure(contract.name, f"headers.{name}", value, actual)

        if expected.body is None:
            return VerificationResult.success(contract.name)

        if isinstance(expected.body, str):
            if response.text != expected.body:
                return VerificationResult.failure(contract.name, "body", expected.body, response.text)
            return VerificationResult.success(contract.name)

        try:
            actual_body = response.json()
        except ValueError:
            return VerificationResult.failure(
                contract.name,
                "body",
                expected.body,
                response.text,
                message=f"body: expected JSON {expected.body!r} but response was not JSON: {response.text[:200]!r}",
            )

        diff = first_difference(expected.body, actual_body)
        if diff is not None:
            field_name, want, got = diff
            return VerificationResult.failure(contract.name, field_name, want, got)
        return VerificationResult.success(contract.name)

    async def verify_contract(self, contract: Contract) -> VerificationResult:
        async with self._session() as client:
            return await self._verify_with(client, contract)

    async def verify(self, contracts: Iterable[Contract], producer: Optional[str] = None) -> VerificationReport:
        active = sorted((c for c in contracts if not c.ignored), key=lambda c: c.name)
        report = VerificationReport(producer=producer or next((c.producer for c in active if c.producer), None))

        async with self._session() as client:
            for contract in active:
                report.results.append(await self._verify_with(client, contract))

        logger.info(
            "Verified %d contract(s) for %s: %d passed, %d failed",
            len(report.results),
            report.producer,
            len(report.passed),
            len(report.failed),
        )
        return report

    def verify_sync(self, contracts: Iterable[Contract], producer: Optional[str] = None) -> VerificationReport:
        return asyncio.run(self.verify(contracts, producer=producer))
