"""
Stub request matching.

StubMatcher decides which stub mapping answers an incoming request. It knows
nothing about HTTP servers: src/stubs/server.py adapts FastAPI requests into
StubRequest objects and StubResponse objects back into responses.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import parse_qs, urlsplit

from .mappings import RequestPattern, StubMapping

logger = logging.getLogger(__name__)


@dataclass
class StubRequest:
    method: str
    path: str
    query_string: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Union[str, bytes, None] = None,
    ) -> "StubRequest":
        parts = urlsplit(url)
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        return cls(
            method=method,
            path=parts.path or "/",
            query_string=parts.query,
            headers=dict(headers or {}),
            body=body or "",
        )

    @property
    def url(self) -> str:
        return f"{self.path}?{self.query_string}" if self.query_string else self.path

    @property
    def query(self) -> Dict[str, List[str]]:
        return parse_qs(self.query_string, keep_blank_values=True)

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def to_dict(self) -> Dict[str, Any]:
        return {"method": self.method, "url": self.url, "headers": dict(self.headers), "body": self.body}


@dataclass
class StubResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    is_json: bool = False
    mapping_name: Optional[str] = None


@dataclass
class NotFound:
    request: StubRequest
    closest: Optional[str] = None

    status: int = 404


MatchResult = Union[StubResponse, NotFound]


def _criteria(pattern: RequestPattern, request: StubRequest) -> List[bool]:
    checks: List[bool] = [pattern.method in ("ANY", request.method)]

    if pattern.url is not None:
        checks.append(pattern.url == request.url)
    elif pattern.url_path is not None:
        checks.append(pattern.url_path == request.path)
    elif pattern.url_pattern is not None:
        checks.append(re.fullmatch(pattern.url_pattern, request.url) is not None)

    query = request.query
    for name, value_pattern in pattern.query_parameters.items():
        values = query.get(name) or []
        checks.append(any(value_pattern.is_satisfied_by(v) for v in values))

    for name, value_pattern in pattern.headers.items():
        checks.append(value_pattern.is_satisfied_by(request.header(name)))

    for body_pattern in pattern.body_patterns:
        checks.append(body_pattern.is_satisfied_by(request.body))

    return checks


def _priority_key(indexed: Tuple[int, StubMapping]) -> Tuple[bool, int, int]:
    index, mapping = indexed
    return (mapping.priority is None, mapping.priority or 0, index)


class StubMatcher:
    """Selects the response for a request from a fixed set of stub mappings."""

    def __init__(self, mappings: Iterable[StubMapping]) -> None:
        self.mappings: List[StubMapping] = [m for _, m in sorted(enumerate(mappings), key=_priority_key)]

    def match(self, request: StubRequest) -> MatchResult:
        best_score = 0
        closest: Optional[str] = None

        for mapping in self.mappings:
            checks = _criteria(mapping.request, request)
            if all(checks):
                logger.debug("Request %s %s matched stub '%s'", request.method, request.url, mapping.name)
                return self._response_for(mapping)
            score = sum(checks)
            if score > best_score:
                best_score = score
                closest = mapping.name

        logger.warning("Request was not matched: %s %s (closest stub: %s)", request.method, request.url, closest)
        return NotFound(request=request, closest=closest)

    @staticmethod
    def _response_for(mapping: StubMapping) -> StubResponse:
        definition = mapping.response
        if definition.has_json_body:
            return StubResponse(
                status=definition.status,
                headers=dict(definition.headers),
                body=definition.json_body,
                is_json=True,
                mapping_name=mapping.name,
            )
        return StubResponse(
            status=definition.status,
            headers=dict(definition.headers),
            body=definition.body,
            mapping_name=mapping.name,
        )
