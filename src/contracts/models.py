"""
Contract models.

A contract describes one HTTP interaction a consumer expects from a producer:
- the request the consumer sends (method, url or urlPath, query, headers, body)
- the response it expects back (status, headers, body)

Field names follow the YAML contract format, so `urlPath` and
`queryParameters` are accepted as aliases of the snake_case attributes.

Both the stub generator (src/stubs/mappings.py) and the verifier
(src/verifier/verifier.py) read these models; neither should parse raw
YAML dicts on its own.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _stringify_values(value: Any) -> Any:
    # YAML turns `X-Count: 5` into an int; header and query values are text on the wire.
    if isinstance(value, dict):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    return value


def ensure_regex(value: str) -> str:
    try:
        re.compile(value)
    except re.error as exc:
        raise ValueError(f"invalid regex {value!r}: {exc}") from exc
    return value


class UrlMatcher(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    regex: str

    @field_validator("regex")
    @classmethod
    def check_regex(cls, value: str) -> str:
        return ensure_regex(value)


class HeaderMatcher(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    regex: str

    @field_validator("regex")
    @classmethod
    def check_regex(cls, value: str) -> str:
        return ensure_regex(value)


class RequestMatchers(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Optional[UrlMatcher] = None
    headers: List[HeaderMatcher] = Field(default_factory=list)


class ContractRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    method: str
    url: Optional[str] = None
    url_path: Optional[str] = Field(default=None, alias="urlPath")
    query_parameters: Dict[str, str] = Field(default_factory=dict, alias="queryParameters")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None
    matchers: RequestMatchers = Field(default_factory=RequestMatchers)

    @field_validator("method")
    @classmethod
    def normalize_method(cls, value: str) -> str:
        method = value.strip().upper()
        if not method:
            raise ValueError("method must not be empty")
        return method

    @field_validator("query_parameters", "headers", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _stringify_values(value)

    @model_validator(mode="after")
    def check_url(self) -> "ContractRequest":
        if bool(self.url) == bool(self.url_path):
            raise ValueError("exactly one of 'url' or 'urlPath' is required")
        target = self.url or self.url_path
        if not target.startswith("/"):
            raise ValueError(f"url must start with '/': {target!r}")
        if self.url_path and "?" in self.url_path:
            raise ValueError("urlPath must not contain a query string; use queryParameters")
        if self.url and self.query_parameters:
            raise ValueError("queryParameters require urlPath; put the query string in url instead")
        return self

    def target(self) -> str:
        """Path plus query string, as the consumer would send it."""
        if self.url:
            return self.url
        if not self.query_parameters:
            return self.url_path
        return f"{self.url_path}?{urlencode(self.query_parameters)}"


class ContractResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: int = Field(ge=100, le=599)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @field_validator("headers", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _stringify_values(value)


class Contract(BaseModel):
    """One named request/response interaction, immutable once loaded."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    description: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=1)
    ignored: bool = False
    request: ContractRequest
    response: ContractResponse
    producer: Optional[str] = None
    source: Optional[str] = None

    def __hash__(self) -> int:
        return hash((self.producer, self.name))

    @property
    def qualified_name(self) -> str:
        return f"{self.producer}/{self.name}" if self.producer else self.name


__all__ = [
    "Contract",
    "ContractRequest",
    "ContractResponse",
    "HeaderMatcher",
    "RequestMatchers",
    "UrlMatcher",
    "ensure_regex",
]
