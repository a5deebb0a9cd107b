"""
Stub mappings.

Converts contracts into WireMock-compatible stub mappings, and reads/writes
them as JSON files so stubs can be published and served without the original
contracts.

Shape of a written mapping:

    {
      "id": "...",
      "name": "shouldReturnGreeting",
      "request": {"method": "GET", "url": "/greeting/Pivotal"},
      "response": {"status": 200, "jsonBody": {...}, "headers": {...}}
    }
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.contracts.models import Contract, ensure_regex
from src.contracts.store import ContractParseError

logger = logging.getLogger(__name__)

MAPPING_NAMESPACE = uuid.UUID("6f1c7c52-41d9-4c0b-9a57-0e5b1a7c2d10")


class ValuePattern(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    equal_to: Optional[str] = Field(default=None, alias="equalTo")
    matches: Optional[str] = None

    @field_validator("matches")
    @classmethod
    def check_matches(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else ensure_regex(value)

    def is_satisfied_by(self, value: Optional[str]) -> bool:
        if value is None:
            return False
        if self.matches is not None:
            return re.fullmatch(self.matches, value) is not None
        return value == self.equal_to


class BodyPattern(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    equal_to_json: Any = Field(default=None, alias="equalToJson")
    equal_to: Optional[str] = Field(default=None, alias="equalTo")

    def is_satisfied_by(self, body: str) -> bool:
        if "equal_to_json" in self.model_fields_set:
            try:
                return json.loads(body) == self.equal_to_json
            except ValueError:
                return False
        return body == self.equal_to


class RequestPattern(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    method: str = "ANY"
    url: Optional[str] = None
    url_path: Optional[str] = Field(default=None, alias="urlPath")
    url_pattern: Optional[str] = Field(default=None, alias="urlPattern")
    query_parameters: Dict[str, ValuePattern] = Field(default_factory=dict, alias="queryParameters")
    headers: Dict[str, ValuePattern] = Field(default_factory=dict)
    body_patterns: List[BodyPattern] = Field(default_factory=list, alias="bodyPatterns")

    @field_validator("url_pattern")
    @classmethod
    def check_url_pattern(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else ensure_regex(value)


class ResponseDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    status: int = 200
    headers: Dict[str, str] = Field(default_factory=dict)
    json_body: Any = Field(default=None, alias="jsonBody")
    body: Optional[str] = None

    @property
    def has_json_body(self) -> bool:
        return "json_body" in self.model_fields_set


class StubMapping(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    priority: Optional[int] = None
    request: RequestPattern
    response: ResponseDefinition

    def to_json_dict(self) -> Dict[str, Any]:
        # exclude_unset keeps explicit nulls inside bodies and omits fields a mapping never declared.
        data = self.model_dump(by_alias=True, exclude_unset=True)
        if data.get("priority") is None:
            data.pop("priority", None)
        return data


def _mapping_id(contract: Contract) -> str:
    return str(uuid.uuid5(MAPPING_NAMESPACE, contract.qualified_name))


def _request_pattern(contract: Contract) -> RequestPattern:
    request = contract.request
    fields: Dict[str, Any] = {"method": request.method}

    if request.matchers.url is not None:
        fields["url_pattern"] = request.matchers.url.regex
    elif request.url:
        fields["url"] = request.url
    else:
        fields["url_path"] = request.url_path

    fields["query_parameters"] = {k: ValuePattern(equal_to=v) for k, v in request.query_parameters.items()}

    headers = {k: ValuePattern(equal_to=v) for k, v in request.headers.items()}
    for matcher in request.matchers.headers:
        # Regex matchers replace any literal value declared for the same header.
        for existing in [k for k in headers if k.lower() == matcher.key.lower()]:
            del headers[existing]
        headers[matcher.key] = ValuePattern(matches=matcher.regex)
    fields["headers"] = headers

    if isinstance(request.body, str):
        fields["body_patterns"] = [BodyPattern(equal_to=request.body)]
    elif request.body is not None:
        fields["body_patterns"] = [BodyPattern(equal_to_json=request.body)]

    return RequestPattern(**fields)


def _response_definition(contract: Contract) -> ResponseDefinition:
    response = contract.response
    if response.body is None:
        return ResponseDefinition(status=response.status, headers=dict(response.headers))
    if isinstance(response.body, str):
        return ResponseDefinition(status=response.status, headers=dict(response.headers), body=response.body)
    return ResponseDefinition(status=response.status, headers=dict(response.headers), json_body=response.body)


def contract_to_mapping(contract: Contract) -> StubMapping:
    """Convert one contract into a stub mapping with a stable id."""
    return StubMapping(
        id=_mapping_id(contract),
        name=contract.name,
        priority=contract.priority,
        request=_request_pattern(contract),
        response=_response_definition(contract),
    )


def generate_mappings(contracts: Iterable[Contract]) -> List[StubMapping]:
    mappings = [contract_to_mapping(c) for c in contracts if not c.ignored]
    logger.info("Generated %d stub mapping(s)", len(mappings))
    return mappings


def _file_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_") or "mapping"


def write_mappings(mappings: Iterable[StubMapping], out_dir: Union[str, Path]) -> List[Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for mapping in mappings:
        target = out_dir / f"{_file_name(mapping.name)}.json"
        target.write_text(json.dumps(mapping.to_json_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        written.append(target)

    logger.info("Wrote %d stub mapping(s) to %s", len(written), out_dir)
    return written


def _read_mapping_file(path: Path) -> List[StubMapping]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ContractParseError(f"invalid mapping JSON: {exc}", path=path) from exc

    # WireMock also accepts {"mappings": [...]} in a single file.
    items = data.get("mappings") if isinstance(data, dict) and "mappings" in data else [data]
    try:
        return [StubMapping.model_validate(item) for item in items]
    except ValidationError as exc:
        raise ContractParseError(f"invalid stub mapping: {exc}", path=path) from exc


def read_mappings(path: Union[str, Path]) -> List[StubMapping]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mappings path not found: {path}")

    files = [path] if path.is_file() else sorted(path.rglob("*.json"))
    mappings: List[StubMapping] = []
    for file_path in files:
        mappings.extend(_read_mapping_file(file_path))
    logger.info("Read %d stub mapping(s) from %s", len(mappings), path)
    return mappings
