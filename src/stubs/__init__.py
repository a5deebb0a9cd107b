"""
Stubs layer.

Turns contracts into something a consumer can test against:
- mappings.py: contract -> WireMock-style stub mapping (JSON on disk)
- matcher.py: picks the stub that answers a request
- server.py: FastAPI app serving the stubs
- runner.py: runs the stub server on a background thread for tests
- repository.py: local repository where producers publish stubs
"""

from .mappings import StubMapping, contract_to_mapping, generate_mappings, read_mappings, write_mappings
from .matcher import NotFound, StubMatcher, StubRequest, StubResponse
from .repository import StubNotFoundError, StubRepository
from .runner import StubRunner, StubRunnerError
from .server import create_stub_app

__all__ = [
    "NotFound",
    "StubMapping",
    "StubMatcher",
    "StubNotFoundError",
    "StubRepository",
    "StubRequest",
    "StubResponse",
    "StubRunner",
    "StubRunnerError",
    "contract_to_mapping",
    "create_stub_app",
    "generate_mappings",
    "read_mappings",
    "write_mappings",
]
