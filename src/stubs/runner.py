"""
Stub runner for consumer tests.

Starts the stub server on a background thread for the duration of a `with`
block, so consumer code can be exercised against real HTTP without the
producer running:

    with StubRunner.from_contracts("contracts/greeting-producer") as stubs:
        client = GreetingClient(base_url=stubs.url)
        assert client.greet("Pivotal") == "Hello, Pivotal!"
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from pathlib import Path
from typing import Iterable, List, Optional, Union

import uvicorn

from src.contracts.models import Contract
from src.contracts.store import load

from .mappings import StubMapping, generate_mappings
from .repository import StubRepository
from .server import create_stub_app

logger = logging.getLogger(__name__)


class StubRunnerError(RuntimeError):
    pass


class StubRunner:
    def __init__(
        self,
        mappings: Iterable[StubMapping],
        host: str = "127.0.0.1",
        port: int = 0,
        startup_timeout_seconds: float = 10.0,
    ) -> None:
        self.mappings: List[StubMapping] = list(mappings)
        self.host = host
        self.port = port
        self.startup_timeout_seconds = startup_timeout_seconds
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._socket: Optional[socket.socket] = None

    @classmethod
    def from_contracts(cls, source: Union[str, Path, Iterable[Contract]], **kwargs) -> "StubRunner":
        contracts = load(source) if isinstance(source, (str, Path)) else list(source)
        return cls(generate_mappings(contracts), **kwargs)

    @classmethod
    def from_repository(
        cls,
        repository: StubRepository,
        producer: str,
        version: str = "latest",
        **kwargs,
    ) -> "StubRunner":
        return cls(repository.load_mappings(producer, version), **kwargs)

    @property
    def url(self) -> str:
        if self._socket is None:
            raise StubRunnerError("Stub runner is not started")
        return f"http://{self.host}:{self.port}"

    def start(self) -> "StubRunner":
        if self._server is not None:
            return self

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((self.host, self.port))
        self._socket = sock
        self.port = sock.getsockname()[1]

        config = uvicorn.Config(create_stub_app(self.mappings), log_level="warning", lifespan="off")
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [sock]},
            name=f"stub-runner-{self.port}",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + self.startup_timeout_seconds
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self.stop()
                raise StubRunnerError(f"Stub server did not start on {self.host}:{self.port}")
            time.sleep(0.05)

        logger.info("Stub runner serving %d mapping(s) at %s", len(self.mappings), self.url)
        return self

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=self.startup_timeout_seconds)
        if self._socket is not None:
            self._socket.close()
        self._server = None
        self._thread = None
        self._socket = None

    def __enter__(self) -> "StubRunner":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
