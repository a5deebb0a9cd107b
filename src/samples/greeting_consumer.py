"""
Greeting consumer.

Calls the greeting producer over HTTP. Consumer tests point it at the stub
runner instead of a real producer.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class BackendUnavailableError(ConnectionError):
    """Raised when the greeting producer cannot be reached."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"I/O error on GET request for \"{url}\": {cause}")
        self.url = url


class GreetingClient:
    def __init__(self, base_url: Optional[str] = None, timeout_seconds: float = 5.0) -> None:
        self.base_url = (base_url or os.getenv("GREETING_SERVICE_URL", "http://localhost:8080")).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()

    def greet(self, name: str) -> str:
        url = f"{self.base_url}/greeting/{name}"
        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
        except requests.ConnectionError as exc:
            logger.error("Greeting service unavailable at %s", self.base_url)
            raise BackendUnavailableError(url, exc) from exc

        response.raise_for_status()
        return response.json()["greeting"]
