"""Error handling helpers for the stub server and command line scripts."""
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception while serving stubs: %s", exc, exc_info=True)
        return {
            "message": "An internal error occurred in the stub server.",
            "error_type": type(exc).__name__,
            "metadata": {"error": str(exc), "context": context or {}},
        }
