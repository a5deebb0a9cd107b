"""
FastAPI application - stub server entry point

  uvicorn src.api.main:app --host 127.0.0.1 --port 8090

Stub source, first match wins:
- STUB_MAPPINGS_DIR: directory of WireMock-style JSON mappings
- STUB_PRODUCER (+ STUB_VERSION): stubs installed in the local stub repository
- otherwise: every contract under the configured contracts root
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from typing import List

from fastapi.middleware.cors import CORSMiddleware

from src.contracts.store import ContractStore
from src.stubs.mappings import StubMapping, generate_mappings, read_mappings
from src.stubs.repository import StubRepository
from src.stubs.server import create_stub_app
from src.utils.config_loader import load_contract_config, resolve_path

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

config = load_contract_config()


def _load_mappings() -> List[StubMapping]:
    mappings_dir = os.getenv("STUB_MAPPINGS_DIR")
    if mappings_dir:
        logger.info("Serving stub mappings from %s", mappings_dir)
        return read_mappings(mappings_dir)

    producer = os.getenv("STUB_PRODUCER")
    if producer:
        repository = StubRepository(resolve_path(config.stubs.repository_dir))
        version = os.getenv("STUB_VERSION", "latest")
        logger.info("Serving installed stubs %s:%s", producer, version)
        return repository.load_mappings(producer, version)

    store = ContractStore(resolve_path(config.contracts.root))
    logger.info("Serving stubs generated from contracts under %s", store.root)
    return generate_mappings(store.all_contracts())


app = create_stub_app(_load_mappings(), journal_size=config.server.journal_size)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
