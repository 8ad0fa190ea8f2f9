import pytest
import sys
from pathlib import Path
from typing import Generator, Dict, Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from api_server import create_app
from graphstore.graph.memory_graph_store import GraphStore


@pytest.fixture
def graph_store() -> Generator[GraphStore, None, None]:
    """Create an isolated graph store for testing."""
    store = GraphStore()
    
    yield store
    
    store.clear()


@pytest.fixture
def app(graph_store: GraphStore) -> FastAPI:
    """Create an API application around the test store."""
    return create_app(store=graph_store)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """HTTP client for the test application."""
    return TestClient(app)


@pytest.fixture
def alice() -> Dict[str, Any]:
    return {"name": "Alice", "type": "Person"}


@pytest.fixture
def bob() -> Dict[str, Any]:
    return {"name": "Bob", "type": "Person"}


@pytest.fixture
def sample_attributes() -> Dict[str, Any]:
    """Extra caller-supplied attributes for testing."""
    return {
        'age': 34,
        'tags': ['engineering', 'platform'],
        'address': {'city': 'Lisbon'},
    }
