import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture(name="client")
def client_fixture():
    """Provide a test client. The API is stateless, so no overrides are needed."""
    with TestClient(app) as client:
        yield client
