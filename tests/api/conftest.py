import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import reset_services_for_tests
from src.api.main import app


@pytest.fixture
def client(seeded_repository):
    reset_services_for_tests(seeded_repository)
    with TestClient(app) as test_client:
        yield test_client
    reset_services_for_tests()
