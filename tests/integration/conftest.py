import pytest
from fastapi.testclient import TestClient

from app.api_handler import build_dispatcher, create_app
from app.settings import Settings


@pytest.fixture
def test_client(settings: Settings, s3_client, posts_bucket: str) -> TestClient:
    dispatcher = build_dispatcher(settings, s3_client)
    return TestClient(create_app(lambda: dispatcher), raise_server_exceptions=True)
