import os, pytest

os.environ.setdefault('MEANING_CLOUD_API_KEY', 'testkey')

from fastapi.testclient import TestClient
from pagesentiment.main import app
from tests.fakes import FakeResponse

@pytest.fixture()
def client():
    return TestClient(app)

@pytest.fixture
def fake_upstream(monkeypatch):
    """Replaces the upstream GET; call it with (status, body) or an exception."""
    import pagesentiment.sentiment as sentiment
    calls = []
    def configure(status=200, body=None, exc=None):
        def fake_get(url, params=None, timeout_ms=None):
            calls.append({'url': url, 'params': params, 'timeout_ms': timeout_ms})
            if exc is not None:
                raise exc
            return FakeResponse(status, body), body
        monkeypatch.setattr(sentiment, 'get_data', fake_get, raising=True)
        return calls
    return configure
