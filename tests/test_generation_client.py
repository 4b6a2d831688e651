"""
HTTP client for the generate-content function, driven through a fake requests session.
"""
import pytest
import requests

from studio.core.errors import GenerationUnavailable
from studio.schemas.content import GenerationRequest
from studio.services import generation_client
from studio.services.generation_client import GenerationClient, LocalTemplateEngine

BRIEF = GenerationRequest(
    businessName="Golden Land",
    productService="longyi",
    targetAudience="students",
    platform="instagram",
)


def _variant(i):
    return {
        "id": f"content_{i}",
        "content": f"post {i}",
        "quality_score": 88,
        "engagement_prediction": 71,
        "keywords": ["GoldenLand", "Myanmar"],
    }


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


def _client(session):
    return GenerationClient("https://fn.example/generate-content", "anon-key", timeout=2, session=session)


def test_successful_call_returns_variants():
    session = FakeSession(FakeResponse(body={"content": [_variant(1), _variant(2), _variant(3)]}))
    variants = _client(session).generate(BRIEF)

    assert [v.id for v in variants] == ["content_1", "content_2", "content_3"]
    url, kwargs = session.calls[0]
    assert url == "https://fn.example/generate-content"
    assert kwargs["headers"]["Authorization"] == "Bearer anon-key"
    assert kwargs["timeout"] == 2
    assert kwargs["json"]["businessName"] == "Golden Land"
    assert kwargs["json"]["platform"] == "instagram"


@pytest.mark.parametrize("error", [
    requests.exceptions.Timeout("slow"),
    requests.exceptions.ConnectionError("down"),
])
def test_transport_errors_are_unavailable(error):
    with pytest.raises(GenerationUnavailable):
        _client(FakeSession(error=error)).generate(BRIEF)


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=500, text="internal error"),
    FakeResponse(status_code=401, text="unauthorized"),
    FakeResponse(body=ValueError("not json")),
    FakeResponse(body={"error": "nope"}),
    FakeResponse(body={"content": []}),
    FakeResponse(body={"content": [{"id": "x"}]}),
    FakeResponse(body={"content": [_variant(1)]}),
    FakeResponse(body={"content": [_variant(i) for i in range(4)]}),
])
def test_bad_responses_are_unavailable(response):
    with pytest.raises(GenerationUnavailable):
        _client(FakeSession(response)).generate(BRIEF)


def test_function_url_resolution(monkeypatch):
    assert generation_client.get_function_url() is None

    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co/")
    assert generation_client.get_function_url() == "https://proj.supabase.co/functions/v1/generate-content"

    monkeypatch.setenv("GENERATION_FUNCTION_URL", "https://gen.example/run/")
    assert generation_client.get_function_url() == "https://gen.example/run"


def test_function_key_falls_back_to_anon_key(monkeypatch):
    assert generation_client.get_function_key() == ""
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    assert generation_client.get_function_key() == "anon"
    monkeypatch.setenv("GENERATION_FUNCTION_KEY", "dedicated")
    assert generation_client.get_function_key() == "dedicated"


def test_engine_selection(monkeypatch):
    assert isinstance(generation_client.get_generation_engine(), LocalTemplateEngine)

    monkeypatch.setenv("GENERATION_FUNCTION_URL", "https://gen.example/run")
    monkeypatch.setenv("GENERATION_TIMEOUT_SECONDS", "7")
    engine = generation_client.get_generation_engine()
    assert isinstance(engine, GenerationClient)
    assert engine.url == "https://gen.example/run"
    assert engine.timeout == 7.0


def test_local_engine_returns_three_variants():
    variants = LocalTemplateEngine().generate(BRIEF)
    assert len(variants) == 3


def test_without_session_uses_module_level_post(monkeypatch):
    calls = []

    def fake_post(url, **kwargs):
        calls.append(url)
        return FakeResponse(body={"content": [_variant(1), _variant(2)]})

    monkeypatch.setattr(generation_client.requests, "post", fake_post)
    client = GenerationClient("https://fn.example/generate-content", "anon-key")
    assert client.session is None
    assert len(client.generate(BRIEF)) == 2
    assert calls == ["https://fn.example/generate-content"]
