import json

import pytest

from sqlsynth.schema.model import SchemaModel

_CONFIG_ENV = (
    "POSTGRES_DSN",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "CLAUDE_API_KEY",
    "CLAUDE_MODEL",
    "DEFAULT_PROVIDER",
    "DEFAULT_SCHEMA",
    "SCHEMA_CACHE_PATH",
    "LLM_TIMEOUT_SECONDS",
    "SQLSYNTH_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test without ambient credentials or a stray .env file."""
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def shop_schema():
    return SchemaModel.from_mapping(
        {
            "users": [
                {"name": "id", "type": "integer", "nullable": False, "isPrimaryKey": True},
                {"name": "email", "type": "text", "nullable": False},
                {"name": "created_at", "type": "timestamp with time zone", "nullable": True},
            ],
            "orders": [
                {"name": "id", "type": "integer", "nullable": False, "isPrimaryKey": True},
                {
                    "name": "user_id",
                    "type": "integer",
                    "nullable": False,
                    "isForeignKey": True,
                },
                {"name": "total", "type": "numeric", "nullable": True, "default": "0"},
            ],
        }
    )


class FakeResponse:
    def __init__(self, payload):
        if isinstance(payload, bytes):
            self._body = payload
        else:
            self._body = json.dumps(payload).encode("utf-8")

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeUrlopen:
    """Stands in for urllib.request.urlopen and records every request."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.requests = []

    def __call__(self, req, timeout=None):
        self.requests.append((req, timeout))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.payload)

    @property
    def last_body(self):
        req, _ = self.requests[-1]
        return json.loads(req.data.decode("utf-8"))


@pytest.fixture
def fake_urlopen(monkeypatch):
    def install(payload=None, error=None):
        fake = FakeUrlopen(payload=payload, error=error)
        monkeypatch.setattr("sqlsynth.llm.http.request.urlopen", fake)
        return fake

    return install


def openai_payload(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def claude_payload(text):
    return {"content": [{"type": "text", "text": text}], "role": "assistant"}
