import json

import pytest

from conftest import openai_payload
from sqlsynth.cli import main
from sqlsynth.schema.cache import save_schema_cache


@pytest.fixture
def cache_env(monkeypatch, tmp_path, shop_schema):
    cache_path = tmp_path / "schema_cache.json"
    save_schema_cache(cache_path, shop_schema, database="shop")
    monkeypatch.setenv("SCHEMA_CACHE_PATH", str(cache_path))
    return cache_path


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: sqlsynth" in capsys.readouterr().out


def test_config_check_hides_secrets(monkeypatch, capsys):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-super-secret")

    assert main(["config-check"]) == 0

    out = capsys.readouterr().out
    assert "sk-super-secret" not in out
    assert "- openai: model=gpt-3.5-turbo api_key=***" in out
    assert "- claude: model=claude-3-opus-20240229 api_key=(not set)" in out


def test_invalid_config_exits_with_2(monkeypatch, capsys):
    monkeypatch.setenv("DEFAULT_PROVIDER", "mistral")

    assert main(["config-check"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_database_commands_require_dsn(capsys):
    assert main(["healthcheck"]) == 2
    assert "POSTGRES_DSN" in capsys.readouterr().err


def test_show_cache(cache_env, capsys):
    assert main(["show-cache"]) == 0

    out = capsys.readouterr().out
    assert "- database: shop" in out
    assert "- tables: users, orders" in out


def test_missing_cache_exits_with_1(capsys):
    assert main(["build-prompt", "q"]) == 1
    assert "Schema cache error" in capsys.readouterr().err


def test_build_prompt(cache_env, capsys):
    assert main(["build-prompt", "How many orders?"]) == 0

    out = capsys.readouterr().out
    assert "TABLE: users" in out
    assert '"How many orders?"' in out


def test_validate_sql_reports_issues(cache_env, capsys):
    assert main(["validate-sql", "SELECT u.emial FROM users u"]) == 1
    assert 'Column "emial" not found in table "users"' in capsys.readouterr().out


def test_validate_sql_clean(cache_env, capsys):
    assert main(["validate-sql", "SELECT u.email FROM users u"]) == 0
    assert "no issues" in capsys.readouterr().out


def test_generate_sql(cache_env, monkeypatch, fake_urlopen, capsys):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    fake_urlopen(openai_payload("SELECT o.totl FROM orders o"))

    assert main(["generate-sql", "Order totals", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["sql"] == "SELECT o.totl FROM orders o"
    assert payload["validation"]["issues"][0]["column"] == "totl"


def test_generate_sql_without_key(cache_env, fake_urlopen, capsys):
    fake = fake_urlopen(openai_payload("SELECT 1"))

    assert main(["generate-sql", "q", "--provider", "openai"]) == 2
    assert "not configured" in capsys.readouterr().err
    assert fake.requests == []


def test_generate_sql_unsupported_provider(cache_env, capsys):
    assert main(["generate-sql", "q", "--provider", "mistral"]) == 2
    assert "Unsupported AI provider" in capsys.readouterr().err
