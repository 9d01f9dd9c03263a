"""
Shortener Edge — Settings Tests
=================================
"""

import pytest
from pydantic import ValidationError

from shortener.config import Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("SERVER_ADDRESS", "BASE_URL", "LOG_LEVEL", "DATABASE_DSN"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = Settings(_env_file=None)

    assert s.server_address == "localhost:8080"
    assert s.server_host == "localhost"
    assert s.server_port == 8080
    assert s.base_url == "http://localhost:8080"
    assert s.log_level == "INFO"
    assert s.database_dsn == ""


def test_environment_overrides(clean_env):
    clean_env.setenv("SERVER_ADDRESS", "0.0.0.0:9000")
    clean_env.setenv("BASE_URL", "https://sho.rt/")
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("DATABASE_DSN", "postgres://u:p@db/links")

    s = Settings(_env_file=None)

    assert (s.server_host, s.server_port) == ("0.0.0.0", 9000)
    assert s.base_url == "https://sho.rt"
    assert s.log_level == "DEBUG"
    assert s.database_dsn == "postgres://u:p@db/links"


def test_invalid_log_level(clean_env):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="chatty")


def test_empty_host_binds_all_interfaces(clean_env):
    s = Settings(_env_file=None, server_address=":3000")

    assert s.server_host == "0.0.0.0"
    assert s.server_port == 3000


def test_address_without_port(clean_env):
    s = Settings(_env_file=None, server_address="localhost")

    with pytest.raises(ValueError):
        s.server_port
