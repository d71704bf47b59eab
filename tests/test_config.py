from pathlib import Path

import pytest

from shahala.config import DEFAULT_ASSETS_DIR, Settings, load_settings


ENV_VARS = [
    "DATABASE_URL", "DB_USERNAME", "DB_PASSWORD", "DB_HOST", "DB_PORT", "DB_NAME",
    "HOST", "PORT", "ASSETS_DIR", "TEMPLATES_DIR", "TEMPLATE_CACHE_SIZE", "LOG_LEVEL", "SQL_ECHO",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # load_dotenv() ищет .env от текущей папки
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("shahala.config.load_dotenv", lambda: None)
    return monkeypatch


def test_defaults(clean_env):
    settings = load_settings()

    assert settings.host == "localhost"
    assert settings.port == 5000
    assert settings.assets_dir == DEFAULT_ASSETS_DIR
    assert settings.templates_dir == DEFAULT_ASSETS_DIR
    assert settings.template_cache_size == 0
    assert settings.sql_echo is False

    url = settings.get_database_url()
    assert url.drivername == "mysql+pymysql"
    assert (url.username, url.host, url.port, url.database) == ("dias", "localhost", 3306, "news_db")


def test_env_overrides(clean_env, tmp_path):
    clean_env.setenv("DB_HOST", "db.internal")
    clean_env.setenv("DB_PORT", "3307")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("ASSETS_DIR", str(tmp_path))
    clean_env.setenv("SQL_ECHO", "true")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.get_database_url().host == "db.internal"
    assert settings.get_database_url().port == 3307
    assert settings.port == 8080
    assert settings.templates_dir == Path(tmp_path)
    assert settings.sql_echo is True
    assert settings.log_level == "DEBUG"


def test_database_url_wins():
    settings = Settings(database_url="sqlite:///news.sqlite", db_host="ignored")

    assert settings.get_database_url() == "sqlite:///news.sqlite"
