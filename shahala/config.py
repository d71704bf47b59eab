import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import URL


PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_ASSETS_DIR = PACKAGE_DIR / "assets"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Настройки сервера.
    Собираются из переменных окружения (и .env файла) в load_settings().
    """

    db_username: str = "dias"
    db_password: str = ""
    db_host: str = "localhost"
    db_port: int = 3306
    db_name: str = "news_db"
    database_url: Optional[str] = None

    host: str = "localhost"
    port: int = 5000

    assets_dir: Path = DEFAULT_ASSETS_DIR
    templates_dir: Path = DEFAULT_ASSETS_DIR
    template_cache_size: int = 0

    log_level: str = "INFO"
    sql_echo: bool = False

    def get_database_url(self) -> URL | str:
        """
        Возвращает адрес БД.
        DATABASE_URL имеет приоритет над отдельными параметрами подключения.
        """

        if self.database_url:
            return self.database_url

        return URL.create(
            "mysql+pymysql",
            username=self.db_username,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


def load_settings() -> Settings:
    load_dotenv()

    assets_dir = Path(os.environ.get("ASSETS_DIR", str(DEFAULT_ASSETS_DIR)))
    templates_dir = Path(os.environ.get("TEMPLATES_DIR", str(assets_dir)))

    return Settings(
        db_username=os.environ.get("DB_USERNAME", "dias"),
        db_password=os.environ.get("DB_PASSWORD", ""),
        db_host=os.environ.get("DB_HOST", "localhost"),
        db_port=int(os.environ.get("DB_PORT", "3306")),
        db_name=os.environ.get("DB_NAME", "news_db"),
        database_url=os.environ.get("DATABASE_URL") or None,
        host=os.environ.get("HOST", "localhost"),
        port=int(os.environ.get("PORT", "5000")),
        assets_dir=assets_dir,
        templates_dir=templates_dir,
        template_cache_size=int(os.environ.get("TEMPLATE_CACHE_SIZE", "0")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        sql_echo=_env_bool("SQL_ECHO"),
    )


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
