import shutil
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shahala.api import create_app
from shahala.config import Settings
from shahala.database import ArticleStore, create_db_engine
from shahala.models import ArticleRow, VideoLinkRow
from shahala.renderer import TemplateRenderer

ASSETS_DIR = ROOT / "shahala" / "assets"


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(
        f"sqlite:///{tmp_path / 'news.sqlite'}",
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    store = ArticleStore(engine)
    store.create_tables()
    return store


@pytest.fixture
def add_articles(engine):
    def _add(*articles):
        with engine.begin() as conn:
            conn.execute(insert(ArticleRow.__table__), list(articles))

    return _add


@pytest.fixture
def add_video_links(engine):
    def _add(*links):
        with engine.begin() as conn:
            conn.execute(insert(VideoLinkRow.__table__), list(links))

    return _add


@pytest.fixture
def assets_dir(tmp_path):
    target = tmp_path / "assets"
    shutil.copytree(ASSETS_DIR, target)
    return target


@pytest.fixture
def settings(assets_dir):
    return Settings(
        assets_dir=assets_dir,
        templates_dir=assets_dir,
    )


@pytest.fixture
def app(settings, store):
    renderer = TemplateRenderer(settings.templates_dir)
    return create_app(settings, store=store, renderer=renderer)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
