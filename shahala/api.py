import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from shahala.config import Settings, load_settings, setup_logging
from shahala.database import ArticleStore, create_db_engine
from shahala.errors import ShahalaError
from shahala.renderer import TemplateRenderer
from shahala.views import build_view_model


logger = logging.getLogger(__name__)

STATIC_DIRS = ("css", "fonts", "images", "js")

router = APIRouter()


def get_store(request: Request) -> ArticleStore:
    return request.app.state.store


def get_renderer(request: Request) -> TemplateRenderer:
    return request.app.state.renderer


def render_page(store: ArticleStore,
                renderer: TemplateRenderer,
                template_name: str,
                with_video_links: bool = False):
    """
    Общий путь всех страниц: статьи -> (видео) -> данные страницы -> шаблон.
    Любая ошибка прерывает запрос до отправки HTML.
    """

    articles = store.list_articles()
    video_links = store.list_video_links() if with_video_links else None

    view_model = build_view_model(articles, video_links)

    return renderer.render(template_name, view_model)


@router.get("/", response_class=HTMLResponse)
def home(store: ArticleStore = Depends(get_store),
         renderer: TemplateRenderer = Depends(get_renderer)):
    return render_page(store, renderer, "index.html", with_video_links=True)


@router.get("/about", response_class=HTMLResponse)
def about(store: ArticleStore = Depends(get_store),
          renderer: TemplateRenderer = Depends(get_renderer)):
    return render_page(store, renderer, "article.html", with_video_links=True)


@router.get("/student", response_class=HTMLResponse)
def student(store: ArticleStore = Depends(get_store),
            renderer: TemplateRenderer = Depends(get_renderer)):
    return render_page(store, renderer, "first.html")


@router.get("/map", response_class=HTMLResponse)
def site_map(store: ArticleStore = Depends(get_store),
             renderer: TemplateRenderer = Depends(get_renderer)):
    return render_page(store, renderer, "map.html")


async def handle_shahala_error(request: Request, exc: ShahalaError) -> PlainTextResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=500)


def create_app(settings: Optional[Settings] = None,
               store: Optional[ArticleStore] = None,
               renderer: Optional[TemplateRenderer] = None) -> FastAPI:
    """
    Собирает приложение.

    store и renderer можно передать готовыми (например, в тестах),
    иначе они создаются по настройкам.
    """

    if settings is None:
        settings = load_settings()

    if store is None:
        engine = create_db_engine(settings.get_database_url(), logging=settings.sql_echo)
        store = ArticleStore(engine)

    if renderer is None:
        renderer = TemplateRenderer(settings.templates_dir, cache_size=settings.template_cache_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        При старте проверяет БД и создаёт таблицы.
        Если это не удалось, сервер не запускается.
        """

        logger.info("Connecting to database...")
        try:
            await run_in_threadpool(store.ping)
            await run_in_threadpool(store.create_tables)
        except ShahalaError:
            logger.exception("Startup failed")
            raise

        yield

        logger.info("Stopping server...")
        store.close()

    app = FastAPI(title="Shahala", lifespan=lifespan)

    app.state.settings = settings
    app.state.store = store
    app.state.renderer = renderer

    app.include_router(router)
    app.add_exception_handler(ShahalaError, handle_shahala_error)

    for name in STATIC_DIRS:
        app.mount(f"/{name}", StaticFiles(directory=settings.assets_dir / name), name=name)

    return app


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    app = create_app(settings)

    logger.info("Server is running on %s:%d...", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
