import logging
from typing import Any, Callable, List, Sequence, TypeVar

from pydantic import ValidationError
from sqlalchemy import Engine, URL, create_engine, select, text
from sqlalchemy.exc import SQLAlchemyError

from shahala.errors import StorageError
from shahala.models import ArticleRow, Base, VideoLinkRow
from shahala.schemas import Article, VideoLink


logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_db_engine(database_url: URL | str, logging: bool = False, **kwargs: Any) -> Engine:
    """
    Создаёт движок SQLAlchemy.
    Движок и его пул соединений общие для всех запросов процесса.
    """

    return create_engine(database_url, echo=logging, pool_pre_ping=True, **kwargs)


def init_db(engine: Engine) -> None:
    """
    Создаёт таблицы articles и video_links, если их ещё нет.
    Существующие таблицы и данные не трогает.
    """

    try:
        Base.metadata.create_all(engine, checkfirst=True)
    except SQLAlchemyError as e:
        logger.error("Error creating tables: %s", e)
        raise StorageError(str(e)) from e

    logger.info("Tables are ready: %s", ", ".join(Base.metadata.tables))


def decode_article(row: Sequence[Any]) -> Article:
    return Article(
        id=row[0],
        title=row[1],
        category=row[2],
        image_url=row[3],
    )


def decode_video_link(row: Sequence[Any]) -> VideoLink:
    return VideoLink(
        id=row[0],
        url=row[1],
        img=row[2],
    )


class ArticleStore:
    """
    Доступ к статьям и видео-ссылкам.
    Только чтение: записи создаются вне этого сервера.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

        articles = ArticleRow.__table__
        video_links = VideoLinkRow.__table__

        self._articles_query = select(
            articles.c.id,
            articles.c.title,
            articles.c.category,
            articles.c.image_url,
        )
        self._video_links_query = select(
            video_links.c.id,
            video_links.c.url,
            video_links.c.img,
        )

    def ping(self) -> None:
        """
        Проверяет, что БД доступна.
        """

        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("Database is unreachable: %s", e)
            raise StorageError(str(e)) from e

    def create_tables(self) -> None:
        init_db(self.engine)

    def list_articles(self) -> List[Article]:
        return self._fetch_all(self._articles_query, decode_article, "articles")

    def list_video_links(self) -> List[VideoLink]:
        return self._fetch_all(self._video_links_query, decode_video_link, "video links")

    def _fetch_all(self, statement, decode: Callable[[Sequence[Any]], T], what: str) -> List[T]:
        """
        Выполняет запрос и разбирает каждую строку в запись.
        Порядок записей - тот, в котором их вернула БД.
        """

        records: List[T] = []

        try:
            with self.engine.connect() as conn:
                for row in conn.execute(statement):
                    records.append(decode(row))
        except SQLAlchemyError as e:
            logger.error("Error querying %s: %s", what, e)
            raise StorageError(str(e)) from e
        except ValidationError as e:
            logger.error("Error decoding %s: %s", what, e)
            raise StorageError(f"Invalid {what} row: {e}") from e

        return records

    def close(self) -> None:
        self.engine.dispose()
