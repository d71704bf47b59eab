from typing import List, Optional
from pydantic import BaseModel, Field


class Article(BaseModel):
    """
    Статья, прочитанная из таблицы articles.
    """

    id: int
    title: str
    category: str
    image_url: str


class VideoLink(BaseModel):
    """
    Ссылка на видео из таблицы video_links.
    """

    id: int
    url: str
    img: str


class ViewModel(BaseModel):
    """
    Данные одной страницы.
    Живут только в рамках одного запроса.

    video_links = None означает, что страница видео не показывает.
    """

    articles: List[Article] = Field(default_factory=list)
    video_links: Optional[List[VideoLink]] = None
