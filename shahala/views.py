from typing import Optional, Sequence

from shahala.schemas import Article, VideoLink, ViewModel


def build_view_model(articles: Sequence[Article],
                     video_links: Optional[Sequence[VideoLink]] = None) -> ViewModel:
    """
    Собирает данные страницы из результатов запросов.

    Пустые списки допустимы. Если video_links не переданы,
    страница рисуется без блока с видео.
    """

    return ViewModel(
        articles=list(articles),
        video_links=list(video_links) if video_links is not None else None,
    )
