from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class ArticleRow(Base):
    __tablename__ = 'articles'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    image_url = Column(String(255), nullable=False)


class VideoLinkRow(Base):
    __tablename__ = 'video_links'

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(String(255), nullable=False)
    img = Column(String(255), nullable=False)
