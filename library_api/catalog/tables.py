from sqlalchemy import JSON, Column, Integer, String

from library_api.config.db_session import Base


class BookRow(Base):
    __tablename__ = "books"

    id = Column(String(32), primary_key=True)
    title = Column(String(255), nullable=False, unique=True)
    author = Column(String(255), nullable=False, index=True)
    published = Column(Integer, nullable=False)
    genres = Column(JSON, nullable=False, default=list)


class AuthorRow(Base):
    __tablename__ = "authors"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    born = Column(Integer, nullable=True)


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    username = Column(String(255), nullable=False, unique=True)
    favorite_genre = Column(String(255), nullable=False)


TABLES = {
    "books": BookRow,
    "authors": AuthorRow,
    "users": UserRow,
}
