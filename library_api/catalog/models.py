from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field


class Author(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=4)
    born: Optional[int] = None


class Book(BaseModel):
    id: Optional[str] = None
    title: str = Field(min_length=5)
    author: str = Field(min_length=4)
    published: int
    genres: List[str] = Field(default_factory=list)


class User(BaseModel):
    id: Optional[str] = None
    username: str = Field(min_length=4)
    favorite_genre: str = Field(min_length=1)


@dataclass
class AuthorView:
    """An author together with the number of books stored under their name."""
    author: Author
    book_count: int
